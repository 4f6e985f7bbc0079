# apps/domains/process_queue/apps.py
from django.apps import AppConfig


class ProcessQueueConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.domains.process_queue"
    label = "process_queue"

    def ready(self):
        # consumer name 중복 등 구성 오류는 작업 수락 전에 기동 실패로 처리
        from apps.domains.process_queue.registry import get_consumer_registry
        get_consumer_registry()
