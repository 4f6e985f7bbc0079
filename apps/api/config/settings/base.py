# apps/api/config/settings/base.py

from pathlib import Path
import os

# ==================================================
# BASE
# ==================================================

BASE_DIR = Path(__file__).resolve().parents[4]

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-secret-key")
DEBUG = True
ALLOWED_HOSTS = ["*"]

# ==================================================
# INSTALLED APPS
# ==================================================

INSTALLED_APPS = [
    # Django
    "django.contrib.contenttypes",

    # Domain Apps
    "apps.domains.process_queue.apps.ProcessQueueConfig",
]

MIDDLEWARE = []

# HTTP 레이어 없음 (management command / cron 전용)
ROOT_URLCONF = None

# ==================================================
# DATABASE
# ==================================================

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.getenv("DB_NAME"),
        "USER": os.getenv("DB_USER"),
        "PASSWORD": os.getenv("DB_PASSWORD"),
        "HOST": os.getenv("DB_HOST"),
        "PORT": os.getenv("DB_PORT", "5432"),
    }
}

# ==================================================
# GLOBAL
# ==================================================

LANGUAGE_CODE = "ko-kr"
TIME_ZONE = "Asia/Seoul"

USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ==================================================
# PROCESS QUEUE
# ==================================================

# consumer 정적 등록: {"category", "name"(전역 유일), "handler"(dotted path)}
PROCESS_QUEUE_CONSUMERS = []

# queue_enqueue_all 대상 subject id 목록 callable (dotted path)
PROCESS_QUEUE_SUBJECT_SOURCE = os.getenv("PROCESS_QUEUE_SUBJECT_SOURCE") or None

PROCESS_QUEUE_BATCH_LIMIT = int(os.getenv("PROCESS_QUEUE_BATCH_LIMIT", "1000"))
PROCESS_QUEUE_BULK_FLUSH_SIZE = int(os.getenv("PROCESS_QUEUE_BULK_FLUSH_SIZE", "50"))

# active로 이 시간(초) 이상 남은 tracker는 crash로 보고 pending으로 회수 (0 = 비활성)
PROCESS_QUEUE_ACTIVE_STALE_SECONDS = int(os.getenv("PROCESS_QUEUE_ACTIVE_STALE_SECONDS", "3600"))

# runner 실행 락 (Redis 있으면 Redis, 없으면 로컬 파일)
PROCESS_QUEUE_LOCK_TTL_SECONDS = int(os.getenv("PROCESS_QUEUE_LOCK_TTL_SECONDS", "1800"))
PROCESS_QUEUE_LOCK_DIR = os.getenv("PROCESS_QUEUE_LOCK_DIR", "/tmp/inventory-locks")

# consumer 실패 알림 (Discord 호환 webhook, 비우면 비활성)
PROCESS_QUEUE_FAILURE_WEBHOOK_URL = os.getenv("PROCESS_QUEUE_FAILURE_WEBHOOK_URL", "")

# ==================================================
# LOGGING
# ==================================================

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "[{levelname}] {asctime} {name}: {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "loggers": {
        "inventory": {
            "handlers": ["console"],
            "level": os.getenv("INVENTORY_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
        "apps.domains.process_queue": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        "libs.redis": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
}
