"""
Process queue 도메인 오류: 순수 파이썬
"""
from __future__ import annotations


class ProcessQueueError(Exception):
    """Process queue 규칙 위반 등."""
    pass


class ConsumerRegistryError(ProcessQueueError):
    """Consumer 등록 구성 오류."""
    pass


class DuplicateConsumerNameError(ConsumerRegistryError):
    """동일한 consumer name이 두 번 등록됨 (기동 시 치명적)."""
    pass


class UnknownConsumerError(ConsumerRegistryError):
    """tracker의 consumer_name에 해당하는 consumer가 없음."""
    pass


class NoConsumersRegisteredError(ConsumerRegistryError):
    """category를 처리할 consumer가 하나도 없음."""
    pass


class TrackerNotFoundError(ProcessQueueError):
    """Tracker가 DB에 없음."""
    pass


class DuplicateWorkItemError(ProcessQueueError):
    """(subject_id, category) 미완료 WorkItem이 이미 존재 (DB unique 위반)."""
    pass
