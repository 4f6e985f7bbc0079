"""
Runner 런타임 포트: 실행 락, 실패 알림 (redis/requests 미사용)
"""
from __future__ import annotations

from abc import abstractmethod
from typing import Protocol

from inventory.domain.process_queue.entities import CompletionTracker, WorkItem


class NamedLock(Protocol):
    """프로세스 간 이름 기반 락. acquire는 non-blocking."""

    name: str

    @abstractmethod
    def acquire(self) -> bool:
        """획득 시 True, 다른 실행이 보유 중이면 즉시 False."""
        ...

    @abstractmethod
    def extend(self) -> bool:
        """보유 중 만료 연장 (긴 batch 도중 호출). False면 락을 잃음."""
        ...

    @abstractmethod
    def release(self) -> None:
        ...


class FailureNotifier(Protocol):
    """consumer 실패 알림. 구현체는 예외를 밖으로 던지지 않아야 함."""

    def notify(self, item: WorkItem, tracker: CompletionTracker, error_message: str) -> None:
        ...
