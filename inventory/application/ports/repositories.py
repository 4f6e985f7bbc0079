"""
Repository 포트 — 영속화 추상화 (Django/ORM 미사용)
"""
from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import Iterable, Optional, Protocol

from inventory.domain.process_queue.entities import CompletionTracker, FailedTracker, WorkItem


class WorkItemRepository(Protocol):
    """WorkItem 영속화. 트랜잭션 경계는 UoW, row lock은 어댑터에서 수행."""

    @abstractmethod
    def exists(self, subject_id: int, category: str) -> bool:
        """(subject_id, category) 미완료 WorkItem 존재 여부."""
        ...

    @abstractmethod
    def find_existing_subjects(self, subject_ids: Iterable[int], category: str) -> set[int]:
        """이미 큐에 있는 subject_id 집합 (bulk 중복 제거용, 쿼리 1회)."""
        ...

    @abstractmethod
    def next_batch(self, limit: int, category: Optional[str] = None) -> list[WorkItem]:
        """pending tracker가 남은 WorkItem을 created_at 오름차순으로. trackers 포함."""
        ...

    @abstractmethod
    def create(self, item: WorkItem) -> bool:
        """
        WorkItem + trackers 저장.
        Returns: False면 unique 제약 위반 (동시 enqueue) → 저장 안 됨.
        """
        ...

    @abstractmethod
    def create_many(self, items: list[WorkItem]) -> None:
        """WorkItem + trackers bulk 저장. unique 위반 시 DuplicateWorkItemError."""
        ...

    @abstractmethod
    def increment_attempts(self, work_item_id: int) -> None:
        ...

    @abstractmethod
    def delete(self, work_item_id: int) -> None:
        """WorkItem 삭제 (trackers는 cascade)."""
        ...

    @abstractmethod
    def count_by_category(self) -> dict[str, int]:
        ...


class CompletionTrackerRepository(Protocol):
    """CompletionTracker 영속화."""

    @abstractmethod
    def get_for_update(self, tracker_id: int) -> Optional[CompletionTracker]:
        """id로 조회 + row lock. 호출자가 UoW 트랜잭션 내에 있어야 함."""
        ...

    @abstractmethod
    def save(self, tracker: CompletionTracker) -> None:
        """상태 필드 저장 (update)."""
        ...

    @abstractmethod
    def all_completed(self, work_item_id: int) -> bool:
        """WorkItem의 모든 tracker가 completed인지."""
        ...

    @abstractmethod
    def reclaim_stale_active(self, older_than: datetime, now: datetime) -> int:
        """updated_at < older_than 인 active tracker를 pending으로. Returns: 회수 건수."""
        ...

    @abstractmethod
    def find_failed(self, limit: int = 100) -> list[FailedTracker]:
        """failed tracker (failed_at 내림차순)."""
        ...

    @abstractmethod
    def delete(self, tracker_id: int) -> None:
        ...

    @abstractmethod
    def count_by_status(self) -> dict[str, int]:
        ...
