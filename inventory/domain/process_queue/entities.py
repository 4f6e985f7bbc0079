"""
Process queue 도메인 엔티티 — 순수 파이썬 (Django/ORM/redis/requests 미사용)

WorkItem: "이 subject를 이 category로 처리해야 함" 1건.
CompletionTracker: WorkItem x consumer 별 진행 상태.

상태 전이 규칙은 엔티티 메서드로 표현.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

# 오류 메시지 최대 길이 (DB TextField지만 운영 리뷰용으로 제한)
MAX_ERROR_MESSAGE_LENGTH = 2000


class TrackerStatus(str, Enum):
    """Tracker 상태 (apps.domains.process_queue.models choices와 동기화)."""
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class CompletionTracker:
    """
    consumer 1개의 WorkItem 처리 상태.

    pending → active → completed | failed.
    failed는 자동으로 빠져나가지 않음 (운영자 reset/discard 필요).
    """
    consumer_name: str
    work_item_id: Optional[int] = None
    id: Optional[int] = None
    status: TrackerStatus = TrackerStatus.PENDING
    error_message: str = ""
    attempts: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status == TrackerStatus.PENDING

    @property
    def is_completed(self) -> bool:
        return self.status == TrackerStatus.COMPLETED

    def start(self, now: datetime) -> None:
        """pending → active. 규칙 위반 시 ValueError."""
        if self.status != TrackerStatus.PENDING:
            raise ValueError(f"Cannot start tracker {self.id}: status={self.status.value}")
        self.status = TrackerStatus.ACTIVE
        self.attempts += 1
        self.updated_at = now

    def complete(self, now: datetime) -> None:
        """active → completed."""
        if self.status != TrackerStatus.ACTIVE:
            raise ValueError(f"Cannot complete tracker {self.id}: status={self.status.value}")
        self.status = TrackerStatus.COMPLETED
        self.error_message = ""
        self.completed_at = now
        self.updated_at = now

    def fail(self, error_message: str, now: datetime) -> None:
        """active → failed."""
        if self.status != TrackerStatus.ACTIVE:
            raise ValueError(f"Cannot fail tracker {self.id}: status={self.status.value}")
        self.status = TrackerStatus.FAILED
        self.error_message = (error_message or "")[:MAX_ERROR_MESSAGE_LENGTH]
        self.failed_at = now
        self.updated_at = now

    def reset(self, now: datetime) -> None:
        """운영자 재시도: failed → pending."""
        if self.status != TrackerStatus.FAILED:
            raise ValueError(f"Cannot reset tracker {self.id}: status={self.status.value}")
        self.status = TrackerStatus.PENDING
        self.error_message = ""
        self.failed_at = None
        self.updated_at = now


@dataclass
class WorkItem:
    """
    Process queue 1건.
    (subject_id, category) 당 미완료 WorkItem은 최대 1개.
    모든 tracker가 completed가 되면 tracker와 함께 삭제된다.
    """
    subject_id: int
    category: str
    id: Optional[int] = None
    attempts: int = 0
    created_at: Optional[datetime] = None
    trackers: list[CompletionTracker] = field(default_factory=list)

    @classmethod
    def build(cls, subject_id: int, category: str, consumer_names: list[str], now: datetime) -> WorkItem:
        """신규 WorkItem + consumer 별 pending tracker 생성 (저장 전, id는 DB가 부여)."""
        item = cls(subject_id=subject_id, category=category, created_at=now)
        item.trackers = [
            CompletionTracker(
                consumer_name=name,
                created_at=now,
                updated_at=now,
            )
            for name in consumer_names
        ]
        return item

    def pending_trackers(self) -> list[CompletionTracker]:
        return [t for t in self.trackers if t.is_pending]

    def tracker_for(self, consumer_name: str) -> Optional[CompletionTracker]:
        for t in self.trackers:
            if t.consumer_name == consumer_name:
                return t
        return None


@dataclass(frozen=True)
class FailedTracker:
    """실패 조회용 read model (tracker + 소속 WorkItem 요약)."""
    tracker_id: int
    work_item_id: int
    consumer_name: str
    category: str
    subject_id: int
    error_message: str
    attempts: int
    item_attempts: int
    failed_at: Optional[datetime] = None
