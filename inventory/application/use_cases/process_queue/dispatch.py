"""
Process queue 처리 Use Case — 도메인/포트만 사용 (Django/redis/requests 미사용)

tracker 상태 전이·WorkItem 삭제는 여기서 결정; DB 연동은 UoW 어댑터가 수행.
전이는 tracker 1건마다 별도 트랜잭션 (batch 전체를 묶는 트랜잭션 없음).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from inventory.application.ports.runtime import FailureNotifier
from inventory.application.ports.unit_of_work import UnitOfWork
from inventory.application.process_queue.registry import ConsumerRegistry
from inventory.domain.process_queue.entities import (
    CompletionTracker,
    FailedTracker,
    TrackerStatus,
    WorkItem,
)
from inventory.domain.process_queue.errors import TrackerNotFoundError, UnknownConsumerError
from inventory.domain.shared.result import Err, Ok, Result, capture

logger = logging.getLogger("inventory.process_queue")

DEFAULT_BATCH_LIMIT = 1000
# active로 이 시간 이상 남은 tracker는 crash로 간주하고 pending으로 회수
DEFAULT_ACTIVE_STALE_SECONDS = 3600


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class BatchReport:
    """process_batch 1회 결과 요약."""
    items: int = 0
    completed: int = 0
    failed: int = 0
    deleted: int = 0
    reclaimed: int = 0
    lock_lost: bool = False


def claim_tracker(uow: UnitOfWork, tracker_id: int, now: Optional[datetime] = None) -> bool:
    """
    pending → active + tracker/WorkItem attempts 증가.
    Returns: False면 이미 pending이 아님 (다른 경로에서 처리됨).
    """
    now = now or _utcnow()
    with uow:
        tracker = uow.trackers.get_for_update(tracker_id)
        if tracker is None or not tracker.is_pending:
            return False
        tracker.start(now)
        uow.trackers.save(tracker)
        uow.work_items.increment_attempts(tracker.work_item_id)
    return True


def mark_consumer_complete(uow: UnitOfWork, tracker_id: int, now: Optional[datetime] = None) -> bool:
    """
    active → completed.
    WorkItem의 모든 tracker가 completed면 WorkItem(+trackers)을 같은 트랜잭션에서 삭제.
    Returns: WorkItem 삭제 여부.
    """
    now = now or _utcnow()
    with uow:
        tracker = uow.trackers.get_for_update(tracker_id)
        if tracker is None:
            raise TrackerNotFoundError(f"tracker {tracker_id} not found")
        tracker.complete(now)
        uow.trackers.save(tracker)
        if uow.trackers.all_completed(tracker.work_item_id):
            uow.work_items.delete(tracker.work_item_id)
            return True
    return False


def mark_consumer_failed(
    uow: UnitOfWork,
    tracker_id: int,
    error_message: str,
    now: Optional[datetime] = None,
) -> None:
    """active → failed. WorkItem은 운영 리뷰용으로 남긴다 (자동 재시도 없음)."""
    now = now or _utcnow()
    with uow:
        tracker = uow.trackers.get_for_update(tracker_id)
        if tracker is None:
            raise TrackerNotFoundError(f"tracker {tracker_id} not found")
        tracker.fail(error_message, now)
        uow.trackers.save(tracker)


def get_failed_trackers(uow: UnitOfWork, limit: int = 100) -> list[FailedTracker]:
    with uow:
        return uow.trackers.find_failed(limit)


def reset_failed_tracker(uow: UnitOfWork, tracker_id: int, now: Optional[datetime] = None) -> None:
    """운영자 재시도: failed → pending. 다음 runner 실행에서 다시 처리된다."""
    now = now or _utcnow()
    with uow:
        tracker = uow.trackers.get_for_update(tracker_id)
        if tracker is None:
            raise TrackerNotFoundError(f"tracker {tracker_id} not found")
        tracker.reset(now)
        uow.trackers.save(tracker)


def discard_failed_tracker(uow: UnitOfWork, tracker_id: int) -> bool:
    """
    운영자 정리: failed tracker 삭제.
    남은 tracker가 모두 completed면 WorkItem도 삭제.
    Returns: WorkItem 삭제 여부.
    """
    with uow:
        tracker = uow.trackers.get_for_update(tracker_id)
        if tracker is None:
            raise TrackerNotFoundError(f"tracker {tracker_id} not found")
        if tracker.status != TrackerStatus.FAILED:
            raise ValueError(f"Cannot discard tracker {tracker_id}: status={tracker.status.value}")
        uow.trackers.delete(tracker_id)
        if uow.trackers.all_completed(tracker.work_item_id):
            uow.work_items.delete(tracker.work_item_id)
            return True
    return False


def reclaim_stale_trackers(uow: UnitOfWork, stale_seconds: int, now: Optional[datetime] = None) -> int:
    """crash로 active에 남은 tracker를 pending으로 되돌림. stale_seconds <= 0이면 비활성."""
    if stale_seconds <= 0:
        return 0
    now = now or _utcnow()
    with uow:
        reclaimed = uow.trackers.reclaim_stale_active(now - timedelta(seconds=stale_seconds), now)
    if reclaimed:
        logger.warning("PROCESS_QUEUE_STALE_RECLAIMED | count=%s | stale_seconds=%s", reclaimed, stale_seconds)
    return reclaimed


def dispatch(registry: ConsumerRegistry, item: WorkItem, tracker: CompletionTracker) -> Result:
    """consumer 호출. 예외는 Err로 변환되어 밖으로 나가지 않는다."""
    try:
        consumer = registry.get(tracker.consumer_name)
    except UnknownConsumerError as e:
        return Err(message=str(e), code="unknown_consumer")
    return capture(consumer.process, item.subject_id)


def process_batch(
    uow_factory: Callable[[], UnitOfWork],
    registry: ConsumerRegistry,
    limit: int = DEFAULT_BATCH_LIMIT,
    category: Optional[str] = None,
    stale_seconds: int = DEFAULT_ACTIVE_STALE_SECONDS,
    notifier: Optional[FailureNotifier] = None,
    on_result: Optional[Callable[[WorkItem, CompletionTracker, Result], None]] = None,
    heartbeat: Optional[Callable[[], bool]] = None,
) -> BatchReport:
    """
    batch 1회 처리 (락은 호출자가 보유).

    WorkItem FIFO → pending tracker마다: claim → consumer 호출 → complete/fail.
    consumer 하나의 실패는 다른 tracker/WorkItem 처리에 영향 없음.
    heartbeat: WorkItem마다 호출 (락 연장). False면 락을 잃은 것이므로 batch 중단.
    """
    report = BatchReport()
    report.reclaimed = reclaim_stale_trackers(uow_factory(), stale_seconds)

    with uow_factory() as uow:
        items = uow.work_items.next_batch(limit, category)

    for item in items:
        if heartbeat is not None and not heartbeat():
            report.lock_lost = True
            logger.error(
                "PROCESS_QUEUE_LOCK_LOST | processed_items=%s | remaining=%s",
                report.items, len(items) - report.items,
            )
            break
        report.items += 1
        for tracker in item.pending_trackers():
            if not claim_tracker(uow_factory(), tracker.id):
                continue
            item.attempts += 1

            result = dispatch(registry, item, tracker)
            if isinstance(result, Ok):
                try:
                    if mark_consumer_complete(uow_factory(), tracker.id):
                        report.deleted += 1
                except Exception as e:
                    # consumer는 성공했지만 기록 실패 → tracker는 active로 남아 stale 회수 대상
                    logger.exception(
                        "Failed to mark processor complete | queue_id=%s | processor_name=%s",
                        item.id, tracker.consumer_name,
                    )
                    result = Err(message=f"Failed to mark processor complete: {e}", code="mark_complete_failed")
                else:
                    report.completed += 1
                    logger.debug(
                        "QUEUE_PROCESSOR_COMPLETED | queue_id=%s | type=%s | processor_name=%s | subject_id=%s",
                        item.id, item.category, tracker.consumer_name, item.subject_id,
                    )
            else:
                report.failed += 1
                _record_failure(uow_factory, item, tracker, result, notifier)

            if on_result is not None:
                on_result(item, tracker, result)

    return report


def _record_failure(
    uow_factory: Callable[[], UnitOfWork],
    item: WorkItem,
    tracker: CompletionTracker,
    result: Err,
    notifier: Optional[FailureNotifier],
) -> None:
    try:
        mark_consumer_failed(uow_factory(), tracker.id, result.message)
    except Exception:
        logger.exception(
            "Failed to mark processor as failed | queue_id=%s | processor_name=%s",
            item.id, tracker.consumer_name,
        )

    logger.error(
        "QUEUE_PROCESSOR_FAILED | queue_id=%s | type=%s | processor_name=%s | subject_id=%s | attempts=%s | error=%s",
        item.id, item.category, tracker.consumer_name, item.subject_id, item.attempts, result.message,
    )

    if notifier is not None:
        try:
            notifier.notify(item, tracker, result.message)
        except Exception as e:
            logger.error("Failed to send failure notification: %s", e)
