"""
Process queue enqueue Use Case: 도메인/포트만 사용 (Django 미사용)

중복 제거는 여기서 결정; 최종 보장은 DB unique(subject_id, category).
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from inventory.application.ports.unit_of_work import UnitOfWork
from inventory.application.process_queue.registry import ConsumerRegistry
from inventory.domain.process_queue.entities import WorkItem
from inventory.domain.process_queue.errors import DuplicateWorkItemError

logger = logging.getLogger("inventory.process_queue")

# bulk enqueue 시 flush 단위 (메모리/트랜잭션 크기 제한)
DEFAULT_FLUSH_SIZE = 50


def enqueue(
    uow: UnitOfWork,
    registry: ConsumerRegistry,
    subject_id: int,
    category: str,
    now: Optional[datetime] = None,
) -> Optional[WorkItem]:
    """
    WorkItem 1건 + consumer 별 pending tracker 생성 (단일 트랜잭션).
    이미 미완료 WorkItem이 있으면 None (no-op).
    """
    consumer_names = registry.require_consumers_for(category)
    if now is None:
        now = datetime.now(timezone.utc)

    with uow:
        if uow.work_items.exists(subject_id, category):
            return None
        item = WorkItem.build(subject_id, category, consumer_names, now)
        if not uow.work_items.create(item):
            # 동시 enqueue가 먼저 커밋함
            return None
    logger.debug(
        "PROCESS_QUEUE_ENQUEUED | work_item_id=%s | subject_id=%s | type=%s | consumers=%s",
        item.id, subject_id, category, len(consumer_names),
    )
    return item


def enqueue_bulk(
    uow_factory: Callable[[], UnitOfWork],
    registry: ConsumerRegistry,
    subject_ids: Iterable[int],
    category: str,
    flush_size: int = DEFAULT_FLUSH_SIZE,
    now: Optional[datetime] = None,
) -> int:
    """
    대량 enqueue (sync 작업용).

    1) 입력 내 중복 제거 (순서 유지)
    2) 이미 큐에 있는 subject를 쿼리 1회로 조회
    3) 나머지로 WorkItem 생성, flush_size 단위로 저장 (단위별 트랜잭션)

    Returns: 실제 생성된 WorkItem 수 (skip된 중복 제외).
    """
    unique_ids = list(dict.fromkeys(subject_ids))
    if not unique_ids:
        return 0

    consumer_names = registry.require_consumers_for(category)
    if now is None:
        now = datetime.now(timezone.utc)
    flush_size = max(1, int(flush_size))

    with uow_factory() as uow:
        existing = uow.work_items.find_existing_subjects(unique_ids, category)

    count = 0
    pending: list[WorkItem] = []
    for subject_id in unique_ids:
        if subject_id in existing:
            continue
        pending.append(WorkItem.build(subject_id, category, consumer_names, now))
        if len(pending) >= flush_size:
            count += _flush(uow_factory, pending)
            pending = []
    if pending:
        count += _flush(uow_factory, pending)

    skipped = len(unique_ids) - count
    if skipped > 0:
        logger.debug(
            "PROCESS_QUEUE_BULK_SKIPPED | type=%s | skipped_count=%s | enqueued_count=%s",
            category, skipped, count,
        )
    return count


def _flush(uow_factory: Callable[[], UnitOfWork], items: list[WorkItem]) -> int:
    try:
        with uow_factory() as uow:
            uow.work_items.create_many(items)
        return len(items)
    except DuplicateWorkItemError:
        # 조회 이후 다른 producer가 같은 subject를 넣음 → 1건씩 재시도
        logger.info("PROCESS_QUEUE_BULK_CONFLICT | batch_size=%s | retrying one by one", len(items))

    inserted = 0
    for item in items:
        with uow_factory() as uow:
            if uow.work_items.create(item):
                inserted += 1
    return inserted
