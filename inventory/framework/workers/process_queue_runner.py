"""
Process queue Runner — Hexagonal 프레임워크 계층 (thin)

- cron(1~5분)에서 manage.py queue_process로 실행되는 short-lived 프로세스
- 실행 락(non-blocking) → batch 1회 처리 → 락 해제 후 종료
- WorkItem마다 락 연장 (Redis TTL), 락을 잃으면 batch 중단
- 락이 이미 잡혀 있으면 조용히 종료 (이전 실행 진행 중)
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from django.conf import settings

from apps.domains.process_queue.registry import get_consumer_registry
from inventory.adapters.db.django.uow import DjangoUnitOfWork
from inventory.adapters.lock import get_named_lock, held
from inventory.adapters.notify.webhook import get_failure_notifier
from inventory.application.ports.runtime import NamedLock
from inventory.application.use_cases.process_queue.dispatch import BatchReport, process_batch

logger = logging.getLogger("inventory.process_queue_runner")

RUNNER_LOCK_NAME = "process_queue_runner"


def _setting(name: str, default):
    return getattr(settings, name, default)


def get_runner_lock() -> NamedLock:
    return get_named_lock(
        RUNNER_LOCK_NAME,
        ttl_seconds=int(_setting("PROCESS_QUEUE_LOCK_TTL_SECONDS", 1800)),
        lock_dir=_setting("PROCESS_QUEUE_LOCK_DIR", "/tmp/inventory-locks"),
    )


def run_process_queue(
    limit: Optional[int] = None,
    category: Optional[str] = None,
    lock: Optional[NamedLock] = None,
    on_result: Optional[Callable] = None,
) -> Optional[BatchReport]:
    """
    Runner 1회 실행.
    Returns: BatchReport, 락 획득 실패 시 None.
    storage/lock 인프라 오류는 호출자(cron)로 전파.
    """
    if limit is None:
        limit = int(_setting("PROCESS_QUEUE_BATCH_LIMIT", 1000))
    lock = lock or get_runner_lock()

    with held(lock) as acquired:
        if not acquired:
            logger.debug("PROCESS_QUEUE_RUNNER_BUSY | lock=%s", lock.name)
            return None

        started = time.monotonic()
        notifier = get_failure_notifier(_setting("PROCESS_QUEUE_FAILURE_WEBHOOK_URL", ""))
        try:
            report = process_batch(
                DjangoUnitOfWork,
                get_consumer_registry(),
                limit=limit,
                category=category,
                stale_seconds=int(_setting("PROCESS_QUEUE_ACTIVE_STALE_SECONDS", 3600)),
                notifier=notifier,
                on_result=on_result,
                heartbeat=lock.extend,
            )
        finally:
            if notifier is not None:
                notifier.close()

    if report.items:
        logger.info(
            "PROCESS_QUEUE_BATCH_DONE | items=%s | completed=%s | failed=%s | deleted=%s | reclaimed=%s | elapsed=%.2fs",
            report.items, report.completed, report.failed, report.deleted, report.reclaimed,
            time.monotonic() - started,
        )
    return report
