"""
Process queue Repository — Django ORM 구현 (메서드 내부에서만 apps.domains.process_queue import)
"""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from inventory.domain.process_queue.entities import (
    CompletionTracker,
    FailedTracker,
    TrackerStatus,
    WorkItem,
)
from inventory.domain.process_queue.errors import DuplicateWorkItemError


def _tracker_to_entity(m) -> Optional[CompletionTracker]:
    if m is None:
        return None
    return CompletionTracker(
        id=m.id,
        work_item_id=m.work_item_id,
        consumer_name=m.consumer_name,
        status=TrackerStatus(m.status) if m.status else TrackerStatus.PENDING,
        error_message=m.error_message or "",
        attempts=int(m.attempts or 0),
        created_at=m.created_at,
        updated_at=m.updated_at,
        completed_at=m.completed_at,
        failed_at=m.failed_at,
    )


def _item_to_entity(m) -> Optional[WorkItem]:
    if m is None:
        return None
    return WorkItem(
        id=m.id,
        subject_id=m.subject_id,
        category=m.category,
        attempts=int(m.attempts or 0),
        created_at=m.created_at,
        trackers=[_tracker_to_entity(t) for t in m.trackers.all()],
    )


class DjangoWorkItemRepository:
    """WorkItemRepository 구현. ORM 접근은 모두 메서드 내부에서 lazy import."""

    def exists(self, subject_id: int, category: str) -> bool:
        from apps.domains.process_queue.models import WorkItemModel
        return WorkItemModel.objects.filter(subject_id=subject_id, category=category).exists()

    def find_existing_subjects(self, subject_ids: Iterable[int], category: str) -> set[int]:
        from apps.domains.process_queue.models import WorkItemModel
        ids = list(subject_ids)
        if not ids:
            return set()
        return set(
            WorkItemModel.objects.filter(subject_id__in=ids, category=category)
            .values_list("subject_id", flat=True)
        )

    def next_batch(self, limit: int, category: Optional[str] = None) -> list[WorkItem]:
        from django.db.models import Exists, OuterRef
        from apps.domains.process_queue.models import CompletionTrackerModel, WorkItemModel

        has_pending = CompletionTrackerModel.objects.filter(
            work_item=OuterRef("pk"),
            status=CompletionTrackerModel.Status.PENDING,
        )
        qs = WorkItemModel.objects.filter(Exists(has_pending))
        if category is not None:
            qs = qs.filter(category=category)
        qs = qs.order_by("created_at", "id").prefetch_related("trackers")[: max(0, int(limit))]
        return [_item_to_entity(m) for m in qs]

    def create(self, item: WorkItem) -> bool:
        """savepoint 안에서 insert. unique 위반이면 False (바깥 트랜잭션은 유지)."""
        from django.db import IntegrityError, transaction
        from apps.domains.process_queue.models import CompletionTrackerModel, WorkItemModel

        try:
            with transaction.atomic():
                m = WorkItemModel.objects.create(
                    subject_id=item.subject_id,
                    category=item.category,
                    attempts=item.attempts,
                )
                trackers = CompletionTrackerModel.objects.bulk_create(
                    [
                        CompletionTrackerModel(
                            work_item=m,
                            consumer_name=t.consumer_name,
                            status=t.status.value,
                        )
                        for t in item.trackers
                    ]
                )
        except IntegrityError:
            return False

        self._sync_ids(item, m, trackers)
        return True

    def create_many(self, items: list[WorkItem]) -> None:
        from django.db import IntegrityError, transaction
        from apps.domains.process_queue.models import CompletionTrackerModel, WorkItemModel

        if not items:
            return
        try:
            with transaction.atomic():
                models_ = WorkItemModel.objects.bulk_create(
                    [
                        WorkItemModel(
                            subject_id=item.subject_id,
                            category=item.category,
                            attempts=item.attempts,
                        )
                        for item in items
                    ]
                )
                tracker_models = CompletionTrackerModel.objects.bulk_create(
                    [
                        CompletionTrackerModel(
                            work_item=m,
                            consumer_name=t.consumer_name,
                            status=t.status.value,
                        )
                        for item, m in zip(items, models_)
                        for t in item.trackers
                    ]
                )
        except IntegrityError as e:
            raise DuplicateWorkItemError(str(e)) from e

        offset = 0
        for item, m in zip(items, models_):
            count = len(item.trackers)
            self._sync_ids(item, m, tracker_models[offset:offset + count])
            offset += count

    def increment_attempts(self, work_item_id: int) -> None:
        from django.db.models import F
        from django.utils import timezone
        from apps.domains.process_queue.models import WorkItemModel
        WorkItemModel.objects.filter(pk=work_item_id).update(
            attempts=F("attempts") + 1,
            updated_at=timezone.now(),
        )

    def delete(self, work_item_id: int) -> None:
        from apps.domains.process_queue.models import WorkItemModel
        WorkItemModel.objects.filter(pk=work_item_id).delete()

    def count_by_category(self) -> dict[str, int]:
        from django.db.models import Count
        from apps.domains.process_queue.models import WorkItemModel
        rows = WorkItemModel.objects.values("category").annotate(n=Count("id")).order_by("category")
        return {row["category"]: row["n"] for row in rows}

    @staticmethod
    def _sync_ids(item: WorkItem, m, tracker_models) -> None:
        item.id = m.id
        item.created_at = m.created_at
        for t, tm in zip(item.trackers, tracker_models):
            t.id = tm.id
            t.work_item_id = m.id
            t.created_at = tm.created_at
            t.updated_at = tm.updated_at


class DjangoCompletionTrackerRepository:
    """CompletionTrackerRepository 구현."""

    def get_for_update(self, tracker_id: int) -> Optional[CompletionTracker]:
        """호출자가 이미 UoW 트랜잭션 내에 있어야 함 (select_for_update 락 유지)."""
        from apps.domains.process_queue.models import CompletionTrackerModel
        m = CompletionTrackerModel.objects.select_for_update().filter(pk=tracker_id).first()
        return _tracker_to_entity(m)

    def save(self, tracker: CompletionTracker) -> None:
        from django.utils import timezone
        from apps.domains.process_queue.models import CompletionTrackerModel
        CompletionTrackerModel.objects.filter(pk=tracker.id).update(
            status=tracker.status.value,
            error_message=tracker.error_message,
            attempts=tracker.attempts,
            completed_at=tracker.completed_at,
            failed_at=tracker.failed_at,
            updated_at=tracker.updated_at or timezone.now(),
        )

    def all_completed(self, work_item_id: int) -> bool:
        from apps.domains.process_queue.models import CompletionTrackerModel
        return not (
            CompletionTrackerModel.objects.filter(work_item_id=work_item_id)
            .exclude(status=CompletionTrackerModel.Status.COMPLETED)
            .exists()
        )

    def reclaim_stale_active(self, older_than: datetime, now: datetime) -> int:
        from apps.domains.process_queue.models import CompletionTrackerModel
        return (
            CompletionTrackerModel.objects
            .filter(status=CompletionTrackerModel.Status.ACTIVE, updated_at__lt=older_than)
            .update(status=CompletionTrackerModel.Status.PENDING, updated_at=now)
        )

    def find_failed(self, limit: int = 100) -> list[FailedTracker]:
        from apps.domains.process_queue.models import CompletionTrackerModel
        qs = (
            CompletionTrackerModel.objects.select_related("work_item")
            .filter(status=CompletionTrackerModel.Status.FAILED)
            .order_by("-failed_at", "-id")[: max(0, int(limit))]
        )
        return [
            FailedTracker(
                tracker_id=m.id,
                work_item_id=m.work_item_id,
                consumer_name=m.consumer_name,
                category=m.work_item.category,
                subject_id=m.work_item.subject_id,
                error_message=m.error_message or "",
                attempts=int(m.attempts or 0),
                item_attempts=int(m.work_item.attempts or 0),
                failed_at=m.failed_at,
            )
            for m in qs
        ]

    def delete(self, tracker_id: int) -> None:
        from apps.domains.process_queue.models import CompletionTrackerModel
        CompletionTrackerModel.objects.filter(pk=tracker_id).delete()

    def count_by_status(self) -> dict[str, int]:
        from django.db.models import Count
        from apps.domains.process_queue.models import CompletionTrackerModel
        rows = CompletionTrackerModel.objects.values("status").annotate(n=Count("id")).order_by("status")
        return {row["status"]: row["n"] for row in rows}
