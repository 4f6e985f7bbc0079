from datetime import timedelta
from unittest import mock

import pytest
from django.utils import timezone

from apps.domains.process_queue.models import CompletionTrackerModel, WorkItemModel
from inventory.application.process_queue.registry import ConsumerRegistration, ConsumerRegistry
from inventory.application.use_cases.process_queue.dispatch import (
    claim_tracker,
    discard_failed_tracker,
    get_failed_trackers,
    mark_consumer_complete,
    mark_consumer_failed,
    process_batch,
    reset_failed_tracker,
)
from inventory.application.use_cases.process_queue.enqueue import enqueue, enqueue_bulk
from inventory.domain.process_queue.errors import TrackerNotFoundError
from tests import consumers

pytestmark = pytest.mark.django_db


def _status(item_id, name):
    return CompletionTrackerModel.objects.get(work_item_id=item_id, consumer_name=name).status


def test_all_consumers_succeed_deletes_item(registry, uow_factory):
    item = enqueue(uow_factory(), registry, 101, "PRICE_UPDATED")

    report = process_batch(uow_factory, registry)

    assert consumers.calls["trend"] == [101]
    assert consumers.calls["anomaly"] == [101]
    assert report.items == 1
    assert report.completed == 2
    assert report.failed == 0
    assert report.deleted == 1
    assert not WorkItemModel.objects.filter(pk=item.id).exists()
    assert CompletionTrackerModel.objects.count() == 0


def test_failure_is_isolated_per_consumer(registry, uow_factory):
    consumers.failures["anomaly"] = RuntimeError("price feed down")
    item = enqueue(uow_factory(), registry, 101, "PRICE_UPDATED")

    report = process_batch(uow_factory, registry)

    assert report.completed == 1
    assert report.failed == 1
    assert report.deleted == 0
    assert _status(item.id, "trend") == "completed"
    assert _status(item.id, "anomaly") == "failed"
    failed = CompletionTrackerModel.objects.get(work_item_id=item.id, consumer_name="anomaly")
    assert failed.error_message == "RuntimeError: price feed down"
    assert failed.failed_at is not None
    assert failed.attempts == 1
    assert WorkItemModel.objects.get(pk=item.id).attempts == 2


def test_failed_only_item_is_not_picked_again(registry, uow_factory):
    consumers.failures["anomaly"] = RuntimeError("boom")
    enqueue(uow_factory(), registry, 101, "PRICE_UPDATED")
    process_batch(uow_factory, registry)

    report = process_batch(uow_factory, registry)

    assert report.items == 0
    assert consumers.calls["trend"] == [101]
    assert consumers.calls["anomaly"] == [101]


def test_fifo_order_and_limit(registry, uow_factory):
    for subject_id in (5, 3, 9):
        enqueue(uow_factory(), registry, subject_id, "NEW_ITEM")

    report = process_batch(uow_factory, registry, limit=2)

    assert report.items == 2
    assert consumers.calls["new_item_notifier"] == [5, 3]
    assert list(WorkItemModel.objects.values_list("subject_id", flat=True)) == [9]


def test_category_filter(registry, uow_factory):
    enqueue(uow_factory(), registry, 1, "PRICE_UPDATED")
    enqueue(uow_factory(), registry, 2, "NEW_ITEM")

    report = process_batch(uow_factory, registry, category="NEW_ITEM")

    assert report.items == 1
    assert consumers.calls["new_item_notifier"] == [2]
    assert consumers.calls["trend"] == []
    assert WorkItemModel.objects.filter(category="PRICE_UPDATED").count() == 1


def test_unknown_consumer_marks_tracker_failed(registry, uow_factory):
    item = enqueue(uow_factory(), registry, 101, "PRICE_UPDATED")
    # anomaly 제거 후 재배포된 상황
    smaller = ConsumerRegistry([ConsumerRegistration("PRICE_UPDATED", "trend", consumers.trend)])

    report = process_batch(uow_factory, smaller)

    assert report.completed == 1
    assert report.failed == 1
    tracker = CompletionTrackerModel.objects.get(work_item_id=item.id, consumer_name="anomaly")
    assert tracker.status == "failed"
    assert "No consumer found with name: anomaly" in tracker.error_message


def test_consumer_added_later_gets_no_tracker(registry, uow_factory):
    smaller = ConsumerRegistry([ConsumerRegistration("PRICE_UPDATED", "trend", consumers.trend)])
    item = enqueue(uow_factory(), smaller, 101, "PRICE_UPDATED")

    report = process_batch(uow_factory, registry)

    assert report.deleted == 1
    assert consumers.calls["anomaly"] == []
    assert not WorkItemModel.objects.filter(pk=item.id).exists()


def test_stale_active_tracker_is_reclaimed(registry, uow_factory):
    item = enqueue(uow_factory(), registry, 101, "PRICE_UPDATED")
    trend = item.tracker_for("trend")
    assert claim_tracker(uow_factory(), trend.id)
    # claim 후 프로세스가 죽어 active로 남은 상태
    CompletionTrackerModel.objects.filter(pk=trend.id).update(
        updated_at=timezone.now() - timedelta(hours=2)
    )

    report = process_batch(uow_factory, registry, stale_seconds=3600)

    assert report.reclaimed == 1
    assert report.deleted == 1
    assert consumers.calls["trend"] == [101]


def test_recent_active_tracker_is_left_alone(registry, uow_factory):
    item = enqueue(uow_factory(), registry, 101, "PRICE_UPDATED")
    assert claim_tracker(uow_factory(), item.tracker_for("trend").id)

    report = process_batch(uow_factory, registry, stale_seconds=3600)

    assert report.reclaimed == 0
    assert consumers.calls["trend"] == []
    assert consumers.calls["anomaly"] == [101]
    assert _status(item.id, "trend") == "active"


def test_claim_is_exclusive(registry, uow_factory):
    item = enqueue(uow_factory(), registry, 101, "PRICE_UPDATED")
    tracker_id = item.tracker_for("trend").id

    assert claim_tracker(uow_factory(), tracker_id) is True
    assert claim_tracker(uow_factory(), tracker_id) is False


def test_mark_complete_missing_tracker(uow_factory):
    with pytest.raises(TrackerNotFoundError):
        mark_consumer_complete(uow_factory(), 999999)


def test_notifier_called_on_failure(registry, uow_factory):
    consumers.failures["trend"] = ValueError("bad price")
    notifier = mock.Mock()
    enqueue(uow_factory(), registry, 101, "PRICE_UPDATED")

    process_batch(uow_factory, registry, notifier=notifier)

    notifier.notify.assert_called_once()
    item, tracker, message = notifier.notify.call_args.args
    assert item.subject_id == 101
    assert tracker.consumer_name == "trend"
    assert message == "ValueError: bad price"


def test_notifier_error_does_not_stop_batch(registry, uow_factory):
    consumers.failures["trend"] = ValueError("bad price")
    notifier = mock.Mock()
    notifier.notify.side_effect = RuntimeError("webhook down")
    enqueue(uow_factory(), registry, 101, "PRICE_UPDATED")
    enqueue(uow_factory(), registry, 102, "PRICE_UPDATED")

    report = process_batch(uow_factory, registry, notifier=notifier)

    assert report.items == 2
    assert report.failed == 2
    assert report.completed == 2


def test_on_result_callback(registry, uow_factory):
    seen = []
    enqueue(uow_factory(), registry, 7, "NEW_ITEM")

    process_batch(uow_factory, registry, on_result=lambda i, t, r: seen.append((i.subject_id, t.consumer_name, r.ok)))

    assert seen == [(7, "new_item_notifier", True)]


def test_retry_failed_tracker(registry, uow_factory):
    consumers.failures["anomaly"] = RuntimeError("boom")
    item = enqueue(uow_factory(), registry, 101, "PRICE_UPDATED")
    process_batch(uow_factory, registry)

    [failed] = get_failed_trackers(uow_factory())
    assert failed.consumer_name == "anomaly"
    assert failed.subject_id == 101
    assert failed.category == "PRICE_UPDATED"

    reset_failed_tracker(uow_factory(), failed.tracker_id)
    consumers.failures.clear()
    report = process_batch(uow_factory, registry)

    assert report.completed == 1
    assert report.deleted == 1
    assert consumers.calls["anomaly"] == [101, 101]
    assert consumers.calls["trend"] == [101]
    assert not WorkItemModel.objects.filter(pk=item.id).exists()


def test_reset_rejects_non_failed(registry, uow_factory):
    item = enqueue(uow_factory(), registry, 101, "PRICE_UPDATED")
    with pytest.raises(ValueError):
        reset_failed_tracker(uow_factory(), item.tracker_for("trend").id)


def test_discard_last_failed_tracker_removes_item(registry, uow_factory):
    consumers.failures["anomaly"] = RuntimeError("boom")
    item = enqueue(uow_factory(), registry, 101, "PRICE_UPDATED")
    process_batch(uow_factory, registry)
    tracker_id = item.tracker_for("anomaly").id

    assert discard_failed_tracker(uow_factory(), tracker_id) is True
    assert not WorkItemModel.objects.filter(pk=item.id).exists()


def test_discard_keeps_item_with_other_pending(registry, uow_factory):
    item = enqueue(uow_factory(), registry, 101, "PRICE_UPDATED")
    trend_id = item.tracker_for("trend").id
    assert claim_tracker(uow_factory(), trend_id)
    mark_consumer_failed(uow_factory(), trend_id, "boom")

    assert discard_failed_tracker(uow_factory(), trend_id) is False
    assert WorkItemModel.objects.filter(pk=item.id).exists()
    assert _status(item.id, "anomaly") == "pending"


def test_discard_rejects_non_failed(registry, uow_factory):
    item = enqueue(uow_factory(), registry, 101, "PRICE_UPDATED")
    with pytest.raises(ValueError):
        discard_failed_tracker(uow_factory(), item.tracker_for("trend").id)


def test_two_consumers_one_failing_across_bulk_enqueue(registry, uow_factory):
    consumers.failures["anomaly"] = RuntimeError("anomaly model unavailable")

    assert enqueue_bulk(uow_factory, registry, [101, 102, 101], "PRICE_UPDATED") == 2
    report = process_batch(uow_factory, registry)

    assert report.items == 2
    assert report.completed == 2
    assert report.failed == 2
    assert report.deleted == 0
    assert consumers.calls["trend"] == [101, 102]
    assert consumers.calls["anomaly"] == [101, 102]
    for subject_id in (101, 102):
        item = WorkItemModel.objects.get(subject_id=subject_id, category="PRICE_UPDATED")
        assert {t.consumer_name: t.status for t in item.trackers.all()} == {
            "trend": "completed",
            "anomaly": "failed",
        }


def test_mark_complete_error_is_reported_to_on_result(registry, uow_factory, monkeypatch):
    def broken(uow, tracker_id, now=None):
        raise RuntimeError("db gone")

    monkeypatch.setattr(
        "inventory.application.use_cases.process_queue.dispatch.mark_consumer_complete", broken
    )
    seen = []
    enqueue(uow_factory(), registry, 7, "NEW_ITEM")

    report = process_batch(uow_factory, registry, on_result=lambda i, t, r: seen.append((t.consumer_name, r)))

    assert report.completed == 0
    [(name, result)] = seen
    assert name == "new_item_notifier"
    assert not result.ok
    assert result.code == "mark_complete_failed"
    assert "db gone" in result.message


def test_heartbeat_false_stops_batch(registry, uow_factory):
    for subject_id in (1, 2):
        enqueue(uow_factory(), registry, subject_id, "NEW_ITEM")

    report = process_batch(uow_factory, registry, heartbeat=lambda: False)

    assert report.items == 0
    assert report.lock_lost is True
    assert consumers.calls["new_item_notifier"] == []
