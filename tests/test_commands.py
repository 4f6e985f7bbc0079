from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from apps.domains.process_queue.models import CompletionTrackerModel, WorkItemModel
from tests import consumers

pytestmark = pytest.mark.django_db


def _call(*args, **kwargs):
    out = StringIO()
    err = StringIO()
    call_command(*args, stdout=out, stderr=err, **kwargs)
    return out.getvalue(), err.getvalue()


def _failed_tracker_id():
    return CompletionTrackerModel.objects.get(status="failed").id


def test_queue_enqueue():
    out, _ = _call("queue_enqueue", "PRICE_UPDATED", "101", "102", "101")

    assert "Enqueued 2 items (skipped 0 already queued)" in out
    assert WorkItemModel.objects.count() == 2

    out, _ = _call("queue_enqueue", "PRICE_UPDATED", "101", "103")
    assert "Enqueued 1 items (skipped 1 already queued)" in out


def test_queue_enqueue_unknown_type():
    with pytest.raises(CommandError, match="No consumers registered for type: UNKNOWN"):
        _call("queue_enqueue", "UNKNOWN", "1")


def test_queue_enqueue_all():
    out, _ = _call("queue_enqueue_all", "NEW_ITEM", "--batch-size", "2")

    assert "Processors for NEW_ITEM: new_item_notifier" in out
    assert "Enqueued 5 items (skipped 0 already queued)" in out
    assert sorted(WorkItemModel.objects.values_list("subject_id", flat=True)) == [101, 102, 103, 104, 105]

    out, _ = _call("queue_enqueue_all", "NEW_ITEM")
    assert "Enqueued 0 items (skipped 5 already queued)" in out


def test_queue_enqueue_all_unknown_type():
    with pytest.raises(CommandError) as exc:
        _call("queue_enqueue_all", "UNKNOWN")
    assert "No processors registered for type: UNKNOWN" in str(exc.value)
    assert "Available types: PRICE_UPDATED, NEW_ITEM" in str(exc.value)


def test_queue_enqueue_all_requires_source(settings):
    settings.PROCESS_QUEUE_SUBJECT_SOURCE = None
    with pytest.raises(CommandError, match="PROCESS_QUEUE_SUBJECT_SOURCE"):
        _call("queue_enqueue_all", "NEW_ITEM")


def test_queue_process_is_silent_by_default(lock_dir):
    _call("queue_enqueue", "PRICE_UPDATED", "101")

    out, _ = _call("queue_process")

    assert out == ""
    assert WorkItemModel.objects.count() == 0
    assert consumers.calls["trend"] == [101]


def test_queue_process_verbose(lock_dir):
    consumers.failures["anomaly"] = RuntimeError("boom")
    _call("queue_enqueue", "PRICE_UPDATED", "101")

    out, _ = _call("queue_process", "--type", "PRICE_UPDATED", "-l", "10", verbosity=2)

    assert "✓ Processed PRICE_UPDATED / trend for subject #101" in out
    assert "✗ Failed PRICE_UPDATED / anomaly for subject #101: RuntimeError: boom" in out
    assert "Completed: 1 processed, 1 failed" in out


def test_queue_process_lock_busy(lock_dir):
    from inventory.framework.workers.process_queue_runner import get_runner_lock

    _call("queue_enqueue", "PRICE_UPDATED", "101")
    lock = get_runner_lock()
    assert lock.acquire()
    try:
        out, _ = _call("queue_process")
    finally:
        lock.release()

    assert out == ""
    assert WorkItemModel.objects.count() == 1
    assert consumers.calls == {}


def test_queue_failed_list_retry_discard(lock_dir):
    consumers.failures["anomaly"] = RuntimeError("boom")
    _call("queue_enqueue", "PRICE_UPDATED", "101")
    _call("queue_process")

    out, _ = _call("queue_failed")
    tracker_id = _failed_tracker_id()
    assert "Failed processors: 1" in out
    assert f"#{tracker_id} | PRICE_UPDATED / anomaly | subject=101 | attempts=1" in out
    assert "RuntimeError: boom" in out

    out, _ = _call("queue_failed", "--retry", str(tracker_id))
    assert f"#{tracker_id}: reset to pending" in out
    assert CompletionTrackerModel.objects.get(pk=tracker_id).status == "pending"

    _call("queue_process")
    tracker_id = _failed_tracker_id()
    out, _ = _call("queue_failed", "--discard", str(tracker_id))
    assert f"#{tracker_id}: discarded (queue item removed)" in out
    assert WorkItemModel.objects.count() == 0

    out, _ = _call("queue_failed")
    assert "No failed processors." in out


def test_queue_failed_bad_ids():
    _, err = _call("queue_failed", "--retry", "999999")
    assert "#999999:" in err

    with pytest.raises(CommandError, match="cannot be combined"):
        _call("queue_failed", "--retry", "1", "--discard", "2")


def test_queue_stats():
    _call("queue_enqueue", "PRICE_UPDATED", "1", "2")
    _call("queue_enqueue", "NEW_ITEM", "3")

    out, _ = _call("queue_stats")

    lines = [line.split() for line in out.splitlines()]
    assert ["PRICE_UPDATED", "2"] in lines
    assert ["NEW_ITEM", "1"] in lines
    assert ["pending", "5"] in lines
    assert ["failed", "0"] in lines
