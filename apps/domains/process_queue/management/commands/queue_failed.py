# PATH: apps/domains/process_queue/management/commands/queue_failed.py
"""
실패한 consumer tracker 조회 / 재시도 / 정리.

- failed는 자동 재시도되지 않음 → 운영자가 원인 확인 후 처리
- --retry: failed → pending (다음 queue_process에서 다시 처리)
- --discard: tracker 삭제, 남은 tracker가 모두 완료면 queue item도 삭제

사용:
  python manage.py queue_failed
  python manage.py queue_failed --limit=20
  python manage.py queue_failed --retry 12 13
  python manage.py queue_failed --discard 14
"""
from django.core.management.base import BaseCommand, CommandError

from inventory.adapters.db.django.uow import DjangoUnitOfWork
from inventory.application.use_cases.process_queue.dispatch import (
    discard_failed_tracker,
    get_failed_trackers,
    reset_failed_tracker,
)
from inventory.domain.process_queue.errors import TrackerNotFoundError


class Command(BaseCommand):
    help = "List, retry or discard failed queue processors."

    def add_arguments(self, parser):
        parser.add_argument("--limit", type=int, default=100, help="Max rows to list (default 100)")
        parser.add_argument("--retry", nargs="+", type=int, default=None, metavar="TRACKER_ID",
                            help="Reset failed trackers to pending")
        parser.add_argument("--discard", nargs="+", type=int, default=None, metavar="TRACKER_ID",
                            help="Delete failed trackers")

    def handle(self, *args, **options):
        if options["retry"] and options["discard"]:
            raise CommandError("--retry and --discard cannot be combined.")

        if options["retry"]:
            for tracker_id in options["retry"]:
                try:
                    reset_failed_tracker(DjangoUnitOfWork(), tracker_id)
                except (TrackerNotFoundError, ValueError) as e:
                    self.stderr.write(self.style.ERROR(f"#{tracker_id}: {e}"))
                    continue
                self.stdout.write(self.style.SUCCESS(f"#{tracker_id}: reset to pending"))
            return

        if options["discard"]:
            for tracker_id in options["discard"]:
                try:
                    removed = discard_failed_tracker(DjangoUnitOfWork(), tracker_id)
                except (TrackerNotFoundError, ValueError) as e:
                    self.stderr.write(self.style.ERROR(f"#{tracker_id}: {e}"))
                    continue
                suffix = " (queue item removed)" if removed else ""
                self.stdout.write(self.style.SUCCESS(f"#{tracker_id}: discarded{suffix}"))
            return

        rows = get_failed_trackers(DjangoUnitOfWork(), limit=options["limit"])
        if not rows:
            self.stdout.write("No failed processors.")
            return

        self.stdout.write(f"Failed processors: {len(rows)}")
        self.stdout.write("=" * 60)
        for r in rows:
            failed_at = r.failed_at.isoformat() if r.failed_at else "-"
            self.stdout.write(
                f"#{r.tracker_id} | {r.category} / {r.consumer_name} | subject={r.subject_id} "
                f"| attempts={r.attempts} | failed_at={failed_at}"
            )
            self.stdout.write(f"    {r.error_message}")
