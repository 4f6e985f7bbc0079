# PATH: apps/domains/process_queue/management/commands/queue_process.py
"""
Process queue의 pending 작업 처리 (cron 전용).

- 다른 실행이 진행 중이면 조용히 종료 (exit 0)
- 기본은 출력 없음. -v 2 이상이면 처리 내역/요약 출력

사용:
  python manage.py queue_process
  python manage.py queue_process --limit=200 --type=PRICE_UPDATED -v 2

crontab 예:
  */2 * * * * cd /srv/inventory && python manage.py queue_process
"""
from django.core.management.base import BaseCommand

from inventory.domain.shared.result import Ok
from inventory.framework.workers.process_queue_runner import run_process_queue


class Command(BaseCommand):
    help = "Process pending items in the processing queue"

    def add_arguments(self, parser):
        parser.add_argument(
            "--limit",
            "-l",
            type=int,
            default=None,
            help="Maximum number of queue items to process (default: PROCESS_QUEUE_BATCH_LIMIT)",
        )
        parser.add_argument(
            "--type",
            "-t",
            dest="category",
            default=None,
            help="Only process specific type",
        )

    def handle(self, *args, **options):
        verbose = int(options.get("verbosity", 1)) >= 2

        on_result = self._echo if verbose else None
        report = run_process_queue(
            limit=options["limit"],
            category=options["category"],
            on_result=on_result,
        )

        if report is None:
            if verbose:
                self.stdout.write("Another queue_process run holds the lock; exiting.")
            return

        if verbose and report.items:
            self.stdout.write("")
            self.stdout.write(self.style.SUCCESS(
                f"Completed: {report.completed} processed, {report.failed} failed "
                f"({report.items} items, {report.deleted} removed)"
            ))

    def _echo(self, item, tracker, result):
        if isinstance(result, Ok):
            self.stdout.write(
                f"  ✓ Processed {item.category} / {tracker.consumer_name} for subject #{item.subject_id}"
            )
        else:
            self.stdout.write(self.style.ERROR(
                f"  ✗ Failed {item.category} / {tracker.consumer_name} for subject #{item.subject_id}: {result.message}"
            ))
