# PATH: apps/domains/process_queue/management/commands/queue_stats.py
"""
Process queue 현황 (type 별 queue item 수, 상태 별 tracker 수).

사용:
  python manage.py queue_stats
"""
from django.core.management.base import BaseCommand

from inventory.adapters.db.django.uow import DjangoUnitOfWork


class Command(BaseCommand):
    help = "Show outstanding queue items per type and processors per status."

    def handle(self, *args, **options):
        with DjangoUnitOfWork() as uow:
            by_category = uow.work_items.count_by_category()
            by_status = uow.trackers.count_by_status()

        self.stdout.write("Queue items by type:")
        if not by_category:
            self.stdout.write("  (empty)")
        for category, n in by_category.items():
            self.stdout.write(f"  {category:20s} {n:8d}")

        self.stdout.write("Processors by status:")
        for status in ("pending", "active", "completed", "failed"):
            self.stdout.write(f"  {status:20s} {by_status.get(status, 0):8d}")
