# PATH: apps/domains/process_queue/management/commands/queue_enqueue_all.py
"""
전체 subject를 지정 type으로 process queue에 넣는다.

- subject 목록은 settings.PROCESS_QUEUE_SUBJECT_SOURCE (subject id iterable 반환 callable)
- batch 단위로 enqueue_bulk 호출, 이미 큐에 있는 subject는 skip

사용:
  python manage.py queue_enqueue_all PRICE_UPDATED
  python manage.py queue_enqueue_all NEW_ITEM --batch-size=500
"""
from itertools import islice

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.utils.module_loading import import_string

from apps.domains.process_queue.registry import get_consumer_registry
from inventory.adapters.db.django.uow import DjangoUnitOfWork
from inventory.application.use_cases.process_queue.enqueue import DEFAULT_FLUSH_SIZE, enqueue_bulk


def _chunks(iterable, size):
    it = iter(iterable)
    while True:
        chunk = list(islice(it, size))
        if not chunk:
            return
        yield chunk


class Command(BaseCommand):
    help = "Enqueue all subjects for processing with specified type"

    def add_arguments(self, parser):
        parser.add_argument("type", type=str, help="Process type (e.g. PRICE_UPDATED, NEW_ITEM)")
        parser.add_argument(
            "--batch-size",
            type=int,
            default=100,
            help="Subjects per enqueue batch (default 100)",
        )

    def handle(self, *args, **options):
        category = options["type"]
        batch_size = max(1, options["batch_size"])
        registry = get_consumer_registry()

        if not registry.has_category(category):
            types = registry.categories()
            hint = f"Available types: {', '.join(types)}" if types else "No processors are currently registered."
            raise CommandError(f"No processors registered for type: {category}. {hint}")

        source_path = getattr(settings, "PROCESS_QUEUE_SUBJECT_SOURCE", None)
        if not source_path:
            raise CommandError("PROCESS_QUEUE_SUBJECT_SOURCE is not configured.")
        source = import_string(source_path)

        flush_size = getattr(settings, "PROCESS_QUEUE_BULK_FLUSH_SIZE", DEFAULT_FLUSH_SIZE)
        names = registry.consumers_for(category)
        self.stdout.write(f"Processors for {category}: {', '.join(names)}")

        total = 0
        enqueued = 0
        for chunk in _chunks(source(), batch_size):
            total += len(chunk)
            enqueued += enqueue_bulk(DjangoUnitOfWork, registry, chunk, category, flush_size=flush_size)

        if total == 0:
            self.stdout.write(self.style.WARNING("No subjects found."))
            return

        self.stdout.write(self.style.SUCCESS(
            f"Enqueued {enqueued} items (skipped {total - enqueued} already queued)"
        ))
        self.stdout.write(f"  Total subjects : {total:,}")
        self.stdout.write(f"  Items enqueued : {enqueued:,}")
        self.stdout.write(f"  Already queued : {total - enqueued:,}")
        self.stdout.write(f"  Process type   : {category}")
        self.stdout.write(f"  Processors     : {', '.join(names)}")
