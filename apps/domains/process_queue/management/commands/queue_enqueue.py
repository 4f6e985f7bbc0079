# PATH: apps/domains/process_queue/management/commands/queue_enqueue.py
"""
지정한 subject id들을 process queue에 넣는다 (중복은 skip).

사용:
  python manage.py queue_enqueue PRICE_UPDATED 101 102 103
"""
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from apps.domains.process_queue.registry import get_consumer_registry
from inventory.adapters.db.django.uow import DjangoUnitOfWork
from inventory.application.use_cases.process_queue.enqueue import DEFAULT_FLUSH_SIZE, enqueue_bulk
from inventory.domain.process_queue.errors import NoConsumersRegisteredError


class Command(BaseCommand):
    help = "Enqueue subject ids for processing with specified type"

    def add_arguments(self, parser):
        parser.add_argument("type", type=str, help="Process type (e.g. PRICE_UPDATED, NEW_ITEM)")
        parser.add_argument("subject_ids", nargs="+", type=int, help="Subject ids")

    def handle(self, *args, **options):
        category = options["type"]
        subject_ids = options["subject_ids"]
        try:
            count = enqueue_bulk(
                DjangoUnitOfWork, get_consumer_registry(), subject_ids, category,
                flush_size=getattr(settings, "PROCESS_QUEUE_BULK_FLUSH_SIZE", DEFAULT_FLUSH_SIZE),
            )
        except NoConsumersRegisteredError as e:
            raise CommandError(str(e)) from e

        unique = len(set(subject_ids))
        self.stdout.write(self.style.SUCCESS(
            f"Enqueued {count} items (skipped {unique - count} already queued)"
        ))
