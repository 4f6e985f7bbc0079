import pytest

from apps.domains.process_queue.registry import reset_consumer_registry
from inventory.adapters.db.django.uow import DjangoUnitOfWork
from inventory.application.process_queue.registry import ConsumerRegistration, ConsumerRegistry
from libs.redis.client import reset_redis_state
from tests import consumers


@pytest.fixture(autouse=True)
def _reset_state(monkeypatch):
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.delenv("REDIS_HOST", raising=False)
    consumers.reset()
    reset_consumer_registry()
    reset_redis_state()
    yield
    consumers.reset()
    reset_consumer_registry()
    reset_redis_state()


@pytest.fixture
def lock_dir(tmp_path, settings):
    settings.PROCESS_QUEUE_LOCK_DIR = str(tmp_path / "locks")
    return settings.PROCESS_QUEUE_LOCK_DIR


@pytest.fixture
def registry():
    """{trend, anomaly} for PRICE_UPDATED, same handlers as settings.test."""
    return ConsumerRegistry([
        ConsumerRegistration("PRICE_UPDATED", "trend", consumers.trend),
        ConsumerRegistration("PRICE_UPDATED", "anomaly", consumers.anomaly),
        ConsumerRegistration("NEW_ITEM", "new_item_notifier", consumers.new_item_notifier),
    ])


@pytest.fixture
def uow_factory():
    return DjangoUnitOfWork
