import pytest
from django.core.exceptions import ImproperlyConfigured

from apps.domains.process_queue.registry import build_consumer_registry, get_consumer_registry
from inventory.application.process_queue.registry import ConsumerRegistration, ConsumerRegistry
from inventory.domain.process_queue.errors import (
    DuplicateConsumerNameError,
    NoConsumersRegisteredError,
    UnknownConsumerError,
)
from tests import consumers


def test_consumers_for_category_in_registration_order(registry):
    assert registry.consumers_for("PRICE_UPDATED") == ["trend", "anomaly"]
    assert registry.consumers_for("NEW_ITEM") == ["new_item_notifier"]
    assert registry.consumers_for("UNKNOWN") == []
    assert registry.categories() == ["PRICE_UPDATED", "NEW_ITEM"]
    assert len(registry) == 3


def test_duplicate_name_across_categories_is_rejected():
    with pytest.raises(DuplicateConsumerNameError):
        ConsumerRegistry([
            ConsumerRegistration("PRICE_UPDATED", "trend", consumers.trend),
            ConsumerRegistration("NEW_ITEM", "trend", consumers.new_item_notifier),
        ])


def test_get_unknown_consumer(registry):
    assert registry.get("trend").handler is consumers.trend
    with pytest.raises(UnknownConsumerError):
        registry.get("nope")


def test_require_consumers_for_empty_category(registry):
    with pytest.raises(NoConsumersRegisteredError):
        registry.require_consumers_for("UNKNOWN")


def test_settings_registry_resolves_dotted_handlers():
    reg = get_consumer_registry()
    assert reg.consumers_for("PRICE_UPDATED") == ["trend", "anomaly"]
    assert reg.get("anomaly").handler is consumers.anomaly
    assert get_consumer_registry() is reg


def test_settings_duplicate_name_is_improperly_configured():
    entries = [
        {"category": "PRICE_UPDATED", "name": "trend", "handler": "tests.consumers.trend"},
        {"category": "NEW_ITEM", "name": "trend", "handler": "tests.consumers.new_item_notifier"},
    ]
    with pytest.raises(ImproperlyConfigured, match="registered twice"):
        build_consumer_registry(entries)


@pytest.mark.parametrize(
    "entry",
    [
        {"category": "PRICE_UPDATED", "name": "x"},
        {"category": "PRICE_UPDATED", "name": "x", "handler": "tests.consumers.does_not_exist"},
        {"category": "PRICE_UPDATED", "name": "x", "handler": 42},
    ],
)
def test_settings_bad_entries(entry):
    with pytest.raises(ImproperlyConfigured):
        build_consumer_registry([entry])
