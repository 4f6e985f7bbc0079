"""
settings.PROCESS_QUEUE_CONSUMERS → ConsumerRegistry (프로세스 당 1회 구성)

설정 예:
    PROCESS_QUEUE_CONSUMERS = [
        {
            "category": "PRICE_UPDATED",
            "name": "price_trend_calculator",
            "handler": "apps.domains.market.consumers.calculate_price_trends",
        },
    ]
"""
from __future__ import annotations

import logging
from typing import Optional

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from inventory.application.process_queue.registry import ConsumerRegistration, ConsumerRegistry
from inventory.domain.process_queue.errors import ConsumerRegistryError

logger = logging.getLogger(__name__)

_registry: Optional[ConsumerRegistry] = None


def build_consumer_registry(entries) -> ConsumerRegistry:
    registry = ConsumerRegistry()
    for entry in entries or []:
        try:
            category = entry["category"]
            name = entry["name"]
            handler = entry["handler"]
        except (KeyError, TypeError) as e:
            raise ImproperlyConfigured(
                f"PROCESS_QUEUE_CONSUMERS entry needs category/name/handler: {entry!r}"
            ) from e
        if isinstance(handler, str):
            try:
                handler = import_string(handler)
            except ImportError as e:
                raise ImproperlyConfigured(f"Cannot import consumer handler for '{name}': {e}") from e
        if not callable(handler):
            raise ImproperlyConfigured(f"Consumer handler for '{name}' is not callable")
        try:
            registry.register(ConsumerRegistration(category=category, name=name, handler=handler))
        except ConsumerRegistryError as e:
            raise ImproperlyConfigured(str(e)) from e
    return registry


def get_consumer_registry() -> ConsumerRegistry:
    """settings 기반 registry (캐시). 구성 오류는 ImproperlyConfigured."""
    global _registry
    if _registry is None:
        _registry = build_consumer_registry(getattr(settings, "PROCESS_QUEUE_CONSUMERS", []))
        logger.info(
            "Process queue consumers registered: count=%s types=%s",
            len(_registry), ",".join(_registry.categories()) or "-",
        )
    return _registry


def reset_consumer_registry() -> None:
    """테스트용: registry 캐시 리셋"""
    global _registry
    _registry = None
