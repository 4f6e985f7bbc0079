"""
Consumer Registry: category → consumer 목록 (정적, 기동 시 1회 구성)

- 등록은 명시적 리스트로만 (클래스 자동 탐색 없음)
- consumer name은 전역 유일. 중복이면 기동 단계에서 DuplicateConsumerNameError
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable

from inventory.domain.process_queue.errors import (
    DuplicateConsumerNameError,
    NoConsumersRegisteredError,
    UnknownConsumerError,
)


@dataclass(frozen=True)
class ConsumerRegistration:
    """consumer 1개: 처리할 category, 전역 유일 name, handler(subject_id)."""
    category: str
    name: str
    handler: Callable[[int], Any]

    def process(self, subject_id: int) -> None:
        self.handler(subject_id)


class ConsumerRegistry:
    def __init__(self, registrations: Iterable[ConsumerRegistration] = ()) -> None:
        self._by_name: dict[str, ConsumerRegistration] = {}
        self._by_category: dict[str, list[ConsumerRegistration]] = {}
        for registration in registrations:
            self.register(registration)

    def register(self, registration: ConsumerRegistration) -> None:
        if registration.name in self._by_name:
            existing = self._by_name[registration.name]
            raise DuplicateConsumerNameError(
                f"Consumer name '{registration.name}' registered twice "
                f"(categories: {existing.category}, {registration.category})"
            )
        self._by_name[registration.name] = registration
        self._by_category.setdefault(registration.category, []).append(registration)

    def consumers_for(self, category: str) -> list[str]:
        """category를 처리할 consumer name 목록 (등록 순서). 없으면 빈 리스트."""
        return [r.name for r in self._by_category.get(category, [])]

    def require_consumers_for(self, category: str) -> list[str]:
        names = self.consumers_for(category)
        if not names:
            raise NoConsumersRegisteredError(f"No consumers registered for type: {category}")
        return names

    def get(self, name: str) -> ConsumerRegistration:
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownConsumerError(f"No consumer found with name: {name}") from None

    def has_category(self, category: str) -> bool:
        return bool(self._by_category.get(category))

    def categories(self) -> list[str]:
        return list(self._by_category)

    def __len__(self) -> int:
        return len(self._by_name)
