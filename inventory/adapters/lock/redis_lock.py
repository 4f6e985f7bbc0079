"""
RedisNamedLock - NamedLock Port 구현체 (SET NX EX + token 비교 해제/연장)
"""
from __future__ import annotations

from typing import Optional

import redis

from libs.redis.lock import (
    DEFAULT_LOCK_TTL_SECONDS,
    acquire_named_lock,
    extend_named_lock,
    release_named_lock,
)


class RedisNamedLock:
    def __init__(self, client: redis.Redis, name: str, ttl_seconds: int = DEFAULT_LOCK_TTL_SECONDS) -> None:
        self.client = client
        self.name = name
        self.ttl_seconds = ttl_seconds
        self._token: Optional[str] = None

    def acquire(self) -> bool:
        if self._token is not None:
            return True
        self._token = acquire_named_lock(self.client, self.name, self.ttl_seconds)
        return self._token is not None

    def extend(self) -> bool:
        """TTL 갱신. False면 락을 잃음 (만료 후 다른 실행이 획득)."""
        if self._token is None:
            return False
        if extend_named_lock(self.client, self.name, self._token, self.ttl_seconds):
            return True
        self._token = None
        return False

    def release(self) -> None:
        if self._token is None:
            return
        token, self._token = self._token, None
        release_named_lock(self.client, self.name, token)
