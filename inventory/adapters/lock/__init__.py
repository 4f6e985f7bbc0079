"""
Runner 실행 락 선택

Redis 사용 가능 → RedisNamedLock (multi-host 안전)
Redis 미설정/연결 실패 → FileNamedLock (single host)
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from inventory.adapters.lock.file_lock import DEFAULT_LOCK_DIR, FileNamedLock
from inventory.adapters.lock.redis_lock import RedisNamedLock
from inventory.application.ports.runtime import NamedLock
from libs.redis.client import get_redis_client
from libs.redis.lock import DEFAULT_LOCK_TTL_SECONDS


def get_named_lock(
    name: str,
    ttl_seconds: int = DEFAULT_LOCK_TTL_SECONDS,
    lock_dir: str = DEFAULT_LOCK_DIR,
) -> NamedLock:
    client = get_redis_client()
    if client is not None:
        return RedisNamedLock(client, name, ttl_seconds=ttl_seconds)
    return FileNamedLock(name, lock_dir=lock_dir)


@contextmanager
def held(lock: NamedLock) -> Iterator[bool]:
    """
    non-blocking 획득 후 블록 종료 시 반드시 해제.
    yield 값: 획득 여부 (False면 다른 실행이 보유 중).
    """
    acquired = lock.acquire()
    try:
        yield acquired
    finally:
        if acquired:
            lock.release()


__all__ = ["FileNamedLock", "RedisNamedLock", "get_named_lock", "held"]
