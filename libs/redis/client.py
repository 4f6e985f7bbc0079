"""
Redis 클라이언트 - Fallback 지원

REDIS_URL 또는 REDIS_HOST 미설정, 연결 실패 시 None 반환.
호출부에서 None 체크 후 로컬(파일 락 등) 로직으로 fallback.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import redis

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None
_redis_available: Optional[bool] = None


def _build_client() -> Optional[redis.Redis]:
    url = os.getenv("REDIS_URL")
    if url:
        return redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=5,
            socket_connect_timeout=5,
        )

    host = os.getenv("REDIS_HOST")
    if not host:
        return None

    return redis.Redis(
        host=host,
        port=int(os.getenv("REDIS_PORT", "6379")),
        password=os.getenv("REDIS_PASSWORD") or None,
        db=int(os.getenv("REDIS_DB", "0")),
        decode_responses=True,
        socket_timeout=5,
        socket_connect_timeout=5,
    )


def get_redis_client() -> Optional[redis.Redis]:
    """
    Redis 클라이언트 반환 (프로세스 당 1회 연결 확인).
    설정이 없거나 연결 실패 시 None.
    """
    global _redis_client, _redis_available

    if _redis_available is False:
        return None

    if _redis_client is not None:
        return _redis_client

    client = _build_client()
    if client is None:
        logger.debug("REDIS_URL/REDIS_HOST not set, Redis disabled")
        _redis_available = False
        return None

    try:
        client.ping()
    except redis.RedisError as e:
        logger.warning("Redis connection failed (will use local fallback): %s", e)
        _redis_available = False
        return None

    _redis_client = client
    _redis_available = True
    logger.info("Redis connected: %s", client.connection_pool.connection_kwargs.get("host", "?"))
    return client


def reset_redis_state():
    """테스트용: Redis 상태 리셋"""
    global _redis_client, _redis_available
    _redis_client = None
    _redis_available = None
