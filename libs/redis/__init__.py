"""
Redis 보호 레이어

DB가 SSOT. Redis는 실행 보호 목적으로만 사용.

- 이름 락 (queue runner 중복 실행 방지)

Redis 미설정/장애 시 호출부에서 로컬 fallback.
"""

from libs.redis.client import get_redis_client
from libs.redis.lock import acquire_named_lock, extend_named_lock, release_named_lock

__all__ = [
    "get_redis_client",
    "acquire_named_lock",
    "extend_named_lock",
    "release_named_lock",
]
