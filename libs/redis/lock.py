"""
Redis 기반 이름 락 (중복 실행 방지)

cron 등으로 자주 실행되는 작업이 겹치지 않도록 SET NX 락을 건다.
- 키: lock:{name}
- 값: 실행마다 고유 token (다른 실행이 잡은 락을 지우지 않도록)
- TTL: 실행 예상 시간보다 충분히 길게 (crash 시 자동 해제)
- SET NX 실패 시 다른 실행 중 → 호출부에서 즉시 종료
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

import redis

logger = logging.getLogger(__name__)

LOG_LOCK_BUSY = "NAMED_LOCK name=%s busy"
LOG_LOCK_ACQUIRED = "NAMED_LOCK name=%s acquired"
LOG_LOCK_RELEASED = "NAMED_LOCK name=%s released"
LOG_LOCK_LOST = "NAMED_LOCK name=%s lost (expired or taken over)"

DEFAULT_LOCK_TTL_SECONDS = 1800  # 30분

# token이 일치할 때만 DEL
_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""

# token이 일치할 때만 TTL 갱신
_EXTEND_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("expire", KEYS[1], ARGV[2])
end
return 0
"""


def lock_key(name: str) -> str:
    return f"lock:{name}"


def acquire_named_lock(
    client: redis.Redis,
    name: str,
    ttl_seconds: int = DEFAULT_LOCK_TTL_SECONDS,
) -> Optional[str]:
    """
    락 획득 (SET NX EX, non-blocking)

    Returns:
        token: 락 획득 성공 (release 시 필요)
        None: 다른 실행이 보유 중
    Redis 오류는 호출부로 전파.
    """
    token = uuid.uuid4().hex
    if client.set(lock_key(name), token, nx=True, ex=int(ttl_seconds)):
        logger.debug(LOG_LOCK_ACQUIRED, name)
        return token
    logger.debug(LOG_LOCK_BUSY, name)
    return None


def release_named_lock(client: redis.Redis, name: str, token: str) -> bool:
    """자신이 잡은 락만 해제. Redis 오류 시 TTL 만료에 맡긴다."""
    try:
        released = bool(client.eval(_RELEASE_SCRIPT, 1, lock_key(name), token))
    except redis.RedisError as e:
        logger.warning("Redis lock release failed name=%s: %s", name, e)
        return False
    if released:
        logger.debug(LOG_LOCK_RELEASED, name)
    return released


def extend_named_lock(client: redis.Redis, name: str, token: str, ttl_seconds: int = DEFAULT_LOCK_TTL_SECONDS) -> bool:
    """
    보유 중인 락의 TTL 갱신 (긴 batch 도중 만료 방지).

    Returns:
        True: 갱신됨 (또는 Redis 오류로 확인 불가, 다음 갱신에서 재확인)
        False: token 불일치 → 락을 잃음
    """
    try:
        extended = bool(client.eval(_EXTEND_SCRIPT, 1, lock_key(name), token, int(ttl_seconds)))
    except redis.RedisError as e:
        logger.warning("Redis lock extend failed name=%s: %s", name, e)
        return True
    if not extended:
        logger.warning(LOG_LOCK_LOST, name)
    return extended
