"""
도메인 공통: 처리 결과 타입 (외부 라이브러리 없음)

Consumer 호출 결과를 예외 대신 값으로 전달한다.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    message: str
    code: str = "error"

    @property
    def ok(self) -> bool:
        return False


Result = Ok[T] | Err


def capture(fn: Callable[..., T], *args, **kwargs) -> Result:
    """fn 호출 결과를 Ok/Err로 감싼다. 예외는 'ExcType: message' 형태로 기록."""
    try:
        return Ok(fn(*args, **kwargs))
    except Exception as e:
        return Err(message=f"{type(e).__name__}: {e}", code=type(e).__name__)
