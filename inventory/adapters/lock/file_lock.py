from __future__ import annotations

import fcntl
import logging
import os
import re
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_LOCK_DIR = "/tmp/inventory-locks"


class FileNamedLock:
    """
    로컬 파일 락 (Redis 미사용 환경):
    - single host에서 중복 실행 방지
    - 락 파일은 지우지 않고 fcntl.flock(LOCK_EX | LOCK_NB)으로 보유
    - 프로세스가 죽으면 커널이 락을 풀어줌 → mtime 기반 stale 판단 없음
    """

    def __init__(self, name: str, lock_dir: str = DEFAULT_LOCK_DIR) -> None:
        self.name = name
        self.lock_dir = lock_dir
        self._fd: Optional[int] = None

    @property
    def path(self) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", self.name)
        return Path(self.lock_dir) / f"{safe}.lock"

    def acquire(self) -> bool:
        if self._fd is not None:
            return True
        Path(self.lock_dir).mkdir(parents=True, exist_ok=True)
        fd = os.open(str(self.path), os.O_CREAT | os.O_RDWR, 0o644)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            os.close(fd)
            logger.debug("NAMED_LOCK name=%s busy", self.name)
            return False
        except BaseException:
            os.close(fd)
            raise

        # 보유자 표시용 (락 판단에는 쓰지 않음)
        os.ftruncate(fd, 0)
        os.write(fd, f"pid={os.getpid()}\n".encode())
        self._fd = fd
        return True

    def extend(self) -> bool:
        # flock은 만료가 없음
        return self._fd is not None

    def release(self) -> None:
        if self._fd is None:
            return
        fd, self._fd = self._fd, None
        try:
            fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)
