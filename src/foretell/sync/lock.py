"""Cross-process update lock.

A zero-byte ``lock`` file in the cache directory is created once and then
locked with ``flock(LOCK_EX | LOCK_NB)``. The kernel drops the lock when the
holder closes the descriptor or dies, so a crashed process never leaves the
cache locked.
"""

import errno
import fcntl
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from foretell.core.logging import get_logger
from foretell.errors import LockError

logger = get_logger(__name__)


class LockStatus(Enum):
    LOCKED = "locked"
    ALREADY_HELD = "already_held"
    ERROR = "error"


class LockGuard:
    """Holds the lock until released or the ``with`` block exits."""

    def __init__(self, path: Path, fd: int):
        self.path = path
        self._fd: Optional[int] = fd

    @property
    def held(self) -> bool:
        return self._fd is not None

    def release(self) -> None:
        if self._fd is None:
            return
        fd, self._fd = self._fd, None
        try:
            fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)
        logger.debug("Released update lock {}", self.path)

    def __enter__(self) -> "LockGuard":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False


@dataclass
class LockAttempt:
    status: LockStatus
    guard: Optional[LockGuard] = None
    error: Optional[LockError] = None

    @property
    def locked(self) -> bool:
        return self.status is LockStatus.LOCKED


class UpdateLock:
    """Non-blocking, at most one holder per cache directory."""

    @staticmethod
    def ensure_file(path: Path) -> None:
        """Create the lock file unless it exists already."""
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
        except FileExistsError:
            return
        os.close(fd)

    @classmethod
    def try_acquire(cls, path: Path) -> LockAttempt:
        """Try to take the lock at ``path`` without waiting."""
        path = Path(path)
        try:
            cls.ensure_file(path)
            fd = os.open(path, os.O_RDWR)
        except OSError as exc:
            return LockAttempt(
                LockStatus.ERROR, error=LockError(f"failed to lock {path}: {exc}")
            )

        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as exc:
            os.close(fd)
            if exc.errno in (errno.EWOULDBLOCK, errno.EAGAIN):
                logger.info("Update lock {} is held by another process", path)
                return LockAttempt(LockStatus.ALREADY_HELD)
            return LockAttempt(
                LockStatus.ERROR, error=LockError(f"failed to lock {path}: {exc}")
            )

        logger.debug("Acquired update lock {}", path)
        return LockAttempt(LockStatus.LOCKED, guard=LockGuard(path, fd))
