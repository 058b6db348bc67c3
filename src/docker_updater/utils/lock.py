"""Single-instance run lock."""

import fcntl
import os
from pathlib import Path
from typing import IO, Optional

from docker_updater.utils.exceptions import LockContendedError, LockFileError
from docker_updater.utils.logging import get_logger

logger = get_logger(__name__)

LOCK_FILE_NAME = "docker-updater.lock"


def resolve_lock_path(primary_dir: Path, fallback_dir: Path) -> Path:
    """Pick the lock file location, falling back when the primary dir is not writable."""
    lock_dir = Path(primary_dir)
    if not (lock_dir.is_dir() and os.access(lock_dir, os.W_OK)):
        lock_dir = Path(fallback_dir)
    return lock_dir / LOCK_FILE_NAME


class RunLock:
    """
    Exclusive, non-blocking advisory lock held for the lifetime of a run.

    The kernel drops the lock when the process exits, so a crashed run never
    leaves a stale lock behind. The file itself carries no data.
    """

    def __init__(self, path: Path) -> None:
        """Initialize run lock."""
        self.path = Path(path)
        self._handle: Optional[IO[str]] = None

    def acquire(self) -> None:
        """
        Acquire the lock.

        Raises:
            LockContendedError: If another process holds the lock
            LockFileError: If the lock file cannot be opened or locked
        """
        try:
            handle = open(self.path, "w")
        except OSError as e:
            raise LockFileError(str(self.path), e) from e

        try:
            fcntl.flock(handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as e:
            handle.close()
            raise LockContendedError(str(self.path)) from e
        except OSError as e:
            handle.close()
            raise LockFileError(str(self.path), e) from e

        self._handle = handle
        logger.debug("Run lock acquired", extra={"lock_file": str(self.path)})

    def release(self) -> None:
        """Release the lock if held."""
        if self._handle is None:
            return
        try:
            fcntl.flock(self._handle, fcntl.LOCK_UN)
        finally:
            self._handle.close()
            self._handle = None
            logger.debug("Run lock released", extra={"lock_file": str(self.path)})

    def __enter__(self) -> "RunLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
