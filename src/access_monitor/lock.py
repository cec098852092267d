"""Single-instance enforcement through an advisory lock file."""

import fcntl
import logging
import os
from pathlib import Path
from typing import IO, Optional

from .exceptions import AlreadyRunningError, LockError
from .paths import PathLike

logger = logging.getLogger(__name__)


class InstanceLock:
    """
    Exclusive, non-blocking flock on a PID file.

    The lock is held for as long as the file handle stays open, so a crashed
    holder never leaves a lock that blocks the next start.
    """

    def __init__(self, path: PathLike):
        self.path = Path(path)
        self._fh: Optional[IO[str]] = None

    def acquire(self) -> None:
        """
        Take the lock and write the current PID into it.

        Raises:
            AlreadyRunningError: If another process holds the lock
            LockError: If the lock file cannot be created or locked
        """
        if self._fh is not None:
            return

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fh = open(self.path, "a+")
        except OSError as e:
            raise LockError(f"Cannot create lock file {self.path}: {e}") from e

        try:
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            fh.seek(0)
            pid = self._parse_pid(fh.read())
            fh.close()
            message = f"Another instance is already running (lock file: {self.path}"
            if pid is not None:
                message += f", PID {pid}"
            raise AlreadyRunningError(message + ")", pid=pid) from None
        except OSError as e:
            fh.close()
            raise LockError(f"Cannot lock {self.path}: {e}") from e

        fh.seek(0)
        fh.truncate()
        fh.write(f"{os.getpid()}\n")
        fh.flush()
        self._fh = fh
        logger.debug(f"Acquired instance lock {self.path}")

    def release(self) -> None:
        """Unlock and remove the lock file. Does nothing if not held."""
        if self._fh is None:
            return
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Cannot remove lock file {self.path}: {e}")
        fcntl.flock(self._fh.fileno(), fcntl.LOCK_UN)
        self._fh.close()
        self._fh = None

    @property
    def is_held(self) -> bool:
        return self._fh is not None

    @staticmethod
    def _parse_pid(content: str) -> Optional[int]:
        try:
            return int(content.strip().splitlines()[0])
        except (IndexError, ValueError):
            return None

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False
