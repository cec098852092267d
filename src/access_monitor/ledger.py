"""Deduplicated, append-only record of accessed file paths."""

import logging
import os
import time
from pathlib import Path
from typing import Callable, FrozenSet, Set

from .paths import PathLike

logger = logging.getLogger(__name__)

# Undecodable bytes in file names round-trip through the log unchanged.
LOG_ENCODING = "utf-8"
LOG_ERRORS = "surrogateescape"


class AccessLedger:
    """
    Tracks every distinct file path seen and persists each one exactly once.

    Known paths are seeded from the existing log file. Newly recorded paths
    stay pending until a flush appends them; a failed flush keeps them
    pending so they are written by a later attempt.
    """

    def __init__(self, log_path: PathLike, clock: Callable[[], float] = time.monotonic):
        """
        Initialize the ledger and load the existing log.

        Args:
            log_path: Text file with one recorded path per line
            clock: Time source for the flush deadline
        """
        self.log_path = Path(log_path)
        self._clock = clock
        self._known: Set[str] = set()
        self._pending: Set[str] = set()
        self._unterminated = False
        self.last_flush = clock()
        self.load()

    def load(self) -> int:
        """
        Read previously recorded paths into the known set.

        A missing log file is treated as empty.

        Returns:
            Number of paths loaded
        """
        loaded = set()
        last_line = ""
        try:
            with open(self.log_path, "r", encoding=LOG_ENCODING, errors=LOG_ERRORS, newline="\n") as f:
                for line in f:
                    loaded.add(line.rstrip("\n"))
                    last_line = line
        except FileNotFoundError:
            return 0

        # An unterminated last line must not run into the next batch.
        self._unterminated = bool(last_line) and not last_line.endswith("\n")
        loaded.discard("")
        self._known.update(loaded)
        logger.info(f"Loaded {len(loaded)} recorded paths from {self.log_path}")
        return len(loaded)

    def record(self, path: str) -> bool:
        """
        Record an access to a path.

        Args:
            path: Absolute file path

        Returns:
            True if the path had never been recorded before
        """
        if path in self._known:
            return False
        self._known.add(path)
        self._pending.add(path)
        return True

    def flush(self) -> int:
        """
        Append pending paths to the log, sorted, in a single write.

        Nothing is opened when no paths are pending. If the log cannot be
        opened or written, the log is cut back to its previous size and the
        pending paths are kept for the next flush.

        Returns:
            Number of paths written
        """
        if not self._pending:
            return 0

        batch = sorted(self._pending)
        data = "".join(f"{path}\n" for path in batch)
        if self._unterminated:
            data = "\n" + data

        size = None
        try:
            with open(self.log_path, "a", encoding=LOG_ENCODING, errors=LOG_ERRORS, newline="\n") as f:
                size = os.fstat(f.fileno()).st_size
                f.write(data)
        except OSError as e:
            logger.warning(f"Cannot write log file {self.log_path}: {e}")
            if size is not None:
                self._truncate(size)
            return 0

        self._unterminated = False
        self._pending.clear()
        self.last_flush = self._clock()
        logger.info(f"Wrote {len(batch)} new paths to {self.log_path}")
        return len(batch)

    def _truncate(self, size: int) -> None:
        """Drop a partially written batch from the end of the log."""
        try:
            os.truncate(self.log_path, size)
        except OSError as e:
            logger.error(f"Cannot roll back partial write to {self.log_path}: {e}")

    def is_flush_due(self, interval: float) -> bool:
        """Check whether at least `interval` seconds passed since the last flush."""
        return self._clock() - self.last_flush >= interval

    @property
    def known(self) -> FrozenSet[str]:
        """Every path recorded so far, including loaded ones."""
        return frozenset(self._known)

    @property
    def pending(self) -> FrozenSet[str]:
        """Paths recorded since the last successful flush."""
        return frozenset(self._pending)

    def __len__(self) -> int:
        """Return the number of known paths."""
        return len(self._known)

    def __contains__(self, path: str) -> bool:
        return path in self._known
