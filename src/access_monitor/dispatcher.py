"""Single-threaded event loop routing inotify events."""

import logging
import threading
from typing import Iterable, Optional

from .exceptions import NotifierError, WatchError
from .ledger import AccessLedger
from .models import MonitorState
from .notify import is_directory, is_directory_created, is_overflow
from .paths import child_path
from .watch_tree import WatchTreeManager

logger = logging.getLogger(__name__)


class EventDispatcher:
    """
    Waits for events, routes them, and flushes the ledger on schedule.

    File events are recorded in the ledger; directory-creation events extend
    the watch tree. The loop checks the stop event once per iteration, so an
    iteration in progress always runs to completion, and every exit path
    ends with a final flush and the release of all watches.
    """

    def __init__(
        self,
        notifier,
        watch_tree: WatchTreeManager,
        ledger: AccessLedger,
        flush_interval: float,
        stop_event: Optional[threading.Event] = None,
        poll_timeout: float = 1.0,
    ):
        """
        Initialize the dispatcher.

        Args:
            notifier: Object with read(timeout=ms) returning decoded events
            watch_tree: Watch tree the notifier's watches belong to
            ledger: Ledger receiving file accesses
            flush_interval: Seconds between ledger flushes
            stop_event: Event that requests the loop to stop
            poll_timeout: Maximum seconds to block in a single wait
        """
        self._notifier = notifier
        self._watch_tree = watch_tree
        self._ledger = ledger
        self.flush_interval = flush_interval
        self.poll_timeout = poll_timeout
        self._stop_event = stop_event or threading.Event()
        self._state = MonitorState.RUNNING
        self._released = False

    @property
    def state(self) -> MonitorState:
        return self._state

    def stop(self) -> None:
        """Request the loop to stop after the current iteration."""
        self._stop_event.set()

    def run(self) -> None:
        """
        Run dispatch iterations until a stop is requested (blocking).

        Raises:
            NotifierError: If waiting for events fails unrecoverably. The
                final flush still happens before it propagates.
        """
        logger.debug(f"Dispatch loop started, flush interval={self.flush_interval}s")
        try:
            while not self._stop_event.is_set():
                self.run_once()
        finally:
            self.shutdown()

    def run_once(self) -> int:
        """
        Run one iteration: wait, decode, route, and flush if due.

        Returns:
            Number of events that were routed to the ledger or watch tree

        Raises:
            NotifierError: On a wait error other than an interrupted wait
        """
        try:
            events = self._notifier.read(timeout=int(self.poll_timeout * 1000))
        except InterruptedError:
            return 0
        except OSError as e:
            raise NotifierError(f"Waiting for events failed: {e}") from e

        routed = self.dispatch(events) if events else 0

        if self._ledger.is_flush_due(self.flush_interval):
            self._ledger.flush()

        return routed

    def dispatch(self, events: Iterable) -> int:
        """
        Route decoded events to the ledger and the watch tree.

        Events without a child name, and events on unknown watch descriptors,
        are skipped.

        Args:
            events: Events with wd, mask and name attributes

        Returns:
            Number of events routed
        """
        routed = 0
        for event in events:
            if is_overflow(event.mask):
                logger.warning("Event queue overflowed, some accesses were not seen")
                continue
            if not event.name:
                continue

            parent = self._watch_tree.path_for(event.wd)
            if parent is None:
                logger.debug(f"Dropping event for unknown watch descriptor {event.wd}")
                continue

            full_path = child_path(parent, event.name)

            if not is_directory(event.mask):
                if self._ledger.record(full_path):
                    logger.debug(f"Detected file access: {full_path}")
                routed += 1

            if is_directory_created(event.mask):
                try:
                    self._watch_tree.watch(full_path)
                except WatchError as e:
                    logger.warning(f"Cannot watch new directory {full_path}: {e}")
                routed += 1

        return routed

    def shutdown(self) -> None:
        """Flush pending paths and release all watches. Safe to call twice."""
        self._state = MonitorState.STOPPING
        self._ledger.flush()
        if self._released:
            return
        self._released = True

        released = self._watch_tree.release_all()
        logger.debug(f"Released {released} watches")
