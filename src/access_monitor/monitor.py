"""Main access monitor orchestrator."""

import logging
import threading
from typing import Callable, Optional

from inotify_simple import INotify

from .config import MonitorConfig
from .dispatcher import EventDispatcher
from .exceptions import MonitorError, NotifierError
from .ledger import AccessLedger
from .notify import open_notifier
from .watch_tree import WatchTreeManager

logger = logging.getLogger(__name__)


class FileMonitor:
    """
    Wires the notifier, watch tree, ledger and dispatcher from a config.

    Construction does no I/O; initialize() does, and reports failure by
    returning False (with the cause in `error`) so the caller can decide
    not to enter the loop.
    """

    def __init__(
        self,
        config: MonitorConfig,
        stop_event: Optional[threading.Event] = None,
        notifier_factory: Callable[[], INotify] = INotify,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize the monitor.

        Args:
            config: Monitor configuration
            stop_event: Event that requests the loop to stop
            notifier_factory: Callable creating the notifier
            clock: Time source for the ledger's flush deadline
        """
        self.config = config
        self._stop_event = stop_event or threading.Event()
        self._notifier_factory = notifier_factory
        self._clock = clock

        self.error: Optional[Exception] = None
        self._notifier = None
        self.ledger: Optional[AccessLedger] = None
        self.watch_tree: Optional[WatchTreeManager] = None
        self.dispatcher: Optional[EventDispatcher] = None

    def initialize(self) -> bool:
        """
        Validate the config, create the notifier and load the ledger.

        Returns:
            True on success. On failure the cause is stored in `error`,
            nothing is watched, and the notifier (if created) is closed.
        """
        try:
            self.config.validate()
            self._notifier = open_notifier(self._notifier_factory)
            if self._clock is not None:
                self.ledger = AccessLedger(self.config.log_path, clock=self._clock)
            else:
                self.ledger = AccessLedger(self.config.log_path)
        except (MonitorError, OSError) as e:
            logger.error(f"Initialization failed: {e}")
            self.error = e
            self._close_notifier()
            return False

        self.watch_tree = WatchTreeManager(self._notifier)
        self.dispatcher = EventDispatcher(
            self._notifier,
            self.watch_tree,
            self.ledger,
            flush_interval=self.config.flush_interval,
            stop_event=self._stop_event,
            poll_timeout=self.config.poll_timeout,
        )
        return True

    @property
    def is_initialized(self) -> bool:
        return self.dispatcher is not None

    def add_roots(self) -> int:
        """
        Watch every configured root and its existing subtree.

        Returns:
            Number of roots covered
        """
        self._require_initialized()
        covered = self.watch_tree.add_roots(self.config.roots)
        logger.info(f"Watching {len(self.watch_tree)} directories under {covered} root(s)")
        return covered

    def run(self) -> None:
        """
        Run the dispatch loop until stop() is called (blocking).

        Raises:
            NotifierError: If waiting for events fails unrecoverably
        """
        self._require_initialized()
        logger.info(f"Monitoring started, log file: {self.config.log_path}")
        logger.info(f"Flush interval: {self.config.flush_interval} seconds")
        self.dispatcher.run()
        logger.info("Monitoring stopped")

    def stop(self) -> None:
        """Request the loop to stop after its current iteration."""
        self._stop_event.set()

    def close(self) -> None:
        """Flush, release all watches and close the notifier."""
        if self.dispatcher is not None:
            self.dispatcher.shutdown()
        self._close_notifier()

    def _close_notifier(self) -> None:
        if self._notifier is not None:
            self._notifier.close()
            self._notifier = None

    def _require_initialized(self) -> None:
        if not self.is_initialized:
            raise MonitorError("Monitor is not initialized")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def run_monitor(
    config: MonitorConfig,
    stop_event: Optional[threading.Event] = None,
    notifier_factory: Callable[[], INotify] = INotify,
) -> int:
    """
    Run a monitor from startup to shutdown.

    Args:
        config: Monitor configuration
        stop_event: Event that requests a graceful stop
        notifier_factory: Callable creating the notifier

    Returns:
        Process exit status: 0 after a graceful stop, 1 if initialization
        or the event wait failed
    """
    with FileMonitor(config, stop_event=stop_event, notifier_factory=notifier_factory) as monitor:
        if not monitor.initialize():
            return 1
        monitor.add_roots()
        try:
            monitor.run()
        except NotifierError as e:
            logger.error(str(e))
            return 1
    return 0
