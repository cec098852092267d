#!/usr/bin/env python3
"""
CLI for the file access monitor.

Usage:
    python -m src.cli /home/user/documents
    python -m src.cli -l monitor.log -i 30 /tmp /var/log
    python -m src.cli -s -l monitor.log /home/user/documents
"""

import argparse
import logging
import signal
import sys
import threading
from typing import List, Optional

from dotenv import load_dotenv

from src.access_monitor import (
    AlreadyRunningError,
    ConfigError,
    InstanceLock,
    LockError,
    MonitorConfig,
    run_monitor,
)
from src.access_monitor.config import (
    DEFAULT_FLUSH_INTERVAL,
    DEFAULT_LOCK_PATH,
    DEFAULT_LOG_PATH,
)


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
logger = logging.getLogger("cli")


class GracefulShutdown:
    """Turn SIGINT/SIGTERM into a stop request for the monitor loop."""

    def __init__(self, stop_event: Optional[threading.Event] = None):
        self.stop_event = stop_event or threading.Event()
        self.signum: Optional[int] = None
        signal.signal(signal.SIGINT, self._handler)
        signal.signal(signal.SIGTERM, self._handler)

    def _handler(self, signum, frame):
        # No I/O here; the loop logs and flushes on its way out.
        self.signum = signum
        self.stop_event.set()

    @property
    def should_exit(self) -> bool:
        return self.stop_event.is_set()


def setup_logging(verbose: bool) -> None:
    """Configure console logging; silent mode only reports errors."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.ERROR,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="file-access-monitor",
        description="Record every file accessed under the given directories",
        epilog=(
            "examples:\n"
            "  %(prog)s /home/user/documents\n"
            "  %(prog)s -l monitor.log -i 30 /tmp /var/log\n"
            "  %(prog)s -s -l monitor.log /home/user/documents"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "roots",
        nargs="+",
        metavar="DIR",
        help="Directories to monitor",
    )
    parser.add_argument(
        "-l", "--log",
        dest="log_path",
        help=f"Log file of accessed paths (default: ${{ACCESS_MONITOR_LOG}} or {DEFAULT_LOG_PATH})",
    )
    parser.add_argument(
        "-i", "--interval",
        type=int,
        dest="flush_interval",
        help=f"Flush interval in seconds (default: ${{ACCESS_MONITOR_INTERVAL}} or {DEFAULT_FLUSH_INTERVAL})",
    )
    parser.add_argument(
        "-s", "--silent",
        action="store_true",
        help="Silent mode, only report errors",
    )
    parser.add_argument(
        "--lock-file",
        dest="lock_path",
        help=f"Single-instance lock file (default: ${{ACCESS_MONITOR_LOCK}} or {DEFAULT_LOCK_PATH})",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point; returns the process exit status."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        config = MonitorConfig.from_env(
            log_path=args.log_path,
            flush_interval=args.flush_interval,
            lock_path=args.lock_path,
            verbose=not args.silent,
            roots=args.roots,
        )
        config.validate()
    except ConfigError as e:
        setup_logging(verbose=not args.silent)
        logger.error(f"Invalid configuration: {e}")
        return 1

    setup_logging(verbose=config.verbose)

    lock = InstanceLock(config.lock_path)
    try:
        lock.acquire()
    except AlreadyRunningError as e:
        logger.error(str(e))
        return 1
    except LockError as e:
        logger.error(f"{e} (root privileges may be required, or use --lock-file)")
        return 1

    shutdown = GracefulShutdown()
    try:
        status = run_monitor(config, stop_event=shutdown.stop_event)
    finally:
        lock.release()

    if shutdown.signum is not None:
        logger.info(f"Stopped by signal {signal.Signals(shutdown.signum).name}")
    return status


if __name__ == "__main__":
    sys.exit(main())
