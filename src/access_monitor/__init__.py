"""
Access Monitor Package

Watches directory trees through inotify and keeps a durable, deduplicated
log of every file path that was accessed, modified, created or moved.

Features:
- Recursive watches, extended automatically to new subdirectories
- Symlink-aware dedup of watch targets (safe on symlink cycles)
- Append-only log, each path written at most once across restarts
- Periodic and shutdown flushes that never drop paths on write failure
- Single-instance enforcement through an advisory lock file
"""

from .models import (
    MonitorState,
    WatchEntry,
)

from .config import MonitorConfig

from .exceptions import (
    MonitorError,
    ConfigError,
    NotifierError,
    NotifierInitError,
    WatchError,
    WatchTargetNotFoundError,
    WatchInstallError,
    LockError,
    AlreadyRunningError,
)

from .paths import canonicalize, absolute_no_follow, child_path
from .notify import WATCH_MASK, open_notifier
from .watch_tree import WatchTreeManager
from .ledger import AccessLedger
from .dispatcher import EventDispatcher
from .lock import InstanceLock
from .monitor import FileMonitor, run_monitor


__all__ = [
    # Models
    "MonitorState",
    "WatchEntry",
    # Config
    "MonitorConfig",
    # Exceptions
    "MonitorError",
    "ConfigError",
    "NotifierError",
    "NotifierInitError",
    "WatchError",
    "WatchTargetNotFoundError",
    "WatchInstallError",
    "LockError",
    "AlreadyRunningError",
    # Paths
    "canonicalize",
    "absolute_no_follow",
    "child_path",
    # Components
    "WATCH_MASK",
    "open_notifier",
    "WatchTreeManager",
    "AccessLedger",
    "EventDispatcher",
    "InstanceLock",
    # Main Process
    "FileMonitor",
    "run_monitor",
]

__version__ = "0.1.0"
