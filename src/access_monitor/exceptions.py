"""Custom exceptions for the access monitor package."""


class MonitorError(Exception):
    """Base exception for all access monitor errors."""
    pass


class ConfigError(MonitorError):
    """Monitor configuration is invalid."""
    pass


class NotifierError(MonitorError):
    """The filesystem notification facility failed while waiting for events."""
    pass


class NotifierInitError(NotifierError):
    """The filesystem notification facility could not be created."""
    pass


class WatchError(MonitorError):
    """Error related to installing a watch on a single target."""
    pass


class WatchTargetNotFoundError(WatchError):
    """Watch target cannot be stat'ed."""
    pass


class WatchInstallError(WatchError):
    """The notification facility refused to watch the target."""
    pass


class LockError(MonitorError):
    """Error related to the single-instance lock file."""
    pass


class AlreadyRunningError(LockError):
    """Another monitor instance holds the lock."""

    def __init__(self, message: str, pid=None):
        super().__init__(message)
        self.pid = pid
