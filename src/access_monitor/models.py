"""Data models for the access monitor package."""

from dataclasses import dataclass
from enum import Enum


class MonitorState(Enum):
    """Lifecycle states of the dispatch loop."""
    RUNNING = "running"
    STOPPING = "stopping"


@dataclass(frozen=True)
class WatchEntry:
    """
    A directory (or file) with an installed watch.

    Attributes:
        wd: Watch descriptor returned by the notification facility
        path: Absolute path the watch was installed on, symlinks preserved.
            Child paths of events on this watch are built from it.
        target: Canonical (symlink-resolved) path of the watched object
        is_directory: Whether the watched object is a directory
    """
    wd: int
    path: str
    target: str
    is_directory: bool = True

    def __post_init__(self):
        if not self.path.startswith("/"):
            raise ValueError(f"path must be absolute: {self.path}")

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "wd": self.wd,
            "path": self.path,
            "target": self.target,
            "is_directory": self.is_directory,
        }
