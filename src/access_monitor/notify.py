"""Glue around the inotify notification facility."""

from typing import Callable

from inotify_simple import INotify, flags

from .exceptions import NotifierInitError


# Content access, modification, open/close, and entry creation, deletion
# and moves. DONT_FOLLOW keeps a watched symlink from being dereferenced.
WATCH_MASK = (
    flags.ACCESS
    | flags.MODIFY
    | flags.OPEN
    | flags.CLOSE_WRITE
    | flags.CLOSE_NOWRITE
    | flags.CREATE
    | flags.DELETE
    | flags.MOVED_FROM
    | flags.MOVED_TO
    | flags.DONT_FOLLOW
)


def open_notifier(factory: Callable[[], INotify] = INotify) -> INotify:
    """
    Create the inotify instance all watches are installed on.

    Args:
        factory: Callable returning a new notifier

    Returns:
        The notifier

    Raises:
        NotifierInitError: If the notification facility cannot be created
    """
    try:
        return factory()
    except OSError as e:
        raise NotifierInitError(f"Cannot initialize inotify: {e}") from e


def is_directory(mask: int) -> bool:
    return bool(mask & flags.ISDIR)


def is_directory_created(mask: int) -> bool:
    return bool(mask & flags.CREATE) and is_directory(mask)


def is_overflow(mask: int) -> bool:
    return bool(mask & flags.Q_OVERFLOW)
