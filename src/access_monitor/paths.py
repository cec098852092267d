"""Path normalization helpers for watch bookkeeping."""

import os
from pathlib import Path
from typing import Union

PathLike = Union[str, Path]


def canonicalize(path: PathLike) -> str:
    """
    Resolve symlinks and relative components of a path.

    Resolution is strict, so a path that does not exist (or loops) cannot be
    resolved; the input is then returned unchanged and callers must tolerate
    the unresolved form.

    Args:
        path: Path to resolve

    Returns:
        The canonical absolute path, or the input as a string
    """
    try:
        return str(Path(path).resolve(strict=True))
    except (OSError, RuntimeError):
        return os.fspath(path)


def absolute_no_follow(path: PathLike) -> str:
    """
    Make a path absolute without following its final symlink.

    Watches are installed on this form so that paths built from events keep
    the spelling the user asked for.

    Args:
        path: Absolute or cwd-relative path

    Returns:
        The absolute path with trailing separators removed
    """
    path = os.fspath(path)
    if not os.path.isabs(path):
        try:
            path = os.path.join(os.getcwd(), path)
        except OSError:
            return path
    return path.rstrip("/") or "/"


def child_path(parent: str, name: str) -> str:
    """Join a watched directory and an event's child name."""
    if parent.endswith("/"):
        return parent + name
    return f"{parent}/{name}"
