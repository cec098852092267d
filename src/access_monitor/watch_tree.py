"""Recursive management of per-directory inotify watches."""

import errno
import logging
import os
import stat
from typing import Dict, Iterable, List, Optional, Set

from .exceptions import WatchError, WatchInstallError, WatchTargetNotFoundError
from .models import WatchEntry
from .notify import WATCH_MASK
from .paths import PathLike, absolute_no_follow, canonicalize, child_path

logger = logging.getLogger(__name__)


class WatchTreeManager:
    """
    Owns every watch installed on a notifier.

    Keeps the watch descriptor -> path table used to turn events back into
    paths, and the set of canonical targets already watched so the same
    directory reached through different spellings (or a symlink cycle) is
    only watched once. Entries for deleted directories are left in place;
    events for handles the kernel has dropped are simply not resolved.
    """

    def __init__(self, notifier, mask: int = WATCH_MASK):
        """
        Initialize the watch tree.

        Args:
            notifier: Object with add_watch(path, mask) and rm_watch(wd)
            mask: Event mask installed on every watch
        """
        self._notifier = notifier
        self._mask = mask
        self._entries: Dict[int, WatchEntry] = {}
        self._targets: Set[str] = set()

    def watch(self, path: PathLike) -> Optional[WatchEntry]:
        """
        Watch a path and, for a directory, every directory beneath it.

        Subdirectories that exist when this is called are covered by the time
        it returns. A subdirectory that fails is logged and skipped without
        stopping the rest of the tree.

        Args:
            path: File or directory to watch

        Returns:
            The entry for the path, or None if its target was already watched

        Raises:
            WatchTargetNotFoundError: If the path cannot be stat'ed
            WatchInstallError: If the watch cannot be installed on the path
        """
        entry = self._install(path)
        if entry is None or not entry.is_directory:
            return entry

        pending: List[str] = [entry.path]
        while pending:
            directory = pending.pop()
            for subdir in self._subdirectories(directory):
                try:
                    child = self._install(subdir)
                except WatchError as e:
                    logger.warning(f"Skipping {subdir}: {e}")
                    continue
                if child is not None:
                    pending.append(child.path)

        return entry

    def add_roots(self, roots: Iterable[PathLike]) -> int:
        """
        Watch each root, logging and skipping the ones that fail.

        Args:
            roots: Root paths to watch

        Returns:
            Number of roots that are now covered
        """
        covered = 0
        for root in roots:
            try:
                self.watch(root)
                covered += 1
            except WatchError as e:
                logger.warning(f"Cannot watch root {root}: {e}")
        return covered

    def _install(self, path: PathLike) -> Optional[WatchEntry]:
        """Install a single watch, without descending."""
        try:
            st = os.stat(path)
        except OSError as e:
            raise WatchTargetNotFoundError(f"Cannot access path: {path} ({e.strerror})") from e

        watch_path = absolute_no_follow(path)
        target = canonicalize(path)
        if target in self._targets:
            return None

        try:
            wd = self._notifier.add_watch(watch_path, self._mask)
        except OSError as e:
            raise WatchInstallError(f"Cannot watch path: {watch_path} ({e.strerror})") from e

        entry = WatchEntry(
            wd=wd,
            path=watch_path,
            target=target,
            is_directory=stat.S_ISDIR(st.st_mode),
        )
        self._entries[wd] = entry
        self._targets.add(target)
        logger.info(f"Watching: {watch_path}")
        return entry

    def _subdirectories(self, directory: str) -> List[str]:
        """List immediate children of a directory that stat as directories."""
        subdirs = []
        try:
            with os.scandir(directory) as it:
                for dirent in it:
                    try:
                        if dirent.is_dir():
                            subdirs.append(child_path(directory, dirent.name))
                    except OSError:
                        continue
        except OSError as e:
            logger.warning(f"Cannot list directory {directory}: {e.strerror}")
        return subdirs

    def path_for(self, wd: int) -> Optional[str]:
        """
        Get the watched path for a watch descriptor.

        Args:
            wd: Watch descriptor carried by an event

        Returns:
            The path, or None for an unknown (stale) descriptor
        """
        entry = self._entries.get(wd)
        return entry.path if entry is not None else None

    def is_watched(self, path: PathLike) -> bool:
        """Check whether the canonical target of a path has a watch."""
        return canonicalize(path) in self._targets

    def watched_paths(self) -> List[str]:
        """Get the paths of all installed watches."""
        return [entry.path for entry in self._entries.values()]

    def entries(self) -> List[WatchEntry]:
        """Get all installed watch entries."""
        return list(self._entries.values())

    def release_all(self) -> int:
        """
        Remove every installed watch.

        Descriptors the kernel already invalidated (for example because the
        directory was deleted) are skipped.

        Returns:
            Number of watches removed
        """
        released = 0
        for wd, entry in list(self._entries.items()):
            try:
                self._notifier.rm_watch(wd)
                released += 1
            except OSError as e:
                if e.errno != errno.EINVAL:
                    logger.warning(f"Cannot remove watch on {entry.path}: {e.strerror}")
        self._entries.clear()
        return released

    def __len__(self) -> int:
        """Return the number of installed watches."""
        return len(self._entries)

    def __contains__(self, path: PathLike) -> bool:
        """Check if a path is watched."""
        return self.is_watched(path)
