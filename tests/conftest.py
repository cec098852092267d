"""Shared fixtures: an in-memory notifier and a controllable clock."""

import errno
from typing import Callable, Dict, List, Optional

import pytest


class FakeNotifier:
    """Stands in for inotify_simple.INotify with scripted reads."""

    def __init__(self):
        self.watches: Dict[int, str] = {}
        self.masks: Dict[int, int] = {}
        self.removed: List[int] = []
        self.fail_paths = set()
        self.batches: list = []
        self.reads = 0
        self.timeouts: List[int] = []
        self.closed = False
        self.on_read: Optional[Callable[[], None]] = None
        self._next_wd = 1

    def add_watch(self, path, mask):
        if path in self.fail_paths:
            raise OSError(errno.EACCES, "Permission denied", path)
        for wd, watched in self.watches.items():
            if watched == path:
                return wd
        wd = self._next_wd
        self._next_wd += 1
        self.watches[wd] = path
        self.masks[wd] = mask
        return wd

    def rm_watch(self, wd):
        if wd not in self.watches:
            raise OSError(errno.EINVAL, "Invalid argument")
        del self.watches[wd]
        self.removed.append(wd)

    def read(self, timeout=None, read_delay=None):
        self.reads += 1
        self.timeouts.append(timeout)
        if self.on_read is not None:
            self.on_read()
        if not self.batches:
            return []
        item = self.batches.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def wd_for(self, path) -> int:
        for wd, watched in self.watches.items():
            if watched == str(path):
                return wd
        raise KeyError(path)

    def close(self):
        self.closed = True


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def notifier():
    return FakeNotifier()


@pytest.fixture()
def clock():
    return FakeClock()
