"""Tests for single-instance lock module."""

import os

import pytest

from src.access_monitor.exceptions import AlreadyRunningError, LockError
from src.access_monitor.lock import InstanceLock


class TestInstanceLock:
    """Tests for InstanceLock class."""

    def test_acquire_writes_pid(self, tmp_path):
        path = tmp_path / "monitor.lock"
        lock = InstanceLock(path)

        lock.acquire()

        assert lock.is_held
        assert path.read_text() == f"{os.getpid()}\n"
        lock.release()

    def test_acquire_creates_parent(self, tmp_path):
        path = tmp_path / "run" / "lock" / "monitor.lock"
        with InstanceLock(path):
            assert path.exists()

    def test_release_removes_file(self, tmp_path):
        path = tmp_path / "monitor.lock"
        lock = InstanceLock(path)
        lock.acquire()

        lock.release()

        assert not lock.is_held
        assert not path.exists()

    def test_release_idempotent(self, tmp_path):
        lock = InstanceLock(tmp_path / "monitor.lock")
        lock.acquire()
        lock.release()
        lock.release()

    def test_second_holder_rejected(self, tmp_path):
        path = tmp_path / "monitor.lock"
        with InstanceLock(path):
            other = InstanceLock(path)
            with pytest.raises(AlreadyRunningError) as exc_info:
                other.acquire()

        assert exc_info.value.pid == os.getpid()
        assert str(os.getpid()) in str(exc_info.value)
        assert not other.is_held

    def test_reacquire_after_release(self, tmp_path):
        path = tmp_path / "monitor.lock"
        with InstanceLock(path):
            pass

        with InstanceLock(path) as lock:
            assert lock.is_held

    def test_stale_file_does_not_block(self, tmp_path):
        path = tmp_path / "monitor.lock"
        path.write_text("999999\n")

        with InstanceLock(path) as lock:
            assert path.read_text() == f"{os.getpid()}\n"
            assert lock.is_held

    def test_unusable_location_raises(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        lock = InstanceLock(blocker / "monitor.lock")

        with pytest.raises(LockError):
            lock.acquire()
