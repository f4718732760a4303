"""
Pytest configuration and shared fixtures for Mail Register tests.

This module contains:
- MockFileSystem: In-memory filesystem for testing without actual I/O
- Record builders for incoming and outgoing mail
- Shared fixtures available to all test modules
"""

from __future__ import annotations

import os
import time
from collections.abc import Callable, Iterator
from datetime import date
from typing import Any

import pytest

from mail_register.config import Config
from mail_register.models import Direction, MailRecord, MailType
from mail_register.storage import StorageManager

STORAGE_DIR = "/register"


class MockFileSystem:
    """
    In-memory file system for testing.

    Simulates a file system using dictionaries:
    - _files: dict mapping path -> content (str or bytes)
    - _dirs: set of directory paths
    - _read_only: paths whose writes raise PermissionError
    - _unreadable: paths whose reads raise PermissionError

    FEATURES:
    - No actual I/O operations
    - Easy to inspect state
    - Supports permission failure simulation
    """

    def __init__(self) -> None:
        """
        Initialize empty mock file system.

        Example:
            >>> fs = MockFileSystem()
            >>> fs.list_files()
            []
        """
        self._files: dict[str, str | bytes] = {}
        self._dirs: set[str] = set()
        self._read_only: set[str] = set()
        self._unreadable: set[str] = set()

    def exists(self, path: str) -> bool:
        """Check if a mock file or directory exists."""
        return path in self._files or path in self._dirs

    def is_dir(self, path: str) -> bool:
        """Check if path is a mock directory."""
        return path in self._dirs

    def makedirs(self, path: str, exist_ok: bool = False) -> None:
        """
        Create mock directory and parent directories.

        Raises:
            OSError: If directory exists and exist_ok is False,
                or if path is an existing file.
        """
        if path in self._dirs:
            if not exist_ok:
                raise OSError(f"Directory exists: {path}")
            return

        if path in self._files:
            raise OSError(f"Path is a file, not directory: {path}")

        # Create all parent directories
        parts = path.rstrip("/").split("/")
        for i in range(1, len(parts) + 1):
            parent = "/".join(parts[:i])
            if parent:
                self._dirs.add(parent)

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """
        Read mock file contents.

        Raises:
            FileNotFoundError: If path not in _files.
            PermissionError: If path was marked unreadable.
        """
        if path in self._unreadable:
            raise PermissionError(f"Permission denied: {path}")
        if path not in self._files:
            raise FileNotFoundError(f"No such file: {path}")
        content = self._files[path]
        return content.decode(encoding) if isinstance(content, bytes) else content

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """
        Write text to mock file, creating parent directories.

        Raises:
            PermissionError: If path is in _read_only set.
        """
        self._write(path, content)

    def write_bytes(self, path: str, content: bytes) -> None:
        """Write binary content to mock file, creating parent directories."""
        self._write(path, content)

    def _write(self, path: str, content: str | bytes) -> None:
        if path in self._read_only:
            raise PermissionError(f"Permission denied: {path}")

        parent = "/".join(path.rstrip("/").split("/")[:-1])
        if parent and parent not in self._dirs:
            self.makedirs(parent, exist_ok=True)

        self._files[path] = content

    # =========================================================================
    # TEST HELPERS
    # =========================================================================

    def get_file(self, path: str) -> str | bytes | None:
        """Get file content or None if not exists."""
        return self._files.get(path)

    def set_file(self, path: str, content: str) -> None:
        """Set file content directly (auto-creates parent directories)."""
        self.write_text(path, content)

    def set_read_only(self, path: str) -> None:
        """Make subsequent writes to path fail with PermissionError."""
        self._read_only.add(path)

    def set_unreadable(self, path: str) -> None:
        """Make subsequent reads of path fail with PermissionError."""
        self._unreadable.add(path)

    def list_files(self) -> list[str]:
        """List all file paths, sorted."""
        return sorted(self._files.keys())

    def list_dirs(self) -> list[str]:
        """List all directory paths, sorted."""
        return sorted(self._dirs)

    def clear(self) -> None:
        """Reset all internal state."""
        self._files.clear()
        self._dirs.clear()
        self._read_only.clear()
        self._unreadable.clear()


def incoming(
    day: date | None,
    mail_type: MailType | str | None = MailType.ADMINISTRATIVE,
    **fields: Any,
) -> MailRecord:
    """Build an incoming record dated `day` (None for an undated record)."""
    typed = MailType.coerce(mail_type) if mail_type is not None else None
    return MailRecord(direction=Direction.INCOMING, date=day, mail_type=typed, **fields)


def outgoing(day: date | None, **fields: Any) -> MailRecord:
    """Build an outgoing record dated `day`."""
    return MailRecord(direction=Direction.OUTGOING, date=day, **fields)


@pytest.fixture(autouse=True)
def reset_config() -> Iterator[None]:
    """Clear Config test overrides after every test."""
    yield
    Config.reset_test_overrides()


@pytest.fixture
def local_timezone() -> Iterator[Callable[[str], None]]:
    """
    Switch the process time zone for one test.

    Yields a setter taking a POSIX TZ string ('UTC0', 'WAT-1' for UTC+1,
    'EST5' for UTC-5). The original TZ is restored afterwards.
    """
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    original = os.environ.get("TZ")

    def set_timezone(name: str) -> None:
        os.environ["TZ"] = name
        time.tzset()

    yield set_timezone
    if original is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = original
    time.tzset()


@pytest.fixture
def mock_fs() -> MockFileSystem:
    """
    Create a MockFileSystem for testing.

    Example:
        >>> def test_storage(mock_fs):
        ...     mock_fs.set_file('/register/incomingMails.json', '[]')
    """
    return MockFileSystem()


@pytest.fixture
def storage(mock_fs: MockFileSystem) -> StorageManager:
    """StorageManager rooted at /register on the mock filesystem."""
    return StorageManager(storage_dir=STORAGE_DIR, filesystem=mock_fs)


@pytest.fixture
def sample_register(storage: StorageManager) -> StorageManager:
    """
    Storage holding a small two-year register.

    - January 2024: 2 incoming (Administrative, Technical), 1 outgoing
    - March 2024: 1 incoming (Financial), 2 outgoing
    - December 2023: 1 incoming (Commercial)
    """
    storage.save_records(
        Direction.INCOMING,
        [
            incoming(date(2024, 1, 5), MailType.ADMINISTRATIVE, chrono_number="A-1"),
            incoming(date(2024, 1, 20), MailType.TECHNICAL, chrono_number="A-2"),
            incoming(date(2024, 3, 1), MailType.FINANCIAL, chrono_number="A-3"),
            incoming(date(2023, 12, 15), MailType.COMMERCIAL, chrono_number="A-4"),
        ],
    )
    storage.save_records(
        Direction.OUTGOING,
        [
            outgoing(date(2024, 1, 10), chrono_number="D-1"),
            outgoing(date(2024, 3, 2), chrono_number="D-2"),
            outgoing(date(2024, 3, 28), chrono_number="D-3"),
        ],
    )
    return storage
