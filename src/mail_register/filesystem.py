"""
FileSystem abstraction for Mail Register.

PURPOSE: Injectable file system interface for testability.
AI CONTEXT: Allows mocking file operations in unit tests without temp directories.

DESIGN:
- Protocol defines the interface
- RealFileSystem uses actual os operations
- MockFileSystem in tests/conftest.py stores data in memory for tests

USAGE:
    # Production
    fs = RealFileSystem()
    storage = StorageManager(filesystem=fs)

    # Tests (MockFileSystem from conftest.py)
    storage = StorageManager(filesystem=mock_fs)  # pytest fixture
"""

from __future__ import annotations

import os
from typing import Protocol

__all__ = ["FileSystem", "RealFileSystem"]


class FileSystem(Protocol):
    """
    Protocol for file system operations.

    Defines the interface used by the record store and the chart export
    command. All paths are strings. Implementations include RealFileSystem
    for production and MockFileSystem for testing.
    """

    def exists(self, path: str) -> bool:
        """
        Check if path exists (file or directory).

        Args:
            path: Path to check for existence.

        Returns:
            True if the path exists as either a file or directory.
        """
        ...

    def is_dir(self, path: str) -> bool:
        """
        Check if path is a directory.

        Args:
            path: Path to check.

        Returns:
            True if path exists and is a directory.
        """
        ...

    def makedirs(self, path: str, exist_ok: bool = False) -> None:
        """
        Create directory and all parent directories.

        Args:
            path: Directory path to create.
            exist_ok: If True, don't raise if directory exists.

        Raises:
            OSError: If directory exists and exist_ok is False.
        """
        ...

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """
        Read file contents as text.

        Args:
            path: File path to read.
            encoding: Text encoding (default utf-8).

        Returns:
            File contents as string.

        Raises:
            FileNotFoundError: If file doesn't exist.
        """
        ...

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """
        Write text content to file, replacing any previous content.

        Args:
            path: File path to write.
            content: String content to write.
            encoding: Text encoding (default utf-8).

        Raises:
            OSError: If the file cannot be written.
        """
        ...

    def write_bytes(self, path: str, content: bytes) -> None:
        """
        Write binary content to file (chart images).

        Args:
            path: File path to write.
            content: Bytes to write.

        Raises:
            OSError: If the file cannot be written.
        """
        ...


class RealFileSystem:
    """
    Real file system implementation using os and built-in open().

    This is the production implementation that performs actual I/O.
    Each method delegates directly to the corresponding os or built-in
    function.
    """

    def exists(self, path: str) -> bool:  # pragma: no cover
        """Delegate to os.path.exists()."""
        return os.path.exists(path)

    def is_dir(self, path: str) -> bool:  # pragma: no cover
        """Delegate to os.path.isdir()."""
        return os.path.isdir(path)

    def makedirs(self, path: str, exist_ok: bool = False) -> None:  # pragma: no cover
        """
        Create directory and parent directories on disk.

        Delegates to os.makedirs() to recursively create all directories
        in the path. Like `mkdir -p` in shell.

        Args:
            path: Path of directory to create.
            exist_ok: If True, don't raise if directory exists.

        Raises:
            OSError: If directory exists and exist_ok is False.
        """
        os.makedirs(path, exist_ok=exist_ok)

    def read_text(self, path: str, encoding: str = "utf-8") -> str:  # pragma: no cover
        """
        Read file contents from disk as text.

        Args:
            path: Path to file to read.
            encoding: Text encoding (default utf-8).

        Returns:
            File contents as a string.

        Raises:
            FileNotFoundError: If file doesn't exist.
        """
        with open(path, encoding=encoding) as f:
            return f.read()

    def write_text(
        self, path: str, content: str, encoding: str = "utf-8"
    ) -> None:  # pragma: no cover
        """
        Write text content to file on disk.

        Opens file in write mode with specified encoding and writes
        the complete content. Overwrites existing file content.

        Args:
            path: Path to file to write.
            content: String content to write.
            encoding: Text encoding (default utf-8).

        Raises:
            PermissionError: If file is read-only.
            OSError: If parent directory doesn't exist.
        """
        with open(path, "w", encoding=encoding) as f:
            f.write(content)

    def write_bytes(self, path: str, content: bytes) -> None:  # pragma: no cover
        """Write binary content (PNG charts) to file on disk."""
        with open(path, "wb") as f:
            f.write(content)
