"""
Storage management for Mail Register.

PURPOSE: Centralized JSON file I/O for incoming and outgoing mail records.
AI CONTEXT: All persistence operations go through this module.

STORAGE STRUCTURE:
    .mail_register/
    ├── incomingMails.json  # List: incoming mail records
    ├── outgoingMails.json  # List: outgoing mail records
    └── charts/             # Exported chart images

ERROR HANDLING STRATEGY:
- File not found: Return empty list (no records yet)
- JSON corruption / unreadable file: Log error, raise RecordStoreError so no
  statistics are computed from a partial register
- Write failure: Log error, return False
- Malformed individual records: Loaded with date=None, ignored by statistics

USAGE:
    # Production
    storage = StorageManager()
    incoming = storage.load_records(Direction.INCOMING)

    # Testing with MockFileSystem
    storage = StorageManager(storage_dir="/test", filesystem=mock_fs)
"""

from __future__ import annotations

import json
import logging
import os
from typing import TYPE_CHECKING, Any, Protocol

from .config import Config
from .filesystem import RealFileSystem
from .models import Direction, MailRecord

if TYPE_CHECKING:
    from .filesystem import FileSystem

__all__ = ["RecordStore", "RecordStoreError", "StorageManager"]

logger = logging.getLogger(__name__)


class RecordStoreError(Exception):
    """Raised when stored records exist but cannot be read."""


class RecordStore(Protocol):
    """Read/write contract the statistics layer and register service rely on."""

    def load_records(self, direction: Direction) -> list[MailRecord]:
        """Return every stored record of one direction (possibly empty)."""
        ...

    def add_record(self, record: MailRecord) -> bool:
        """Append one record to the file of its direction."""
        ...


class StorageManager:
    """
    JSON file I/O manager for the mail register.

    DESIGN PRINCIPLES:
    1. Whole-file reads: every load returns the full record list
    2. Loud reads: an unreadable register raises instead of looking empty
    3. Idempotent: Safe to initialize multiple times
    4. Logged: All errors recorded for debugging
    5. Testable: FileSystem can be injected for mocking

    THREAD SAFETY:
    Not thread-safe. Single writer assumed (the register service).
    """

    def __init__(
        self,
        storage_dir: str | None = None,
        filesystem: FileSystem | None = None,
    ) -> None:
        """
        Initialize storage with directory structure.

        Args:
            storage_dir: Custom storage path. Default: Config.get_storage_dir()
            filesystem: FileSystem implementation. Default: RealFileSystem

        Creates:
            - Main storage directory
            - Charts subdirectory
            - Empty JSON files (incoming, outgoing)
        """
        self.storage_dir = storage_dir or Config.get_storage_dir()
        self._fs: FileSystem = filesystem or RealFileSystem()
        self.incoming_file = os.path.join(self.storage_dir, Config.INCOMING_FILE)
        self.outgoing_file = os.path.join(self.storage_dir, Config.OUTGOING_FILE)
        self.charts_dir = os.path.join(self.storage_dir, Config.CHARTS_DIR)

        self._initialize_storage()

    @property
    def filesystem(self) -> FileSystem:
        """FileSystem used for all reads and writes."""
        return self._fs

    def _initialize_storage(self) -> None:
        """
        Create directory structure and initialize empty files.

        ERROR HANDLING:
        Logs errors but doesn't raise - reads will report the problem.
        """
        try:
            self._fs.makedirs(self.storage_dir, exist_ok=True)
            self._fs.makedirs(self.charts_dir, exist_ok=True)

            for file_path in (self.incoming_file, self.outgoing_file):
                if not self._fs.exists(file_path):
                    self._write_json(file_path, [])

            logger.info(f"Storage initialized: {self.storage_dir}")
        except OSError as e:
            logger.error(f"Failed to initialize storage: {e}")

    def _file_for(self, direction: Direction) -> str:
        """Return the JSON file path holding records of a direction."""
        if direction is Direction.INCOMING:
            return self.incoming_file
        return self.outgoing_file

    def _read_json(self, file_path: str) -> list[Any]:
        """
        Read a JSON record list.

        Args:
            file_path: Path to JSON file

        Returns:
            Parsed list, or [] if the file does not exist.

        Raises:
            RecordStoreError: If the file is unreadable, is not valid JSON,
                or does not contain a list.
        """
        try:
            content = self._fs.read_text(file_path)
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.error(f"Error reading {file_path}: {e}")
            raise RecordStoreError(f"Cannot read {file_path}: {e}") from e

        if not content.strip():
            return []
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in {file_path}: {e}")
            raise RecordStoreError(f"Invalid JSON in {file_path}: {e}") from e

        if not isinstance(data, list):
            logger.error(f"Expected a list of records in {file_path}")
            raise RecordStoreError(f"Expected a list of records in {file_path}")
        return data

    def _write_json(self, file_path: str, data: Any) -> bool:
        """
        Write JSON file with error handling.

        Args:
            file_path: Path to JSON file
            data: Data to serialize

        Returns:
            True on success, False on failure.

        FORMATTING:
        - 2-space indent for readability
        - default=str for dates/custom types
        - ensure_ascii=False keeps accented text readable
        """
        try:
            content = json.dumps(data, indent=2, default=str, ensure_ascii=False)
            self._fs.write_text(file_path, content)
            return True
        except OSError as e:
            logger.error(f"Error writing {file_path}: {e}")
            return False

    # =========================================================================
    # RECORD OPERATIONS
    # =========================================================================

    def load_records(self, direction: Direction) -> list[MailRecord]:
        """
        Load all records of one direction.

        Entries that are not JSON objects are skipped with a warning;
        entries with bad dates are kept (date=None) and left for the
        statistics engine to ignore.

        Args:
            direction: INCOMING or OUTGOING.

        Returns:
            List of MailRecord. Empty list if no records were saved yet.

        Raises:
            RecordStoreError: If the record file cannot be read or parsed.
        """
        file_path = self._file_for(direction)
        records: list[MailRecord] = []
        for entry in self._read_json(file_path):
            if not isinstance(entry, dict):
                logger.warning(f"Skipping non-object entry in {file_path}")
                continue
            records.append(MailRecord.from_dict(entry, direction))
        return records

    def save_records(self, direction: Direction, records: list[MailRecord]) -> bool:
        """
        Replace all records of one direction.

        Args:
            direction: INCOMING or OUTGOING.
            records: Complete record list to persist.

        Returns:
            True on success.
        """
        return self._write_json(self._file_for(direction), [r.to_dict() for r in records])

    def add_record(self, record: MailRecord) -> bool:
        """
        Append single record to the file of its direction.

        Args:
            record: Record to add.

        Returns:
            True on success.

        Raises:
            RecordStoreError: If the existing records cannot be read; the
                file is left untouched rather than overwritten.
        """
        records = self.load_records(record.direction)
        records.append(record)
        return self.save_records(record.direction, records)

    # =========================================================================
    # MAINTENANCE OPERATIONS
    # =========================================================================

    def clear_all(self) -> bool:
        """
        Reset both record files to empty state.

        WARNING: Destroys all data. Use for testing.

        Returns:
            True if all clears succeeded.
        """
        success = True
        success &= self._write_json(self.incoming_file, [])
        success &= self._write_json(self.outgoing_file, [])
        if success:
            logger.info("All record files cleared")
        return success
