"""
Configuration for Mail Register.

PURPOSE: Centralized configuration constants and runtime settings.
AI CONTEXT: All configurable values live here - modify this file to change behavior.

CONFIGURATION CATEGORIES:
- Storage: File paths and directory structure
- Calendar: Canonical month labels and their fixed order
- Mail Types: Classification values, display labels, chart palette
- Dashboard: Default bind address and port

ENVIRONMENT VARIABLES:
- MAIL_REGISTER_DIR: Storage directory (default: .mail_register)
- MAIL_REGISTER_MONTHS_BY_YEAR: "true" to scope the dashboard month list
  to the selected year (default: disabled, months of every year are listed)

USAGE:
    from mail_register.config import Config
    storage_dir = Config.get_storage_dir()
    label = Config.MONTH_NAMES[0]
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class Config:
    """
    Immutable configuration container for Mail Register.

    DESIGN: Frozen dataclass ensures configuration immutability at runtime.
    All values are class-level constants - no instance creation needed.

    STORAGE STRUCTURE:
        .mail_register/
        ├── incomingMails.json  # List of incoming mail records
        ├── outgoingMails.json  # List of outgoing mail records
        └── charts/             # Exported chart images
    """

    # =========================================================================
    # STORAGE CONFIGURATION
    # =========================================================================
    STORAGE_DIR: ClassVar[str] = ".mail_register"
    INCOMING_FILE: ClassVar[str] = "incomingMails.json"
    OUTGOING_FILE: ClassVar[str] = "outgoingMails.json"
    CHARTS_DIR: ClassVar[str] = "charts"

    # =========================================================================
    # CALENDAR
    # =========================================================================
    MONTH_NAMES: ClassVar[tuple[str, ...]] = (
        "Janvier",
        "Février",
        "Mars",
        "Avril",
        "Mai",
        "Juin",
        "Juillet",
        "Août",
        "Septembre",
        "Octobre",
        "Novembre",
        "Décembre",
    )
    """Canonical month labels in chronological order. Index 0 is January."""

    # =========================================================================
    # MAIL TYPES
    # =========================================================================
    TYPE_COLORS: ClassVar[dict[str, str]] = {
        "Administrative": "#3b82f6",
        "Technical": "#10b981",
        "Commercial": "#f59e0b",
        "Financial": "#ef4444",
        "Other": "#8b5cf6",
    }
    """Fixed pie/detail colour per mail type. Never derived from data."""

    TYPE_LABELS: ClassVar[dict[str, str]] = {
        "Administrative": "Administratif",
        "Technical": "Technique",
        "Commercial": "Commercial",
        "Financial": "Financier",
        "Other": "Autre",
    }

    INCOMING_COLOR: ClassVar[str] = "#3b82f6"
    OUTGOING_COLOR: ClassVar[str] = "#10b981"
    INCOMING_LABEL: ClassVar[str] = "Courriers Entrants"
    OUTGOING_LABEL: ClassVar[str] = "Courriers Départs"
    NO_DATA_MESSAGE: ClassVar[str] = "Aucune donnée à afficher"

    # =========================================================================
    # RECORD ENTRY
    # =========================================================================
    INCOMING_REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = (
        "chrono_number",
        "subject",
        "correspondent",
        "mail_type",
    )
    OUTGOING_REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = (
        "chrono_number",
        "subject",
        "medium",
        "correspondent",
        "service",
        "writer",
    )

    # =========================================================================
    # DASHBOARD / REPORT
    # =========================================================================
    DEFAULT_HOST: ClassVar[str] = "127.0.0.1"
    DEFAULT_PORT: ClassVar[int] = 8000
    REPORT_WIDTH: ClassVar[int] = 50

    # =========================================================================
    # ENVIRONMENT-BASED SETTINGS (runtime configurable)
    # =========================================================================
    _storage_dir_override: ClassVar[str | None] = None
    _months_by_year_override: ClassVar[bool | None] = None

    @classmethod
    def get_storage_dir(cls) -> str:
        """
        Get the directory holding the record files.

        Uses a priority system: test override first, then the
        MAIL_REGISTER_DIR environment variable, then STORAGE_DIR relative
        to the working directory.

        Returns:
            Storage directory path string.

        Example:
            >>> # With env var: MAIL_REGISTER_DIR=/srv/courrier
            >>> Config.get_storage_dir()
            '/srv/courrier'
        """
        if cls._storage_dir_override is not None:
            return cls._storage_dir_override
        return os.environ.get("MAIL_REGISTER_DIR", cls.STORAGE_DIR)

    @classmethod
    def months_scoped_to_year(cls) -> bool:
        """
        Check whether the dashboard month list follows the selected year.

        By default the month selector lists every month that has data in
        any year, so a month absent from the selected year can still be
        picked and shows the empty state. Setting
        MAIL_REGISTER_MONTHS_BY_YEAR=true restricts the list to months of
        the selected year.

        Returns:
            True if month lists are scoped to the selected year.
        """
        if cls._months_by_year_override is not None:
            return cls._months_by_year_override
        return os.environ.get("MAIL_REGISTER_MONTHS_BY_YEAR", "").lower() == "true"

    @classmethod
    def set_test_overrides(
        cls,
        storage_dir: str | None = None,
        months_by_year: bool | None = None,
    ) -> None:
        """
        Set test overrides for environment-based settings.

        Allows tests to control settings without modifying environment
        variables. Must call reset_test_overrides() in test teardown to
        avoid affecting other tests.

        Args:
            storage_dir: Override for the storage directory. None to clear.
            months_by_year: Override for month list scoping. None to clear.

        Example:
            >>> Config.set_test_overrides(storage_dir='/tmp/register')
            >>> Config.get_storage_dir()
            '/tmp/register'
            >>> Config.reset_test_overrides()  # Clean up
        """
        cls._storage_dir_override = storage_dir
        cls._months_by_year_override = months_by_year

    @classmethod
    def reset_test_overrides(cls) -> None:
        """Reset all test overrides to use environment variables."""
        cls._storage_dir_override = None
        cls._months_by_year_override = None

    @classmethod
    def month_index(cls, label: str) -> int:
        """
        Get the chronological index of a month label.

        Args:
            label: Month label from MONTH_NAMES.

        Returns:
            0-based index (0 = Janvier), or -1 for an unknown label.

        Example:
            >>> Config.month_index('Mars')
            2
            >>> Config.month_index('March')
            -1
        """
        try:
            return cls.MONTH_NAMES.index(label)
        except ValueError:
            return -1
