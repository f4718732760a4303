"""
Register Service - record entry for the mail register.

PURPOSE: Validate and save incoming/outgoing records, then notify listeners.
AI CONTEXT: The single writer of the record store, shared by CLI and web API.

ARCHITECTURE:
    CLI add-* commands ──┐
                         ├──► RegisterService ──► StorageManager
    POST /api/records ───┘          │
                                    └──► record_saved() ──► listeners
                                         (e.g. StatisticsPresenter.invalidate)

USAGE:
    service = RegisterService()
    service.subscribe(presenter.invalidate)
    result = service.record_outgoing(chrono_number="D-2024-001", ...)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import Any

from .config import Config
from .models import Direction, MailMedium, MailRecord, MailType, parse_date
from .storage import RecordStore, RecordStoreError, StorageManager

__all__ = [
    "RegisterService",
    "ServiceResult",
]

logger = logging.getLogger(__name__)


@dataclass
class ServiceResult:
    """
    Result from a service operation.

    Attributes:
        success: Whether the operation completed successfully.
        message: Human-readable result message.
        data: Optional dict with operation-specific data.
        error: Optional error message if success is False.
    """

    success: bool
    message: str
    data: dict[str, Any] | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """
        Convert this ServiceResult to a JSON-serializable dictionary.

        Fields with None values (data, error) are omitted to keep
        payloads compact.

        Example:
            >>> ServiceResult(success=True, message="Saved").to_dict()
            {'success': True, 'message': 'Saved'}
        """
        result: dict[str, Any] = {
            "success": self.success,
            "message": self.message,
        }
        if self.data is not None:
            result["data"] = self.data
        if self.error is not None:
            result["error"] = self.error
        return result


class RegisterService:
    """
    Record entry service for the mail register.

    OPERATIONS:
    - record_incoming: Validate and save an incoming mail record
    - record_outgoing: Validate and save an outgoing mail record
    - subscribe: Register a callback run after every saved record
    - record_saved: Notify subscribers that the register changed

    Validation mirrors the register's entry forms: every required field
    must be non-blank, and enumerated fields must hold a known value.

    Example:
        >>> service = RegisterService(storage=StorageManager("/tmp/reg"))
        >>> result = service.record_incoming(
        ...     chrono_number="A-001", subject="Demande", correspondent="Mairie",
        ...     mail_type="Administrative", record_date=date(2024, 1, 5))
        >>> result.success
        True
    """

    def __init__(self, storage: RecordStore | None = None) -> None:
        """
        Initialize the register service.

        Args:
            storage: Record store used for persistence. Defaults to a new
                StorageManager using Config paths.
        """
        self.storage = storage or StorageManager()
        self._listeners: list[Callable[[], None]] = []

    def subscribe(self, listener: Callable[[], None]) -> None:
        """
        Register a callback invoked after each successful save.

        Args:
            listener: Zero-argument callable, typically a presenter's
                invalidate() so its statistics are re-aggregated.
        """
        self._listeners.append(listener)

    def record_saved(self) -> None:
        """Notify every subscriber that a record was saved."""
        for listener in self._listeners:
            listener()

    def record_incoming(
        self,
        chrono_number: str,
        subject: str,
        correspondent: str,
        mail_type: MailType | str | None,
        record_date: date | str | None = None,
        **optional: str,
    ) -> ServiceResult:
        """
        Validate and save an incoming mail record.

        Args:
            chrono_number: Register sequence number.
            subject: Subject of the mail.
            correspondent: Sender.
            mail_type: One of the MailType values (e.g. "Technical").
            record_date: Reception date; today when omitted.
            **optional: Optional descriptive fields (address, service,
                observations, document_link, medium).

        Returns:
            ServiceResult with the stored record in data on success.

        Raises:
            No exceptions are raised directly. Validation and storage
            errors are returned as a failed ServiceResult.
        """
        fields = {
            "chrono_number": chrono_number,
            "subject": subject,
            "correspondent": correspondent,
            "mail_type": mail_type,
        }
        if error := self._missing_fields(fields, Config.INCOMING_REQUIRED_FIELDS):
            return error

        valid_types = {t.value for t in MailType}
        raw_type = mail_type.value if isinstance(mail_type, MailType) else str(mail_type)
        if raw_type not in valid_types:
            return ServiceResult(
                success=False,
                message="Invalid mail type",
                error=f"mail_type must be one of: {', '.join(sorted(valid_types))}",
            )

        return self._save(
            Direction.INCOMING,
            record_date,
            {
                "chrono_number": chrono_number,
                "subject": subject,
                "correspondent": correspondent,
                **optional,
            },
            mail_type=raw_type,
        )

    def record_outgoing(
        self,
        chrono_number: str,
        subject: str,
        medium: MailMedium | str | None,
        correspondent: str,
        service: str,
        writer: str,
        record_date: date | str | None = None,
        **optional: str,
    ) -> ServiceResult:
        """
        Validate and save an outgoing mail record.

        Args:
            chrono_number: Register sequence number.
            subject: Subject of the mail.
            medium: One of the MailMedium values (e.g. "Email").
            correspondent: Recipient.
            service: Issuing service.
            writer: Author of the mail.
            record_date: Dispatch date; today when omitted.
            **optional: Optional descriptive fields (address,
                observations, document_link).

        Returns:
            ServiceResult with the stored record in data on success.

        Raises:
            No exceptions are raised directly. Validation and storage
            errors are returned as a failed ServiceResult.
        """
        fields = {
            "chrono_number": chrono_number,
            "subject": subject,
            "medium": medium,
            "correspondent": correspondent,
            "service": service,
            "writer": writer,
        }
        if error := self._missing_fields(fields, Config.OUTGOING_REQUIRED_FIELDS):
            return error

        valid_media = {m.value for m in MailMedium}
        raw_medium = medium.value if isinstance(medium, MailMedium) else str(medium)
        if raw_medium not in valid_media:
            return ServiceResult(
                success=False,
                message="Invalid medium",
                error=f"medium must be one of: {', '.join(sorted(valid_media))}",
            )

        return self._save(
            Direction.OUTGOING,
            record_date,
            {
                "chrono_number": chrono_number,
                "subject": subject,
                "medium": raw_medium,
                "correspondent": correspondent,
                "service": service,
                "writer": writer,
                **optional,
            },
        )

    def _missing_fields(
        self,
        fields: dict[str, Any],
        required: tuple[str, ...],
    ) -> ServiceResult | None:
        """Return a failed result naming blank required fields, or None."""
        missing = [name for name in required if not str(fields.get(name) or "").strip()]
        if not missing:
            return None
        return ServiceResult(
            success=False,
            message="Missing required fields",
            error=f"Required fields are empty: {', '.join(missing)}",
        )

    def _save(
        self,
        direction: Direction,
        record_date: date | str | None,
        fields: dict[str, Any],
        mail_type: str | None = None,
    ) -> ServiceResult:
        """Build, persist and announce a validated record.

        Keys in fields outside MailRecord.STORED_KEYS and "medium" are
        rejected.
        """
        parsed = date.today() if record_date is None else parse_date(record_date)
        if parsed is None:
            return ServiceResult(
                success=False,
                message="Invalid date",
                error=f"Cannot parse date: {record_date!r}",
            )

        unknown = set(fields) - set(MailRecord.STORED_KEYS) - {"medium"}
        if unknown:
            return ServiceResult(
                success=False,
                message="Unknown fields",
                error=f"Unknown fields: {', '.join(sorted(unknown))}",
            )

        record = MailRecord.create(direction, parsed, mail_type=mail_type, **fields)
        try:
            saved = self.storage.add_record(record)
        except RecordStoreError as e:
            logger.error(f"Error saving {direction.value} record: {e}")
            return ServiceResult(
                success=False,
                message=f"Failed to save {direction.value} record",
                error=str(e),
            )

        if not saved:
            return ServiceResult(
                success=False,
                message=f"Failed to save {direction.value} record",
                error="Record store write failed",
            )

        logger.info(f"Saved {direction.value} record {record.chrono_number} ({parsed})")
        self.record_saved()
        return ServiceResult(
            success=True,
            message=f"{direction.value.capitalize()} record saved",
            data=record.to_dict(),
        )
