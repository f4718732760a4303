"""
Data models for Mail Register.

PURPOSE: Type-safe dataclasses representing core domain entities.
AI CONTEXT: These models define the record schema and the statistics buckets.

MODEL HIERARCHY:
- MailRecord: One tracked correspondence entry (incoming or outgoing)
- MonthlyStats: Aggregate count bucket for one (year, month) pair
- YearTotals: Aggregate counts for one calendar year

SERIALIZATION:
MailRecord has to_dict() for JSON persistence and from_dict() for loading.
Stored keys keep the register's camelCase layout (chronoNumber, mailType...).
Dates are stored as ISO 8601 calendar dates (YYYY-MM-DD).

USAGE:
    record = MailRecord.create(Direction.INCOMING, date(2024, 1, 5),
                               mail_type=MailType.TECHNICAL, subject="Devis")
    stats = MonthlyStats(year=2024, month="Janvier")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar

from .config import Config

__all__ = [
    "Direction",
    "MailType",
    "MailMedium",
    "MailRecord",
    "MonthlyStats",
    "YearTotals",
    "parse_date",
    "empty_type_counts",
]


class Direction(Enum):
    """Whether a record is mail received (incoming) or mail sent (outgoing)."""

    INCOMING = "incoming"
    OUTGOING = "outgoing"


class MailType(Enum):
    """
    Subject-matter classification of an incoming record.

    Outgoing records are not typed. Declaration order is the canonical
    display order for pie slices and detail rows.
    """

    ADMINISTRATIVE = "Administrative"
    TECHNICAL = "Technical"
    COMMERCIAL = "Commercial"
    FINANCIAL = "Financial"
    OTHER = "Other"

    @classmethod
    def coerce(cls, value: Any) -> MailType:
        """
        Map a raw stored value to a MailType member.

        Accepts a member, its value ("Technical") or its name
        ("TECHNICAL"), case-insensitively. Anything else, including None
        and empty strings, becomes OTHER rather than being rejected.

        Args:
            value: Raw mail type from storage or user input.

        Returns:
            Matching MailType, or MailType.OTHER.

        Example:
            >>> MailType.coerce("technical")
            <MailType.TECHNICAL: 'Technical'>
            >>> MailType.coerce("Urgent")
            <MailType.OTHER: 'Other'>
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if wanted in (member.value.lower(), member.name.lower()):
                    return member
        return cls.OTHER

    @property
    def label(self) -> str:
        """French display label (e.g. 'Administratif')."""
        return Config.TYPE_LABELS[self.value]

    @property
    def color(self) -> str:
        """Fixed hex colour used by charts and detail rows."""
        return Config.TYPE_COLORS[self.value]


class MailMedium(Enum):
    """Transmission medium of a record. Descriptive only."""

    EMAIL = "Email"
    MAIL = "Mail"
    FAX = "Fax"
    HAND = "Hand"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: Any) -> MailMedium | None:
        """Parse a stored medium; empty values give None, unknown ones OTHER."""
        if isinstance(value, cls):
            return value
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


def parse_date(value: Any) -> date | None:
    """
    Parse a stored record date into a calendar date.

    Accepts date and datetime objects and ISO 8601 strings, either a bare
    calendar date ('2024-01-05') or a full timestamp with 'Z' or an
    offset ('2024-01-05T00:00:00.000Z'). Timestamps carrying an offset
    are converted to local time before the date is taken; bare dates and
    naive timestamps are kept as written.

    Business context: The entry form stores local midnight serialized as
    UTC, so a record dated 1 February in a UTC+1 office is written as
    '2024-01-31T23:00:00.000Z'. Reading it back in local time puts it in
    the month the user picked. Records with an unusable date must be left
    out of the statistics without failing the whole load, so parsing
    never raises.

    Args:
        value: Raw date value from storage or user input.

    Returns:
        The calendar date, or None if the value is absent or unparseable.

    Example:
        >>> parse_date('2024-03-01')
        datetime.date(2024, 3, 1)
        >>> parse_date('not a date') is None
        True
    """
    if isinstance(value, datetime):
        return _local_date(value)
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip().replace("Z", "+00:00")
    try:
        return _local_date(datetime.fromisoformat(text))
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def _local_date(moment: datetime) -> date:
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()


def empty_type_counts() -> dict[MailType, int]:
    """Return a type breakdown with every MailType present and zeroed."""
    return {mail_type: 0 for mail_type in MailType}


@dataclass
class MailRecord:
    """
    A single tracked correspondence entry.

    Only direction, date and mail_type matter to the statistics engine;
    the descriptive fields mirror the register's entry forms and are
    carried through storage untouched.

    FIELDS:
    - direction: INCOMING or OUTGOING (decided by the file it is stored in)
    - date: Calendar date, None when missing or unparseable
    - mail_type: Incoming classification; None for outgoing records
    - chrono_number: Register sequence number
    - extra: Unknown stored keys, preserved on save
    """

    direction: Direction
    date: date | None = None
    mail_type: MailType | None = None
    chrono_number: str = ""
    subject: str = ""
    correspondent: str = ""
    address: str = ""
    service: str = ""
    writer: str = ""
    medium: MailMedium | None = None
    observations: str = ""
    document_link: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    STORED_KEYS: ClassVar[dict[str, str]] = {
        "chrono_number": "chronoNumber",
        "subject": "subject",
        "correspondent": "correspondent",
        "address": "address",
        "service": "service",
        "writer": "writer",
        "observations": "observations",
        "document_link": "documentLink",
    }

    @classmethod
    def create(
        cls,
        direction: Direction,
        record_date: date | None,
        mail_type: MailType | str | None = None,
        **fields: Any,
    ) -> MailRecord:
        """
        Factory method for records entered through the register service.

        Incoming records get their mail_type coerced (unknown values
        become OTHER); outgoing records never carry one.

        Args:
            direction: INCOMING or OUTGOING.
            record_date: Date the mail was received or sent.
            mail_type: Classification for incoming mail.
            **fields: Descriptive fields (subject, correspondent, ...).
                A 'medium' value is parsed into MailMedium.

        Returns:
            New MailRecord instance.

        Example:
            >>> r = MailRecord.create(Direction.OUTGOING, date(2024, 1, 10),
            ...                       mail_type="Technical", subject="Réponse")
            >>> r.mail_type is None
            True
        """
        if "medium" in fields:
            fields["medium"] = MailMedium.parse(fields["medium"])
        typed = MailType.coerce(mail_type) if direction is Direction.INCOMING else None
        return cls(direction=direction, date=record_date, mail_type=typed, **fields)

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize record to dictionary for JSON storage.

        Returns:
            Dict with camelCase keys. 'mailType' is only written for
            incoming records; unknown keys loaded earlier are written back.
        """
        data: dict[str, Any] = dict(self.extra)
        data["date"] = self.date.isoformat() if self.date else None
        for attr, key in self.STORED_KEYS.items():
            data[key] = getattr(self, attr)
        data["medium"] = self.medium.value if self.medium else ""
        if self.direction is Direction.INCOMING:
            data["mailType"] = self.mail_type.value if self.mail_type else None
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], direction: Direction) -> MailRecord:
        """
        Deserialize record from a stored dictionary.

        Never raises on malformed content: a bad date becomes None and an
        unrecognised mail type becomes OTHER. A mailType key stored on an
        outgoing record is kept in extra and ignored.

        Args:
            data: Dict as stored by to_dict() (or by older register versions).
            direction: Direction implied by the file the record came from.

        Returns:
            MailRecord instance.

        Example:
            >>> r = MailRecord.from_dict({'date': '2024-01-05', 'mailType': 'Financial'},
            ...                          Direction.INCOMING)
            >>> r.mail_type
            <MailType.FINANCIAL: 'Financial'>
        """
        known = {"date", "medium", *cls.STORED_KEYS.values()}
        if direction is Direction.INCOMING:
            known.add("mailType")
        raw_type = data.get("mailType") if direction is Direction.INCOMING else None

        values = {
            attr: str(data.get(key) or "") for attr, key in cls.STORED_KEYS.items()
        }
        return cls(
            direction=direction,
            date=parse_date(data.get("date")),
            mail_type=MailType.coerce(raw_type) if raw_type else None,
            medium=MailMedium.parse(data.get("medium")),
            extra={k: v for k, v in data.items() if k not in known},
            **values,
        )


@dataclass
class MonthlyStats:
    """
    Aggregate count bucket for one (year, month) pair.

    Built only by StatisticsEngine.aggregate and rebuilt from scratch on
    every run. by_type always contains all five MailType keys, so
    consumers can index it without missing-key checks.
    """

    year: int
    month: str
    incoming_count: int = 0
    outgoing_count: int = 0
    by_type: dict[MailType, int] = field(default_factory=empty_type_counts)

    def __post_init__(self) -> None:
        for mail_type in MailType:
            self.by_type.setdefault(mail_type, 0)

    @property
    def key(self) -> tuple[int, str]:
        """Uniqueness key (year, month label)."""
        return (self.year, self.month)

    @property
    def month_index(self) -> int:
        """Chronological month index, 0 = Janvier."""
        return Config.month_index(self.month)

    @property
    def total(self) -> int:
        """Incoming plus outgoing count."""
        return self.incoming_count + self.outgoing_count

    @property
    def typed_total(self) -> int:
        """Sum of the type breakdown (equals incoming_count)."""
        return sum(self.by_type.values())

    @property
    def label(self) -> str:
        """Display label such as 'Janvier 2024'."""
        return f"{self.month} {self.year}"

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON API output; by_type is keyed by MailType value."""
        return {
            "year": self.year,
            "month": self.month,
            "incoming_count": self.incoming_count,
            "outgoing_count": self.outgoing_count,
            "by_type": {t.value: self.by_type[t] for t in MailType},
        }


@dataclass
class YearTotals:
    """Counts for one calendar year, summed over its MonthlyStats buckets."""

    year: int
    incoming_count: int = 0
    outgoing_count: int = 0
    months: int = 0
    by_type: dict[MailType, int] = field(default_factory=empty_type_counts)

    @property
    def total(self) -> int:
        """Incoming plus outgoing count."""
        return self.incoming_count + self.outgoing_count

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON API output."""
        return {
            "year": self.year,
            "incoming_count": self.incoming_count,
            "outgoing_count": self.outgoing_count,
            "total": self.total,
            "months": self.months,
            "by_type": {t.value: self.by_type[t] for t in MailType},
        }
