"""Tests for register_service module."""

from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock

import pytest
from conftest import STORAGE_DIR, MockFileSystem

from mail_register.models import Direction, MailMedium, MailType
from mail_register.register_service import RegisterService, ServiceResult
from mail_register.storage import RecordStoreError, StorageManager

OUTGOING_FIELDS = {
    "chrono_number": "D-2024-001",
    "subject": "Réponse à la demande de devis",
    "medium": "Email",
    "correspondent": "Mairie de Lyon",
    "service": "Services techniques",
    "writer": "A. Martin",
}

INCOMING_FIELDS = {
    "chrono_number": "A-2024-001",
    "subject": "Demande de devis",
    "correspondent": "Mairie de Lyon",
    "mail_type": "Technical",
}


@pytest.fixture
def service(storage: StorageManager) -> RegisterService:
    """RegisterService backed by the mock-filesystem store."""
    return RegisterService(storage=storage)


class TestServiceResult:
    """Tests for ServiceResult serialization."""

    def test_to_dict_omits_none(self) -> None:
        assert ServiceResult(success=True, message="Saved").to_dict() == {
            "success": True,
            "message": "Saved",
        }

    def test_to_dict_includes_error_and_data(self) -> None:
        result = ServiceResult(success=False, message="No", data={"a": 1}, error="boom")
        assert result.to_dict() == {
            "success": False,
            "message": "No",
            "data": {"a": 1},
            "error": "boom",
        }


class TestRecordIncoming:
    """Tests for RegisterService.record_incoming."""

    def test_saves_record(self, service: RegisterService, storage: StorageManager) -> None:
        """Verifies a valid incoming record is persisted.

        Arrangement:
        Valid required fields plus an explicit date.

        Assertion Strategy:
        Result succeeds, carries the stored dict, and the store holds
        exactly one typed record.
        """
        result = service.record_incoming(**INCOMING_FIELDS, record_date=date(2024, 1, 5))

        assert result.success is True
        assert result.message == "Incoming record saved"
        assert result.data is not None
        assert result.data["mailType"] == "Technical"
        records = storage.load_records(Direction.INCOMING)
        assert len(records) == 1
        assert records[0].mail_type is MailType.TECHNICAL
        assert records[0].date == date(2024, 1, 5)

    def test_accepts_enum_type(self, service: RegisterService) -> None:
        fields = {**INCOMING_FIELDS, "mail_type": MailType.FINANCIAL}
        result = service.record_incoming(**fields, record_date="2024-02-01")
        assert result.success is True
        assert result.data["mailType"] == "Financial"

    def test_defaults_to_today(self, service: RegisterService) -> None:
        result = service.record_incoming(**INCOMING_FIELDS)
        assert result.data["date"] == date.today().isoformat()

    def test_optional_fields(self, service: RegisterService, storage: StorageManager) -> None:
        service.record_incoming(
            **INCOMING_FIELDS,
            record_date="2024-01-05",
            address="1 place de la Comédie",
            observations="urgent",
            medium="Mail",
        )
        record = storage.load_records(Direction.INCOMING)[0]
        assert record.address == "1 place de la Comédie"
        assert record.medium is MailMedium.MAIL

    @pytest.mark.parametrize("missing", ["chrono_number", "subject", "correspondent", "mail_type"])
    def test_required_fields(self, service: RegisterService, missing: str) -> None:
        fields = {**INCOMING_FIELDS, missing: "  "}
        result = service.record_incoming(**fields)
        assert result.success is False
        assert result.message == "Missing required fields"
        assert missing in result.error

    def test_rejects_unknown_type(self, service: RegisterService, storage: StorageManager) -> None:
        result = service.record_incoming(**{**INCOMING_FIELDS, "mail_type": "Urgent"})
        assert result.success is False
        assert result.message == "Invalid mail type"
        assert storage.load_records(Direction.INCOMING) == []

    def test_rejects_bad_date(self, service: RegisterService) -> None:
        result = service.record_incoming(**INCOMING_FIELDS, record_date="31/01/2024")
        assert result.success is False
        assert result.message == "Invalid date"

    def test_rejects_unknown_fields(self, service: RegisterService) -> None:
        result = service.record_incoming(**INCOMING_FIELDS, priority="high")
        assert result.success is False
        assert "priority" in result.error

    @pytest.mark.parametrize("name", ["direction", "fields"])
    def test_unknown_field_named_like_internal_parameter(
        self, service: RegisterService, storage: StorageManager, name: str
    ) -> None:
        """Extra keys matching internal parameter names fail validation, not the call."""
        result = service.record_incoming(**INCOMING_FIELDS, **{name: "x"})

        assert result.success is False
        assert result.message == "Unknown fields"
        assert name in result.error
        assert storage.load_records(Direction.INCOMING) == []


class TestRecordOutgoing:
    """Tests for RegisterService.record_outgoing."""

    def test_saves_record(self, service: RegisterService, storage: StorageManager) -> None:
        result = service.record_outgoing(**OUTGOING_FIELDS, record_date="2024-01-10")

        assert result.success is True
        assert result.message == "Outgoing record saved"
        assert "mailType" not in result.data
        records = storage.load_records(Direction.OUTGOING)
        assert len(records) == 1
        assert records[0].medium is MailMedium.EMAIL
        assert records[0].writer == "A. Martin"
        assert records[0].mail_type is None

    @pytest.mark.parametrize(
        "missing",
        ["chrono_number", "subject", "medium", "correspondent", "service", "writer"],
    )
    def test_required_fields(self, service: RegisterService, missing: str) -> None:
        """Every field of the outgoing form is mandatory."""
        result = service.record_outgoing(**{**OUTGOING_FIELDS, missing: ""})
        assert result.success is False
        assert missing in result.error

    def test_rejects_unknown_medium(self, service: RegisterService) -> None:
        result = service.record_outgoing(**{**OUTGOING_FIELDS, "medium": "Pigeon"})
        assert result.success is False
        assert result.message == "Invalid medium"


class TestRecordSaved:
    """Tests for the record_saved notification."""

    def test_listeners_called_after_save(self, service: RegisterService) -> None:
        listener = MagicMock()
        service.subscribe(listener)
        service.record_outgoing(**OUTGOING_FIELDS)
        listener.assert_called_once_with()

    def test_listeners_not_called_on_validation_failure(self, service: RegisterService) -> None:
        listener = MagicMock()
        service.subscribe(listener)
        service.record_outgoing(**{**OUTGOING_FIELDS, "writer": ""})
        listener.assert_not_called()

    def test_listeners_not_called_on_write_failure(self, mock_fs: MockFileSystem) -> None:
        storage = StorageManager(storage_dir=STORAGE_DIR, filesystem=mock_fs)
        mock_fs.set_read_only(storage.outgoing_file)
        service = RegisterService(storage=storage)
        listener = MagicMock()
        service.subscribe(listener)

        result = service.record_outgoing(**OUTGOING_FIELDS)

        assert result.success is False
        assert result.error == "Record store write failed"
        listener.assert_not_called()


class TestStoreFailure:
    """Tests for unreadable registers."""

    def test_read_failure_is_reported(self) -> None:
        """A store that cannot read its file yields a failed result."""
        store = MagicMock()
        store.add_record.side_effect = RecordStoreError("Invalid JSON in incomingMails.json")
        service = RegisterService(storage=store)

        result = service.record_incoming(**INCOMING_FIELDS)

        assert result.success is False
        assert result.message == "Failed to save incoming record"
        assert "Invalid JSON" in result.error
