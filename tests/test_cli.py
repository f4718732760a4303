"""Tests for CLI module."""

from __future__ import annotations

import argparse
import sys
from io import StringIO
from typing import TYPE_CHECKING
from unittest.mock import MagicMock, patch

import pytest

from mail_register.models import Direction, MailType
from mail_register.storage import RecordStoreError

if TYPE_CHECKING:
    from conftest import MockFileSystem

    from mail_register.storage import StorageManager


def _incoming_args(**overrides: str | None) -> argparse.Namespace:
    values: dict[str, str | None] = {
        "chrono_number": "A-10",
        "subject": "Demande de subvention",
        "correspondent": "Association des parents",
        "mail_type": "Administrative",
        "date": "2024-01-08",
        "address": "",
        "service": "",
        "medium": "",
        "observations": "",
        "document_link": "",
    }
    values.update(overrides)
    return argparse.Namespace(**values)


def _outgoing_args(**overrides: str | None) -> argparse.Namespace:
    values: dict[str, str | None] = {
        "chrono_number": "D-10",
        "subject": "Accusé de réception",
        "medium": "Email",
        "correspondent": "Association des parents",
        "service": "Secrétariat",
        "writer": "A. Martin",
        "date": "2024-01-09",
        "address": "",
        "observations": "",
        "document_link": "",
    }
    values.update(overrides)
    return argparse.Namespace(**values)


class TestCLIParsing:
    """Tests for CLI argument parsing."""

    def test_main_returns_int(self) -> None:
        """Verifies main() returns integer exit code for shell compatibility.

        Arrangement:
        1. Mock sys.argv with just the program name.
        2. Mock run_report to prevent actual execution.

        Assertion Strategy:
        Validates return is 0 and the default command is the report.
        """
        from mail_register.cli import main

        with (
            patch.object(sys, "argv", ["mail-register"]),
            patch("mail_register.cli.run_report") as mock_report,
        ):
            result = main()

        assert result == 0
        mock_report.assert_called_once_with()

    def test_version_flag(self) -> None:
        from mail_register.cli import main

        with (
            patch.object(sys, "argv", ["mail-register", "--version"]),
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 0

    def test_report_command_with_selection(self) -> None:
        from mail_register.cli import main

        argv = ["mail-register", "report", "--year", "2024", "--month", "Mars"]
        with (
            patch.object(sys, "argv", argv),
            patch("mail_register.cli.run_report") as mock_report,
        ):
            assert main() == 0

        mock_report.assert_called_once_with(year=2024, month="Mars")

    def test_dashboard_command(self) -> None:
        from mail_register.cli import main

        with (
            patch.object(sys, "argv", ["mail-register", "dashboard", "--port", "8080"]),
            patch("mail_register.cli.run_dashboard") as mock_dashboard,
        ):
            assert main() == 0

        mock_dashboard.assert_called_once_with(host="127.0.0.1", port=8080)

    def test_add_incoming_failure_exit_code(self) -> None:
        """A record that fails validation exits with code 1."""
        from mail_register.cli import main

        with (
            patch.object(sys, "argv", ["mail-register", "add-incoming", "--subject", "x"]),
            patch("mail_register.cli.run_add_incoming") as mock_add,
        ):
            mock_add.return_value = MagicMock(success=False)
            assert main() == 1

    def test_add_outgoing_success_exit_code(self) -> None:
        from mail_register.cli import main

        with (
            patch.object(sys, "argv", ["mail-register", "add-outgoing", "--medium", "Fax"]),
            patch("mail_register.cli.run_add_outgoing") as mock_add,
        ):
            mock_add.return_value = MagicMock(success=True)
            assert main() == 0

        assert mock_add.call_args.args[0].medium == "Fax"

    def test_invalid_mail_type_rejected_by_parser(self) -> None:
        from mail_register.cli import main

        with (
            patch.object(sys, "argv", ["mail-register", "add-incoming", "--mail-type", "Urgent"]),
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 2

    def test_export_charts_command(self) -> None:
        from mail_register.cli import main

        argv = ["mail-register", "export-charts", "--year", "2024", "--output-dir", "/out"]
        with (
            patch.object(sys, "argv", argv),
            patch("mail_register.cli.run_export_charts", return_value=["a", "b"]) as mock_export,
        ):
            assert main() == 0

        mock_export.assert_called_once_with(year=2024, month=None, output_dir="/out")

    def test_export_charts_without_matplotlib_exit_code(self) -> None:
        """Verifies a missing chart library ends with code 1 and a message.

        Arrangement:
        run_export_charts raises ImportError as it does when matplotlib
        is not installed.

        Assertion Strategy:
        main() returns 1 and the logged message names matplotlib.
        """
        from mail_register.cli import main

        with (
            patch.object(sys, "argv", ["mail-register", "export-charts"]),
            patch(
                "mail_register.cli.run_export_charts",
                side_effect=ImportError("No module named 'matplotlib'"),
            ),
            patch("mail_register.cli._log") as mock_log,
        ):
            assert main() == 1

        assert "matplotlib" in mock_log.call_args.args[0]

    def test_unreadable_register_exit_code(self) -> None:
        """Verifies a corrupt register exits with code 1 instead of a traceback.

        Business context:
        Scripts running the nightly report must see a failure rather
        than an all-zero report.
        """
        from mail_register.cli import main

        with (
            patch.object(sys, "argv", ["mail-register", "report"]),
            patch("mail_register.cli.run_report", side_effect=RecordStoreError("Invalid JSON")),
        ):
            assert main() == 1


class TestRunDashboard:
    """Tests for run_dashboard function."""

    def test_run_dashboard_calls_web_module(self) -> None:
        with patch("mail_register.web.run_dashboard") as mock_run:
            from mail_register.cli import run_dashboard

            run_dashboard()
            mock_run.assert_called_once_with(host="127.0.0.1", port=8000)


class TestRunReport:
    """Tests for run_report function."""

    def test_prints_report(self, sample_register: StorageManager) -> None:
        from mail_register.cli import run_report

        captured = StringIO()
        with patch.object(sys, "stdout", captured):
            run_report(storage=sample_register, year=2024, month="Janvier")

        output = captured.getvalue()
        assert "STATISTIQUES DES COURRIERS" in output
        assert "TYPES DE COURRIERS - Janvier 2024" in output

    def test_with_injected_engine(self) -> None:
        """Verifies run_report uses the injected storage and engine.

        Arrangement:
        Mock storage returning no records; mock engine with canned output.

        Assertion Strategy:
        Both directions are loaded and the canned report is printed.
        """
        from mail_register.cli import run_report

        mock_storage = MagicMock()
        mock_storage.load_records.return_value = []
        mock_engine = MagicMock()
        mock_engine.aggregate.return_value = []
        mock_engine.calculate_year_totals.return_value = {}
        mock_engine.generate_summary_report.return_value = "Test Report"

        captured = StringIO()
        with patch.object(sys, "stdout", captured):
            run_report(storage=mock_storage, engine=mock_engine)

        called = {c.args[0] for c in mock_storage.load_records.call_args_list}
        assert called == {Direction.INCOMING, Direction.OUTGOING}
        assert "Test Report" in captured.getvalue()

    def test_propagates_read_failure(self) -> None:
        from mail_register.cli import run_report

        mock_storage = MagicMock()
        mock_storage.load_records.side_effect = RecordStoreError("Invalid JSON")
        with pytest.raises(RecordStoreError):
            run_report(storage=mock_storage)


class TestRunAddRecords:
    """Tests for run_add_incoming / run_add_outgoing."""

    def test_add_incoming(self, storage: StorageManager) -> None:
        from mail_register.cli import run_add_incoming

        result = run_add_incoming(_incoming_args(observations="à traiter"), storage=storage)

        assert result.success is True
        record = storage.load_records(Direction.INCOMING)[0]
        assert record.mail_type is MailType.ADMINISTRATIVE
        assert record.observations == "à traiter"

    def test_add_incoming_without_date_uses_today(self, storage: StorageManager) -> None:
        from mail_register.cli import run_add_incoming

        result = run_add_incoming(_incoming_args(date=None), storage=storage)
        assert result.success is True

    def test_add_outgoing(self, storage: StorageManager) -> None:
        from mail_register.cli import run_add_outgoing

        result = run_add_outgoing(_outgoing_args(), storage=storage)

        assert result.success is True
        assert storage.load_records(Direction.OUTGOING)[0].writer == "A. Martin"

    def test_add_outgoing_missing_writer(self, storage: StorageManager) -> None:
        from mail_register.cli import run_add_outgoing

        result = run_add_outgoing(_outgoing_args(writer=""), storage=storage)

        assert result.success is False
        assert storage.load_records(Direction.OUTGOING) == []


class TestRunExportCharts:
    """Tests for run_export_charts."""

    def test_writes_both_charts(
        self, sample_register: StorageManager, mock_fs: MockFileSystem
    ) -> None:
        pytest.importorskip("matplotlib")
        from mail_register.cli import run_export_charts

        written = run_export_charts(storage=sample_register, year=2024, month="Mars")

        assert written == [
            "/register/charts/monthly_2024.png",
            "/register/charts/types_2024_Mars.png",
        ]
        for path in written:
            assert mock_fs.get_file(path).startswith(b"\x89PNG")

    def test_custom_output_dir_and_write_failure(
        self, sample_register: StorageManager, mock_fs: MockFileSystem
    ) -> None:
        pytest.importorskip("matplotlib")
        from mail_register.cli import run_export_charts

        mock_fs.set_read_only("/out/monthly_2023.png")
        written = run_export_charts(
            storage=sample_register, year=2023, month="Décembre", output_dir="/out"
        )

        assert written == ["/out/types_2023_Décembre.png"]
        assert mock_fs.is_dir("/out")
