"""
CLI entry point for Mail Register.

PURPOSE: Command-line interface for reports, record entry and the dashboard.
AI CONTEXT: Main entry points for package execution.

USAGE:
    # Print the statistics report (default)
    python -m mail_register

    # Or via CLI command (after install)
    mail-register

    # Run with subcommands
    mail-register report --year 2024 --month Mars
    mail-register dashboard --port 8080
    mail-register add-incoming --chrono-number A-001 --subject Devis ...
    mail-register add-outgoing --chrono-number D-001 --medium Email ...
    mail-register export-charts --output-dir ./charts
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from functools import lru_cache
from typing import TYPE_CHECKING

from .config import Config
from .models import MailMedium, MailType
from .storage import RecordStoreError

if TYPE_CHECKING:
    from .register_service import ServiceResult
    from .statistics import StatisticsEngine
    from .storage import StorageManager

# Constants
PROG_NAME = "mail-register"
DEFAULT_HOST = Config.DEFAULT_HOST
DEFAULT_PORT = Config.DEFAULT_PORT


@lru_cache(maxsize=1)
def _get_logger() -> logging.Logger:
    """Get module logger (cached for thread safety)."""
    logging.basicConfig(level=logging.INFO)
    return logging.getLogger(__name__)


def _log(message: str, *, emoji: str = "") -> None:
    """Log message with optional emoji prefix for CLI output.

    Args:
        message: The message to log.
        emoji: Optional emoji prefix for visual CLI feedback.
    """
    prefix = f"{emoji} " if emoji else ""
    _get_logger().info(f"{prefix}{message}")


def run_dashboard(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """
    Launch the web dashboard.

    Args:
        host: Network interface to bind to.
        port: TCP port for the HTTP server.

    Returns:
        None. Blocks until server shutdown (Ctrl+C).

    Raises:
        OSError: If port is already in use.

    Example:
        >>> # mail-register dashboard --port 3000
        >>> run_dashboard(port=3000)
        🚀 Starting dashboard at http://127.0.0.1:3000
    """
    from .web import run_dashboard as start_web

    _log(f"Starting dashboard at http://{host}:{port}", emoji="🚀")
    _log("Press Ctrl+C to stop")
    start_web(host=host, port=port)


def run_report(
    storage: StorageManager | None = None,
    engine: StatisticsEngine | None = None,
    year: int | None = None,
    month: str | None = None,
) -> None:
    """
    Print the text statistics report to stdout.

    Business context: A quick terminal view of the register's monthly
    volume, suitable for piping into a file or an email.

    Args:
        storage: Optional StorageManager for testability.
        engine: Optional StatisticsEngine for testability.
        year: Selected year. Defaults to the most recent year with data.
        month: Selected month label. Defaults to the last month with data.

    Returns:
        None. Report is printed to stdout.

    Raises:
        RecordStoreError: If a record file cannot be read.

    Example:
        >>> # mail-register report --year 2024 --month Janvier > janvier.txt
        >>> run_report(year=2024, month="Janvier")
        ==================================================
        STATISTIQUES DES COURRIERS
        ...
    """
    from .presenters import StatisticsPresenter
    from .statistics import StatisticsEngine as StatsEngine
    from .storage import StorageManager as StorageMgr

    presenter = StatisticsPresenter(storage or StorageMgr(), engine or StatsEngine())
    overview = presenter.get_overview(year=year, month=month)
    # Note: Using print() intentionally for stdout piping support
    print(overview.report_text)


def _optional_fields(args: argparse.Namespace, names: tuple[str, ...]) -> dict[str, str]:
    """Collect non-empty optional record fields from parsed arguments."""
    return {name: getattr(args, name) for name in names if getattr(args, name, "")}


def run_add_incoming(
    args: argparse.Namespace,
    storage: StorageManager | None = None,
) -> ServiceResult:
    """
    Save an incoming record from parsed add-incoming arguments.

    Args:
        args: Namespace from the add-incoming subparser.
        storage: Optional StorageManager for testability.

    Returns:
        ServiceResult from RegisterService.record_incoming().
    """
    from .register_service import RegisterService

    service = RegisterService(storage=storage)
    result = service.record_incoming(
        chrono_number=args.chrono_number,
        subject=args.subject,
        correspondent=args.correspondent,
        mail_type=args.mail_type,
        record_date=args.date,
        **_optional_fields(
            args, ("address", "service", "medium", "observations", "document_link")
        ),
    )
    _report_result(result)
    return result


def run_add_outgoing(
    args: argparse.Namespace,
    storage: StorageManager | None = None,
) -> ServiceResult:
    """
    Save an outgoing record from parsed add-outgoing arguments.

    Args:
        args: Namespace from the add-outgoing subparser.
        storage: Optional StorageManager for testability.

    Returns:
        ServiceResult from RegisterService.record_outgoing().
    """
    from .register_service import RegisterService

    service = RegisterService(storage=storage)
    result = service.record_outgoing(
        chrono_number=args.chrono_number,
        subject=args.subject,
        medium=args.medium,
        correspondent=args.correspondent,
        service=args.service,
        writer=args.writer,
        record_date=args.date,
        **_optional_fields(args, ("address", "observations", "document_link")),
    )
    _report_result(result)
    return result


def _report_result(result: ServiceResult) -> None:
    """Log a service result with a success or failure marker."""
    if result.success:
        _log(result.message, emoji="✅")
    else:
        _log(f"{result.message}: {result.error}", emoji="⚠️")


def run_export_charts(
    storage: StorageManager | None = None,
    engine: StatisticsEngine | None = None,
    year: int | None = None,
    month: str | None = None,
    output_dir: str | None = None,
) -> list[str]:
    """
    Render the monthly and type charts to PNG files.

    Business context: Charts are pasted into the office's monthly
    activity report, so they can be exported without the dashboard.

    Args:
        storage: Optional StorageManager for testability.
        engine: Optional StatisticsEngine for testability.
        year: Selected year. Defaults to the most recent year with data.
        month: Selected month label for the type chart.
        output_dir: Target directory. Defaults to the storage charts dir.

    Returns:
        Paths of the written files (empty if a write failed).

    Raises:
        RecordStoreError: If a record file cannot be read.
        ImportError: If matplotlib is not installed.
    """
    from .presenters import ChartPresenter, StatisticsPresenter
    from .statistics import StatisticsEngine as StatsEngine
    from .storage import StorageManager as StorageMgr

    storage = storage or StorageMgr()
    engine = engine or StatsEngine()
    selection = StatisticsPresenter(storage, engine).resolve_selection(year, month)
    charts = ChartPresenter(storage, engine)
    target = output_dir or storage.charts_dir
    fs = storage.filesystem
    fs.makedirs(target, exist_ok=True)

    images = {
        f"monthly_{selection.year}.png": charts.render_monthly_chart(selection.year),
        f"types_{selection.year}_{selection.month}.png": charts.render_types_chart(
            selection.year, selection.month
        ),
    }
    written: list[str] = []
    for name, content in images.items():
        path = os.path.join(target, name)
        try:
            fs.write_bytes(path, content)
        except OSError as e:
            _log(f"Failed to write {path}: {e}", emoji="⚠️")
            continue
        _log(f"Wrote {path}", emoji="📊")
        written.append(path)
    return written


def _add_common_record_arguments(parser: argparse.ArgumentParser) -> None:
    """Arguments shared by add-incoming and add-outgoing."""
    parser.add_argument("--chrono-number", default="", help="Register sequence number")
    parser.add_argument("--subject", default="", help="Subject of the mail")
    parser.add_argument("--correspondent", default="", help="Sender or recipient")
    parser.add_argument("--date", default=None, help="ISO date (default: today)")
    parser.add_argument("--address", default="", help="Correspondent address")
    parser.add_argument("--observations", default="", help="Free-text notes")
    parser.add_argument("--document-link", default="", help="Link to the scanned document")


def main() -> int:
    """
    Main CLI entry point for Mail Register.

    Subcommands:
    - report [--year YEAR] [--month MONTH]: Print statistics report (default)
    - dashboard [--host HOST] [--port PORT]: Launch web dashboard
    - add-incoming: Save an incoming record
    - add-outgoing: Save an outgoing record
    - export-charts [--year] [--month] [--output-dir]: Write chart PNGs

    Returns:
        Exit code 0 for success, 1 when a record could not be saved or
        the register could not be read.

    Raises:
        SystemExit: On --help or argument parsing errors.

    Example:
        >>> # mail-register report --year 2024
        >>> sys.exit(main())
    """
    from .__version__ import __version__

    parser = argparse.ArgumentParser(
        prog=PROG_NAME,
        description="Mail Register - monthly statistics for incoming and outgoing mail",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Report command
    report_parser = subparsers.add_parser(
        "report",
        help="Print statistics report to stdout",
    )
    report_parser.add_argument("--year", type=int, default=None, help="Selected year")
    report_parser.add_argument("--month", default=None, help="Selected month (e.g. Mars)")

    # Dashboard command
    dashboard_parser = subparsers.add_parser(
        "dashboard",
        help="Launch web dashboard",
    )
    dashboard_parser.add_argument(
        "--host",
        default=DEFAULT_HOST,
        help=f"Bind address (default: {DEFAULT_HOST})",
    )
    dashboard_parser.add_argument(
        "--port",
        type=int,
        default=DEFAULT_PORT,
        help=f"Port number (default: {DEFAULT_PORT})",
    )

    # Record entry commands
    incoming_parser = subparsers.add_parser("add-incoming", help="Save an incoming record")
    _add_common_record_arguments(incoming_parser)
    incoming_parser.add_argument(
        "--mail-type",
        default="",
        choices=[t.value for t in MailType],
        help="Mail classification",
    )
    incoming_parser.add_argument("--service", default="", help="Receiving service")
    incoming_parser.add_argument(
        "--medium", default="", choices=[m.value for m in MailMedium], help="Medium"
    )

    outgoing_parser = subparsers.add_parser("add-outgoing", help="Save an outgoing record")
    _add_common_record_arguments(outgoing_parser)
    outgoing_parser.add_argument(
        "--medium", default="", choices=[m.value for m in MailMedium], help="Medium"
    )
    outgoing_parser.add_argument("--service", default="", help="Issuing service")
    outgoing_parser.add_argument("--writer", default="", help="Author of the mail")

    # Export command
    export_parser = subparsers.add_parser("export-charts", help="Write chart PNG files")
    export_parser.add_argument("--year", type=int, default=None, help="Selected year")
    export_parser.add_argument("--month", default=None, help="Selected month (e.g. Mars)")
    export_parser.add_argument(
        "--output-dir", default=None, help="Target directory (default: storage charts dir)"
    )

    args = parser.parse_args()

    try:
        if args.command == "dashboard":
            run_dashboard(host=args.host, port=args.port)
        elif args.command == "add-incoming":
            return 0 if run_add_incoming(args).success else 1
        elif args.command == "add-outgoing":
            return 0 if run_add_outgoing(args).success else 1
        elif args.command == "export-charts":
            try:
                written = run_export_charts(
                    year=args.year, month=args.month, output_dir=args.output_dir
                )
            except ImportError as e:
                _log(f"matplotlib is required to export charts: {e}", emoji="⚠️")
                return 1
            return 0 if len(written) == 2 else 1
        elif args.command == "report":
            run_report(year=args.year, month=args.month)
        else:
            # Default: report for the default selection
            run_report()
    except RecordStoreError as e:
        _log(f"Cannot read the register: {e}", emoji="⚠️")
        return 1

    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
