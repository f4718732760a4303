"""
Mail Register.

PURPOSE: Track incoming/outgoing correspondence and derive periodic statistics.
AI CONTEXT: The statistics engine and view selectors are the core; everything
else (JSON store, register service, charts, dashboard, CLI) wraps them.

PACKAGE STRUCTURE:
- models.py: Data models (MailRecord, MonthlyStats, enums)
- storage.py: JSON file persistence for incoming/outgoing records
- register_service.py: Record saving with validation and recordSaved notification
- statistics.py: Monthly aggregation, yearly totals, text report
- presenters.py: View selectors and view models for tables and charts
- web/: FastAPI dashboard and JSON API
- config.py: Configuration constants

QUICK START:
    # Print the statistics report
    python -m mail_register report

    # Launch dashboard
    python -m mail_register dashboard
"""

from mail_register.__version__ import (
    __author__,
    __copyright__,
    __description__,
    __license__,
    __title__,
    __version__,
    __version_date__,
)

__all__ = [
    "__version__",
    "__version_date__",
    "__title__",
    "__description__",
    "__author__",
    "__license__",
    "__copyright__",
]
