"""
Web dashboard module for Mail Register.

PURPOSE: FastAPI-based statistics page with htmx filter updates.
AI CONTEXT: Routes are thin; all view logic lives in presenters.py.

FEATURES:
- Year/month filter that swaps the statistics panel via htmx
- Server-side chart rendering (matplotlib)
- JSON API for statistics, filter choices and record entry

USAGE:
    # Via CLI
    mail-register dashboard

    # Programmatically
    from mail_register.web import create_app
    app = create_app()
"""

from .app import create_app, run_dashboard

__all__ = ["create_app", "run_dashboard"]
