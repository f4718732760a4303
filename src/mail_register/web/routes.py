"""
FastAPI routes for the Mail Register dashboard.

PURPOSE: Thin route handlers that delegate to presenters and the service.
AI CONTEXT: Routes should be simple - view logic lives in presenters.

ROUTE STRUCTURE:
- / : Statistics page (full HTML)
- /partials/statistics : htmx swap target for the year/month filter
- /charts/* : PNG chart images
- /api/* : JSON endpoints for programmatic access and record entry
"""

from __future__ import annotations

from html import escape
from typing import Annotated, Any
from urllib.parse import urlencode

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse, Response

from ..config import Config
from ..models import Direction, MailRecord
from ..presenters import (
    ChartPresenter,
    StatisticsOverview,
    StatisticsPresenter,
    available_months,
    available_years,
)
from ..register_service import RegisterService, ServiceResult
from ..statistics import StatisticsEngine
from ..storage import StorageManager

__all__ = [
    "router",
    "get_storage",
    "get_statistics",
    "get_statistics_presenter",
    "get_chart_presenter",
    "get_register_service",
]

router = APIRouter()

_PAGE_CSS = """
:root {
    --bg: #f8fafc;
    --surface: #ffffff;
    --border: #e2e8f0;
    --text: #0f172a;
    --text-muted: #64748b;
    --incoming: #3b82f6;
    --outgoing: #10b981;
}
* { box-sizing: border-box; margin: 0; padding: 0; }
body {
    font-family: system-ui, -apple-system, sans-serif;
    background: var(--bg);
    color: var(--text);
    line-height: 1.6;
    padding: 1rem;
}
.container { max-width: 1200px; margin: 0 auto; }
header {
    margin-bottom: 1.5rem;
    padding-bottom: 1rem;
    border-bottom: 1px solid var(--border);
}
h1 { font-size: 1.5rem; font-weight: 600; }
.filters { display: flex; gap: 1rem; margin-bottom: 1rem; }
.filters select { padding: 0.25rem 0.5rem; }
.grid {
    display: grid;
    grid-template-columns: repeat(auto-fit, minmax(320px, 1fr));
    gap: 1rem;
    margin-bottom: 1rem;
}
.panel {
    background: var(--surface);
    border: 1px solid var(--border);
    border-radius: 0.5rem;
    padding: 1rem;
}
.panel h2 {
    font-size: 1rem;
    font-weight: 500;
    color: var(--text-muted);
    margin-bottom: 0.75rem;
}
.metric { font-size: 2rem; font-weight: 700; }
.metric.incoming { color: var(--incoming); }
.metric.outgoing { color: var(--outgoing); }
.metric-label { font-size: 0.875rem; color: var(--text-muted); }
.no-data { color: var(--text-muted); font-style: italic; }
table { width: 100%; border-collapse: collapse; }
th, td { text-align: left; padding: 0.5rem; border-bottom: 1px solid var(--border); }
th { color: var(--text-muted); font-weight: 500; font-size: 0.875rem; }
.dot {
    display: inline-block;
    width: 0.75rem;
    height: 0.75rem;
    border-radius: 9999px;
    margin-right: 0.5rem;
}
.chart-container { display: flex; justify-content: center; }
.chart-container img { max-width: 100%; height: auto; }
"""

# =============================================================================
# Dependency Factory Functions
# =============================================================================


def get_storage() -> StorageManager:
    """
    Create a StorageManager for the configured register directory.

    A new instance per request means every page load reads the record
    files from disk, so records saved by the CLI show up immediately.

    Returns:
        StorageManager using Config.get_storage_dir().
    """
    return StorageManager()


def get_statistics() -> StatisticsEngine:
    """Create the (stateless) statistics engine."""
    return StatisticsEngine()


def get_statistics_presenter(
    storage: Annotated[StorageManager, Depends(get_storage)],
    statistics: Annotated[StatisticsEngine, Depends(get_statistics)],
) -> StatisticsPresenter:
    """
    Create a StatisticsPresenter wired to the request's store.

    Args:
        storage: Record store injected via FastAPI Depends.
        statistics: Statistics engine injected via FastAPI Depends.

    Returns:
        StatisticsPresenter with an empty aggregate cache.
    """
    return StatisticsPresenter(storage, statistics)


def get_chart_presenter(
    storage: Annotated[StorageManager, Depends(get_storage)],
    statistics: Annotated[StatisticsEngine, Depends(get_statistics)],
) -> ChartPresenter:
    """Create a ChartPresenter wired to the request's store."""
    return ChartPresenter(storage, statistics)


def get_register_service(
    storage: Annotated[StorageManager, Depends(get_storage)],
) -> RegisterService:
    """Create the register service that validates and saves new records."""
    return RegisterService(storage=storage)


# =============================================================================
# HTML Routes
# =============================================================================


@router.get("/", response_class=HTMLResponse)
async def statistics_page(
    presenter: Annotated[StatisticsPresenter, Depends(get_statistics_presenter)],
    year: int | None = None,
    month: str | None = None,
) -> HTMLResponse:
    """
    Render the statistics page.

    Business context: This is the page the office opens to see its mail
    volume. Without query parameters it shows the most recent year and
    the last month with data.

    Args:
        presenter: StatisticsPresenter injected via FastAPI Depends.
        year: Optional selected year.
        month: Optional selected month label (e.g. 'Mars').

    Returns:
        Complete HTML page with filters, summary, charts and tables.

    Raises:
        RecordStoreError: Mapped to 503 by the application.
    """
    overview = presenter.get_overview(year=year, month=month)
    html = _render_page(overview)
    return HTMLResponse(content=html, media_type="text/html; charset=utf-8")


@router.get("/partials/statistics", response_class=HTMLResponse)
async def statistics_partial(
    presenter: Annotated[StatisticsPresenter, Depends(get_statistics_presenter)],
    year: int | None = None,
    month: str | None = None,
) -> HTMLResponse:
    """
    Render the statistics panel for htmx swaps.

    Called by the filter form whenever the year or month changes. The
    panel includes the filter form itself so the month list follows the
    new selection.
    """
    overview = presenter.get_overview(year=year, month=month)
    html = _render_statistics_panel(overview)
    return HTMLResponse(content=html, media_type="text/html; charset=utf-8")


# ============================================================================
# Chart Routes (PNG images)
# ============================================================================


@router.get("/charts/monthly.png")
async def monthly_chart(
    presenter: Annotated[ChartPresenter, Depends(get_chart_presenter)],
    year: int | None = None,
) -> Response:
    """
    Serve the monthly incoming/outgoing bar chart of a year as PNG.

    Returns:
        Response with either:
        - PNG image bytes (media_type="image/png") when matplotlib available
        - SVG placeholder (media_type="image/svg+xml") as fallback
    """
    try:
        png_bytes = presenter.render_monthly_chart(year)
        return Response(content=png_bytes, media_type="image/png")
    except ImportError:
        # matplotlib not installed - return placeholder
        return Response(
            content=_placeholder_chart_svg("Monthly"),
            media_type="image/svg+xml",
        )


@router.get("/charts/types.png")
async def types_chart(
    presenter: Annotated[ChartPresenter, Depends(get_chart_presenter)],
    year: int | None = None,
    month: str | None = None,
) -> Response:
    """
    Serve the mail type pie chart of one month as PNG.

    Returns:
        Response with PNG bytes, or an SVG placeholder when matplotlib
        is not installed.
    """
    try:
        png_bytes = presenter.render_types_chart(year, month)
        return Response(content=png_bytes, media_type="image/png")
    except ImportError:
        return Response(
            content=_placeholder_chart_svg("Types"),
            media_type="image/svg+xml",
        )


# ============================================================================
# API Routes (JSON)
# ============================================================================


@router.get("/api/statistics")
async def api_statistics(
    presenter: Annotated[StatisticsPresenter, Depends(get_statistics_presenter)],
    year: int | None = None,
    month: str | None = None,
) -> dict[str, Any]:
    """
    Get every statistics view for a selection as JSON.

    Returns:
        Dict with 'selection', 'years', 'months', 'summary',
        'bar_series', 'pie_series', 'detail' and 'year_totals'.

    Example:
        >>> # GET /api/statistics?year=2024&month=Janvier
        >>> {"selection": {"year": 2024, "month": "Janvier"},
        ...  "detail": {"rows": [...], "total": 2}, ...}
    """
    return presenter.get_overview(year=year, month=month).to_dict()


@router.get("/api/years")
async def api_years(
    presenter: Annotated[StatisticsPresenter, Depends(get_statistics_presenter)],
) -> dict[str, list[int]]:
    """List years with data, most recent first."""
    return {"years": available_years(presenter.monthly_stats())}


@router.get("/api/months")
async def api_months(
    presenter: Annotated[StatisticsPresenter, Depends(get_statistics_presenter)],
    year: int | None = None,
) -> dict[str, list[str]]:
    """
    List month labels with data, in calendar order.

    Without a year every month used in any year is listed. With a year
    the list is restricted to that year.
    """
    return {"months": available_months(presenter.monthly_stats(), year=year)}


@router.get("/api/report")
async def api_report(
    presenter: Annotated[StatisticsPresenter, Depends(get_statistics_presenter)],
    year: int | None = None,
    month: str | None = None,
) -> dict[str, str]:
    """Get the text report (same as the CLI 'report' command) as JSON."""
    overview = presenter.get_overview(year=year, month=month)
    return {"report": overview.report_text}


@router.post("/api/records/{direction}", status_code=201)
async def api_add_record(
    direction: str,
    service: Annotated[RegisterService, Depends(get_register_service)],
    payload: Annotated[dict[str, Any], Body()],
) -> JSONResponse:
    """
    Validate and save a new incoming or outgoing record.

    Args:
        direction: 'incoming' or 'outgoing'.
        service: RegisterService injected via FastAPI Depends.
        payload: Record fields in snake_case, plus an optional ISO 'date'
            (defaults to today).

    Returns:
        201 with the stored record on success, 400 with the validation
        error otherwise. Keys other than the stored record fields and
        'date' are a 400.

    Raises:
        HTTPException: 404 for an unknown direction.

    Example:
        >>> # POST /api/records/outgoing
        >>> # {"chrono_number": "D-001", "subject": "Réponse", "medium": "Email",
        >>> #  "correspondent": "Mairie", "service": "Courrier", "writer": "A. Martin"}
    """
    try:
        parsed = Direction(direction)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown direction: {direction}") from None

    allowed = {"date", "medium", *MailRecord.STORED_KEYS}
    if parsed is Direction.INCOMING:
        allowed.add("mail_type")
    unknown = sorted(set(payload) - allowed)
    if unknown:
        result = ServiceResult(
            success=False,
            message="Unknown fields",
            error=f"Unknown fields: {', '.join(unknown)}",
        )
        return JSONResponse(status_code=400, content=result.to_dict())

    fields = {key: "" if value is None else str(value) for key, value in payload.items()}
    record_date = fields.pop("date", None) or None
    if parsed is Direction.INCOMING:
        result = service.record_incoming(
            chrono_number=fields.pop("chrono_number", ""),
            subject=fields.pop("subject", ""),
            correspondent=fields.pop("correspondent", ""),
            mail_type=fields.pop("mail_type", ""),
            record_date=record_date,
            **fields,
        )
    else:
        result = service.record_outgoing(
            chrono_number=fields.pop("chrono_number", ""),
            subject=fields.pop("subject", ""),
            medium=fields.pop("medium", ""),
            correspondent=fields.pop("correspondent", ""),
            service=fields.pop("service", ""),
            writer=fields.pop("writer", ""),
            record_date=record_date,
            **fields,
        )

    return JSONResponse(status_code=201 if result.success else 400, content=result.to_dict())


# ============================================================================
# Template Rendering Helpers
# ============================================================================


def _placeholder_chart_svg(title: str) -> bytes:
    """
    Generate a placeholder SVG when matplotlib is unavailable.

    Example:
        >>> b'Types Chart' in _placeholder_chart_svg('Types')
        True
    """
    svg = f"""<svg xmlns="http://www.w3.org/2000/svg" width="400" height="200">
        <rect width="100%" height="100%" fill="#f1f5f9"/>
        <text x="50%" y="50%" text-anchor="middle" fill="#64748b" font-size="16">
            {title} Chart (install matplotlib)
        </text>
    </svg>"""
    return svg.encode("utf-8")


def _render_page(overview: StatisticsOverview) -> str:
    """
    Render the complete statistics page.

    Args:
        overview: StatisticsOverview for the current selection.

    Returns:
        Complete HTML document with htmx loaded and the statistics panel
        rendered inline for the first paint.
    """
    return f"""<!DOCTYPE html>
<html lang="fr">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Registre du Courrier - Statistiques</title>
    <script src="https://unpkg.com/htmx.org@1.9.10"></script>
    <style>
        {_PAGE_CSS}
    </style>
</head>
<body>
    <div class="container">
        <header>
            <h1>Statistiques des Courriers</h1>
        </header>
        <div id="statistics">
            {_render_statistics_panel(overview)}
        </div>
    </div>
</body>
</html>"""


def _render_statistics_panel(overview: StatisticsOverview) -> str:
    """Render filters, summary card, charts, detail table and yearly totals."""
    selection = overview.selection
    monthly_src = "/charts/monthly.png?" + urlencode({"year": selection.year})
    types_src = "/charts/types.png?" + urlencode(
        {"year": selection.year, "month": selection.month}
    )
    no_data = f'<p class="no-data">{escape(Config.NO_DATA_MESSAGE)}</p>'

    bar_html = (
        f'<div class="chart-container"><img src="{escape(monthly_src)}" '
        f'alt="Évolution mensuelle {selection.year}"></div>'
        if overview.has_bar_data
        else no_data
    )
    pie_html = (
        f'<div class="chart-container"><img src="{escape(types_src)}" '
        f'alt="Types de courriers {escape(selection.label)}"></div>'
        if overview.has_pie_data
        else no_data
    )

    return f"""
        {_render_filter_form(overview)}
        <div class="grid">
            <div class="panel" id="summary-panel">
                <h2>Résumé - {escape(selection.label)}</h2>
                {_render_summary_card(overview)}
            </div>
            <div class="panel" id="year-totals-panel">
                <h2>Totaux annuels</h2>
                {_render_year_totals(overview)}
            </div>
        </div>
        <div class="panel" id="monthly-chart-panel" style="margin-bottom: 1rem;">
            <h2>Évolution mensuelle {selection.year}</h2>
            {bar_html}
        </div>
        <div class="grid">
            <div class="panel" id="types-chart-panel">
                <h2>Types de courriers - {escape(selection.label)}</h2>
                {pie_html}
            </div>
            <div class="panel" id="detail-panel">
                <h2>Détail par type</h2>
                {_render_detail_table(overview)}
            </div>
        </div>"""


def _render_filter_form(overview: StatisticsOverview) -> str:
    """Render the year/month selects; any change swaps #statistics."""
    selection = overview.selection
    years = overview.years or [selection.year]
    months = overview.months or [selection.month]

    year_options = "".join(
        f'<option value="{y}"{" selected" if y == selection.year else ""}>{y}</option>'
        for y in years
    )
    month_options = "".join(
        f'<option value="{escape(m)}"{" selected" if m == selection.month else ""}>'
        f"{escape(m)}</option>"
        for m in months
    )
    return f"""
        <form class="filters"
              hx-get="/partials/statistics"
              hx-target="#statistics"
              hx-trigger="change"
              hx-swap="innerHTML">
            <label>Année <select name="year">{year_options}</select></label>
            <label>Mois <select name="month">{month_options}</select></label>
        </form>"""


def _render_summary_card(overview: StatisticsOverview) -> str:
    """Render incoming/outgoing/total counts, or the no-data message."""
    summary = overview.summary
    if not summary.has_data:
        return f'<p class="no-data">{escape(Config.NO_DATA_MESSAGE)}</p>'
    return f"""
        <div class="grid">
            <div>
                <div class="metric incoming">{summary.incoming}</div>
                <div class="metric-label">{escape(Config.INCOMING_LABEL)}</div>
            </div>
            <div>
                <div class="metric outgoing">{summary.outgoing}</div>
                <div class="metric-label">{escape(Config.OUTGOING_LABEL)}</div>
            </div>
            <div>
                <div class="metric">{summary.total}</div>
                <div class="metric-label">Total</div>
            </div>
        </div>"""


def _render_detail_table(overview: StatisticsOverview) -> str:
    """Render the per-type rows with colour dots and the total row."""
    detail = overview.detail
    if not detail.has_data:
        return f'<p class="no-data">{escape(Config.NO_DATA_MESSAGE)}</p>'

    rows = "".join(
        f"<tr><td><span class=\"dot\" style=\"background: {row.color}\"></span>"
        f"{escape(row.label)}</td><td>{row.count}</td></tr>"
        for row in detail.rows
    )
    return f"""
        <table>
            <thead><tr><th>Type</th><th>Nombre</th></tr></thead>
            <tbody>
                {rows}
                <tr><th>Total</th><th>{detail.total}</th></tr>
            </tbody>
        </table>"""


def _render_year_totals(overview: StatisticsOverview) -> str:
    """Render one row per year with incoming, outgoing and total counts."""
    if not overview.year_totals:
        return f'<p class="no-data">{escape(Config.NO_DATA_MESSAGE)}</p>'

    rows = "".join(
        f"<tr><td>{t.year}</td><td>{t.incoming_count}</td>"
        f"<td>{t.outgoing_count}</td><td>{t.total}</td></tr>"
        for t in overview.year_totals
    )
    return f"""
        <table>
            <thead><tr><th>Année</th><th>Entrants</th><th>Départs</th><th>Total</th></tr></thead>
            <tbody>{rows}</tbody>
        </table>"""
