"""
Presenters for Mail Register statistics.

PURPOSE: Testable view-selection layer between aggregated data and UI.
AI CONTEXT: Pure data transformation - no rendering except ChartPresenter PNGs.

DESIGN PRINCIPLES:
1. View selectors are module-level pure functions over MonthlyStats lists
2. Presenters load records, aggregate, and assemble view models
3. Empty selections yield empty views, never exceptions
4. No dependencies on a specific UI framework

VIEWS:
- available_years / available_months: Filter choices
- bar_series: Monthly incoming/outgoing rows for a year
- pie_series: Type slices for one month (zero counts omitted)
- detail_rows: Type rows plus total for one month

USAGE:
    presenter = StatisticsPresenter(storage, statistics)
    overview = presenter.get_overview(year=2024, month="Mars")
    # overview is a dataclass ready for template rendering
"""

from __future__ import annotations

import io
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Any

from .config import Config
from .models import Direction, MailType, MonthlyStats, YearTotals

if TYPE_CHECKING:
    from .statistics import StatisticsEngine
    from .storage import RecordStore

__all__ = [
    "Selection",
    "BarRow",
    "PieSlice",
    "DetailRow",
    "DetailView",
    "MonthSummaryViewModel",
    "StatisticsOverview",
    "StatisticsPresenter",
    "ChartPresenter",
    "available_years",
    "available_months",
    "default_selection",
    "find_month_stats",
    "bar_series",
    "has_bar_data",
    "pie_series",
    "detail_rows",
]


# =============================================================================
# View Models
# =============================================================================


@dataclass(frozen=True)
class Selection:
    """Currently selected (year, month label) pair."""

    year: int
    month: str

    @property
    def label(self) -> str:
        """Display label such as 'Mars 2024'."""
        return f"{self.month} {self.year}"


@dataclass
class BarRow:
    """One bar-chart row: a month of the selected year."""

    label: str
    incoming: int
    outgoing: int

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON API output."""
        return {"label": self.label, "incoming": self.incoming, "outgoing": self.outgoing}


@dataclass
class PieSlice:
    """One pie slice: a mail type with a positive count."""

    mail_type: MailType
    value: int

    @property
    def name(self) -> str:
        """French display label of the slice."""
        return self.mail_type.label

    @property
    def color(self) -> str:
        """Fixed slice colour from Config.TYPE_COLORS."""
        return self.mail_type.color

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON API output."""
        return {
            "type": self.mail_type.value,
            "name": self.name,
            "value": self.value,
            "color": self.color,
        }


@dataclass
class DetailRow:
    """One row of the per-type detail table."""

    mail_type: MailType
    count: int

    @property
    def label(self) -> str:
        """French display label of the row."""
        return self.mail_type.label

    @property
    def color(self) -> str:
        """Colour of the row's legend dot."""
        return self.mail_type.color

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON API output."""
        return {
            "type": self.mail_type.value,
            "label": self.label,
            "count": self.count,
            "color": self.color,
        }


@dataclass
class DetailView:
    """Per-type detail table for a month: non-zero rows plus total."""

    rows: list[DetailRow] = field(default_factory=list)
    total: int = 0

    @property
    def has_data(self) -> bool:
        """
        Check whether the detail panel has anything to show.

        Returns:
            True if at least one row exists. An empty view renders the
            "no data" state.
        """
        return bool(self.rows)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON API output."""
        return {"rows": [r.to_dict() for r in self.rows], "total": self.total}


@dataclass
class MonthSummaryViewModel:
    """Summary card for the selected month."""

    incoming: int = 0
    outgoing: int = 0

    @property
    def total(self) -> int:
        """Incoming plus outgoing."""
        return self.incoming + self.outgoing

    @property
    def has_data(self) -> bool:
        """True when the month has at least one record of either direction."""
        return self.total > 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON API output."""
        return {"incoming": self.incoming, "outgoing": self.outgoing, "total": self.total}


@dataclass
class StatisticsOverview:
    """Complete view model for the statistics page."""

    selection: Selection
    years: list[int] = field(default_factory=list)
    months: list[str] = field(default_factory=list)
    summary: MonthSummaryViewModel = field(default_factory=MonthSummaryViewModel)
    bar_rows: list[BarRow] = field(default_factory=list)
    pie_slices: list[PieSlice] = field(default_factory=list)
    detail: DetailView = field(default_factory=DetailView)
    year_totals: list[YearTotals] = field(default_factory=list)
    report_text: str = ""

    @property
    def has_bar_data(self) -> bool:
        """True when the bar chart has at least one non-zero row."""
        return has_bar_data(self.bar_rows)

    @property
    def has_pie_data(self) -> bool:
        """True when the pie chart has at least one slice."""
        return bool(self.pie_slices)

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize the whole overview for the JSON API.

        Returns:
            Dict with selection, filter choices, summary card, bar rows,
            pie slices, detail table and yearly totals.
        """
        return {
            "selection": {"year": self.selection.year, "month": self.selection.month},
            "years": self.years,
            "months": self.months,
            "summary": self.summary.to_dict(),
            "bar_series": [r.to_dict() for r in self.bar_rows],
            "pie_series": [s.to_dict() for s in self.pie_slices],
            "detail": self.detail.to_dict(),
            "year_totals": [t.to_dict() for t in self.year_totals],
        }


# =============================================================================
# View Selectors
# =============================================================================


def available_years(stats: Sequence[MonthlyStats]) -> list[int]:
    """
    List the distinct years present in the aggregate, most recent first.

    Args:
        stats: Monthly buckets as returned by StatisticsEngine.aggregate().

    Returns:
        Years in descending order; empty list for empty input.

    Example:
        >>> available_years(stats)
        [2024, 2023]
    """
    return sorted({s.year for s in stats}, reverse=True)


def available_months(stats: Sequence[MonthlyStats], year: int | None = None) -> list[str]:
    """
    List the month labels present in the aggregate, in calendar order.

    By default a month is listed when any bucket of any year uses it, so
    the list is not tied to the selected year: with only December 2023
    and March 2024 in the register, both 'Mars' and 'Décembre' are
    offered for 2024 and picking 'Décembre' shows the empty state.
    Passing year restricts the list to that year's months.

    Args:
        stats: Monthly buckets as returned by StatisticsEngine.aggregate().
        year: Optional year to scope the list to.

    Returns:
        Month labels in chronological (not alphabetical) order.

    Example:
        >>> available_months(stats)
        ['Mars', 'Décembre']
        >>> available_months(stats, year=2024)
        ['Mars']
    """
    used = {s.month for s in stats if year is None or s.year == year}
    return [m for m in Config.MONTH_NAMES if m in used]


def default_selection(
    stats: Sequence[MonthlyStats],
    today: date | None = None,
    months_by_year: bool = False,
) -> Selection:
    """
    Choose the initial (year, month) selection.

    Year is the most recent year with data, or the current calendar year
    when the register is empty. Month is the chronologically last
    available month, or the current calendar month when none exists.

    Args:
        stats: Monthly buckets as returned by StatisticsEngine.aggregate().
        today: Reference date for the empty-register fallback.
        months_by_year: Take the default month from the default year only.

    Returns:
        Selection for the first page load.
    """
    today = today or date.today()
    years = available_years(stats)
    year = years[0] if years else today.year
    months = available_months(stats, year=year if months_by_year else None)
    month = months[-1] if months else Config.MONTH_NAMES[today.month - 1]
    return Selection(year=year, month=month)


def find_month_stats(
    stats: Sequence[MonthlyStats],
    year: int,
    month: str,
) -> MonthlyStats | None:
    """Return the bucket for (year, month), or None when it has no data."""
    return next((s for s in stats if s.year == year and s.month == month), None)


def bar_series(stats: Sequence[MonthlyStats], year: int) -> list[BarRow]:
    """
    Build the monthly bar-chart rows for one year.

    Args:
        stats: Monthly buckets in aggregate() order (ascending by month).
        year: Selected year.

    Returns:
        One BarRow per month of that year with data, labelled
        '<month> <year>'. Empty list when the year has no data.

    Example:
        >>> bar_series(stats, 2024)[0]
        BarRow(label='Janvier 2024', incoming=2, outgoing=1)
    """
    return [
        BarRow(label=s.label, incoming=s.incoming_count, outgoing=s.outgoing_count)
        for s in stats
        if s.year == year
    ]


def has_bar_data(rows: Sequence[BarRow]) -> bool:
    """True when at least one row has a positive incoming or outgoing count."""
    return any(r.incoming > 0 or r.outgoing > 0 for r in rows)


def pie_series(month_stats: MonthlyStats | None) -> list[PieSlice]:
    """
    Build the type pie slices for one month.

    Types with a zero count are left out of the pie; they stay at zero in
    by_type. Slice colours come from the fixed Config.TYPE_COLORS table.

    Args:
        month_stats: Bucket for the selected month, or None.

    Returns:
        Slices in canonical type order. Empty list for None.

    Example:
        >>> [s.name for s in pie_series(january)]
        ['Administratif', 'Technique']
    """
    if month_stats is None:
        return []
    return [
        PieSlice(mail_type=t, value=month_stats.by_type.get(t, 0))
        for t in MailType
        if month_stats.by_type.get(t, 0) > 0
    ]


def detail_rows(month_stats: MonthlyStats | None) -> DetailView:
    """
    Build the per-type detail table for one month.

    Rows follow the pie's zero filter. The total sums every by_type
    value, zeros included.

    Args:
        month_stats: Bucket for the selected month, or None.

    Returns:
        DetailView; rows empty and total 0 for None.
    """
    if month_stats is None:
        return DetailView()
    rows = [
        DetailRow(mail_type=t, count=month_stats.by_type.get(t, 0))
        for t in MailType
        if month_stats.by_type.get(t, 0) > 0
    ]
    return DetailView(rows=rows, total=sum(month_stats.by_type.values()))


# =============================================================================
# Presenters
# =============================================================================


class StatisticsPresenter:
    """
    Presenter for the statistics page.

    Loads both record directions from the store, aggregates them, and
    projects the result onto the current selection. The aggregate is
    kept until invalidate() is called, typically by subscribing it to
    RegisterService.record_saved, after which it is rebuilt in full.
    """

    def __init__(
        self,
        storage: RecordStore,
        statistics: StatisticsEngine,
    ) -> None:
        """
        Initialize statistics presenter with data dependencies.

        Business context: Dependency injection enables testing with mock
        storage, so the view logic can be verified without file I/O.

        Args:
            storage: Record store exposing load_records(direction).
            statistics: StatisticsEngine used to aggregate records.

        Example:
            >>> presenter = StatisticsPresenter(StorageManager(), StatisticsEngine())
            >>> overview = presenter.get_overview()
        """
        self.storage = storage
        self.statistics = statistics
        self._stats: list[MonthlyStats] | None = None

    def invalidate(self) -> None:
        """Drop the cached aggregate so the next read re-aggregates."""
        self._stats = None

    def monthly_stats(self) -> list[MonthlyStats]:
        """
        Return the aggregate of the whole register.

        Both directions are read in full before aggregating. If a read
        fails the error propagates and the previous aggregate is not
        kept, so no stale statistics are served.

        Returns:
            MonthlyStats list as returned by StatisticsEngine.aggregate().

        Raises:
            RecordStoreError: If the store cannot read a record file.
        """
        if self._stats is None:
            incoming = self.storage.load_records(Direction.INCOMING)
            outgoing = self.storage.load_records(Direction.OUTGOING)
            self._stats = self.statistics.aggregate(incoming, outgoing)
        return self._stats

    def resolve_selection(
        self,
        year: int | None = None,
        month: str | None = None,
        months_by_year: bool | None = None,
    ) -> Selection:
        """
        Fill in missing selection parts with the default policy.

        Args:
            year: Requested year, or None for the default.
            month: Requested month label, or None for the default.
            months_by_year: Scope the month list to the year. Defaults to
                Config.months_scoped_to_year().

        Returns:
            Complete Selection. Requested values are kept even when they
            have no data; the views then render empty.
        """
        if months_by_year is None:
            months_by_year = Config.months_scoped_to_year()
        stats = self.monthly_stats()
        default = default_selection(stats, months_by_year=months_by_year)
        selected_year = default.year if year is None else year
        if month is not None:
            return Selection(year=selected_year, month=month)
        if year is None or not months_by_year:
            return Selection(year=selected_year, month=default.month)
        months = available_months(stats, year=selected_year)
        return Selection(year=selected_year, month=months[-1] if months else default.month)

    def get_overview(
        self,
        year: int | None = None,
        month: str | None = None,
        months_by_year: bool | None = None,
    ) -> StatisticsOverview:
        """
        Get complete statistics page data for a selection.

        Business context: The statistics page is where the office reviews
        its mail volume: filters, a monthly summary card, the yearly bar
        chart, the type pie chart and the detail table all come from one
        aggregate so they always agree.

        Args:
            year: Selected year, or None for the most recent year.
            month: Selected month label, or None for the default month.
            months_by_year: Scope the month list to the selected year.
                Defaults to Config.months_scoped_to_year().

        Returns:
            StatisticsOverview with every panel populated; panels without
            data are empty rather than missing.

        Raises:
            RecordStoreError: If the store cannot read a record file.

        Example:
            >>> overview = presenter.get_overview(2024, "Janvier")
            >>> overview.detail.total
            2
        """
        if months_by_year is None:
            months_by_year = Config.months_scoped_to_year()
        stats = self.monthly_stats()
        selection = self.resolve_selection(year, month, months_by_year)
        selected = find_month_stats(stats, selection.year, selection.month)
        summary = (
            MonthSummaryViewModel(selected.incoming_count, selected.outgoing_count)
            if selected
            else MonthSummaryViewModel()
        )

        return StatisticsOverview(
            selection=selection,
            years=available_years(stats),
            months=available_months(stats, year=selection.year if months_by_year else None),
            summary=summary,
            bar_rows=bar_series(stats, selection.year),
            pie_slices=pie_series(selected),
            detail=detail_rows(selected),
            year_totals=list(self.statistics.calculate_year_totals(stats).values()),
            report_text=self.statistics.generate_summary_report(
                stats, selection.year, selection.month
            ),
        )


class ChartPresenter:
    """
    Presenter for chart images.

    Uses matplotlib for server-side chart rendering. Empty views render a
    placeholder figure with the "no data" message instead of an empty
    chart.
    """

    def __init__(
        self,
        storage: RecordStore,
        statistics: StatisticsEngine,
    ) -> None:
        """
        Initialize chart presenter with data dependencies.

        Args:
            storage: Record store exposing load_records(direction).
            statistics: StatisticsEngine used to aggregate records.
        """
        self.storage = storage
        self.statistics = statistics
        self._overview = StatisticsPresenter(storage, statistics)

    def _render_empty(self, title: str) -> Any:
        """
        Render placeholder figure when a view has no data.

        Returns:
            Matplotlib figure and axes.
        """
        import matplotlib.pyplot as plt

        fig, ax = plt.subplots(figsize=(8, 3))
        ax.text(0.5, 0.5, Config.NO_DATA_MESSAGE, ha="center", va="center", fontsize=14)
        ax.set_title(title)
        ax.set_xlim(0, 1)
        ax.set_ylim(0, 1)
        ax.axis("off")
        return fig, ax

    def _to_png(self, fig: Any) -> bytes:
        """Serialize a figure to PNG bytes and close it."""
        import matplotlib.pyplot as plt

        buf = io.BytesIO()
        plt.tight_layout()
        plt.savefig(buf, format="png", dpi=100, bbox_inches="tight")
        plt.close(fig)
        buf.seek(0)
        return buf.read()

    def render_monthly_chart(self, year: int | None = None) -> bytes:
        """
        Render monthly incoming/outgoing counts as a grouped bar chart PNG.

        Business context: The monthly chart shows the year's mail flow at
        a glance, incoming in blue and outgoing in green.

        Args:
            year: Year to chart, or None for the default year.

        Returns:
            PNG image as bytes. Shows the "no data" placeholder when the
            year has no non-zero month.

        Raises:
            ImportError: If matplotlib is not installed. Caller should
                catch this and provide fallback (e.g., placeholder SVG).
            RecordStoreError: If the store cannot read a record file.
        """
        import matplotlib

        matplotlib.use("Agg")  # Non-interactive backend
        import matplotlib.pyplot as plt

        selection = self._overview.resolve_selection(year=year)
        rows = bar_series(self._overview.monthly_stats(), selection.year)
        title = f"Évolution Mensuelle {selection.year}"

        if not has_bar_data(rows):
            fig, _ax = self._render_empty(title)
        else:
            fig, ax = plt.subplots(figsize=(8, 4))
            positions = range(len(rows))
            width = 0.4
            ax.bar(
                [p - width / 2 for p in positions],
                [r.incoming for r in rows],
                width=width,
                color=Config.INCOMING_COLOR,
                label=Config.INCOMING_LABEL,
            )
            ax.bar(
                [p + width / 2 for p in positions],
                [r.outgoing for r in rows],
                width=width,
                color=Config.OUTGOING_COLOR,
                label=Config.OUTGOING_LABEL,
            )
            ax.set_xticks(list(positions))
            ax.set_xticklabels([r.label for r in rows], rotation=45, ha="right")
            ax.set_title(title)
            ax.legend()
            ax.grid(axis="y", linestyle="--", alpha=0.5)
            ax.spines["top"].set_visible(False)
            ax.spines["right"].set_visible(False)

        return self._to_png(fig)

    def render_types_chart(self, year: int | None = None, month: str | None = None) -> bytes:
        """
        Render the mail type breakdown of one month as a pie chart PNG.

        Slices use the fixed type palette and are labelled with the type
        name and its percentage.

        Args:
            year: Selected year, or None for the default.
            month: Selected month label, or None for the default.

        Returns:
            PNG image as bytes. Shows the "no data" placeholder when the
            month has no incoming mail.

        Raises:
            ImportError: If matplotlib is not installed.
            RecordStoreError: If the store cannot read a record file.
        """
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        selection = self._overview.resolve_selection(year=year, month=month)
        selected = find_month_stats(
            self._overview.monthly_stats(), selection.year, selection.month
        )
        slices = pie_series(selected)
        title = f"Types de Courriers - {selection.label}"

        if not slices:
            fig, _ax = self._render_empty(title)
        else:
            fig, ax = plt.subplots(figsize=(5, 5))
            ax.pie(
                [s.value for s in slices],
                labels=[s.name for s in slices],
                colors=[s.color for s in slices],
                autopct="%1.0f%%",
                startangle=90,
            )
            ax.set_title(title)
            ax.axis("equal")

        return self._to_png(fig)
