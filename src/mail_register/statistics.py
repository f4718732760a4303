"""
Statistics engine for Mail Register.

PURPOSE: Fold mail records into monthly and yearly count buckets.
AI CONTEXT: Pure data processing - no visualization, no I/O.

METRIC CATEGORIES:
1. Monthly Buckets: Incoming/outgoing counts and type breakdown per (year, month)
2. Yearly Totals: The same counts summed per calendar year
3. Text Report: Fixed-width summary for terminal output

AGGREGATION MODEL:
- Key: (record year, canonical month label) from the record date
- Incoming: counts toward incoming_count and by_type (unknown type -> Other)
- Outgoing: counts toward outgoing_count only
- Undated records: skipped, never counted
- Output: ascending by year, then chronological month order

USAGE:
    engine = StatisticsEngine()
    stats = engine.aggregate(incoming_records, outgoing_records)
    totals = engine.calculate_year_totals(stats)
"""

from __future__ import annotations

from collections.abc import Sequence

from .config import Config
from .models import MailRecord, MailType, MonthlyStats, YearTotals

__all__ = ["StatisticsEngine"]


class StatisticsEngine:
    """
    Calculator for correspondence statistics.

    DESIGN:
    - Stateless: Each method operates on provided data
    - Pure: No side effects, only data transformation
    - Wholesale: The aggregate is rebuilt from the full record set on
      every call; there is no incremental update path
    """

    def month_key(self, record: MailRecord) -> tuple[int, str] | None:
        """
        Compute the (year, month label) bucket key for a record.

        Args:
            record: Mail record of either direction.

        Returns:
            Tuple like (2024, 'Janvier'), or None when the record has no
            usable date.

        Example:
            >>> engine = StatisticsEngine()
            >>> engine.month_key(MailRecord(Direction.INCOMING, date(2023, 12, 1)))
            (2023, 'Décembre')
        """
        if record.date is None:
            return None
        return (record.date.year, Config.MONTH_NAMES[record.date.month - 1])

    def aggregate(
        self,
        incoming: Sequence[MailRecord],
        outgoing: Sequence[MailRecord],
    ) -> list[MonthlyStats]:
        """
        Aggregate incoming and outgoing records into monthly buckets.

        Each dated record contributes to exactly one bucket keyed by its
        (year, month). Incoming records increment incoming_count and the
        by_type entry for their mail type, with a missing or unrecognised
        type counted as Other. Outgoing records increment outgoing_count
        only; any type-like value they carry is ignored. Records without a
        date are skipped silently.

        Business context: These buckets feed every statistics view - the
        monthly bar chart, the type pie chart, the detail table and the
        text report. Rebuilding them from scratch after each saved record
        keeps every view consistent with the register.

        Args:
            incoming: Incoming mail records. May be empty.
            outgoing: Outgoing mail records. May be empty.

        Returns:
            List of MonthlyStats, one per (year, month) with at least one
            record, sorted ascending by year then chronological month.
            Empty list when no record has a date.

        Raises:
            None: Malformed records are skipped, not rejected.

        Example:
            >>> engine = StatisticsEngine()
            >>> stats = engine.aggregate(
            ...     [MailRecord(Direction.INCOMING, date(2024, 1, 5), MailType.TECHNICAL)],
            ...     [MailRecord(Direction.OUTGOING, date(2024, 1, 10))],
            ... )
            >>> stats[0].incoming_count, stats[0].outgoing_count
            (1, 1)
        """
        buckets: dict[tuple[int, str], MonthlyStats] = {}

        for record in incoming:
            bucket = self._bucket_for(buckets, record)
            if bucket is None:
                continue
            bucket.incoming_count += 1
            bucket.by_type[MailType.coerce(record.mail_type)] += 1

        for record in outgoing:
            bucket = self._bucket_for(buckets, record)
            if bucket is None:
                continue
            bucket.outgoing_count += 1

        return sorted(buckets.values(), key=lambda s: (s.year, s.month_index))

    def _bucket_for(
        self,
        buckets: dict[tuple[int, str], MonthlyStats],
        record: MailRecord,
    ) -> MonthlyStats | None:
        """Look up or create the zeroed bucket for a record's month."""
        key = self.month_key(record)
        if key is None:
            return None
        if key not in buckets:
            buckets[key] = MonthlyStats(year=key[0], month=key[1])
        return buckets[key]

    def calculate_year_totals(self, stats: Sequence[MonthlyStats]) -> dict[int, YearTotals]:
        """
        Sum monthly buckets into per-year totals.

        Business context: The annual view answers "how much mail did the
        office handle this year" without summing table rows by hand.

        Args:
            stats: Monthly buckets as returned by aggregate().

        Returns:
            Dict of year -> YearTotals, ordered most recent year first.
            Every YearTotals.by_type holds all five mail types.

        Example:
            >>> totals = engine.calculate_year_totals(stats)
            >>> totals[2024].total
            3
        """
        totals: dict[int, YearTotals] = {}
        for month in stats:
            year = totals.setdefault(month.year, YearTotals(year=month.year))
            year.incoming_count += month.incoming_count
            year.outgoing_count += month.outgoing_count
            year.months += 1
            for mail_type in MailType:
                year.by_type[mail_type] += month.by_type.get(mail_type, 0)
        return {year: totals[year] for year in sorted(totals, reverse=True)}

    def generate_summary_report(
        self,
        stats: Sequence[MonthlyStats],
        year: int,
        month: str,
    ) -> str:
        """
        Generate a text statistics report for a selected year and month.

        Sections: yearly totals, the monthly table of the selected year,
        and the type breakdown of the selected month. Empty sections show
        the "no data" message instead of an empty table.

        Args:
            stats: Monthly buckets as returned by aggregate().
            year: Selected year for the monthly table.
            month: Selected month label for the type breakdown.

        Returns:
            Multi-line report string.

        Example:
            >>> print(engine.generate_summary_report(stats, 2024, 'Janvier'))
            ==================================================
            STATISTIQUES DES COURRIERS
            ...
        """
        width = Config.REPORT_WIDTH
        no_data = f"  {Config.NO_DATA_MESSAGE}"
        lines = [
            "=" * width,
            "STATISTIQUES DES COURRIERS",
            "=" * width,
            "",
            "TOTAUX ANNUELS",
        ]

        year_totals = self.calculate_year_totals(stats)
        if not year_totals:
            lines.append(no_data)
        for totals in year_totals.values():
            lines.append(
                f"  {totals.year}: {totals.incoming_count} entrants, "
                f"{totals.outgoing_count} départs ({totals.total} au total)"
            )

        lines.extend(["", f"ÉVOLUTION MENSUELLE {year}"])
        months = [s for s in stats if s.year == year]
        if not any(s.total > 0 for s in months):
            lines.append(no_data)
        else:
            lines.append(f"  {'Mois':<12}{'Entrants':>10}{'Départs':>10}{'Total':>8}")
            for s in months:
                lines.append(
                    f"  {s.month:<12}{s.incoming_count:>10}{s.outgoing_count:>10}{s.total:>8}"
                )

        lines.extend(["", f"TYPES DE COURRIERS - {month} {year}"])
        selected = next((s for s in months if s.month == month), None)
        if selected is None or selected.typed_total == 0:
            lines.append(no_data)
        else:
            for mail_type in MailType:
                count = selected.by_type[mail_type]
                if count > 0:
                    lines.append(f"  • {mail_type.label:<14}{count:>6}")
            lines.append(f"  {'Total':<16}{selected.typed_total:>6}")

        lines.extend(["", "=" * width])
        return "\n".join(lines)
