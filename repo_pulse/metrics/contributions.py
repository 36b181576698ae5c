"""Contribution heatmap aggregation."""

from datetime import date, datetime, timedelta, timezone
from typing import NamedTuple

from repo_pulse.metrics.base import utc_date_key

# (minimum ratio of the busiest day, level), checked in order
LEVEL_THRESHOLDS = ((0.75, 4), (0.5, 3), (0.25, 2))


class ContributionDay(NamedTuple):
    date: str  # YYYY-MM-DD
    count: int


class ContributionHeatmap(NamedTuple):
    contributions: list[ContributionDay]
    total_contributions: int
    max_daily_contributions: int

    def to_dict(self) -> dict[str, object]:
        return {
            "contributions": [day._asdict() for day in self.contributions],
            "totalContributions": self.total_contributions,
            "maxDailyContributions": self.max_daily_contributions,
        }


def aggregate_contributions_by_date(
    events: list[datetime], commit_dates: list[datetime]
) -> list[ContributionDay]:
    """Count activity events and commits per UTC day, ascending by date."""
    counts: dict[str, int] = {}
    for moment in [*events, *commit_dates]:
        key = utc_date_key(moment)
        counts[key] = counts.get(key, 0) + 1
    return [ContributionDay(day, count) for day, count in sorted(counts.items())]


def _one_year_before(day: date) -> date:
    try:
        return day.replace(year=day.year - 1)
    except ValueError:
        # Feb 29
        return day.replace(year=day.year - 1, day=28)


def heatmap_window(year: int | None = None, today: date | None = None) -> tuple[date, date]:
    """
    First and last day shown in the heatmap.

    A calendar year stops at ``today`` when it is the current year; without a
    year the window covers the trailing year up to ``today``.
    """
    today = today or datetime.now(timezone.utc).date()
    if year:
        return date(year, 1, 1), min(date(year, 12, 31), today)
    return _one_year_before(today), today


def format_contribution_data(
    contributions: list[ContributionDay],
    year: int | None = None,
    today: date | None = None,
) -> ContributionHeatmap:
    """
    Lay contributions out on a zero-filled daily calendar.

    Args:
        contributions: Per-day counts, in any order; days may repeat.
        year: Calendar year to show, or None for the trailing year.
        today: Reference day; defaults to the current UTC date.

    Returns:
        ContributionHeatmap with one entry per day of the window.
    """
    start, end = heatmap_window(year, today)
    by_day: dict[str, int] = {}
    current = start
    while current <= end:
        by_day[current.isoformat()] = 0
        current += timedelta(days=1)

    first, last = start.isoformat(), end.isoformat()
    for day in contributions:
        if first <= day.date <= last:
            by_day[day.date] = by_day.get(day.date, 0) + day.count

    days = [ContributionDay(day, count) for day, count in sorted(by_day.items())]
    return ContributionHeatmap(
        contributions=days,
        total_contributions=sum(day.count for day in days),
        max_daily_contributions=max((day.count for day in days), default=0),
    )


def get_contribution_level(count: int, max_count: int) -> int:
    """Heatmap intensity 0-4 relative to the busiest day."""
    if count == 0 or max_count == 0:
        return 0
    ratio = count / max_count
    for threshold, level in LEVEL_THRESHOLDS:
        if ratio >= threshold:
            return level
    return 1
