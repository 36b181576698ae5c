"""
Shared timestamp and statistics helpers for metric calculations.
"""

import math
from datetime import datetime, timezone


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse an ISO 8601 timestamp as returned by the GitHub API.

    Naive timestamps are assumed to be UTC. Returns None for missing or
    unparseable values.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def hours_between(start: datetime, end: datetime) -> float:
    """Return the signed number of hours from ``start`` to ``end``."""
    return (end - start).total_seconds() / 3600


def utc_date_key(moment: datetime) -> str:
    """Return the UTC calendar day of ``moment`` as ``YYYY-MM-DD``."""
    return moment.astimezone(timezone.utc).date().isoformat()


def utc_now_iso(now: datetime | None = None) -> str:
    """Timestamp used for ``lastCalculated`` fields."""
    moment = now or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def median(values: list[float]) -> float:
    """Order-statistic median; 0.0 for an empty sample."""
    if not values:
        return 0.0
    ordered = sorted(values)
    middle = len(ordered) // 2
    if len(ordered) % 2 == 1:
        return ordered[middle]
    return (ordered[middle - 1] + ordered[middle]) / 2


def mean(values: list[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sample."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def iqr_filter(values: list[float], multiplier: float = 1.5) -> list[float]:
    """
    Drop outliers outside ``[Q1 - k*IQR, Q3 + k*IQR]``.

    Quartiles use floor indexing into the sorted sample (no interpolation),
    so a single-element sample is returned unchanged.

    Args:
        values: Sample to filter.
        multiplier: The ``k`` applied to the interquartile range.

    Returns:
        Sorted list of values inside the bounds.
    """
    if not values:
        return []
    ordered = sorted(values)
    q1 = ordered[int(len(ordered) * 0.25)]
    q3 = ordered[int(len(ordered) * 0.75)]
    iqr = q3 - q1
    lower = q1 - multiplier * iqr
    upper = q3 + multiplier * iqr
    return [value for value in ordered if lower <= value <= upper]


def round_half_up(value: float) -> int:
    """Round halves up (2.5 -> 3); the builtin round() gives 2."""
    return math.floor(value + 0.5)


def round_one(value: float) -> float:
    """Round to one decimal place, as shown in the dashboard."""
    return round_half_up(value * 10) / 10


def clamp(value: int, upper: int, lower: int = 0) -> int:
    return max(lower, min(upper, value))


def tier_score(value: float | None, tiers: tuple[tuple[float, int], ...]) -> int:
    """
    Score ``value`` against descending ``(threshold, points)`` tiers.

    The first tier whose threshold ``value`` strictly exceeds wins; values at or
    below every threshold (or None) score 0.
    """
    if value is None:
        return 0
    for threshold, points in tiers:
        if value > threshold:
            return points
    return 0


def inverse_tier_score(
    value: float | None, tiers: tuple[tuple[float, int], ...]
) -> int:
    """
    Score ``value`` against ascending ``(threshold, points)`` tiers.

    The first tier whose threshold ``value`` is strictly below wins. Used where
    smaller is better (response times).
    """
    if value is None:
        return 0
    for threshold, points in tiers:
        if value < threshold:
            return points
    return 0
