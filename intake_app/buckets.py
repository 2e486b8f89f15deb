"""Per-day buckets for calendar cells and time-series charts.

Everything here is recomputed from an entry snapshot; nothing is cached.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from intake_app.drinks import DrinkEntry, to_day
from intake_app.thresholds import PeriodKind, Severity, classify


@dataclass(frozen=True)
class DayBucket:
    total_grams: float
    has_abstinence_marker: bool
    drink_count: int = 0


def bucket_by_day(entries: Iterable[DrinkEntry]) -> Dict[date, DayBucket]:
    """One bucket per distinct date in ``entries``, keyed in ascending date order."""
    totals: Dict[date, float] = {}
    counts: Dict[date, int] = {}
    marked = set()
    for entry in entries:
        totals.setdefault(entry.day, 0.0)
        counts.setdefault(entry.day, 0)
        if entry.is_abstinence:
            marked.add(entry.day)
        else:
            totals[entry.day] += entry.alcohol_grams
            counts[entry.day] += 1
    return {
        day: DayBucket(
            total_grams=totals[day],
            has_abstinence_marker=day in marked,
            drink_count=counts[day],
        )
        for day in sorted(totals)
    }


class DayHighlight(Enum):
    ABSTINENT = "abstinent"
    NONE = "none"
    MODERATE = "moderate"
    HIGH = "high"


_FROM_SEVERITY = {
    Severity.NONE: DayHighlight.NONE,
    Severity.MODERATE: DayHighlight.MODERATE,
    Severity.HIGH: DayHighlight.HIGH,
}


def highlight_for(bucket: DayBucket) -> DayHighlight:
    if bucket.has_abstinence_marker and bucket.drink_count == 0:
        return DayHighlight.ABSTINENT
    severity = classify(bucket.total_grams, PeriodKind.DAILY, abstinent=bucket.has_abstinence_marker)
    return _FROM_SEVERITY[severity]


def day_highlights(entries: Iterable[DrinkEntry]) -> Dict[date, DayHighlight]:
    return {day: highlight_for(bucket) for day, bucket in bucket_by_day(entries).items()}


def month_start(value: Any) -> date:
    return to_day(value).replace(day=1)


def shift_month(value: Any, months: int) -> date:
    """First day of the month ``months`` away from the one containing ``value``."""
    first = month_start(value)
    index = first.year * 12 + (first.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def daily_series(entries: Iterable[DrinkEntry], month: Optional[Any] = None) -> List[Tuple[date, float]]:
    """(date, grams) points in ascending order, optionally for one calendar month.

    No-drink days appear as 0 g points.
    """
    if month is not None:
        first = month_start(month)
        entries = [
            e for e in entries
            if e.day.year == first.year and e.day.month == first.month
        ]
    return [(day, bucket.total_grams) for day, bucket in bucket_by_day(entries).items()]
