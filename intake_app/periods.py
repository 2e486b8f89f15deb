"""Totals over calendar periods.

Intervals are closed over calendar days. Weeks start on Monday. Monthly
averages divide by the month's real length unless a fixed divisor is given.
"""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Iterable, Optional, Tuple

from intake_app.drinks import DrinkEntry, to_day
from intake_app.errors import ValidationError
from intake_app.thresholds import PeriodKind, Severity, classify, limit_fraction, period_limit

# Divisor the first release used for every month.
LEGACY_MONTH_DAYS = 30


@dataclass(frozen=True)
class PeriodSummary:
    count: int
    total_grams: float


def summarize(entries: Iterable[DrinkEntry], start: Any, end: Any) -> PeriodSummary:
    """Count and grams of drinks dated within [start, end].

    No-drink-day markers are in range but add nothing to either number.
    """
    first, last = to_day(start), to_day(end)
    if first > last:
        raise ValidationError("start must not be after end")
    count = 0
    total = 0.0
    for entry in entries:
        if entry.is_abstinence or not first <= entry.day <= last:
            continue
        count += 1
        total += entry.alcohol_grams
    return PeriodSummary(count=count, total_grams=total)


def day_bounds(now: Any) -> Tuple[date, date]:
    today = to_day(now)
    return today, today


def week_bounds(now: Any) -> Tuple[date, date]:
    today = to_day(now)
    monday = today - timedelta(days=today.weekday())
    return monday, monday + timedelta(days=6)


def month_bounds(now: Any) -> Tuple[date, date]:
    today = to_day(now)
    days = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=days)


_BOUNDS = {
    PeriodKind.DAILY: day_bounds,
    PeriodKind.WEEKLY: week_bounds,
    PeriodKind.MONTHLY: month_bounds,
}


def period_bounds(kind: PeriodKind, now: Any) -> Tuple[date, date]:
    return _BOUNDS[kind](now)


def period_length_days(kind: PeriodKind, start: Any, fixed_month_days: Optional[int] = None) -> int:
    if kind is PeriodKind.DAILY:
        return 1
    if kind is PeriodKind.WEEKLY:
        return 7
    if fixed_month_days is not None:
        if fixed_month_days < 1:
            raise ValidationError("fixed_month_days must be positive")
        return fixed_month_days
    first = to_day(start)
    return calendar.monthrange(first.year, first.month)[1]


def average_per_day(
    summary: PeriodSummary,
    kind: PeriodKind,
    start: Any,
    fixed_month_days: Optional[int] = None,
) -> float:
    return summary.total_grams / period_length_days(kind, start, fixed_month_days)


@dataclass(frozen=True)
class PeriodReport:
    kind: PeriodKind
    start: date
    end: date
    count: int
    total_grams: float
    average_per_day: float
    severity: Severity
    limit_grams: float
    limit_fraction: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "count": self.count,
            "total_grams": round(self.total_grams, 1),
            "average_per_day": round(self.average_per_day, 1),
            "severity": self.severity.value,
            "limit_grams": self.limit_grams,
            "limit_fraction": round(self.limit_fraction, 4),
        }


def period_report(
    entries: Iterable[DrinkEntry],
    kind: PeriodKind,
    now: Any,
    fixed_month_days: Optional[int] = None,
) -> PeriodReport:
    start, end = period_bounds(kind, now)
    summary = summarize(entries, start, end)
    return PeriodReport(
        kind=kind,
        start=start,
        end=end,
        count=summary.count,
        total_grams=summary.total_grams,
        average_per_day=average_per_day(summary, kind, start, fixed_month_days),
        severity=classify(summary.total_grams, kind),
        limit_grams=period_limit(kind),
        limit_fraction=limit_fraction(summary.total_grams, kind),
    )


def summary_reports(
    entries: Iterable[DrinkEntry],
    now: Any,
    fixed_month_days: Optional[int] = None,
) -> Dict[PeriodKind, PeriodReport]:
    """Daily, weekly and monthly reports for the periods containing ``now``."""
    snapshot = list(entries)
    return {
        kind: period_report(snapshot, kind, now, fixed_month_days)
        for kind in PeriodKind
    }
