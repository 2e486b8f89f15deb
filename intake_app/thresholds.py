"""Severity of a period's total against limits scaled from one daily limit.

- Daily limit D = 40 g; weekly 7 * D; monthly 30 * D
- HIGH above the limit, MODERATE above half of it (both strict)
"""

from enum import Enum

# Daily alcohol limit in grams.
BASE_DAILY_LIMIT_GRAMS = 40.0


class PeriodKind(Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def limit_days(self) -> int:
        return _LIMIT_DAYS[self]


_LIMIT_DAYS = {
    PeriodKind.DAILY: 1,
    PeriodKind.WEEKLY: 7,
    PeriodKind.MONTHLY: 30,
}


class Severity(Enum):
    NONE = "none"
    MODERATE = "moderate"
    HIGH = "high"


def period_limit(kind: PeriodKind) -> float:
    return BASE_DAILY_LIMIT_GRAMS * kind.limit_days


def classify(total_grams: float, kind: PeriodKind, abstinent: bool = False) -> Severity:
    """Severity of ``total_grams`` for a period of ``kind``.

    A total exactly on a threshold is not above it. ``abstinent`` is accepted
    so callers can pass a day's marker flag; a marked day holds no drinks,
    so its zero total already classifies as NONE.
    """
    limit = period_limit(kind)
    if total_grams > limit:
        return Severity.HIGH
    if total_grams > limit / 2:
        return Severity.MODERATE
    return Severity.NONE


def limit_fraction(total_grams: float, kind: PeriodKind) -> float:
    """Share of the period limit used, clamped to [0, 1] for a progress bar."""
    return max(0.0, min(1.0, total_grams / period_limit(kind)))
