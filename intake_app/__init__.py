"""
Alcohol intake tracker: grams per drink, period totals against limits, calendar buckets.
Use from project root: python -m intake_app
"""

from intake_app.errors import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    TrackerError,
    ValidationError,
)
from intake_app.drinks import (
    ALCOHOL_DENSITY,
    PRESETS,
    DrinkEntry,
    DrinkType,
    entries_from_preset,
    grams_of_alcohol,
    list_drink_types,
    list_presets,
    to_day,
)
from intake_app.thresholds import (
    BASE_DAILY_LIMIT_GRAMS,
    PeriodKind,
    Severity,
    classify,
)
from intake_app.periods import (
    PeriodSummary,
    period_bounds,
    period_report,
    summarize,
    summary_reports,
)
from intake_app.buckets import DayBucket, DayHighlight, bucket_by_day, daily_series, day_highlights
from intake_app.persistence import (
    DrinkRepository,
    JsonFileKeyValueStore,
    MemoryKeyValueStore,
    SqliteKeyValueStore,
)
from intake_app.store import DrinkStore
from intake_app.graph import save_intake_graph, series_data

__all__ = [
    "DrinkStore",
    "DrinkEntry",
    "DrinkType",
    "DrinkRepository",
    "JsonFileKeyValueStore",
    "MemoryKeyValueStore",
    "SqliteKeyValueStore",
    "grams_of_alcohol",
    "entries_from_preset",
    "list_drink_types",
    "list_presets",
    "to_day",
    "summarize",
    "period_bounds",
    "period_report",
    "summary_reports",
    "PeriodSummary",
    "classify",
    "PeriodKind",
    "Severity",
    "bucket_by_day",
    "daily_series",
    "day_highlights",
    "DayBucket",
    "DayHighlight",
    "series_data",
    "save_intake_graph",
    "ALCOHOL_DENSITY",
    "BASE_DAILY_LIMIT_GRAMS",
    "PRESETS",
    "TrackerError",
    "ValidationError",
    "ConflictError",
    "NotFoundError",
    "PersistenceError",
]
