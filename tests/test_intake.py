"""Tests for grams conversion, periods, severity and calendar buckets. Run from project root: pytest tests/ -v"""
from datetime import date, datetime, timedelta, timezone

import pytest

from intake_app.buckets import (
    DayHighlight,
    bucket_by_day,
    daily_series,
    day_highlights,
    shift_month,
)
from intake_app.drinks import (
    DrinkEntry,
    DrinkType,
    entries_from_preset,
    grams_of_alcohol,
    list_drink_types,
    to_day,
)
from intake_app.errors import ValidationError
from intake_app.periods import (
    LEGACY_MONTH_DAYS,
    average_per_day,
    month_bounds,
    period_report,
    summarize,
    summary_reports,
    week_bounds,
)
from intake_app.thresholds import PeriodKind, Severity, classify, limit_fraction, period_limit


def beer(day, volume=350, abv=5):
    return DrinkEntry(DrinkType.BEER, volume, abv, day)


def test_grams_examples():
    assert grams_of_alcohol(350, 5) == 13.8
    assert grams_of_alcohol(500, 7) == 27.6
    assert grams_of_alcohol(0, 40) == 0
    assert grams_of_alcohol(330, 0) == 0


def test_grams_rounds_half_away_from_zero():
    # 1000 * 0.05 * 0.789 = 39.45
    assert grams_of_alcohol(1000, 5) == 39.5
    assert grams_of_alcohol(250, 5) == 9.9


def test_grams_monotonic():
    volumes = [0, 30, 120, 350, 500, 1000]
    percentages = [0, 0.5, 5, 12, 40, 100]
    for p in percentages:
        grams = [grams_of_alcohol(v, p) for v in volumes]
        assert grams == sorted(grams)
    for v in volumes:
        grams = [grams_of_alcohol(v, p) for p in percentages]
        assert grams == sorted(grams)


def test_entry_derives_grams_and_keeps_id_out_of_equality():
    a = beer(date(2024, 1, 1))
    b = beer(date(2024, 1, 1))
    assert a.alcohol_grams == 13.8
    assert a == b
    assert a.entry_id != b.entry_id


def test_entry_validation():
    with pytest.raises(ValidationError):
        DrinkEntry(DrinkType.WINE, 0, 12, date(2024, 1, 1))
    with pytest.raises(ValidationError):
        DrinkEntry(DrinkType.WINE, 120, 101, date(2024, 1, 1))
    with pytest.raises(ValidationError):
        DrinkEntry(DrinkType.WINE, -5, 12, date(2024, 1, 1))
    with pytest.raises(ValidationError):
        DrinkEntry(DrinkType.WINE, float("nan"), 12, date(2024, 1, 1))
    with pytest.raises(ValidationError):
        DrinkEntry(DrinkType.ABSTINENCE_MARKER, 100, 0, date(2024, 1, 1))
    with pytest.raises(ValidationError):
        DrinkEntry("Lemonade", 100, 5, date(2024, 1, 1))


def test_entry_accepts_type_names_and_strings():
    entry = DrinkEntry("spirits", "30", 40, "2024-03-05")
    assert entry.drink_type is DrinkType.SPIRITS
    assert entry.volume_ml == 30.0
    assert entry.day == date(2024, 3, 5)
    marker = DrinkEntry.abstinence("2024-03-06")
    assert marker.is_abstinence
    assert marker.alcohol_grams == 0


def test_replaced_keeps_id_and_recomputes_grams():
    entry = beer(date(2024, 1, 1))
    edited = entry.replaced(volume_ml=500, percentage_abv=7)
    assert edited.entry_id == entry.entry_id
    assert edited.alcohol_grams == 27.6


def test_to_day():
    assert to_day(date(2024, 1, 1)) == date(2024, 1, 1)
    assert to_day(datetime(2024, 1, 1, 23, 59)) == date(2024, 1, 1)
    assert to_day("2024-01-01T23:30:00") == date(2024, 1, 1)
    aware = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    assert to_day(aware) == aware.astimezone().date()
    assert to_day("2024-06-01T12:00:00.000Z") == aware.astimezone().date()
    with pytest.raises(ValidationError):
        to_day("yesterday")
    with pytest.raises(ValidationError):
        to_day(None)


def test_preset_batch_shares_date_not_identity():
    entries = entries_from_preset("beer", "2024-01-01", count=3)
    assert len(entries) == 3
    assert {e.day for e in entries} == {date(2024, 1, 1)}
    assert len({e.entry_id for e in entries}) == 3
    with pytest.raises(ValidationError):
        entries_from_preset("mead", "2024-01-01")
    with pytest.raises(ValidationError):
        entries_from_preset("beer", "2024-01-01", count=0)


def test_drink_types_include_no_drink_day():
    values = [v for v, _ in list_drink_types()]
    assert "Beer" in values
    assert "no drink day" in values


def test_classify_boundaries():
    assert classify(40, PeriodKind.DAILY) is Severity.MODERATE
    assert classify(40.01, PeriodKind.DAILY) is Severity.HIGH
    assert classify(20, PeriodKind.DAILY) is Severity.NONE
    assert classify(20.1, PeriodKind.DAILY) is Severity.MODERATE
    assert classify(280, PeriodKind.WEEKLY) is Severity.MODERATE
    assert classify(280.5, PeriodKind.WEEKLY) is Severity.HIGH
    assert classify(1200, PeriodKind.MONTHLY) is Severity.MODERATE
    assert classify(1201, PeriodKind.MONTHLY) is Severity.HIGH
    assert classify(0, PeriodKind.DAILY, abstinent=True) is Severity.NONE
    assert classify(50, PeriodKind.DAILY, abstinent=True) is Severity.HIGH


def test_limit_fraction():
    assert period_limit(PeriodKind.WEEKLY) == 280
    assert limit_fraction(20, PeriodKind.DAILY) == 0.5
    assert limit_fraction(100, PeriodKind.DAILY) == 1.0


def test_scenario_three_beers_and_a_no_drink_day():
    entries = [beer(date(2024, 1, 1)) for _ in range(3)]
    entries.append(DrinkEntry.abstinence(date(2024, 1, 2)))
    summary = summarize(entries, date(2024, 1, 1), date(2024, 1, 2))
    assert summary.count == 3
    assert summary.total_grams == pytest.approx(41.4)
    day_total = summarize(entries, date(2024, 1, 1), date(2024, 1, 1)).total_grams
    assert classify(day_total, PeriodKind.DAILY) is Severity.HIGH


def test_summarize_is_inclusive_and_ignores_time_of_day():
    entries = [beer(datetime(2024, 1, 1, 0, 0)), beer(datetime(2024, 1, 7, 23, 59))]
    assert summarize(entries, date(2024, 1, 1), date(2024, 1, 7)).count == 2
    assert summarize(entries, date(2024, 1, 2), date(2024, 1, 6)).count == 0
    with pytest.raises(ValidationError):
        summarize(entries, date(2024, 1, 7), date(2024, 1, 1))


def test_summarize_is_additive_over_a_partition():
    start = date(2024, 1, 1)
    entries = [beer(start + timedelta(days=i), volume=100 + 37 * i, abv=4 + i % 5) for i in range(40)]
    whole = summarize(entries, start, start + timedelta(days=39)).total_grams
    for split in (0, 5, 20, 38):
        b = start + timedelta(days=split)
        left = summarize(entries, start, b).total_grams
        right = summarize(entries, b + timedelta(days=1), start + timedelta(days=39)).total_grams
        assert left + right == pytest.approx(whole)


def test_period_bounds_week_starts_monday():
    assert week_bounds(date(2024, 1, 3)) == (date(2024, 1, 1), date(2024, 1, 7))
    assert week_bounds(date(2024, 1, 7)) == (date(2024, 1, 1), date(2024, 1, 7))
    assert month_bounds(date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))


def test_monthly_average_uses_real_month_length():
    entries = [beer(date(2024, 2, d), volume=1000, abv=5.07) for d in (1, 2)]
    report = period_report(entries, PeriodKind.MONTHLY, date(2024, 2, 15))
    assert report.total_grams == pytest.approx(80.0)
    assert report.average_per_day == pytest.approx(80.0 / 29)
    legacy = period_report(entries, PeriodKind.MONTHLY, date(2024, 2, 15), fixed_month_days=LEGACY_MONTH_DAYS)
    assert legacy.average_per_day == pytest.approx(80.0 / 30)
    summary = summarize(entries, date(2024, 2, 1), date(2024, 2, 29))
    assert average_per_day(summary, PeriodKind.WEEKLY, date(2024, 2, 1)) == pytest.approx(80.0 / 7)


def test_summary_reports_cover_all_periods():
    today = date(2024, 1, 3)
    entries = [beer(today), beer(today), beer(today), beer(date(2024, 1, 1)), beer(date(2023, 12, 31))]
    reports = summary_reports(entries, today)
    assert reports[PeriodKind.DAILY].count == 3
    assert reports[PeriodKind.DAILY].severity is Severity.HIGH
    assert reports[PeriodKind.WEEKLY].count == 4
    assert reports[PeriodKind.MONTHLY].count == 4
    assert reports[PeriodKind.WEEKLY].to_dict()["start"] == "2024-01-01"


def test_bucket_by_day():
    entries = [
        beer(date(2024, 1, 3)),
        DrinkEntry.abstinence(date(2024, 1, 2)),
        beer(date(2024, 1, 1)),
        beer(date(2024, 1, 1), volume=500, abv=7),
    ]
    buckets = bucket_by_day(entries)
    assert list(buckets) == [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)]
    assert buckets[date(2024, 1, 1)].total_grams == pytest.approx(41.4)
    assert buckets[date(2024, 1, 1)].drink_count == 2
    assert buckets[date(2024, 1, 2)].has_abstinence_marker is True
    assert buckets[date(2024, 1, 2)].total_grams == 0
    assert buckets[date(2024, 1, 3)].has_abstinence_marker is False
    assert bucket_by_day(entries) == buckets


def test_day_highlights():
    entries = [
        beer(date(2024, 1, 1), volume=1000, abv=6),
        DrinkEntry.abstinence(date(2024, 1, 2)),
        beer(date(2024, 1, 3), volume=700),
        beer(date(2024, 1, 4)),
    ]
    highlights = day_highlights(entries)
    assert highlights[date(2024, 1, 1)] is DayHighlight.HIGH
    assert highlights[date(2024, 1, 2)] is DayHighlight.ABSTINENT
    assert highlights[date(2024, 1, 3)] is DayHighlight.MODERATE
    assert highlights[date(2024, 1, 4)] is DayHighlight.NONE


def test_daily_series_for_one_month_sorted():
    entries = [
        beer(date(2024, 2, 10)),
        beer(date(2024, 1, 31)),
        beer(date(2024, 2, 1)),
        beer(date(2024, 2, 1)),
    ]
    points = daily_series(entries, month=date(2024, 2, 20))
    assert points == [(date(2024, 2, 1), pytest.approx(27.6)), (date(2024, 2, 10), 13.8)]
    assert len(daily_series(entries)) == 3


def test_shift_month():
    assert shift_month(date(2024, 1, 31), -1) == date(2023, 12, 1)
    assert shift_month(date(2024, 12, 5), 1) == date(2025, 1, 1)
    assert shift_month(date(2024, 3, 15), 0) == date(2024, 3, 1)
