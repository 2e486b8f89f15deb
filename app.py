"""Alcohol Tracker Flask app (local, single user).

Run from project root:
    python app.py
"""

import os
from datetime import date
from pathlib import Path
from typing import Any

from flask import Flask, jsonify, request

from intake_app.buckets import bucket_by_day, daily_series, highlight_for, month_start, shift_month
from intake_app.drinks import DrinkEntry, DrinkType, entries_from_preset, list_drink_types, list_presets, to_day
from intake_app.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from intake_app.periods import LEGACY_MONTH_DAYS, summary_reports
from intake_app.persistence import (
    DrinkRepository,
    JsonFileKeyValueStore,
    SqliteKeyValueStore,
    entry_to_record,
)
from intake_app.store import DrinkStore
from intake_app.thresholds import BASE_DAILY_LIMIT_GRAMS

app = Flask(__name__)

MAX_PRESET_COUNT = 20
STORE_EXTENSION = "intake_store"

DEFAULT_JSON_DATA_PATH = str(Path("instance") / "drinks.json")
DEFAULT_SQLITE_DATA_PATH = str(Path("instance") / "drinks.db")


def _storage_backend() -> str:
    return os.environ.get("INTAKE_STORAGE", "json").strip().lower()


def _data_path() -> str:
    default = DEFAULT_SQLITE_DATA_PATH if _storage_backend() == "sqlite" else DEFAULT_JSON_DATA_PATH
    return os.environ.get("INTAKE_DATA_PATH", default)


def _fixed_month_days() -> int | None:
    return LEGACY_MONTH_DAYS if os.environ.get("INTAKE_LEGACY_MONTH_DAYS", "0") == "1" else None


def _open_store() -> DrinkStore:
    try:
        if _storage_backend() == "sqlite":
            kv = SqliteKeyValueStore(_data_path())
        else:
            kv = JsonFileKeyValueStore(_data_path())
    except PersistenceError as exc:
        app.logger.warning("Storage unavailable, keeping drinks in memory only: %s", exc)
        return DrinkStore()
    return DrinkStore.open(DrinkRepository(kv))


def get_store() -> DrinkStore:
    """One store per storage location for the life of the process."""
    key = (_storage_backend(), _data_path())
    cached = app.extensions.get(STORE_EXTENSION)
    if cached is None or cached[0] != key:
        cached = (key, _open_store())
        app.extensions[STORE_EXTENSION] = cached
    return cached[1]


@app.errorhandler(ValidationError)
def _validation_error(exc):
    return jsonify({"error": str(exc)}), 400


@app.errorhandler(NotFoundError)
def _not_found_error(exc):
    return jsonify({"error": str(exc)}), 404


@app.errorhandler(ConflictError)
def _conflict_error(exc):
    return jsonify({"error": str(exc)}), 409


@app.errorhandler(PersistenceError)
def _persistence_error(exc):
    return jsonify({"error": str(exc)}), 500


def _save_warning(store: DrinkStore) -> dict[str, Any]:
    if store.last_save_error is None:
        return {}
    return {"warning": f"Saved in memory only: {store.last_save_error}"}


def _entry_from_payload(data: dict[str, Any]) -> DrinkEntry:
    drink_type = DrinkType.parse(data.get("type", DrinkType.BEER.value))
    day = data.get("date") or date.today()
    if drink_type.is_marker:
        return DrinkEntry.abstinence(day)
    if "volume" not in data or "alcoholPercentage" not in data:
        raise ValidationError("volume and alcoholPercentage are required")
    return DrinkEntry(drink_type, data["volume"], data["alcoholPercentage"], day)


def _json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("request body must be a JSON object")
    return data


def _parse_count(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("count must be an integer")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError("count must be a whole number")
    try:
        count = int(value)
    except (TypeError, ValueError):
        raise ValidationError("count must be an integer") from None
    if count < 1 or count > MAX_PRESET_COUNT:
        raise ValidationError(f"count must be between 1 and {MAX_PRESET_COUNT}")
    return count


def _parse_month(value: str | None) -> date:
    if not value:
        return month_start(date.today())
    try:
        year, month = value.split("-")
        return date(int(year), int(month), 1)
    except ValueError:
        raise ValidationError(f"month must be YYYY-MM, got {value!r}") from None


@app.route("/healthz")
def healthz():
    return jsonify({"ok": True})


@app.route("/api/drink-types")
def api_drink_types():
    return jsonify({
        "drink_types": [{"value": v, "label": label} for v, label in list_drink_types()],
        "presets": list_presets(),
    })


@app.route("/api/drinks")
def api_list_drinks():
    store = get_store()
    day = request.args.get("date")
    entries = store.list_by_date(day) if day else store.list_all()
    return jsonify({"items": [entry_to_record(e) for e in entries]})


@app.route("/api/drinks", methods=["POST"])
def api_add_drinks():
    store = get_store()
    data = _json_body()
    if data.get("preset"):
        entries = entries_from_preset(
            str(data["preset"]),
            data.get("date") or date.today(),
            _parse_count(data.get("count", 1)),
        )
    else:
        entries = [_entry_from_payload(data)]
    ids = store.add_many(entries)
    return jsonify({
        "ok": True,
        "ids": ids,
        "items": [entry_to_record(store.get(i)) for i in ids],
        **_save_warning(store),
    })


@app.route("/api/drinks/<entry_id>", methods=["PUT"])
def api_update_drink(entry_id: str):
    store = get_store()
    current = store.get(entry_id)
    data = _json_body()
    merged = {
        "type": current.drink_type.value,
        "volume": current.volume_ml,
        "alcoholPercentage": current.percentage_abv,
        "date": current.day.isoformat(),
        **data,
    }
    entry = store.update(entry_id, _entry_from_payload(merged))
    return jsonify({"ok": True, "item": entry_to_record(entry), **_save_warning(store)})


@app.route("/api/drinks/<entry_id>", methods=["DELETE"])
def api_delete_drink(entry_id: str):
    store = get_store()
    store.remove(entry_id)
    return jsonify({"ok": True, **_save_warning(store)})


@app.route("/api/summary")
def api_summary():
    store = get_store()
    now = to_day(request.args.get("date") or date.today())
    reports = summary_reports(store.list_all(), now, fixed_month_days=_fixed_month_days())
    return jsonify({
        "date": now.isoformat(),
        "daily_limit_grams": BASE_DAILY_LIMIT_GRAMS,
        **{kind.value: report.to_dict() for kind, report in reports.items()},
    })


@app.route("/api/calendar")
def api_calendar():
    store = get_store()
    month = _parse_month(request.args.get("month"))
    in_month = [
        e for e in store.list_all()
        if e.day.year == month.year and e.day.month == month.month
    ]
    days = [
        {
            "date": day.isoformat(),
            "total_grams": round(bucket.total_grams, 1),
            "drink_count": bucket.drink_count,
            "no_drink_day": bucket.has_abstinence_marker,
            "highlight": highlight_for(bucket).value,
        }
        for day, bucket in bucket_by_day(in_month).items()
    ]
    return jsonify({
        "month": f"{month:%Y-%m}",
        "previous": f"{shift_month(month, -1):%Y-%m}",
        "next": f"{shift_month(month, 1):%Y-%m}",
        "days": days,
    })


@app.route("/api/series")
def api_series():
    store = get_store()
    month = _parse_month(request.args.get("month"))
    points = daily_series(store.list_all(), month=month)
    return jsonify({
        "month": f"{month:%Y-%m}",
        "points": [{"date": d.isoformat(), "total": round(g, 1)} for d, g in points],
    })


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    app.run(host="127.0.0.1", port=port, debug=os.environ.get("FLASK_DEBUG", "0") == "1")
