"""Durable storage of the drink list as one JSON blob under one key.

Blob format: a JSON array of
    {"id", "type", "volume", "alcoholPercentage", "alcoholGrams", "date"}
with ``date`` as an ISO-8601 string. Older blobs without ``id`` are accepted.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
from pathlib import Path
from typing import Any, Iterable

from intake_app.drinks import DrinkEntry, DrinkType
from intake_app.errors import PersistenceError, ValidationError

logger = logging.getLogger(__name__)

STORAGE_KEY = "drinks"

_REQUIRED_FIELDS = ("type", "volume", "alcoholPercentage", "date")


def entry_to_record(entry: DrinkEntry) -> dict[str, Any]:
    return {
        "id": entry.entry_id,
        "type": entry.drink_type.value,
        "volume": entry.volume_ml,
        "alcoholPercentage": entry.percentage_abv,
        "alcoholGrams": entry.alcohol_grams,
        "date": entry.day.isoformat(),
    }


def entry_from_record(record: Any) -> DrinkEntry:
    """Rebuild an entry; stored grams are ignored and recomputed."""
    if not isinstance(record, dict):
        raise PersistenceError(f"Drink record must be an object, got {type(record).__name__}")
    missing = [name for name in _REQUIRED_FIELDS if name not in record]
    if missing:
        raise PersistenceError(f"Drink record is missing {', '.join(missing)}")
    extra = {}
    if record.get("id"):
        extra["entry_id"] = str(record["id"])
    try:
        return DrinkEntry(
            DrinkType.parse(record["type"]),
            record["volume"],
            record["alcoholPercentage"],
            record["date"],
            **extra,
        )
    except ValidationError as exc:
        raise PersistenceError(f"Invalid drink record: {exc}") from exc


def dumps_entries(entries: Iterable[DrinkEntry]) -> str:
    return json.dumps([entry_to_record(e) for e in entries], separators=(",", ":"), ensure_ascii=True)


def loads_entries(blob: str) -> list[DrinkEntry]:
    """Decode a blob; invalid records are skipped, an unreadable blob raises."""
    try:
        data = json.loads(blob)
    except (TypeError, json.JSONDecodeError) as exc:
        raise PersistenceError(f"Stored drinks are not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise PersistenceError("Stored drinks must be a JSON array")
    entries = []
    for index, record in enumerate(data):
        try:
            entries.append(entry_from_record(record))
        except PersistenceError as exc:
            logger.warning("Skipping saved drink at position %d: %s", index, exc)
    return entries


class MemoryKeyValueStore:
    """In-process key-value store; handy for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileKeyValueStore:
    """All keys in one JSON object file, rewritten atomically on every set."""

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise PersistenceError(f"{self.path} does not hold a JSON object")
        return data

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        if value is None:
            return None
        # Values written by hand may be inline JSON rather than a string.
        return value if isinstance(value, str) else json.dumps(value)

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read()
        except PersistenceError:
            logger.warning("Overwriting unreadable key-value file %s", self.path)
            data = {}
        data[key] = value
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
        except OSError as exc:
            raise PersistenceError(f"Cannot write {self.path}: {exc}") from exc


def init_db(db_path: str) -> None:
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
            """
        )
        conn.commit()


class SqliteKeyValueStore:
    """Key-value pairs in a single SQLite table."""

    def __init__(self, db_path: str | os.PathLike):
        self.db_path = str(db_path)
        try:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            init_db(self.db_path)
        except (OSError, sqlite3.Error) as exc:
            raise PersistenceError(f"Cannot open {self.db_path}: {exc}") from exc

    def get(self, key: str) -> str | None:
        try:
            with sqlite3.connect(self.db_path) as conn:
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot read {key!r} from {self.db_path}: {exc}") from exc
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    """
                    INSERT INTO kv (key, value, updated_at) VALUES (?, ?, datetime('now'))
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                    """,
                    (key, value),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot write {key!r} to {self.db_path}: {exc}") from exc


class DrinkRepository:
    """Loads and saves the whole drink list under one key."""

    def __init__(self, kv, key: str = STORAGE_KEY):
        self.kv = kv
        self.key = key

    def load(self) -> list[DrinkEntry]:
        blob = self.kv.get(self.key)
        if blob is None:
            return []
        return loads_entries(blob)

    def save(self, entries: Iterable[DrinkEntry]) -> None:
        self.kv.set(self.key, dumps_entries(entries))
