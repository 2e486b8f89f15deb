"""
Drink log: the single source of truth for entries, addressed by entry id.
Totals, severities and calendar buckets are derived from ``list_all()``.
"""

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from intake_app.drinks import DrinkEntry, to_day
from intake_app.errors import ConflictError, NotFoundError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)


class DrinkStore:
    """In-memory drink entries with an optional repository written after each change.

    A failed save is logged and kept in ``last_save_error``; the change
    itself is not undone.
    """

    def __init__(self, repository=None):
        self.repository = repository
        self.last_save_error: Optional[PersistenceError] = None
        self._entries: Dict[str, DrinkEntry] = {}

    @classmethod
    def open(cls, repository) -> "DrinkStore":
        """Rehydrate from ``repository``; an unreadable blob gives an empty store."""
        store = cls(repository)
        try:
            loaded = repository.load()
        except PersistenceError as exc:
            logger.warning("Could not load saved drinks, starting empty: %s", exc)
            return store
        for entry in loaded:
            try:
                store._check(entry, store._entries)
                if entry.entry_id in store._entries:
                    raise ConflictError(f"Entry {entry.entry_id} already exists")
            except ConflictError as exc:
                logger.warning("Skipping saved drink %s: %s", entry.entry_id, exc)
                continue
            store._entries[entry.entry_id] = entry
        logger.info("Loaded %d saved drinks", len(store._entries))
        return store

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._entries

    @staticmethod
    def _check(entry: DrinkEntry, existing: Dict[str, DrinkEntry], ignore_id: Optional[str] = None) -> None:
        if not isinstance(entry, DrinkEntry):
            raise ValidationError(f"Expected a DrinkEntry, got {type(entry).__name__}")
        same_day = [
            e for e in existing.values()
            if e.day == entry.day and e.entry_id != ignore_id
        ]
        if entry.is_abstinence:
            if any(e.is_abstinence for e in same_day):
                raise ConflictError(f"{entry.day.isoformat()} is already marked as a no drink day")
            if same_day:
                raise ConflictError(f"{entry.day.isoformat()} already has drinks logged")
        elif any(e.is_abstinence for e in same_day):
            raise ConflictError(f"{entry.day.isoformat()} is marked as a no drink day")

    def _persist(self) -> None:
        if self.repository is None:
            return
        try:
            self.repository.save(self.list_all())
        except PersistenceError as exc:
            self.last_save_error = exc
            logger.warning("Saving drinks failed: %s", exc)
        else:
            self.last_save_error = None

    def add(self, entry: DrinkEntry) -> str:
        """Add ``entry`` and return its id."""
        self._check(entry, self._entries)
        if entry.entry_id in self._entries:
            raise ConflictError(f"Entry {entry.entry_id} already exists")
        self._entries[entry.entry_id] = entry
        self._persist()
        return entry.entry_id

    def add_many(self, entries: Iterable[DrinkEntry]) -> List[str]:
        """Add a batch (e.g. several servings of a preset); all or nothing."""
        batch = list(entries)
        staged = dict(self._entries)
        for entry in batch:
            self._check(entry, staged)
            if entry.entry_id in staged:
                raise ConflictError(f"Entry {entry.entry_id} already exists")
            staged[entry.entry_id] = entry
        if not batch:
            return []
        self._entries = staged
        self._persist()
        return [e.entry_id for e in batch]

    def get(self, entry_id: str) -> DrinkEntry:
        try:
            return self._entries[entry_id]
        except KeyError:
            raise NotFoundError(f"No drink with id {entry_id}") from None

    def remove(self, entry_id: str) -> DrinkEntry:
        entry = self.get(entry_id)
        del self._entries[entry_id]
        self._persist()
        return entry

    def update(self, entry_id: str, new_entry: DrinkEntry) -> DrinkEntry:
        """Replace the entry stored under ``entry_id``, keeping that id."""
        self.get(entry_id)
        if not isinstance(new_entry, DrinkEntry):
            raise ValidationError(f"Expected a DrinkEntry, got {type(new_entry).__name__}")
        # Rebuilding re-runs field validation on the edited values.
        replacement = DrinkEntry(
            new_entry.drink_type,
            new_entry.volume_ml,
            new_entry.percentage_abv,
            new_entry.day,
            entry_id=entry_id,
        )
        self._check(replacement, self._entries, ignore_id=entry_id)
        self._entries[entry_id] = replacement
        self._persist()
        return replacement

    def list_all(self) -> List[DrinkEntry]:
        """Snapshot ordered by day; order within a day carries no meaning."""
        return sorted(self._entries.values(), key=lambda e: e.day)

    def list_by_date(self, day: Any) -> List[DrinkEntry]:
        target: date = to_day(day)
        return [e for e in self.list_all() if e.day == target]
