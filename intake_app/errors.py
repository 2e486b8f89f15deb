"""Error types raised by the intake engine."""


class TrackerError(Exception):
    """Base class for every error the engine raises."""


class ValidationError(TrackerError, ValueError):
    """Malformed volume, percentage, date or drink type."""


class ConflictError(TrackerError):
    """A no-drink-day rule (or a duplicate id) would be violated."""


class NotFoundError(TrackerError, LookupError):
    """No entry with the given id."""


class PersistenceError(TrackerError):
    """Reading or writing the durable blob failed, or it was malformed."""
