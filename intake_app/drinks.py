"""Drink definitions and the volume x ABV -> grams converter.

Grams of alcohol = volume (mL) * ABV / 100 * ethanol density, rounded to 0.1 g.
"""

import math
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, List, Tuple

from intake_app.errors import ValidationError

# Ethanol density (g/mL) for volume x ABV -> grams.
ALCOHOL_DENSITY = 0.789

_ONE_DECIMAL = Decimal("0.1")


def grams_of_alcohol(volume_ml: float, percentage_abv: float) -> float:
    """Convert millilitres and ABV (0 to 100) to grams of ethanol, one decimal."""
    raw = volume_ml * (percentage_abv / 100.0) * ALCOHOL_DENSITY
    # str() gives the shortest repr, so 13.8075 rounds as written, not as stored.
    return float(Decimal(str(raw)).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


class DrinkType(Enum):
    BEER = "Beer"
    HIGHBALL = "Highball"
    WINE = "Wine"
    SPIRITS = "Spirits"
    COCKTAIL = "Cocktail"
    OTHER = "Other"
    ABSTINENCE_MARKER = "no drink day"

    @property
    def is_marker(self) -> bool:
        return self is DrinkType.ABSTINENCE_MARKER

    @classmethod
    def parse(cls, value: Any) -> "DrinkType":
        """Accept an enum member, its stored value, or its name in any case."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = value.strip()
            for member in cls:
                if text == member.value or text.upper() == member.name:
                    return member
            if text.lower() in ("abstinencemarker", "abstinence"):
                return cls.ABSTINENCE_MARKER
        raise ValidationError(f"Unknown drink type: {value!r}")


def to_day(value: Any) -> date:
    """Reduce a date, datetime or ISO-8601 string to a calendar day.

    Aware datetimes are converted to the local timezone before the date is
    taken; naive ones keep their own date component.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            if text.endswith(("Z", "z")):
                text = text[:-1] + "+00:00"
            return to_day(datetime.fromisoformat(text))
        except ValueError:
            raise ValidationError(f"Invalid date: {value!r}") from None
    raise ValidationError(f"Invalid date: {value!r}")


def _number(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number") from None
    if not math.isfinite(number):
        raise ValidationError(f"{name} must be finite")
    return number


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class DrinkEntry:
    """One logged drink, or a no-drink-day marker.

    ``alcohol_grams`` is always derived from volume and percentage; ``entry_id``
    identifies the entry but is left out of value equality.
    """

    drink_type: DrinkType
    volume_ml: float
    percentage_abv: float
    day: date
    entry_id: str = field(default_factory=_new_id, compare=False)
    alcohol_grams: float = field(init=False)

    def __post_init__(self):
        drink_type = DrinkType.parse(self.drink_type)
        volume = _number(self.volume_ml, "volume")
        percentage = _number(self.percentage_abv, "alcohol percentage")
        if drink_type.is_marker:
            if volume != 0 or percentage != 0:
                raise ValidationError("A no drink day carries no volume or percentage")
        else:
            if volume <= 0:
                raise ValidationError("volume must be greater than 0")
            if percentage <= 0 or percentage > 100:
                raise ValidationError("alcohol percentage must be between 0 and 100")
        if not isinstance(self.entry_id, str) or not self.entry_id:
            raise ValidationError("entry id must be a non-empty string")

        object.__setattr__(self, "drink_type", drink_type)
        object.__setattr__(self, "volume_ml", volume)
        object.__setattr__(self, "percentage_abv", percentage)
        object.__setattr__(self, "day", to_day(self.day))
        object.__setattr__(self, "alcohol_grams", grams_of_alcohol(volume, percentage))

    @classmethod
    def abstinence(cls, day: Any, **kwargs) -> "DrinkEntry":
        """No-drink-day marker for ``day``."""
        return cls(DrinkType.ABSTINENCE_MARKER, 0.0, 0.0, day, **kwargs)

    @property
    def is_abstinence(self) -> bool:
        return self.drink_type.is_marker

    def replaced(self, **changes) -> "DrinkEntry":
        """Edited copy with the same id; grams are recomputed."""
        changes.pop("alcohol_grams", None)
        changes.setdefault("entry_id", self.entry_id)
        return replace(self, **changes)


@dataclass
class DrinkPreset:
    """A one-tap serving: type, default volume and ABV."""

    key: str
    name: str
    drink_type: DrinkType
    volume_ml: float
    percentage_abv: float

    @property
    def grams_per_serving(self) -> float:
        return grams_of_alcohol(self.volume_ml, self.percentage_abv)


# Common servings; "beer" matches the form's default of 350 mL at 5%.
PRESETS: Dict[str, DrinkPreset] = {
    "beer": DrinkPreset("beer", "Beer (350 mL, 5%)", DrinkType.BEER, 350.0, 5.0),
    "beer-large": DrinkPreset("beer-large", "Beer (500 mL, 5%)", DrinkType.BEER, 500.0, 5.0),
    "highball": DrinkPreset("highball", "Highball (350 mL, 7%)", DrinkType.HIGHBALL, 350.0, 7.0),
    "wine": DrinkPreset("wine", "Wine (120 mL, 12%)", DrinkType.WINE, 120.0, 12.0),
    "spirits": DrinkPreset("spirits", "Spirits (30 mL, 40%)", DrinkType.SPIRITS, 30.0, 40.0),
    "cocktail": DrinkPreset("cocktail", "Cocktail (150 mL, 10%)", DrinkType.COCKTAIL, 150.0, 10.0),
}


def entries_from_preset(key: str, day: Any, count: int = 1) -> List[DrinkEntry]:
    """``count`` independent entries of one preset, all on the same day."""
    preset = PRESETS.get(key)
    if preset is None:
        raise ValidationError(f"Unknown preset: {key!r}")
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise ValidationError("count must be a positive integer")
    the_day = to_day(day)
    return [
        DrinkEntry(preset.drink_type, preset.volume_ml, preset.percentage_abv, the_day)
        for _ in range(count)
    ]


def list_presets() -> List[Dict[str, Any]]:
    return [
        {
            "key": p.key,
            "name": p.name,
            "type": p.drink_type.value,
            "volume": p.volume_ml,
            "alcoholPercentage": p.percentage_abv,
            "alcoholGrams": p.grams_per_serving,
        }
        for p in PRESETS.values()
    ]


def list_drink_types() -> List[Tuple[str, str]]:
    """Return list of (value, label) for UI dropdowns."""
    labels = {DrinkType.ABSTINENCE_MARKER: "No drink day"}
    return [(t.value, labels.get(t, t.value)) for t in DrinkType]
