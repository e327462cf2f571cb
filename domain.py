# domain.py
from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum


# =========================
# Errores
# =========================
class ShiftCalendarError(Exception):
    """Base class for every error raised by the shift calendar."""


class ValidationError(ShiftCalendarError, ValueError):
    """Malformed year/month/date/type/payload."""


class ConfigError(ValidationError):
    """Shift-time table or target that cannot be used for accounting."""


class StorageError(ShiftCalendarError, RuntimeError):
    """Unexpected failure of the backing store."""


# =========================
# Tipos de turno
# =========================
class ShiftType(Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    NIGHT = "night"
    ADMISSIONS = "admissions"

    @classmethod
    def parse(cls, value) -> "ShiftType":
        """Accepts the wire value, the enum name or the legacy Italian label."""
        if isinstance(value, ShiftType):
            return value
        if not isinstance(value, str):
            raise ValidationError("Invalid shift type")
        key = value.strip().lower()
        key = LEGACY_LABELS.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValidationError(f"Invalid shift type: {value!r}") from None

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self]


LEGACY_LABELS = {
    "mattina": "morning",
    "pomeriggio": "afternoon",
    "notte": "night",
    "ricoveri": "admissions",
}

DISPLAY_NAMES = {
    ShiftType.MORNING: "Turno Mattina",
    ShiftType.AFTERNOON: "Turno Pomeriggio",
    ShiftType.NIGHT: "Turno Notte",
    ShiftType.ADMISSIONS: "Turno Ricoveri",
}


# =========================
# Horas de un turno
# =========================
def parse_hhmm(s) -> time:
    if isinstance(s, time):
        return s
    try:
        hh, mm = s.strip().split(":")
        return time(int(hh), int(mm))
    except (AttributeError, TypeError, ValueError):
        raise ValidationError(f"Invalid time of day: {s!r}") from None


def compute_hours(start, end) -> float:
    """Wall-clock span from start to end, rounded to 0.1 h.

    An end at or before the start wraps past midnight.
    """
    t0 = parse_hhmm(start)
    t1 = parse_hhmm(end)
    raw = (t1.hour - t0.hour) + (t1.minute - t0.minute) / 60.0
    if raw <= 0:
        raw += 24
    # medio hacia arriba, no redondeo bancario
    return math.floor(raw * 10 + 0.5) / 10


@dataclass(frozen=True)
class ShiftConfig:
    """Start/end of a shift; ``hours`` is always derived from them."""
    start: time
    end: time
    hours: float = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "start", parse_hhmm(self.start))
        object.__setattr__(self, "end", parse_hhmm(self.end))
        object.__setattr__(self, "hours", compute_hours(self.start, self.end))

    def with_times(self, start=None, end=None) -> "ShiftConfig":
        return ShiftConfig(start if start is not None else self.start,
                           end if end is not None else self.end)

    @property
    def time_range(self) -> str:
        return f"{self.start.strftime('%H:%M')} - {self.end.strftime('%H:%M')} ({self.hours:g} ore)"

    def to_dict(self) -> dict:
        return {
            "start": self.start.strftime("%H:%M"),
            "end": self.end.strftime("%H:%M"),
            "hours": self.hours,
        }


@dataclass(frozen=True)
class ShiftTimeTable:
    """Total mapping ShiftType -> ShiftConfig, one attribute per type."""
    morning: ShiftConfig
    afternoon: ShiftConfig
    night: ShiftConfig
    admissions: ShiftConfig

    def __getitem__(self, shift_type: ShiftType) -> ShiftConfig:
        return getattr(self, ShiftType.parse(shift_type).value)

    def hours_for(self, shift_type: ShiftType) -> float:
        return self[shift_type].hours

    def items(self) -> list[tuple[ShiftType, ShiftConfig]]:
        return [(t, self[t]) for t in ShiftType]

    def with_shift(self, shift_type: ShiftType, config: ShiftConfig) -> "ShiftTimeTable":
        """Returns a new table with one entry replaced."""
        entries = {t.value: c for t, c in self.items()}
        entries[ShiftType.parse(shift_type).value] = config
        return ShiftTimeTable(**entries)

    # --- frontera JSON (texto opaco en la BD y en la API) ---
    def to_dict(self) -> dict:
        return {t.value: c.to_dict() for t, c in self.items()}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data) -> "ShiftTimeTable":
        if not isinstance(data, dict):
            raise ConfigError("Shift times must be an object")
        normalised = {}
        for key, value in data.items():
            try:
                normalised[ShiftType.parse(key).value] = value
            except ValidationError:
                raise ConfigError(f"Unknown shift type in shift times: {key!r}") from None
        entries = {}
        for t in ShiftType:
            raw = normalised.get(t.value)
            if not isinstance(raw, dict) or "start" not in raw or "end" not in raw:
                raise ConfigError(f"Missing shift time entry for {t.value}")
            try:
                entries[t.value] = ShiftConfig(raw["start"], raw["end"])
            except ValidationError as e:
                raise ConfigError(str(e)) from None
        return cls(**entries)

    @classmethod
    def from_json(cls, text: str) -> "ShiftTimeTable":
        try:
            data = json.loads(text)
        except (TypeError, ValueError):
            raise ConfigError("Shift times are not valid JSON") from None
        return cls.from_dict(data)


def hours_for(shift_type: ShiftType, table: ShiftTimeTable) -> float:
    return table.hours_for(shift_type)


# =========================
# Valores por defecto (único sitio)
# =========================
DEFAULT_WEEKLY_TARGET_HOURS = 36
DEFAULT_USER_ID = 1


def default_shift_time_table() -> ShiftTimeTable:
    return ShiftTimeTable(
        morning=ShiftConfig(time(7, 0), time(14, 0)),
        afternoon=ShiftConfig(time(14, 0), time(22, 0)),
        night=ShiftConfig(time(22, 0), time(7, 0)),
        admissions=ShiftConfig(time(13, 0), time(19, 0)),
    )


# =========================
# Entidades
# =========================
@dataclass(frozen=True)
class ShiftAssignment:
    """A calendar date with its shift type."""
    id: int | None
    shift_date: date
    shift_type: ShiftType
    user_id: int = DEFAULT_USER_ID

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.shift_date.isoformat(),
            "type": self.shift_type.value,
            "userId": self.user_id,
        }


@dataclass(frozen=True)
class Settings:
    weekly_target_hours: int = DEFAULT_WEEKLY_TARGET_HOURS
    shift_times: ShiftTimeTable = field(default_factory=default_shift_time_table)
    id: int | None = None
    user_id: int = DEFAULT_USER_ID

    def __post_init__(self):
        target = self.weekly_target_hours
        if isinstance(target, bool) or not isinstance(target, int) or target < 1:
            raise ValidationError("Weekly target hours must be an integer >= 1")

    @classmethod
    def default(cls) -> "Settings":
        return cls()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "weeklyTargetHours": self.weekly_target_hours,
            "shiftTimes": self.shift_times.to_json(),
        }


@dataclass(frozen=True, order=True)
class Holiday:
    date: date
    name: str


# =========================
# Parsers de entrada
# =========================
def parse_iso_date(value) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, TypeError, ValueError):
        raise ValidationError(f"Invalid date: {value!r}") from None


def parse_year_month(year, month) -> tuple[int, int]:
    try:
        y, m = int(year), int(month)
    except (TypeError, ValueError):
        raise ValidationError("Invalid year or month") from None
    if not (1 <= m <= 12) or not (1 <= y <= 9999):
        raise ValidationError("Invalid year or month")
    return y, m
