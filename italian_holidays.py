# italian_holidays.py
"""Italian public holidays, used to colour calendar days."""
from __future__ import annotations

from datetime import date, timedelta
from functools import lru_cache

from domain import Holiday

EASTER_MONDAY = "Lunedì dell'Angelo (Pasquetta)"

FIXED_HOLIDAYS = [
    (1, 1, "Capodanno"),
    (1, 6, "Epifania"),
    (4, 25, "Festa della Liberazione"),
    (5, 1, "Festa del Lavoro"),
    (6, 2, "Festa della Repubblica"),
    (8, 15, "Ferragosto"),
    (11, 1, "Ognissanti"),
    (12, 8, "Immacolata Concezione"),
    (12, 25, "Natale"),
    (12, 26, "Santo Stefano"),
]


def easter_date(year: int) -> date:
    """Gregorian Easter Sunday (anonymous / Meeus-Jones-Butcher algorithm)."""
    a = year % 19
    b = year // 100
    c = year % 100
    d = b // 4
    e = b % 4
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i = c // 4
    k = c % 4
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month = (h + l - 7 * m + 114) // 31
    day = ((h + l - 7 * m + 114) % 31) + 1
    return date(year, month, day)


def easter_monday(year: int) -> date:
    return easter_date(year) + timedelta(days=1)


@lru_cache(maxsize=32)
def holidays_for_year(year: int) -> frozenset[Holiday]:
    days = {Holiday(date(year, m, d), name) for m, d, name in FIXED_HOLIDAYS}
    days.add(Holiday(easter_monday(year), EASTER_MONDAY))
    return frozenset(days)


def holiday_name(d: date) -> str | None:
    for h in holidays_for_year(d.year):
        if h.date == d:
            return h.name
    return None


def is_holiday(d: date) -> bool:
    return holiday_name(d) is not None


def is_weekend(d: date) -> bool:
    return d.weekday() >= 5  # sábado o domingo
