# services.py
from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Sequence, Tuple

from domain import ConfigError, Settings, ShiftAssignment, ShiftTimeTable, ShiftType, ValidationError, hours_for

WEEKS_PER_YEAR = 52


@dataclass
class MonthSummary:
    month: int
    total_hours: float = 0.0
    shifts_by_type: Dict[ShiftType, int] = field(default_factory=lambda: {t: 0 for t in ShiftType})

    @property
    def total_shifts(self) -> int:
        return sum(self.shifts_by_type.values())

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "totalHours": self.total_hours,
            "totalShifts": self.total_shifts,
            "totalShiftsByType": {t.value: n for t, n in self.shifts_by_type.items()},
        }


@dataclass
class WeekProgress:
    week_start: date
    week_end: date
    hours: float
    target_hours: float
    progress: float

    def to_dict(self) -> dict:
        return {
            "weekStart": self.week_start.isoformat(),
            "weekEnd": self.week_end.isoformat(),
            "hours": self.hours,
            "targetHours": self.target_hours,
            "progress": self.progress,
        }


@dataclass
class YearSummary:
    year: int
    total_hours: float
    total_shifts: int
    average_hours_per_month: float
    target_hours: float
    progress: float
    shifts_by_type: Dict[ShiftType, int]
    months: List[MonthSummary]

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "totalHours": self.total_hours,
            "totalShifts": self.total_shifts,
            "averageHoursPerMonth": self.average_hours_per_month,
            "targetHours": self.target_hours,
            "progress": self.progress,
            "totalShiftsByType": {t.value: n for t, n in self.shifts_by_type.items()},
            "months": [m.to_dict() for m in self.months],
        }


# =========================
# Rangos de fechas
# =========================
def week_range(reference: date) -> Tuple[date, date]:
    """Monday..Sunday of the week containing ``reference``."""
    # weekday(): lunes=0 .. domingo=6
    week_start = reference - timedelta(days=reference.weekday())
    try:
        return week_start, week_start + timedelta(days=6)
    except OverflowError:
        raise ValidationError(f"Week of {reference} ends past the last supported date") from None


def week_dates(reference: date) -> List[date]:
    week_start, _ = week_range(reference)
    return [week_start + timedelta(days=i) for i in range(7)]


def month_range(year: int, month: int) -> Tuple[date, date]:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def year_range(year: int) -> Tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


# =========================
# Horas
# =========================
def assignments_in_range(assignments: Iterable[ShiftAssignment], start: date, end: date) -> List[ShiftAssignment]:
    return [a for a in assignments if start <= a.shift_date <= end]


def hours_for_date(day: date, assignments: Iterable[ShiftAssignment], table: ShiftTimeTable) -> float:
    for a in assignments:
        if a.shift_date == day:
            return hours_for(a.shift_type, table)
    return 0.0


def total_hours(assignments: Iterable[ShiftAssignment], table: ShiftTimeTable) -> float:
    """Sum over every assignment given; callers filter by date range first."""
    return round(sum(hours_for(a.shift_type, table) for a in assignments), 1)


def count_by_type(assignments: Iterable[ShiftAssignment]) -> Dict[ShiftType, int]:
    counts = {t: 0 for t in ShiftType}
    for a in assignments:
        counts[a.shift_type] += 1
    return counts


def progress_ratio(actual_hours: float, target_hours: float) -> float:
    """Percentage of the target reached, clamped to [0, 100]."""
    if target_hours <= 0:
        raise ConfigError(f"Target hours must be positive, got {target_hours}")
    ratio = actual_hours / target_hours * 100
    return max(0.0, min(ratio, 100.0))


def yearly_target(weekly_target_hours: float) -> float:
    # 52 semanas fijas; no se corrige a 365.25/7
    return weekly_target_hours * WEEKS_PER_YEAR


def monthly_breakdown(year: int, assignments: Iterable[ShiftAssignment], table: ShiftTimeTable) -> List[MonthSummary]:
    months = [MonthSummary(month=m) for m in range(1, 13)]
    for a in assignments:
        if a.shift_date.year != year:
            continue
        summary = months[a.shift_date.month - 1]
        summary.total_hours += hours_for(a.shift_type, table)
        summary.shifts_by_type[a.shift_type] += 1
    for summary in months:
        summary.total_hours = round(summary.total_hours, 1)
    return months


def weekly_progress(reference: date, assignments: Sequence[ShiftAssignment], settings: Settings) -> WeekProgress:
    start, end = week_range(reference)
    hours = total_hours(assignments_in_range(assignments, start, end), settings.shift_times)
    target = settings.weekly_target_hours
    return WeekProgress(start, end, hours, target, progress_ratio(hours, target))


def yearly_summary(year: int, assignments: Sequence[ShiftAssignment], settings: Settings) -> YearSummary:
    start, end = year_range(year)
    in_year = assignments_in_range(assignments, start, end)
    hours = total_hours(in_year, settings.shift_times)
    target = yearly_target(settings.weekly_target_hours)
    return YearSummary(
        year=year,
        total_hours=hours,
        total_shifts=len(in_year),
        average_hours_per_month=round(hours / 12, 1),
        target_hours=target,
        progress=progress_ratio(hours, target),
        shifts_by_type=count_by_type(in_year),
        months=monthly_breakdown(year, in_year, settings.shift_times),
    )


class ShiftHoursCalculator:
    """Business rules for shift hours, bound to one Settings snapshot."""
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings.default()

    @property
    def table(self) -> ShiftTimeTable:
        return self.settings.shift_times

    def hours_for(self, shift_type: ShiftType) -> float:
        return hours_for(shift_type, self.table)

    def hours_for_date(self, day: date, assignments: Iterable[ShiftAssignment]) -> float:
        return hours_for_date(day, assignments, self.table)

    def month_hours(self, year: int, month: int, assignments: Iterable[ShiftAssignment]) -> float:
        start, end = month_range(year, month)
        return total_hours(assignments_in_range(assignments, start, end), self.table)

    def week(self, reference: date, assignments: Sequence[ShiftAssignment]) -> WeekProgress:
        return weekly_progress(reference, assignments, self.settings)

    def year(self, year: int, assignments: Sequence[ShiftAssignment]) -> YearSummary:
        return yearly_summary(year, assignments, self.settings)
