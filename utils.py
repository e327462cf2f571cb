from datetime import date, timedelta
from typing import Iterable, List

import pandas as pd

from domain import ShiftAssignment, ShiftTimeTable, ShiftType, hours_for
from italian_holidays import holiday_name, is_weekend
from services import MonthSummary

MONTH_NAMES = ["Gennaio", "Febbraio", "Marzo", "Aprile", "Maggio", "Giugno",
               "Luglio", "Agosto", "Settembre", "Ottobre", "Novembre", "Dicembre"]
DAY_NAMES = ["Lun", "Mar", "Mer", "Gio", "Ven", "Sab", "Dom"]
SHIFT_SHORT = {
    ShiftType.MORNING: "M",
    ShiftType.AFTERNOON: "P",
    ShiftType.NIGHT: "N",
    ShiftType.ADMISSIONS: "R",
}


def month_name(month: int) -> str:
    return MONTH_NAMES[month - 1]


def format_hours(hours: float) -> str:
    minutes = max(0, int(round(float(hours) * 60)))
    h, m = divmod(minutes, 60)
    if m == 0:
        return f"{h} h"
    if h == 0:
        return f"{m} min"
    return f"{h} h {m} min"


def time_options(step_min: int = 5) -> list[str]:
    return [f"{h:02d}:{m:02d}" for h in range(24) for m in range(0, 60, step_min)]


def calendar_days(year: int, month: int) -> List[date]:
    """42 days (6 weeks, Monday first) covering the month, like a wall calendar."""
    first = date(year, month, 1)
    start = first - timedelta(days=first.weekday())
    return [start + timedelta(days=i) for i in range(42)]


def shifts_to_dataframe(shifts: Iterable[ShiftAssignment], table: ShiftTimeTable) -> pd.DataFrame:
    rows = []
    for s in shifts:
        config = table[s.shift_type]
        rows.append({
            "Data": s.shift_date.isoformat(),
            "Giorno": DAY_NAMES[s.shift_date.weekday()],
            "Turno": s.shift_type.display_name,
            "Inizio": config.start.strftime("%H:%M"),
            "Fine": config.end.strftime("%H:%M"),
            "Ore": hours_for(s.shift_type, table),
            "Festivo": holiday_name(s.shift_date) or "",
        })
    df = pd.DataFrame(rows, columns=["Data", "Giorno", "Turno", "Inizio", "Fine", "Ore", "Festivo"])
    if not df.empty:
        df = df.sort_values(["Data"]).reset_index(drop=True)
    return df


def monthly_breakdown_to_dataframe(months: Iterable[MonthSummary]) -> pd.DataFrame:
    rows = []
    for m in months:
        row = {"Mese": month_name(m.month), "Ore": m.total_hours, "Turni": m.total_shifts}
        for t in ShiftType:
            row[t.display_name.replace("Turno ", "")] = m.shifts_by_type[t]
        rows.append(row)
    return pd.DataFrame(rows)


def calendar_grid_dataframe(year: int, month: int, shifts: Iterable[ShiftAssignment]) -> pd.DataFrame:
    """Month grid: one row per week, one column per weekday, cells like '3 N' or '25 *'."""
    by_date = {s.shift_date: s.shift_type for s in shifts}
    cells = []
    for d in calendar_days(year, month):
        if d.month != month:
            cells.append("")
            continue
        label = str(d.day)
        if d in by_date:
            label += f" {SHIFT_SHORT[by_date[d]]}"
        if holiday_name(d) or is_weekend(d):
            label += " *"
        cells.append(label)
    weeks = [cells[i:i + 7] for i in range(0, 42, 7)]
    # la sexta semana puede quedar vacía (p.ej. febrero)
    weeks = [w for w in weeks if any(w)]
    return pd.DataFrame(weeks, columns=DAY_NAMES)


def month_title(year: int, month: int) -> str:
    return f"{month_name(month)} {year}"
