"""Tests for presentation tables and the monthly PDF."""

from datetime import date

from domain import Settings, ShiftAssignment, ShiftType, default_shift_time_table
from report import month_report_pdf
from services import monthly_breakdown
from utils import (
    calendar_days,
    calendar_grid_dataframe,
    format_hours,
    month_title,
    monthly_breakdown_to_dataframe,
    shifts_to_dataframe,
    time_options,
)


def shift(day: str, shift_type: ShiftType) -> ShiftAssignment:
    return ShiftAssignment(id=None, shift_date=date.fromisoformat(day), shift_type=shift_type)


class TestCalendarGrid:
    """Wall-calendar layout of a month."""

    def test_calendar_days_start_on_monday(self):
        days = calendar_days(2025, 3)
        assert len(days) == 42
        assert days[0] == date(2025, 2, 24)
        assert days[0].weekday() == 0
        assert date(2025, 3, 31) in days

    def test_grid_labels(self):
        df = calendar_grid_dataframe(2025, 3, [shift("2025-03-03", ShiftType.NIGHT)])
        assert list(df.columns) == ["Lun", "Mar", "Mer", "Gio", "Ven", "Sab", "Dom"]
        assert df.iloc[0, 0] == ""
        assert df.iloc[0, 5] == "1 *"
        assert df.iloc[1, 0] == "3 N"

    def test_grid_drops_empty_weeks(self):
        # febbraio 2027 inizia di lunedì: esattamente 4 settimane
        assert len(calendar_grid_dataframe(2027, 2, [])) == 4


class TestTables:
    """pandas tables."""

    def test_shifts_to_dataframe(self):
        table = default_shift_time_table()
        df = shifts_to_dataframe(
            [shift("2025-04-21", ShiftType.MORNING), shift("2025-04-20", ShiftType.NIGHT)], table
        )
        assert list(df["Data"]) == ["2025-04-20", "2025-04-21"]
        assert list(df["Ore"]) == [9.0, 7.0]
        assert df.loc[1, "Festivo"] == "Lunedì dell'Angelo (Pasquetta)"
        assert df.loc[0, "Turno"] == "Turno Notte"

    def test_empty_shifts_dataframe_has_columns(self):
        df = shifts_to_dataframe([], default_shift_time_table())
        assert df.empty
        assert "Ore" in df.columns

    def test_monthly_breakdown_table(self):
        months = monthly_breakdown(2025, [shift("2025-02-01", ShiftType.ADMISSIONS)], default_shift_time_table())
        df = monthly_breakdown_to_dataframe(months)
        assert len(df) == 12
        assert df.loc[1, "Mese"] == "Febbraio"
        assert df.loc[1, "Ore"] == 6.0
        assert df.loc[1, "Ricoveri"] == 1


class TestFormatting:
    """Small formatting helpers."""

    def test_format_hours(self):
        assert format_hours(7) == "7 h"
        assert format_hours(7.5) == "7 h 30 min"
        assert format_hours(0.5) == "30 min"
        assert format_hours(0) == "0 h"

    def test_time_options(self):
        options = time_options(5)
        assert options[0] == "00:00"
        assert options[-1] == "23:55"
        assert len(options) == 288

    def test_month_title(self):
        assert month_title(2025, 3) == "Marzo 2025"


class TestMonthReport:
    """Monthly PDF report."""

    def test_pdf_bytes(self):
        pdf = month_report_pdf(2025, 3, [shift("2025-03-03", ShiftType.NIGHT)], Settings.default())
        assert pdf.startswith(b"%PDF")

    def test_pdf_for_empty_month(self):
        assert month_report_pdf(2025, 8, [], Settings.default()).startswith(b"%PDF")
