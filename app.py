# app.py
# -----------------------------------------------
# 📅 Calendario turni (Streamlit)
# -----------------------------------------------
# Requiere: streamlit, sqlmodel, pandas, reportlab, psycopg2-binary (si usas Postgres)
# Pulsa un día del mes para asignar Mattina / Pomeriggio / Notte / Ricoveri.

import logging
from datetime import date

import streamlit as st

from config import APP_TITLE, SQL_ECHO, configure_logging, database_url, warn_if_sqlite_in_hosting
from domain import Settings, ShiftType, ShiftCalendarError, parse_hhmm
from italian_holidays import holiday_name, holidays_for_year
from report import month_report_pdf
from repository import ShiftRepository
from services import ShiftHoursCalculator, week_range
from utils import (
    MONTH_NAMES,
    calendar_grid_dataframe,
    format_hours,
    monthly_breakdown_to_dataframe,
    month_title,
    shifts_to_dataframe,
    time_options,
)

configure_logging()
logger = logging.getLogger(__name__)

NO_SHIFT = "Nessun turno"
TIME_OPTIONS = time_options(5)

st.set_page_config(page_title=APP_TITLE, page_icon="📅", layout="centered")

# =========================
# Persistencia por entorno
# =========================
DB_URL = database_url()
if warn_if_sqlite_in_hosting(DB_URL):
    st.error("Manca DATABASE_URL (Postgres). Configura la variabile d'ambiente nell'hosting.")

@st.cache_resource
def get_repo(url: str) -> ShiftRepository:
    return ShiftRepository(url, echo=SQL_ECHO)

repo = get_repo(DB_URL)

# =========================
# Página
# =========================
st.title(f"📅 {APP_TITLE}")

def _flash_success_if_any():
    msg = st.session_state.pop("_flash_success", None)
    if msg:
        st.success(msg)

settings = repo.current_settings()
calc = ShiftHoursCalculator(settings)
today = date.today()
page = st.sidebar.radio("Sezione", ["Calendario", "Dashboard", "Impostazioni"])

# =========================
# 🗓️ Calendario
# =========================
def page_calendar():
    c1, c2 = st.columns(2)
    year = c1.number_input("Anno", min_value=2000, max_value=2100, value=today.year, step=1)
    month = c2.selectbox("Mese", range(1, 13), index=today.month - 1, format_func=lambda m: MONTH_NAMES[m - 1])
    year, month = int(year), int(month)
    shifts = repo.list_month(year, month)

    week_shifts = repo.list_in_range(*week_range(today))
    week = calc.week(today, week_shifts)
    m1, m2 = st.columns(2)
    m1.metric("Ore settimana", format_hours(week.hours), f"obiettivo {settings.weekly_target_hours} h", delta_color="off")
    m2.metric(f"Ore {month_title(year, month)}", format_hours(calc.month_hours(year, month, shifts)))
    st.progress(week.progress / 100, text=f"{week.progress:.0f}% dell'obiettivo settimanale")

    _flash_success_if_any()
    st.dataframe(calendar_grid_dataframe(year, month, shifts), hide_index=True, use_container_width=True)
    st.caption("M = Mattina · P = Pomeriggio · N = Notte · R = Ricoveri · * = festivo o weekend")

    st.subheader("Assegna turno")
    day = st.date_input("Giorno", value=today if (today.year, today.month) == (year, month) else date(year, month, 1))
    current = repo.get(day)
    labels = [NO_SHIFT] + [t.display_name for t in ShiftType]
    index = labels.index(current.shift_type.display_name) if current else 0
    choice = st.radio("Turno", labels, index=index, horizontal=True)
    name = holiday_name(day)
    if name:
        st.caption(f"🎉 {name}")

    if st.button("Salva", use_container_width=True):
        try:
            if choice == NO_SHIFT:
                repo.delete_by_date(day)
                st.session_state["_flash_success"] = f"Turno rimosso il {day.strftime('%d/%m/%Y')}"
            else:
                shift_type = next(t for t in ShiftType if t.display_name == choice)
                repo.upsert(day, shift_type)
                st.session_state["_flash_success"] = (
                    f"{choice} il {day.strftime('%d/%m/%Y')}: {settings.shift_times[shift_type].time_range}"
                )
        except ShiftCalendarError:
            logger.exception("Saving shift for %s failed", day)
            st.error("Operazione non riuscita. Riprova.")
        else:
            st.rerun()

    st.subheader("Turni del mese")
    df = shifts_to_dataframe(shifts, settings.shift_times)
    if df.empty:
        st.info("Nessun turno in questo mese.")
    else:
        st.dataframe(df, hide_index=True, use_container_width=True)
    st.download_button(
        "Scarica PDF del mese",
        data=month_report_pdf(year, month, shifts, settings),
        file_name=f"turni_{year}-{month:02d}.pdf",
        mime="application/pdf",
        use_container_width=True,
    )

# =========================
# 📊 Dashboard
# =========================
def page_dashboard():
    year = int(st.selectbox("Anno", [today.year - 2 + i for i in range(5)], index=2))
    summary = calc.year(year, repo.list_year(year))
    c1, c2 = st.columns(2)
    c1.metric(f"Ore totali {year}", f"{summary.total_hours:g} h", f"target {summary.target_hours:g} h", delta_color="off")
    c2.metric("Turni totali", summary.total_shifts, f"media {summary.average_hours_per_month:.0f} h/mese", delta_color="off")
    st.progress(summary.progress / 100, text=f"{summary.progress:.1f}% dell'obiettivo annuale raggiunto")

    df = monthly_breakdown_to_dataframe(summary.months)
    st.subheader(f"Ore mensili {year}")
    st.bar_chart(df, x="Mese", y="Ore")
    st.dataframe(df, hide_index=True, use_container_width=True)

    st.subheader("Festività")
    st.dataframe(
        [{"Data": h.date.strftime("%d/%m/%Y"), "Festività": h.name} for h in sorted(holidays_for_year(year))],
        hide_index=True, use_container_width=True,
    )

# =========================
# ⚙️ Impostazioni
# =========================
def _time_index(t) -> int:
    hhmm = t.strftime("%H:%M")
    return TIME_OPTIONS.index(hhmm) if hhmm in TIME_OPTIONS else 0

def page_settings():
    _flash_success_if_any()
    target = st.number_input("Ore target settimanali", min_value=1, step=1, value=settings.weekly_target_hours)
    table = settings.shift_times
    for shift_type, config in settings.shift_times.items():
        st.markdown(f"**{shift_type.display_name}**")
        c1, c2, c3 = st.columns([2, 2, 1])
        start = c1.selectbox("Inizio", TIME_OPTIONS, index=_time_index(config.start), key=f"start_{shift_type.value}")
        end = c2.selectbox("Fine", TIME_OPTIONS, index=_time_index(config.end), key=f"end_{shift_type.value}")
        edited = config.with_times(parse_hhmm(start), parse_hhmm(end))
        c3.metric("Ore", f"{edited.hours:g}")
        table = table.with_shift(shift_type, edited)

    if st.button("Salva impostazioni", use_container_width=True):
        try:
            repo.save_settings(Settings(weekly_target_hours=int(target), shift_times=table))
        except ShiftCalendarError:
            logger.exception("Saving settings failed")
            st.error("Impossibile salvare le impostazioni.")
        else:
            st.session_state["_flash_success"] = "Impostazioni salvate."
            st.rerun()


{"Calendario": page_calendar, "Dashboard": page_dashboard, "Impostazioni": page_settings}[page]()
