# repository.py
from __future__ import annotations

import logging
import threading
from datetime import date
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool
from sqlalchemy import text
from sqlmodel import SQLModel, Field, Session, create_engine, select

from domain import (
    DEFAULT_USER_ID,
    Settings,
    ShiftAssignment,
    ShiftTimeTable,
    ShiftType,
    StorageError,
    ValidationError,
    parse_year_month,
)
from services import month_range, year_range

logger = logging.getLogger(__name__)


class ShiftDB(SQLModel, table=True):
    __tablename__ = "shifts"

    id: int | None = Field(default=None, primary_key=True)
    shift_date: date = Field(index=True, unique=True)
    shift_type: str = Field(max_length=20)
    user_id: int = Field(default=DEFAULT_USER_ID)

    def to_domain(self) -> ShiftAssignment:
        try:
            shift_type = ShiftType.parse(self.shift_type)
        except ValidationError as e:
            raise StorageError(f"Stored shift {self.id} has an unknown type") from e
        return ShiftAssignment(
            id=self.id,
            shift_date=self.shift_date,
            shift_type=shift_type,
            user_id=self.user_id,
        )


class SettingsDB(SQLModel, table=True):
    __tablename__ = "settings"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(default=DEFAULT_USER_ID)
    weekly_target_hours: int
    shift_times: str  # JSON de ShiftTimeTable

    def to_domain(self) -> Settings:
        # un JSON corrupto en la BD es fallo del almacén, no de la petición
        try:
            return Settings(
                weekly_target_hours=self.weekly_target_hours,
                shift_times=ShiftTimeTable.from_json(self.shift_times),
                id=self.id,
                user_id=self.user_id,
            )
        except ValidationError as e:
            raise StorageError("Stored settings cannot be decoded") from e


def build_engine(db_url: str, echo: bool = False):
    is_sqlite = db_url.startswith("sqlite")
    kwargs = {
        "echo": echo,
        "pool_pre_ping": True,
        "connect_args": {},
    }
    if is_sqlite:
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        # Postgres serverless (Neon/Supabase): sin pool local y con timeout
        kwargs["poolclass"] = NullPool
        kwargs["connect_args"] = {"connect_timeout": 10}
        if "sslmode=" not in db_url:
            db_url += ("&" if "?" in db_url else "?") + "sslmode=require"
    return create_engine(db_url, **kwargs)


class ShiftRepository:
    """Assignments (one per date) and the settings singleton."""
    def __init__(self, url: str = "sqlite:///shifts.db", echo: bool = False, seed_settings: bool = True):
        self.primary_url = url
        self.engine = build_engine(url, echo=echo)
        self._write_lock = threading.Lock()

        # Si es Postgres, valida conexión (fail-fast si falla)
        if not url.startswith("sqlite"):
            try:
                with self.engine.connect() as conn:
                    conn.execute(text("select 1"))
            except SQLAlchemyError as e:
                raise StorageError(f"Could not connect to the database: {e}") from e

        # Crea tablas si no existen
        SQLModel.metadata.create_all(self.engine)
        if seed_settings and self.get_settings() is None:
            self.save_settings(Settings.default())
            logger.info("Seeded default settings")

    # =========================
    # Turnos
    # =========================
    def get(self, d: date) -> ShiftAssignment | None:
        try:
            with Session(self.engine) as session:
                row = session.exec(select(ShiftDB).where(ShiftDB.shift_date == d)).first()
                return row.to_domain() if row else None
        except SQLAlchemyError as e:
            logger.exception("Failed to fetch shift for %s", d)
            raise StorageError("Failed to fetch shift") from e

    def list_in_range(self, start: date, end: date) -> List[ShiftAssignment]:
        try:
            with Session(self.engine) as session:
                rows = session.exec(
                    select(ShiftDB)
                    .where(ShiftDB.shift_date >= start, ShiftDB.shift_date <= end)
                    .order_by(ShiftDB.shift_date)
                ).all()
                return [r.to_domain() for r in rows]
        except SQLAlchemyError as e:
            logger.exception("Failed to list shifts between %s and %s", start, end)
            raise StorageError("Failed to fetch shifts") from e

    def list_month(self, year: int, month: int) -> List[ShiftAssignment]:
        year, month = parse_year_month(year, month)
        return self.list_in_range(*month_range(year, month))

    def list_year(self, year: int) -> List[ShiftAssignment]:
        return self.list_in_range(*year_range(year))

    def upsert(self, d: date, shift_type: ShiftType) -> ShiftAssignment:
        """Assigns ``shift_type`` to ``d``, replacing any previous assignment."""
        shift_type = ShiftType.parse(shift_type)
        with self._write_lock:
            try:
                with Session(self.engine) as session:
                    for old in session.exec(select(ShiftDB).where(ShiftDB.shift_date == d)).all():
                        session.delete(old)
                    # el DELETE tiene que llegar antes que el INSERT (fecha única)
                    session.flush()
                    row = ShiftDB(shift_date=d, shift_type=shift_type.value)
                    session.add(row)
                    session.commit()
                    session.refresh(row)
                    saved = row.to_domain()
            except SQLAlchemyError as e:
                logger.exception("Failed to save shift %s for %s", shift_type.value, d)
                raise StorageError("Failed to save shift") from e
        logger.info("Assigned %s to %s", saved.shift_type.value, d)
        return saved

    def delete_by_date(self, d: date) -> None:
        with self._write_lock:
            try:
                with Session(self.engine) as session:
                    rows = session.exec(select(ShiftDB).where(ShiftDB.shift_date == d)).all()
                    if not rows:
                        return
                    for row in rows:
                        session.delete(row)
                    session.commit()
            except SQLAlchemyError as e:
                logger.exception("Failed to delete shift for %s", d)
                raise StorageError("Failed to delete shift") from e
        logger.info("Removed shift on %s", d)

    # =========================
    # Ajustes (singleton)
    # =========================
    def get_settings(self) -> Settings | None:
        try:
            with Session(self.engine) as session:
                row = session.exec(select(SettingsDB).order_by(SettingsDB.id)).first()
                return row.to_domain() if row else None
        except SQLAlchemyError as e:
            logger.exception("Failed to fetch settings")
            raise StorageError("Failed to fetch settings") from e

    def current_settings(self) -> Settings:
        return self.get_settings() or Settings.default()

    def save_settings(self, settings: Settings) -> Settings:
        """Replaces the singleton; there is no history."""
        with self._write_lock:
            try:
                with Session(self.engine) as session:
                    row = session.exec(select(SettingsDB).order_by(SettingsDB.id)).first()
                    if row is None:
                        row = SettingsDB(
                            weekly_target_hours=settings.weekly_target_hours,
                            shift_times=settings.shift_times.to_json(),
                        )
                    else:
                        row.weekly_target_hours = settings.weekly_target_hours
                        row.shift_times = settings.shift_times.to_json()
                    session.add(row)
                    session.commit()
                    session.refresh(row)
                    saved = row.to_domain()
            except SQLAlchemyError as e:
                logger.exception("Failed to save settings")
                raise StorageError("Failed to save settings") from e
        logger.info("Settings updated: weekly target %sh", saved.weekly_target_hours)
        return saved


__all__ = ["ShiftDB", "SettingsDB", "ShiftRepository", "build_engine"]
