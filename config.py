# config.py
# -----------------------------------------------
# Configuración por entorno (DATA_DIR, DATABASE_URL, DEBUG)
# -----------------------------------------------
import logging
import os
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

APP_TITLE = "Calendario Turni"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _env_flag(name: str, default: str = "False") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "t"}


def pick_data_dir() -> Path:
    candidates = []
    env = os.getenv("DATA_DIR")
    if env:
        candidates.append(Path(env))
    candidates += [Path("/data"), Path.cwd() / "data"]

    for p in candidates:
        try:
            p.mkdir(parents=True, exist_ok=True)
            t = p / ".rwtest"
            t.write_text("ok")
            t.unlink(missing_ok=True)
            return p
        except OSError:
            continue
    return Path.cwd()


def database_url(data_dir: Path | None = None) -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    data_dir = data_dir or pick_data_dir()
    return f"sqlite:///{(data_dir / 'shifts.db').as_posix()}"


def is_hosted() -> bool:
    # Render / HF Spaces / Streamlit Cloud
    return "RENDER" in os.environ or "SPACE_ID" in os.environ or os.getenv("STREAMLIT_RUNTIME") == "cloud"


DEBUG = _env_flag("DEBUG")
SQL_ECHO = _env_flag("SQL_ECHO")


def configure_logging(debug: bool = DEBUG) -> None:
    root = logging.getLogger()
    if any(getattr(h, "_shift_calendar", False) for h in root.handlers):
        return
    level = logging.DEBUG if debug else logging.INFO
    root.setLevel(level)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARN)
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(level)
    ch.setFormatter(logging.Formatter(LOG_FORMAT))
    ch._shift_calendar = True
    root.addHandler(ch)


def warn_if_sqlite_in_hosting(url: str) -> bool:
    """True (and logs) when a hosted deployment would write to a local SQLite file."""
    if is_hosted() and url.startswith("sqlite"):
        logger.warning("DATABASE_URL (Postgres) is missing; hosted data would live in a local SQLite file")
        return True
    return False
