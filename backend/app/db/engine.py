"""SQLAlchemy engine for the post store."""

import logging
from pathlib import Path

from sqlalchemy import Engine, create_engine, text

from backend.app.core.logging import Event, log_event
from backend.app.core.settings import settings

logger = logging.getLogger(__name__)


class DatabaseInitError(Exception):
    """Raised when the post store cannot be opened."""


def get_resolved_db_path() -> Path:
    """Absolute path of the SQLite file named by ``APP_DB_PATH``."""
    return Path(settings.app_db_path).resolve()


def build_engine(url: str, *, echo: bool = False) -> Engine:
    # FastAPI runs sync endpoints on a threadpool, so a connection may be
    # used from a thread other than the one that opened it.
    return create_engine(url, echo=echo, connect_args={"check_same_thread": False})


engine = build_engine(settings.database_url, echo=settings.debug)
log_event(
    logger, "info", Event.DB_INITIALIZED,
    path=get_resolved_db_path(), url=settings.database_url,
)


def init_db() -> None:
    """Fail fast if the post store cannot be opened.

    Raises :class:`DatabaseInitError` naming the resolved path and
    ``APP_DB_PATH`` so the operator knows what to change.
    """
    path = get_resolved_db_path()
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as exc:
        log_event(logger, "error", Event.DB_INIT_FAILED, path=path, error=exc)
        raise DatabaseInitError(
            f"Cannot open database at '{path}': {exc}. "
            f"Check file permissions or set APP_DB_PATH to a writable location."
        ) from exc
    log_event(logger, "info", Event.DB_INIT_VERIFIED, path=path)
