"""Keep the posts schema at the Alembic head.

``run_migrations()`` is called from the FastAPI lifespan; ``make migrate``
does the same from the command line.
"""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory

from backend.app.core.logging import Event, log_event, setup_logging
from backend.app.core.settings import settings
from backend.app.db.engine import engine

logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parents[3] / "alembic.ini"


class MigrationError(Exception):
    """Raised when the posts schema cannot be upgraded."""


def alembic_config() -> Config:
    """Alembic config pointed at the database in ``APP_DB_PATH``."""
    cfg = Config(str(ALEMBIC_INI))
    cfg.set_main_option("sqlalchemy.url", settings.database_url)
    return cfg


def get_current_revision() -> str | None:
    with engine.connect() as conn:
        return MigrationContext.configure(conn).get_current_revision()


def get_head_revision() -> str:
    head = ScriptDirectory.from_config(alembic_config()).get_current_head()
    assert head is not None, "alembic/versions has no revisions"
    return head


def check_schema_current() -> bool:
    """Return False, logging a warning, when the database is behind head."""
    current, head = get_current_revision(), get_head_revision()
    if current == head:
        return True
    log_event(
        logger, "warning", Event.DB_SCHEMA_DRIFT,
        current=current, head=head, hint="run 'make migrate'",
    )
    return False


def run_migrations() -> None:
    """Upgrade to head; a database already at head is left untouched.

    Raises :class:`MigrationError` naming the starting revision.
    """
    current, head = get_current_revision(), get_head_revision()
    log_event(logger, "info", Event.DB_MIGRATION_STARTED, current=current, head=head)
    if current == head:
        log_event(logger, "info", Event.DB_MIGRATION_SUCCEEDED, head=head, upgraded=False)
        return
    try:
        command.upgrade(alembic_config(), "head")
    except Exception as exc:
        log_event(
            logger, "exception", Event.DB_MIGRATION_FAILED,
            current=current, target=head, error=exc,
        )
        raise MigrationError(
            f"Migration failed (current={current}, target={head}): {exc}. "
            f"Check alembic/versions/ for the failing migration."
        ) from exc
    finally:
        # env.py's fileConfig() replaces the root handlers
        setup_logging(settings.log_level)
    log_event(logger, "info", Event.DB_MIGRATION_SUCCEEDED, head=head, upgraded=True)
