"""Structured logging for the post API.

Every noteworthy step is logged as ``<event>: key=value ...`` where
``<event>`` is an :class:`Event` member, so log lines can be grepped by
name. Only ids and lengths of submitted text are logged, never the text.

Usage::

    from backend.app.core.logging import Event, log_event
    log_event(logger, "error", Event.DB_WRITE_FAILED,
              operation="insert_post", error_category="db")
"""

import logging
import sys
from enum import StrEnum


class Event(StrEnum):
    """Canonical event names."""

    APP_START = "app_start"
    APP_READY = "app_ready"
    APP_STOP = "app_stop"
    CONFIG_LOADED = "config_loaded"
    DB_INITIALIZED = "db_initialized"
    DB_INIT_VERIFIED = "db_init_verified"
    DB_INIT_FAILED = "db_init_failed"
    DB_MIGRATION_STARTED = "db_migration_started"
    DB_MIGRATION_SUCCEEDED = "db_migration_succeeded"
    DB_MIGRATION_FAILED = "db_migration_failed"
    DB_SCHEMA_DRIFT = "db_schema_drift"
    DB_WRITE_FAILED = "db_write_failed"
    POST_VALIDATION_FAILED = "post_validation_failed"
    POST_CREATED = "post_created"
    UNKNOWN_ERROR = "unknown_error"


_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_HANDLER_ATTR = "_post_api"


def resolve_level(level: int | str) -> int:
    """Map ``"debug"``/``"INFO"``/``20`` style values to a logging level."""
    if isinstance(level, int):
        return level
    return logging.getLevelNamesMapping().get(level.upper(), logging.INFO)


def setup_logging(level: int | str = logging.INFO) -> None:
    """Attach the stdout handler to the root logger and set its level.

    Idempotent. Called again after Alembic's ``fileConfig()`` has replaced
    the root handlers.
    """
    root = logging.getLogger()
    root.setLevel(resolve_level(level))
    if any(getattr(h, _HANDLER_ATTR, False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT))
    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)


def log_event(
    logger: logging.Logger,
    level: str,
    event: str,
    **fields: object,
) -> None:
    """Log *event* with ``key=value`` pairs at the named *level*.

    *level* is a logger method name (``"info"``, ``"warning"``, ``"error"``,
    ``"exception"``); unknown names fall back to ``info``.
    """
    message = str(event)
    if fields:
        message += ": " + " ".join(f"{key}={value}" for key, value in fields.items())
    getattr(logger, level, logger.info)(message)
