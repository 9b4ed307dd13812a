"""Persistence for Post records.

The API layer only sees :class:`PostRepository`; the SQLAlchemy-backed
implementation owns its transaction and commits each insert.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.core.errors import StorageError
from backend.app.core.logging import Event, log_event
from backend.app.models.post import Post

logger = logging.getLogger(__name__)


@runtime_checkable
class PostRepository(Protocol):
    """Minimal interface every post store must satisfy."""

    def insert(self, title: str, content: str, price: int) -> Post:
        """Persist a new post and return it with its generated id."""
        ...


def _is_locked(exc: Exception) -> bool:
    msg = str(exc).lower()
    return "locked" in msg or "busy" in msg


def _storage_error(exc: Exception, operation: str) -> StorageError:
    """Translate a SQLAlchemy or driver failure into a :class:`StorageError`.

    The driver message is used when there is one so the SQL statement and
    bound parameters stay out of the error text.
    """
    cause = exc.orig if isinstance(exc, DBAPIError) and exc.orig is not None else exc
    retryable = _is_locked(exc)
    if retryable:
        log_event(
            logger, "warning", Event.DB_WRITE_FAILED,
            operation=operation, reason="database_locked", retryable=True,
        )
    return StorageError(f"Failed to store post: {cause}", retryable=retryable)


class SqlAlchemyPostRepository:
    """:class:`PostRepository` backed by a caller-supplied ``Session``."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def insert(self, title: str, content: str, price: int) -> Post:
        post = Post(title=title, content=content, price=price)
        self.db.add(post)
        try:
            self.db.commit()
            self.db.refresh(post)
        except (SQLAlchemyError, OverflowError) as exc:
            self.db.rollback()
            raise _storage_error(exc, "insert_post") from exc
        log_event(
            logger, "info", Event.POST_CREATED,
            id=post.id,
            title_len=len(title),
            content_len=len(content),
            price=price,
        )
        return post
