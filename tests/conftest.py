"""Shared fixtures.

``APP_DB_PATH`` is pointed at a throwaway directory before any backend
module is imported, so the engine, migrations and API all use it.
"""

import os
import tempfile
from collections.abc import Callable, Iterator

import pytest

_TEST_DB_DIR = tempfile.mkdtemp(prefix="post-api-tests-")
os.environ["APP_DB_PATH"] = os.path.join(_TEST_DB_DIR, "app.db")

from backend.app.db.engine import init_db  # noqa: E402
from backend.app.db.migrations import run_migrations  # noqa: E402
from backend.app.db.session import SessionLocal  # noqa: E402
from backend.app.main import app  # noqa: E402
from backend.app.models.post import Post  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import func, select  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _schema() -> None:
    init_db()
    run_migrations()


@pytest.fixture(scope="session")
def client() -> Iterator[TestClient]:
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def post_count() -> Callable[[], int]:
    """Return a callable that counts rows in the posts table."""

    def _count() -> int:
        with SessionLocal() as db:
            return db.scalar(select(func.count()).select_from(Post)) or 0

    return _count
