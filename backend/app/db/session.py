"""Session factory and the per-request session dependency."""

from collections.abc import Iterator

from sqlalchemy.orm import Session, sessionmaker

from backend.app.db.engine import engine

# Posts stay readable after the repository commits them.
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)


def get_db() -> Iterator[Session]:
    with SessionLocal() as db:
        yield db
