"""SQLAlchemy implementation of UnitOfWork."""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from fintrack.repositories.sqlalchemy.database import commit_or_raise


class SqlAlchemyUnitOfWork:
    """
    Transaction boundary over the session the repositories share.

    Repositories called with `commit=False` inside `atomic()` only flush,
    so their writes land or vanish together.
    """

    def __init__(self, db: Session):
        self._db = db

    @contextmanager
    def atomic(self, action: str) -> Iterator[None]:
        try:
            yield
        except Exception:
            self._db.rollback()
            raise
        commit_or_raise(self._db, action)
