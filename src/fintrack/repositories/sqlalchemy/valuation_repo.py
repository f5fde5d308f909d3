"""SQLAlchemy implementation of ValuationRepository."""

from typing import Optional

from sqlalchemy.orm import Session

from fintrack.domain.models import ValuationSnapshot
from fintrack.repositories.sqlalchemy.database import commit_or_raise
from fintrack.repositories.sqlalchemy.orm_models import ValuationSnapshotORM
from fintrack.repositories.sqlalchemy.row_parsing import (
    read_decimal,
    read_datetime,
    write_datetime,
)


class SqlAlchemyValuationRepository:
    """SQLAlchemy-backed, append-only valuation history."""

    def __init__(self, db: Session):
        self._db = db

    def append(self, snapshot: ValuationSnapshot) -> ValuationSnapshot:
        """Append a new snapshot. Existing rows are never modified."""
        orm_snap = ValuationSnapshotORM(
            total_value_ars=snapshot.total_value_ars,
            total_value_usd=snapshot.total_value_usd,
            date=write_datetime(snapshot.date),
        )
        self._db.add(orm_snap)
        commit_or_raise(self._db, "append valuation snapshot")
        self._db.refresh(orm_snap)
        return self._to_domain(orm_snap)

    def latest(self) -> Optional[ValuationSnapshot]:
        """Most recent snapshot, or None."""
        recent = self.list_recent(limit=1)
        return recent[0] if recent else None

    def previous(self) -> Optional[ValuationSnapshot]:
        """Second most recent snapshot, or None if fewer than two exist."""
        recent = self.list_recent(limit=2)
        return recent[1] if len(recent) == 2 else None

    def list_recent(self, limit: int = 30) -> list[ValuationSnapshot]:
        """Snapshots newest first; ties on date fall back to insertion order."""
        orm_snaps = (
            self._db.query(ValuationSnapshotORM)
            .order_by(ValuationSnapshotORM.date.desc(), ValuationSnapshotORM.id.desc())
            .limit(limit)
            .all()
        )
        return [self._to_domain(s) for s in orm_snaps]

    def count(self) -> int:
        return self._db.query(ValuationSnapshotORM).count()

    @staticmethod
    def _to_domain(orm: ValuationSnapshotORM) -> ValuationSnapshot:
        table = "valuation_snapshots"
        return ValuationSnapshot(
            id=orm.id,
            total_value_ars=read_decimal(orm.total_value_ars, table, orm.id, "total_value_ars"),
            total_value_usd=read_decimal(orm.total_value_usd, table, orm.id, "total_value_usd"),
            date=read_datetime(orm.date, table, orm.id),
        )
