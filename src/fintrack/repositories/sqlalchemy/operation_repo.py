"""SQLAlchemy implementation of OperationRepository."""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from fintrack.domain.models import RecordedOperation
from fintrack.repositories.sqlalchemy.database import write_or_raise
from fintrack.repositories.sqlalchemy.orm_models import OperationORM
from fintrack.repositories.sqlalchemy.row_parsing import (
    read_decimal,
    read_datetime,
    write_datetime,
)


class SqlAlchemyOperationRepository:
    """SQLAlchemy-backed operations ledger (insert-only)."""

    def __init__(self, db: Session):
        self._db = db

    def record(self, operation: RecordedOperation, commit: bool = True) -> RecordedOperation:
        """Insert an operation. A duplicate operation_id raises StoreWriteFailed."""
        orm_op = OperationORM(
            operation_id=operation.operation_id,
            date=write_datetime(operation.date),
            type=operation.type,
            symbol=operation.symbol,
            quantity=operation.quantity,
            price_ars=operation.price_ars,
            price_usd=operation.price_usd,
        )
        self._db.add(orm_op)
        write_or_raise(self._db, f"record operation {operation.operation_id}", commit)
        self._db.refresh(orm_op)
        return self._to_domain(orm_op)

    def exists(self, operation_id: str) -> bool:
        return (
            self._db.query(OperationORM.id)
            .filter(OperationORM.operation_id == operation_id)
            .first()
            is not None
        )

    def list_all(self, symbol: Optional[str] = None) -> list[RecordedOperation]:
        """List recorded operations in date order, optionally for one symbol."""
        query = self._db.query(OperationORM)
        if symbol:
            query = query.filter(OperationORM.symbol == symbol)
        query = query.order_by(OperationORM.date, OperationORM.id)
        return [self._to_domain(o) for o in query.all()]

    def latest_date(self) -> Optional[datetime]:
        """Date of the newest recorded operation."""
        value = self._db.query(func.max(OperationORM.date)).scalar()
        return read_datetime(value, "operations", "max(date)") if value else None

    @staticmethod
    def _to_domain(orm: OperationORM) -> RecordedOperation:
        table = "operations"
        ident = orm.operation_id
        return RecordedOperation(
            id=orm.id,
            operation_id=orm.operation_id,
            date=read_datetime(orm.date, table, ident),
            type=orm.type,
            symbol=orm.symbol,
            quantity=read_decimal(orm.quantity, table, ident, "quantity", non_negative=True),
            price_ars=read_decimal(orm.price_ars, table, ident, "price_ars"),
            price_usd=read_decimal(orm.price_usd, table, ident, "price_usd"),
        )
