"""SQLAlchemy implementation of PositionRepository."""

from typing import Optional

from sqlalchemy.orm import Session

from fintrack.core.exceptions import DeserializationFailed, NotFoundError
from fintrack.domain.models import Position
from fintrack.repositories.sqlalchemy.database import write_or_raise
from fintrack.repositories.sqlalchemy.orm_models import PositionORM
from fintrack.repositories.sqlalchemy.row_parsing import (
    read_decimal,
    read_datetime,
    write_datetime,
)


class SqlAlchemyPositionRepository:
    """SQLAlchemy-backed portfolio store."""

    def __init__(self, db: Session):
        self._db = db

    def get(self, symbol: str) -> Optional[Position]:
        """Get the position for a symbol."""
        orm_pos = self._query_one(symbol)
        return self._to_domain(orm_pos) if orm_pos else None

    def list_all(self) -> list[Position]:
        """List all positions (open and closed), ordered by symbol."""
        orm_positions = self._db.query(PositionORM).order_by(PositionORM.symbol).all()
        return [self._to_domain(p) for p in orm_positions]

    def add(self, position: Position, commit: bool = True) -> Position:
        """Insert a new position row. With commit=False the insert is only flushed."""
        orm_pos = PositionORM(symbol=position.symbol)
        self._apply(orm_pos, position)
        self._db.add(orm_pos)
        write_or_raise(self._db, f"insert position {position.symbol}", commit)
        self._db.refresh(orm_pos)
        return self._to_domain(orm_pos)

    def update(self, position: Position, commit: bool = True) -> Position:
        """Overwrite an existing position row."""
        orm_pos = self._query_one(position.symbol)
        if not orm_pos:
            raise NotFoundError("Position", position.symbol)
        self._apply(orm_pos, position)
        write_or_raise(self._db, f"update position {position.symbol}", commit)
        self._db.refresh(orm_pos)
        return self._to_domain(orm_pos)

    def _query_one(self, symbol: str) -> Optional[PositionORM]:
        # Bypass the identity map so concurrent writers see committed state
        self._db.expire_all()
        return self._db.query(PositionORM).filter(PositionORM.symbol == symbol).first()

    @staticmethod
    def _apply(orm: PositionORM, position: Position) -> None:
        orm.description = position.description or ""
        orm.type = position.type or ""
        orm.quantity = position.quantity
        orm.avg_cost_ars = position.avg_cost_ars
        orm.avg_cost_usd = position.avg_cost_usd
        orm.last_price_ars = position.last_price_ars
        orm.last_price_usd = position.last_price_usd
        orm.open_position = position.open_position
        if position.date is not None:
            orm.date = write_datetime(position.date)

    @staticmethod
    def _to_domain(orm: PositionORM) -> Position:
        """Convert ORM model to domain model, validating every column."""
        if not orm.symbol:
            raise DeserializationFailed("positions", str(orm.id), "symbol is empty")
        ident = orm.symbol
        return Position(
            symbol=orm.symbol,
            description=orm.description or "",
            type=orm.type or "",
            quantity=read_decimal(orm.quantity, "positions", ident, "quantity", non_negative=True),
            avg_cost_ars=read_decimal(orm.avg_cost_ars, "positions", ident, "avg_cost_ars"),
            avg_cost_usd=read_decimal(orm.avg_cost_usd, "positions", ident, "avg_cost_usd"),
            last_price_ars=read_decimal(orm.last_price_ars, "positions", ident, "last_price_ars"),
            last_price_usd=read_decimal(orm.last_price_usd, "positions", ident, "last_price_usd"),
            open_position=bool(orm.open_position),
            date=read_datetime(orm.date, "positions", ident),
        )
