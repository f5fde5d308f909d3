"""SQLAlchemy ORM model definitions."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Boolean,
    Text,
    Numeric,
)
from sqlalchemy.types import TypeDecorator

from fintrack.repositories.sqlalchemy.database import Base


class DecimalText(TypeDecorator):
    """
    Exact Decimal column stored as its plain-notation string.

    SQLite keeps NUMERIC as a double, which loses digits past about 15
    significant figures; text keeps every digit the Decimal had. Loaded
    values stay text until the repositories parse them with read_decimal.
    """

    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return format(Decimal(str(value)), "f")


_AMOUNT = DecimalText()


class PositionORM(Base):
    """SQLAlchemy model for Position (one row per symbol)."""

    __tablename__ = "positions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    symbol = Column(String(32), unique=True, nullable=False)
    description = Column(String(255), nullable=False, default="")
    type = Column(String(64), nullable=False, default="")
    quantity = Column(_AMOUNT, nullable=False, default=Decimal("0"))
    avg_cost_ars = Column(_AMOUNT, nullable=False, default=Decimal("0"))
    avg_cost_usd = Column(_AMOUNT, nullable=False, default=Decimal("0"))
    last_price_ars = Column(_AMOUNT, nullable=False, default=Decimal("0"))
    last_price_usd = Column(_AMOUNT, nullable=False, default=Decimal("0"))
    open_position = Column(Boolean, nullable=False, default=True)
    date = Column(DateTime, nullable=False, default=datetime.utcnow)


class ValuationSnapshotORM(Base):
    """SQLAlchemy model for ValuationSnapshot (append-only)."""

    __tablename__ = "valuation_snapshots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    total_value_ars = Column(_AMOUNT, nullable=False)
    total_value_usd = Column(_AMOUNT, nullable=False)
    date = Column(DateTime, nullable=False, index=True)


class OperationORM(Base):
    """SQLAlchemy model for the operations ledger (audit trail)."""

    __tablename__ = "operations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    operation_id = Column(String(64), unique=True, nullable=False)
    date = Column(DateTime, nullable=False)
    type = Column(String(64), nullable=False)
    symbol = Column(String(32), nullable=False, index=True)
    quantity = Column(_AMOUNT, nullable=False)
    price_ars = Column(_AMOUNT, nullable=False)
    price_usd = Column(_AMOUNT, nullable=False)


class CredentialORM(Base):
    """SQLAlchemy model for encrypted credential-store entries."""

    __tablename__ = "credentials"

    key = Column(String(64), primary_key=True)
    value_enc = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class ExpenseORM(Base):
    """SQLAlchemy model for Expense."""

    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    amount_usd = Column(Numeric(precision=18, scale=2), nullable=False)
    amount_ars = Column(Numeric(precision=18, scale=2), nullable=False)
    date = Column(DateTime, nullable=False, index=True)


class IncomeORM(Base):
    """SQLAlchemy model for Income."""

    __tablename__ = "incomes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    amount_usd = Column(Numeric(precision=18, scale=2), nullable=False)
    amount_ars = Column(Numeric(precision=18, scale=2), nullable=False)
    date = Column(DateTime, nullable=False, index=True)


class GrossIncomeORM(Base):
    """SQLAlchemy model for GrossIncome."""

    __tablename__ = "gross_incomes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    amount_usd = Column(Numeric(precision=18, scale=2), nullable=False)
    amount_ars = Column(Numeric(precision=18, scale=2), nullable=False)
    date = Column(DateTime, nullable=False, index=True)
