"""SQLAlchemy implementation of LedgerRepository (expenses and income)."""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from fintrack.core.exceptions import NotFoundError
from fintrack.domain.models import Expense, Income, GrossIncome
from fintrack.repositories.sqlalchemy.database import commit_or_raise
from fintrack.repositories.sqlalchemy.orm_models import ExpenseORM, IncomeORM, GrossIncomeORM
from fintrack.repositories.sqlalchemy.row_parsing import (
    read_decimal,
    read_datetime,
    write_datetime,
)


class SqlAlchemyLedgerRepository:
    """SQLAlchemy-backed expense and income ledgers."""

    def __init__(self, db: Session):
        self._db = db

    # Expense operations

    def add_expense(self, expense: Expense) -> Expense:
        orm_exp = ExpenseORM(
            name=expense.name,
            amount_usd=expense.amount_usd,
            amount_ars=expense.amount_ars,
            date=write_datetime(expense.date),
        )
        self._db.add(orm_exp)
        commit_or_raise(self._db, "insert expense")
        self._db.refresh(orm_exp)
        return self._expense_to_domain(orm_exp)

    def list_expenses(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Expense]:
        """List expenses in [start, end), newest first."""
        query = self._db.query(ExpenseORM)
        if start:
            query = query.filter(ExpenseORM.date >= write_datetime(start))
        if end:
            query = query.filter(ExpenseORM.date < write_datetime(end))
        query = query.order_by(ExpenseORM.date.desc(), ExpenseORM.id.desc())
        return [self._expense_to_domain(e) for e in query.all()]

    def delete_expense(self, expense_id: int) -> bool:
        """Delete an expense; returns False if it did not exist."""
        deleted = self._db.query(ExpenseORM).filter(ExpenseORM.id == expense_id).delete()
        commit_or_raise(self._db, f"delete expense {expense_id}")
        return deleted > 0

    # Income operations

    def add_income(self, income: Income) -> Income:
        orm_inc = IncomeORM(
            name=income.name,
            amount_usd=income.amount_usd,
            amount_ars=income.amount_ars,
            date=write_datetime(income.date),
        )
        self._db.add(orm_inc)
        commit_or_raise(self._db, "insert income")
        self._db.refresh(orm_inc)
        return self._income_to_domain(orm_inc)

    def list_incomes(self) -> list[Income]:
        """List all income entries, newest first."""
        orm_incomes = (
            self._db.query(IncomeORM)
            .order_by(IncomeORM.date.desc(), IncomeORM.id.desc())
            .all()
        )
        return [self._income_to_domain(i) for i in orm_incomes]

    def delete_income(self, income_id: int) -> bool:
        deleted = self._db.query(IncomeORM).filter(IncomeORM.id == income_id).delete()
        commit_or_raise(self._db, f"delete income {income_id}")
        return deleted > 0

    # Gross income operations

    def add_gross_income(self, gross: GrossIncome) -> GrossIncome:
        orm_gross = GrossIncomeORM(
            amount_usd=gross.amount_usd,
            amount_ars=gross.amount_ars,
            date=write_datetime(gross.date),
        )
        self._db.add(orm_gross)
        commit_or_raise(self._db, "insert gross income")
        self._db.refresh(orm_gross)
        return self._gross_to_domain(orm_gross)

    def latest_gross_income(self) -> Optional[GrossIncome]:
        orm_gross = (
            self._db.query(GrossIncomeORM)
            .order_by(GrossIncomeORM.date.desc(), GrossIncomeORM.id.desc())
            .first()
        )
        return self._gross_to_domain(orm_gross) if orm_gross else None

    def update_gross_income(self, gross: GrossIncome) -> GrossIncome:
        """Overwrite the amounts of an existing gross income row."""
        orm_gross = self._db.query(GrossIncomeORM).filter(GrossIncomeORM.id == gross.id).first()
        if orm_gross is None:
            raise NotFoundError("GrossIncome", str(gross.id))
        orm_gross.amount_usd = gross.amount_usd
        orm_gross.amount_ars = gross.amount_ars
        commit_or_raise(self._db, f"update gross income {gross.id}")
        self._db.refresh(orm_gross)
        return self._gross_to_domain(orm_gross)

    @staticmethod
    def _expense_to_domain(orm: ExpenseORM) -> Expense:
        return Expense(
            id=orm.id,
            name=orm.name,
            amount_usd=read_decimal(orm.amount_usd, "expenses", orm.id, "amount_usd"),
            amount_ars=read_decimal(orm.amount_ars, "expenses", orm.id, "amount_ars"),
            date=read_datetime(orm.date, "expenses", orm.id),
        )

    @staticmethod
    def _income_to_domain(orm: IncomeORM) -> Income:
        return Income(
            id=orm.id,
            name=orm.name,
            amount_usd=read_decimal(orm.amount_usd, "incomes", orm.id, "amount_usd"),
            amount_ars=read_decimal(orm.amount_ars, "incomes", orm.id, "amount_ars"),
            date=read_datetime(orm.date, "incomes", orm.id),
        )

    @staticmethod
    def _gross_to_domain(orm: GrossIncomeORM) -> GrossIncome:
        return GrossIncome(
            id=orm.id,
            amount_usd=read_decimal(orm.amount_usd, "gross_incomes", orm.id, "amount_usd"),
            amount_ars=read_decimal(orm.amount_ars, "gross_incomes", orm.id, "amount_ars"),
            date=read_datetime(orm.date, "gross_incomes", orm.id),
        )
