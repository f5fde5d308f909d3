"""Expense and income ledger repository protocol."""

from datetime import datetime
from typing import Protocol, Optional

from fintrack.domain.models import Expense, Income, GrossIncome


class LedgerRepository(Protocol):
    """Interface for expense, income and gross income data access."""

    def add_expense(self, expense: Expense) -> Expense:
        ...

    def list_expenses(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Expense]:
        """List expenses in [start, end), newest first."""
        ...

    def delete_expense(self, expense_id: int) -> bool:
        ...

    def add_income(self, income: Income) -> Income:
        ...

    def list_incomes(self) -> list[Income]:
        ...

    def delete_income(self, income_id: int) -> bool:
        ...

    def add_gross_income(self, gross: GrossIncome) -> GrossIncome:
        ...

    def latest_gross_income(self) -> Optional[GrossIncome]:
        ...

    def update_gross_income(self, gross: GrossIncome) -> GrossIncome:
        ...
