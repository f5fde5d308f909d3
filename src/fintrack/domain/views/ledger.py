"""View models for expense and income listings."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from fintrack.domain.models import Expense, Income


@dataclass
class ExpenseSummary:
    """Expenses of one month with totals."""

    month: str
    expenses: list[Expense] = field(default_factory=list)
    total_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    total_ars: Decimal = field(default_factory=lambda: Decimal("0"))


@dataclass
class IncomeSummary:
    """All income entries with totals."""

    incomes: list[Income] = field(default_factory=list)
    total_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    total_ars: Decimal = field(default_factory=lambda: Decimal("0"))
    month: Optional[str] = None
