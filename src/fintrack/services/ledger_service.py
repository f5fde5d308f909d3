"""Ledger service for expenses, income and gross income."""

import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Optional

from fintrack.core.exceptions import NotFoundError, ValidationError
from fintrack.core.timezone import LOCAL_TZ, month_key, now_local
from fintrack.domain.models import Expense, GrossIncome, Income
from fintrack.domain.views import ExpenseSummary, IncomeSummary
from fintrack.repositories.protocols import LedgerRepository
from fintrack.services.exchange_rate_service import ExchangeRateService

logger = logging.getLogger(__name__)

GROSS_INCOME_ENTRY_NAME = "Gross Income Entry"

_CENT = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def _month_bounds(month: str) -> tuple[datetime, datetime]:
    """Return [start, end) of a YYYY-MM month in local time."""
    try:
        year, mon = (int(part) for part in month.split("-"))
        start = datetime(year, mon, 1)
    except ValueError as exc:
        raise ValidationError(f"Invalid month '{month}', expected YYYY-MM") from exc
    end = datetime(year + 1, 1, 1) if mon == 12 else datetime(year, mon + 1, 1)
    return LOCAL_TZ.localize(start), LOCAL_TZ.localize(end)


class LedgerService:
    """
    Service for the expense and income ledgers.

    Every entry is stored in both currencies. When only one amount is given
    the other is derived with the exchange rate's sell rate.
    """

    def __init__(
        self,
        ledger_repo: LedgerRepository,
        rates: ExchangeRateService,
        clock: Callable[[], datetime] = now_local,
    ):
        self._repo = ledger_repo
        self._rates = rates
        self._clock = clock

    # Expenses

    def add_expense(
        self,
        name: str,
        amount_usd: Optional[Decimal] = None,
        amount_ars: Optional[Decimal] = None,
        date: Optional[datetime] = None,
    ) -> Expense:
        """
        Record an expense.

        Args:
            name: What the money was spent on
            amount_usd: Amount in USD (derived from ARS if omitted)
            amount_ars: Amount in ARS (derived from USD if omitted)
            date: When it happened (defaults to now)
        """
        name = self._require_name(name)
        usd, ars = self._pair(amount_usd, amount_ars)
        return self._repo.add_expense(
            Expense(name=name, amount_usd=usd, amount_ars=ars, date=date or self._clock())
        )

    def list_expenses(self, month: Optional[str] = None) -> ExpenseSummary:
        """Expenses of one month (default: current), newest first, with totals."""
        month = month or month_key(self._clock())
        start, end = _month_bounds(month)
        expenses = self._repo.list_expenses(start=start, end=end)
        return ExpenseSummary(
            month=month,
            expenses=expenses,
            total_usd=sum((e.amount_usd for e in expenses), Decimal("0")),
            total_ars=sum((e.amount_ars for e in expenses), Decimal("0")),
        )

    def delete_expense(self, expense_id: int) -> None:
        if not self._repo.delete_expense(expense_id):
            raise NotFoundError("Expense", str(expense_id))

    # Incomes

    def add_income(
        self,
        name: str,
        amount_usd: Optional[Decimal] = None,
        amount_ars: Optional[Decimal] = None,
        date: Optional[datetime] = None,
    ) -> Income:
        """Record a net income entry."""
        name = self._require_name(name)
        usd, ars = self._pair(amount_usd, amount_ars)
        return self._repo.add_income(
            Income(name=name, amount_usd=usd, amount_ars=ars, date=date or self._clock())
        )

    def list_incomes(self) -> IncomeSummary:
        incomes = self._repo.list_incomes()
        return IncomeSummary(
            incomes=incomes,
            total_usd=sum((i.amount_usd for i in incomes), Decimal("0")),
            total_ars=sum((i.amount_ars for i in incomes), Decimal("0")),
        )

    def delete_income(self, income_id: int) -> None:
        if not self._repo.delete_income(income_id):
            raise NotFoundError("Income", str(income_id))

    # Gross income

    def get_gross_income(self) -> Optional[GrossIncome]:
        """Current (most recent) gross income, or None."""
        return self._repo.latest_gross_income()

    def set_gross_income(
        self,
        amount_usd: Optional[Decimal] = None,
        amount_ars: Optional[Decimal] = None,
    ) -> GrossIncome:
        """Start a new gross income figure; older rows are kept as history."""
        usd, ars = self._pair(amount_usd, amount_ars)
        return self._repo.add_gross_income(
            GrossIncome(amount_usd=usd, amount_ars=ars, date=self._clock())
        )

    def add_to_gross_income(
        self,
        amount_usd: Optional[Decimal] = None,
        amount_ars: Optional[Decimal] = None,
    ) -> GrossIncome:
        """Add amounts onto the current gross income row."""
        current = self._require_gross_income()
        usd, ars = self._pair(amount_usd, amount_ars)
        current.amount_usd = current.amount_usd + usd
        current.amount_ars = current.amount_ars + ars
        return self._repo.update_gross_income(current)

    def record_income_from_gross(self) -> Income:
        """Book the current gross income as a net income entry."""
        current = self._require_gross_income()
        logger.info("Recording gross income %s USD as income", current.amount_usd)
        return self._repo.add_income(
            Income(
                name=GROSS_INCOME_ENTRY_NAME,
                amount_usd=current.amount_usd,
                amount_ars=current.amount_ars,
                date=self._clock(),
            )
        )

    # Helpers

    def _require_gross_income(self) -> GrossIncome:
        current = self._repo.latest_gross_income()
        if current is None:
            raise NotFoundError("GrossIncome", "latest")
        return current

    @staticmethod
    def _require_name(name: str) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Name is required")
        return name

    def _pair(
        self,
        amount_usd: Optional[Decimal],
        amount_ars: Optional[Decimal],
    ) -> tuple[Decimal, Decimal]:
        """Return (usd, ars), deriving a missing side from the sell rate."""
        if amount_usd is None and amount_ars is None:
            raise ValidationError("At least one of amount_usd or amount_ars is required")
        for value in (amount_usd, amount_ars):
            if value is not None and value < 0:
                raise ValidationError("Amounts cannot be negative")

        if amount_usd is not None and amount_ars is not None:
            return _money(amount_usd), _money(amount_ars)

        sell_rate = self._rates.get_rate().sell_rate
        if amount_usd is None:
            return _money(amount_ars / sell_rate), _money(amount_ars)
        return _money(amount_usd), _money(amount_usd * sell_rate)
