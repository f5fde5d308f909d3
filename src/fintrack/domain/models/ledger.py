"""Expense and income ledger models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class Expense:
    """A single expense, recorded in both currencies."""

    name: str
    amount_usd: Decimal
    amount_ars: Decimal
    date: datetime
    id: Optional[int] = field(default=None)


@dataclass
class Income:
    """A single net income entry, recorded in both currencies."""

    name: str
    amount_usd: Decimal
    amount_ars: Decimal
    date: datetime
    id: Optional[int] = field(default=None)


@dataclass
class GrossIncome:
    """Gross income figure; the most recent row is the current one."""

    amount_usd: Decimal
    amount_ars: Decimal
    date: datetime
    id: Optional[int] = field(default=None)
