"""Expense and income ledger endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from fintrack.api.deps import get_ledger_service
from fintrack.api.schemas import (
    EntryCreate,
    EntryResponse,
    ExpenseSummaryResponse,
    GrossIncomeRequest,
    GrossIncomeResponse,
    IncomeSummaryResponse,
)
from fintrack.core.exceptions import NotFoundError
from fintrack.services import LedgerService

router = APIRouter(prefix="/ledger", tags=["ledger"])


# Expenses

@router.get("/expenses", response_model=ExpenseSummaryResponse)
def list_expenses(
    month: Optional[str] = Query(None, description="YYYY-MM (default: current month)"),
    ledger: LedgerService = Depends(get_ledger_service),
) -> ExpenseSummaryResponse:
    return ExpenseSummaryResponse.model_validate(ledger.list_expenses(month=month))


@router.post("/expenses", response_model=EntryResponse, status_code=201)
def add_expense(
    data: EntryCreate,
    ledger: LedgerService = Depends(get_ledger_service),
) -> EntryResponse:
    """Record an expense; a missing amount is derived from the sell rate."""
    expense = ledger.add_expense(
        name=data.name,
        amount_usd=data.amount_usd,
        amount_ars=data.amount_ars,
        date=data.date,
    )
    return EntryResponse.model_validate(expense)


@router.delete("/expenses/{expense_id}", status_code=204)
def delete_expense(
    expense_id: int,
    ledger: LedgerService = Depends(get_ledger_service),
) -> Response:
    ledger.delete_expense(expense_id)
    return Response(status_code=204)


# Incomes

@router.get("/incomes", response_model=IncomeSummaryResponse)
def list_incomes(ledger: LedgerService = Depends(get_ledger_service)) -> IncomeSummaryResponse:
    return IncomeSummaryResponse.model_validate(ledger.list_incomes())


@router.post("/incomes", response_model=EntryResponse, status_code=201)
def add_income(
    data: EntryCreate,
    ledger: LedgerService = Depends(get_ledger_service),
) -> EntryResponse:
    income = ledger.add_income(
        name=data.name,
        amount_usd=data.amount_usd,
        amount_ars=data.amount_ars,
        date=data.date,
    )
    return EntryResponse.model_validate(income)


@router.delete("/incomes/{income_id}", status_code=204)
def delete_income(
    income_id: int,
    ledger: LedgerService = Depends(get_ledger_service),
) -> Response:
    ledger.delete_income(income_id)
    return Response(status_code=204)


# Gross income

@router.get("/gross-income", response_model=GrossIncomeResponse)
def get_gross_income(ledger: LedgerService = Depends(get_ledger_service)) -> GrossIncomeResponse:
    gross = ledger.get_gross_income()
    if gross is None:
        raise NotFoundError("GrossIncome", "latest")
    return GrossIncomeResponse.model_validate(gross)


@router.put("/gross-income", response_model=GrossIncomeResponse)
def set_gross_income(
    data: GrossIncomeRequest,
    ledger: LedgerService = Depends(get_ledger_service),
) -> GrossIncomeResponse:
    """Start a new gross income figure."""
    gross = ledger.set_gross_income(amount_usd=data.amount_usd, amount_ars=data.amount_ars)
    return GrossIncomeResponse.model_validate(gross)


@router.post("/gross-income", response_model=GrossIncomeResponse)
def add_to_gross_income(
    data: GrossIncomeRequest,
    ledger: LedgerService = Depends(get_ledger_service),
) -> GrossIncomeResponse:
    """Add onto the current gross income figure."""
    gross = ledger.add_to_gross_income(amount_usd=data.amount_usd, amount_ars=data.amount_ars)
    return GrossIncomeResponse.model_validate(gross)


@router.post("/gross-income/record", response_model=EntryResponse, status_code=201)
def record_income_from_gross(ledger: LedgerService = Depends(get_ledger_service)) -> EntryResponse:
    """Book the current gross income as an income entry."""
    return EntryResponse.model_validate(ledger.record_income_from_gross())
