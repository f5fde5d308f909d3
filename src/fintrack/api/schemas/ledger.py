"""Pydantic schemas for expense and income endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class EntryCreate(BaseModel):
    """Request schema for an expense or income entry. One amount may be omitted."""

    name: str = Field(..., min_length=1, max_length=255)
    amount_usd: Optional[Decimal] = Field(default=None, ge=0)
    amount_ars: Optional[Decimal] = Field(default=None, ge=0)
    date: Optional[datetime] = None


class EntryResponse(BaseModel):
    """Response schema for a single expense or income entry."""

    model_config = {"from_attributes": True}

    id: int
    name: str
    amount_usd: Decimal
    amount_ars: Decimal
    date: datetime


class ExpenseSummaryResponse(BaseModel):
    model_config = {"from_attributes": True}

    month: str
    expenses: list[EntryResponse]
    total_usd: Decimal
    total_ars: Decimal


class IncomeSummaryResponse(BaseModel):
    model_config = {"from_attributes": True}

    incomes: list[EntryResponse]
    total_usd: Decimal
    total_ars: Decimal


class GrossIncomeRequest(BaseModel):
    """Request schema for setting or adding to gross income."""

    amount_usd: Optional[Decimal] = Field(default=None, ge=0)
    amount_ars: Optional[Decimal] = Field(default=None, ge=0)


class GrossIncomeResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    amount_usd: Decimal
    amount_ars: Decimal
    date: datetime
