"""Pydantic schemas for broker session and exchange rate endpoints."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Broker credentials. Used once for the token exchange, never stored."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class SessionResponse(BaseModel):
    authenticated: bool


class ExchangeRateResponse(BaseModel):
    """Response schema for the current exchange rate."""

    model_config = {"from_attributes": True}

    buy_rate: Decimal
    sell_rate: Decimal
    updated_at: datetime
