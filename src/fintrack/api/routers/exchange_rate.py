"""Exchange rate endpoints."""

from fastapi import APIRouter, Depends, Response

from fintrack.api.deps import get_exchange_rate_service
from fintrack.api.schemas import ExchangeRateResponse
from fintrack.services import ExchangeRateService

router = APIRouter(prefix="/exchange-rate", tags=["exchange-rate"])


@router.get("", response_model=ExchangeRateResponse)
def get_exchange_rate(
    rates: ExchangeRateService = Depends(get_exchange_rate_service),
) -> ExchangeRateResponse:
    """Current buy/sell rate (cached after the first fetch)."""
    return ExchangeRateResponse.model_validate(rates.get_rate())


@router.delete("", status_code=204)
def invalidate_exchange_rate(
    rates: ExchangeRateService = Depends(get_exchange_rate_service),
) -> Response:
    """Drop the cached rate so the next read fetches a fresh one."""
    rates.invalidate()
    return Response(status_code=204)
