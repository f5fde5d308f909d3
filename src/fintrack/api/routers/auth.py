"""Broker session endpoints."""

from fastapi import APIRouter, Depends

from fintrack.api.deps import get_broker_gateway
from fintrack.api.schemas import LoginRequest, SessionResponse
from fintrack.providers import BrokerGateway

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/session", response_model=SessionResponse)
def get_session_state(broker: BrokerGateway = Depends(get_broker_gateway)) -> SessionResponse:
    """Whether a broker session (or a stored refresh token) is available."""
    return SessionResponse(authenticated=broker.has_session())


@router.post("/login", response_model=SessionResponse)
def login(
    data: LoginRequest,
    broker: BrokerGateway = Depends(get_broker_gateway),
) -> SessionResponse:
    """Exchange broker credentials for a token pair."""
    broker.authenticate(data.username, data.password)
    return SessionResponse(authenticated=True)


@router.post("/logout", response_model=SessionResponse)
def logout(broker: BrokerGateway = Depends(get_broker_gateway)) -> SessionResponse:
    """Drop the broker session and its stored tokens."""
    broker.logout()
    return SessionResponse(authenticated=False)
