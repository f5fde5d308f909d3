"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fintrack import __version__
from fintrack.config.settings import get_settings
from fintrack.config.logging_config import setup_logging
from fintrack.repositories.sqlalchemy.database import init_db
from fintrack.api.deps import close_clients
from fintrack.api.routers import (
    auth_router,
    exchange_rate_router,
    portfolio_router,
    ledger_router,
)
from fintrack.core.exceptions import AppError

# Error code -> HTTP status; anything unlisted is a client error
ERROR_STATUS = {
    "VALIDATION_ERROR": 400,
    "OVERSELL_DETECTED": 400,
    "AUTHENTICATION_FAILED": 401,
    "NOT_FOUND": 404,
    "RATE_FETCH_FAILED": 502,
    "BROKER_REQUEST_FAILED": 502,
    "STORE_WRITE_FAILED": 500,
    "DESERIALIZATION_FAILED": 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    init_db()
    yield
    # Shutdown
    close_clients()


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Personal finance tracker with broker-reconciled portfolio valuation",
    version=__version__,
    lifespan=lifespan,
)

# Include routers
app.include_router(auth_router)
app.include_router(exchange_rate_router)
app.include_router(portfolio_router)
app.include_router(ledger_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    return JSONResponse(
        status_code=ERROR_STATUS.get(exc.code, 400),
        content={"error": exc.code, "message": exc.message},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": __version__,
        "docs": "/docs",
    }
