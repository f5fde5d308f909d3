"""Read-side queries over positions and valuation history."""

import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Optional

from fintrack.core.exceptions import ValidationError
from fintrack.core.timezone import now_local
from fintrack.domain.models import Position, ValuationSnapshot
from fintrack.domain.views import PerformanceView
from fintrack.repositories.protocols import PositionRepository, ValuationRepository

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")
_HUNDRED = Decimal("100")


def _percent(delta: Decimal, base: Decimal) -> Optional[Decimal]:
    if base == 0:
        return None
    return (delta / base * _HUNDRED).quantize(_CENT, rounding=ROUND_HALF_UP)


class PortfolioQueryService:
    """
    Service for portfolio reads used by reporting.

    Apart from `get_latest_valuation` seeding the history, nothing here
    writes.
    """

    def __init__(
        self,
        position_repo: PositionRepository,
        valuation_repo: ValuationRepository,
        clock: Callable[[], datetime] = now_local,
    ):
        self._positions = position_repo
        self._valuations = valuation_repo
        self._clock = clock

    def get_all_positions(self) -> list[Position]:
        """All positions, open and closed, ordered by symbol."""
        return self._positions.list_all()

    def get_latest_valuation(self) -> Optional[ValuationSnapshot]:
        """
        Most recent snapshot.

        With an empty history the current positions are valued, persisted
        and returned; with no positions either, returns None.
        """
        latest = self._valuations.latest()
        if latest is not None:
            return latest

        positions = self._positions.list_all()
        if not positions:
            return None
        logger.info("No valuation history yet, seeding it from %d positions", len(positions))
        return self._valuations.append(ValuationSnapshot.from_positions(positions, self._clock()))

    def get_previous_valuation(self) -> Optional[ValuationSnapshot]:
        """Second most recent snapshot; None with fewer than two."""
        return self._valuations.previous()

    def get_performance(self) -> PerformanceView:
        """Compare the latest snapshot against the previous one in both currencies."""
        latest = self.get_latest_valuation()
        previous = self.get_previous_valuation()
        view = PerformanceView(latest=latest, previous=previous)
        if latest is None or previous is None:
            return view

        view.delta_ars = latest.total_value_ars - previous.total_value_ars
        view.delta_usd = latest.total_value_usd - previous.total_value_usd
        view.percent_ars = _percent(view.delta_ars, previous.total_value_ars)
        view.percent_usd = _percent(view.delta_usd, previous.total_value_usd)
        return view

    def list_valuations(self, limit: int = 30) -> list[ValuationSnapshot]:
        """Valuation history, newest first."""
        if limit < 1:
            raise ValidationError("limit must be at least 1")
        return self._valuations.list_recent(limit=limit)
