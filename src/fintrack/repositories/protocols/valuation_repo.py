"""Valuation history repository protocol."""

from typing import Protocol, Optional

from fintrack.domain.models import ValuationSnapshot


class ValuationRepository(Protocol):
    """Interface for the append-only valuation time series."""

    def append(self, snapshot: ValuationSnapshot) -> ValuationSnapshot:
        """Append a new snapshot."""
        ...

    def latest(self) -> Optional[ValuationSnapshot]:
        """Most recent snapshot."""
        ...

    def previous(self) -> Optional[ValuationSnapshot]:
        """Second most recent snapshot."""
        ...

    def list_recent(self, limit: int = 30) -> list[ValuationSnapshot]:
        """Snapshots newest first."""
        ...
