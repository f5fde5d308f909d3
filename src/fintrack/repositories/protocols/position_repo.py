"""Position repository protocol."""

from typing import Protocol, Optional

from fintrack.domain.models import Position


class PositionRepository(Protocol):
    """Interface for portfolio position data access."""

    def get(self, symbol: str) -> Optional[Position]:
        """Get the position for a symbol."""
        ...

    def list_all(self) -> list[Position]:
        """List all positions ordered by symbol ascending."""
        ...

    def add(self, position: Position, commit: bool = True) -> Position:
        """Insert a new position (symbol must not exist)."""
        ...

    def update(self, position: Position, commit: bool = True) -> Position:
        """Overwrite an existing position. commit=False stages it in the open unit of work."""
        ...
