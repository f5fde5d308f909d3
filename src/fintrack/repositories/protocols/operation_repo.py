"""Operations ledger repository protocol."""

from datetime import datetime
from typing import Protocol, Optional

from fintrack.domain.models import RecordedOperation


class OperationRepository(Protocol):
    """Interface for the immutable operations ledger."""

    def record(self, operation: RecordedOperation, commit: bool = True) -> RecordedOperation:
        """Insert an applied operation."""
        ...

    def exists(self, operation_id: str) -> bool:
        """Check whether an operation was already recorded."""
        ...

    def list_all(self, symbol: Optional[str] = None) -> list[RecordedOperation]:
        """List recorded operations in date order."""
        ...

    def latest_date(self) -> Optional[datetime]:
        """Date of the newest recorded operation."""
        ...
