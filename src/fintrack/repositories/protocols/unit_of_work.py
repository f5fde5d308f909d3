"""Unit of work protocol."""

from typing import ContextManager, Protocol


class UnitOfWork(Protocol):
    """Groups writes staged across repositories into one commit."""

    def atomic(self, action: str) -> ContextManager[None]:
        """
        Run a block of staged writes as one transaction.

        Commits when the block exits normally. Any exception rolls back
        every write staged inside the block and propagates; a failing
        commit raises StoreWriteFailed.
        """
        ...
