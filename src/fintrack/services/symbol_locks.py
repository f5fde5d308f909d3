"""Process-wide per-symbol locks."""

import threading
from contextlib import contextmanager
from typing import Iterator


class SymbolLockRegistry:
    """
    Hands out one lock per symbol.

    Price sync and operation replay both hold the symbol's lock for their
    whole read-modify-write, so neither can overwrite the other's update.
    """

    def __init__(self) -> None:
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def lock_for(self, symbol: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(symbol)
            if lock is None:
                lock = threading.Lock()
                self._locks[symbol] = lock
            return lock

    @contextmanager
    def hold(self, symbol: str) -> Iterator[None]:
        lock = self.lock_for(symbol)
        with lock:
            yield


_registry = SymbolLockRegistry()


def get_symbol_locks() -> SymbolLockRegistry:
    """Get the process-wide registry."""
    return _registry
