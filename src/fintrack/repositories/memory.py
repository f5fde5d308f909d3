"""In-memory store implementations (no persistence)."""

from typing import Optional


class InMemoryCredentialStore:
    """
    Process-local credential store.

    Used when no token encryption secret is configured: tokens then live
    only as long as the process and are never written to disk.
    """

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)
