"""Secure credential store protocol."""

from typing import Protocol, Optional


class CredentialStore(Protocol):
    """Key/value store for broker tokens. Implementations must not keep plaintext on disk."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...
