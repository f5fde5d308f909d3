"""Encrypted credential store backed by the local database."""

import base64
import hashlib
from typing import Callable, Optional

from cryptography.fernet import Fernet, InvalidToken
from sqlalchemy.orm import Session

from fintrack.core.timezone import now_local
from fintrack.repositories.sqlalchemy.database import commit_or_raise
from fintrack.repositories.sqlalchemy.orm_models import CredentialORM
from fintrack.repositories.sqlalchemy.row_parsing import write_datetime


def fernet_from_secret(secret: str) -> Fernet:
    """Derive a Fernet key from an arbitrary secret string."""
    if not secret or not secret.strip():
        raise ValueError("token encryption secret must not be empty")
    digest = hashlib.sha256(secret.strip().encode("utf-8")).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


class EncryptedCredentialStore:
    """
    Stores broker tokens encrypted at rest.

    Opens a short-lived session per call; the store outlives request-scoped
    sessions because the broker gateway holding it is process-wide.
    """

    def __init__(self, session_factory: Callable[[], Session], secret: str):
        self._session_factory = session_factory
        self._fernet = fernet_from_secret(secret)

    def get(self, key: str) -> Optional[str]:
        db = self._session_factory()
        try:
            row = db.query(CredentialORM).filter(CredentialORM.key == key).first()
            if row is None:
                return None
            try:
                return self._fernet.decrypt(row.value_enc.encode("utf-8")).decode("utf-8")
            except InvalidToken:
                # Written with a different secret; treat as absent
                return None
        finally:
            db.close()

    def set(self, key: str, value: str) -> None:
        ciphertext = self._fernet.encrypt(value.encode("utf-8")).decode("utf-8")
        db = self._session_factory()
        try:
            row = db.query(CredentialORM).filter(CredentialORM.key == key).first()
            if row is None:
                row = CredentialORM(key=key, value_enc=ciphertext)
                db.add(row)
            else:
                row.value_enc = ciphertext
            row.updated_at = write_datetime(now_local())
            commit_or_raise(db, f"store credential {key}")
        finally:
            db.close()

    def delete(self, key: str) -> None:
        db = self._session_factory()
        try:
            db.query(CredentialORM).filter(CredentialORM.key == key).delete()
            commit_or_raise(db, f"delete credential {key}")
        finally:
            db.close()
