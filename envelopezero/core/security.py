"""Token primitives and bearer-session resolution.

Raw tokens only ever travel to the client; the database stores their SHA-256
hex digest. Session resolution goes through :class:`SessionLookup` so the
rules can be exercised without a database.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
from datetime import datetime
from typing import Protocol

from sqlalchemy.orm import Session

from envelopezero import models
from envelopezero.core.errors import AuthenticationError

BEARER_PREFIX = "Bearer "


def random_token(num_bytes: int) -> str:
    """Return ``num_bytes`` of CSPRNG output as unpadded URL-safe base64."""
    raw = secrets.token_bytes(num_bytes)
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def extract_bearer_token(authorization: str | None) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header.

    Raises AuthenticationError when the header is absent, uses another scheme
    or carries an empty token.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthenticationError("Missing bearer token")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationError("Missing bearer token")
    return token


class SessionLookup(Protocol):
    def find_active_user_id(self, token_hash: str, now: datetime) -> int | None:
        """Return the owning user id of an unrevoked, unexpired session."""
        ...


class SqlSessionLookup:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_active_user_id(self, token_hash: str, now: datetime) -> int | None:
        row = (
            self.db.query(models.UserSession.user_id)
            .filter(
                models.UserSession.token_hash == token_hash,
                models.UserSession.revoked_at.is_(None),
                models.UserSession.expires_at > now,
            )
            .first()
        )
        return row[0] if row else None


def resolve_user_id(lookup: SessionLookup, token: str, now: datetime | None = None) -> int:
    user_id = lookup.find_active_user_id(hash_token(token), now or models.utcnow_naive())
    if user_id is None:
        raise AuthenticationError("Invalid or expired session")
    return user_id
