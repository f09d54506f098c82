from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from envelopezero import models
from envelopezero.core.config import settings
from envelopezero.core.database import get_db
from envelopezero.core.errors import AuthenticationError, FeatureDisabled
from envelopezero.core.security import SqlSessionLookup, extract_bearer_token, resolve_user_id


def get_bearer_token(request: Request) -> str:
    return extract_bearer_token(request.headers.get("Authorization"))


def get_current_user(token: str = Depends(get_bearer_token), db: Session = Depends(get_db)) -> models.User:
    """Resolve the caller from the bearer session token.

    Tests may override this dependency to act as a specific user.
    """
    user_id = resolve_user_id(SqlSessionLookup(db), token)
    user = db.get(models.User, user_id)
    if user is None:
        raise AuthenticationError("Invalid or expired session")
    return user


# Flags are read per request
def require_assignments_enabled() -> None:
    if not settings.FEATURE_ASSIGNMENTS:
        raise FeatureDisabled()


def require_passkeys_enabled() -> None:
    if not settings.FEATURE_PASSKEYS:
        raise FeatureDisabled()
