from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from envelopezero import models
from envelopezero.core.config import settings
from envelopezero.core.database import atomic
from envelopezero.core.errors import AuthenticationError
from envelopezero.core.security import hash_token, random_token
from envelopezero.services.notification_service import NotificationService, magic_link_body
from envelopezero.utils.normalization import normalize_email

logger = logging.getLogger(__name__)

MAGIC_LINK_MESSAGE = "If this email is registered, a magic link will be sent."
MAGIC_LINK_TOKEN_BYTES = 32
SESSION_TOKEN_BYTES = 48
DEFAULT_BUDGET_NAME = "My Budget"
DEFAULT_CURRENCY = "USD"


class MagicLinkService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def request(self, email: str | None) -> tuple[str, str | None]:
        """Issue a one-time sign-in link for ``email``.

        Returns ``(message, debug_token)``; the message never reveals whether
        the address is known.
        """
        email = normalize_email(email)
        token = random_token(MAGIC_LINK_TOKEN_BYTES)
        now = models.utcnow_naive()
        link = f"{settings.APP_ORIGIN.rstrip('/')}/?token={token}"

        notifier = NotificationService(self.db)
        with atomic(self.db):
            self.db.add(
                models.MagicLinkToken(
                    email=email,
                    token_hash=hash_token(token),
                    expires_at=now + timedelta(minutes=settings.MAGIC_LINK_TTL_MINUTES),
                )
            )
            outbox = notifier.enqueue_magic_link(email, link, token)

        # Token and outbox row are committed before any mail goes out
        notifier.deliver(outbox, magic_link_body(link))

        logger.info("Magic link issued for domain %s", email.rsplit("@", 1)[-1])
        return MAGIC_LINK_MESSAGE, token if settings.expose_debug_token else None

    def verify(self, token: str) -> tuple[str, models.User]:
        """Redeem a magic-link token and open a session.

        Returns ``(session_token, user)``. The session token is only available
        here; the database keeps its hash.
        """
        token_hash = hash_token(token or "")
        now = models.utcnow_naive()

        with atomic(self.db):
            pending = (
                self.db.query(models.MagicLinkToken)
                .filter(
                    models.MagicLinkToken.token_hash == token_hash,
                    models.MagicLinkToken.consumed_at.is_(None),
                    models.MagicLinkToken.expires_at > now,
                )
                .order_by(models.MagicLinkToken.created_at.desc(), models.MagicLinkToken.id.desc())
                .first()
            )
            if pending is None:
                raise AuthenticationError("Invalid or expired token")

            # Guarded update: a concurrent redemption of the same row matches zero rows
            consumed = (
                self.db.query(models.MagicLinkToken)
                .filter(models.MagicLinkToken.id == pending.id, models.MagicLinkToken.consumed_at.is_(None))
                .update({models.MagicLinkToken.consumed_at: now}, synchronize_session=False)
            )
            if consumed != 1:
                raise AuthenticationError("Invalid or expired token")

            user = self._find_or_create_user(pending.email, now)

            session_token = random_token(SESSION_TOKEN_BYTES)
            self.db.add(
                models.UserSession(
                    user_id=user.id,
                    token_hash=hash_token(session_token),
                    expires_at=now + timedelta(days=settings.SESSION_TTL_DAYS),
                )
            )

        logger.info("Session issued for user %s", user.public_id)
        return session_token, user

    def logout(self, token: str) -> None:
        with atomic(self.db):
            self.db.query(models.UserSession).filter(
                models.UserSession.token_hash == hash_token(token),
                models.UserSession.revoked_at.is_(None),
            ).update({models.UserSession.revoked_at: models.utcnow_naive()}, synchronize_session=False)

    def primary_email(self, user: models.User) -> str | None:
        row = (
            self.db.query(models.UserEmail)
            .filter(models.UserEmail.user_id == user.id)
            .order_by(models.UserEmail.verified_at.desc().nullslast(), models.UserEmail.id.desc())
            .first()
        )
        return row.email if row else None

    # ---- Helpers ---------------------------------------------------------
    def _find_or_create_user(self, email: str, now: datetime) -> models.User:
        existing = self.db.query(models.UserEmail).filter(models.UserEmail.email == email).first()
        if existing is not None:
            if existing.verified_at is None:
                existing.verified_at = now
            return existing.user

        user = models.User()
        self.db.add(user)
        self.db.flush()
        self.db.add(models.UserEmail(user_id=user.id, email=email, verified_at=now))
        self.db.add(models.AuthMethod(user_id=user.id, method_type="magic_link_email", label=email))
        self.db.add(
            models.Budget(
                user_id=user.id,
                name=DEFAULT_BUDGET_NAME,
                currency_code=DEFAULT_CURRENCY,
                is_default=True,
            )
        )
        self.db.flush()
        logger.info("Created user %s", user.public_id)
        return user
