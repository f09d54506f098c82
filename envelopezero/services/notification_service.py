from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

from sqlalchemy.orm import Session

from envelopezero import models
from envelopezero.core.config import settings
from envelopezero.core.database import atomic

logger = logging.getLogger(__name__)

MAGIC_LINK_SUBJECT = "Your EnvelopeZero sign-in link"


def magic_link_body(link: str) -> str:
    return f"Click to sign in: {link}"


class NotificationService:
    """Outbox-backed email delivery.

    Every message is recorded in ``email_outbox`` before any delivery attempt.
    Delivery happens after the outbox row is committed, so no database
    transaction is open during network I/O. Failures are stored on the row
    and logged; they never surface to the HTTP caller.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def enqueue_magic_link(self, to_email: str, link: str, token: str) -> models.EmailOutbox:
        """Stage the outbox row in the caller's unit of work (token redacted)."""
        row = models.EmailOutbox(
            to_email=to_email,
            subject=MAGIC_LINK_SUBJECT,
            body=magic_link_body(link).replace(token, "<redacted>"),
        )
        self.db.add(row)
        self.db.flush()
        return row

    def deliver(self, row: models.EmailOutbox, body: str) -> None:
        """Send a committed outbox row and record the outcome in its own unit."""
        if not settings.SMTP_ENABLED:
            return
        msg = EmailMessage()
        msg["From"] = settings.SMTP_FROM
        msg["To"] = row.to_email
        msg["Subject"] = row.subject
        msg.set_content(body)
        try:
            with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as smtp:
                smtp.send_message(msg)
        except (OSError, smtplib.SMTPException) as exc:
            logger.warning("Outbox %s delivery failed: %s", row.id, exc.__class__.__name__)
            with atomic(self.db):
                row.last_error = str(exc)[:500]
            return
        with atomic(self.db):
            row.sent_at = models.utcnow_naive()
