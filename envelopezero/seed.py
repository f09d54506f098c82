from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from .core.database import SessionLocal
from .models import Account, AuthMethod, Budget, User, UserEmail, utcnow_naive

logger = logging.getLogger(__name__)

SEED_EMAIL = "seed@envelopezero.local"


def seed_dev_data(db: Session) -> User:
    """Ensure the development user, its default budget and a checking account.

    Idempotent: each piece is looked up before it is created.
    """
    try:
        email = db.query(UserEmail).filter_by(email=SEED_EMAIL).first()
        if email is None:
            user = User()
            db.add(user)
            db.flush()
            db.add(UserEmail(user_id=user.id, email=SEED_EMAIL, verified_at=utcnow_naive()))
            db.add(AuthMethod(user_id=user.id, method_type="magic_link_email", label=SEED_EMAIL))
        else:
            user = email.user

        budget = (
            db.query(Budget)
            .filter(Budget.user_id == user.id, Budget.is_default.is_(True), Budget.deleted_at.is_(None))
            .first()
        )
        if budget is None:
            budget = Budget(user_id=user.id, name="Seed Budget", currency_code="USD", is_default=True)
            db.add(budget)
            db.flush()

        account = (
            db.query(Account)
            .filter(Account.budget_id == budget.id, Account.name == "Checking", Account.deleted_at.is_(None))
            .first()
        )
        if account is None:
            db.add(Account(user_id=user.id, budget_id=budget.id, name="Checking"))

        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Seed data ready for %s", SEED_EMAIL)
    return user


def seed() -> None:
    db: Session = SessionLocal()
    try:
        seed_dev_data(db)
    finally:
        db.close()


if __name__ == "__main__":
    seed()
