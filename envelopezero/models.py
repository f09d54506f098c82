from __future__ import annotations

from datetime import date, datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .core.database import Base


def utcnow_naive() -> datetime:
    """Return the current UTC time as a naive datetime (stored as-is)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_public_id() -> str:
    return uuid4().hex


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow_naive, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow_naive, onupdate=utcnow_naive, nullable=False)


class PublicIdMixin:
    public_id: Mapped[str] = mapped_column(String(32), unique=True, default=new_public_id, nullable=False)


class SoftDeleteMixin:
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


# ---- Identity ---------------------------------------------------------------


class User(Base, PublicIdMixin, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    emails: Mapped[list["UserEmail"]] = relationship(back_populates="user")


class UserEmail(Base, TimestampMixin):
    __tablename__ = "user_email"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    user: Mapped[User] = relationship(back_populates="emails")


class AuthMethod(Base, TimestampMixin):
    __tablename__ = "auth_method"
    __table_args__ = (
        CheckConstraint("method_type IN ('magic_link_email', 'passkey')", name="ck_auth_method_type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    method_type: Mapped[str] = mapped_column(String(32), nullable=False)
    label: Mapped[str | None] = mapped_column(String(320), nullable=True)


class UserSession(Base, TimestampMixin):
    __tablename__ = "user_session"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class MagicLinkToken(Base, TimestampMixin):
    __tablename__ = "magic_link_token"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    consumed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class EmailOutbox(Base, TimestampMixin):
    __tablename__ = "email_outbox"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    to_email: Mapped[str] = mapped_column(String(320), nullable=False)
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    sent_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)


# ---- Ledger -----------------------------------------------------------------


class Budget(Base, PublicIdMixin, TimestampMixin, SoftDeleteMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    currency_code: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Account(Base, PublicIdMixin, TimestampMixin, SoftDeleteMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    budget_id: Mapped[int] = mapped_column(ForeignKey("budget.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)

    budget: Mapped[Budget] = relationship()


class Supercategory(Base, PublicIdMixin, TimestampMixin, SoftDeleteMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    budget_id: Mapped[int] = mapped_column(ForeignKey("budget.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)

    budget: Mapped[Budget] = relationship()


class Category(Base, PublicIdMixin, TimestampMixin, SoftDeleteMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    budget_id: Mapped[int] = mapped_column(ForeignKey("budget.id"), nullable=False, index=True)
    supercategory_id: Mapped[int] = mapped_column(ForeignKey("supercategory.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)

    budget: Mapped[Budget] = relationship()
    supercategory: Mapped[Supercategory] = relationship()


class Transaction(Base, PublicIdMixin, TimestampMixin, SoftDeleteMixin):
    __table_args__ = (
        Index("ix_transaction_user_date", "user_id", "tx_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    budget_id: Mapped[int] = mapped_column(ForeignKey("budget.id"), nullable=False, index=True)
    account_id: Mapped[int] = mapped_column(ForeignKey("account.id"), nullable=False, index=True)
    tx_date: Mapped[date] = mapped_column(Date, nullable=False)
    payee: Mapped[str | None] = mapped_column(String(200), nullable=True)
    memo: Mapped[str | None] = mapped_column(Text, nullable=True)

    budget: Mapped[Budget] = relationship()
    account: Mapped[Account] = relationship()


class TransactionSplit(Base, PublicIdMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "transaction_split"
    __table_args__ = (
        CheckConstraint("inflow >= 0 AND outflow >= 0", name="ck_split_non_negative"),
        CheckConstraint("(inflow > 0) != (outflow > 0)", name="ck_split_one_side"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    transaction_id: Mapped[int] = mapped_column(ForeignKey("transaction.id"), nullable=False, index=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("category.id"), nullable=False, index=True)
    memo: Mapped[str | None] = mapped_column(Text, nullable=True)
    inflow: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    outflow: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    transaction: Mapped[Transaction] = relationship()
    category: Mapped[Category] = relationship()


class CategoryAssignment(Base, PublicIdMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "category_assignment"
    __table_args__ = (
        Index("ix_category_assignment_category_month", "category_id", "month"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    budget_id: Mapped[int] = mapped_column(ForeignKey("budget.id"), nullable=False, index=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("category.id"), nullable=False)
    # Always the first day of the month
    month: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    budget: Mapped[Budget] = relationship()
    category: Mapped[Category] = relationship()
