from __future__ import annotations

import logging
from typing import TypeVar

from sqlalchemy.orm import Session

from envelopezero import models
from envelopezero.core.config import settings
from envelopezero.core.database import atomic
from envelopezero.core.errors import ConflictError, NotFoundOrForbidden, ValidationError

logger = logging.getLogger(__name__)

OwnedRow = TypeVar(
    "OwnedRow",
    models.Budget,
    models.Account,
    models.Supercategory,
    models.Category,
    models.Transaction,
    models.CategoryAssignment,
)


def normalize_currency(value: str | None) -> str:
    code = (value or "USD").strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise ValidationError("currency_code must be a 3-letter code")
    return code


def clean_name(value: str) -> str:
    name = value.strip()
    if not name:
        raise ValidationError("name must not be blank")
    return name


class OwnedQueries:
    """Lookups scoped to one user that hide soft-deleted rows.

    A missing row, a deleted row and another user's row all fail the same way.
    """

    def __init__(self, db: Session, user: models.User) -> None:
        self.db = db
        self.user = user

    def live(self, model: type[OwnedRow]):
        return self.db.query(model).filter(model.user_id == self.user.id, model.deleted_at.is_(None))

    def get(self, model: type[OwnedRow], public_id: str, label: str) -> OwnedRow:
        row = self.live(model).filter(model.public_id == public_id).first()
        if row is None:
            raise NotFoundOrForbidden(f"{label} not found")
        return row

    def soft_delete(self, model: type[OwnedRow], public_id: str) -> int:
        """Mark the caller's row deleted; zero matched rows is not an error."""
        with atomic(self.db):
            return (
                self.live(model)
                .filter(model.public_id == public_id)
                .update({model.deleted_at: models.utcnow_naive()}, synchronize_session=False)
            )


class LedgerService(OwnedQueries):
    # ---- Budgets ---------------------------------------------------------
    def list_budgets(self) -> list[models.Budget]:
        return self.live(models.Budget).order_by(models.Budget.created_at, models.Budget.id).all()

    def create_budget(self, name: str, currency_code: str | None) -> models.Budget:
        currency = normalize_currency(currency_code)
        if not settings.FEATURE_MULTI_BUDGET and self.live(models.Budget).first() is not None:
            raise ConflictError("Multiple budgets are not enabled")
        with atomic(self.db):
            row = models.Budget(user_id=self.user.id, name=clean_name(name), currency_code=currency, is_default=False)
            self.db.add(row)
        self.db.refresh(row)
        return row

    def update_budget(self, public_id: str, name: str, currency_code: str | None) -> models.Budget:
        row = self.get(models.Budget, public_id, "Budget")
        currency = normalize_currency(currency_code or row.currency_code)
        with atomic(self.db):
            row.name = clean_name(name)
            row.updated_at = models.utcnow_naive()
            row.currency_code = currency
        self.db.refresh(row)
        return row

    def delete_budget(self, public_id: str) -> None:
        row = self.live(models.Budget).filter(models.Budget.public_id == public_id).first()
        if row is not None and row.is_default:
            raise ConflictError("The default budget cannot be deleted")
        self.soft_delete(models.Budget, public_id)

    # ---- Accounts --------------------------------------------------------
    def list_accounts(self) -> list[models.Account]:
        return self.live(models.Account).order_by(models.Account.created_at, models.Account.id).all()

    def create_account(self, budget_id: str, name: str) -> models.Account:
        budget = self.get(models.Budget, budget_id, "Budget")
        with atomic(self.db):
            row = models.Account(user_id=self.user.id, budget_id=budget.id, name=clean_name(name))
            self.db.add(row)
        self.db.refresh(row)
        return row

    def update_account(self, public_id: str, budget_id: str, name: str) -> models.Account:
        row = self.get(models.Account, public_id, "Account")
        budget = self.get(models.Budget, budget_id, "Budget")
        with atomic(self.db):
            row.name = clean_name(name)
            row.updated_at = models.utcnow_naive()
            row.budget_id = budget.id
        self.db.refresh(row)
        return row

    # ---- Supercategories -------------------------------------------------
    def list_supercategories(self) -> list[models.Supercategory]:
        return (
            self.live(models.Supercategory)
            .order_by(models.Supercategory.created_at, models.Supercategory.id)
            .all()
        )

    def create_supercategory(self, budget_id: str, name: str) -> models.Supercategory:
        budget = self.get(models.Budget, budget_id, "Budget")
        with atomic(self.db):
            row = models.Supercategory(user_id=self.user.id, budget_id=budget.id, name=clean_name(name))
            self.db.add(row)
        self.db.refresh(row)
        return row

    def update_supercategory(self, public_id: str, budget_id: str, name: str) -> models.Supercategory:
        row = self.get(models.Supercategory, public_id, "Supercategory")
        budget = self.get(models.Budget, budget_id, "Budget")
        with atomic(self.db):
            row.name = clean_name(name)
            row.updated_at = models.utcnow_naive()
            row.budget_id = budget.id
        self.db.refresh(row)
        return row

    # ---- Categories ------------------------------------------------------
    def list_categories(self) -> list[models.Category]:
        return self.live(models.Category).order_by(models.Category.created_at, models.Category.id).all()

    def create_category(self, budget_id: str, supercategory_id: str, name: str) -> models.Category:
        budget, supercategory = self._category_parents(budget_id, supercategory_id)
        with atomic(self.db):
            row = models.Category(
                user_id=self.user.id,
                budget_id=budget.id,
                supercategory_id=supercategory.id,
                name=clean_name(name),
            )
            self.db.add(row)
        self.db.refresh(row)
        return row

    def update_category(self, public_id: str, budget_id: str, supercategory_id: str, name: str) -> models.Category:
        row = self.get(models.Category, public_id, "Category")
        budget, supercategory = self._category_parents(budget_id, supercategory_id)
        with atomic(self.db):
            row.name = clean_name(name)
            row.updated_at = models.utcnow_naive()
            row.budget_id = budget.id
            row.supercategory_id = supercategory.id
        self.db.refresh(row)
        return row

    def _category_parents(self, budget_id: str, supercategory_id: str) -> tuple[models.Budget, models.Supercategory]:
        budget = self.get(models.Budget, budget_id, "Budget")
        supercategory = self.get(models.Supercategory, supercategory_id, "Supercategory")
        if supercategory.budget_id != budget.id:
            raise NotFoundOrForbidden("Supercategory not found in budget")
        return budget, supercategory
