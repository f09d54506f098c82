from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable, Protocol

from sqlalchemy.orm import selectinload

from envelopezero import models
from envelopezero.core.database import atomic
from envelopezero.core.errors import NotFoundOrForbidden, ValidationError
from envelopezero.schemas import SplitIn, TransactionSave
from envelopezero.services.ledger_service import OwnedQueries

logger = logging.getLogger(__name__)


class SplitAmounts(Protocol):
    inflow: int
    outflow: int


def validate_splits(splits: Iterable[SplitAmounts]) -> None:
    """Reject split sets that cannot be posted.

    A transaction needs at least one split, and every split moves money in
    exactly one direction: both amounts non-negative, exactly one positive.
    """
    splits = list(splits)
    if not splits:
        raise ValidationError("At least one split is required")
    for idx, split in enumerate(splits):
        if split.inflow < 0 or split.outflow < 0:
            raise ValidationError(f"Split {idx}: amounts must not be negative")
        if (split.inflow > 0) == (split.outflow > 0):
            raise ValidationError(f"Split {idx}: exactly one of inflow/outflow must be positive")


TransactionWithSplits = tuple[models.Transaction, list[models.TransactionSplit]]


class TransactionService(OwnedQueries):
    def list_transactions(self) -> list[TransactionWithSplits]:
        rows = (
            self.live(models.Transaction)
            .options(selectinload(models.Transaction.budget), selectinload(models.Transaction.account))
            .order_by(
                models.Transaction.tx_date.desc(),
                models.Transaction.created_at.desc(),
                models.Transaction.id.desc(),
            )
            .all()
        )
        splits_by_tx = self._live_splits([r.id for r in rows])
        return [(r, splits_by_tx.get(r.id, [])) for r in rows]

    def create_transaction(self, payload: TransactionSave) -> TransactionWithSplits:
        validate_splits(payload.splits)
        budget, account, categories = self._resolve_refs(payload)
        with atomic(self.db):
            tx = models.Transaction(user_id=self.user.id)
            self._apply_fields(tx, payload, budget, account)
            self.db.add(tx)
            self.db.flush()
            self._insert_splits(tx, payload.splits, categories)
        return tx, self._live_splits([tx.id]).get(tx.id, [])

    def update_transaction(self, public_id: str, payload: TransactionSave) -> TransactionWithSplits:
        """Replace header fields and the full split set of a transaction.

        Prior splits are soft-deleted and the new set is inserted, all in one
        unit of work.
        """
        tx = self.get(models.Transaction, public_id, "Transaction")
        validate_splits(payload.splits)
        budget, account, categories = self._resolve_refs(payload)
        with atomic(self.db):
            self._apply_fields(tx, payload, budget, account)
            tx.updated_at = models.utcnow_naive()
            self.db.query(models.TransactionSplit).filter(
                models.TransactionSplit.transaction_id == tx.id,
                models.TransactionSplit.deleted_at.is_(None),
            ).update({models.TransactionSplit.deleted_at: models.utcnow_naive()}, synchronize_session=False)
            self._insert_splits(tx, payload.splits, categories)
        return tx, self._live_splits([tx.id]).get(tx.id, [])

    def delete_transaction(self, public_id: str) -> None:
        self.soft_delete(models.Transaction, public_id)

    # ---- Helpers ---------------------------------------------------------
    def _resolve_refs(
        self, payload: TransactionSave
    ) -> tuple[models.Budget, models.Account, dict[str, models.Category]]:
        budget = self.get(models.Budget, payload.budget_id, "Budget")
        account = self.get(models.Account, payload.account_id, "Account")
        if account.budget_id != budget.id:
            raise NotFoundOrForbidden("Account not found in budget")

        wanted = {s.category_id for s in payload.splits}
        found = {
            c.public_id: c
            for c in self.live(models.Category).filter(models.Category.public_id.in_(wanted)).all()
        }
        for category_id in wanted:
            category = found.get(category_id)
            if category is None or category.budget_id != budget.id:
                raise NotFoundOrForbidden("Category not found in budget")
        return budget, account, found

    @staticmethod
    def _apply_fields(
        tx: models.Transaction, payload: TransactionSave, budget: models.Budget, account: models.Account
    ) -> None:
        tx.budget_id = budget.id
        tx.account_id = account.id
        tx.tx_date = payload.date
        tx.payee = payload.payee.strip() if payload.payee and payload.payee.strip() else None
        tx.memo = payload.memo

    def _insert_splits(
        self, tx: models.Transaction, splits: list[SplitIn], categories: dict[str, models.Category]
    ) -> None:
        for split in splits:
            self.db.add(
                models.TransactionSplit(
                    user_id=self.user.id,
                    transaction_id=tx.id,
                    category_id=categories[split.category_id].id,
                    memo=split.memo,
                    inflow=split.inflow,
                    outflow=split.outflow,
                )
            )

    def _live_splits(self, transaction_ids: list[int]) -> dict[int, list[models.TransactionSplit]]:
        if not transaction_ids:
            return {}
        rows = (
            self.db.query(models.TransactionSplit)
            .options(selectinload(models.TransactionSplit.category))
            .filter(
                models.TransactionSplit.transaction_id.in_(transaction_ids),
                models.TransactionSplit.deleted_at.is_(None),
            )
            .order_by(models.TransactionSplit.created_at, models.TransactionSplit.id)
            .all()
        )
        grouped: dict[int, list[models.TransactionSplit]] = defaultdict(list)
        for row in rows:
            grouped[row.transaction_id].append(row)
        return grouped
