from __future__ import annotations

from envelopezero import models
from envelopezero.core.database import atomic
from envelopezero.core.errors import NotFoundOrForbidden
from envelopezero.services.ledger_service import OwnedQueries
from envelopezero.utils.normalization import parse_month


class AssignmentService(OwnedQueries):
    def list_assignments(self) -> list[models.CategoryAssignment]:
        return (
            self.live(models.CategoryAssignment)
            .order_by(
                models.CategoryAssignment.month.desc(),
                models.CategoryAssignment.created_at.desc(),
                models.CategoryAssignment.id.desc(),
            )
            .all()
        )

    def create_assignment(self, budget_id: str, category_id: str, month: str, amount: int) -> models.CategoryAssignment:
        """Record money assigned to a category for a month.

        Assignments are additive: each call inserts a new row and the month
        total is their sum.
        """
        month_start = parse_month(month)
        budget = self.get(models.Budget, budget_id, "Budget")
        category = self.get(models.Category, category_id, "Category")
        if category.budget_id != budget.id:
            raise NotFoundOrForbidden("Category not found in budget")
        with atomic(self.db):
            row = models.CategoryAssignment(
                user_id=self.user.id,
                budget_id=budget.id,
                category_id=category.id,
                month=month_start,
                amount=amount,
            )
            self.db.add(row)
        self.db.refresh(row)
        return row
