from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func

from envelopezero import models
from envelopezero.services.ledger_service import OwnedQueries
from envelopezero.utils.normalization import next_month, parse_month


def project_available(inflow: int, outflow: int) -> int:
    return inflow - outflow


@dataclass(frozen=True)
class CategoryProjection:
    category_id: str
    category_name: str
    assigned: int
    activity: int
    available: int


@dataclass(frozen=True)
class Dashboard:
    inflow: int
    outflow: int
    available: int


class ProjectionService(OwnedQueries):
    """Read-only aggregates over the caller's ledger.

    Sums are computed in SQL with COALESCE so empty sets yield 0, and every
    aggregate excludes soft-deleted transactions, splits and assignments.
    """

    def month_projection(self, month: str) -> list[CategoryProjection]:
        start = parse_month(month)
        end = next_month(start)

        categories = self.live(models.Category).order_by(models.Category.created_at, models.Category.id).all()

        assigned_rows = (
            self.db.query(
                models.CategoryAssignment.category_id,
                func.coalesce(func.sum(models.CategoryAssignment.amount), 0),
            )
            .filter(
                models.CategoryAssignment.user_id == self.user.id,
                models.CategoryAssignment.deleted_at.is_(None),
                models.CategoryAssignment.month == start,
            )
            .group_by(models.CategoryAssignment.category_id)
            .all()
        )
        assigned = {category_id: int(total) for category_id, total in assigned_rows}

        activity_rows = (
            self.db.query(
                models.TransactionSplit.category_id,
                func.coalesce(func.sum(models.TransactionSplit.outflow - models.TransactionSplit.inflow), 0),
            )
            .join(models.Transaction, models.Transaction.id == models.TransactionSplit.transaction_id)
            .filter(
                models.Transaction.user_id == self.user.id,
                models.Transaction.deleted_at.is_(None),
                models.TransactionSplit.deleted_at.is_(None),
                models.Transaction.tx_date >= start,
                models.Transaction.tx_date < end,
            )
            .group_by(models.TransactionSplit.category_id)
            .all()
        )
        activity = {category_id: int(total) for category_id, total in activity_rows}

        result: list[CategoryProjection] = []
        for category in categories:
            a = assigned.get(category.id, 0)
            act = activity.get(category.id, 0)
            result.append(
                CategoryProjection(
                    category_id=category.public_id,
                    category_name=category.name,
                    assigned=a,
                    activity=act,
                    available=a - act,
                )
            )
        return result

    def dashboard(self) -> Dashboard:
        inflow, outflow = (
            self.db.query(
                func.coalesce(func.sum(models.TransactionSplit.inflow), 0),
                func.coalesce(func.sum(models.TransactionSplit.outflow), 0),
            )
            .join(models.Transaction, models.Transaction.id == models.TransactionSplit.transaction_id)
            .filter(
                models.Transaction.user_id == self.user.id,
                models.Transaction.deleted_at.is_(None),
                models.TransactionSplit.deleted_at.is_(None),
            )
            .one()
        )
        inflow, outflow = int(inflow), int(outflow)
        return Dashboard(inflow=inflow, outflow=outflow, available=project_available(inflow, outflow))
