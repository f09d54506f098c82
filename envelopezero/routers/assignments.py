from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from envelopezero import models
from envelopezero.core.database import get_db
from envelopezero.core.deps import get_current_user, require_assignments_enabled
from envelopezero.schemas import CategoryAssignmentCreate, CategoryAssignmentOut
from envelopezero.services.assignment_service import AssignmentService
from envelopezero.utils.normalization import format_month


# Flag check runs before authentication
router = APIRouter(
    prefix="/category-assignments",
    tags=["category-assignments"],
    dependencies=[Depends(require_assignments_enabled)],
)


def _assignment_to_schema(row: models.CategoryAssignment) -> CategoryAssignmentOut:
    return CategoryAssignmentOut(
        id=row.public_id,
        budget_id=row.budget.public_id,
        category_id=row.category.public_id,
        month=format_month(row.month),
        amount=row.amount,
    )


@router.get("", response_model=list[CategoryAssignmentOut])
def list_assignments(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    return [_assignment_to_schema(a) for a in AssignmentService(db, current_user).list_assignments()]


@router.post("", response_model=CategoryAssignmentOut)
def create_assignment(
    payload: CategoryAssignmentCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    row = AssignmentService(db, current_user).create_assignment(
        payload.budget_id, payload.category_id, payload.month, payload.amount
    )
    return _assignment_to_schema(row)
