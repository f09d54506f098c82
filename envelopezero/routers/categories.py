from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from envelopezero import models
from envelopezero.core.database import get_db
from envelopezero.core.deps import get_current_user
from envelopezero.schemas import CategoryOut, CategorySave
from envelopezero.services.ledger_service import LedgerService


router = APIRouter(prefix="/categories", tags=["categories"])


def _category_to_schema(row: models.Category) -> CategoryOut:
    return CategoryOut(
        id=row.public_id,
        budget_id=row.budget.public_id,
        supercategory_id=row.supercategory.public_id,
        name=row.name,
    )


@router.get("", response_model=list[CategoryOut])
def list_categories(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    return [_category_to_schema(c) for c in LedgerService(db, current_user).list_categories()]


@router.post("", response_model=CategoryOut)
def create_category(
    payload: CategorySave,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    row = LedgerService(db, current_user).create_category(payload.budget_id, payload.supercategory_id, payload.name)
    return _category_to_schema(row)


@router.put("/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: str,
    payload: CategorySave,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    row = LedgerService(db, current_user).update_category(
        category_id, payload.budget_id, payload.supercategory_id, payload.name
    )
    return _category_to_schema(row)


@router.delete("/{category_id}", status_code=204)
def delete_category(category_id: str, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    LedgerService(db, current_user).soft_delete(models.Category, category_id)
    return Response(status_code=204)
