from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from envelopezero import models
from envelopezero.core.database import get_db
from envelopezero.core.deps import get_current_user
from envelopezero.schemas import SupercategoryOut, SupercategorySave
from envelopezero.services.ledger_service import LedgerService


router = APIRouter(prefix="/supercategories", tags=["supercategories"])


def _supercategory_to_schema(row: models.Supercategory) -> SupercategoryOut:
    return SupercategoryOut(id=row.public_id, budget_id=row.budget.public_id, name=row.name)


@router.get("", response_model=list[SupercategoryOut])
def list_supercategories(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    return [_supercategory_to_schema(s) for s in LedgerService(db, current_user).list_supercategories()]


@router.post("", response_model=SupercategoryOut)
def create_supercategory(
    payload: SupercategorySave,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return _supercategory_to_schema(LedgerService(db, current_user).create_supercategory(payload.budget_id, payload.name))


@router.put("/{supercategory_id}", response_model=SupercategoryOut)
def update_supercategory(
    supercategory_id: str,
    payload: SupercategorySave,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    row = LedgerService(db, current_user).update_supercategory(supercategory_id, payload.budget_id, payload.name)
    return _supercategory_to_schema(row)


@router.delete("/{supercategory_id}", status_code=204)
def delete_supercategory(supercategory_id: str, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    LedgerService(db, current_user).soft_delete(models.Supercategory, supercategory_id)
    return Response(status_code=204)
