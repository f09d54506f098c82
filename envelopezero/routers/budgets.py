from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from envelopezero import models
from envelopezero.core.database import get_db
from envelopezero.core.deps import get_current_user
from envelopezero.schemas import BudgetCreate, BudgetOut, BudgetUpdate
from envelopezero.services.ledger_service import LedgerService


router = APIRouter(prefix="/budgets", tags=["budgets"])


def _budget_to_schema(row: models.Budget) -> BudgetOut:
    return BudgetOut(id=row.public_id, name=row.name, currency_code=row.currency_code, is_default=row.is_default)


@router.get("", response_model=list[BudgetOut])
def list_budgets(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    return [_budget_to_schema(b) for b in LedgerService(db, current_user).list_budgets()]


@router.post("", response_model=BudgetOut)
def create_budget(
    payload: BudgetCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    row = LedgerService(db, current_user).create_budget(payload.name, payload.currency_code)
    return _budget_to_schema(row)


@router.put("/{budget_id}", response_model=BudgetOut)
def update_budget(
    budget_id: str,
    payload: BudgetUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    row = LedgerService(db, current_user).update_budget(budget_id, payload.name, payload.currency_code)
    return _budget_to_schema(row)


@router.delete("/{budget_id}", status_code=204)
def delete_budget(budget_id: str, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    LedgerService(db, current_user).delete_budget(budget_id)
    return Response(status_code=204)
