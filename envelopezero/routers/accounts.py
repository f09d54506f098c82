from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from envelopezero import models
from envelopezero.core.database import get_db
from envelopezero.core.deps import get_current_user
from envelopezero.schemas import AccountOut, AccountSave
from envelopezero.services.ledger_service import LedgerService


router = APIRouter(prefix="/accounts", tags=["accounts"])


def _account_to_schema(row: models.Account) -> AccountOut:
    return AccountOut(id=row.public_id, budget_id=row.budget.public_id, name=row.name)


@router.get("", response_model=list[AccountOut])
def list_accounts(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    return [_account_to_schema(a) for a in LedgerService(db, current_user).list_accounts()]


@router.post("", response_model=AccountOut)
def create_account(
    payload: AccountSave,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return _account_to_schema(LedgerService(db, current_user).create_account(payload.budget_id, payload.name))


@router.put("/{account_id}", response_model=AccountOut)
def update_account(
    account_id: str,
    payload: AccountSave,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    row = LedgerService(db, current_user).update_account(account_id, payload.budget_id, payload.name)
    return _account_to_schema(row)


@router.delete("/{account_id}", status_code=204)
def delete_account(account_id: str, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    LedgerService(db, current_user).soft_delete(models.Account, account_id)
    return Response(status_code=204)
