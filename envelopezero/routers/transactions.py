from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from envelopezero import models
from envelopezero.core.database import get_db
from envelopezero.core.deps import get_current_user
from envelopezero.schemas import SplitOut, TransactionOut, TransactionSave
from envelopezero.services.transaction_service import TransactionService


router = APIRouter(prefix="/transactions", tags=["transactions"])


def _transaction_to_schema(tx: models.Transaction, splits: list[models.TransactionSplit]) -> TransactionOut:
    return TransactionOut(
        id=tx.public_id,
        budget_id=tx.budget.public_id,
        account_id=tx.account.public_id,
        date=tx.tx_date,
        payee=tx.payee,
        memo=tx.memo,
        splits=[
            SplitOut(
                id=s.public_id,
                category_id=s.category.public_id,
                memo=s.memo,
                inflow=s.inflow,
                outflow=s.outflow,
            )
            for s in splits
        ],
    )


@router.get("", response_model=list[TransactionOut])
def list_transactions(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    return [_transaction_to_schema(tx, splits) for tx, splits in TransactionService(db, current_user).list_transactions()]


@router.post("", response_model=TransactionOut)
def create_transaction(
    payload: TransactionSave,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return _transaction_to_schema(*TransactionService(db, current_user).create_transaction(payload))


@router.put("/{transaction_id}", response_model=TransactionOut)
def update_transaction(
    transaction_id: str,
    payload: TransactionSave,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return _transaction_to_schema(*TransactionService(db, current_user).update_transaction(transaction_id, payload))


@router.delete("/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: str,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    TransactionService(db, current_user).delete_transaction(transaction_id)
    return Response(status_code=204)
