from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

# Range of the BigInteger amount columns
AMOUNT_MIN = -(2**63)
AMOUNT_MAX = 2**63 - 1


# ---- Auth -------------------------------------------------------------------


class MagicLinkRequestIn(BaseModel):
    email: str


class MagicLinkRequestOut(BaseModel):
    message: str
    debug_token: str | None = None


class MagicLinkVerifyIn(BaseModel):
    token: str


class MagicLinkVerifyOut(BaseModel):
    token: str
    user_id: str


class MeOut(BaseModel):
    id: str
    email: str | None = None


class HealthOut(BaseModel):
    ok: bool


# ---- Ledger -----------------------------------------------------------------


class BudgetCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    currency_code: str | None = None


class BudgetUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    currency_code: str | None = None


class BudgetOut(BaseModel):
    id: str
    name: str
    currency_code: str
    is_default: bool

    model_config = ConfigDict(from_attributes=True)


class AccountSave(BaseModel):
    budget_id: str
    name: str = Field(..., min_length=1, max_length=120)


class AccountOut(BaseModel):
    id: str
    budget_id: str
    name: str


class SupercategorySave(BaseModel):
    budget_id: str
    name: str = Field(..., min_length=1, max_length=120)


class SupercategoryOut(BaseModel):
    id: str
    budget_id: str
    name: str


class CategorySave(BaseModel):
    budget_id: str
    supercategory_id: str
    name: str = Field(..., min_length=1, max_length=120)


class CategoryOut(BaseModel):
    id: str
    budget_id: str
    supercategory_id: str
    name: str


class SplitIn(BaseModel):
    category_id: str
    memo: str | None = None
    inflow: int = Field(default=0, ge=AMOUNT_MIN, le=AMOUNT_MAX)
    outflow: int = Field(default=0, ge=AMOUNT_MIN, le=AMOUNT_MAX)


class TransactionSave(BaseModel):
    budget_id: str
    account_id: str
    date: dt.date
    payee: str | None = Field(default=None, max_length=200)
    memo: str | None = None
    splits: list[SplitIn]


class SplitOut(BaseModel):
    id: str
    category_id: str
    memo: str | None = None
    inflow: int
    outflow: int


class TransactionOut(BaseModel):
    id: str
    budget_id: str
    account_id: str
    date: dt.date
    payee: str | None = None
    memo: str | None = None
    splits: list[SplitOut]


# ---- Projection / assignments -------------------------------------------------


class DashboardOut(BaseModel):
    inflow: int
    outflow: int
    available: int


class CategoryProjectionOut(BaseModel):
    category_id: str
    category_name: str
    assigned: int
    activity: int
    available: int


class CategoryAssignmentCreate(BaseModel):
    budget_id: str
    category_id: str
    month: str
    amount: int = Field(..., ge=AMOUNT_MIN, le=AMOUNT_MAX)


class CategoryAssignmentOut(BaseModel):
    id: str
    budget_id: str
    category_id: str
    month: str
    amount: int
