from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import SQLAlchemyError

from envelopezero import models
from envelopezero.core.config import settings
from envelopezero.core.errors import ValidationError
from envelopezero.services.transaction_service import TransactionService, validate_splits


def _split(inflow: int, outflow: int) -> SimpleNamespace:
    return SimpleNamespace(inflow=inflow, outflow=outflow)


def test_validate_splits_accepts_one_sided_amounts():
    validate_splits([_split(100, 0), _split(0, 250)])


@pytest.mark.parametrize(
    "splits",
    [
        [],
        [_split(-1, 0)],
        [_split(0, -5)],
        [_split(10, 10)],
        [_split(0, 0)],
        [_split(100, 0), _split(0, 0)],
    ],
)
def test_validate_splits_rejects(splits):
    with pytest.raises(ValidationError):
        validate_splits(splits)


def _payload(ledger: dict, **overrides) -> dict:
    body = {
        "budget_id": ledger["budget_id"],
        "account_id": ledger["account_id"],
        "date": "2026-02-10",
        "payee": "Landlord",
        "memo": "February",
        "splits": [{"category_id": ledger["rent_id"], "outflow": 1200, "inflow": 0}],
    }
    body.update(overrides)
    return body


def test_create_transaction_returns_splits(client, auth_headers, ledger):
    r = client.post("/api/transactions", json=_payload(ledger), headers=auth_headers)
    assert r.status_code == 200, r.text
    tx = r.json()
    assert tx["date"] == "2026-02-10"
    assert tx["payee"] == "Landlord"
    assert len(tx["splits"]) == 1
    assert tx["splits"][0]["category_id"] == ledger["rent_id"]
    assert tx["splits"][0]["outflow"] == 1200


@pytest.mark.parametrize(
    "splits",
    [
        [],
        [{"category_id": "x", "inflow": 5, "outflow": 5}],
        [{"category_id": "x", "inflow": 0, "outflow": 0}],
        [{"category_id": "x", "inflow": -5, "outflow": 0}],
    ],
)
def test_invalid_splits_rejected_before_write(client, db_session, auth_headers, ledger, splits):
    r = client.post("/api/transactions", json=_payload(ledger, splits=splits), headers=auth_headers)
    assert r.status_code == 400
    assert db_session.query(models.Transaction).count() == 0


def test_account_must_belong_to_budget(client, auth_headers, ledger, monkeypatch):
    monkeypatch.setattr(settings, "FEATURE_MULTI_BUDGET", True)
    other = client.post("/api/budgets", json={"name": "Other"}, headers=auth_headers).json()
    r = client.post("/api/transactions", json=_payload(ledger, budget_id=other["id"]), headers=auth_headers)
    assert r.status_code == 400


def test_split_category_must_belong_to_budget(client, db_session, auth_headers, ledger, monkeypatch):
    monkeypatch.setattr(settings, "FEATURE_MULTI_BUDGET", True)
    other = client.post("/api/budgets", json={"name": "Other"}, headers=auth_headers).json()
    sup = client.post("/api/supercategories", json={"budget_id": other["id"], "name": "S"}, headers=auth_headers).json()
    foreign_cat = client.post(
        "/api/categories",
        json={"budget_id": other["id"], "supercategory_id": sup["id"], "name": "Foreign"},
        headers=auth_headers,
    ).json()
    splits = [
        {"category_id": ledger["rent_id"], "outflow": 100, "inflow": 0},
        {"category_id": foreign_cat["id"], "outflow": 100, "inflow": 0},
    ]
    r = client.post("/api/transactions", json=_payload(ledger, splits=splits), headers=auth_headers)
    assert r.status_code == 400
    assert db_session.query(models.TransactionSplit).count() == 0


def test_update_replaces_splits(client, db_session, auth_headers, ledger):
    tx = client.post("/api/transactions", json=_payload(ledger), headers=auth_headers).json()
    new_splits = [
        {"category_id": ledger["rent_id"], "outflow": 1000, "inflow": 0},
        {"category_id": ledger["groceries_id"], "outflow": 150, "inflow": 0, "memo": "snacks"},
    ]
    r = client.put(
        f"/api/transactions/{tx['id']}",
        json=_payload(ledger, splits=new_splits, date="2026-02-11", payee=None),
        headers=auth_headers,
    )
    assert r.status_code == 200, r.text
    updated = r.json()
    assert updated["id"] == tx["id"]
    assert updated["date"] == "2026-02-11"
    assert updated["payee"] is None
    assert [(s["category_id"], s["outflow"]) for s in updated["splits"]] == [
        (ledger["rent_id"], 1000),
        (ledger["groceries_id"], 150),
    ]
    assert tx["splits"][0]["id"] not in {s["id"] for s in updated["splits"]}

    listed = client.get("/api/transactions", headers=auth_headers).json()
    assert len(listed) == 1
    assert len(listed[0]["splits"]) == 2
    # Old split is soft-deleted, not removed
    assert db_session.query(models.TransactionSplit).count() == 3


def test_failed_update_keeps_previous_state(client, auth_headers, ledger):
    tx = client.post("/api/transactions", json=_payload(ledger), headers=auth_headers).json()
    bad = [{"category_id": "missing", "outflow": 10, "inflow": 0}]
    r = client.put(f"/api/transactions/{tx['id']}", json=_payload(ledger, splits=bad), headers=auth_headers)
    assert r.status_code == 400
    listed = client.get("/api/transactions", headers=auth_headers).json()
    assert listed[0]["splits"] == tx["splits"]


def test_list_orders_by_date_desc(client, auth_headers, ledger):
    for d in ("2026-01-05", "2026-03-01", "2026-02-15"):
        assert client.post("/api/transactions", json=_payload(ledger, date=d), headers=auth_headers).status_code == 200
    dates = [t["date"] for t in client.get("/api/transactions", headers=auth_headers).json()]
    assert dates == ["2026-03-01", "2026-02-15", "2026-01-05"]


def test_delete_transaction_hides_it(client, auth_headers, other_headers, ledger):
    tx = client.post("/api/transactions", json=_payload(ledger), headers=auth_headers).json()
    assert client.delete(f"/api/transactions/{tx['id']}", headers=other_headers).status_code == 204
    assert len(client.get("/api/transactions", headers=auth_headers).json()) == 1
    assert client.delete(f"/api/transactions/{tx['id']}", headers=auth_headers).status_code == 204
    assert client.get("/api/transactions", headers=auth_headers).json() == []
    r = client.put(f"/api/transactions/{tx['id']}", json=_payload(ledger), headers=auth_headers)
    assert r.status_code == 400


def _age_row(db_session, model, public_id: str) -> datetime:
    old = datetime(2020, 1, 1)
    db_session.query(model).filter(model.public_id == public_id).update({model.updated_at: old})
    db_session.commit()
    return old


def test_split_only_update_bumps_updated_at(client, db_session, auth_headers, ledger):
    tx = client.post("/api/transactions", json=_payload(ledger), headers=auth_headers).json()
    old = _age_row(db_session, models.Transaction, tx["id"])
    new_splits = [{"category_id": ledger["groceries_id"], "outflow": 1200, "inflow": 0}]
    r = client.put(f"/api/transactions/{tx['id']}", json=_payload(ledger, splits=new_splits), headers=auth_headers)
    assert r.status_code == 200, r.text
    row = db_session.query(models.Transaction).filter_by(public_id=tx["id"]).one()
    assert row.updated_at > old


def test_unchanged_resubmit_bumps_updated_at(client, db_session, auth_headers, ledger):
    old = _age_row(db_session, models.Account, ledger["account_id"])
    r = client.put(
        f"/api/accounts/{ledger['account_id']}",
        json={"budget_id": ledger["budget_id"], "name": "Checking"},
        headers=auth_headers,
    )
    assert r.status_code == 200, r.text
    assert db_session.query(models.Account).filter_by(public_id=ledger["account_id"]).one().updated_at > old


def test_storage_failure_mid_update_rolls_back(client, auth_headers, ledger, monkeypatch):
    tx = client.post("/api/transactions", json=_payload(ledger), headers=auth_headers).json()

    def _fail(self, tx, splits, categories):
        raise SQLAlchemyError("disk I/O error")

    monkeypatch.setattr(TransactionService, "_insert_splits", _fail)
    new_splits = [{"category_id": ledger["groceries_id"], "outflow": 50, "inflow": 0}]
    r = client.put(
        f"/api/transactions/{tx['id']}",
        json=_payload(ledger, splits=new_splits, date="2026-03-01", payee="Grocer"),
        headers=auth_headers,
    )
    assert r.status_code == 500
    assert r.json() == {"detail": "Internal error"}

    listed = client.get("/api/transactions", headers=auth_headers).json()
    assert len(listed) == 1
    assert listed[0]["date"] == tx["date"]
    assert listed[0]["payee"] == tx["payee"]
    assert listed[0]["splits"] == tx["splits"]


def test_storage_failure_on_create_leaves_nothing(client, db_session, auth_headers, ledger, monkeypatch):
    def _fail(self, tx, splits, categories):
        raise SQLAlchemyError("disk I/O error")

    monkeypatch.setattr(TransactionService, "_insert_splits", _fail)
    r = client.post("/api/transactions", json=_payload(ledger), headers=auth_headers)
    assert r.status_code == 500
    assert db_session.query(models.Transaction).count() == 0
