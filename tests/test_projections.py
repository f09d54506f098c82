from __future__ import annotations

from envelopezero import models
from envelopezero.services.projection_service import project_available


def _post_tx(client, headers, ledger, date, splits):
    r = client.post(
        "/api/transactions",
        json={
            "budget_id": ledger["budget_id"],
            "account_id": ledger["account_id"],
            "date": date,
            "splits": splits,
        },
        headers=headers,
    )
    assert r.status_code == 200, r.text
    return r.json()


def test_project_available():
    assert project_available(4500, 1200) == 3300
    assert project_available(0, 0) == 0
    assert project_available(100, 250) == -150


def test_dashboard_empty(client, auth_headers):
    r = client.get("/api/dashboard", headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"inflow": 0, "outflow": 0, "available": 0}


def test_dashboard_sums_live_splits(client, auth_headers, other_headers, ledger):
    _post_tx(client, auth_headers, ledger, "2026-02-01", [{"category_id": ledger["rent_id"], "inflow": 4500, "outflow": 0}])
    _post_tx(client, auth_headers, ledger, "2026-02-02", [{"category_id": ledger["rent_id"], "inflow": 0, "outflow": 1200}])
    deleted = _post_tx(
        client, auth_headers, ledger, "2026-02-03", [{"category_id": ledger["rent_id"], "inflow": 0, "outflow": 999}]
    )
    client.delete(f"/api/transactions/{deleted['id']}", headers=auth_headers)

    assert client.get("/api/dashboard", headers=auth_headers).json() == {
        "inflow": 4500,
        "outflow": 1200,
        "available": 3300,
    }
    assert client.get("/api/dashboard", headers=other_headers).json()["available"] == 0


def test_month_projection_includes_empty_categories(client, auth_headers, ledger):
    r = client.get("/api/projections/month/2026-02", headers=auth_headers)
    assert r.status_code == 200, r.text
    rows = r.json()
    assert [row["category_id"] for row in rows] == [ledger["rent_id"], ledger["groceries_id"]]
    for row in rows:
        assert (row["assigned"], row["activity"], row["available"]) == (0, 0, 0)


def test_month_projection_combines_assignments_and_activity(client, auth_headers, ledger):
    for amount in (1000, 500):
        r = client.post(
            "/api/category-assignments",
            json={"budget_id": ledger["budget_id"], "category_id": ledger["rent_id"], "month": "2026-02", "amount": amount},
            headers=auth_headers,
        )
        assert r.status_code == 200, r.text
    _post_tx(
        client,
        auth_headers,
        ledger,
        "2026-02-14",
        [
            {"category_id": ledger["rent_id"], "inflow": 0, "outflow": 1200},
            {"category_id": ledger["groceries_id"], "inflow": 0, "outflow": 80},
        ],
    )
    _post_tx(client, auth_headers, ledger, "2026-02-20", [{"category_id": ledger["groceries_id"], "inflow": 30, "outflow": 0}])
    # Outside the month
    _post_tx(client, auth_headers, ledger, "2026-03-01", [{"category_id": ledger["rent_id"], "inflow": 0, "outflow": 700}])

    rows = {row["category_name"]: row for row in client.get("/api/projections/month/2026-02", headers=auth_headers).json()}
    assert (rows["Rent"]["assigned"], rows["Rent"]["activity"], rows["Rent"]["available"]) == (1500, 1200, 300)
    assert (rows["Groceries"]["assigned"], rows["Groceries"]["activity"], rows["Groceries"]["available"]) == (0, 50, -50)


def test_month_projection_rejects_bad_month(client, auth_headers):
    for month in ("2026-2", "2026-13", "february"):
        assert client.get(f"/api/projections/month/{month}", headers=auth_headers).status_code == 400


def test_month_projection_last_supported_month(client, auth_headers, ledger):
    r = client.get("/api/projections/month/9998-12", headers=auth_headers)
    assert r.status_code == 200, r.text
    assert client.get("/api/projections/month/9999-12", headers=auth_headers).status_code == 400


def test_month_projection_ignores_deleted_rows(client, db_session, auth_headers, ledger):
    rent, groceries = ledger["rent_id"], ledger["groceries_id"]
    for amount in (1000, 400):
        client.post(
            "/api/category-assignments",
            json={"budget_id": ledger["budget_id"], "category_id": rent, "month": "2026-02", "amount": amount},
            headers=auth_headers,
        )
    # Drop the 400 assignment
    db_session.query(models.CategoryAssignment).filter(models.CategoryAssignment.amount == 400).update(
        {models.CategoryAssignment.deleted_at: models.utcnow_naive()}
    )
    db_session.commit()

    deleted_tx = _post_tx(client, auth_headers, ledger, "2026-02-03", [{"category_id": rent, "inflow": 0, "outflow": 999}])
    assert client.delete(f"/api/transactions/{deleted_tx['id']}", headers=auth_headers).status_code == 204

    replaced = _post_tx(client, auth_headers, ledger, "2026-02-05", [{"category_id": rent, "inflow": 0, "outflow": 700}])
    r = client.put(
        f"/api/transactions/{replaced['id']}",
        json={
            "budget_id": ledger["budget_id"],
            "account_id": ledger["account_id"],
            "date": "2026-02-05",
            "splits": [{"category_id": rent, "inflow": 0, "outflow": 250}],
        },
        headers=auth_headers,
    )
    assert r.status_code == 200, r.text

    _post_tx(client, auth_headers, ledger, "2026-02-06", [{"category_id": groceries, "inflow": 0, "outflow": 60}])
    assert client.delete(f"/api/categories/{groceries}", headers=auth_headers).status_code == 204

    rows = client.get("/api/projections/month/2026-02", headers=auth_headers).json()
    assert [row["category_id"] for row in rows] == [rent]
    assert (rows[0]["assigned"], rows[0]["activity"], rows[0]["available"]) == (1000, 250, 750)
