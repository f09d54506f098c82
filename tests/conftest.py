from __future__ import annotations

import os
import tempfile
from typing import Generator, Any

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from envelopezero.core.database import Base, get_db
from envelopezero.main import app


@pytest.fixture(scope="session")
def test_db_url() -> Generator[str, Any, Any]:
    # Temporary file database so the developer's local DB is never touched
    fd, path = tempfile.mkstemp(prefix="ez_test_", suffix=".sqlite3")
    os.close(fd)
    url = f"sqlite:///{path}"
    yield url
    try:
        os.remove(path)
    except OSError:
        pass


@pytest.fixture(scope="session")
def engine(test_db_url: str):
    eng = create_engine(test_db_url, connect_args={"check_same_thread": False})

    @event.listens_for(eng, "connect")
    def _fk_on(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Any, Any, Any]:
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        with engine.begin() as conn:
            conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
            for tbl in reversed(Base.metadata.sorted_tables):
                conn.execute(tbl.delete())
            conn.exec_driver_sql("PRAGMA foreign_keys=ON")


@pytest.fixture(autouse=True)
def override_dependency(db_session):
    def _get_db_override():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _get_db_override
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def client(db_session):
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c


def _sign_in(client, email: str) -> dict[str, str]:
    """Run the magic-link flow and return bearer headers for ``email``."""
    r = client.post("/api/auth/magic-link/request", json={"email": email})
    assert r.status_code == 200, r.text
    r = client.post("/api/auth/magic-link/verify", json={"token": r.json()["debug_token"]})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['token']}"}


@pytest.fixture()
def sign_in(client):
    def _run(email: str) -> dict[str, str]:
        return _sign_in(client, email)

    return _run


@pytest.fixture()
def auth_headers(client) -> dict[str, str]:
    return _sign_in(client, "alice@example.com")


@pytest.fixture()
def other_headers(client) -> dict[str, str]:
    return _sign_in(client, "bob@example.com")


@pytest.fixture()
def default_budget(client, auth_headers) -> dict:
    r = client.get("/api/budgets", headers=auth_headers)
    assert r.status_code == 200, r.text
    return r.json()[0]


@pytest.fixture()
def ledger(client, auth_headers, default_budget) -> dict:
    """Budget with one account, one supercategory and two categories."""
    budget_id = default_budget["id"]
    account = client.post("/api/accounts", json={"budget_id": budget_id, "name": "Checking"}, headers=auth_headers)
    assert account.status_code == 200, account.text
    sup = client.post("/api/supercategories", json={"budget_id": budget_id, "name": "Bills"}, headers=auth_headers)
    assert sup.status_code == 200, sup.text
    cats = []
    for name in ("Rent", "Groceries"):
        r = client.post(
            "/api/categories",
            json={"budget_id": budget_id, "supercategory_id": sup.json()["id"], "name": name},
            headers=auth_headers,
        )
        assert r.status_code == 200, r.text
        cats.append(r.json())
    return {
        "budget_id": budget_id,
        "account_id": account.json()["id"],
        "supercategory_id": sup.json()["id"],
        "rent_id": cats[0]["id"],
        "groceries_id": cats[1]["id"],
    }
