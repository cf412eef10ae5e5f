import os

# Must be set before kolmarket is imported: the engine is built at import time.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DEGRADE_ON_STORAGE_ERROR"] = "true"
os.environ["AUTO_CREATE_SCHEMA"] = "true"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text

from kolmarket.core.config import get_settings
from kolmarket.db.postgres import get_db_session
from kolmarket.db.schema import drop_schema, init_schema
from kolmarket.main import app


@pytest.fixture(autouse=True)
def fresh_schema():
    drop_schema()
    init_schema()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def no_degrade(monkeypatch):
    """Surface contact-request storage errors instead of simulating success."""
    monkeypatch.setattr(get_settings(), "degrade_on_storage_error", False)


@pytest.fixture
def insert_row():
    def _insert(table: str, **values):
        columns = ", ".join(values)
        binds = ", ".join(f":{name}" for name in values)
        with get_db_session() as db:
            db.execute(text(f"INSERT INTO {table} ({columns}) VALUES ({binds})"), values)
        return values
    return _insert


@pytest.fixture
def drop_table():
    def _drop(table: str):
        with get_db_session() as db:
            db.execute(text(f"DROP TABLE {table}"))
    return _drop


@pytest.fixture
def fetch_one():
    def _fetch(sql: str, **params):
        with get_db_session() as db:
            row = db.execute(text(sql), params).mappings().fetchone()
        return dict(row) if row else None
    return _fetch
