import sys
from pathlib import Path

import duckdb
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import db
from repositories.rules_repository import insert_rule


@pytest.fixture
def conn():
    connection = duckdb.connect(":memory:")
    db.init_db(connection)
    yield connection
    connection.close()


@pytest.fixture
def db_file(tmp_path, monkeypatch):
    path = tmp_path / "budget.duckdb"
    monkeypatch.setattr(db, "DB_FILE", str(path))
    return path


@pytest.fixture
def client(db_file):
    from fastapi.testclient import TestClient
    from main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def salary_and_rent(conn):
    """Monthly income of 2000 on the 1st and monthly expense of 800 on the 5th."""
    insert_rule(conn, "income", "Salaire", 2000.0, periodicity="monthly", day=1)
    insert_rule(conn, "expense", "Loyer + charges", 800.0, periodicity="monthly", day=5)
    return conn
