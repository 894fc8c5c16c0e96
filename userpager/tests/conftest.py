import os
import sys
import sqlite3
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "users_test.db"
    # Point the app to this temp DB
    os.environ["USERS_DB_PATH"] = str(path)
    from userpager.store import UserStore
    UserStore.open(str(path)).close()
    return str(path)


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    # leave handlers to pytest's log capture
    monkeypatch.setattr("userpager.logs._configured", True)


@pytest.fixture()
def store(tmp_db_path):
    from userpager.store import UserStore
    s = UserStore.open(tmp_db_path)
    yield s
    s.close()


@pytest.fixture()
def client(tmp_db_path):
    # entering the context runs the startup hook, which opens the store
    from userpager.api import app
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def sample_users():
    from userpager.domain.user_query import User
    return [
        User(name="Alice", age=30, country="France", degree="BSc", status="Active", site="a.example"),
        User(name="Bob", age=25, country="Spain", degree="MSc", status="inactive"),
        User(name="Carol", age=41, country="Germany", degree="bsc", status="ACTIVE"),
        User(name="Dave", age=25, country="france", status="pending", site="d.example"),
        User(name="Eve", age=35, country="Italy", degree="PhD"),
    ]


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path):
    # Safety: ensure we only ever wipe the temp DB, never a real one
    assert os.environ.get("USERS_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    conn = sqlite3.connect(tmp_db_path)
    try:
        for t in ("users", "operation_log"):
            conn.execute(f"DELETE FROM {t}")
        conn.commit()
    finally:
        conn.close()
    yield
