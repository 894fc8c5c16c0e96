from __future__ import annotations

# userpager/db.py
import os
import sqlite3

from .config import read_config_yaml, is_test_env, DEFAULT_DB_FILE


def get_db_path(cfg: dict | None = None) -> str:
    # 1) USERS_DB_PATH
    # 2) config.yaml test_db_path (under tests) or db_path
    # 3) ./users.db
    env_path = os.environ.get("USERS_DB_PATH")
    if cfg is None:
        cfg = read_config_yaml()
    cfg_db = cfg.get("db_path")
    cfg_test = cfg.get("test_db_path")

    if env_path:
        path = env_path
    elif is_test_env() and isinstance(cfg_test, str) and cfg_test.strip():
        path = cfg_test.strip()
    elif isinstance(cfg_db, str) and cfg_db.strip():
        path = cfg_db.strip()
    else:
        path = os.path.join(".", DEFAULT_DB_FILE)

    dirn = os.path.dirname(path) or "."
    os.makedirs(dirn, exist_ok=True)
    return path


def connect(db_path: str | None = None) -> sqlite3.Connection:
    """
    Open the long-lived SQLite connection.
    Autocommit mode, row_factory = Row, usable from FastAPI's worker threads.
    """
    path = db_path or get_db_path()
    conn = sqlite3.connect(
        path,
        check_same_thread=False,
        isolation_level=None,
    )
    conn.row_factory = sqlite3.Row
    return conn
