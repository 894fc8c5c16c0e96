from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

import pandas as pd

from .db import connect, get_db_path
from .domain.user_query import (
    Filters,
    OrderSpec,
    RetrieveOptions,
    User,
    page_offset,
)
from .errors import CreateTableFailed, InsertFailed, OpenFailed, RetrieveFailed
from .logs import ensure_log_schema
from .repository import user_repo

logger = logging.getLogger(__name__)

TABLE_HEADERS = ["ID", "Name", "Age", "Country", "Degree", "Status", "Site"]


class UserStore:
    """Record store for the users table.

    Owns exactly one SQLite connection for its whole lifetime. Construct it once
    at startup with `UserStore.open()`, hand the instance to whoever needs it,
    and `close()` it on shutdown.
    """

    def __init__(self, conn: sqlite3.Connection, path: str = ":memory:"):
        self._conn = conn
        self._lock = threading.Lock()
        self.path = path

    @classmethod
    def open(cls, db_path: str | None = None) -> "UserStore":
        path = db_path or get_db_path()
        try:
            conn = connect(path)
        except sqlite3.Error as e:
            logger.error("open %s failed: %s", path, e)
            raise OpenFailed() from e
        try:
            user_repo.ensure_schema(conn)
            ensure_log_schema(conn)
        except sqlite3.Error as e:
            conn.close()
            logger.error("create table in %s failed: %s", path, e)
            raise CreateTableFailed() from e
        logger.info("user store ready at %s", path)
        return cls(conn, path)

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Borrow the shared connection; one user at a time."""
        with self._lock:
            yield self._conn

    def insert(self, user: User) -> int:
        try:
            with self.connection() as conn:
                new_id = user_repo.insert_user(
                    conn, user.name, user.age, user.country, user.degree, user.status, user.site
                )
        except (sqlite3.Error, OverflowError) as e:
            logger.error("insert failed: %s", e)
            raise InsertFailed() from e
        logger.debug("inserted user id=%s", new_id)
        return new_id

    def retrieve_all(self) -> list[User]:
        try:
            with self.connection() as conn:
                rows = user_repo.list_all(conn)
        except (sqlite3.Error, OverflowError) as e:
            logger.error("retrieve all failed: %s", e)
            raise RetrieveFailed() from e
        return [User.from_row(r) for r in rows]

    def retrieve_filtered(
        self, filters: Optional[Filters] = None, options: Optional[RetrieveOptions] = None
    ) -> list[User]:
        options = options or RetrieveOptions()
        # raises InvalidOrder before touching the connection
        order = options.order_spec()
        sql, params = user_repo.build_select(filters, order, limit=options.limit or 0)
        return self._select(sql, params)

    def paginate(
        self,
        page_size: int,
        page: int,
        order: Optional[OrderSpec] = None,
        filters: Optional[Filters] = None,
    ) -> list[User]:
        offset = page_offset(page_size, page)
        sql, params = user_repo.build_select(filters, order, limit=page_size, offset=offset)
        return self._select(sql, params)

    def _select(self, sql: str, params: list) -> list[User]:
        try:
            with self.connection() as conn:
                rows = user_repo.select(conn, sql, params)
        except (sqlite3.Error, OverflowError) as e:
            logger.error("query failed: %s | sql=%s", e, sql)
            raise RetrieveFailed() from e
        return [User.from_row(r) for r in rows]

    @staticmethod
    def render_table(users: list[User]) -> str:
        rows = [
            ["" if v is None else v for v in (u.id, u.name, u.age, u.country, u.degree, u.status, u.site)]
            for u in users
        ]
        df = pd.DataFrame(rows, columns=TABLE_HEADERS)
        if df.empty:
            return " | ".join(TABLE_HEADERS) + "\n(empty)\n"
        return df.to_string(index=False) + "\n"

    def close(self):
        with self._lock:
            self._conn.close()
        logger.info("user store at %s closed", self.path)
