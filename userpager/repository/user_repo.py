from __future__ import annotations

from sqlite3 import Connection
from typing import Any

from ..domain.user_query import Filters, OrderSpec, SQLITE_MAX_INT, USER_COLUMNS


DDL = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    age INTEGER NOT NULL,
    country TEXT NOT NULL,
    degree TEXT,
    status TEXT,
    site TEXT
)
"""

SELECT_USERS = "SELECT {} FROM users".format(", ".join(USER_COLUMNS))


def ensure_schema(conn: Connection):
    conn.execute(DDL)


def insert_user(
    conn: Connection,
    name: str | None,
    age: int | None,
    country: str | None,
    degree: str | None = None,
    status: str | None = None,
    site: str | None = None,
) -> int:
    cur = conn.execute(
        "INSERT INTO users(name, age, country, degree, status, site) VALUES(?,?,?,?,?,?)",
        (name, age, country, degree, status, site),
    )
    return int(cur.lastrowid)


def list_all(conn: Connection):
    return conn.execute(SELECT_USERS).fetchall()


def apply_filters(sql: str, params: list[Any], filters: Filters | None) -> str:
    """Append the AND-ed predicates for `filters`, pushing bound values onto `params`."""
    if filters is None:
        return sql
    if filters.status:
        sql += " AND LOWER(status) = LOWER(?)"
        params.append(filters.status)
    if filters.countries:
        sql += " AND LOWER(country) IN ({})".format(", ".join(["LOWER(?)"] * len(filters.countries)))
        params.extend(filters.countries)
    if filters.age is not None:
        sql += " AND age = ?"
        params.append(filters.age)
    if filters.degree:
        sql += " AND LOWER(degree) = LOWER(?)"
        params.append(filters.degree)
    return sql


def apply_order_by(sql: str, order: OrderSpec | None) -> str:
    # OrderSpec only holds allow-listed tokens
    if not order:
        return sql
    return sql + " ORDER BY " + ", ".join(c.sql() for c in order.clauses)


def build_select(
    filters: Filters | None = None,
    order: OrderSpec | None = None,
    limit: int = 0,
    offset: int | None = None,
) -> tuple[str, list[Any]]:
    """base select -> filters -> order -> limit/offset"""
    params: list[Any] = []
    sql = SELECT_USERS + " WHERE 1=1"
    sql = apply_filters(sql, params, filters)
    sql = apply_order_by(sql, order)
    if offset is not None:
        sql += " LIMIT ? OFFSET ?"
        params.extend([min(limit, SQLITE_MAX_INT), min(offset, SQLITE_MAX_INT)])
    elif limit > 0:
        sql += " LIMIT ?"
        params.append(min(limit, SQLITE_MAX_INT))
    return sql, params


def select(conn: Connection, sql: str, params: list[Any]):
    return conn.execute(sql, params).fetchall()
