from userpager.domain.user_query import Filters, OrderSpec
from userpager.repository import user_repo

BASE = "SELECT id, name, age, country, degree, status, site FROM users WHERE 1=1"


def test_build_select_without_anything():
    sql, params = user_repo.build_select()
    assert sql == BASE
    assert params == []


def test_build_select_clause_sequence():
    filters = Filters(status="Active", countries=["France", "Spain"], age=30, degree="BSc")
    order = OrderSpec.from_mapping({"age": "desc", "id": "asc"})
    sql, params = user_repo.build_select(filters, order, limit=2, offset=4)
    assert sql == (
        BASE
        + " AND LOWER(status) = LOWER(?)"
        + " AND LOWER(country) IN (LOWER(?), LOWER(?))"
        + " AND age = ?"
        + " AND LOWER(degree) = LOWER(?)"
        + " ORDER BY age DESC, id ASC"
        + " LIMIT ? OFFSET ?"
    )
    assert params == ["Active", "France", "Spain", 30, "BSc", 2, 4]


def test_user_values_are_never_interpolated():
    nasty = "x' OR '1'='1"
    sql, params = user_repo.build_select(Filters(status=nasty, countries=[nasty]))
    assert nasty not in sql
    assert params == [nasty, nasty]


def test_limit_only_when_positive():
    sql, params = user_repo.build_select(limit=0)
    assert "LIMIT" not in sql
    sql, params = user_repo.build_select(limit=-3)
    assert "LIMIT" not in sql
    sql, params = user_repo.build_select(limit=3)
    assert sql.endswith(" LIMIT ?")
    assert params == [3]


def test_age_zero_is_a_constraint():
    sql, params = user_repo.build_select(Filters(age=0))
    assert sql.endswith(" AND age = ?")
    assert params == [0]


def test_limit_and_offset_clamped_to_sqlite_integer_range():
    sql, params = user_repo.build_select(limit=10**20)
    assert params == [2**63 - 1]
    sql, params = user_repo.build_select(limit=10**20, offset=10**30)
    assert params == [2**63 - 1, 2**63 - 1]
