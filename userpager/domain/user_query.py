from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Iterable, Mapping, Optional

from ..errors import InvalidOrder, InvalidPagination, MissingParameter


USER_COLUMNS = ("id", "name", "age", "country", "degree", "status", "site")

# order tokens are interpolated into SQL, so both sides go through these allow-lists
ORDERABLE_COLUMNS = ("id", "age", "name")
DIRECTIONS = ("asc", "desc")

# largest value SQLite binds as INTEGER; bigger page sizes / offsets mean "everything"
SQLITE_MAX_INT = 2**63 - 1


@dataclass
class User:
    name: Optional[str] = None
    age: Optional[int] = None
    country: Optional[str] = None
    degree: Optional[str] = None
    status: Optional[str] = None
    site: Optional[str] = None
    id: Optional[int] = None

    @classmethod
    def from_row(cls, row) -> "User":
        return cls(**{k: row[k] for k in USER_COLUMNS})

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        return {k: d[k] for k in USER_COLUMNS}


@dataclass
class Filters:
    """AND-combined predicates; None / "" / [] mean "no constraint"."""
    status: Optional[str] = None
    countries: list[str] = field(default_factory=list)
    age: Optional[int] = None
    degree: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Mapping[str, Any] | None) -> "Filters":
        if not d:
            return cls()
        return cls(
            status=d.get("status") or None,
            countries=[c for c in (d.get("countries") or []) if c],
            age=d.get("age"),
            degree=d.get("degree") or None,
        )


def normalize_direction(direction: str) -> str:
    d = (direction or "").strip().lower()
    if d not in DIRECTIONS:
        raise InvalidOrder()
    return d


def normalize_column(column: str) -> str:
    c = (column or "").strip().lower()
    if c not in ORDERABLE_COLUMNS:
        raise InvalidOrder("Invalid order column")
    return c


@dataclass(frozen=True)
class OrderClause:
    column: str
    direction: str = "asc"

    def sql(self) -> str:
        return f"{self.column} {self.direction.upper()}"


@dataclass(frozen=True)
class OrderSpec:
    """Multi-column ordering, applied in the order the caller listed the columns."""
    clauses: tuple[OrderClause, ...] = ()

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Optional[str]] | None) -> "OrderSpec":
        if not mapping:
            return cls()
        clauses = []
        for column, direction in mapping.items():
            if not direction:
                continue
            clauses.append(OrderClause(normalize_column(column), normalize_direction(direction)))
        return cls(tuple(clauses))

    @classmethod
    def of(cls, pairs: Iterable[tuple[str, str]]) -> "OrderSpec":
        return cls(tuple(OrderClause(normalize_column(c), normalize_direction(d)) for c, d in pairs))

    def __bool__(self) -> bool:
        return bool(self.clauses)


@dataclass
class RetrieveOptions:
    """Single-column ordering plus an optional row cap (ignored when <= 0)."""
    order_by: Optional[str] = None
    order: Optional[str] = None
    limit: int = 0

    def order_spec(self) -> OrderSpec:
        # both halves are needed, a lone column or direction is ignored
        if not (self.order_by and self.order):
            return OrderSpec()
        return OrderSpec.of([(self.order_by, self.order)])


def require_page_params(page_size: Optional[int], page: Optional[int]) -> tuple[int, int]:
    """Validate pagination input before any query runs.

    Missing (None) or zero values count as missing, negatives are rejected outright.
    """
    if not page_size or not page:
        raise MissingParameter()
    if page_size < 0 or page < 0:
        raise InvalidPagination()
    return int(page_size), int(page)


def page_offset(page_size: int, page: int) -> int:
    if page_size < 1 or page < 1:
        raise InvalidPagination()
    return min((page - 1) * page_size, SQLITE_MAX_INT)
