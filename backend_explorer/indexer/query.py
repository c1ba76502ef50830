"""
Filtered-scan query model for the upstream indexer.

A Scan describes one read against a single relation (txs, transfer, blocks,
event tables): selected columns, AND-ed equality / IN conditions, at most one
OR-group of equality conditions, ordering, limit/offset, DISTINCT, and the
event signatures the indexer needs to interpret raw log topics. No joins and
no aggregation; the indexer only supports plain scans. Rendering goes
through SQLAlchemy Core compiled for the Postgres dialect, so identifier
quoting and literal escaping are the library's.

Scans are immutable; every builder method returns a new Scan.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any, Iterable

from sqlalchemy import ColumnElement, Select, column, or_, select, table
from sqlalchemy.dialects import postgresql

ASC = "asc"
DESC = "desc"
DIRECTIONS = (ASC, DESC)


@dataclass(frozen=True)
class Condition:
    """Single column predicate: equality, or membership when op == "in"."""

    column: str
    value: Any
    op: str = "="


@dataclass(frozen=True)
class Scan:
    table: str
    columns: tuple[str, ...]
    conditions: tuple[Condition, ...] = ()
    any_of: tuple[Condition, ...] = ()
    """OR-group; rows must match at least one of these (in addition to all conditions)."""
    order: tuple[tuple[str, str], ...] = ()
    row_limit: int | None = None
    row_offset: int | None = None
    is_distinct: bool = False
    signatures: tuple[str, ...] = field(default=())

    @classmethod
    def select_from(
        cls,
        table: str,
        *columns: str,
        signatures: Iterable[str] = (),
    ) -> "Scan":
        if not columns:
            raise ValueError("Scan needs at least one column")
        return cls(table=table, columns=tuple(columns), signatures=tuple(signatures))

    def where(self, column: str, value: Any) -> "Scan":
        return replace(self, conditions=self.conditions + (Condition(column, value),))

    def where_in(self, column: str, values: Iterable[Any]) -> "Scan":
        values = tuple(values)
        if not values:
            raise ValueError(f"where_in({column!r}) needs at least one value")
        return replace(self, conditions=self.conditions + (Condition(column, values, "in"),))

    def where_any(self, *conditions: Condition) -> "Scan":
        if self.any_of:
            raise ValueError("Scan supports a single OR-group")
        if not conditions:
            raise ValueError("where_any needs at least one condition")
        return replace(self, any_of=tuple(conditions))

    def order_by(self, column: str, direction: str = ASC) -> "Scan":
        direction = direction.lower()
        if direction not in DIRECTIONS:
            raise ValueError(f"order direction must be one of {DIRECTIONS}, got {direction!r}")
        return replace(self, order=self.order + ((column, direction),))

    def limit(self, n: int) -> "Scan":
        if n < 0:
            raise ValueError("limit must be non-negative")
        return replace(self, row_limit=n)

    def offset(self, n: int) -> "Scan":
        if n < 0:
            raise ValueError("offset must be non-negative")
        return replace(self, row_offset=n)

    def distinct(self) -> "Scan":
        return replace(self, is_distinct=True)


# -----------------------------------------------------------------------------
# SQL rendering (indexer dialect is Postgres-flavoured)
# -----------------------------------------------------------------------------

_LITERAL_TYPES = (bool, int, str)
_NEWLINE_RE = re.compile(r"\s*\n\s*")


def _check_literal(value: Any) -> Any:
    if not isinstance(value, _LITERAL_TYPES):
        raise TypeError(f"Unsupported literal type in scan: {type(value).__name__}")
    return value


def _clause(cond: Condition) -> ColumnElement[bool]:
    col = column(cond.column)
    if cond.op == "in":
        return col.in_([_check_literal(v) for v in cond.value])
    if cond.op == "=":
        return col == _check_literal(cond.value)
    raise ValueError(f"Unsupported condition operator: {cond.op!r}")


def to_select(scan: Scan) -> Select:
    """Build the SQLAlchemy Core statement for a Scan."""
    stmt = select(*(column(c) for c in scan.columns)).select_from(table(scan.table))
    if scan.is_distinct:
        stmt = stmt.distinct()
    if scan.conditions:
        stmt = stmt.where(*(_clause(c) for c in scan.conditions))
    if scan.any_of:
        stmt = stmt.where(or_(*(_clause(c) for c in scan.any_of)))
    for col, direction in scan.order:
        stmt = stmt.order_by(column(col).desc() if direction == DESC else column(col).asc())
    if scan.row_limit is not None:
        stmt = stmt.limit(scan.row_limit)
    if scan.row_offset:
        stmt = stmt.offset(scan.row_offset)
    return stmt


def render_sql(scan: Scan) -> str:
    """Render a Scan as single-line Postgres SQL with inlined literals."""
    compiled = to_select(scan).compile(
        dialect=postgresql.dialect(),
        compile_kwargs={"literal_binds": True},
    )
    return _NEWLINE_RE.sub(" ", str(compiled)).strip()
