"""Predicate Compiler: turns core/predicates.py expression trees into SQLAlchemy clauses.

Invariants:
    - Every node type (Equals, Like, Range, Or, And) has an explicit case; anything
      else raises TypeError rather than being silently dropped
    - Column names resolve only to mapped column attributes of the target model
    - Enum members compile to their persisted string value
"""

from typing import Any

from sqlalchemy import Select, and_, false, or_, true
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.sql.elements import ColumnElement

from tracker.core.domain_types import enum_value
from tracker.core.predicates import (
    And, Equals, Like, Or, Predicate, QuerySpec, Range,
)


def compile_predicate(model: type, predicate: Predicate) -> ColumnElement[bool]:
    match predicate:
        case Equals(column=name, value=value):
            column = resolve_column(model, name)
            if value is None:
                return column.is_(None)
            return column == enum_value(value)
        case Like(column=name, value=value):
            return resolve_column(model, name).ilike(
                f"%{escape_like(value)}%", escape="\\",
            )
        case Range(column=name, op=">=", value=value):
            return resolve_column(model, name) >= enum_value(value)
        case Range(column=name, op="<=", value=value):
            return resolve_column(model, name) <= enum_value(value)
        case Range(op=op):
            raise ValueError(f"Unsupported range operator: {op!r}")
        case Or(terms=terms):
            if not terms:
                return false()
            return or_(*(compile_predicate(model, t) for t in terms))
        case And(terms=terms):
            if not terms:
                return true()
            return and_(*(compile_predicate(model, t) for t in terms))
        case _:
            raise TypeError(f"Unsupported predicate node: {predicate!r}")


def apply_query_spec(stmt: Select, model: type, spec: QuerySpec) -> Select:
    """Apply where / order / paging from a QuerySpec to a select() over model."""
    if spec.where is not None:
        stmt = stmt.where(compile_predicate(model, spec.where))
    for ordering in spec.order_by:
        column = resolve_column(model, ordering.column)
        stmt = stmt.order_by(column.desc() if ordering.direction == "desc" else column.asc())
    if spec.limit is not None:
        stmt = stmt.limit(spec.limit)
    if spec.offset is not None:
        stmt = stmt.offset(spec.offset)
    return stmt


def resolve_column(model: type, name: str) -> Any:
    if name not in sa_inspect(model).column_attrs:
        raise ValueError(f"{model.__name__} has no column {name!r}")
    return getattr(model, name)


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
