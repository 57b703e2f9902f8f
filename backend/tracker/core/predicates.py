"""Query Predicates: a typed expression tree and the fluent builder that accumulates it.

Invariants:
    - Nodes are frozen dataclasses: Equals, Like, Range, Or, And
    - Columns are referenced by attribute name only; no knowledge of any entity shape
    - The builder never performs IO; build() returns a QuerySpec snapshot
    - where_in with no values and search with a blank query add no condition
    - Several accumulated conditions combine with AND; where_in and search combine with OR

Design Decisions:
    - Tagged variants over lists of untyped conditions: the compiler in
      infrastructure/predicate_compiler.py handles every node type explicitly
    - Builder returns self from every mutator so services read as one chain
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Literal, Union


@dataclass(frozen=True)
class Equals:
    column: str
    value: Any


@dataclass(frozen=True)
class Like:
    """Case-insensitive substring match; wildcard characters in value are literal."""
    column: str
    value: str


@dataclass(frozen=True)
class Range:
    column: str
    op: Literal[">=", "<="]
    value: Any


@dataclass(frozen=True)
class Or:
    terms: tuple["Predicate", ...]


@dataclass(frozen=True)
class And:
    terms: tuple["Predicate", ...]


Predicate = Union[Equals, Like, Range, Or, And]


@dataclass(frozen=True)
class Ordering:
    column: str
    direction: Literal["asc", "desc"] = "desc"


@dataclass(frozen=True)
class QuerySpec:
    where: Predicate | None = None
    order_by: tuple[Ordering, ...] = ()
    limit: int | None = None
    offset: int | None = None


@dataclass
class QueryBuilder:
    """Fluent accumulator for filter, sort and paging intent."""
    _conditions: list[Predicate] = field(default_factory=list)
    _ordering: list[Ordering] = field(default_factory=list)
    _limit: int | None = None
    _offset: int | None = None

    def where(self, column: str, value: Any) -> "QueryBuilder":
        self._conditions.append(Equals(column, value))
        return self

    def where_like(self, column: str, value: str) -> "QueryBuilder":
        self._conditions.append(Like(column, value))
        return self

    def where_gte(self, column: str, value: Any) -> "QueryBuilder":
        self._conditions.append(Range(column, ">=", value))
        return self

    def where_lte(self, column: str, value: Any) -> "QueryBuilder":
        self._conditions.append(Range(column, "<=", value))
        return self

    def where_in(self, column: str, values: Iterable[Any]) -> "QueryBuilder":
        terms = tuple(Equals(column, v) for v in values)
        if terms:
            self._conditions.append(Or(terms))
        return self

    def search(self, columns: Iterable[str], query: str) -> "QueryBuilder":
        """OR a substring match across columns. Blank queries match everything."""
        if query and query.strip():
            self._conditions.append(Or(tuple(Like(c, query) for c in columns)))
        return self

    def order_by(self, column: str, direction: Literal["asc", "desc"] = "desc") -> "QueryBuilder":
        if direction not in ("asc", "desc"):
            raise ValueError(f"Unknown sort direction: {direction!r}")
        self._ordering.append(Ordering(column, direction))
        return self

    def limit(self, count: int) -> "QueryBuilder":
        self._limit = count
        return self

    def offset(self, count: int) -> "QueryBuilder":
        self._offset = count
        return self

    def reset(self) -> "QueryBuilder":
        self._conditions.clear()
        self._ordering.clear()
        self._limit = None
        self._offset = None
        return self

    def where_clause(self) -> Predicate | None:
        if not self._conditions:
            return None
        if len(self._conditions) == 1:
            return self._conditions[0]
        return And(tuple(self._conditions))

    def build(self) -> QuerySpec:
        return QuerySpec(
            where=self.where_clause(),
            order_by=tuple(self._ordering),
            limit=self._limit,
            offset=self._offset,
        )
