"""Generic Repository: table-level CRUD shared by every service, parameterized by model.

Invariants:
    - A Repository never opens or commits a transaction: callers pass the session,
      so the service decides what is one atomic unit
    - writable_values() only ever returns mapped column names; enum members become strings
    - delete_by_id reports whether a row existed

Design Decisions:
    - Composed into services (self._jobs = Repository(Job)) rather than inherited:
      services share the CRUD code without sharing a base class
"""

import logging
from typing import Any, Generic, Iterable, Mapping, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.core.domain_types import enum_value
from tracker.core.predicates import Predicate, QuerySpec
from tracker.db.base import Base
from tracker.infrastructure.predicate_compiler import (
    apply_query_spec, compile_predicate,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """CRUD over one mapped table."""

    def __init__(self, model: type[ModelT]):
        self.model = model
        mapper = sa_inspect(model)
        self.columns = tuple(attr.key for attr in mapper.column_attrs)
        self._pk = mapper.primary_key

    @property
    def name(self) -> str:
        return self.model.__name__

    async def find_by_id(self, db: AsyncSession, ident: Any) -> ModelT | None:
        return await db.get(self.model, ident)

    async def exists(self, db: AsyncSession, ident: Any) -> bool:
        return await self.find_by_id(db, ident) is not None

    async def find_all(self, db: AsyncSession, *order_by: Any) -> list[ModelT]:
        stmt = select(self.model)
        if order_by:
            stmt = stmt.order_by(*order_by)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def find(self, db: AsyncSession, spec: QuerySpec) -> list[ModelT]:
        stmt = apply_query_spec(select(self.model), self.model, spec)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def find_one(self, db: AsyncSession, spec: QuerySpec) -> ModelT | None:
        rows = await self.find(db, spec)
        return rows[0] if rows else None

    async def count(self, db: AsyncSession, where: Predicate | None = None) -> int:
        stmt = select(func.count()).select_from(self.model)
        if where is not None:
            stmt = stmt.where(compile_predicate(self.model, where))
        return (await db.execute(stmt)).scalar_one()

    def add(self, db: AsyncSession, **values: Any) -> ModelT:
        obj = self.model(**values)
        db.add(obj)
        return obj

    def apply(self, obj: ModelT, values: Mapping[str, Any]) -> ModelT:
        """Partial update: assign only the supplied fields."""
        for key, value in values.items():
            setattr(obj, key, value)
        return obj

    async def delete_by_id(self, db: AsyncSession, ident: Any) -> bool:
        if len(self._pk) != 1:
            raise TypeError(f"{self.name} has a composite key; use delete_where")
        return await self.delete_where_clause(db, self._pk[0] == ident) > 0

    async def delete_where(self, db: AsyncSession, where: Predicate) -> int:
        return await self.delete_where_clause(db, compile_predicate(self.model, where))

    async def delete_where_clause(self, db: AsyncSession, clause: Any) -> int:
        result = await db.execute(
            delete(self.model).where(clause).execution_options(synchronize_session="fetch"),
        )
        return result.rowcount or 0

    def as_dict(self, obj: ModelT) -> dict[str, Any]:
        return {key: getattr(obj, key) for key in self.columns}

    def writable_values(
        self, data: Mapping[str, Any], exclude: Iterable[str] = (),
    ) -> dict[str, Any]:
        """Keep mapped, non-excluded keys; log and drop the rest."""
        blocked = set(exclude)
        values: dict[str, Any] = {}
        dropped: list[str] = []
        for key, value in data.items():
            if key in self.columns and key not in blocked:
                values[key] = enum_value(value)
            else:
                dropped.append(key)
        if dropped:
            logger.warning(
                f"Ignoring non-writable {self.name} fields: {', '.join(sorted(dropped))}",
                extra={"entity": self.name},
            )
        return values
