from __future__ import annotations

import copy
from collections.abc import Iterable
from operator import attrgetter
from typing import (
    Any,
    Generic,
    Protocol,
    TypeVar,
    runtime_checkable,
)

from sqlalchemy import Select, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from commons.utilities.properties import PropertyValidator

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)
QueryType = TypeVar("QueryType", bound="BaseQuery")


@runtime_checkable
class AbstractQuery(Protocol[T_co]):
    """
    A deferred, composable query over records of ``model``.

    Composition (``order_by``, ``skip``, ``take``) returns a new query and never touches the
    storage. Only ``count`` and ``materialize`` execute.
    """

    model: type

    async def count(self) -> int: ...

    def order_by(self, field_name: str, descending: bool = False) -> AbstractQuery[T_co]: ...

    def skip(self, n: int) -> AbstractQuery[T_co]: ...

    def take(self, n: int) -> AbstractQuery[T_co]: ...

    async def materialize(self) -> list[T_co]: ...


class BaseQuery(Generic[T]):
    """
    Keeps the offset/limit window shared by the query implementations.

    ``skip`` and ``take`` compose like sequence slicing: skipping after a take shrinks the
    window, taking twice keeps the smaller limit.
    """

    def __init__(self, model: type):
        self.model = model
        self.offset = 0
        self.limit: int | None = None

    def _clone(self: QueryType, **changes: Any) -> QueryType:
        clone = copy.copy(self)
        for name, value in changes.items():
            setattr(clone, name, value)
        return clone

    def skip(self: QueryType, n: int) -> QueryType:
        if n < 0:
            raise ValueError(f"Cannot skip a negative number of records: {n}")
        limit = None if self.limit is None else max(0, self.limit - n)
        return self._clone(offset=self.offset + n, limit=limit)

    def take(self: QueryType, n: int) -> QueryType:
        if n < 0:
            raise ValueError(f"Cannot take a negative number of records: {n}")
        limit = n if self.limit is None else min(self.limit, n)
        return self._clone(limit=limit)


class SelectQuery(BaseQuery[T]):
    """
    Deferred query over a SQLAlchemy ``Select`` bound to an async session.

    Ordering is dispatched to the mapped column attribute of the model, so a field name is
    never rendered into the statement as text.
    """

    def __init__(self, session: AsyncSession, model: type[T], statement: Select | None = None):
        super().__init__(model)
        self.session = session
        self.statement = statement if statement is not None else select(model)

    def where(self, *criteria: Any) -> SelectQuery[T]:
        return self._clone(statement=self.statement.where(*criteria))

    def order_by(self, field_name: str, descending: bool = False) -> SelectQuery[T]:
        column = getattr(self.model, PropertyValidator.get_property(self.model, field_name))
        clause = column.desc() if descending else column.asc()
        return self._clone(statement=self.statement.order_by(None).order_by(clause))

    def get_statement(self) -> Select:
        """Return the statement with the offset/limit window applied."""
        statement = self.statement
        if self.offset:
            statement = statement.offset(self.offset)
        if self.limit is not None:
            statement = statement.limit(self.limit)
        return statement

    async def count(self) -> int:
        statement = select(func.count()).select_from(self.get_statement().order_by(None).subquery())
        count = await self.session.scalar(statement)
        return count or 0

    async def materialize(self) -> list[T]:
        results = await self.session.scalars(self.get_statement())
        return list(results.unique().all())


class SequenceQuery(BaseQuery[T]):
    """
    Deferred query over an in-memory sequence of records.

    Orderings are recorded and only applied on ``materialize``. Sorting is stable, so a later
    ``order_by`` becomes the primary key and earlier ones break its ties.
    """

    def __init__(self, model: type[T], items: Iterable[T]):
        super().__init__(model)
        self.items = tuple(items)
        self.orderings: tuple[tuple[str, bool], ...] = ()

    def order_by(self, field_name: str, descending: bool = False) -> SequenceQuery[T]:
        canonical = PropertyValidator.get_property(self.model, field_name)
        return self._clone(orderings=(*self.orderings, (canonical, descending)))

    def _rows(self) -> list[T]:
        rows = list(self.items)
        for name, descending in self.orderings:
            getter = attrgetter(name)
            rows.sort(key=lambda row: (getter(row) is None, getter(row)), reverse=descending)
        stop = None if self.limit is None else self.offset + self.limit
        return rows[self.offset : stop]

    async def count(self) -> int:
        stop = len(self.items) if self.limit is None else min(len(self.items), self.offset + self.limit)
        return max(0, stop - self.offset)

    async def materialize(self) -> list[T]:
        return self._rows()
