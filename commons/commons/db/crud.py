from typing import (
    Any,
    Generic,
    TypeVar,
)

from pydantic import BaseModel
from sqlalchemy import Select, String, TypeDecorator, inspect, select
from sqlmodel.ext.asyncio.session import AsyncSession

from commons.db.filters import BaseFilter
from commons.db.models import BaseSQLModel
from commons.db.query import SelectQuery
from commons.utilities.pagination import Page, PagedQueryBuilder, PaginationParams
from commons.utilities.properties import PropertyValidator

ModelType = TypeVar("ModelType", bound=BaseSQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)
FilterType = TypeVar("FilterType", bound=BaseFilter)


class NotFoundError(Exception):
    def __init__(self, id: Any) -> None:
        self.id = id
        super().__init__(f"Object with id {id} not found")


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType, FilterType]):
    filter_class: type[FilterType] | None = None

    def __init__(self, model: type[ModelType], session: AsyncSession):
        """
        CRUD object with default methods to Create, Read, Update, Delete.

        **Parameters**

        * `Model`: A SQLAlchemy model class
        * `session`: A SQLAlchemy async session
        """
        self.model = model
        self.session = session

    def get_select_query(self) -> Select:
        # primary key order keeps unsorted pages stable between identical calls
        return select(self.model).order_by(self.model.id)  # type: ignore[attr-defined]

    async def get(self, id: int) -> ModelType:
        statement = self.get_select_query().filter_by(id=id)
        results = await self.session.execute(statement=statement)
        instance: ModelType | None = results.unique().scalar_one_or_none()

        if instance is None:
            raise NotFoundError(id=id)

        return instance

    def query(
        self,
        *,
        filter_params: dict[str, Any] | None = None,
        filter_column: str | None = None,
        filter_query: str | None = None,
    ) -> SelectQuery[ModelType]:
        """
        Build a deferred query over the model with the caller's predicates applied.

        :param filter_params: Values for the declarative ``filter_class`` fields.
        :param filter_column: Name of a string field to prefix-match ``filter_query`` against.
            Unknown names and non string fields are ignored.
        :param filter_query: The prefix to match.
        """
        statement = self.get_select_query()
        if self.filter_class is not None and filter_params:
            statement = self.filter_class.apply_filters(statement, filter_params)

        column = self._get_string_column(filter_column)
        if column is not None and filter_query:
            statement = statement.where(column.startswith(filter_query, autoescape=True))

        return SelectQuery(self.session, self.model, statement)

    def _get_string_column(self, name: str | None):
        canonical = PropertyValidator.resolve(self.model, name)
        if canonical is None:
            return None
        column = inspect(self.model).columns.get(canonical)
        if column is None:
            return None
        # sqlmodel maps str fields to AutoString, a decorator over String
        column_type = column.type.impl if isinstance(column.type, TypeDecorator) else column.type
        if not isinstance(column_type, String):
            return None
        return getattr(self.model, canonical)

    async def paginate(
        self,
        *,
        params: PaginationParams,
        filter_params: dict[str, Any] | None = None,
        filter_column: str | None = None,
        filter_query: str | None = None,
    ) -> Page[ModelType]:
        source = self.query(filter_params=filter_params, filter_column=filter_column, filter_query=filter_query)
        return await PagedQueryBuilder.build(
            source,
            page_index=params.page_index,
            page_size=params.page_size,
            sort_column=params.sort_column,
            sort_order=params.sort_order,
        )

    async def create(self, *, obj_in: CreateSchemaType) -> ModelType:
        values = obj_in.model_dump()
        obj = self.model(**values)
        self.session.add(obj)
        await self.session.commit()
        await self.session.refresh(obj)
        return obj

    async def update(self, *, obj: ModelType, obj_in: UpdateSchemaType | dict[str, Any]) -> ModelType:
        obj_data = obj.model_dump()
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True)
        for field in obj_data:
            if field in update_data:
                setattr(obj, field, update_data[field])

        self.session.add(obj)
        await self.session.commit()
        await self.session.refresh(obj)
        return obj

    async def delete(self, *, id: Any) -> None:
        instance = await self.get(id=id)
        await self.session.delete(instance)
        await self.session.commit()

