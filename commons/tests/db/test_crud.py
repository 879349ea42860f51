from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import BaseModel
from sqlmodel.ext.asyncio.session import AsyncSession

from commons.db.crud import CRUDBase, NotFoundError
from commons.db.filters import BaseFilter, FilterField
from commons.db.models import BaseDBModel
from commons.db.query import SelectQuery
from commons.utilities.pagination import PaginationParams, SortOrder


class Landmark(BaseDBModel, table=True):
    name: str
    height: int | None = None


class LandmarkCreateSchema(BaseModel):
    name: str


class LandmarkUpdateSchema(BaseModel):
    name: str | None = None
    height: int | None = None


class LandmarkFilter(BaseFilter[Landmark]):
    height_gt: int | None = FilterField(Landmark.height, operator="gt")  # type: ignore


class CRUDLandmark(CRUDBase[Landmark, LandmarkCreateSchema, LandmarkUpdateSchema, LandmarkFilter]):
    filter_class = LandmarkFilter


@pytest.fixture
def async_session():
    # Create a complete mock of the AsyncSession
    session = MagicMock(spec=AsyncSession)
    # Setting AsyncMock for all async methods
    session.execute = AsyncMock()
    session.scalar = AsyncMock()
    session.scalars = AsyncMock()
    session.commit = AsyncMock()
    session.refresh = AsyncMock()
    session.delete = AsyncMock()
    return session


@pytest.fixture
def crud_base(async_session):
    return CRUDLandmark(Landmark, async_session)


@pytest.mark.asyncio
async def test_get_found(crud_base, async_session):
    mock_result = MagicMock()
    expected_instance = Landmark(id=1, name="Tower")
    mock_result.unique.return_value.scalar_one_or_none.return_value = expected_instance
    async_session.execute.return_value = mock_result

    result = await crud_base.get(id=1)

    assert result is expected_instance
    async_session.execute.assert_awaited()


@pytest.mark.asyncio
async def test_get_not_found(crud_base, async_session):
    mock_result = MagicMock()
    mock_result.unique.return_value.scalar_one_or_none.return_value = None
    async_session.execute.return_value = mock_result

    with pytest.raises(NotFoundError):
        await crud_base.get(id=1)


def test_query_applies_filters(crud_base, async_session):
    query = crud_base.query(filter_params={"height_gt": 100}, filter_column="NAME", filter_query="To")

    assert isinstance(query, SelectQuery)
    assert query.session is async_session
    compiled = str(query.statement).replace("\n", "")
    assert "landmark.height > :height_1" in compiled
    assert "landmark.name LIKE :name_1 || '%' ESCAPE '/'" in compiled


def test_query_ignores_unknown_filter_column(crud_base):
    query = crud_base.query(filter_column="name = name OR 1", filter_query="x")

    assert "WHERE" not in str(query.statement)


def test_query_ignores_empty_filter_query(crud_base):
    query = crud_base.query(filter_column="name", filter_query="")

    assert "WHERE" not in str(query.statement)


def test_query_ignores_non_string_filter_column(crud_base):
    query = crud_base.query(filter_column="height", filter_query="4")

    assert "WHERE" not in str(query.statement)


def test_query_orders_by_primary_key(crud_base):
    query = crud_base.query()

    assert str(query.statement).replace("\n", "").endswith("ORDER BY landmark.id")


@pytest.mark.asyncio
async def test_paginate_without_sort_column_keeps_primary_key_order(crud_base, async_session):
    result_mock = MagicMock()
    async_session.scalars.return_value = result_mock
    async_session.scalar.return_value = 2
    result_mock.unique.return_value.all.return_value = []

    await crud_base.paginate(params=PaginationParams(page_size=5))

    results_query = str(async_session.scalars.call_args[0][0]).replace("\n", "")
    assert "ORDER BY landmark.id LIMIT :param_1 OFFSET :param_2" in results_query


@pytest.mark.asyncio
async def test_paginate(crud_base, async_session):
    model_instances = [Landmark(id=1, name="Item One"), Landmark(id=2, name="Item Two")]

    result_mock = MagicMock()
    async_session.scalars.return_value = result_mock
    async_session.scalar.return_value = 12
    result_mock.unique.return_value.all.return_value = model_instances

    params = PaginationParams(page_index=1, page_size=10, sort_column="Name", sort_order="asc")

    page = await crud_base.paginate(params=params, filter_params={"height_gt": 3})

    assert page.total_count == 12
    assert page.total_pages == 2
    assert list(page.data) == model_instances
    assert page.sort_column == "Name"
    assert page.sort_order == SortOrder.ASC
    async_session.scalar.assert_awaited_once()
    async_session.scalars.assert_awaited_once()

    results_query = str(async_session.scalars.call_args[0][0]).replace("\n", "")
    assert "landmark.height > :height_1" in results_query
    assert "ORDER BY landmark.name ASC" in results_query
    assert results_query.endswith("LIMIT :param_1 OFFSET :param_2")


@pytest.mark.asyncio
async def test_create(crud_base, async_session):
    obj_in = LandmarkCreateSchema(name="New Item")

    result = await crud_base.create(obj_in=obj_in)

    assert isinstance(result, Landmark)
    assert result.name == "New Item"
    async_session.add.assert_called_once_with(result)
    async_session.commit.assert_awaited()
    async_session.refresh.assert_awaited_with(result)


@pytest.mark.asyncio
async def test_update(crud_base, async_session):
    original_obj = Landmark(id=1, name="Old Item", height=10)
    obj_in = LandmarkUpdateSchema(name="Updated Item")

    result = await crud_base.update(obj=original_obj, obj_in=obj_in)

    assert result.name == "Updated Item"
    # unset fields are left untouched
    assert result.height == 10
    async_session.add.assert_called_with(original_obj)
    async_session.commit.assert_awaited()
    async_session.refresh.assert_awaited_with(original_obj)


@pytest.mark.asyncio
async def test_update_with_dict(crud_base):
    original_obj = Landmark(id=1, name="Old Item", height=10)

    result = await crud_base.update(obj=original_obj, obj_in={"height": 20, "unknown": "ignored"})

    assert result.height == 20
    assert result.name == "Old Item"


@pytest.mark.asyncio
async def test_delete(crud_base, async_session):
    instance_to_delete = Landmark(id=1, name="Item to Delete")
    mock_result = MagicMock()
    mock_result.unique.return_value.scalar_one_or_none.return_value = instance_to_delete
    async_session.execute.return_value = mock_result

    await crud_base.delete(id=1)

    async_session.delete.assert_called_once_with(instance_to_delete)
    async_session.commit.assert_awaited()

