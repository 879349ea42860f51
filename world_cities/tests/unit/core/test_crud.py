import pytest
import pytest_asyncio

from commons.exceptions import PropertyNotFoundError
from commons.utilities.pagination import SortOrder
from world_cities.core.crud import CRUDCity, CRUDCountry
from world_cities.core.models import City, Country
from world_cities.core.schemas import CityListParams


@pytest.fixture
def city_crud(db_session) -> CRUDCity:
    return CRUDCity(model=City, session=db_session)


@pytest.fixture
def country_crud(db_session) -> CRUDCountry:
    return CRUDCountry(model=Country, session=db_session)


@pytest_asyncio.fixture()
async def countries(db_session) -> list[Country]:
    countries = [
        Country(name="Italy", iso2="IT", iso3="ITA"),
        Country(name="Spain", iso2="ES", iso3="ESP"),
    ]
    db_session.add_all(countries)
    await db_session.commit()
    return countries


@pytest_asyncio.fixture()
async def cities(db_session, countries) -> list[City]:
    italy, spain = countries
    cities = [
        City(name="Rome", lat=41.8931, lon=12.4828, country_id=italy.id),
        City(name="Milan", lat=45.4669, lon=9.19, country_id=italy.id),
        City(name="Madrid", lat=40.4167, lon=-3.7167, country_id=spain.id),
        City(name="Malaga", lat=36.7194, lon=-4.42, country_id=spain.id),
    ]
    db_session.add_all(cities)
    await db_session.commit()
    return cities


@pytest.mark.asyncio
async def test_paginate_sorted(city_crud, cities):
    page = await city_crud.paginate(params=CityListParams(page_size=2, sort_column="LAT", sort_order="desc"))

    assert [city.name for city in page.data] == ["Milan", "Rome"]
    assert page.total_count == 4
    assert page.total_pages == 2
    assert page.sort_column == "LAT"
    assert page.sort_order == SortOrder.DESC


@pytest.mark.asyncio
async def test_paginate_filtered(city_crud, cities, countries):
    spain = countries[1]

    page = await city_crud.paginate(
        params=CityListParams(sort_column="name", sort_order="asc"),
        filter_params={"country_id": spain.id},
        filter_column="name",
        filter_query="Ma",
    )

    assert [city.name for city in page.data] == ["Madrid", "Malaga"]
    assert page.total_count == 2


@pytest.mark.asyncio
async def test_paginate_country_ids(city_crud, cities, countries):
    page = await city_crud.paginate(
        params=CityListParams(), filter_params={"country_ids": [country.id for country in countries]}
    )

    assert page.total_count == 4


@pytest.mark.asyncio
async def test_country_exists(country_crud, countries):
    assert await country_crud.exists(countries[0].id) is True
    assert await country_crud.exists(12345) is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field_name, field_value, expected",
    [
        ("iso3", "ITA", True),
        ("Name", "Spain", True),
        ("name", "spain", False),
        ("iso2", "FR", False),
        # a value the field can never hold is not a duplicate
        ("id", "not-a-number", False),
    ],
)
async def test_is_dupe_field(country_crud, countries, field_name, field_value, expected):
    assert await country_crud.is_dupe_field(field_name=field_name, field_value=field_value) is expected


@pytest.mark.asyncio
async def test_is_dupe_field_excludes_current_country(country_crud, countries):
    italy = countries[0]

    assert await country_crud.is_dupe_field(field_name="iso2", field_value="IT", country_id=italy.id) is False


@pytest.mark.asyncio
async def test_is_dupe_field_unknown_field(country_crud, countries):
    with pytest.raises(PropertyNotFoundError) as exc_info:
        await country_crud.is_dupe_field(field_name="cities", field_value="Rome")

    assert exc_info.value.name == "cities"


@pytest.mark.asyncio
async def test_is_dupe(city_crud, cities):
    rome = cities[0]

    assert await city_crud.is_dupe(name="Rome", lat=rome.lat, lon=rome.lon, country_id=rome.country_id) is True
    assert (
        await city_crud.is_dupe(name="Rome", lat=rome.lat, lon=rome.lon, country_id=rome.country_id, city_id=rome.id)
        is False
    )
    assert await city_crud.is_dupe(name="Roma", lat=rome.lat, lon=rome.lon, country_id=rome.country_id) is False
