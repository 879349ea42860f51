from typing import Annotated, Any

from fastapi import APIRouter, Query

from commons.db.crud import NotFoundError
from commons.exceptions import ResourceNotFoundError
from commons.utilities.pagination import Page
from world_cities.core.dependencies import CRUDCityDep, CRUDCountryDep
from world_cities.core.filters import CityFilter, CountryFilter
from world_cities.core.schemas import (
    CityCreate,
    CityDupeCheck,
    CityListParams,
    CityRead,
    CityUpdate,
    CountryCreate,
    CountryFieldDupeCheck,
    CountryListParams,
    CountryRead,
    CountryUpdate,
)
from world_cities.exceptions import UnknownCountryError

city_router = APIRouter(prefix="/cities", tags=["cities"])
country_router = APIRouter(prefix="/countries", tags=["countries"])


# City Routes
@city_router.get("/", response_model=Page[CityRead])
async def list_cities(
    city_crud: CRUDCityDep,
    params: Annotated[CityListParams, Query()],
) -> Any:
    """
    Retrieve a page of cities.
    """
    city_filter = CityFilter(country_id=params.country_id)
    return await city_crud.paginate(
        params=params,
        filter_params=city_filter.model_dump(exclude_unset=True),
        filter_column=params.filter_column,
        filter_query=params.filter_query,
    )


@city_router.get("/{city_id}", response_model=CityRead)
async def get_city(city_id: int, city_crud: CRUDCityDep):
    """
    Retrieve a city by ID.
    """
    try:
        return await city_crud.get(city_id)
    except NotFoundError as e:
        raise ResourceNotFoundError("City", city_id) from e


@city_router.post("/", response_model=CityRead, status_code=201)
async def create_city(city: CityCreate, city_crud: CRUDCityDep, country_crud: CRUDCountryDep):
    """
    Create a new city.
    """
    if not await country_crud.exists(city.country_id):
        raise UnknownCountryError(city.country_id)
    return await city_crud.create(obj_in=city)


@city_router.put("/{city_id}", response_model=CityRead)
async def update_city(city_id: int, city: CityUpdate, city_crud: CRUDCityDep, country_crud: CRUDCountryDep):
    """
    Update a city by ID.
    """
    try:
        db_city = await city_crud.get(city_id)
    except NotFoundError as e:
        raise ResourceNotFoundError("City", city_id) from e
    if city.country_id is not None and not await country_crud.exists(city.country_id):
        raise UnknownCountryError(city.country_id)
    return await city_crud.update(obj=db_city, obj_in=city)


@city_router.delete("/{city_id}")
async def delete_city(city_id: int, city_crud: CRUDCityDep):
    """
    Delete a city by ID.
    """
    try:
        await city_crud.delete(id=city_id)
    except NotFoundError as e:
        raise ResourceNotFoundError("City", city_id) from e
    return {"detail": "City deleted successfully"}


@city_router.post("/is-dupe", response_model=bool)
async def is_dupe_city(city: CityDupeCheck, city_crud: CRUDCityDep) -> bool:
    """
    Check whether another city has the same name, coordinates and country.
    """
    return await city_crud.is_dupe(
        name=city.name, lat=city.lat, lon=city.lon, country_id=city.country_id, city_id=city.id
    )


# Country Routes
@country_router.get("/", response_model=Page[CountryRead])
async def list_countries(
    country_crud: CRUDCountryDep,
    params: Annotated[CountryListParams, Query()],
) -> Any:
    """
    Retrieve a page of countries.
    """
    country_filter = CountryFilter(iso2=params.iso2, iso3=params.iso3)
    return await country_crud.paginate(
        params=params,
        filter_params=country_filter.model_dump(exclude_unset=True),
        filter_column=params.filter_column,
        filter_query=params.filter_query,
    )


@country_router.get("/{country_id}", response_model=CountryRead)
async def get_country(country_id: int, country_crud: CRUDCountryDep):
    """
    Retrieve a country by ID.
    """
    try:
        return await country_crud.get(country_id)
    except NotFoundError as e:
        raise ResourceNotFoundError("Country", country_id) from e


@country_router.post("/", response_model=CountryRead, status_code=201)
async def create_country(country: CountryCreate, country_crud: CRUDCountryDep):
    """
    Create a new country.
    """
    return await country_crud.create(obj_in=country)


@country_router.put("/{country_id}", response_model=CountryRead)
async def update_country(country_id: int, country: CountryUpdate, country_crud: CRUDCountryDep):
    """
    Update a country by ID.
    """
    try:
        db_country = await country_crud.get(country_id)
    except NotFoundError as e:
        raise ResourceNotFoundError("Country", country_id) from e
    return await country_crud.update(obj=db_country, obj_in=country)


@country_router.delete("/{country_id}")
async def delete_country(country_id: int, country_crud: CRUDCountryDep):
    """
    Delete a country and its cities by ID.
    """
    try:
        await country_crud.delete(id=country_id)
    except NotFoundError as e:
        raise ResourceNotFoundError("Country", country_id) from e
    return {"detail": "Country deleted successfully"}


@country_router.post("/is-dupe-field", response_model=bool, responses={400: {"description": "Unknown field"}})
async def is_dupe_country_field(check: CountryFieldDupeCheck, country_crud: CRUDCountryDep) -> bool:
    """
    Check whether another country already holds the value in the given field.
    Unlike sorting, an unknown field name is rejected.
    """
    return await country_crud.is_dupe_field(
        field_name=check.field_name, field_value=check.field_value, country_id=check.country_id
    )
