from typing import Annotated

from fastapi import Depends

from world_cities.core.crud import CRUDCity, CRUDCountry
from world_cities.core.models import City, Country
from world_cities.db.config import AsyncSessionDep


async def get_cities_crud(session: AsyncSessionDep) -> CRUDCity:
    return CRUDCity(model=City, session=session)


async def get_countries_crud(session: AsyncSessionDep) -> CRUDCountry:
    return CRUDCountry(model=Country, session=session)


CRUDCityDep = Annotated[CRUDCity, Depends(get_cities_crud)]
CRUDCountryDep = Annotated[CRUDCountry, Depends(get_countries_crud)]
