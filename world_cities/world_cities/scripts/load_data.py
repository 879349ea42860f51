import logging
from pathlib import Path

import pandas as pd
from sqlalchemy import select
from sqlmodel.ext.asyncio.session import AsyncSession

from world_cities.core.models import City, Country

logger = logging.getLogger(__name__)

# source column -> model field, as in the public worldcities dataset
COLUMNS = {"city": "name", "lat": "lat", "lng": "lon", "country": "country", "iso2": "iso2", "iso3": "iso3"}


def read_world_cities(path: str | Path) -> pd.DataFrame:
    """
    Read a worldcities-style CSV and keep one row per (city, coordinates, country).

    Rows missing any of the required columns are dropped.
    """
    frame = pd.read_csv(path, usecols=list(COLUMNS), keep_default_na=False, na_values=[""])
    frame = frame.rename(columns=COLUMNS).dropna()
    frame["lat"] = frame["lat"].astype(float)
    frame["lon"] = frame["lon"].astype(float)
    return frame.drop_duplicates(subset=["name", "lat", "lon", "country"]).reset_index(drop=True)


async def load_world_cities(session: AsyncSession, frame: pd.DataFrame) -> tuple[int, int]:
    """
    Insert the countries and cities of ``frame`` that are not stored yet.

    :return: Number of countries and cities created.
    """
    countries = {country.name: country for country in (await session.scalars(select(Country))).all()}
    new_countries = 0
    for row in frame[["country", "iso2", "iso3"]].drop_duplicates(subset=["country"]).itertuples(index=False):
        if row.country in countries:
            continue
        country = Country(name=row.country, iso2=row.iso2, iso3=row.iso3)
        session.add(country)
        countries[row.country] = country
        new_countries += 1
    await session.flush()
    logger.info("Created %s countries", new_countries)

    existing = {
        (city.name, city.lat, city.lon, city.country_id) for city in (await session.scalars(select(City))).all()
    }
    new_cities = 0
    for row in frame.itertuples(index=False):
        country_id = countries[row.country].id
        key = (row.name, row.lat, row.lon, country_id)
        if key in existing:
            continue
        session.add(City(name=row.name, lat=row.lat, lon=row.lon, country_id=country_id))
        existing.add(key)
        new_cities += 1
    await session.flush()
    logger.info("Created %s cities", new_cities)
    return new_countries, new_cities
