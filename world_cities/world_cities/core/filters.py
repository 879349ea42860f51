from commons.db.filters import BaseFilter, FilterField
from world_cities.core.models import City, Country


class CityFilter(BaseFilter[City]):
    country_id: int | None = FilterField(City.country_id)  # type: ignore
    country_ids: list[int] | None = FilterField(City.country_id, operator="in")  # type: ignore


class CountryFilter(BaseFilter[Country]):
    iso2: str | None = FilterField(Country.iso2)  # type: ignore
    iso3: str | None = FilterField(Country.iso3)  # type: ignore
