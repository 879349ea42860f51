from pydantic import TypeAdapter, ValidationError
from sqlalchemy import func, select

from commons.db.crud import CRUDBase
from commons.utilities.properties import PropertyValidator
from world_cities.core.filters import CityFilter, CountryFilter
from world_cities.core.models import City, Country
from world_cities.core.schemas import (
    CityCreate,
    CityUpdate,
    CountryCreate,
    CountryUpdate,
)


class CRUDCountry(CRUDBase[Country, CountryCreate, CountryUpdate, CountryFilter]):
    """
    CRUD for Country Model.
    """

    filter_class = CountryFilter

    async def exists(self, id: int) -> bool:
        count = await self.session.scalar(select(func.count()).select_from(Country).where(Country.id == id))
        return bool(count)

    async def is_dupe_field(self, field_name: str, field_value: str, country_id: int | None = None) -> bool:
        """
        Check whether another country already holds ``field_value`` in ``field_name``.

        The value is coerced to the field's type first; a value the field could never hold
        is not a duplicate.

        :raises PropertyNotFoundError: if ``field_name`` is not a Country field.
        """
        name = PropertyValidator.get_property(Country, field_name)
        try:
            value = TypeAdapter(Country.model_fields[name].annotation).validate_python(field_value)
        except ValidationError:
            return False

        column = getattr(Country, name)
        statement = select(func.count()).select_from(Country).where(column == value)
        if country_id is not None:
            statement = statement.where(Country.id != country_id)
        count = await self.session.scalar(statement)
        return bool(count)


class CRUDCity(CRUDBase[City, CityCreate, CityUpdate, CityFilter]):
    """
    CRUD for City Model.
    """

    filter_class = CityFilter

    async def is_dupe(self, name: str, lat: float, lon: float, country_id: int, city_id: int | None = None) -> bool:
        """
        Check whether another city has the same name, coordinates and country.
        """
        statement = (
            select(func.count())
            .select_from(City)
            .where(City.name == name, City.lat == lat, City.lon == lon, City.country_id == country_id)
        )
        if city_id is not None:
            statement = statement.where(City.id != city_id)
        count = await self.session.scalar(statement)
        return bool(count)
