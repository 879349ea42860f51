from sqlalchemy import Column, Float, String
from sqlmodel import Field, Relationship

from commons.db.models import BaseDBModel, BaseSQLModel


class CountryBase(BaseSQLModel):
    name: str = Field(sa_column=Column(String(255), nullable=False, index=True))
    iso2: str = Field(sa_column=Column(String(2), nullable=False, index=True))
    iso3: str = Field(sa_column=Column(String(3), nullable=False, index=True))


class Country(CountryBase, BaseDBModel, table=True):  # type: ignore
    # children are removed by the database (ON DELETE CASCADE), never loaded for deletes
    cities: list["City"] = Relationship(
        back_populates="country", sa_relationship_kwargs={"cascade": "all, delete-orphan", "passive_deletes": True}
    )


class CityBase(BaseSQLModel):
    name: str = Field(sa_column=Column(String(255), nullable=False, index=True))
    lat: float = Field(sa_column=Column(Float, nullable=False))
    lon: float = Field(sa_column=Column(Float, nullable=False))
    country_id: int = Field(foreign_key="country.id", ondelete="CASCADE", index=True)


class City(CityBase, BaseDBModel, table=True):  # type: ignore
    country: Country | None = Relationship(back_populates="cities")
