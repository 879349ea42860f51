from pydantic import ConfigDict, Field

from commons.models import BaseModel
from commons.utilities.pagination import PaginationParams


class CountryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    iso2: str = Field(min_length=2, max_length=2)
    iso3: str = Field(min_length=3, max_length=3)

    model_config = ConfigDict(json_schema_extra={"example": {"name": "Italy", "iso2": "IT", "iso3": "ITA"}})


class CountryUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    iso2: str | None = Field(None, min_length=2, max_length=2)
    iso3: str | None = Field(None, min_length=3, max_length=3)


class CountryRead(BaseModel):
    id: int
    name: str
    iso2: str
    iso3: str


class CityCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
    country_id: int

    model_config = ConfigDict(
        json_schema_extra={"example": {"name": "Rome", "lat": 41.8931, "lon": 12.4828, "country_id": 1}}
    )


class CityUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    lat: float | None = Field(None, ge=-90, le=90)
    lon: float | None = Field(None, ge=-180, le=180)
    country_id: int | None = None


class CityRead(BaseModel):
    id: int
    name: str
    lat: float
    lon: float
    country_id: int


class CityDupeCheck(BaseModel):
    id: int | None = Field(None, description="Id of the city being edited, excluded from the check")
    name: str
    lat: float
    lon: float
    country_id: int


class CountryFieldDupeCheck(BaseModel):
    country_id: int | None = Field(None, description="Id of the country being edited, excluded from the check")
    field_name: str = Field(description="Name of the Country field to check")
    field_value: str


class ListParams(PaginationParams):
    filter_column: str | None = Field(None, description="Field to prefix-match filter_query against")
    filter_query: str | None = Field(None, description="Prefix to match in filter_column")


class CityListParams(ListParams):
    country_id: int | None = None


class CountryListParams(ListParams):
    iso2: str | None = None
    iso3: str | None = None
