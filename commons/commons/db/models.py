from pydantic import ConfigDict
from sqlmodel import Field, SQLModel


class BaseSQLModel(SQLModel):
    """
    Shared base for SQLModel classes, tables and plain models alike
    """

    model_config = ConfigDict(populate_by_name=True)  # type: ignore


class BaseDBModel(BaseSQLModel):
    """
    A stored row identified by an auto incremented integer key
    """

    id: int | None = Field(default=None, primary_key=True)
