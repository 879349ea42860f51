from pydantic import BaseModel as _BaseModel, ConfigDict


class BaseModel(_BaseModel):
    """
    Base for request and response schemas, readable straight off ORM rows
    """

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)
