import logging
import operator
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from pydantic.fields import FieldInfo
from sqlalchemy import Column, Select

T = TypeVar("T", bound=BaseModel)
logger = logging.getLogger(__name__)

# operator name -> builder of the where clause for (column, value)
OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "eq": operator.eq,
    "ne": operator.ne,
    "lt": operator.lt,
    "le": operator.le,
    "gt": operator.gt,
    "ge": operator.ge,
    "ilike": lambda column, value: column.ilike(value),
    "startswith": lambda column, value: column.startswith(value, autoescape=True),
    "in": lambda column, value: column.in_(value),
    "not_in": lambda column, value: ~column.in_(value),
}


class FilterField(FieldInfo):
    """
    A Pydantic field bound to a model column and a comparison operator.
    """

    def __init__(self, field: Column, operator: str = "eq", **kwargs):
        """
        :param field: The SQLAlchemy column to filter on.
        :param operator: One of the names in ``OPERATORS``.
        :param kwargs: Keyword arguments to pass to the Pydantic Field constructor.
        """
        if operator not in OPERATORS:
            raise ValueError(f"Unsupported operator: {operator}")
        kwargs.setdefault("default", None)
        super().__init__(**kwargs)
        self.field = field
        self.operator = operator

    def apply_filter(self, query: Select, value: Any) -> Select:
        if value is None:
            return query
        return query.where(OPERATORS[self.operator](self.field, value))


class BaseFilter(BaseModel, Generic[T]):
    @classmethod
    def apply_filters(cls, query: Select, values: dict[str, Any]) -> Select:
        """
        Apply the declared filters to a select query. Values that are None, or whose name is
        not a declared ``FilterField``, are skipped.

        :param query: The original query.
        :param values: A dictionary of filter names and values.

        :return: The modified query.
        """
        for field_name, value in values.items():
            filter_field = cls.model_fields.get(field_name)
            if value is None or filter_field is None:
                continue
            if not isinstance(filter_field, FilterField):
                logger.error("Field %s is not a FilterField", field_name)
                continue
            query = filter_field.apply_filter(query, value)
        return query
