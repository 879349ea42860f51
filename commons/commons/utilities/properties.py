import dataclasses
from collections.abc import Mapping
from functools import lru_cache
from types import MappingProxyType

from pydantic import BaseModel

from commons.exceptions import PropertyNotFoundError


@lru_cache(maxsize=None)
def get_model_properties(model: type) -> Mapping[str, str]:
    """
    Build the public field table of a model type, keyed by the case-folded field name.

    Pydantic (and SQLModel) models expose their declared ``model_fields``, relationships are
    not part of it. Dataclasses expose their ``fields``. The table is built once per type.

    :param model: The model class.
    :return: Read-only mapping of case-folded name -> canonical field name.
    """
    if isinstance(model, type) and issubclass(model, BaseModel):
        names = list(model.model_fields)
    elif dataclasses.is_dataclass(model):
        names = [field.name for field in dataclasses.fields(model)]
    else:
        raise TypeError(f"Cannot resolve the properties of {model!r}")

    properties: dict[str, str] = {}
    for name in names:
        if name.startswith("_"):
            continue
        # first declaration wins when two names only differ by case
        properties.setdefault(name.casefold(), name)
    return MappingProxyType(properties)


class PropertyValidator:
    """
    Checks caller supplied names against the declared fields of a model.

    Any name used to build a query expression (sort or filter column) must pass through here
    first, so that only names the model itself declares ever reach the query.
    """

    @staticmethod
    def resolve(model: type, name: str | None) -> str | None:
        """
        Return the canonical field name matching ``name`` (case-insensitive), or None.
        """
        if not name:
            return None
        return get_model_properties(model).get(name.casefold())

    @classmethod
    def is_valid(cls, model: type, name: str | None) -> bool:
        return cls.resolve(model, name) is not None

    @classmethod
    def get_property(cls, model: type, name: str | None) -> str:
        """
        Strict variant of :meth:`is_valid`.

        :raises PropertyNotFoundError: if the model has no such field.
        :return: The canonical field name.
        """
        canonical = cls.resolve(model, name)
        if canonical is None:
            raise PropertyNotFoundError(model=model, name=name)
        return canonical
