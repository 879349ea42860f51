import logging
from enum import Enum
from typing import Generic, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
)

from commons.db.query import AbstractQuery
from commons.exceptions import InvalidPageRequestError, InvalidPageSizeError
from commons.utilities.properties import PropertyValidator

T = TypeVar("T")
logger = logging.getLogger(__name__)


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def resolve(cls, value: str | None) -> "SortOrder":
        """
        Anything other than a case-insensitive "ASC" resolves to descending,
        including None, "" and spellings like "ascending".
        """
        if value is not None and value.casefold() == "asc":
            return cls.ASC
        return cls.DESC


class PaginationParams(BaseModel):
    page_index: int = Field(0, ge=0, description="Zero-based index of the page to return")
    page_size: int = Field(10, gt=0, le=100, description="Maximum number of items in each page")
    sort_column: str | None = Field(None, description="Name of the field to sort by")
    sort_order: str | None = Field(None, description="Sort direction, 'ASC' or 'DESC' (default)")

    @property
    def offset(self) -> int:
        return self.page_index * self.page_size


class Page(BaseModel, Generic[T]):
    model_config = ConfigDict(frozen=True)

    data: tuple[T, ...]
    page_index: int = Field(ge=0)
    page_size: int = Field(gt=0)
    total_count: int = Field(ge=0)
    total_pages: int = Field(ge=0)
    sort_column: str | None = None
    sort_order: SortOrder | None = None

    @computed_field  # type: ignore[misc]
    @property
    def has_previous_page(self) -> bool:
        return self.page_index > 0

    @computed_field  # type: ignore[misc]
    @property
    def has_next_page(self) -> bool:
        return (self.page_index + 1) < self.total_pages

    @classmethod
    def create(
        cls,
        items: list[T],
        total_count: int,
        page_index: int,
        page_size: int,
        sort_column: str | None = None,
        sort_order: SortOrder | None = None,
    ):
        total_pages = (total_count + page_size - 1) // page_size
        return cls(
            data=items,
            page_index=page_index,
            page_size=page_size,
            total_count=total_count,
            total_pages=total_pages,
            sort_column=sort_column,
            sort_order=sort_order,
        )


class PagedQueryBuilder:
    """
    Builds a materialized :class:`Page` out of a deferred query and caller supplied
    paging/sorting arguments.
    """

    @staticmethod
    def validate(page_index: int, page_size: int) -> None:
        if page_index < 0 or page_size < 0:
            raise InvalidPageRequestError(page_index=page_index, page_size=page_size)
        if page_size == 0:
            raise InvalidPageSizeError(page_index=page_index, page_size=page_size)

    @classmethod
    async def build(
        cls,
        source: AbstractQuery[T],
        page_index: int,
        page_size: int,
        sort_column: str | None = None,
        sort_order: str | None = None,
    ) -> Page[T]:
        """
        Count, optionally sort, slice and materialize ``source``.

        An unknown ``sort_column`` is ignored rather than rejected: the page comes back in the
        source's own order with ``sort_column`` and ``sort_order`` unset. A known column is
        echoed back with the caller's casing.

        :raises InvalidPageRequestError: on a negative page index or page size.
        :raises InvalidPageSizeError: on a zero page size.
        """
        cls.validate(page_index, page_size)

        total_count = await source.count()

        applied_column: str | None = None
        applied_order: SortOrder | None = None
        canonical = PropertyValidator.resolve(source.model, sort_column)
        if canonical is not None:
            applied_column = sort_column
            applied_order = SortOrder.resolve(sort_order)
            source = source.order_by(canonical, descending=applied_order == SortOrder.DESC)
        elif sort_column:
            logger.debug("Ignoring unknown sort column %r for %s", sort_column, source.model.__name__)

        offset = page_index * page_size
        logger.debug(
            "Fetching %s page: offset=%s limit=%s sort=%s %s",
            source.model.__name__,
            offset,
            page_size,
            applied_column,
            applied_order,
        )
        # past the last record there is nothing to fetch, and the offset may not fit the storage's integers
        items = [] if offset >= total_count else await source.skip(offset).take(page_size).materialize()

        return Page.create(
            items=items,
            total_count=total_count,
            page_index=page_index,
            page_size=page_size,
            sort_column=applied_column,
            sort_order=applied_order,
        )

