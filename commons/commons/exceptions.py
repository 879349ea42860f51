import logging
from enum import Enum

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from starlette.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """
    An enumeration of error codes.
    """

    INVALID_PAGE_REQUEST = "invalid_page_request"
    INVALID_PAGE_SIZE = "invalid_page_size"
    PROPERTY_NOT_FOUND = "property_not_found"
    NOT_FOUND = "not_found"
    STORAGE_ERROR = "storage_error"


class ServiceError(HTTPException):
    def __init__(self, status_code: int, code: ErrorCode, detail: str):
        super().__init__(status_code=status_code, detail=detail)
        self.code = code


class InvalidPageRequestError(ServiceError):
    def __init__(self, page_index: int, page_size: int, detail: str | None = None, code=ErrorCode.INVALID_PAGE_REQUEST):
        self.page_index = page_index
        self.page_size = page_size
        detail = detail or f"Invalid page request: page_index={page_index}, page_size={page_size}."
        super().__init__(status_code=HTTP_400_BAD_REQUEST, detail=detail, code=code)


class InvalidPageSizeError(InvalidPageRequestError):
    def __init__(self, page_index: int, page_size: int):
        super().__init__(
            page_index,
            page_size,
            detail=f"Page size must be greater than zero, got {page_size}.",
            code=ErrorCode.INVALID_PAGE_SIZE,
        )


class PropertyNotFoundError(ServiceError):
    def __init__(self, model: type, name: str | None):
        self.model = model
        self.name = name
        detail = f"'{model.__name__}' has no property named '{name}'."
        super().__init__(status_code=HTTP_400_BAD_REQUEST, detail=detail, code=ErrorCode.PROPERTY_NOT_FOUND)


class ResourceNotFoundError(ServiceError):
    def __init__(self, resource: str, id: int):
        self.resource = resource
        self.id = id
        super().__init__(
            status_code=HTTP_404_NOT_FOUND, detail=f"{resource} with id '{id}' not found.", code=ErrorCode.NOT_FOUND
        )


def add_exception_handlers(app):
    @app.exception_handler(ServiceError)
    async def service_exception_handler(request, exc: ServiceError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.code, "detail": exc.detail},
        )

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request, exc: SQLAlchemyError):
        logger.exception("Storage error while handling %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": ErrorCode.STORAGE_ERROR, "detail": "A storage error occurred."},
        )
