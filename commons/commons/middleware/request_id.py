import uuid
from collections.abc import Callable
from typing import Any, TypeVar

from fastapi import Request, Response

F = TypeVar("F", bound=Callable[..., Any])
REQUEST_ID_HEADER = "X-Request-ID"


async def request_id_middleware(request: Request, call_next: F) -> Response:
    """
    Tag the request with an id, reusing the caller's X-Request-ID when present,
    and echo it back in the response headers
    """
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    request.state.request_id = request_id
    response: Response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response
