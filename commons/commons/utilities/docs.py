from fastapi import APIRouter, FastAPI
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.openapi.utils import get_openapi
from pydantic_settings import BaseSettings

from commons.middleware.request_id import REQUEST_ID_HEADER

PAGINATION_DOCS = {
    "page_index": "zero-based page index",
    "page_size": "records per page",
    "sort_column": "field to sort by, unknown names are ignored",
    "sort_order": "'ASC' sorts ascending, anything else descending",
}


def setup_swagger_ui(title: str, root_path: str) -> APIRouter:
    """Serve Swagger UI at /docs, pointing at the schema behind the service prefix."""
    router = APIRouter()
    openapi_url = (root_path or "").rstrip("/") + "/openapi.json"

    @router.get("/docs", include_in_schema=False)
    async def swagger_ui_html():
        return get_swagger_ui_html(openapi_url=openapi_url, title=f"{title} - Swagger UI")

    return router


def custom_openapi(app: FastAPI, settings: BaseSettings):
    def custom_openapi_callable():
        """
        Build the schema once. It documents the paging query parameters shared by list
        endpoints and the optional request id header accepted by every operation.
        """
        if app.openapi_schema:
            return app.openapi_schema

        schema = get_openapi(
            title=app.title,
            version="3.1.0",
            description=app.description,
            routes=app.routes,
            servers=[{"url": settings.URL_PREFIX}],  # type: ignore[attr-defined]
        )
        schema["info"]["x-pagination"] = PAGINATION_DOCS

        for path_config in schema["paths"].values():
            for method_config in path_config.values():
                method_config.setdefault("parameters", []).append(
                    {
                        "name": REQUEST_ID_HEADER,
                        "in": "header",
                        "required": False,
                        "schema": {"type": "string"},
                        "description": "Correlation id echoed back in the response, generated when missing",
                    }
                )

        app.openapi_schema = schema
        return app.openapi_schema

    return custom_openapi_callable
