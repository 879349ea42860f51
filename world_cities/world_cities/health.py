import logging

from fastapi import APIRouter, Response, status
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from world_cities.core.models import City, Country
from world_cities.db.config import AsyncSessionDep

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


class APIHealth(BaseModel):
    database_is_online: bool = False
    # False until `manage.py db create-tables` has run
    tables_are_ready: bool = False


@router.get(
    "/health",
    response_model=APIHealth,
    responses={503: {"description": "The database or the service tables are unavailable", "model": APIHealth}},
)
async def check_health(response: Response, session: AsyncSessionDep):
    """Probe the database connection and the city/country tables."""
    health = APIHealth()
    try:
        await session.exec(select(1))  # type: ignore
        health.database_is_online = True
        for model in (Country, City):
            await session.exec(select(func.count()).select_from(model))  # type: ignore
        health.tables_are_ready = True
    except SQLAlchemyError:
        logger.exception("Health check failed, database_is_online=%s", health.database_is_online)

    if not (health.database_is_online and health.tables_are_ready):
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return health
