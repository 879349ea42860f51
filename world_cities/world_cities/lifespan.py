import logging
from contextlib import asynccontextmanager

from commons.db.session import dispose_session_manager, init_session_manager
from world_cities.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    """FastAPI lifespan context manager for the DB session manager."""
    settings = get_settings()

    logger.info("Initializing AsyncSessionManager with profile: %s", settings.DB_PROFILE)
    init_session_manager(settings, app_name="world-cities")

    try:
        yield
    finally:
        logger.info("Disposing AsyncSessionManager engine")
        await dispose_session_manager()
