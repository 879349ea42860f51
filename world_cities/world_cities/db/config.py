from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from commons.db.session import AsyncSessionManager, get_session_manager

# Used to load models for table creation
MODEL_PATHS = ["world_cities.core.models"]


# async session manager
async def get_async_session_manager() -> AsyncSessionManager:
    return get_session_manager()


AsyncSessionManagerDep = Annotated[AsyncSessionManager, Depends(get_async_session_manager)]


# async session
async def get_async_session(mgr: AsyncSessionManagerDep) -> AsyncGenerator[AsyncSession, None]:
    """Request scoped session, released when the request finishes or is cancelled."""
    async with mgr.session(commit=False) as session:
        yield session


AsyncSessionDep = Annotated[AsyncSession, Depends(get_async_session)]
