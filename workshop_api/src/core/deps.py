from __future__ import annotations

from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.settings import AppSettings
from src.db.session import Database
from src.services.work_orders import WorkOrderService


# PUBLIC_INTERFACE
def get_database(request: Request) -> Database:
    """Return the Database attached to the application by create_app."""
    return request.app.state.database


# PUBLIC_INTERFACE
def get_settings_dep(request: Request) -> AppSettings:
    """Return the AppSettings the application was built with."""
    return request.app.state.settings


# PUBLIC_INTERFACE
async def get_session(database: Database = Depends(get_database)) -> AsyncGenerator[AsyncSession, None]:
    """Yield one AsyncSession per request."""
    async with database.session() as session:
        yield session


# PUBLIC_INTERFACE
def get_work_order_service(
    session: AsyncSession = Depends(get_session),
    settings: AppSettings = Depends(get_settings_dep),
) -> WorkOrderService:
    """Build the work order service for the request's session."""
    return WorkOrderService(session, auto_create=settings.CATALOG_AUTO_CREATE)
