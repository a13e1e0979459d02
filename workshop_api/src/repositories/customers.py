from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models.customers import Customer, Vehicle
from .base import BaseRepository


class CustomerRepository(BaseRepository):
    """Read access to customers referenced by work orders."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_customer(self, customer_id: int) -> Optional[Customer]:
        stmt = select(Customer).where(Customer.id == customer_id)
        return await self.scalar_one_or_none(stmt)


class VehicleRepository(BaseRepository):
    """Read access to vehicles referenced by work orders."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_vehicle(self, vehicle_id: int) -> Optional[Vehicle]:
        stmt = select(Vehicle).where(Vehicle.id == vehicle_id)
        return await self.scalar_one_or_none(stmt)
