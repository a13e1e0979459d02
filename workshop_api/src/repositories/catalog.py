from __future__ import annotations

from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models.catalog import InventoryItem, ServiceItem
from .base import BaseRepository


class InventoryItemRepository(BaseRepository):
    """Repository for stocked parts."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_item(self, item_id: int) -> Optional[InventoryItem]:
        stmt = select(InventoryItem).where(InventoryItem.id == item_id)
        return await self.scalar_one_or_none(stmt)

    async def find_by_name(self, name: str) -> Optional[InventoryItem]:
        """Exact, case-sensitive name match; the oldest item wins when names repeat."""
        stmt = select(InventoryItem).where(InventoryItem.name == name).order_by(InventoryItem.id).limit(1)
        return await self.scalar_one_or_none(stmt)

    async def adjust_quantity(self, item_id: int, delta: int) -> Optional[InventoryItem]:
        """Add ``delta`` (signed) to quantity_on_hand in a single UPDATE; returns None when the item is gone."""
        item = await self.get_item(item_id)
        if item is None:
            return None
        stmt = (
            update(InventoryItem)
            .where(InventoryItem.id == item_id)
            .values(quantity_on_hand=InventoryItem.quantity_on_hand + delta)
            .execution_options(synchronize_session="fetch")
        )
        await self.execute(stmt)
        return item


class ServiceItemRepository(BaseRepository):
    """Repository for labor/service catalog entries."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_item(self, item_id: int) -> Optional[ServiceItem]:
        stmt = select(ServiceItem).where(ServiceItem.id == item_id)
        return await self.scalar_one_or_none(stmt)

    async def find_by_name(self, name: str) -> Optional[ServiceItem]:
        stmt = select(ServiceItem).where(ServiceItem.name == name).order_by(ServiceItem.id).limit(1)
        return await self.scalar_one_or_none(stmt)
