"""
Catalog resolution: maps a line or assignment request to a persisted
inventory item, service item or worker.

``CatalogResolver`` is the capability the reconciler and the workload tracker
depend on. ``SqlCatalogResolver`` is the database-backed implementation; it
resolves by id strictly and otherwise looks the entity up by exact name,
creating it when ``auto_create`` is on (the default) or raising NotFoundError
when it is off.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Generic, Optional, Protocol, TypeVar
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import NotFoundError
from src.db.models.catalog import InventoryItem, ServiceItem
from src.db.models.workforce import Worker
from src.repositories.catalog import InventoryItemRepository, ServiceItemRepository
from src.repositories.workers import WorkerRepository
from src.schemas.work_orders import PartLineInput, ServiceLineInput
from src.services.financials import to_money

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_REORDER_POINT = 5


@dataclass
class Resolved(Generic[T]):
    """A catalog entity plus whether it was created by this resolution."""
    item: T
    created: bool = False


class CatalogResolver(Protocol):
    """Resolves requests to catalog entities. Implementations must raise NotFoundError for unknown ids."""

    async def resolve_part(self, line: PartLineInput) -> Resolved[InventoryItem]:
        ...

    async def resolve_service(self, line: ServiceLineInput) -> Resolved[ServiceItem]:
        ...

    async def resolve_worker(self, worker_id: Optional[int], worker_name: Optional[str]) -> Resolved[Worker]:
        ...


# PUBLIC_INTERFACE
def generate_sku(name: str) -> str:
    """Build ``SKU-<up to 6 alphanumerics of name>-<random suffix>``, e.g. ``SKU-BRAKEP-1F3A9C0D``."""
    compact = re.sub(r"[^A-Za-z0-9]", "", name).upper()
    return f"SKU-{compact[:6] or 'ITEM'}-{uuid4().hex[:8].upper()}"


# PUBLIC_INTERFACE
def new_inventory_item(line: PartLineInput) -> InventoryItem:
    """
    Build (unsaved) the inventory item auto-provisioned for a PART line.

    Stock is seeded from ``initial_stock`` (zero when absent); the reconciler then
    consumes the requested quantity from that baseline.
    """
    sku = line.sku.strip() if line.sku and line.sku.strip() else generate_sku(line.name)
    return InventoryItem(
        name=line.name,
        sku=sku,
        description=line.description,
        quantity_on_hand=line.initial_stock or 0,
        reorder_point=DEFAULT_REORDER_POINT,
        unit_cost=to_money(line.unit_price),
        unit_price=to_money(line.unit_price),
    )


# PUBLIC_INTERFACE
def new_service_item(line: ServiceLineInput) -> ServiceItem:
    """Build (unsaved) the service item auto-provisioned for a SERVICE line."""
    return ServiceItem(
        name=line.name,
        description=line.description,
        default_price=to_money(line.unit_price),
    )


class SqlCatalogResolver:
    """CatalogResolver backed by the repositories of the given session."""

    def __init__(self, session: AsyncSession, *, auto_create: bool = True) -> None:
        self.auto_create = auto_create
        self.inventory = InventoryItemRepository(session)
        self.services = ServiceItemRepository(session)
        self.workers = WorkerRepository(session)

    # PUBLIC_INTERFACE
    async def resolve_part(self, line: PartLineInput) -> Resolved[InventoryItem]:
        if line.inventory_item_id:
            item = await self.inventory.get_item(line.inventory_item_id)
            if item is None:
                raise NotFoundError(f"Inventory item {line.inventory_item_id} not found")
            return Resolved(item)

        item = await self.inventory.find_by_name(line.name)
        if item is not None:
            return Resolved(item)
        if not self.auto_create:
            raise NotFoundError(f"Inventory item named {line.name!r} not found")

        row = new_inventory_item(line)
        await self.inventory.add(row)
        await self.inventory.flush()
        logger.info("Auto-created inventory item %s (%s)", row.sku, row.name)
        return Resolved(row, created=True)

    # PUBLIC_INTERFACE
    async def resolve_service(self, line: ServiceLineInput) -> Resolved[ServiceItem]:
        if line.service_item_id:
            item = await self.services.get_item(line.service_item_id)
            if item is None:
                raise NotFoundError(f"Service item {line.service_item_id} not found")
            return Resolved(item)

        item = await self.services.find_by_name(line.name)
        if item is not None:
            return Resolved(item)
        if not self.auto_create:
            raise NotFoundError(f"Service item named {line.name!r} not found")

        row = new_service_item(line)
        await self.services.add(row)
        await self.services.flush()
        logger.info("Auto-created service item %r", row.name)
        return Resolved(row, created=True)

    # PUBLIC_INTERFACE
    async def resolve_worker(self, worker_id: Optional[int], worker_name: Optional[str]) -> Resolved[Worker]:
        if worker_id:
            worker = await self.workers.get_worker(worker_id)
            if worker is None:
                raise NotFoundError(f"Worker {worker_id} not found")
            return Resolved(worker)

        name = (worker_name or "").strip()
        worker = await self.workers.find_by_name(name)
        if worker is not None:
            return Resolved(worker)
        if not self.auto_create:
            raise NotFoundError(f"Worker named {name!r} not found")

        created = await self.workers.create_worker(name)
        logger.info("Auto-created worker %r", created.name)
        return Resolved(created, created=True)
