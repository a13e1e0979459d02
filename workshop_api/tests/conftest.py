from __future__ import annotations

from decimal import Decimal
from itertools import count
from typing import Dict, Optional

import pytest
from sqlalchemy import select

from src.core.errors import NotFoundError
from src.db.base import Base
from src.db.models import Customer, InventoryItem, ServiceItem, Vehicle, Worker
from src.db.session import Database
from src.schemas.work_orders import PartLineInput, ServiceLineInput
from src.services.catalog import Resolved, new_inventory_item, new_service_item


class InMemoryCatalog:
    """Deterministic catalog for unit tests; rows are transient ORM objects with ids handed out in order."""

    def __init__(self) -> None:
        self._ids = count(1)
        self.parts: Dict[int, InventoryItem] = {}
        self.services: Dict[int, ServiceItem] = {}
        self.workers: Dict[int, Worker] = {}

    def add_part(self, name: str, quantity_on_hand: int = 0, unit_price: str = "0") -> InventoryItem:
        item = InventoryItem(
            id=next(self._ids), sku=f"SKU-{name.upper()}", name=name,
            quantity_on_hand=quantity_on_hand, unit_price=Decimal(unit_price), unit_cost=Decimal(unit_price),
        )
        self.parts[item.id] = item
        return item

    def add_service(self, name: str, default_price: str = "0", description: Optional[str] = None) -> ServiceItem:
        item = ServiceItem(id=next(self._ids), name=name, default_price=Decimal(default_price), description=description)
        self.services[item.id] = item
        return item

    def add_worker(self, name: str) -> Worker:
        worker = Worker(id=next(self._ids), name=name, total_jobs=0, total_services=0)
        self.workers[worker.id] = worker
        return worker

    async def resolve_part(self, line: PartLineInput) -> Resolved[InventoryItem]:
        if line.inventory_item_id:
            if line.inventory_item_id not in self.parts:
                raise NotFoundError(f"Inventory item {line.inventory_item_id} not found")
            return Resolved(self.parts[line.inventory_item_id])
        for item in self.parts.values():
            if item.name == line.name:
                return Resolved(item)
        item = new_inventory_item(line)
        item.id = next(self._ids)
        self.parts[item.id] = item
        return Resolved(item, created=True)

    async def resolve_service(self, line: ServiceLineInput) -> Resolved[ServiceItem]:
        if line.service_item_id:
            if line.service_item_id not in self.services:
                raise NotFoundError(f"Service item {line.service_item_id} not found")
            return Resolved(self.services[line.service_item_id])
        for item in self.services.values():
            if item.name == line.name:
                return Resolved(item)
        item = new_service_item(line)
        item.id = next(self._ids)
        self.services[item.id] = item
        return Resolved(item, created=True)

    async def resolve_worker(self, worker_id: Optional[int], worker_name: Optional[str]) -> Resolved[Worker]:
        if worker_id:
            if worker_id not in self.workers:
                raise NotFoundError(f"Worker {worker_id} not found")
            return Resolved(self.workers[worker_id])
        for worker in self.workers.values():
            if worker.name == worker_name.strip():
                return Resolved(worker)
        return Resolved(self.add_worker(worker_name.strip()), created=True)


@pytest.fixture
def catalog() -> InMemoryCatalog:
    return InMemoryCatalog()


@pytest.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'workshop.db'}")
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db
    await db.dispose()


@pytest.fixture
async def session(database):
    async with database.session() as s:
        yield s


@pytest.fixture
async def vehicle(database) -> Vehicle:
    async with database.session() as s:
        customer = Customer(first_name="Dana", last_name="Reyes", email="dana@example.com")
        s.add(customer)
        await s.flush()
        row = Vehicle(customer_id=customer.id, vin="1HGCM82633A004352", make="Honda", model="Accord", year=2018)
        s.add(row)
        await s.commit()
        return row


@pytest.fixture
def fetch(database):
    """Read a row through a fresh session so assertions see committed state only."""

    async def _fetch(model, **criteria):
        async with database.session() as s:
            stmt = select(model).filter_by(**criteria)
            return (await s.execute(stmt)).scalar_one_or_none()

    return _fetch


@pytest.fixture
def count_rows(database):
    async def _count(model) -> int:
        async with database.session() as s:
            return len((await s.execute(select(model))).scalars().all())

    return _count
