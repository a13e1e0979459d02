from decimal import Decimal
from types import SimpleNamespace

import pytest

from src.core.errors import NotFoundError
from src.db.models import InventoryItem
from src.repositories.catalog import InventoryItemRepository
from src.services.inventory_ledger import InventoryLedgerAdjuster


@pytest.fixture
async def pads(database) -> InventoryItem:
    async with database.session() as s:
        item = InventoryItem(sku="PAD-1", name="Brake Pads", quantity_on_hand=5, unit_price=Decimal("85"), unit_cost=Decimal("60"))
        s.add(item)
        await s.commit()
        return item


def part_line(item_id, quantity):
    return SimpleNamespace(inventory_item_id=item_id, quantity=quantity)


async def test_restock_adds_consumed_quantities(database, pads, fetch):
    async with database.session() as s:
        restored = await InventoryLedgerAdjuster(InventoryItemRepository(s)).restock(
            [part_line(pads.id, 2), part_line(None, 1), part_line(pads.id, 1)]
        )
        await s.commit()

    assert restored == {pads.id: 3}
    assert (await fetch(InventoryItem, id=pads.id)).quantity_on_hand == 8


async def test_restock_increments_the_stored_quantity_not_a_stale_read(database, pads, fetch):
    async with database.session() as first, database.session() as second:
        # first loads the row, then second commits its own restock
        await InventoryItemRepository(first).get_item(pads.id)
        await InventoryItemRepository(second).adjust_quantity(pads.id, 3)
        await second.commit()

        await InventoryLedgerAdjuster(InventoryItemRepository(first)).restock([part_line(pads.id, 2)])
        await first.commit()

    assert (await fetch(InventoryItem, id=pads.id)).quantity_on_hand == 10


async def test_restock_of_missing_item_is_not_found(database):
    async with database.session() as s:
        with pytest.raises(NotFoundError):
            await InventoryLedgerAdjuster(InventoryItemRepository(s)).restock([part_line(404, 1)])
