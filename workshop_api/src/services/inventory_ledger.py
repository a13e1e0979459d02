from __future__ import annotations

import logging
from typing import Any, Dict, Iterable

from src.core.errors import NotFoundError
from src.repositories.catalog import InventoryItemRepository
from src.services.deltas import restock_quantities

logger = logging.getLogger(__name__)


class InventoryLedgerAdjuster:
    """
    Returns previously consumed stock to inventory.

    Invoked by the work order coordinator before a line-item set is replaced or
    an order is deleted; the full reversal lands before any new consumption is
    reconciled. No floor is applied to the resulting quantities.
    """

    def __init__(self, inventory: InventoryItemRepository) -> None:
        self.inventory = inventory

    # PUBLIC_INTERFACE
    async def restock(self, line_items: Iterable[Any]) -> Dict[int, int]:
        """Add back each PART line's quantity; returns the per-item quantities restored."""
        restock = restock_quantities(line_items)
        for item_id, quantity in sorted(restock.items()):
            item = await self.inventory.adjust_quantity(item_id, quantity)
            if item is None:
                raise NotFoundError(f"Inventory item {item_id} not found")
            logger.debug("Restocked %d x %s; on hand now %d", quantity, item.sku, item.quantity_on_hand)
        await self.inventory.flush()
        return restock
