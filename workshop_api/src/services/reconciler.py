from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Sequence

from src.db.models.work_orders import WorkOrderLineItem
from src.schemas.work_orders import LineItemInput, PartLineInput, ServiceLineInput
from src.services.catalog import CatalogResolver
from src.services.financials import ZERO, to_money

logger = logging.getLogger(__name__)


@dataclass
class ReconciledLines:
    """Line rows (not yet attached to an order) and the subtotals derived from them."""
    items: List[WorkOrderLineItem] = field(default_factory=list)
    parts_total: Decimal = ZERO
    services_total: Decimal = ZERO
    service_quantity: int = 0


class LineItemReconciler:
    """
    Turns line requests into line rows bound to catalog entities.

    PART lines consume stock: the resolved item's quantity_on_hand drops by the
    requested quantity, starting from the stored quantity (or the seeded initial
    stock of an item created by this call). The unit price always comes from the
    request, never from the catalog.
    """

    def __init__(self, catalog: CatalogResolver) -> None:
        self.catalog = catalog

    # PUBLIC_INTERFACE
    async def reconcile(self, lines: Sequence[LineItemInput]) -> ReconciledLines:
        """Resolve every line in order and return the rows with parts/services subtotals."""
        result = ReconciledLines()
        for line in lines:
            if isinstance(line, PartLineInput):
                row = await self._reconcile_part(line)
                result.parts_total += row.line_total
            elif isinstance(line, ServiceLineInput):
                row = await self._reconcile_service(line)
                result.services_total += row.line_total
                result.service_quantity += line.quantity
            else:
                raise TypeError(f"Unsupported line item type: {type(line).__name__}")
            result.items.append(row)
        return result

    async def _reconcile_part(self, line: PartLineInput) -> WorkOrderLineItem:
        resolved = await self.catalog.resolve_part(line)
        item = resolved.item
        unit_price = to_money(line.unit_price)

        item.quantity_on_hand = (item.quantity_on_hand or 0) - line.quantity
        item.unit_price = unit_price
        if line.description:
            item.description = line.description
        logger.debug("Consumed %d x %s; on hand now %d", line.quantity, item.sku, item.quantity_on_hand)

        return WorkOrderLineItem(
            inventory_item_id=item.id,
            inventory_item=item,
            description=line.description or item.name,
            quantity=line.quantity,
            unit_price=unit_price,
            line_total=to_money(unit_price * line.quantity),
        )

    async def _reconcile_service(self, line: ServiceLineInput) -> WorkOrderLineItem:
        resolved = await self.catalog.resolve_service(line)
        item = resolved.item
        unit_price = to_money(line.unit_price)

        if not resolved.created:
            if line.description and line.description != item.description:
                item.description = line.description
            if to_money(item.default_price) != unit_price:
                item.default_price = unit_price

        return WorkOrderLineItem(
            service_item_id=item.id,
            service_item=item,
            description=line.description or item.name,
            quantity=line.quantity,
            unit_price=unit_price,
            line_total=to_money(unit_price * line.quantity),
        )
