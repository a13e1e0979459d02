from decimal import Decimal

import pytest

from src.core.errors import NotFoundError
from src.schemas.work_orders import PartLineInput, ServiceLineInput
from src.services.reconciler import LineItemReconciler


async def test_new_part_without_initial_stock_goes_negative(catalog):
    result = await LineItemReconciler(catalog).reconcile(
        [PartLineInput(name="Brake Pads", quantity=2, unit_price=Decimal("85"))]
    )

    (row,) = result.items
    item = row.inventory_item
    assert item.name == "Brake Pads"
    assert item.sku.startswith("SKU-BRAKEP-")
    assert item.quantity_on_hand == -2
    assert row.inventory_item_id == item.id
    assert row.description == "Brake Pads"
    assert row.line_total == Decimal("170.00")
    assert result.parts_total == Decimal("170.00")
    assert result.services_total == Decimal("0.00")


async def test_initial_stock_seeds_auto_created_part(catalog):
    result = await LineItemReconciler(catalog).reconcile(
        [PartLineInput(name="Oil Filter", sku="OF-1", quantity=3, unit_price=Decimal("12"), initial_stock=10)]
    )
    item = result.items[0].inventory_item
    assert item.sku == "OF-1"
    assert item.quantity_on_hand == 7


async def test_existing_part_consumes_stock_and_takes_request_price(catalog):
    existing = catalog.add_part("Spark Plug", quantity_on_hand=8, unit_price="4.00")

    result = await LineItemReconciler(catalog).reconcile(
        [PartLineInput(inventory_item_id=existing.id, name="Spark Plug", quantity=4, unit_price=Decimal("5.50"))]
    )

    assert existing.quantity_on_hand == 4
    assert existing.unit_price == Decimal("5.50")
    assert result.parts_total == Decimal("22.00")


async def test_service_lines_refresh_catalog_and_count_quantity(catalog):
    existing = catalog.add_service("Inspection", default_price="150", description="Basic")

    result = await LineItemReconciler(catalog).reconcile(
        [
            ServiceLineInput(name="Inspection", quantity=1, unit_price=Decimal("200"), description="Full inspection"),
            ServiceLineInput(name="Alignment", quantity=2, unit_price=Decimal("10.005")),
        ]
    )

    assert existing.default_price == Decimal("200.00")
    assert existing.description == "Full inspection"
    assert result.items[1].service_item.default_price == Decimal("10.01")
    assert result.items[1].line_total == Decimal("20.02")
    assert result.services_total == Decimal("220.02")
    assert result.service_quantity == 3


async def test_unknown_part_id_is_not_found(catalog):
    with pytest.raises(NotFoundError):
        await LineItemReconciler(catalog).reconcile(
            [PartLineInput(inventory_item_id=999, name="Ghost", quantity=1, unit_price=Decimal("1"))]
        )
