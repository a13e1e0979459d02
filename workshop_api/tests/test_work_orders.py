from datetime import datetime, timezone
from decimal import Decimal

import pytest

from src.core.errors import ConflictError, InvalidArgumentError, NotFoundError, StorageUnavailableError
from src.db.models import InventoryItem, ServiceItem, Worker, WorkOrder, WorkOrderLog
from src.schemas.work_orders import (
    AssignmentInput,
    PartLineInput,
    ServiceLineInput,
    WorkOrderCreate,
    WorkOrderListFilters,
    WorkOrderMode,
    WorkOrderStatus,
    WorkOrderUpdate,
)
from src.db.session import Database
from src.services.work_orders import WorkOrderService, format_code


def brake_job_lines():
    return [
        PartLineInput(name="Brake Pads", quantity=2, unit_price=Decimal("85")),
        ServiceLineInput(name="Inspection", quantity=1, unit_price=Decimal("200")),
    ]


def brake_job(vehicle, **overrides):
    data = dict(
        vehicle_id=vehicle.id,
        customer_id=vehicle.customer_id,
        description="Front brakes grinding",
        line_items=brake_job_lines(),
        assignments=[AssignmentInput(worker_name="Alex")],
    )
    data.update(overrides)
    return WorkOrderCreate(**data)


def test_format_code_is_zero_padded():
    assert format_code(42) == "WO-00042"


async def test_create_scenario(session, vehicle, fetch):
    created = await WorkOrderService(session).create(brake_job(vehicle))

    assert created.code == "WO-00001"
    assert created.status == WorkOrderStatus.IN_PROGRESS.value
    assert created.total_cost == Decimal("370.00")
    assert created.labor_cost == Decimal("200.00")
    assert created.parts_cost == Decimal("170.00")
    assert [log.message for log in created.logs] == ["Work order created"]
    assert len(created.line_items) == 2
    assert created.assignments[0].services_count == 1

    pads = await fetch(InventoryItem, name="Brake Pads")
    assert pads.quantity_on_hand == -2
    inspection = await fetch(ServiceItem, name="Inspection")
    assert inspection.default_price == Decimal("200.00")
    alex = await fetch(Worker, name="Alex")
    assert (alex.total_jobs, alex.total_services) == (1, 1)


async def test_total_includes_taxes_parking_and_discount(session, vehicle):
    created = await WorkOrderService(session).create(
        brake_job(vehicle, taxes=Decimal("29.60"), parking_charge=Decimal("10"), discount=Decimal("9.605"))
    )
    # 200 + 170 + 29.60 + 10 - 9.61
    assert created.discount == Decimal("9.61")
    assert created.total_cost == Decimal("399.99")


async def test_repeating_identical_line_update_is_idempotent(session, vehicle, fetch):
    service = WorkOrderService(session)
    created = await service.create(brake_job(vehicle))

    await service.update(created.id, WorkOrderUpdate(line_items=brake_job_lines()))
    after_first = (await fetch(InventoryItem, name="Brake Pads")).quantity_on_hand
    await service.update(created.id, WorkOrderUpdate(line_items=brake_job_lines()))
    after_second = (await fetch(InventoryItem, name="Brake Pads")).quantity_on_hand

    assert after_first == after_second == -2


async def test_update_replacing_lines_restocks_old_parts(session, vehicle, fetch):
    service = WorkOrderService(session)
    created = await service.create(brake_job(vehicle))

    updated = await service.update(
        created.id,
        WorkOrderUpdate(line_items=[PartLineInput(name="Rotor", quantity=1, unit_price=Decimal("120"), initial_stock=4)]),
    )

    assert (await fetch(InventoryItem, name="Brake Pads")).quantity_on_hand == 0
    assert (await fetch(InventoryItem, name="Rotor")).quantity_on_hand == 3
    assert updated.parts_cost == Decimal("120.00")
    assert updated.labor_cost == Decimal("0.00")
    assert updated.total_cost == Decimal("120.00")
    assert [line.description for line in updated.line_items] == ["Rotor"]


async def test_partial_update_keeps_lines_and_recomputes_total(session, vehicle, fetch):
    service = WorkOrderService(session)
    created = await service.create(brake_job(vehicle))

    updated = await service.update(
        created.id, WorkOrderUpdate(taxes=Decimal("30"), status=WorkOrderStatus.PENDING, notes="Waiting on parts")
    )

    assert updated.total_cost == Decimal("400.00")
    assert updated.status == "PENDING"
    assert updated.notes == "Waiting on parts"
    assert len(updated.line_items) == 2
    assert updated.logs[0].message == "Work order updated (PENDING)"
    assert (await fetch(InventoryItem, name="Brake Pads")).quantity_on_hand == -2


async def test_update_null_customer_detaches(session, vehicle):
    service = WorkOrderService(session)
    created = await service.create(brake_job(vehicle))
    assert created.customer_id == vehicle.customer_id

    updated = await service.update(created.id, WorkOrderUpdate(customer_id=None))

    assert updated.customer_id is None
    assert updated.customer is None


async def test_replacing_assignments_moves_workload(session, vehicle, fetch):
    service = WorkOrderService(session)
    created = await service.create(brake_job(vehicle))

    await service.update(
        created.id, WorkOrderUpdate(assignments=[AssignmentInput(worker_name="Sam", services_count=3)])
    )

    alex = await fetch(Worker, name="Alex")
    sam = await fetch(Worker, name="Sam")
    assert (alex.total_jobs, alex.total_services) == (0, 0)
    assert (sam.total_jobs, sam.total_services) == (1, 3)


async def test_identical_assignments_leave_counters_alone(session, vehicle, fetch):
    service = WorkOrderService(session)
    created = await service.create(brake_job(vehicle))

    await service.update(created.id, WorkOrderUpdate(assignments=[AssignmentInput(worker_name="Alex")]))

    alex = await fetch(Worker, name="Alex")
    assert (alex.total_jobs, alex.total_services) == (1, 1)


async def test_delete_restores_inventory_and_workers(session, vehicle, fetch, count_rows):
    service = WorkOrderService(session)
    stocked = InventoryItem(sku="PAD-1", name="Brake Pads", quantity_on_hand=10, unit_price=Decimal("80"), unit_cost=Decimal("60"))
    session.add(stocked)
    await session.commit()

    created = await service.create(brake_job(vehicle))
    assert (await fetch(InventoryItem, name="Brake Pads")).quantity_on_hand == 8

    await service.delete(created.id)

    assert (await fetch(InventoryItem, name="Brake Pads")).quantity_on_hand == 10
    alex = await fetch(Worker, name="Alex")
    assert (alex.total_jobs, alex.total_services) == (0, 0)
    assert await count_rows(WorkOrder) == 0
    assert await count_rows(WorkOrderLog) == 0
    with pytest.raises(NotFoundError):
        await service.get(created.id)


async def test_complete_twice_adds_no_second_log(session, vehicle):
    service = WorkOrderService(session)
    created = await service.create(brake_job(vehicle))

    completed = await service.complete(created.id)
    assert completed.status == "COMPLETED"
    assert completed.is_historical is True
    assert completed.completed_date is not None
    assert completed.logs[0].message == "Work order marked as completed"

    again = await service.complete(created.id)
    assert len(again.logs) == 2
    assert again.completed_date == completed.completed_date


async def test_historical_create_backdates_created_at(session, vehicle):
    service = WorkOrderService(session)
    created = await service.create(
        brake_job(
            vehicle,
            mode=WorkOrderMode.HISTORICAL,
            status=WorkOrderStatus.COMPLETED,
            created_at_override=datetime(2023, 3, 14, 9, 30, tzinfo=timezone.utc),
        )
    )

    assert created.is_historical is True
    assert created.created_at.year == 2023


async def test_list_filters(session, vehicle):
    service = WorkOrderService(session)
    live = await service.create(brake_job(vehicle, description="Oil change"))
    old = await service.create(
        brake_job(
            vehicle,
            description="Timing belt",
            mode=WorkOrderMode.HISTORICAL,
            status=WorkOrderStatus.COMPLETED,
            created_at_override=datetime(2023, 1, 10, tzinfo=timezone.utc),
        )
    )

    everything = await service.list(WorkOrderListFilters(status="ALL"))
    assert [wo.id for wo in everything] == [live.id, old.id]

    historical = await service.list(WorkOrderListFilters(historical=True))
    assert [wo.id for wo in historical] == [old.id]

    completed = await service.list(WorkOrderListFilters(status=WorkOrderStatus.COMPLETED))
    assert [wo.id for wo in completed] == [old.id]

    before_2024 = await service.list(WorkOrderListFilters(date_to=datetime(2024, 1, 1)))
    assert [wo.id for wo in before_2024] == [old.id]

    by_text = await service.list(WorkOrderListFilters(search="oil"))
    assert [wo.id for wo in by_text] == [live.id]

    by_vehicle = await service.list(WorkOrderListFilters(search="accord"))
    assert len(by_vehicle) == 2

    by_code = await service.list(WorkOrderListFilters(search=old.code))
    assert [wo.id for wo in by_code] == [old.id]


async def test_failed_create_rolls_back_everything(session, vehicle, count_rows):
    service = WorkOrderService(session)
    payload = brake_job(
        vehicle,
        line_items=[
            PartLineInput(name="Brake Pads", quantity=2, unit_price=Decimal("85")),
            PartLineInput(inventory_item_id=999, name="Ghost", quantity=1, unit_price=Decimal("1")),
        ],
    )

    with pytest.raises(NotFoundError):
        await service.create(payload)

    assert await count_rows(WorkOrder) == 0
    assert await count_rows(InventoryItem) == 0
    assert await count_rows(Worker) == 0


async def test_failed_update_leaves_order_untouched(session, vehicle, fetch):
    service = WorkOrderService(session)
    wo_id = (await service.create(brake_job(vehicle))).id

    # the rollback expires every instance held by the session
    with pytest.raises(InvalidArgumentError):
        await service.update(
            wo_id,
            WorkOrderUpdate(
                line_items=[PartLineInput(name="Rotor", quantity=1, unit_price=Decimal("120"))],
                assignments=[AssignmentInput(role="helper")],
            ),
        )

    assert (await fetch(InventoryItem, name="Brake Pads")).quantity_on_hand == -2
    assert await fetch(InventoryItem, name="Rotor") is None
    stored = await fetch(WorkOrder, id=wo_id)
    assert stored.total_cost == Decimal("370.00")


async def test_assignment_without_worker_is_rejected(session, vehicle, count_rows):
    with pytest.raises(InvalidArgumentError):
        await WorkOrderService(session).create(brake_job(vehicle, assignments=[AssignmentInput(worker_name=" ")]))
    assert await count_rows(WorkOrder) == 0


async def test_missing_references_are_not_found(session, vehicle):
    service = WorkOrderService(session)
    with pytest.raises(NotFoundError):
        await service.create(brake_job(vehicle, vehicle_id=999))
    with pytest.raises(NotFoundError):
        await service.create(brake_job(vehicle, customer_id=999))
    with pytest.raises(NotFoundError):
        await service.update(999, WorkOrderUpdate(notes="x"))
    with pytest.raises(NotFoundError):
        await service.complete(999)
    with pytest.raises(NotFoundError):
        await service.delete(999)


async def test_strict_catalog_rejects_unknown_names(session, vehicle, count_rows):
    service = WorkOrderService(session, auto_create=False)
    with pytest.raises(NotFoundError):
        await service.create(brake_job(vehicle))
    assert await count_rows(InventoryItem) == 0


async def test_code_reused_after_delete_is_a_conflict(session, vehicle):
    service = WorkOrderService(session)
    first = await service.create(brake_job(vehicle))
    second = await service.create(brake_job(vehicle))
    assert second.code == "WO-00002"

    await service.delete(first.id)

    with pytest.raises(ConflictError):
        await service.create(brake_job(vehicle))


@pytest.fixture
async def unreachable_session(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'workshop.db'}")
    async with db.session() as s:
        yield s
    await db.dispose()


async def test_unreachable_storage_is_reported_on_reads(unreachable_session):
    service = WorkOrderService(unreachable_session)
    with pytest.raises(StorageUnavailableError):
        await service.get(1)
    with pytest.raises(StorageUnavailableError):
        await service.list(WorkOrderListFilters(status="ALL"))


async def test_unreachable_storage_is_reported_on_writes(unreachable_session):
    service = WorkOrderService(unreachable_session)
    with pytest.raises(StorageUnavailableError):
        await service.create(WorkOrderCreate(vehicle_id=1, description="Oil change"))
    with pytest.raises(StorageUnavailableError):
        await service.complete(1)
