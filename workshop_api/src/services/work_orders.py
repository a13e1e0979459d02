"""
Work order coordinator.

Each operation is written as a transactional function taking the session
(the transaction handle) as its first argument; it performs every read and
write of the operation and never commits. ``WorkOrderService`` runs those
functions inside ``transaction()`` so the order, its line items, assignments
and log, the inventory quantities and the worker counters commit together or
not at all.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import ConflictError, NotFoundError
from src.db.models.work_orders import WorkOrder
from src.db.session import reading, transaction
from src.repositories.catalog import InventoryItemRepository
from src.repositories.customers import CustomerRepository, VehicleRepository
from src.repositories.work_orders import WorkOrderRepository
from src.repositories.workers import WorkerRepository
from src.schemas.work_orders import (
    WorkOrderCreate,
    WorkOrderListFilters,
    WorkOrderMode,
    WorkOrderStatus,
    WorkOrderUpdate,
)
from src.services.base import BaseService
from src.services.catalog import CatalogResolver, SqlCatalogResolver
from src.services.deltas import workload_changes, reverse_workload
from src.services.financials import FINANCIAL_FIELDS, Financials, aggregate
from src.services.inventory_ledger import InventoryLedgerAdjuster
from src.services.reconciler import LineItemReconciler
from src.services.workload import WorkerStatisticsTracker, apply_workload

logger = logging.getLogger(__name__)

SYSTEM_AUTHOR = "system"
CODE_PREFIX = "WO-"


# PUBLIC_INTERFACE
def format_code(sequence: int) -> str:
    """Zero-padded work order code, e.g. ``WO-00042``."""
    return f"{CODE_PREFIX}{sequence:05d}"


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


async def _ensure_vehicle(tx: AsyncSession, vehicle_id: int) -> None:
    if await VehicleRepository(tx).get_vehicle(vehicle_id) is None:
        raise NotFoundError(f"Vehicle {vehicle_id} not found")


async def _ensure_customer(tx: AsyncSession, customer_id: int) -> None:
    if await CustomerRepository(tx).get_customer(customer_id) is None:
        raise NotFoundError(f"Customer {customer_id} not found")


def _overrides(payload) -> dict:
    return {name: getattr(payload, name) for name in FINANCIAL_FIELDS}


# PUBLIC_INTERFACE
async def create_work_order_tx(tx: AsyncSession, payload: WorkOrderCreate, catalog: CatalogResolver) -> int:
    """
    Create an order with its line items and assignments; returns the new id.

    Mints the next sequential code, reconciles lines (consuming stock), resolves
    workers, computes financials, appends the "created" log entry and applies
    worker deltas. HISTORICAL orders with ``created_at_override`` are backdated
    with a second write.
    """
    orders = WorkOrderRepository(tx)
    await _ensure_vehicle(tx, payload.vehicle_id)
    if payload.customer_id:
        await _ensure_customer(tx, payload.customer_id)

    code = format_code(await orders.count_work_orders() + 1)
    if await orders.code_exists(code):
        raise ConflictError(f"Work order code {code} already exists")

    reconciled = await LineItemReconciler(catalog).reconcile(payload.line_items)
    tracker = WorkerStatisticsTracker(catalog, WorkerRepository(tx))
    prepared = await tracker.prepare(payload.assignments, reconciled.service_quantity)
    financials = aggregate(
        labor_subtotal=reconciled.services_total,
        parts_subtotal=reconciled.parts_total,
        overrides=_overrides(payload),
    )
    historical = payload.mode == WorkOrderMode.HISTORICAL

    work_order = WorkOrder(
        code=code,
        vehicle_id=payload.vehicle_id,
        customer_id=payload.customer_id,
        description=payload.description,
        status=payload.status.value,
        arrival_date=payload.arrival_date or _now(),
        quoted_at=payload.quoted_at,
        scheduled_date=payload.scheduled_date,
        completed_date=payload.completed_date,
        is_historical=historical or bool(payload.is_historical),
        notes=payload.notes,
        **financials.as_columns(),
    )
    await orders.add(work_order)
    try:
        await orders.flush()
    except IntegrityError as exc:
        raise ConflictError(f"Work order code {code} already exists") from exc

    for row in reconciled.items:
        row.work_order_id = work_order.id
    for row in prepared.assignments:
        row.work_order_id = work_order.id
    await orders.add_all(reconciled.items + prepared.assignments)
    await orders.add_log(work_order.id, "Work order created", author=SYSTEM_AUTHOR)
    await orders.flush()

    if historical and payload.created_at_override:
        work_order.created_at = payload.created_at_override
        work_order.is_historical = True
        await orders.flush()

    await tracker.apply(prepared.deltas)
    return work_order.id


# PUBLIC_INTERFACE
async def update_work_order_tx(
    tx: AsyncSession, wo_id: int, payload: WorkOrderUpdate, catalog: CatalogResolver
) -> int:
    """
    Apply a partial update. Only fields present in ``payload`` change.

    A present ``line_items`` list restocks every existing PART line, then replaces
    the whole line set; a present ``assignments`` list reverses the old workload
    and replaces the whole assignment set, applying one net increment per worker.
    """
    orders = WorkOrderRepository(tx)
    work_order = await orders.get_for_change(wo_id)
    if work_order is None:
        raise NotFoundError(f"Work order {wo_id} not found")
    provided = payload.model_fields_set

    previous = Financials.from_work_order(work_order)
    labor_subtotal = previous.labor_cost
    parts_subtotal = previous.parts_cost
    service_quantity = sum(line.quantity for line in work_order.line_items if line.service_item_id)

    if payload.line_items is not None:
        await InventoryLedgerAdjuster(InventoryItemRepository(tx)).restock(work_order.line_items)
        await orders.delete_line_items(work_order.id)
        reconciled = await LineItemReconciler(catalog).reconcile(payload.line_items)
        for row in reconciled.items:
            row.work_order_id = work_order.id
        await orders.add_all(reconciled.items)
        labor_subtotal = reconciled.services_total
        parts_subtotal = reconciled.parts_total
        service_quantity = reconciled.service_quantity

    tracker = WorkerStatisticsTracker(catalog, WorkerRepository(tx))
    worker_deltas = {}
    if payload.assignments is not None:
        previous_assignments = list(work_order.assignments)
        prepared = await tracker.prepare(payload.assignments, service_quantity)
        worker_deltas = workload_changes(previous_assignments, prepared.assignments)
        await orders.delete_assignments(work_order.id)
        for row in prepared.assignments:
            row.work_order_id = work_order.id
        await orders.add_all(prepared.assignments)

    financials = aggregate(
        labor_subtotal=labor_subtotal,
        parts_subtotal=parts_subtotal,
        overrides=_overrides(payload),
        previous=previous,
    )
    for name, value in financials.as_columns().items():
        setattr(work_order, name, value)

    if payload.vehicle_id is not None:
        await _ensure_vehicle(tx, payload.vehicle_id)
        work_order.vehicle_id = payload.vehicle_id
    if "customer_id" in provided:
        if payload.customer_id is not None:
            await _ensure_customer(tx, payload.customer_id)
        work_order.customer_id = payload.customer_id
    if payload.description is not None:
        work_order.description = payload.description
    if payload.status is not None:
        work_order.status = payload.status.value
    for name in ("arrival_date", "quoted_at", "scheduled_date", "completed_date", "notes"):
        value = getattr(payload, name)
        if value is not None:
            setattr(work_order, name, value)
    if payload.mode is not None:
        work_order.is_historical = payload.mode == WorkOrderMode.HISTORICAL
    elif payload.is_historical is not None:
        work_order.is_historical = payload.is_historical
    if payload.created_at_override is not None:
        work_order.created_at = payload.created_at_override

    await orders.add_log(work_order.id, f"Work order updated ({work_order.status})", author=SYSTEM_AUTHOR)
    await orders.flush()
    await tracker.apply(worker_deltas)
    return work_order.id


# PUBLIC_INTERFACE
async def complete_work_order_tx(tx: AsyncSession, wo_id: int) -> int:
    """
    Mark an order COMPLETED and historical, stamping completed_date if unset.

    An order that is already COMPLETED and historical is left untouched and gets
    no log entry.
    """
    orders = WorkOrderRepository(tx)
    work_order = await orders.get_for_change(wo_id)
    if work_order is None:
        raise NotFoundError(f"Work order {wo_id} not found")

    if work_order.status == WorkOrderStatus.COMPLETED.value and work_order.is_historical:
        return work_order.id

    work_order.status = WorkOrderStatus.COMPLETED.value
    work_order.completed_date = work_order.completed_date or _now()
    work_order.is_historical = True
    await orders.add_log(work_order.id, "Work order marked as completed", author=SYSTEM_AUTHOR)
    await orders.flush()
    return work_order.id


# PUBLIC_INTERFACE
async def delete_work_order_tx(tx: AsyncSession, wo_id: int) -> None:
    """Restock consumed parts, reverse worker workload, then remove the order and its children."""
    orders = WorkOrderRepository(tx)
    work_order = await orders.get_for_change(wo_id)
    if work_order is None:
        raise NotFoundError(f"Work order {wo_id} not found")

    await InventoryLedgerAdjuster(InventoryItemRepository(tx)).restock(work_order.line_items)
    worker_deltas = reverse_workload(work_order.assignments)

    await orders.delete_logs(wo_id)
    await orders.delete_assignments(wo_id)
    await orders.delete_line_items(wo_id)
    await orders.delete_work_order(wo_id)

    await apply_workload(WorkerRepository(tx), worker_deltas)


class WorkOrderService(BaseService):
    """
    Domain service for work orders.

    Every mutating call is one unit of work: the first failure rolls back all
    of its writes, including restocking and worker counter changes.
    """

    def __init__(
        self,
        session: AsyncSession,
        catalog: Optional[CatalogResolver] = None,
        *,
        auto_create: bool = True,
    ) -> None:
        super().__init__(session)
        self.orders = WorkOrderRepository(session)
        self.catalog = catalog or SqlCatalogResolver(session, auto_create=auto_create)

    # PUBLIC_INTERFACE
    async def create(self, payload: WorkOrderCreate) -> WorkOrder:
        """Create a work order and return it with lines, assignments and logs loaded."""
        async with transaction(self.session):
            wo_id = await create_work_order_tx(self.session, payload, self.catalog)
            created = await self.orders.get_detail(wo_id)
        logger.info("Created work order %s (id=%s)", created.code, created.id)
        return created

    # PUBLIC_INTERFACE
    async def update(self, wo_id: int, payload: WorkOrderUpdate) -> WorkOrder:
        """Apply a partial update and return the refreshed work order."""
        async with transaction(self.session):
            await update_work_order_tx(self.session, wo_id, payload, self.catalog)
            updated = await self.orders.get_detail(wo_id)
        logger.info("Updated work order %s (status=%s)", updated.code, updated.status)
        return updated

    # PUBLIC_INTERFACE
    async def complete(self, wo_id: int) -> WorkOrder:
        """Mark a work order as completed."""
        async with transaction(self.session):
            await complete_work_order_tx(self.session, wo_id)
            completed = await self.orders.get_detail(wo_id)
        logger.info("Completed work order %s", completed.code)
        return completed

    # PUBLIC_INTERFACE
    async def delete(self, wo_id: int) -> None:
        """Delete a work order, reversing its inventory and workload effects."""
        async with transaction(self.session):
            await delete_work_order_tx(self.session, wo_id)
        logger.info("Deleted work order id=%s", wo_id)

    # PUBLIC_INTERFACE
    async def get(self, wo_id: int) -> WorkOrder:
        """Return a work order with its logs, newest first."""
        async with reading(self.session):
            work_order = await self.orders.get_detail(wo_id)
        if work_order is None:
            raise NotFoundError(f"Work order {wo_id} not found")
        return work_order

    # PUBLIC_INTERFACE
    async def list(self, filters: Optional[WorkOrderListFilters] = None) -> List[WorkOrder]:
        """List work orders, newest first, narrowed by the given filters."""
        async with reading(self.session):
            return await self.orders.list_work_orders(filters or WorkOrderListFilters())
