from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.db.models.customers import Customer, Vehicle
from src.db.models.work_orders import (
    WorkOrder,
    WorkOrderAssignment,
    WorkOrderLineItem,
    WorkOrderLog,
)
from src.schemas.work_orders import WorkOrderListFilters
from .base import BaseRepository


def _summary_options():
    return (
        selectinload(WorkOrder.customer),
        selectinload(WorkOrder.vehicle),
        selectinload(WorkOrder.line_items).selectinload(WorkOrderLineItem.inventory_item),
        selectinload(WorkOrder.line_items).selectinload(WorkOrderLineItem.service_item),
        selectinload(WorkOrder.assignments).selectinload(WorkOrderAssignment.worker),
    )


class WorkOrderRepository(BaseRepository):
    """Repository for work orders and their child rows."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def count_work_orders(self) -> int:
        res = await self.execute(select(func.count()).select_from(WorkOrder))
        return int(res.scalar_one())

    async def code_exists(self, code: str) -> bool:
        stmt = select(WorkOrder.id).where(WorkOrder.code == code).limit(1)
        return (await self.scalar_one_or_none(stmt)) is not None

    async def get_for_change(self, wo_id: int) -> Optional[WorkOrder]:
        """Load an order with its current line items and assignments, bypassing stale identity-map state."""
        stmt = (
            select(WorkOrder)
            .where(WorkOrder.id == wo_id)
            .options(selectinload(WorkOrder.line_items), selectinload(WorkOrder.assignments))
            .execution_options(populate_existing=True)
        )
        return await self.scalar_one_or_none(stmt)

    async def get_detail(self, wo_id: int) -> Optional[WorkOrder]:
        """Load an order with customer, vehicle, lines, assignments and logs."""
        stmt = (
            select(WorkOrder)
            .where(WorkOrder.id == wo_id)
            .options(*_summary_options(), selectinload(WorkOrder.logs))
            .execution_options(populate_existing=True)
        )
        return await self.scalar_one_or_none(stmt)

    async def list_work_orders(self, filters: WorkOrderListFilters) -> List[WorkOrder]:
        stmt = select(WorkOrder)
        if filters.status and filters.status != "ALL":
            stmt = stmt.where(WorkOrder.status == getattr(filters.status, "value", filters.status))
        if filters.historical is not None:
            stmt = stmt.where(WorkOrder.is_historical == filters.historical)
        if filters.date_from:
            stmt = stmt.where(WorkOrder.created_at >= filters.date_from)
        if filters.date_to:
            stmt = stmt.where(WorkOrder.created_at <= filters.date_to)
        if filters.search:
            like = f"%{filters.search}%"
            stmt = (
                stmt.outerjoin(Customer, WorkOrder.customer_id == Customer.id)
                .outerjoin(Vehicle, WorkOrder.vehicle_id == Vehicle.id)
                .where(
                    or_(
                        WorkOrder.code.ilike(like),
                        WorkOrder.description.ilike(like),
                        Customer.first_name.ilike(like),
                        Customer.last_name.ilike(like),
                        Vehicle.vin.ilike(like),
                        Vehicle.make.ilike(like),
                        Vehicle.model.ilike(like),
                        Vehicle.license_plate.ilike(like),
                    )
                )
            )
        stmt = (
            stmt.options(*_summary_options())
            .order_by(WorkOrder.created_at.desc(), WorkOrder.id.desc())
            .execution_options(populate_existing=True)
        )
        res = await self.scalars(stmt)
        return list(res)

    async def add_log(self, wo_id: int, message: str, *, author: str = "system", category: str = "SYSTEM") -> WorkOrderLog:
        log = WorkOrderLog(work_order_id=wo_id, message=message, author=author, category=category)
        await self.add(log)
        return log

    async def delete_line_items(self, wo_id: int) -> None:
        await self.execute(delete(WorkOrderLineItem).where(WorkOrderLineItem.work_order_id == wo_id))

    async def delete_assignments(self, wo_id: int) -> None:
        await self.execute(delete(WorkOrderAssignment).where(WorkOrderAssignment.work_order_id == wo_id))

    async def delete_logs(self, wo_id: int) -> None:
        await self.execute(delete(WorkOrderLog).where(WorkOrderLog.work_order_id == wo_id))

    async def delete_work_order(self, wo_id: int) -> None:
        await self.execute(delete(WorkOrder).where(WorkOrder.id == wo_id))
