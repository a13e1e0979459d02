from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import Text, Boolean, Integer, Numeric, DateTime, ForeignKey, false, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.db.base import Base, IntPkMixin, TimestampMixin
from src.db.models.catalog import InventoryItem, ServiceItem
from src.db.models.customers import Customer, Vehicle
from src.db.models.workforce import Worker

MONEY = Numeric(12, 2)


class WorkOrder(IntPkMixin, TimestampMixin, Base):
    """Billable job against one vehicle and optionally one customer."""
    __tablename__ = "work_orders"

    code: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="IN_PROGRESS", index=True)
    is_historical: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    description: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    vehicle_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("vehicles.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    customer_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True
    )
    arrival_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    quoted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    scheduled_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    labor_cost: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0.00"))
    parts_cost: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0.00"))
    taxes: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0.00"))
    discount: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0.00"))
    parking_charge: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0.00"))
    total_cost: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0.00"))

    vehicle: Mapped["Vehicle"] = relationship("Vehicle")
    customer: Mapped[Optional["Customer"]] = relationship("Customer")
    line_items: Mapped[List["WorkOrderLineItem"]] = relationship(
        "WorkOrderLineItem", order_by="WorkOrderLineItem.id", passive_deletes=True
    )
    assignments: Mapped[List["WorkOrderAssignment"]] = relationship(
        "WorkOrderAssignment", order_by="WorkOrderAssignment.id", passive_deletes=True
    )
    logs: Mapped[List["WorkOrderLog"]] = relationship(
        "WorkOrderLog", order_by="desc(WorkOrderLog.id)", passive_deletes=True
    )


class WorkOrderLineItem(IntPkMixin, TimestampMixin, Base):
    """Billable line: exactly one of inventory_item_id (PART) or service_item_id (SERVICE) is set."""
    __tablename__ = "work_order_line_items"

    work_order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("work_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    inventory_item_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("inventory_items.id", ondelete="SET NULL"), nullable=True
    )
    service_item_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("service_items.id", ondelete="SET NULL"), nullable=True
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    unit_price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    line_total: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    inventory_item: Mapped[Optional["InventoryItem"]] = relationship("InventoryItem")
    service_item: Mapped[Optional["ServiceItem"]] = relationship("ServiceItem")


class WorkOrderAssignment(IntPkMixin, TimestampMixin, Base):
    """Worker assigned to a work order with the workload it contributed."""
    __tablename__ = "work_order_assignments"

    work_order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("work_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    worker_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("workers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    services_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    worker: Mapped["Worker"] = relationship("Worker")


class WorkOrderLog(IntPkMixin, Base):
    """Append-only audit entry owned by a work order."""
    __tablename__ = "work_order_logs"

    work_order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("work_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(Text, nullable=False, default="SYSTEM")
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
