from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class WorkOrderStatus(str, Enum):
    """Lifecycle states: PENDING -> IN_PROGRESS -> COMPLETED, CANCELLED from PENDING/IN_PROGRESS."""
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class WorkOrderMode(str, Enum):
    """NEW for live jobs, HISTORICAL for back-filled records."""
    NEW = "NEW"
    HISTORICAL = "HISTORICAL"


class PartLineInput(BaseModel):
    """Consumed part. Resolved by inventory_item_id, else by exact name, else auto-created."""
    type: Literal["PART"] = "PART"
    inventory_item_id: Optional[int] = Field(None, gt=0, description="Existing inventory item id")
    name: str = Field(..., min_length=1, description="Part name used for lookup or creation")
    sku: Optional[str] = Field(None, min_length=1, description="SKU for an auto-created item")
    description: Optional[str] = Field(None)
    quantity: int = Field(1, gt=0)
    unit_price: Decimal = Field(..., ge=0, description="Price charged on this order")
    initial_stock: Optional[int] = Field(None, ge=0, description="Stock to seed an auto-created item with")


class ServiceLineInput(BaseModel):
    """Labor/service charge. Resolved by service_item_id, else by exact name, else auto-created."""
    type: Literal["SERVICE"] = "SERVICE"
    service_item_id: Optional[int] = Field(None, gt=0, description="Existing service item id")
    name: str = Field(..., min_length=1)
    description: Optional[str] = Field(None)
    quantity: int = Field(1, gt=0)
    unit_price: Decimal = Field(..., ge=0)


LineItemInput = Annotated[Union[PartLineInput, ServiceLineInput], Field(discriminator="type")]


class AssignmentInput(BaseModel):
    """Worker assignment by worker_id or worker_name (auto-created when unknown)."""
    worker_id: Optional[int] = Field(None, gt=0)
    worker_name: Optional[str] = Field(None)
    role: Optional[str] = Field(None)
    notes: Optional[str] = Field(None)
    services_count: Optional[int] = Field(
        None, ge=0, description="Workload credited; defaults to the order's total service quantity"
    )


class WorkOrderCreate(BaseModel):
    """Create work order payload."""
    vehicle_id: int = Field(..., gt=0)
    customer_id: Optional[int] = Field(None, gt=0)
    description: str = Field(..., min_length=1)
    status: WorkOrderStatus = Field(WorkOrderStatus.IN_PROGRESS)
    mode: WorkOrderMode = Field(WorkOrderMode.NEW)
    arrival_date: Optional[datetime] = Field(None, description="Defaults to now")
    quoted_at: Optional[datetime] = Field(None)
    scheduled_date: Optional[datetime] = Field(None)
    completed_date: Optional[datetime] = Field(None)
    created_at_override: Optional[datetime] = Field(None, description="Backdates created_at in HISTORICAL mode")
    labor_cost: Optional[Decimal] = Field(None, ge=0, description="Overrides the services subtotal")
    parts_cost: Optional[Decimal] = Field(None, ge=0, description="Overrides the parts subtotal")
    taxes: Optional[Decimal] = Field(None, ge=0)
    discount: Optional[Decimal] = Field(None, ge=0)
    parking_charge: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = Field(None)
    is_historical: Optional[bool] = Field(None)
    line_items: List[LineItemInput] = Field(default_factory=list)
    assignments: List[AssignmentInput] = Field(default_factory=list)


class WorkOrderUpdate(BaseModel):
    """
    Partial update payload.

    Only fields present in the request are applied. ``line_items`` and
    ``assignments``, when present, replace the whole existing set.
    """
    vehicle_id: Optional[int] = Field(None, gt=0)
    customer_id: Optional[int] = Field(None, gt=0, description="null detaches the customer")
    description: Optional[str] = Field(None, min_length=1)
    status: Optional[WorkOrderStatus] = Field(None)
    mode: Optional[WorkOrderMode] = Field(None)
    arrival_date: Optional[datetime] = Field(None)
    quoted_at: Optional[datetime] = Field(None)
    scheduled_date: Optional[datetime] = Field(None)
    completed_date: Optional[datetime] = Field(None)
    created_at_override: Optional[datetime] = Field(None)
    labor_cost: Optional[Decimal] = Field(None, ge=0)
    parts_cost: Optional[Decimal] = Field(None, ge=0)
    taxes: Optional[Decimal] = Field(None, ge=0)
    discount: Optional[Decimal] = Field(None, ge=0)
    parking_charge: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = Field(None)
    is_historical: Optional[bool] = Field(None)
    line_items: Optional[List[LineItemInput]] = Field(None)
    assignments: Optional[List[AssignmentInput]] = Field(None)


class WorkOrderListFilters(BaseModel):
    """Filters accepted by the work order list operation."""
    status: Optional[Union[WorkOrderStatus, Literal["ALL"]]] = Field(None)
    date_from: Optional[datetime] = Field(None, description="created_at lower bound (inclusive)")
    date_to: Optional[datetime] = Field(None, description="created_at upper bound (inclusive)")
    search: Optional[str] = Field(None, description="Substring over code, description, customer and vehicle")
    historical: Optional[bool] = Field(None)


class InventoryItemSummary(BaseModel):
    """Inventory item as embedded in a line item."""
    id: int
    sku: str
    name: str
    quantity_on_hand: int
    unit_price: float

    class Config:
        from_attributes = True


class ServiceItemSummary(BaseModel):
    """Service item as embedded in a line item."""
    id: int
    name: str
    description: Optional[str] = None
    default_price: float

    class Config:
        from_attributes = True


class WorkerSummary(BaseModel):
    """Worker as embedded in an assignment."""
    id: int
    name: str
    total_jobs: int
    total_services: int

    class Config:
        from_attributes = True


class CustomerSummary(BaseModel):
    id: int
    first_name: str
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    class Config:
        from_attributes = True


class VehicleSummary(BaseModel):
    id: int
    vin: str
    make: str
    model: str
    year: Optional[int] = None
    license_plate: Optional[str] = None

    class Config:
        from_attributes = True


class LineItemRead(BaseModel):
    """Work order line item read model."""
    id: int
    inventory_item_id: Optional[int] = None
    service_item_id: Optional[int] = None
    description: Optional[str] = None
    quantity: int
    unit_price: float
    line_total: float
    inventory_item: Optional[InventoryItemSummary] = None
    service_item: Optional[ServiceItemSummary] = None

    class Config:
        from_attributes = True


class AssignmentRead(BaseModel):
    """Work order assignment read model."""
    id: int
    worker_id: int
    role: Optional[str] = None
    notes: Optional[str] = None
    services_count: int
    worker: WorkerSummary

    class Config:
        from_attributes = True


class LogRead(BaseModel):
    id: int
    message: str
    author: Optional[str] = None
    category: str
    timestamp: datetime

    class Config:
        from_attributes = True


class WorkOrderRead(BaseModel):
    """Work order read model with line items and assignments."""
    id: int = Field(..., description="Work order id")
    code: str = Field(..., description="Sequential work order code")
    status: WorkOrderStatus
    is_historical: bool
    description: str
    notes: Optional[str] = None
    vehicle_id: int
    customer_id: Optional[int] = None
    arrival_date: datetime
    quoted_at: Optional[datetime] = None
    scheduled_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None
    labor_cost: float
    parts_cost: float
    taxes: float
    discount: float
    parking_charge: float
    total_cost: float
    vehicle: Optional[VehicleSummary] = None
    customer: Optional[CustomerSummary] = None
    line_items: List[LineItemRead] = Field(default_factory=list)
    assignments: List[AssignmentRead] = Field(default_factory=list)
    created_at: datetime = Field(..., description="Created at")
    updated_at: datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True


class WorkOrderDetail(WorkOrderRead):
    """Work order read model including the audit log, newest first."""
    logs: List[LogRead] = Field(default_factory=list)
