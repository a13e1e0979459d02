from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status as http_status

from src.core.deps import get_work_order_service
from src.schemas.work_orders import (
    WorkOrderCreate,
    WorkOrderDetail,
    WorkOrderListFilters,
    WorkOrderRead,
    WorkOrderUpdate,
)
from src.services.work_orders import WorkOrderService

router = APIRouter(prefix="/work-orders", tags=["Work Orders"])

STATUS_FILTER_PATTERN = "^(ALL|PENDING|IN_PROGRESS|COMPLETED|CANCELLED)$"


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[WorkOrderRead],
    summary="List work orders",
    description="List work orders ordered by created_at desc, with customer, vehicle, lines and assignments.",
)
async def list_work_orders(
    service: WorkOrderService = Depends(get_work_order_service),
    status: Optional[str] = Query(None, pattern=STATUS_FILTER_PATTERN, description="Filter by status; ALL disables the filter"),
    date_from: Optional[datetime] = Query(None, alias="from", description="created_at lower bound (inclusive)"),
    date_to: Optional[datetime] = Query(None, alias="to", description="created_at upper bound (inclusive)"),
    search: Optional[str] = Query(None, description="Substring over code, description, customer and vehicle"),
    historical: Optional[bool] = Query(None, description="Only historical (true) or live (false) orders"),
) -> List[WorkOrderRead]:
    filters = WorkOrderListFilters(
        status=status, date_from=date_from, date_to=date_to, search=search, historical=historical
    )
    items = await service.list(filters)
    return [WorkOrderRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@router.get(
    "/{wo_id}",
    response_model=WorkOrderDetail,
    summary="Get work order",
    description="Get a work order by id, including its log entries newest first.",
)
async def get_work_order(
    wo_id: int = Path(..., gt=0),
    service: WorkOrderService = Depends(get_work_order_service),
) -> WorkOrderDetail:
    wo = await service.get(wo_id)
    return WorkOrderDetail.model_validate(wo)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=WorkOrderDetail,
    status_code=http_status.HTTP_201_CREATED,
    summary="Create work order",
    description="Create a work order; consumes stock for part lines and credits assigned workers.",
)
async def create_work_order(
    payload: WorkOrderCreate,
    service: WorkOrderService = Depends(get_work_order_service),
) -> WorkOrderDetail:
    created = await service.create(payload)
    return WorkOrderDetail.model_validate(created)


# PUBLIC_INTERFACE
@router.put(
    "/{wo_id}",
    response_model=WorkOrderDetail,
    summary="Update work order",
    description=(
        "Partially update a work order. Supplying line_items replaces all lines (old parts are restocked); "
        "supplying assignments replaces all assignments and adjusts worker counters by the difference."
    ),
)
async def update_work_order(
    payload: WorkOrderUpdate,
    wo_id: int = Path(..., gt=0),
    service: WorkOrderService = Depends(get_work_order_service),
) -> WorkOrderDetail:
    updated = await service.update(wo_id, payload)
    return WorkOrderDetail.model_validate(updated)


# PUBLIC_INTERFACE
@router.post(
    "/{wo_id}/complete",
    response_model=WorkOrderDetail,
    summary="Complete work order",
    description="Mark a work order COMPLETED and stamp its completion date.",
)
async def complete_work_order(
    wo_id: int = Path(..., gt=0),
    service: WorkOrderService = Depends(get_work_order_service),
) -> WorkOrderDetail:
    completed = await service.complete(wo_id)
    return WorkOrderDetail.model_validate(completed)


# PUBLIC_INTERFACE
@router.delete(
    "/{wo_id}",
    status_code=http_status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete work order",
    description="Delete a work order, restocking its parts and reversing worker counters.",
)
async def delete_work_order(
    wo_id: int = Path(..., gt=0),
    service: WorkOrderService = Depends(get_work_order_service),
) -> Response:
    await service.delete(wo_id)
    return Response(status_code=http_status.HTTP_204_NO_CONTENT)
