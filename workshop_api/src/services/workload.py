from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Protocol, Sequence

from src.core.errors import InvalidArgumentError
from src.db.models.work_orders import WorkOrderAssignment
from src.schemas.work_orders import AssignmentInput
from src.services.catalog import CatalogResolver
from src.services.deltas import WorkloadDelta, workload_deltas

logger = logging.getLogger(__name__)


class WorkerStatsWriter(Protocol):
    """Storage capability that applies a signed increment to a worker's counters."""

    async def increment_stats(self, worker_id: int, jobs: int, services: int) -> None:
        ...


@dataclass
class PreparedAssignments:
    """Assignment rows (not yet attached to an order) and the workload they add."""
    assignments: List[WorkOrderAssignment] = field(default_factory=list)
    deltas: Dict[int, WorkloadDelta] = field(default_factory=dict)


class WorkerStatisticsTracker:
    """Resolves assigned workers and keeps their total_jobs/total_services in step with live assignments."""

    def __init__(self, catalog: CatalogResolver, writer: WorkerStatsWriter) -> None:
        self.catalog = catalog
        self.writer = writer

    # PUBLIC_INTERFACE
    async def prepare(self, inputs: Sequence[AssignmentInput], default_services: int) -> PreparedAssignments:
        """
        Resolve each assignment's worker and build its row.

        Parameters:
            inputs: assignment requests, each naming a worker by id or by name
            default_services: workload credited when an assignment has no explicit
                services_count (the order's total service quantity)
        Raises:
            InvalidArgumentError: an assignment carries neither worker_id nor worker_name
            NotFoundError: worker_id does not exist
        """
        rows: List[WorkOrderAssignment] = []
        for request in inputs:
            if not request.worker_id and not (request.worker_name or "").strip():
                raise InvalidArgumentError("worker_id or worker_name is required to assign a worker")
            resolved = await self.catalog.resolve_worker(request.worker_id, request.worker_name)
            services_count = request.services_count if request.services_count is not None else default_services
            rows.append(
                WorkOrderAssignment(
                    worker_id=resolved.item.id,
                    worker=resolved.item,
                    role=request.role,
                    notes=request.notes,
                    services_count=services_count,
                )
            )
        return PreparedAssignments(assignments=rows, deltas=workload_deltas(rows))

    # PUBLIC_INTERFACE
    async def apply(self, deltas: Dict[int, WorkloadDelta]) -> None:
        """Write one increment per worker; zero deltas are skipped."""
        await apply_workload(self.writer, deltas)


# PUBLIC_INTERFACE
async def apply_workload(writer: WorkerStatsWriter, deltas: Dict[int, WorkloadDelta]) -> None:
    """Apply each non-zero per-worker delta as a single increment."""
    for worker_id, delta in sorted(deltas.items()):
        if delta.is_zero:
            continue
        await writer.increment_stats(worker_id, delta.jobs, delta.services)
        logger.debug("Worker %s workload %+d jobs, %+d services", worker_id, delta.jobs, delta.services)
