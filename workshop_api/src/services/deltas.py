"""
Pure delta arithmetic for worker workload and inventory restocking.

Nothing here touches the database: inputs are any objects exposing the
relevant attributes (ORM rows in production, simple namespaces in tests).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable


@dataclass(frozen=True)
class WorkloadDelta:
    """Signed change to a worker's (total_jobs, total_services)."""
    jobs: int = 0
    services: int = 0

    def __add__(self, other: "WorkloadDelta") -> "WorkloadDelta":
        return WorkloadDelta(self.jobs + other.jobs, self.services + other.services)

    def __neg__(self) -> "WorkloadDelta":
        return WorkloadDelta(-self.jobs, -self.services)

    @property
    def is_zero(self) -> bool:
        return self.jobs == 0 and self.services == 0


# PUBLIC_INTERFACE
def workload_deltas(assignments: Iterable[Any]) -> Dict[int, WorkloadDelta]:
    """One job plus ``services_count`` services per assignment, summed per worker_id."""
    totals: Dict[int, WorkloadDelta] = {}
    for assignment in assignments:
        delta = WorkloadDelta(1, int(assignment.services_count or 0))
        totals[assignment.worker_id] = totals.get(assignment.worker_id, WorkloadDelta()) + delta
    return totals


# PUBLIC_INTERFACE
def reverse_workload(assignments: Iterable[Any]) -> Dict[int, WorkloadDelta]:
    """Negation of workload_deltas: what removing these assignments takes away."""
    return {worker_id: -delta for worker_id, delta in workload_deltas(assignments).items()}


# PUBLIC_INTERFACE
def merge_workload(*delta_maps: Dict[int, WorkloadDelta]) -> Dict[int, WorkloadDelta]:
    """Merge delta maps into one net delta per worker, dropping workers whose net change is zero."""
    merged: Dict[int, WorkloadDelta] = {}
    for deltas in delta_maps:
        for worker_id, delta in deltas.items():
            merged[worker_id] = merged.get(worker_id, WorkloadDelta()) + delta
    return {worker_id: delta for worker_id, delta in merged.items() if not delta.is_zero}


# PUBLIC_INTERFACE
def workload_changes(old_assignments: Iterable[Any], new_assignments: Iterable[Any]) -> Dict[int, WorkloadDelta]:
    """Net per-worker delta of replacing ``old_assignments`` with ``new_assignments``."""
    return merge_workload(reverse_workload(old_assignments), workload_deltas(new_assignments))


# PUBLIC_INTERFACE
def restock_quantities(line_items: Iterable[Any]) -> Dict[int, int]:
    """
    Quantity to add back per inventory item for previously consumed PART lines.

    SERVICE lines (no inventory_item_id) are ignored.
    """
    restock: Dict[int, int] = {}
    for line in line_items:
        if line.inventory_item_id is None:
            continue
        restock[line.inventory_item_id] = restock.get(line.inventory_item_id, 0) + int(line.quantity)
    return restock
