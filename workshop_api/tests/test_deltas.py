from types import SimpleNamespace

from src.services.deltas import (
    WorkloadDelta,
    merge_workload,
    restock_quantities,
    reverse_workload,
    workload_changes,
    workload_deltas,
)


def assignment(worker_id, services_count):
    return SimpleNamespace(worker_id=worker_id, services_count=services_count)


def line(inventory_item_id, quantity):
    return SimpleNamespace(inventory_item_id=inventory_item_id, quantity=quantity)


def test_workload_deltas_sum_per_worker():
    deltas = workload_deltas([assignment(1, 2), assignment(2, 0), assignment(1, 3)])
    assert deltas == {1: WorkloadDelta(2, 5), 2: WorkloadDelta(1, 0)}


def test_reverse_workload_negates():
    assert reverse_workload([assignment(7, 4)]) == {7: WorkloadDelta(-1, -4)}


def test_identical_assignment_sets_produce_no_changes():
    old = [assignment(1, 1), assignment(2, 2)]
    new = [assignment(2, 2), assignment(1, 1)]
    assert workload_changes(old, new) == {}


def test_workload_changes_nets_out_per_worker():
    old = [assignment(1, 1)]
    new = [assignment(1, 3), assignment(2, 0)]
    assert workload_changes(old, new) == {1: WorkloadDelta(0, 2), 2: WorkloadDelta(1, 0)}


def test_merge_workload_drops_zero_net():
    merged = merge_workload({1: WorkloadDelta(1, 1)}, {1: WorkloadDelta(-1, -1), 3: WorkloadDelta(0, -2)})
    assert merged == {3: WorkloadDelta(0, -2)}


def test_restock_ignores_service_lines_and_sums_repeated_parts():
    lines = [line(10, 2), line(None, 1), line(10, 3), line(11, 1)]
    assert restock_quantities(lines) == {10: 5, 11: 1}
