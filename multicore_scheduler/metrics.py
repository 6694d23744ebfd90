from __future__ import annotations

from typing import Iterable, List, Sequence

from .models import Process, SystemMetrics


def finalize_system_metrics(
    system: SystemMetrics,
    processes: Sequence[Process],
    core_times: Sequence[int],
) -> SystemMetrics:
    """
    Fill in the fields that depend on the whole run: process count, makespan,
    throughput and per-core power. Power totals and deadline misses are
    accumulated by the engine while it assigns processes.
    """
    makespan = max(core_times) if core_times else 0

    system.total_processes = len(processes)
    system.makespan = makespan
    system.throughput = system.total_processes / makespan if makespan > 0 else 0.0
    system.average_power_per_core = (
        system.total_power_consumption / len(core_times) if core_times else 0.0
    )
    return system


def missed_deadline(process: Process) -> bool:
    return process.deadline > 0 and process.turnaround_time > process.deadline


def count_deadline_misses(processes: Iterable[Process]) -> int:
    return sum(1 for p in processes if missed_deadline(p))


def summarize_process_metrics(processes: List[Process]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0}

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
    }
