"""
Multi-core scheduler package.

Simulates FCFS, SJF, Priority, EDF and Round Robin scheduling of a batch of
processes across several logical cores, with per-core timelines and
system-wide metrics.
"""

from .engine import SchedulingEngine, run_algorithm
from .models import Process, ScheduleResult, ScheduledSlice, SystemMetrics

__all__ = [
    "Process",
    "ScheduleResult",
    "ScheduledSlice",
    "SchedulingEngine",
    "SystemMetrics",
    "cli",
    "run_algorithm",
]
