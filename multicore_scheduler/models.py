from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .config import DEFAULT_PRIORITY, POWER_PER_BURST_UNIT


@dataclass
class Process:
    id: int
    burst_time: int
    priority: int = DEFAULT_PRIORITY
    deadline: int = 0  # 0 means no deadline
    is_real_time: bool = False
    power_consumption: float = field(init=False)

    # Runtime state, recomputed by every policy run.
    waiting_time: int = field(default=0, init=False)
    turnaround_time: int = field(default=0, init=False)
    remaining_time: int = field(default=0, init=False)
    core_id: int = field(default=-1, init=False)

    def __post_init__(self) -> None:
        self.power_consumption = self.burst_time * POWER_PER_BURST_UNIT
        self.remaining_time = self.burst_time

    def reset(self) -> None:
        self.waiting_time = 0
        self.turnaround_time = 0
        self.remaining_time = self.burst_time
        self.core_id = -1

    @property
    def label(self) -> str:
        return f"P{self.id}"


@dataclass(frozen=True)
class ScheduledSlice:
    """
    One contiguous slice of execution for a process on a core.

    Slices carry only a duration; the start time is the running sum of the
    durations before it on the same core.
    """

    pid: int
    duration: int


@dataclass
class SystemMetrics:
    total_power_consumption: float = 0.0
    average_power_per_core: float = 0.0
    deadline_misses: int = 0
    total_processes: int = 0
    throughput: float = 0.0
    makespan: int = 0


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Optional[int]
    num_cores: int
    processes: List[Process] = field(default_factory=list)
    timelines: List[List[ScheduledSlice]] = field(default_factory=list)
    core_times: List[int] = field(default_factory=list)
    system: SystemMetrics = field(default_factory=SystemMetrics)
