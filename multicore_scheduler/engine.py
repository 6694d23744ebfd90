"""
Multi-core scheduling engine.

The engine owns a batch of processes and a number of logical cores. Each
policy run starts from the immutable process facts (burst time, priority,
deadline), assigns every process to a core and fills in its waiting and
turnaround times, the per-core execution timelines and the system metrics.

FCFS, SJF, Priority and EDF share one greedy routine: processes are taken in
policy order and each goes to the core that becomes free first. This is
list scheduling, not an optimal packing, so the makespan can exceed the best
achievable one. Round Robin instead partitions processes statically across
cores and time-slices each core's queue.
"""

from __future__ import annotations

import copy
import dataclasses
import logging
import threading
from collections import deque
from typing import Callable, Deque, Dict, Iterable, List, Optional, Set

from .config import DEFAULT_CORES, DEFAULT_PRIORITY, EXAMPLE_BURST_TIMES, MIN_CORES
from .metrics import finalize_system_metrics, missed_deadline
from .models import Process, ScheduleResult, ScheduledSlice, SystemMetrics

logger = logging.getLogger(__name__)

SortKey = Callable[[Process], int]


def _check_core_count(num_cores: int) -> None:
    if num_cores < MIN_CORES:
        raise ValueError(f"Core count must be at least {MIN_CORES} (got {num_cores})")


def _check_process(process: Process) -> None:
    if process.burst_time < 1:
        raise ValueError(f"Process {process.id} needs a positive burst time (got {process.burst_time})")


def _check_quantum(quantum: Optional[int]) -> None:
    if quantum is None or quantum <= 0:
        raise ValueError("Round Robin requires a positive quantum (use --quantum)")


class SchedulingEngine:
    """
    Holds the process set and per-core state for one simulation.

    Structural changes and policy runs are serialized by a single lock, so
    only one run is in flight per engine at a time.
    """

    def __init__(self, num_cores: int = DEFAULT_CORES):
        _check_core_count(num_cores)
        self._lock = threading.Lock()
        self._num_cores = num_cores
        self._processes: List[Process] = []
        self._timelines: List[List[ScheduledSlice]] = [[] for _ in range(num_cores)]
        self._core_times: List[int] = [0] * num_cores
        self._metrics = SystemMetrics()

    def add(self, process: Process) -> Process:
        _check_process(process)

        with self._lock:
            if any(p.id == process.id for p in self._processes):
                raise ValueError(f"Duplicate process id {process.id}")
            self._processes.append(process)

        logger.debug(f"Added {process.label}: burst={process.burst_time}, "
                     f"priority={process.priority}, deadline={process.deadline}")
        return process

    def add_process(
        self,
        process_id: int,
        burst_time: int,
        priority: int = DEFAULT_PRIORITY,
        deadline: int = 0,
        is_real_time: bool = False,
    ) -> Process:
        return self.add(
            Process(
                id=process_id,
                burst_time=burst_time,
                priority=priority,
                deadline=deadline,
                is_real_time=is_real_time,
            )
        )

    def replace_processes(self, processes: Iterable[Process]) -> List[Process]:
        """
        Swap in a whole new batch. The batch is checked before anything is
        cleared, so a bad entry leaves the current processes in place.
        """
        batch = list(processes)
        seen: Set[int] = set()
        for process in batch:
            _check_process(process)
            if process.id in seen:
                raise ValueError(f"Duplicate process id {process.id}")
            seen.add(process.id)

        with self._lock:
            self._clear()
            self._processes = batch

        logger.debug(f"Loaded {len(batch)} processes")
        return list(batch)

    def clear_processes(self) -> None:
        with self._lock:
            self._clear()

    def reconfigure(self, num_cores: int) -> None:
        """
        Change the core count. Core identities do not survive a resize, so
        every process and timeline is dropped as well.
        """
        _check_core_count(num_cores)
        with self._lock:
            self._clear()
            self._num_cores = num_cores
            self._timelines = [[] for _ in range(num_cores)]
            self._core_times = [0] * num_cores
        logger.info(f"Reconfigured engine to {num_cores} core(s)")

    def is_empty(self) -> bool:
        return not self._processes

    def load_example_data(self) -> List[Process]:
        return self.replace_processes(
            Process(id=i, burst_time=burst) for i, burst in enumerate(EXAMPLE_BURST_TIMES, start=1)
        )

    @property
    def num_cores(self) -> int:
        return self._num_cores

    @property
    def processes(self) -> List[Process]:
        return list(self._processes)

    @property
    def timelines(self) -> List[List[ScheduledSlice]]:
        return [list(timeline) for timeline in self._timelines]

    @property
    def core_times(self) -> List[int]:
        return list(self._core_times)

    @property
    def metrics(self) -> SystemMetrics:
        return self._metrics

    def run_fcfs(self) -> Optional[ScheduleResult]:
        return self._run("FCFS", None, lambda: self._assign_greedy(None))

    def run_sjf(self) -> Optional[ScheduleResult]:
        return self._run(
            "SJF (non-preemptive)", None, lambda: self._assign_greedy(lambda p: p.burst_time)
        )

    def run_priority(self) -> Optional[ScheduleResult]:
        return self._run(
            "Priority (non-preemptive)", None, lambda: self._assign_greedy(lambda p: p.priority)
        )

    def run_edf(self) -> Optional[ScheduleResult]:
        return self._run(
            "EDF",
            None,
            lambda: self._assign_greedy(lambda p: p.deadline, check_deadlines=True),
        )

    def run_round_robin(self, quantum: int) -> Optional[ScheduleResult]:
        _check_quantum(quantum)
        return self._run("Round Robin", quantum, lambda: self._round_robin(quantum))

    def compare_all(self, quantum: int) -> List[ScheduleResult]:
        """
        Run every policy on the current process set, in registry order.
        """
        _check_quantum(quantum)
        if self.is_empty():
            logger.warning("No processes loaded; nothing to compare")
            return []

        results = []
        for name in ALGORITHMS:
            result = run_algorithm(self, name, quantum=quantum)
            if result is not None:
                results.append(result)
        return results

    # Callers of the helpers below hold the lock.
    def _clear(self) -> None:
        self._processes = []
        self._timelines = [[] for _ in range(self._num_cores)]
        self._core_times = [0] * self._num_cores
        self._metrics = SystemMetrics()

    def _reset(self) -> None:
        for process in self._processes:
            process.reset()
        self._timelines = [[] for _ in range(self._num_cores)]
        self._core_times = [0] * self._num_cores
        self._metrics = SystemMetrics()

    def _run(
        self,
        algorithm: str,
        quantum: Optional[int],
        execute: Callable[[], None],
    ) -> Optional[ScheduleResult]:
        with self._lock:
            if not self._processes:
                logger.warning(f"No processes loaded; nothing to schedule with {algorithm}")
                return None

            self._reset()
            execute()
            finalize_system_metrics(self._metrics, self._processes, self._core_times)

            logger.info(f"{algorithm} finished: {len(self._processes)} processes on "
                        f"{self._num_cores} core(s), makespan={self._metrics.makespan}")
            return self._snapshot(algorithm, quantum)

    def _snapshot(self, algorithm: str, quantum: Optional[int]) -> ScheduleResult:
        return ScheduleResult(
            algorithm=algorithm,
            quantum=quantum,
            num_cores=self._num_cores,
            processes=copy.deepcopy(self._processes),
            timelines=self.timelines,
            core_times=self.core_times,
            system=dataclasses.replace(self._metrics),
        )

    def _assign_greedy(self, key: Optional[SortKey], check_deadlines: bool = False) -> None:
        # sorted() is stable, so equal keys keep insertion order.
        ordered = self._processes if key is None else sorted(self._processes, key=key)

        for process in ordered:
            # min() returns the first minimum: ties go to the lowest core index.
            core = min(range(self._num_cores), key=self._core_times.__getitem__)

            process.waiting_time = self._core_times[core]
            process.turnaround_time = process.waiting_time + process.burst_time
            process.core_id = core

            self._timelines[core].append(ScheduledSlice(pid=process.id, duration=process.burst_time))
            self._core_times[core] += process.burst_time
            self._metrics.total_power_consumption += process.power_consumption

            if check_deadlines and missed_deadline(process):
                self._metrics.deadline_misses += 1
                logger.debug(f"{process.label} misses its deadline {process.deadline} "
                             f"(turnaround {process.turnaround_time})")

            logger.debug(f"Assigned {process.label} to core {core}, waiting={process.waiting_time}")

    def _round_robin(self, quantum: int) -> None:
        queues: List[Deque[Process]] = [deque() for _ in range(self._num_cores)]
        for index, process in enumerate(self._processes):
            queues[index % self._num_cores].append(process)

        active = True
        while active:
            active = False
            for core, queue in enumerate(queues):
                if not queue:
                    continue
                active = True

                process = queue.popleft()
                run_time = min(quantum, process.remaining_time)

                self._timelines[core].append(ScheduledSlice(pid=process.id, duration=run_time))
                process.remaining_time -= run_time
                self._core_times[core] += run_time

                if process.remaining_time > 0:
                    # Back of the same core's queue; no migration.
                    queue.append(process)
                    continue

                process.core_id = core
                process.turnaround_time = self._core_times[core]
                process.waiting_time = process.turnaround_time - process.burst_time
                self._metrics.total_power_consumption += process.power_consumption
                logger.debug(f"{process.label} completed on core {core} at {process.turnaround_time}")


ALGORITHMS: Dict[str, Callable[[SchedulingEngine, Optional[int]], Optional[ScheduleResult]]] = {
    "fcfs": lambda engine, quantum: engine.run_fcfs(),
    "sjf": lambda engine, quantum: engine.run_sjf(),
    "priority": lambda engine, quantum: engine.run_priority(),
    "edf": lambda engine, quantum: engine.run_edf(),
    "rr": lambda engine, quantum: engine.run_round_robin(quantum),
}


def run_algorithm(
    engine: SchedulingEngine, name: str, quantum: Optional[int] = None
) -> Optional[ScheduleResult]:
    """
    Dispatch to the requested policy. Quantum is only used by round robin.
    """
    name = name.lower()
    if name not in ALGORITHMS:
        raise ValueError(f"Unknown algorithm '{name}' (choose from {', '.join(ALGORITHMS)})")

    return ALGORITHMS[name](engine, quantum)
