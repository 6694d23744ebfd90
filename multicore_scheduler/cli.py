from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import DEFAULT_CORES, DEFAULT_PRIORITY, DEFAULT_QUANTUM, MAX_CORES, MIN_CORES
from .engine import ALGORITHMS, SchedulingEngine, run_algorithm
from .gantt import build_rich_gantt
from .metrics import missed_deadline, summarize_process_metrics
from .models import Process, ScheduleResult
from .workload_io import load_workload, populate

logger = logging.getLogger(__name__)

NOTHING_TO_SCHEDULE = "No processes loaded. Please input processes first."


def _core_count(value: str) -> int:
    try:
        cores = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid core count: {value!r}") from None
    if not MIN_CORES <= cores <= MAX_CORES:
        raise argparse.ArgumentTypeError(f"core count must be between {MIN_CORES} and {MAX_CORES}")
    return cores


def _add_engine_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--workload",
        "-w",
        default=None,
        help="Path to JSON or CSV workload file (default: built-in example data).",
    )
    parser.add_argument(
        "--cores",
        "-c",
        type=_core_count,
        default=DEFAULT_CORES,
        help=f"Number of logical cores, {MIN_CORES}-{MAX_CORES} (default: {DEFAULT_CORES}).",
    )
    parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum for round robin (default: {DEFAULT_QUANTUM}).",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multicore-scheduler",
        description="Multi-core CPU scheduling simulator (FCFS, SJF, Priority, EDF, RR).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every assignment and time slice.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run one scheduling policy on a workload.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        choices=list(ALGORITHMS),
        help="Policy to use.",
    )
    _add_engine_arguments(run_parser)

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run several policies on the same workload and compare their metrics.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        choices=list(ALGORITHMS),
        default=list(ALGORITHMS),
        help="Policies to compare (default: all).",
    )
    _add_engine_arguments(compare_parser)

    menu_parser = subparsers.add_parser(
        "menu",
        help="Interactive menu to enter processes and run policies.",
    )
    menu_parser.add_argument(
        "--cores",
        "-c",
        type=_core_count,
        default=DEFAULT_CORES,
        help=f"Initial number of cores (default: {DEFAULT_CORES}).",
    )
    menu_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Default quantum to prefill for round robin (default: {DEFAULT_QUANTUM}).",
    )

    return parser


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


def _build_engine(workload: Optional[str], cores: int) -> SchedulingEngine:
    engine = SchedulingEngine(cores)
    if workload is None:
        engine.load_example_data()
    else:
        processes = load_workload(Path(workload))
        populate(engine, processes)
        logger.info(f"Loaded {len(processes)} processes from {workload}")
    return engine


def _print_result(result: ScheduleResult, console: Console) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    console.print(f"[bold]Cores:[/bold] {result.num_cores}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    panel, time_marks = build_rich_gantt(result.timelines)
    console.print(panel)
    for core, marks in enumerate(time_marks):
        console.print(f"Core {core} times: {marks}")

    console.print()

    headers = ["Process", "Core", "Burst", "Priority", "Deadline", "RT", "Wait", "Turnaround"]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"Process", "Core", "RT"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.processes:
        if p.deadline == 0:
            deadline = "-"
        elif missed_deadline(p):
            deadline = f"[red]{p.deadline} (missed)[/red]"
        else:
            deadline = str(p.deadline)
        proc_table.add_row(
            p.label,
            str(p.core_id),
            str(p.burst_time),
            str(p.priority),
            deadline,
            "yes" if p.is_real_time else "",
            str(p.waiting_time),
            str(p.turnaround_time),
        )

    console.print(proc_table)
    console.print()

    summary = summarize_process_metrics(result.processes)
    sys = result.system
    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{summary['avg_waiting']:.2f}")
    sys_table.add_row("Avg turnaround", f"{summary['avg_turnaround']:.2f}")
    sys_table.add_row("Makespan", str(sys.makespan))
    sys_table.add_row("Throughput (proc/time)", f"{sys.throughput:.3f}")
    sys_table.add_row("Total power", f"{sys.total_power_consumption:.2f}")
    sys_table.add_row("Avg power per core", f"{sys.average_power_per_core:.2f}")
    sys_table.add_row("Deadline misses", str(sys.deadline_misses))

    console.print(sys_table)


def _print_comparison(results: List[ScheduleResult], console: Console, title: str) -> None:
    summary_table = Table(title=title, box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Makespan", justify="right")
    summary_table.add_column("Throughput", justify="right")
    summary_table.add_column("Deadline misses", justify="right")

    for result in results:
        summary = summarize_process_metrics(result.processes)
        summary_table.add_row(
            result.algorithm,
            "" if result.quantum is None else str(result.quantum),
            f"{summary['avg_waiting']:.2f}",
            f"{summary['avg_turnaround']:.2f}",
            str(result.system.makespan),
            f"{result.system.throughput:.3f}",
            str(result.system.deadline_misses),
        )

    console.print(summary_table)


def _ask_int(prompt: str, default: Optional[int] = None) -> int:
    suffix = f" [{default}]" if default is not None else ""
    raw = input(f"{prompt}{suffix}: ").strip()
    if not raw and default is not None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Expected a whole number, got {raw!r}") from None


def _input_processes(engine: SchedulingEngine, console: Console) -> None:
    count = _ask_int("Enter number of processes")
    if count < 1:
        raise ValueError("Number of processes must be positive")

    processes = []
    for i in range(1, count + 1):
        console.print(f"[bold]Process P{i}[/bold]")
        burst = _ask_int("  Burst time")
        priority = _ask_int("  Priority (lower runs first)", DEFAULT_PRIORITY)
        deadline = _ask_int("  Deadline (0 = none)", 0)
        real_time = input("  Real-time? [Enter=no, y=yes]: ").strip().lower() == "y"
        processes.append(
            Process(id=i, burst_time=burst, priority=priority, deadline=deadline, is_real_time=real_time)
        )

    engine.replace_processes(processes)


def _interactive_menu(cores: int, default_quantum: int) -> None:
    console = Console()
    engine = SchedulingEngine(cores)
    alg_choices = list(ALGORITHMS)

    console.print("[bold]Welcome to the multi-core CPU scheduling simulator![/bold]")

    while True:
        console.print("\n[bold cyan]Scheduler Menu[/bold cyan] [dim](q to quit)[/dim]")
        console.print(
            f"[bold]Cores:[/bold] [green]{engine.num_cores}[/green]  "
            f"[bold]Processes:[/bold] [green]{len(engine.processes)}[/green]"
        )
        console.print("  [yellow]1[/yellow]. Input custom processes")
        console.print("  [yellow]2[/yellow]. Load example data")
        console.print("  [yellow]3[/yellow]. Set core count")
        for idx, alg in enumerate(alg_choices, start=4):
            console.print(f"  [yellow]{idx}[/yellow]. Run [white]{alg}[/white]")
        compare_idx = 4 + len(alg_choices)
        console.print(f"  [yellow]{compare_idx}[/yellow]. Compare all algorithms")

        choice = input(f"Choice [1-{compare_idx} or q]: ").strip().lower()
        if choice in {"q", "quit", "exit"}:
            console.print("Thank you for using the scheduling simulator!")
            return

        try:
            selected = int(choice)
        except ValueError:
            console.print("[red]Invalid choice. Please try again.[/red]")
            continue

        try:
            if selected == 1:
                _input_processes(engine, console)
            elif selected == 2:
                engine.load_example_data()
                for p in engine.processes:
                    console.print(f"{p.label}: Burst Time = {p.burst_time}")
            elif selected == 3:
                new_cores = _ask_int(f"Cores ({MIN_CORES}-{MAX_CORES})", engine.num_cores)
                if not MIN_CORES <= new_cores <= MAX_CORES:
                    raise ValueError(f"Core count must be between {MIN_CORES} and {MAX_CORES}")
                engine.reconfigure(new_cores)
                console.print("[yellow]Processes cleared after changing the core count.[/yellow]")
            elif 4 <= selected < compare_idx:
                alg = alg_choices[selected - 4]
                quantum = _ask_int("Time quantum", default_quantum) if alg == "rr" else None
                result = run_algorithm(engine, alg, quantum=quantum)
                if result is None:
                    console.print(f"[red]{NOTHING_TO_SCHEDULE}[/red]")
                else:
                    _print_result(result, console)
            elif selected == compare_idx:
                if engine.is_empty():
                    console.print(f"[red]{NOTHING_TO_SCHEDULE}[/red]")
                    continue
                quantum = _ask_int("Time quantum for round robin", default_quantum)
                results = engine.compare_all(quantum)
                for result in results:
                    _print_result(result, console)
                    console.print()
                _print_comparison(results, console, "Algorithm comparison")
            else:
                console.print("[red]Invalid choice. Please try again.[/red]")
        except ValueError as exc:
            console.print(f"[red]Error: {exc}[/red]")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    console = Console()

    if args.command == "menu":
        _interactive_menu(args.cores, args.quantum)
        return 0

    try:
        engine = _build_engine(args.workload, args.cores)

        if args.command == "run":
            result = run_algorithm(engine, args.algorithm, quantum=args.quantum)
            if result is None:
                console.print(f"[red]{NOTHING_TO_SCHEDULE}[/red]")
                return 1
            _print_result(result, console)
            return 0

        if args.command == "compare":
            results = [run_algorithm(engine, alg, quantum=args.quantum) for alg in args.algorithms]
            results = [r for r in results if r is not None]
            if not results:
                console.print(f"[red]{NOTHING_TO_SCHEDULE}[/red]")
                return 1
            _print_comparison(results, console, f"Algorithm comparison ({args.cores} cores)")
            return 0
    except ValueError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
