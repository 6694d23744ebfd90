from __future__ import annotations

from typing import Dict, Iterator, List, Sequence, Tuple

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ScheduledSlice

COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]


def core_spans(timeline: Sequence[ScheduledSlice]) -> Iterator[Tuple[int, int, int]]:
    """
    Yield (pid, start, end) for each slice using the running sum of durations.
    """
    now = 0
    for sl in timeline:
        yield sl.pid, now, now + sl.duration
        now += sl.duration


def render_gantt(timelines: Sequence[Sequence[ScheduledSlice]]) -> str:
    """
    Plain-text Gantt chart, one block per core. Each time unit is two columns
    wide; a slice widens when its label does not fit.
    """
    if not any(timelines):
        return "(no execution)"

    lines: List[str] = ["Gantt Chart:"]
    for core, timeline in enumerate(timelines):
        lines.append(f"Core {core}:")
        if not timeline:
            lines.append("  (idle)")
            continue

        border = " "
        names = "|"
        time_marks = "0"
        for pid, start, end in core_spans(timeline):
            label = f"P{pid}"
            width = max((end - start) * 2, len(label))
            border += "-" * width + " "
            names += label.center(width) + "|"
            mark = str(end)
            time_marks += " " + mark.rjust(width)

        lines.extend([border, names, border, time_marks])

    return "\n".join(lines)


def build_rich_gantt(timelines: Sequence[Sequence[ScheduledSlice]]) -> Tuple[Panel, List[str]]:
    """
    Build a Rich Panel with one colored row per core, plus the time marks of each row.

    A process keeps the same color on every core it runs on.
    """
    if not any(timelines):
        panel = Panel("No execution", title="Gantt Chart")
        return panel, []

    pid_to_color: Dict[int, str] = {}

    def pid_color(pid: int) -> str:
        if pid not in pid_to_color:
            idx = len(pid_to_color) % len(COLORS)
            pid_to_color[pid] = COLORS[idx]
        return pid_to_color[pid]

    table = Table.grid(padding=(0, 1))
    all_marks: List[str] = []

    for core, timeline in enumerate(timelines):
        bar = Text()
        labels = Text()
        time_marks = "0"

        for pid, start, end in core_spans(timeline):
            width = max(1, end - start) * 2
            bar.append(" " * width, style=f"on {pid_color(pid)}")
            labels.append(f"P{pid}"[:width].ljust(width), style="bold")
            time_marks += " " + str(end).rjust(width - 1)

        table.add_row(Text(f"Core {core}", style="bold"), bar)
        table.add_row("", labels)
        all_marks.append(time_marks)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, all_marks
