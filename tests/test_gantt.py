from rich.panel import Panel

from multicore_scheduler.engine import SchedulingEngine
from multicore_scheduler.gantt import build_rich_gantt, core_spans, render_gantt
from multicore_scheduler.models import ScheduledSlice


def _example_engine(cores):
    engine = SchedulingEngine(cores)
    engine.load_example_data()
    return engine


def test_core_spans():
    timeline = [ScheduledSlice(1, 2), ScheduledSlice(2, 3), ScheduledSlice(1, 1)]
    assert list(core_spans(timeline)) == [(1, 0, 2), (2, 2, 5), (1, 5, 6)]


def test_render_gantt_single_core():
    res = _example_engine(1).run_fcfs()
    lines = render_gantt(res.timelines).splitlines()
    assert lines[0] == "Gantt Chart:"
    assert lines[1] == "Core 0:"
    border, names, _, marks = lines[2:6]
    assert border == " " + " ".join("-" * (2 * b) for b in (10, 5, 8, 3)) + " "
    assert names.startswith("|") and names.endswith("|")
    assert names.split("|")[1].strip() == "P1"
    assert marks.split() == ["0", "10", "15", "23", "26"]


def test_render_gantt_idle_core():
    engine = SchedulingEngine(2)
    engine.add_process(1, 3)
    res = engine.run_round_robin(2)
    text = render_gantt(res.timelines)
    assert "Core 1:\n  (idle)" in text


def test_render_gantt_empty():
    assert render_gantt([[], []]) == "(no execution)"


def test_build_rich_gantt():
    res = _example_engine(2).run_fcfs()
    panel, marks = build_rich_gantt(res.timelines)
    assert isinstance(panel, Panel)
    assert marks[0].split() == ["0", "10", "13"]
    assert marks[1].split() == ["0", "5", "13"]


def test_build_rich_gantt_empty():
    panel, marks = build_rich_gantt([[]])
    assert isinstance(panel, Panel)
    assert marks == []


def test_render_gantt_widens_for_long_labels():
    text = render_gantt([[ScheduledSlice(10, 1), ScheduledSlice(2, 3)]])
    border, names, _, marks = text.splitlines()[2:6]
    assert len(border) == len(names) == len(marks)
    assert names == "|P10|  P2  |"
    assert marks.split() == ["0", "1", "4"]
