from pathlib import Path

import pytest

from multicore_scheduler.engine import SchedulingEngine
from multicore_scheduler.models import Process
from multicore_scheduler.workload_io import load_workload, populate


def test_load_json(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"id":1,"burst_time":3,"priority":1,"deadline":6,"is_real_time":true},'
                 '{"id":2,"burst_time":2}]')
    procs = load_workload(p)
    assert isinstance(procs[0], Process)
    assert procs[0].deadline == 6
    assert procs[0].is_real_time is True
    assert procs[1].priority == 128
    assert procs[1].deadline == 0
    assert procs[1].is_real_time is False


def test_load_csv(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("id,burst_time,priority,deadline,is_real_time\n1,3,1,,yes\n2,2,,4,0\n")
    procs = load_workload(p)
    assert procs[0].id == 1
    assert procs[0].is_real_time is True
    assert procs[0].deadline == 0
    assert procs[1].priority == 128
    assert procs[1].deadline == 4
    assert procs[1].is_real_time is False


def test_invalid_entry(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("id,burst_time\n1,abc\n")
    with pytest.raises(ValueError):
        load_workload(p)


def test_json_must_be_list(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('{"id": 1, "burst_time": 3}')
    with pytest.raises(ValueError):
        load_workload(p)


def test_unsupported_suffix(tmp_path: Path):
    with pytest.raises(ValueError):
        load_workload(tmp_path / "w.yaml")


def test_populate_replaces_processes():
    engine = SchedulingEngine(2)
    engine.add_process(9, 1)
    populate(engine, [Process(1, 4), Process(2, 6)])
    assert [p.id for p in engine.processes] == [1, 2]


def test_load_rejects_fractional_values(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"id":1,"burst_time":3.7}]')
    with pytest.raises(ValueError):
        load_workload(p)

    p.write_text('[{"id":1,"burst_time":3.0,"deadline":2.5}]')
    with pytest.raises(ValueError):
        load_workload(p)


def test_load_accepts_integral_floats(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"id":1,"burst_time":4.0}]')
    assert load_workload(p)[0].burst_time == 4


@pytest.mark.parametrize(
    "batch",
    [
        [Process(1, 4), Process(2, 0)],
        [Process(1, 4), Process(1, 6)],
    ],
)
def test_populate_failure_keeps_processes(batch):
    engine = SchedulingEngine(2)
    engine.add_process(9, 3)
    engine.run_fcfs()
    before = engine.timelines

    with pytest.raises(ValueError):
        populate(engine, batch)

    assert [p.id for p in engine.processes] == [9]
    assert engine.timelines == before


def test_bad_workload_file_keeps_processes(tmp_path: Path):
    engine = SchedulingEngine(1)
    engine.load_example_data()
    p = tmp_path / "w.csv"
    p.write_text("id,burst_time\n1,5\n2,-1\n")

    with pytest.raises(ValueError):
        populate(engine, load_workload(p))

    assert [p.burst_time for p in engine.processes] == [10, 5, 8, 3]
