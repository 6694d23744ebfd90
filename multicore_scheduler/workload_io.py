from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Iterable, List

from .config import DEFAULT_PRIORITY
from .models import Process

_TRUTHY = {"1", "true", "yes", "y"}


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path)
    if suffix == ".csv":
        return _load_csv(path)

    raise ValueError(f"Unsupported workload format: {suffix} (use .json or .csv)")


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        return [_process_from_mapping(row) for row in reader]


def _whole(value) -> int:
    # floats are accepted only when integral
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"Expected a whole number, got {value!r}")
    return int(value)


def _optional_int(mapping, key: str, default: int) -> int:
    value = mapping.get(key)
    return _whole(value) if value not in (None, "") else default


def _parse_flag(value) -> bool:
    if isinstance(value, bool):
        return value
    if value in (None, ""):
        return False
    return str(value).strip().lower() in _TRUTHY


def _process_from_mapping(mapping) -> Process:
    try:
        process_id = _whole(mapping["id"])
        burst_time = _whole(mapping["burst_time"])
        priority = _optional_int(mapping, "priority", DEFAULT_PRIORITY)
        deadline = _optional_int(mapping, "deadline", 0)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid process entry: {mapping!r}") from exc

    return Process(
        id=process_id,
        burst_time=burst_time,
        priority=priority,
        deadline=deadline,
        is_real_time=_parse_flag(mapping.get("is_real_time")),
    )


def populate(engine, processes: Iterable[Process]) -> None:
    """
    Replace the engine's process set with the given processes.

    Nothing changes if any process is rejected.
    """
    engine.replace_processes(processes)
