"""
Workload loading and generation.

CSV files are read with pandas; JSON files may hold either a list of process
objects or {"processes": [...]}. Columns: pid, arrival_time, burst_time and an
optional priority.
"""

from __future__ import annotations

import json
import os
import random
from typing import Any, Dict, List

import pandas as pd

from .core import InvalidWorkloadError, Process


REQUIRED_COLUMNS = ["pid", "arrival_time", "burst_time"]


def _to_int(value: Any, pid: str, name: str) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidWorkloadError(f"{pid}: {name} is not a number: {value!r}") from None
    if number != number or not number.is_integer():
        raise InvalidWorkloadError(f"{pid}: {name} must be a whole number, got {value!r}")
    return int(number)


def process_from_dict(row: Dict[str, Any]) -> Process:
    if not isinstance(row, dict):
        raise InvalidWorkloadError(f"process entry must be an object, got {row!r}")
    missing = [c for c in REQUIRED_COLUMNS if c not in row]
    if missing:
        raise InvalidWorkloadError(f"process entry missing fields: {missing}")
    pid = str(row["pid"])
    priority = row.get("priority", 0)
    if priority is None or (isinstance(priority, float) and priority != priority):
        priority = 0
    return Process(
        pid=pid,
        arrival_time=_to_int(row["arrival_time"], pid, "arrival_time"),
        burst_time=_to_int(row["burst_time"], pid, "burst_time"),
        priority=_to_int(priority, pid, "priority"),
    )


def load_workload_csv(path: str) -> List[Process]:
    try:
        df = pd.read_csv(path)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise InvalidWorkloadError(f"Cannot parse CSV workload {path}: {e}") from e
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise InvalidWorkloadError(f"Workload missing columns: {missing}")
    return [process_from_dict(row) for row in df.to_dict(orient="records")]


def load_workload_json(path: str) -> List[Process]:
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidWorkloadError(f"Cannot parse JSON workload {path}: {e}") from e
    if isinstance(data, dict):
        data = data.get("processes", [])
    if not isinstance(data, list):
        raise InvalidWorkloadError("JSON workload must be a list of processes")
    return [process_from_dict(row) for row in data]


def load_workload(path: str) -> List[Process]:
    ext = os.path.splitext(path)[1].lower()
    if ext == ".json":
        return load_workload_json(path)
    if ext == ".csv":
        return load_workload_csv(path)
    raise InvalidWorkloadError(f"Unsupported workload format: {ext or path}")


def generate_workload(n: int, seed: int = 42, max_burst: int = 10, max_priority: int = 5) -> List[Process]:
    """Synthetic integer workload with exponential-ish inter-arrival gaps."""
    rng = random.Random(seed)
    procs: List[Process] = []
    time = 0
    for i in range(n):
        burst = max(1, min(max_burst, round(rng.expovariate(1 / 4))))
        priority = rng.randint(0, max_priority)
        procs.append(Process(pid=f"P{i+1}", arrival_time=time, burst_time=burst, priority=priority))
        time += round(rng.expovariate(1 / 2))
    return procs
