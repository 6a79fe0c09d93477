from __future__ import annotations

from typing import List, Dict, Optional, Any, Sequence
import json
import csv


class EventLogger:
    def __init__(self) -> None:
        self.process_events: List[Dict[str, Any]] = []
        self.timeline: List[Dict[str, Any]] = []

    def log_process_event(self, time_s: int, pid: str, event: str) -> None:
        self.process_events.append({
            "time": time_s,
            "pid": pid,
            "event": event,
        })

    def log_timeline_slice(self, start: int, end: int, pid: Optional[str], policy: str, reason: Optional[str] = None) -> None:
        # Unit-step idle advance produces many 1-tick gaps; keep one slice per gap
        if pid is None and self.timeline:
            last = self.timeline[-1]
            if last["pid"] is None and last["reason"] == reason and last["end"] == start:
                last["end"] = end
                return
        self.timeline.append({
            "start": start,
            "end": end,
            "pid": pid,
            "policy": policy,
            "reason": reason,
        })

    def busy_slices(self) -> List[Dict[str, Any]]:
        return [s for s in self.timeline if s["pid"] is not None]

    def idle_slices(self) -> List[Dict[str, Any]]:
        return [s for s in self.timeline if s["pid"] is None]

    def execution_order(self) -> List[str]:
        """Pids in the order they were given the CPU, consecutive repeats collapsed."""
        order: List[str] = []
        for s in self.busy_slices():
            if not order or order[-1] != s["pid"]:
                order.append(s["pid"])
        return order

    def export_json(self, path: str) -> None:
        data = {
            "process_events": self.process_events,
            "timeline": self.timeline,
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def export_csv(self, base_path_no_ext: str) -> None:
        with open(f"{base_path_no_ext}_events.csv", "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=["time", "pid", "event"])
            writer.writeheader()
            for row in self.process_events:
                writer.writerow(row)
        with open(f"{base_path_no_ext}_timeline.csv", "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=["start", "end", "pid", "policy", "reason"])
            writer.writeheader()
            for row in self.timeline:
                writer.writerow(row)


def compute_waiting_times(processes: Sequence[Any]) -> Dict[str, int]:
    return {p.pid: p.waiting_time for p in processes if p.waiting_time is not None}


def compute_turnaround_times(processes: Sequence[Any]) -> Dict[str, int]:
    return {p.pid: p.turnaround_time for p in processes if p.turnaround_time is not None}


def compute_avg(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def compute_throughput(processes: Sequence[Any], total_time: float) -> float:
    if total_time <= 0:
        return 0.0
    completed = len([p for p in processes if p.completion_time is not None])
    return completed / total_time
