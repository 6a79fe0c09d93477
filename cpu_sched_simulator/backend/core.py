"""
Core data structures for the CPU scheduling simulator.
Includes Process, PCB, ReadyQueue and the per-run SimulationState arena.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Iterable, List, Optional, Set

from .utils import EventLogger

class InvalidWorkloadError(ValueError):
    """Raised when a workload or its parameters cannot be simulated."""

class ProcessState(Enum):
    """Process states in the system."""
    NEW = "NEW"
    READY = "READY"
    RUNNING = "RUNNING"
    TERMINATED = "TERMINATED"

@dataclass(frozen=True)
class Process:
    """Simulation input. Never mutated by a scheduler."""
    pid: str
    arrival_time: int
    burst_time: int
    priority: int = 0

@dataclass
class ProcessStats:
    """Statistics tracked for each process."""
    start_time: Optional[int] = None
    response_time: Optional[int] = None
    completion_time: Optional[int] = None
    turnaround_time: Optional[int] = None
    waiting_time: Optional[int] = None

@dataclass
class PCB:
    """Process Control Block - run state of one process during one simulation."""
    index: int
    process: Process
    remaining_time: int = field(init=False)
    age: int = 0
    state: ProcessState = ProcessState.NEW
    queued: bool = False
    stats: ProcessStats = field(default_factory=ProcessStats)

    def __post_init__(self) -> None:
        self.remaining_time = self.process.burst_time

    @property
    def pid(self) -> str:
        return self.process.pid

    @property
    def arrival_time(self) -> int:
        return self.process.arrival_time

    @property
    def burst_time(self) -> int:
        return self.process.burst_time

    @property
    def priority(self) -> int:
        return self.process.priority

    @property
    def effective_priority(self) -> int:
        return self.process.priority + self.age

    @property
    def completion_time(self) -> Optional[int]:
        return self.stats.completion_time

    @property
    def turnaround_time(self) -> Optional[int]:
        return self.stats.turnaround_time

    @property
    def waiting_time(self) -> Optional[int]:
        return self.stats.waiting_time

    @property
    def finished(self) -> bool:
        return self.state is ProcessState.TERMINATED

    def has_arrived(self, clock: int) -> bool:
        return self.arrival_time <= clock

class ReadyQueue:
    """FIFO queue of PCBs (Round-Robin). Membership is tracked on `PCB.queued`."""

    def __init__(self) -> None:
        self._items: Deque[PCB] = deque()

    def push(self, pcb: PCB) -> bool:
        """Append a process unless it is already queued. Returns True if added."""
        if pcb.queued:
            return False
        self._items.append(pcb)
        pcb.queued = True
        return True

    def pop(self) -> Optional[PCB]:
        if not self._items:
            return None
        pcb = self._items.popleft()
        pcb.queued = False
        return pcb

    def peek(self) -> Optional[PCB]:
        return self._items[0] if self._items else None

    def is_empty(self) -> bool:
        return len(self._items) == 0

    def pids(self) -> List[str]:
        return [p.pid for p in self._items]

    def __contains__(self, pcb: PCB) -> bool:
        return pcb.queued

    def __len__(self) -> int:
        return len(self._items)

class SystemMetrics:
    """System-wide time accounting for one run."""

    def __init__(self) -> None:
        self.busy_time = 0
        self.idle_time = 0
        self.completed_processes = 0

    def record_busy(self, delta: int) -> None:
        self.busy_time += delta

    def record_idle(self, delta: int) -> None:
        self.idle_time += delta

    def get_cpu_utilization(self, elapsed: int) -> float:
        """CPU utilization percentage over the given elapsed time."""
        if elapsed <= 0:
            return 0.0
        return (self.busy_time / elapsed) * 100

class SimulationState:
    """Arena of PCBs indexed by position in arrival order, plus the clock.

    One instance is owned by exactly one simulation run. `pcbs` is stably
    sorted by arrival time, which is the scan order every selector uses for
    tie-breaks.
    """

    def __init__(self, processes: Iterable[Process], policy: str = "") -> None:
        ordered = sorted(enumerate(processes), key=lambda item: item[1].arrival_time)
        self.input_order: List[int] = [pos for pos, _ in ordered]
        self.pcbs: List[PCB] = [PCB(index=i, process=p) for i, (_, p) in enumerate(ordered)]
        self.policy = policy
        self.clock = 0
        self.metrics = SystemMetrics()
        self.logger = EventLogger()
        self.ready_queue = ReadyQueue()
        self._next_arrival_idx = 0
        self._announce_arrivals()

    def _announce_arrivals(self) -> None:
        while (self._next_arrival_idx < len(self.pcbs)
               and self.pcbs[self._next_arrival_idx].arrival_time <= self.clock):
            pcb = self.pcbs[self._next_arrival_idx]
            pcb.state = ProcessState.READY
            self.logger.log_process_event(pcb.arrival_time, pcb.pid, "arrive")
            self._next_arrival_idx += 1
            if pcb.burst_time == 0:
                # needs no CPU, so it is retired at its own arrival time
                self._start(pcb, pcb.arrival_time)
                self._complete(pcb, pcb.arrival_time)

    def _start(self, pcb: PCB, time: int) -> None:
        pcb.stats.start_time = time
        pcb.stats.response_time = time - pcb.arrival_time
        self.logger.log_process_event(time, pcb.pid, "start")

    def _complete(self, pcb: PCB, time: int) -> None:
        pcb.stats.completion_time = time
        pcb.state = ProcessState.TERMINATED
        self.metrics.completed_processes += 1
        self.logger.log_process_event(time, pcb.pid, "complete")

    def all_done(self) -> bool:
        return self.metrics.completed_processes == len(self.pcbs)

    def ready(self) -> List[PCB]:
        """Arrived, unfinished processes in scan order."""
        return [p for p in self.pcbs if p.has_arrived(self.clock) and not p.finished]

    def next_arrival(self) -> Optional[int]:
        """Earliest arrival among unfinished processes that have not arrived yet."""
        future = [p.arrival_time for p in self.pcbs if not p.finished and p.arrival_time > self.clock]
        return min(future) if future else None

    def idle_until(self, target: int) -> None:
        if target <= self.clock:
            return
        self.logger.log_timeline_slice(self.clock, target, None, self.policy, reason="idle")
        self.metrics.record_idle(target - self.clock)
        self.clock = target
        self._announce_arrivals()

    def run(self, pcb: PCB, run_for: int) -> None:
        """Execute `pcb` for `run_for` units starting at the current clock."""
        if pcb.stats.start_time is None:
            self._start(pcb, self.clock)
        pcb.state = ProcessState.RUNNING
        start = self.clock
        self.clock += run_for
        pcb.remaining_time -= run_for
        self.metrics.record_busy(run_for)
        self.logger.log_timeline_slice(start, self.clock, pcb.pid, self.policy)

        if pcb.remaining_time == 0:
            self._complete(pcb, self.clock)
        else:
            pcb.state = ProcessState.READY
            self.logger.log_process_event(self.clock, pcb.pid, "preempt")
        self._announce_arrivals()

    def in_input_order(self) -> List[PCB]:
        result: List[Optional[PCB]] = [None] * len(self.pcbs)
        for pcb, pos in zip(self.pcbs, self.input_order):
            result[pos] = pcb
        return result  # type: ignore[return-value]

def validate_workload(processes: List[Process]) -> None:
    """Reject inputs the schedulers cannot handle before any simulation starts."""
    seen: Set[str] = set()
    for p in processes:
        for name in ("arrival_time", "burst_time", "priority"):
            value = getattr(p, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidWorkloadError(f"{p.pid}: {name} must be an integer, got {value!r}")
        if p.arrival_time < 0:
            raise InvalidWorkloadError(f"{p.pid}: arrival_time must be >= 0, got {p.arrival_time}")
        if p.burst_time < 0:
            raise InvalidWorkloadError(f"{p.pid}: burst_time must be >= 0, got {p.burst_time}")
        if p.pid in seen:
            raise InvalidWorkloadError(f"duplicate pid {p.pid!r}")
        seen.add(p.pid)
