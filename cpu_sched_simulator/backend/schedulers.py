"""
Scheduler implementations: FCFS, SJF, Priority with aging, Round Robin and SRTF.

Every scheduler exposes the same capability to the driver loop in
`simulator.simulate`: admit arrivals, report idleness, advance the clock over an
idle gap, select the next process, run one step and do post-step bookkeeping.
"""

from abc import ABC, abstractmethod
from typing import Optional, List

from .core import PCB, SimulationState, InvalidWorkloadError


class IdleAdvance:
    STEP = "step"  # advance the clock one tick at a time
    JUMP = "jump"  # move straight to the next arrival


class BaseScheduler(ABC):
    """Abstract base class for all schedulers."""

    name = ""
    default_idle_advance = IdleAdvance.JUMP

    def __init__(self, idle_advance: Optional[str] = None):
        idle_advance = idle_advance or self.default_idle_advance
        if idle_advance not in (IdleAdvance.STEP, IdleAdvance.JUMP):
            raise InvalidWorkloadError(f"Unknown idle advance mode: {idle_advance!r}")
        self.idle_advance = idle_advance

    def admit(self, state: SimulationState) -> None:
        """Move newly arrived processes into the ready set. No-op for scan-based policies."""

    def is_idle(self, state: SimulationState) -> bool:
        return not state.ready()

    def advance_idle(self, state: SimulationState) -> None:
        """Advance the clock across an idle gap."""
        if self.idle_advance == IdleAdvance.STEP:
            state.idle_until(state.clock + 1)
            return
        target = state.next_arrival()
        if target is None:
            # Unreachable while unfinished processes remain
            raise RuntimeError("idle with no pending arrivals")
        state.idle_until(target)

    @abstractmethod
    def select_next(self, state: SimulationState) -> Optional[PCB]:
        """Select the next process to run at the current clock, or None."""

    def slice_for(self, pcb: PCB) -> int:
        """Time the selected process runs in one step."""
        return pcb.remaining_time

    def step(self, state: SimulationState, pcb: PCB) -> int:
        """Run `pcb` for one step and return the time consumed."""
        run_for = self.slice_for(pcb)
        state.run(pcb, run_for)
        return run_for

    def after_step(self, state: SimulationState, pcb: PCB) -> None:
        """Bookkeeping after a step (aging, re-queueing)."""


def _first_min(candidates: List[PCB], key) -> Optional[PCB]:
    """Strict-less scan: the first candidate attaining the minimum wins."""
    best: Optional[PCB] = None
    for pcb in candidates:
        if best is None or key(pcb) < key(best):
            best = pcb
    return best


class FCFSScheduler(BaseScheduler):
    """First Come First Serve scheduler implementation."""

    name = "FCFS"

    def select_next(self, state: SimulationState) -> Optional[PCB]:
        ready = state.ready()
        return ready[0] if ready else None


class SJFScheduler(BaseScheduler):
    """Shortest Job First (non-preemptive) scheduler implementation."""

    name = "SJF"
    default_idle_advance = IdleAdvance.STEP

    def select_next(self, state: SimulationState) -> Optional[PCB]:
        return _first_min(state.ready(), key=lambda p: p.burst_time)


class PriorityScheduler(BaseScheduler):
    """Non-preemptive priority scheduler with aging.

    Larger `priority + age` wins. After every completed selection each process
    that has arrived and is still unfinished gains `age_increment`.
    """

    name = "PRIORITY"
    default_idle_advance = IdleAdvance.STEP

    def __init__(self, age_increment: int = 1, idle_advance: Optional[str] = None):
        super().__init__(idle_advance)
        if isinstance(age_increment, bool) or not isinstance(age_increment, int) or age_increment < 0:
            raise InvalidWorkloadError(f"age_increment must be a non-negative integer, got {age_increment!r}")
        self.age_increment = age_increment

    def select_next(self, state: SimulationState) -> Optional[PCB]:
        best: Optional[PCB] = None
        for pcb in state.ready():
            if best is None or pcb.effective_priority > best.effective_priority:
                best = pcb
        return best

    def after_step(self, state: SimulationState, pcb: PCB) -> None:
        pcb.age = 0
        for other in state.ready():
            other.age += self.age_increment


class _QuantumScheduler(BaseScheduler):
    """Preemptive policies: each step runs at most `time_quantum` units."""

    def __init__(self, time_quantum: int = 2, idle_advance: Optional[str] = None):
        super().__init__(idle_advance)
        if isinstance(time_quantum, bool) or not isinstance(time_quantum, int) or time_quantum <= 0:
            raise InvalidWorkloadError(f"time_quantum must be a positive integer, got {time_quantum!r}")
        self.time_quantum = time_quantum

    def slice_for(self, pcb: PCB) -> int:
        return min(pcb.remaining_time, self.time_quantum)


class RoundRobinScheduler(_QuantumScheduler):
    """Round Robin scheduler implementation.

    Processes wait in a FIFO ready queue. Arrivals during a slice are queued
    before the preempted process goes to the back.
    """

    name = "RR"

    def admit(self, state: SimulationState) -> None:
        for pcb in state.ready():
            state.ready_queue.push(pcb)

    def is_idle(self, state: SimulationState) -> bool:
        return state.ready_queue.is_empty()

    def select_next(self, state: SimulationState) -> Optional[PCB]:
        return state.ready_queue.pop()

    def after_step(self, state: SimulationState, pcb: PCB) -> None:
        if pcb.finished:
            return
        # the incumbent is not queued yet, so arrivals go ahead of it
        for other in state.ready():
            if other is not pcb:
                state.ready_queue.push(other)
        state.ready_queue.push(pcb)


class SRTFScheduler(_QuantumScheduler):
    """Shortest Remaining Time First (preemptive SJF) scheduler."""

    name = "SRTF"

    def select_next(self, state: SimulationState) -> Optional[PCB]:
        candidates = [p for p in state.ready() if p.remaining_time > 0]
        return _first_min(candidates, key=lambda p: p.remaining_time)
