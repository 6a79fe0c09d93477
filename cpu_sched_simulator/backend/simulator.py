from __future__ import annotations

from typing import List, Optional, Dict, Sequence
from dataclasses import dataclass

import pandas as pd

from .core import PCB, Process, SimulationState, InvalidWorkloadError, validate_workload
from .schedulers import (
    BaseScheduler, FCFSScheduler, SJFScheduler, PriorityScheduler,
    RoundRobinScheduler, SRTFScheduler,
)
from .utils import EventLogger, compute_waiting_times, compute_turnaround_times, compute_avg, compute_throughput


@dataclass
class SimulationResult:
    policy: str
    processes: List[PCB]
    total_time: int
    busy_time: int
    idle_time: int
    waiting_times: Dict[str, int]
    turnaround_times: Dict[str, int]
    avg_waiting_time: float
    avg_turnaround_time: float
    avg_response_time: float
    throughput: float
    cpu_utilization: float
    logger: EventLogger

    @property
    def completion_times(self) -> List[int]:
        return [p.completion_time for p in self.processes]

    @property
    def execution_order(self) -> List[str]:
        return self.logger.execution_order()

    def to_frame(self) -> pd.DataFrame:
        """One row per process, in input order."""
        rows = [{
            "pid": p.pid,
            "arrival_time": p.arrival_time,
            "burst_time": p.burst_time,
            "priority": p.priority,
            "start_time": p.stats.start_time,
            "completion_time": p.completion_time,
            "turnaround_time": p.turnaround_time,
            "waiting_time": p.waiting_time,
            "response_time": p.stats.response_time,
        } for p in self.processes]
        columns = ["pid", "arrival_time", "burst_time", "priority", "start_time",
                   "completion_time", "turnaround_time", "waiting_time", "response_time"]
        return pd.DataFrame(rows, columns=columns).set_index("pid")

    def summary(self) -> Dict[str, float]:
        return {
            "total_time": self.total_time,
            "busy_time": self.busy_time,
            "idle_time": self.idle_time,
            "avg_waiting_time": self.avg_waiting_time,
            "avg_turnaround_time": self.avg_turnaround_time,
            "avg_response_time": self.avg_response_time,
            "throughput": self.throughput,
            "cpu_utilization": self.cpu_utilization,
        }


class Scheduler:
    FCFS = "FCFS"         # non-preemptive First-Come, First-Served
    SJF = "SJF"           # non-preemptive, shortest total burst
    PRIORITY = "PRIORITY" # non-preemptive, larger priority + age wins
    RR = "RR"             # preemptive, cyclic FIFO queue
    SRTF = "SRTF"         # preemptive SJF

    ALL = (FCFS, SJF, PRIORITY, RR, SRTF)


def create_scheduler(
    policy: str,
    time_quantum: int = 2,
    age_increment: int = 1,
    idle_advance: Optional[str] = None,
) -> BaseScheduler:
    key = policy.upper() if isinstance(policy, str) else policy
    if key == Scheduler.FCFS:
        return FCFSScheduler(idle_advance=idle_advance)
    if key == Scheduler.SJF:
        return SJFScheduler(idle_advance=idle_advance)
    if key == Scheduler.PRIORITY:
        return PriorityScheduler(age_increment=age_increment, idle_advance=idle_advance)
    if key == Scheduler.RR:
        return RoundRobinScheduler(time_quantum=time_quantum, idle_advance=idle_advance)
    if key == Scheduler.SRTF:
        return SRTFScheduler(time_quantum=time_quantum, idle_advance=idle_advance)
    raise InvalidWorkloadError(f"Unknown scheduling policy: {policy!r}")


def finalize_stats(pcbs: Sequence[PCB]) -> None:
    """Derive turnaround and waiting time from completion time and the original burst."""
    for p in pcbs:
        if p.completion_time is None:
            raise RuntimeError(f"{p.pid} has not completed")
        if p.turnaround_time is not None:
            continue
        p.stats.turnaround_time = p.completion_time - p.arrival_time
        p.stats.waiting_time = p.stats.turnaround_time - p.burst_time


def run_scheduler(scheduler: BaseScheduler, processes: Sequence[Process]) -> SimulationState:
    """Drive `scheduler` over `processes` until every process has finished."""
    state = SimulationState(processes, policy=scheduler.name)
    while not state.all_done():
        scheduler.admit(state)
        if scheduler.is_idle(state):
            scheduler.advance_idle(state)
            continue
        pcb = scheduler.select_next(state)
        scheduler.step(state, pcb)
        scheduler.after_step(state, pcb)
    finalize_stats(state.pcbs)
    return state


def simulate(
    processes: Sequence[Process],
    policy: str = Scheduler.FCFS,
    time_quantum: int = 2,
    age_increment: int = 1,
    idle_advance: Optional[str] = None,
) -> SimulationResult:
    processes = list(processes)
    scheduler = create_scheduler(policy, time_quantum=time_quantum, age_increment=age_increment, idle_advance=idle_advance)
    validate_workload(processes)

    state = run_scheduler(scheduler, processes)
    ordered = state.in_input_order()

    waiting_times = compute_waiting_times(ordered)
    turnaround_times = compute_turnaround_times(ordered)
    responses = [p.stats.response_time for p in ordered if p.stats.response_time is not None]
    total_time = state.clock

    return SimulationResult(
        policy=scheduler.name,
        processes=ordered,
        total_time=total_time,
        busy_time=state.metrics.busy_time,
        idle_time=state.metrics.idle_time,
        waiting_times=waiting_times,
        turnaround_times=turnaround_times,
        avg_waiting_time=compute_avg(list(waiting_times.values())),
        avg_turnaround_time=compute_avg(list(turnaround_times.values())),
        avg_response_time=compute_avg(responses),
        throughput=compute_throughput(ordered, total_time),
        cpu_utilization=state.metrics.get_cpu_utilization(total_time),
        logger=state.logger,
    )


def compare_policies(
    processes: Sequence[Process],
    policies: Sequence[str] = Scheduler.ALL,
    time_quantum: int = 2,
    age_increment: int = 1,
    idle_advance: Optional[str] = None,
) -> pd.DataFrame:
    """Run the same workload under each policy; one summary row per policy."""
    rows = {}
    for policy in policies:
        result = simulate(processes, policy=policy, time_quantum=time_quantum,
                          age_increment=age_increment, idle_advance=idle_advance)
        rows[result.policy] = result.summary()
    return pd.DataFrame(rows).T
