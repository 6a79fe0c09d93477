"""
Tests for the scheduling policies and the ready queue.
"""

import pytest

from cpu_sched_simulator.backend.core import PCB, Process, ReadyQueue, InvalidWorkloadError
from cpu_sched_simulator.backend.schedulers import (
    FCFSScheduler, SJFScheduler, PriorityScheduler,
    RoundRobinScheduler, SRTFScheduler, IdleAdvance,
)
from cpu_sched_simulator.backend.simulator import simulate, Scheduler


def procs(*specs):
    """Build processes P0..Pn from (arrival, burst[, priority]) tuples."""
    return [Process(f"P{i}", *spec) for i, spec in enumerate(specs)]


@pytest.fixture
def srtf_workload():
    return procs((0, 8), (1, 4), (2, 9), (3, 5))


class TestReadyQueue:
    """Test the FIFO ready queue used by Round Robin."""

    def test_push_pop_fifo(self):
        queue = ReadyQueue()
        pcbs = [PCB(index=i, process=p) for i, p in enumerate(procs((0, 1), (0, 2), (0, 3)))]
        for pcb in pcbs:
            queue.push(pcb)

        assert len(queue) == 3
        assert queue.pids() == ["P0", "P1", "P2"]
        assert queue.pop() is pcbs[0]
        assert queue.peek() is pcbs[1]

    def test_push_ignores_duplicates(self):
        queue = ReadyQueue()
        pcb = PCB(index=0, process=Process("A", 0, 3))
        assert queue.push(pcb) is True
        assert queue.push(pcb) is False
        assert len(queue) == 1
        assert pcb in queue and pcb.queued

        queue.pop()
        assert pcb not in queue and not pcb.queued
        assert queue.is_empty()
        assert queue.pop() is None


class TestFCFS:
    """Test First Come First Serve scheduler."""

    def test_two_processes(self):
        result = simulate(procs((0, 5), (2, 3)), policy=Scheduler.FCFS)
        assert result.completion_times == [5, 8]
        assert [p.waiting_time for p in result.processes] == [0, 3]

    def test_idle_gap_jumps_to_arrival(self):
        result = simulate(procs((0, 2), (5, 3)), policy=Scheduler.FCFS)
        assert result.completion_times == [2, 8]
        assert result.idle_time == 3

    def test_equal_arrivals_keep_input_order(self):
        workload = [Process("X", 2, 1), Process("Y", 0, 3), Process("Z", 2, 2)]
        result = simulate(workload, policy=Scheduler.FCFS)
        # results come back in input order
        assert [p.pid for p in result.processes] == ["X", "Y", "Z"]
        assert result.completion_times == [4, 3, 6]
        assert result.execution_order == ["Y", "X", "Z"]


class TestSJF:
    """Test Shortest Job First scheduler."""

    def test_golden_trace(self):
        result = simulate(procs((0, 7), (2, 4), (4, 1), (5, 4)), policy=Scheduler.SJF)
        assert result.execution_order == ["P0", "P2", "P1", "P3"]
        assert result.completion_times == [7, 12, 8, 16]
        assert [p.turnaround_time for p in result.processes] == [7, 10, 4, 11]
        assert [p.waiting_time for p in result.processes] == [0, 6, 3, 7]

    def test_tie_keeps_first_found(self):
        result = simulate(procs((0, 3), (1, 2), (1, 2)), policy=Scheduler.SJF)
        assert result.execution_order == ["P0", "P1", "P2"]

    def test_unit_step_idle_merges_gap(self):
        result = simulate(procs((3, 2), (3, 1), (20, 4)), policy=Scheduler.SJF)
        assert result.completion_times == [6, 4, 24]
        gaps = [(s["start"], s["end"]) for s in result.logger.idle_slices()]
        assert gaps == [(0, 3), (6, 20)]

    def test_default_idle_advance_is_step(self):
        assert SJFScheduler().idle_advance == IdleAdvance.STEP
        assert FCFSScheduler().idle_advance == IdleAdvance.JUMP


class TestPriorityAging:
    """Test non-preemptive priority scheduling with aging."""

    @pytest.fixture
    def workload(self):
        return procs((0, 2, 1), (0, 2, 3), (2, 2, 3), (4, 2, 3))

    def test_aging_lets_old_process_win(self, workload):
        result = simulate(workload, policy=Scheduler.PRIORITY, age_increment=2)
        # P3 arrives exactly at t=4 and is aged once before the decision,
        # tying with P0; the earlier entry in arrival order wins
        assert result.execution_order == ["P1", "P2", "P0", "P3"]
        assert result.completion_times == [6, 2, 4, 8]
        assert [p.waiting_time for p in result.processes] == [4, 0, 0, 2]

    def test_without_aging_newcomer_wins(self, workload):
        result = simulate(workload, policy=Scheduler.PRIORITY, age_increment=0)
        assert result.execution_order == ["P1", "P2", "P3", "P0"]
        assert result.completion_times == [8, 2, 4, 6]

    def test_age_reset_after_run(self, workload):
        result = simulate(workload, policy=Scheduler.PRIORITY, age_increment=2)
        assert all(p.age == 0 for p in result.processes)

    def test_higher_priority_wins(self):
        result = simulate(procs((0, 1, 1), (0, 1, 9), (0, 1, 5)), policy=Scheduler.PRIORITY)
        assert result.execution_order == ["P1", "P2", "P0"]

    def test_negative_age_increment_rejected(self):
        with pytest.raises(InvalidWorkloadError):
            PriorityScheduler(age_increment=-1)

    def test_idle_ticks_do_not_age(self):
        result = simulate(procs((5, 2, 0)), policy=Scheduler.PRIORITY, age_increment=3)
        assert result.completion_times == [7]
        assert result.idle_time == 5


class TestRoundRobin:
    """Test Round Robin scheduler."""

    def test_arrivals_enqueue_before_preempted(self):
        result = simulate(procs((0, 5), (1, 3), (2, 1)), policy=Scheduler.RR, time_quantum=2)
        assert result.execution_order == ["P0", "P1", "P2", "P0", "P1", "P0"]
        assert result.completion_times == [9, 8, 5]
        assert [p.waiting_time for p in result.processes] == [4, 4, 2]

    def test_arrival_at_slice_end_goes_first(self):
        result = simulate(procs((0, 4), (2, 2)), policy=Scheduler.RR, time_quantum=2)
        assert result.execution_order == ["P0", "P1", "P0"]
        assert result.completion_times == [6, 4]

    def test_empty_queue_jumps_to_next_arrival(self):
        result = simulate(procs((0, 1), (4, 3)), policy=Scheduler.RR, time_quantum=2)
        assert result.completion_times == [1, 7]
        assert result.idle_time == 3

    def test_waiting_uses_original_burst(self):
        result = simulate(procs((0, 6)), policy=Scheduler.RR, time_quantum=2)
        p = result.processes[0]
        assert p.remaining_time == 0
        assert p.burst_time == 6
        assert p.waiting_time == 0

    @pytest.mark.parametrize("quantum", [0, -1])
    def test_invalid_quantum(self, quantum):
        with pytest.raises(InvalidWorkloadError):
            RoundRobinScheduler(time_quantum=quantum)


class TestSRTF:
    """Test Shortest Remaining Time First scheduler."""

    def test_unit_quantum(self, srtf_workload):
        result = simulate(srtf_workload, policy=Scheduler.SRTF, time_quantum=1)
        assert result.execution_order == ["P0", "P1", "P3", "P0", "P2"]
        assert result.completion_times == [17, 5, 26, 10]
        assert [p.waiting_time for p in result.processes] == [9, 0, 15, 2]

    def test_preemption_only_at_quantum_boundary(self, srtf_workload):
        result = simulate(srtf_workload, policy=Scheduler.SRTF, time_quantum=2)
        assert result.completion_times == [17, 6, 26, 11]

    def test_equal_remaining_keeps_first_found(self):
        result = simulate(procs((0, 4), (2, 2)), policy=Scheduler.SRTF, time_quantum=2)
        assert result.execution_order == ["P0", "P1"]
        assert result.completion_times == [4, 6]

    def test_idle_jump(self):
        result = simulate(procs((0, 2), (10, 3)), policy=Scheduler.SRTF, time_quantum=2)
        assert result.completion_times == [2, 13]
        assert result.idle_time == 8
        assert len(result.logger.idle_slices()) == 1

    def test_never_selects_finished_process(self, srtf_workload):
        result = simulate(srtf_workload, policy=Scheduler.SRTF, time_quantum=1)
        completion = {p.pid: p.completion_time for p in result.processes}
        for seg in result.logger.busy_slices():
            assert seg["start"] < completion[seg["pid"]]

    def test_zero_burst_is_never_scheduled(self):
        result = simulate(procs((0, 3), (1, 0)), policy=Scheduler.SRTF, time_quantum=1)
        assert {s["pid"] for s in result.logger.busy_slices()} == {"P0"}
        assert result.processes[1].completion_time == 1
        assert result.processes[1].waiting_time == 0


class TestZeroBurst:
    """A process with no CPU demand finishes the moment it arrives."""

    @pytest.mark.parametrize("policy", Scheduler.ALL)
    def test_retired_at_arrival_mid_slice(self, policy):
        result = simulate(procs((0, 5), (2, 0)), policy=policy, time_quantum=2)
        empty = result.processes[1]
        assert empty.completion_time == 2
        assert empty.waiting_time == 0
        assert result.completion_times[0] == 5

    def test_retired_after_idle_gap(self):
        result = simulate(procs((4, 0)), policy=Scheduler.FCFS)
        assert result.completion_times == [4]
        assert result.total_time == 4


class TestIdleAdvanceEquivalence:
    """Unit-step and jump idle handling must agree."""

    @pytest.fixture
    def gappy(self):
        return procs((2, 3, 1), (2, 1, 4), (9, 2, 2), (9, 5, 0), (30, 1, 3), (31, 2, 1))

    @pytest.mark.parametrize("policy", [Scheduler.SJF, Scheduler.PRIORITY, Scheduler.FCFS])
    def test_step_matches_jump(self, gappy, policy):
        stepped = simulate(gappy, policy=policy, idle_advance=IdleAdvance.STEP)
        jumped = simulate(gappy, policy=policy, idle_advance=IdleAdvance.JUMP)
        assert stepped.completion_times == jumped.completion_times
        assert stepped.logger.timeline == jumped.logger.timeline

    def test_sjf_matches_srtf_with_large_quantum(self, gappy):
        sjf = simulate(gappy, policy=Scheduler.SJF)
        srtf = simulate(gappy, policy=Scheduler.SRTF, time_quantum=100)
        assert sjf.completion_times == srtf.completion_times

    def test_unknown_idle_mode(self):
        with pytest.raises(InvalidWorkloadError):
            SRTFScheduler(idle_advance="crawl")
