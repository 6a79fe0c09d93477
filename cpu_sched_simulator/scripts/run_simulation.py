from __future__ import annotations

import argparse
import os
from typing import List, Optional

from cpu_sched_simulator.backend.core import Process, InvalidWorkloadError
from cpu_sched_simulator.backend.simulator import simulate, compare_policies, Scheduler, SimulationResult
from cpu_sched_simulator.backend.schedulers import IdleAdvance
from cpu_sched_simulator.backend.workload import load_workload, generate_workload
from cpu_sched_simulator.backend.visualizer import plot_gantt


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="CPU Scheduling Simulator")
    p.add_argument("--policy", type=str.upper, choices=list(Scheduler.ALL), default=Scheduler.FCFS)
    p.add_argument("--compare", action="store_true", help="Run every policy and print a summary table")
    p.add_argument("--workload", type=str, default=None, help="CSV or JSON workload file")
    p.add_argument("--n", type=int, default=8, help="Number of synthetic processes when no workload is given")
    p.add_argument("--seed", type=int, default=42)
    p.add_argument("--quantum", type=int, default=2)
    p.add_argument("--age", type=int, default=1, help="Age increment for PRIORITY")
    p.add_argument("--idle", choices=[IdleAdvance.STEP, IdleAdvance.JUMP], default=None)
    p.add_argument("--trace", action="store_true", help="Print the execution timeline")
    p.add_argument("--export", type=str, default=None, help="Write events/timeline (.json, or CSV base path)")
    p.add_argument("--plot", type=str, default=None, help="Save a Gantt chart to this path")
    return p


def print_result(result: SimulationResult, trace: bool = False) -> None:
    print(f"--- {result.policy} ---")
    print(result.to_frame().to_string())
    print(f"Total time: {result.total_time}  (busy {result.busy_time}, idle {result.idle_time})")
    print(f"Avg waiting: {result.avg_waiting_time:.3f}, Avg turnaround: {result.avg_turnaround_time:.3f}, "
          f"Throughput: {result.throughput:.3f}, CPU utilization: {result.cpu_utilization:.1f}%")
    if trace:
        print("\n--- Timeline (slices) ---")
        for t in result.logger.timeline:
            pid = t["pid"] or "<idle>"
            print(f"{t['start']:>4} - {t['end']:>4} : {pid}")


def export_events(result: SimulationResult, path: str) -> None:
    if path.lower().endswith(".json"):
        result.logger.export_json(path)
    else:
        result.logger.export_csv(os.path.splitext(path)[0])


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        procs: List[Process] = load_workload(args.workload) if args.workload else generate_workload(args.n, args.seed)
        if args.compare:
            df = compare_policies(procs, time_quantum=args.quantum, age_increment=args.age,
                                  idle_advance=args.idle)
            print(df.to_string(float_format=lambda v: f"{v:.3f}"))
            return 0
        result = simulate(procs, policy=args.policy, time_quantum=args.quantum,
                          age_increment=args.age, idle_advance=args.idle)
    except InvalidWorkloadError as e:
        parser.error(str(e))
    except OSError as e:
        parser.error(f"cannot read workload: {e}")

    print_result(result, trace=args.trace)
    if args.export:
        export_events(result, args.export)
        print(f"Saved events to {args.export}")
    if args.plot:
        plot_gantt(result, args.plot)
        print(f"Saved plot to {args.plot}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
