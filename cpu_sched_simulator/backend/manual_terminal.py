from __future__ import annotations

import shlex
from typing import List, Optional
from colorama import Fore, Style, init as colorama_init

from .core import Process, InvalidWorkloadError
from .simulator import simulate, compare_policies, Scheduler
from .workload import load_workload
from .visualizer import plot_gantt


class ManualTerminal:
    def __init__(self) -> None:
        colorama_init(autoreset=True)
        self.processes: List[Process] = []
        self.last_result = None

    def prompt(self) -> None:
        print(Fore.CYAN + "CPU scheduling terminal. Type 'help' for commands.")
        while True:
            try:
                raw = input(Fore.GREEN + "> ")
            except (EOFError, KeyboardInterrupt):
                print()
                break
            if not raw.strip():
                continue
            self.handle_command(raw)

    def handle_command(self, raw: str) -> None:
        try:
            parts = shlex.split(raw)
        except ValueError as e:
            print(Fore.RED + f"Parse error: {e}")
            return
        if not parts:
            return
        cmd, *args = parts
        cmd = cmd.lower()
        try:
            if cmd == "help":
                self._help()
            elif cmd == "add":
                self._add(args)
            elif cmd == "list":
                self._list()
            elif cmd == "load":
                self._load(args)
            elif cmd == "clear":
                self.processes = []
                self.last_result = None
                print(Fore.CYAN + "Workload cleared")
            elif cmd == "run":
                self._run(args)
            elif cmd == "compare":
                self._compare(args)
            elif cmd == "stats":
                self._stats()
            elif cmd == "exit" or cmd == "quit":
                raise SystemExit(0)
            else:
                print(Fore.YELLOW + "Unknown command. Type 'help'.")
        except InvalidWorkloadError as e:
            print(Fore.RED + f"Invalid workload: {e}")

    def _help(self) -> None:
        print("Commands:")
        print("  add <pid> <arrival> <burst> [priority=0]")
        print("  list")
        print("  load <workload.csv|workload.json>")
        print("  clear")
        print("  run [--policy FCFS|SJF|PRIORITY|RR|SRTF] [--quantum Q] [--age A] [--out path]")
        print("  compare [--quantum Q] [--age A]")
        print("  stats")
        print("  exit")

    def _add(self, args: List[str]) -> None:
        if len(args) < 3:
            print(Fore.RED + "Usage: add <pid> <arrival> <burst> [priority]")
            return
        pid = args[0]
        try:
            arrival = int(args[1])
            burst = int(args[2])
            priority = int(args[3]) if len(args) >= 4 else 0
        except ValueError:
            print(Fore.RED + "Invalid numeric values")
            return
        if any(p.pid == pid for p in self.processes):
            print(Fore.RED + f"Process {pid} already exists")
            return
        if arrival < 0 or burst < 0:
            print(Fore.RED + "Arrival and burst must be >= 0")
            return
        self.processes.append(Process(pid=pid, arrival_time=arrival, burst_time=burst, priority=priority))
        print(Fore.CYAN + f"Process {pid} added: arrival={arrival}, burst={burst}, priority={priority}")

    def _list(self) -> None:
        if not self.processes:
            print("No processes yet")
            return
        for p in self.processes:
            print(f"{p.pid}: arrival={p.arrival_time}, burst={p.burst_time}, priority={p.priority}")

    def _load(self, args: List[str]) -> None:
        if not args:
            print(Fore.RED + "Usage: load <path>")
            return
        try:
            procs = load_workload(args[0])
        except OSError as e:
            print(Fore.RED + f"Cannot read {args[0]}: {e}")
            return
        self.processes = procs
        print(Fore.CYAN + f"Loaded {len(procs)} processes from {args[0]}")

    def _parse_run_flags(self, args: List[str]):
        """Return (policy, quantum, age, out_path), or None after printing a usage error."""
        policy = Scheduler.FCFS
        quantum = 2
        age = 1
        out_path: Optional[str] = None
        it = iter(args)
        for token in it:
            if token in ("--policy", "--quantum", "--age", "--out"):
                value = next(it, None)
                if value is None:
                    print(Fore.RED + f"Missing value for {token}")
                    return None
            else:
                print(Fore.RED + f"Unknown option {token}. Type 'help'.")
                return None
            if token == "--policy":
                policy = value.upper()
            elif token == "--out":
                out_path = value
            else:
                try:
                    number = int(value)
                except ValueError:
                    print(Fore.RED + f"{token} expects an integer, got {value!r}")
                    return None
                if token == "--quantum":
                    quantum = number
                else:
                    age = number
        return policy, quantum, age, out_path

    def _run(self, args: List[str]) -> None:
        flags = self._parse_run_flags(args)
        if flags is None:
            return
        policy, quantum, age, out_path = flags
        result = simulate(self.processes, policy=policy, time_quantum=quantum, age_increment=age)
        self.last_result = result
        print(Style.BRIGHT + f"{result.policy} finished at t={result.total_time}. "
              f"Avg waiting: {result.avg_waiting_time:.2f}, Avg turnaround: {result.avg_turnaround_time:.2f}")
        for p in result.processes:
            print(f"  {p.pid}: completion={p.completion_time}, turnaround={p.turnaround_time}, waiting={p.waiting_time}")
        if out_path:
            plot_gantt(result, out_path)
            print(Fore.CYAN + f"Saved plot to {out_path}")

    def _compare(self, args: List[str]) -> None:
        flags = self._parse_run_flags(args)
        if flags is None:
            return
        _, quantum, age, _ = flags
        if not self.processes:
            print("No processes yet")
            return
        df = compare_policies(self.processes, time_quantum=quantum, age_increment=age)
        print(df[["avg_waiting_time", "avg_turnaround_time", "total_time"]].to_string(float_format=lambda v: f"{v:.2f}"))

    def _stats(self) -> None:
        if not self.last_result:
            print("No simulation yet")
            return
        r = self.last_result
        print(f"Avg waiting time: {r.avg_waiting_time:.3f}")
        print(f"Avg turnaround time: {r.avg_turnaround_time:.3f}")
        print(f"Avg response time: {r.avg_response_time:.3f}")
        print(f"Throughput: {r.throughput:.3f} jobs/tick")
        print(f"CPU utilization: {r.cpu_utilization:.1f}%")


def main() -> None:
    ManualTerminal().prompt()


if __name__ == "__main__":
    main()
