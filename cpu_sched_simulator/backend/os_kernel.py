from __future__ import annotations

import json
from typing import List, Optional, Dict, Any
from dataclasses import dataclass, asdict, fields

from .core import Process, InvalidWorkloadError
from .simulator import simulate, Scheduler, SimulationResult


@dataclass
class KernelConfig:
    policy: str = Scheduler.FCFS
    time_quantum: int = 2
    age_increment: int = 1
    idle_advance: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KernelConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidWorkloadError(f"Unknown config keys: {unknown}")
        return cls(**data)

    @classmethod
    def from_json(cls, path: str) -> "KernelConfig":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class OSKernel:
    """Thin wrapper that runs `simulate` with a stored configuration.

    The same kernel can replay any number of workloads; each run gets its own
    process state.
    """

    def __init__(self, config: KernelConfig | None = None):
        self.config = config or KernelConfig()

    def run(self, processes: List[Process], policy: Optional[str] = None) -> SimulationResult:
        return simulate(
            processes=processes,
            policy=policy or self.config.policy,
            time_quantum=self.config.time_quantum,
            age_increment=self.config.age_increment,
            idle_advance=self.config.idle_advance,
        )

    def run_all(self, processes: List[Process]) -> Dict[str, SimulationResult]:
        return {policy: self.run(processes, policy=policy) for policy in Scheduler.ALL}
