from .core import Process, PCB, InvalidWorkloadError
from .simulator import simulate, compare_policies, Scheduler, SimulationResult

__all__ = [
    "Process",
    "PCB",
    "InvalidWorkloadError",
    "simulate",
    "compare_policies",
    "Scheduler",
    "SimulationResult",
]
