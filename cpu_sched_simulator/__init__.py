"""CPU scheduling simulator: FCFS, SJF, Priority with aging, Round Robin and SRTF."""

__version__ = "0.1.0"
