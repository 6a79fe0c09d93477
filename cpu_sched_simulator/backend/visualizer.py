from __future__ import annotations

from typing import Dict, Optional
import os
import matplotlib.pyplot as plt

from .simulator import SimulationResult


def ensure_dir(path: str) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def pid_colors(pids) -> Dict[str, str]:
    cmap = plt.get_cmap("tab20")
    return {pid: cmap(i % cmap.N) for i, pid in enumerate(pids)}


def plot_gantt(result: SimulationResult, out_path: Optional[str] = None) -> None:
    pids_order = [p.pid for p in result.processes]
    fig, ax = plt.subplots(figsize=(12, 2 + 0.4 * max(1, len(pids_order))))

    colors = pid_colors(pids_order)
    y_positions: Dict[str, int] = {pid: i for i, pid in enumerate(pids_order)}

    for seg in result.logger.timeline:
        start = seg["start"]
        end = seg["end"]
        pid = seg.get("pid")
        if not pid:
            # idle gaps span the whole chart
            ax.axvspan(start, end, color="#cccccc", alpha=0.4, hatch="//", linewidth=0)
            continue
        ax.barh(y_positions[pid], end - start, left=start, color=colors[pid], edgecolor="black", alpha=0.9)
        ax.text(start + (end - start) / 2, y_positions[pid], str(end - start), va="center", ha="center", fontsize=8)

    for p in result.processes:
        ax.plot(p.arrival_time, y_positions[p.pid], marker="v", color="#444444", markersize=6)

    ax.set_yticks([y_positions[pid] for pid in pids_order])
    ax.set_yticklabels(pids_order)
    ax.invert_yaxis()
    ax.set_xlabel("Time")
    ax.set_title(
        f"{result.policy} - avg waiting {result.avg_waiting_time:.2f}, "
        f"avg turnaround {result.avg_turnaround_time:.2f}"
    )
    ax.grid(True, axis="x", linestyle=":", alpha=0.5)
    fig.tight_layout()

    if out_path:
        ensure_dir(out_path)
        fig.savefig(out_path, dpi=150)
        plt.close(fig)
    else:
        plt.show()
