"""Triangulation statistics and presentation utilities.

Every non-fatal anomaly met during a run (duplicate points, walks that could
not locate a point, exhausted legalization depth, constraint edges that could
not be recovered) is counted here instead of aborting the run.
"""
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, Any


@dataclass
class TriangulationStats:
    points_inserted: int = 0
    duplicate_points: int = 0
    degeneracies: int = 0
    flips: int = 0
    recursion_exhausted: int = 0
    edges_recovered: int = 0
    edges_unrecovered: int = 0
    fill_abandoned: int = 0
    swaps: int = 0
    # Timing (seconds)
    time_total: float = 0.0

    def reset(self) -> None:
        for key in asdict(self):
            setattr(self, key, type(getattr(self, key))())

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        attempted = self.edges_recovered + self.edges_unrecovered
        d['recovery_rate'] = (self.edges_recovered / attempted) if attempted else 0.0
        return d


def format_stats_table(stats) -> str:
    """Return a two-column human readable table of the counters."""
    d = stats.to_dict() if hasattr(stats, 'to_dict') else dict(stats)
    if not d:
        return "<no stats>"
    rows = []
    for key, val in d.items():
        if isinstance(val, float):
            rows.append((key, f"{val:.6g}"))
        else:
            rows.append((key, str(val)))
    kw = max(len(r[0]) for r in rows)
    vw = max(len(r[1]) for r in rows)
    lines = [f"{'counter'.ljust(kw)} {'value'.rjust(vw)}", "-" * (kw + vw + 1)]
    lines += [f"{k.ljust(kw)} {v.rjust(vw)}" for k, v in rows]
    return "\n".join(lines)


def print_stats(stats, file=None):  # pragma: no cover - formatting wrapper
    import sys
    out = file or sys.stdout
    print(format_stats_table(stats), file=out)


__all__ = ["TriangulationStats", "format_stats_table", "print_stats"]
