"""Matplotlib rendering of triangulation results."""
from __future__ import annotations

import os as _os
import matplotlib as _mpl
# Ensure a non-interactive backend in headless environments before importing pyplot
if not _os.environ.get('MPLBACKEND'):
    _mpl.use('Agg')
import numpy as np
import matplotlib.pyplot as plt

from .logging_utils import get_logger

logger = get_logger('deltri.viz')


def plot_triangulation(result, outname="triangulation.png", constraint_edges=(),
                       show_point_ids: bool = False):
    """Plot triangles, alpha lines and isolated vertices of a result.

    Args:
        result: TriangulationResult
        outname: output image path
        constraint_edges: iterable of (p1, p2) drawn in red on top
        show_point_ids: annotate every used point with its index
    """
    pts = np.asarray(result.points, dtype=np.float64)
    tris = np.asarray(result.triangles, dtype=np.int64).reshape(-1, 3)
    fig, ax = plt.subplots(figsize=(6, 6))
    if len(tris):
        ax.triplot(pts[:, 0], pts[:, 1], tris, color='0.3', linewidth=0.7)
    for a, b in np.asarray(result.lines, dtype=np.int64).reshape(-1, 2):
        ax.plot(pts[[a, b], 0], pts[[a, b], 1], color='tab:blue', linewidth=1.2)
    verts = np.asarray(result.verts, dtype=np.int64).reshape(-1)
    if len(verts):
        ax.scatter(pts[verts, 0], pts[verts, 1], s=12, color='tab:orange', zorder=3)
    for a, b in constraint_edges:
        ax.plot(pts[[a, b], 0], pts[[a, b], 1], color=(0.85, 0.2, 0.2), linewidth=1.8)
    if show_point_ids:
        used = set(tris.flatten().tolist()) | set(verts.tolist())
        for v in sorted(used):
            ax.annotate(str(v), (pts[v, 0], pts[v, 1]), fontsize=6)
    ax.set_title(f"{len(tris)} triangles, {len(result.lines)} lines, {len(verts)} vertices")
    ax.set_aspect('equal')
    fig.savefig(outname, dpi=150)
    plt.close(fig)
    logger.debug("saved %s", outname)
    return outname


__all__ = ['plot_triangulation']
