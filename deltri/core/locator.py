"""Walking point location in a triangle mesh.

Starting from any triangle, the walk evaluates the query point against the
three edge half-spaces and steps across the most violated edge until the
point is inside (or on an edge of) the current triangle.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from .constants import EPS_EDGE_PROXIMITY, MIN_WALK_STEPS
from .geometry import normalize2d
from .logging_utils import get_logger
from .stats import TriangulationStats

logger = get_logger('deltri.locator')

__all__ = ['Location', 'PointLocator']


@dataclass(frozen=True)
class Location:
    """Where a point was found.

    `edge` is None for a point strictly inside `triangle`; for a point on an
    edge it is (p1, p2) in the triangle's cyclic order and `neighbor` is the
    triangle across that edge (-1 if none).
    """
    triangle: int
    pts: tuple
    edge: Optional[tuple] = None
    neighbor: int = -1

    @property
    def on_edge(self) -> bool:
        return self.edge is not None


def _first_edge(tri: int) -> int:
    """Call-local pseudo-random start edge (0..2) derived from the triangle id."""
    h = (tri * 1103515245 + 12345) & 0x7fffffff
    return (h >> 16) % 3


class PointLocator:
    """Locate points of a TriangleMesh by walking from a start triangle.

    Duplicates (query within `tol` of a visited vertex) and points whose walk
    stalls are reported as None and counted in `stats`.
    """

    def __init__(self, mesh, stats: Optional[TriangulationStats] = None):
        self.mesh = mesh
        self.stats = stats if stats is not None else TriangulationStats()

    def find_triangle(self, x, tri: int, tol: float) -> Optional[Location]:
        mesh = self.mesh
        xy = mesh.xy
        came_from = -1
        max_steps = 2 * mesh.number_of_cells + MIN_WALK_STEPS
        for _ in range(max_steps):
            pts = mesh.cell_points(tri)
            p = (xy[pts[0]], xy[pts[1]], xy[pts[2]])
            inside = True
            min_proj = EPS_EDGE_PROXIMITY
            edge = None
            ir = _first_edge(tri)
            for ic in range(3):
                i = (ir + ic) % 3
                i2 = (i + 1) % 3
                i3 = (i + 2) % 3
                # inward/outward normal of edge (i, i2) in the plane
                n, _ = normalize2d((-(p[i2][1] - p[i][1]), p[i2][0] - p[i][0]))
                vp, _ = normalize2d((p[i3][0] - p[i][0], p[i3][1] - p[i][1]))
                vx, dist = normalize2d((x[0] - p[i][0], x[1] - p[i][1]))
                if dist <= tol:
                    self.stats.duplicate_points += 1
                    return None
                side = -1.0 if (n[0]*vp[0] + n[1]*vp[1]) < 0 else 1.0
                dp = (n[0]*vx[0] + n[1]*vx[1]) * side
                if dp < EPS_EDGE_PROXIMITY and dp < min_proj:
                    inside = False
                    edge = (pts[i], pts[i2])
                    min_proj = dp

            if inside:
                return Location(tri, pts)

            neighbors = mesh.cell_edge_neighbors(tri, edge[0], edge[1])
            if abs(min_proj) < EPS_EDGE_PROXIMITY:
                return Location(tri, pts, edge, neighbors[0] if neighbors else -1)

            if not neighbors or neighbors[0] == came_from:
                self.stats.degeneracies += 1
                return None
            came_from = tri
            tri = neighbors[0]

        logger.debug("walk exceeded %d steps for point %s", max_steps, tuple(x[:2]))
        self.stats.degeneracies += 1
        return None
