"""Delaunay edge legalization by diagonal flipping.

After a point is inserted, each edge opposite the new point is tested with
the in-circumcircle predicate and flipped if it is not locally Delaunay. The
two edges exposed by a flip are tested in turn. Propagation uses an explicit
LIFO worklist (same visiting order as the recursive formulation) with a
depth cap.
"""
from __future__ import annotations
import math
from typing import Optional

from .constants import MAX_RECURSION_DEPTH
from .geometry import in_circle
from .logging_utils import get_logger
from .stats import TriangulationStats

logger = get_logger('deltri.legalize')

__all__ = ['Legalizer']


class Legalizer:
    """Edge flipper bound to one mesh.

    Parameters
    ----------
    mesh : TriangleMesh
    bounding_radius2 : float
        Circles with a larger squared radius count as containing the point.
    stats : TriangulationStats, optional
    max_depth : int
        Flip propagation depth cap.
    """

    def __init__(self, mesh, bounding_radius2: float = math.inf,
                 stats: Optional[TriangulationStats] = None,
                 max_depth: int = MAX_RECURSION_DEPTH):
        self.mesh = mesh
        self.bounding_radius2 = bounding_radius2
        self.stats = stats if stats is not None else TriangulationStats()
        self.max_depth = max_depth

    def check_edge(self, pt_id: int, p1: int, p2: int, tri: int,
                   recursive: bool = True, depth: int = 1) -> bool:
        """Legalize edge (p1, p2) of triangle `tri` = (pt_id, p1, p2).

        Returns True if that edge was flipped. With `recursive` the edges
        exposed by each flip are checked as well.
        """
        stack = [(p1, p2, tri, depth)]
        first = True
        flipped_first = False
        while stack:
            a, b, t, d = stack.pop()
            flipped = self._flip_if_illegal(pt_id, a, b, t, d)
            if first:
                flipped_first = flipped
                first = False
            if flipped is None or not recursive:
                continue
            t_new, nei, p3 = flipped
            # push in reverse so (p3, b) is fully processed before (a, p3)
            stack.append((a, p3, nei, d + 1))
            stack.append((p3, b, t_new, d + 1))
        return bool(flipped_first)

    def _flip_if_illegal(self, pt_id, p1, p2, tri, depth):
        if depth >= self.max_depth:
            logger.warning("Exceeded recursion depth (%d) legalizing edge (%d, %d)", depth, p1, p2)
            self.stats.recursion_exhausted += 1
            return None
        mesh = self.mesh
        neighbors = mesh.cell_edge_neighbors(tri, p1, p2)
        if not neighbors:
            return None  # boundary edge
        nei = neighbors[0]
        p3 = next(p for p in mesh.cell_points(nei) if p != p1 and p != p2)
        xy = mesh.xy
        if not in_circle(xy[p3], xy[pt_id], xy[p1], xy[p2], self.bounding_radius2):
            return None

        # swap diagonal (p1, p2) -> (pt_id, p3)
        mesh.remove_reference_to_cell(p1, tri)
        mesh.remove_reference_to_cell(p2, nei)
        mesh.resize_cell_list(pt_id, 1)
        mesh.add_reference_to_cell(pt_id, nei)
        mesh.resize_cell_list(p3, 1)
        mesh.add_reference_to_cell(p3, tri)
        mesh.replace_cell(tri, (pt_id, p3, p2))
        mesh.replace_cell(nei, (pt_id, p1, p3))
        self.stats.flips += 1
        return tri, nei, p3
