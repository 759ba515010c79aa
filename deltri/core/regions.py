"""Inside/outside classification of triangles against constraint polygons.

Triangle usage mask values: KEEP (1), DISCARD (0) and UNVISITED (-1). The
fill seeds DISCARD on the right-hand side of every polygon edge, marks the
left-hand triangle UNVISITED so the fill cannot cross the boundary, and
floods DISCARD across shared edges. Whatever is never reached is inside.
"""
from __future__ import annotations
import numpy as np

from .logging_utils import get_logger

logger = get_logger('deltri.regions')

KEEP = 1
DISCARD = 0
UNVISITED = -1

__all__ = ['KEEP', 'DISCARD', 'UNVISITED', 'fill_polygons']


def fill_polygons(mesh, polys, tri_use, stats=None) -> bool:
    """Mark triangles outside the polygons in `tri_use` (modified in place).

    Returns False, leaving the mask untouched, if any polygon edge is missing
    from the mesh.
    """
    for pl in polys:
        n = len(pl)
        for i in range(n):
            if not mesh.is_edge(pl[i], pl[(i + 1) % n]):
                logger.warning("Edge (%d, %d) not recovered, polygon fill not possible",
                               pl[i], pl[(i + 1) % n])
                if stats is not None:
                    stats.fill_abandoned += 1
                return False

    xy = mesh.xy
    for pl in polys:
        front = []
        n = len(pl)
        for i in range(n):
            p1 = pl[i]; p2 = pl[(i + 1) % n]
            x1 = xy[p1]; x2 = xy[p2]
            # points to the right of p1 -> p2
            neg_dir = (x2[1] - x1[1], -(x2[0] - x1[0]))
            for cell in mesh.cell_edge_neighbors(-1, p1, p2):
                k = next(p for p in mesh.cell_points(cell) if p != p1 and p != p2)
                x = xy[k]
                if neg_dir[0] * (x[0] - x1[0]) + neg_dir[1] * (x[1] - x1[1]) > 0.0:
                    tri_use[cell] = DISCARD
                    front.append(cell)
                else:
                    tri_use[cell] = UNVISITED

        while front:
            next_front = []
            for cell in front:
                pts = mesh.cell_points(cell)
                for k in range(3):
                    for nei in mesh.cell_edge_neighbors(cell, pts[k], pts[(k + 1) % 3]):
                        if tri_use[nei] == KEEP:
                            tri_use[nei] = DISCARD
                            next_front.append(nei)
            front = next_front

    tri_use[tri_use == UNVISITED] = KEEP
    return True
