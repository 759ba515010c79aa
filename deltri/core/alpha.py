"""Alpha-shape filtering of a triangulation.

Triangles whose circumradius exceeds alpha are discarded. Edges of discarded
triangles short enough (half length <= alpha) and not covered by a kept
triangle become standalone line primitives, and points touched by neither a
kept triangle nor a line become vertex primitives.
"""
from __future__ import annotations
import numpy as np

from .geometry import triangle_circumradius2
from .logging_utils import get_logger
from .regions import DISCARD, KEEP

logger = get_logger('deltri.alpha')

__all__ = ['alpha_filter']


def alpha_filter(mesh, tri_use, alpha, num_points, input_points=None,
                 keep_bounding=False):
    """Apply the alpha criterion.

    Parameters
    ----------
    mesh : TriangleMesh
        Working mesh; its points include the bounding points after the
        `num_points` input points.
    tri_use : (M,) int array
        Usage mask, modified in place.
    alpha : float
    num_points : int
        Number of input (non bounding) points.
    input_points : (N,3) array, optional
        Untransformed input coordinates; the criterion is evaluated there
        for primitives made only of input points.
    keep_bounding : bool
        Whether primitives touching bounding points may be emitted.

    Returns
    -------
    lines : (L,2) int array
    verts : (V,) int array
    """
    alpha2 = alpha * alpha
    work = mesh.points
    src = work if input_points is None else np.asarray(input_points, dtype=np.float64)
    point_use = np.zeros(mesh.number_of_points, dtype=bool)
    num_tris = mesh.number_of_cells

    for i in range(num_tris):
        if tri_use[i] != KEEP:
            continue
        pts = mesh.cell_points(i)
        coords = src if max(pts) < num_points else work
        if triangle_circumradius2(coords[pts[0]], coords[pts[1]], coords[pts[2]]) > alpha2:
            tri_use[i] = DISCARD
        else:
            point_use[list(pts)] = True

    lines = []
    for cell in range(num_tris):
        if tri_use[cell] != DISCARD:
            continue
        pts = mesh.cell_points(cell)
        for i in range(3):
            ap1 = pts[i]; ap2 = pts[(i + 1) % 3]
            if not keep_bounding and (ap1 >= num_points or ap2 >= num_points):
                continue
            neis = mesh.cell_edge_neighbors(cell, ap1, ap2)
            if neis and not (neis[0] > cell and tri_use[neis[0]] == DISCARD):
                continue  # covered by a kept triangle, or handled from the neighbor
            coords = src if (ap1 < num_points and ap2 < num_points) else work
            d = coords[ap1] - coords[ap2]
            if float(np.dot(d, d)) * 0.25 <= alpha2:
                point_use[ap1] = True
                point_use[ap2] = True
                lines.append((ap1, ap2))

    limit = mesh.number_of_points if keep_bounding else num_points
    verts = np.nonzero(~point_use[:limit])[0]
    logger.debug("alpha=%g kept %d triangles, %d lines, %d vertices",
                 alpha, int(np.sum(tri_use == KEEP)), len(lines), len(verts))
    lines_arr = np.asarray(lines, dtype=np.int64).reshape(-1, 2)
    return lines_arr, verts.astype(np.int64)
