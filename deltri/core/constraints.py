"""Constrained edge recovery.

A required edge (p1, p2) missing from the triangulation is forced in by
walking from p1 to p2 through the triangles the segment crosses, collecting
the vertices met on either side into a "right" and a "left" chain. Each chain
closed by the segment is a simple polygon; when both can be triangulated the
crossed triangles are replaced in place by the two new triangulations. On any
failure the mesh is left untouched.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set, Tuple

from .geometry import normalize2d
from .legalize import Legalizer
from .logging_utils import get_logger
from .stats import TriangulationStats
from .triangulation import bounded_triangulate

logger = get_logger('deltri.constraints')

__all__ = ['ConstraintSet', 'ConstraintRecoverer']


@dataclass
class ConstraintSet:
    """Required edges given as point-index sequences into the input points.

    lines : open polylines; consecutive ids form edges.
    polys : closed loops; the first one bounds the domain (counter clockwise),
            further loops carve holes (clockwise).
    """
    lines: List[Sequence[int]] = field(default_factory=list)
    polys: List[Sequence[int]] = field(default_factory=list)

    def __post_init__(self):
        self.lines = [[int(p) for p in ln] for ln in self.lines]
        self.polys = [[int(p) for p in pl] for pl in self.polys]
        self._edges: Set[Tuple[int, int]] = set()
        for p1, p2 in self.iter_edges():
            self._edges.add((min(p1, p2), max(p1, p2)))

    def iter_line_edges(self):
        for ln in self.lines:
            for i in range(len(ln) - 1):
                yield ln[i], ln[i + 1]

    def iter_poly_edges(self, poly: Optional[Sequence[int]] = None):
        polys = self.polys if poly is None else [poly]
        for pl in polys:
            n = len(pl)
            for i in range(n):
                yield pl[i], pl[(i + 1) % n]

    def iter_edges(self):
        yield from self.iter_line_edges()
        yield from self.iter_poly_edges()

    def is_edge(self, p1: int, p2: int) -> bool:
        return (min(p1, p2), max(p1, p2)) in self._edges

    def _point_ids(self) -> List[int]:
        return [p for ln in self.lines for p in ln] + [p for pl in self.polys for p in pl]

    def max_point_id(self) -> int:
        ids = self._point_ids()
        return max(ids) if ids else -1

    def min_point_id(self) -> int:
        ids = self._point_ids()
        return min(ids) if ids else 0

    def __bool__(self) -> bool:
        return bool(self.lines or self.polys)


def _plane_eval(normal, origin, x) -> float:
    return normal[0] * (x[0] - origin[0]) + normal[1] * (x[1] - origin[1])


class ConstraintRecoverer:
    """Recover required edges in a TriangleMesh.

    Parameters
    ----------
    mesh : TriangleMesh
    source : ConstraintSet
    legalizer : Legalizer
        Used (non-recursively) to restore local Delaunay-ness of the new
        edges that are not constraints.
    tolerance : float
        Relative area tolerance for accepting a cavity triangulation.
    """

    def __init__(self, mesh, source: ConstraintSet, legalizer: Legalizer,
                 tolerance: float = 1e-5, stats: Optional[TriangulationStats] = None):
        self.mesh = mesh
        self.source = source
        self.legalizer = legalizer
        self.tolerance = tolerance
        self.stats = stats if stats is not None else legalizer.stats

    def recover_boundary(self) -> None:
        """Recover every line and polygon edge missing from the mesh."""
        for p1, p2 in self.source.iter_edges():
            if self.mesh.is_edge(p1, p2):
                continue
            if self.recover_edge(p1, p2):
                self.stats.edges_recovered += 1
            else:
                self.stats.edges_unrecovered += 1
                logger.warning("Unable to recover constraint edge (%d, %d)", p1, p2)

    # ------------------------------------------------------------------
    def _start_triangle(self, p1, p2, split_normal):
        """Triangle incident to p1 whose opposite edge separates p1 from p2."""
        mesh = self.mesh
        xy = mesh.xy
        x_p1 = xy[p1]; x_p2 = xy[p2]
        for cell in mesh.point_cells(p1):
            pts = mesh.cell_points(cell)
            j = pts.index(p1)
            v1 = pts[(j + 1) % 3]; v2 = pts[(j + 2) % 3]
            s1 = _plane_eval(split_normal, x_p1, xy[v1]) > 0.0
            s2 = _plane_eval(split_normal, x_p1, xy[v2]) > 0.0
            if s1 == s2:
                continue
            x1 = xy[v1]; x2 = xy[v2]
            sep_normal, length = normalize2d((x2[1] - x1[1], -(x2[0] - x1[0])))
            if length == 0.0:
                return None  # bad mesh
            if (_plane_eval(sep_normal, x1, x_p1) > 0.0) != (_plane_eval(sep_normal, x1, x_p2) > 0.0):
                return cell, (v1, v2) if s1 else (v2, v1)
        return None

    def _walk(self, p1, p2, split_normal):
        """Collect crossed triangles and the right/left chains from p1 to p2."""
        mesh = self.mesh
        xy = mesh.xy
        start = self._start_triangle(p1, p2, split_normal)
        if start is None:
            return None
        cell, (right_v, left_v) = start
        tris = [cell]
        right = [p1, right_v]
        left = [p1, left_v]
        max_steps = mesh.number_of_cells
        while len(tris) <= max_steps:
            neis = mesh.cell_edge_neighbors(cell, right_v, left_v)
            if len(neis) != 1:
                return None  # folded or degenerate mesh
            cell = neis[0]
            tris.append(cell)
            opposite = next(p for p in mesh.cell_points(cell) if p != right_v and p != left_v)
            if opposite == p2:
                right.append(p2)
                left.append(p2)
                return tris, right, left
            if _plane_eval(split_normal, xy[p1], xy[opposite]) > 0.0:
                right_v = opposite
                right.append(opposite)
            else:
                left_v = opposite
                left.append(opposite)
        return None

    def recover_edge(self, p1: int, p2: int) -> bool:
        """Force edge (p1, p2) into the mesh. Returns False (mesh untouched) on failure."""
        mesh = self.mesh
        xy = mesh.xy
        if p1 == p2:
            return False
        x_p1 = xy[p1]; x_p2 = xy[p2]
        # split plane through (p1, p2), perpendicular to the triangulation plane
        split_normal, length = normalize2d((x_p2[1] - x_p1[1], -(x_p2[0] - x_p1[0])))
        if length == 0.0:
            return False  # coincident points

        walked = self._walk(p1, p2, split_normal)
        if walked is None:
            logger.debug("walk from %d to %d failed", p1, p2)
            return False
        tris, right, left = walked

        poly_edges = set()
        for chain in (right, left):
            n = len(chain)
            for i in range(n):
                a, b = chain[i], chain[(i + 1) % n]
                poly_edges.add((min(a, b), max(a, b)))

        new_tris = []
        for chain in (left, right):
            ok, local = bounded_triangulate([xy[p] for p in chain], self.tolerance)
            if not ok:
                logger.debug("cavity polygon %s could not be triangulated", chain)
                return False
            new_tris.extend((chain[a], chain[b], chain[c]) for a, b, c in local)
        if len(new_tris) != len(tris):
            logger.debug("cavity retriangulation size mismatch (%d vs %d)", len(new_tris), len(tris))
            return False

        # replace the crossed triangles in place
        suspects = []
        for cell, pts in zip(tris, new_tris):
            mesh.remove_cell_reference(cell)
            for p in pts:
                mesh.resize_cell_list(p, 1)
            mesh.replace_linked_cell(cell, pts)
            for e in range(3):
                ep1 = pts[e]; ep2 = pts[(e + 1) % 3]; ep3 = pts[(e + 2) % 3]
                if (self.source.is_edge(ep1, ep2) or self.source.is_edge(ep2, ep3)
                        or self.source.is_edge(ep3, ep1)):
                    continue
                if (min(ep1, ep2), max(ep1, ep2)) not in poly_edges:
                    suspects.append((cell, ep1, ep2, ep3))

        for cell, ep1, ep2, ep3 in suspects:
            if self.legalizer.check_edge(ep3, ep1, ep2, cell, recursive=False):
                break  # a flip invalidates the remaining (cell, edge) records
        return True
