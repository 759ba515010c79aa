"""Incremental 2D Delaunay triangulation driver.

Steps for one request:
  1. Bring the points into the x-y plane (optional transform / plane fit).
  2. Seed a bounding triangulation: eight points on a circle around the
     bounds, six triangles.
  3. Insert every input point: locate its triangle (or edge), split, and
     legalize the new edges by flipping.
  4. Optionally recover constraint edges and classify inside/outside.
  5. Drop triangles touching the bounding points, apply the alpha filter.
  6. Reconnect input points that only touched dropped triangles.
  7. Assemble the output primitives.
"""
from __future__ import annotations
import math
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Optional

import numpy as np

from .alpha import alpha_filter
from .config import Delaunay2DConfig, ProjectionPlaneMode
from .constants import BOUNDING_RADIUS_FACTOR, NUM_BOUNDING_POINTS
from .constraints import ConstraintRecoverer, ConstraintSet
from .geometry import triangle_normal
from .legalize import Legalizer
from .locator import PointLocator
from .logging_utils import get_logger
from .mesh import TriangleMesh
from .projection import PlaneProjector, bounds_length
from .regions import DISCARD, KEEP, fill_polygons
from .stats import TriangulationStats

logger = get_logger('deltri.delaunay')

__all__ = [
    'NonManifoldEdgeError', 'TriangulationResult', 'CoprimeTraversal',
    'Delaunay2D', 'delaunay_2d', 'bounding_triangles',
]

ProgressCallback = Callable[[float], bool]


class NonManifoldEdgeError(RuntimeError):
    """An edge expected to have exactly one neighbor triangle has zero or several."""


@dataclass
class TriangulationResult:
    """Output primitives of a triangulation request.

    Attributes
    ----------
    points : (K, 3) float array
        Output coordinates (input points, or input + bounding points when the
        bounding triangulation is kept).
    triangles : (M, 3) int array
    lines : (L, 2) int array
        Standalone edges produced by the alpha filter.
    verts : (V,) int array
        Isolated vertices produced by the alpha filter.
    point_data : dict
        Per-point attributes passed through from the input.
    stats : TriangulationStats
    aborted : bool
        True when a progress callback cancelled the insertion loop.
    """
    points: np.ndarray
    triangles: np.ndarray
    lines: np.ndarray = field(default_factory=lambda: np.empty((0, 2), dtype=np.int64))
    verts: np.ndarray = field(default_factory=lambda: np.empty((0,), dtype=np.int64))
    point_data: Dict[str, Any] = field(default_factory=dict)
    stats: TriangulationStats = field(default_factory=TriangulationStats)
    aborted: bool = False

    @property
    def number_of_triangles(self) -> int:
        return int(len(self.triangles))

    def is_empty(self) -> bool:
        return len(self.triangles) == 0 and len(self.lines) == 0 and len(self.verts) == 0

    def edges(self) -> set:
        """Set of undirected triangle edges as (min, max) tuples."""
        out = set()
        for a, b, c in self.triangles.tolist():
            out.update({(min(a, b), max(a, b)), (min(b, c), max(b, c)), (min(c, a), max(c, a))})
        return out


class CoprimeTraversal:
    """Visit 0..n-1 exactly once in scrambled order: id = (prime * idx + offset) % n.

    `prime` is the first integer above n/2 coprime with n, so the map is a
    permutation; no shuffle buffer is needed.
    """

    def __init__(self, npts: int):
        self.npts = npts
        self.offset = npts // 2
        self.prime = self.offset + 1
        while math.gcd(self.prime, npts) != 1:
            self.prime += 1

    def point_id(self, idx: int) -> int:
        return (self.prime * idx + self.offset) % self.npts

    def __iter__(self):
        return (self.point_id(i) for i in range(self.npts))

    def __len__(self) -> int:
        return self.npts


def bounding_triangles(first: int):
    """Six triangles over the eight bounding points first..first+7."""
    b = [first + k for k in range(NUM_BOUNDING_POINTS)]
    return [
        (b[0], b[1], b[2]), (b[2], b[3], b[4]), (b[4], b[5], b[6]),
        (b[6], b[7], b[0]), (b[0], b[2], b[6]), (b[2], b[4], b[6]),
    ]


def _as_points3(points) -> np.ndarray:
    pts = np.asarray(points, dtype=np.float64)
    if pts.size == 0:
        return np.empty((0, 3))
    if pts.ndim != 2 or pts.shape[1] not in (2, 3):
        raise ValueError(f"points must be (N, 2) or (N, 3), got shape {pts.shape}")
    if pts.shape[1] == 2:
        pts = np.column_stack([pts, np.zeros(len(pts))])
    return pts


class Delaunay2D:
    """2D Delaunay triangulator with constraint recovery and alpha shapes.

    Example
    -------
        >>> tri = Delaunay2D(alpha=0.0, random_point_insertion=True)
        >>> result = tri.execute(points, source=ConstraintSet(polys=[[0, 1, 2, 3]]))
        >>> result.triangles.shape
    """

    def __init__(self, config: Optional[Delaunay2DConfig] = None, **overrides):
        cfg = config if config is not None else Delaunay2DConfig()
        if overrides:
            cfg = replace(cfg, **overrides)
        self.config = cfg.validate()
        self.stats = TriangulationStats()
        self.mesh: Optional[TriangleMesh] = None

    # ------------------------------------------------------------------
    def execute(self, points, source=None, point_data: Optional[Dict[str, Any]] = None,
                progress: Optional[ProgressCallback] = None) -> TriangulationResult:
        cfg = self.config
        stats = self.stats = TriangulationStats()
        t0 = time.perf_counter()
        in_pts = _as_points3(points)
        num_points = len(in_pts)
        point_data = dict(point_data or {})
        source = self._as_constraints(source, num_points)

        if num_points <= 2:
            logger.debug("Cannot triangulate; need at least 3 input points")
            return self._empty_result(in_pts, point_data, stats)
        length = bounds_length(in_pts)
        if length == 0.0:
            logger.debug("Cannot triangulate; all input points coincide")
            return self._empty_result(in_pts, point_data, stats)

        keep_bounding = cfg.keeps_bounding_triangulation
        projector = None
        if cfg.transform is not None:
            projector = PlaneProjector(cfg.transform)
        elif cfg.projection_plane_mode == ProjectionPlaneMode.BEST_FITTING_PLANE:
            projector = PlaneProjector.fit(in_pts)
        work = projector.forward(in_pts) if projector is not None else in_pts.copy()

        mesh, bounding_radius2 = self._bounding_mesh(work, length)
        self.mesh = mesh
        tol = length * cfg.tolerance

        aborted = self._insert_points(mesh, num_points, tol, bounding_radius2, stats, progress)
        logger.debug("Triangulated %d points, %d of which were duplicates",
                     num_points, stats.duplicate_points)
        if stats.degeneracies > 0:
            logger.debug("%d degenerate triangles encountered, mesh quality suspect",
                         stats.degeneracies)

        if source:
            legalizer = Legalizer(mesh, bounding_radius2, stats)
            ConstraintRecoverer(mesh, source, legalizer, cfg.tolerance, stats).recover_boundary()
        tri_use = np.full(mesh.number_of_cells, KEEP, dtype=np.int8)
        if source and source.polys:
            fill_polygons(mesh, source.polys, tri_use, stats)

        if not keep_bounding:
            for pt_id in range(num_points, num_points + NUM_BOUNDING_POINTS):
                tri_use[mesh.point_cells(pt_id)] = DISCARD

        lines = np.empty((0, 2), dtype=np.int64)
        verts = np.empty((0,), dtype=np.int64)
        if cfg.alpha > 0.0:
            lines, verts = alpha_filter(mesh, tri_use, cfg.alpha, num_points,
                                        input_points=in_pts, keep_bounding=keep_bounding)

        if not keep_bounding and cfg.alpha == 0.0 and not source:
            self._reconnect_orphans(mesh, tri_use, num_points, stats)

        if keep_bounding:
            out_points = projector.inverse(mesh.points) if projector is not None else mesh.points.copy()
            out_data = {}
        elif projector is not None and cfg.map_back_points:
            out_points = projector.inverse(mesh.points[:num_points])
            out_data = point_data
        else:
            out_points = in_pts
            out_data = point_data
        if cfg.alpha <= 0.0 and keep_bounding and not source:
            triangles = mesh.triangles_array()
        else:
            triangles = mesh.triangles_array(tri_use == KEEP)

        stats.time_total = time.perf_counter() - t0
        return TriangulationResult(out_points, triangles, lines, verts, out_data, stats, aborted)

    # ------------------------------------------------------------------
    def _as_constraints(self, source, num_points) -> Optional[ConstraintSet]:
        if source is None:
            return None
        if not isinstance(source, ConstraintSet):
            source = ConstraintSet(**dict(source))
        if not source:
            return None
        max_id = source.max_point_id()
        if max_id >= num_points:
            raise ValueError(f"constraint references point {max_id} but only {num_points} points given")
        min_id = source.min_point_id()
        if min_id < 0:
            raise ValueError(f"constraint references point {min_id}; point ids must be >= 0")
        return source

    def _empty_result(self, in_pts, point_data, stats) -> TriangulationResult:
        verts = np.empty((0,), dtype=np.int64)
        if self.config.alpha > 0.0:
            # without any triangle every point is an isolated alpha feature
            verts = np.arange(len(in_pts), dtype=np.int64)
        return TriangulationResult(in_pts, np.empty((0, 3), dtype=np.int64),
                                   verts=verts, point_data=point_data, stats=stats)

    def _bounding_mesh(self, work, length):
        """Working mesh = input points + eight bounding points, six triangles."""
        lo = work.min(axis=0); hi = work.max(axis=0)
        center = 0.5 * (lo + hi)
        radius = self.config.offset * length
        bounding_radius2 = BOUNDING_RADIUS_FACTOR * radius * radius
        angles = np.radians(45.0 * np.arange(NUM_BOUNDING_POINTS))
        bpts = np.column_stack([
            center[0] + radius * np.cos(angles),
            center[1] + radius * np.sin(angles),
            np.full(NUM_BOUNDING_POINTS, center[2]),
        ])
        all_pts = np.vstack([work, bpts])
        mesh = TriangleMesh(all_pts, bounding_triangles(len(work)))
        return mesh, bounding_radius2

    def _insert_points(self, mesh, num_points, tol, bounding_radius2, stats, progress) -> bool:
        locator = PointLocator(mesh, stats)
        legalizer = Legalizer(mesh, bounding_radius2, stats)
        traversal = CoprimeTraversal(num_points)
        interval = self.config.progress_interval
        tri = 0
        for idx in range(num_points):
            pt_id = traversal.point_id(idx) if self.config.random_point_insertion else idx
            loc = locator.find_triangle(mesh.xy[pt_id], tri, tol)
            if loc is None:
                tri = 0
            elif not loc.on_edge:
                tri = loc.triangle
                self._split_triangle(mesh, legalizer, pt_id, loc)
                stats.points_inserted += 1
            elif loc.neighbor < 0:
                stats.degeneracies += 1
                tri = loc.triangle
            else:
                tri = loc.triangle
                self._split_edge(mesh, legalizer, pt_id, loc)
                stats.points_inserted += 1

            if idx % interval == 0:
                logger.debug("point #%d", pt_id)
                if progress is not None and progress(idx / num_points):
                    logger.info("Triangulation aborted after %d of %d points", idx + 1, num_points)
                    return True
        return False

    @staticmethod
    def _split_triangle(mesh, legalizer, pt_id, loc):
        """Fan the containing triangle into three around the new point."""
        tri = loc.triangle
        p0, p1, p2 = loc.pts
        mesh.remove_reference_to_cell(p2, tri)
        mesh.replace_cell(tri, (pt_id, p0, p1))
        mesh.resize_cell_list(pt_id, 1)
        mesh.add_reference_to_cell(pt_id, tri)
        t1 = mesh.insert_linked_cell((pt_id, p1, p2))
        t2 = mesh.insert_linked_cell((pt_id, p2, p0))
        legalizer.check_edge(pt_id, p0, p1, tri)
        legalizer.check_edge(pt_id, p1, p2, t1)
        legalizer.check_edge(pt_id, p2, p0, t2)

    @staticmethod
    def _split_edge(mesh, legalizer, pt_id, loc):
        """Split the two triangles sharing the edge the new point lies on into four."""
        tri = loc.triangle
        nei = loc.neighbor
        e1, e2 = loc.edge
        p2 = next(p for p in mesh.cell_points(tri) if p != e1 and p != e2)
        p1 = next(p for p in mesh.cell_points(nei) if p != e1 and p != e2)
        mesh.resize_cell_list(p1, 1)
        mesh.resize_cell_list(p2, 1)
        mesh.remove_reference_to_cell(e2, tri)
        mesh.remove_reference_to_cell(e2, nei)
        mesh.replace_cell(tri, (pt_id, p2, e1))
        mesh.replace_cell(nei, (pt_id, e1, p1))
        mesh.resize_cell_list(pt_id, 2)
        mesh.add_reference_to_cell(pt_id, tri)
        mesh.add_reference_to_cell(pt_id, nei)
        t2 = mesh.insert_linked_cell((pt_id, e2, p2))
        t3 = mesh.insert_linked_cell((pt_id, p1, e2))
        legalizer.check_edge(pt_id, p2, e1, tri)
        legalizer.check_edge(pt_id, e1, p1, nei)
        legalizer.check_edge(pt_id, e2, p2, t2)
        legalizer.check_edge(pt_id, p1, e2, t3)

    @staticmethod
    def _reconnect_orphans(mesh, tri_use, num_points, stats):
        """Swap diagonals so input points touching only dropped triangles stay in the output.

        Single pass: one swap attempt per incident triangle of each orphaned point.
        """
        pts3 = mesh.points
        for pt_id in range(num_points):
            cells = mesh.point_cells(pt_id)
            if any(tri_use[c] for c in cells):
                continue
            for tri1 in cells:
                a, b, c = mesh.cell_points(tri1)
                if a == pt_id:
                    p1, p2 = b, c
                elif b == pt_id:
                    p1, p2 = c, a
                else:
                    p1, p2 = a, b
                if p1 >= num_points and p2 >= num_points:
                    continue
                neis = mesh.cell_edge_neighbors(tri1, p1, p2)
                if len(neis) != 1:
                    raise NonManifoldEdgeError(f"Edge ({p1}, {p2}) is non-manifold")
                tri2 = neis[0]
                p3 = next(p for p in mesh.cell_points(tri2) if p != p1 and p != p2)
                new1 = (pt_id, p1, p3)
                new2 = (pt_id, p3, p2)
                n1 = triangle_normal(pts3[new1[0]], pts3[new1[1]], pts3[new1[2]])
                n2 = triangle_normal(pts3[new2[0]], pts3[new2[1]], pts3[new2[2]])
                if float(np.dot(n1, n2)) < 0.0:
                    continue  # one candidate would be upside down
                logger.debug("swap (%d, %d) and (%d, %d)", p1, p2, pt_id, p3)
                mesh.remove_reference_to_cell(p1, tri2)
                mesh.remove_reference_to_cell(p2, tri1)
                mesh.resize_cell_list(pt_id, 1)
                mesh.resize_cell_list(p3, 1)
                mesh.add_reference_to_cell(pt_id, tri2)
                mesh.add_reference_to_cell(p3, tri1)
                mesh.replace_cell(tri1, new1)
                mesh.replace_cell(tri2, new2)
                tri_use[tri1] = KEEP if (p1 < num_points and p3 < num_points) else DISCARD
                tri_use[tri2] = KEEP if (p3 < num_points and p2 < num_points) else DISCARD
                stats.swaps += 1
        if stats.swaps:
            logger.debug("reconnected orphan points with %d swaps", stats.swaps)


def delaunay_2d(points, source=None, point_data=None, progress=None, **kwargs) -> TriangulationResult:
    """Triangulate `points` in one call; keyword arguments are Delaunay2DConfig fields."""
    return Delaunay2D(**kwargs).execute(points, source=source, point_data=point_data,
                                        progress=progress)
