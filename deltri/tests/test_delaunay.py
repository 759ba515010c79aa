"""End-to-end tests for the incremental Delaunay triangulator."""
import math

import numpy as np
import pytest

from deltri import (
    Delaunay2D, Delaunay2DConfig, NonManifoldEdgeError, ProjectionPlaneMode,
    check_triangulation, delaunay_2d, delaunay_violations,
)
from deltri.core.conformity import edge_use_counts
from deltri.core.delaunay import CoprimeTraversal, bounding_triangles
from deltri.core.geometry import polygon_signed_area, triangles_signed_areas
from deltri.core.mesh import TriangleMesh
from deltri.core.regions import DISCARD, KEEP
from deltri.core.stats import TriangulationStats

SQUARE = np.array([[0, 0], [1, 0], [1, 1], [0, 1]], dtype=float)


def _ring_and_cloud(n_ring=16, n_inner=40, seed=0):
    """Points on a circle of radius 0.5 around random points strictly inside it."""
    rng = np.random.default_rng(seed)
    t = 0.1 + np.linspace(0.0, 2.0 * np.pi, n_ring, endpoint=False)
    ring = np.column_stack([0.5 + 0.5 * np.cos(t), 0.5 + 0.5 * np.sin(t)])
    r = 0.4 * np.sqrt(rng.random(n_inner))
    a = 2.0 * np.pi * rng.random(n_inner)
    inner = np.column_stack([0.5 + r * np.cos(a), 0.5 + r * np.sin(a)])
    return np.vstack([ring, inner]), ring


def _tri_set(triangles):
    return {tuple(sorted(t)) for t in np.asarray(triangles).tolist()}


# ---------------------------------------------------------------------------
# Small scenarios
# ---------------------------------------------------------------------------
def test_square_two_triangles_share_diagonal():
    result = delaunay_2d(SQUARE)
    assert result.number_of_triangles == 2
    t0, t1 = (set(t) for t in result.triangles.tolist())
    assert len(t0 & t1) == 2
    edges, counts = edge_use_counts(result.triangles)
    use = {tuple(e): c for e, c in zip(edges.tolist(), counts.tolist())}
    for e in [(0, 1), (1, 2), (2, 3), (0, 3)]:
        assert use[e] == 1
    assert result.points.shape == (4, 3)


def test_square_with_center_gives_four_delaunay_triangles():
    pts = np.vstack([SQUARE, [[0.5, 0.5]]])
    result = delaunay_2d(pts)
    assert result.number_of_triangles == 4
    assert all(4 in t for t in result.triangles.tolist())
    assert delaunay_violations(result.points, result.triangles) == []


def test_duplicate_point_is_skipped():
    single = delaunay_2d(SQUARE)
    twice = delaunay_2d(np.vstack([SQUARE, [[0.0, 0.0]]]))
    assert twice.stats.duplicate_points == 1
    np.testing.assert_array_equal(twice.triangles, single.triangles)


def test_two_far_points_with_alpha_are_isolated_vertices():
    result = delaunay_2d([[0.0, 0.0], [100.0, 0.0]], alpha=1.0)
    assert result.number_of_triangles == 0
    assert len(result.lines) == 0
    np.testing.assert_array_equal(result.verts, [0, 1])


def test_too_few_points_without_alpha_is_empty():
    result = delaunay_2d([[0.0, 0.0], [1.0, 0.0]])
    assert result.is_empty()
    assert delaunay_2d([[1.0, 1.0]] * 5).is_empty()


def test_three_far_points_with_alpha():
    result = delaunay_2d([[0, 0], [100, 0], [0, 100]], alpha=1.0)
    assert result.number_of_triangles == 0
    assert len(result.lines) == 0
    np.testing.assert_array_equal(result.verts, [0, 1, 2])


# ---------------------------------------------------------------------------
# Properties on larger inputs
# ---------------------------------------------------------------------------
def test_delaunay_property_and_closure():
    pts, ring = _ring_and_cloud()
    result = delaunay_2d(pts)
    assert delaunay_violations(result.points, result.triangles) == []
    ok, msgs = check_triangulation(result.points, result.triangles)
    assert ok, msgs
    _, counts = edge_use_counts(result.triangles)
    assert set(counts.tolist()) <= {1, 2}
    # convex position ring: every ring point is a hull vertex
    assert result.number_of_triangles == 2 * len(pts) - len(ring) - 2
    areas = triangles_signed_areas(result.points, result.triangles)
    assert np.all(areas > 0)
    assert areas.sum() == pytest.approx(polygon_signed_area(ring))


def test_random_insertion_order_gives_same_triangulation():
    pts, _ = _ring_and_cloud(seed=1)
    sequential = delaunay_2d(pts)
    scrambled = delaunay_2d(pts, random_point_insertion=True)
    assert _tri_set(scrambled.triangles) == _tri_set(sequential.triangles)


def test_duplicate_handling_is_idempotent():
    pts, _ = _ring_and_cloud(seed=2)
    base = delaunay_2d(pts)
    doubled = delaunay_2d(np.vstack([pts, pts[7:8]]))
    assert doubled.stats.duplicate_points == 1
    assert _tri_set(doubled.triangles) == _tri_set(base.triangles)


def test_alpha_monotonicity():
    rng = np.random.default_rng(5)
    pts = rng.random((150, 2))
    counts = [delaunay_2d(pts, alpha=a).number_of_triangles for a in (10.0, 0.5, 0.1, 0.05, 0.02)]
    assert all(a >= b for a, b in zip(counts, counts[1:]))
    assert counts[0] > counts[-1]


def test_alpha_shape_of_grid_and_outliers():
    grid = [(x, y) for y in range(5) for x in range(5)]
    pts = np.array(grid + [(20.0, 2.0), (30.0, 0.0), (30.5, 0.0)], dtype=float)
    result = delaunay_2d(pts, alpha=1.0)
    assert result.number_of_triangles == 32
    np.testing.assert_array_equal(np.sort(result.lines, axis=1), [[26, 27]])
    np.testing.assert_array_equal(result.verts, [25])


def test_keep_bounding_triangulation():
    pts, _ = _ring_and_cloud(seed=3)
    result = delaunay_2d(pts, bounding_triangulation=True)
    n = len(pts)
    assert result.points.shape == (n + 8, 3)
    assert result.triangles.max() >= n
    assert result.number_of_triangles == 2 * n + 6
    ok, msgs = check_triangulation(result.points, result.triangles)
    assert ok, msgs


def test_point_data_passes_through():
    pts, _ = _ring_and_cloud(seed=4)
    values = np.arange(len(pts), dtype=float)
    result = delaunay_2d(pts, point_data={'id': values})
    np.testing.assert_array_equal(result.point_data['id'], values)
    kept = delaunay_2d(pts, point_data={'id': values}, bounding_triangulation=True)
    assert kept.point_data == {}


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------
def test_transform_matches_plain_triangulation():
    pts, _ = _ring_and_cloud(seed=6)
    c, s = math.cos(0.5), math.sin(0.5)
    mat = np.array([[c, -s, 0, 3.0], [s, c, 0, -1.0], [0, 0, 1, 0], [0, 0, 0, 1]])
    plain = delaunay_2d(pts)
    moved = delaunay_2d(pts, transform=mat)
    assert _tri_set(moved.triangles) == _tri_set(plain.triangles)
    np.testing.assert_allclose(moved.points[:, :2], pts)


def test_best_fitting_plane_on_tilted_points():
    from scipy.spatial.transform import Rotation
    pts, _ = _ring_and_cloud(seed=7)
    plain = delaunay_2d(pts)
    pts3 = np.column_stack([pts, np.zeros(len(pts))])
    tilted = Rotation.from_euler('xyz', [35, 20, 10], degrees=True).apply(pts3) + [1.0, 2.0, 3.0]
    result = delaunay_2d(tilted, projection_plane_mode=ProjectionPlaneMode.BEST_FITTING_PLANE)
    assert _tri_set(result.triangles) == _tri_set(plain.triangles)
    np.testing.assert_allclose(result.points, tilted)


def test_bounding_triangulation_dropped_with_transform():
    pts, _ = _ring_and_cloud(seed=8)
    result = delaunay_2d(pts, bounding_triangulation=True, transform=np.eye(4))
    assert result.points.shape == (len(pts), 3)
    assert result.triangles.max() < len(pts)


def test_map_back_points_through_fitted_plane():
    from scipy.spatial.transform import Rotation
    pts, _ = _ring_and_cloud(seed=7)
    pts3 = np.column_stack([pts, np.zeros(len(pts))])
    tilted = Rotation.from_euler('xyz', [35, 20, 10], degrees=True).apply(pts3) + [1.0, 2.0, 3.0]
    raw = delaunay_2d(tilted, projection_plane_mode=ProjectionPlaneMode.BEST_FITTING_PLANE)
    mapped = delaunay_2d(tilted, projection_plane_mode=ProjectionPlaneMode.BEST_FITTING_PLANE,
                         map_back_points=True)
    assert _tri_set(mapped.triangles) == _tri_set(raw.triangles)
    np.testing.assert_allclose(mapped.points, tilted, atol=1e-9)


def test_bounding_triangulation_kept_with_transform_when_mapped_back():
    pts, _ = _ring_and_cloud(seed=8)
    mat = np.eye(4)
    mat[:3, 3] = [3.0, -1.0, 0.0]
    plain = delaunay_2d(pts, bounding_triangulation=True)
    moved = delaunay_2d(pts, bounding_triangulation=True, transform=mat, map_back_points=True)
    assert moved.points.shape == (len(pts) + 8, 3)
    np.testing.assert_allclose(moved.points, plain.points, atol=1e-9)
    assert _tri_set(moved.triangles) == _tri_set(plain.triangles)


# ---------------------------------------------------------------------------
# Progress / configuration
# ---------------------------------------------------------------------------
def test_progress_callback_abort():
    pts, _ = _ring_and_cloud(seed=9)
    seen = []

    def progress(fraction):
        seen.append(fraction)
        return True

    result = delaunay_2d(pts, progress=progress)
    assert result.aborted
    assert seen == [0.0]
    assert result.stats.points_inserted == 1


def test_progress_interval():
    pts, _ = _ring_and_cloud(seed=9)
    seen = []
    result = delaunay_2d(pts, progress=lambda f: seen.append(f) or False, progress_interval=10)
    assert not result.aborted
    assert len(seen) == math.ceil(len(pts) / 10)
    assert seen == sorted(seen)


@pytest.mark.parametrize("kwargs", [
    {'alpha': -1.0},
    {'tolerance': -1e-3},
    {'offset': 0.5},
    {'progress_interval': 0},
    {'transform': np.eye(3)},
])
def test_invalid_config(kwargs):
    with pytest.raises(ValueError):
        Delaunay2D(**kwargs)


def test_config_object_and_mode_coercion():
    cfg = Delaunay2DConfig(projection_plane_mode='best_fit')
    tri = Delaunay2D(cfg)
    assert tri.config.projection_plane_mode is ProjectionPlaneMode.BEST_FITTING_PLANE
    assert not tri.config.keeps_bounding_triangulation


def test_stats_reset_between_runs():
    tri = Delaunay2D()
    tri.execute(np.vstack([SQUARE, SQUARE[:1]]))
    assert tri.stats.duplicate_points == 1
    result = tri.execute(SQUARE)
    assert result.stats.duplicate_points == 0
    assert result.stats.points_inserted == 4


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def test_coprime_traversal_is_permutation():
    for n in (1, 2, 3, 10, 12, 97, 100):
        order = list(CoprimeTraversal(n))
        assert sorted(order) == list(range(n))


def test_bounding_triangles_cover_octagon():
    angles = np.radians(45.0 * np.arange(8))
    pts = np.column_stack([np.cos(angles), np.sin(angles)])
    tris = np.array(bounding_triangles(0))
    areas = triangles_signed_areas(pts, tris)
    assert np.all(areas > 0)
    assert areas.sum() == pytest.approx(polygon_signed_area(pts))


def _orphan_mesh(closed=True):
    """Input point 3 only touches triangles marked DISCARD; 4..6 act as bounding points."""
    pts = np.array([[0, 0], [2, 0], [1, 1], [1, -0.5], [1, -3], [-2, -1], [4, -1]], dtype=float)
    tris = [(0, 1, 2), (3, 1, 0), (3, 0, 4), (3, 4, 1)]
    if closed:
        tris += [(0, 5, 4), (4, 6, 1)]
    mesh = TriangleMesh(pts, tris)
    tri_use = np.full(mesh.number_of_cells, DISCARD, dtype=np.int8)
    tri_use[0] = KEEP
    return mesh, tri_use


def test_reconnect_orphan_point():
    mesh, tri_use = _orphan_mesh()
    stats = TriangulationStats()
    Delaunay2D._reconnect_orphans(mesh, tri_use, 4, stats)
    assert stats.swaps == 3
    kept = mesh.triangles_array(tri_use == KEEP)
    assert any(3 in t for t in kept.tolist())
    assert np.all(triangles_signed_areas(mesh.points, mesh.triangles_array()) > 0)
    ok, msgs = check_triangulation(mesh.points, mesh.triangles_array())
    assert ok, msgs


def test_reconnect_orphan_open_edge_raises():
    mesh, tri_use = _orphan_mesh(closed=False)
    with pytest.raises(NonManifoldEdgeError):
        Delaunay2D._reconnect_orphans(mesh, tri_use, 4, TriangulationStats())
