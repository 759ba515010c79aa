"""Geometry primitives used by the triangulator.

Scalar helpers work on plain sequences (x, y[, z]) because they sit in the
inner loops of point location and edge legalization; the vectorized helpers
accept (N,2)/(N,3) numpy arrays.
"""
from __future__ import annotations
import math
import numpy as np

from .constants import INCIRCLE_FACTOR

__all__ = [
    'orient', 'circumcircle', 'in_circle', 'normalize2d', 'triangle_normal',
    'project_triangle_to_2d', 'triangle_circumradius2', 'triangles_circumcircles',
    'polygon_signed_area', 'triangles_signed_areas', 'normalize_edge',
]


def orient(a, b, c):
    """2D orientation (signed area * 2) for points a,b,c.

    Returns a positive value when (a,b,c) are counter-clockwise, negative when clockwise,
    and zero when colinear.
    """
    return (b[0]-a[0])*(c[1]-a[1]) - (b[1]-a[1])*(c[0]-a[0])


def normalize2d(v):
    """Return (unit vector, original length). A zero vector is returned unchanged."""
    den = math.hypot(v[0], v[1])
    if den != 0.0:
        return (v[0] / den, v[1] / den), den
    return (v[0], v[1]), den


def circumcircle(x1, x2, x3):
    """Circumcircle of a triangle in the x-y plane.

    Returns (radius2, (cx, cy)). A degenerate (colinear) triangle yields an
    infinite radius and the origin as center.
    """
    bx = x2[0] - x1[0]; by = x2[1] - x1[1]
    cx = x3[0] - x1[0]; cy = x3[1] - x1[1]
    d = 2.0 * (bx*cy - by*cx)
    if d == 0.0:
        return math.inf, (0.0, 0.0)
    b2 = bx*bx + by*by
    c2 = cx*cx + cy*cy
    ux = (cy*b2 - by*c2) / d
    uy = (bx*c2 - cx*b2) / d
    return ux*ux + uy*uy, (x1[0] + ux, x1[1] + uy)


def in_circle(x, x1, x2, x3, bounding_radius2=math.inf):
    """True when x lies inside the circumcircle of (x1, x2, x3).

    Circles larger than bounding_radius2 come from near-degenerate triangles
    and always report inside. The comparison is slightly tightened so that
    cocircular configurations resolve to "outside".
    """
    radius2, center = circumcircle(x1, x2, x3)
    if radius2 > bounding_radius2:
        return True
    dx = x[0] - center[0]; dy = x[1] - center[1]
    return (dx*dx + dy*dy) < INCIRCLE_FACTOR * radius2


def triangle_normal(p0, p1, p2):
    """Unit normal of a 3D triangle (zero vector when degenerate)."""
    p0 = np.asarray(p0, dtype=np.float64); p1 = np.asarray(p1, dtype=np.float64)
    p2 = np.asarray(p2, dtype=np.float64)
    n = np.cross(p1 - p0, p2 - p0)
    length = np.linalg.norm(n)
    if length == 0.0:
        return n
    return n / length


def project_triangle_to_2d(x1, x2, x3):
    """Express a 3D triangle in its own plane.

    x1 maps to the origin, x2 onto the positive local x axis and x3 into the
    upper half plane. Lengths and angles are preserved.
    """
    x1 = np.asarray(x1, dtype=np.float64)
    v21 = np.asarray(x2, dtype=np.float64) - x1
    v31 = np.asarray(x3, dtype=np.float64) - x1
    len21 = np.linalg.norm(v21)
    if len21 == 0.0:
        return (0.0, 0.0), (0.0, 0.0), (float(np.linalg.norm(v31)), 0.0)
    e1 = v21 / len21
    along = float(np.dot(v31, e1))
    across = float(np.linalg.norm(v31 - along * e1))
    return (0.0, 0.0), (float(len21), 0.0), (along, across)


def triangle_circumradius2(x1, x2, x3):
    """Squared circumradius of a (possibly 3D) triangle measured in its own plane."""
    a, b, c = project_triangle_to_2d(x1, x2, x3)
    return circumcircle(a, b, c)[0]


def triangles_circumcircles(points, tris):
    """Vectorized x-y circumcircles for a batch of triangles.

    points: (N,2+) float array
    tris:   (M,3) int array
    Returns (centers (M,2), radius2 (M,)); degenerate rows get radius2 = inf.
    """
    pts = np.asarray(points, dtype=np.float64)
    T = np.asarray(tris, dtype=np.int64)
    if T.size == 0:
        return np.empty((0, 2)), np.empty((0,))
    a = pts[T[:, 0], :2]; b = pts[T[:, 1], :2] - a; c = pts[T[:, 2], :2] - a
    d = 2.0 * (b[:, 0]*c[:, 1] - b[:, 1]*c[:, 0])
    b2 = np.sum(b*b, axis=1); c2 = np.sum(c*c, axis=1)
    with np.errstate(divide='ignore', invalid='ignore'):
        ux = (c[:, 1]*b2 - b[:, 1]*c2) / d
        uy = (b[:, 0]*c2 - c[:, 0]*b2) / d
    r2 = ux*ux + uy*uy
    degenerate = d == 0.0
    r2[degenerate] = np.inf
    centers = a + np.column_stack((ux, uy))
    centers[degenerate] = 0.0
    return centers, r2


def polygon_signed_area(polygon):
    """Return signed area of polygon (sequence of (x,y)); positive if CCW."""
    arr = np.asarray(polygon, dtype=np.float64)
    if arr.shape[0] < 3:
        return 0.0
    x = arr[:, 0]; y = arr[:, 1]
    return 0.5 * (np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


def triangles_signed_areas(points, tris):
    """Vectorized signed x-y area for a batch of triangles.

    points: (N,2+) float array
    tris:   (M,3) int array
    Returns: (M,) float64 array of signed areas (0.5 * cross).
    """
    pts = np.asarray(points, dtype=np.float64)
    T = np.asarray(tris, dtype=np.int64)
    if T.size == 0:
        return np.empty((0,), dtype=float)
    p0 = pts[T[:, 0], :2]; p1 = pts[T[:, 1], :2]; p2 = pts[T[:, 2], :2]
    u = p1 - p0; v = p2 - p0
    return 0.5 * (u[:, 0]*v[:, 1] - u[:, 1]*v[:, 0])


def normalize_edge(u, v):
    """Return a normalized edge representation as (min, max)."""
    return (min(u, v), max(u, v))
