"""Triangulation of simple polygons for local retriangulation.

Used by constraint recovery to refill the two cavities on either side of a
recovered edge. Ear clipping picks the best shaped ear at every step; the
result is only accepted when it covers the polygon exactly (triangle count
n-2 and area sum equal to the polygon area within tolerance).
"""
from __future__ import annotations
import math
import numpy as np

from .constants import EPS_COLINEAR, EPS_DENOMINATOR
from .geometry import orient, polygon_signed_area
from .logging_utils import get_logger

logger = get_logger('deltri.triangulation')

__all__ = [
    'ear_clip_triangulation',
    'bounded_triangulate',
    'polygon_has_self_intersections',
    'point_in_triangle',
]


def point_in_triangle(pt, a, b, c) -> bool:
    """Closed barycentric containment test (points on edges count as inside)."""
    v0 = (c[0] - a[0], c[1] - a[1]); v1 = (b[0] - a[0], b[1] - a[1])
    v2 = (pt[0] - a[0], pt[1] - a[1])
    den = v0[0]*v1[1] - v1[0]*v0[1]
    if abs(den) < EPS_DENOMINATOR:
        return False
    u = (v2[0]*v1[1] - v1[0]*v2[1]) / den
    v = (v0[0]*v2[1] - v2[0]*v0[1]) / den
    return (u >= 0) and (v >= 0) and (u + v <= 1)


def polygon_has_self_intersections(polygon) -> bool:
    """Return True if polygon (sequence of (x,y)) contains any pair of crossing non-adjacent edges."""
    n = len(polygon)
    if n < 4:
        return False
    pts = [(float(p[0]), float(p[1])) for p in polygon]

    def seg_inter(a, b, c, d):
        if a == c or a == d or b == c or b == d:
            return False
        o1 = orient(a, b, c); o2 = orient(a, b, d); o3 = orient(c, d, a); o4 = orient(c, d, b)
        if o1 == 0 and o2 == 0 and o3 == 0 and o4 == 0:
            return False
        return (o1*o2 < 0) and (o3*o4 < 0)

    for i in range(n):
        a = pts[i]; b = pts[(i+1) % n]
        for j in range(i+2, n):
            if i == 0 and j == n - 1:
                continue  # adjacent through the closing edge
            if seg_inter(a, b, pts[j], pts[(j+1) % n]):
                return True
    return False


def _ear_quality(a, b, c) -> float:
    """Normalized shape measure in (0, 1]; 1 for an equilateral triangle."""
    area2 = abs(orient(a, b, c))
    s = ((b[0]-a[0])**2 + (b[1]-a[1])**2 + (c[0]-b[0])**2 + (c[1]-b[1])**2
         + (a[0]-c[0])**2 + (a[1]-c[1])**2)
    if s == 0.0:
        return 0.0
    return 2.0 * math.sqrt(3.0) * area2 / s


def ear_clip_triangulation(coords, eps_area: float = None):
    """Triangulate a simple polygon given as an (n,2) coordinate sequence.

    Returns a list of local index triplets (into `coords`), each counter
    clockwise. The list is shorter than n-2 when no valid ear remains
    (degenerate or colinear configurations).
    """
    pts = [(float(p[0]), float(p[1])) for p in coords]
    n = len(pts)
    if n < 3:
        return []
    if eps_area is None:
        arr = np.asarray(pts)
        diag = float(np.linalg.norm(arr.max(axis=0) - arr.min(axis=0)))
        eps_area = EPS_COLINEAR * diag * diag
    verts = list(range(n))
    if polygon_signed_area(pts) < 0:
        verts = verts[::-1]
    tris_out = []
    while len(verts) > 3:
        m = len(verts)
        best = None
        best_q = -1.0
        for i in range(m):
            prev = verts[(i-1) % m]; curr = verts[i]; nxt = verts[(i+1) % m]
            pa = pts[prev]; pb = pts[curr]; pc = pts[nxt]
            if orient(pa, pb, pc) <= eps_area:
                continue  # reflex or flat corner
            contains = False
            for v in verts:
                if v in (prev, curr, nxt):
                    continue
                pv = pts[v]
                if pv in (pa, pb, pc) or point_in_triangle(pv, pa, pb, pc):
                    contains = True
                    break
            if contains:
                continue
            q = _ear_quality(pa, pb, pc)
            if q > best_q:
                best_q = q
                best = i
        if best is None:
            logger.debug("ear clipping stalled with %d vertices left", m)
            return tris_out
        prev = verts[(best-1) % m]; curr = verts[best]; nxt = verts[(best+1) % m]
        tris_out.append((prev, curr, nxt))
        del verts[best]
    a, b, c = verts
    if orient(pts[a], pts[b], pts[c]) > eps_area:
        tris_out.append((a, b, c))
    return tris_out


def bounded_triangulate(coords, tolerance: float = 1e-5):
    """Triangulate a simple polygon and verify the result covers it.

    Returns (ok, triangles) where triangles are local index triplets. ok is
    False for self-intersecting or degenerate polygons and whenever the
    triangle areas do not add up to the polygon area within `tolerance`
    (relative).
    """
    pts = [(float(p[0]), float(p[1])) for p in coords]
    n = len(pts)
    if n < 3:
        return False, []
    if polygon_has_self_intersections(pts):
        return False, []
    poly_area = abs(polygon_signed_area(pts))
    if poly_area == 0.0:
        return False, []
    tris = ear_clip_triangulation(pts)
    if len(tris) != n - 2:
        return False, tris
    total = sum(0.5 * abs(orient(pts[a], pts[b], pts[c])) for a, b, c in tris)
    if abs(total - poly_area) > tolerance * poly_area:
        logger.debug("bounded triangulation area mismatch: %.6e vs %.6e", total, poly_area)
        return False, tris
    return True, tris
