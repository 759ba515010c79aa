"""Structural checks on triangulation output."""
from __future__ import annotations
import numpy as np
from .geometry import triangles_signed_areas, triangles_circumcircles
from .constants import EPS_AREA, INCIRCLE_FACTOR

__all__ = [
	'build_edge_to_tri_map', 'build_vertex_to_tri_map', 'check_triangulation',
	'edge_use_counts', 'delaunay_violations',
]


def build_edge_to_tri_map(triangles):
	edge_map = {}
	for t_idx, tri in enumerate(np.asarray(triangles, dtype=np.int64).tolist()):
		for i in range(3):
			a = tri[i]; b = tri[(i+1) % 3]
			edge_map.setdefault((min(a, b), max(a, b)), set()).add(t_idx)
	return edge_map


def build_vertex_to_tri_map(triangles):
	v_map = {}
	for t_idx, tri in enumerate(np.asarray(triangles, dtype=np.int64).tolist()):
		for v in tri:
			v_map.setdefault(v, set()).add(t_idx)
	return v_map


def edge_use_counts(triangles):
	"""Unique undirected edges (E,2) and how many triangles use each (E,)."""
	tris = np.asarray(triangles, dtype=np.int64)
	if tris.size == 0:
		return np.empty((0, 2), dtype=np.int64), np.empty((0,), dtype=np.int64)
	edges = np.vstack((tris[:, [0, 1]], tris[:, [1, 2]], tris[:, [2, 0]]))
	edges.sort(axis=1)
	return np.unique(edges, axis=0, return_counts=True)


def check_triangulation(points, triangles, eps_area=EPS_AREA):
	"""Return (ok, messages) for a triangle list.

	Checks index range, near-zero x-y area, duplicate triangles and edge
	closure (every edge used by one or two triangles).
	"""
	triangles = np.ascontiguousarray(np.asarray(triangles, dtype=np.int64))
	msgs = []
	ok = True
	if triangles.size == 0:
		return False, ["No triangles."]
	points = np.ascontiguousarray(np.asarray(points, dtype=np.float64))
	npts = len(points)
	if triangles.max() >= npts or triangles.min() < 0:
		return False, ["Triangle indices out of range."]
	areas = np.abs(triangles_signed_areas(points, triangles))
	zero_mask = areas < eps_area
	if np.any(zero_mask):
		for gi in np.nonzero(zero_mask)[0][:50]:
			msgs.append(f"Triangle {int(gi)} has near-zero area ({areas[gi]:.3e}).")
		ok = False
	sorted_tris = np.sort(triangles, axis=1)
	_, tri_counts = np.unique(sorted_tris, axis=0, return_counts=True)
	if np.any(tri_counts > 1):
		msgs.append("Duplicate triangles detected.")
		ok = False
	uniq_edges, counts = edge_use_counts(triangles)
	nm_mask = counts > 2
	if np.any(nm_mask):
		for e, c in zip(uniq_edges[nm_mask][:10], counts[nm_mask][:10]):
			msgs.append(f"Non-manifold edge ({int(e[0])}, {int(e[1])}) shared by >2 triangles (count={int(c)}).")
		ok = False
	return ok, msgs


def delaunay_violations(points, triangles, skip_edges=(), factor=INCIRCLE_FACTOR):
	"""Triangles whose x-y circumcircle strictly contains another point of the mesh.

	Only points used by `triangles` are tested. Triangles having an edge in
	`skip_edges` (e.g. constraint edges) are ignored. Returns a list of
	(triangle index, point index) pairs.
	"""
	pts = np.asarray(points, dtype=np.float64)
	tris = np.asarray(triangles, dtype=np.int64)
	if tris.size == 0:
		return []
	skip = {(min(a, b), max(a, b)) for a, b in skip_edges}
	used = np.unique(tris)
	used_xy = pts[used, :2]
	centers, r2 = triangles_circumcircles(pts, tris)
	out = []
	for t_idx, tri in enumerate(tris.tolist()):
		if skip:
			edges = {(min(tri[i], tri[(i+1) % 3]), max(tri[i], tri[(i+1) % 3])) for i in range(3)}
			if edges & skip:
				continue
		if not np.isfinite(r2[t_idx]):
			continue
		d2 = np.sum((used_xy - centers[t_idx])**2, axis=1)
		inside = np.nonzero(d2 < factor * r2[t_idx])[0]
		for k in inside:
			v = int(used[k])
			if v not in tri:
				out.append((t_idx, v))
	return out
