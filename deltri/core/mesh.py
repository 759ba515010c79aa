"""Indexed triangle mesh with point-to-triangle links.

Triangles live in an arena addressed by stable integer ids; a parallel
per-point list records which triangle ids reference each point. All
topological queries (edge neighbors, edge existence) are answered from these
links, so every mutation must keep them consistent before the next query.

Example:
    >>> mesh = TriangleMesh(points, [(0, 1, 2), (0, 2, 3)])
    >>> mesh.cell_edge_neighbors(0, 0, 2)
    [1]
    >>> mesh.is_edge(1, 3)
    False
"""
from __future__ import annotations
import numpy as np
from typing import Iterable, List, Optional, Sequence, Tuple

__all__ = ['TriangleMesh']


class TriangleMesh:
    """Triangle soup plus point -> triangle adjacency ("links").

    Parameters
    ----------
    points : (N, 2) or (N, 3) array-like
        Working coordinates. Only x and y are used by the in-plane tests.
    triangles : iterable of (a, b, c), optional
        Initial triangles; their links are built immediately.
    """

    def __init__(self, points, triangles: Optional[Iterable[Sequence[int]]] = None):
        pts = np.asarray(points, dtype=np.float64)
        if pts.ndim != 2 or pts.shape[1] not in (2, 3):
            raise ValueError(f"points must be (N, 2) or (N, 3), got shape {pts.shape}")
        if pts.shape[1] == 2:
            pts = np.column_stack([pts, np.zeros(len(pts))])
        self.points = pts
        # Plain lists for the hot loops of locate/legalize
        self.xy: List[Tuple[float, float]] = [(float(p[0]), float(p[1])) for p in pts]
        self._cells: List[List[int]] = []
        self._links: List[List[int]] = [[] for _ in range(len(pts))]
        if triangles is not None:
            for tri in triangles:
                self.insert_linked_cell(tri)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def number_of_points(self) -> int:
        return len(self._links)

    @property
    def number_of_cells(self) -> int:
        return len(self._cells)

    def cell_points(self, cell_id: int) -> Tuple[int, int, int]:
        c = self._cells[cell_id]
        return c[0], c[1], c[2]

    def point_cells(self, pt_id: int) -> List[int]:
        """Triangle ids referencing pt_id (a copy, safe to iterate while editing)."""
        return list(self._links[pt_id])

    def cell_edge_neighbors(self, cell_id: int, p1: int, p2: int) -> List[int]:
        """Triangles other than cell_id that use both p1 and p2.

        Pass cell_id=-1 to get every triangle using the edge.
        """
        cells = self._cells
        return [c for c in self._links[p1] if c != cell_id and p2 in cells[c]]

    def is_edge(self, p1: int, p2: int) -> bool:
        cells = self._cells
        return any(p2 in cells[c] for c in self._links[p1])

    def triangles_array(self, mask: Optional[Sequence] = None) -> np.ndarray:
        """(M,3) int array of the cells, optionally restricted to truthy mask entries."""
        if mask is None:
            rows = self._cells
        else:
            rows = [c for c, keep in zip(self._cells, mask) if keep]
        if not rows:
            return np.empty((0, 3), dtype=np.int64)
        return np.asarray(rows, dtype=np.int64)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def insert_linked_cell(self, pts: Sequence[int]) -> int:
        """Append a triangle and reference it from its three points. Returns its id."""
        cell_id = len(self._cells)
        a, b, c = (int(p) for p in pts)
        self._cells.append([a, b, c])
        self._links[a].append(cell_id)
        self._links[b].append(cell_id)
        self._links[c].append(cell_id)
        return cell_id

    def replace_cell(self, cell_id: int, pts: Sequence[int]) -> None:
        """Overwrite a triangle's points. Links are NOT touched."""
        a, b, c = (int(p) for p in pts)
        self._cells[cell_id] = [a, b, c]

    def replace_linked_cell(self, cell_id: int, pts: Sequence[int]) -> None:
        """Overwrite a triangle's points and reference it from the new points.

        Call remove_cell_reference() first to drop the stale references.
        """
        self.replace_cell(cell_id, pts)
        for p in self._cells[cell_id]:
            self._links[p].append(cell_id)

    def remove_cell_reference(self, cell_id: int) -> None:
        """Drop cell_id from the links of all three of its points."""
        for p in self._cells[cell_id]:
            self.remove_reference_to_cell(p, cell_id)

    def remove_reference_to_cell(self, pt_id: int, cell_id: int) -> None:
        links = self._links[pt_id]
        if cell_id in links:
            links.remove(cell_id)

    def add_reference_to_cell(self, pt_id: int, cell_id: int) -> None:
        self._links[pt_id].append(cell_id)

    def resize_cell_list(self, pt_id: int, extra: int) -> None:
        """Reserve room for `extra` more references of pt_id.

        Python lists grow on demand, so this only grows the link table when
        pt_id is beyond the known points.
        """
        if pt_id >= len(self._links):
            self._links.extend([] for _ in range(pt_id + 1 - len(self._links)))

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"TriangleMesh(points={self.number_of_points}, cells={self.number_of_cells})"
