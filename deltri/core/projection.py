"""Mapping of (possibly non-planar) point sets into the x-y plane.

A PlaneProjector holds a 4x4 homogeneous rigid transform. It is either given
by the caller or fitted to the points: the normal of their best fitting plane
is rotated onto +Z and the plane origin is moved to the coordinate origin.
"""
from __future__ import annotations
import math
import numpy as np
from scipy.spatial.transform import Rotation

from .constants import EPS_FLAT_BOUNDS
from .logging_utils import get_logger

logger = get_logger('deltri.projection')

__all__ = ['PlaneProjector', 'compute_best_fitting_plane', 'apply_transform', 'bounds_length']


def bounds_length(points) -> float:
    """Diagonal length of the axis aligned bounding box."""
    pts = np.asarray(points, dtype=np.float64)
    if pts.size == 0:
        return 0.0
    return float(np.linalg.norm(pts.max(axis=0) - pts.min(axis=0)))


def apply_transform(matrix, points) -> np.ndarray:
    """Apply a (4,4) homogeneous transform to (N,3) points."""
    pts = np.asarray(points, dtype=np.float64)
    mat = np.asarray(matrix, dtype=np.float64)
    out = pts @ mat[:3, :3].T + mat[:3, 3]
    w = pts @ mat[3, :3] + mat[3, 3]
    if not np.allclose(w, 1.0):
        out = out / w[:, None]
    return out


def compute_best_fitting_plane(points):
    """Return (origin, unit normal) of the plane best fitting `points`.

    When the bounding box is (nearly) flat along one axis that axis is used
    directly; otherwise the least-squares normal is the right singular vector
    of the centered coordinates with the smallest singular value.
    """
    pts = np.asarray(points, dtype=np.float64)
    lo = pts.min(axis=0); hi = pts.max(axis=0)
    length = float(np.linalg.norm(hi - lo))
    widths = hi - lo
    direction = 0
    w = length
    for i in range(3):
        if widths[i] < w:
            direction = i
            w = widths[i]
    if w <= length * EPS_FLAT_BOUNDS:
        normal = np.zeros(3)
        normal[direction] = 1.0
        return 0.5 * (lo + hi), normal
    origin = pts.mean(axis=0)
    centered = pts - origin
    _, s, vt = np.linalg.svd(centered, full_matrices=False)
    normal = vt[-1]
    if s.size < 3 or not np.all(np.isfinite(normal)) or np.linalg.norm(normal) == 0.0:
        logger.debug("best fitting plane degenerate; falling back to +Z normal")
        normal = np.array([0.0, 0.0, 1.0])
    return origin, normal / np.linalg.norm(normal)


def _plane_transform(origin, normal) -> np.ndarray:
    """Rotation taking `normal` onto +Z, composed after a translation of `origin` to 0."""
    zaxis = np.array([0.0, 0.0, 1.0])
    n = np.asarray(normal, dtype=np.float64)
    n = n / np.linalg.norm(n)
    axis = np.cross(n, zaxis)
    axis_len = np.linalg.norm(axis)
    angle = math.acos(float(np.clip(np.dot(zaxis, n), -1.0, 1.0)))
    if axis_len == 0.0:
        # normal already along +/-Z; a half turn about X flips -Z onto +Z
        rot = Rotation.from_rotvec([angle, 0.0, 0.0])
    else:
        rot = Rotation.from_rotvec(axis / axis_len * angle)
    mat = np.eye(4)
    mat[:3, :3] = rot.as_matrix()
    mat[:3, 3] = -mat[:3, :3] @ np.asarray(origin, dtype=np.float64)
    return mat


class PlaneProjector:
    """Rigid transform between input space and the triangulation plane."""

    def __init__(self, matrix=None):
        self.matrix = np.eye(4) if matrix is None else np.asarray(matrix, dtype=np.float64)
        if self.matrix.shape != (4, 4):
            raise ValueError(f"transform must be (4, 4), got {self.matrix.shape}")

    @classmethod
    def fit(cls, points) -> 'PlaneProjector':
        origin, normal = compute_best_fitting_plane(points)
        logger.debug("best fitting plane origin=%s normal=%s", origin, normal)
        return cls(_plane_transform(origin, normal))

    def forward(self, points) -> np.ndarray:
        return apply_transform(self.matrix, points)

    def inverse(self, points) -> np.ndarray:
        return apply_transform(np.linalg.inv(self.matrix), points)
