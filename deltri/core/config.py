"""Configuration objects for the 2D Delaunay triangulator."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from .constants import PROGRESS_INTERVAL
from .logging_utils import get_logger

logger = get_logger('deltri.config')


class ProjectionPlaneMode(str, Enum):
    """How 3D input points are brought into the triangulation plane."""
    XY_PLANE = 'xy'                    # drop z, triangulate x-y as given
    BEST_FITTING_PLANE = 'best_fit'    # rotate the least-squares plane onto x-y


@dataclass
class Delaunay2DConfig:
    """Parameters of one triangulation request.

    Attributes
    ----------
    alpha : float
        Alpha-shape radius; 0 disables alpha filtering.
    tolerance : float
        Relative tolerance, scaled by the diagonal length of the input bounds,
        under which two points are considered coincident.
    offset : float
        Scale of the bounding circle radius relative to the diagonal length.
    bounding_triangulation : bool
        Keep the triangles connected to the eight bounding points.
    random_point_insertion : bool
        Insert points in a pseudo-random (coprime stride) order.
    projection_plane_mode : ProjectionPlaneMode
        Triangulate in x-y or in the best fitting plane of the points.
    transform : (4, 4) array-like, optional
        Rigid transform applied to the points before triangulation.
    progress_interval : int
        Number of processed points between progress callbacks.
    map_back_points : bool
        Emit the working points mapped back through the inverse projection
        instead of the raw input points. Required to keep the bounding
        triangulation together with a transform or a fitted plane.
    """
    alpha: float = 0.0
    tolerance: float = 1e-5
    offset: float = 1.0
    bounding_triangulation: bool = False
    random_point_insertion: bool = False
    projection_plane_mode: ProjectionPlaneMode = ProjectionPlaneMode.XY_PLANE
    transform: Optional[np.ndarray] = None
    progress_interval: int = PROGRESS_INTERVAL
    map_back_points: bool = False

    def validate(self) -> 'Delaunay2DConfig':
        if self.alpha < 0.0:
            raise ValueError(f"alpha must be >= 0, got {self.alpha}")
        if self.tolerance < 0.0:
            raise ValueError(f"tolerance must be >= 0, got {self.tolerance}")
        if self.offset < 1.0:
            raise ValueError(f"offset must be >= 1, got {self.offset}")
        if self.progress_interval < 1:
            raise ValueError(f"progress_interval must be >= 1, got {self.progress_interval}")
        self.projection_plane_mode = ProjectionPlaneMode(self.projection_plane_mode)
        if self.transform is not None:
            mat = np.asarray(self.transform, dtype=np.float64)
            if mat.shape != (4, 4):
                raise ValueError(f"transform must be a (4, 4) matrix, got shape {mat.shape}")
            self.transform = mat
        return self

    @property
    def keeps_bounding_triangulation(self) -> bool:
        """Whether the bounding triangles can actually be emitted.

        The bounding points only exist in working coordinates, so with a
        transform or a fitted plane they need `map_back_points`.
        """
        if not self.bounding_triangulation:
            return False
        if self.map_back_points:
            return True
        if self.transform is not None:
            logger.warning("Bounding triangulation cannot be used when an input transform is "
                           "specified; output will not contain bounding triangulation.")
            return False
        if self.projection_plane_mode == ProjectionPlaneMode.BEST_FITTING_PLANE:
            logger.warning("Bounding triangulation cannot be used when the best fitting plane "
                           "option is on; output will not contain bounding triangulation.")
            return False
        return True


__all__ = ['ProjectionPlaneMode', 'Delaunay2DConfig']
