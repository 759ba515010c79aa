"""Export of triangulation results.

Legacy VTK (ASCII POLYDATA) keeps vertices, lines and triangles in one file,
which is what ParaView / VisIt need to show alpha-shape output.
"""

import warnings
from typing import Dict, Optional

import numpy as np

from .logging_utils import get_logger

logger = get_logger('deltri.io')


def write_vtk(filepath: str,
              result,
              point_data: Optional[Dict[str, np.ndarray]] = None,
              title: str = "deltri triangulation") -> None:
    """Write a TriangulationResult to legacy VTK format (ASCII POLYDATA).

    Parameters
    ----------
    filepath : str
        Output .vtk file path
    result : TriangulationResult
        Points, triangles and the optional alpha lines / vertices to write.
    point_data : dict, optional
        Scalar/vector data at vertices. Defaults to ``result.point_data``.
        - Scalars: (N,) array
        - Vectors: (N, 2) or (N, 3) array
    title : str
        Dataset title/description

    Examples
    --------
    >>> result = delaunay_2d(points, alpha=0.5)
    >>> write_vtk('shape.vtk', result)
    """
    points = np.asarray(result.points, dtype=np.float64)
    triangles = np.asarray(result.triangles, dtype=np.int64).reshape(-1, 3)
    lines = np.asarray(result.lines, dtype=np.int64).reshape(-1, 2)
    verts = np.asarray(result.verts, dtype=np.int64).reshape(-1)
    if point_data is None:
        point_data = result.point_data

    if points.ndim != 2 or points.shape[1] not in (2, 3):
        raise ValueError(f"points must be (N, 2) or (N, 3), got shape {points.shape}")
    if points.shape[1] == 2:
        points = np.column_stack([points, np.zeros(len(points))])
    num_points = len(points)

    with open(filepath, 'w') as f:
        f.write("# vtk DataFile Version 2.0\n")
        f.write(f"{title}\n")
        f.write("ASCII\n")
        f.write("DATASET POLYDATA\n")

        f.write(f"POINTS {num_points} double\n")
        for pt in points:
            f.write(f"{pt[0]:.16e} {pt[1]:.16e} {pt[2]:.16e}\n")

        if len(verts):
            f.write(f"\nVERTICES {len(verts)} {len(verts) * 2}\n")
            for v in verts:
                f.write(f"1 {v}\n")
        if len(lines):
            f.write(f"\nLINES {len(lines)} {len(lines) * 3}\n")
            for a, b in lines:
                f.write(f"2 {a} {b}\n")
        if len(triangles):
            f.write(f"\nPOLYGONS {len(triangles)} {len(triangles) * 4}\n")
            for tri in triangles:
                f.write(f"3 {tri[0]} {tri[1]} {tri[2]}\n")

        if point_data:
            f.write(f"\nPOINT_DATA {num_points}\n")
            for name, data in point_data.items():
                data = np.asarray(data)
                if len(data) != num_points:
                    warnings.warn(f"Skipping point_data['{name}'] with {len(data)} values for {num_points} points")
                    continue
                if data.ndim == 1:
                    f.write(f"SCALARS {name} double 1\n")
                    f.write("LOOKUP_TABLE default\n")
                    for val in data:
                        f.write(f"{float(val):.16e}\n")
                elif data.ndim == 2 and data.shape[1] in (2, 3):
                    if data.shape[1] == 2:
                        data = np.column_stack([data, np.zeros(len(data))])
                    f.write(f"VECTORS {name} double\n")
                    for vec in data:
                        f.write(f"{vec[0]:.16e} {vec[1]:.16e} {vec[2]:.16e}\n")
                else:
                    warnings.warn(f"Skipping point_data['{name}'] with unsupported shape {data.shape}")
    logger.debug("wrote %s (%d points, %d triangles)", filepath, num_points, len(triangles))


__all__ = ['write_vtk']
