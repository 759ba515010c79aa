"""Tests for legacy VTK export of triangulation results."""
import numpy as np
import pytest

from deltri import delaunay_2d, write_vtk
from deltri.core.delaunay import TriangulationResult


def test_write_vtk_triangles(tmp_path):
    pts = np.array([[0, 0], [1, 0], [1, 1], [0, 1]], dtype=float)
    result = delaunay_2d(pts, point_data={'height': np.arange(4.0)})
    output_file = tmp_path / "square.vtk"
    write_vtk(str(output_file), result, title="Square")

    content = output_file.read_text()
    assert "# vtk DataFile Version 2.0" in content
    assert "Square" in content
    assert "DATASET POLYDATA" in content
    assert "POINTS 4 double" in content
    assert "POLYGONS 2 8" in content
    assert "LINES" not in content
    assert "POINT_DATA 4" in content
    assert "SCALARS height double 1" in content


def test_write_vtk_alpha_primitives(tmp_path):
    pts = np.array([[0, 0], [100, 0], [0, 100]], dtype=float)
    result = delaunay_2d(pts, alpha=1.0)
    output_file = tmp_path / "alpha.vtk"
    write_vtk(str(output_file), result)
    content = output_file.read_text()
    assert "VERTICES 3 6" in content
    assert "POLYGONS" not in content


def test_write_vtk_lines_and_vectors(tmp_path):
    result = TriangulationResult(
        points=np.array([[0, 0, 0], [1, 0, 0], [2, 0, 0]], dtype=float),
        triangles=np.empty((0, 3), dtype=np.int64),
        lines=np.array([[0, 1], [1, 2]]),
        point_data={'velocity': np.ones((3, 2))},
    )
    output_file = tmp_path / "lines.vtk"
    write_vtk(str(output_file), result)
    content = output_file.read_text()
    assert "LINES 2 6" in content
    assert "2 0 1" in content
    assert "VECTORS velocity double" in content


def test_write_vtk_skips_mismatched_point_data(tmp_path):
    pts = np.array([[0, 0], [1, 0], [0, 1]], dtype=float)
    result = delaunay_2d(pts)
    output_file = tmp_path / "skip.vtk"
    with pytest.warns(UserWarning):
        write_vtk(str(output_file), result, point_data={'bad': np.arange(7.0)})
    assert "SCALARS bad" not in output_file.read_text()
