"""Tests for the linked triangle mesh."""
import numpy as np
import pytest

from deltri.core.mesh import TriangleMesh


def _square_mesh():
    pts = np.array([[0, 0], [1, 0], [1, 1], [0, 1]], dtype=float)
    return TriangleMesh(pts, [(0, 1, 2), (0, 2, 3)])


def test_links_built_from_initial_triangles():
    mesh = _square_mesh()
    assert mesh.number_of_points == 4
    assert mesh.number_of_cells == 2
    assert sorted(mesh.point_cells(0)) == [0, 1]
    assert mesh.point_cells(1) == [0]
    assert mesh.points.shape == (4, 3)


def test_edge_queries():
    mesh = _square_mesh()
    assert mesh.is_edge(0, 2)
    assert mesh.is_edge(3, 0)
    assert not mesh.is_edge(1, 3)
    assert mesh.cell_edge_neighbors(0, 0, 2) == [1]
    assert mesh.cell_edge_neighbors(0, 0, 1) == []
    assert sorted(mesh.cell_edge_neighbors(-1, 0, 2)) == [0, 1]


def test_point_cells_is_a_copy():
    mesh = _square_mesh()
    cells = mesh.point_cells(0)
    cells.append(99)
    assert 99 not in mesh.point_cells(0)


def test_manual_diagonal_swap_keeps_links_consistent():
    mesh = _square_mesh()
    # (0,1,2),(0,2,3) -> (1,2,3),(1,3,0)
    mesh.remove_reference_to_cell(0, 0)
    mesh.remove_reference_to_cell(2, 1)
    mesh.add_reference_to_cell(3, 0)
    mesh.add_reference_to_cell(1, 1)
    mesh.replace_cell(0, (1, 2, 3))
    mesh.replace_cell(1, (1, 3, 0))
    assert mesh.is_edge(1, 3)
    assert not mesh.is_edge(0, 2)
    assert sorted(mesh.point_cells(1)) == [0, 1]
    assert mesh.point_cells(0) == [1]


def test_replace_linked_cell():
    mesh = _square_mesh()
    mesh.remove_cell_reference(1)
    assert mesh.point_cells(3) == []
    mesh.replace_linked_cell(1, (0, 2, 3))
    assert mesh.point_cells(3) == [1]
    assert mesh.cell_points(1) == (0, 2, 3)


def test_remove_missing_reference_is_noop():
    mesh = _square_mesh()
    mesh.remove_reference_to_cell(1, 1)
    assert mesh.point_cells(1) == [0]


def test_triangles_array_mask():
    mesh = _square_mesh()
    np.testing.assert_array_equal(mesh.triangles_array(), [[0, 1, 2], [0, 2, 3]])
    np.testing.assert_array_equal(mesh.triangles_array([False, True]), [[0, 2, 3]])
    assert mesh.triangles_array([False, False]).shape == (0, 3)


def test_resize_cell_list_grows_link_table():
    mesh = _square_mesh()
    mesh.resize_cell_list(6, 1)
    assert mesh.number_of_points == 7
    assert mesh.point_cells(6) == []


def test_rejects_bad_point_shape():
    with pytest.raises(ValueError):
        TriangleMesh(np.zeros((3, 4)))
