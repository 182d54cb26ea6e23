import os

import numpy as np
import pytest

from splinekit.control_points import ControlGrid
from splinekit.errors import InvalidConfigurationError
from splinekit.export import BoundingBox, Triangulation, triangle_normal
from splinekit.surfaces import BSurface

VISUALTEST = os.environ.get('VISUALTEST', 'false').lower() in ('true', '1', 'yes')


def _plane():
    points = [(u, v, 0) for v in range(3) for u in range(3)]
    return BSurface.from_points(points, 3, 2, clamped=True)


def _tube(rows=3):
    ring = [(1, 0), (0, 1), (-1, 0), (0, -1)]
    points = [(x, y, z) for z in range(rows) for x, y in ring]
    return BSurface.from_points(points, 4, 2, u_wrapping=True)


def test_plane_triangulation_counts():
    mesh = Triangulation(0.5, _plane())
    nu, nv = mesh.grid_shape
    assert (nu, nv) == (3, 3)
    assert mesh.points.shape == (nu * nv, 3)
    assert mesh.indexed_triangles.shape == (2 * (nu - 1) * (nv - 1), 3)
    assert mesh.normals.shape == mesh.indexed_triangles.shape


def test_plane_triangle_layout():
    mesh = Triangulation(0.5, _plane())
    tris = mesh.indexed_triangles.tolist()
    # first cell: a=0, b=1, c=3, d=4
    assert tris[0] == [0, 4, 3]
    assert tris[1] == [0, 1, 4]
    # next cell along u
    assert tris[2] == [1, 5, 4]
    assert tris[3] == [1, 2, 5]
    np.testing.assert_allclose(mesh.points[3], (0, 1, 0), atol=1e-12)
    for normal in mesh.normals:
        np.testing.assert_allclose(normal, (0, 0, 1), atol=1e-12)


def test_u_wrapping_adds_seam():
    surface = _tube()
    mesh = Triangulation(0.5, surface)
    nu, nv = mesh.grid_shape
    assert (nu, nv) == (9, 3)
    assert len(mesh.indexed_triangles) == 2 * (nu - 1) * (nv - 1) + 2 * (nv - 1)

    seam = [tri for tri in mesh.indexed_triangles.tolist()
            if {i % nu for i in tri} == {nu - 1, 0}]
    assert len(seam) == 2 * (nv - 1)

    lengths = np.linalg.norm(mesh.normals.astype(float), axis=1)
    # the last and first columns coincide, so seam triangles collapse
    assert np.count_nonzero(lengths == 0.0) == len(seam)
    np.testing.assert_allclose(lengths[lengths > 0], 1.0)


def test_v_wrapping_adds_seam_row():
    ring = [(1, 0), (0, 1), (-1, 0), (0, -1)]
    points = [(x, y, z) for x, y in ring for z in range(3)]
    surface = BSurface(ControlGrid(2, 3, points, v_wrapping=True))
    mesh = Triangulation(0.5, surface)
    nu, nv = mesh.grid_shape
    assert len(mesh.indexed_triangles) == 2 * (nu - 1) * nv


def test_triangles_and_normals():
    mesh = Triangulation(0.25, _plane())
    pairs = list(mesh.triangles_with_normals())
    assert len(pairs) == len(mesh.indexed_triangles)
    tri, normal = pairs[0]
    assert tri.shape == (3, 3)
    np.testing.assert_allclose(tri[0], mesh.points[mesh.indexed_triangles[0][0]])
    assert len(list(mesh.triangles())) == len(pairs)


def test_mesh_view_skips_degenerate():
    mesh = Triangulation(0.5, _tube())
    view = list(mesh.mesh_view())
    nonzero = np.count_nonzero(np.linalg.norm(mesh.normals.astype(float), axis=1))
    assert len(view) == nonzero
    normal, v0, v1, v2 = view[0]
    assert all(isinstance(c, float) for c in normal + v0 + v1 + v2)


def test_bounding_box_encloses_mesh():
    mesh = Triangulation(0.25, _tube())
    box = mesh.bounding_box()
    assert all(box.contains(p) for p in mesh.points)
    np.testing.assert_allclose(box.min[2], 0.5)
    np.testing.assert_allclose(box.max[2], 1.5)
    assert np.all(box.size >= 0)


def test_bounding_box():
    box = BoundingBox([(0, 5), (2, -1), (1, 1)])
    assert box.min.tolist() == [0, -1]
    assert box.max.tolist() == [2, 5]
    assert box.contains((1, 0))
    assert not box.contains((3, 0))
    with pytest.raises(InvalidConfigurationError):
        BoundingBox([])


def test_triangle_normal():
    v0 = np.array([0.0, 0.0, 0.0])
    v1 = np.array([1.0, 0.0, 0.0])
    v2 = np.array([0.0, 2.0, 0.0])
    np.testing.assert_allclose(triangle_normal(v0, v1, v2, 1e-9), (0, 0, 1))
    assert triangle_normal(v0, v1, v1 * 2, 1e-9) is None
    assert triangle_normal(v0, v0, v2, 1e-9) is None


def test_triangle_normal_ignores_scale():
    v0 = np.array([0.0, 0.0, 0.0])
    v1 = np.array([1e-4, 0.0, 0.0])
    v2 = np.array([0.0, 1e-4, 0.0])
    np.testing.assert_allclose(triangle_normal(v0, v1, v2, 5e-6), (0, 0, 1))


def test_small_scale_surface_keeps_normals():
    points = [(u * 1e-3, v * 1e-3, 0) for v in range(3) for u in range(3)]
    surface = BSurface.from_points(points, 3, 2, clamped=True)
    mesh = Triangulation(0.5, surface)
    for normal in mesh.normals:
        np.testing.assert_allclose(normal, (0, 0, 1), atol=1e-9)
    assert len(list(mesh.mesh_view())) == len(mesh.indexed_triangles)


def test_needs_3d_surface():
    points = [(u, v) for v in range(3) for u in range(3)]
    surface = BSurface.from_points(points, 3, 2, clamped=True)
    with pytest.raises(InvalidConfigurationError):
        Triangulation(0.5, surface)


def test_rational_surface_triangulation():
    points = [(u, v, 0, (1 + u) * (2 + v)) for v in range(3) for u in range(3)]
    surface = BSurface.from_points(points, 3, 2, clamped=True).nurbs()
    mesh = Triangulation(0.5, surface)
    assert mesh.points.shape == (9, 3)
    for normal in mesh.normals:
        np.testing.assert_allclose(normal, (0, 0, 1), atol=1e-12)


@pytest.mark.slow
def test_mpf_triangulation():
    points = [(u, v, u * v) for v in range(3) for u in range(3)]
    surface = BSurface.from_points(points, 3, 2, clamped=True, dtype='mpf')
    mesh = Triangulation(0.5, surface)
    reference = Triangulation(0.5, BSurface.from_points(points, 3, 2, clamped=True))
    np.testing.assert_allclose(mesh.points.astype(float), reference.points, atol=1e-12)
    np.testing.assert_allclose(mesh.normals.astype(float), reference.normals, atol=1e-12)


@pytest.mark.visual
@pytest.mark.skipif(not VISUALTEST, reason='set VISUALTEST=1 to print the tube mesh')
def test_print_tube_mesh():
    mesh = Triangulation(0.25, _tube(4))
    for normal, v0, v1, v2 in mesh.mesh_view():
        print(normal, v0, v1, v2)
