"""Mesh and extent export for sampled geometry.

:class:`Triangulation` samples a 3D surface on its quantized parameter grid
and stores an indexed triangle mesh:

``points``
    ``(M, 3)`` sampled points, row-major with ``u`` varying fastest, so
    sample ``(iu, iv)`` is point ``iv * nu + iu``.
``indexed_triangles``
    ``(T, 3)`` point indices.
``normals``
    ``(T, 3)`` unit face normals, one per triangle.  Degenerate triangles
    (for example where a wrapped seam collapses) get a zero normal.

Each grid cell with corners::

    c --- d        a = (iu, iv)      b = (iu + 1, iv)
    |     |        c = (iu, iv + 1)  d = (iu + 1, iv + 1)
    a --- b

becomes the triangles ``(a, d, c)`` and ``(a, b, d)``.  A surface that
wraps in ``u`` gets an extra column of cells joining the last samples of
each row to the first; wrapping in ``v`` adds an extra row the same way.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, List, Optional, Tuple

import numpy as np

from splinekit.config import get_settings
from splinekit.errors import InvalidConfigurationError
from splinekit.surfaces import Surface
from splinekit.types import dtype_of, sqrt_scalar, zero_point

logger = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]
TriTuple = Tuple[Vec3, Vec3, Vec3, Vec3]


class BoundingBox:
    """Axis aligned bounding box of a set of points."""

    def __init__(self, points: Any):
        arr = points if isinstance(points, np.ndarray) else np.asarray(points)
        if arr.ndim != 2 or len(arr) == 0:
            raise InvalidConfigurationError(
                'bounding box needs a non-empty (N, D) point set',
                expected='(N, D)', actual=arr.shape)
        self._min = arr.min(axis=0)
        self._max = arr.max(axis=0)

    def __repr__(self):
        return f'BoundingBox(min={list(self._min)}, max={list(self._max)})'

    @property
    def min(self) -> np.ndarray:
        return self._min

    @property
    def max(self) -> np.ndarray:
        return self._max

    @property
    def size(self) -> np.ndarray:
        return self._max - self._min

    def contains(self, point, tol: Optional[float] = None) -> bool:
        """Is ``point`` inside the box, allowing ``tol`` slack on each side?"""

        if tol is None:
            tol = get_settings().tolerance
        return all(lo - tol <= x <= hi + tol
                   for lo, x, hi in zip(self._min, point, self._max))


def triangle_normal(v0: np.ndarray, v1: np.ndarray, v2: np.ndarray,
                    tol: float) -> Optional[np.ndarray]:
    """Return the unit normal of a triangle or ``None`` if degenerate.

    ``tol`` is relative to the squared length of the longer edge from
    ``v0``, so the test does not depend on the size of the triangle.  A
    collapsed edge or a sliver both fall under it.
    """

    ax, ay, az = v1[0] - v0[0], v1[1] - v0[1], v1[2] - v0[2]
    bx, by, bz = v2[0] - v0[0], v2[1] - v0[1], v2[2] - v0[2]
    n = np.array([ay * bz - az * by, az * bx - ax * bz, ax * by - ay * bx],
                 dtype=v0.dtype)
    length = sqrt_scalar(n[0] * n[0] + n[1] * n[1] + n[2] * n[2])
    scale = max(ax * ax + ay * ay + az * az, bx * bx + by * by + bz * bz)
    if not length > tol * scale:
        return None
    return n / length


class Triangulation:
    """Indexed triangle mesh of a 3D surface sampled every ``step``."""

    def __init__(self, step, surface: Surface, *, tolerance: Optional[float] = None):
        if surface.dimension != 3:
            raise InvalidConfigurationError(
                'triangulation needs a surface of 3D points',
                expected=3, actual=surface.dimension)
        if tolerance is None:
            tolerance = get_settings().tolerance

        params = surface.quantize_range(step)
        nu = len(params.u_steps)
        nv = len(params.v_steps)
        self._points = np.stack([surface.at(u, v) for u, v in params])
        self._nu = nu
        self._nv = nv

        self._indexed_triangles = np.array(
            _grid_triangles(nu, nv, surface.u_wrapping, surface.v_wrapping),
            dtype=np.intp).reshape(-1, 3)

        zero = zero_point(3, dtype_of(self._points))
        normals = []
        degenerate = 0
        for i0, i1, i2 in self._indexed_triangles:
            n = triangle_normal(self._points[i0], self._points[i1],
                                self._points[i2], tolerance)
            if n is None:
                degenerate += 1
                n = zero
            normals.append(n)
        self._normals = np.stack(normals)

        logger.debug('triangulated %dx%d samples into %d triangles (%d degenerate)',
                     nu, nv, len(self._indexed_triangles), degenerate)

    def __repr__(self):
        return (f'Triangulation(points={len(self._points)}, '
                f'triangles={len(self._indexed_triangles)})')

    @property
    def grid_shape(self) -> Tuple[int, int]:
        """Sample counts ``(nu, nv)`` along each axis."""
        return self._nu, self._nv

    @property
    def points(self) -> np.ndarray:
        return self._points

    @property
    def normals(self) -> np.ndarray:
        return self._normals

    @property
    def indexed_triangles(self) -> np.ndarray:
        return self._indexed_triangles

    def triangles(self) -> Iterator[np.ndarray]:
        """Yield each triangle as a ``(3, 3)`` array of its corners."""

        for tri in self._indexed_triangles:
            yield self._points[tri]

    def triangles_with_normals(self) -> Iterator[Tuple[np.ndarray, np.ndarray]]:
        for tri, normal in zip(self.triangles(), self._normals):
            yield tri, normal

    def mesh_view(self) -> Iterator[TriTuple]:
        """Yield triangles as ``(normal, v0, v1, v2)`` float tuples.

        Degenerate triangles (zero normal) are skipped.
        """

        for (i0, i1, i2), normal in zip(self._indexed_triangles, self._normals):
            n = _to_vec3(normal)
            if n == (0.0, 0.0, 0.0):
                continue
            yield (n, _to_vec3(self._points[i0]), _to_vec3(self._points[i1]),
                   _to_vec3(self._points[i2]))

    def bounding_box(self) -> BoundingBox:
        return BoundingBox(self._points)


def _grid_triangles(nu: int, nv: int, u_wrapping: bool,
                    v_wrapping: bool) -> List[Tuple[int, int, int]]:
    cells_u = nu if u_wrapping else nu - 1
    cells_v = nv if v_wrapping else nv - 1

    triangles = []
    for iv in range(cells_v):
        iv_next = (iv + 1) % nv
        for iu in range(cells_u):
            iu_next = (iu + 1) % nu
            a = iv * nu + iu
            b = iv * nu + iu_next
            c = iv_next * nu + iu
            d = iv_next * nu + iu_next
            triangles.append((a, d, c))
            triangles.append((a, b, d))
    return triangles


def _to_vec3(p) -> Vec3:
    return float(p[0]), float(p[1]), float(p[2])


__all__ = ['BoundingBox', 'Triangulation', 'triangle_normal']
