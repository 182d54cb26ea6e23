"""Control point containers for curves (``ControlVec``) and surfaces
(``ControlGrid``).

Both containers own an ``(N, D)`` numpy array of points and a degree.  A
container may *wrap*: its logical length is then the physical length plus
the degree, and logical index ``i`` resolves to physical index
``i % physical_len``.  This closes a curve (or one direction of a surface)
with periodic continuity without storing duplicate points.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Tuple

import numpy as np

from splinekit.errors import InvalidConfigurationError
from splinekit.grid import Grid
from splinekit.types import as_points, check_degree, resolve_dtype


def wrap_index(index: int, physical_len: int, wrapping: bool) -> int:
    """Map a logical index onto a physical one."""

    if index < 0:
        raise IndexError(f'negative control point index {index}')
    if wrapping:
        return index % physical_len
    if index >= physical_len:
        raise IndexError(
            f'control point index {index} out of range ({physical_len} points)')
    return index


class ControlPoints(ABC):
    """Shared behaviour of the control point containers.

    Subclasses provide :meth:`physical_index`, the single place where
    wrapping is applied; evaluation code only ever asks for ``self[i]``.
    """

    def __init__(self, degree: int, points: Any, dtype=None):
        self._degree = check_degree(degree)
        self._dtype = resolve_dtype(dtype)
        self._points = as_points(points, self._dtype)

    @abstractmethod
    def physical_index(self, index) -> int:
        """Return the row of :attr:`points` holding logical ``index``."""

    def __getitem__(self, index) -> np.ndarray:
        return self._points[self.physical_index(index)]

    @property
    def degree(self) -> int:
        return self._degree

    @degree.setter
    def degree(self, degree: int) -> None:
        self._degree = check_degree(degree)

    @property
    def points(self) -> np.ndarray:
        """All stored points as a writable ``(N, D)`` array."""
        return self._points

    @property
    def physical_len(self) -> int:
        return len(self._points)

    @property
    def dimension(self) -> int:
        return self._points.shape[1]

    @property
    def dtype(self) -> str:
        return self._dtype


class ControlVec(ControlPoints):
    """Ordered control points of a curve."""

    def __init__(self, degree: int, points: Any, wrapping: bool = False, dtype=None):
        super().__init__(degree, points, dtype)
        self._wrapping = bool(wrapping)

    @classmethod
    def wrapped(cls, degree: int, points: Any, dtype=None) -> 'ControlVec':
        """Build a wrapping (closed) control vector."""
        return cls(degree, points, wrapping=True, dtype=dtype)

    def __repr__(self):
        return (f'ControlVec(degree={self._degree}, points={len(self._points)}, '
                f'wrapping={self._wrapping})')

    def __len__(self) -> int:
        if not self._wrapping:
            return len(self._points)
        return len(self._points) + self._degree

    def physical_index(self, index: int) -> int:
        return wrap_index(index, len(self._points), self._wrapping)

    @property
    def wrapping(self) -> bool:
        return self._wrapping

    @wrapping.setter
    def wrapping(self, wrapping: bool) -> None:
        self._wrapping = bool(wrapping)


class ControlGrid(ControlPoints):
    """Row-major grid of surface control points.

    ``u_len`` points make one row; successive rows step along ``v``.  Index
    with a ``(u, v)`` pair.  Wrapping is tracked per axis.
    """

    def __init__(self, degree: int, u_len: int, points: Any,
                 u_wrapping: bool = False, v_wrapping: bool = False, dtype=None):
        super().__init__(degree, points, dtype)
        if u_len <= 0 or len(self._points) % u_len != 0:
            raise InvalidConfigurationError(
                'points length must be a multiple of u_len',
                expected=f'a multiple of {u_len}', actual=len(self._points))
        self._grid = Grid(u_len, self._points)
        self._u_wrapping = bool(u_wrapping)
        self._v_wrapping = bool(v_wrapping)

    def __repr__(self):
        return (f'ControlGrid(degree={self._degree}, u_len={self._grid.width}, '
                f'v_len={self._grid.height}, u_wrapping={self._u_wrapping}, '
                f'v_wrapping={self._v_wrapping})')

    @property
    def u_len(self) -> int:
        """Length in the u direction with wrapping included."""

        if not self._u_wrapping:
            return self._grid.width
        return self._grid.width + self._degree

    @property
    def v_len(self) -> int:
        """Length in the v direction with wrapping included."""

        if not self._v_wrapping:
            return self._grid.height
        return self._grid.height + self._degree

    @property
    def physical_u_len(self) -> int:
        return self._grid.width

    @property
    def physical_v_len(self) -> int:
        return self._grid.height

    @property
    def grid(self) -> Grid:
        return self._grid

    def uv_index(self, uv: Tuple[int, int]) -> Tuple[int, int]:
        """Map a logical ``(u, v)`` onto the stored column and row."""

        u, v = uv
        return (wrap_index(u, self._grid.width, self._u_wrapping),
                wrap_index(v, self._grid.height, self._v_wrapping))

    def physical_index(self, uv: Tuple[int, int]) -> int:
        return self._grid.vec_index(self.uv_index(uv))

    @property
    def u_wrapping(self) -> bool:
        return self._u_wrapping

    @u_wrapping.setter
    def u_wrapping(self, u_wrapping: bool) -> None:
        self._u_wrapping = bool(u_wrapping)

    @property
    def v_wrapping(self) -> bool:
        return self._v_wrapping

    @v_wrapping.setter
    def v_wrapping(self, v_wrapping: bool) -> None:
        self._v_wrapping = bool(v_wrapping)


__all__ = ['ControlPoints', 'ControlVec', 'ControlGrid', 'wrap_index']
