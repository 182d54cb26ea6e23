"""Tensor product B-spline and NURBS surfaces.

A :class:`BSurface` pairs a :class:`~splinekit.control_points.ControlGrid`
with one knot vector per axis.  Evaluation blends each row of the control
window along ``u`` and then the row results along ``v``.  The grid may wrap
along ``u`` or along ``v`` (a tube), but not both at once.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

import numpy as np

from splinekit.algorithms import cox_de_boor_uv, project, weighted_points
from splinekit.control_points import ControlGrid
from splinekit.errors import InvalidConfigurationError
from splinekit.knots import KnotVector
from splinekit.splines import check_point_count, check_weights, knots_for
from splinekit.step_iter import GridStepRange, QuantizedPoints
from splinekit.types import ParamRange, check_degree, normalize_dtype

logger = logging.getLogger(__name__)


class Surface(ABC):
    """A parametric surface over a rectangle of ``(u, v)`` parameters."""

    @abstractmethod
    def u_range(self) -> ParamRange:
        """Return the valid ``u`` interval."""

    @abstractmethod
    def v_range(self) -> ParamRange:
        """Return the valid ``v`` interval."""

    @abstractmethod
    def at(self, u, v) -> np.ndarray:
        """Return the point at ``(u, v)``."""

    @property
    @abstractmethod
    def u_wrapping(self) -> bool:
        ...

    @property
    @abstractmethod
    def v_wrapping(self) -> bool:
        ...

    def quantize_range(self, step) -> GridStepRange:
        """``(u, v)`` pairs ``step`` apart on both axes, ``u`` varying
        fastest."""

        return GridStepRange(step, self.u_range(), self.v_range())

    def quantize(self, step) -> QuantizedPoints:
        return QuantizedPoints(self.quantize_range(step), self._at_uv)

    def _at_uv(self, uv):
        return self.at(*uv)


class BSurface(Surface):
    """Non-rational tensor product B-spline surface."""

    def __init__(self, control_grid: ControlGrid, u_knots: Optional[Any] = None,
                 v_knots: Optional[Any] = None, *, clamped: bool = False,
                 dtype=None):
        if not isinstance(control_grid, ControlGrid):
            raise TypeError(
                f'expected a ControlGrid, got {type(control_grid).__name__}')
        degree = check_degree(control_grid.degree, minimum=1)
        if dtype is not None and normalize_dtype(dtype) != control_grid.dtype:
            raise InvalidConfigurationError(
                'surface scalar type does not match control points',
                expected=control_grid.dtype, actual=normalize_dtype(dtype))
        if control_grid.u_wrapping and control_grid.v_wrapping:
            raise InvalidConfigurationError(
                'a surface cannot wrap in both u and v',
                expected='at most one wrapping axis', actual='u and v')
        if clamped and (control_grid.u_wrapping or control_grid.v_wrapping):
            raise InvalidConfigurationError('a wrapping surface cannot be clamped')
        check_point_count(degree, control_grid.physical_u_len, 'u')
        check_point_count(degree, control_grid.physical_v_len, 'v')

        self._control_grid = control_grid
        self._u_knots = knots_for(u_knots, degree, control_grid.u_len,
                                  control_grid.dtype, clamped, 'u')
        self._v_knots = knots_for(v_knots, degree, control_grid.v_len,
                                  control_grid.dtype, clamped, 'v')
        logger.debug('BSurface degree %d, %dx%d control points, u range %s, v range %s',
                     degree, control_grid.physical_u_len, control_grid.physical_v_len,
                     tuple(self._u_knots.range()), tuple(self._v_knots.range()))

    @classmethod
    def from_points(cls, points: Sequence[Any], u_len: int, degree: int, *,
                    u_knots=None, v_knots=None, u_wrapping: bool = False,
                    v_wrapping: bool = False, clamped: bool = False,
                    dtype=None) -> 'BSurface':
        """Build a surface from a flat, row-major list of points, ``u_len``
        points per row."""

        grid = ControlGrid(degree, u_len, points, u_wrapping=u_wrapping,
                           v_wrapping=v_wrapping, dtype=dtype)
        return cls(grid, u_knots, v_knots, clamped=clamped)

    def __repr__(self):
        grid = self._control_grid
        return (f'BSurface(degree={self.degree}, '
                f'points={grid.physical_u_len}x{grid.physical_v_len}, '
                f'u_wrapping={grid.u_wrapping}, v_wrapping={grid.v_wrapping})')

    def validate(self) -> None:
        """Check that the knots still fit the (mutable) control grid."""

        grid = self._control_grid
        if grid.u_wrapping and grid.v_wrapping:
            raise InvalidConfigurationError('a surface cannot wrap in both u and v')
        check_point_count(grid.degree, grid.physical_u_len, 'u')
        check_point_count(grid.degree, grid.physical_v_len, 'v')
        for axis, knots, count in (('u', self._u_knots, grid.u_len),
                                   ('v', self._v_knots, grid.v_len)):
            if knots.degree != grid.degree:
                raise InvalidConfigurationError(
                    f'knot vector degree does not match control points ({axis})',
                    expected=grid.degree, actual=knots.degree)
            if len(knots) != grid.degree + count + 1:
                raise InvalidConfigurationError(
                    f'knot vector length must be degree + control points + 1 ({axis})',
                    expected=grid.degree + count + 1, actual=len(knots))

    def u_range(self) -> ParamRange:
        return self._u_knots.range()

    def v_range(self) -> ParamRange:
        return self._v_knots.range()

    def at(self, u, v) -> np.ndarray:
        self.validate()
        grid = self._control_grid
        return cox_de_boor_uv((u, v), grid.degree, self._u_knots, self._v_knots,
                              grid.__getitem__)

    def nurbs(self) -> 'NURBSurface':
        return NURBSurface(self)

    @property
    def degree(self) -> int:
        return self._control_grid.degree

    @property
    def u_knots(self) -> KnotVector:
        return self._u_knots

    @property
    def v_knots(self) -> KnotVector:
        return self._v_knots

    @property
    def control_grid(self) -> ControlGrid:
        return self._control_grid

    @property
    def control_points(self) -> np.ndarray:
        return self._control_grid.points

    @property
    def dimension(self) -> int:
        return self._control_grid.dimension

    @property
    def dtype(self) -> str:
        return self._control_grid.dtype

    @property
    def u_wrapping(self) -> bool:
        return self._control_grid.u_wrapping

    @property
    def v_wrapping(self) -> bool:
        return self._control_grid.v_wrapping


class NURBSurface(Surface):
    """Rational surface over a :class:`BSurface` whose last coordinate is a
    weight.  Holds a reference to the surface."""

    def __init__(self, surface: BSurface):
        if surface.dimension < 2:
            raise InvalidConfigurationError(
                'a NURBS surface needs at least one coordinate plus a weight',
                expected='dimension >= 2', actual=surface.dimension)
        check_weights(surface.control_points[:, -1])
        self._surface = surface
        logger.debug('NURBSurface over %r', surface)

    def __repr__(self):
        return f'NURBSurface({self._surface!r})'

    def u_range(self) -> ParamRange:
        return self._surface.u_range()

    def v_range(self) -> ParamRange:
        return self._surface.v_range()

    def at(self, u, v) -> np.ndarray:
        surface = self._surface
        surface.validate()
        grid = surface.control_grid
        point = cox_de_boor_uv((u, v), grid.degree, surface.u_knots, surface.v_knots,
                               lambda uv: weighted_points(grid[uv]))
        return project(point)

    @property
    def surface(self) -> BSurface:
        return self._surface

    @property
    def degree(self) -> int:
        return self._surface.degree

    @property
    def u_knots(self) -> KnotVector:
        return self._surface.u_knots

    @property
    def v_knots(self) -> KnotVector:
        return self._surface.v_knots

    @property
    def control_points(self) -> np.ndarray:
        return self._surface.control_points

    @property
    def weights(self) -> np.ndarray:
        return self._surface.control_points[:, -1]

    @property
    def dimension(self) -> int:
        return self._surface.dimension - 1

    @property
    def dtype(self) -> str:
        return self._surface.dtype

    @property
    def u_wrapping(self) -> bool:
        return self._surface.u_wrapping

    @property
    def v_wrapping(self) -> bool:
        return self._surface.v_wrapping


__all__ = ['Surface', 'BSurface', 'NURBSurface']
