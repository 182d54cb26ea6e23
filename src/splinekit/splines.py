"""B-spline and NURBS curves.

A :class:`BSpline` pairs a :class:`~splinekit.control_points.ControlVec`
with a :class:`~splinekit.knots.KnotVector` and evaluates points with the
Cox-de Boor recurrence.  :class:`NURBS` is a view over a B-spline whose
last coordinate is a weight; it holds a reference to the curve, so edits
to the curve's points or knots show up through the view.

Example, a quadratic curve through its end points::

    >>> curve = BSpline.from_points([(50, 50), (50, 300), (300, 300), (300, 500)],
    ...                             degree=2, clamped=True)
    >>> curve.knots.to_list()
    [0.0, 0.0, 0.0, 1.0, 2.0, 2.0, 2.0]
    >>> [float(x) for x in curve.at(0)]
    [50.0, 50.0]
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

import numpy as np

from splinekit.algorithms import cox_de_boor, project, weighted_points
from splinekit.control_points import ControlVec
from splinekit.errors import DegenerateWeightError, InvalidConfigurationError
from splinekit.knots import KnotVector
from splinekit.step_iter import QuantizedPoints, StepRange
from splinekit.types import ParamRange, check_degree, is_finite, normalize_dtype

logger = logging.getLogger(__name__)


class Curve(ABC):
    """A parametric curve evaluated over a closed parameter range."""

    @abstractmethod
    def range(self) -> ParamRange:
        """Return the valid parameter interval."""

    @abstractmethod
    def at(self, u) -> np.ndarray:
        """Return the point at parameter ``u``."""

    def quantize_range(self, step) -> StepRange:
        """Parameters from the start of :meth:`range` to its end, ``step``
        apart, always including the end itself."""

        return StepRange(step, self.range())

    def quantize(self, step) -> QuantizedPoints:
        """Points at every parameter of :meth:`quantize_range`."""

        return QuantizedPoints(self.quantize_range(step), self.at)


def knots_for(knots, degree: int, count: int, dtype: str, clamped: bool,
              axis: str = '') -> KnotVector:
    """Generate or validate the knots for ``count`` logical control points."""

    where = f' ({axis})' if axis else ''
    if knots is None:
        if clamped:
            return KnotVector.clamped(degree, count, dtype)
        return KnotVector.generate(degree, count, dtype)

    if isinstance(knots, KnotVector):
        if knots.degree != degree:
            raise InvalidConfigurationError(
                f'knot vector degree does not match control points{where}',
                expected=degree, actual=knots.degree)
        if knots.dtype != dtype:
            raise InvalidConfigurationError(
                f'knot vector scalar type does not match control points{where}',
                expected=dtype, actual=knots.dtype)
    else:
        knots = KnotVector(knots, degree, dtype)

    if len(knots) != degree + count + 1:
        raise InvalidConfigurationError(
            f'knot vector length must be degree + control points + 1{where}',
            expected=degree + count + 1, actual=len(knots))
    if clamped and not knots.is_clamped():
        raise InvalidConfigurationError(
            f'clamped curve needs end knots repeated degree+1 times{where}',
            actual=knots.to_list())
    return knots


def check_point_count(degree: int, physical_len: int, axis: str = '') -> None:
    if physical_len < degree + 1:
        where = f' ({axis})' if axis else ''
        raise InvalidConfigurationError(
            f'insufficient control points, must have at least degree+1{where}',
            expected=degree + 1, actual=physical_len)


def check_weights(weights: np.ndarray) -> None:
    for w in weights:
        if not (is_finite(w) and w > 0):
            raise DegenerateWeightError(
                'control point weights must be strictly positive', weight=w)


class BSpline(Curve):
    """Non-rational B-spline curve.

    ``control_vec`` carries the degree and the wrapping flag.  Without
    explicit ``knots`` a uniform knot vector is generated, or a clamped one
    when ``clamped`` is true; a clamped curve starts at its first control
    point and ends at its last.  A wrapping (closed) control vector cannot
    be clamped.
    """

    def __init__(self, control_vec: ControlVec, knots: Optional[Any] = None, *,
                 clamped: bool = False, dtype=None):
        if not isinstance(control_vec, ControlVec):
            raise TypeError(
                f'expected a ControlVec, got {type(control_vec).__name__}')
        degree = check_degree(control_vec.degree, minimum=1)
        if dtype is not None and normalize_dtype(dtype) != control_vec.dtype:
            raise InvalidConfigurationError(
                'curve scalar type does not match control points',
                expected=control_vec.dtype, actual=normalize_dtype(dtype))
        if clamped and control_vec.wrapping:
            raise InvalidConfigurationError(
                'a wrapping curve cannot be clamped')
        check_point_count(degree, control_vec.physical_len)

        self._control_vec = control_vec
        self._knots = knots_for(knots, degree, len(control_vec),
                                control_vec.dtype, clamped)
        logger.debug('BSpline degree %d, %d control points (%d logical), range %s',
                     degree, control_vec.physical_len, len(control_vec),
                     tuple(self._knots.range()))

    @classmethod
    def from_points(cls, points: Sequence[Any], degree: int, *, knots=None,
                    wrapping: bool = False, clamped: bool = False,
                    dtype=None) -> 'BSpline':
        """Build a curve straight from a point list."""

        return cls(ControlVec(degree, points, wrapping=wrapping, dtype=dtype),
                   knots, clamped=clamped)

    def __repr__(self):
        return (f'BSpline(degree={self.degree}, points={self._control_vec.physical_len}, '
                f'wrapping={self._control_vec.wrapping}, range={tuple(self.range())})')

    def validate(self) -> None:
        """Check that the knots still fit the (mutable) control points."""

        cv = self._control_vec
        if self._knots.degree != cv.degree:
            raise InvalidConfigurationError(
                'knot vector degree does not match control points',
                expected=cv.degree, actual=self._knots.degree)
        check_point_count(cv.degree, cv.physical_len)
        if len(self._knots) != cv.degree + len(cv) + 1:
            raise InvalidConfigurationError(
                'knot vector length must be degree + control points + 1',
                expected=cv.degree + len(cv) + 1, actual=len(self._knots))

    def range(self) -> ParamRange:
        return self._knots.range()

    def at(self, u) -> np.ndarray:
        self.validate()
        return cox_de_boor(u, self._control_vec.degree, self._knots,
                           self._control_vec.__getitem__)

    def nurbs(self) -> 'NURBS':
        """Treat the last coordinate of each control point as a weight."""

        return NURBS(self)

    @property
    def degree(self) -> int:
        return self._control_vec.degree

    @property
    def knots(self) -> KnotVector:
        return self._knots

    @property
    def control_vec(self) -> ControlVec:
        return self._control_vec

    @property
    def control_points(self) -> np.ndarray:
        """The stored control points, writable in place."""
        return self._control_vec.points

    @property
    def dimension(self) -> int:
        return self._control_vec.dimension

    @property
    def dtype(self) -> str:
        return self._control_vec.dtype

    @property
    def wrapping(self) -> bool:
        return self._control_vec.wrapping


class NURBS(Curve):
    """Rational curve over a ``D`` dimensional B-spline, producing ``D - 1``
    dimensional points.

    The last coordinate of every control point is its weight.  Each point
    is evaluated in homogeneous space and divided by the blended weight.
    """

    def __init__(self, curve: BSpline):
        if curve.dimension < 2:
            raise InvalidConfigurationError(
                'a NURBS curve needs at least one coordinate plus a weight',
                expected='dimension >= 2', actual=curve.dimension)
        check_weights(curve.control_points[:, -1])
        self._curve = curve
        logger.debug('NURBS over %r', curve)

    def __repr__(self):
        return f'NURBS({self._curve!r})'

    def range(self) -> ParamRange:
        return self._curve.range()

    def at(self, u) -> np.ndarray:
        curve = self._curve
        curve.validate()
        cv = curve.control_vec
        point = cox_de_boor(u, cv.degree, curve.knots,
                            lambda i: weighted_points(cv[i]))
        return project(point)

    @property
    def curve(self) -> BSpline:
        return self._curve

    @property
    def degree(self) -> int:
        return self._curve.degree

    @property
    def knots(self) -> KnotVector:
        return self._curve.knots

    @property
    def control_points(self) -> np.ndarray:
        return self._curve.control_points

    @property
    def weights(self) -> np.ndarray:
        """View of the weight column; writes go to the curve."""
        return self._curve.control_points[:, -1]

    @property
    def dimension(self) -> int:
        return self._curve.dimension - 1

    @property
    def dtype(self) -> str:
        return self._curve.dtype


__all__ = ['Curve', 'BSpline', 'NURBS']
