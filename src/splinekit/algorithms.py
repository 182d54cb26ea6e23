## Cox-de Boor evaluation for splinekit curves and surfaces
## Copyright (c) 2025 splinekit contributors

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""basis blending (Cox-de Boor / de Boor) for **splinekit**

=====================
OVERVIEW
=====================

A point on a B-spline of degree ``p`` at parameter ``u`` depends on only
``p + 1`` control points: the ones whose basis functions are non-zero on
the knot span ``k`` containing ``u``.  The evaluator copies those points
into a working array ``d[0..p]`` and repeatedly replaces each entry by a
blend of itself and its left neighbour:

    for r in 1..p:
        for j in p down to r:
            alpha = (u - knot[j+k-p]) / (knot[j+k-r+1] - knot[j+k-p])
            d[j] = d[j-1] * (1 - alpha) + d[j] * alpha

after which ``d[p]`` is the point on the curve.  ``j`` must run downward:
``d[j-1]`` is still needed, unmodified, when ``d[j]`` is computed.

Tensor product surfaces run the same blend along ``u`` for each of the
``p + 1`` rows of the control window, then once more along ``v`` over the
row results.

Rational (NURBS) geometry is evaluated by weighting each point, blending
in homogeneous space, then dividing by the blended weight; see
:func:`weighted_points` and :func:`project`.

Control points are supplied through an accessor function rather than an
array so wrapping containers can map logical indices onto stored points.
"""

from __future__ import annotations

from typing import Callable, Tuple

import mpmath as mpm
import numpy as np

from splinekit.errors import DegenerateWeightError, InvalidConfigurationError, OutOfRangeError
from splinekit.grid import Grid
from splinekit.knots import KnotVector
from splinekit.types import MPF, cast_scalar, is_finite

PointAccessor = Callable[[int], np.ndarray]
GridAccessor = Callable[[Tuple[int, int]], np.ndarray]


def cox_de_boor(u, degree: int, knots: KnotVector,
                control_point: PointAccessor) -> np.ndarray:
    """Evaluate a B-spline of ``degree`` at ``u``.

    ``control_point(i)`` returns logical control point ``i``.  Raises
    ``OutOfRangeError`` if ``u`` is outside ``knots.range()``.
    """

    u = _parameter(u, knots)
    k = knots.find_span(u)

    d = np.stack([control_point(j + k - degree) for j in range(degree + 1)])
    _blend(u, degree, k, knots, d)
    return d[degree]


def cox_de_boor_uv(uv, degree: int, u_knots: KnotVector, v_knots: KnotVector,
                   control_point: GridAccessor) -> np.ndarray:
    """Evaluate a tensor product B-spline surface at ``(u, v)``.

    ``control_point((i, j))`` returns the control point in logical column
    ``i`` (u direction) and row ``j`` (v direction).
    """

    u, v = uv
    u = _parameter(u, u_knots)
    v = _parameter(v, v_knots)
    u_k = u_knots.find_span(u)
    v_k = v_knots.find_span(v)

    first = control_point((u_k - degree, v_k - degree))
    d = Grid.empty(degree + 1, degree + 1, len(first), first.dtype)
    for v_j in range(degree + 1):
        for u_j in range(degree + 1):
            d[(u_j, v_j)] = control_point((u_j + u_k - degree, v_j + v_k - degree))

    # blend along u, one row of the window at a time
    for j in range(degree + 1):
        _blend(u, degree, u_k, u_knots, d.row(j))

    # then along v, over the last column where each row's result landed
    column = np.stack([d[(degree, j)] for j in range(degree + 1)])
    _blend(v, degree, v_k, v_knots, column)
    return column[degree]


def _parameter(u, knots: KnotVector):
    """Cast ``u`` to the knots' scalar type.

    The uncast value is checked against the knot range, so a parameter just
    outside it cannot round onto an end knot and be evaluated there.
    """

    value = cast_scalar(u, knots.dtype)
    if knots.dtype == MPF:
        return value
    prange = knots.range()
    # compare in a type that holds both u and the knots exactly
    wide = MPF if isinstance(u, mpm.mpf) else 'longdouble'
    start, end, wide_u = (cast_scalar(x, wide) for x in (prange.start, prange.end, u))
    if not start <= wide_u <= end:
        raise OutOfRangeError('parameter is outside the knot range',
                              value=u, param_range=prange)
    return value


def _blend(u, degree: int, k: int, knots: KnotVector, d: np.ndarray) -> None:
    for r in range(1, degree + 1):
        for j in range(degree, r - 1, -1):
            a = alpha(u, k, degree, r, j, knots)
            d[j] = d[j - 1] * (1 - a) + d[j] * a


def alpha(u, knot_span: int, degree: int, r: int, j: int, knots: KnotVector):
    """Blend factor for entry ``j`` at stage ``r`` of the triangular table."""

    kp = knots[j + knot_span - degree]
    kp_1 = knots[1 + j + knot_span - r]
    return (u - kp) / (kp_1 - kp)


## rational (homogeneous) helpers
## ------------------------------

def weighted_points(points: np.ndarray) -> np.ndarray:
    """Return a copy of ``points`` with every coordinate but the last
    multiplied by the last (the weight).  The weight itself is kept."""

    if points.shape[-1] < 2:
        raise InvalidConfigurationError(
            'rational points need at least one coordinate plus a weight',
            expected='dimension >= 2', actual=points.shape[-1])
    weighted = points.copy()
    weighted[..., :-1] = weighted[..., :-1] * weighted[..., -1:]
    return weighted


def project(point: np.ndarray) -> np.ndarray:
    """Divide a blended homogeneous point by its weight, dropping the weight.

    Raises ``DegenerateWeightError`` unless the weight is finite and
    strictly positive.
    """

    w = point[-1]
    if not (is_finite(w) and w > 0):
        raise DegenerateWeightError('blended weight is not strictly positive',
                                    weight=w)
    return point[:-1] / w


__all__ = [
    'cox_de_boor',
    'cox_de_boor_uv',
    'alpha',
    'weighted_points',
    'project',
]
