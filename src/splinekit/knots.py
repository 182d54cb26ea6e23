## knot vectors for splinekit curves and surfaces
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

"""knot vectors for **splinekit**

A knot vector is a non-decreasing sequence of parameter values.  Together
with a degree ``p`` it maps a parameter ``u`` onto the ``p + 1`` basis
functions that are non-zero there.  For ``n`` control points the vector
holds ``n + p + 1`` knots, and the valid parameter range is

    ``knot[p] <= u <= knot[len - p - 1]``

``KnotVector.generate()`` produces the uniform vector ``0, 1, 2, ...``;
``KnotVector.clamped()`` repeats the end knots ``p + 1`` times so the
curve starts on its first control point and ends on its last.
"""

from __future__ import annotations

from typing import Any, Iterator, List, Sequence

import numpy as np

from splinekit.errors import InvalidConfigurationError, OutOfRangeError
from splinekit.types import (
    ParamRange,
    all_finite,
    as_array,
    check_degree,
    resolve_dtype,
)


class KnotVector:
    """Sorted knots of a curve (or one axis of a surface) of a given degree.

    The vector is mutable in place through :meth:`clamp_ends`,
    :meth:`pinch` and item assignment.  Every mutation is checked before it
    is committed, so a failed edit leaves the knots unchanged.
    """

    def __init__(self, knots: Sequence[Any], degree: int, dtype=None):
        self._degree = check_degree(degree)
        self._dtype = resolve_dtype(dtype)
        if isinstance(knots, KnotVector):
            knots = list(knots)
        values = as_array(knots, self._dtype)
        if values.ndim != 1:
            raise InvalidConfigurationError(
                'knot vector must be one dimensional', actual=values.shape)
        self._validate(values)
        self._knots = values

    ## construction helpers
    ## --------------------

    @classmethod
    def generate(cls, degree: int, num_points: int, dtype=None) -> 'KnotVector':
        """Uniform knots ``0 .. degree + num_points`` for ``num_points``
        control points."""

        degree = check_degree(degree)
        return cls(list(range(degree + num_points + 1)), degree, dtype)

    @classmethod
    def clamped(cls, degree: int, num_points: int, dtype=None) -> 'KnotVector':
        """Clamped knots whose range runs from ``0`` to ``num_points - degree``.

        >>> KnotVector.clamped(2, 4).to_list()
        [0.0, 0.0, 0.0, 1.0, 2.0, 2.0, 2.0]
        """

        degree = check_degree(degree)
        if num_points < degree + 1:
            raise InvalidConfigurationError(
                'insufficient control points, must have at least degree+1',
                expected=degree + 1, actual=num_points)
        last = num_points - degree
        knots = [0] * (degree + 1) + list(range(1, last)) + [last] * (degree + 1)
        return cls(knots, degree, dtype)

    def _validate(self, values: np.ndarray) -> None:
        p = self._degree
        if len(values) < 2 * p + 2:
            raise InvalidConfigurationError(
                f'knot vector too short for degree {p}',
                expected=f'at least {2 * p + 2} knots', actual=len(values))
        if not all_finite(values):
            raise InvalidConfigurationError('knots must be finite')
        if not is_sorted(values):
            raise InvalidConfigurationError(
                'knots must be sorted in non-decreasing order',
                actual=[v for v in values])
        if not values[p] < values[len(values) - p - 1]:
            raise InvalidConfigurationError(
                'knot vector has an empty parameter range',
                actual=(values[p], values[len(values) - p - 1]))

    ## sequence protocol
    ## -----------------

    def __len__(self) -> int:
        return len(self._knots)

    def __getitem__(self, index):
        return self._knots[index]

    def __setitem__(self, index: int, value) -> None:
        updated = self._knots.copy()
        updated[index] = value
        self._validate(updated)
        self._knots = updated

    def __iter__(self) -> Iterator[Any]:
        return iter(self._knots)

    def __eq__(self, other) -> bool:
        if isinstance(other, KnotVector):
            return (self._degree == other._degree and
                    len(self) == len(other) and
                    all(a == b for a, b in zip(self._knots, other._knots)))
        return NotImplemented

    def __repr__(self):
        return f'KnotVector({self.to_list()}, degree={self._degree})'

    def to_list(self) -> List[float]:
        return [float(k) for k in self._knots]

    def copy(self) -> 'KnotVector':
        return KnotVector(self._knots.copy(), self._degree, self._dtype)

    @property
    def degree(self) -> int:
        return self._degree

    @property
    def dtype(self) -> str:
        return self._dtype

    @property
    def values(self) -> np.ndarray:
        """Read-only view of the knots; edit through the vector itself."""

        view = self._knots.view()
        view.flags.writeable = False
        return view

    ## queries
    ## -------

    @property
    def min_u(self):
        """The first knot."""
        return self._knots[0]

    @property
    def max_u(self):
        """The last knot."""
        return self._knots[-1]

    def range(self) -> ParamRange:
        """The valid parameter interval ``[knot[p], knot[len - p - 1]]``."""

        p = self._degree
        return ParamRange(self._knots[p], self._knots[len(self._knots) - p - 1])

    def is_clamped(self) -> bool:
        """Do both end knots repeat ``degree + 1`` times?"""

        p = self._degree
        if len(self._knots) < 2 * (p + 1):
            return False
        first = self._knots[0]
        last = self._knots[-1]
        return (all(k == first for k in self._knots[:p + 1]) and
                all(k == last for k in self._knots[-(p + 1):]))

    def find_span(self, u) -> int:
        """Return ``k`` with ``knot[k] <= u < knot[k + 1]``.

        At the right end of the range, ``u == max``, the half-open test
        cannot succeed, so the span is the last knot strictly below ``u``.
        Raises ``OutOfRangeError`` for ``u`` outside :meth:`range`.
        """

        prange = self.range()
        if u not in prange:
            raise OutOfRangeError('parameter is outside the knot range',
                                  value=u, param_range=prange)
        knots = self._knots

        if u == prange.end:
            for i in range(len(knots) - 1, -1, -1):
                if knots[i] < u:
                    return i

        # binary search; knot[low] <= u < knot[high] holds throughout
        low = 0
        high = len(knots) - 1
        mid = (low + high) // 2
        while u < knots[mid] or u >= knots[mid + 1]:
            if u < knots[mid]:
                high = mid
            else:
                low = mid
            mid = (low + high) // 2
        return mid

    ## in-place edits
    ## --------------

    def clamp_ends(self) -> None:
        """Force end point interpolation by overwriting the first and last
        ``degree`` knots with the ends of the range."""

        p = self._degree
        if p == 0:
            return
        start, end = self.range()
        updated = self._knots.copy()
        updated[:p] = start
        updated[len(updated) - p:] = end
        self._validate(updated)
        self._knots = updated

    def pinch(self, index: int, length: int) -> None:
        """Collapse ``length`` knots after ``index`` onto ``knot[index]``.

        Every later knot moves down by ``length``, so integer knot vectors
        stay uniform apart from the new repeated knot.  Pinching a quadratic
        closed curve at every other knot produces sharp corners, e.g. the
        eight point NURBS circle.

        >>> k = KnotVector([0, 0, 0, 1, 2, 3, 3, 3], 2)
        >>> k.pinch(3, 1)
        >>> k.to_list()
        [0.0, 0.0, 0.0, 1.0, 1.0, 2.0, 2.0, 2.0]
        """

        if index < 0 or length < 0 or index + length >= len(self._knots):
            raise InvalidConfigurationError(
                'pinch runs past the end of the knot vector',
                expected=f'index + length < {len(self._knots)}',
                actual=(index, length))
        updated = self._knots.copy()
        for i in range(1, length + 1):
            updated[index + i] = updated[index]
        for i in range(index + length + 1, len(updated)):
            updated[i] = updated[i] - length
        self._validate(updated)
        self._knots = updated


def is_sorted(values) -> bool:
    return all(values[i] <= values[i + 1] for i in range(len(values) - 1))


__all__ = ['KnotVector', 'is_sorted']
