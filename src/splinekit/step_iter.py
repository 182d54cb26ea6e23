"""Evenly stepped parameter sequences for sampling curves and surfaces.

All sequences here are *restartable*: iterating twice yields the same
values, and ``len()`` is known before any value is produced.

``StepRange`` yields ``start, start + step, start + 2*step, ...`` while the
value is below ``end`` and then ``end`` itself, so the true end of a curve
is always sampled even when ``step`` does not divide the range.  Values are
computed as ``start + i*step`` rather than by repeated addition.
"""

from __future__ import annotations

import numbers
from operator import length_hint
from typing import Any, Callable, Iterator, Sequence, Tuple

import mpmath as mpm
import numpy as np

from splinekit.errors import InvalidConfigurationError
from splinekit.types import MPF, ParamRange, cast_scalar, is_finite, is_real, normalize_dtype


def _scalar_type(value) -> str:
    if isinstance(value, mpm.mpf):
        return MPF
    if isinstance(value, np.generic):
        return normalize_dtype(value.dtype)
    return 'float64'


class StepIterator:
    """Iterator over an indexable sequence that reports what is left."""

    def __init__(self, steps: Sequence[Any]):
        self._steps = steps
        self._index = 0

    def __iter__(self) -> 'StepIterator':
        return self

    def __next__(self):
        if self._index >= len(self._steps):
            raise StopIteration
        value = self._steps[self._index]
        self._index += 1
        return value

    def __length_hint__(self) -> int:
        return len(self._steps) - self._index


class StepRange:
    """Parameters from ``param_range.start`` to ``param_range.end`` inclusive.

    >>> [float(u) for u in StepRange(1, ParamRange(0.0, 2.0))]
    [0.0, 1.0, 2.0]
    >>> [float(u) for u in StepRange(0.75, ParamRange(0.0, 2.0))]
    [0.0, 0.75, 1.5, 2.0]
    """

    def __init__(self, step, param_range: ParamRange):
        start, end = param_range
        if not is_real(step) or not is_finite(step) or not step > 0:
            raise InvalidConfigurationError(
                'step must be a positive finite number', actual=step)
        if end < start:
            raise InvalidConfigurationError(
                'parameter range runs backwards', actual=(start, end))

        name = _scalar_type(start)
        self._start = start
        self._end = end
        self._step = cast_scalar(step, name)
        self._count = self._below_end() + 1

    def _below_end(self) -> int:
        """How many ``start + i*step`` values lie strictly below ``end``."""

        span = self._end - self._start
        if not span > 0:
            return 0
        n = int(np.ceil(float(span / self._step)))
        # float division may be off by one either way
        while n > 0 and self._value(n - 1) >= self._end:
            n -= 1
        while self._value(n) < self._end:
            n += 1
        return n

    def _value(self, i: int):
        return self._start + i * self._step

    def __len__(self) -> int:
        return self._count

    def __getitem__(self, index: int):
        if not isinstance(index, numbers.Integral):
            raise TypeError('step range indices must be integers')
        if index < 0:
            index += self._count
        if not 0 <= index < self._count:
            raise IndexError(f'step index {index} out of range ({self._count})')
        if index == self._count - 1:
            return self._end
        return self._value(index)

    def __iter__(self) -> Iterator[Any]:
        return StepIterator(self)

    def __repr__(self):
        return f'StepRange(step={self._step}, start={self._start}, end={self._end})'

    @property
    def step(self):
        return self._step

    @property
    def start(self):
        return self._start

    @property
    def end(self):
        return self._end


class GridStepRange:
    """The cross product of a u and a v :class:`StepRange`.

    Pairs come out row by row with ``u`` varying fastest, the same order as
    the points of a ``ControlGrid``.
    """

    def __init__(self, step, u_range: ParamRange, v_range: ParamRange):
        self._u_steps = StepRange(step, u_range)
        self._v_steps = StepRange(step, v_range)

    def __len__(self) -> int:
        return len(self._u_steps) * len(self._v_steps)

    def __getitem__(self, index: int) -> Tuple[Any, Any]:
        if not isinstance(index, numbers.Integral):
            raise TypeError('step range indices must be integers')
        count = len(self)
        if index < 0:
            index += count
        if not 0 <= index < count:
            raise IndexError(f'step index {index} out of range ({count})')
        nu = len(self._u_steps)
        return self._u_steps[index % nu], self._v_steps[index // nu]

    def __iter__(self) -> Iterator[Tuple[Any, Any]]:
        return StepIterator(self)

    def __repr__(self):
        return f'GridStepRange(u={self._u_steps!r}, v={self._v_steps!r})'

    @property
    def u_steps(self) -> StepRange:
        return self._u_steps

    @property
    def v_steps(self) -> StepRange:
        return self._v_steps


class PointIterator:
    def __init__(self, params: Iterator[Any], evaluate: Callable[[Any], Any]):
        self._params = params
        self._evaluate = evaluate

    def __iter__(self) -> 'PointIterator':
        return self

    def __next__(self):
        return self._evaluate(next(self._params))

    def __length_hint__(self) -> int:
        return length_hint(self._params)


class QuantizedPoints:
    """Points of a curve or surface at every parameter of a step range."""

    def __init__(self, params, evaluate: Callable[[Any], Any]):
        self._params = params
        self._evaluate = evaluate

    def __len__(self) -> int:
        return len(self._params)

    def __getitem__(self, index: int):
        return self._evaluate(self._params[index])

    def __iter__(self) -> PointIterator:
        return PointIterator(iter(self._params), self._evaluate)

    @property
    def params(self):
        return self._params


__all__ = [
    'StepIterator',
    'StepRange',
    'GridStepRange',
    'PointIterator',
    'QuantizedPoints',
]
