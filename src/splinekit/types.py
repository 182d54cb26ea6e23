"""Scalar and dimension policy for splinekit geometry.

Points are stored as rows of ``numpy`` arrays.  The scalar type of a piece
of geometry is one of a small, fixed set of names:

``float32``, ``float64``, ``longdouble``
    ordinary numpy floating point arrays.

``mpf``
    arbitrary precision ``mpmath.mpf`` scalars held in numpy ``object``
    arrays.  Slow, but useful when checking the numerical behaviour of the
    blending recurrence.

Point dimensions are limited to 1 through 4.  Rational (NURBS) geometry
carries its weight as the last coordinate, so a 4D control net describes
a 3D rational surface.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Any, Iterator

import mpmath as mpm
import numpy as np

from splinekit.errors import InvalidConfigurationError

MPF = 'mpf'
SUPPORTED_DTYPES = ('float32', 'float64', 'longdouble', MPF)
SUPPORTED_DIMENSIONS = (1, 2, 3, 4)

_DTYPE_ALIASES = {
    'float': 'float64',
    'double': 'float64',
    'single': 'float32',
    'float128': 'longdouble',
    'mpmath': MPF,
}


@dataclass(frozen=True)
class ParamRange:
    """Inclusive parameter interval ``[start, end]``."""

    start: Any
    end: Any

    def __contains__(self, value) -> bool:
        return self.start <= value <= self.end

    def __iter__(self) -> Iterator[Any]:
        yield self.start
        yield self.end

    def __getitem__(self, index: int):
        return (self.start, self.end)[index]

    @property
    def span(self):
        return self.end - self.start


def normalize_dtype(dtype: Any) -> str:
    """Return the canonical scalar type name for ``dtype``.

    Accepts the names in ``SUPPORTED_DTYPES``, a few common aliases, numpy
    dtypes and scalar types, the builtin ``float`` and ``mpmath.mpf``.
    """

    if dtype is mpm.mpf:
        return MPF
    if dtype is float:
        return 'float64'
    if isinstance(dtype, str):
        name = dtype.strip().lower()
        name = _DTYPE_ALIASES.get(name, name)
        if name in SUPPORTED_DTYPES:
            return name
        raise InvalidConfigurationError(
            f"unsupported scalar type '{dtype}'",
            expected=', '.join(SUPPORTED_DTYPES))
    try:
        np_dtype = np.dtype(dtype)
    except TypeError as exc:
        raise InvalidConfigurationError(
            f"unsupported scalar type {dtype!r}",
            expected=', '.join(SUPPORTED_DTYPES)) from exc
    if np_dtype.name in SUPPORTED_DTYPES:
        return np_dtype.name
    if np_dtype == np.dtype(np.longdouble):
        return 'longdouble'
    raise InvalidConfigurationError(
        f"unsupported scalar type {np_dtype.name!r}",
        expected=', '.join(SUPPORTED_DTYPES))


def resolve_dtype(dtype: Any = None) -> str:
    """Like :func:`normalize_dtype`, falling back to the configured default."""

    if dtype is None:
        from splinekit.config import get_settings
        dtype = get_settings().dtype
    return normalize_dtype(dtype)


def numpy_dtype(name: str) -> np.dtype:
    """Return the numpy storage dtype for a scalar type name."""

    if name == MPF:
        return np.dtype(object)
    return np.dtype(name)


def is_real(value) -> bool:
    """Is ``value`` a real scalar number, and not a boolean?"""

    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (numbers.Real, mpm.mpf))


def is_finite(value) -> bool:
    """Is a scalar (any supported type) neither infinite nor NaN?"""

    if isinstance(value, mpm.mpf):
        return not (mpm.isinf(value) or mpm.isnan(value))
    return bool(np.isfinite(value))


def all_finite(values: np.ndarray) -> bool:
    if values.dtype == object:
        return all(is_finite(v) for v in values.flat)
    return bool(np.all(np.isfinite(values)))


def cast_scalar(value, name: str):
    """Convert a real number to a scalar of type ``name``."""

    if not is_real(value):
        raise TypeError(f'expected a real number, got {type(value).__name__}')
    if name == MPF:
        if isinstance(value, mpm.mpf):
            return value
        if isinstance(value, numbers.Integral):
            return mpm.mpf(int(value))
        return mpm.mpf(float(value))
    return numpy_dtype(name).type(value)


_to_mpf = np.frompyfunc(lambda value: cast_scalar(value, MPF), 1, 1)


def sqrt_scalar(value):
    if isinstance(value, mpm.mpf):
        return mpm.sqrt(value)
    return np.sqrt(value)


def as_array(values: Any, name: str) -> np.ndarray:
    """Convert nested sequences (or an array) to an array of type ``name``.

    The result is always a fresh copy, never a view of the input.
    """

    if name == MPF:
        raw = np.array(values, dtype=object)
        if raw.size == 0:
            return raw
        if raw.ndim == 0:
            return np.array(cast_scalar(raw.item(), MPF), dtype=object)
        for item in raw.flat:
            if not is_real(item):
                raise InvalidConfigurationError(
                    f'non-numeric coordinate {item!r}')
        return _to_mpf(raw)
    try:
        return np.array(values, dtype=numpy_dtype(name))
    except (TypeError, ValueError) as exc:
        raise InvalidConfigurationError(
            f'cannot convert values to {name}: {exc}') from exc


def as_points(points: Any, name: str, *,
              dimension: int | None = None) -> np.ndarray:
    """Return an ``(N, D)`` point array of scalar type ``name``.

    Raises ``InvalidConfigurationError`` for empty input, ragged rows,
    unsupported dimensions, a mismatched ``dimension`` or non-finite
    coordinates.
    """

    arr = as_array(points, name)
    if arr.ndim != 2 or arr.shape[0] == 0:
        raise InvalidConfigurationError(
            'control points must be a non-empty sequence of equal-length points',
            expected='(N, D)', actual=arr.shape)
    dim = arr.shape[1]
    if dim not in SUPPORTED_DIMENSIONS:
        raise InvalidConfigurationError(
            'unsupported point dimension',
            expected=SUPPORTED_DIMENSIONS, actual=dim)
    if dimension is not None and dim != dimension:
        raise InvalidConfigurationError(
            'wrong point dimension', expected=dimension, actual=dim)
    if not all_finite(arr):
        raise InvalidConfigurationError('control points must be finite')
    return arr


def zero_point(dimension: int, name: str) -> np.ndarray:
    if name == MPF:
        return _to_mpf(np.zeros(dimension, dtype=object))
    return np.zeros(dimension, dtype=numpy_dtype(name))


def dtype_of(arr: np.ndarray) -> str:
    """Inverse of :func:`numpy_dtype` for arrays built by this module."""

    if arr.dtype == object:
        return MPF
    return normalize_dtype(arr.dtype)


def check_degree(degree: Any, *, minimum: int = 0) -> int:
    if isinstance(degree, (bool, np.bool_)) or not isinstance(degree, numbers.Integral):
        raise InvalidConfigurationError(
            'degree must be an integer', actual=type(degree).__name__)
    if degree < minimum:
        raise InvalidConfigurationError(
            f'degree must be at least {minimum}', actual=degree)
    return int(degree)


__all__ = [
    'MPF',
    'SUPPORTED_DTYPES',
    'SUPPORTED_DIMENSIONS',
    'ParamRange',
    'normalize_dtype',
    'resolve_dtype',
    'numpy_dtype',
    'is_real',
    'is_finite',
    'all_finite',
    'cast_scalar',
    'sqrt_scalar',
    'as_array',
    'as_points',
    'zero_point',
    'dtype_of',
    'check_degree',
]
