"""Row-major two dimensional grid used for control nets and sample grids."""

from __future__ import annotations

from typing import Any, Tuple

import numpy as np

from splinekit.errors import InvalidConfigurationError

ColRow = Tuple[int, int]


class Grid:
    """A ``width`` x ``height`` grid stored as one flat array of rows.

    ``values`` holds ``width * height`` entries, row after row, so the entry
    for column ``col`` of row ``row`` lives at ``row * width + col``.  When
    ``values`` is a numpy array, :meth:`row` returns a writable view.
    """

    def __init__(self, width: int, values: Any):
        if width <= 0:
            raise InvalidConfigurationError('grid width must be positive', actual=width)
        if len(values) % width != 0:
            raise InvalidConfigurationError(
                'points length must be a multiple of the row length',
                expected=f'a multiple of {width}', actual=len(values))
        self._width = width
        self._values = values

    @classmethod
    def empty(cls, width: int, height: int, dimension: int, dtype) -> 'Grid':
        return cls(width, np.empty((width * height, dimension), dtype=dtype))

    def __repr__(self):
        return f'Grid(width={self._width}, height={self.height})'

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return len(self._values) // self._width

    @property
    def values(self):
        return self._values

    def vec_index(self, colrow: ColRow) -> int:
        col, row = colrow
        return row * self._width + col

    def _check(self, colrow: ColRow) -> None:
        col, row = colrow
        if not (0 <= col < self._width and 0 <= row < self.height):
            raise IndexError(
                f'grid index ({col},{row}) out of bounds ({self._width},{self.height})')

    def __getitem__(self, colrow: ColRow):
        self._check(colrow)
        return self._values[self.vec_index(colrow)]

    def __setitem__(self, colrow: ColRow, value) -> None:
        self._check(colrow)
        self._values[self.vec_index(colrow)] = value

    def row(self, row: int):
        if not 0 <= row < self.height:
            raise IndexError(f'grid row {row} out of bounds ({self.height})')
        start = row * self._width
        return self._values[start:start + self._width]


__all__ = ['Grid', 'ColRow']
