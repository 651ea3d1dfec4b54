"""
Matrix geometry, view and indexing mixin.

This module defines `MatrixShapeAndIndexingMixin`, which owns the single
index-mapping function every operation relies on: it turns a logical
``(row, column, depth)`` coordinate of the *effective* view into a flat
storage index.

View model
----------
- The storage holds a *pure* ``(rows, columns, depth)`` block.
- A slice window (start and extent per axis, in pure coordinates) restricts
  the view to a sub-block without copying.
- The transpose flag swaps the meaning of row and column; it is applied to
  the effective coordinates before the slice origin is added.

Index mapping
-------------
For effective coordinate ``(r, c, d)`` with ``(pr, pc) = (c, r)`` when
transposed and ``(r, c)`` otherwise::

    index = (slice_row + pr)
          + (slice_column + pc) * pure_rows                 if pure_columns > 1
          + (slice_depth + d) * pure_rows * pure_columns    if pure_depth > 1

Design notes
------------
- Element access is vectorized: `to_numpy` gathers the whole effective view
  through an index array and `copy_from_numpy` scatters it back, so kernels
  never see storage, transpose or slicing.
- Mixins construct new matrices via `get_new_matrix`, never by importing the
  concrete classes.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from ...domain._errors import DimensionError, StateError


class MatrixShapeAndIndexingMixin:
    """
    Geometry queries, slicing and element access for storage-backed matrices.

    Notes
    -----
    Methods assume the host class provides:

    - ``_storage`` (a `Storage`), ``_pure_shape``, ``_transposed``
    - ``_slice_start``, ``_slice_size``, ``_sliceable``
    """

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------
    @property
    def rows(self) -> int:
        return self._slice_size[1] if self._transposed else self._slice_size[0]

    @property
    def columns(self) -> int:
        return self._slice_size[0] if self._transposed else self._slice_size[1]

    @property
    def depth(self) -> int:
        return self._slice_size[2]

    @property
    def shape(self) -> Tuple[int, int, int]:
        """Effective ``(rows, columns, depth)``."""
        return (self.rows, self.columns, self.depth)

    @property
    def pure_shape(self) -> Tuple[int, int, int]:
        """Geometry of the underlying storage block, ignoring transpose and slice."""
        return self._pure_shape

    def size(self) -> int:
        rows, columns, depth = self.shape
        return rows * columns * depth

    @property
    def is_scalar(self) -> bool:
        return self.shape == (1, 1, 1)

    @property
    def is_transposed(self) -> bool:
        return self._transposed

    @property
    def is_sliced(self) -> bool:
        return self._slice_start != (0, 0, 0) or self._slice_size != self._pure_shape

    @property
    def sliceable(self) -> bool:
        return self._sliceable

    def has_equal_size(self, other: "MatrixShapeAndIndexingMixin") -> bool:
        """Whether every effective axis matches (strict per-axis AND)."""
        return (
            self.rows == other.rows
            and self.columns == other.columns
            and self.depth == other.depth
        )

    # ------------------------------------------------------------------
    # Indexing
    # ------------------------------------------------------------------
    def _check_coordinate(self, row: int, column: int, depth: int) -> None:
        if not (
            0 <= row < self.rows and 0 <= column < self.columns and 0 <= depth < self.depth
        ):
            raise DimensionError(
                "index",
                "coordinate out of range",
                expected=self.shape,
                actual=(row, column, depth),
            )

    def _cell_index(self, row: int, column: int, depth: int) -> int:
        pure_rows, pure_columns, pure_depth = self._pure_shape
        start_row, start_column, start_depth = self._slice_start
        pr, pc = (column, row) if self._transposed else (row, column)
        index = start_row + pr
        if pure_columns > 1:
            index += (start_column + pc) * pure_rows
        if pure_depth > 1:
            index += (start_depth + depth) * pure_rows * pure_columns
        return index

    def _index_array(self) -> np.ndarray:
        """Storage index of every effective cell, shape ``(rows, columns, depth)``."""
        rows, columns, depth = self.shape
        pure_rows, pure_columns, pure_depth = self._pure_shape
        start_row, start_column, start_depth = self._slice_start

        r = np.arange(rows, dtype=np.int64)[:, None, None]
        c = np.arange(columns, dtype=np.int64)[None, :, None]
        d = np.arange(depth, dtype=np.int64)[None, None, :]
        pr, pc = (c, r) if self._transposed else (r, c)

        index = start_row + pr
        if pure_columns > 1:
            index = index + (start_column + pc) * pure_rows
        if pure_depth > 1:
            index = index + (start_depth + d) * pure_rows * pure_columns
        return np.broadcast_to(index, (rows, columns, depth))

    def get_value(self, row: int, column: int, depth: int = 0) -> float:
        """Return the value at an effective coordinate."""
        self._check_coordinate(row, column, depth)
        return self._storage.get(self._cell_index(row, column, depth))

    def set_value(self, row: int, column: int, depth: int, value: float) -> None:
        """Write the value at an effective coordinate."""
        self._check_coordinate(row, column, depth)
        self._storage.set(self._cell_index(row, column, depth), float(value))

    def __getitem__(self, key) -> float:
        row, column, depth = self._normalize_key(key)
        return self.get_value(row, column, depth)

    def __setitem__(self, key, value: float) -> None:
        row, column, depth = self._normalize_key(key)
        self.set_value(row, column, depth, value)

    @staticmethod
    def _normalize_key(key) -> Tuple[int, int, int]:
        if not isinstance(key, tuple) or len(key) not in (2, 3):
            raise TypeError("Matrix indices must be (row, column) or (row, column, depth)")
        if len(key) == 2:
            return int(key[0]), int(key[1]), 0
        return int(key[0]), int(key[1]), int(key[2])

    def to_numpy(self) -> np.ndarray:
        """
        Return a copy of the effective view as a float64 ``(R, C, D)`` array.
        """
        return np.array(self._storage.gather(self._index_array()), dtype=np.float64)

    def copy_from_numpy(self, array: np.ndarray) -> None:
        """
        Overwrite the effective view.

        Parameters
        ----------
        array : np.ndarray
            Array of shape ``(rows, columns, depth)``; a 2D array is accepted
            for depth-one matrices.

        Raises
        ------
        DimensionError
            If the array shape does not match the effective geometry.
        """
        array = np.asarray(array, dtype=np.float64)
        if array.ndim == 2:
            array = array[:, :, None]
        if array.shape != self.shape:
            raise DimensionError(
                "copy_from_numpy", "array shape mismatch", expected=self.shape, actual=array.shape
            )
        self._storage.scatter(self._index_array().reshape(-1), array.reshape(-1))

    # ------------------------------------------------------------------
    # Slicing
    # ------------------------------------------------------------------
    def slice_at(
        self,
        start_row: int,
        start_column: int,
        end_row: int,
        end_column: int,
        start_depth: int = 0,
        end_depth: Optional[int] = None,
    ) -> None:
        """
        Restrict the view to a half-open window of the pure storage block.

        Coordinates refer to the pure (untransposed) geometry; ends are
        exclusive. The window replaces any previous window.

        Raises
        ------
        StateError
            If the matrix was constructed as non-sliceable.
        DimensionError
            If the window is empty or exceeds the pure geometry.
        """
        if not self._sliceable:
            raise StateError(f"{type(self).__name__} is not sliceable.")
        pure_rows, pure_columns, pure_depth = self._pure_shape
        if end_depth is None:
            end_depth = pure_depth
        window = (start_row, start_column, start_depth, end_row, end_column, end_depth)
        if not (
            0 <= start_row < end_row <= pure_rows
            and 0 <= start_column < end_column <= pure_columns
            and 0 <= start_depth < end_depth <= pure_depth
        ):
            raise DimensionError(
                "slice_at", "slice window out of range", expected=self._pure_shape, actual=window
            )
        self._slice_start = (start_row, start_column, start_depth)
        self._slice_size = (end_row - start_row, end_column - start_column, end_depth - start_depth)

    def unslice(self) -> None:
        """Reset the view to the full pure geometry."""
        if not self._sliceable:
            raise StateError(f"{type(self).__name__} is not sliceable.")
        self._slice_start = (0, 0, 0)
        self._slice_size = self._pure_shape
