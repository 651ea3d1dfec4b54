"""
Composite matrix formed by joining matrices along rows or columns.

A `JMatrix` owns no storage: reads and writes are forwarded to its
sub-matrices, so changes through the composite are visible in the joined
matrices and vice versa. It supports transposition but not slicing or
splitting.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np

from ...domain._errors import DimensionError, StateError
from ..mask._dense_mask import DMask
from ._matrix import Matrix


class JMatrix(Matrix):
    """
    Joined view over two or more matrices.

    Parameters
    ----------
    sub_matrices : Sequence[Matrix]
        Matrices in join order. They must agree on depth and on the
        non-joined axis.
    joined_vertically : bool, optional
        Stack along rows if True, along columns otherwise.
    name : str, optional
        Label used in recorded expression signatures.
    rng : np.random.Generator, optional
        Random generator.

    Raises
    ------
    DimensionError
        If the sub-matrices cannot be joined.
    """

    MASK = DMask

    def __init__(
        self,
        sub_matrices: Sequence[Matrix],
        joined_vertically: bool = True,
        *,
        name: Optional[str] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        sub_matrices = tuple(sub_matrices)
        if not sub_matrices:
            raise DimensionError("JMatrix", "at least one matrix is required")
        first = sub_matrices[0]
        axis = 0 if joined_vertically else 1
        for matrix in sub_matrices[1:]:
            if matrix.depth != first.depth or matrix.shape[1 - axis] != first.shape[1 - axis]:
                raise DimensionError(
                    "JMatrix",
                    "joined matrices must agree on the non-joined axes",
                    expected=first.shape,
                    actual=matrix.shape,
                )
        shape = list(first.shape)
        shape[axis] = sum(matrix.shape[axis] for matrix in sub_matrices)

        self._sub_matrices = sub_matrices
        self._joined_vertically = bool(joined_vertically)
        self._storage = None
        self._init_common(tuple(shape), sliceable=False, name=name, rng=rng)

    @property
    def sub_matrices(self) -> Tuple[Matrix, ...]:
        return self._sub_matrices

    @property
    def joined_vertically(self) -> bool:
        return self._joined_vertically

    @classmethod
    def from_numpy(cls, array: np.ndarray, **kwargs) -> Matrix:
        from ._dmatrix import DMatrix

        return DMatrix.from_numpy(array, **kwargs)

    def get_new_matrix(self, rows: int, columns: int, depth: int = 1) -> Matrix:
        """Results of operations on a composite are dense."""
        from ._dmatrix import DMatrix

        return DMatrix(rows, columns, depth, rng=self._rng)

    # ------------------------------------------------------------------
    # Element access
    # ------------------------------------------------------------------
    def _locate(self, row: int, column: int) -> Tuple[Matrix, int, int]:
        """Map a pure (untransposed) coordinate to a sub-matrix coordinate."""
        offset = row if self._joined_vertically else column
        for matrix in self._sub_matrices:
            extent = matrix.rows if self._joined_vertically else matrix.columns
            if offset < extent:
                if self._joined_vertically:
                    return matrix, offset, column
                return matrix, row, offset
            offset -= extent
        raise DimensionError("index", "coordinate out of range", expected=self._pure_shape)

    def get_value(self, row: int, column: int, depth: int = 0) -> float:
        self._check_coordinate(row, column, depth)
        if self._transposed:
            row, column = column, row
        matrix, r, c = self._locate(row, column)
        return matrix.get_value(r, c, depth)

    def set_value(self, row: int, column: int, depth: int, value: float) -> None:
        self._check_coordinate(row, column, depth)
        if self._transposed:
            row, column = column, row
        matrix, r, c = self._locate(row, column)
        matrix.set_value(r, c, depth, value)

    def to_numpy(self) -> np.ndarray:
        joined = np.concatenate(
            [matrix.to_numpy() for matrix in self._sub_matrices],
            axis=0 if self._joined_vertically else 1,
        )
        return joined.transpose(1, 0, 2) if self._transposed else joined

    def copy_from_numpy(self, array: np.ndarray) -> None:
        array = np.asarray(array, dtype=np.float64)
        if array.ndim == 2:
            array = array[:, :, None]
        if array.shape != self.shape:
            raise DimensionError(
                "copy_from_numpy", "array shape mismatch", expected=self.shape, actual=array.shape
            )
        if self._transposed:
            array = array.transpose(1, 0, 2)
        axis = 0 if self._joined_vertically else 1
        start = 0
        for matrix in self._sub_matrices:
            extent = matrix.shape[axis]
            part = array[start : start + extent] if axis == 0 else array[:, start : start + extent]
            matrix.copy_from_numpy(part)
            start += extent

    def mask_array(self) -> np.ndarray:
        """
        Combined mask: the composite's own mask if attached, otherwise the
        sub-matrix masks joined.
        """
        if self._mask is not None:
            return super().mask_array()
        joined = np.concatenate(
            [matrix.mask_array() for matrix in self._sub_matrices],
            axis=0 if self._joined_vertically else 1,
        )
        return joined.transpose(1, 0, 2) if self._transposed else joined

    def reset(self) -> None:
        for matrix in self._sub_matrices:
            matrix.reset()

    def copy(self) -> "JMatrix":
        """Independent composite over copies of the sub-matrices."""
        duplicate = self.reference()
        duplicate._sub_matrices = tuple(matrix.copy() for matrix in self._sub_matrices)
        duplicate._mask = self._mask.copy() if self._mask is not None else None
        duplicate._procedure_factory = None
        return duplicate

    def unslice(self) -> None:
        raise StateError("JMatrix is not sliceable.")
