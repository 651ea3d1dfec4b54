"""
Concrete matrix base class composing the view layer, the recording protocol
and every operation mixin.

`Matrix` is storage-agnostic: subclasses only choose a storage variant
(``STORAGE``) and the matching mask variant (``MASK``):

- `DMatrix`  dense storage, `DMask`
- `SMatrix`  sparse storage, `SMask`
- `JMatrix`  composite view over joined matrices

Design notes
------------
- Operations allocate results through `get_new_matrix`, so a dense input
  yields a dense result and a sparse input a sparse one.
- `reference()` returns an alias sharing storage and mask; `copy()` returns
  an independent duplicate with a copied mask and no recorder.
- Randomness (mask draws, random pooling, Gumbel noise, random
  initialization) comes from the matrix's ``numpy.random.Generator``, which
  is inherited by results.
"""

from __future__ import annotations

import copy as _copy
from abc import ABC
from typing import Callable, Optional, Union

import numpy as np
from typing_extensions import Self

from ...domain._errors import DimensionError, ParameterError
from ...domain.utils._matrix_initialization import Initialization
from ..mask._base import Mask
from ..storage._base import Storage
from ._recording import MatrixRecordingMixin
from ._shape_and_indexing import MatrixShapeAndIndexingMixin
from .mixins import (
    MatrixMixinArithmetic,
    MatrixMixinMasking,
    MatrixMixinReduction,
    MatrixMixinSpatial,
    MatrixMixinStatistics,
    MatrixMixinStructural,
    MatrixMixinUnary,
)

Number = Union[int, float]
Initializer = Callable[[int, int], float]


class Matrix(
    MatrixShapeAndIndexingMixin,
    MatrixRecordingMixin,
    MatrixMixinMasking,
    MatrixMixinArithmetic,
    MatrixMixinUnary,
    MatrixMixinReduction,
    MatrixMixinStatistics,
    MatrixMixinSpatial,
    MatrixMixinStructural,
    ABC,
):
    """
    Rank <= 3 matrix with optional mask and recorder.

    Parameters
    ----------
    rows, columns : int
        Effective geometry.
    depth : int, optional
        Number of depth slices. Defaults to 1.
    initialization : Initialization, optional
        Named initialization scheme applied after allocation.
    initializer : Callable[[int, int], float], optional
        Per-cell ``(row, column) -> value`` function, applied to every depth
        slice. Mutually exclusive with `initialization`.
    inputs, outputs : int, optional
        Fan-in/fan-out used by the ``*_CONV`` initialization schemes.
    transposed : bool, optional
        Create the matrix as a transposed view of ``columns x rows`` storage.
    sliceable : bool, optional
        Whether `slice_at` is permitted. Defaults to True.
    name : str, optional
        Label used in recorded expression signatures.
    rng : np.random.Generator, optional
        Random generator. Defaults to ``np.random.default_rng()``.

    Raises
    ------
    DimensionError
        If any dimension is below one.
    ParameterError
        If both `initialization` and `initializer` are given.
    """

    STORAGE: type = Storage
    MASK: type = Mask

    def __init__(
        self,
        rows: int,
        columns: int,
        depth: int = 1,
        *,
        initialization: Optional[Initialization] = None,
        initializer: Optional[Initializer] = None,
        inputs: Optional[int] = None,
        outputs: Optional[int] = None,
        transposed: bool = False,
        sliceable: bool = True,
        name: Optional[str] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        if rows < 1 or columns < 1 or depth < 1:
            raise DimensionError(
                type(self).__name__,
                "matrix dimensions must be positive",
                actual=(rows, columns, depth),
            )
        if initialization is not None and initializer is not None:
            raise ParameterError(
                "initializer", initializer, "cannot be combined with an initialization scheme"
            )
        pure_shape = (int(columns), int(rows), int(depth)) if transposed else (
            int(rows), int(columns), int(depth)
        )
        self._storage = self.STORAGE.new_of_size(pure_shape[0] * pure_shape[1] * pure_shape[2])
        self._init_common(
            pure_shape, transposed=transposed, sliceable=sliceable, name=name, rng=rng
        )
        if initialization is not None or initializer is not None:
            self.initialize(initialization or initializer, inputs=inputs, outputs=outputs)

    def _init_common(
        self,
        pure_shape,
        *,
        transposed: bool = False,
        sliceable: bool = True,
        name: Optional[str] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self._pure_shape = tuple(pure_shape)
        self._transposed = bool(transposed)
        self._slice_start = (0, 0, 0)
        self._slice_size = self._pure_shape
        self._sliceable = bool(sliceable)
        self._mask = None
        self._procedure_factory = None
        self._rng = rng if rng is not None else np.random.default_rng()
        self._cyclic_offset = (0, 0)
        self.name = name
        self.stride = 1
        self.dilation = 1
        self.filter_row_size: Optional[int] = None
        self.filter_column_size: Optional[int] = None
        self.filter_depth: Optional[int] = None
        self.is_depth_separable = False

    def __repr__(self) -> str:
        label = f", name={self.name!r}" if self.name else ""
        return (
            f"{type(self).__name__}(rows={self.rows}, columns={self.columns}, "
            f"depth={self.depth}{label})"
        )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def from_numpy(cls, array: np.ndarray, **kwargs) -> "Matrix":
        """
        Build a matrix from a 1D, 2D or 3D array.

        A 1D array becomes a column vector, a 2D array a depth-one matrix.
        """
        array = np.asarray(array, dtype=np.float64)
        if array.ndim == 0:
            array = array.reshape(1, 1, 1)
        elif array.ndim == 1:
            array = array[:, None, None]
        elif array.ndim == 2:
            array = array[:, :, None]
        elif array.ndim != 3:
            raise DimensionError(
                "from_numpy", "array rank must be at most 3", actual=array.shape
            )
        matrix = cls(*array.shape, **kwargs)
        matrix.copy_from_numpy(array)
        return matrix

    @classmethod
    def as_matrix(cls, value, **kwargs) -> "Matrix":
        """
        Lift a number or array to a matrix; matrices are returned unchanged.

        A number becomes a ``1 x 1 x 1`` scalar matrix.
        """
        if isinstance(value, Matrix):
            return value
        return cls.from_numpy(np.asarray(value, dtype=np.float64), **kwargs)

    @classmethod
    def encode_to_bit_column_vector(cls, value: int, bits: int, **kwargs) -> "Matrix":
        """
        Encode a non-negative integer as a ``bits x 1`` column of zeros and
        ones, most significant bit first.

        Raises
        ------
        ParameterError
            If `value` is negative or does not fit in `bits` bits.
        """
        if bits < 1:
            raise ParameterError("bits", bits, "must be at least 1")
        if value < 0:
            raise ParameterError("value", value, "must be non-negative")
        if value >= 2**bits:
            raise ParameterError("value", value, f"does not fit in {bits} bits")
        digits = [(value >> (bits - 1 - row)) & 1 for row in range(bits)]
        return cls.from_numpy(np.array(digits, dtype=np.float64), **kwargs)

    def get_new_matrix(self, rows: int, columns: int, depth: int = 1) -> "Matrix":
        """Allocate a zero matrix of the same storage variant and RNG."""
        return type(self)(rows, columns, depth, rng=self._rng)

    def _as_operand(self, other) -> "Matrix":
        if isinstance(other, Matrix):
            return other
        array = np.asarray(other, dtype=np.float64)
        if array.ndim == 0:
            scalar = self.get_new_matrix(1, 1, 1)
            scalar.set_value(0, 0, 0, float(array))
            return scalar
        return type(self.get_new_matrix(1, 1, 1)).from_numpy(array, rng=self._rng)

    def _prepare_out(self, op: str, out: Optional["Matrix"], shape) -> "Matrix":
        shape = tuple(shape)
        if out is None:
            return self.get_new_matrix(*shape)
        if out.shape != shape:
            raise DimensionError(op, "output geometry mismatch", expected=shape, actual=out.shape)
        return out

    @staticmethod
    def _write(result: "Matrix", values: np.ndarray) -> "Matrix":
        result.copy_from_numpy(values)
        return result

    # ------------------------------------------------------------------
    # Aliasing and copying
    # ------------------------------------------------------------------
    @property
    def sub_matrices(self) -> tuple:
        """Constituent matrices of a composite matrix; empty otherwise."""
        return ()

    def reference(self) -> Self:
        """Return an alias that shares storage, mask and recorder."""
        return _copy.copy(self)

    def copy(self) -> Self:
        """
        Return an independent duplicate.

        Storage and mask are copied; the recorder is not carried over.
        """
        duplicate = _copy.copy(self)
        duplicate._storage = self._storage.copy()
        duplicate._mask = self._mask.copy() if self._mask is not None else None
        duplicate._procedure_factory = None
        return duplicate

    def reset(self) -> None:
        """Zero every cell of the underlying storage."""
        self._storage.reset()

    def set_equal_to(self, other: "Matrix") -> None:
        """
        Overwrite this matrix's values with `other`'s.

        Raises
        ------
        DimensionError
            If the geometries differ.
        """
        if not self.has_equal_size(other):
            raise DimensionError(
                "set_equal_to", "geometry mismatch", expected=self.shape, actual=other.shape
            )
        self.copy_from_numpy(other.to_numpy())

    def equals(self, other: "Matrix") -> bool:
        """Whether `other` has the same geometry and identical values."""
        return self.has_equal_size(other) and bool(
            np.array_equal(self.to_numpy(), other.to_numpy())
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    @property
    def rng(self) -> np.random.Generator:
        return self._rng

    @rng.setter
    def rng(self, value: np.random.Generator) -> None:
        self._rng = value

    def initialize(
        self,
        initialization: Union[Initialization, str, Initializer],
        inputs: Optional[int] = None,
        outputs: Optional[int] = None,
    ) -> Self:
        """
        Fill the matrix in-place.

        Parameters
        ----------
        initialization : Initialization, str or Callable[[int, int], float]
            Named scheme, or a ``(row, column) -> value`` function applied
            to every depth slice.
        inputs, outputs : int, optional
            Fan-in/fan-out for the ``*_CONV`` schemes.
        """
        if callable(initialization) and not isinstance(initialization, (Initialization, str)):
            rows, columns, depth = self.shape
            plane = np.array(
                [[initialization(r, c) for c in range(columns)] for r in range(rows)],
                dtype=np.float64,
            )
            self.copy_from_numpy(np.repeat(plane[:, :, None], depth, axis=2))
            return self
        from ..utils.matrix_initializer import MatrixInitializer

        return MatrixInitializer(initialization)(self, inputs, outputs)
