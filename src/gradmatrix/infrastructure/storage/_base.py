"""
Element storage contract shared by dense and sparse matrices.

Storage is a flat, index-addressed vector of float cells. Matrices map their
logical ``(row, column, depth)`` coordinates onto storage indices (see
`MatrixShapeAndIndexingMixin`), so the storage itself knows nothing about
geometry, transpose or slicing.

Design notes
------------
- Operation kernels never touch storage directly. They read the effective
  view through `gather` and write results through `scatter`, which keeps
  every kernel storage-agnostic.
- Exactly two implementations exist: `DenseStorage` and `SparseStorage`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np


class Storage(ABC):
    """
    Abstract flat element storage.

    Parameters
    ----------
    size : int
        Number of cells.
    """

    #: Human-readable variant name, used in type mismatch errors.
    variant: str = "abstract"

    def __init__(self, size: int) -> None:
        self._size = int(size)

    def __len__(self) -> int:
        return self._size

    @abstractmethod
    def get(self, index: int) -> float:
        """Return the value stored at `index`."""
        ...

    @abstractmethod
    def set(self, index: int, value: float) -> None:
        """Store `value` at `index`."""
        ...

    @abstractmethod
    def reset(self) -> None:
        """Reset every cell to the default value (zero)."""
        ...

    @abstractmethod
    def gather(self, indices: np.ndarray) -> np.ndarray:
        """
        Read many cells at once.

        Parameters
        ----------
        indices : np.ndarray
            Integer array of storage indices (any shape).

        Returns
        -------
        np.ndarray
            float64 array with the same shape as `indices`.
        """
        ...

    @abstractmethod
    def scatter(self, indices: np.ndarray, values: np.ndarray) -> None:
        """Write `values` into the cells addressed by `indices`."""
        ...

    @abstractmethod
    def copy(self) -> "Storage":
        """Return an independent copy of this storage."""
        ...

    @classmethod
    @abstractmethod
    def new_of_size(cls, size: int) -> "Storage":
        """Construct zero-filled storage of the given size."""
        ...

    @classmethod
    def constant(cls, size: int, value: float) -> "Storage":
        """Construct storage with every cell set to `value`."""
        storage = cls.new_of_size(size)
        indices = np.arange(size, dtype=np.int64)
        storage.scatter(indices, np.full(size, float(value)))
        return storage
