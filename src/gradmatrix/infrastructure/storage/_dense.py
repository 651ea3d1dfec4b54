"""
Dense storage backed by a contiguous NumPy vector.
"""

from __future__ import annotations

import numpy as np

from ._base import Storage


class DenseStorage(Storage):
    """
    Every cell materialized in a float64 NumPy array.
    """

    variant = "dense"

    def __init__(self, size: int) -> None:
        super().__init__(size)
        self._data = np.zeros(self._size, dtype=np.float64)

    def get(self, index: int) -> float:
        return float(self._data[index])

    def set(self, index: int, value: float) -> None:
        self._data[index] = value

    def reset(self) -> None:
        self._data.fill(0.0)

    def gather(self, indices: np.ndarray) -> np.ndarray:
        return self._data[indices]

    def scatter(self, indices: np.ndarray, values: np.ndarray) -> None:
        self._data[indices] = values

    def copy(self) -> "DenseStorage":
        out = DenseStorage(self._size)
        out._data[:] = self._data
        return out

    @classmethod
    def new_of_size(cls, size: int) -> "DenseStorage":
        return cls(size)

    @classmethod
    def constant(cls, size: int, value: float) -> "DenseStorage":
        storage = cls(size)
        storage._data.fill(float(value))
        return storage
