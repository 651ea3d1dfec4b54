"""
Sparse storage keeping only non-default cells.

Cells are kept in a ``dict`` keyed by storage index. Writing the default
value (zero) removes the key, so the dictionary only ever holds non-zero
cells and `nnz` reflects the true sparsity.
"""

from __future__ import annotations

from typing import Dict

import numpy as np

from ._base import Storage


class SparseStorage(Storage):
    """
    Key-indexed storage of non-zero cells.
    """

    variant = "sparse"

    def __init__(self, size: int) -> None:
        super().__init__(size)
        self._cells: Dict[int, float] = {}

    @property
    def nnz(self) -> int:
        """Number of stored (non-zero) cells."""
        return len(self._cells)

    def get(self, index: int) -> float:
        return self._cells.get(int(index), 0.0)

    def set(self, index: int, value: float) -> None:
        index = int(index)
        if value == 0.0:
            self._cells.pop(index, None)
        else:
            self._cells[index] = float(value)

    def reset(self) -> None:
        self._cells.clear()

    def gather(self, indices: np.ndarray) -> np.ndarray:
        indices = np.asarray(indices, dtype=np.int64)
        out = np.zeros(indices.shape, dtype=np.float64)
        if not self._cells:
            return out
        flat_idx = indices.reshape(-1)
        flat_out = out.reshape(-1)
        cells = self._cells
        for k, idx in enumerate(flat_idx.tolist()):
            value = cells.get(idx)
            if value is not None:
                flat_out[k] = value
        return out

    def scatter(self, indices: np.ndarray, values: np.ndarray) -> None:
        indices = np.asarray(indices, dtype=np.int64).reshape(-1)
        values = np.broadcast_to(
            np.asarray(values, dtype=np.float64), indices.shape
        ).reshape(-1)
        for idx, value in zip(indices.tolist(), values.tolist()):
            self.set(idx, value)

    def copy(self) -> "SparseStorage":
        out = SparseStorage(self._size)
        out._cells = dict(self._cells)
        return out

    @classmethod
    def new_of_size(cls, size: int) -> "SparseStorage":
        return cls(size)
