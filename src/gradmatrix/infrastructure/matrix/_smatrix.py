"""
Sparse matrix.
"""

from ..mask._sparse_mask import SMask
from ..storage._sparse import SparseStorage
from ._matrix import Matrix


class SMatrix(Matrix):
    """
    Matrix that stores only its non-zero cells.

    Operations produce sparse results; writing zero into a cell releases it.
    Only `SMask` masks may be attached.
    """

    STORAGE = SparseStorage
    MASK = SMask

    @property
    def nnz(self) -> int:
        """Number of stored (non-zero) cells in the underlying storage."""
        return self._storage.nnz
