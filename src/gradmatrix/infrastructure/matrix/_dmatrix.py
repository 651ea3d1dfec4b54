"""
Dense matrix.
"""

from ..mask._dense_mask import DMask
from ..storage._dense import DenseStorage
from ._matrix import Matrix


class DMatrix(Matrix):
    """
    Matrix with every cell materialized in a NumPy vector.

    Examples
    --------
    >>> m = DMatrix(2, 3)
    >>> m[0, 1] = 4.0
    >>> m.shape
    (2, 3, 1)
    """

    STORAGE = DenseStorage
    MASK = DMask
