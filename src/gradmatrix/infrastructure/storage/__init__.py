"""
Flat element storage variants.

- ``DenseStorage``  every cell materialized (NumPy vector)
- ``SparseStorage`` only non-zero cells, keyed by index
"""

from ._base import Storage
from ._dense import DenseStorage
from ._sparse import SparseStorage

__all__ = [
    Storage.__name__,
    DenseStorage.__name__,
    SparseStorage.__name__,
]
