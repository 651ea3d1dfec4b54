"""
Concrete matrix implementations.

- ``Matrix``   storage-agnostic base composing every operator mixin
- ``DMatrix``  dense matrix
- ``SMatrix``  sparse matrix
- ``JMatrix``  composite view over joined matrices
"""

from ._matrix import Matrix
from ._dmatrix import DMatrix
from ._smatrix import SMatrix
from ._jmatrix import JMatrix

__all__ = [
    Matrix.__name__,
    DMatrix.__name__,
    SMatrix.__name__,
    JMatrix.__name__,
]
