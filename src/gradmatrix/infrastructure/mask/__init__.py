"""
Element/row/column masks for dense and sparse matrices.
"""

from ._base import Mask
from ._dense_mask import DMask
from ._sparse_mask import SMask

__all__ = [
    Mask.__name__,
    DMask.__name__,
    SMask.__name__,
]
