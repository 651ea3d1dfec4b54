"""
Unary and binary function catalogues (value + derivative).
"""

from ._unary_function import UnaryFunction
from ._binary_function import BinaryFunction

__all__ = [
    UnaryFunction.__name__,
    BinaryFunction.__name__,
]
