"""
Matrix initialization public API.

Importing this module registers every built-in scheme of `Initialization`
in the `MatrixInitializer` registry.
"""

from ._constants import *
from ._xavier import *
from ._he import *
from ._lecun import *
from ._base import MatrixInitializer

__all__ = [
    MatrixInitializer.__name__,
]
