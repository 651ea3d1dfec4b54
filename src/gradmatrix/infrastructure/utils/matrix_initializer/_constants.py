"""
Constant, random and identity initializers.

- ``zero``      every cell 0
- ``one``       every cell 1
- ``random``    uniform draws in ``[0, 1)``
- ``identity``  1 where ``row == column``, 0 elsewhere (every depth slice)
"""

import numpy as np

from ._base import MatrixInitializer, fill_constant
from ...matrix._matrix import Matrix


@MatrixInitializer.register_initializer("zero")
def zero(matrix: Matrix, inputs=None, outputs=None) -> Matrix:
    return fill_constant(matrix, 0.0)


@MatrixInitializer.register_initializer("one")
def one(matrix: Matrix, inputs=None, outputs=None) -> Matrix:
    return fill_constant(matrix, 1.0)


@MatrixInitializer.register_initializer("random")
def random(matrix: Matrix, inputs=None, outputs=None) -> Matrix:
    """Uniform draws in ``[0, 1)`` from the matrix RNG."""
    matrix.copy_from_numpy(matrix.rng.random(matrix.shape))
    return matrix


@MatrixInitializer.register_initializer("identity")
def identity(matrix: Matrix, inputs=None, outputs=None) -> Matrix:
    rows, columns, depth = matrix.shape
    plane = np.eye(rows, columns, dtype=np.float64)
    matrix.copy_from_numpy(np.repeat(plane[:, :, None], depth, axis=2))
    return matrix
