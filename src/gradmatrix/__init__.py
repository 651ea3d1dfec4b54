"""
gradmatrix: rank <= 3 dense/sparse matrices with masking, spatial operators
and an embedded operation recorder.

The package follows a two-layer layout:

- ``domain``          protocols, enums, errors and abstract contracts
- ``infrastructure``  storage, masks, kernels, matrices and the recorder

Library code only logs through the ``gradmatrix`` logger hierarchy, which is
silent unless the application configures logging.
"""

import logging

from .domain._direction import Direction
from .domain._errors import (
    DimensionError,
    GraphConflictError,
    MatrixError,
    ParameterError,
    StateError,
    TypeMismatchError,
)
from .domain._function_types import BinaryFunctionType, UnaryFunctionType
from .domain.utils._matrix_initialization import Initialization
from .infrastructure.functions import BinaryFunction, UnaryFunction
from .infrastructure.mask import DMask, Mask, SMask
from .infrastructure.matrix import DMatrix, JMatrix, Matrix, SMatrix
from .infrastructure.ops.winograd_cpu import WinogradTransforms
from .infrastructure.procedure import Expression, ProcedureFactory
from .infrastructure.sampling import binomial, dirichlet, gamma, multinomial
from .infrastructure.utils.matrix_initializer import MatrixInitializer

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Direction",
    "MatrixError",
    "DimensionError",
    "TypeMismatchError",
    "GraphConflictError",
    "StateError",
    "ParameterError",
    "UnaryFunctionType",
    "BinaryFunctionType",
    "Initialization",
    "UnaryFunction",
    "BinaryFunction",
    "Mask",
    "DMask",
    "SMask",
    "Matrix",
    "DMatrix",
    "SMatrix",
    "JMatrix",
    "WinogradTransforms",
    "Expression",
    "ProcedureFactory",
    "MatrixInitializer",
    "binomial",
    "multinomial",
    "gamma",
    "dirichlet",
]
