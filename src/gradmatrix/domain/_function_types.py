"""
Enumerations of the unary and binary function catalogues.

The enums are pure identifiers. Their numerical definitions (value and
derivative) live in the infrastructure layer, see
``infrastructure.functions``.
"""

from enum import Enum, auto


class UnaryFunctionType(Enum):
    """
    Element-wise (or column-wise for the softmax family) unary functions.

    Notes
    -----
    Parameterized members read their parameters from the ``UnaryFunction``
    that wraps them:

    - ``RELU``, ``RELU_COS``, ``RELU_SIN``: ``threshold`` and ``alpha``
    - ``ELU``: ``alpha``
    - ``SELU``: ``lambda_`` and ``alpha``
    - ``GUMBEL_SOFTMAX``: ``tau``
    - ``CUSTOM``: caller-provided function and derivative
    """

    ABS = auto()
    COS = auto()
    COSH = auto()
    EXP = auto()
    LOG = auto()
    LOG10 = auto()
    SGN = auto()
    SIN = auto()
    SINH = auto()
    SQRT = auto()
    CBRT = auto()
    MULINV = auto()
    TAN = auto()
    TANH = auto()
    LINEAR = auto()
    SIGMOID = auto()
    SWISH = auto()
    HARDSIGMOID = auto()
    BIPOLARSIGMOID = auto()
    TANHSIG = auto()
    TANHAPPR = auto()
    HARDTANH = auto()
    SOFTPLUS = auto()
    SOFTSIGN = auto()
    RELU = auto()
    RELU_COS = auto()
    RELU_SIN = auto()
    ELU = auto()
    SELU = auto()
    GELU = auto()
    SOFTMAX = auto()
    GUMBEL_SOFTMAX = auto()
    GAUSSIAN = auto()
    SINACT = auto()
    LOGIT = auto()
    CUSTOM = auto()


class BinaryFunctionType(Enum):
    """
    Element-wise binary functions.

    Notes
    -----
    ``POW`` raises the first operand to the power given by the second
    operand (usually a scalar). ``CUSTOM`` requires a caller-provided
    function and derivative.
    """

    POW = auto()
    MAX = auto()
    MIN = auto()
    CUSTOM = auto()
