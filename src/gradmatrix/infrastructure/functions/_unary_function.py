"""
Unary function catalogue: value and derivative of every `UnaryFunctionType`.

Definitions are registered per function type with the `_define` decorator.
Each registered builder receives the owning `UnaryFunction` (to read its
parameters) and returns a ``(function, derivative)`` pair of vectorized NumPy
callables.

The softmax family is column-wise rather than element-wise: its function
normalizes over rows (see ``ops.softmax_cpu``) and its derivative is the
diagonal of the softmax Jacobian, ``s * (1 - s)``. The full Jacobian-vector
product is available as `Matrix.softmax_gradient`.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from ...domain._errors import ParameterError
from ...domain._function_types import UnaryFunctionType
from ..ops.softmax_cpu import gumbel_noise_cpu, softmax_forward_cpu

ArrayFn = Callable[[np.ndarray], np.ndarray]
_Builder = Callable[["UnaryFunction"], Tuple[ArrayFn, ArrayFn]]

_DEFINITIONS: Dict[UnaryFunctionType, _Builder] = {}

_SQRT_2_OVER_PI = math.sqrt(2.0 / math.pi)


def _define(function_type: UnaryFunctionType) -> Callable[[_Builder], _Builder]:
    def decorator(builder: _Builder) -> _Builder:
        _DEFINITIONS[function_type] = builder
        return builder

    return decorator


def _sigmoid(x: np.ndarray) -> np.ndarray:
    return 1.0 / (1.0 + np.exp(-x))


class UnaryFunction:
    """
    A unary function together with its derivative.

    Parameters
    ----------
    function_type : UnaryFunctionType
        Catalogue entry. Use ``UnaryFunctionType.CUSTOM`` together with
        `function` and `derivative` for caller-defined functions.
    threshold : float, optional
        Switch point of the ReLU/ELU/SELU family. Defaults to 0.
    alpha : Optional[float], optional
        Slope (ReLU, default 0) or saturation (ELU default 1, SELU default
        1.6733) below the threshold.
    lambda_ : float, optional
        SELU scale. Defaults to 1.0507.
    tau : float, optional
        Gumbel softmax temperature. Defaults to 1.
    function, derivative : Optional[Callable], optional
        Vectorized callables for ``CUSTOM``.

    Raises
    ------
    ParameterError
        If ``CUSTOM`` is requested without both callables, or `tau` is not
        positive.
    """

    def __init__(
        self,
        function_type: UnaryFunctionType,
        *,
        threshold: float = 0.0,
        alpha: Optional[float] = None,
        lambda_: float = 1.0507,
        tau: float = 1.0,
        function: Optional[ArrayFn] = None,
        derivative: Optional[ArrayFn] = None,
    ) -> None:
        if tau <= 0.0:
            raise ParameterError("tau", tau, "must be positive")
        self.function_type = function_type
        self.threshold = float(threshold)
        self.alpha = alpha
        self.lambda_ = float(lambda_)
        self.tau = float(tau)

        if function_type is UnaryFunctionType.CUSTOM:
            if function is None or derivative is None:
                raise ParameterError(
                    "function", function, "CUSTOM requires a function and a derivative"
                )
            self._function, self._derivative = function, derivative
        else:
            self._function, self._derivative = _DEFINITIONS[function_type](self)

    def __repr__(self) -> str:
        return f"UnaryFunction({self.function_type.name})"

    @property
    def is_softmax(self) -> bool:
        """Whether the function normalizes columns instead of mapping cells."""
        return self.function_type in (
            UnaryFunctionType.SOFTMAX,
            UnaryFunctionType.GUMBEL_SOFTMAX,
        )

    def function(self, x: np.ndarray) -> np.ndarray:
        """Evaluate the function on an array."""
        return self._function(x)

    def derivative(self, x: np.ndarray) -> np.ndarray:
        """Evaluate the derivative on an array."""
        return self._derivative(x)

    def softmax(
        self,
        x: np.ndarray,
        mask: Optional[np.ndarray] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> np.ndarray:
        """
        Evaluate a softmax-family function with mask and random generator.
        """
        if self.function_type is UnaryFunctionType.GUMBEL_SOFTMAX:
            rng = rng if rng is not None else np.random.default_rng()
            noise = gumbel_noise_cpu(x.shape, rng)
            return softmax_forward_cpu(x, mask, tau=self.tau, noise=noise)
        return softmax_forward_cpu(x, mask)


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
@_define(UnaryFunctionType.ABS)
def _abs(_: UnaryFunction):
    return np.abs, np.sign


@_define(UnaryFunctionType.COS)
def _cos(_: UnaryFunction):
    return np.cos, lambda x: -np.sin(x)


@_define(UnaryFunctionType.COSH)
def _cosh(_: UnaryFunction):
    return np.cosh, np.sinh


@_define(UnaryFunctionType.EXP)
def _exp(_: UnaryFunction):
    return np.exp, np.exp


@_define(UnaryFunctionType.LOG)
def _log(_: UnaryFunction):
    return np.log, lambda x: 1.0 / x


@_define(UnaryFunctionType.LOG10)
def _log10(_: UnaryFunction):
    return np.log10, lambda x: 1.0 / (math.log(10.0) * x)


@_define(UnaryFunctionType.SGN)
def _sgn(_: UnaryFunction):
    return np.sign, np.zeros_like


@_define(UnaryFunctionType.SIN)
def _sin(_: UnaryFunction):
    return np.sin, np.cos


@_define(UnaryFunctionType.SINH)
def _sinh(_: UnaryFunction):
    return np.sinh, np.cosh


@_define(UnaryFunctionType.SQRT)
def _sqrt(_: UnaryFunction):
    return np.sqrt, lambda x: 1.0 / (2.0 * np.sqrt(x))


@_define(UnaryFunctionType.CBRT)
def _cbrt(_: UnaryFunction):
    return np.cbrt, lambda x: 1.0 / (3.0 * np.cbrt(x * x))


@_define(UnaryFunctionType.MULINV)
def _mulinv(_: UnaryFunction):
    return lambda x: 1.0 / x, lambda x: -1.0 / (x * x)


@_define(UnaryFunctionType.TAN)
def _tan(_: UnaryFunction):
    return np.tan, lambda x: 1.0 + np.tan(x) ** 2


@_define(UnaryFunctionType.TANH)
def _tanh(_: UnaryFunction):
    return np.tanh, lambda x: 1.0 - np.tanh(x) ** 2


@_define(UnaryFunctionType.LINEAR)
def _linear(_: UnaryFunction):
    return lambda x: np.array(x, dtype=np.float64), np.ones_like


@_define(UnaryFunctionType.SIGMOID)
def _sigmoid_def(_: UnaryFunction):
    return _sigmoid, lambda x: _sigmoid(x) * (1.0 - _sigmoid(x))


@_define(UnaryFunctionType.SWISH)
def _swish(_: UnaryFunction):
    def derivative(x):
        s = _sigmoid(x)
        return s + x * s * (1.0 - s)

    return lambda x: x * _sigmoid(x), derivative


@_define(UnaryFunctionType.HARDSIGMOID)
def _hardsigmoid(_: UnaryFunction):
    return (
        lambda x: np.minimum(1.0, np.maximum(0.0, 0.125 * x + 0.5)),
        lambda x: np.where((x < -4.0) | (x > 4.0), 0.0, 0.125),
    )


@_define(UnaryFunctionType.BIPOLARSIGMOID)
def _bipolarsigmoid(_: UnaryFunction):
    return (
        lambda x: 2.0 / (1.0 + np.exp(-x)) - 1.0,
        lambda x: 2.0 * np.exp(x) / (np.exp(x) + 1.0) ** 2,
    )


@_define(UnaryFunctionType.TANHSIG)
def _tanhsig(_: UnaryFunction):
    return (
        lambda x: 2.0 / (np.exp(-2.0 * x) + 1.0) - 1.0,
        lambda x: 4.0 * np.exp(2.0 * x) / (np.exp(2.0 * x) + 1.0) ** 2,
    )


@_define(UnaryFunctionType.TANHAPPR)
def _tanhappr(_: UnaryFunction):
    return (
        lambda x: (np.exp(2.0 * x) - 1.0) / (np.exp(2.0 * x) + 1.0),
        lambda x: 4.0 * np.exp(2.0 * x) / (np.exp(2.0 * x) + 1.0) ** 2,
    )


@_define(UnaryFunctionType.HARDTANH)
def _hardtanh(_: UnaryFunction):
    return (
        lambda x: np.minimum(1.0, np.maximum(-1.0, 0.5 * x)),
        lambda x: np.where((x < -2.0) | (x > 2.0), 0.0, 0.5),
    )


@_define(UnaryFunctionType.SOFTPLUS)
def _softplus(_: UnaryFunction):
    return lambda x: np.log1p(np.exp(x)), _sigmoid


@_define(UnaryFunctionType.SOFTSIGN)
def _softsign(_: UnaryFunction):
    return lambda x: x / (np.abs(x) + 1.0), lambda x: 1.0 / (np.abs(x) + 1.0) ** 2


@_define(UnaryFunctionType.RELU)
def _relu(f: UnaryFunction):
    threshold = f.threshold
    alpha = 0.0 if f.alpha is None else float(f.alpha)
    return (
        lambda x: np.where(x < threshold, alpha * x, x),
        lambda x: np.where(x < threshold, alpha, 1.0),
    )


@_define(UnaryFunctionType.RELU_COS)
def _relu_cos(_: UnaryFunction):
    return (
        lambda x: np.maximum(0.0, x) + np.cos(x),
        lambda x: np.where(x < 0.0, 0.0, 1.0) - np.sin(x),
    )


@_define(UnaryFunctionType.RELU_SIN)
def _relu_sin(_: UnaryFunction):
    return (
        lambda x: np.maximum(0.0, x) + np.sin(x),
        lambda x: np.where(x < 0.0, 0.0, 1.0) + np.cos(x),
    )


@_define(UnaryFunctionType.ELU)
def _elu(f: UnaryFunction):
    threshold = f.threshold
    alpha = 1.0 if f.alpha is None else float(f.alpha)
    return (
        lambda x: np.where(x < threshold, alpha * (np.exp(x) - 1.0), x),
        lambda x: np.where(x < threshold, alpha * np.exp(x), 1.0),
    )


@_define(UnaryFunctionType.SELU)
def _selu(f: UnaryFunction):
    threshold = f.threshold
    alpha = 1.6733 if f.alpha is None else float(f.alpha)
    scale = f.lambda_
    return (
        lambda x: np.where(x < threshold, scale * alpha * (np.exp(x) - 1.0), scale * x),
        lambda x: np.where(x < threshold, scale * alpha * np.exp(x), scale),
    )


@_define(UnaryFunctionType.GELU)
def _gelu(_: UnaryFunction):
    def inner(x):
        return _SQRT_2_OVER_PI * (x + 0.044715 * x**3)

    def derivative(x):
        t = np.tanh(inner(x))
        d_inner = _SQRT_2_OVER_PI * (1.0 + 3.0 * 0.044715 * x**2)
        return 0.5 * (1.0 + t) + 0.5 * x * (1.0 - t * t) * d_inner

    return lambda x: 0.5 * x * (1.0 + np.tanh(inner(x))), derivative


@_define(UnaryFunctionType.SOFTMAX)
def _softmax(_: UnaryFunction):
    def derivative(x):
        s = softmax_forward_cpu(x)
        return s * (1.0 - s)

    return softmax_forward_cpu, derivative


@_define(UnaryFunctionType.GUMBEL_SOFTMAX)
def _gumbel_softmax(f: UnaryFunction):
    tau = f.tau

    def function(x):
        return f.softmax(x)

    def derivative(x):
        s = softmax_forward_cpu(x, tau=tau)
        return s * (1.0 - s) / tau

    return function, derivative


@_define(UnaryFunctionType.GAUSSIAN)
def _gaussian(_: UnaryFunction):
    return (
        lambda x: np.exp(-(x**2) / 2.0),
        lambda x: -x * np.exp(-(x**2) / 2.0),
    )


@_define(UnaryFunctionType.SINACT)
def _sinact(_: UnaryFunction):
    half_pi = 0.5 * math.pi
    return (
        lambda x: np.where(x < -half_pi, -1.0, np.where(x > half_pi, 1.0, np.sin(x))),
        lambda x: np.where((x < -half_pi) | (x > half_pi), 0.0, np.cos(x)),
    )


@_define(UnaryFunctionType.LOGIT)
def _logit(_: UnaryFunction):
    return lambda x: np.log(x / (1.0 - x)), lambda x: -1.0 / ((x - 1.0) * x)
