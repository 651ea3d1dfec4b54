"""
Unary functions, softmax and the softmax gradient.
"""

from __future__ import annotations

from typing import Union

import numpy as np

from ....domain._errors import DimensionError, ParameterError
from ....domain._function_types import UnaryFunctionType
from ...functions._unary_function import UnaryFunction
from ...ops.elementwise_cpu import unary_forward_cpu
from ...ops.softmax_cpu import (
    gumbel_noise_cpu,
    softmax_backward_cpu,
    softmax_forward_cpu,
)


class MatrixMixinUnary:
    """
    Element-wise unary functions and column-wise softmax.

    Masked cells pass through unmodified. Softmax normalizes over rows for
    every column and depth and leaves masked cells out of the normalization.
    """

    def apply(self, unary_function: Union[UnaryFunctionType, UnaryFunction], out=None):
        """
        Apply a unary function element-wise.

        Parameters
        ----------
        unary_function : UnaryFunctionType or UnaryFunction
            Function to apply. Softmax-family functions dispatch to
            `softmax` / `gumbel_softmax`.
        out : Matrix, optional
            Destination matrix.
        """
        if not isinstance(unary_function, UnaryFunction):
            unary_function = UnaryFunction(unary_function)
        if unary_function.function_type is UnaryFunctionType.SOFTMAX:
            return self.softmax(out=out)
        if unary_function.function_type is UnaryFunctionType.GUMBEL_SOFTMAX:
            return self.gumbel_softmax(unary_function.tau, out=out)

        result = self._prepare_out("apply", out, self.shape)

        def execute():
            values = unary_forward_cpu(
                self.to_numpy(), self.mask_array(), unary_function.function
            )
            return self._write(result, values)

        return self._record(
            "unary_function", (), execute, out=out, unary_function=unary_function
        )

    def sqrt(self, out=None):
        return self.apply(UnaryFunctionType.SQRT, out)

    def sign(self, out=None):
        return self.apply(UnaryFunctionType.SGN, out)

    def abs(self, out=None):
        return self.apply(UnaryFunctionType.ABS, out)

    def exp(self, out=None):
        return self.apply(UnaryFunctionType.EXP, out)

    def log(self, out=None):
        """Natural logarithm."""
        return self.apply(UnaryFunctionType.LOG, out)

    def _softmax(self, tau: float, gumbel: bool, out):
        if tau <= 0.0:
            raise ParameterError("tau", tau, "must be positive")
        result = self._prepare_out("softmax", out, self.shape)

        def execute():
            x = self.to_numpy()
            noise = gumbel_noise_cpu(x.shape, self._rng) if gumbel else None
            values = softmax_forward_cpu(x, self.mask_array(), tau=tau, noise=noise)
            return self._write(result, values)

        return self._record("softmax", (), execute, out=out, tau=tau, gumbel=gumbel)

    def softmax(self, tau: float = 1.0, out=None):
        """
        Column-wise softmax with temperature `tau`.

        Raises
        ------
        ParameterError
            If `tau` is not positive.
        """
        return self._softmax(tau, False, out)

    def gumbel_softmax(self, tau: float = 1.0, out=None):
        """Softmax of the logits plus Gumbel(0, 1) noise drawn from the matrix RNG."""
        return self._softmax(tau, True, out)

    def softmax_gradient(self, grad_out, out=None):
        """
        Jacobian-vector product of softmax, treating `self` as the softmax
        output.

        Parameters
        ----------
        grad_out : Matrix
            Upstream gradient of the same geometry.

        Returns
        -------
        Matrix
            Gradient with respect to the softmax input.
        """
        if not self.has_equal_size(grad_out):
            raise DimensionError(
                "softmax_gradient",
                "gradient geometry mismatch",
                expected=self.shape,
                actual=grad_out.shape,
            )
        result = self._prepare_out("softmax_gradient", out, self.shape)
        values = softmax_backward_cpu(self.to_numpy(), grad_out.to_numpy())
        return self._write(result, np.asarray(values, dtype=np.float64))
