"""
Element-wise binary arithmetic and the dot product.

Binary operations broadcast a scalar ``(1, 1, 1)`` operand against the other
operand; any other geometry mismatch raises `DimensionError`. Division by
zero yields ``+inf``. Cells masked in either operand pass the receiver's
value through unmodified.

Python operators map onto the named methods:

- ``a + b`` / ``b + a`` / ``a += b``  ->  `add`
- ``a - b`` / ``b - a`` / ``a -= b``  ->  `subtract`
- ``a * b`` / ``b * a`` / ``a *= b``  ->  `multiply`
- ``a / b`` / ``b / a`` / ``a /= b``  ->  `divide`
- ``a @ b``                           ->  `dot`
- ``a ** b``                          ->  `power`
- ``-a``                              ->  ``multiply(-1)``
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Union

import numpy as np

from ....domain._errors import DimensionError
from ....domain._function_types import BinaryFunctionType
from ...functions._binary_function import BinaryFunction
from ...ops.dot_cpu import dot_forward_cpu
from ...ops.elementwise_cpu import (
    BINARY_KERNELS,
    binary_forward_cpu,
    broadcast_shape,
    sgnmul_forward_cpu,
)

Number = Union[int, float]


class MatrixMixinArithmetic:
    """
    Binary arithmetic operators for matrices.

    Notes
    -----
    Every method accepts another matrix or a Python number (lifted to a
    scalar matrix) and an optional ``out`` matrix. Results are computed in
    full before ``out`` is written, so ``out=self`` is a safe in-place
    update.
    """

    def _binary_shape(self, op: str, other: Any) -> tuple:
        shape = broadcast_shape(self.shape, other.shape)
        if shape is None:
            raise DimensionError(
                op, "operand geometry mismatch", expected=self.shape, actual=other.shape
            )
        return shape

    def _binary(
        self,
        op: str,
        other: Any,
        fn: Callable[[np.ndarray, np.ndarray], np.ndarray],
        out: Any,
        family: Optional[str] = None,
        **params: Any,
    ):
        other = self._as_operand(other)
        shape = self._binary_shape(op, other)
        result = self._prepare_out(op, out, shape)

        def execute():
            values = binary_forward_cpu(
                self.to_numpy(), other.to_numpy(), self.mask_array(), other.mask_array(), fn
            )
            return self._write(result, values)

        return self._record(family or op, (other,), execute, out=out, **params)

    def add(self, other, out=None):
        return self._binary("add", other, BINARY_KERNELS["add"], out)

    def subtract(self, other, out=None):
        return self._binary("subtract", other, BINARY_KERNELS["subtract"], out)

    def multiply(self, other, out=None):
        return self._binary("multiply", other, BINARY_KERNELS["multiply"], out)

    def divide(self, other, out=None):
        """Element-wise division; a zero divisor yields ``+inf``."""
        return self._binary("divide", other, BINARY_KERNELS["divide"], out)

    def apply_bi(
        self,
        other,
        binary_function: Union[BinaryFunctionType, BinaryFunction],
        out=None,
    ):
        """
        Apply a binary function ``f(self, other)`` element-wise.

        Parameters
        ----------
        other : Matrix or Number
            Second argument.
        binary_function : BinaryFunctionType or BinaryFunction
            Function to apply.
        out : Matrix, optional
            Destination matrix.
        """
        if not isinstance(binary_function, BinaryFunction):
            binary_function = BinaryFunction(binary_function)
        return self._binary(
            "apply_bi",
            other,
            binary_function.function,
            out,
            family="binary_function",
            binary_function=binary_function,
        )

    def maximum(self, other, out=None):
        """Element-wise maximum."""
        return self.apply_bi(other, BinaryFunctionType.MAX, out)

    def minimum(self, other, out=None):
        """Element-wise minimum."""
        return self.apply_bi(other, BinaryFunctionType.MIN, out)

    def power(self, exponent, out=None):
        return self.apply_bi(exponent, BinaryFunctionType.POW, out)

    def sgnmul(self, other, out=None):
        """
        Multiply by the sign of `other` (``sign(0) = 0``).

        Not recorded; used by gradient code that reapplies a forward sign.
        """
        other = self._as_operand(other)
        shape = self._binary_shape("sgnmul", other)
        result = self._prepare_out("sgnmul", out, shape)
        return self._write(result, sgnmul_forward_cpu(self.to_numpy(), other.to_numpy()))

    def dot(self, other, out=None):
        """
        Per-depth matrix product.

        Raises
        ------
        DimensionError
            If ``self.columns != other.rows`` or the depths differ.
        """
        other = self._as_operand(other)
        if self.columns != other.rows or self.depth != other.depth:
            raise DimensionError(
                "dot",
                "inner dimension or depth mismatch",
                expected=(self.columns, self.depth),
                actual=(other.rows, other.depth),
            )
        result = self._prepare_out("dot", out, (self.rows, other.columns, self.depth))

        def execute():
            values = dot_forward_cpu(
                self.to_numpy(), other.to_numpy(), self.mask_array(), other.mask_array()
            )
            return self._write(result, values)

        return self._record("dot", (other,), execute, out=out)

    # ----------------------------
    # Operators
    # ----------------------------
    def __add__(self, other):
        return self.add(other)

    def __radd__(self, other):
        return self._as_operand(other).add(self)

    def __iadd__(self, other):
        return self.add(other, out=self)

    def __sub__(self, other):
        return self.subtract(other)

    def __rsub__(self, other):
        return self._as_operand(other).subtract(self)

    def __isub__(self, other):
        return self.subtract(other, out=self)

    def __mul__(self, other):
        return self.multiply(other)

    def __rmul__(self, other):
        return self._as_operand(other).multiply(self)

    def __imul__(self, other):
        return self.multiply(other, out=self)

    def __truediv__(self, other):
        return self.divide(other)

    def __rtruediv__(self, other):
        return self._as_operand(other).divide(self)

    def __itruediv__(self, other):
        return self.divide(other, out=self)

    def __matmul__(self, other):
        return self.dot(other)

    def __pow__(self, exponent):
        return self.power(exponent)

    def __neg__(self):
        return self.multiply(-1.0)
