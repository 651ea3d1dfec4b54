"""
CPU reference kernels for element-wise matrix operations (NumPy backend).

All kernels operate on *effective* matrix views: float64 arrays of shape
``(rows, columns, depth)`` together with boolean mask arrays of the same
shape. They are storage-agnostic; the matrix layer gathers values from dense
or sparse storage before calling them and scatters results afterwards.

Masking semantics
-----------------
A masked cell is excluded from computation and passes the receiver's value
through unmodified.

Broadcasting
------------
Operands either share one shape, or one of them is a scalar ``(1, 1, 1)``
array that broadcasts against the other. Shape validation happens in the
matrix layer; kernels assume valid input.
"""

from __future__ import annotations

from typing import Callable, Optional, Tuple

import numpy as np


def broadcast_shape(
    a_shape: Tuple[int, int, int], b_shape: Tuple[int, int, int]
) -> Optional[Tuple[int, int, int]]:
    """
    Return the result geometry of a binary operation, or None if invalid.

    Parameters
    ----------
    a_shape, b_shape : tuple[int, int, int]
        Effective operand geometries.

    Returns
    -------
    Optional[tuple[int, int, int]]
        The larger geometry when shapes agree or one operand is scalar;
        otherwise None.
    """
    if a_shape == b_shape:
        return a_shape
    if b_shape == (1, 1, 1):
        return a_shape
    if a_shape == (1, 1, 1):
        return b_shape
    return None


def safe_divide(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Element-wise ``a / b`` where division by zero yields ``+inf``.

    Notes
    -----
    Any cell whose divisor is exactly zero (including ``0 / 0``) becomes
    positive infinity instead of NaN or a signed infinity.
    """
    a, b = np.broadcast_arrays(a, b)
    with np.errstate(divide="ignore", invalid="ignore"):
        out = np.true_divide(a, b)
    return np.where(b == 0.0, np.inf, out)


BINARY_KERNELS: dict[str, Callable[[np.ndarray, np.ndarray], np.ndarray]] = {
    "add": np.add,
    "subtract": np.subtract,
    "multiply": np.multiply,
    "divide": safe_divide,
}


def binary_forward_cpu(
    a: np.ndarray,
    b: np.ndarray,
    mask_a: np.ndarray,
    mask_b: np.ndarray,
    fn: Callable[[np.ndarray, np.ndarray], np.ndarray],
) -> np.ndarray:
    """
    Apply a binary function with scalar broadcasting and mask pass-through.

    Parameters
    ----------
    a, b : np.ndarray
        Operand views of shape ``(R, C, D)`` or ``(1, 1, 1)``.
    mask_a, mask_b : np.ndarray
        Boolean masks matching `a` and `b`.
    fn : Callable
        Vectorized binary function.

    Returns
    -------
    np.ndarray
        Result of the broadcast shape. Cells masked in either operand hold
        the (broadcast) value of `a`.
    """
    shape = np.broadcast_shapes(a.shape, b.shape)
    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        values = np.asarray(fn(a, b), dtype=np.float64)
    values = np.broadcast_to(values, shape)
    masked = np.broadcast_to(mask_a, shape) | np.broadcast_to(mask_b, shape)
    if not masked.any():
        return np.array(values, dtype=np.float64)
    return np.where(masked, np.broadcast_to(a, shape), values)


def unary_forward_cpu(
    x: np.ndarray,
    mask: np.ndarray,
    fn: Callable[[np.ndarray], np.ndarray],
) -> np.ndarray:
    """
    Apply a unary function; masked cells pass through unmodified.
    """
    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        values = np.asarray(fn(x), dtype=np.float64)
    values = np.broadcast_to(values, x.shape)
    if not mask.any():
        return np.array(values, dtype=np.float64)
    return np.where(mask, x, values)


def sgnmul_forward_cpu(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Multiply `a` by the sign of `b`, with ``sign(0)`` treated as zero.
    """
    return a * np.sign(b)
