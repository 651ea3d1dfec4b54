"""
CPU reference kernels for masked reductions (NumPy backend).

Every reduction excludes masked cells from both the accumulator and the
element count. The ``axis`` argument follows `Direction.axis`: ``0`` reduces
over rows, ``1`` over columns, ``2`` over depth and ``None`` over every cell.
Results keep the reduced axis with size one (``keepdims``), so a full
reduction returns shape ``(1, 1, 1)``.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np


def _reduce_axes(axis: Optional[int]):
    return (0, 1, 2) if axis is None else axis


def masked_count_cpu(mask: np.ndarray, axis: Optional[int]) -> np.ndarray:
    """Number of unmasked cells per reduced group."""
    return np.sum(~mask, axis=_reduce_axes(axis), keepdims=True).astype(np.float64)


def masked_sum_cpu(x: np.ndarray, mask: np.ndarray, axis: Optional[int]) -> np.ndarray:
    """Sum of unmasked cells per reduced group."""
    return np.sum(np.where(mask, 0.0, x), axis=_reduce_axes(axis), keepdims=True)


def masked_mean_cpu(x: np.ndarray, mask: np.ndarray, axis: Optional[int]) -> np.ndarray:
    """
    Mean of unmasked cells per reduced group.

    Groups without unmasked cells have mean zero.
    """
    total = masked_sum_cpu(x, mask, axis)
    count = masked_count_cpu(mask, axis)
    return np.divide(total, count, out=np.zeros_like(total), where=count > 0)


def masked_variance_cpu(
    x: np.ndarray,
    mask: np.ndarray,
    axis: Optional[int],
    mean: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Population variance ``mean((x - mean)^2)`` of unmasked cells.

    Parameters
    ----------
    x, mask : np.ndarray
        Values and mask of shape ``(R, C, D)``.
    axis : Optional[int]
        Reduction axis.
    mean : Optional[np.ndarray], optional
        Precomputed mean broadcastable to the reduced shape. If None it is
        computed here.
    """
    if mean is None:
        mean = masked_mean_cpu(x, mask, axis)
    centered = np.where(mask, 0.0, x - mean)
    return masked_mean_cpu(centered * centered, mask, axis)


def bessel_correction_cpu(count: np.ndarray) -> np.ndarray:
    """
    Return ``n / (n - 1)`` per group, or zero where ``n < 2``.
    """
    return np.divide(count, count - 1.0, out=np.zeros_like(count), where=count > 1)


def masked_norm_cpu(
    x: np.ndarray, mask: np.ndarray, axis: Optional[int], p: float
) -> np.ndarray:
    """p-norm ``(sum |x|^p)^(1/p)`` of unmasked cells."""
    powered = np.power(np.abs(np.where(mask, 0.0, x)), p)
    return np.power(np.sum(powered, axis=_reduce_axes(axis), keepdims=True), 1.0 / p)


def masked_entropy_cpu(x: np.ndarray, mask: np.ndarray, axis: Optional[int]) -> np.ndarray:
    """
    Average entropy ``-sum(x * log2(x)) / count`` of unmasked cells.

    Non-positive cells contribute zero (``0 * log 0 = 0``).
    """
    valid = (~mask) & (x > 0.0)
    safe = np.where(valid, x, 1.0)
    terms = np.where(valid, -safe * np.log2(safe), 0.0)
    total = np.sum(terms, axis=_reduce_axes(axis), keepdims=True)
    count = masked_count_cpu(mask, axis)
    return np.divide(total, count, out=np.zeros_like(total), where=count > 0)


def masked_extreme_cpu(
    x: np.ndarray, mask: np.ndarray, axis: Optional[int], find_minimum: bool
) -> np.ndarray:
    """
    Minimum or maximum of unmasked cells per group (zero for empty groups).
    """
    fill = np.inf if find_minimum else -np.inf
    filled = np.where(mask, fill, x)
    reducer = np.min if find_minimum else np.max
    out = reducer(filled, axis=_reduce_axes(axis), keepdims=True)
    return np.where(masked_count_cpu(mask, axis) > 0, out, 0.0)


def masked_argextreme_cpu(
    x: np.ndarray, mask: np.ndarray, find_minimum: bool
) -> Tuple[int, int, int]:
    """
    Coordinate ``(row, column, depth)`` of the first minimum or maximum.

    Cells are scanned in row-major order; the first extreme value wins.
    Returns ``(0, 0, 0)`` if every cell is masked.
    """
    fill = np.inf if find_minimum else -np.inf
    filled = np.where(mask, fill, x)
    if mask.all():
        return (0, 0, 0)
    flat = np.argmin(filled) if find_minimum else np.argmax(filled)
    row, column, depth = np.unravel_index(int(flat), x.shape)
    return (int(row), int(column), int(depth))
