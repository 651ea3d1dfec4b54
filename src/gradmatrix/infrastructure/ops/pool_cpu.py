"""
CPU reference implementations for pooling (NumPy backend).

Pooling runs independently on every depth slice of an ``(R, C, D)`` view.
Output size per spatial axis is ``(in - filter) // stride + 1``. A dilation
``d`` keeps the window taps ``0, d, 2d, ... < filter`` on each axis.

Implemented pooling variants
-----------------------------
- Max pooling (forward + backward); the first maximum in row-major window
  order wins.
- Random pooling (forward + backward); the source cell is drawn with
  probability proportional to its magnitude.
- Cyclic pooling (forward + backward); every call picks the same window
  offset for all windows and the offset advances deterministically between
  calls (row offset first, then column offset).
- Average pooling (forward + backward); masked cells are left out of the sum
  but the divisor is always the number of window taps.

Position maps
-------------
Max, random and cyclic pooling return an integer array of shape
``(R_out, C_out, D, 2)`` holding the ``(row, column)`` of the source cell of
every output cell. The backward pass scatters the upstream gradient to exactly
these cells.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view


def _out_hw(
    R: int, C: int, k: Tuple[int, int], stride: int
) -> Tuple[int, int]:
    """
    Compute output spatial dimensions for a pooling window.

    Parameters
    ----------
    R, C : int
        Input rows and columns.
    k : tuple[int, int]
        Window size ``(rows, columns)``.
    stride : int
        Window step.
    """
    k_r, k_c = k
    return (R - k_r) // stride + 1, (C - k_c) // stride + 1


def _windows(x: np.ndarray, k: Tuple[int, int], stride: int, dilation: int = 1) -> np.ndarray:
    """Return a read-only ``(R_out, C_out, D, n_r, n_c)`` view of the window taps."""
    win = sliding_window_view(x, k, axis=(0, 1))[::stride, ::stride]
    return win[..., ::dilation, ::dilation]


def _tap_counts(k: Tuple[int, int], dilation: int) -> Tuple[int, int]:
    k_r, k_c = k
    return len(range(0, k_r, dilation)), len(range(0, k_c, dilation))


def _origins(R_out: int, C_out: int, D: int, stride: int) -> Tuple[np.ndarray, np.ndarray]:
    rows = (np.arange(R_out) * stride)[:, None, None]
    cols = (np.arange(C_out) * stride)[None, :, None]
    return (
        np.broadcast_to(rows, (R_out, C_out, D)),
        np.broadcast_to(cols, (R_out, C_out, D)),
    )


def maxpool_forward_cpu(
    x: np.ndarray,
    *,
    kernel_size: Tuple[int, int],
    stride: int,
    dilation: int = 1,
    mask: Optional[np.ndarray] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Max pooling.

    Parameters
    ----------
    x : np.ndarray
        Input of shape ``(R, C, D)``.
    kernel_size : tuple[int, int]
        Window size.
    stride : int
        Window step.
    dilation : int
        Tap spacing inside the window.
    mask : Optional[np.ndarray]
        Masked cells never win. A fully masked window outputs zero and points
        at its origin.

    Returns
    -------
    tuple[np.ndarray, np.ndarray]
        y :
            Pooled output of shape ``(R_out, C_out, D)``.
        positions :
            Source ``(row, column)`` per output cell, ``(R_out, C_out, D, 2)``.
    """
    n_r, n_c = _tap_counts(kernel_size, dilation)
    filled = x if mask is None else np.where(mask, -np.inf, x)
    win = _windows(filled, kernel_size, stride, dilation)
    R_out, C_out, D = win.shape[:3]
    flat = win.reshape(R_out, C_out, D, n_r * n_c)

    arg = np.argmax(flat, axis=-1)
    y = np.take_along_axis(flat, arg[..., None], axis=-1)[..., 0]
    y = np.where(np.isneginf(y), 0.0, y)

    row0, col0 = _origins(R_out, C_out, D, stride)
    positions = np.stack(
        (row0 + (arg // n_c) * dilation, col0 + (arg % n_c) * dilation), axis=-1
    ).astype(np.int64)
    return np.array(y, dtype=np.float64), positions


def randompool_forward_cpu(
    x: np.ndarray,
    *,
    kernel_size: Tuple[int, int],
    stride: int,
    rng: np.random.Generator,
    dilation: int = 1,
    mask: Optional[np.ndarray] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Random pooling with draws proportional to cell magnitude.

    Masked cells are never drawn. A window whose unmasked cells are all zero
    draws uniformly among them; a fully masked window outputs zero and points
    at its origin.
    """
    k_r, k_c = kernel_size
    _, n_c = _tap_counts(kernel_size, dilation)
    if mask is None:
        mask = np.zeros(x.shape, dtype=bool)
    R, C, D = x.shape
    R_out, C_out = _out_hw(R, C, kernel_size, stride)

    y = np.zeros((R_out, C_out, D), dtype=np.float64)
    positions = np.zeros((R_out, C_out, D, 2), dtype=np.int64)
    for i in range(R_out):
        for j in range(C_out):
            r0, c0 = i * stride, j * stride
            for d in range(D):
                taps = (
                    slice(r0, r0 + k_r, dilation),
                    slice(c0, c0 + k_c, dilation),
                    d,
                )
                values = x[taps].reshape(-1)
                allowed = ~mask[taps].reshape(-1)
                positions[i, j, d] = (r0, c0)
                if not allowed.any():
                    continue
                weights = np.where(allowed, np.abs(values), 0.0)
                total = weights.sum()
                if total <= 0.0:
                    weights = allowed.astype(np.float64)
                    total = weights.sum()
                pick = int(rng.choice(values.size, p=weights / total))
                y[i, j, d] = values[pick]
                positions[i, j, d] = (
                    r0 + (pick // n_c) * dilation,
                    c0 + (pick % n_c) * dilation,
                )
    return y, positions


def cyclicpool_forward_cpu(
    x: np.ndarray,
    *,
    kernel_size: Tuple[int, int],
    stride: int,
    offset: Tuple[int, int],
    dilation: int = 1,
    mask: Optional[np.ndarray] = None,
) -> Tuple[np.ndarray, np.ndarray, Tuple[int, int]]:
    """
    Cyclic pooling.

    Parameters
    ----------
    offset : tuple[int, int]
        ``(row, column)`` window offset used by this call; a multiple of
        `dilation` on both axes.

    Returns
    -------
    tuple[np.ndarray, np.ndarray, tuple[int, int]]
        Pooled output, position map and the offset for the next call.

    Notes
    -----
    If the cell at the current offset is masked, the candidates that follow
    in cycling order are tried until an unmasked one is found.
    """
    k_r, k_c = kernel_size
    n_r, n_c = _tap_counts(kernel_size, dilation)
    if mask is None:
        mask = np.zeros(x.shape, dtype=bool)
    R, C, D = x.shape
    R_out, C_out = _out_hw(R, C, kernel_size, stride)

    def advance(pos: Tuple[int, int]) -> Tuple[int, int]:
        row, col = pos
        row += dilation
        if row >= k_r:
            row = 0
            col += dilation
            if col >= k_c:
                col = 0
        return row, col

    y = np.zeros((R_out, C_out, D), dtype=np.float64)
    positions = np.zeros((R_out, C_out, D, 2), dtype=np.int64)
    for i in range(R_out):
        for j in range(C_out):
            r0, c0 = i * stride, j * stride
            for d in range(D):
                candidate = offset
                positions[i, j, d] = (r0, c0)
                for _ in range(n_r * n_c):
                    row, col = r0 + candidate[0], c0 + candidate[1]
                    if not mask[row, col, d]:
                        y[i, j, d] = x[row, col, d]
                        positions[i, j, d] = (row, col)
                        break
                    candidate = advance(candidate)
    return y, positions, advance(offset)


def positional_pool_backward_cpu(
    grad_out: np.ndarray,
    positions: np.ndarray,
    input_shape: Tuple[int, int, int],
) -> np.ndarray:
    """
    Scatter upstream gradients to the cells recorded in a position map.

    Parameters
    ----------
    grad_out : np.ndarray
        Gradient w.r.t. the pooled output, ``(R_out, C_out, D)``.
    positions : np.ndarray
        Position map returned by the forward pass.
    input_shape : tuple[int, int, int]
        Shape of the forward input.

    Returns
    -------
    np.ndarray
        Input gradient. Overlapping windows accumulate.
    """
    grad_x = np.zeros(input_shape, dtype=np.float64)
    D = grad_out.shape[2]
    depth = np.broadcast_to(np.arange(D)[None, None, :], grad_out.shape)
    np.add.at(grad_x, (positions[..., 0], positions[..., 1], depth), grad_out)
    return grad_x


def avgpool_forward_cpu(
    x: np.ndarray,
    *,
    kernel_size: Tuple[int, int],
    stride: int,
    dilation: int = 1,
    mask: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Average pooling over every window tap.
    """
    n_r, n_c = _tap_counts(kernel_size, dilation)
    filled = x if mask is None else np.where(mask, 0.0, x)
    win = _windows(filled, kernel_size, stride, dilation)
    return np.sum(win, axis=(-2, -1)) / float(n_r * n_c)


def avgpool_backward_cpu(
    grad_out: np.ndarray,
    input_shape: Tuple[int, int, int],
    *,
    kernel_size: Tuple[int, int],
    stride: int,
    dilation: int = 1,
) -> np.ndarray:
    """
    Distribute every upstream gradient evenly over the taps of its window.
    """
    k_r, k_c = kernel_size
    n_r, n_c = _tap_counts(kernel_size, dilation)
    R_out, C_out, _ = grad_out.shape
    grad_x = np.zeros(input_shape, dtype=np.float64)
    share = grad_out / float(n_r * n_c)
    for a in range(0, k_r, dilation):
        for b in range(0, k_c, dilation):
            grad_x[
                a : a + stride * (R_out - 1) + 1 : stride,
                b : b + stride * (C_out - 1) + 1 : stride,
                :,
            ] += share
    return grad_x
