"""
CPU reference kernels for convolution and cross-correlation (NumPy backend).

This module provides valid-mode (no padding) 2D convolution and
cross-correlation over ``(rows, columns, depth)`` views, together with the
input and filter gradient passes.

Geometry
--------
- Output size per spatial axis is ``(in - filter) // stride + 1``, which is
  ``in - filter + 1`` at stride 1.
- Dilation keeps the window size and sparsifies the taps inside it: only
  filter offsets ``0, dilation, 2*dilation, ... < filter`` contribute.
- Convolution flips the filter spatially; cross-correlation does not.

Depth layout
------------
- Regular: the filter depth is ``out_depth * in_depth``; output depth ``o``
  mixes every input depth ``i`` through filter slice ``o * in_depth + i``.
- Depth separable: the filter depth equals the input depth and output depth
  ``i`` only sees input depth ``i`` through filter slice ``i``.

Design notes
------------
- Kernels loop over filter taps and vectorize over output positions, which
  keeps them short while remaining a readable correctness baseline.
- Masked input cells contribute zero.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np


def _out_size(size: int, filter_size: int, stride: int) -> int:
    """Output extent along one axis for a valid-mode sliding window."""
    return (size - filter_size) // stride + 1


def conv_output_shape(
    input_shape: Tuple[int, int, int],
    filter_shape: Tuple[int, int, int],
    stride: int,
    depth_separable: bool,
) -> Tuple[int, int, int]:
    """
    Return the ``(rows, columns, depth)`` of a convolution result.
    """
    R, C, D_in = input_shape
    F_r, F_c, D_w = filter_shape
    D_out = D_in if depth_separable else D_w // D_in
    return (_out_size(R, F_r, stride), _out_size(C, F_c, stride), D_out)


def _effective_filter(w: np.ndarray, flip: bool) -> np.ndarray:
    return w[::-1, ::-1, :] if flip else w


def _taps(filter_size: int, dilation: int) -> range:
    return range(0, filter_size, dilation)


def _window(x: np.ndarray, a: int, b: int, R_out: int, C_out: int, stride: int):
    return x[a : a + stride * (R_out - 1) + 1 : stride, b : b + stride * (C_out - 1) + 1 : stride, :]


def conv_forward_cpu(
    x: np.ndarray,
    w: np.ndarray,
    *,
    stride: int = 1,
    dilation: int = 1,
    flip: bool = True,
    depth_separable: bool = False,
    mask: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Valid-mode convolution (``flip=True``) or cross-correlation (``flip=False``).

    Parameters
    ----------
    x : np.ndarray
        Input of shape ``(R, C, D_in)``.
    w : np.ndarray
        Filter of shape ``(F_r, F_c, D_w)``.
    stride, dilation : int
        Window step and tap spacing.
    flip : bool
        Whether to flip the filter (true convolution).
    depth_separable : bool
        Restrict mixing to matching depth indices.
    mask : Optional[np.ndarray]
        Input mask; masked cells contribute zero.

    Returns
    -------
    np.ndarray
        Output of shape given by `conv_output_shape`.
    """
    if mask is not None:
        x = np.where(mask, 0.0, x)
    F_r, F_c, _ = w.shape
    D_in = x.shape[2]
    R_out, C_out, D_out = conv_output_shape(x.shape, w.shape, stride, depth_separable)
    w_eff = _effective_filter(w, flip)

    y = np.zeros((R_out, C_out, D_out), dtype=np.float64)
    for a in _taps(F_r, dilation):
        for b in _taps(F_c, dilation):
            patch = _window(x, a, b, R_out, C_out, stride)
            if depth_separable:
                y += patch * w_eff[a, b, :]
            else:
                w_tap = w_eff[a, b, :].reshape(D_out, D_in)
                y += np.einsum("ijc,oc->ijo", patch, w_tap)
    return y


def conv_input_grad_cpu(
    grad_out: np.ndarray,
    w: np.ndarray,
    input_shape: Tuple[int, int, int],
    *,
    stride: int = 1,
    dilation: int = 1,
    flip: bool = True,
    depth_separable: bool = False,
) -> np.ndarray:
    """
    Gradient of `conv_forward_cpu` with respect to its input.

    Parameters
    ----------
    grad_out : np.ndarray
        Upstream gradient of shape ``(R_out, C_out, D_out)``.
    w : np.ndarray
        Filter used in the forward pass.
    input_shape : tuple[int, int, int]
        Shape of the forward input.

    Returns
    -------
    np.ndarray
        Input gradient of shape `input_shape`.
    """
    F_r, F_c, _ = w.shape
    D_in = input_shape[2]
    R_out, C_out, D_out = grad_out.shape
    w_eff = _effective_filter(w, flip)

    grad_x = np.zeros(input_shape, dtype=np.float64)
    for a in _taps(F_r, dilation):
        for b in _taps(F_c, dilation):
            target = _window(grad_x, a, b, R_out, C_out, stride)
            if depth_separable:
                target += grad_out * w_eff[a, b, :]
            else:
                w_tap = w_eff[a, b, :].reshape(D_out, D_in)
                target += np.einsum("ijo,oc->ijc", grad_out, w_tap)
    return grad_x


def conv_filter_grad_cpu(
    grad_out: np.ndarray,
    x: np.ndarray,
    filter_shape: Tuple[int, int, int],
    *,
    stride: int = 1,
    dilation: int = 1,
    flip: bool = True,
    depth_separable: bool = False,
    mask: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Gradient of `conv_forward_cpu` with respect to its filter.

    Parameters
    ----------
    grad_out : np.ndarray
        Upstream gradient of shape ``(R_out, C_out, D_out)``.
    x : np.ndarray
        Forward input.
    filter_shape : tuple[int, int, int]
        Shape of the filter.

    Returns
    -------
    np.ndarray
        Filter gradient of shape `filter_shape`. Offsets skipped by dilation
        receive zero.
    """
    if mask is not None:
        x = np.where(mask, 0.0, x)
    F_r, F_c, _ = filter_shape
    R_out, C_out, D_out = grad_out.shape

    grad_w_eff = np.zeros(filter_shape, dtype=np.float64)
    for a in _taps(F_r, dilation):
        for b in _taps(F_c, dilation):
            patch = _window(x, a, b, R_out, C_out, stride)
            if depth_separable:
                grad_w_eff[a, b, :] = np.sum(grad_out * patch, axis=(0, 1))
            else:
                grad_w_eff[a, b, :] = np.einsum("ijo,ijc->oc", grad_out, patch).reshape(-1)
    return _effective_filter(grad_w_eff, flip)
