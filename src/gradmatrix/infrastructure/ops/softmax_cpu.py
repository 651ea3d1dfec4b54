"""
CPU reference kernels for softmax, Gumbel softmax and the softmax gradient.

Softmax normalizes over rows, independently for every column and depth, so a
column vector becomes a probability distribution. A temperature ``tau``
divides the logits before exponentiation; the maximum is subtracted first for
numerical stability.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

GUMBEL_EPSILON = 1e-20


def gumbel_noise_cpu(shape: tuple, rng: np.random.Generator) -> np.ndarray:
    """
    Draw Gumbel(0, 1) noise ``-log(-log(u + eps) + eps)``.
    """
    u = rng.random(shape)
    return -np.log(-np.log(u + GUMBEL_EPSILON) + GUMBEL_EPSILON)


def softmax_forward_cpu(
    x: np.ndarray,
    mask: Optional[np.ndarray] = None,
    tau: float = 1.0,
    noise: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Column-wise softmax over rows.

    Parameters
    ----------
    x : np.ndarray
        Logits of shape ``(R, C, D)``.
    mask : Optional[np.ndarray], optional
        Masked cells are excluded from normalization and keep their input
        value in the output.
    tau : float, optional
        Temperature.
    noise : Optional[np.ndarray], optional
        Additive noise (e.g. Gumbel) applied before scaling by `tau`.

    Returns
    -------
    np.ndarray
        Probabilities of the same shape as `x`.
    """
    if mask is None:
        mask = np.zeros(x.shape, dtype=bool)
    z = x if noise is None else x + noise
    z = z / tau
    z = np.where(mask, -np.inf, z)
    z_max = np.max(z, axis=0, keepdims=True)
    z_max = np.where(np.isfinite(z_max), z_max, 0.0)
    e = np.where(mask, 0.0, np.exp(z - z_max))
    total = np.sum(e, axis=0, keepdims=True)
    s = np.divide(e, total, out=np.zeros_like(e), where=total > 0)
    return np.where(mask, x, s)


def softmax_backward_cpu(s: np.ndarray, grad_out: np.ndarray) -> np.ndarray:
    """
    Jacobian-vector product of column-wise softmax.

    ``grad_in[r0] = sum_r s[r] * (delta(r, r0) - s[r0]) * grad_out[r]``,
    which simplifies to ``s * (grad_out - sum(s * grad_out))`` per column.

    Parameters
    ----------
    s : np.ndarray
        Softmax output of shape ``(R, C, D)``.
    grad_out : np.ndarray
        Upstream gradient of the same shape.
    """
    return s * (grad_out - np.sum(s * grad_out, axis=0, keepdims=True))
