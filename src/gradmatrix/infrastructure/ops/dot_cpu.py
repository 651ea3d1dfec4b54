"""
CPU reference kernel for the per-depth matrix product.
"""

from __future__ import annotations

import numpy as np


def dot_forward_cpu(
    a: np.ndarray, b: np.ndarray, mask_a: np.ndarray, mask_b: np.ndarray
) -> np.ndarray:
    """
    Matrix product of every depth slice.

    Parameters
    ----------
    a : np.ndarray
        Left operand of shape ``(R, K, D)``.
    b : np.ndarray
        Right operand of shape ``(K, C, D)``.
    mask_a, mask_b : np.ndarray
        Boolean masks; masked cells contribute zero.

    Returns
    -------
    np.ndarray
        Product of shape ``(R, C, D)``.
    """
    a = np.where(mask_a, 0.0, a)
    b = np.where(mask_b, 0.0, b)
    return np.einsum("rkd,kcd->rcd", a, b)
