"""
CPU kernel for Winograd F(2x2, 3x3) convolution.

Winograd convolution is an algebraic reformulation of valid-mode 3x3
filtering. For every 4x4 input tile ``d`` and filter ``g``:

    U = G g G^T              (filter transform, 4x4)
    V = C^T d C              (input transform, 4x4)
    Y = A^T (U * V) A        (output transform, 2x2, ``*`` is element-wise)

The transforms compute a cross-correlation, so the kernel flips the filter
when a true convolution is requested. The output grid is covered by tiles
with step 2; inputs whose output extent is odd are zero-padded on the bottom
and right and the result is cropped back.

Transforms may be supplied by the caller (`WinogradTransforms`), and the
filter may be supplied already transformed (4x4 per depth slice), in which
case no flip or ``G`` transform is applied.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view


@dataclass(frozen=True, eq=False)
class WinogradTransforms:
    """
    Transform matrices of a Winograd F(2x2, 3x3) algorithm.

    Attributes
    ----------
    a, at : np.ndarray
        Output transform ``A`` (4x2) and its transpose ``A^T`` (2x4).
    c, ct : np.ndarray
        Input transform ``C`` (4x4) and its transpose ``C^T``.
    g, gt : np.ndarray
        Filter transform ``G`` (4x3) and its transpose ``G^T`` (3x4).
    """

    a: np.ndarray
    at: np.ndarray
    c: np.ndarray
    ct: np.ndarray
    g: np.ndarray
    gt: np.ndarray

    @classmethod
    def default(cls) -> "WinogradTransforms":
        """Return the standard F(2x2, 3x3) transforms."""
        ct = np.array(
            [
                [1.0, 0.0, -1.0, 0.0],
                [0.0, 1.0, 1.0, 0.0],
                [0.0, -1.0, 1.0, 0.0],
                [0.0, 1.0, 0.0, -1.0],
            ]
        )
        g = np.array(
            [
                [1.0, 0.0, 0.0],
                [0.5, 0.5, 0.5],
                [0.5, -0.5, 0.5],
                [0.0, 0.0, 1.0],
            ]
        )
        at = np.array(
            [
                [1.0, 1.0, 1.0, 0.0],
                [0.0, 1.0, -1.0, -1.0],
            ]
        )
        return cls(a=at.T.copy(), at=at, c=ct.T.copy(), ct=ct, g=g, gt=g.T.copy())


def winograd_filter_transform_cpu(
    w: np.ndarray, transforms: WinogradTransforms, flip: bool = True
) -> np.ndarray:
    """
    Transform a ``(3, 3, D)`` filter into ``(4, 4, D)`` Winograd space.
    """
    if flip:
        w = w[::-1, ::-1, :]
    return np.einsum("ab,bcd,ce->aed", transforms.g, w, transforms.gt)


def _winograd_2d(x: np.ndarray, u: np.ndarray, transforms: WinogradTransforms) -> np.ndarray:
    R, C = x.shape
    R_out, C_out = R - 2, C - 2
    R_pad, C_pad = R_out + R_out % 2, C_out + C_out % 2
    padded = np.zeros((R_pad + 2, C_pad + 2), dtype=np.float64)
    padded[:R, :C] = x

    tiles = sliding_window_view(padded, (4, 4))[::2, ::2]
    v = np.einsum("ab,ijbc,cd->ijad", transforms.ct, tiles, transforms.c)
    m = v * u
    y = np.einsum("ab,ijbc,cd->ijad", transforms.at, m, transforms.a)
    n_i, n_j = y.shape[0], y.shape[1]
    out = y.transpose(0, 2, 1, 3).reshape(n_i * 2, n_j * 2)
    return out[:R_out, :C_out]


def winograd_forward_cpu(
    x: np.ndarray,
    w: np.ndarray,
    *,
    transforms: WinogradTransforms | None = None,
    preprocessed: bool = False,
    flip: bool = True,
    depth_separable: bool = False,
    mask: np.ndarray | None = None,
) -> np.ndarray:
    """
    Winograd F(2x2, 3x3) convolution of an ``(R, C, D_in)`` input.

    Parameters
    ----------
    x : np.ndarray
        Input of shape ``(R, C, D_in)`` with ``R, C >= 3``.
    w : np.ndarray
        Filter of shape ``(3, 3, D_w)``, or ``(4, 4, D_w)`` if `preprocessed`.
    transforms : WinogradTransforms, optional
        Transform matrices; defaults to `WinogradTransforms.default()`.
    preprocessed : bool
        Whether `w` is already in Winograd space.
    flip : bool
        Flip the filter (true convolution). Ignored if `preprocessed`.
    depth_separable : bool
        Restrict mixing to matching depth indices.
    mask : np.ndarray, optional
        Input mask; masked cells contribute zero.

    Returns
    -------
    np.ndarray
        Output of shape ``(R - 2, C - 2, D_out)``; matches direct convolution
        up to floating point rounding.
    """
    if transforms is None:
        transforms = WinogradTransforms.default()
    if mask is not None:
        x = np.where(mask, 0.0, x)
    u_all = w if preprocessed else winograd_filter_transform_cpu(w, transforms, flip)

    R, C, D_in = x.shape
    D_w = u_all.shape[2]
    D_out = D_in if depth_separable else D_w // D_in
    y = np.zeros((R - 2, C - 2, D_out), dtype=np.float64)
    for o in range(D_out):
        if depth_separable:
            y[:, :, o] = _winograd_2d(x[:, :, o], u_all[:, :, o], transforms)
            continue
        for i in range(D_in):
            y[:, :, o] += _winograd_2d(x[:, :, i], u_all[:, :, o * D_in + i], transforms)
    return y
