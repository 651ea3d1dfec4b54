"""
CPU kernels for split, flatten and unflatten.

Flattening linearizes an ``(R, C, D)`` view in storage order: row fastest,
then column, then depth. Unflattening is the exact inverse, so
``unflatten(flatten(x))`` reproduces `x` element by element.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np


def flatten_cpu(x: np.ndarray) -> np.ndarray:
    """Return `x` as an ``(R*C*D, 1, 1)`` column in storage order."""
    return np.transpose(x, (2, 1, 0)).reshape(-1, 1, 1)


def unflatten_cpu(x: np.ndarray, rows: int, columns: int, depth: int) -> np.ndarray:
    """Inverse of `flatten_cpu` for the target geometry."""
    return np.transpose(x.reshape(depth, columns, rows), (2, 1, 0))


def split_cpu(
    x: np.ndarray, split_at: int, split_vertically: bool
) -> Tuple[np.ndarray, np.ndarray]:
    """Split before row/column `split_at`."""
    axis = 0 if split_vertically else 1
    first, second = np.split(x, [split_at], axis=axis)
    return first, second
