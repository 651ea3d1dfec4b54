"""
Masked reductions: sum, mean, variance, standard deviation, norm, entropy and
extremes.

Each statistic comes in two forms:

- ``stat()`` returns a Python float over every unmasked cell and is not
  recorded;
- ``stat_as_matrix(direction=Direction.ALL)`` returns a reduced matrix and is
  recorded. ``Direction.ROW`` collapses rows (result ``1 x C x D``),
  ``Direction.COLUMN`` collapses columns (``R x 1 x D``), ``Direction.DEPTH``
  collapses depth (``R x C x 1``) and ``Direction.ALL`` yields a scalar
  matrix.

Masked cells are excluded from both the accumulator and the count.
"""

from __future__ import annotations

import warnings
from typing import Optional, Tuple, Union

import numpy as np

from ....domain._direction import Direction
from ....domain._errors import ParameterError
from ...ops.reduction_cpu import (
    bessel_correction_cpu,
    masked_argextreme_cpu,
    masked_count_cpu,
    masked_entropy_cpu,
    masked_extreme_cpu,
    masked_mean_cpu,
    masked_norm_cpu,
    masked_sum_cpu,
    masked_variance_cpu,
)

Number = Union[int, float]


def _reduced_shape(shape: Tuple[int, int, int], axis: Optional[int]) -> Tuple[int, int, int]:
    if axis is None:
        return (1, 1, 1)
    reduced = list(shape)
    reduced[axis] = 1
    return tuple(reduced)


def _standard_deviation(variance: np.ndarray, count: np.ndarray) -> np.ndarray:
    if np.any(count < 2):
        warnings.warn(
            "standard deviation of fewer than two samples is undefined; returning 0",
            RuntimeWarning,
            stacklevel=3,
        )
    return np.sqrt(variance * bessel_correction_cpu(count))


class MatrixMixinReduction:
    """
    Scalar and directional reductions over unmasked cells.
    """

    def _mean_array(self, mean) -> Optional[np.ndarray]:
        if mean is None:
            return None
        if isinstance(mean, (int, float)):
            return np.asarray(float(mean))
        return mean.to_numpy()

    def _reduce(self, family: str, along: Direction, compute, out=None, **params):
        axis = Direction(along).axis
        result = self._prepare_out(family, out, _reduced_shape(self.shape, axis))

        def execute():
            return self._write(result, compute(self.to_numpy(), self.mask_array(), axis))

        return self._record(family, (), execute, out=out, **params)

    # ----------------------------
    # Float forms
    # ----------------------------
    def count(self) -> int:
        """Number of unmasked cells."""
        return int(masked_count_cpu(self.mask_array(), None).item())

    def sum(self) -> float:
        return float(masked_sum_cpu(self.to_numpy(), self.mask_array(), None).item())

    def mean(self) -> float:
        """Sum over count of unmasked cells; zero when every cell is masked."""
        return float(masked_mean_cpu(self.to_numpy(), self.mask_array(), None).item())

    def variance(self, mean: Optional[Number] = None) -> float:
        """
        Population variance ``mean((x - mean)^2)``.

        Parameters
        ----------
        mean : Number, optional
            Precomputed mean. Computed if omitted.
        """
        return float(
            masked_variance_cpu(
                self.to_numpy(), self.mask_array(), None, self._mean_array(mean)
            ).item()
        )

    def standard_deviation(self, mean: Optional[Number] = None) -> float:
        """
        Bessel-corrected standard deviation ``sqrt(variance * n / (n - 1))``.

        Fewer than two unmasked cells emit a `RuntimeWarning` and return 0.
        """
        x, mask = self.to_numpy(), self.mask_array()
        variance = masked_variance_cpu(x, mask, None, self._mean_array(mean))
        return float(_standard_deviation(variance, masked_count_cpu(mask, None)).item())

    def norm(self, p: Number = 2) -> float:
        """p-norm ``(sum |x|^p)^(1/p)``."""
        if p <= 0:
            raise ParameterError("p", p, "must be positive")
        return float(masked_norm_cpu(self.to_numpy(), self.mask_array(), None, p).item())

    def entropy(self) -> float:
        """Average ``-x * log2(x)`` over unmasked cells."""
        return float(masked_entropy_cpu(self.to_numpy(), self.mask_array(), None).item())

    def min(self) -> float:
        return float(masked_extreme_cpu(self.to_numpy(), self.mask_array(), None, True).item())

    def max(self) -> float:
        return float(masked_extreme_cpu(self.to_numpy(), self.mask_array(), None, False).item())

    def argmin(self) -> Tuple[int, int, int]:
        """Coordinate of the first minimum in row-major order."""
        return masked_argextreme_cpu(self.to_numpy(), self.mask_array(), True)

    def argmax(self) -> Tuple[int, int, int]:
        """Coordinate of the first maximum in row-major order."""
        return masked_argextreme_cpu(self.to_numpy(), self.mask_array(), False)

    # ----------------------------
    # Matrix forms (recorded)
    # ----------------------------
    def sum_as_matrix(self, direction: Direction = Direction.ALL, out=None):
        return self._reduce("sum", direction, masked_sum_cpu, out, direction=direction)

    def mean_as_matrix(self, direction: Direction = Direction.ALL, out=None):
        return self._reduce("mean", direction, masked_mean_cpu, out, direction=direction)

    def variance_as_matrix(self, direction: Direction = Direction.ALL, mean=None, out=None):
        """
        Directional population variance.

        Parameters
        ----------
        direction : Direction
            Reduction direction.
        mean : Matrix or Number, optional
            Precomputed mean of the reduced geometry.
        """
        precomputed = self._mean_array(mean)

        def compute(x, mask, axis):
            return masked_variance_cpu(x, mask, axis, precomputed)

        return self._reduce("variance", direction, compute, out, direction=direction)

    def standard_deviation_as_matrix(
        self, direction: Direction = Direction.ALL, mean=None, out=None
    ):
        """Directional Bessel-corrected standard deviation."""
        precomputed = self._mean_array(mean)

        def compute(x, mask, axis):
            variance = masked_variance_cpu(x, mask, axis, precomputed)
            return _standard_deviation(variance, masked_count_cpu(mask, axis))

        return self._reduce(
            "standard_deviation", direction, compute, out, direction=direction
        )

    def norm_as_matrix(self, p: Number = 2, out=None):
        if p <= 0:
            raise ParameterError("p", p, "must be positive")

        def compute(x, mask, axis):
            return masked_norm_cpu(x, mask, axis, p)

        return self._reduce("norm", Direction.ALL, compute, out, p=p)

    def entropy_as_matrix(self, out=None):
        return self._reduce("entropy", Direction.ALL, masked_entropy_cpu, out)

    def min_as_matrix(self, direction: Direction = Direction.ALL, out=None):
        """Directional minimum; lines with every cell masked reduce to 0."""

        def compute(x, mask, axis):
            return masked_extreme_cpu(x, mask, axis, True)

        return self._reduce("min", direction, compute, out, direction=direction)

    def max_as_matrix(self, direction: Direction = Direction.ALL, out=None):
        """Directional maximum; lines with every cell masked reduce to 0."""

        def compute(x, mask, axis):
            return masked_extreme_cpu(x, mask, axis, False)

        return self._reduce("max", direction, compute, out, direction=direction)
