"""
Regularization and statistics utilities built on top of the primitive
operators: dropout, gradient clipping, moving averages, rescaling,
classification thresholds and sampling.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from ....domain._errors import ParameterError, StateError
from ...ops.reduction_cpu import masked_mean_cpu, masked_norm_cpu, masked_variance_cpu


class MatrixMixinStatistics:
    """
    Dropout, clipping and normalization helpers.
    """

    def dropout(self, probability: float, monte_carlo: bool = False, out=None):
        """
        Inverted dropout.

        Every unmasked cell is kept with probability `probability`. Kept cells
        are scaled by ``1 / probability``, dropped cells become zero and the
        drawn element mask is attached to the result. A result that already
        carries a mask keeps it; the dropped cells are added to its element
        flags.

        Parameters
        ----------
        probability : float
            Keep probability in ``(0, 1]``.
        monte_carlo : bool, optional
            Marks the recorded expression as Monte Carlo dropout, i.e. one
            that stays active at inference time.
        out : Matrix, optional
            Destination matrix.

        Raises
        ------
        ParameterError
            If `probability` is outside ``(0, 1]``.
        """
        if not 0.0 < probability <= 1.0:
            raise ParameterError("probability", probability, "must be in (0, 1]")
        result = self._prepare_out("dropout", out, self.shape)

        def execute():
            x, mask = self.to_numpy(), self.mask_array()
            drop = result.MASK(*self.shape, probability=probability, rng=self._rng)
            drop.mask_by_probability()
            dropped = drop.to_numpy() & ~mask
            values = np.where(dropped, 0.0, np.where(mask, x, x / probability))
            self._write(result, values)
            if result.mask is None:
                result.set_mask(drop)
            else:
                for row, column, depth in np.argwhere(dropped):
                    result.mask.set_mask(int(row), int(column), int(depth), True)
            return result

        return self._record(
            "dropout",
            (),
            execute,
            out=out,
            probability=probability,
            monte_carlo=monte_carlo,
        )

    def gradient_clipping(self, threshold: float, out=None):
        """
        Rescale by ``threshold / ||x||_2`` when the L2 norm exceeds `threshold`.

        Raises
        ------
        ParameterError
            If `threshold` is not positive.
        """
        if threshold <= 0.0:
            raise ParameterError("threshold", threshold, "must be positive")
        result = self._prepare_out("gradient_clipping", out, self.shape)

        def execute():
            x, mask = self.to_numpy(), self.mask_array()
            norm = float(masked_norm_cpu(x, mask, None, 2).item())
            if norm > threshold:
                x = np.where(mask, x, x * (threshold / norm))
            return self._write(result, x)

        return self._record(
            "gradient_clipping", (), execute, out=out, threshold=threshold
        )

    def exponential_moving_average(self, average=None, beta: float = 0.9):
        """
        Fold this matrix into a running average ``beta * average + (1 - beta) * self``.

        Returns `self` unchanged when no average exists yet.
        """
        if not 0.0 <= beta <= 1.0:
            raise ParameterError("beta", beta, "must be in [0, 1]")
        if average is None:
            return self
        return average.multiply(beta).add(self.multiply(1.0 - beta))

    def normalize(self, out=None):
        """
        Shift to zero mean and scale to unit (population) standard deviation.

        A constant matrix is only centered.
        """
        result = self._prepare_out("normalize", out, self.shape)
        x, mask = self.to_numpy(), self.mask_array()
        mean = masked_mean_cpu(x, mask, None)
        std = float(np.sqrt(masked_variance_cpu(x, mask, None, mean)).item())
        centered = x - mean
        values = centered / std if std > 0.0 else centered
        return self._write(result, np.where(mask, x, values))

    def min_max(self, new_minimum: float = 0.0, new_maximum: float = 1.0, out=None):
        """
        Linearly rescale unmasked cells from ``[min, max]`` to
        ``[new_minimum, new_maximum]``.
        """
        result = self._prepare_out("min_max", out, self.shape)
        minimum, maximum = self.min(), self.max()
        delta = maximum - minimum if maximum != minimum else 1.0
        x = self.to_numpy()
        values = (x - minimum) / delta * (new_maximum - new_minimum) + new_minimum
        return self._write(result, np.where(self.mask_array(), x, values))

    def classify(self, threshold: float = 0.5, out=None):
        """
        Threshold unmasked cells to class labels: 0 below `threshold`, 1 otherwise.

        Masked cells keep their value. Not recorded.
        """
        result = self._prepare_out("classify", out, self.shape)
        x = self.to_numpy()
        labels = np.where(x < threshold, 0.0, 1.0)
        return self._write(result, np.where(self.mask_array(), x, labels))

    def sample(self, rng: Optional[np.random.Generator] = None) -> Tuple[int, int, int]:
        """
        Draw a cell with probability proportional to its value.

        Cells are accumulated in row-major order and the first cell whose
        cumulative value reaches ``u * total`` is selected. Masked and
        non-positive cells never win.

        Raises
        ------
        StateError
            If no unmasked cell holds a positive value.
        """
        rng = rng if rng is not None else self._rng
        weights = np.where(self.mask_array(), 0.0, np.maximum(self.to_numpy(), 0.0))
        cumulative = np.cumsum(weights.reshape(-1))
        total = cumulative[-1]
        if total <= 0.0:
            raise StateError("Cannot sample from a matrix without positive mass.")
        threshold = rng.random() * total
        index = int(np.searchsorted(cumulative, threshold, side="right"))
        row, column, depth = np.unravel_index(index, weights.shape)
        return (int(row), int(column), int(depth))
