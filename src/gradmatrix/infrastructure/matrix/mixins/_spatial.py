"""
Spatial operators: convolution, cross-correlation, Winograd convolution and
pooling, together with their gradient passes.

Spatial parameters (``stride``, ``dilation``, ``filter_row_size``,
``filter_column_size``, ``is_depth_separable``) are attributes of the input
matrix; every call may override them with keyword arguments.

Geometry
--------
- Valid mode: output extent per spatial axis is ``(in - filter) // stride + 1``.
- Regular convolution maps input depth ``D_in`` and filter depth ``D_w`` to
  output depth ``D_w // D_in``; depth-separable convolution keeps ``D_in``.
- Max, random and cyclic pooling return ``(result, positions)`` where
  ``positions`` has shape ``(R_out, C_out, D, 2)`` and holds the source
  ``(row, column)`` of every output cell.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from ....domain._errors import DimensionError, ParameterError
from ...ops.conv_cpu import (
    conv_filter_grad_cpu,
    conv_forward_cpu,
    conv_input_grad_cpu,
    conv_output_shape,
)
from ...ops.pool_cpu import (
    avgpool_backward_cpu,
    avgpool_forward_cpu,
    cyclicpool_forward_cpu,
    maxpool_forward_cpu,
    positional_pool_backward_cpu,
    randompool_forward_cpu,
)
from ...ops.winograd_cpu import (
    WinogradTransforms,
    winograd_filter_transform_cpu,
    winograd_forward_cpu,
)


def _positive(name: str, value: Optional[int]) -> int:
    if value is None:
        raise ParameterError(name, value, "is not set")
    if int(value) < 1:
        raise ParameterError(name, value, "must be at least 1")
    return int(value)


class MatrixMixinSpatial:
    """
    Convolution family and pooling family.
    """

    # ------------------------------------------------------------------
    # Parameter resolution
    # ------------------------------------------------------------------
    def _conv_params(self, filter_, stride, dilation, depth_separable) -> dict:
        stride = _positive("stride", self.stride if stride is None else stride)
        dilation = _positive("dilation", self.dilation if dilation is None else dilation)
        if depth_separable is None:
            depth_separable = self.is_depth_separable
        if filter_.rows > self.rows or filter_.columns > self.columns:
            raise DimensionError(
                "convolve",
                "filter exceeds input",
                expected=(self.rows, self.columns),
                actual=(filter_.rows, filter_.columns),
            )
        if depth_separable:
            if filter_.depth != self.depth:
                raise DimensionError(
                    "convolve",
                    "depth separable filter depth must equal input depth",
                    expected=self.depth,
                    actual=filter_.depth,
                )
        elif filter_.depth % self.depth != 0:
            raise DimensionError(
                "convolve",
                "filter depth must be a multiple of input depth",
                expected=self.depth,
                actual=filter_.depth,
            )
        return {"stride": stride, "dilation": dilation, "depth_separable": bool(depth_separable)}

    def _pool_params(self, filter_row_size, filter_column_size, stride, dilation=None) -> dict:
        rows = _positive(
            "filter_row_size", self.filter_row_size if filter_row_size is None else filter_row_size
        )
        columns = _positive(
            "filter_column_size",
            self.filter_column_size if filter_column_size is None else filter_column_size,
        )
        stride = _positive("stride", self.stride if stride is None else stride)
        dilation = _positive("dilation", self.dilation if dilation is None else dilation)
        if rows > self.rows or columns > self.columns:
            raise DimensionError(
                "pool",
                "pooling window exceeds input",
                expected=(self.rows, self.columns),
                actual=(rows, columns),
            )
        return {"kernel_size": (rows, columns), "stride": stride, "dilation": dilation}

    def _pool_shape(self, params: dict) -> Tuple[int, int, int]:
        k_r, k_c = params["kernel_size"]
        stride = params["stride"]
        return (
            (self.rows - k_r) // stride + 1,
            (self.columns - k_c) // stride + 1,
            self.depth,
        )

    # ------------------------------------------------------------------
    # Convolution / cross-correlation
    # ------------------------------------------------------------------
    def _convolution(self, family: str, filter_, flip: bool, stride, dilation, depth_separable, out):
        params = self._conv_params(filter_, stride, dilation, depth_separable)
        shape = conv_output_shape(
            self.shape, filter_.shape, params["stride"], params["depth_separable"]
        )
        result = self._prepare_out(family, out, shape)

        def execute():
            values = conv_forward_cpu(
                self.to_numpy(), filter_.to_numpy(), flip=flip, mask=self.mask_array(), **params
            )
            return self._write(result, values)

        return self._record(family, (filter_,), execute, out=out, **params)

    def convolve(self, filter_, stride=None, dilation=None, depth_separable=None, out=None):
        """
        Valid-mode convolution with a spatially flipped filter.

        Parameters
        ----------
        filter_ : Matrix
            Filter of shape ``(F_r, F_c, D_w)``.
        stride, dilation : int, optional
            Override the matrix's spatial attributes.
        depth_separable : bool, optional
            Override ``is_depth_separable``.
        out : Matrix, optional
            Destination matrix.

        Raises
        ------
        DimensionError
            If the filter exceeds the input or the depths are incompatible.
        ParameterError
            If stride or dilation is below one.
        """
        return self._convolution(
            "convolve", filter_, True, stride, dilation, depth_separable, out
        )

    def crosscorrelate(self, filter_, stride=None, dilation=None, depth_separable=None, out=None):
        """Valid-mode cross-correlation (no filter flip); see `convolve`."""
        return self._convolution(
            "crosscorrelate", filter_, False, stride, dilation, depth_separable, out
        )

    def _convolution_input_gradient(self, filter_, grad_out, flip, stride, dilation, depth_separable):
        params = self._conv_params(filter_, stride, dilation, depth_separable)
        expected = conv_output_shape(
            self.shape, filter_.shape, params["stride"], params["depth_separable"]
        )
        if grad_out.shape != expected:
            raise DimensionError(
                "convolution_gradient",
                "output gradient geometry mismatch",
                expected=expected,
                actual=grad_out.shape,
            )
        values = conv_input_grad_cpu(
            grad_out.to_numpy(), filter_.to_numpy(), self.shape, flip=flip, **params
        )
        return self._write(self.get_new_matrix(*self.shape), values)

    def _convolution_filter_gradient(self, filter_, grad_out, flip, stride, dilation, depth_separable):
        params = self._conv_params(filter_, stride, dilation, depth_separable)
        values = conv_filter_grad_cpu(
            grad_out.to_numpy(),
            self.to_numpy(),
            filter_.shape,
            flip=flip,
            mask=self.mask_array(),
            **params,
        )
        return self._write(filter_.get_new_matrix(*filter_.shape), values)

    def convolve_input_gradient(self, filter_, grad_out, stride=None, dilation=None, depth_separable=None):
        """
        Gradient of ``self.convolve(filter_)`` with respect to `self`.

        Parameters
        ----------
        filter_ : Matrix
            Filter used in the forward pass.
        grad_out : Matrix
            Gradient with respect to the convolution output.
        """
        return self._convolution_input_gradient(
            filter_, grad_out, True, stride, dilation, depth_separable
        )

    def convolve_filter_gradient(self, filter_, grad_out, stride=None, dilation=None, depth_separable=None):
        """Gradient of ``self.convolve(filter_)`` with respect to `filter_`."""
        return self._convolution_filter_gradient(
            filter_, grad_out, True, stride, dilation, depth_separable
        )

    def crosscorrelate_input_gradient(self, filter_, grad_out, stride=None, dilation=None, depth_separable=None):
        return self._convolution_input_gradient(
            filter_, grad_out, False, stride, dilation, depth_separable
        )

    def crosscorrelate_filter_gradient(self, filter_, grad_out, stride=None, dilation=None, depth_separable=None):
        return self._convolution_filter_gradient(
            filter_, grad_out, False, stride, dilation, depth_separable
        )

    # ------------------------------------------------------------------
    # Winograd
    # ------------------------------------------------------------------
    def winograd_preprocess_filter(self, transforms: Optional[WinogradTransforms] = None):
        """
        Transform this ``3 x 3 x D`` filter into ``4 x 4 x D`` Winograd space.

        The flip of true convolution is folded into the transformed filter.
        """
        if (self.rows, self.columns) != (3, 3):
            raise ParameterError("filter", self.shape, "Winograd requires a 3x3 filter")
        transforms = transforms if transforms is not None else WinogradTransforms.default()
        values = winograd_filter_transform_cpu(self.to_numpy(), transforms, flip=True)
        return self._write(self.get_new_matrix(4, 4, self.depth), values)

    def winograd_convolve(
        self,
        filter_,
        transforms: Optional[WinogradTransforms] = None,
        preprocessed: bool = False,
        depth_separable=None,
        out=None,
    ):
        """
        Winograd F(2x2, 3x3) convolution; numerically equal to `convolve`.

        Parameters
        ----------
        filter_ : Matrix
            ``3 x 3`` filter, or ``4 x 4`` filter from
            `winograd_preprocess_filter` when `preprocessed` is True.
        transforms : WinogradTransforms, optional
            ``A, AT, C, CT, G, GT`` matrices; standard ones by default.
        preprocessed : bool, optional
            Whether `filter_` is already transformed.
        depth_separable : bool, optional
            Override ``is_depth_separable``.
        out : Matrix, optional
            Destination matrix.

        Raises
        ------
        ParameterError
            If the filter is not ``3 x 3`` (``4 x 4`` preprocessed), or the
            matrix's stride or dilation differs from one.
        """
        size = 4 if preprocessed else 3
        if (filter_.rows, filter_.columns) != (size, size):
            raise ParameterError(
                "filter", filter_.shape, f"Winograd requires a {size}x{size} filter"
            )
        if self.stride != 1 or self.dilation != 1:
            raise ParameterError(
                "stride", (self.stride, self.dilation), "Winograd requires stride and dilation 1"
            )
        if self.rows < 3 or self.columns < 3:
            raise DimensionError(
                "winograd_convolve", "filter exceeds input", expected=(3, 3), actual=self.shape
            )
        if depth_separable is None:
            depth_separable = self.is_depth_separable
        depth_ok = (
            filter_.depth == self.depth if depth_separable else filter_.depth % self.depth == 0
        )
        if not depth_ok:
            raise DimensionError(
                "winograd_convolve",
                "filter depth incompatible with input depth",
                expected=self.depth,
                actual=filter_.depth,
            )
        d_out = self.depth if depth_separable else filter_.depth // self.depth
        result = self._prepare_out(
            "winograd_convolve", out, (self.rows - 2, self.columns - 2, d_out)
        )

        def execute():
            values = winograd_forward_cpu(
                self.to_numpy(),
                filter_.to_numpy(),
                transforms=transforms,
                preprocessed=preprocessed,
                depth_separable=bool(depth_separable),
                mask=self.mask_array(),
            )
            return self._write(result, values)

        return self._record(
            "winograd_convolve",
            (filter_,),
            execute,
            out=out,
            preprocessed=preprocessed,
            depth_separable=bool(depth_separable),
        )

    # ------------------------------------------------------------------
    # Pooling
    # ------------------------------------------------------------------
    def _positional_pool(self, family: str, kernel, params: dict, out):
        result = self._prepare_out(family, out, self._pool_shape(params))

        def execute():
            values, positions = kernel(self.to_numpy(), mask=self.mask_array(), **params)
            return self._write(result, values), positions

        return self._record(
            family,
            (),
            execute,
            out=out,
            result_params=lambda outcome: {"positions": outcome[1]},
            **params,
        )

    def max_pool(
        self, filter_row_size=None, filter_column_size=None, stride=None, dilation=None, out=None
    ):
        """
        Max pooling.

        Returns
        -------
        tuple[Matrix, np.ndarray]
            Pooled matrix and position map.
        """
        params = self._pool_params(filter_row_size, filter_column_size, stride, dilation)
        return self._positional_pool("max_pool", maxpool_forward_cpu, params, out)

    def random_pool(
        self, filter_row_size=None, filter_column_size=None, stride=None, dilation=None, out=None
    ):
        """
        Random pooling; the source cell is drawn proportionally to its
        magnitude using the matrix RNG.

        Returns
        -------
        tuple[Matrix, np.ndarray]
            Pooled matrix and position map.
        """
        params = self._pool_params(filter_row_size, filter_column_size, stride, dilation)

        def kernel(x, **kwargs):
            return randompool_forward_cpu(x, rng=self._rng, **kwargs)

        return self._positional_pool("random_pool", kernel, params, out)

    def cyclic_pool(
        self, filter_row_size=None, filter_column_size=None, stride=None, dilation=None, out=None
    ):
        """
        Cyclic pooling.

        Every call selects the same in-window offset for all windows; the
        offset advances (row first, then column) on each call on this matrix.

        Returns
        -------
        tuple[Matrix, np.ndarray]
            Pooled matrix and position map.
        """
        params = self._pool_params(filter_row_size, filter_column_size, stride, dilation)
        k_r, k_c = params["kernel_size"]
        row, column = self._cyclic_offset
        step = params["dilation"]
        if row >= k_r or column >= k_c or row % step or column % step:
            self._cyclic_offset = (0, 0)

        def kernel(x, **kwargs):
            values, positions, self._cyclic_offset = cyclicpool_forward_cpu(
                x, offset=self._cyclic_offset, **kwargs
            )
            return values, positions

        return self._positional_pool("cyclic_pool", kernel, params, out)

    def average_pool(
        self, filter_row_size=None, filter_column_size=None, stride=None, dilation=None, out=None
    ):
        """
        Average pooling over the window taps (masked cells count as zero).
        """
        params = self._pool_params(filter_row_size, filter_column_size, stride, dilation)
        result = self._prepare_out("average_pool", out, self._pool_shape(params))

        def execute():
            values = avgpool_forward_cpu(self.to_numpy(), mask=self.mask_array(), **params)
            return self._write(result, values)

        return self._record("average_pool", (), execute, out=out, **params)

    def pool_gradient(self, grad_out, positions: np.ndarray):
        """
        Gradient of max, random or cyclic pooling of `self`.

        Parameters
        ----------
        grad_out : Matrix
            Gradient with respect to the pooled output.
        positions : np.ndarray
            Position map returned by the forward pass.

        Returns
        -------
        Matrix
            Gradient with the geometry of `self`; overlapping windows
            accumulate.
        """
        if positions.shape[:3] != grad_out.shape:
            raise DimensionError(
                "pool_gradient",
                "position map does not match output gradient",
                expected=grad_out.shape,
                actual=positions.shape[:3],
            )
        values = positional_pool_backward_cpu(grad_out.to_numpy(), positions, self.shape)
        return self._write(self.get_new_matrix(*self.shape), values)

    def average_pool_gradient(
        self, grad_out, filter_row_size=None, filter_column_size=None, stride=None, dilation=None
    ):
        """Gradient of ``self.average_pool(...)`` with respect to `self`."""
        params = self._pool_params(filter_row_size, filter_column_size, stride, dilation)
        expected = self._pool_shape(params)
        if grad_out.shape != expected:
            raise DimensionError(
                "average_pool_gradient",
                "output gradient geometry mismatch",
                expected=expected,
                actual=grad_out.shape,
            )
        values = avgpool_backward_cpu(grad_out.to_numpy(), self.shape, **params)
        return self._write(self.get_new_matrix(*self.shape), values)
