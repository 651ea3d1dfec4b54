import unittest

import numpy as np

from src.gradmatrix.domain._errors import DimensionError, ParameterError
from src.gradmatrix.infrastructure.matrix import DMatrix, SMatrix


def _reference(x, w, stride=1, dilation=1, flip=True, depth_separable=False):
    """Loop-based valid-mode convolution used as ground truth."""
    if flip:
        w = w[::-1, ::-1, :]
    R, C, D_in = x.shape
    F_r, F_c, D_w = w.shape
    D_out = D_in if depth_separable else D_w // D_in
    R_out = (R - F_r) // stride + 1
    C_out = (C - F_c) // stride + 1
    y = np.zeros((R_out, C_out, D_out))
    for i in range(R_out):
        for j in range(C_out):
            for o in range(D_out):
                acc = 0.0
                for a in range(0, F_r, dilation):
                    for b in range(0, F_c, dilation):
                        r, c = i * stride + a, j * stride + b
                        if depth_separable:
                            acc += x[r, c, o] * w[a, b, o]
                        else:
                            for k in range(D_in):
                                acc += x[r, c, k] * w[a, b, o * D_in + k]
                y[i, j, o] = acc
    return y


class TestConvolutionForward(unittest.TestCase):
    def setUp(self):
        self.rng = np.random.default_rng(7)

    def _pair(self, x_shape, w_shape):
        x_np = self.rng.standard_normal(x_shape)
        w_np = self.rng.standard_normal(w_shape)
        return DMatrix.from_numpy(x_np), DMatrix.from_numpy(w_np), x_np, w_np

    def test_output_size_law(self):
        x, w, _, _ = self._pair((7, 6, 1), (3, 2, 1))
        self.assertEqual(x.convolve(w).shape, (5, 5, 1))
        self.assertEqual(x.convolve(w, stride=2).shape, (3, 3, 1))

    def test_convolve_matches_reference(self):
        x, w, x_np, w_np = self._pair((6, 5, 1), (3, 3, 1))
        self.assertTrue(np.allclose(x.convolve(w).to_numpy(), _reference(x_np, w_np)))

    def test_crosscorrelate_is_unflipped(self):
        x, w, x_np, w_np = self._pair((5, 5, 1), (2, 3, 1))
        cc = x.crosscorrelate(w).to_numpy()
        self.assertTrue(np.allclose(cc, _reference(x_np, w_np, flip=False)))
        flipped = DMatrix.from_numpy(w_np[::-1, ::-1, :])
        self.assertTrue(np.allclose(x.convolve(flipped).to_numpy(), cc))

    def test_stride_and_dilation(self):
        x, w, x_np, w_np = self._pair((9, 8, 1), (3, 3, 1))
        out = x.convolve(w, stride=2, dilation=2).to_numpy()
        self.assertTrue(np.allclose(out, _reference(x_np, w_np, stride=2, dilation=2)))

    def test_spatial_attributes_are_defaults(self):
        x, w, x_np, w_np = self._pair((7, 7, 1), (3, 3, 1))
        x.stride = 2
        out = x.crosscorrelate(w).to_numpy()
        self.assertEqual(out.shape, (3, 3, 1))
        self.assertTrue(np.allclose(out, _reference(x_np, w_np, stride=2, flip=False)))

    def test_regular_depth_layout(self):
        x, w, x_np, w_np = self._pair((5, 5, 2), (2, 2, 6))
        out = x.convolve(w)
        self.assertEqual(out.shape, (4, 4, 3))
        self.assertTrue(np.allclose(out.to_numpy(), _reference(x_np, w_np)))

    def test_depth_separable_layout(self):
        x, w, x_np, w_np = self._pair((5, 4, 3), (2, 2, 3))
        out = x.convolve(w, depth_separable=True)
        self.assertEqual(out.shape, (4, 3, 3))
        self.assertTrue(
            np.allclose(out.to_numpy(), _reference(x_np, w_np, depth_separable=True))
        )

    def test_masked_input_contributes_zero(self):
        x, w, x_np, w_np = self._pair((4, 4, 1), (2, 2, 1))
        x.set_mask().set_mask(1, 2, 0, True)
        zeroed = x_np.copy()
        zeroed[1, 2, 0] = 0.0
        self.assertTrue(np.allclose(x.convolve(w).to_numpy(), _reference(zeroed, w_np)))

    def test_sparse_input(self):
        x_np = np.zeros((5, 5, 1))
        x_np[2, 2, 0] = 1.0
        w_np = np.arange(9, dtype=np.float64).reshape(3, 3, 1)
        out = SMatrix.from_numpy(x_np).crosscorrelate(DMatrix.from_numpy(w_np))
        self.assertIsInstance(out, SMatrix)
        self.assertTrue(np.allclose(out.to_numpy(), _reference(x_np, w_np, flip=False)))

    def test_invalid_geometry(self):
        x = DMatrix(3, 3, 2)
        with self.assertRaises(DimensionError):
            x.convolve(DMatrix(4, 2, 2))
        with self.assertRaises(DimensionError):
            x.convolve(DMatrix(2, 2, 3))
        with self.assertRaises(DimensionError):
            x.convolve(DMatrix(2, 2, 4), depth_separable=True)
        with self.assertRaises(ParameterError):
            x.convolve(DMatrix(2, 2, 2), stride=0)

    def test_out_geometry_is_checked(self):
        x = DMatrix(4, 4)
        with self.assertRaises(DimensionError):
            x.convolve(DMatrix(2, 2), out=DMatrix(2, 2))


class TestConvolutionGradients(unittest.TestCase):
    """
    Both passes are adjoints of a linear map, so
    ``<conv(x, w), g> == <x, dx> == <w, dw>``.
    """

    def setUp(self):
        self.rng = np.random.default_rng(11)

    def _check(self, x_shape, w_shape, **kwargs):
        x_np = self.rng.standard_normal(x_shape)
        w_np = self.rng.standard_normal(w_shape)
        x, w = DMatrix.from_numpy(x_np), DMatrix.from_numpy(w_np)
        for forward, input_grad, filter_grad in (
            (x.convolve, x.convolve_input_gradient, x.convolve_filter_gradient),
            (x.crosscorrelate, x.crosscorrelate_input_gradient, x.crosscorrelate_filter_gradient),
        ):
            y = forward(w, **kwargs).to_numpy()
            g_np = self.rng.standard_normal(y.shape)
            g = DMatrix.from_numpy(g_np)
            dx = input_grad(w, g, **kwargs).to_numpy()
            dw = filter_grad(w, g, **kwargs).to_numpy()
            self.assertEqual(dx.shape, x_np.shape)
            self.assertEqual(dw.shape, w_np.shape)
            inner = np.sum(y * g_np)
            self.assertTrue(np.isclose(inner, np.sum(dx * x_np)))
            self.assertTrue(np.isclose(inner, np.sum(dw * w_np)))

    def test_single_depth(self):
        self._check((6, 5, 1), (3, 2, 1))

    def test_strided_dilated(self):
        self._check((9, 9, 1), (3, 3, 1), stride=2, dilation=2)

    def test_regular_depth(self):
        self._check((5, 5, 2), (2, 3, 4))

    def test_depth_separable(self):
        self._check((5, 6, 3), (3, 3, 3), depth_separable=True)

    def test_dilation_skips_filter_offsets(self):
        x = DMatrix.from_numpy(self.rng.standard_normal((6, 6, 1)))
        w = DMatrix.from_numpy(self.rng.standard_normal((3, 3, 1)))
        g = DMatrix(4, 4, initializer=lambda r, c: 1.0)
        dw = x.crosscorrelate_filter_gradient(w, g, dilation=2).to_numpy()[:, :, 0]
        self.assertTrue(np.allclose(dw[1, :], 0.0))
        self.assertTrue(np.allclose(dw[:, 1], 0.0))

    def test_output_gradient_geometry(self):
        x, w = DMatrix(5, 5), DMatrix(3, 3)
        with self.assertRaises(DimensionError):
            x.convolve_input_gradient(w, DMatrix(2, 2))


if __name__ == "__main__":
    unittest.main()
