import unittest

import numpy as np

from src.gradmatrix.domain._errors import ParameterError
from src.gradmatrix.domain._function_types import UnaryFunctionType
from src.gradmatrix.infrastructure.functions import UnaryFunction
from src.gradmatrix.infrastructure.matrix import DMatrix


class TestUnaryApply(unittest.TestCase):
    def setUp(self):
        self.x_np = np.array([[0.25, 1.0, 4.0], [9.0, 2.0, 0.5]])
        self.x = DMatrix.from_numpy(self.x_np)

    def test_shortcuts(self):
        self.assertTrue(np.allclose(self.x.sqrt().to_numpy()[:, :, 0], np.sqrt(self.x_np)))
        self.assertTrue(np.allclose(self.x.exp().to_numpy()[:, :, 0], np.exp(self.x_np)))
        self.assertTrue(np.allclose(self.x.log().to_numpy()[:, :, 0], np.log(self.x_np)))
        neg = -self.x
        self.assertTrue(np.allclose(neg.abs().to_numpy()[:, :, 0], self.x_np))
        self.assertTrue(np.allclose(neg.sign().to_numpy(), -1.0))

    def test_apply_accepts_enum_and_function_object(self):
        by_enum = self.x.apply(UnaryFunctionType.TANH).to_numpy()
        by_object = self.x.apply(UnaryFunction(UnaryFunctionType.TANH)).to_numpy()
        self.assertTrue(np.allclose(by_enum, by_object))
        self.assertTrue(np.allclose(by_enum[:, :, 0], np.tanh(self.x_np)))

    def test_masked_cells_pass_through(self):
        self.x.set_mask().set_row_mask(1, True)
        out = self.x.sqrt().to_numpy()[:, :, 0]
        self.assertTrue(np.allclose(out[0], np.sqrt(self.x_np[0])))
        self.assertTrue(np.allclose(out[1], self.x_np[1]))

    def test_out_in_place(self):
        self.x.exp(out=self.x)
        self.assertTrue(np.allclose(self.x.to_numpy()[:, :, 0], np.exp(self.x_np)))


class TestSoftmax(unittest.TestCase):
    def test_columns_sum_to_one(self):
        x = DMatrix.from_numpy(np.random.default_rng(0).standard_normal((4, 3, 2)))
        s = x.softmax().to_numpy()
        self.assertTrue(np.allclose(s.sum(axis=0), 1.0))
        self.assertTrue(np.all(s > 0.0))

    def test_matches_reference(self):
        x_np = np.array([[1.0], [2.0], [3.0]])
        e = np.exp(x_np - 3.0)
        expected = e / e.sum()
        out = DMatrix.from_numpy(x_np).softmax().to_numpy()[:, :, 0]
        self.assertTrue(np.allclose(out, expected))

    def test_temperature(self):
        x_np = np.array([[1.0], [2.0]])
        out = DMatrix.from_numpy(x_np).softmax(tau=2.0).to_numpy()[:, 0, 0]
        e = np.exp(x_np[:, 0] / 2.0)
        self.assertTrue(np.allclose(out, e / e.sum()))
        with self.assertRaises(ParameterError):
            DMatrix.from_numpy(x_np).softmax(tau=0.0)

    def test_apply_dispatches_softmax(self):
        x = DMatrix.from_numpy(np.array([[0.5], [1.5]]))
        self.assertTrue(
            np.allclose(x.apply(UnaryFunctionType.SOFTMAX).to_numpy(), x.softmax().to_numpy())
        )

    def test_masked_rows_are_excluded(self):
        x = DMatrix.from_numpy(np.array([[1.0], [2.0], [3.0]]))
        x.set_mask().set_row_mask(2, True)
        out = x.softmax().to_numpy()[:, 0, 0]
        self.assertTrue(np.isclose(out[0] + out[1], 1.0))
        self.assertEqual(out[2], 3.0)

    def test_gumbel_softmax_is_seeded_and_normalized(self):
        x_np = np.random.default_rng(1).standard_normal((5, 2))
        a = DMatrix.from_numpy(x_np, rng=np.random.default_rng(7)).gumbel_softmax(tau=0.5)
        b = DMatrix.from_numpy(x_np, rng=np.random.default_rng(7)).gumbel_softmax(tau=0.5)
        self.assertTrue(np.allclose(a.to_numpy(), b.to_numpy()))
        self.assertTrue(np.allclose(a.to_numpy().sum(axis=0), 1.0))

    def test_softmax_gradient_matches_jacobian(self):
        x_np = np.array([[0.2], [-0.4], [1.1]])
        s = DMatrix.from_numpy(x_np).softmax()
        g_np = np.array([[1.0], [0.5], [-2.0]])
        grad = s.softmax_gradient(DMatrix.from_numpy(g_np)).to_numpy()[:, 0, 0]
        s_np = s.to_numpy()[:, 0, 0]
        jacobian = np.diag(s_np) - np.outer(s_np, s_np)
        self.assertTrue(np.allclose(grad, jacobian @ g_np[:, 0]))


if __name__ == "__main__":
    unittest.main()
