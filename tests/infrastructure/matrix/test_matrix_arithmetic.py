import unittest

import numpy as np

from src.gradmatrix.domain._errors import DimensionError
from src.gradmatrix.domain._function_types import BinaryFunctionType
from src.gradmatrix.infrastructure.functions import BinaryFunction
from src.gradmatrix.infrastructure.matrix import DMatrix, SMatrix


class TestBinaryArithmetic(unittest.TestCase):
    def setUp(self):
        rng = np.random.default_rng(0)
        self.a_np = rng.standard_normal((3, 4, 2))
        self.b_np = rng.standard_normal((3, 4, 2))
        self.a = DMatrix.from_numpy(self.a_np)
        self.b = DMatrix.from_numpy(self.b_np)

    def test_add_subtract_multiply_divide(self):
        self.assertTrue(np.allclose(self.a.add(self.b).to_numpy(), self.a_np + self.b_np))
        self.assertTrue(np.allclose(self.a.subtract(self.b).to_numpy(), self.a_np - self.b_np))
        self.assertTrue(np.allclose(self.a.multiply(self.b).to_numpy(), self.a_np * self.b_np))
        self.assertTrue(np.allclose(self.a.divide(self.b).to_numpy(), self.a_np / self.b_np))

    def test_operators(self):
        self.assertTrue(np.allclose((self.a + self.b).to_numpy(), self.a_np + self.b_np))
        self.assertTrue(np.allclose((self.a - 1.0).to_numpy(), self.a_np - 1.0))
        self.assertTrue(np.allclose((2.0 * self.a).to_numpy(), 2.0 * self.a_np))
        self.assertTrue(np.allclose((1.0 - self.a).to_numpy(), 1.0 - self.a_np))
        self.assertTrue(np.allclose((-self.a).to_numpy(), -self.a_np))
        self.assertTrue(np.allclose((self.a / 2.0).to_numpy(), self.a_np / 2.0))

    def test_augmented_assignment_is_in_place(self):
        original = self.a
        self.a += self.b
        self.assertIs(self.a, original)
        self.assertTrue(np.allclose(self.a.to_numpy(), self.a_np + self.b_np))

    def test_scalar_broadcasts_both_ways(self):
        scalar = DMatrix.as_matrix(3.0)
        self.assertEqual(self.a.add(scalar).shape, self.a.shape)
        self.assertEqual(scalar.add(self.a).shape, self.a.shape)
        self.assertTrue(np.allclose(scalar.multiply(self.a).to_numpy(), 3.0 * self.a_np))

    def test_geometry_mismatch(self):
        with self.assertRaises(DimensionError):
            self.a.add(DMatrix(4, 3, 2))
        with self.assertRaises(DimensionError):
            self.a.multiply(DMatrix(3, 4))

    def test_out_geometry_mismatch(self):
        with self.assertRaises(DimensionError):
            self.a.add(self.b, out=DMatrix(2, 2))

    def test_division_by_zero_is_positive_infinity(self):
        x = DMatrix.from_numpy(np.array([[1.0, -2.0, 0.0]]))
        y = x.divide(0.0).to_numpy()
        self.assertTrue(np.all(np.isposinf(y)))

    def test_masked_cells_pass_receiver_value(self):
        self.a.set_mask().set_mask(0, 0, 0, True)
        self.b.set_mask().set_mask(1, 1, 1, True)
        out = self.a.add(self.b).to_numpy()
        expected = self.a_np + self.b_np
        expected[0, 0, 0] = self.a_np[0, 0, 0]
        expected[1, 1, 1] = self.a_np[1, 1, 1]
        self.assertTrue(np.allclose(out, expected))

    def test_sparse_operands_produce_sparse_result(self):
        s = SMatrix.from_numpy(np.array([[0.0, 1.0], [2.0, 0.0]]))
        out = s.multiply(2.0)
        self.assertIsInstance(out, SMatrix)
        self.assertEqual(out.nnz, 2)
        self.assertTrue(np.allclose(out.to_numpy()[:, :, 0], [[0.0, 2.0], [4.0, 0.0]]))


class TestBinaryFunctions(unittest.TestCase):
    def test_maximum_minimum_power(self):
        a_np = np.array([[1.0, 5.0], [-3.0, 2.0]])
        b_np = np.array([[2.0, 4.0], [-4.0, 2.0]])
        a, b = DMatrix.from_numpy(a_np), DMatrix.from_numpy(b_np)
        self.assertTrue(np.allclose(a.maximum(b).to_numpy()[:, :, 0], np.maximum(a_np, b_np)))
        self.assertTrue(np.allclose(a.minimum(b).to_numpy()[:, :, 0], np.minimum(a_np, b_np)))
        self.assertTrue(np.allclose((a ** 2).to_numpy()[:, :, 0], a_np**2))

    def test_custom_binary_function(self):
        fn = BinaryFunction(
            BinaryFunctionType.CUSTOM,
            function=lambda x, y: x * y + 1.0,
            derivative=lambda x, y: y,
        )
        a = DMatrix.from_numpy(np.array([[1.0, 2.0]]))
        out = a.apply_bi(3.0, fn).to_numpy()
        self.assertTrue(np.allclose(out[:, :, 0], [[4.0, 7.0]]))

    def test_sgnmul(self):
        a = DMatrix.from_numpy(np.array([[2.0, 3.0, 4.0]]))
        b = DMatrix.from_numpy(np.array([[-1.0, 0.0, 5.0]]))
        self.assertTrue(np.allclose(a.sgnmul(b).to_numpy()[:, :, 0], [[-2.0, 0.0, 4.0]]))


class TestDot(unittest.TestCase):
    def test_per_depth_product(self):
        rng = np.random.default_rng(1)
        a_np = rng.standard_normal((2, 3, 2))
        b_np = rng.standard_normal((3, 4, 2))
        out = (DMatrix.from_numpy(a_np) @ DMatrix.from_numpy(b_np)).to_numpy()
        self.assertEqual(out.shape, (2, 4, 2))
        for d in range(2):
            self.assertTrue(np.allclose(out[:, :, d], a_np[:, :, d] @ b_np[:, :, d]))

    def test_transposed_operand(self):
        a_np = np.arange(6, dtype=np.float64).reshape(2, 3)
        a = DMatrix.from_numpy(a_np)
        out = a.dot(a.T).to_numpy()[:, :, 0]
        self.assertTrue(np.allclose(out, a_np @ a_np.T))

    def test_dimension_mismatch(self):
        with self.assertRaises(DimensionError):
            DMatrix(2, 3).dot(DMatrix(2, 3))
        with self.assertRaises(DimensionError):
            DMatrix(2, 3, 2).dot(DMatrix(3, 2, 1))

    def test_scalar_operand_is_lifted(self):
        with self.assertRaises(DimensionError):
            DMatrix(2, 3).dot(2.0)
        product = DMatrix.from_numpy(np.array([[3.0]])).dot(2.0)
        self.assertEqual(product.shape, (1, 1, 1))
        self.assertEqual(product[0, 0], 6.0)

    def test_masked_cells_contribute_zero(self):
        a = DMatrix.from_numpy(np.array([[1.0, 2.0]]))
        b = DMatrix.from_numpy(np.array([[3.0], [4.0]]))
        a.set_mask().set_mask(0, 1, 0, True)
        self.assertTrue(np.isclose(a.dot(b)[0, 0], 3.0))


if __name__ == "__main__":
    unittest.main()
