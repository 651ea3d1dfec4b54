import unittest

import numpy as np

from src.gradmatrix.domain._errors import DimensionError, ParameterError
from src.gradmatrix.infrastructure.matrix import DMatrix
from src.gradmatrix.infrastructure.procedure import ProcedureFactory


def _grid(rows, columns, depth=1):
    values = np.arange(rows * columns * depth, dtype=np.float64).reshape(depth, rows, columns)
    return DMatrix.from_numpy(np.transpose(values, (1, 2, 0)))


class TestMaxPool(unittest.TestCase):
    def test_values_and_positions(self):
        x = _grid(4, 4)
        y, positions = x.max_pool(2, 2, stride=2)
        self.assertTrue(np.allclose(y.to_numpy()[:, :, 0], [[5.0, 7.0], [13.0, 15.0]]))
        self.assertEqual(positions.shape, (2, 2, 1, 2))
        self.assertEqual(positions[0, 1, 0].tolist(), [1, 3])
        self.assertEqual(positions[1, 0, 0].tolist(), [3, 1])

    def test_size_law(self):
        self.assertEqual(DMatrix(5, 5).max_pool(3, 3, stride=2)[0].shape, (2, 2, 1))
        self.assertEqual(DMatrix(4, 5, 2).max_pool(2, 3)[0].shape, (3, 3, 2))

    def test_window_from_attributes(self):
        x = _grid(4, 4)
        x.filter_row_size = 2
        x.filter_column_size = 2
        x.stride = 2
        y, _ = x.max_pool()
        self.assertEqual(y.shape, (2, 2, 1))

    def test_missing_window_size(self):
        with self.assertRaises(ParameterError):
            DMatrix(4, 4).max_pool()
        with self.assertRaises(ParameterError):
            DMatrix(4, 4).average_pool(2)

    def test_window_exceeds_input(self):
        with self.assertRaises(DimensionError):
            DMatrix(3, 3).max_pool(4, 2)

    def test_masked_cells_never_win(self):
        x = _grid(2, 2)
        x.set_mask().set_mask(1, 1, 0, True)
        y, positions = x.max_pool(2, 2)
        self.assertEqual(y[0, 0], 2.0)
        self.assertEqual(positions[0, 0, 0].tolist(), [1, 0])

    def test_gradient_scatters_to_positions(self):
        x = _grid(4, 4)
        y, positions = x.max_pool(2, 2, stride=2)
        grad = x.pool_gradient(DMatrix(2, 2, initializer=lambda r, c: 1.0 + r + c), positions)
        expected = np.zeros((4, 4))
        expected[1, 1], expected[1, 3], expected[3, 1], expected[3, 3] = 1.0, 2.0, 2.0, 3.0
        self.assertTrue(np.allclose(grad.to_numpy()[:, :, 0], expected))

    def test_gradient_accumulates_over_overlap(self):
        values = np.zeros((3, 3))
        values[1, 1] = 9.0
        x = DMatrix.from_numpy(values)
        y, positions = x.max_pool(2, 2)
        grad = x.pool_gradient(DMatrix(2, 2, initializer=lambda r, c: 1.0), positions)
        self.assertEqual(grad[1, 1], 4.0)
        self.assertEqual(float(np.sum(grad.to_numpy())), 4.0)

    def test_gradient_position_map_mismatch(self):
        x = _grid(4, 4)
        _, positions = x.max_pool(2, 2, stride=2)
        with self.assertRaises(DimensionError):
            x.pool_gradient(DMatrix(3, 3), positions)


class TestCyclicPool(unittest.TestCase):
    def test_offset_advances_row_first(self):
        x = _grid(4, 4)
        picks = []
        for _ in range(5):
            y, positions = x.cyclic_pool(2, 2, stride=2)
            picks.append(tuple(positions[0, 0, 0].tolist()))
            self.assertTrue(
                np.array_equal(positions[1, 1, 0], positions[0, 0, 0] + np.array([2, 2]))
            )
        self.assertEqual(picks, [(0, 0), (1, 0), (0, 1), (1, 1), (0, 0)])

    def test_values_follow_positions(self):
        x = _grid(4, 4)
        x.cyclic_pool(2, 2, stride=2)
        y, positions = x.cyclic_pool(2, 2, stride=2)
        source = x.to_numpy()
        for i in range(2):
            for j in range(2):
                r, c = positions[i, j, 0]
                self.assertEqual(y[i, j], source[r, c, 0])

    def test_masked_offset_moves_on(self):
        x = _grid(2, 2)
        x.set_mask().set_mask(0, 0, 0, True)
        y, positions = x.cyclic_pool(2, 2)
        self.assertEqual(positions[0, 0, 0].tolist(), [1, 0])
        self.assertEqual(y[0, 0], 2.0)


class TestRandomPool(unittest.TestCase):
    def test_single_nonzero_per_window_is_picked(self):
        values = np.zeros((4, 4))
        values[0, 1] = 3.0
        values[3, 2] = -2.0
        x = DMatrix.from_numpy(values, rng=np.random.default_rng(0))
        y, positions = x.random_pool(2, 2, stride=2)
        self.assertEqual(y[0, 0], 3.0)
        self.assertEqual(positions[0, 0, 0].tolist(), [0, 1])
        self.assertEqual(y[1, 1], -2.0)
        self.assertEqual(positions[1, 1, 0].tolist(), [3, 2])

    def test_seeded_reproducibility(self):
        values = np.random.default_rng(5).random((6, 6, 2))
        first = DMatrix.from_numpy(values, rng=np.random.default_rng(42)).random_pool(3, 3, stride=3)
        second = DMatrix.from_numpy(values, rng=np.random.default_rng(42)).random_pool(3, 3, stride=3)
        self.assertTrue(np.array_equal(first[1], second[1]))
        self.assertTrue(np.allclose(first[0].to_numpy(), second[0].to_numpy()))

    def test_gradient_uses_drawn_positions(self):
        values = np.random.default_rng(9).random((4, 4))
        x = DMatrix.from_numpy(values, rng=np.random.default_rng(3))
        y, positions = x.random_pool(2, 2, stride=2)
        grad = x.pool_gradient(DMatrix(2, 2, initializer=lambda r, c: 1.0), positions).to_numpy()
        self.assertEqual(float(np.sum(grad)), 4.0)
        for r, c in positions[:, :, 0].reshape(-1, 2):
            self.assertEqual(grad[r, c, 0], 1.0)


class TestAveragePool(unittest.TestCase):
    def test_values(self):
        y = _grid(4, 4).average_pool(2, 2, stride=2)
        self.assertTrue(np.allclose(y.to_numpy()[:, :, 0], [[2.5, 4.5], [10.5, 12.5]]))

    def test_per_depth(self):
        x = _grid(2, 2, 2)
        y = x.average_pool(2, 2)
        self.assertTrue(np.allclose(y.to_numpy()[0, 0], [1.5, 5.5]))

    def test_masked_cells_count_as_zero(self):
        x = DMatrix(2, 2, initializer=lambda r, c: 4.0)
        x.set_mask().set_mask(0, 0, 0, True)
        self.assertEqual(x.average_pool(2, 2)[0, 0], 3.0)

    def test_gradient(self):
        x = _grid(4, 4)
        grad = x.average_pool_gradient(DMatrix(2, 2, initializer=lambda r, c: 1.0), 2, 2, 2)
        self.assertTrue(np.allclose(grad.to_numpy(), 0.25))
        overlap = DMatrix(3, 3).average_pool_gradient(
            DMatrix(2, 2, initializer=lambda r, c: 4.0), 2, 2, 1
        )
        self.assertEqual(overlap[1, 1], 4.0)
        self.assertEqual(overlap[0, 0], 1.0)


class TestDilatedPooling(unittest.TestCase):
    def setUp(self):
        self.x = _grid(5, 5)

    def test_max_pool_skips_dilated_cells(self):
        y, positions = self.x.max_pool(3, 3, dilation=2)
        self.assertEqual(y.shape, (3, 3, 1))
        expected = np.array([[5.0 * (i + 2) + (j + 2) for j in range(3)] for i in range(3)])
        self.assertTrue(np.allclose(y.to_numpy()[:, :, 0], expected))
        self.assertEqual(positions[1, 0, 0].tolist(), [3, 2])

    def test_dilation_from_attribute_is_recorded(self):
        factory = ProcedureFactory()
        self.x.procedure_factory = factory
        self.x.dilation = 2
        y, _ = self.x.max_pool(3, 3)
        self.assertEqual(y[0, 0], 12.0)
        self.assertEqual(factory.expressions[0].params["dilation"], 2)

    def test_average_pool_over_taps(self):
        y = self.x.average_pool(3, 3, dilation=2)
        expected = np.array([[5.0 * i + j + 6.0 for j in range(3)] for i in range(3)])
        self.assertTrue(np.allclose(y.to_numpy()[:, :, 0], expected))

    def test_average_pool_gradient_over_taps(self):
        ones = DMatrix(3, 3, initializer=lambda r, c: 1.0)
        grad = self.x.average_pool_gradient(ones, 3, 3, 1, dilation=2)
        self.assertEqual(grad[2, 2], 1.0)
        self.assertEqual(grad[1, 1], 0.25)
        self.assertEqual(grad[0, 1], 0.25)
        self.assertEqual(float(np.sum(grad.to_numpy())), 9.0)

    def test_cyclic_offset_steps_by_dilation(self):
        x = _grid(3, 3)
        picks = [tuple(x.cyclic_pool(3, 3, dilation=2)[1][0, 0, 0].tolist()) for _ in range(5)]
        self.assertEqual(picks, [(0, 0), (2, 0), (0, 2), (2, 2), (0, 0)])

    def test_random_pool_draws_only_taps(self):
        values = np.zeros((3, 3))
        values[1, 1] = 5.0
        values[2, 2] = 3.0
        x = DMatrix.from_numpy(values, rng=np.random.default_rng(1))
        for _ in range(5):
            y, positions = x.random_pool(3, 3, dilation=2)
            self.assertEqual(y[0, 0], 3.0)
            self.assertEqual(positions[0, 0, 0].tolist(), [2, 2])

    def test_dilation_must_be_positive(self):
        with self.assertRaises(ParameterError):
            self.x.max_pool(3, 3, dilation=0)


if __name__ == "__main__":
    unittest.main()
