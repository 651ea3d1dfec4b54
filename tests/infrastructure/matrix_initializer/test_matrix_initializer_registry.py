import math
import unittest

import numpy as np

from src.gradmatrix.domain._errors import ParameterError
from src.gradmatrix.domain.utils._matrix_initialization import Initialization
from src.gradmatrix.infrastructure.matrix import DMatrix, SMatrix
from src.gradmatrix.infrastructure.utils.matrix_initializer import MatrixInitializer


class TestMatrixInitializerRegistry(unittest.TestCase):
    def test_every_scheme_is_registered(self):
        available = MatrixInitializer.available()
        for scheme in Initialization:
            self.assertIn(scheme.value, available)
        self.assertEqual(list(available), sorted(available))

    def test_unknown_scheme(self):
        with self.assertRaises(ParameterError):
            MatrixInitializer("orthogonal")

    def test_duplicate_registration(self):
        with self.assertRaises(ValueError):
            MatrixInitializer.register_initializer("zero")(lambda m, i=None, o=None: m)
        with self.assertRaises(ValueError):
            MatrixInitializer.register_initializer("")

    def test_custom_registration(self):
        name = "test_constant_seven"

        @MatrixInitializer.register_initializer(name, overwrite=True)
        def seven(matrix, inputs=None, outputs=None):
            matrix.copy_from_numpy(np.full(matrix.shape, 7.0))
            return matrix

        try:
            self.assertIs(MatrixInitializer.get(name), seven)
            m = DMatrix(2, 3).initialize(name)
            self.assertTrue(np.allclose(m.to_numpy(), 7.0))
        finally:
            MatrixInitializer.INITIALIZERS.pop(name, None)


class TestConstantSchemes(unittest.TestCase):
    def test_zero_one_identity(self):
        m = DMatrix(3, 3, 2, initialization=Initialization.ONE)
        self.assertTrue(np.allclose(m.to_numpy(), 1.0))
        MatrixInitializer(Initialization.ZERO)(m)
        self.assertTrue(np.allclose(m.to_numpy(), 0.0))
        m.initialize(Initialization.IDENTITY)
        self.assertTrue(np.allclose(m.to_numpy()[:, :, 1], np.eye(3)))

    def test_identity_on_rectangular_matrix(self):
        m = DMatrix(2, 4, initialization=Initialization.IDENTITY)
        self.assertTrue(np.allclose(m.to_numpy()[:, :, 0], np.eye(2, 4)))

    def test_random_range(self):
        m = DMatrix(10, 10, initialization="random", rng=np.random.default_rng(0))
        values = m.to_numpy()
        self.assertTrue(np.all(values >= 0.0) and np.all(values < 1.0))

    def test_sparse_matrix(self):
        s = SMatrix(3, 3, initialization=Initialization.IDENTITY)
        self.assertEqual(s.nnz, 3)


class TestScaledSchemes(unittest.TestCase):
    def _values(self, scheme, rows=200, columns=100, **fans):
        m = DMatrix(rows, columns, rng=np.random.default_rng(42))
        return m.initialize(scheme, **fans).to_numpy()

    def test_uniform_bounds(self):
        cases = {
            Initialization.UNIFORM_XAVIER: math.sqrt(6.0 / 300.0),
            Initialization.UNIFORM_HE: math.sqrt(6.0 / 200.0),
            Initialization.UNIFORM_LECUN: math.sqrt(3.0 / 200.0),
        }
        for scheme, bound in cases.items():
            with self.subTest(scheme=scheme.name):
                values = self._values(scheme)
                self.assertLessEqual(float(np.max(np.abs(values))), bound)
                self.assertGreater(float(np.max(np.abs(values))), 0.9 * bound)

    def test_normal_spread(self):
        cases = {
            Initialization.NORMAL_XAVIER: math.sqrt(2.0 / 300.0),
            Initialization.NORMAL_HE: math.sqrt(2.0 / 200.0),
            Initialization.NORMAL_LECUN: math.sqrt(1.0 / 200.0),
        }
        for scheme, sd in cases.items():
            with self.subTest(scheme=scheme.name):
                values = self._values(scheme)
                self.assertAlmostEqual(float(np.std(values)), sd, delta=0.05 * sd)
                self.assertAlmostEqual(float(np.mean(values)), 0.0, delta=0.05 * sd)

    def test_convolution_fans(self):
        values = self._values(Initialization.UNIFORM_XAVIER_CONV, inputs=9, outputs=16)
        self.assertLessEqual(float(np.max(np.abs(values))), math.sqrt(6.0 / 25.0))
        values = self._values(Initialization.NORMAL_HE_CONV, inputs=9, outputs=50)
        self.assertAlmostEqual(float(np.std(values)), math.sqrt(2.0 / 50.0), delta=0.01)

    def test_convolution_schemes_require_fans(self):
        for scheme in (
            Initialization.NORMAL_XAVIER_CONV,
            Initialization.UNIFORM_HE_CONV,
            Initialization.NORMAL_LECUN_CONV,
        ):
            with self.subTest(scheme=scheme.name):
                with self.assertRaises(ParameterError):
                    DMatrix(3, 3).initialize(scheme, inputs=9)

    def test_seeded_initialization_is_reproducible(self):
        first = self._values(Initialization.NORMAL_XAVIER)
        second = self._values(Initialization.NORMAL_XAVIER)
        self.assertTrue(np.array_equal(first, second))


if __name__ == "__main__":
    unittest.main()
