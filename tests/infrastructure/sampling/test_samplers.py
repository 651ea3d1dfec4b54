import unittest

import numpy as np

from src.gradmatrix.domain._errors import ParameterError
from src.gradmatrix.infrastructure.sampling import binomial, dirichlet, gamma, multinomial


class TestBinomial(unittest.TestCase):
    def test_degenerate_cases(self):
        self.assertEqual(binomial(0, 0.5), 0)
        self.assertEqual(binomial(7, 0.0), 0)
        self.assertEqual(binomial(7, -0.3), 0)
        self.assertEqual(binomial(7, 1.0), 7)
        self.assertEqual(binomial(7, 1.5), 7)

    def test_negative_trials(self):
        with self.assertRaises(ParameterError):
            binomial(-1, 0.5)

    def test_seeded_draws(self):
        first = [binomial(20, 0.4, np.random.default_rng(3)) for _ in range(3)]
        second = [binomial(20, 0.4, np.random.default_rng(3)) for _ in range(3)]
        self.assertEqual(first, second)

    def test_mean(self):
        rng = np.random.default_rng(0)
        draws = [binomial(10, 0.3, rng) for _ in range(2000)]
        self.assertTrue(all(0 <= d <= 10 for d in draws))
        self.assertAlmostEqual(float(np.mean(draws)), 3.0, delta=0.15)


class TestMultinomial(unittest.TestCase):
    def test_counts_cover_all_trials(self):
        rng = np.random.default_rng(1)
        counts = multinomial(50, [0.25, 0.25, 0.5], rng)
        self.assertEqual(counts.shape, (3,))
        self.assertTrue(np.issubdtype(counts.dtype, np.integer))
        self.assertEqual(int(counts.sum()), 50)

    def test_zero_probability_category(self):
        rng = np.random.default_rng(2)
        for _ in range(20):
            counts = multinomial(10, [0.5, 0.0, 0.5], rng)
            self.assertEqual(counts[1], 0)
            self.assertEqual(int(counts.sum()), 10)

    def test_exhausted_mass(self):
        counts = multinomial(5, [1.0, 0.5], np.random.default_rng(0))
        self.assertEqual(counts.tolist(), [5, 0])

    def test_expected_shares(self):
        rng = np.random.default_rng(4)
        totals = sum(multinomial(100, [0.5, 0.25, 0.25], rng) for _ in range(200))
        shares = totals / totals.sum()
        self.assertTrue(np.allclose(shares, [0.5, 0.25, 0.25], atol=0.02))

    def test_negative_trials(self):
        with self.assertRaises(ParameterError):
            multinomial(-2, [1.0])


class TestGammaAndDirichlet(unittest.TestCase):
    def test_gamma_parameters(self):
        with self.assertRaises(ParameterError):
            gamma(0.0)
        with self.assertRaises(ParameterError):
            gamma(1.0, scale=-1.0)

    def test_gamma_mean(self):
        rng = np.random.default_rng(5)
        draws = [gamma(2.0, 1.5, rng) for _ in range(4000)]
        self.assertTrue(all(d > 0.0 for d in draws))
        self.assertAlmostEqual(float(np.mean(draws)), 3.0, delta=0.2)

    def test_dirichlet_is_a_distribution(self):
        sample = dirichlet([1.0, 2.0, 3.0], np.random.default_rng(6))
        self.assertEqual(sample.shape, (3,))
        self.assertTrue(np.all(sample > 0.0))
        self.assertTrue(np.isclose(sample.sum(), 1.0))

    def test_dirichlet_seeded(self):
        first = dirichlet([0.5, 0.5], np.random.default_rng(8))
        second = dirichlet([0.5, 0.5], np.random.default_rng(8))
        self.assertTrue(np.allclose(first, second))

    def test_dirichlet_rejects_non_positive_alpha(self):
        with self.assertRaises(ParameterError):
            dirichlet([1.0, 0.0])


if __name__ == "__main__":
    unittest.main()
