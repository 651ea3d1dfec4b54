import unittest

import numpy as np

from src.gradmatrix.domain._errors import ParameterError
from src.gradmatrix.domain._function_types import BinaryFunctionType, UnaryFunctionType
from src.gradmatrix.infrastructure.functions import BinaryFunction, UnaryFunction

_COLUMN_WISE = {
    UnaryFunctionType.SOFTMAX,
    UnaryFunctionType.GUMBEL_SOFTMAX,
    UnaryFunctionType.CUSTOM,
}


def _central_difference(fn, x, h=1e-6):
    return (fn(x + h) - fn(x - h)) / (2.0 * h)


class TestUnaryFunctionCatalogue(unittest.TestCase):
    def setUp(self):
        self.x = np.linspace(0.2, 0.8, 7)

    def test_every_derivative_matches_finite_difference(self):
        for function_type in UnaryFunctionType:
            if function_type in _COLUMN_WISE:
                continue
            with self.subTest(function=function_type.name):
                f = UnaryFunction(function_type)
                numeric = _central_difference(f.function, self.x)
                self.assertTrue(
                    np.allclose(f.derivative(self.x), numeric, rtol=1e-4, atol=1e-5)
                )

    def test_negative_branch_of_parameterized_functions(self):
        x = np.linspace(-0.8, -0.2, 7)
        for f in (
            UnaryFunction(UnaryFunctionType.RELU, alpha=0.1),
            UnaryFunction(UnaryFunctionType.ELU),
            UnaryFunction(UnaryFunctionType.SELU),
            UnaryFunction(UnaryFunctionType.GELU),
        ):
            with self.subTest(function=repr(f)):
                numeric = _central_difference(f.function, x)
                self.assertTrue(np.allclose(f.derivative(x), numeric, rtol=1e-4, atol=1e-5))

    def test_relu_parameters(self):
        x = np.array([-2.0, 0.5, 1.5])
        relu = UnaryFunction(UnaryFunctionType.RELU)
        self.assertTrue(np.allclose(relu.function(x), [0.0, 0.5, 1.5]))
        leaky = UnaryFunction(UnaryFunctionType.RELU, threshold=1.0, alpha=0.5)
        self.assertTrue(np.allclose(leaky.function(x), [-1.0, 0.25, 1.5]))
        self.assertTrue(np.allclose(leaky.derivative(x), [0.5, 0.5, 1.0]))

    def test_selu_defaults(self):
        selu = UnaryFunction(UnaryFunctionType.SELU)
        self.assertAlmostEqual(float(selu.function(np.array(2.0))), 1.0507 * 2.0)
        self.assertAlmostEqual(
            float(selu.function(np.array(-1.0))), 1.0507 * 1.6733 * (np.exp(-1.0) - 1.0)
        )

    def test_saturating_functions(self):
        x = np.array([-10.0, 10.0])
        self.assertTrue(
            np.allclose(UnaryFunction(UnaryFunctionType.HARDSIGMOID).function(x), [0.0, 1.0])
        )
        self.assertTrue(
            np.allclose(UnaryFunction(UnaryFunctionType.HARDTANH).function(x), [-1.0, 1.0])
        )
        self.assertTrue(
            np.allclose(UnaryFunction(UnaryFunctionType.SINACT).derivative(x), [0.0, 0.0])
        )

    def test_softmax_family(self):
        x = np.array([[1.0], [2.0], [3.0]])[:, :, None]
        softmax = UnaryFunction(UnaryFunctionType.SOFTMAX)
        s = softmax.function(x)
        self.assertTrue(np.isclose(s.sum(), 1.0))
        self.assertTrue(np.allclose(softmax.derivative(x), s * (1.0 - s)))
        self.assertTrue(softmax.is_softmax)
        gumbel = UnaryFunction(UnaryFunctionType.GUMBEL_SOFTMAX, tau=0.5)
        drawn = gumbel.softmax(x, rng=np.random.default_rng(0))
        self.assertTrue(np.isclose(drawn.sum(), 1.0))
        self.assertFalse(UnaryFunction(UnaryFunctionType.TANH).is_softmax)

    def test_custom_function(self):
        square = UnaryFunction(
            UnaryFunctionType.CUSTOM, function=lambda x: x * x, derivative=lambda x: 2.0 * x
        )
        self.assertTrue(np.allclose(square.function(np.array([3.0])), [9.0]))
        self.assertTrue(np.allclose(square.derivative(np.array([3.0])), [6.0]))

    def test_invalid_construction(self):
        with self.assertRaises(ParameterError):
            UnaryFunction(UnaryFunctionType.CUSTOM, function=np.sin)
        with self.assertRaises(ParameterError):
            UnaryFunction(UnaryFunctionType.GUMBEL_SOFTMAX, tau=0.0)


class TestBinaryFunctionCatalogue(unittest.TestCase):
    def test_values_and_partial_derivatives(self):
        x = np.array([1.0, 2.0, 3.0])
        y = np.array([2.0, 2.0, 2.0])
        power = BinaryFunction(BinaryFunctionType.POW)
        self.assertTrue(np.allclose(power.function(x, y), [1.0, 4.0, 9.0]))
        self.assertTrue(np.allclose(power.derivative(x, y), [2.0, 4.0, 6.0]))
        maximum = BinaryFunction(BinaryFunctionType.MAX)
        self.assertTrue(np.allclose(maximum.function(x, y), [2.0, 2.0, 3.0]))
        self.assertTrue(np.allclose(maximum.derivative(x, y), [0.0, 1.0, 1.0]))
        minimum = BinaryFunction(BinaryFunctionType.MIN)
        self.assertTrue(np.allclose(minimum.derivative(x, y), [1.0, 1.0, 0.0]))

    def test_power_derivative_matches_finite_difference(self):
        x = np.linspace(0.5, 2.0, 5)
        c = np.full_like(x, 1.7)
        power = BinaryFunction(BinaryFunctionType.POW)
        numeric = _central_difference(lambda v: power.function(v, c), x)
        self.assertTrue(np.allclose(power.derivative(x, c), numeric, rtol=1e-5))

    def test_custom_requires_both_callables(self):
        with self.assertRaises(ParameterError):
            BinaryFunction(BinaryFunctionType.CUSTOM, derivative=np.add)
        custom = BinaryFunction(
            BinaryFunctionType.CUSTOM, function=np.add, derivative=lambda x, y: np.ones_like(x)
        )
        self.assertTrue(np.allclose(custom.function(np.ones(2), np.ones(2)), [2.0, 2.0]))


if __name__ == "__main__":
    unittest.main()
