import unittest

import numpy as np

from src.gradmatrix.domain._direction import Direction
from src.gradmatrix.domain._errors import (
    DimensionError,
    GraphConflictError,
    MatrixError,
    ParameterError,
    StateError,
    TypeMismatchError,
)
from src.gradmatrix.domain._mask import IMask
from src.gradmatrix.domain._matrix import IMatrix
from src.gradmatrix.domain._procedure_factory import IProcedureFactory
from src.gradmatrix.domain.utils._matrix_initialization import (
    Initialization,
    _he_scale,
    _lecun_scale,
    _xavier_scale,
)
from src.gradmatrix.infrastructure.mask import DMask, SMask
from src.gradmatrix.infrastructure.matrix import DMatrix, SMatrix
from src.gradmatrix.infrastructure.procedure import ProcedureFactory


class TestErrorTaxonomy(unittest.TestCase):
    def test_every_error_is_a_matrix_error(self):
        for cls in (
            DimensionError,
            TypeMismatchError,
            GraphConflictError,
            StateError,
            ParameterError,
        ):
            self.assertTrue(issubclass(cls, MatrixError))
        self.assertTrue(issubclass(MatrixError, RuntimeError))

    def test_dimension_error_carries_geometry(self):
        err = DimensionError("add", "operand geometry mismatch", expected=(2, 2, 1), actual=(3, 2, 1))
        self.assertEqual(err.op, "add")
        self.assertEqual(err.expected, (2, 2, 1))
        self.assertEqual(err.actual, (3, 2, 1))
        self.assertIn("expected (2, 2, 1)", str(err))

    def test_dimension_error_without_geometry_has_plain_message(self):
        err = DimensionError("join", "at least one matrix is required")
        self.assertEqual(str(err), "join: at least one matrix is required")

    def test_parameter_error_carries_name_and_value(self):
        err = ParameterError("probability", 1.5, "must lie in [0, 1]")
        self.assertEqual(err.name, "probability")
        self.assertEqual(err.value, 1.5)
        self.assertIn("probability=1.5", str(err))

    def test_graph_conflict_error_keeps_both_recorders(self):
        a, b = ProcedureFactory("a"), ProcedureFactory("b")
        err = GraphConflictError(a, b)
        self.assertIs(err.first, a)
        self.assertIs(err.second, b)

    def test_type_mismatch_error_message(self):
        err = TypeMismatchError("set_mask", "DMask", "SMask")
        self.assertEqual(err.expected, "DMask")
        self.assertEqual(err.actual, "SMask")
        self.assertIn("expected DMask, got SMask", str(err))


class TestDirection(unittest.TestCase):
    def test_axis_mapping(self):
        self.assertEqual(Direction.ROW.axis, 0)
        self.assertEqual(Direction.COLUMN.axis, 1)
        self.assertEqual(Direction.DEPTH.axis, 2)
        self.assertIsNone(Direction.ALL.axis)


class TestProtocols(unittest.TestCase):
    def test_matrices_satisfy_matrix_protocol(self):
        self.assertIsInstance(DMatrix(2, 2), IMatrix)
        self.assertIsInstance(SMatrix(2, 2), IMatrix)

    def test_masks_satisfy_mask_protocol(self):
        self.assertIsInstance(DMask(2, 2), IMask)
        self.assertIsInstance(SMask(2, 2), IMask)

    def test_procedure_factory_satisfies_protocol(self):
        self.assertIsInstance(ProcedureFactory(), IProcedureFactory)

    def test_plain_object_does_not_satisfy_matrix_protocol(self):
        self.assertNotIsInstance(object(), IMatrix)


class TestInitializationScales(unittest.TestCase):
    def test_enum_values_are_registry_keys(self):
        self.assertEqual(Initialization.UNIFORM_XAVIER.value, "uniform_xavier")
        self.assertEqual(Initialization.NORMAL_HE_CONV.value, "normal_he_conv")

    def test_xavier_scale(self):
        self.assertTrue(np.isclose(_xavier_scale(3, 5, uniform=False), np.sqrt(2.0 / 8.0)))
        self.assertTrue(np.isclose(_xavier_scale(3, 5, uniform=True), np.sqrt(6.0 / 8.0)))

    def test_he_and_lecun_scales(self):
        self.assertTrue(np.isclose(_he_scale(8, uniform=False), 0.5))
        self.assertTrue(np.isclose(_he_scale(6, uniform=True), 1.0))
        self.assertTrue(np.isclose(_lecun_scale(4, uniform=False), 0.5))
        self.assertTrue(np.isclose(_lecun_scale(3, uniform=True), 1.0))


if __name__ == "__main__":
    unittest.main()
