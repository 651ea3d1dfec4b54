"""
He (Kaiming) initializers.

The non-convolutional variants take the fan from the number of rows; the
``*_conv`` variants take it from the caller's ``outputs`` count.
"""

from ._base import MatrixInitializer, conv_fans, fill_normal, fill_uniform
from ...matrix._matrix import Matrix
from ....domain.utils._matrix_initialization import _he_scale


@MatrixInitializer.register_initializer("normal_he")
def normal_he(matrix: Matrix, inputs=None, outputs=None) -> Matrix:
    return fill_normal(matrix, _he_scale(matrix.rows, uniform=False))


@MatrixInitializer.register_initializer("uniform_he")
def uniform_he(matrix: Matrix, inputs=None, outputs=None) -> Matrix:
    return fill_uniform(matrix, _he_scale(matrix.rows, uniform=True))


@MatrixInitializer.register_initializer("normal_he_conv")
def normal_he_conv(matrix: Matrix, inputs=None, outputs=None) -> Matrix:
    _, fan_out = conv_fans(inputs, outputs)
    return fill_normal(matrix, _he_scale(fan_out, uniform=False))


@MatrixInitializer.register_initializer("uniform_he_conv")
def uniform_he_conv(matrix: Matrix, inputs=None, outputs=None) -> Matrix:
    _, fan_out = conv_fans(inputs, outputs)
    return fill_uniform(matrix, _he_scale(fan_out, uniform=True))
