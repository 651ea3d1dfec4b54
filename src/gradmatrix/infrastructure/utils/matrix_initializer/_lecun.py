"""
LeCun initializers: ``gauss * sqrt(1 / fan)`` and ``(2u - 1) * sqrt(3 / fan)``.
"""

from ._base import MatrixInitializer, conv_fans, fill_normal, fill_uniform
from ...matrix._matrix import Matrix
from ....domain.utils._matrix_initialization import _lecun_scale


@MatrixInitializer.register_initializer("normal_lecun")
def normal_lecun(matrix: Matrix, inputs=None, outputs=None) -> Matrix:
    return fill_normal(matrix, _lecun_scale(matrix.rows, uniform=False))


@MatrixInitializer.register_initializer("uniform_lecun")
def uniform_lecun(matrix: Matrix, inputs=None, outputs=None) -> Matrix:
    return fill_uniform(matrix, _lecun_scale(matrix.rows, uniform=True))


@MatrixInitializer.register_initializer("normal_lecun_conv")
def normal_lecun_conv(matrix: Matrix, inputs=None, outputs=None) -> Matrix:
    _, fan_out = conv_fans(inputs, outputs)
    return fill_normal(matrix, _lecun_scale(fan_out, uniform=False))


@MatrixInitializer.register_initializer("uniform_lecun_conv")
def uniform_lecun_conv(matrix: Matrix, inputs=None, outputs=None) -> Matrix:
    _, fan_out = conv_fans(inputs, outputs)
    return fill_uniform(matrix, _lecun_scale(fan_out, uniform=True))
