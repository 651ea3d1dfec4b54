"""
Domain layer: matrix, mask and recorder protocols, enums and errors.

Modules in this package depend on nothing but the standard library and
NumPy typing; concrete behavior lives in ``gradmatrix.infrastructure``.
"""
