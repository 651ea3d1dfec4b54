"""
NumPy reference kernels operating on effective ``(rows, columns, depth)``
matrix views.
"""
