"""
Repository-root pytest hook: puts the repository root on ``sys.path`` so the
test suites can import the package as ``src.gradmatrix``.
"""
