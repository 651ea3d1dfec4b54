"""
Infrastructure layer: storage variants, masks, NumPy kernels, matrices and
the expression recorder.
"""
