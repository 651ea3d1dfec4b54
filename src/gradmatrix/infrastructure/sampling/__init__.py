"""
Random samplers used by pooling, dropout and policy-style callers.
"""

from ._samplers import binomial, multinomial, gamma, dirichlet

__all__ = [
    binomial.__name__,
    multinomial.__name__,
    gamma.__name__,
    dirichlet.__name__,
]
