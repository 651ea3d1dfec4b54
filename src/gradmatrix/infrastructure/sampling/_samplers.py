"""
Binomial, multinomial, gamma and Dirichlet samplers.

Pure math utilities with no computation-graph interaction, consumed by
pooling, dropout and policy-gradient style callers. Every sampler takes an
optional ``numpy.random.Generator`` so results are reproducible under a seed.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from ...domain._errors import ParameterError


def _generator(rng: Optional[np.random.Generator]) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def binomial(
    trials: int, probability: float, rng: Optional[np.random.Generator] = None
) -> int:
    """
    Number of successes in `trials` Bernoulli trials.

    Parameters
    ----------
    trials : int
        Number of trials. Zero yields zero.
    probability : float
        Success probability. Values below zero yield zero successes, values
        above one yield `trials` successes.
    rng : Optional[np.random.Generator]
        Random generator.

    Raises
    ------
    ParameterError
        If `trials` is negative.
    """
    if trials < 0:
        raise ParameterError("trials", trials, "must be non-negative")
    if trials == 0 or probability <= 0.0:
        return 0
    if probability >= 1.0:
        return int(trials)
    return int(_generator(rng).binomial(trials, probability))


def multinomial(
    trials: int,
    probabilities: Sequence[float],
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """
    Distribute `trials` over categories by sequential conditional binomials.

    Category ``k`` receives ``binomial(trials_left, p_k / mass_left)``
    successes, after which its probability mass and successes are removed.
    Categories reached after the mass or the trials are exhausted receive
    zero.

    Parameters
    ----------
    trials : int
        Number of trials.
    probabilities : Sequence[float]
        Category probabilities.
    rng : Optional[np.random.Generator]
        Random generator.

    Returns
    -------
    np.ndarray
        Integer counts, one per category.

    Raises
    ------
    ParameterError
        If `trials` is negative.
    """
    if trials < 0:
        raise ParameterError("trials", trials, "must be non-negative")
    generator = _generator(rng)
    counts = np.zeros(len(probabilities), dtype=np.int64)
    mass_left = 1.0
    trials_left = int(trials)
    for k, p in enumerate(probabilities):
        if mass_left <= 0.0 or trials_left <= 0:
            break
        successes = binomial(trials_left, float(p) / mass_left, generator)
        counts[k] = successes
        mass_left -= float(p)
        trials_left -= successes
    return counts


def gamma(
    shape: float, scale: float = 1.0, rng: Optional[np.random.Generator] = None
) -> float:
    """
    Draw from a Gamma(shape, scale) distribution.

    Raises
    ------
    ParameterError
        If `shape` or `scale` is not positive.
    """
    if shape <= 0.0:
        raise ParameterError("shape", shape, "must be positive")
    if scale <= 0.0:
        raise ParameterError("scale", scale, "must be positive")
    return float(_generator(rng).gamma(shape, scale))


def dirichlet(
    alphas: Sequence[float], rng: Optional[np.random.Generator] = None
) -> np.ndarray:
    """
    Draw a probability vector from a Dirichlet distribution.

    Each component is a Gamma(alpha_k, 1) draw; the vector is normalized to
    sum to one.
    """
    generator = _generator(rng)
    draws = np.array([gamma(float(a), 1.0, generator) for a in alphas])
    return draws / draws.sum()
