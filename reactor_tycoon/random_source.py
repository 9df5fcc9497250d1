"""
Injectable random number source.

Every stochastic call site in the engine draws from a single object that
implements ``RandomSource``. In production this is a numpy ``Generator``;
tests pass a deterministic stand-in so ticks are reproducible.
"""

from typing import Optional, Protocol

import numpy as np


class RandomSource(Protocol):
    """Anything with a ``random()`` method returning a float in [0, 1)."""

    def random(self) -> float:
        ...


def create_random_source(seed: Optional[int] = None) -> np.random.Generator:
    """
    Create the default random source

    Args:
        seed: Optional seed for reproducible runs

    Returns:
        numpy Generator (PCG64)
    """
    return np.random.default_rng(seed)


def centered(rng: RandomSource, width: float) -> float:
    """Uniform draw in [-width/2, width/2), i.e. ``(random() - 0.5) * width``"""
    return (float(rng.random()) - 0.5) * width
