"""
Default RandomSource implementation backed by numpy.random.Generator.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyprobability.core.exceptions import InvalidParameterError


class NumpyRandomSource:
    """
    Seedable uniform stream on a PCG64 generator.

    Args:
        seed: Anything np.random.SeedSequence accepts (int, sequence of
            ints, or None for fresh OS entropy), or an existing
            SeedSequence.

    Examples:
        >>> src = NumpyRandomSource(42)
        >>> a, b = src.spawn(2)   # independent streams for two workers
    """

    def __init__(self, seed: int | np.random.SeedSequence | None = None):
        if isinstance(seed, np.random.SeedSequence):
            self._seed_seq = seed
        else:
            self._seed_seq = np.random.SeedSequence(seed)
        self._rng = np.random.Generator(np.random.PCG64(self._seed_seq))

    @property
    def seed_sequence(self) -> np.random.SeedSequence:
        return self._seed_seq

    def uniform(self) -> float:
        """One draw from (0, 1); exact zeros are redrawn."""
        u = self._rng.random()
        while u == 0.0:
            u = self._rng.random()
        return float(u)

    def uniforms(self, n: int) -> NDArray[np.floating[Any]]:
        """n draws from (0, 1)."""
        if n < 0:
            raise InvalidParameterError(f"n: must be >= 0, got {n}")
        u = self._rng.random(n)
        zeros = u == 0.0
        while np.any(zeros):
            u[zeros] = self._rng.random(int(np.sum(zeros)))
            zeros = u == 0.0
        return u

    def spawn(self, n: int) -> list['NumpyRandomSource']:
        """n independent child sources derived via SeedSequence.spawn."""
        if n < 0:
            raise InvalidParameterError(f"n: must be >= 0, got {n}")
        return [NumpyRandomSource(child) for child in self._seed_seq.spawn(n)]

    def __repr__(self) -> str:
        return f"NumpyRandomSource(entropy={self._seed_seq.entropy})"
