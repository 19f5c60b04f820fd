"""
Structural interfaces.

RandomSource is the only way randomness enters the library; Backend is
the shape every cpu_* backend has. Both are Protocols, so a seeded test
double or an alternative generator only needs the right methods.
"""

from __future__ import annotations

from typing import Protocol, TypeVar, Any, runtime_checkable, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from pyprobability.core.result import Result

P = TypeVar('P', covariant=True)  # Parameter payload type
D = TypeVar('D', contravariant=True)  # Design type


@runtime_checkable
class RandomSource(Protocol):
    """
    Uniform-variate stream consumed by every sampler and simulator.

    A RandomSource is constructed once by the caller and passed by reference
    into each sampling call. Two sources built from the same seed produce
    identical streams, which is what makes simulations reproducible.
    """

    def uniform(self) -> float:
        """One draw from the open interval (0, 1)."""
        ...

    def uniforms(self, n: int) -> NDArray[np.floating[Any]]:
        """n independent draws from (0, 1) as a 1D array."""
        ...

    def spawn(self, n: int) -> list['RandomSource']:
        """
        n statistically independent child streams.

        Children never overlap with each other or with the parent, so they
        can drive concurrent simulations whose results are later merged.
        """
        ...


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    Turns a validated design into Result[P].

    Each backend takes a domain-specific design (a validated distribution
    spec plus request, a simulation configuration) and produces a
    domain-specific parameter payload wrapped in Result.

    Backends are stateless; all configuration arrives in the design.

    Type Parameters:
        D: The design type this backend accepts
        P: The parameter payload type this backend produces
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{device}_{domain}'
        Examples: 'cpu_distribution', 'cpu_process'
        """
        ...

    def solve(self, design: D) -> 'Result[P]':
        """
        Execute the computation.

        Raises:
            ValidationError: If the request is invalid for this backend
            NumericalError: If numerical preconditions fail (singularity, etc.)
        """
        ...
