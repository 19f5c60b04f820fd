"""
Result envelope shared by every PyProbability backend.

Distributions, samplers and process simulators each define their own
frozen payload (ComputationParams, SampleParams, RandomWalkParams, ...);
the envelope adds what they all report the same way: metadata, timing,
the backend that ran, and non-fatal warnings.
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable output of one backend call.

    Attributes:
        params: Typed payload of the computation
        info: Request metadata (distribution, operation, process, n, ...)
        timing: Timer breakdown with 'total_seconds', or None
        backend_name: e.g. 'cpu_distribution', 'cpu_sampling', 'cpu_process'
        warnings: Messages for recoverable issues (truncated series,
            unvisited Markov states, small VaR samples)

    Examples:
        >>> r = Result(
        ...     params=ComputationParams(kind='scalar', value=0.1),
        ...     info={'distribution': 'uniform', 'operation': 'pdf'},
        ...     timing=None,
        ...     backend_name='cpu_distribution',
        ... )
        >>> r.has_warning('series')
        False
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def has_warning(self, substring: str) -> bool:
        """True if any recorded warning contains ``substring``."""
        return any(substring in message for message in self.warnings)
