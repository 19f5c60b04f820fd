"""
Common types for sampling.

RunningStats is the streaming accumulator shared by SampleSet and the
Monte Carlo simulators; Histogram and ConvergencePoint are the summary
payloads returned by SampleSet.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray


def _unwrap(value: Any) -> Any:
    """0-d arrays come back as plain floats."""
    if isinstance(value, np.ndarray) and value.ndim == 0:
        return float(value)
    return value


@dataclass
class RunningStats:
    """
    Streaming count, mean, sum of squared deviations (M2), min and max.

    Single values are folded in with Welford's update; batches and other
    accumulators are combined with Chan's pooled formula, so statistics of
    a chunked simulation equal those of one pass over all the draws.
    Vector draws are tracked componentwise.

    Attributes:
        count: Number of observations
        mean: Running mean
        m2: Sum of squared deviations from the running mean
        min: Smallest observation so far
        max: Largest observation so far
    """
    count: int = 0
    mean: Any = 0.0
    m2: Any = 0.0
    min: Any = float('inf')
    max: Any = float('-inf')

    @classmethod
    def from_values(cls, values: ArrayLike) -> RunningStats:
        """Accumulator over a batch (first axis indexes observations)."""
        stats = cls()
        stats.extend(values)
        return stats

    def push(self, value: Any) -> None:
        """Fold in one observation (Welford)."""
        x = np.asarray(value, dtype=np.float64)
        self.count += 1
        delta = x - self.mean
        self.mean = _unwrap(self.mean + delta / self.count)
        self.m2 = _unwrap(self.m2 + delta * (x - self.mean))
        self.min = _unwrap(np.minimum(self.min, x))
        self.max = _unwrap(np.maximum(self.max, x))

    def extend(self, values: ArrayLike) -> None:
        """Fold in a batch of observations."""
        batch = np.asarray(values, dtype=np.float64)
        if batch.ndim == 0:
            self.push(batch)
            return
        if batch.shape[0] == 0:
            return
        batch_mean = batch.mean(axis=0)
        other = RunningStats(
            count=int(batch.shape[0]),
            mean=_unwrap(batch_mean),
            m2=_unwrap(np.sum((batch - batch_mean) ** 2, axis=0)),
            min=_unwrap(batch.min(axis=0)),
            max=_unwrap(batch.max(axis=0)),
        )
        merged = self.merge(other)
        self.count, self.mean, self.m2 = merged.count, merged.mean, merged.m2
        self.min, self.max = merged.min, merged.max

    def merge(self, other: RunningStats) -> RunningStats:
        """
        Pooled accumulator over both inputs; neither input is modified.

        mean = mean_a + delta * n_b / n
        M2   = M2_a + M2_b + delta**2 * n_a * n_b / n
        """
        if other.count == 0:
            return RunningStats(self.count, self.mean, self.m2, self.min, self.max)
        if self.count == 0:
            return RunningStats(other.count, other.mean, other.m2, other.min, other.max)
        n = self.count + other.count
        delta = np.asarray(other.mean) - np.asarray(self.mean)
        return RunningStats(
            count=n,
            mean=_unwrap(self.mean + delta * other.count / n),
            m2=_unwrap(self.m2 + other.m2 + delta ** 2 * self.count * other.count / n),
            min=_unwrap(np.minimum(self.min, other.min)),
            max=_unwrap(np.maximum(self.max, other.max)),
        )

    @property
    def variance(self) -> Any:
        """Population variance M2 / n (NaN when empty)."""
        if self.count == 0:
            return float('nan')
        return _unwrap(np.asarray(self.m2) / self.count)

    @property
    def sample_variance(self) -> Any:
        """Unbiased variance M2 / (n - 1) (NaN for fewer than two draws)."""
        if self.count < 2:
            return float('nan')
        return _unwrap(np.asarray(self.m2) / (self.count - 1))

    @property
    def std_dev(self) -> Any:
        return _unwrap(np.sqrt(self.variance))


@dataclass(frozen=True)
class Histogram:
    """
    Frequency table of a sample.

    Discrete samples are tabulated by distinct value (``values`` set,
    ``edges`` None). Continuous samples use equal-width bins (``edges``
    has one more entry than ``counts``; ``values`` holds bin centres).

    Attributes:
        discrete: Whether the table is by distinct value
        values: Distinct values, or bin centres
        counts: Observations per value or bin
        relative_frequency: counts / total
        edges: Bin edges for continuous samples
    """
    discrete: bool
    values: NDArray[np.floating[Any]]
    counts: NDArray[np.integer[Any]]
    relative_frequency: NDArray[np.floating[Any]]
    edges: NDArray[np.floating[Any]] | None = None

    @property
    def bin_width(self) -> float | None:
        if self.edges is None or len(self.edges) < 2:
            return None
        return float(self.edges[1] - self.edges[0])


@dataclass(frozen=True)
class ConvergencePoint:
    """Mean and population variance of the first ``n`` draws."""
    n: int
    mean: float
    variance: float
    std_dev: float
    mean_error: float | None = None
    variance_error: float | None = None


# Prefix lengths at which convergence() reports the running estimates
CONVERGENCE_CHECKPOINTS = (
    10, 50, 100, 500, 1_000, 5_000, 10_000, 50_000, 100_000, 500_000, 1_000_000,
)

# Upper bound on the automatic continuous bin count
MAX_HISTOGRAM_BINS = 100


@dataclass(frozen=True)
class Description:
    """
    Descriptive statistics of a univariate sample.

    variance is the population variance; kurtosis is excess kurtosis.
    q1 and q3 are order statistics at floor(n/4) and floor(3n/4).
    """
    count: int
    mean: float
    median: float
    variance: float
    std_dev: float
    skewness: float
    kurtosis: float
    min: float
    max: float
    range: float
    q1: float
    q3: float
    iqr: float
