"""
SampleSet: draws plus streaming statistics.

A SampleSet wraps Result[SampleParams]. Sets drawn from the same sampler
in separate batches (e.g. one per spawned RandomSource) combine with
merge(), which pools the running statistics instead of recomputing them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyprobability.core.exceptions import InvalidParameterError
from pyprobability.core.result import Result
from pyprobability.sampling._common import (
    CONVERGENCE_CHECKPOINTS,
    MAX_HISTOGRAM_BINS,
    ConvergencePoint,
    Description,
    Histogram,
    RunningStats,
)


@dataclass(frozen=True)
class SampleParams:
    """
    Parameter payload for a batch of draws.

    Attributes:
        draws: Shape (n,) for scalar samplers, (n, k) for vector samplers
        stats: Running statistics over every draw
        sampler: Registry name of the sampler
        params: Keyword parameters the sampler was called with
        discrete: Whether draws are integer-valued
    """
    draws: NDArray[np.floating[Any]]
    stats: RunningStats
    sampler: str
    params: dict[str, Any]
    discrete: bool


def _relative_error(estimate: float, reference: float | None) -> float | None:
    if reference is None:
        return None
    if reference == 0.0:
        return abs(estimate)
    return abs(estimate - reference) / abs(reference)


@dataclass
class SampleSet:
    """User-facing batch of draws."""
    _result: Result[SampleParams]

    # --- Draws ---

    @property
    def draws(self) -> NDArray[np.floating[Any]]:
        return self._result.params.draws

    @property
    def stats(self) -> RunningStats:
        return self._result.params.stats

    @property
    def sampler(self) -> str:
        return self._result.params.sampler

    @property
    def params(self) -> dict[str, Any]:
        return self._result.params.params

    @property
    def discrete(self) -> bool:
        return self._result.params.discrete

    @property
    def count(self) -> int:
        return self.stats.count

    @property
    def is_multivariate(self) -> bool:
        return self.draws.ndim == 2

    # --- Streaming estimates ---

    @property
    def mean(self) -> Any:
        return self.stats.mean

    @property
    def variance(self) -> Any:
        """Population variance of the draws."""
        return self.stats.variance

    @property
    def std_dev(self) -> Any:
        return self.stats.std_dev

    # --- Metadata ---

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    # --- Combination ---

    def merge(self, other: SampleSet) -> SampleSet:
        """
        Concatenate draws and pool statistics with another batch.

        Raises:
            InvalidParameterError: If the batches come from different
                samplers or have incompatible shapes
        """
        if other.sampler != self.sampler:
            raise InvalidParameterError(
                f"Cannot merge samples from {self.sampler!r} with {other.sampler!r}"
            )
        if self.draws.shape[1:] != other.draws.shape[1:]:
            raise InvalidParameterError(
                f"Cannot merge draws of shape {self.draws.shape[1:]} "
                f"with {other.draws.shape[1:]}"
            )
        params = SampleParams(
            draws=np.concatenate([self.draws, other.draws]),
            stats=self.stats.merge(other.stats),
            sampler=self.sampler,
            params=dict(self.params),
            discrete=self.discrete and other.discrete,
        )
        timing = None
        if self.timing is not None and other.timing is not None:
            timing = {
                key: self.timing.get(key, 0.0) + other.timing.get(key, 0.0)
                for key in set(self.timing) | set(other.timing)
            }
        info = dict(self.info)
        info['n'] = params.stats.count
        info['batches'] = self.info.get('batches', 1) + other.info.get('batches', 1)
        return SampleSet(_result=Result(
            params=params,
            info=info,
            timing=timing,
            backend_name=self.backend_name,
            warnings=self._result.warnings + other._result.warnings,
        ))

    # --- Summaries ---

    def _univariate(self, operation: str) -> NDArray[np.floating[Any]]:
        if self.is_multivariate:
            raise InvalidParameterError(
                f"{operation}() needs univariate draws, got shape {self.draws.shape}"
            )
        if self.count == 0:
            raise InvalidParameterError(f"{operation}() needs at least one draw")
        return self.draws

    def describe(self) -> Description:
        """
        Descriptive statistics of univariate draws.

        Raises:
            InvalidParameterError: For empty or multivariate samples
        """
        x = self._univariate('describe')
        n = len(x)
        mean = float(np.mean(x))
        variance = float(np.mean((x - mean) ** 2))
        std = math.sqrt(variance)
        if std > 0.0:
            z = (x - mean) / std
            skewness = float(np.mean(z ** 3))
            kurtosis = float(np.mean(z ** 4)) - 3.0
        else:
            skewness = 0.0
            kurtosis = 0.0
        ordered = np.sort(x)
        if n % 2 == 0:
            median = float((ordered[n // 2 - 1] + ordered[n // 2]) / 2.0)
        else:
            median = float(ordered[n // 2])
        q1 = float(ordered[n // 4])
        q3 = float(ordered[min(n - 1, (3 * n) // 4)])
        return Description(
            count=n,
            mean=mean,
            median=median,
            variance=variance,
            std_dev=std,
            skewness=skewness,
            kurtosis=kurtosis,
            min=float(ordered[0]),
            max=float(ordered[-1]),
            range=float(ordered[-1] - ordered[0]),
            q1=q1,
            q3=q3,
            iqr=q3 - q1,
        )

    def histogram(self, bins: int | None = None) -> Histogram:
        """
        Frequency table.

        Discrete samples (and bins=None) are tabulated by distinct value.
        Otherwise the range is split into ``bins`` equal-width bins,
        defaulting to min(100, ceil(sqrt(n))); the maximum falls in the
        last bin.

        Raises:
            InvalidParameterError: For empty or multivariate samples, or bins < 1
        """
        x = self._univariate('histogram')
        n = len(x)
        if self.discrete and bins is None:
            values, counts = np.unique(x, return_counts=True)
            return Histogram(
                discrete=True,
                values=values.astype(np.float64),
                counts=counts,
                relative_frequency=counts / n,
            )

        if bins is None:
            bins = min(MAX_HISTOGRAM_BINS, math.ceil(math.sqrt(n)))
        if isinstance(bins, bool) or int(bins) != bins or bins < 1:
            raise InvalidParameterError(f"bins: must be a positive integer, got {bins!r}")
        bins = int(bins)
        return equal_width_histogram(x, bins)

    def convergence(
        self,
        theoretical_mean: float | None = None,
        theoretical_variance: float | None = None,
    ) -> list[ConvergencePoint]:
        """
        Running mean and population variance at the standard checkpoints.

        Checkpoints are 10, 50, 100, 500, ... up to 10**6, keeping those
        not larger than the sample. With theoretical moments supplied, each
        point also carries the relative error (absolute error when the
        reference is zero).
        """
        x = self._univariate('convergence')
        points = []
        for checkpoint in CONVERGENCE_CHECKPOINTS:
            if checkpoint > len(x):
                break
            prefix = x[:checkpoint]
            mean = float(np.mean(prefix))
            variance = float(np.mean((prefix - mean) ** 2))
            points.append(ConvergencePoint(
                n=checkpoint,
                mean=mean,
                variance=variance,
                std_dev=math.sqrt(variance),
                mean_error=_relative_error(mean, theoretical_mean),
                variance_error=_relative_error(variance, theoretical_variance),
            ))
        return points

    def summary(self) -> str:
        """
        Plain-text report.

        Produces output like:
            normal sample (n = 10000)
            mean:     0.0041
            variance: 0.9987
            std_dev:  0.9993
            min:      -3.8120
            max:      3.9035
        """
        lines = [f"{self.sampler} sample (n = {self.count})"]
        if self.count == 0:
            return "\n".join(lines)
        for label in ('mean', 'variance', 'std_dev', 'min', 'max'):
            if label in ('min', 'max'):
                value = getattr(self.stats, label)
            else:
                value = getattr(self, label)
            if isinstance(value, np.ndarray):
                text = np.array2string(value, precision=4, suppress_small=True)
            else:
                text = f"{value:.4f}"
            lines.append(f"{label + ':':<9} {text}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"SampleSet(sampler={self.sampler!r}, n={self.count})"


def equal_width_histogram(x: NDArray[np.floating[Any]], bins: int) -> Histogram:
    """
    Equal-width histogram over [min(x), max(x)].

    Observations are assigned to floor((x - min) / width), clamped to the
    last bin. A constant sample puts everything in the first bin.
    """
    lo = float(np.min(x))
    hi = float(np.max(x))
    width = (hi - lo) / bins
    if width > 0.0:
        index = np.floor((x - lo) / width).astype(np.int64)
        index = np.clip(index, 0, bins - 1)
    else:
        index = np.zeros(len(x), dtype=np.int64)
    counts = np.bincount(index, minlength=bins)
    edges = lo + width * np.arange(bins + 1)
    return Histogram(
        discrete=False,
        values=edges[:-1] + width / 2.0,
        counts=counts,
        relative_frequency=counts / len(x),
        edges=edges,
    )
