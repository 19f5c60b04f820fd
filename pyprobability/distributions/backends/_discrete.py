"""
Operations shared by the integer-valued distributions.

Each discrete backend supplies pmf(spec, k) for integer k on its support
and cdf(spec, k) for real k (P(X <= floor(k))). The pmf is zero off the
integers; interval probabilities are inclusive at both ends.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Callable

from pyprobability.distributions._common import Moments, Operation

if TYPE_CHECKING:
    from pyprobability.distributions.design import DistributionDesign, DistributionSpec

Pmf = Callable[['DistributionSpec', int], float]
Cdf = Callable[['DistributionSpec', float], float]


def falling(n: float, k: int) -> float:
    """n (n - 1) ... (n - k + 1)."""
    return math.prod(n - i for i in range(k))


def rising(n: float, k: int) -> float:
    """n (n + 1) ... (n + k - 1)."""
    return math.prod(n + i for i in range(k))


def probability_at(pmf: Pmf, spec: DistributionSpec, x: float) -> float:
    if not math.isfinite(x) or x != math.floor(x):
        return 0.0
    return pmf(spec, int(x))


def interval_probability(cdf: Cdf, spec: DistributionSpec, lower: float, upper: float) -> float:
    """P(lower <= X <= upper)."""
    if lower == math.inf:
        return 0.0
    below = 0.0 if lower == -math.inf else cdf(spec, math.ceil(lower) - 1)
    return max(0.0, cdf(spec, upper) - below)


def discrete_handlers(
    pmf: Pmf,
    cdf: Cdf,
    moments: Callable[[DistributionSpec], Moments],
) -> dict[Operation, Callable[[DistributionDesign], tuple[str, Any]]]:
    def _pmf(design: DistributionDesign) -> tuple[str, Any]:
        return "scalar", probability_at(pmf, design.spec, design.real("x"))

    def _cdf(design: DistributionDesign) -> tuple[str, Any]:
        return "scalar", cdf(design.spec, design.real("x"))

    def _above(design: DistributionDesign) -> tuple[str, Any]:
        return "scalar", 1.0 - cdf(design.spec, design.real("x"))

    def _interval(design: DistributionDesign) -> tuple[str, Any]:
        lower, upper = design.bounds()
        return "scalar", interval_probability(cdf, design.spec, lower, upper)

    def _mean(design: DistributionDesign) -> tuple[str, Any]:
        return "scalar", moments(design.spec).mean

    def _variance(design: DistributionDesign) -> tuple[str, Any]:
        return "scalar", moments(design.spec).variance

    return {
        Operation.PDF: _pmf,
        Operation.PMF: _pmf,
        Operation.CDF: _cdf,
        Operation.ABOVE: _above,
        Operation.INTERVAL: _interval,
        Operation.MEAN: _mean,
        Operation.VARIANCE: _variance,
    }
