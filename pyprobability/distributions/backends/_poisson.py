"""
Poisson distribution with rate lambda.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from scipy.special import gammaln, pdtr, xlogy

from pyprobability.core.compute.special import safe_exp
from pyprobability.distributions._common import Moments
from pyprobability.distributions.backends._discrete import discrete_handlers
from pyprobability.distributions.backends._moments import moment_handlers, raw_from_factorial

if TYPE_CHECKING:
    from pyprobability.distributions.design import DistributionSpec


def poisson_pmf(spec: DistributionSpec, k: int) -> float:
    if k < 0:
        return 0.0
    rate = spec.rate
    return math.exp(float(xlogy(k, rate) - rate - gammaln(k + 1)))


def poisson_cdf(spec: DistributionSpec, x: float) -> float:
    if x < 0:
        return 0.0
    if x == math.inf:
        return 1.0
    return float(pdtr(math.floor(x), spec.rate))


def moments(spec: DistributionSpec) -> Moments:
    rate = spec.rate
    return Moments(
        mean=rate,
        variance=rate,
        std_dev=math.sqrt(rate),
        skewness=1.0 / math.sqrt(rate),
        kurtosis=3.0 + 1.0 / rate,
    )


def raw_moment(spec: DistributionSpec, r: int) -> float:
    """Touchard polynomial: every factorial moment is lambda^k."""
    rate = spec.rate
    return raw_from_factorial(lambda k: rate ** k, r)


def mgf(spec: DistributionSpec, t: float) -> float:
    if safe_exp(t) == math.inf:
        return math.inf
    return safe_exp(spec.rate * math.expm1(t))


HANDLERS = {
    **discrete_handlers(poisson_pmf, poisson_cdf, moments),
    **moment_handlers(raw_moment, mgf, moments),
}
