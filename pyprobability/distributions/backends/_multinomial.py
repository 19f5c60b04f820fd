"""
Multinomial distribution with n trials over k categories.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import NDArray

from pyprobability.core.exceptions import DomainError
from pyprobability.core.compute.special import log_gamma, multinomial_coefficient
from pyprobability.core.compute.tolerances import FACTORIAL_OVERFLOW
from pyprobability.distributions._common import Moments, Operation

if TYPE_CHECKING:
    from pyprobability.distributions.design import DistributionDesign, DistributionSpec


def multinomial_pmf(spec: DistributionSpec, counts: NDArray) -> float:
    """
    n! / prod(x_i!) * prod(p_i ** x_i); 0 when the counts do not sum to n.

    Raises:
        DomainError: If a count is negative or fractional
    """
    if np.any(counts < 0) or np.any(counts != np.floor(counts)):
        raise DomainError(
            f"x: counts must be non-negative integers, got {counts.tolist()}"
        )
    if int(np.sum(counts)) != spec.n:
        return 0.0

    if any(p_i == 0.0 and x_i > 0 for p_i, x_i in zip(spec.p, counts)):
        return 0.0

    if spec.n > FACTORIAL_OVERFLOW:
        log_pmf = log_gamma(spec.n + 1.0)
        for p_i, x_i in zip(spec.p, counts):
            log_pmf -= log_gamma(x_i + 1.0)
            if x_i > 0:
                log_pmf += x_i * math.log(p_i)
        return math.exp(log_pmf)

    prob = 1.0
    for p_i, x_i in zip(spec.p, counts):
        if x_i > 0:
            prob *= p_i ** x_i
    return multinomial_coefficient(spec.n, counts.astype(int).tolist()) * prob


def covariance(spec: DistributionSpec) -> NDArray:
    """Var(X_i) = n p_i (1 - p_i) on the diagonal, -n p_i p_j off it."""
    p = np.asarray(spec.p)
    cov = -spec.n * np.outer(p, p)
    np.fill_diagonal(cov, spec.n * p * (1.0 - p))
    return cov


def moments(spec: DistributionSpec) -> Moments:
    cov = covariance(spec)
    return Moments(
        mean=spec.n * np.asarray(spec.p),
        variance=cov,
        std_dev=np.sqrt(np.diag(cov)),
    )


def _pmf(design: DistributionDesign) -> tuple[str, Any]:
    spec = design.spec
    return "scalar", multinomial_pmf(spec, design.vector("x", spec.dimension))


def _mean(design: DistributionDesign) -> tuple[str, Any]:
    return "vector", design.spec.n * np.asarray(design.spec.p)


def _variance(design: DistributionDesign) -> tuple[str, Any]:
    cov = covariance(design.spec)
    return "record", {"variances": np.diag(cov).copy(), "covariance": cov}


HANDLERS = {
    Operation.PMF: _pmf,
    Operation.PDF: _pmf,
    Operation.MEAN: _mean,
    Operation.VARIANCE: _variance,
}
