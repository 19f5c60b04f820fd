"""
Dirichlet distribution on the probability simplex.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import NDArray

from pyprobability.core.compute.special import beta_function, log_gamma, safe_exp
from pyprobability.core.compute.tolerances import DEFAULT_TOLERANCES
from pyprobability.distributions._common import Moments, Operation

if TYPE_CHECKING:
    from pyprobability.distributions.design import DistributionDesign, DistributionSpec


def _log_beta(alpha: NDArray) -> float:
    b = beta_function(alpha.tolist())
    if 0.0 < b < math.inf:
        return math.log(b)
    return sum(log_gamma(a) for a in alpha) - log_gamma(float(np.sum(alpha)))


def dirichlet_pdf(spec: DistributionSpec, x: NDArray) -> float:
    """prod x_i^(alpha_i - 1) / B(alpha) on the simplex, 0 off it."""
    alpha = np.asarray(spec.alpha)
    if np.any(x < 0) or abs(float(np.sum(x)) - 1.0) > DEFAULT_TOLERANCES.simplex_sum:
        return 0.0

    log_density = -_log_beta(alpha)
    for a_i, x_i in zip(alpha, x):
        if x_i == 0.0:
            if a_i < 1.0:
                return math.inf
            if a_i > 1.0:
                return 0.0
            continue
        log_density += (a_i - 1.0) * math.log(x_i)
    return safe_exp(log_density)


def covariance(spec: DistributionSpec) -> NDArray:
    alpha = np.asarray(spec.alpha)
    a0 = float(np.sum(alpha))
    denom = a0 * a0 * (a0 + 1.0)
    cov = -np.outer(alpha, alpha) / denom
    np.fill_diagonal(cov, alpha * (a0 - alpha) / denom)
    return cov


def concentration(spec: DistributionSpec) -> dict[str, Any]:
    alpha = np.asarray(spec.alpha)
    a0 = float(np.sum(alpha))
    if a0 > 1.0:
        interpretation = "concentrated"
    elif a0 < 1.0:
        interpretation = "sparse"
    else:
        interpretation = "uniform"
    return {
        "alpha0": a0,
        "normalized_alpha": alpha / a0,
        "interpretation": interpretation,
    }


def moments(spec: DistributionSpec) -> Moments:
    alpha = np.asarray(spec.alpha)
    cov = covariance(spec)
    return Moments(
        mean=alpha / float(np.sum(alpha)),
        variance=cov,
        std_dev=np.sqrt(np.diag(cov)),
    )


def _pdf(design: DistributionDesign) -> tuple[str, Any]:
    spec = design.spec
    return "scalar", dirichlet_pdf(spec, design.vector("x", spec.dimension))


def _mean(design: DistributionDesign) -> tuple[str, Any]:
    alpha = np.asarray(design.spec.alpha)
    return "vector", alpha / float(np.sum(alpha))


def _variance(design: DistributionDesign) -> tuple[str, Any]:
    cov = covariance(design.spec)
    return "record", {"variances": np.diag(cov).copy(), "covariance": cov}


def _concentration(design: DistributionDesign) -> tuple[str, Any]:
    return "record", concentration(design.spec)


HANDLERS = {
    Operation.PDF: _pdf,
    Operation.MEAN: _mean,
    Operation.VARIANCE: _variance,
    Operation.CONCENTRATION: _concentration,
}
