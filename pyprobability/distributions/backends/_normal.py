"""
Normal distribution N(mean, std_dev^2).

Probabilities go through the standardized normal_cdf, quantiles through
AS241, so the precision of every operation is that of those kernels.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

from pyprobability.core.exceptions import DomainError
from pyprobability.core.compute.special import normal_cdf, normal_quantile, safe_exp
from pyprobability.distributions._common import Moments, Operation
from pyprobability.distributions.backends._moments import moment_handlers, transformed

if TYPE_CHECKING:
    from pyprobability.distributions.design import DistributionDesign, DistributionSpec

_INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)


def normal_pdf(spec: DistributionSpec, x: float) -> float:
    if math.isinf(x):
        return 0.0
    z = (x - spec.mean) / spec.std_dev
    return _INV_SQRT_2PI / spec.std_dev * math.exp(-0.5 * z * z)


def normal_dist_cdf(spec: DistributionSpec, x: float) -> float:
    if math.isinf(x):
        return 0.0 if x < 0 else 1.0
    return normal_cdf((x - spec.mean) / spec.std_dev)


def moments(spec: DistributionSpec) -> Moments:
    return Moments(
        mean=spec.mean,
        variance=spec.std_dev ** 2,
        std_dev=spec.std_dev,
        skewness=0.0,
        kurtosis=3.0,
    )


def _double_factorial(n: int) -> int:
    return math.prod(range(n, 0, -2))


def raw_moment(spec: DistributionSpec, r: int) -> float:
    """E[X^r] = sum over even j of C(r, j) mean^(r-j) sd^j (j-1)!!."""
    mu, sd = spec.mean, spec.std_dev
    return math.fsum(
        math.comb(r, j) * mu ** (r - j) * sd ** j * _double_factorial(j - 1)
        for j in range(0, r + 1, 2)
    )


def central_moment(spec: DistributionSpec, r: int) -> float:
    if r % 2:
        return 0.0
    return spec.std_dev ** r * _double_factorial(r - 1)


def mgf(spec: DistributionSpec, t: float) -> float:
    return safe_exp(spec.mean * t + 0.5 * (spec.std_dev * t) ** 2)


def _linear_family(
    spec: DistributionSpec, scale: float, shift: float,
) -> tuple[str, dict[str, Any]]:
    return "normal", {"mean": scale * spec.mean + shift, "std_dev": abs(scale) * spec.std_dev}


def _square(design: DistributionDesign) -> dict[str, Any]:
    """X^2 / sd^2 is non-central chi-square with 1 df and noncentrality (mean/sd)^2."""
    mu, sd = design.spec.mean, design.spec.std_dev
    var = sd * sd
    noncentrality = (mu / sd) ** 2
    return transformed(
        "noncentral_chi_square",
        {"df": 1, "noncentrality": noncentrality, "scale": var},
        var * (1.0 + noncentrality),
        2.0 * var * var * (1.0 + 2.0 * noncentrality),
    )


def _exp(design: DistributionDesign) -> dict[str, Any]:
    mu, sd = design.spec.mean, design.spec.std_dev
    var = sd * sd
    return transformed(
        "lognormal",
        {"mu": mu, "sigma": sd},
        safe_exp(mu + 0.5 * var),
        (safe_exp(var) - 1.0) * safe_exp(2.0 * mu + var),
    )


def _abs(design: DistributionDesign) -> dict[str, Any]:
    mu, sd = design.spec.mean, design.spec.std_dev
    z = mu / sd
    mean = (
        sd * math.sqrt(2.0 / math.pi) * math.exp(-0.5 * z * z)
        + mu * (1.0 - 2.0 * normal_cdf(-z))
    )
    return transformed(
        "folded_normal",
        {"mu": mu, "sigma": sd},
        mean,
        max(0.0, mu * mu + sd * sd - mean * mean),
    )


def _pdf(design: DistributionDesign) -> tuple[str, Any]:
    return "scalar", normal_pdf(design.spec, design.real("x"))


def _cdf(design: DistributionDesign) -> tuple[str, Any]:
    return "scalar", normal_dist_cdf(design.spec, design.real("x"))


def _above(design: DistributionDesign) -> tuple[str, Any]:
    return "scalar", 1.0 - normal_dist_cdf(design.spec, design.real("x"))


def _interval(design: DistributionDesign) -> tuple[str, Any]:
    lower, upper = design.bounds()
    spec = design.spec
    return "scalar", normal_dist_cdf(spec, upper) - normal_dist_cdf(spec, lower)


def _between(design: DistributionDesign) -> tuple[str, Any]:
    """P(mean - k*sd <= X <= mean + k*sd) = Phi(k) - Phi(-k)."""
    k = design.real("k")
    if k < 0:
        raise DomainError(f"k: number of standard deviations must be >= 0, got {k}")
    if math.isinf(k):
        return "scalar", 1.0
    return "scalar", normal_cdf(k) - normal_cdf(-k)


def _quantile(design: DistributionDesign) -> tuple[str, Any]:
    p = design.probability("p")
    spec = design.spec
    z = normal_quantile(p)
    if math.isinf(z):
        return "scalar", z
    return "scalar", spec.mean + spec.std_dev * z


def _mean(design: DistributionDesign) -> tuple[str, Any]:
    return "scalar", design.spec.mean


def _variance(design: DistributionDesign) -> tuple[str, Any]:
    return "scalar", design.spec.std_dev ** 2


HANDLERS = {
    Operation.PDF: _pdf,
    Operation.CDF: _cdf,
    Operation.ABOVE: _above,
    Operation.INTERVAL: _interval,
    Operation.BETWEEN: _between,
    Operation.QUANTILE: _quantile,
    Operation.MEAN: _mean,
    Operation.VARIANCE: _variance,
    **moment_handlers(
        raw_moment, mgf, moments,
        central_moment=central_moment,
        linear_family=_linear_family,
        transforms={"square": _square, "exp": _exp, "abs": _abs},
    ),
}
