"""
Pure samplers.

Every sampler takes its distribution parameters (with the usual defaults)
plus a keyword-only RandomSource and returns one draw. Parameters are
validated on every call; invalid values raise InvalidParameterError.
Nothing here touches global random state.
"""

from __future__ import annotations

import math
from typing import Any, Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyprobability.core.exceptions import InvalidParameterError, NotPositiveDefiniteError
from pyprobability.core.protocols import RandomSource
from pyprobability.core.validation import (
    check_array,
    check_finite,
    check_positive,
    check_positive_integer,
    check_probability,
    check_scalar,
    check_symmetric,
)
from pyprobability.core.compute.linalg import cholesky


def standard_normal(*, source: RandomSource) -> float:
    """Box-Muller transform of two independent uniforms (cosine branch)."""
    u1 = source.uniform()
    u2 = source.uniform()
    return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)


def standard_normals(n: int, *, source: RandomSource) -> NDArray[np.floating[Any]]:
    """n standard normals, one Box-Muller pair of uniforms per draw."""
    u1 = source.uniforms(n)
    u2 = source.uniforms(n)
    return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)


def uniform(a: float = 0.0, b: float = 1.0, *, source: RandomSource) -> float:
    a = check_scalar(a, "a")
    b = check_scalar(b, "b")
    if a >= b:
        raise InvalidParameterError(f"a must be < b, got a={a}, b={b}")
    return a + source.uniform() * (b - a)


def normal(mean: float = 0.0, std_dev: float = 1.0, *, source: RandomSource) -> float:
    mean = check_scalar(mean, "mean")
    std_dev = check_positive(std_dev, "std_dev")
    return mean + std_dev * standard_normal(source=source)


def exponential(rate: float = 1.0, *, source: RandomSource) -> float:
    rate = check_positive(rate, "rate")
    return -math.log(source.uniform()) / rate


def bernoulli(p: float = 0.5, *, source: RandomSource) -> int:
    p = check_probability(p, "p")
    return 1 if source.uniform() < p else 0


def binomial(n: int = 10, p: float = 0.5, *, source: RandomSource) -> int:
    """Number of successes in n Bernoulli(p) trials."""
    n = check_positive_integer(n, "n", minimum=0)
    p = check_probability(p, "p")
    return int(np.sum(source.uniforms(n) < p))


def poisson(lam: float = 1.0, *, source: RandomSource) -> int:
    """
    Knuth's multiplication method.

    The running product of uniforms is tracked as a sum of -log(U), which
    is the same stopping rule without underflow for large lam.
    """
    lam = check_positive(lam, "lam")
    k = 0
    total = -math.log(source.uniform())
    while total < lam:
        k += 1
        total -= math.log(source.uniform())
    return k


def geometric(p: float = 0.5, first_success: bool = True, *, source: RandomSource) -> int:
    """
    Inverse-CDF geometric draw.

    first_success=True counts trials up to and including the first
    success (support 1, 2, ...); False counts failures before it
    (support 0, 1, ...).
    """
    p = check_probability(p, "p")
    if p == 0.0:
        raise InvalidParameterError("p: must be > 0 for a geometric draw, got 0.0")
    if p == 1.0:
        return 1 if first_success else 0
    ratio = math.log(1.0 - source.uniform()) / math.log(1.0 - p)
    if first_success:
        return max(1, math.ceil(ratio))
    return math.floor(ratio)


def _marsaglia_tsang(shape: float, source: RandomSource) -> float:
    """Gamma(shape, 1) for shape >= 1 by squeeze-and-reject."""
    d = shape - 1.0 / 3.0
    c = 1.0 / math.sqrt(9.0 * d)
    while True:
        z = standard_normal(source=source)
        v = 1.0 + c * z
        if v <= 0.0:
            continue
        v = v * v * v
        u = source.uniform()
        if u < 1.0 - 0.0331 * z ** 4:
            return d * v
        if math.log(u) < 0.5 * z * z + d * (1.0 - v + math.log(v)):
            return d * v


def gamma(shape: float = 1.0, scale: float = 1.0, *, source: RandomSource) -> float:
    """
    Gamma(shape, scale) draw with mean shape * scale.

    This takes a scale, whereas DistributionSpec.gamma(shape, rate) takes a
    rate; the two describe the same law when rate = 1 / scale.

    Integer shape is a sum of shape unit exponentials. Otherwise
    Marsaglia-Tsang, with shape < 1 handled by drawing Gamma(shape + 1)
    and multiplying by U**(1/shape).
    """
    shape = check_positive(shape, "shape")
    scale = check_positive(scale, "scale")
    if shape == math.floor(shape):
        total = -float(np.sum(np.log(source.uniforms(int(shape)))))
        return total * scale
    if shape < 1.0:
        boosted = _marsaglia_tsang(shape + 1.0, source)
        return boosted * source.uniform() ** (1.0 / shape) * scale
    return _marsaglia_tsang(shape, source) * scale


def beta(alpha: float = 2.0, beta: float = 2.0, *, source: RandomSource) -> float:
    """X / (X + Y) with X ~ Gamma(alpha, 1) and Y ~ Gamma(beta, 1)."""
    x = gamma(alpha, 1.0, source=source)
    y = gamma(beta, 1.0, source=source)
    return x / (x + y)


def weibull(shape: float = 1.0, scale: float = 1.0, *, source: RandomSource) -> float:
    shape = check_positive(shape, "shape")
    scale = check_positive(scale, "scale")
    return scale * (-math.log(1.0 - source.uniform())) ** (1.0 / shape)


def lognormal(mu: float = 0.0, sigma: float = 1.0, *, source: RandomSource) -> float:
    mu = check_scalar(mu, "mu")
    sigma = check_positive(sigma, "sigma")
    return math.exp(mu + sigma * standard_normal(source=source))


def chisquare(df: int = 1, *, source: RandomSource) -> float:
    """Sum of df squared standard normals."""
    df = check_positive_integer(df, "df")
    total = 0.0
    for _ in range(df):
        z = standard_normal(source=source)
        total += z * z
    return total


def cauchy(location: float = 0.0, scale: float = 1.0, *, source: RandomSource) -> float:
    location = check_scalar(location, "location")
    scale = check_positive(scale, "scale")
    return location + scale * math.tan(math.pi * (source.uniform() - 0.5))


def _integer(value: Any, name: str) -> int:
    result = check_scalar(value, name)
    if result != math.floor(result):
        raise InvalidParameterError(f"{name}: must be an integer, got {result}")
    return int(result)


def discrete_uniform(low: int = 1, high: int = 6, *, source: RandomSource) -> int:
    """Integer uniformly distributed on {low, ..., high}."""
    low = _integer(low, "low")
    high = _integer(high, "high")
    if low > high:
        raise InvalidParameterError(f"low must be <= high, got low={low}, high={high}")
    return min(high, math.floor(low + source.uniform() * (high - low + 1)))


def custom(fn: Callable[[RandomSource], float], *, source: RandomSource) -> float:
    """Draw from a user callable that consumes the source."""
    if not callable(fn):
        raise InvalidParameterError(f"fn: expected a callable, got {type(fn).__name__}")
    value = check_scalar(fn(source), "fn(source)")
    return value


def multivariate_normal(
    mean: ArrayLike,
    cov: ArrayLike,
    *,
    source: RandomSource,
) -> NDArray[np.floating[Any]]:
    """mean + L z, with L the Cholesky factor of cov and z iid N(0, 1)."""
    mu = check_array(mean, "mean")
    if mu.ndim != 1:
        raise InvalidParameterError(f"mean: expected a 1D vector, got shape {mu.shape}")
    check_finite(mu, "mean")
    L = multivariate_normal_factor(cov, len(mu))
    return _mvn_from_factor(mu, L, source)


def multivariate_normal_factor(cov: ArrayLike, dimension: int) -> NDArray[np.floating[Any]]:
    """Validated Cholesky factor of a dimension x dimension covariance."""
    sigma = check_array(cov, "cov")
    if sigma.shape != (dimension, dimension):
        raise InvalidParameterError(
            f"cov: expected shape ({dimension}, {dimension}), got {sigma.shape}"
        )
    check_finite(sigma, "cov")
    check_symmetric(sigma, "cov")
    try:
        return cholesky(sigma, name="cov")
    except NotPositiveDefiniteError as e:
        raise InvalidParameterError(f"cov: must be positive definite ({e})") from e


def _mvn_from_factor(
    mu: NDArray[np.floating[Any]],
    L: NDArray[np.floating[Any]],
    source: RandomSource,
) -> NDArray[np.floating[Any]]:
    z = np.array([standard_normal(source=source) for _ in range(len(mu))])
    return mu + L @ z


SAMPLERS: dict[str, Callable[..., Any]] = {
    'uniform': uniform,
    'normal': normal,
    'exponential': exponential,
    'bernoulli': bernoulli,
    'binomial': binomial,
    'poisson': poisson,
    'geometric': geometric,
    'gamma': gamma,
    'beta': beta,
    'weibull': weibull,
    'lognormal': lognormal,
    'chisquare': chisquare,
    'cauchy': cauchy,
    'discrete_uniform': discrete_uniform,
    'custom': custom,
    'multivariate_normal': multivariate_normal,
}

# Samplers whose draws are integers
DISCRETE_SAMPLERS = frozenset({
    'bernoulli', 'binomial', 'poisson', 'geometric', 'discrete_uniform',
})
