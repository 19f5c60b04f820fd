"""
Solver dispatch for distribution evaluation.

calculate() is the single entry point; calculate_uniform() and friends
build the DistributionSpec from plain parameters first. None of them raise for
expected failures: invalid parameters, out-of-domain queries and
numerical precondition failures come back as a DistributionSolution with
ok == False and a structured error.

curve() produces plotting grids for the univariate distributions.
"""

from __future__ import annotations

from typing import Any, Callable

import numpy as np
from numpy.typing import ArrayLike

from pyprobability.core.exceptions import InvalidParameterError, ProbabilityError
from pyprobability.core.result import Result
from pyprobability.core.compute.tolerances import DEFAULT_PRECISION
from pyprobability.distributions._common import (
    ComputationError,
    ComputationParams,
    CurvePoints,
    DistributionKind,
    Operation,
)
from pyprobability.distributions.design import DistributionDesign, DistributionSpec
from pyprobability.distributions.solution import DistributionSolution
from pyprobability.distributions.backends.cpu import CPUDistributionBackend
from pyprobability.distributions.backends import (
    _exponential,
    _gamma,
    _normal,
    _uniform,
)


def _get_backend(backend: str = 'cpu') -> CPUDistributionBackend:
    if backend in ('cpu', 'auto'):
        return CPUDistributionBackend()
    raise InvalidParameterError(f"Unknown backend: {backend!r}. Use 'cpu'.")


def _error_solution(
    exc: ProbabilityError,
    spec: DistributionSpec | None,
    operation: Operation | str,
    precision: int,
) -> DistributionSolution:
    op_name = operation.value if isinstance(operation, Operation) else str(operation)
    info: dict[str, Any] = {'operation': op_name, 'precision': precision}
    if isinstance(spec, DistributionSpec):
        info['distribution'] = spec.kind.value
    result = Result(
        params=ComputationParams(
            kind="error",
            value=None,
            error=ComputationError.from_exception(exc),
        ),
        info=info,
        timing=None,
        backend_name=CPUDistributionBackend().name,
    )
    return DistributionSolution(_result=result, _design=None)


def _solve(
    build_spec: Callable[[], DistributionSpec],
    operation: Operation | str,
    precision: int,
    operands: dict[str, Any],
) -> DistributionSolution:
    spec = None
    try:
        spec = build_spec()
        design = DistributionDesign.for_request(
            spec, operation, precision=precision, **operands,
        )
        result = _get_backend().solve(design)
    except ProbabilityError as e:
        return _error_solution(e, spec, operation, precision)
    return DistributionSolution(_result=result, _design=design)


def calculate(
    spec: DistributionSpec,
    operation: Operation | str,
    *,
    x: Any = None,
    lower: float | None = None,
    upper: float | None = None,
    p: float | None = None,
    k: float | None = None,
    s: float | None = None,
    t: float | None = None,
    indices: Any = None,
    given_indices: Any = None,
    given_values: ArrayLike | None = None,
    confidence: float | None = None,
    order: int | None = None,
    transform: str | None = None,
    scale: float | None = None,
    shift: float | None = None,
    count: int | None = None,
    precision: int = DEFAULT_PRECISION,
) -> DistributionSolution:
    """
    Evaluate one operation on a distribution.

    Parameters
    ----------
    spec : DistributionSpec
        Built with DistributionSpec.uniform(...), .normal(...), etc.
    operation : Operation or str
        'pdf', 'pmf', 'cdf', 'above', 'interval', 'between', 'quantile',
        'mean', 'variance', 'memoryless', 'special', 'mahalanobis',
        'marginal', 'conditional', 'ellipsoid', 'concentration', 'mode',
        'determinant', 'raw_moment', 'central_moment', 'standardized_moment',
        'moments', 'mgf' or 'transform'. Which ones apply depends on the
        distribution.
    x : float or array-like
        Evaluation point (scalar for univariate, vector for multivariate,
        counts for multinomial).
    lower, upper : float
        Bounds for 'interval'.
    p : float
        Probability for 'quantile'.
    k : float
        Number of standard deviations for the normal 'between'.
    s, t : float
        Elapsed and additional time for the exponential 'memoryless';
        t is also the argument of 'mgf' (and optionally of 'moments').
    indices : sequence of int
        Components kept by 'marginal'.
    given_indices, given_values :
        Conditioning components and their observed values for 'conditional'.
    confidence : float
        Level in (0, 1) for 'ellipsoid' (default 0.95).
    order : int
        Moment order r in [1, 10] for the single-moment operations, and
        the highest order for 'moments' (default 4).
    transform : str
        'linear' (every univariate distribution), plus 'square', 'exp',
        'abs' (normal), 'square', 'exp', 'min' (exponential) and
        'square', 'log', 'min', 'max' (uniform).
    scale, shift : float
        Y = scale * X + shift for the linear transform (defaults 1 and 0).
    count : int
        Number of independent copies for 'min' and 'max' (default 2).
    precision : int
        Decimal places used by solution.rounded() and summary(). Does not
        affect the computation.

    Returns
    -------
    DistributionSolution
        Check ``ok``; on failure ``error.kind`` is one of invalid_parameter,
        domain_error, numerical_divergence, singular_matrix or
        not_positive_definite.
    """
    operands = dict(
        x=x, lower=lower, upper=upper, p=p, k=k, s=s, t=t,
        indices=indices, given_indices=given_indices,
        given_values=given_values, confidence=confidence,
        order=order, transform=transform, scale=scale, shift=shift, count=count,
    )
    return _solve(lambda: spec, operation, precision, operands)


def calculate_uniform(
    a: float,
    b: float,
    operation: Operation | str,
    *,
    precision: int = DEFAULT_PRECISION,
    **operands: Any,
) -> DistributionSolution:
    """Uniform(a, b). Operands as for calculate()."""
    return _solve(lambda: DistributionSpec.uniform(a, b), operation, precision, operands)


def calculate_normal(
    mean: float,
    std_dev: float,
    operation: Operation | str,
    *,
    precision: int = DEFAULT_PRECISION,
    **operands: Any,
) -> DistributionSolution:
    """Normal(mean, std_dev). Operands as for calculate()."""
    return _solve(
        lambda: DistributionSpec.normal(mean, std_dev), operation, precision, operands,
    )


def calculate_exponential(
    rate: float,
    operation: Operation | str,
    *,
    precision: int = DEFAULT_PRECISION,
    **operands: Any,
) -> DistributionSolution:
    """Exponential(rate). Operands as for calculate()."""
    return _solve(lambda: DistributionSpec.exponential(rate), operation, precision, operands)


def calculate_gamma(
    shape: float,
    rate: float,
    operation: Operation | str,
    *,
    precision: int = DEFAULT_PRECISION,
    **operands: Any,
) -> DistributionSolution:
    """Gamma(shape, rate). Operands as for calculate()."""
    return _solve(
        lambda: DistributionSpec.gamma(shape, rate), operation, precision, operands,
    )


def calculate_bernoulli(
    p: float,
    operation: Operation | str,
    /,
    *,
    precision: int = DEFAULT_PRECISION,
    **operands: Any,
) -> DistributionSolution:
    """Bernoulli(p). Operands as for calculate()."""
    return _solve(lambda: DistributionSpec.bernoulli(p), operation, precision, operands)


def calculate_binomial(
    n: int,
    p: float,
    operation: Operation | str,
    /,
    *,
    precision: int = DEFAULT_PRECISION,
    **operands: Any,
) -> DistributionSolution:
    """
    Binomial(n, p). Operands as for calculate(); n and p are positional-only
    so that an operand named p still reaches the operation.

    Examples:
        >>> calculate_binomial(10, 0.5, 'pmf', x=5).rounded(8)
        0.24609375
        >>> calculate_binomial(10, 0.5, 'interval', lower=4, upper=6).rounded(5)
        0.65625
    """
    return _solve(lambda: DistributionSpec.binomial(n, p), operation, precision, operands)


def calculate_geometric(
    p: float,
    operation: Operation | str,
    /,
    *,
    first_success: bool = True,
    precision: int = DEFAULT_PRECISION,
    **operands: Any,
) -> DistributionSolution:
    """Geometric(p), counting trials (first_success=True) or failures."""
    return _solve(
        lambda: DistributionSpec.geometric(p, first_success),
        operation, precision, operands,
    )


def calculate_poisson(
    rate: float,
    operation: Operation | str,
    *,
    precision: int = DEFAULT_PRECISION,
    **operands: Any,
) -> DistributionSolution:
    """Poisson(rate). Operands as for calculate()."""
    return _solve(lambda: DistributionSpec.poisson(rate), operation, precision, operands)


def calculate_negative_binomial(
    successes: int,
    p: float,
    operation: Operation | str,
    /,
    *,
    precision: int = DEFAULT_PRECISION,
    **operands: Any,
) -> DistributionSolution:
    """Trials needed for ``successes`` successes with probability p each."""
    return _solve(
        lambda: DistributionSpec.negative_binomial(successes, p),
        operation, precision, operands,
    )


def calculate_multivariate_normal(
    mean: ArrayLike,
    cov: ArrayLike,
    operation: Operation | str,
    *,
    precision: int = DEFAULT_PRECISION,
    **operands: Any,
) -> DistributionSolution:
    """MultivariateNormal(mean, cov). Operands as for calculate()."""
    return _solve(
        lambda: DistributionSpec.multivariate_normal(mean, cov),
        operation, precision, operands,
    )


def calculate_multinomial(
    n: int,
    p: ArrayLike,
    operation: Operation | str,
    *,
    precision: int = DEFAULT_PRECISION,
    **operands: Any,
) -> DistributionSolution:
    """Multinomial(n, p). Counts go in ``x``."""
    return _solve(lambda: DistributionSpec.multinomial(n, p), operation, precision, operands)


def calculate_dirichlet(
    alpha: ArrayLike,
    operation: Operation | str,
    *,
    precision: int = DEFAULT_PRECISION,
    **operands: Any,
) -> DistributionSolution:
    """Dirichlet(alpha). Operands as for calculate()."""
    return _solve(lambda: DistributionSpec.dirichlet(alpha), operation, precision, operands)


def calculate_wishart(
    scale: ArrayLike,
    df: float,
    operation: Operation | str,
    *,
    precision: int = DEFAULT_PRECISION,
    **operands: Any,
) -> DistributionSolution:
    """Wishart(scale, df). Operands as for calculate()."""
    return _solve(lambda: DistributionSpec.wishart(scale, df), operation, precision, operands)


def curve(spec: DistributionSpec, n_points: int = 200) -> CurvePoints:
    """
    PDF and CDF of a univariate distribution on an evenly spaced grid.

    Ranges:
        uniform      [a - 0.2 (b - a), b + 0.2 (b - a)]
        normal       mean +/- 4 std_dev
        exponential  [0, 5 / rate]
        gamma        [0, max(5 mean, 10)], or [0, max(10 mean, 20)] if shape < 1

    Raises:
        InvalidParameterError: For multivariate specs or n_points < 2
    """
    if (
        not isinstance(spec, DistributionSpec)
        or not spec.kind.is_univariate
        or spec.kind.is_discrete
    ):
        raise InvalidParameterError(
            f"curve() supports continuous univariate distributions only, got {spec!r}"
        )
    if isinstance(n_points, bool) or int(n_points) != n_points or n_points < 2:
        raise InvalidParameterError(f"n_points: must be an integer >= 2, got {n_points!r}")

    kind = spec.kind
    if kind is DistributionKind.UNIFORM:
        buffer = 0.2 * (spec.b - spec.a)
        lo, hi = spec.a - buffer, spec.b + buffer
        pdf, cdf = _uniform.uniform_pdf, _uniform.uniform_cdf
        markers = {'a': spec.a, 'b': spec.b, 'mean': (spec.a + spec.b) / 2.0}
    elif kind is DistributionKind.NORMAL:
        mu, sd = spec.mean, spec.std_dev
        lo, hi = mu - 4.0 * sd, mu + 4.0 * sd
        pdf, cdf = _normal.normal_pdf, _normal.normal_dist_cdf
        markers = {'mean': mu}
        for j in (1, 2, 3):
            markers[f'-{j}sd'] = mu - j * sd
            markers[f'+{j}sd'] = mu + j * sd
    elif kind is DistributionKind.EXPONENTIAL:
        mean = 1.0 / spec.rate
        lo, hi = 0.0, 5.0 * mean
        pdf, cdf = _exponential.exponential_pdf, _exponential.exponential_cdf
        markers = {'mean': mean, '2*mean': 2.0 * mean, '3*mean': 3.0 * mean}
    else:
        mean = spec.shape / spec.rate
        if spec.shape < 1.0:
            hi = max(10.0 * mean, 20.0)
        else:
            hi = max(5.0 * mean, 10.0)
        lo = 0.0
        pdf, cdf = _gamma.gamma_pdf, _gamma.gamma_cdf
        markers = {'mean': mean}
        if spec.shape >= 1.0:
            markers['mode'] = (spec.shape - 1.0) / spec.rate

    grid = np.linspace(lo, hi, int(n_points))
    return CurvePoints(
        x=grid,
        pdf=np.array([pdf(spec, float(v)) for v in grid]),
        cdf=np.array([cdf(spec, float(v)) for v in grid]),
        markers=markers,
    )
