"""
Distribution evaluation module.

Public API:
    DistributionSpec.uniform(a, b) ... .wishart(scale, df),
    .bernoulli(p), .binomial(n, p), .geometric(p), .poisson(rate),
    .negative_binomial(successes, p)
                                    - validated distribution specifications
    calculate(spec, operation, ...) - evaluate one operation
    calculate_uniform(a, b, op, ...) and one helper per distribution
    curve(spec, n_points)           - PDF/CDF grid for plotting

Univariate distributions also answer raw_moment, central_moment,
standardized_moment, moments, mgf and transform.
"""

from pyprobability.distributions.solvers import (
    calculate,
    calculate_uniform,
    calculate_normal,
    calculate_exponential,
    calculate_gamma,
    calculate_bernoulli,
    calculate_binomial,
    calculate_geometric,
    calculate_poisson,
    calculate_negative_binomial,
    calculate_multivariate_normal,
    calculate_multinomial,
    calculate_dirichlet,
    calculate_wishart,
    curve,
)
from pyprobability.distributions.design import DistributionSpec, DistributionDesign
from pyprobability.distributions._common import (
    ComputationError,
    ComputationParams,
    CurvePoints,
    DistributionKind,
    ErrorKind,
    Moments,
    Operation,
)
from pyprobability.distributions.solution import DistributionSolution

__all__ = [
    "calculate",
    "calculate_uniform",
    "calculate_normal",
    "calculate_exponential",
    "calculate_gamma",
    "calculate_bernoulli",
    "calculate_binomial",
    "calculate_geometric",
    "calculate_poisson",
    "calculate_negative_binomial",
    "calculate_multivariate_normal",
    "calculate_multinomial",
    "calculate_dirichlet",
    "calculate_wishart",
    "curve",
    "DistributionSpec",
    "DistributionDesign",
    "ComputationError",
    "ComputationParams",
    "CurvePoints",
    "DistributionKind",
    "ErrorKind",
    "Moments",
    "Operation",
    "DistributionSolution",
]
