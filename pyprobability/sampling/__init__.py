"""
Sampling module.

Public API:
    draw(sampler, n, source, **params) - n draws from a named sampler
    draw_multivariate_normal(n, source, mean, cov)
    SampleSet                          - draws + RunningStats, merge(),
                                         describe(), histogram(), convergence()
    RunningStats                       - Welford/Chan streaming accumulator
    SAMPLERS                           - registry of single-draw samplers
"""

from pyprobability.sampling.solvers import draw, draw_multivariate_normal
from pyprobability.sampling.solution import SampleSet, SampleParams, equal_width_histogram
from pyprobability.sampling._common import (
    ConvergencePoint,
    Description,
    Histogram,
    RunningStats,
)
from pyprobability.sampling._samplers import (
    SAMPLERS,
    standard_normal,
    standard_normals,
    uniform,
    normal,
    exponential,
    bernoulli,
    binomial,
    poisson,
    geometric,
    gamma,
    beta,
    weibull,
    lognormal,
    chisquare,
    cauchy,
    discrete_uniform,
    custom,
    multivariate_normal,
)

__all__ = [
    "draw",
    "draw_multivariate_normal",
    "SampleSet",
    "SampleParams",
    "RunningStats",
    "Histogram",
    "ConvergencePoint",
    "Description",
    "equal_width_histogram",
    "SAMPLERS",
    "standard_normal",
    "standard_normals",
    "uniform",
    "normal",
    "exponential",
    "bernoulli",
    "binomial",
    "poisson",
    "geometric",
    "gamma",
    "beta",
    "weibull",
    "lognormal",
    "chisquare",
    "cauchy",
    "discrete_uniform",
    "custom",
    "multivariate_normal",
]
