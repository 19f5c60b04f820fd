"""
PyProbability: probability distributions, sampling and stochastic simulation.

Closed-form and numerically approximated distribution computations,
seedable samplers, and stochastic process simulators, all returning
immutable Result-backed solution objects.

Submodules:
    distributions: Univariate and multivariate distribution evaluation
    sampling: Samplers, SampleSet and streaming statistics
    processes: Random walks, Markov chains, diffusions, Monte Carlo estimators
    core: Special functions, small dense linear algebra, RandomSource
"""

__version__ = "0.1.0"

from pyprobability import distributions
from pyprobability import sampling
from pyprobability import processes
from pyprobability.core import NumpyRandomSource, RandomSource

__all__ = [
    "__version__",
    "distributions",
    "sampling",
    "processes",
    "NumpyRandomSource",
    "RandomSource",
]
