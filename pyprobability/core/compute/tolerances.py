"""
Iteration budgets and numerical tolerances.

Single source of truth for every convergence criterion and acceptance
threshold used by the special functions, the dense linear algebra kernels,
parameter validation and the simulators. Nothing here is read from the
environment; callers that need different limits pass them explicitly.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class IterationBudget:
    """Maximum iteration count and convergence threshold for a method."""
    max_iterations: int
    tol: float
    name: str
    description: str


# Continued fraction for P(a, x) (modified Lentz, Legendre form)
INCOMPLETE_GAMMA_CF = IterationBudget(
    max_iterations=100,
    tol=1e-10,
    name='incomplete_gamma_cf',
    description='Lentz continued fraction, converged when |delta - 1| < tol',
)

# Power series for P(a, x) with x < a + 1
INCOMPLETE_GAMMA_SERIES = IterationBudget(
    max_iterations=100,
    tol=1e-10,
    name='incomplete_gamma_series',
    description='Series truncated when |term| < tol * |sum|',
)

# Cyclic Jacobi rotations for symmetric eigenproblems
JACOBI_EIGEN = IterationBudget(
    max_iterations=100,
    tol=1e-12,
    name='jacobi_eigen',
    description='Sweeps until off-diagonal Frobenius norm < tol * ||M||',
)

# Eigenvector refinement on the shifted matrix (fixed count, no early exit)
EIGENVECTOR_ITERATIONS = 20

# Gamma quantile root finding on the CDF
GAMMA_QUANTILE = IterationBudget(
    max_iterations=200,
    tol=1e-10,
    name='gamma_quantile',
    description='Safeguarded Newton on P(a, y) - p until |residual| < tol or the bracket closes',
)


@dataclass(frozen=True)
class NumericalTolerances:
    """Acceptance thresholds used when validating inputs."""
    singular_epsilon: float
    probability_sum: float
    simplex_sum: float
    markov_row_sum: float
    symmetry: float


DEFAULT_TOLERANCES = NumericalTolerances(
    singular_epsilon=1e-12,
    probability_sum=1e-3,
    simplex_sum=1e-10,
    markov_row_sum=1e-6,
    symmetry=1e-9,
)

# Cofactor expansion is factorial-time; refuse anything larger.
MAX_COFACTOR_DIMENSION = 10

# Largest n for which n! is finite in float64
FACTORIAL_OVERFLOW = 170

# |z| beyond which the normal CDF is reported as exactly 0 or 1
NORMAL_CDF_CLAMP = 8.0

# Default display precision (decimal places) for rounded output
DEFAULT_PRECISION = 4

# Highest moment order served by the moment operations
MAX_MOMENT_ORDER = 10
