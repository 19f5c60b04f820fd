"""
Exceptions raised by PyProbability.

ProbabilityError is the common base. Validation errors describe bad
inputs (parameters, shapes, query arguments); numerical errors describe
matrices and iterations that cannot deliver a result. Attributes carry
the offending quantity so callers can report it without parsing messages.
"""


class ProbabilityError(Exception):
    """Base exception for all PyProbability errors."""
    pass


class ValidationError(ProbabilityError):
    """Caller input was rejected before any computation ran."""
    pass


class InvalidParameterError(ValidationError):
    """
    Distribution or process parameters are outside their support.

    Examples: non-positive standard deviation, probabilities that do not
    sum to one, a covariance matrix that is not symmetric, a Markov
    transition row that does not sum to one.
    """
    pass


class DimensionError(InvalidParameterError):
    """
    Wrong array shape: a mean vector that is not 1-D, a non-square
    covariance or transition matrix, a length that disagrees with the
    dimension of the distribution.
    """
    pass


class DomainError(ValidationError):
    """
    A query argument lies outside the function's domain.

    Examples: a quantile probability outside [0, 1], the gamma function
    evaluated at a pole (non-positive integer).
    """
    pass


class NumericalError(ProbabilityError):
    """Matrix preconditions (invertibility, definiteness) failed."""
    pass


class SingularMatrixError(NumericalError):
    """
    |det| fell below the singularity threshold during inversion, or a
    linear system (stationary distribution) was rank deficient.

    Attributes:
        matrix_name: Which matrix, e.g. "cov" or "transition_matrix"
        determinant: The determinant that failed the check, if computed
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        determinant: float | None = None,
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.determinant = determinant


class NotPositiveDefiniteError(NumericalError):
    """
    Cholesky factorization met a non-positive pivot.

    Attributes:
        matrix_name: Which matrix, e.g. "cov" or "scale"
        min_pivot: The first non-positive diagonal pivot encountered
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        min_pivot: float | None = None,
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.min_pivot = min_pivot


class NumericalDivergenceError(ProbabilityError):
    """
    Iterative approximation failed to converge.

    Raised when a caller explicitly demands convergence from a continued
    fraction, Jacobi sweep or similar iteration that exhausted its budget.

    Attributes:
        iterations: Iterations spent before giving up
        estimate: Best available estimate when the budget ran out
        final_change: Final convergence measure (e.g. |delta - 1|)
        threshold: Tolerance that final_change did not reach
    """

    def __init__(
        self,
        message: str,
        iterations: int,
        estimate: float | None = None,
        final_change: float | None = None,
        threshold: float | None = None,
    ):
        super().__init__(message)
        self.iterations = iterations
        self.estimate = estimate
        self.final_change = final_change
        self.threshold = threshold


class NumericalDivergenceWarning(RuntimeWarning):
    """
    Non-fatal counterpart of NumericalDivergenceError.

    Emitted through ``warnings.warn`` when an iteration hits its budget but
    its last estimate is still returned to the caller.
    """

    def __init__(
        self,
        message: str,
        iterations: int | None = None,
        estimate: float | None = None,
    ):
        super().__init__(message)
        self.iterations = iterations
        self.estimate = estimate
