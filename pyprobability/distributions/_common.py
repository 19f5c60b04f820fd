"""
Common types for distribution evaluation.

Defines the DistributionKind and Operation enums, the ComputationParams
payload wrapped by Result, and the structured ComputationError returned in
place of an exception by calculate().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyprobability.core.exceptions import (
    DomainError,
    NotPositiveDefiniteError,
    NumericalDivergenceError,
    ProbabilityError,
    SingularMatrixError,
)


class DistributionKind(Enum):
    """Tag of the DistributionSpec union."""
    UNIFORM = "uniform"
    NORMAL = "normal"
    EXPONENTIAL = "exponential"
    GAMMA = "gamma"
    BERNOULLI = "bernoulli"
    BINOMIAL = "binomial"
    GEOMETRIC = "geometric"
    POISSON = "poisson"
    NEGATIVE_BINOMIAL = "negative_binomial"
    MULTIVARIATE_NORMAL = "multivariate_normal"
    MULTINOMIAL = "multinomial"
    DIRICHLET = "dirichlet"
    WISHART = "wishart"

    @property
    def is_univariate(self) -> bool:
        return self in _UNIVARIATE

    @property
    def is_discrete(self) -> bool:
        return self in _DISCRETE


_DISCRETE = frozenset({
    DistributionKind.BERNOULLI,
    DistributionKind.BINOMIAL,
    DistributionKind.GEOMETRIC,
    DistributionKind.POISSON,
    DistributionKind.NEGATIVE_BINOMIAL,
})

_UNIVARIATE = frozenset({
    DistributionKind.UNIFORM,
    DistributionKind.NORMAL,
    DistributionKind.EXPONENTIAL,
    DistributionKind.GAMMA,
}) | _DISCRETE


class Operation(Enum):
    """Operation requested from a distribution."""
    PDF = "pdf"
    PMF = "pmf"
    CDF = "cdf"
    ABOVE = "above"
    INTERVAL = "interval"
    BETWEEN = "between"
    QUANTILE = "quantile"
    MEAN = "mean"
    VARIANCE = "variance"
    MEMORYLESS = "memoryless"
    SPECIAL = "special"
    MAHALANOBIS = "mahalanobis"
    MARGINAL = "marginal"
    CONDITIONAL = "conditional"
    ELLIPSOID = "ellipsoid"
    CONCENTRATION = "concentration"
    MODE = "mode"
    DETERMINANT = "determinant"
    RAW_MOMENT = "raw_moment"
    CENTRAL_MOMENT = "central_moment"
    STANDARDIZED_MOMENT = "standardized_moment"
    MOMENTS = "moments"
    MGF = "mgf"
    TRANSFORM = "transform"


class ErrorKind(Enum):
    """Category of a structured computation error."""
    INVALID_PARAMETER = "invalid_parameter"
    DOMAIN_ERROR = "domain_error"
    NUMERICAL_DIVERGENCE = "numerical_divergence"
    SINGULAR_MATRIX = "singular_matrix"
    NOT_POSITIVE_DEFINITE = "not_positive_definite"


@dataclass(frozen=True)
class ComputationError:
    """
    Expected failure reported as data instead of an exception.

    Attributes:
        kind: Error category
        message: Human-readable explanation including the offending values
        details: Diagnostic attributes copied from the originating exception
    """
    kind: ErrorKind
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: ProbabilityError) -> ComputationError:
        """Map a library exception onto its structured counterpart."""
        if isinstance(exc, DomainError):
            kind = ErrorKind.DOMAIN_ERROR
        elif isinstance(exc, SingularMatrixError):
            kind = ErrorKind.SINGULAR_MATRIX
        elif isinstance(exc, NotPositiveDefiniteError):
            kind = ErrorKind.NOT_POSITIVE_DEFINITE
        elif isinstance(exc, NumericalDivergenceError):
            kind = ErrorKind.NUMERICAL_DIVERGENCE
        else:
            kind = ErrorKind.INVALID_PARAMETER

        details = {
            key: value for key, value in vars(exc).items()
            if not key.startswith('_') and value is not None
        }
        details['exception'] = type(exc).__name__
        return cls(kind=kind, message=str(exc), details=details)


@dataclass(frozen=True)
class Moments:
    """
    Derived moments of a distribution.

    Scalars for univariate distributions. Multivariate distributions carry
    a mean vector (or matrix, for Wishart) and a covariance (or elementwise
    variance) matrix, and leave the higher moments as None.

    kurtosis is the raw (non-excess) kurtosis, e.g. 3 for the normal.
    """
    mean: float | NDArray[np.floating[Any]]
    variance: float | NDArray[np.floating[Any]]
    std_dev: float | NDArray[np.floating[Any]] | None = None
    skewness: float | None = None
    kurtosis: float | None = None


VALID_KINDS = ("scalar", "vector", "matrix", "record", "error")


@dataclass(frozen=True)
class ComputationParams:
    """
    Parameter payload for a distribution computation.

    Attributes
    ----------
    kind : str
        "scalar", "vector", "matrix" or "record" on success, "error" when
        the request failed.
    value : float, ndarray, dict or None
        The computed value. Records are plain dicts of floats and arrays.
        None on error.
    moments : Moments or None
        Moments of the distribution, attached wherever they are defined.
    error : ComputationError or None
        Set only when kind == "error".
    """
    kind: str
    value: Any
    moments: Moments | None = None
    error: ComputationError | None = None


@dataclass(frozen=True)
class CurvePoints:
    """
    Density and distribution function on an evenly spaced grid.

    Attributes:
        x: Grid points, ascending
        pdf: Density at each grid point
        cdf: Cumulative probability at each grid point
        markers: Reference abscissae (mean, bounds, sigma lines) by label
    """
    x: NDArray[np.floating[Any]]
    pdf: NDArray[np.floating[Any]]
    cdf: NDArray[np.floating[Any]]
    markers: dict[str, float] = field(default_factory=dict)
