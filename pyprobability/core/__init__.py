"""
Core infrastructure for PyProbability.

This module provides shared abstractions, utilities, and numeric kernels
used by all domain-specific submodules (distributions, sampling, processes).

Key components:
    protocols: RandomSource, Backend protocols
    random: NumpyRandomSource (default seedable RandomSource)
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing, tolerances, special functions, linear algebra
"""

from pyprobability.core.protocols import RandomSource, Backend
from pyprobability.core.random import NumpyRandomSource
from pyprobability.core.result import Result
from pyprobability.core.exceptions import (
    ProbabilityError,
    ValidationError,
    InvalidParameterError,
    DimensionError,
    DomainError,
    NumericalError,
    SingularMatrixError,
    NotPositiveDefiniteError,
    NumericalDivergenceError,
    NumericalDivergenceWarning,
)

__all__ = [
    # Protocols
    "RandomSource",
    "Backend",
    "NumpyRandomSource",
    # Result
    "Result",
    # Exceptions
    "ProbabilityError",
    "ValidationError",
    "InvalidParameterError",
    "DimensionError",
    "DomainError",
    "NumericalError",
    "SingularMatrixError",
    "NotPositiveDefiniteError",
    "NumericalDivergenceError",
    "NumericalDivergenceWarning",
]
