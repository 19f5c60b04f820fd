"""
Shared compute infrastructure for PyProbability.

IMPORTANT: This is NOT where domain-specific backends live. Those go in
{domain}/backends/. This module contains shared NUMERIC infrastructure.

Submodules:
    timing: Execution timing utilities
    tolerances: Iteration budgets and numerical thresholds
    special: Gamma, incomplete gamma, normal CDF/quantile, chi-square quantile
    linalg: Small dense linear algebra kernels
"""

from pyprobability.core.compute.timing import Timer, timed

__all__ = [
    # Timing
    "Timer",
    "timed",
]
