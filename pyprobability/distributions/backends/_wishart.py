"""
Wishart distribution W_p(V, n).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import NDArray

from pyprobability.core.exceptions import InvalidParameterError
from pyprobability.core.compute.linalg import determinant
from pyprobability.distributions._common import Moments, Operation

if TYPE_CHECKING:
    from pyprobability.distributions.design import DistributionDesign, DistributionSpec


def elementwise_variance(spec: DistributionSpec) -> NDArray:
    """Var(W_ij) = n (V_ij^2 + V_ii V_jj); the diagonal reduces to 2 n V_ii^2."""
    V = np.asarray(spec.scale)
    d = np.diag(V)
    return spec.df * (V * V + np.outer(d, d))


def expected_determinant(spec: DistributionSpec) -> float:
    """E|W| = |V| * prod_{i=0}^{p-1} (n - i)."""
    factor = 1.0
    for i in range(spec.dimension):
        factor *= spec.df - i
    return determinant(spec.scale) * factor


def mode(spec: DistributionSpec) -> NDArray:
    p = spec.dimension
    if not spec.df > p + 1:
        raise InvalidParameterError(
            f"mode does not exist: requires df > dimension + 1 ({p + 1}), got df={spec.df}"
        )
    return (spec.df - p - 1.0) * np.asarray(spec.scale)


def moments(spec: DistributionSpec) -> Moments:
    var = elementwise_variance(spec)
    return Moments(
        mean=spec.df * np.asarray(spec.scale),
        variance=var,
        std_dev=np.sqrt(var),
    )


def _mean(design: DistributionDesign) -> tuple[str, Any]:
    return "matrix", design.spec.df * np.asarray(design.spec.scale)


def _mode(design: DistributionDesign) -> tuple[str, Any]:
    return "matrix", mode(design.spec)


def _variance(design: DistributionDesign) -> tuple[str, Any]:
    return "matrix", elementwise_variance(design.spec)


def _determinant(design: DistributionDesign) -> tuple[str, Any]:
    return "scalar", expected_determinant(design.spec)


HANDLERS = {
    Operation.MEAN: _mean,
    Operation.MODE: _mode,
    Operation.VARIANCE: _variance,
    Operation.DETERMINANT: _determinant,
}
