"""
Multivariate normal N(mu, Sigma).

Density and Mahalanobis distance use the quadratic form
Q = (x - mu)^T Sigma^{-1} (x - mu). Conditionals partition Sigma into
blocks and take the Schur complement:

    mu_1|2    = mu_1 + S12 S22^{-1} (x_2 - mu_2)
    Sigma_1|2 = S11 - S12 S22^{-1} S21
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import NDArray

from pyprobability.core.exceptions import DomainError, InvalidParameterError
from pyprobability.core.compute.linalg import (
    determinant,
    eigenvalues_approx,
    eigenvectors_approx,
    invert,
    submatrix,
)
from pyprobability.core.compute.special import chi_square_quantile
from pyprobability.distributions._common import Moments, Operation

if TYPE_CHECKING:
    from pyprobability.distributions.design import DistributionDesign, DistributionSpec


def quadratic_form(spec: DistributionSpec, x: NDArray) -> float:
    diff = x - spec.mean
    precision = invert(spec.cov, name="cov")
    return float(diff @ precision @ diff)


def mvn_pdf(spec: DistributionSpec, x: NDArray) -> float:
    k = spec.dimension
    q = quadratic_form(spec, x)
    det = determinant(spec.cov)
    return (2.0 * math.pi) ** (-k / 2.0) * det ** -0.5 * math.exp(-0.5 * q)


def conditional(
    spec: DistributionSpec,
    given_indices: list[int],
    given_values: NDArray,
) -> dict[str, Any]:
    """Parameters of X_1 | X_2 = given_values, X_2 being the given components."""
    remaining = [i for i in range(spec.dimension) if i not in given_indices]
    if not remaining:
        raise InvalidParameterError(
            "given_indices: at least one component must remain unconditioned"
        )
    mu = spec.mean
    cov = spec.cov
    s11 = submatrix(cov, remaining, remaining)
    s12 = submatrix(cov, remaining, given_indices)
    s21 = submatrix(cov, given_indices, remaining)
    s22 = submatrix(cov, given_indices, given_indices)

    s22_inv = invert(s22, name="cov[given, given]")
    gain = s12 @ s22_inv
    cond_mean = mu[remaining] + gain @ (given_values - mu[given_indices])
    cond_cov = s11 - gain @ s21

    return {
        "mean": cond_mean,
        "covariance": 0.5 * (cond_cov + cond_cov.T),
        "sigma11": s11,
        "sigma12": s12,
        "sigma21": s21,
        "sigma22": s22,
        "given_indices": list(given_indices),
        "remaining_indices": remaining,
    }


def ellipsoid(spec: DistributionSpec, confidence: float) -> dict[str, Any]:
    """Semi-axes of {x : Q(x) <= chi2_k(confidence)}."""
    if not 0.0 < confidence < 1.0:
        raise DomainError(f"confidence: must lie strictly between 0 and 1, got {confidence}")
    chi2 = chi_square_quantile(spec.dimension, confidence)
    values = eigenvalues_approx(spec.cov)
    vectors = eigenvectors_approx(spec.cov)
    axes = np.sqrt(chi2 * np.clip(values, 0.0, None))
    return {
        "confidence": confidence,
        "chi_square": chi2,
        "eigenvalues": values,
        "eigenvectors": vectors,
        "axes": axes,
        "center": np.array(spec.mean),
    }


def moments(spec: DistributionSpec) -> Moments:
    return Moments(
        mean=np.array(spec.mean),
        variance=np.array(spec.cov),
        std_dev=np.sqrt(np.diag(spec.cov)),
    )


def _pdf(design: DistributionDesign) -> tuple[str, Any]:
    spec = design.spec
    return "scalar", mvn_pdf(spec, design.vector("x", spec.dimension))


def _mahalanobis(design: DistributionDesign) -> tuple[str, Any]:
    spec = design.spec
    q = quadratic_form(spec, design.vector("x", spec.dimension))
    return "scalar", math.sqrt(max(q, 0.0))


def _marginal(design: DistributionDesign) -> tuple[str, Any]:
    spec = design.spec
    idx = design.indices("indices", spec.dimension)
    return "record", {
        "indices": idx,
        "mean": spec.mean[idx].copy(),
        "covariance": submatrix(spec.cov, idx, idx),
    }


def _conditional(design: DistributionDesign) -> tuple[str, Any]:
    spec = design.spec
    given = design.indices("given_indices", spec.dimension)
    values = design.vector("given_values", len(given))
    return "record", conditional(spec, given, values)


def _ellipsoid(design: DistributionDesign) -> tuple[str, Any]:
    return "record", ellipsoid(design.spec, design.real("confidence", default=0.95))


def _mean(design: DistributionDesign) -> tuple[str, Any]:
    return "vector", np.array(design.spec.mean)


def _variance(design: DistributionDesign) -> tuple[str, Any]:
    return "matrix", np.array(design.spec.cov)


HANDLERS = {
    Operation.PDF: _pdf,
    Operation.MAHALANOBIS: _mahalanobis,
    Operation.MARGINAL: _marginal,
    Operation.CONDITIONAL: _conditional,
    Operation.ELLIPSOID: _ellipsoid,
    Operation.MEAN: _mean,
    Operation.VARIANCE: _variance,
}
