"""
Eigenvalue and eigenvector approximation for small matrices.

1x1 and 2x2 matrices are solved in closed form (quadratic formula on the
trace and determinant); their eigenvectors come from a fixed number of
inverse-iteration steps on the shifted matrix. Matrices of dimension 3 and
above must be symmetric and are diagonalized by cyclic Jacobi rotations.

Eigenvalues are always returned in descending order, and eigenvectors as
rows aligned with them.
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyprobability.core.exceptions import NumericalDivergenceWarning
from pyprobability.core.validation import (
    check_array,
    check_finite,
    check_square,
    check_symmetric,
)
from pyprobability.core.compute.tolerances import (
    DEFAULT_TOLERANCES,
    EIGENVECTOR_ITERATIONS,
    JACOBI_EIGEN,
    IterationBudget,
)


@dataclass(frozen=True)
class EigenResult:
    """
    Result of a symmetric eigendecomposition.

    Attributes:
        values: Eigenvalues, descending
        vectors: Unit eigenvectors as rows, vectors[i] pairs with values[i]
        sweeps: Number of full Jacobi sweeps performed
        converged: False if the sweep budget ran out first
    """
    values: NDArray[np.floating[Any]]
    vectors: NDArray[np.floating[Any]]
    sweeps: int
    converged: bool


def _as_matrix(M: ArrayLike) -> NDArray[np.floating[Any]]:
    A = check_array(M, "M")
    check_square(A, "M")
    check_finite(A, "M")
    return A


def _off_norm(A: NDArray) -> float:
    """Frobenius norm of the off-diagonal part of a symmetric matrix."""
    return math.sqrt(2.0 * float(np.sum(np.triu(A, 1) ** 2)))


def _orient(v: NDArray) -> NDArray:
    """Flip sign so the largest-magnitude component is positive."""
    k = int(np.argmax(np.abs(v)))
    return -v if v[k] < 0 else v


def jacobi_eigh(
    M: ArrayLike,
    budget: IterationBudget = JACOBI_EIGEN,
) -> EigenResult:
    """
    Cyclic Jacobi eigendecomposition of a symmetric matrix.

    Each sweep annihilates every off-diagonal pair (p, q) once with a plane
    rotation. Iteration stops when the off-diagonal Frobenius norm falls
    below budget.tol * ||M||_F, or after budget.max_iterations sweeps.

    Raises:
        DimensionError: If M is not square
        InvalidParameterError: If M is not symmetric
    """
    A = _as_matrix(M)
    check_symmetric(A, "M", DEFAULT_TOLERANCES.symmetry * max(1.0, float(np.max(np.abs(A)))))
    A = 0.5 * (A + A.T)
    n = A.shape[0]
    V = np.eye(n)

    scale = math.sqrt(float(np.sum(A * A)))
    threshold = budget.tol * scale
    sweeps = 0
    converged = _off_norm(A) <= threshold

    while not converged and sweeps < budget.max_iterations:
        sweeps += 1
        for p in range(n - 1):
            for q in range(p + 1, n):
                apq = A[p, q]
                if apq == 0.0:
                    continue
                theta = (A[q, q] - A[p, p]) / (2.0 * apq)
                sign = 1.0 if theta >= 0.0 else -1.0
                t = sign / (abs(theta) + math.sqrt(theta * theta + 1.0))
                c = 1.0 / math.sqrt(t * t + 1.0)
                s = t * c

                R = np.eye(n)
                R[p, p] = c
                R[q, q] = c
                R[p, q] = s
                R[q, p] = -s
                A = R.T @ A @ R
                V = V @ R
        converged = _off_norm(A) <= threshold

    values = np.diag(A).copy()
    order = np.argsort(values)[::-1]
    vectors = np.array([_orient(V[:, i]) for i in order])
    return EigenResult(
        values=values[order],
        vectors=vectors,
        sweeps=sweeps,
        converged=converged,
    )


def _jacobi_or_warn(A: NDArray) -> EigenResult:
    result = jacobi_eigh(A)
    if not result.converged:
        warnings.warn(
            NumericalDivergenceWarning(
                f"Jacobi eigensolver did not converge within "
                f"{JACOBI_EIGEN.max_iterations} sweeps; returning current estimate",
                iterations=result.sweeps,
            ),
            stacklevel=3,
        )
    return result


def _closed_form_values(A: NDArray) -> NDArray[np.floating[Any]]:
    if A.shape[0] == 1:
        return np.array([A[0, 0]])
    trace = A[0, 0] + A[1, 1]
    det = A[0, 0] * A[1, 1] - A[0, 1] * A[1, 0]
    disc = trace * trace / 4.0 - det
    if disc < 0.0:
        # complex pair; report the shared real part
        return np.array([trace / 2.0, trace / 2.0])
    root = math.sqrt(disc)
    return np.array([trace / 2.0 + root, trace / 2.0 - root])


def eigenvalues_approx(M: ArrayLike) -> NDArray[np.floating[Any]]:
    """
    Eigenvalues of a square matrix, descending.

    1x1 and 2x2 use closed forms (a negative discriminant yields trace/2
    twice). Larger matrices must be symmetric and go through Jacobi.

    Raises:
        DimensionError: If M is not square
        InvalidParameterError: If M is 3x3 or larger and not symmetric
    """
    A = _as_matrix(M)
    if A.shape[0] <= 2:
        return _closed_form_values(A)
    return _jacobi_or_warn(A).values


def eigenvectors_approx(M: ArrayLike) -> NDArray[np.floating[Any]]:
    """
    Unit eigenvectors as rows, aligned with eigenvalues_approx(M).

    For 1x1 and 2x2 matrices each vector is refined by a fixed number of
    inverse-iteration steps on M - (lambda + delta) I, starting from
    ones + e_k. A vector whose eigenvalue repeats an earlier one is
    orthogonalized against it (Gram-Schmidt). Larger matrices use the
    Jacobi rotation vectors.
    """
    A = _as_matrix(M)
    n = A.shape[0]
    if n == 1:
        return np.ones((1, 1))
    if n > 2:
        return _jacobi_or_warn(A).vectors

    values = _closed_form_values(A)
    scale = max(1.0, float(np.max(np.abs(A))))
    identity = np.eye(n)
    found: list[NDArray] = []

    for k, lam in enumerate(values):
        delta = 1e-6 * max(1.0, abs(lam))
        shifted = A - (lam + delta) * identity
        v = np.ones(n) + identity[k]
        v /= np.linalg.norm(v)

        repeats = [
            found[j] for j in range(k)
            if abs(values[j] - lam) <= 1e-9 * scale
        ]

        for _ in range(EIGENVECTOR_ITERATIONS):
            try:
                w = np.linalg.solve(shifted, v)
            except np.linalg.LinAlgError:
                # shift landed on an eigenvalue: v already spans its null space
                break
            for u in repeats:
                w = w - np.dot(w, u) * u
            norm = float(np.linalg.norm(w))
            if norm == 0.0:
                break
            v = w / norm

        for u in repeats:
            v = v - np.dot(v, u) * u
        norm = float(np.linalg.norm(v))
        if norm == 0.0:
            # fall back to the orthogonal complement of the earlier vector
            v = np.array([-found[0][1], found[0][0]])
        else:
            v = v / norm
        found.append(_orient(v))

    return np.array(found)
