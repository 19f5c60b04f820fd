"""
Tests for the small dense linear algebra kernels.

Validates:
    - determinant: closed forms, cofactor expansion, transpose invariance
    - invert: 2x2 closed form, adjugate path, singular detection
    - cholesky: reconstruction and positive-definiteness errors
    - submatrix / transpose / is_symmetric
    - eigenvalues_approx / eigenvectors_approx against numpy
"""

import numpy as np
import pytest

from pyprobability.core.compute.linalg import (
    cholesky,
    cholesky_decomposition,
    cofactor_matrix,
    determinant,
    eigenvalues_approx,
    eigenvectors_approx,
    invert,
    is_symmetric,
    jacobi_eigh,
    submatrix,
    transpose,
)
from pyprobability.core.exceptions import (
    DimensionError,
    InvalidParameterError,
    NotPositiveDefiniteError,
    SingularMatrixError,
)


@pytest.fixture
def spd3():
    """3x3 symmetric positive definite matrix."""
    return np.array([
        [4.0, 1.0, 0.5],
        [1.0, 3.0, 0.2],
        [0.5, 0.2, 2.0],
    ])


# ═══════════════════════════════════════════════════════════════════════
# Determinant and inverse
# ═══════════════════════════════════════════════════════════════════════


class TestDeterminant:
    """Closed forms and cofactor expansion."""

    @pytest.mark.parametrize("n", [1, 2, 3, 5])
    def test_identity(self, n):
        assert determinant(np.eye(n)) == 1.0

    def test_two_by_two(self):
        assert determinant([[4.0, 7.0], [2.0, 5.0]]) == pytest.approx(6.0)

    def test_transpose_invariant(self, rng):
        M = rng.standard_normal((4, 4))
        assert determinant(M) == pytest.approx(determinant(M.T), rel=1e-10)

    def test_against_numpy(self, rng):
        M = rng.standard_normal((5, 5))
        assert determinant(M) == pytest.approx(np.linalg.det(M), rel=1e-10)

    def test_non_square_rejected(self):
        with pytest.raises(DimensionError):
            determinant(np.zeros((2, 3)))

    def test_too_large_rejected(self):
        with pytest.raises(DimensionError, match="limited"):
            determinant(np.eye(11))


class TestInvert:
    """Closed-form 2x2 and adjugate inverses."""

    def test_two_by_two(self):
        inv = invert([[4.0, 7.0], [2.0, 5.0]])
        np.testing.assert_allclose(inv, [[5 / 6, -7 / 6], [-1 / 3, 2 / 3]])

    def test_round_trip(self, spd3):
        np.testing.assert_allclose(invert(spd3) @ spd3, np.eye(3), atol=1e-10)

    def test_one_by_one(self):
        np.testing.assert_allclose(invert([[4.0]]), [[0.25]])

    def test_singular(self):
        with pytest.raises(SingularMatrixError) as exc_info:
            invert([[1.0, 2.0], [2.0, 4.0]], name="cov")
        assert exc_info.value.matrix_name == "cov"
        assert exc_info.value.determinant == 0.0

    def test_cofactor_matrix(self):
        C = cofactor_matrix([[4.0, 7.0], [2.0, 5.0]])
        np.testing.assert_allclose(C, [[5.0, -2.0], [-7.0, 4.0]])


# ═══════════════════════════════════════════════════════════════════════
# Cholesky and helpers
# ═══════════════════════════════════════════════════════════════════════


class TestCholesky:
    """L @ L.T reconstructs M; non-PD input raises."""

    def test_reconstruction(self, spd3):
        L = cholesky(spd3)
        np.testing.assert_allclose(L @ L.T, spd3, atol=1e-12)
        assert np.allclose(L, np.tril(L))

    def test_matches_numpy(self, spd3):
        np.testing.assert_allclose(cholesky(spd3), np.linalg.cholesky(spd3), atol=1e-12)

    def test_alias(self):
        assert cholesky_decomposition is cholesky

    def test_not_positive_definite(self):
        with pytest.raises(NotPositiveDefiniteError) as exc_info:
            cholesky([[1.0, 2.0], [2.0, 1.0]], name="scale")
        assert exc_info.value.matrix_name == "scale"
        assert exc_info.value.min_pivot < 0


class TestHelpers:
    """transpose, is_symmetric, submatrix."""

    def test_transpose_copy(self):
        M = np.array([[1.0, 2.0], [3.0, 4.0]])
        T = transpose(M)
        T[0, 1] = 99.0
        assert M[1, 0] == 3.0

    def test_is_symmetric(self, spd3):
        assert is_symmetric(spd3)
        assert not is_symmetric([[1.0, 2.0], [0.0, 1.0]])
        assert not is_symmetric(np.zeros((2, 3)))

    def test_submatrix(self, spd3):
        np.testing.assert_array_equal(
            submatrix(spd3, [0, 2], [0, 2]),
            [[4.0, 0.5], [0.5, 2.0]],
        )

    def test_submatrix_out_of_range(self, spd3):
        with pytest.raises(DimensionError):
            submatrix(spd3, [0, 3], [0])


# ═══════════════════════════════════════════════════════════════════════
# Eigendecomposition
# ═══════════════════════════════════════════════════════════════════════


class TestEigen:
    """Closed-form and Jacobi eigensolvers against numpy.linalg.eigh."""

    def test_two_by_two_values(self):
        np.testing.assert_allclose(eigenvalues_approx([[2.0, 1.0], [1.0, 2.0]]), [3.0, 1.0])

    def test_two_by_two_vectors(self):
        M = np.array([[2.0, 1.0], [1.0, 2.0]])
        values = eigenvalues_approx(M)
        vectors = eigenvectors_approx(M)
        for lam, v in zip(values, vectors):
            assert np.linalg.norm(v) == pytest.approx(1.0)
            np.testing.assert_allclose(M @ v, lam * v, atol=1e-6)

    def test_diagonal_repeated(self):
        vectors = eigenvectors_approx(np.eye(2))
        assert abs(float(np.dot(vectors[0], vectors[1]))) < 1e-8

    def test_jacobi_against_numpy(self, spd3):
        result = jacobi_eigh(spd3)
        assert result.converged
        np.testing.assert_allclose(result.values, np.linalg.eigvalsh(spd3)[::-1], rtol=1e-10)
        for lam, v in zip(result.values, result.vectors):
            np.testing.assert_allclose(spd3 @ v, lam * v, atol=1e-9)

    def test_values_descending(self, rng):
        A = rng.standard_normal((5, 5))
        M = A @ A.T
        values = eigenvalues_approx(M)
        assert np.all(np.diff(values) <= 0)
        np.testing.assert_allclose(values, np.linalg.eigvalsh(M)[::-1], rtol=1e-8, atol=1e-9)

    @pytest.mark.parametrize("size", [4, 5, 6])
    def test_jacobi_converged_spd_matrices(self, size):
        """Off-diagonal norm stays well-defined once the rotations converge."""
        for seed in range(40):
            A = np.random.default_rng(seed).standard_normal((size, size))
            M = A @ A.T
            result = jacobi_eigh(M)
            assert result.converged
            np.testing.assert_allclose(
                result.values, np.linalg.eigvalsh(M)[::-1], rtol=1e-8, atol=1e-9,
            )
            np.testing.assert_allclose(eigenvalues_approx(M), result.values)

    def test_asymmetric_large_rejected(self):
        M = np.array([[1.0, 2.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])
        with pytest.raises(InvalidParameterError):
            eigenvalues_approx(M)
