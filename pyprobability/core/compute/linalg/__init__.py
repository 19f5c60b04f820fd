"""
Linear algebra kernels for PyProbability.

Small dense matrices only (dimension <= MAX_COFACTOR_DIMENSION for the
cofactor methods). All functions follow these conventions:
    - Inputs are array-likes, outputs are fresh float64 NumPy arrays
    - Preconditions are checked eagerly and raise with the offending value
    - Iterative methods report non-convergence as a warning plus status

Submodules:
    dense: determinant, inverse, transpose, Cholesky, submatrix
    eigen: closed-form 2x2 and Jacobi eigensolvers
"""

from pyprobability.core.compute.linalg.dense import (
    determinant,
    invert,
    transpose,
    cofactor_matrix,
    cholesky,
    cholesky_decomposition,
    is_symmetric,
    submatrix,
)
from pyprobability.core.compute.linalg.eigen import (
    EigenResult,
    jacobi_eigh,
    eigenvalues_approx,
    eigenvectors_approx,
)

__all__ = [
    # Dense kernels
    "determinant",
    "invert",
    "transpose",
    "cofactor_matrix",
    "cholesky",
    "cholesky_decomposition",
    "is_symmetric",
    "submatrix",
    # Eigen
    "EigenResult",
    "jacobi_eigh",
    "eigenvalues_approx",
    "eigenvectors_approx",
]
