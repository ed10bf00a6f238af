"""Eigendecomposition of a loaded kinship matrix.

The mixed model rotates phenotype, covariates and genotypes by the kinship
eigenvectors, so each region's K is factored once as K = U diag(S) U' when
its holder loads. Eigenvalues within ``threshold`` of zero are set to
exactly zero, matching the eigenD files GEMMA writes.
"""

import time
import warnings

import numpy as np
import scipy.linalg
from loguru import logger


def _zero_small(eigenvalues: np.ndarray, threshold: float) -> np.ndarray:
    n_negative = int(np.sum(eigenvalues < -threshold))
    if n_negative:
        warnings.warn(
            f"{n_negative} kinship eigenvalue(s) are negative; "
            "the kinship matrix is not positive semi-definite.",
            stacklevel=3,
        )

    zeroed = np.where(np.abs(eigenvalues) < threshold, 0.0, eigenvalues)
    n_zero = int(np.sum(zeroed == 0.0))
    if n_zero > 1:
        warnings.warn(
            f"{n_zero} kinship eigenvalues are close to zero; "
            "the kinship matrix is rank-deficient.",
            stacklevel=3,
        )
    return zeroed


def eigendecompose_kinship(
    K: np.ndarray, threshold: float = 1e-10
) -> tuple[np.ndarray, np.ndarray]:
    """Factor a symmetric kinship matrix into eigenvalues and eigenvectors.

    Args:
        K: Symmetric kinship matrix (n_samples, n_samples). Left unchanged.
        threshold: Eigenvalues with absolute value below this become 0.

    Returns:
        (S, U): eigenvalues sorted ascending, shape (n_samples,), and the
        matching eigenvectors as the columns of U.

    Raises:
        ValueError: If K is not a square 2-D array.
    """
    if K.ndim != 2 or K.shape[0] != K.shape[1]:
        raise ValueError(f"Kinship matrix must be square, got shape {K.shape}")

    n = K.shape[0]
    started = time.perf_counter()
    S, U = scipy.linalg.eigh(K, check_finite=False)
    logger.debug(
        f"Eigendecomposed {n} x {n} kinship in {time.perf_counter() - started:.2f}s"
    )
    return _zero_small(S, threshold), U
