"""Sanity checks run before handing matrices to a regression model.

Each check returns 0 when the data is usable and -1 otherwise, logging the
reason, so a caller can skip a marker or abort the run.
"""

from __future__ import annotations

import numpy as np
from loguru import logger

from genoprep.core.matrix import LabeledMatrix


def build_covariate_matrix(cov: LabeledMatrix, n_samples: int) -> np.ndarray:
    """Return the covariate design matrix, intercept-only when ``cov`` is empty.

    Args:
        cov: Covariate matrix (n_samples, n_covariates), possibly 0 columns.
        n_samples: Number of samples (for intercept construction).

    Returns:
        (n_samples, max(1, n_covariates)) float64 array.
    """
    if cov.cols == 0:
        return np.ones((n_samples, 1))
    if cov.rows != n_samples:
        raise ValueError(
            f"Covariate matrix has {cov.rows} rows, expected {n_samples}"
        )
    return cov.values.astype(np.float64)


def check_colinearity(cov: LabeledMatrix) -> int:
    """Return -1 if covariate columns are linearly dependent, else 0."""
    if cov.cols == 0:
        return 0
    rank = np.linalg.matrix_rank(cov.values)
    if rank < cov.cols:
        logger.warning(
            f"Covariates are colinear: rank {rank} for {cov.cols} columns "
            f"({', '.join(cov.col_labels)})"
        )
        return -1
    return 0


def _is_binary(values: np.ndarray) -> bool:
    return values.size > 0 and bool(np.all((values == 0) | (values == 1)))


def check_predictor(pheno: LabeledMatrix, cov: LabeledMatrix) -> int:
    """Return -1 if a covariate perfectly separates cases from controls.

    Only applies to binary (0/1) phenotypes in the first phenotype column;
    constant covariates such as an intercept are ignored.
    """
    if pheno.cols == 0 or cov.cols == 0:
        return 0
    y = pheno.values[:, 0]
    if not _is_binary(y):
        return 0
    cases = y == 1
    if cases.all() or not cases.any():
        return 0

    for col in range(cov.cols):
        x = cov.values[:, col]
        if np.all(x == x[0]):
            continue
        case_x, ctrl_x = x[cases], x[~cases]
        if case_x.min() > ctrl_x.max() or case_x.max() < ctrl_x.min():
            logger.warning(
                f"Covariate '{cov.column_label(col)}' perfectly predicts "
                f"phenotype '{pheno.column_label(0)}'"
            )
            return -1
    return 0


def pre_regression_check(pheno: LabeledMatrix, cov: LabeledMatrix) -> int:
    """Run all pre-regression checks; 0 if every check passes, else -1."""
    if pheno.rows == 0 or pheno.cols == 0:
        logger.warning("No phenotype values to fit")
        return -1
    y = pheno.values[:, 0]
    if np.all(y == y[0]):
        logger.warning(f"Phenotype '{pheno.column_label(0)}' has no variation")
        return -1
    if check_colinearity(cov) < 0:
        return -1
    if check_predictor(pheno, cov) < 0:
        return -1
    return 0
