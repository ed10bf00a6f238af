"""Marker filters for people-by-marker genotype matrices.

Provides predicates for missing and monomorphic markers and compaction
routines that drop failing columns. Missing genotypes are negative values.
Compaction keeps the order and labels of retained columns and never
touches rows.
"""

import logging

import numpy as np

from genoprep.core.matrix import LabeledMatrix

logger = logging.getLogger(__name__)


def _column_in_range(genotype: LabeledMatrix, col: int, label: str) -> bool:
    if col < 0 or col >= genotype.cols:
        logger.error(
            f"Invalid check of {label} marker: column {col} out of range "
            f"for {genotype.cols} markers"
        )
        return False
    return True


def has_missing_marker(genotype: LabeledMatrix, col: int) -> bool:
    """Return True if any individual is missing at marker ``col``.

    An out-of-range column is logged as an error and reported as False.
    """
    if not _column_in_range(genotype, col, "missing"):
        return False
    return bool(np.any(genotype.values[:, col] < 0))


def is_monomorphic_marker(genotype: LabeledMatrix, col: int) -> bool:
    """Return True if all non-missing genotypes at marker ``col`` are equal.

    A marker with no observed genotype counts as monomorphic. An
    out-of-range column is logged as an error and reported as False.
    """
    if not _column_in_range(genotype, col, "monomorphic"):
        return False
    column = genotype.values[:, col]
    observed = column[column >= 0]
    if observed.size == 0:
        return True
    return bool(np.all(observed == observed[0]))


def _keep_columns(genotype: LabeledMatrix, keep: np.ndarray) -> None:
    genotype.values = np.ascontiguousarray(genotype.values[:, keep])
    genotype.col_labels = [
        label for label, kept in zip(genotype.col_labels, keep) if kept
    ]


def remove_missing_marker(genotype: LabeledMatrix) -> None:
    """Drop, in place, every marker column with at least one missing genotype."""
    keep = ~np.any(genotype.values < 0, axis=0)
    n_removed = int(genotype.cols - keep.sum())
    _keep_columns(genotype, keep)
    if n_removed:
        logger.debug(f"Removed {n_removed} markers with missing genotypes")


def remove_monomorphic_marker(genotype: LabeledMatrix) -> None:
    """Drop, in place, every monomorphic marker column."""
    keep = np.array(
        [not is_monomorphic_marker(genotype, col) for col in range(genotype.cols)],
        dtype=bool,
    )
    n_removed = int(genotype.cols - keep.sum())
    _keep_columns(genotype, keep)
    if n_removed:
        logger.debug(f"Removed {n_removed} monomorphic markers")
