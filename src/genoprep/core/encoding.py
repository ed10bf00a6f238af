"""Allele encoding transforms.

- Minor allele recoding: flip markers whose coded allele is the major
  allele, so that genotype values count copies of the minor allele.
- Genetic model coding: recode a single marker into a binary risk
  indicator under a dominant (any copy) or recessive (two copies) model.
"""

from __future__ import annotations

import numpy as np

from genoprep.core.config import Strategy
from genoprep.core.impute import observed_allele_frequency
from genoprep.core.matrix import LabeledMatrix

# Coded value strictly above the threshold means "carries the risk genotype"
DOMINANT_THRESHOLD = 0.5
RECESSIVE_THRESHOLD = 1.5


def convert_to_minor_allele_count(src: LabeledMatrix, dest: LabeledMatrix) -> None:
    """Copy ``src`` into ``dest`` with every marker counting the minor allele.

    A marker whose allele frequency over non-missing cells exceeds 0.5 has
    its non-missing values replaced by 2 - g (this works for hard calls and
    dosages alike). Missing values are copied unchanged. Column labels are
    copied.

    Args:
        src: People-by-marker genotype matrix, negative values are missing.
        dest: Output matrix, overwritten.
    """
    values = src.values.copy()
    if values.size:
        flip = observed_allele_frequency(values) > 0.5
        mask = (values >= 0) & flip[np.newaxis, :]
        values[mask] = 2.0 - values[mask]
    dest.values = values
    dest.col_labels = list(src.col_labels)


def code_genotype_for_model(
    original: LabeledMatrix,
    consolidated: LabeledMatrix,
    strategy: Strategy,
    threshold: float,
) -> LabeledMatrix:
    """Code the first marker as a binary indicator ``g > threshold``.

    With an imputing strategy the codes come from the pre-imputation
    genotypes, and missing individuals get the mean of the codes observed in
    non-missing individuals (0.0 if there are none). With DROP the
    consolidated genotypes have no missing values, so they are coded
    directly. Any other strategy yields an all-zero column.

    Args:
        original: Genotype matrix as passed to consolidate().
        consolidated: Genotype matrix after consolidation.
        strategy: Strategy used by the consolidation.
        threshold: DOMINANT_THRESHOLD or RECESSIVE_THRESHOLD.

    Returns:
        (n_individuals, 1) matrix, one row per individual, labeled with the
        first marker's label.
    """
    n = consolidated.rows
    coded = np.zeros((n, 1), dtype=np.float64)
    label = consolidated.col_labels[:1]
    if consolidated.cols == 0:
        return LabeledMatrix(coded, [])

    if strategy.imputes:
        g = original.values[:n, 0]
        observed = g >= 0
        codes = (g > threshold).astype(np.float64)
        n_obs = int(observed.sum())
        avg = float(codes[observed].sum()) / n_obs if n_obs else 0.0
        coded[:, 0] = np.where(observed, codes, avg)
    elif strategy is Strategy.DROP:
        coded[:, 0] = (consolidated.values[:, 0] > threshold).astype(np.float64)

    return LabeledMatrix(coded, label)
