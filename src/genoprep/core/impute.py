"""Missing genotype imputation.

Missing genotypes are encoded as negative values. Both algorithms work
column by column (one marker at a time) on a people-by-marker matrix and
modify it in place:

1. Mean imputation: missing cells get the expected dosage 2p.
2. Frequency imputation: missing cells get a hard call drawn from the
   Hardy-Weinberg genotype distribution (p^2, 2p(1-p), (1-p)^2).

In both cases p is the allele frequency over non-missing cells,
p = AC / (2 * n_observed), and p = 0 for a marker with no observed data.
"""

from __future__ import annotations

import numpy as np

from genoprep.core.matrix import LabeledMatrix


def _values(genotype: LabeledMatrix | np.ndarray) -> np.ndarray:
    return genotype.values if isinstance(genotype, LabeledMatrix) else genotype


def observed_allele_frequency(genotype: LabeledMatrix | np.ndarray) -> np.ndarray:
    """Per-marker allele frequency computed from non-missing cells only.

    Args:
        genotype: People-by-marker matrix, negative values are missing.

    Returns:
        1-D array of length n_markers. Markers with no observed genotype
        get frequency 0.0.
    """
    g = _values(genotype)
    observed = g >= 0
    ac = np.where(observed, g, 0.0).sum(axis=0)
    an = 2.0 * observed.sum(axis=0)
    with np.errstate(invalid="ignore", divide="ignore"):
        p = np.where(an > 0, ac / np.where(an > 0, an, 1.0), 0.0)
    return p


def impute_genotype_to_mean(genotype: LabeledMatrix | np.ndarray) -> None:
    """Impute missing genotypes to the per-marker mean dosage, in place.

    Every missing cell of a marker is replaced by 2p, the expected dosage
    under Hardy-Weinberg equilibrium. This is a dosage, not a hard call.

    Args:
        genotype: People-by-marker matrix, negative values are missing.

    Example:
        >>> g = np.array([[0.0, 2.0], [-1.0, 1.0], [2.0, -9.0]])
        >>> impute_genotype_to_mean(g)
        >>> float(g[1, 0]), float(g[2, 1])
        (1.0, 1.5)
    """
    g = _values(genotype)
    if g.size == 0:
        return
    mean_dosage = 2.0 * observed_allele_frequency(g)
    missing = g < 0
    g[missing] = np.broadcast_to(mean_dosage, g.shape)[missing]


def impute_genotype_by_frequency(
    genotype: LabeledMatrix | np.ndarray, rng: np.random.Generator
) -> None:
    """Impute missing genotypes by sampling from HWE proportions, in place.

    For each marker, cumulative thresholds p_ref = p^2 and
    p_het = p_ref + 2p(1-p) split [0, 1). Each missing cell takes one uniform
    draw v from ``rng`` and becomes 0 if v < p_ref, 1 if v < p_het, else 2.

    Draws are consumed marker by marker, and top to bottom within a marker,
    so the result is reproducible given the generator state.

    Args:
        genotype: People-by-marker matrix, negative values are missing.
        rng: Random generator owned by the caller.
    """
    g = _values(genotype)
    if g.size == 0:
        return
    freqs = observed_allele_frequency(g)
    for col in range(g.shape[1]):
        missing_rows = np.flatnonzero(g[:, col] < 0)
        if missing_rows.size == 0:
            continue
        p = freqs[col]
        p_ref = p * p
        p_het = p_ref + 2.0 * p * (1.0 - p)
        draws = rng.random(missing_rows.size)
        g[missing_rows, col] = np.where(
            draws < p_ref, 0.0, np.where(draws < p_het, 1.0, 2.0)
        )
