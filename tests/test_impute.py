"""Tests for missing genotype imputation.

Validates mean imputation values, all-missing markers, HWE-frequency
imputation determinism under a fixed seed, and that observed cells are
never modified.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from genoprep.core.impute import (
    impute_genotype_by_frequency,
    impute_genotype_to_mean,
    observed_allele_frequency,
)
from genoprep.core.matrix import LabeledMatrix


@pytest.mark.tier0
class TestObservedAlleleFrequency:
    def test_frequency_ignores_missing(self):
        g = np.array([[0.0, 2.0], [-1.0, 2.0], [2.0, -1.0], [1.0, 1.0]])
        assert_allclose(observed_allele_frequency(g), [0.5, 5.0 / 6.0])

    def test_all_missing_marker_has_zero_frequency(self):
        g = np.array([[-1.0], [-1.0]])
        assert_array_equal(observed_allele_frequency(g), [0.0])


@pytest.mark.tier0
class TestImputeToMean:
    """Tests for mean imputation."""

    def test_missing_cells_get_twice_frequency(self, genotype):
        impute_genotype_to_mean(genotype)

        # Marker 0: AC 5 over AN 8 -> 2p = 1.25
        assert genotype[1, 0] == pytest.approx(1.25)
        # Marker 1: AC 4 over AN 8 -> 2p = 1.0
        assert genotype[3, 1] == pytest.approx(1.0)

    def test_observed_cells_unchanged(self, genotype):
        before = genotype.values.copy()
        impute_genotype_to_mean(genotype)

        observed = before >= 0
        assert_array_equal(genotype.values[observed], before[observed])
        assert np.all(genotype.values >= 0)

    def test_all_missing_marker_imputed_to_zero(self):
        g = LabeledMatrix.from_array([[-1, 1], [-1, 2], [-1, -1]], ["a", "b"])
        impute_genotype_to_mean(g)

        assert_array_equal(g[:, 0], [0.0, 0.0, 0.0])
        assert g[2, 1] == pytest.approx(1.5)

    def test_mean_imputation_keeps_dosage(self):
        """Imputed value is a dosage, not rounded to a hard call."""
        g = np.array([[0.0], [0.0], [1.0], [-1.0]])
        impute_genotype_to_mean(g)
        assert g[3, 0] == pytest.approx(1.0 / 3.0)

    def test_labels_unchanged(self, genotype):
        labels = list(genotype.col_labels)
        impute_genotype_to_mean(genotype)
        assert genotype.col_labels == labels

    def test_empty_matrix(self):
        g = LabeledMatrix.empty(0, 0)
        impute_genotype_to_mean(g)
        assert g.shape == (0, 0)


@pytest.mark.tier0
class TestImputeByFrequency:
    """Tests for stochastic HWE-frequency imputation."""

    def _missing_heavy(self, seed: int = 7) -> np.ndarray:
        rng = np.random.default_rng(seed)
        g = rng.choice([0.0, 1.0, 2.0], size=(200, 6))
        g[rng.random(g.shape) < 0.3] = -1.0
        return g

    def test_same_seed_same_result(self):
        a = self._missing_heavy()
        b = a.copy()

        impute_genotype_by_frequency(a, np.random.default_rng(123))
        impute_genotype_by_frequency(b, np.random.default_rng(123))

        assert_array_equal(a, b)

    def test_imputed_values_are_hard_calls(self):
        g = self._missing_heavy()
        impute_genotype_by_frequency(g, np.random.default_rng(1))

        assert set(np.unique(g)) <= {0.0, 1.0, 2.0}

    def test_observed_cells_unchanged(self):
        g = self._missing_heavy()
        before = g.copy()
        impute_genotype_by_frequency(g, np.random.default_rng(1))

        observed = before >= 0
        assert_array_equal(g[observed], before[observed])

    def test_zero_frequency_imputes_hom_alt_bucket(self):
        """p = 0 leaves only the last cumulative bucket: every draw gives 2."""
        g = np.array([[0.0], [0.0], [-1.0], [-1.0]])
        impute_genotype_by_frequency(g, np.random.default_rng(5))
        assert_array_equal(g[:, 0], [0.0, 0.0, 2.0, 2.0])

    def test_unit_frequency_imputes_hom_ref_bucket(self):
        """p = 1 puts all mass in the first bucket: every draw gives 0."""
        g = np.array([[2.0], [2.0], [-1.0]])
        impute_genotype_by_frequency(g, np.random.default_rng(5))
        assert_array_equal(g[:, 0], [2.0, 2.0, 0.0])

    def test_works_on_labeled_matrix(self, genotype):
        impute_genotype_by_frequency(genotype, np.random.default_rng(3))
        assert np.all(genotype.values >= 0)
