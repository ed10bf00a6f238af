"""End-to-end consolidation workflows on one small dataset.

Covers the sequence a single-variant association run goes through:
consolidate, align kinship to the retained individuals, recode the marker,
count raw genotypes per stratum and check the regression inputs.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from genoprep import GenotypeCounter, KinshipRegion, LabeledMatrix, Strategy
from genoprep.core import remove_monomorphic_marker
from genoprep.kinship import write_kinship_matrix

pytestmark = pytest.mark.tier1

SAMPLES = ["s1", "s2", "s3", "s4", "s5", "s6"]


@pytest.fixture
def dataset(tmp_path):
    geno = LabeledMatrix.from_array(
        [[0, 1], [1, 1], [2, 1], [-1, 1], [2, 1], [1, 1]], ["X:3000000", "1:500"]
    )
    pheno = LabeledMatrix.from_array([[0], [1], [1], [0], [0], [1]], ["status"])
    cov = LabeledMatrix.from_array(
        [[1, 30], [1, 41], [1, 35], [1, 50], [1, 44], [1, 29]], ["intercept", "age"]
    )
    rng = np.random.default_rng(7)
    X = rng.standard_normal((6, 20))
    K = X @ X.T / 20
    K = (K + K.T) / 2
    kinship_path = tmp_path / "all.cXX.txt"
    write_kinship_matrix(K, kinship_path, sample_ids=SAMPLES)
    return geno, pheno, cov, K, kinship_path


def test_drop_workflow(make_consolidator, dataset, tmp_path):
    geno, pheno, cov, K, kinship_path = dataset

    dc = make_consolidator(Strategy.DROP, par_build="hg19")
    dc.set_phenotype_name(SAMPLES)
    dc.consolidate(pheno, cov, geno)
    dc.set_sex([1, 2, 2, 1, 2, 1])

    kept = [0, 1, 2, 4, 5]
    assert dc.get_row_label() == [SAMPLES[i] for i in kept]
    assert dc.get_genotype().rows == 5

    # Kinship follows the retained individuals
    dc.set_kinship_sample(dc.get_row_label())
    dc.set_kinship_file(KinshipRegion.AUTO, kinship_path)
    dc.set_kinship_eigen_file(KinshipRegion.AUTO, tmp_path / "eig")
    dc.load_kinship(KinshipRegion.AUTO)
    assert_allclose(dc.get_kinship_for_auto(), K[np.ix_(kept, kept)], rtol=1e-9)
    assert (tmp_path / "eig.eigenD.txt").exists()

    # First marker is the hemizygous one; recode it
    assert dc.is_hemi_region(0)
    assert not dc.is_hemi_region(1)
    coded = dc.code_genotype_for_dominant_model()
    assert_array_equal(coded[:, 0], [0, 1, 1, 1, 1])

    # Raw counts still see the dropped individual
    counter = GenotypeCounter()
    assert dc.count_raw_genotype_from_control(0, counter) == 0
    assert counter.get_num_sample() == 3
    assert counter.get_num_missing() == 1

    flipped = dc.get_flipped_to_minor_polymorphic_genotype()
    remove_monomorphic_marker(flipped)
    assert flipped.col_labels == ["X:3000000"]

    assert dc.pre_regression_check() == 0


def test_mean_imputation_workflow(make_consolidator, dataset):
    geno, pheno, cov, _, _ = dataset

    dc = make_consolidator(Strategy.IMPUTE_MEAN)
    dc.consolidate(pheno, cov, geno)

    g = dc.get_genotype()
    assert g.shape == (6, 2)
    # Observed marker 0 calls 0, 1, 2, 2, 1 -> AF 0.6, imputed dosage 1.2
    assert g[3, 0] == pytest.approx(1.2)
    assert dc.is_phenotype_updated()
    assert dc.is_covariate_updated()

    recessive = dc.code_genotype_for_recessive_model()
    # Observed recessive codes 0, 0, 1, 1, 0 -> missing gets 0.4
    assert_allclose(recessive[:, 0], [0, 0, 1, 0.4, 1, 0])

    # A second identical consolidation leaves phenotype and covariate as-is
    dc.consolidate(pheno, cov, geno)
    assert not dc.is_phenotype_updated()
    assert not dc.is_covariate_updated()
