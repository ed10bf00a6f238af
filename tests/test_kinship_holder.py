"""Tests for kinship loading through KinshipHolder and DataConsolidator.

Validates eigendecomposition thresholding, loading from a kinship file or
from cached eigen files, per-region independence and idempotent loading.
"""

from pathlib import Path

import numpy as np
import pytest
from numpy.testing import assert_allclose

from genoprep import KinshipError, KinshipHolder, KinshipRegion
from genoprep.kinship import eigendecompose_kinship, write_eigen_files, write_kinship_matrix
from genoprep.kinship.io import eigen_paths

K3 = np.array([[1.0, 0.3, 0.2], [0.3, 1.0, 0.4], [0.2, 0.4, 1.0]])


@pytest.mark.tier0
class TestEigendecomposeKinship:
    def test_reconstructs_matrix(self):
        S, U = eigendecompose_kinship(K3)

        assert np.all(np.diff(S) >= 0)
        assert_allclose((U * S) @ U.T, K3, atol=1e-12)

    def test_input_not_modified(self):
        K = K3.copy()
        eigendecompose_kinship(K)
        assert_allclose(K, K3)

    def test_small_eigenvalues_zeroed(self):
        v = np.array([1.0, 1.0, 1.0]) / np.sqrt(3)
        K = np.outer(v, v)  # rank one

        with pytest.warns(UserWarning, match="close to zero"):
            S, _ = eigendecompose_kinship(K)

        assert np.sum(S == 0.0) == 2
        assert S[-1] == pytest.approx(1.0)

    def test_not_square(self):
        with pytest.raises(ValueError, match="square"):
            eigendecompose_kinship(np.ones((2, 3)))


@pytest.mark.tier0
class TestKinshipHolder:
    def test_load_from_kinship_file(self, tmp_path: Path):
        path = tmp_path / "k.cXX.txt"
        write_kinship_matrix(K3, path)

        holder = KinshipHolder()
        holder.set_file(path)
        assert not holder.is_loaded()
        holder.load()

        assert holder.is_loaded()
        assert_allclose(holder.get_k(), K3)
        assert holder.get_u().shape == (3, 3)
        assert holder.get_s().shape == (3,)

    def test_load_subsets_by_header(self, tmp_path: Path):
        path = tmp_path / "k.txt"
        write_kinship_matrix(K3, path, sample_ids=["a", "b", "c"])

        holder = KinshipHolder()
        holder.set_file(path)
        holder.set_sample(["b", "c"])
        holder.load()

        assert_allclose(holder.get_k(), [[1.0, 0.4], [0.4, 1.0]])
        assert holder.get_u().shape == (2, 2)

    def test_sample_count_mismatch_without_header(self, tmp_path: Path):
        path = tmp_path / "k.txt"
        write_kinship_matrix(K3, path)

        holder = KinshipHolder()
        holder.set_file(path)
        holder.set_sample(["a", "b"])
        with pytest.raises(KinshipError, match="does not match"):
            holder.load()
        assert not holder.is_loaded()

    def test_eigen_files_written_and_reused(self, tmp_path: Path):
        path = tmp_path / "k.txt"
        write_kinship_matrix(K3, path)
        prefix = tmp_path / "cache" / "kin"

        first = KinshipHolder()
        first.set_file(path)
        first.set_eigen_file(prefix)
        first.load()
        assert all(p.exists() for p in eigen_paths(prefix))

        second = KinshipHolder()
        second.set_eigen_file(prefix)
        second.load()

        assert_allclose(second.get_s(), first.get_s(), rtol=1e-8, atol=1e-12)
        # K is rebuilt from the eigen files when no kinship file is set
        assert_allclose(second.get_k(), K3, atol=1e-8)

    def test_eigen_files_checked_against_kinship(self, tmp_path: Path):
        path = tmp_path / "k.txt"
        write_kinship_matrix(K3, path)
        prefix = tmp_path / "other"
        write_eigen_files(np.ones(2), np.eye(2), prefix)

        holder = KinshipHolder()
        holder.set_file(path)
        holder.set_eigen_file(prefix)
        with pytest.raises(KinshipError, match="does not match eigenvectors"):
            holder.load()

    def test_load_is_idempotent(self, tmp_path: Path):
        path = tmp_path / "k.txt"
        write_kinship_matrix(K3, path)

        holder = KinshipHolder()
        holder.set_file(path)
        holder.load()
        K_first = holder.get_k()

        path.unlink()
        holder.load()  # already loaded, file not read again
        assert holder.get_k() is K_first

    def test_nothing_configured(self):
        with pytest.raises(KinshipError, match="No kinship file"):
            KinshipHolder().load()


@pytest.mark.tier0
class TestConsolidatorKinship:
    def test_regions_are_independent(self, make_consolidator, tmp_path: Path):
        path = tmp_path / "auto.txt"
        write_kinship_matrix(K3, path)

        dc = make_consolidator()
        assert not dc.has_kinship()

        dc.set_kinship_file(KinshipRegion.AUTO, path)
        dc.load_kinship(KinshipRegion.AUTO)

        assert dc.has_kinship()
        assert dc.has_kinship_for_auto()
        assert not dc.has_kinship_for_x()
        assert_allclose(dc.get_kinship_for_auto(), K3)
        assert dc.get_kinship_u_for_auto().shape == (3, 3)
        assert dc.get_kinship_s_for_auto().shape == (3,)
        assert dc.get_kinship_for_x() is None
        assert dc.get_kinship_u_for_x() is None
        assert dc.get_kinship_s_for_x() is None

    def test_x_region_with_samples(self, make_consolidator, tmp_path: Path):
        path = tmp_path / "x.txt"
        write_kinship_matrix(K3, path, sample_ids=["s1", "s2", "s3"])

        dc = make_consolidator()
        dc.set_kinship_sample(["s3", "s1"])
        dc.set_kinship_file(KinshipRegion.X, path)
        dc.set_kinship_eigen_file(KinshipRegion.X, tmp_path / "x")
        dc.load_kinship(KinshipRegion.X)

        assert dc.has_kinship_for_x()
        assert not dc.has_kinship_for_auto()
        assert_allclose(dc.get_kinship_for_x(), [[1.0, 0.2], [0.2, 1.0]])
        assert dc.get_kinship_holder(KinshipRegion.AUTO).samples == ["s3", "s1"]

    def test_region_by_int(self, make_consolidator, tmp_path: Path):
        path = tmp_path / "auto.txt"
        write_kinship_matrix(K3, path)

        dc = make_consolidator()
        dc.set_kinship_file(0, path)
        dc.load_kinship(0)
        assert dc.has_kinship_for_auto()
