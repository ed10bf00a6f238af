"""Holder of one region's kinship matrix and its eigendecomposition.

A DataConsolidator keeps one KinshipHolder per genomic region (autosomes and
chromosome X). Each holder is configured with a kinship file, an optional
eigen file prefix and the analysed sample IDs, and loads lazily.

Loading order:
1. If an eigen prefix is set and both eigen files exist, read U and S from
   them (K is read from the kinship file when one is set, otherwise
   rebuilt as U diag(S) U').
2. Otherwise read K from the kinship file, subset it to the samples, and
   eigendecompose it. If an eigen prefix is set, the decomposition is
   written there for reuse.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import numpy as np
from loguru import logger

from genoprep.kinship.eigen import eigendecompose_kinship
from genoprep.kinship.io import (
    KinshipError,
    eigen_paths,
    read_eigen_files,
    read_kinship_file,
    subset_kinship,
    write_eigen_files,
)


class KinshipRegion(Enum):
    """Genomic region a kinship matrix applies to."""

    AUTO = 0
    X = 1


class KinshipHolder:
    """Kinship matrix K with eigenvectors U and eigenvalues S for one region."""

    def __init__(self) -> None:
        self.samples: list[str] | None = None
        self.file_name: Path | None = None
        self.eigen_prefix: Path | None = None
        self.K: np.ndarray | None = None
        self.U: np.ndarray | None = None
        self.S: np.ndarray | None = None
        self.loaded = False

    def set_sample(self, samples: list[str]) -> None:
        self.samples = list(samples)

    def set_file(self, file_name: str | Path) -> None:
        self.file_name = Path(file_name)

    def set_eigen_file(self, prefix: str | Path) -> None:
        self.eigen_prefix = Path(prefix)

    def is_loaded(self) -> bool:
        return self.loaded

    def get_k(self) -> np.ndarray | None:
        return self.K

    def get_u(self) -> np.ndarray | None:
        return self.U

    def get_s(self) -> np.ndarray | None:
        return self.S

    def _read_k(self) -> np.ndarray:
        K, file_samples = read_kinship_file(self.file_name)
        if self.samples is None:
            return K
        if file_samples is not None:
            return subset_kinship(K, file_samples, self.samples)
        if K.shape[0] != len(self.samples):
            raise KinshipError(
                f"Kinship matrix dimension {K.shape[0]} does not match "
                f"{len(self.samples)} samples and {self.file_name} has no "
                f"sample header to subset by"
            )
        return K

    def _has_eigen_files(self) -> bool:
        if self.eigen_prefix is None:
            return False
        return all(p.exists() for p in eigen_paths(self.eigen_prefix))

    def load(self) -> None:
        """Load K, U and S. A second call on a loaded holder does nothing.

        Raises:
            KinshipError: If nothing is configured, or the files are
                inconsistent with each other or with the samples.
            FileNotFoundError: If a configured file does not exist.
        """
        if self.loaded:
            return
        if self.file_name is None and not self._has_eigen_files():
            raise KinshipError("No kinship file or eigen files configured")

        n_samples = len(self.samples) if self.samples is not None else None
        if self._has_eigen_files():
            logger.info(f"Loading kinship eigendecomposition from {self.eigen_prefix}")
            S, U = read_eigen_files(self.eigen_prefix, n_samples=n_samples)
            if self.file_name is not None:
                K = self._read_k()
                if K.shape != U.shape:
                    raise KinshipError(
                        f"Kinship matrix {K.shape} does not match eigenvectors "
                        f"{U.shape} from {self.eigen_prefix}"
                    )
            else:
                K = (U * S) @ U.T
        else:
            logger.info(f"Loading kinship matrix from {self.file_name}")
            K = self._read_k()
            S, U = eigendecompose_kinship(K)
            if self.eigen_prefix is not None:
                write_eigen_files(S, U, self.eigen_prefix)
                logger.debug(f"Saved kinship eigendecomposition to {self.eigen_prefix}")

        self.K, self.U, self.S = K, U, S
        self.loaded = True
