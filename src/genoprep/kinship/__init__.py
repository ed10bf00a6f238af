"""Kinship matrix loading for mixed-model fitting.

Key components:
- KinshipHolder: K, U and S for one region, loaded lazily
- KinshipRegion: AUTO (autosomes) or X (chromosome X)
- eigendecompose_kinship: Eigendecomposition with GEMMA-compatible thresholding
- read_kinship_file / write_kinship_matrix: Kinship matrix text I/O
- read_eigen_files / write_eigen_files: GEMMA eigenD/eigenU text I/O
"""

from genoprep.kinship.eigen import eigendecompose_kinship
from genoprep.kinship.holder import KinshipHolder, KinshipRegion
from genoprep.kinship.io import (
    KinshipError,
    read_eigen_files,
    read_kinship_file,
    subset_kinship,
    write_eigen_files,
    write_kinship_matrix,
)

__all__ = [
    "KinshipError",
    "KinshipHolder",
    "KinshipRegion",
    "eigendecompose_kinship",
    "read_eigen_files",
    "read_kinship_file",
    "subset_kinship",
    "write_eigen_files",
    "write_kinship_matrix",
]
