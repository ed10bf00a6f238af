"""Kinship matrix and eigendecomposition I/O in GEMMA format.

Kinship files (.cXX.txt) hold a square, whitespace-separated matrix. genoprep
also accepts an optional first line of sample IDs, which lets a kinship
file be subset and reordered to the individuals being analysed.

Eigen files are the GEMMA eigenD/eigenU pair written without headers:
eigenD holds one eigenvalue per line and eigenU one tab-separated row of
eigenvectors per line, all at 10 significant digits (``.10g``).
"""

from pathlib import Path

import numpy as np


class KinshipError(ValueError):
    """Raised when a kinship or eigen file cannot be loaded."""


def _is_numeric(token: str) -> bool:
    try:
        float(token)
    except ValueError:
        return False
    return True


def read_kinship_file(path: Path) -> tuple[np.ndarray, list[str] | None]:
    """Read a kinship matrix, with or without a sample-ID header line.

    Args:
        path: Path to kinship matrix file.

    Returns:
        Tuple of (K, sample_ids). sample_ids is None when the file has no
        header line.

    Raises:
        FileNotFoundError: If the file does not exist.
        KinshipError: If the matrix is not square, not symmetric, or the
            header length does not match the matrix dimension.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Kinship file not found: {path}")

    with open(path) as f:
        first = f.readline().split()
    if not first:
        raise KinshipError(f"Kinship file is empty: {path}")

    sample_ids = None
    skiprows = 0
    if not all(_is_numeric(tok) for tok in first):
        sample_ids = first
        skiprows = 1

    K = np.loadtxt(path, dtype=np.float64, skiprows=skiprows, ndmin=2)

    if K.shape[0] != K.shape[1]:
        raise KinshipError(f"Kinship matrix must be square, got shape {K.shape}")
    if sample_ids is not None and len(sample_ids) != K.shape[0]:
        raise KinshipError(
            f"Kinship header lists {len(sample_ids)} samples but the matrix "
            f"is {K.shape[0]} x {K.shape[1]}: {path}"
        )
    if not np.allclose(K, K.T, rtol=1e-10):
        raise KinshipError(f"Kinship matrix is not symmetric: {path}")

    return K, sample_ids


def subset_kinship(
    K: np.ndarray, file_samples: list[str], samples: list[str]
) -> np.ndarray:
    """Reorder and subset K to ``samples`` using the file's sample IDs.

    Raises:
        KinshipError: If any requested sample is absent from the file.
    """
    index = {sid: i for i, sid in enumerate(file_samples)}
    missing = [s for s in samples if s not in index]
    if missing:
        shown = ", ".join(missing[:5])
        raise KinshipError(
            f"{len(missing)} samples not found in kinship file (e.g. {shown})"
        )
    idx = np.array([index[s] for s in samples], dtype=np.intp)
    return K[np.ix_(idx, idx)]


def _write_rows(f, rows) -> None:
    for row in rows:
        f.write("\t".join(f"{v:.10g}" for v in row) + "\n")


def write_kinship_matrix(
    K: np.ndarray, path: Path, sample_ids: list[str] | None = None
) -> None:
    """Write K tab-separated at 10 significant digits, parent dirs created.

    A ``sample_ids`` header line is written first when given.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        if sample_ids is not None:
            f.write("\t".join(sample_ids) + "\n")
        _write_rows(f, K)


def eigen_paths(prefix: Path) -> tuple[Path, Path]:
    """Return the (eigenD, eigenU) file paths for an eigen file prefix."""
    prefix = str(prefix)
    return Path(f"{prefix}.eigenD.txt"), Path(f"{prefix}.eigenU.txt")


def read_eigen_files(
    prefix: Path, n_samples: int | None = None
) -> tuple[np.ndarray, np.ndarray]:
    """Read the cached eigendecomposition stored under ``prefix``.

    Args:
        prefix: Path prefix of the ``.eigenD.txt`` / ``.eigenU.txt`` pair.
        n_samples: When given, both files must describe this many samples.

    Returns:
        (S, U) as written by write_eigen_files().

    Raises:
        FileNotFoundError: If either file is missing.
        KinshipError: If U is not square, S and U disagree, or the sample
            count differs from ``n_samples``.
    """
    d_path, u_path = eigen_paths(prefix)
    missing = [str(p) for p in (d_path, u_path) if not p.exists()]
    if missing:
        raise FileNotFoundError(f"Eigen file not found: {', '.join(missing)}")

    S = np.loadtxt(d_path, dtype=np.float64, ndmin=1)
    U = np.loadtxt(u_path, dtype=np.float64, ndmin=2)

    if U.shape[0] != U.shape[1]:
        raise KinshipError(f"Eigenvectors in {u_path} must be square, got {U.shape}")
    if S.shape[0] != U.shape[0]:
        raise KinshipError(
            f"{S.shape[0]} eigenvalues in {d_path} does not match eigenvector "
            f"matrix {U.shape} in {u_path}"
        )
    if n_samples is not None and S.shape[0] != n_samples:
        raise KinshipError(
            f"Eigen files under {prefix} hold {S.shape[0]} samples, "
            f"expected n_samples={n_samples}"
        )
    return S, U


def write_eigen_files(
    eigenvalues: np.ndarray, eigenvectors: np.ndarray, prefix: Path
) -> tuple[Path, Path]:
    """Cache an eigendecomposition under ``prefix``; returns (eigenD, eigenU) paths."""
    d_path, u_path = eigen_paths(prefix)
    d_path.parent.mkdir(parents=True, exist_ok=True)

    with open(d_path, "w") as f:
        _write_rows(f, np.asarray(eigenvalues)[:, None])
    with open(u_path, "w") as f:
        _write_rows(f, eigenvectors)
    return d_path, u_path
