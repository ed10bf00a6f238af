"""Column-labeled matrix container.

Genotype, phenotype and covariate data travel through genoprep as a numpy
array paired with one label per column (marker IDs such as ``"1:12345"``,
phenotype names, covariate names). Rows are individuals and carry no labels
here; individual IDs are tracked separately by the consolidator.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


@dataclass(eq=False)
class LabeledMatrix:
    """Container for a 2-D float matrix with column labels.

    Attributes:
        values: Matrix with shape (n_rows, n_cols), float64.
        col_labels: One label per column. Missing labels are empty strings.
    """

    values: np.ndarray = field(default_factory=lambda: np.zeros((0, 0)))
    col_labels: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        values = np.asarray(self.values, dtype=np.float64)
        if values.ndim == 1:
            values = values.reshape(-1, 1)
        if values.ndim != 2:
            raise ValueError(f"LabeledMatrix needs a 2-D array, got {values.ndim}D")
        self.values = values
        labels = [str(s) for s in self.col_labels]
        if len(labels) > values.shape[1]:
            raise ValueError(
                f"Got {len(labels)} column labels for {values.shape[1]} columns"
            )
        labels.extend([""] * (values.shape[1] - len(labels)))
        self.col_labels = labels

    @classmethod
    def from_array(
        cls, values, col_labels: list[str] | None = None
    ) -> LabeledMatrix:
        """Build a matrix from any array-like, copying the data."""
        return cls(np.array(values, dtype=np.float64), list(col_labels or []))

    @classmethod
    def empty(cls, rows: int = 0, cols: int = 0) -> LabeledMatrix:
        """Zero-filled matrix of the given shape with blank labels."""
        return cls(np.zeros((rows, cols)), [])

    @property
    def rows(self) -> int:
        """Number of rows (individuals)."""
        return self.values.shape[0]

    @property
    def cols(self) -> int:
        """Number of columns (markers, traits or covariates)."""
        return self.values.shape[1]

    @property
    def shape(self) -> tuple[int, int]:
        return self.values.shape

    def copy(self) -> LabeledMatrix:
        return LabeledMatrix(self.values.copy(), list(self.col_labels))

    def column_label(self, col: int) -> str:
        return self.col_labels[col]

    def set_column_label(self, col: int, label: str) -> None:
        self.col_labels[col] = label

    def resize(self, rows: int, cols: int) -> None:
        """Resize in place, keeping the overlapping block and zero-filling.

        Column labels are truncated or padded with empty strings.
        """
        resized = np.zeros((rows, cols), dtype=np.float64)
        keep_r = min(rows, self.rows)
        keep_c = min(cols, self.cols)
        resized[:keep_r, :keep_c] = self.values[:keep_r, :keep_c]
        self.values = resized
        labels = self.col_labels[:cols]
        labels.extend([""] * (cols - len(labels)))
        self.col_labels = labels

    def __getitem__(self, key):
        return self.values[key]

    def __setitem__(self, key, value) -> None:
        self.values[key] = value

    def __eq__(self, other: object) -> bool:
        # Value equality only: labels do not take part
        if not isinstance(other, LabeledMatrix):
            return NotImplemented
        return self.shape == other.shape and bool(
            np.array_equal(self.values, other.values)
        )

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result
