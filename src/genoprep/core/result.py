"""Ordered holder for one row of per-marker output.

Model-fitting stages register their output columns once with add_header(),
then fill values per marker and write tab-separated lines.
"""

from __future__ import annotations

MISSING_VALUE = "NA"


class Result:
    """Ordered mapping from output column name to formatted value."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def add_header(self, key: str) -> None:
        """Register an output column; re-adding an existing key is a no-op."""
        self._values.setdefault(key, MISSING_VALUE)

    def update_value(self, key: str, value) -> None:
        """Set a column value. Floats are formatted with ``%g``.

        Raises:
            KeyError: If ``key`` was never registered with add_header().
        """
        if key not in self._values:
            raise KeyError(f"Result has no column '{key}'")
        if isinstance(value, float):
            self._values[key] = f"{value:g}"
        else:
            self._values[key] = str(value)

    def clear_value(self) -> None:
        """Reset every value to NA, keeping the columns."""
        for key in self._values:
            self._values[key] = MISSING_VALUE

    def get(self, key: str) -> str:
        return self._values[key]

    @property
    def headers(self) -> list[str]:
        return list(self._values)

    def header_line(self) -> str:
        return "\t".join(self._values)

    def value_line(self) -> str:
        return "\t".join(self._values.values())

    def __len__(self) -> int:
        return len(self._values)
