"""Pytest fixtures for genoprep test suite."""

from __future__ import annotations

import numpy as np
import pytest

from genoprep import ConsolidationConfig, DataConsolidator, LabeledMatrix, Strategy
from genoprep.utils.logging import WarnOnce

# =============================================================================
# Test Tier System
# =============================================================================
#
# tier0 - Fast unit tests (pure computation, tmp_path I/O only)
#   Run: pytest -m tier0
#
# tier1 - End-to-end consolidation workflows (consolidate + accessors +
#   counting + kinship on one dataset)
#   Run: pytest -m tier1
# =============================================================================


@pytest.fixture
def genotype() -> LabeledMatrix:
    """5 individuals x 3 markers, individuals 1 and 3 have missing calls.

    Marker 0: observed 0, 1, 2, 2 (AF 5/8), individual 1 missing
    Marker 1: observed 1, 1, 1, 1 (monomorphic), individual 3 missing
    Marker 2: observed 2, 2, 1, 2, 2 (no missing, AF 0.9)
    """
    return LabeledMatrix.from_array(
        [
            [0, 1, 2],
            [-1, 1, 2],
            [1, 1, 1],
            [2, -1, 2],
            [2, 1, 2],
        ],
        ["1:1000", "1:2000", "X:3000000"],
    )


@pytest.fixture
def phenotype() -> LabeledMatrix:
    return LabeledMatrix.from_array([[0], [1], [0], [1], [1]], ["disease"])


@pytest.fixture
def covariate() -> LabeledMatrix:
    return LabeledMatrix.from_array(
        [[1, 30.0], [1, 42.0], [1, 51.0], [1, 28.0], [1, 39.0]], ["intercept", "age"]
    )


@pytest.fixture
def row_labels() -> list[str]:
    return ["s1", "s2", "s3", "s4", "s5"]


@pytest.fixture
def warn_once() -> WarnOnce:
    """Fresh warn-once registry so each test sees every warning site armed."""
    return WarnOnce()


@pytest.fixture
def make_consolidator(warn_once):
    """Factory for consolidators with an isolated warn-once registry."""

    def _make(strategy: Strategy = Strategy.UNINITIALIZED, seed: int = 42, **kwargs):
        config = ConsolidationConfig(strategy=strategy, seed=seed, **kwargs)
        return DataConsolidator(config, warnings=warn_once)

    return _make


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)
