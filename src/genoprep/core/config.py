"""Configuration for genoprep consolidation.

This module contains the missing-data strategy enum and the dataclass that
configures a DataConsolidator.
"""

from dataclasses import dataclass
from enum import Enum


class Strategy(Enum):
    """How consolidation handles missing genotypes.

    Attributes:
        UNINITIALIZED: No strategy chosen; consolidation fails.
        IMPUTE_MEAN: Impute missing genotypes to the marker mean dosage.
        IMPUTE_HWE: Impute missing genotypes by sampling HWE genotype classes.
        DROP: Drop every individual with any missing genotype.
    """

    UNINITIALIZED = 0
    IMPUTE_MEAN = 1
    IMPUTE_HWE = 2
    DROP = 3

    @property
    def imputes(self) -> bool:
        """True for the strategies that fill missing genotypes."""
        return self in (Strategy.IMPUTE_MEAN, Strategy.IMPUTE_HWE)


@dataclass
class ConsolidationConfig:
    """Configuration for a DataConsolidator.

    Attributes:
        strategy: Missing-data strategy used by consolidate().
        seed: Seed for the consolidator's own random generator (used by
            IMPUTE_HWE). None draws fresh OS entropy.
        par_build: Genome build ("hg19" or "hg38") for the default
            pseudoautosomal region table. None leaves the PAR classifier
            unset.
    """

    strategy: Strategy = Strategy.UNINITIALIZED
    seed: int | None = None
    par_build: str | None = None
