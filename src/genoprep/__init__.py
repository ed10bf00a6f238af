"""genoprep: genotype, phenotype and covariate consolidation.

genoprep prepares individual-aligned genotype, phenotype and covariate
matrices for genetic association models. It handles missing genotypes
(mean imputation, HWE imputation or dropping individuals), derives
minor-allele and dominant/recessive encodings, computes per-marker QC
statistics and holds kinship matrices for mixed-model fitting.

Key features:
- Three missing-data strategies with aligned genotype/phenotype/covariate rows
- Genotype counting by sex and case/control status, with an exact HWE test
- Kinship and eigendecomposition loading for autosomes and chromosome X

Example:
    >>> from genoprep import ConsolidationConfig, DataConsolidator, Strategy
    >>> dc = DataConsolidator(ConsolidationConfig(strategy=Strategy.IMPUTE_MEAN))
    >>> dc.consolidate(pheno, cov, geno)
    >>> X = dc.get_flipped_to_minor_polymorphic_genotype()
"""

from importlib.metadata import version

from genoprep.utils.logging import setup_logging

__version__ = version("genoprep")

# INFO to stdout on import; call setup_logging() or logger.remove()/add() to change
setup_logging()

from genoprep.consolidator import (  # noqa: E402
    ConsolidationError,
    DataConsolidator,
    PhenotypeFilter,
    Sex,
)
from genoprep.core import (  # noqa: E402
    ConsolidationConfig,
    GenotypeCounter,
    LabeledMatrix,
    ParRegion,
    Result,
    Strategy,
)
from genoprep.kinship import KinshipError, KinshipHolder, KinshipRegion  # noqa: E402

__all__ = [
    "ConsolidationConfig",
    "ConsolidationError",
    "DataConsolidator",
    "GenotypeCounter",
    "KinshipError",
    "KinshipHolder",
    "KinshipRegion",
    "LabeledMatrix",
    "ParRegion",
    "PhenotypeFilter",
    "Result",
    "Sex",
    "Strategy",
    "__version__",
]
