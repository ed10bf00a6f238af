"""Core data structures and algorithms for genoprep.

This package contains:
- matrix: Column-labeled matrix container
- counter: Per-marker genotype counting and HWE exact test
- impute: Mean and HWE-frequency imputation of missing genotypes
- snp_filter: Missing and monomorphic marker filters
- encoding: Minor allele recoding and dominant/recessive coding
- par_region: Pseudoautosomal region lookup
- regression_check: Sanity checks before regression
- result: Ordered output row holder
- config: Strategy enum and configuration dataclass
"""

from genoprep.core.config import ConsolidationConfig, Strategy
from genoprep.core.counter import GenotypeCounter, hwe_exact_pvalue
from genoprep.core.encoding import (
    code_genotype_for_model,
    convert_to_minor_allele_count,
)
from genoprep.core.impute import (
    impute_genotype_by_frequency,
    impute_genotype_to_mean,
    observed_allele_frequency,
)
from genoprep.core.matrix import LabeledMatrix
from genoprep.core.par_region import ParRegion
from genoprep.core.regression_check import (
    build_covariate_matrix,
    check_colinearity,
    check_predictor,
    pre_regression_check,
)
from genoprep.core.result import Result
from genoprep.core.snp_filter import (
    has_missing_marker,
    is_monomorphic_marker,
    remove_missing_marker,
    remove_monomorphic_marker,
)

__all__ = [
    "ConsolidationConfig",
    "GenotypeCounter",
    "LabeledMatrix",
    "ParRegion",
    "Result",
    "Strategy",
    "build_covariate_matrix",
    "check_colinearity",
    "check_predictor",
    "code_genotype_for_model",
    "convert_to_minor_allele_count",
    "has_missing_marker",
    "hwe_exact_pvalue",
    "impute_genotype_by_frequency",
    "impute_genotype_to_mean",
    "is_monomorphic_marker",
    "observed_allele_frequency",
    "pre_regression_check",
    "remove_missing_marker",
    "remove_monomorphic_marker",
]
