"""Data consolidation before model fitting.

DataConsolidator cleans individual-aligned genotype, phenotype and
covariate matrices before they are handed to an association model:

- handle missing genotypes: impute to the mean, impute by HWE, or drop
  individuals with missing genotypes together with their phenotypes and
  covariates
- derive minor-allele and dominant/recessive encodings
- count raw genotypes by sex and phenotype for QC
- hold kinship matrices for autosomes and chromosome X

Example:
    >>> from genoprep import ConsolidationConfig, DataConsolidator, LabeledMatrix, Strategy
    >>> dc = DataConsolidator(ConsolidationConfig(strategy=Strategy.DROP))
    >>> geno = LabeledMatrix.from_array([[0, 1], [-1, 2], [2, 2]], ["1:100", "1:200"])
    >>> pheno = LabeledMatrix.from_array([[0], [1], [1]], ["trait"])
    >>> cov = LabeledMatrix.empty(3, 0)
    >>> dc.consolidate(pheno, cov, geno)
    >>> dc.get_genotype().rows
    2
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import IntEnum
from pathlib import Path

import numpy as np
from loguru import logger

from genoprep.core.config import ConsolidationConfig, Strategy
from genoprep.core.counter import GenotypeCounter
from genoprep.core.encoding import (
    DOMINANT_THRESHOLD,
    RECESSIVE_THRESHOLD,
    code_genotype_for_model,
    convert_to_minor_allele_count,
)
from genoprep.core.impute import impute_genotype_by_frequency, impute_genotype_to_mean
from genoprep.core.matrix import LabeledMatrix
from genoprep.core.par_region import ParRegion
from genoprep.core.regression_check import (
    check_colinearity,
    check_predictor,
    pre_regression_check,
)
from genoprep.core.result import Result
from genoprep.core.snp_filter import remove_monomorphic_marker
from genoprep.kinship.holder import KinshipHolder, KinshipRegion
from genoprep.utils.logging import CODING_WARNINGS, WarnOnce


class Sex(IntEnum):
    """PLINK sex codes used to filter individuals (negative means any)."""

    ANY = -1
    MALE = 1
    FEMALE = 2


class PhenotypeFilter(IntEnum):
    """PLINK phenotype codes used to filter individuals (negative means any).

    PLINK codes controls as 1 and cases as 2, while phenotypes are stored
    internally as 0 and 1, so a stored value v matches PLINK code v + 1.
    """

    ANY = -1
    CTRL = 1
    CASE = 2


class ConsolidationError(ValueError):
    """Raised when consolidate() cannot apply a missing-data strategy."""


# count_raw_genotype status codes
COUNT_OK = 0
COUNT_BAD_COLUMN = -1
COUNT_BAD_FILTER = -2
COUNT_NO_METADATA = -3


def _copy_col_names(src: LabeledMatrix, dest: LabeledMatrix) -> None:
    """Give ``dest`` the column count and labels of ``src``, keeping its rows."""
    dest.resize(dest.rows, src.cols)
    dest.col_labels = list(src.col_labels)


def _aligned_covariate(cov: LabeledMatrix, n_rows: int) -> LabeledMatrix:
    # A covariate matrix without columns carries no row information
    if cov.cols == 0:
        return LabeledMatrix(np.zeros((n_rows, 0)), [])
    return cov.copy()


class DataConsolidator:
    """Cleans genotype, phenotype and covariate data before model fitting.

    A consolidator owns its matrices; it cannot be copied. Construct one per
    analysis and pass it by reference to the fitting stage.

    Args:
        config: Strategy, random seed and PAR build. Defaults to an
            uninitialized strategy.
        warnings: Warn-once registry for misuse warnings. Defaults to the
            process-wide CODING_WARNINGS.
    """

    def __init__(
        self,
        config: ConsolidationConfig | None = None,
        warnings: WarnOnce | None = None,
    ) -> None:
        config = config or ConsolidationConfig()
        self.strategy = config.strategy
        self.rng = np.random.default_rng(config.seed)
        self.warnings = warnings if warnings is not None else CODING_WARNINGS

        self.genotype = LabeledMatrix.empty()
        self.original_genotype = LabeledMatrix.empty()
        self.original_phenotype = LabeledMatrix.empty()
        self.flipped_to_minor_genotype = LabeledMatrix.empty()
        self.phenotype = LabeledMatrix.empty()
        self.covariate = LabeledMatrix.empty()
        self.weight = np.zeros(0)
        self.result = Result()
        self.phenotype_updated = False
        self.covariate_updated = False
        self.original_row_label: list[str] = []
        self.row_label: list[str] = []

        self.kinship = {region: KinshipHolder() for region in KinshipRegion}

        # sex chromosome adjustment
        self.sex: Sequence[int] | None = None
        self.par_region = ParRegion(config.par_build) if config.par_build else None

        self._handlers = {
            Strategy.IMPUTE_MEAN: self._consolidate_impute_mean,
            Strategy.IMPUTE_HWE: self._consolidate_impute_hwe,
            Strategy.DROP: self._consolidate_drop,
        }

    def __copy__(self):
        raise TypeError("DataConsolidator cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("DataConsolidator cannot be copied")

    def set_strategy(self, strategy: Strategy) -> None:
        self.strategy = Strategy(strategy)

    def get_strategy(self) -> Strategy:
        return self.strategy

    def consolidate(
        self, pheno: LabeledMatrix, cov: LabeledMatrix, geno: LabeledMatrix
    ) -> None:
        """Consolidate phenotype, covariate and genotype matrices.

        The three inputs must list the same individuals in the same order.
        An empty covariate matrix (no columns) is allowed; callers needing
        an intercept use build_covariate_matrix().

        Args:
            pheno: Phenotype matrix (n_individuals, n_traits).
            cov: Covariate matrix (n_individuals, n_covariates).
            geno: Genotype matrix (n_individuals, n_markers), negative
                values are missing.

        Raises:
            ValueError: If the inputs have different row counts.
            ConsolidationError: If the strategy is UNINITIALIZED. Only the
                genotype snapshot and column labels are updated in that case.
        """
        n = geno.rows
        if pheno.rows != n or (cov.cols > 0 and cov.rows != n):
            msg = (
                f"Cannot consolidate misaligned inputs: genotype has {n} rows, "
                f"phenotype {pheno.rows}, covariate {cov.rows}"
            )
            logger.error(msg)
            raise ValueError(msg)
        if self.original_row_label and len(self.original_row_label) != n:
            msg = (
                f"Row labels list {len(self.original_row_label)} individuals "
                f"but genotype has {n} rows"
            )
            logger.error(msg)
            raise ValueError(msg)

        self.original_genotype = geno.copy()
        self.original_phenotype = pheno.copy()
        self.genotype = geno.copy()
        cov = _aligned_covariate(cov, n)
        _copy_col_names(pheno, self.phenotype)
        _copy_col_names(cov, self.covariate)

        handler = self._handlers.get(self.strategy)
        if handler is None:
            msg = "Uninitialized consolidation methods to handle missing data!"
            logger.error(msg)
            raise ConsolidationError(msg)
        handler(pheno, cov)
        logger.debug(
            f"Consolidated {self.genotype.rows}/{n} individuals and "
            f"{self.genotype.cols} markers ({self.strategy.name})"
        )

    def _consolidate_impute_mean(
        self, pheno: LabeledMatrix, cov: LabeledMatrix
    ) -> None:
        impute_genotype_to_mean(self.genotype)
        if self.phenotype != pheno:
            self.phenotype = pheno.copy()
            self.phenotype_updated = True
        else:
            self.phenotype_updated = False
        if self.covariate != cov:
            self.covariate = cov.copy()
            self.covariate_updated = True
        else:
            self.covariate_updated = False

    def _consolidate_impute_hwe(
        self, pheno: LabeledMatrix, cov: LabeledMatrix
    ) -> None:
        impute_genotype_by_frequency(self.genotype, self.rng)
        self.phenotype = pheno.copy()
        self.covariate = cov.copy()
        self.phenotype_updated = self.covariate_updated = True

    def _consolidate_drop(self, pheno: LabeledMatrix, cov: LabeledMatrix) -> None:
        # Keep individuals (rows) without any missing marker
        keep = ~np.any(self.genotype.values < 0, axis=1)
        kept_rows = np.flatnonzero(keep)

        self.genotype = LabeledMatrix(
            self.genotype.values[kept_rows], self.genotype.col_labels
        )
        self.covariate = LabeledMatrix(cov.values[kept_rows], cov.col_labels)
        self.phenotype = LabeledMatrix(pheno.values[kept_rows], pheno.col_labels)
        if self.original_row_label:
            self.row_label = [self.original_row_label[i] for i in kept_rows]
        self.phenotype_updated = self.covariate_updated = True

        n_dropped = len(keep) - len(kept_rows)
        if n_dropped:
            logger.info(
                f"Dropped {n_dropped} of {len(keep)} individuals with missing genotypes"
            )

    def set_phenotype_name(self, names: Sequence[str]) -> None:
        """Set the individual IDs, in the row order of the input matrices."""
        self.original_row_label = list(names)
        self.row_label = list(names)

    def get_row_label(self) -> list[str]:
        return self.row_label

    def get_genotype(self) -> LabeledMatrix:
        return self.genotype

    def get_original_genotype(self) -> LabeledMatrix:
        return self.original_genotype

    def get_flipped_to_minor_polymorphic_genotype(self) -> LabeledMatrix:
        """Consolidated genotype counting minor alleles, monomorphic markers removed."""
        convert_to_minor_allele_count(self.genotype, self.flipped_to_minor_genotype)
        remove_monomorphic_marker(self.flipped_to_minor_genotype)
        return self.flipped_to_minor_genotype

    def get_phenotype(self) -> LabeledMatrix:
        return self.phenotype

    def get_covariate(self) -> LabeledMatrix:
        return self.covariate

    def get_weight(self) -> np.ndarray:
        return self.weight

    def get_result(self) -> Result:
        return self.result

    def is_phenotype_updated(self) -> bool:
        return self.phenotype_updated

    def is_covariate_updated(self) -> bool:
        return self.covariate_updated

    # Genetic model coding

    def _code_genotype(self, site: str, threshold: float) -> LabeledMatrix:
        n = self.genotype.cols
        self.warnings.warn_if(n != 1, site, "Encoding only use the first variant!")
        if n != 1:
            logger.debug(f"Coding marker 0 of {n} ({self.genotype.rows} individuals)")
        return code_genotype_for_model(
            self.original_genotype, self.genotype, self.strategy, threshold
        )

    def code_genotype_for_dominant_model(self) -> LabeledMatrix:
        """Code the first marker as carrier (g > 0.5) vs non-carrier."""
        return self._code_genotype("dominant_coding", DOMINANT_THRESHOLD)

    def code_genotype_for_recessive_model(self) -> LabeledMatrix:
        """Code the first marker as two-copy carrier (g > 1.5) vs the rest."""
        return self._code_genotype("recessive_coding", RECESSIVE_THRESHOLD)

    # Stratified counting

    def count_raw_genotype(
        self,
        column_index: int,
        sex: Sex | int,
        phenotype: PhenotypeFilter | int,
        counter: GenotypeCounter,
    ) -> int:
        """Count pre-consolidation genotypes of one marker into ``counter``.

        Only individuals matching both filters are counted. Phenotype
        matching compares the stored 0/1 phenotype (first column) plus one
        against the PLINK code.

        Args:
            column_index: Marker column in the original genotype matrix.
            sex: Sex.ANY (or any negative value), Sex.MALE or Sex.FEMALE.
            phenotype: PhenotypeFilter.ANY (or any negative value), CTRL or CASE.
            counter: Counter receiving one add() per matching individual.

        Returns:
            0 on success, -1 if the column is out of range, -2 if a filter
            value is invalid, -3 if the sex vector (or phenotype, when
            filtering on it) is missing or does not match the genotype rows.
        """
        g = self.original_genotype
        if column_index < 0 or column_index >= g.cols:
            return COUNT_BAD_COLUMN
        sex = int(sex)
        phenotype = int(phenotype)
        filter_sex = sex >= 0
        filter_pheno = phenotype >= 0
        if filter_sex and sex not in (Sex.MALE, Sex.FEMALE):
            return COUNT_BAD_FILTER
        if filter_sex and (self.sex is None or len(self.sex) != g.rows):
            return COUNT_NO_METADATA
        if filter_pheno and phenotype not in (
            PhenotypeFilter.CTRL,
            PhenotypeFilter.CASE,
        ):
            return COUNT_BAD_FILTER
        pheno = self.original_phenotype
        if filter_pheno and (pheno.cols == 0 or pheno.rows != g.rows):
            return COUNT_NO_METADATA

        for i in range(g.rows):
            if filter_sex and self.sex[i] != sex:
                continue
            # + 1: PLINK uses 1 and 2 as ctrl and case, internally 0 and 1
            if filter_pheno and int(pheno.values[i, 0] + 1) != phenotype:
                continue
            counter.add(float(g.values[i, column_index]))

        return COUNT_OK

    def count_raw_genotype_all(self, column_index: int, counter: GenotypeCounter) -> int:
        return self.count_raw_genotype(
            column_index, Sex.ANY, PhenotypeFilter.ANY, counter
        )

    def count_raw_genotype_from_case(
        self, column_index: int, counter: GenotypeCounter
    ) -> int:
        return self.count_raw_genotype(
            column_index, Sex.ANY, PhenotypeFilter.CASE, counter
        )

    def count_raw_genotype_from_control(
        self, column_index: int, counter: GenotypeCounter
    ) -> int:
        return self.count_raw_genotype(
            column_index, Sex.ANY, PhenotypeFilter.CTRL, counter
        )

    def count_raw_genotype_from_female(
        self, column_index: int, counter: GenotypeCounter
    ) -> int:
        return self.count_raw_genotype(
            column_index, Sex.FEMALE, PhenotypeFilter.ANY, counter
        )

    def count_raw_genotype_from_female_case(
        self, column_index: int, counter: GenotypeCounter
    ) -> int:
        return self.count_raw_genotype(
            column_index, Sex.FEMALE, PhenotypeFilter.CASE, counter
        )

    def count_raw_genotype_from_female_control(
        self, column_index: int, counter: GenotypeCounter
    ) -> int:
        return self.count_raw_genotype(
            column_index, Sex.FEMALE, PhenotypeFilter.CTRL, counter
        )

    # Sex chromosome handling

    def set_sex(self, sex: Sequence[int] | None) -> None:
        """Set sex codes (1=male, 2=female, other=unknown), one per individual."""
        self.sex = sex

    def set_par_region(self, par_region) -> None:
        """Set the PAR classifier (any object with is_hemi_region(chrom, pos))."""
        self.par_region = par_region

    def is_hemi_region(self, column_index: int) -> bool:
        """Return True if genotype column ``column_index`` is a non-PAR X marker.

        The column label must look like ``chrom:pos``; labels that do not
        parse are reported as not hemizygous.
        """
        assert self.par_region is not None, "PAR region classifier is not set"
        if column_index < 0 or column_index >= self.genotype.cols:
            logger.error(
                f"Invalid hemizygous region check: column {column_index} out of "
                f"range for {self.genotype.cols} markers"
            )
            return False
        chrom, sep, rest = self.genotype.column_label(column_index).partition(":")
        if not sep:
            return False
        try:
            pos = int(rest.split(":")[0])
        except ValueError:
            return False
        return self.par_region.is_hemi_region(chrom, pos)

    # Checks before regression

    def pre_regression_check(
        self, pheno: LabeledMatrix | None = None, cov: LabeledMatrix | None = None
    ) -> int:
        return pre_regression_check(
            self.phenotype if pheno is None else pheno,
            self.covariate if cov is None else cov,
        )

    def check_colinearity(self, cov: LabeledMatrix | None = None) -> int:
        return check_colinearity(self.covariate if cov is None else cov)

    def check_predictor(
        self, pheno: LabeledMatrix | None = None, cov: LabeledMatrix | None = None
    ) -> int:
        return check_predictor(
            self.phenotype if pheno is None else pheno,
            self.covariate if cov is None else cov,
        )

    # Kinship

    def set_kinship_sample(self, samples: Sequence[str]) -> None:
        """Set the sample IDs kinship matrices are subset to, for every region."""
        for holder in self.kinship.values():
            holder.set_sample(list(samples))

    def set_kinship_file(self, region: KinshipRegion, file_name: str | Path) -> None:
        self.kinship[KinshipRegion(region)].set_file(file_name)

    def set_kinship_eigen_file(self, region: KinshipRegion, prefix: str | Path) -> None:
        self.kinship[KinshipRegion(region)].set_eigen_file(prefix)

    def load_kinship(self, region: KinshipRegion) -> None:
        """Load the kinship matrix of ``region``; loading twice is a no-op."""
        self.kinship[KinshipRegion(region)].load()

    def get_kinship_holder(self, region: KinshipRegion) -> KinshipHolder:
        return self.kinship[KinshipRegion(region)]

    def get_kinship_for_auto(self) -> np.ndarray | None:
        return self.kinship[KinshipRegion.AUTO].get_k()

    def get_kinship_u_for_auto(self) -> np.ndarray | None:
        return self.kinship[KinshipRegion.AUTO].get_u()

    def get_kinship_s_for_auto(self) -> np.ndarray | None:
        return self.kinship[KinshipRegion.AUTO].get_s()

    def has_kinship_for_auto(self) -> bool:
        return self.kinship[KinshipRegion.AUTO].is_loaded()

    def get_kinship_for_x(self) -> np.ndarray | None:
        return self.kinship[KinshipRegion.X].get_k()

    def get_kinship_u_for_x(self) -> np.ndarray | None:
        return self.kinship[KinshipRegion.X].get_u()

    def get_kinship_s_for_x(self) -> np.ndarray | None:
        return self.kinship[KinshipRegion.X].get_s()

    def has_kinship_for_x(self) -> bool:
        return self.kinship[KinshipRegion.X].is_loaded()

    def has_kinship(self) -> bool:
        return self.has_kinship_for_auto() or self.has_kinship_for_x()
