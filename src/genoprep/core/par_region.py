"""Pseudoautosomal region (PAR) lookup for chromosome X.

Markers on chromosome X outside the pseudoautosomal regions are hemizygous
in males and need sex-aware handling. Coordinates are 1-based, inclusive.
"""

from loguru import logger

# (start, end) of PAR1 and PAR2 on chromosome X, per genome build
PAR_COORDINATES: dict[str, tuple[tuple[int, int], ...]] = {
    "hg19": ((60001, 2699520), (154931044, 155260560)),
    "hg38": ((10001, 2781479), (155701383, 156030895)),
}

X_CHROMOSOME_NAMES = frozenset({"X", "chrX", "23", "chr23"})


class ParRegion:
    """Classifies chromosome positions as hemizygous (non-PAR X) or not.

    Args:
        build: Genome build key of PAR_COORDINATES ("hg19" or "hg38").

    Raises:
        ValueError: If the build is unknown.
    """

    def __init__(self, build: str = "hg19") -> None:
        if build not in PAR_COORDINATES:
            raise ValueError(
                f"Unknown genome build '{build}', expected one of "
                f"{sorted(PAR_COORDINATES)}"
            )
        self.build = build
        self.regions = PAR_COORDINATES[build]
        logger.debug(f"Using {build} pseudoautosomal regions: {self.regions}")

    def is_par_region(self, chrom: str, pos: int) -> bool:
        """True if (chrom, pos) lies in PAR1 or PAR2 of chromosome X."""
        if chrom not in X_CHROMOSOME_NAMES:
            return False
        return any(start <= pos <= end for start, end in self.regions)

    def is_hemi_region(self, chrom: str, pos: int) -> bool:
        """True if (chrom, pos) is on chromosome X outside both PARs."""
        return chrom in X_CHROMOSOME_NAMES and not self.is_par_region(chrom, pos)
