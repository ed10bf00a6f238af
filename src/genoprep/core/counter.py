"""Per-marker genotype counting for QC statistics.

GenotypeCounter accumulates hard calls or dosages one value at a time and
derives call rate, allele frequency, allele count and a Hardy-Weinberg
equilibrium p-value on demand.

Reference for the HWE exact test:
Wigginton JE, Cutler DJ, Abecasis GR. A note on exact tests of
Hardy-Weinberg equilibrium. Am J Hum Genet. 2005 May;76(5):887-93.
"""

from __future__ import annotations

# Dosage thresholds separating homRef / het / homAlt buckets
HET_LOWER = 2.0 / 3
HOM_ALT_LOWER = 4.0 / 3


class GenotypeCounter:
    """Counts either hard genotype calls or dosages for one marker.

    Dosages are bucketed as homRef (g < 2/3), het (2/3 <= g < 4/3) and homAlt
    (4/3 <= g <= 2). Negative values and values above 2 count as missing.
    Every value added increments the sample count, including missing ones.

    Example:
        >>> counter = GenotypeCounter()
        >>> for g in [0, 0, 1, 2, -1]:
        ...     counter.add(g)
        >>> counter.get_call_rate(), counter.get_af()
        (0.8, 0.3)
    """

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.n_hom_ref = 0
        self.n_het = 0
        self.n_hom_alt = 0
        self.n_missing = 0
        self.n_sample = 0
        self.sum_ac = 0.0

    def add(self, g: float) -> None:
        """Add one genotype or dosage value."""
        if g < 0:
            self.n_missing += 1
        elif g < HET_LOWER:
            self.n_hom_ref += 1
            self.sum_ac += g
        elif g < HOM_ALT_LOWER:
            self.n_het += 1
            self.sum_ac += g
        elif g <= 2.0:
            self.n_hom_alt += 1
            self.sum_ac += g
        else:
            self.n_missing += 1
        self.n_sample += 1

    def get_num_hom_ref(self) -> int:
        return self.n_hom_ref

    def get_num_het(self) -> int:
        return self.n_het

    def get_num_hom_alt(self) -> int:
        return self.n_hom_alt

    def get_num_missing(self) -> int:
        return self.n_missing

    def get_num_sample(self) -> int:
        return self.n_sample

    def get_call_rate(self) -> float:
        """Fraction of non-missing values, 0.0 if nothing was counted."""
        if not self.n_sample:
            return 0.0
        return 1.0 - self.n_missing / self.n_sample

    def get_af(self) -> float:
        """Alternative allele frequency, -1.0 if nothing was counted.

        The denominator is every value added, missing ones included.
        """
        if not self.n_sample:
            return -1.0
        return 0.5 * self.sum_ac / self.n_sample

    def get_ac(self) -> float:
        """Total alternative allele count (sum of non-missing dosages)."""
        return self.sum_ac

    def get_hwe(self) -> float:
        """Exact HWE p-value from the homRef/het/homAlt bucket counts."""
        return hwe_exact_pvalue(self.n_het, self.n_hom_ref, self.n_hom_alt)

    def to_dict(self) -> dict:
        """Summary of counts and derived statistics for QC reports."""
        return {
            "n_hom_ref": self.n_hom_ref,
            "n_het": self.n_het,
            "n_hom_alt": self.n_hom_alt,
            "n_missing": self.n_missing,
            "n_sample": self.n_sample,
            "call_rate": self.get_call_rate(),
            "af": self.get_af(),
            "ac": self.get_ac(),
            "hwe_p": self.get_hwe(),
        }


def hwe_exact_pvalue(n_het: int, n_hom_ref: int, n_hom_alt: int) -> float:
    """Compute the two-sided Hardy-Weinberg equilibrium exact test p-value.

    Sums the probabilities of every heterozygote count that is no more
    likely than the observed one, conditional on the allele counts.

    Degenerate markers (no genotypes, or one allele absent) return 1.0,
    so they pass HWE filtering by convention.

    Args:
        n_het: Number of heterozygous samples.
        n_hom_ref: Number of homozygous reference samples.
        n_hom_alt: Number of homozygous alternative samples.

    Returns:
        P-value in [0, 1]. Smaller values mean stronger departure from HWE.
    """
    n = n_het + n_hom_ref + n_hom_alt
    if n == 0:
        return 1.0

    n_rare_hom = min(n_hom_ref, n_hom_alt)
    rare = 2 * n_rare_hom + n_het
    if rare == 0:
        return 1.0

    het_probs = [0.0] * (rare + 1)

    # Start at the most likely heterozygote count, with the parity of `rare`
    mid = rare * (2 * n - rare) // (2 * n)
    if mid % 2 != rare % 2:
        mid += 1
    het_probs[mid] = 1.0
    total = 1.0

    curr_hom_rare = (rare - mid) // 2
    curr_hom_common = n - mid - curr_hom_rare
    curr_het = mid
    while curr_het >= 2:
        het_probs[curr_het - 2] = (
            het_probs[curr_het]
            * curr_het
            * (curr_het - 1.0)
            / (4.0 * (curr_hom_rare + 1.0) * (curr_hom_common + 1.0))
        )
        total += het_probs[curr_het - 2]
        curr_het -= 2
        curr_hom_rare += 1
        curr_hom_common += 1

    curr_hom_rare = (rare - mid) // 2
    curr_hom_common = n - mid - curr_hom_rare
    curr_het = mid
    while curr_het <= rare - 2:
        het_probs[curr_het + 2] = (
            het_probs[curr_het]
            * 4.0
            * curr_hom_rare
            * curr_hom_common
            / ((curr_het + 2.0) * (curr_het + 1.0))
        )
        total += het_probs[curr_het + 2]
        curr_het += 2
        curr_hom_rare -= 1
        curr_hom_common -= 1

    p_obs = het_probs[n_het] / total
    p_value = 0.0
    for p in het_probs:
        p /= total
        if p <= p_obs * (1 + 1e-10):
            p_value += p

    return min(1.0, p_value)
