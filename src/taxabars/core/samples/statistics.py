from __future__ import annotations

"""
Cross-Sample Statistics.

Two passes over the projected samples: `tally` accumulates prevalence
counts and relative abundance sums per display taxon, `finalize` writes
prevalence, prevalence proportion and mean relative abundance back onto
every view taxon. Samples lacking a taxon count as zero in the mean.
"""

from collections import Counter, defaultdict
from typing import Dict, Iterable, Sequence, Tuple

from taxabars.domain.errors import EmptyDatasetError
from taxabars.domain.sample_models import ViewTaxon
from taxabars.domain.taxon_models import Taxon

PrevalenceCounts = Dict[Taxon, int]
RelAbunSums = Dict[Taxon, float]


def tally(all_view_taxa: Iterable[Sequence[ViewTaxon]]) -> Tuple[PrevalenceCounts, RelAbunSums]:
    """
    Accumulate prevalence counts and relative abundance sums per display taxon.

    Args:
        all_view_taxa: The view taxa of each sample, one sequence per sample.

    Returns:
        Tuple[PrevalenceCounts, RelAbunSums]: Counts and sums keyed by taxon.
    """
    prevalence: Counter = Counter()
    rel_abun_sums: Dict[Taxon, float] = defaultdict(float)

    for view_taxa in all_view_taxa:
        for view_taxon in view_taxa:
            prevalence[view_taxon.taxon] += 1
            rel_abun_sums[view_taxon.taxon] += view_taxon.relative_abundance

    return dict(prevalence), dict(rel_abun_sums)


def finalize(
        view_taxa: Iterable[ViewTaxon],
        prevalence_counts: PrevalenceCounts,
        rel_abun_sums: RelAbunSums,
        sample_count: int,
) -> None:
    """
    Annotate view taxa with their cross-sample statistics, in place.

    Raises:
        EmptyDatasetError: If `sample_count` is not positive.
    """
    if sample_count <= 0:
        raise EmptyDatasetError("Cross-sample statistics need at least one sample.")

    for view_taxon in view_taxa:
        prevalence = prevalence_counts[view_taxon.taxon]
        view_taxon.prevalence = prevalence
        view_taxon.prevalence_proportion = prevalence / sample_count
        view_taxon.mean_relative_abundance = rel_abun_sums[view_taxon.taxon] / sample_count
