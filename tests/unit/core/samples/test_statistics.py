from __future__ import annotations

"""
Unit tests for cross-sample statistics.

Verifies:
1. Prevalence counts and proportions.
2. Mean relative abundance treats absent samples as zero.
3. Empty datasets are refused.
"""

import pytest

from taxabars.core.samples.aggregator import compute_relative_abundance, project_sample
from taxabars.core.samples.statistics import finalize, tally
from taxabars.domain.errors import EmptyDatasetError


def _project_all(tree, projector, samples):
    for sample in samples:
        sample.view_taxa = project_sample(sample, tree, projector)
        compute_relative_abundance(sample.view_taxa)
    counts, sums = tally(s.view_taxa for s in samples)
    for sample in samples:
        finalize(sample.view_taxa, counts, sums, len(samples))
    return {(s.sample_id, vt.label): vt for s in samples for vt in s.view_taxa}


def test_prevalence_and_mean(tree, projector, samples) -> None:
    projector.set_display_depth(2)
    units = _project_all(tree, projector, samples)

    ab = units[("s1", "a;b")]
    assert ab.prevalence == 1
    assert ab.prevalence_proportion == 0.5
    assert ab.mean_relative_abundance == pytest.approx(0.25)

    ax1, ax2 = units[("s1", "a;x")], units[("s2", "a;x")]
    assert ax1.prevalence == ax2.prevalence == 2
    assert ax1.prevalence_proportion == 1.0
    assert ax2.mean_relative_abundance == pytest.approx(0.75)


def test_prevalence_bounds(tree, projector, samples) -> None:
    for depth in (1, 2, 3):
        projector.set_display_depth(depth)
        for vt in _project_all(tree, projector, samples).values():
            assert 0.0 <= vt.prevalence_proportion <= 1.0
            assert vt.prevalence_proportion == vt.prevalence / len(samples)


def test_tally_keys_on_display_taxon(tree, projector, samples) -> None:
    projector.set_display_depth(1)
    for sample in samples:
        sample.view_taxa = project_sample(sample, tree, projector)
    counts, _ = tally(s.view_taxa for s in samples)
    assert counts == {tree.find_by_lineage("a"): 2}


def test_finalize_without_samples() -> None:
    with pytest.raises(EmptyDatasetError):
        finalize([], {}, {}, 0)
