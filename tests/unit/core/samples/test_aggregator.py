from __future__ import annotations

"""
Unit tests for per-sample aggregation.

Verifies:
1. Features sharing a display taxon are folded into one view taxon.
2. Relative abundances sum to 1 and handle zero-total samples.
3. Unknown feature IDs surface as NotFoundError.
"""

import pytest

from taxabars.core.samples.aggregator import compute_relative_abundance, project_sample
from taxabars.domain.errors import NotFoundError
from taxabars.domain.sample_models import Feature, Sample


def test_basic_grouping(tree, projector) -> None:
    """TC-01: f1+f2 fold into 'a;b', f3 into 'a;x' at depth 2."""
    projector.set_display_depth(2)
    sample = Sample.from_mapping("s1", {"f1": 0.2, "f2": 0.3, "f3": 0.5})

    view_taxa = project_sample(sample, tree, projector)
    compute_relative_abundance(view_taxa)

    by_label = {vt.label: vt for vt in view_taxa}
    assert set(by_label) == {"a;b", "a;x"}
    assert by_label["a;b"].abundance == pytest.approx(0.5)
    assert by_label["a;b"].relative_abundance == pytest.approx(0.5)
    assert by_label["a;x"].abundance == pytest.approx(0.5)
    assert [f.feature_id for f in by_label["a;b"].features] == ["f1", "f2"]


def test_first_encounter_order(tree, projector) -> None:
    projector.set_display_depth(2)
    sample = Sample.from_mapping("s", {"f3": 1.0, "f1": 1.0})
    assert [vt.label for vt in project_sample(sample, tree, projector)] == ["a;x", "a;b"]


def test_relative_abundance_closure(tree, projector) -> None:
    projector.set_display_depth(3)
    sample = Sample.from_mapping("s", {"f1": 7.0, "f2": 11.0, "f3": 13.0})
    view_taxa = project_sample(sample, tree, projector)
    compute_relative_abundance(view_taxa)
    assert abs(sum(vt.relative_abundance for vt in view_taxa) - 1.0) <= 1e-9


def test_zero_total_sample() -> None:
    view_taxa = []
    compute_relative_abundance(view_taxa)
    assert view_taxa == []


def test_zero_abundance_features_get_zero_share(tree, projector) -> None:
    sample = Sample("s", features=(Feature("f1", 0.0), Feature("f3", 0.0)))
    view_taxa = project_sample(sample, tree, projector)
    compute_relative_abundance(view_taxa)
    assert [vt.relative_abundance for vt in view_taxa] == [0.0]


def test_unknown_feature(tree, projector) -> None:
    sample = Sample.from_mapping("s", {"ghost": 1.0})
    with pytest.raises(NotFoundError):
        project_sample(sample, tree, projector)
