from __future__ import annotations

"""
Unit tests for view taxon filters and sorting.

Verifies:
1. Default ordering (mean relative abundance, descending).
2. Abundance and prevalence filters, and their removal.
3. Input validation of operators, kinds and sort keys.
"""

import pytest

from taxabars.core.pipeline.session import run_projection
from taxabars.core.samples.controls import FeatureControls


@pytest.fixture
def rendered(tree, projector, samples):
    projector.set_display_depth(2)
    run_projection(tree, projector, samples)
    return samples


def test_default_sort_is_mean_descending(rendered) -> None:
    controls = FeatureControls()
    assert controls.sort.name == "mean relative abundance descending"
    s1 = rendered[0]
    controls.apply(s1)
    assert [vt.label for vt in s1.view_taxa] == ["a;x", "a;b"]


def test_sort_ascending(rendered) -> None:
    controls = FeatureControls()
    controls.set_sort("mean relative abundance", ascending=True)
    controls.apply(rendered[0])
    assert [vt.label for vt in rendered[0].view_taxa] == ["a;b", "a;x"]


def test_sort_by_prevalence(rendered) -> None:
    controls = FeatureControls()
    controls.set_sort("prevalence")
    controls.apply(rendered[0])
    assert rendered[0].view_taxa[0].label == "a;x"


def test_abundance_filter(rendered) -> None:
    controls = FeatureControls()
    f = controls.add_abundance_filter(0.6, ">")
    assert f.name == "abundance > 0.6"
    controls.apply(rendered[0])
    controls.apply(rendered[1])
    assert rendered[0].view_taxa == []
    assert [vt.label for vt in rendered[1].view_taxa] == ["a;x"]


def test_prevalence_filters(rendered) -> None:
    controls = FeatureControls()
    controls.add_prevalence_filter(2, kind="absolute", operator=">")
    controls.apply(rendered[0])
    assert [vt.label for vt in rendered[0].view_taxa] == ["a;x"]


def test_prevalence_proportion_less_than(rendered) -> None:
    controls = FeatureControls()
    controls.add_prevalence_filter(0.75, operator="<")
    controls.apply(rendered[0])
    assert [vt.label for vt in rendered[0].view_taxa] == ["a;b"]


def test_remove_filter() -> None:
    controls = FeatureControls()
    f = controls.add_abundance_filter(0.1)
    assert controls.remove_filter(f.name)
    assert not controls.remove_filter(f.name)
    assert controls.filters == []


def test_invalid_arguments() -> None:
    controls = FeatureControls()
    with pytest.raises(ValueError):
        controls.add_abundance_filter(0.1, ">=")
    with pytest.raises(ValueError):
        controls.add_prevalence_filter(0.1, kind="relative")
    with pytest.raises(ValueError):
        controls.set_sort("name")


def test_relative_abundance_sum_after_filtering(rendered) -> None:
    s1 = rendered[0]
    assert s1.relative_abundance_sum() == pytest.approx(1.0)
    controls = FeatureControls()
    controls.add_abundance_filter(0.4, ">")
    controls.apply(s1)
    assert s1.relative_abundance_of("a;b") == pytest.approx(0.5)
    assert s1.relative_abundance_of("a;zzz") == 0.0


def test_filter_bounds_are_inclusive(rendered) -> None:
    s1, s2 = rendered
    controls = FeatureControls()
    controls.add_abundance_filter(0.5, ">")
    controls.add_abundance_filter(1.0, "<")
    controls.apply(s1)
    controls.apply(s2)
    assert sorted(vt.label for vt in s1.view_taxa) == ["a;b", "a;x"]
    assert [vt.label for vt in s2.view_taxa] == ["a;x"]

    prevalence = FeatureControls()
    prevalence.add_prevalence_filter(1, kind="absolute", operator="<")
    prevalence.apply(s1)
    assert [vt.label for vt in s1.view_taxa] == ["a;b"]
