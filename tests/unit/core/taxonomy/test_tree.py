from __future__ import annotations

"""
Unit tests for the Taxonomic Hierarchy.

Verifies:
1. Construction from lineage rows (prefix sharing, feature index).
2. Malformed path handling (abort vs. skip).
3. Depth, ancestor and descendant queries.
4. Lineage strings and lookups by lineage or feature ID.
"""

import pytest

from taxabars.core.taxonomy.tree import TaxonTree
from taxabars.domain.errors import (
    InvalidDepthError,
    InvariantViolation,
    MalformedPathError,
    NotFoundError,
)


# -----------------------------------------------------------------------------
# CONSTRUCTION
# -----------------------------------------------------------------------------

def test_build_shares_common_prefixes(tree: TaxonTree) -> None:
    """TC-01: 'a' and 'a;b' are created once for three rows."""
    assert len(tree) == 6
    assert [t.name for t in tree.roots] == ["a"]
    a = tree.roots[0]
    assert [c.name for c in tree.children(a)] == ["b", "x"]


def test_build_returns_merged_row_count() -> None:
    t = TaxonTree()
    assert t.build([("f1", ["a", "b"]), ("f2", ["a", "c"])]) == 2


def test_build_drops_empty_segments() -> None:
    t = TaxonTree.from_rows([("f1", ["a", "", "b"])])
    assert t.lineage(t.find_leaf_by_feature_id("f1")) == "a;b"


def test_build_rejects_empty_path_by_default() -> None:
    """TC-02: An empty lineage aborts the build."""
    with pytest.raises(MalformedPathError):
        TaxonTree.from_rows([("f1", ["a"]), ("f2", [])])


def test_build_skips_empty_paths_when_requested() -> None:
    t = TaxonTree.from_rows([("f1", ["a"]), ("f2", []), ("f3", ["", ""])], skip_malformed=True)
    assert t.has_feature("f1")
    assert not t.has_feature("f2")
    assert not t.has_feature("f3")


def test_same_feature_twice_on_same_leaf_is_idempotent() -> None:
    t = TaxonTree.from_rows([("f1", ["a", "b"]), ("f1", ["a", "b"])])
    assert t.find_leaf_by_feature_id("f1").feature_ids == ["f1"]


def test_feature_on_two_leaves_is_an_invariant_violation() -> None:
    with pytest.raises(InvariantViolation):
        TaxonTree.from_rows([("f1", ["a", "b"]), ("f1", ["a", "c"])])


def test_multiple_top_level_taxa() -> None:
    t = TaxonTree.from_rows([("f1", ["Bacteria", "p1"]), ("f2", ["Archaea", "p2"])])
    assert [r.name for r in t.roots] == ["Bacteria", "Archaea"]
    assert all(t.parent(r) is None for r in t.roots)


# -----------------------------------------------------------------------------
# STRUCTURAL QUERIES
# -----------------------------------------------------------------------------

def test_depth_counts_top_level_as_one(tree: TaxonTree) -> None:
    c1 = tree.find_leaf_by_feature_id("f1")
    assert tree.depth(tree.roots[0]) == 1
    assert tree.depth(c1) == 3


def test_parent_depth_is_one_less(tree: TaxonTree) -> None:
    for taxon in tree:
        parent = tree.parent(taxon)
        if parent is not None:
            assert tree.depth(parent) == tree.depth(taxon) - 1


def test_descendants_preorder(tree: TaxonTree) -> None:
    a = tree.roots[0]
    assert [t.name for t in tree.descendants(a)] == ["a", "b", "c1", "c2", "x", "y"]


def test_descendants_at_depth(tree: TaxonTree) -> None:
    a = tree.roots[0]
    assert [t.name for t in tree.descendants_at_depth(a, 3)] == ["c1", "c2", "y"]
    assert tree.descendants_at_depth(a, 1) == [a]
    assert tree.descendants_at_depth(a, 4) == []


def test_descendants_at_depth_above_taxon_is_empty(tree: TaxonTree) -> None:
    b = tree.find_by_lineage("a;b")
    assert tree.descendants_at_depth(b, 1) == []


def test_ancestors_from_top_level_down(tree: TaxonTree) -> None:
    c1 = tree.find_leaf_by_feature_id("f1")
    assert [t.name for t in tree.ancestors(c1)] == ["a", "b", "c1"]


def test_ancestor_at_depth(tree: TaxonTree) -> None:
    c1 = tree.find_leaf_by_feature_id("f1")
    assert tree.ancestor_at_depth(c1, 2).name == "b"
    assert tree.ancestor_at_depth(c1, 3) is c1


def test_ancestor_at_depth_deeper_than_taxon(tree: TaxonTree) -> None:
    b = tree.find_by_lineage("a;b")
    with pytest.raises(InvalidDepthError):
        tree.ancestor_at_depth(b, 3)


def test_max_leaf_depth_and_leaves(tree: TaxonTree) -> None:
    assert tree.max_leaf_depth() == 3
    assert {t.name for t in tree.leaves()} == {"c1", "c2", "y"}
    assert TaxonTree().max_leaf_depth() == 0


# -----------------------------------------------------------------------------
# LOOKUPS
# -----------------------------------------------------------------------------

def test_find_leaf_by_feature_id(tree: TaxonTree) -> None:
    assert tree.find_leaf_by_feature_id("f3").name == "y"
    with pytest.raises(NotFoundError):
        tree.find_leaf_by_feature_id("missing")


def test_lineage_is_unique_per_node(tree: TaxonTree) -> None:
    lineages = [tree.lineage(t) for t in tree]
    assert len(set(lineages)) == len(lineages)
    assert tree.lineage(tree.find_leaf_by_feature_id("f2")) == "a;b;c2"


def test_find_by_lineage_trims_segments(tree: TaxonTree) -> None:
    assert tree.find_by_lineage(" a ; x ;").name == "x"


def test_find_by_lineage_unknown(tree: TaxonTree) -> None:
    with pytest.raises(NotFoundError):
        tree.find_by_lineage("a;zzz")
    with pytest.raises(NotFoundError):
        tree.find_by_lineage(";;")


def test_custom_delimiter() -> None:
    t = TaxonTree.from_rows([("f1", ["k", "p"])], delimiter="|")
    assert t.lineage(t.find_leaf_by_feature_id("f1")) == "k|p"
    assert t.find_by_lineage("k|p").name == "p"
