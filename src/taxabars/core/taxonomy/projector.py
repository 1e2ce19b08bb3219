from __future__ import annotations

"""
Taxonomic View Projector.

Holds the global display depth and the per-node expansion/collapse
overrides, and resolves which taxon each leaf is currently displayed as.

All override mutations go through `request_expansion` and
`request_collapse`, which enforce that no two overrides cover overlapping
ranges of the same lineage. Invalid requests return a rejected
`OverrideResult` and leave every node untouched.
"""

import logging
from typing import Dict, List, Optional

from taxabars.core.taxonomy.tree import TaxonTree
from taxabars.domain.errors import InvalidDepthError, InvariantViolation
from taxabars.domain.projection_models import (
    OverrideResult,
    RejectionReason,
    create_accepted_result,
    create_rejected_result,
)
from taxabars.domain.taxon_models import INACTIVE, CollapseFrom, ExpandTo, Override, Taxon

logger = logging.getLogger(__name__)

MIN_DISPLAY_DEPTH = 1


class ViewProjector:
    """
    Override state and display resolution for one `TaxonTree`.

    The projector assumes exclusive access while an operation runs; hosts
    that edit overrides concurrently with render passes must serialize them
    (see `TaxonomySession`).
    """

    def __init__(self, tree: TaxonTree, display_depth: int = MIN_DISPLAY_DEPTH):
        """
        Raises:
            InvalidDepthError: If a non-default `display_depth` falls outside
                `[1, max leaf depth]`.
        """
        self.tree = tree
        self._display_depth = MIN_DISPLAY_DEPTH
        if display_depth != MIN_DISPLAY_DEPTH:
            result = self.set_display_depth(display_depth)
            if not result:
                raise InvalidDepthError(result.message)

    @property
    def display_depth(self) -> int:
        return self._display_depth

    # -------------------------------------------------------------------------
    # GLOBAL DEPTH
    # -------------------------------------------------------------------------

    def set_display_depth(self, depth: int) -> OverrideResult:
        """
        Change the global display depth if it lies within `[1, max leaf depth]`.
        """
        maximum = self.tree.max_leaf_depth()
        if depth < MIN_DISPLAY_DEPTH:
            return self._reject(RejectionReason.BELOW_MINIMUM, depth=depth, minimum=MIN_DISPLAY_DEPTH)
        if depth > maximum:
            return self._reject(RejectionReason.EXCEEDS_MAXIMUM, depth=depth, maximum=maximum)

        self._display_depth = depth
        logger.debug(f"Display depth set to {depth}.")
        return create_accepted_result()

    # -------------------------------------------------------------------------
    # OVERRIDE REQUESTS
    # -------------------------------------------------------------------------

    def request_expansion(self, taxon: Taxon, to_depth: int) -> OverrideResult:
        """
        Reveal the descendants of `taxon` down to `to_depth`.

        Valid when `to_depth` is deeper than `taxon`, `taxon` has descendants
        at `to_depth`, and neither the subtree down to `to_depth` nor the
        ancestors of `taxon` carry an override covering it.
        """
        taxon_depth = self.tree.depth(taxon)
        label = self.tree.lineage(taxon)

        if to_depth <= taxon_depth:
            return self._reject(
                RejectionReason.NOT_DEEPER_THAN_TAXON, taxon=label, taxon_depth=taxon_depth, depth=to_depth
            )
        if not self.tree.descendants_at_depth(taxon, to_depth):
            return self._reject(RejectionReason.NO_DESCENDANTS_AT_DEPTH, taxon=label, depth=to_depth)
        if not self.is_subtree_clear(taxon, to_depth):
            return self._reject(RejectionReason.SUBTREE_NOT_CLEAR, taxon=label, depth=to_depth)

        blocker = self._covering_ancestor(taxon)
        if blocker is not None:
            return self._reject(
                RejectionReason.LINEAGE_NOT_CLEAR, taxon=label, ancestor=self.tree.lineage(blocker)
            )

        taxon.override = ExpandTo(to_depth)
        logger.info(f"Expansion added: {label} -> depth {to_depth}.")
        return create_accepted_result()

    def request_collapse(self, taxon: Taxon, to_depth: int) -> OverrideResult:
        """
        Merge the level of `taxon` into its ancestor at `to_depth`.

        The override is recorded on that ancestor, so it applies to the
        ancestor's whole subtree at the depth of `taxon`, not only to the
        lineage of `taxon`.
        """
        taxon_depth = self.tree.depth(taxon)
        label = self.tree.lineage(taxon)

        if to_depth < MIN_DISPLAY_DEPTH:
            return self._reject(RejectionReason.BELOW_MINIMUM, depth=to_depth, minimum=MIN_DISPLAY_DEPTH)
        if to_depth >= taxon_depth:
            return self._reject(
                RejectionReason.NOT_SHALLOWER_THAN_TAXON, taxon=label, taxon_depth=taxon_depth, depth=to_depth
            )

        ancestor = self.tree.ancestor_at_depth(taxon, to_depth)
        ancestor_label = self.tree.lineage(ancestor)

        if not self.is_subtree_clear(ancestor, taxon_depth):
            return self._reject(RejectionReason.SUBTREE_NOT_CLEAR, taxon=ancestor_label, depth=taxon_depth)

        blocker = self._covering_ancestor(ancestor)
        if blocker is not None:
            return self._reject(
                RejectionReason.LINEAGE_NOT_CLEAR, taxon=ancestor_label, ancestor=self.tree.lineage(blocker)
            )

        ancestor.override = CollapseFrom(taxon_depth)
        logger.info(f"Collapse added: depth {taxon_depth} of {ancestor_label} -> {ancestor_label}.")
        return create_accepted_result()

    def clear_expansion(self, taxon: Taxon) -> None:
        """Remove an expansion from `taxon`; no-op if none is active."""
        if isinstance(taxon.override, ExpandTo):
            taxon.override = INACTIVE
            logger.info(f"Expansion removed: {self.tree.lineage(taxon)}.")

    def clear_collapse(self, taxon: Taxon) -> None:
        """Remove a collapse recorded on `taxon`; no-op if none is active."""
        if isinstance(taxon.override, CollapseFrom):
            taxon.override = INACTIVE
            logger.info(f"Collapse removed: {self.tree.lineage(taxon)}.")

    def clear_all(self) -> None:
        for taxon in self.tree:
            taxon.override = INACTIVE

    def active_overrides(self) -> Dict[str, Override]:
        """Snapshot of every active override keyed by lineage string."""
        return {self.tree.lineage(t): t.override for t in self.tree if t.has_override}

    # -------------------------------------------------------------------------
    # RESOLUTION
    # -------------------------------------------------------------------------

    def resolve_display_taxon(self, leaf: Taxon) -> Taxon:
        """
        Return the taxon `leaf` is currently displayed as.

        Folds the leaf to the display depth, then follows an expansion on the
        folded node, else a collapse on one of its ancestors.

        Raises:
            InvariantViolation: If more than one ancestor collapse applies.
        """
        leaf_depth = self.tree.depth(leaf)
        if leaf_depth > self._display_depth:
            base = self.tree.ancestor_at_depth(leaf, self._display_depth)
        else:
            base = leaf

        expand_to = base.expand_to
        if expand_to is not None:
            if expand_to >= leaf_depth:
                return leaf
            return self.tree.ancestor_at_depth(leaf, expand_to)

        collapsed = [
            a for a in self.tree.ancestors(base)
            if a.collapse_from is not None and a.collapse_from >= self._display_depth
        ]
        if len(collapsed) > 1:
            labels = [self.tree.lineage(a) for a in collapsed]
            logger.error(f"Conflicting collapse ancestors for {self.tree.lineage(leaf)}: {labels}")
            raise InvariantViolation(f"Expected at most one collapse ancestor, found {labels}.")
        if collapsed:
            return collapsed[0]

        return base

    def display_taxon_for_feature(self, feature_id: str) -> Taxon:
        """Resolve the display taxon of the leaf classifying `feature_id`."""
        return self.resolve_display_taxon(self.tree.find_leaf_by_feature_id(feature_id))

    # -------------------------------------------------------------------------
    # VALIDATION HELPERS
    # -------------------------------------------------------------------------

    def is_subtree_clear(self, ancestor: Taxon, depth_bound: int) -> bool:
        """
        Return True if no node from `ancestor` down to `depth_bound` carries an override.
        """
        frontier: List[Taxon] = [ancestor]
        level = self.tree.depth(ancestor)
        while frontier and level <= depth_bound:
            if any(t.has_override for t in frontier):
                return False
            frontier = [self.tree.node(h) for t in frontier for h in t.children]
            level += 1
        return True

    def _covering_ancestor(self, taxon: Taxon) -> Optional[Taxon]:
        """Return a strict ancestor whose override range reaches the depth of `taxon`."""
        taxon_depth = self.tree.depth(taxon)
        for ancestor in self.tree.ancestors(taxon)[:-1]:
            reach = ancestor.expand_to if ancestor.expand_to is not None else ancestor.collapse_from
            if reach is not None and reach >= taxon_depth:
                return ancestor
        return None

    def _reject(self, reason: RejectionReason, **details) -> OverrideResult:
        result = create_rejected_result(reason, **details)
        logger.warning(f"Request rejected ({reason.value}): {result.message}")
        return result
