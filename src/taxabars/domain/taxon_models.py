from __future__ import annotations

"""
Taxonomy Structure Data Models.

Defines the classification node and the per-node override state used by
the view projector. Nodes live in an arena owned by `TaxonTree` and refer
to each other through integer handles, never through owning references.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union

# -----------------------------------------------------------------------------
# OVERRIDE STATE
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Inactive:
    """No expansion or collapse is recorded on the node."""


@dataclass(frozen=True)
class ExpandTo:
    """
    The node reveals its descendants down to `depth` instead of being
    folded to the global display depth.
    """
    depth: int


@dataclass(frozen=True)
class CollapseFrom:
    """
    The node absorbs every descendant from `depth` upwards into itself.
    """
    depth: int


Override = Union[Inactive, ExpandTo, CollapseFrom]

INACTIVE = Inactive()

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass(eq=False)
class Taxon:
    """
    A node of the classification hierarchy.

    Identity is the object itself (eq=False keeps the default identity hash),
    which lets view taxa and color caches key on the node across render passes.

    Attributes:
        handle: Stable index of the node inside its tree arena.
        name: Level name, unique only among siblings.
        parent: Handle of the parent node, None for top-level taxa.
        children: Ordered handles of the child nodes.
        feature_ids: Feature IDs classified directly to this node.
        override: Current expansion/collapse state.
    """
    handle: int
    name: str
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)
    feature_ids: List[str] = field(default_factory=list)
    override: Override = INACTIVE

    @property
    def expand_to(self) -> Optional[int]:
        """Expansion target depth, or None when no expansion is active."""
        if isinstance(self.override, ExpandTo):
            return self.override.depth
        return None

    @property
    def collapse_from(self) -> Optional[int]:
        """Collapse boundary depth, or None when no collapse is active."""
        if isinstance(self.override, CollapseFrom):
            return self.override.depth
        return None

    @property
    def has_override(self) -> bool:
        return not isinstance(self.override, Inactive)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def __repr__(self) -> str:
        return f"Taxon(handle={self.handle}, name={self.name!r})"
