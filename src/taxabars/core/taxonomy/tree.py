from __future__ import annotations

"""
Taxonomic Hierarchy.

Builds the classification tree from lineage rows and answers the structural
queries (depth, ancestors, descendants, leaf lookup) used by the view
projector. Nodes are stored in an arena and linked by integer handles;
a feature ID index built during construction keeps leaf lookup constant time.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from taxabars.domain.constants import DEFAULT_TAXONOMY_DELIMITER
from taxabars.domain.errors import (
    InvalidDepthError,
    InvariantViolation,
    MalformedPathError,
    NotFoundError,
)
from taxabars.domain.taxon_models import Taxon

logger = logging.getLogger(__name__)

LineageRow = Tuple[str, Sequence[str]]


class TaxonTree:
    """
    Arena-backed classification hierarchy.

    Top-level taxa (the first lineage segment) sit at depth 1 and have no
    parent. Nodes are never removed once created.
    """

    def __init__(self, delimiter: str = DEFAULT_TAXONOMY_DELIMITER):
        self.delimiter = delimiter
        self._nodes: List[Taxon] = []
        self._roots: List[int] = []
        self._feature_index: Dict[str, int] = {}

    # -------------------------------------------------------------------------
    # CONSTRUCTION
    # -------------------------------------------------------------------------

    @classmethod
    def from_rows(
            cls,
            rows: Iterable[LineageRow],
            *,
            delimiter: str = DEFAULT_TAXONOMY_DELIMITER,
            skip_malformed: bool = False,
    ) -> "TaxonTree":
        """Create a tree and build it from `rows` in one call."""
        tree = cls(delimiter=delimiter)
        tree.build(rows, skip_malformed=skip_malformed)
        return tree

    def build(self, rows: Iterable[LineageRow], *, skip_malformed: bool = False) -> int:
        """
        Merge lineage rows into the hierarchy.

        Each row is `(feature_id, path)` where `path` is the already split and
        trimmed sequence of level names. Shared prefixes reuse existing nodes;
        the last node of the path receives the feature ID.

        Args:
            rows: Lineage rows to merge.
            skip_malformed: If True, rows with an empty path are logged and
                skipped; otherwise the first one aborts the build.

        Returns:
            int: Number of rows merged.

        Raises:
            MalformedPathError: On an empty path when `skip_malformed` is False.
            InvariantViolation: If a feature ID is classified to two leaves.
        """
        merged = 0
        skipped = 0

        for feature_id, path in rows:
            names = [n for n in path if n]
            if not names:
                if skip_malformed:
                    skipped += 1
                    logger.warning(f"Skipping feature '{feature_id}': empty lineage path.")
                    continue
                raise MalformedPathError(f"Feature '{feature_id}' has an empty lineage path.")

            node: Optional[Taxon] = None
            for name in names:
                child = self.find_child_by_name(node, name)
                node = child if child is not None else self._add_node(name, node)

            self._classify(feature_id, node)
            merged += 1

        logger.debug(f"Taxonomy build merged {merged} rows ({skipped} skipped), {len(self._nodes)} taxa total.")
        return merged

    def _add_node(self, name: str, parent: Optional[Taxon]) -> Taxon:
        """Append a new node to the arena and link it under `parent`."""
        node = Taxon(handle=len(self._nodes), name=name, parent=parent.handle if parent else None)
        self._nodes.append(node)
        if parent is None:
            self._roots.append(node.handle)
        else:
            parent.children.append(node.handle)
        return node

    def _classify(self, feature_id: str, node: Taxon) -> None:
        """Attach `feature_id` to `node` and record it in the leaf index."""
        owner = self._feature_index.get(feature_id)
        if owner is not None:
            if owner == node.handle:
                return
            raise InvariantViolation(
                f"Feature {feature_id} classified to more than one taxon: "
                f"{self.lineage(self._nodes[owner])!r} and {self.lineage(node)!r}."
            )
        node.feature_ids.append(feature_id)
        self._feature_index[feature_id] = node.handle

    # -------------------------------------------------------------------------
    # NODE ACCESS
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Taxon]:
        return iter(self._nodes)

    @property
    def roots(self) -> List[Taxon]:
        return [self._nodes[h] for h in self._roots]

    def node(self, handle: int) -> Taxon:
        return self._nodes[handle]

    def parent(self, taxon: Taxon) -> Optional[Taxon]:
        return self._nodes[taxon.parent] if taxon.parent is not None else None

    def children(self, taxon: Taxon) -> List[Taxon]:
        return [self._nodes[h] for h in taxon.children]

    def find_child_by_name(self, parent: Optional[Taxon], name: str) -> Optional[Taxon]:
        """
        Return the child of `parent` called `name`, or None.

        A `parent` of None searches the top-level taxa.
        """
        handles = self._roots if parent is None else parent.children
        matches = [self._nodes[h] for h in handles if self._nodes[h].name == name]
        if len(matches) > 1:
            raise InvariantViolation(f"More than one child named {name!r} found.")
        return matches[0] if matches else None

    # -------------------------------------------------------------------------
    # STRUCTURAL QUERIES
    # -------------------------------------------------------------------------

    def depth(self, taxon: Taxon) -> int:
        """Return the depth of `taxon`; top-level taxa are depth 1."""
        level = 1
        while taxon.parent is not None:
            taxon = self._nodes[taxon.parent]
            level += 1
        return level

    def descendants(self, taxon: Taxon) -> List[Taxon]:
        """Return `taxon` and every node below it, in pre-order."""
        out: List[Taxon] = []
        stack = [taxon]
        while stack:
            current = stack.pop()
            out.append(current)
            stack.extend(self._nodes[h] for h in reversed(current.children))
        return out

    def descendants_at_depth(self, taxon: Taxon, depth: int) -> List[Taxon]:
        """Return the descendants of `taxon` (itself included) at exactly `depth`."""
        base = self.depth(taxon)
        if depth < base:
            return []

        frontier = [taxon]
        for _ in range(depth - base):
            frontier = [self._nodes[h] for t in frontier for h in t.children]
            if not frontier:
                break
        return frontier

    def ancestors(self, taxon: Taxon) -> List[Taxon]:
        """Return the lineage of `taxon` ordered from its top-level taxon down to itself."""
        chain = [taxon]
        while taxon.parent is not None:
            taxon = self._nodes[taxon.parent]
            chain.append(taxon)
        chain.reverse()
        return chain

    def ancestor_at_depth(self, taxon: Taxon, depth: int) -> Taxon:
        """
        Return the ancestor of `taxon` (possibly itself) at `depth`.

        Raises:
            InvalidDepthError: If `depth` is deeper than `taxon`.
            InvariantViolation: If zero or several ancestors sit at `depth`.
        """
        if depth > self.depth(taxon):
            raise InvalidDepthError(
                f"Taxon {self.lineage(taxon)!r} at depth {self.depth(taxon)} has no ancestor at depth {depth}."
            )

        matches = [a for level, a in enumerate(self.ancestors(taxon), start=1) if level == depth]
        if len(matches) > 1:
            raise InvariantViolation(f"Multiple ancestors of {self.lineage(taxon)!r} at depth {depth}.")
        if not matches:
            raise InvariantViolation(f"No ancestor of {self.lineage(taxon)!r} found at depth {depth}.")
        return matches[0]

    def max_leaf_depth(self) -> int:
        """Return the depth of the deepest leaf, 0 for an empty tree."""
        return max((self.depth(t) for t in self.leaves()), default=0)

    def leaves(self) -> List[Taxon]:
        return [t for t in self._nodes if t.is_leaf]

    # -------------------------------------------------------------------------
    # LOOKUPS
    # -------------------------------------------------------------------------

    def find_leaf_by_feature_id(self, feature_id: str) -> Taxon:
        """
        Return the taxon a feature ID is classified to.

        Raises:
            NotFoundError: If no taxon claims `feature_id`.
        """
        handle = self._feature_index.get(feature_id)
        if handle is None:
            raise NotFoundError(f"Feature {feature_id} not found in taxonomy.")
        return self._nodes[handle]

    def has_feature(self, feature_id: str) -> bool:
        return feature_id in self._feature_index

    def lineage(self, taxon: Taxon) -> str:
        """Return the full delimited taxonomic string of `taxon`; unique per node."""
        return self.delimiter.join(a.name for a in self.ancestors(taxon))

    def find_by_lineage(self, lineage: str) -> Taxon:
        """
        Resolve a delimited lineage string to its node.

        Segments are trimmed and empty segments dropped, matching the way
        taxonomy files are read.

        Raises:
            NotFoundError: If any segment of the lineage is absent.
        """
        names = [n.strip() for n in lineage.split(self.delimiter) if n.strip()]
        if not names:
            raise NotFoundError(f"Empty lineage {lineage!r}.")

        node: Optional[Taxon] = None
        for name in names:
            node = self.find_child_by_name(node, name)
            if node is None:
                raise NotFoundError(f"Lineage {lineage!r} not found in taxonomy.")
        return node
