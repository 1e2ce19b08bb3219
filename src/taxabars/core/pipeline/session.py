from __future__ import annotations

"""
Render Pass and Session.

`run_projection` rebuilds every sample's view taxa for the current
projector state and fills in the cross-sample statistics.
`TaxonomySession` bundles one hierarchy, its projector, the sample set and
the view controls behind a re-entrant lock so that override edits and
render passes never interleave.
"""

import logging
import threading
from typing import List, Optional, Sequence

from taxabars.core.samples.aggregator import compute_relative_abundance, project_sample
from taxabars.core.samples.controls import FeatureControls
from taxabars.core.samples.statistics import finalize, tally
from taxabars.core.taxonomy.projector import ViewProjector
from taxabars.core.taxonomy.tree import TaxonTree
from taxabars.domain.errors import EmptyDatasetError
from taxabars.domain.projection_models import OverrideResult, ProjectionResult
from taxabars.domain.sample_models import Sample, ViewTaxon
from taxabars.domain.taxon_models import Taxon

logger = logging.getLogger(__name__)


def run_projection(tree: TaxonTree, projector: ViewProjector, samples: Sequence[Sample]) -> ProjectionResult:
    """
    Execute one full render pass.

    Each sample is projected and normalized independently, then prevalence
    and mean relative abundance are computed over the whole set.

    Raises:
        EmptyDatasetError: If `samples` is empty.
        NotFoundError: If a sample references a feature absent from `tree`.
    """
    if not samples:
        raise EmptyDatasetError("No samples to project.")

    projected: List[List[ViewTaxon]] = []
    for sample in samples:
        view_taxa = project_sample(sample, tree, projector)
        compute_relative_abundance(view_taxa)
        projected.append(view_taxa)

    prevalence_counts, rel_abun_sums = tally(projected)
    for view_taxa in projected:
        finalize(view_taxa, prevalence_counts, rel_abun_sums, len(samples))

    # Samples keep their previous view taxa unless the whole pass succeeds
    for sample, view_taxa in zip(samples, projected):
        sample.view_taxa = view_taxa

    logger.debug(
        f"Render pass at depth {projector.display_depth}: "
        f"{len(samples)} samples, {len(prevalence_counts)} distinct view taxa."
    )
    return ProjectionResult(
        display_depth=projector.display_depth,
        sample_count=len(samples),
        samples=list(samples),
    )


class TaxonomySession:
    """
    Single-writer facade over a hierarchy, its view state and a sample set.

    Every public method holds the session lock for its whole duration.
    """

    def __init__(
            self,
            tree: TaxonTree,
            samples: Sequence[Sample],
            controls: Optional[FeatureControls] = None,
    ):
        self.tree = tree
        self.projector = ViewProjector(tree)
        self.samples: List[Sample] = list(samples)
        self.controls = controls or FeatureControls()
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # VIEW STATE
    # -------------------------------------------------------------------------

    def set_display_depth(self, depth: int) -> OverrideResult:
        with self._lock:
            return self.projector.set_display_depth(depth)

    def request_expansion(self, taxon: Taxon, to_depth: int) -> OverrideResult:
        with self._lock:
            return self.projector.request_expansion(taxon, to_depth)

    def request_collapse(self, taxon: Taxon, to_depth: int) -> OverrideResult:
        with self._lock:
            return self.projector.request_collapse(taxon, to_depth)

    def clear_expansion(self, taxon: Taxon) -> None:
        with self._lock:
            self.projector.clear_expansion(taxon)

    def clear_collapse(self, taxon: Taxon) -> None:
        with self._lock:
            self.projector.clear_collapse(taxon)

    def find(self, lineage: str) -> Taxon:
        """Resolve a lineage string to its taxon."""
        with self._lock:
            return self.tree.find_by_lineage(lineage)

    # -------------------------------------------------------------------------
    # RENDERING
    # -------------------------------------------------------------------------

    def render(self) -> ProjectionResult:
        """Run a render pass, then filter and sort each sample's view taxa."""
        with self._lock:
            result = run_projection(self.tree, self.projector, self.samples)
            for sample in self.samples:
                self.controls.apply(sample)
            logger.info(
                f"Rendered {result.sample_count} samples at depth {result.display_depth} "
                f"({result.view_taxa_count} view taxa after filtering)."
            )
            return result

    def all_view_taxa(self) -> List[List[ViewTaxon]]:
        """View taxa of every sample from the last render pass."""
        with self._lock:
            return [list(s.view_taxa) for s in self.samples]
