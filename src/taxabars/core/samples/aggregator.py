from __future__ import annotations

"""
Per-Sample Aggregation.

Maps a sample's leaf measurements to the taxa they are currently displayed
as and computes relative abundances within the sample.
"""

import logging
from typing import Dict, List

from taxabars.core.taxonomy.projector import ViewProjector
from taxabars.core.taxonomy.tree import TaxonTree
from taxabars.domain.sample_models import Sample, ViewTaxon
from taxabars.domain.taxon_models import Taxon

logger = logging.getLogger(__name__)


def project_sample(sample: Sample, tree: TaxonTree, projector: ViewProjector) -> List[ViewTaxon]:
    """
    Group the features of `sample` by display taxon.

    Features resolving to the same taxon are folded into one view taxon with
    summed abundance. The result keeps the order in which display taxa were
    first met; it is not sorted.

    Args:
        sample: Sample whose features are mapped.
        tree: Hierarchy the feature IDs are classified in.
        projector: Current display depth and overrides.

    Returns:
        List[ViewTaxon]: Fresh view taxa for this render pass.

    Raises:
        NotFoundError: If a feature ID is absent from the taxonomy.
    """
    view_taxa: Dict[Taxon, ViewTaxon] = {}

    for feature in sample.features:
        leaf = tree.find_leaf_by_feature_id(feature.feature_id)
        display_taxon = projector.resolve_display_taxon(leaf)

        view_taxon = view_taxa.get(display_taxon)
        if view_taxon is None:
            view_taxon = ViewTaxon(taxon=display_taxon, label=tree.lineage(display_taxon))
            view_taxa[display_taxon] = view_taxon

        view_taxon.add(feature)

    return list(view_taxa.values())


def compute_relative_abundance(view_taxa: List[ViewTaxon]) -> None:
    """
    Set each view taxon's share of the summed abundance, in place.

    A sample with zero total abundance gets 0.0 everywhere.
    """
    total = sum(vt.abundance for vt in view_taxa)

    for view_taxon in view_taxa:
        view_taxon.relative_abundance = view_taxon.abundance / total if total > 0 else 0.0
