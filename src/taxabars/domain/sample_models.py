from __future__ import annotations

"""
Sample and View Data Models.

Features are the immutable leaf measurements read from the feature table.
View taxa are rebuilt from scratch on every render pass and carry the
per-sample and cross-sample statistics consumed by plotting collaborators.
"""

from dataclasses import dataclass, field
from typing import List, Mapping, Tuple

from taxabars.domain.errors import InvariantViolation
from taxabars.domain.taxon_models import Taxon

# -----------------------------------------------------------------------------
# LEAF MEASUREMENTS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Feature:
    """
    A leaf measurement: the abundance of one feature ID in one sample.

    Attributes:
        feature_id: Identifier classified to exactly one leaf taxon.
        abundance: Non-negative raw abundance.
    """
    feature_id: str
    abundance: float


# -----------------------------------------------------------------------------
# VIEW UNITS
# -----------------------------------------------------------------------------

@dataclass(eq=False)
class ViewTaxon:
    """
    Aggregate of a sample's features that currently display as one taxon.

    Attributes:
        taxon: The resolved display taxon.
        label: Full lineage string of the display taxon.
        features: Features folded into this unit.
        abundance: Summed raw abundance of `features`.
        relative_abundance: Share of the sample's total abundance.
        prevalence: Number of samples showing this taxon.
        prevalence_proportion: `prevalence` divided by the number of samples.
        mean_relative_abundance: Mean of `relative_abundance` over all samples (absent = 0).
    """
    taxon: Taxon
    label: str = ""
    features: List[Feature] = field(default_factory=list)
    abundance: float = 0.0
    relative_abundance: float = 0.0
    prevalence: int = 0
    prevalence_proportion: float = 0.0
    mean_relative_abundance: float = 0.0

    def add(self, feature: Feature) -> None:
        """Fold one feature into the unit."""
        self.features.append(feature)
        self.abundance += feature.abundance


# -----------------------------------------------------------------------------
# SAMPLES
# -----------------------------------------------------------------------------

@dataclass(eq=False)
class Sample:
    """
    A sample and its sparse leaf measurements.

    `features` is fixed after construction; `view_taxa` is replaced on every
    render pass.
    """
    sample_id: str
    features: Tuple[Feature, ...] = ()
    view_taxa: List[ViewTaxon] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, sample_id: str, abundances: Mapping[str, float]) -> "Sample":
        """
        Build a sample from a feature ID -> abundance mapping.

        Zero entries are dropped to keep the sparse representation.
        """
        features = tuple(
            Feature(feature_id=fid, abundance=float(value))
            for fid, value in abundances.items()
            if value
        )
        return cls(sample_id=sample_id, features=features)

    @property
    def total_abundance(self) -> float:
        return sum(f.abundance for f in self.features)

    def relative_abundance_of(self, label: str) -> float:
        """
        Return the relative abundance of the view taxon labelled `label`.

        Returns 0.0 when the sample does not show the taxon.

        Raises:
            InvariantViolation: If two view taxa share the label.
        """
        matches = [vt for vt in self.view_taxa if vt.label == label]
        if not matches:
            return 0.0
        if len(matches) > 1:
            raise InvariantViolation(f"Sample {self.sample_id} has {len(matches)} view taxa labelled {label!r}.")
        return matches[0].relative_abundance

    def relative_abundance_sum(self) -> float:
        """Sum of relative abundances left after view taxon filtering."""
        return sum(vt.relative_abundance for vt in self.view_taxa)
