from __future__ import annotations

"""
Projection Domain Data Models.

Defines the outcome values exchanged between the view projector, the
render pipeline and the interface layer. Rejected override requests are
plain values so callers can surface a message without unwinding.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from taxabars.domain.sample_models import Sample
from taxabars.utils.i18n import i18n

# -----------------------------------------------------------------------------
# OVERRIDE VALIDATION OUTCOMES
# -----------------------------------------------------------------------------

class RejectionReason(str, Enum):
    """Why a display depth, expansion or collapse request was refused."""
    BELOW_MINIMUM = "below_minimum"
    EXCEEDS_MAXIMUM = "exceeds_maximum"
    NOT_DEEPER_THAN_TAXON = "not_deeper_than_taxon"
    NO_DESCENDANTS_AT_DEPTH = "no_descendants_at_depth"
    NOT_SHALLOWER_THAN_TAXON = "not_shallower_than_taxon"
    SUBTREE_NOT_CLEAR = "subtree_not_clear"
    LINEAGE_NOT_CLEAR = "lineage_not_clear"


@dataclass(frozen=True)
class OverrideResult:
    """
    Outcome of a state-changing request on the view projector.

    Attributes:
        ok: True if the request was applied.
        reason: Rejection category, None on success.
        message: Human readable explanation, empty on success.
        details: Values interpolated into `message`.
    """
    ok: bool
    reason: Optional[RejectionReason] = None
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.ok


def create_accepted_result() -> OverrideResult:
    """Create the outcome of an applied request."""
    return OverrideResult(ok=True)


def create_rejected_result(reason: RejectionReason, **details: Any) -> OverrideResult:
    """
    Create the outcome of a refused request.

    Args:
        reason: Rejection category.
        **details: Values for the localized message template.

    Returns:
        OverrideResult: An immutable rejection with its resolved message.
    """
    message = i18n.t(f"projection.rejections.{reason.value}", **details)
    return OverrideResult(ok=False, reason=reason, message=message, details=dict(details))


# -----------------------------------------------------------------------------
# RENDER PASS RESULTS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ProjectionResult:
    """
    Result of one full render pass over the sample set.

    Attributes:
        display_depth: Global display depth used for the pass.
        sample_count: Number of samples that entered the statistics.
        samples: Samples whose `view_taxa` were rebuilt by the pass.
    """
    display_depth: int
    sample_count: int
    samples: List[Sample] = field(default_factory=list)

    @property
    def view_taxa_count(self) -> int:
        return sum(len(s.view_taxa) for s in self.samples)


@dataclass(frozen=True)
class PipelineResult:
    """
    Unified result of a complete file-to-projection pipeline execution.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        taxonomy_path: Taxonomy file that was read.
        table_path: Feature table file that was read.
        display_depth: Global display depth of the projection.
        taxon_count: Number of nodes in the hierarchy.
        sample_count: Number of samples read.
        view_taxa_count: Number of view taxa over all samples after filtering.
        output_path: Export destination, empty if nothing was written.
        warnings: Non-fatal problems met along the way.
        samples: Projected samples (empty on failure).
        summary: Technical execution summary.
    """
    ok: bool
    error: str

    taxonomy_path: str
    table_path: str
    display_depth: int

    taxon_count: int = 0
    sample_count: int = 0
    view_taxa_count: int = 0
    output_path: str = ""

    warnings: List[str] = field(default_factory=list)
    samples: List[Sample] = field(default_factory=list)
    summary: Dict[str, Any] = field(default_factory=dict)

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        cfg: Dict[str, Any],
        warnings: Optional[List[str]] = None,
        summary_extra: Optional[Dict[str, Any]] = None,
) -> PipelineResult:
    """
    Create a failed pipeline result instance.

    Args:
        error: Detailed error description.
        cfg: The configuration used during the failed run.
        warnings: Warnings gathered before the failure.
        summary_extra: Additional metadata for the summary payload.

    Returns:
        PipelineResult: An immutable error result object.
    """
    return PipelineResult(
        ok=False,
        error=error,
        taxonomy_path=cfg.get("taxonomy_path", ""),
        table_path=cfg.get("table_path", ""),
        display_depth=cfg.get("display_depth", 1),
        warnings=list(warnings or []),
        summary=summary_extra or {},
    )


def create_success_result(
        cfg: Dict[str, Any],
        projection: ProjectionResult,
        taxon_count: int,
        output_path: str = "",
        warnings: Optional[List[str]] = None,
        summary_extra: Optional[Dict[str, Any]] = None,
) -> PipelineResult:
    """
    Create a successful pipeline result instance.

    Args:
        cfg: Final configuration used during execution.
        projection: The render pass outcome.
        taxon_count: Size of the hierarchy.
        output_path: Export destination (if any).
        warnings: Non-fatal problems met along the way.
        summary_extra: Final execution metrics.

    Returns:
        PipelineResult: An immutable success result object.
    """
    return PipelineResult(
        ok=True,
        error="",
        taxonomy_path=cfg.get("taxonomy_path", ""),
        table_path=cfg.get("table_path", ""),
        display_depth=projection.display_depth,
        taxon_count=taxon_count,
        sample_count=projection.sample_count,
        view_taxa_count=projection.view_taxa_count,
        output_path=output_path,
        warnings=list(warnings or []),
        samples=list(projection.samples),
        summary=summary_extra or {},
    )
