from __future__ import annotations

"""
Core orchestration pipeline.

This module coordinates the whole file-to-projection workflow:
1. Validates configuration and input paths.
2. Reads the taxonomy and builds the hierarchy.
3. Reads the feature table.
4. Applies the display depth and configured overrides.
5. Runs the render pass with the configured filters and sort.
6. Exports the projected table.
"""

import logging
import os
from typing import Any, Dict, List, Optional

from taxabars.core.pipeline.components.reader import read_feature_table, read_taxonomy
from taxabars.core.pipeline.components.writer import write_projection
from taxabars.core.pipeline.session import TaxonomySession
from taxabars.core.pipeline.stages.overrides import apply_configured_overrides
from taxabars.core.pipeline.stages.validator import validate_config
from taxabars.core.samples.controls import FeatureControls
from taxabars.core.taxonomy.tree import TaxonTree
from taxabars.domain.constants import PREVALENCE_PROPORTION
from taxabars.domain.errors import (
    EmptyDatasetError,
    MalformedPathError,
    MalformedTableError,
    NotFoundError,
)
from taxabars.domain.projection_models import (
    PipelineResult,
    create_error_result,
    create_success_result,
)
from taxabars.infra.fs import is_readable_file

logger = logging.getLogger(__name__)


def run_pipeline(config: Optional[Dict[str, Any]]) -> PipelineResult:
    """
    Execute the full projection pipeline.

    Recoverable input problems (missing or malformed files, unknown feature
    IDs, an empty table) are returned as a failed result. Broken internal
    invariants propagate.

    Args:
        config: The configuration dictionary (raw or partial).

    Returns:
        PipelineResult: Object containing status, counts, samples and summary.
    """
    logger.info("Pipeline execution started.")

    # -------------------------------------------------------------------------
    # 1) Config & Path Validation
    # -------------------------------------------------------------------------
    cfg, warnings = validate_config(config, strict=False)

    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    for field in ("taxonomy_path", "table_path"):
        if not is_readable_file(cfg[field]):
            msg = f"Invalid input file for '{field}': {cfg[field] or '(empty)'}"
            logger.error(msg)
            return create_error_result(msg, cfg, warnings)

    # -------------------------------------------------------------------------
    # 2) Inputs
    # -------------------------------------------------------------------------
    try:
        rows = read_taxonomy(cfg["taxonomy_path"], delimiter=cfg["taxonomy_delimiter"])
        tree = TaxonTree.from_rows(
            rows,
            delimiter=cfg["taxonomy_delimiter"],
            skip_malformed=cfg["skip_malformed_rows"],
        )
        samples = read_feature_table(
            cfg["table_path"],
            sample_id_column=cfg["sample_id_column"],
            separator=cfg["table_separator"],
        )
    except (MalformedTableError, MalformedPathError, OSError) as e:
        msg = f"Failed to load inputs: {e}"
        logger.error(msg)
        return create_error_result(msg, cfg, warnings)

    # -------------------------------------------------------------------------
    # 3) View State
    # -------------------------------------------------------------------------
    session = TaxonomySession(tree, samples, controls=_build_controls(cfg))

    depth_result = session.set_display_depth(cfg["display_depth"])
    if not depth_result:
        warnings.append(depth_result.message)

    warnings.extend(apply_configured_overrides(tree, session.projector, cfg))

    # -------------------------------------------------------------------------
    # 4) Render
    # -------------------------------------------------------------------------
    try:
        projection = session.render()
    except (EmptyDatasetError, NotFoundError) as e:
        msg = f"Projection failed: {e}"
        logger.error(msg)
        return create_error_result(msg, cfg, warnings)

    # -------------------------------------------------------------------------
    # 5) Export
    # -------------------------------------------------------------------------
    output_path = ""
    if cfg["output_path"]:
        try:
            output_path = write_projection(
                projection.samples,
                cfg["output_path"],
                fmt=cfg["output_format"],
                delimiter=tree.delimiter,
            )
            if cfg["save_error_log"] and warnings:
                _write_warning_log(output_path, warnings)
        except OSError as e:
            msg = f"Failed to write projected table: {e}"
            logger.error(msg)
            return create_error_result(msg, cfg, warnings)

    # -------------------------------------------------------------------------
    # 6) Finalize
    # -------------------------------------------------------------------------
    summary = {
        "taxonomy_delimiter": tree.delimiter,
        "max_leaf_depth": tree.max_leaf_depth(),
        "feature_count": sum(len(t.feature_ids) for t in tree),
        "active_overrides": {k: repr(v) for k, v in session.projector.active_overrides().items()},
        "filters": [f.name for f in session.controls.filters],
        "sort": session.controls.sort.name,
    }

    logger.info("Pipeline completed successfully.")
    return create_success_result(
        cfg,
        projection,
        taxon_count=len(tree),
        output_path=output_path,
        warnings=warnings,
        summary_extra=summary,
    )


def _build_controls(cfg: Dict[str, Any]) -> FeatureControls:
    controls = FeatureControls()
    if cfg["min_relative_abundance"] is not None:
        controls.add_abundance_filter(cfg["min_relative_abundance"], ">")
    if cfg["min_prevalence_proportion"] is not None:
        controls.add_prevalence_filter(cfg["min_prevalence_proportion"], PREVALENCE_PROPORTION, ">")
    controls.set_sort(cfg["sort_by"], ascending=cfg["sort_ascending"])
    return controls


def _write_warning_log(output_path: str, warnings: List[str]) -> str:
    """Write the run's warnings next to the exported table."""
    stem, _ = os.path.splitext(output_path)
    log_path = f"{stem}_warnings.txt"
    with open(log_path, "w", encoding="utf-8") as f:
        f.write("\n".join(warnings) + "\n")
    logger.info(f"Warnings saved to file: {log_path}")
    return log_path
