from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, merging of configuration
sources (defaults, persistent storage and CLI overrides), pipeline
execution and result rendering.
"""

import json
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from taxabars.core.pipeline.components.writer import projection_to_frame
from taxabars.core.pipeline.engine import run_pipeline
from taxabars.core.pipeline.stages.validator import validate_config
from taxabars.domain.config import get_default_config, load_config
from taxabars.domain.projection_models import PipelineResult
from taxabars.infra.fs import is_readable_file
from taxabars.infra.logging import LoggingConfig, configure_logging, get_logger
from taxabars.interface.cli import args as cli_args
from taxabars.utils.i18n import i18n

logger = get_logger(__name__)

# Keys the CLI is allowed to override
_MERGEABLE_KEYS = [
    "taxonomy_path", "table_path", "sample_id_column",
    "display_depth", "expansions", "collapses", "skip_malformed_rows",
    "min_relative_abundance", "min_prevalence_proportion",
    "sort_by", "sort_ascending", "output_path", "output_format",
]

# Number of view taxa listed per sample in the human readable report
_REPORT_TOP_N = 5

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: 0 on success, 1 on pipeline failure, 2 on missing input,
        130 when interrupted.
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    configure_logging(LoggingConfig(level="DEBUG" if args.debug else "INFO", console=True))
    logger.debug("CLI execution initiated. Resolving configuration hierarchy...")

    base_conf = get_default_config() if args.use_defaults else load_config()
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))

    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return 0

    # Pre-flight input verification
    for field in ("taxonomy_path", "table_path"):
        path = clean_conf.get(field, "")
        if not is_readable_file(path):
            msg = i18n.t("cli.errors.path_not_exist", path=path or f"({field})")
            logger.error(msg)
            print(f"ERROR: {msg}", file=sys.stderr)
            return 2

    try:
        result = run_pipeline(clean_conf)
    except KeyboardInterrupt:
        msg = i18n.t("cli.status.interrupted")
        logger.warning(msg)
        print(msg, file=sys.stderr)
        return 130
    except Exception as e:
        msg = i18n.t("cli.errors.pipeline_fail", error=str(e))
        logger.critical(msg, exc_info=True)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 1

    if args.json_output:
        print(json.dumps(_result_payload(result), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(result)

    return 0 if result.ok else 1

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow-merge the non-None overrides of known keys into `base`.
    """
    out = dict(base)
    for k in _MERGEABLE_KEYS:
        if overrides.get(k) is not None:
            out[k] = overrides[k]
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING
# -----------------------------------------------------------------------------

def _result_payload(result: PipelineResult) -> Dict[str, Any]:
    """JSON-ready view of a result; samples are flattened to export rows."""
    payload = asdict(result)
    delimiter = result.summary.get("taxonomy_delimiter", ";")
    payload["samples"] = projection_to_frame(result.samples, delimiter=delimiter).to_dicts()
    return payload


def _print_human_summary(result: PipelineResult) -> None:
    """
    Print a terminal report of the pipeline result.

    Args:
        result: The pipeline result to render.
    """
    if not result.ok:
        print(f"ERROR: {i18n.t('cli.errors.pipeline_fail', error=result.error)}", file=sys.stderr)
        return

    print(i18n.t("cli.status.success"))
    print(f"Display depth: {result.display_depth}")
    print(f"Taxa in hierarchy: {result.taxon_count}")
    print(f"Samples: {result.sample_count}")
    print(f"View taxa: {result.view_taxa_count}")

    overrides = result.summary.get("active_overrides", {})
    for lineage, override in overrides.items():
        print(f"  - {lineage}: {override}")

    for w in result.warnings:
        print(f"WARNING: {w}", file=sys.stderr)

    for sample in result.samples:
        print(f"\n{sample.sample_id}")
        for vt in sample.view_taxa[:_REPORT_TOP_N]:
            print(f"  {vt.relative_abundance:8.2%}  {vt.label}")
        hidden = len(sample.view_taxa) - _REPORT_TOP_N
        if hidden > 0:
            print(f"  ... {hidden} more")

    if result.output_path:
        print("\n" + i18n.t("cli.status.output", path=result.output_path))

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
