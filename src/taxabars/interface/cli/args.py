from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema and translates the parsed namespace into
configuration overrides understood by the pipeline.
"""

import argparse
from typing import Any, Dict, List, Optional

from taxabars.domain.constants import OUTPUT_FORMATS, SORT_OPTIONS
from taxabars.utils.i18n import i18n

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the taxabars CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="taxabars",
        description=i18n.t("app.description"),
    )

    # --- Inputs ---
    p.add_argument("-t", "--taxonomy", dest="taxonomy_path", default=None, help=i18n.t("cli.args.taxonomy"))
    p.add_argument("-f", "--table", dest="table_path", default=None, help=i18n.t("cli.args.table"))
    p.add_argument(
        "--sample-id-column",
        dest="sample_id_column",
        default=None,
        help=i18n.t("cli.args.sample_id_column"),
    )
    p.add_argument("--skip-malformed", action="store_true", help=i18n.t("cli.args.skip_malformed"))

    # --- Projection ---
    p.add_argument("-d", "--depth", dest="display_depth", type=int, default=None, help=i18n.t("cli.args.depth"))
    p.add_argument(
        "--expand",
        dest="expansions",
        action="append",
        metavar="LINEAGE=DEPTH",
        default=None,
        help=i18n.t("cli.args.expand"),
    )
    p.add_argument(
        "--collapse",
        dest="collapses",
        action="append",
        metavar="LINEAGE=DEPTH",
        default=None,
        help=i18n.t("cli.args.collapse"),
    )

    # --- View Controls ---
    p.add_argument(
        "--min-abundance",
        dest="min_relative_abundance",
        type=float,
        default=None,
        help=i18n.t("cli.args.min_abundance"),
    )
    p.add_argument(
        "--min-prevalence",
        dest="min_prevalence_proportion",
        type=float,
        default=None,
        help=i18n.t("cli.args.min_prevalence"),
    )
    p.add_argument("--sort", dest="sort_by", choices=SORT_OPTIONS, default=None, help=i18n.t("cli.args.sort"))
    p.add_argument("--ascending", action="store_true", help=i18n.t("cli.args.ascending"))

    # --- Output ---
    p.add_argument("-o", "--output", dest="output_path", default=None, help=i18n.t("cli.args.output"))
    p.add_argument(
        "--format",
        dest="output_format",
        choices=OUTPUT_FORMATS,
        default=None,
        help=i18n.t("cli.args.format"),
    )

    # --- Configuration and Diagnostic Tools ---
    p.add_argument("--use-defaults", action="store_true", help=i18n.t("cli.args.defaults"))
    p.add_argument("--dump-config", action="store_true", help=i18n.t("cli.args.dump"))
    p.add_argument("--debug", action="store_true", help="Elevate logging verbosity to DEBUG.")
    p.add_argument("--json", dest="json_output", action="store_true", help=i18n.t("cli.args.json"))

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a configuration dictionary.

    Options left unset map to None so the merge keeps the base value.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {
        "taxonomy_path": args.taxonomy_path,
        "table_path": args.table_path,
        "sample_id_column": args.sample_id_column,
        "display_depth": args.display_depth,
        "expansions": _clean_list(args.expansions),
        "collapses": _clean_list(args.collapses),
        "min_relative_abundance": args.min_relative_abundance,
        "min_prevalence_proportion": args.min_prevalence_proportion,
        "sort_by": args.sort_by,
        "output_path": args.output_path,
        "output_format": args.output_format,
    }

    if args.skip_malformed:
        overrides["skip_malformed_rows"] = True
    if args.ascending:
        overrides["sort_ascending"] = True

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _clean_list(values: Optional[List[str]]) -> Optional[List[str]]:
    """Strip repeated option values and drop empty ones."""
    if values is None:
        return None
    return [v.strip() for v in values if v and v.strip()]
