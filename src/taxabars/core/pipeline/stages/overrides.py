from __future__ import annotations

"""
Configured Override Stage.

Turns the "LINEAGE=DEPTH" entries of the `expansions` and `collapses`
configuration lists into projector requests. Entries that cannot be parsed,
name an unknown lineage or are rejected by the projector become warnings;
they never abort the run.
"""

import logging
from typing import Any, Dict, List, Tuple

from taxabars.core.taxonomy.projector import ViewProjector
from taxabars.core.taxonomy.tree import TaxonTree
from taxabars.domain.constants import OVERRIDE_SPEC_SEPARATOR
from taxabars.domain.errors import NotFoundError
from taxabars.utils.i18n import i18n

logger = logging.getLogger(__name__)


def parse_override_spec(spec: str) -> Tuple[str, int]:
    """
    Split a "LINEAGE=DEPTH" entry.

    The last separator wins, so lineages may themselves contain '='.

    Example:
        >>> parse_override_spec("k__A;p__B=3")
        ('k__A;p__B', 3)

    Raises:
        ValueError: If the entry has no separator, no lineage or a non-integer depth.
    """
    lineage, sep, depth_text = (spec or "").rpartition(OVERRIDE_SPEC_SEPARATOR)
    lineage = lineage.strip()
    if not sep or not lineage:
        raise ValueError(f"Override entry {spec!r} is not of the form LINEAGE=DEPTH.")
    try:
        depth = int(depth_text.strip())
    except ValueError as e:
        raise ValueError(f"Override entry {spec!r} has a non-integer depth.") from e
    return lineage, depth


def apply_configured_overrides(tree: TaxonTree, projector: ViewProjector, cfg: Dict[str, Any]) -> List[str]:
    """
    Issue every configured expansion, then every configured collapse.

    Args:
        tree: Hierarchy used to resolve lineages.
        projector: Receives the requests.
        cfg: Validated configuration.

    Returns:
        List[str]: One warning per entry that was not applied.
    """
    warnings: List[str] = []
    requests = [
        ("expansion", spec, projector.request_expansion) for spec in cfg.get("expansions", [])
    ] + [
        ("collapse", spec, projector.request_collapse) for spec in cfg.get("collapses", [])
    ]

    for kind, spec, request in requests:
        try:
            lineage, depth = parse_override_spec(spec)
        except ValueError:
            warnings.append(i18n.t("config.bad_override_spec", kind=kind, spec=spec))
            continue

        try:
            taxon = tree.find_by_lineage(lineage)
        except NotFoundError:
            warnings.append(i18n.t("config.unknown_lineage", kind=kind, lineage=lineage))
            continue

        result = request(taxon, depth)
        if not result:
            warnings.append(
                i18n.t("config.rejected_override", kind=kind, lineage=lineage, depth=depth, message=result.message)
            )

    for warning in warnings:
        logger.warning(warning)
    return warnings
