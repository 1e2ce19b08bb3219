from __future__ import annotations

"""
Configuration Validation Service.

Acts as the primary gatekeeper for the pipeline, ensuring that the configuration
dictionary conforms to the expected schema. Handles type coercion, path
normalization, and default value injection to maintain execution stability.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from taxabars.domain.config import get_default_config
from taxabars.domain.constants import OUTPUT_FORMATS, SORT_OPTIONS
from taxabars.infra.fs import normalize_path

logger = logging.getLogger(__name__)

# Spellings accepted for a tab separator coming from CLI or JSON
_TAB_ALIASES = ("\\t", "tab", "TAB")


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Ensures data integrity by converting untrusted inputs (e.g., from CLI or a
    saved JSON file) into strictly typed parameters. Fills missing keys with
    domain defaults.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions on type mismatch instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: A tuple containing the normalized
                                          configuration and a list of warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    # 1. Base Type Validation
    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    # 2. Schema Definition (Declarative mapping)
    string_fields = ["taxonomy_path", "table_path", "sample_id_column", "output_path"]
    separator_fields = ["taxonomy_delimiter", "table_separator"]
    bool_fields = ["skip_malformed_rows", "sort_ascending", "save_error_log"]
    proportion_fields = ["min_relative_abundance", "min_prevalence_proportion"]
    list_fields = ["expansions", "collapses"]
    choice_fields = {
        "sort_by": SORT_OPTIONS,
        "output_format": OUTPUT_FORMATS,
    }

    # 3. Field Processing & Normalization
    for field in string_fields:
        merged[field] = _as_str(merged.get(field), defaults.get(field, ""), field, warnings, strict)

    for field in separator_fields:
        merged[field] = _as_separator(merged.get(field), defaults[field], field, warnings, strict)

    for field in bool_fields:
        merged[field] = _as_bool(merged.get(field), defaults.get(field, False), field, warnings, strict)

    for field in proportion_fields:
        merged[field] = _as_proportion(merged.get(field), field, warnings, strict)

    for field in list_fields:
        merged[field] = _as_list_str(merged.get(field), [], field, warnings, strict)

    for field, options in choice_fields.items():
        merged[field] = _as_choice(merged.get(field), defaults[field], options, field, warnings, strict)

    merged["display_depth"] = _as_positive_int(
        merged.get("display_depth"), defaults["display_depth"], "display_depth", warnings, strict
    )

    # 4. Path Normalization
    for field in ("taxonomy_path", "table_path", "output_path"):
        merged[field] = normalize_path(merged[field])

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_separator(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Accept a single-character separator; whitespace separators are kept as-is."""
    if value is None or value == "":
        return fallback
    if isinstance(value, str):
        if value in _TAB_ALIASES:
            return "\t"
        if len(value) == 1:
            return value

    msg = f"Invalid field '{field}': expected a single character, received {value!r}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_positive_int(value: Any, fallback: int, field: str, warnings: List[str], strict: bool) -> int:
    """Coerce to an int >= 1; numeric strings are accepted outside strict mode."""
    if isinstance(value, bool) or value is None:
        number = None
    elif isinstance(value, int):
        number = value
    elif isinstance(value, str) and not strict and value.strip().isdigit():
        number = int(value.strip())
        warnings.append(f"Field '{field}' converted from '{value}' to {number}.")
    else:
        number = None

    if number is None:
        if value is None:
            return fallback
        msg = f"Invalid field '{field}': expected int, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback

    if number < 1:
        msg = f"Invalid field '{field}': {number} is lower than 1."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback
    return number


def _as_proportion(value: Any, field: str, warnings: List[str], strict: bool) -> Optional[float]:
    """Coerce to a float in [0, 1], or None when the threshold is disabled."""
    if value is None or value == "":
        return None

    number: Optional[float] = None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = float(value)
    elif isinstance(value, str) and not strict:
        try:
            number = float(value.strip())
            warnings.append(f"Field '{field}' converted from '{value}' to {number}.")
        except ValueError:
            number = None

    if number is None:
        msg = f"Invalid field '{field}': expected float, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Threshold disabled.")
        return None

    if not 0.0 <= number <= 1.0:
        msg = f"Invalid field '{field}': {number} is outside [0, 1]."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Threshold disabled.")
        return None
    return number


def _as_choice(
        value: Any,
        fallback: str,
        options: List[str],
        field: str,
        warnings: List[str],
        strict: bool,
) -> str:
    """Accept one of `options` (case-insensitive)."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip().lower()
        if v in options:
            return v

    msg = f"Invalid field '{field}': {value!r} is not one of {options}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_list_str(value: Any, fallback: List[str], field: str, warnings: List[str], strict: bool) -> List[str]:
    """Ensure input is a list of sanitized strings, supporting CSV parsing."""
    if value is None:
        return list(fallback)

    if isinstance(value, str) and not strict:
        items = [x.strip() for x in value.split(",") if x.strip()]
        if items:
            warnings.append(f"Field '{field}' converted from CSV string to list.")
            return items
        return list(fallback)

    if isinstance(value, (list, tuple)):
        out: List[str] = []
        for i, item in enumerate(value):
            if isinstance(item, str):
                s = item.strip()
                if s:
                    out.append(s)
            else:
                msg = f"Invalid item in '{field}[{i}]': expected str."
                if strict:
                    raise TypeError(msg)
                warnings.append(f"{msg} Item discarded.")
        return out

    msg = f"Invalid field '{field}': expected list[str], received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return list(fallback)
