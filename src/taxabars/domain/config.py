from __future__ import annotations

"""
Configuration Domain Management.

Handles persistent storage of the last used run settings and application
preferences as JSON. Override lists are session-only and are stripped
before anything is written to disk.
"""

import json
import logging
import os
from typing import Any, Dict

from taxabars.domain.constants import (
    CURRENT_CONFIG_VERSION,
    DEFAULT_OUTPUT_FORMAT,
    DEFAULT_SAMPLE_ID_COLUMN,
    DEFAULT_TABLE_SEPARATOR,
    DEFAULT_TAXONOMY_DELIMITER,
    SORT_MEAN_REL_ABUN,
)
from taxabars.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE = os.path.join(get_user_data_dir(), "config.json")

# Keys that only live for one session
SESSION_ONLY_KEYS = ("expansions", "collapses")


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration (Session State).
    This dictionary drives the behavior of the Pipeline.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Inputs
        "taxonomy_path": "",
        "table_path": "",
        "sample_id_column": DEFAULT_SAMPLE_ID_COLUMN,
        "taxonomy_delimiter": DEFAULT_TAXONOMY_DELIMITER,
        "table_separator": DEFAULT_TABLE_SEPARATOR,
        "skip_malformed_rows": False,

        # Projection
        "display_depth": 1,
        "expansions": [],
        "collapses": [],

        # View Controls
        "min_relative_abundance": None,
        "min_prevalence_proportion": None,
        "sort_by": SORT_MEAN_REL_ABUN,
        "sort_ascending": False,

        # Output
        "output_path": "",
        "output_format": DEFAULT_OUTPUT_FORMAT,

        # Diagnostics
        "save_error_log": False,
    }


def get_default_app_state() -> Dict[str, Any]:
    """
    Generate the complete default application state structure.

    Returns:
        Dict[str, Any]: The full JSON structure for config.json.
    """
    return {
        "version": CURRENT_CONFIG_VERSION,
        "last_session": get_default_config(),
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_app_state() -> Dict[str, Any]:
    """
    Load application state from disk.
    Unknown top-level keys are ignored.

    Returns:
        Dict[str, Any]: The loaded state or a default structure on failure.
    """
    default_state = get_default_app_state()

    if not os.path.exists(CONFIG_FILE):
        logger.debug("Config file not found. Returning defaults.")
        return default_state

    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load config: {e}. Using defaults.")
        return default_state

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return default_state

    state = default_state
    if isinstance(data.get("last_session"), dict):
        state["last_session"].update(_strip_session_only(data["last_session"]))

    state["version"] = CURRENT_CONFIG_VERSION
    return state


def save_app_state(state: Dict[str, Any]) -> None:
    """
    Persist application state to disk.

    Args:
        state: The state dictionary to save.
    """
    to_save = dict(state)
    to_save["version"] = CURRENT_CONFIG_VERSION
    if isinstance(to_save.get("last_session"), dict):
        to_save["last_session"] = _strip_session_only(to_save["last_session"])

    try:
        os.makedirs(os.path.dirname(CONFIG_FILE), exist_ok=True)
        with open(CONFIG_FILE, "w", encoding="utf-8") as f:
            json.dump(to_save, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {CONFIG_FILE}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")


# -----------------------------------------------------------------------------
# Facade API
# -----------------------------------------------------------------------------
def load_config() -> Dict[str, Any]:
    """
    Retrieve the active configuration (Last Session) directly.
    """
    state = load_app_state()
    defaults = get_default_config()
    defaults.update(state.get("last_session", {}))
    return defaults


def save_config(config: Dict[str, Any]) -> None:
    """
    Save the provided config as the 'last_session'.
    """
    state = load_app_state()
    state["last_session"] = config
    save_app_state(state)


def _strip_session_only(config: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in config.items() if k not in SESSION_ONLY_KEYS}
