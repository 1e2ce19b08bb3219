from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Resolves the per-user data directory and normalizes user supplied paths so
that configuration and logs land in the same place on every platform.
"""

import os
from typing import Optional

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "Taxabars"
UNIX_APP_DIR_NAME = ".taxabars"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/Taxabars
    - Linux/Mac: ~/.taxabars

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        pass

    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str = "") -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Returns an empty string when both `path` and
    `fallback` are empty.

    Args:
        path: Raw input path string.
        fallback: Path to use if the input is empty.

    Returns:
        str: Normalized absolute path, or "".
    """
    p = (path or "").strip() or (fallback or "").strip()
    if not p:
        return ""
    return os.path.abspath(os.path.expandvars(os.path.expanduser(p)))


def is_readable_file(path: str) -> bool:
    """Return True if `path` names an existing regular file."""
    return bool(path) and os.path.isfile(path)
