from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. The shared three-level hierarchy and samples used across unit tests.
3. On-disk taxonomy and feature table files for reader and pipeline tests.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from taxabars.core.taxonomy.projector import ViewProjector  # noqa: E402
from taxabars.core.taxonomy.tree import TaxonTree  # noqa: E402
from taxabars.domain.sample_models import Sample  # noqa: E402


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def taxonomy_rows() -> List[Tuple[str, List[str]]]:
    """
    Three features under one top-level taxon:

        a -- b -- c1 (f1)
          |    `- c2 (f2)
          `- x -- y  (f3)
    """
    return [
        ("f1", ["a", "b", "c1"]),
        ("f2", ["a", "b", "c2"]),
        ("f3", ["a", "x", "y"]),
    ]


@pytest.fixture
def tree(taxonomy_rows) -> TaxonTree:
    return TaxonTree.from_rows(taxonomy_rows)


@pytest.fixture
def projector(tree) -> ViewProjector:
    return ViewProjector(tree)


@pytest.fixture
def samples() -> List[Sample]:
    """Two samples: s1 holds all three features, s2 only f3."""
    return [
        Sample.from_mapping("s1", {"f1": 0.2, "f2": 0.3, "f3": 0.5}),
        Sample.from_mapping("s2", {"f3": 1.0}),
    ]


@pytest.fixture
def taxonomy_file(tmp_path: Path) -> Path:
    path = tmp_path / "taxonomy.tsv"
    path.write_text(
        "Feature ID\tTaxon\tConfidence\n"
        "f1\ta; b; c1\t0.99\n"
        "f2\ta; b; c2\t0.95\n"
        "f3\ta; x; y\t0.90\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def table_file(tmp_path: Path) -> Path:
    path = tmp_path / "table.csv"
    path.write_text(
        "sampleID,f1,f2,f3\n"
        "s1,0.2,0.3,0.5\n"
        "s2,0,0,1\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def pipeline_config(taxonomy_file: Path, table_file: Path) -> Dict[str, Any]:
    """
    Return a valid, complete configuration dictionary pointing at the
    on-disk fixture files.
    """
    return {
        "taxonomy_path": str(taxonomy_file),
        "table_path": str(table_file),
        "sample_id_column": "sampleID",
        "taxonomy_delimiter": ";",
        "table_separator": ",",
        "skip_malformed_rows": False,
        "display_depth": 2,
        "expansions": [],
        "collapses": [],
        "min_relative_abundance": None,
        "min_prevalence_proportion": None,
        "sort_by": "mean relative abundance",
        "sort_ascending": False,
        "output_path": "",
        "output_format": "tsv",
        "save_error_log": False,
    }
