from __future__ import annotations

"""
Domain Constants.

Centralizes the column names, delimiters and option vocabularies shared by
the readers, the configuration layer and the CLI.
"""

from typing import List

CURRENT_CONFIG_VERSION = "1.0.0"

# -----------------------------------------------------------------------------
# INPUT FORMATS
# -----------------------------------------------------------------------------
DEFAULT_TAXONOMY_DELIMITER = ";"
DEFAULT_TABLE_SEPARATOR = ","
DEFAULT_SAMPLE_ID_COLUMN = "sampleID"

TAXONOMY_FEATURE_COLUMN = "Feature ID"
TAXONOMY_LINEAGE_COLUMN = "Taxon"

# Separator between a lineage and a depth in "a;b=2" override entries
OVERRIDE_SPEC_SEPARATOR = "="

# -----------------------------------------------------------------------------
# VIEW CONTROLS
# -----------------------------------------------------------------------------
SORT_MEAN_REL_ABUN = "mean relative abundance"
SORT_PREVALENCE = "prevalence"
SORT_OPTIONS: List[str] = [SORT_MEAN_REL_ABUN, SORT_PREVALENCE]

PREVALENCE_ABSOLUTE = "absolute"
PREVALENCE_PROPORTION = "proportion"

FILTER_OPERATORS: List[str] = [">", "<"]

# -----------------------------------------------------------------------------
# OUTPUT
# -----------------------------------------------------------------------------
OUTPUT_FORMATS: List[str] = ["tsv", "csv"]
DEFAULT_OUTPUT_FORMAT = "tsv"

EXPORT_COLUMNS: List[str] = [
    "sample_id",
    "taxon",
    "depth",
    "abundance",
    "relative_abundance",
    "prevalence",
    "prevalence_proportion",
    "mean_relative_abundance",
]
