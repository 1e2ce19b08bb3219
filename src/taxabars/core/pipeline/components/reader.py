from __future__ import annotations

"""
Input Readers.

Loads the taxonomy and feature table files into the shapes consumed by the
taxonomy engine: lineage rows for `TaxonTree.build` and sparse `Sample`
objects. Files are read with polars with every column kept as text so that
identifiers are never reinterpreted as numbers.
"""

import logging
import math
from typing import Dict, List, Tuple

import polars as pl

from taxabars.domain.constants import (
    DEFAULT_SAMPLE_ID_COLUMN,
    DEFAULT_TABLE_SEPARATOR,
    DEFAULT_TAXONOMY_DELIMITER,
    TAXONOMY_FEATURE_COLUMN,
    TAXONOMY_LINEAGE_COLUMN,
)
from taxabars.domain.errors import MalformedTableError
from taxabars.domain.sample_models import Sample

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def split_lineage(text: str, delimiter: str = DEFAULT_TAXONOMY_DELIMITER) -> List[str]:
    """
    Split a delimited lineage string into trimmed, non-empty level names.

    Example:
        >>> split_lineage(" k__A; p__B ;; ")
        ['k__A', 'p__B']
    """
    return [name.strip() for name in (text or "").split(delimiter) if name.strip()]


def read_taxonomy(path: str, delimiter: str = DEFAULT_TAXONOMY_DELIMITER) -> List[Tuple[str, List[str]]]:
    """
    Read a tab-separated taxonomy file into lineage rows.

    The file must provide 'Feature ID' and 'Taxon' columns; any other column
    (e.g. confidence scores) is ignored.

    Args:
        path: Taxonomy TSV file.
        delimiter: Separator between levels inside the 'Taxon' column.

    Returns:
        List[Tuple[str, List[str]]]: `(feature_id, level_names)` rows in file order.

    Raises:
        MalformedTableError: If a required column is missing.
    """
    df = _read_text_frame(path, separator="\t")
    _require_columns(df, [TAXONOMY_FEATURE_COLUMN, TAXONOMY_LINEAGE_COLUMN], path)

    rows = [
        (feature_id, split_lineage(lineage or "", delimiter))
        for feature_id, lineage in df.select(TAXONOMY_FEATURE_COLUMN, TAXONOMY_LINEAGE_COLUMN).iter_rows()
        if feature_id is not None
    ]
    logger.info(f"Read {len(rows)} taxonomy rows from {path}")
    return rows


def read_feature_table(
        path: str,
        sample_id_column: str = DEFAULT_SAMPLE_ID_COLUMN,
        separator: str = DEFAULT_TABLE_SEPARATOR,
) -> List[Sample]:
    """
    Read a feature table with one row per sample and one column per feature.

    Empty and zero cells are omitted from the resulting samples.

    Args:
        path: Feature table file.
        sample_id_column: Column holding the sample identifiers.
        separator: Field separator of the file.

    Returns:
        List[Sample]: Samples in file order.

    Raises:
        MalformedTableError: On a missing sample ID column, a ragged row or a cell that is
            not a finite, non-negative number.
    """
    df = _read_text_frame(path, separator=separator)
    _require_columns(df, [sample_id_column], path)

    feature_columns = [c for c in df.columns if c != sample_id_column]
    samples: List[Sample] = []

    for row in df.iter_rows(named=True):
        sample_id = row[sample_id_column]
        abundances: Dict[str, float] = {}
        for feature_id in feature_columns:
            value = _parse_abundance(row[feature_id], sample_id, feature_id)
            if value > 0:
                abundances[feature_id] = value
        samples.append(Sample.from_mapping(sample_id, abundances))

    logger.info(f"Read {len(samples)} samples x {len(feature_columns)} features from {path}")
    return samples

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _read_text_frame(path: str, separator: str) -> pl.DataFrame:
    """Read a delimited file keeping every column as text."""
    try:
        return pl.read_csv(path, separator=separator, infer_schema_length=0)
    except pl.exceptions.NoDataError as e:
        raise MalformedTableError(f"File '{path}' is empty.") from e
    except pl.exceptions.PolarsError as e:
        raise MalformedTableError(f"File '{path}' could not be parsed: {e}") from e


def _require_columns(df: pl.DataFrame, columns: List[str], path: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise MalformedTableError(f"File '{path}' is missing required columns: {missing}")


def _parse_abundance(cell: object, sample_id: str, feature_id: str) -> float:
    """Convert one table cell to a finite, non-negative float; blank cells count as zero."""
    if cell is None or not str(cell).strip():
        return 0.0
    try:
        value = float(str(cell).strip())
    except ValueError as e:
        raise MalformedTableError(
            f"Sample '{sample_id}', feature '{feature_id}': '{cell}' is not a number."
        ) from e
    if not math.isfinite(value):
        raise MalformedTableError(
            f"Sample '{sample_id}', feature '{feature_id}': non-finite abundance '{cell}'."
        )
    if value < 0:
        raise MalformedTableError(
            f"Sample '{sample_id}', feature '{feature_id}': negative abundance {value}."
        )
    return value
