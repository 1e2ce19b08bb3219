from __future__ import annotations

"""
Projection Export.

Flattens the projected samples into a long table (one row per sample and
view taxon) and persists it as TSV or CSV.
"""

import logging
import os
from typing import Iterable

import polars as pl

from taxabars.domain.constants import DEFAULT_OUTPUT_FORMAT, EXPORT_COLUMNS, OUTPUT_FORMATS
from taxabars.domain.sample_models import Sample

logger = logging.getLogger(__name__)

_SCHEMA = {
    "sample_id": pl.Utf8,
    "taxon": pl.Utf8,
    "depth": pl.Int64,
    "abundance": pl.Float64,
    "relative_abundance": pl.Float64,
    "prevalence": pl.Int64,
    "prevalence_proportion": pl.Float64,
    "mean_relative_abundance": pl.Float64,
}


def projection_to_frame(samples: Iterable[Sample], delimiter: str = ";") -> pl.DataFrame:
    """
    Build a long-format DataFrame from projected samples.

    Row order follows sample order, then the order of each sample's view taxa.
    """
    records = []
    for sample in samples:
        for vt in sample.view_taxa:
            records.append({
                "sample_id": sample.sample_id,
                "taxon": vt.label,
                "depth": len(vt.label.split(delimiter)) if vt.label else 0,
                "abundance": vt.abundance,
                "relative_abundance": vt.relative_abundance,
                "prevalence": vt.prevalence,
                "prevalence_proportion": vt.prevalence_proportion,
                "mean_relative_abundance": vt.mean_relative_abundance,
            })

    return pl.DataFrame(records, schema=_SCHEMA).select(EXPORT_COLUMNS)


def write_projection(
        samples: Iterable[Sample],
        output_path: str,
        fmt: str = DEFAULT_OUTPUT_FORMAT,
        delimiter: str = ";",
) -> str:
    """
    Persist the projected table to `output_path`.

    Args:
        samples: Samples after a render pass.
        output_path: Destination file; parent directories are created.
        fmt: 'tsv' or 'csv'.
        delimiter: Lineage delimiter, used to derive the depth column.

    Returns:
        str: Absolute path of the written file.

    Raises:
        ValueError: On an unsupported format.
        OSError: If the destination cannot be written.
    """
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(f"Unsupported output format {fmt!r}; expected one of {OUTPUT_FORMATS}.")

    out_path = os.path.abspath(output_path)
    out_dir = os.path.dirname(out_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)

    df = projection_to_frame(samples, delimiter=delimiter)
    df.write_csv(out_path, separator="\t" if fmt == "tsv" else ",")

    logger.info(f"Projected table saved to file: {out_path} ({df.height} rows)")
    return out_path
