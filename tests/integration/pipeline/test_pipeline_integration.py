from __future__ import annotations

"""
Integration tests for the projection pipeline.

Verifies:
1. A full file-to-projection run with overrides, filters and export.
2. Configured overrides that fail are reported as warnings.
3. Recoverable input errors produce a failed result instead of raising.
"""

from pathlib import Path
from typing import Any, Dict

import polars as pl
import pytest

from taxabars.core.pipeline.engine import run_pipeline


def test_full_run(pipeline_config: Dict[str, Any]) -> None:
    result = run_pipeline(pipeline_config)

    assert result.ok, result.error
    assert result.display_depth == 2
    assert result.taxon_count == 6
    assert result.sample_count == 2
    assert result.view_taxa_count == 3
    assert result.summary["max_leaf_depth"] == 3
    assert result.summary["sort"] == "mean relative abundance descending"
    for sample in result.samples:
        assert sample.relative_abundance_sum() == pytest.approx(1.0)


def test_run_with_overrides_filters_and_export(pipeline_config: Dict[str, Any], tmp_path: Path) -> None:
    target = tmp_path / "out" / "projection.csv"
    pipeline_config.update({
        "expansions": ["a;b=3"],
        "collapses": ["a;x;y=2"],
        "min_prevalence_proportion": 0.4,
        "output_path": str(target),
        "output_format": "csv",
    })

    result = run_pipeline(pipeline_config)

    assert result.ok, result.error
    assert result.warnings == []
    assert set(result.summary["active_overrides"]) == {"a;b", "a;x"}
    labels = {vt.label for vt in result.samples[0].view_taxa}
    assert labels == {"a;b;c1", "a;b;c2", "a;x"}

    df = pl.read_csv(target)
    assert df.height == result.view_taxa_count == 4
    assert Path(result.output_path).is_file()


def test_failed_overrides_become_warnings(pipeline_config: Dict[str, Any]) -> None:
    pipeline_config.update({"expansions": ["zzz=3", "a;b=1"], "display_depth": 9})

    result = run_pipeline(pipeline_config)

    assert result.ok
    assert len(result.warnings) == 3
    assert result.display_depth == 1


def test_save_error_log(pipeline_config: Dict[str, Any], tmp_path: Path) -> None:
    target = tmp_path / "projection.tsv"
    pipeline_config.update({"expansions": ["zzz=3"], "output_path": str(target), "save_error_log": True})

    result = run_pipeline(pipeline_config)

    log = tmp_path / "projection_warnings.txt"
    assert result.ok
    assert log.is_file()
    assert "zzz" in log.read_text(encoding="utf-8")


def test_missing_input_file(pipeline_config: Dict[str, Any], tmp_path: Path) -> None:
    pipeline_config["table_path"] = str(tmp_path / "missing.csv")
    result = run_pipeline(pipeline_config)
    assert not result.ok
    assert "table_path" in result.error


def test_unknown_feature_in_table(pipeline_config: Dict[str, Any], tmp_path: Path) -> None:
    table = tmp_path / "extra.csv"
    table.write_text("sampleID,f1,ghost\ns1,1,2\n", encoding="utf-8")
    pipeline_config["table_path"] = str(table)

    result = run_pipeline(pipeline_config)
    assert not result.ok
    assert "ghost" in result.error


def test_empty_table(pipeline_config: Dict[str, Any], tmp_path: Path) -> None:
    table = tmp_path / "empty.csv"
    table.write_text("sampleID,f1\n", encoding="utf-8")
    pipeline_config["table_path"] = str(table)

    result = run_pipeline(pipeline_config)
    assert not result.ok


def test_malformed_taxonomy_row(pipeline_config: Dict[str, Any], tmp_path: Path) -> None:
    taxonomy = tmp_path / "broken.tsv"
    taxonomy.write_text("Feature ID\tTaxon\nf1\ta;b;c1\nf2\t ; \nf3\ta;x;y\n", encoding="utf-8")
    pipeline_config["taxonomy_path"] = str(taxonomy)
    pipeline_config["table_path"] = str(tmp_path / "table.csv")

    failed = run_pipeline(pipeline_config)
    assert not failed.ok

    pipeline_config["skip_malformed_rows"] = True
    table = tmp_path / "small.csv"
    table.write_text("sampleID,f1,f3\ns1,1,1\n", encoding="utf-8")
    pipeline_config["table_path"] = str(table)
    assert run_pipeline(pipeline_config).ok


def test_ragged_table_row(pipeline_config: Dict[str, Any], tmp_path: Path) -> None:
    table = tmp_path / "ragged.csv"
    table.write_text("sampleID,f1,f2,f3\ns1,0.2,0.3,0.5,9\n", encoding="utf-8")
    pipeline_config["table_path"] = str(table)

    result = run_pipeline(pipeline_config)
    assert not result.ok
    assert result.error


def test_min_relative_abundance_is_inclusive(pipeline_config: Dict[str, Any]) -> None:
    pipeline_config["min_relative_abundance"] = 0.5

    result = run_pipeline(pipeline_config)

    assert result.ok, result.error
    assert sorted(vt.label for vt in result.samples[0].view_taxa) == ["a;b", "a;x"]
