"""
Named-column schemas for the tables MuDoGeR reads and writes.

Tools report their metrics in tab-separated tables whose column order has
changed between releases. Every table is therefore described by the names of
its columns, mapped to the names used in MuDoGeR's own outputs, instead of by
position. Each schema carries a version so that a tool upgrade that renames a
column can be handled by adding a new schema next to the old one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd

from mudoger.constants import UNCLASSIFIED
from mudoger.exceptions import FileFormatError


@dataclass(frozen=True)
class ColumnSpec:
    """A source column, its output name and the value used when it is missing."""

    source: str
    target: str
    numeric: bool = False
    default: Any = 0


@dataclass(frozen=True)
class TableSchema:
    name: str
    version: str
    key_column: str
    columns: tuple[ColumnSpec, ...] = field(default_factory=tuple)
    sep: str = "\t"

    @property
    def source_columns(self) -> tuple[str, ...]:
        return (self.key_column,) + tuple(c.source for c in self.columns)

    @property
    def target_columns(self) -> tuple[str, ...]:
        return tuple(c.target for c in self.columns)


def _num(source: str, target: Optional[str] = None, default: Any = 0) -> ColumnSpec:
    return ColumnSpec(source, target or source, numeric=True, default=default)


def _text(source: str, target: Optional[str] = None, default: Any = UNCLASSIFIED) -> ColumnSpec:
    return ColumnSpec(source, target or source, numeric=False, default=default)


# === Output column names ===
GENOME_ID = "OTU"
COMPLETENESS = "completeness"
CONTAMINATION = "contamination"
STRAIN_HETEROGENEITY = "str.heterogeneity"
TAXONOMY = "taxonomy"
GENOME_SIZE = "genome_size"
SCAFFOLDS = "#scaffolds"
LARGEST_SCAFFOLD = "largest_scaff"
N50 = "N50"
N90 = "N90"
PROKKA_KNOWN = "prokka_known"
PROKKA_UNKNOWN = "prokka_unknown"
QUALITY_SCORE = "quality_score"
ACCEPTED = "accepted"

# CheckM `lineage_wf --tab_table` (CheckM 1.x)
CHECKM_HEADER = (
    "Bin Id", "Marker lineage", "# genomes", "# markers", "# marker sets",
    "0", "1", "2", "3", "4", "5+",
    "Completeness", "Contamination", "Strain heterogeneity",
)
CHECKM = TableSchema(
    name="checkm",
    version="1",
    key_column="Bin Id",
    columns=(
        _num("Completeness", COMPLETENESS),
        _num("Contamination", CONTAMINATION),
        _num("Strain heterogeneity", STRAIN_HETEROGENEITY),
    ),
)

# GTDB-Tk `classify_wf` summary (bac120 and ar53 share the layout)
GTDBTK = TableSchema(
    name="gtdbtk",
    version="2",
    key_column="user_genome",
    columns=(_text("classification", TAXONOMY),),
)

GENOME_STATS_HEADER = (
    "genome_name", "genome_size", "number_of_scaffolds", "largest_scaffold_size", "N50", "N90",
)
GENOME_STATS = TableSchema(
    name="genome_stats",
    version="1",
    key_column="genome_name",
    columns=(
        _num("genome_size", GENOME_SIZE),
        _num("number_of_scaffolds", SCAFFOLDS),
        _num("largest_scaffold_size", LARGEST_SCAFFOLD),
        _num("N50", N50),
        _num("N90", N90),
    ),
)

PROKKA_COUNTS = TableSchema(
    name="prokka_counts",
    version="1",
    key_column="genome",
    columns=(_num(PROKKA_KNOWN), _num(PROKKA_UNKNOWN)),
)

# CheckV `end_to_end` quality_summary.tsv
CHECKV_HEADER = (
    "contig_id", "contig_length", "provirus", "proviral_length", "gene_count", "viral_genes",
    "host_genes", "checkv_quality", "miuvig_quality", "completeness", "completeness_method",
    "contamination", "kmer_freq", "warnings",
)
CHECKV = TableSchema(
    name="checkv",
    version="1",
    key_column="contig_id",
    columns=tuple(
        _text(column, "uvig_length" if column == "contig_length" else column, default="")
        for column in CHECKV_HEADER[1:]
    ),
)

# WIsH prediction.list
WISH = TableSchema(
    name="wish",
    version="1",
    key_column="Phage",
    columns=(
        _text("Best hit", "putative_host", default=""),
        _num("LogLikelihood", "likelihood", default=""),
    ),
)

UVIG_MAPPING = TableSchema(
    name="uvig_mapping",
    version="1",
    key_column="uvig",
    columns=(_text("original_contig", default=""),),
)


def read_table(path: Union[str, Path], schema: TableSchema) -> pd.DataFrame:
    """Read ``path`` and return the key column plus the schema's source columns.

    Raises:
        FileFormatError: If the table lacks a column named by the schema.
    """
    try:
        frame = pd.read_csv(path, sep=schema.sep, dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError as exc:
        raise FileFormatError(f"{schema.name} table is empty: {path}") from exc
    frame.columns = [str(c).strip() for c in frame.columns]
    missing = [c for c in schema.source_columns if c not in frame.columns]
    if missing:
        raise FileFormatError(
            f"{schema.name} table (schema v{schema.version}) {path} is missing columns: {missing}"
        )
    return frame[list(schema.source_columns)]
