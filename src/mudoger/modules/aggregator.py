"""
Join per-tool metric tables into one row per genome.

The set of genomes is defined by the caller (the bin files on disk), never by
the tables: a genome a tool did not report still gets a row, filled with the
column defaults. How a genome id is matched against each table's key column is
an explicit :class:`KeyRule`; ambiguous or missing matches are recorded as
:class:`JoinIssue` entries and logged, never fatal.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from mudoger.config import QualityConfig
from mudoger.exceptions import VerificationError
from mudoger.modules.schemas import (
    ACCEPTED,
    COMPLETENESS,
    CONTAMINATION,
    GENOME_ID,
    QUALITY_SCORE,
    ColumnSpec,
    TableSchema,
    read_table,
)
from mudoger.utils.logging import LogTemplates, get_logger

logger = get_logger("aggregator")

FASTA_SUFFIXES = (".fa", ".fasta", ".fna")


class MatchMode(str, Enum):
    EXACT = "exact"
    PREFIX = "prefix"
    SUBSTRING = "substring"


@dataclass(frozen=True)
class KeyRule:
    """How a genome id is compared with a table key.

    Both sides are normalised by stripping the configured suffixes first, so
    ``bin.1`` matches ``bin.1.fa`` under ``EXACT``.
    """

    mode: MatchMode = MatchMode.EXACT
    strip_suffixes: tuple[str, ...] = FASTA_SUFFIXES

    def normalize(self, value: str) -> str:
        value = str(value).strip()
        for suffix in self.strip_suffixes:
            if suffix and value.endswith(suffix):
                return value[: -len(suffix)]
        return value

    def matches(self, genome_id: str, key: str) -> bool:
        if self.mode is MatchMode.EXACT:
            return genome_id == key
        if self.mode is MatchMode.PREFIX:
            return key.startswith(genome_id)
        return genome_id in key


@dataclass(frozen=True)
class TableRef:
    """A source table to join: its schema, location and matching rule."""

    schema: TableSchema
    path: Optional[Path]
    key_rule: Optional[KeyRule] = None

    @property
    def name(self) -> str:
        return self.schema.name


class JoinIssueKind(str, Enum):
    AMBIGUOUS = "AmbiguousJoin"
    NO_MATCH = "NoMatch"
    MISSING_TABLE = "MissingTable"


@dataclass(frozen=True)
class JoinIssue:
    kind: JoinIssueKind
    table: str
    genome_id: Optional[str] = None
    detail: str = ""

    def __str__(self) -> str:
        target = f" for {self.genome_id}" if self.genome_id else ""
        detail = f": {self.detail}" if self.detail else ""
        return f"{self.kind.value} in {self.table}{target}{detail}"


@dataclass
class GenomeRecord:
    id: str
    attributes: Dict[str, Any] = field(default_factory=dict)

    @property
    def completeness(self) -> float:
        return float(self.attributes.get(COMPLETENESS, 0) or 0)

    @property
    def contamination(self) -> float:
        return float(self.attributes.get(CONTAMINATION, 0) or 0)

    def quality_score(self, quality: Optional[QualityConfig] = None) -> float:
        return (quality or QualityConfig()).quality_score(self.completeness, self.contamination)

    def is_accepted(self, quality: Optional[QualityConfig] = None) -> bool:
        return (quality or QualityConfig()).is_accepted(self.completeness, self.contamination)


RecordPredicate = Callable[[GenomeRecord], bool]


@dataclass
class MasterTable:
    """One record per canonical genome id, columns in source-table order."""

    records: List[GenomeRecord]
    columns: List[str]
    issues: List[JoinIssue] = field(default_factory=list)
    key_column: str = GENOME_ID

    @property
    def ids(self) -> List[str]:
        return [r.id for r in self.records]

    def __len__(self) -> int:
        return len(self.records)

    def has_quality(self) -> bool:
        return COMPLETENESS in self.columns and CONTAMINATION in self.columns

    def to_frame(self, quality: Optional[QualityConfig] = None) -> pd.DataFrame:
        """Return the table as a DataFrame.

        With ``quality`` given and completeness/contamination present, the
        derived ``quality_score`` and ``accepted`` columns are appended.
        """
        rows = [
            {self.key_column: r.id, **{c: r.attributes.get(c) for c in self.columns}}
            for r in self.records
        ]
        frame = pd.DataFrame(rows, columns=[self.key_column] + list(self.columns))
        if quality is not None and self.has_quality():
            frame[QUALITY_SCORE] = [r.quality_score(quality) for r in self.records]
            frame[ACCEPTED] = [r.is_accepted(quality) for r in self.records]
        return frame

    def partition(
        self,
        predicate: Optional[RecordPredicate] = None,
        quality: Optional[QualityConfig] = None,
    ) -> Tuple["MasterTable", "MasterTable"]:
        """Split into (accepted, rejected); defaults to the quality-score rule."""
        if predicate is None:
            def predicate(record: GenomeRecord) -> bool:
                return record.is_accepted(quality)

        accepted = [r for r in self.records if predicate(r)]
        rejected = [r for r in self.records if not predicate(r)]
        return (
            MasterTable(accepted, list(self.columns), [], self.key_column),
            MasterTable(rejected, list(self.columns), [], self.key_column),
        )

    def write(self, path: Union[str, Path], quality: Optional[QualityConfig] = None) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_frame(quality).to_csv(path, sep="\t", index=False)
        return path


def _coerce(value: Any, spec: ColumnSpec) -> Any:
    if value is None:
        return spec.default
    text = str(value).strip()
    if text == "":
        return spec.default
    if not spec.numeric:
        return text
    number = pd.to_numeric(text, errors="coerce")
    if pd.isna(number):
        return spec.default
    return number.item() if hasattr(number, "item") else number


def _index_rows(
    frame: pd.DataFrame, key_column: str, rule: KeyRule
) -> List[Tuple[str, Dict[str, Any]]]:
    return [
        (rule.normalize(row[key_column]), row)
        for row in frame.to_dict(orient="records")
    ]


def _lookup(
    genome_id: str, rows: List[Tuple[str, Dict[str, Any]]], rule: KeyRule
) -> List[Dict[str, Any]]:
    return [row for key, row in rows if rule.matches(genome_id, key)]


def aggregate(
    source_tables: Sequence[TableRef],
    canonical_ids: Iterable[str],
    key_rule: Optional[KeyRule] = None,
    key_column: str = GENOME_ID,
) -> MasterTable:
    """Join ``source_tables`` onto ``canonical_ids``.

    Args:
        source_tables: Tables to join, in output column order
        canonical_ids: Genome ids that must each appear exactly once
        key_rule: Rule for tables that do not declare their own
        key_column: Name of the id column in the output

    Returns:
        MasterTable with one record per canonical id. When a table has several
        rows for an id the first one (file order) is used and an
        ``AmbiguousJoin`` issue is recorded; an id with no row gets the column
        defaults and a ``NoMatch`` issue. A table file that does not exist
        contributes defaults for every id.
    """
    default_rule = key_rule or KeyRule()
    ids: List[str] = []
    for genome_id in canonical_ids:
        normalized = default_rule.normalize(genome_id)
        if normalized in ids:
            logger.warning(f"Duplicate genome id ignored: {genome_id}")
            continue
        ids.append(normalized)

    records = [GenomeRecord(genome_id) for genome_id in ids]
    columns: List[str] = []
    issues: List[JoinIssue] = []

    for ref in source_tables:
        rule = ref.key_rule or default_rule
        specs = ref.schema.columns
        columns.extend(spec.target for spec in specs)

        if ref.path is None or not Path(ref.path).is_file():
            issues.append(JoinIssue(JoinIssueKind.MISSING_TABLE, ref.name, detail=str(ref.path)))
            for record in records:
                for spec in specs:
                    record.attributes[spec.target] = spec.default
            continue

        rows = _index_rows(read_table(ref.path, ref.schema), ref.schema.key_column, rule)
        for record in records:
            matches = _lookup(record.id, rows, rule)
            if not matches:
                issues.append(JoinIssue(JoinIssueKind.NO_MATCH, ref.name, record.id))
                row: Dict[str, Any] = {}
            else:
                if len(matches) > 1:
                    issues.append(
                        JoinIssue(
                            JoinIssueKind.AMBIGUOUS,
                            ref.name,
                            record.id,
                            f"{len(matches)} rows match under {rule.mode.value} rule; using the first",
                        )
                    )
                row = matches[0]
            for spec in specs:
                record.attributes[spec.target] = _coerce(row.get(spec.source), spec)

    for issue in issues:
        logger.debug(str(issue))
    logger.info(
        LogTemplates.JOIN_SUMMARY.format(tables=len(source_tables), genomes=len(records), issues=len(issues))
    )

    return MasterTable(records=records, columns=columns, issues=issues, key_column=key_column)


def materialize(
    ids: Sequence[str],
    source_dir: Union[str, Path],
    dest_dir: Union[str, Path],
    suffix: str = ".fa",
) -> List[Path]:
    """Copy the sequence file of each id into ``dest_dir`` and check the count.

    Raises:
        VerificationError: If the number of files present afterwards differs
            from the number of ids.
    """
    source_dir = Path(source_dir)
    dest_dir = Path(dest_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)

    copied: List[Path] = []
    for genome_id in dict.fromkeys(ids):
        source = source_dir / f"{genome_id}{suffix}"
        if not source.is_file():
            logger.warning(f"Sequence file not found for {genome_id}: {source}")
            continue
        target = dest_dir / source.name
        shutil.copy2(source, target)
        copied.append(target)

    expected = len(dict.fromkeys(ids))
    present = sum(1 for genome_id in dict.fromkeys(ids) if (dest_dir / f"{genome_id}{suffix}").is_file())
    if present != expected:
        raise VerificationError(
            f"Copied {present} of {expected} sequence files into {dest_dir}",
            kind="CountMismatch",
            path=dest_dir,
        )
    logger.info(LogTemplates.FILES_COPIED.format(count=len(copied), path=dest_dir))
    return copied


def load_master_table(path: Union[str, Path], key_column: str = GENOME_ID) -> MasterTable:
    """Read back a table written by :meth:`MasterTable.write`."""
    frame = pd.read_csv(path, sep="\t", keep_default_na=False)
    derived = {QUALITY_SCORE, ACCEPTED}
    columns = [c for c in frame.columns if c != key_column and c not in derived]
    records = [
        GenomeRecord(str(row[key_column]), {c: row[c] for c in columns})
        for row in frame.to_dict(orient="records")
    ]
    return MasterTable(records=records, columns=columns, key_column=key_column)
