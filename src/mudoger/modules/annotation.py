"""Summaries of taxonomy (GTDB-Tk) and gene annotation (Prokka) outputs."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from mudoger.modules.schemas import PROKKA_KNOWN, PROKKA_UNKNOWN
from mudoger.utils.logging import get_logger

logger = get_logger("annotation")

HYPOTHETICAL = "hypothetical"


def merge_summaries(summaries: Sequence[Union[str, Path]], output: Union[str, Path]) -> int:
    """Concatenate tool summary tables that share a header into ``output``.

    Missing or empty inputs are skipped. Returns the number of data rows
    written; nothing is written when no input has a header.
    """
    frames = []
    for path in summaries:
        path = Path(path)
        if not path.is_file() or path.stat().st_size == 0:
            logger.debug(f"Summary not present: {path}")
            continue
        frames.append(pd.read_csv(path, sep="\t", dtype=str, keep_default_na=False))
    if not frames:
        return 0
    merged = pd.concat(frames, ignore_index=True, sort=False).fillna("")
    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    merged.to_csv(output, sep="\t", index=False)
    return len(merged)


def find_prokka_table(prokka_dir: Union[str, Path], genome: str) -> Optional[Path]:
    """Return the ``PROKKA_*.tsv`` feature table for ``genome`` if it exists."""
    matches = sorted((Path(prokka_dir) / genome).glob("PROKKA_*.tsv"))
    return matches[0] if matches else None


def has_features(table: Union[str, Path, None]) -> bool:
    """True when a feature table holds at least one row below its header."""
    if table is None or not Path(table).is_file():
        return False
    with open(table, encoding="utf-8", errors="replace") as handle:
        next(handle, None)
        return any(line.strip() for line in handle)


def count_genes(table: Union[str, Path]) -> Tuple[int, int]:
    """Count (known, unknown) features; unknown products mention 'hypothetical'."""
    known = unknown = 0
    with open(table, encoding="utf-8", errors="replace") as handle:
        next(handle, None)
        for line in handle:
            if not line.strip():
                continue
            if HYPOTHETICAL in line:
                unknown += 1
            else:
                known += 1
    return known, unknown


def prokka_gene_counts(
    prokka_dir: Union[str, Path], genomes: Iterable[str]
) -> pd.DataFrame:
    """Gene counts per genome; genomes without a Prokka table count as 0/0."""
    rows: List[tuple] = []
    for genome in genomes:
        table = find_prokka_table(prokka_dir, genome)
        known, unknown = count_genes(table) if table else (0, 0)
        rows.append((genome, known, unknown))
    return pd.DataFrame(rows, columns=["genome", PROKKA_KNOWN, PROKKA_UNKNOWN])
