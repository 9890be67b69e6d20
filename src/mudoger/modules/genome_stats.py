"""Assembly statistics (size, scaffold counts, N50/N90) for genome bins."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence, Union

import numpy as np
import pandas as pd
from Bio import SeqIO

from mudoger.modules.schemas import GENOME_STATS_HEADER


def n_statistic(lengths: Iterable[int], fraction: float) -> int:
    """Return the Nx statistic for ``fraction`` (0.5 for N50, 0.9 for N90).

    Lengths are sorted in descending order and accumulated; the result is the
    first length at which the cumulative share of the total reaches
    ``fraction``. An empty input gives 0.
    """
    values = np.sort(np.asarray(list(lengths), dtype=np.int64))[::-1]
    if values.size == 0:
        return 0
    total = values.sum()
    if total <= 0:
        return 0
    cumulative = np.cumsum(values)
    # absorb float rounding at exact boundaries
    index = int(np.searchsorted(cumulative, fraction * total - 1e-9, side="left"))
    index = min(index, values.size - 1)
    return int(values[index])


@dataclass(frozen=True)
class GenomeStats:
    genome_name: str
    genome_size: int
    number_of_scaffolds: int
    largest_scaffold_size: int
    n50: int
    n90: int

    @classmethod
    def from_lengths(cls, genome_name: str, lengths: Sequence[int]) -> "GenomeStats":
        return cls(
            genome_name=genome_name,
            genome_size=int(sum(lengths)),
            number_of_scaffolds=len(lengths),
            largest_scaffold_size=int(max(lengths)) if lengths else 0,
            n50=n_statistic(lengths, 0.5),
            n90=n_statistic(lengths, 0.9),
        )

    def as_row(self) -> list:
        return [
            self.genome_name,
            self.genome_size,
            self.number_of_scaffolds,
            self.largest_scaffold_size,
            self.n50,
            self.n90,
        ]


def contig_lengths(fasta: Union[str, Path]) -> List[int]:
    return [len(record.seq) for record in SeqIO.parse(str(fasta), "fasta")]


def compute_genome_stats(fasta: Union[str, Path]) -> GenomeStats:
    """Statistics for one FASTA file; the genome name keeps the file suffix."""
    fasta = Path(fasta)
    return GenomeStats.from_lengths(fasta.name, contig_lengths(fasta))


def write_genome_stats(fastas: Iterable[Union[str, Path]], output: Union[str, Path]) -> pd.DataFrame:
    """Write ``prok_genomes_stats.tsv`` style output for ``fastas``."""
    rows = [compute_genome_stats(f).as_row() for f in sorted(Path(p) for p in fastas)]
    frame = pd.DataFrame(rows, columns=list(GENOME_STATS_HEADER))
    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(output, sep="\t", index=False)
    return frame
