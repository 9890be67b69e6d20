"""Tests for genome assembly statistics."""

from pathlib import Path
import sys

import pandas as pd
import pytest

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from mudoger.modules.genome_stats import (
    GenomeStats,
    compute_genome_stats,
    n_statistic,
    write_genome_stats,
)
from mudoger.modules.schemas import GENOME_STATS_HEADER


class TestNStatistic:
    """N50 / N90 over contig lengths."""

    def test_n50_example(self):
        assert n_statistic([100, 90, 80, 70, 60], 0.5) == 80

    def test_n90_example(self):
        # cumulative 100, 190, 270, 340, 400; 90% of 400 is reached at 60
        assert n_statistic([100, 90, 80, 70, 60], 0.9) == 60

    def test_order_does_not_matter(self):
        assert n_statistic([60, 100, 70, 90, 80], 0.5) == 80

    def test_exact_boundary(self):
        # 50% of 200 is reached exactly by the first contig
        assert n_statistic([100, 50, 50], 0.5) == 100

    def test_single_contig(self):
        assert n_statistic([1234], 0.5) == 1234
        assert n_statistic([1234], 0.9) == 1234

    def test_empty(self):
        assert n_statistic([], 0.5) == 0


class TestGenomeStats:
    """Per-FASTA statistics and the stats table."""

    def test_from_lengths(self):
        stats = GenomeStats.from_lengths("bin.1.fa", [100, 90, 80, 70, 60])
        assert stats.genome_size == 400
        assert stats.number_of_scaffolds == 5
        assert stats.largest_scaffold_size == 100
        assert (stats.n50, stats.n90) == (80, 60)

    def test_from_fasta(self, tmp_path, write_fasta):
        fasta = write_fasta(tmp_path / "bin.1.fa", {"c1": "A" * 100, "c2": "C" * 50, "c3": "G" * 25})
        stats = compute_genome_stats(fasta)
        assert stats.genome_name == "bin.1.fa"
        assert stats.genome_size == 175
        assert stats.n50 == 100

    def test_write_table(self, tmp_path, write_fasta):
        fastas = [
            write_fasta(tmp_path / "b.fa", {"c1": "A" * 10}),
            write_fasta(tmp_path / "a.fa", {"c1": "A" * 30, "c2": "A" * 20}),
        ]
        output = tmp_path / "stats" / "prok_genomes_stats.tsv"
        write_genome_stats(fastas, output)
        frame = pd.read_csv(output, sep="\t")
        assert tuple(frame.columns) == GENOME_STATS_HEADER
        assert list(frame["genome_name"]) == ["a.fa", "b.fa"]
        assert list(frame["genome_size"]) == [50, 10]

    def test_empty_fasta(self, tmp_path):
        empty = tmp_path / "empty.fa"
        empty.write_text("")
        stats = compute_genome_stats(empty)
        assert stats.genome_size == 0
        assert stats.n50 == 0
