"""Tests for content-addressed bin dereplication."""

from pathlib import Path
import itertools
import sys

import pandas as pd
import pytest

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from mudoger.exceptions import PipelineError
from mudoger.modules.dereplication import (
    dereplicate_bins,
    file_digest,
    select_representatives,
    write_dereplication_map,
)


class TestSelectRepresentatives:
    """Selection is a pure function of the (id, digest) pairs."""

    def test_one_per_digest(self):
        reps = select_representatives([("b", "d1"), ("a", "d1"), ("c", "d2")])
        assert [(r.id, r.digest) for r in reps] == [("a", "d1"), ("c", "d2")]
        assert reps[0].duplicates == ("b",)

    def test_permutation_invariant(self):
        pairs = [("x", "d1"), ("y", "d2"), ("z", "d1"), ("w", "d3")]
        expected = select_representatives(pairs)
        for perm in itertools.permutations(pairs):
            assert select_representatives(perm) == expected


class TestDereplicateBins:
    """Copying unique bins under sample-based names."""

    def test_identical_bins_are_collapsed(self, tmp_path, write_fasta):
        bac = tmp_path / "bac"
        arc = tmp_path / "arc"
        write_fasta(bac / "bin.1.fa", {"c1": "ACGT" * 10})
        write_fasta(bac / "bin.2.fa", {"c1": "TTTT" * 10})
        write_fasta(arc / "bin.1.fa", {"c1": "ACGT" * 10})

        files = sorted(bac.glob("*.fa")) + sorted(arc.glob("*.fa"))
        kept = dereplicate_bins(files, tmp_path / "unique", "S1")
        assert [b.name for b in kept] == ["S1-bin.1.fa", "S1-bin.2.fa"]
        assert sorted(p.name for p in (tmp_path / "unique").iterdir()) == ["S1-bin.1.fa", "S1-bin.2.fa"]
        assert sum(len(b.duplicates) for b in kept) == 1

    def test_input_order_does_not_change_names(self, tmp_path, write_fasta):
        a = write_fasta(tmp_path / "in" / "a.fa", {"c": "AAAA"})
        b = write_fasta(tmp_path / "in" / "b.fa", {"c": "CCCC"})
        first = dereplicate_bins([a, b], tmp_path / "o1", "S")
        second = dereplicate_bins([b, a], tmp_path / "o2", "S")
        assert [(x.name, x.digest) for x in first] == [(x.name, x.digest) for x in second]

    def test_no_bins(self, tmp_path):
        with pytest.raises(PipelineError):
            dereplicate_bins([], tmp_path / "unique", "S1")

    def test_map_file(self, tmp_path, write_fasta):
        a = write_fasta(tmp_path / "a.fa", {"c": "AAAA"})
        kept = dereplicate_bins([a], tmp_path / "unique", "S1")
        write_dereplication_map(kept, tmp_path / "map.tsv")
        frame = pd.read_csv(tmp_path / "map.tsv", sep="\t", keep_default_na=False)
        assert list(frame.columns) == ["bin", "source", "md5", "duplicates"]
        assert frame.loc[0, "md5"] == file_digest(a)
