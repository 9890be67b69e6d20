"""Tests for the eukaryotic bin size filter."""

from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from mudoger.modules.bin_filter import filter_bins_by_size


class TestFilterBinsBySize:
    """Bins must be strictly larger than the threshold."""

    def test_keeps_only_larger_bins(self, tmp_path):
        bins = tmp_path / "bins"
        bins.mkdir()
        (bins / "small.fa").write_bytes(b"A" * 100)
        (bins / "exact.fa").write_bytes(b"A" * 500)
        (bins / "large.fa").write_bytes(b"A" * 501)
        kept = filter_bins_by_size(bins, tmp_path / "kept", 500)
        assert [p.name for p in kept] == ["large.fa"]
        assert sorted(p.name for p in (tmp_path / "kept").iterdir()) == ["large.fa"]

    def test_empty_directory(self, tmp_path):
        (tmp_path / "bins").mkdir()
        assert filter_bins_by_size(tmp_path / "bins", tmp_path / "kept", 10) == []
        assert (tmp_path / "kept").is_dir()

    def test_rerun_drops_bins_that_no_longer_pass(self, tmp_path):
        bins = tmp_path / "bins"
        bins.mkdir()
        (bins / "bin.0.fa").write_bytes(b"A" * 800)
        (bins / "bin.1.fa").write_bytes(b"A" * 900)
        filter_bins_by_size(bins, tmp_path / "kept", 500)

        (bins / "bin.1.fa").write_bytes(b"A" * 100)
        kept = filter_bins_by_size(bins, tmp_path / "kept", 500)
        assert [p.name for p in kept] == ["bin.0.fa"]
        assert sorted(p.name for p in (tmp_path / "kept").glob("*.fa")) == ["bin.0.fa"]
