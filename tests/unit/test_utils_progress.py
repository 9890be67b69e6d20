"""Tests for utils progress module."""

from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from mudoger.utils.progress import iter_progress


class TestIterProgress:
    """Test cases for iter_progress function."""

    def test_disabled_passes_items_through(self):
        bins = [Path("S1-bin.1.fa"), Path("S1-bin.2.fa")]
        assert list(iter_progress(bins, enabled=False)) == bins

    def test_enabled_yields_every_item(self):
        result = list(iter_progress(range(4), total=4, desc="prokka"))
        assert result == [0, 1, 2, 3]

    def test_returns_iterator(self):
        progress_iter = iter_progress([1, 2, 3], enabled=False)
        assert next(progress_iter) == 1
        assert list(progress_iter) == [2, 3]

    def test_generator_input(self):
        """Generators have no length; total may be omitted."""
        names = (f"viral-particle-{i}" for i in range(1, 4))
        assert list(iter_progress(names, desc="split")) == [
            "viral-particle-1", "viral-particle-2", "viral-particle-3",
        ]

    def test_empty_iterable(self):
        assert list(iter_progress([], total=0, desc="checkm")) == []
