"""Tests for exit_codes module."""

from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from mudoger.cli.exit_codes import (
    EXIT_SUCCESS,
    EXIT_ERROR,
    EXIT_USAGE,
    EXIT_SIGINT,
    EXIT_SIGTERM,
)


class TestExitCodes:
    """Test exit code constants."""

    def test_exit_success_is_zero(self):
        assert EXIT_SUCCESS == 0

    def test_exit_error_is_one(self):
        """EXIT_ERROR is also used when a fatal step fails."""
        assert EXIT_ERROR == 1

    def test_exit_usage_is_two(self):
        assert EXIT_USAGE == 2

    def test_signal_codes(self):
        assert EXIT_SIGINT == 128 + 2
        assert EXIT_SIGTERM == 128 + 15
