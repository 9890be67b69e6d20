"""Tests for the exception hierarchy."""

from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from mudoger.exceptions import (
    ConfigurationError,
    DependencyError,
    ExternalToolError,
    FileFormatError,
    MissingInputError,
    MudogerError,
    PipelineError,
    VerificationError,
)


class TestExceptions:
    """All errors derive from MudogerError and keep their details."""

    def test_hierarchy(self):
        for exc_type in (
            ConfigurationError, DependencyError, ExternalToolError, FileFormatError,
            MissingInputError, PipelineError, VerificationError,
        ):
            assert issubclass(exc_type, MudogerError)

    def test_dependency_error_is_a_tool_error(self):
        """Missing tools fail a step the same way a failing tool does."""
        assert issubclass(DependencyError, ExternalToolError)

    def test_external_tool_error_details(self, tmp_path):
        exc = ExternalToolError(
            "checkm failed", command=["checkm", "lineage_wf"], returncode=2,
            stderr="out of memory", log_file=tmp_path / "checkm.log",
        )
        assert str(exc) == "checkm failed"
        assert exc.command == ["checkm", "lineage_wf"]
        assert exc.returncode == 2
        assert exc.stderr == "out of memory"
        assert exc.log_file == tmp_path / "checkm.log"

    def test_missing_input_paths(self, tmp_path):
        exc = MissingInputError("no hosts", paths=[tmp_path / "bins"])
        assert exc.paths == [str(tmp_path / "bins")]

    def test_verification_error(self, tmp_path):
        exc = VerificationError("copy mismatch", kind="CountMismatch", path=tmp_path)
        assert exc.kind == "CountMismatch"
        assert exc.path == str(tmp_path)
