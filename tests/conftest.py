"""Pytest configuration for MuDoGeR tests."""

import logging
import sys
from pathlib import Path

import pytest

# Add src directory to Python path
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def reset_logging_after_test():
    """Reset mudoger logger state after each test.

    setup_logging() sets propagate=False, which would break caplog in the
    tests that follow.
    """
    yield
    app_logger = logging.getLogger("mudoger")
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
    app_logger.setLevel(logging.NOTSET)
    app_logger.propagate = True


@pytest.fixture
def write_fasta():
    """Write ``{record_id: sequence}`` to a FASTA file and return its path."""

    def _write(path: Path, records: dict) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as handle:
            for record_id, seq in records.items():
                handle.write(f">{record_id}\n{seq}\n")
        return path

    return _write


@pytest.fixture
def write_tsv():
    """Write a header plus rows as a tab-separated file."""

    def _write(path: Path, header, rows=()) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        lines = ["\t".join(str(h) for h in header)]
        lines.extend("\t".join(str(v) for v in row) for row in rows)
        path.write_text("\n".join(lines) + "\n")
        return path

    return _write
