"""Tests for shared pipeline types."""

from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from mudoger.core.pipeline_types import (
    CheckKind,
    CheckResult,
    ExecutionResult,
    FailurePolicy,
    PipelineResult,
    StepOutcome,
    StepStatus,
    VerificationFailureKind,
    VerificationResult,
)
from mudoger.exceptions import VerificationError


class TestVerificationResult:
    """Aggregation of individual checks."""

    def test_empty_result_is_ok(self):
        result = VerificationResult("checkm")
        assert result.ok
        assert result.describe() == "all checks passed"
        result.raise_for_failure()

    def test_failure_kinds_follow_check_kind(self):
        check = CheckResult(CheckKind.MIN_ROWS, "outputcheckm.tsv", passed=False, message="0 rows < 1")
        assert check.failure_kind is VerificationFailureKind.INSUFFICIENT_ROWS
        assert CheckResult(CheckKind.EXISTS, "x", passed=True).failure_kind is None

    def test_describe_lists_failures(self):
        result = VerificationResult(
            "taxonomy",
            [
                CheckResult(CheckKind.EXISTS, "a.tsv", passed=True),
                CheckResult(CheckKind.EXISTS, "b.tsv", passed=False),
                CheckResult(CheckKind.DIR_CONTENT, "bins", passed=False, message="no *.fa"),
            ],
        )
        assert not result.ok
        assert len(result.failures) == 2
        assert result.describe() == "MissingFile: b.tsv; EmptyDirectory: bins (no *.fa)"

    def test_raise_for_failure_uses_first_failure(self):
        result = VerificationResult("prokka", [CheckResult(CheckKind.NON_EMPTY, "counts.tsv", passed=False)])
        with pytest.raises(VerificationError) as exc_info:
            result.raise_for_failure()
        assert "prokka" in str(exc_info.value)


class TestExecutionResult:
    def test_success(self):
        result = ExecutionResult.success("done")
        assert result.ok and result.returncode == 0 and result.message == "done"

    def test_failure(self):
        result = ExecutionResult.failure("boom", returncode=2, stderr_tail="error")
        assert not result.ok
        assert result.returncode == 2
        assert result.stderr_tail == "error"


class TestPipelineResult:
    """Run-level views over step outcomes."""

    def _result(self, *statuses):
        outcomes = [
            StepOutcome(f"step{i}", FailurePolicy.SOFT, status=s) for i, s in enumerate(statuses)
        ]
        return PipelineResult(all_fatal_steps_ok=True, per_step=outcomes)

    def test_ok_when_done_or_skipped(self):
        assert self._result(StepStatus.DONE, StepStatus.SKIPPED).ok
        assert not self._result(StepStatus.DONE, StepStatus.FAILED_SOFT).ok

    def test_failed_includes_soft_failures(self):
        result = self._result(StepStatus.FAILED_SOFT, StepStatus.DONE, StepStatus.PENDING)
        assert [o.name for o in result.failed] == ["step0"]

    def test_counts_cover_every_status(self):
        counts = self._result(StepStatus.DONE, StepStatus.DONE, StepStatus.SKIPPED).counts()
        assert set(counts) == set(StepStatus)
        assert counts[StepStatus.DONE] == 2
        assert counts[StepStatus.FAILED] == 0

    def test_outcome_lookup(self):
        result = self._result(StepStatus.DONE)
        assert result.outcome("step0").status is StepStatus.DONE
        with pytest.raises(KeyError):
            result.outcome("missing")
