"""Shared pipeline types.

Only enums and dataclasses live here so that step definitions, the verifier
and the runner can import them without pulling in each other.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence


class FailurePolicy(str, Enum):
    """What a step failure means for the rest of the run."""

    FATAL = "fatal"
    SOFT = "soft"


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SKIPPED = "skipped"
    DONE = "done"
    FAILED = "failed"
    FAILED_SOFT = "failed_soft"


class FailureKind(str, Enum):
    MISSING_INPUT = "MissingInput"
    VERIFICATION_FAILURE = "VerificationFailure"
    EXECUTION_FAILURE = "ExecutionFailure"
    INCONSISTENT_STATE = "InconsistentState"


class CheckKind(str, Enum):
    """Individual checks performed by the output verifier."""

    EXISTS = "exists"
    NON_EMPTY = "non_empty"
    MIN_ROWS = "min_rows"
    MIN_COLUMNS = "min_columns"
    DIR_EXISTS = "dir_exists"
    DIR_CONTENT = "dir_content"


class VerificationFailureKind(str, Enum):
    MISSING_FILE = "MissingFile"
    EMPTY_FILE = "EmptyFile"
    INSUFFICIENT_ROWS = "InsufficientRows"
    MALFORMED_SCHEMA = "MalformedSchema"
    MISSING_DIRECTORY = "MissingDirectory"
    EMPTY_DIRECTORY = "EmptyDirectory"


# Failure kind reported when a check of the given kind does not pass
CHECK_FAILURES = {
    CheckKind.EXISTS: VerificationFailureKind.MISSING_FILE,
    CheckKind.NON_EMPTY: VerificationFailureKind.EMPTY_FILE,
    CheckKind.MIN_ROWS: VerificationFailureKind.INSUFFICIENT_ROWS,
    CheckKind.MIN_COLUMNS: VerificationFailureKind.MALFORMED_SCHEMA,
    CheckKind.DIR_EXISTS: VerificationFailureKind.MISSING_DIRECTORY,
    CheckKind.DIR_CONTENT: VerificationFailureKind.EMPTY_DIRECTORY,
}


@dataclass(frozen=True)
class CheckResult:
    kind: CheckKind
    target: str
    passed: bool
    message: str = ""

    @property
    def failure_kind(self) -> Optional[VerificationFailureKind]:
        return None if self.passed else CHECK_FAILURES[self.kind]


@dataclass
class VerificationResult:
    """Outcome of checking a step's expected artifacts."""

    step_name: str
    checks: List[CheckResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(check.passed for check in self.checks)

    @property
    def failures(self) -> List[CheckResult]:
        return [check for check in self.checks if not check.passed]

    def describe(self) -> str:
        """One-line description of the failed checks."""
        if self.ok:
            return "all checks passed"
        return "; ".join(
            f"{check.failure_kind.value}: {check.target}"
            + (f" ({check.message})" if check.message else "")
            for check in self.failures
        )

    def raise_for_failure(self) -> None:
        from mudoger.exceptions import VerificationError

        if self.ok:
            return
        first = self.failures[0]
        raise VerificationError(
            f"{self.step_name}: {self.describe()}",
            kind=first.failure_kind.value,
            path=first.target,
        )


@dataclass
class ExecutionResult:
    """Outcome of running a step's action."""

    ok: bool
    returncode: Optional[int] = None
    command: Optional[Sequence[str]] = None
    stderr_tail: str = ""
    log_file: Optional[Path] = None
    error: Optional[BaseException] = None
    message: str = ""

    @classmethod
    def success(cls, message: str = "", **kwargs: Any) -> "ExecutionResult":
        return cls(ok=True, returncode=0, message=message, **kwargs)

    @classmethod
    def failure(cls, message: str, **kwargs: Any) -> "ExecutionResult":
        return cls(ok=False, message=message, **kwargs)


@dataclass
class StepOutcome:
    """Final state of one step within a run."""

    name: str
    policy: FailurePolicy
    status: StepStatus = StepStatus.PENDING
    failure: Optional[FailureKind] = None
    verification: Optional[VerificationResult] = None
    execution: Optional[ExecutionResult] = None
    duration: float = 0.0
    message: str = ""

    @property
    def failed(self) -> bool:
        return self.status in (StepStatus.FAILED, StepStatus.FAILED_SOFT)


@dataclass
class PipelineResult:
    """Result of a pipeline run."""

    all_fatal_steps_ok: bool
    per_step: List[StepOutcome] = field(default_factory=list)
    results: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True when every step either completed or was skipped."""
        return all(o.status in (StepStatus.DONE, StepStatus.SKIPPED) for o in self.per_step)

    @property
    def failed(self) -> List[StepOutcome]:
        return [o for o in self.per_step if o.failed]

    def outcome(self, name: str) -> StepOutcome:
        for o in self.per_step:
            if o.name == name:
                return o
        raise KeyError(name)

    def counts(self) -> Dict[StepStatus, int]:
        counts = {status: 0 for status in StepStatus}
        for o in self.per_step:
            counts[o.status] += 1
        return counts


class ResultKeys:
    """Keys under which steps publish values for later steps and the summary."""

    RAW_BIN_COUNT = "raw_bin_count"
    UNIQUE_BIN_COUNT = "unique_bin_count"
    UNIQUE_BINS = "unique_bins"
    TAXONOMY_COUNT = "taxonomy_count"
    GENOME_METRICS = "genome_metrics"
    ACCEPTED_IDS = "accepted_ids"
    JOIN_ISSUES = "join_issues"
    QUALITY_FRAME = "quality_frame"
    UVIG_COUNT = "uvig_count"
    HQ_UVIG_COUNT = "hq_uvig_count"
    EUK_BIN_COUNT = "euk_bin_count"
    EUK_KEPT_COUNT = "euk_kept_count"
