"""Step sequencing with skip-on-verified, fail-fast and fail-soft policies."""

from __future__ import annotations

import time
from typing import Sequence, Union

from mudoger.core.pipeline_types import (
    ExecutionResult,
    FailureKind,
    FailurePolicy,
    PipelineResult,
    StepOutcome,
    StepStatus,
)
from mudoger.core.run_log import ERROR, INFO, SUCCESS, WARNING
from mudoger.core.step import PipelineStep, StepContext
from mudoger.exceptions import ConfigurationError, MissingInputError, PipelineError
from mudoger.utils.logging import LogTemplates, get_logger
from mudoger.utils.progress import iter_progress

StepRef = Union[int, str, None]


class Pipeline:
    """Runs an ordered list of steps against one output directory.

    For each step the runner first verifies its outputs; a verified step is
    skipped. Otherwise the step's inputs are checked, the action runs and the
    outputs are verified again. A failing ``FATAL`` step stops the run and
    leaves the remaining steps pending; a failing ``SOFT`` step is recorded and
    the run moves on.
    """

    def __init__(self, steps: Sequence[PipelineStep], context: StepContext):
        names = [step.name for step in steps]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigurationError(f"Duplicate step names: {', '.join(duplicates)}")
        if context.run_log is None:
            raise ConfigurationError("Pipeline requires a run log")
        self.steps = list(steps)
        self.context = context
        self.run_log = context.run_log
        self.logger = get_logger("pipeline")

    def _index(self, ref: StepRef, default: int) -> int:
        """Translate a 1-based step number or a step name into a list index."""
        if ref is None:
            return default
        if isinstance(ref, int):
            if not 1 <= ref <= len(self.steps):
                raise PipelineError(f"Step number must be within 1..{len(self.steps)}, got {ref}")
            return ref - 1
        for i, step in enumerate(self.steps):
            if step.name == ref:
                return i
        raise PipelineError(f"Unknown step: {ref}")

    def run(
        self,
        force: bool = False,
        start_from: StepRef = None,
        stop_at: StepRef = None,
        summarize: bool = True,
    ) -> PipelineResult:
        """Run the selected steps and return one outcome per step."""
        start_idx = self._index(start_from, 0)
        end_idx = self._index(stop_at, len(self.steps) - 1)
        if start_idx > end_idx:
            raise PipelineError(f"start_from ({start_from}) cannot come after stop_at ({stop_at})")

        selected = self.steps[start_idx : end_idx + 1]
        outcomes = [StepOutcome(name=s.name, policy=s.failure_policy) for s in selected]
        result = PipelineResult(all_fatal_steps_ok=True, per_step=outcomes, results=self.context.results)

        total = len(selected)
        iterator = iter_progress(
            zip(selected, outcomes),
            total=total,
            desc=self.context.module or "Steps",
            enabled=self.context.config.runtime.enable_progress,
        )
        for number, (step, outcome) in enumerate(iterator, 1):
            self.run_log.log(
                INFO,
                step.name,
                LogTemplates.STEP_START.format(
                    step_name=step.label, step_number=number, total=total,
                    percent=100.0 * number / total,
                ),
            )
            self._run_step(step, outcome, force)
            if outcome.status is StepStatus.FAILED:
                result.all_fatal_steps_ok = False
                pending = total - number
                if pending:
                    self.run_log.log(
                        ERROR, None,
                        f"Stopping after fatal failure in {step.name}; {pending} step(s) not run",
                    )
                break

        if summarize:
            from mudoger.core.report import build_summary

            self.run_log.write_block(build_summary(result, self.context))
        return result

    def _run_step(self, step: PipelineStep, outcome: StepOutcome, force: bool) -> None:
        log = self.run_log
        started = time.time()

        if not force:
            verification = step.verify(self.context)
            outcome.verification = verification
            if verification.ok:
                outcome.status = StepStatus.SKIPPED
                outcome.message = "outputs already present"
                log.log(INFO, step.name, LogTemplates.STEP_SKIPPED.format(step_name=step.label), outcome.status)
                return

        missing = step.missing_settings(self.context)
        if missing:
            self._fail(
                step, outcome, FailureKind.MISSING_INPUT,
                LogTemplates.STEP_MISSING_INPUT.format(
                    step_name=step.label, error=f"not configured: {', '.join(missing)}"
                ),
            )
            return

        if not step.inputs.is_empty():
            inputs = step.check_inputs(self.context)
            if not inputs.ok:
                self._fail(
                    step, outcome, FailureKind.MISSING_INPUT,
                    LogTemplates.STEP_MISSING_INPUT.format(step_name=step.label, error=inputs.describe()),
                )
                outcome.verification = inputs
                return

        outcome.status = StepStatus.RUNNING
        execution = step.execute(self.context)
        outcome.execution = execution
        outcome.duration = time.time() - started
        if not execution.ok:
            if isinstance(execution.error, MissingInputError):
                self._fail(
                    step, outcome, FailureKind.MISSING_INPUT,
                    LogTemplates.STEP_MISSING_INPUT.format(step_name=step.label, error=execution.error),
                )
                return
            self._fail(
                step, outcome, FailureKind.EXECUTION_FAILURE,
                LogTemplates.STEP_FAILURE.format(step_name=step.label, error=_describe_execution(execution)),
            )
            return

        verification = step.verify(self.context)
        outcome.verification = verification
        if not verification.ok:
            self._fail(
                step, outcome, FailureKind.INCONSISTENT_STATE,
                LogTemplates.STEP_INCONSISTENT.format(step_name=step.label, error=verification.describe()),
            )
            return

        outcome.status = StepStatus.DONE
        outcome.message = execution.message
        log.log(
            SUCCESS, step.name,
            LogTemplates.STEP_SUCCESS.format(step_name=step.label, duration=outcome.duration),
            outcome.status,
        )

    def _fail(self, step: PipelineStep, outcome: StepOutcome, kind: FailureKind, message: str) -> None:
        outcome.failure = kind
        outcome.message = message
        fatal = step.failure_policy is FailurePolicy.FATAL
        outcome.status = StepStatus.FAILED if fatal else StepStatus.FAILED_SOFT
        self.run_log.log(ERROR, step.name, f"{kind.value}: {message}", outcome.status)
        if not fatal:
            self.run_log.log(WARNING, step.name, LogTemplates.STEP_SOFT_FAILURE.format(step_name=step.label))


def _describe_execution(execution: ExecutionResult) -> str:
    parts = [execution.message or "action failed"]
    if execution.returncode not in (None, 0):
        parts.append(f"exit code {execution.returncode}")
    if execution.log_file:
        parts.append(f"see {execution.log_file}")
    if execution.stderr_tail:
        last = execution.stderr_tail.splitlines()[-1]
        parts.append(f"stderr: {last}")
    return "; ".join(parts)


def run_steps(
    steps: Sequence[PipelineStep],
    context: StepContext,
    force: bool = False,
    start_from: StepRef = None,
    stop_at: StepRef = None,
) -> PipelineResult:
    """Convenience wrapper around :class:`Pipeline`."""
    return Pipeline(steps, context).run(force=force, start_from=start_from, stop_at=stop_at)
