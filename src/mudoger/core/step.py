"""Pipeline step definition and the per-run context handed to each step."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Type, TypeVar, Union

from mudoger.config import Config
from mudoger.constants import LOGS_DIR
from mudoger.core.pipeline_types import ExecutionResult, FailurePolicy, VerificationResult
from mudoger.core.run_log import RunLog
from mudoger.core.verifier import ExpectedOutputSpec, resolve_template, verify
from mudoger.exceptions import ExternalToolError, MudogerError
from mudoger.utils.logging import get_logger

if TYPE_CHECKING:
    from mudoger.external.base import ExternalTool

ToolT = TypeVar("ToolT", bound="ExternalTool")

STDERR_TAIL_CHARS = 2000


@dataclass
class StepContext:
    """Everything a step may read or write during a run.

    Steps receive the context explicitly; nothing is looked up from globals or
    the process environment.
    """

    config: Config
    run_log: Optional[RunLog] = None
    module: str = ""
    results: Dict[str, Any] = field(default_factory=dict)
    values: Dict[str, Any] = field(default_factory=dict)

    @property
    def output_dir(self) -> Path:
        return Path(self.config.output_dir)

    @property
    def logs_dir(self) -> Path:
        return self.output_dir / LOGS_DIR

    @property
    def sample(self) -> str:
        return self.config.sample_name

    def template_values(self) -> Dict[str, Any]:
        """Values available to path and command templates."""
        cfg = self.config
        q = cfg.quality
        values: Dict[str, Any] = {
            "sample": self.sample,
            "output": str(self.output_dir),
            "threads": cfg.threads,
            "memory": cfg.memory_gb,
            "extension": q.bin_extension,
            "bac_bins": f"metawrap_{q.bacteria_min_completeness}_{q.bacteria_max_contamination}_bins",
            "arc_bins": f"metawrap_{q.archaea_min_completeness}_{q.archaea_max_contamination}_bins",
        }
        for name in ("forward_reads", "reverse_reads", "assembly", "uvigs", "host_bins"):
            value = getattr(cfg, name)
            values[name] = str(value) if value is not None else ""
        values.update(self.values)
        return values

    def path(self, template: str) -> Path:
        """Resolve a layout template against the output directory."""
        return resolve_template(template, self.output_dir, self.template_values())

    def step_log(self, step_name: str) -> Path:
        return self.logs_dir / f"{step_name}.log"

    def tool(self, tool_cls: Type[ToolT]) -> ToolT:
        return tool_cls(tools=self.config.tools, threads=self.config.threads)


StepAction = Callable[[StepContext], Optional[ExecutionResult]]


@dataclass
class PipelineStep:
    """One unit of work: an action plus the artifacts that prove it ran."""

    name: str
    description: str
    action: StepAction
    outputs: ExpectedOutputSpec
    failure_policy: FailurePolicy = FailurePolicy.FATAL
    inputs: ExpectedOutputSpec = field(default_factory=ExpectedOutputSpec)
    # Config attributes that must be set before the step can run
    required_settings: tuple[str, ...] = ()
    display_name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.display_name or self.name

    def verify(self, context: StepContext) -> VerificationResult:
        return verify(self.name, self.outputs, context.output_dir, context.template_values())

    def missing_settings(self, context: StepContext) -> list[str]:
        return [name for name in self.required_settings if not getattr(context.config, name, None)]

    def check_inputs(self, context: StepContext) -> VerificationResult:
        return verify(self.name, self.inputs, context.output_dir, context.template_values())

    def execute(self, context: StepContext) -> ExecutionResult:
        """Run the action and report how it went instead of raising."""
        logger = get_logger(f"steps.{self.name}")
        start = time.time()
        try:
            result = self.action(context)
        except ExternalToolError as exc:
            logger.debug(f"{self.name} external tool failure: {exc}")
            return ExecutionResult.failure(
                str(exc),
                returncode=exc.returncode,
                command=exc.command,
                stderr_tail=_tail(exc.stderr),
                log_file=exc.log_file,
                error=exc,
            )
        except (MudogerError, OSError, ValueError) as exc:
            logger.debug(f"{self.name} raised {type(exc).__name__}: {exc}")
            return ExecutionResult.failure(f"{type(exc).__name__}: {exc}", error=exc)
        except Exception as exc:
            logger.debug(f"{self.name} raised an unexpected error", exc_info=True)
            return ExecutionResult.failure(f"Unexpected {type(exc).__name__}: {exc}", error=exc)

        if result is None:
            result = ExecutionResult.success()
        if not result.message:
            result.message = f"finished in {time.time() - start:.1f}s"
        return result


def _tail(text: Union[str, bytes, None], limit: int = STDERR_TAIL_CHARS) -> str:
    if not text:
        return ""
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    return text[-limit:].strip()
