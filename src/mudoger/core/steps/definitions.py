"""Registry of the step lists available to the CLI."""

from __future__ import annotations

from typing import Callable, Dict, List

from mudoger.config import Config
from mudoger.core.step import PipelineStep
from mudoger.core.steps.eukaryotes import build_eukaryote_steps
from mudoger.core.steps.prokaryotes import build_prokaryote_steps
from mudoger.core.steps.viruses import build_virus_steps
from mudoger.exceptions import ConfigurationError

StepBuilder = Callable[[Config], List[PipelineStep]]

MODULE_BUILDERS: Dict[str, StepBuilder] = {
    "prokaryotes": build_prokaryote_steps,
    "viruses": build_virus_steps,
    "eukaryotes": build_eukaryote_steps,
}


def build_steps(module: str, config: Config) -> List[PipelineStep]:
    try:
        builder = MODULE_BUILDERS[module]
    except KeyError as exc:
        raise ConfigurationError(f"Unknown module: {module}") from exc
    return builder(config)
