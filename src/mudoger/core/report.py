"""End-of-run summary written to the audit log."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Tuple

import pandas as pd

from mudoger import constants as c
from mudoger.config import QualityConfig
from mudoger.core.pipeline_types import PipelineResult, ResultKeys, StepStatus
from mudoger.modules.schemas import COMPLETENESS, CONTAMINATION

if TYPE_CHECKING:
    from mudoger.core.step import StepContext

HIGH = "high"
MEDIUM = "medium"
LOW = "low"

# (label, path template, glob or None for table rows); the first entry is the base for percentages
ENTITY_COUNTS = {
    "prokaryotes": (
        ("unique bins", c.UNIQUE_BINS_DIR, "*.fa"),
        ("MAGs", c.MAGS_DIR, "*.fa"),
    ),
    "viruses": (
        ("UViGs", c.VIRAL_PARTICLES_DIR, "*.fa"),
        ("high-quality UViGs", c.VIRAL_HQ_SUMMARY, None),
    ),
    "eukaryotes": (
        ("eukaryotic bins", f"{c.EUK_BINS_DIR}/concoct_bins", "*.fa"),
        ("bins above size threshold", c.EUK_FILTERED_DIR, "*.fa"),
    ),
}

# (table template, what its rows are called); tiers are reported over MAGs only
QUALITY_SOURCES = {"prokaryotes": (c.MAGS_SUMMARY, "MAGs")}


def quality_tier(completeness: float, contamination: float, quality: QualityConfig) -> str:
    if completeness >= quality.high_min_completeness and contamination <= quality.high_max_contamination:
        return HIGH
    if completeness >= quality.medium_min_completeness and contamination <= quality.medium_max_contamination:
        return MEDIUM
    return LOW


@dataclass
class QualitySummary:
    """Tier counts and averages over a completeness/contamination table."""

    total: int
    high: int
    medium: int
    low: int
    mean_completeness: float
    mean_contamination: float

    @classmethod
    def from_frame(cls, frame: pd.DataFrame, quality: Optional[QualityConfig] = None) -> "QualitySummary":
        quality = quality or QualityConfig()
        completeness = pd.to_numeric(frame[COMPLETENESS], errors="coerce").fillna(0.0)
        contamination = pd.to_numeric(frame[CONTAMINATION], errors="coerce").fillna(0.0)
        tiers = [quality_tier(a, b, quality) for a, b in zip(completeness, contamination)]
        total = len(tiers)
        return cls(
            total=total,
            high=tiers.count(HIGH),
            medium=tiers.count(MEDIUM),
            low=tiers.count(LOW),
            mean_completeness=float(completeness.mean()) if total else 0.0,
            mean_contamination=float(contamination.mean()) if total else 0.0,
        )

    def lines(self, quality: Optional[QualityConfig] = None, label: str = "genomes") -> List[str]:
        q = quality or QualityConfig()

        def pct(n: int) -> str:
            return f"{100.0 * n / self.total:.1f}%" if self.total else "0.0%"

        return [
            f"Quality tiers ({self.total} {label}):",
            f"  high (completeness >= {q.high_min_completeness:g}, contamination <= {q.high_max_contamination:g}): "
            f"{self.high} ({pct(self.high)})",
            f"  medium (completeness >= {q.medium_min_completeness:g}, contamination <= {q.medium_max_contamination:g}): "
            f"{self.medium} ({pct(self.medium)})",
            f"  low: {self.low} ({pct(self.low)})",
            f"  average completeness {self.mean_completeness:.2f}, "
            f"average contamination {self.mean_contamination:.2f}",
        ]


def _count(path: Path, pattern: Optional[str]) -> Optional[int]:
    if pattern is None:
        if not path.is_file():
            return None
        with open(path, encoding="utf-8", errors="replace") as handle:
            return max(sum(1 for line in handle if line.strip()) - 1, 0)
    if not path.is_dir():
        return None
    return len(list(path.glob(pattern)))


def entity_counts(context: "StepContext") -> List[Tuple[str, int]]:
    counts = []
    for label, template, pattern in ENTITY_COUNTS.get(context.module, ()):
        value = _count(context.path(template), pattern)
        if value is not None:
            counts.append((label, value))
    return counts


def load_quality_frame(context: "StepContext") -> Optional[pd.DataFrame]:
    frame = context.results.get(ResultKeys.QUALITY_FRAME)
    if frame is not None:
        return frame
    source = QUALITY_SOURCES.get(context.module)
    if source is None:
        return None
    path = context.path(source[0])
    if not path.is_file():
        return None
    frame = pd.read_csv(path, sep="\t")
    if COMPLETENESS not in frame.columns or CONTAMINATION not in frame.columns:
        return None
    return frame


def build_summary(result: PipelineResult, context: "StepContext") -> str:
    """Render per-step outcomes, counts and quality tiers as text."""
    lines = ["=" * 50, f"Run summary: {context.module or 'pipeline'}", "=" * 50]

    width = max((len(o.name) for o in result.per_step), default=10)
    for outcome in result.per_step:
        detail = f" - {outcome.failure.value}" if outcome.failure else ""
        lines.append(f"  {outcome.status.value.upper():<12} {outcome.name:<{width}}{detail}")

    counts = result.counts()
    total = len(result.per_step)
    lines.append(
        f"Steps: {total} total | "
        + " | ".join(f"{counts[s]} {s.value}" for s in StepStatus if s is not StepStatus.RUNNING)
    )
    if not result.all_fatal_steps_ok:
        failed = [o.name for o in result.per_step if o.status is StepStatus.FAILED]
        lines.append(f"Run stopped at fatal step: {', '.join(failed)}")
    soft = [o.name for o in result.per_step if o.status is StepStatus.FAILED_SOFT]
    if soft:
        lines.append(f"Non-critical failures: {', '.join(soft)}")

    entities = entity_counts(context)
    if entities:
        base = entities[0][1]
        for i, (label, value) in enumerate(entities):
            share = f" ({100.0 * value / base:.1f}%)" if i and base else ""
            lines.append(f"{label}: {value}{share}")

    frame = load_quality_frame(context)
    if frame is not None and len(frame):
        label = QUALITY_SOURCES.get(context.module, (None, "genomes"))[1]
        q = context.config.quality
        lines.extend(QualitySummary.from_frame(frame, q).lines(q, label))

    lines.append(f"Results: {context.output_dir}")
    lines.append(f"Audit log: {context.run_log.path}")
    return "\n".join(lines)
