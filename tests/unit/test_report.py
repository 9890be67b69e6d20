"""Tests for the end-of-run summary."""

from pathlib import Path
import sys

import pandas as pd
import pytest

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from mudoger import constants as c
from mudoger.config import Config, QualityConfig
from mudoger.core.pipeline_types import (
    FailureKind,
    FailurePolicy,
    PipelineResult,
    ResultKeys,
    StepOutcome,
    StepStatus,
)
from mudoger.core.report import HIGH, LOW, MEDIUM, QualitySummary, build_summary, quality_tier
from mudoger.core.run_log import RunLog
from mudoger.core.step import StepContext


@pytest.fixture
def context(tmp_path):
    run_log = RunLog(tmp_path / "logs" / "prokaryotes_module.log", echo=False)
    yield StepContext(config=Config(output_dir=tmp_path), run_log=run_log, module="prokaryotes")
    run_log.close()


class TestQualityTiers:
    """High, medium and low tiers."""

    def test_tiers(self):
        q = QualityConfig()
        assert quality_tier(95, 3, q) == HIGH
        assert quality_tier(95, 7, q) == MEDIUM
        assert quality_tier(60, 10, q) == MEDIUM
        assert quality_tier(60, 15, q) == LOW
        assert quality_tier(40, 0, q) == LOW

    def test_summary_counts(self):
        frame = pd.DataFrame({"completeness": [95, 60, 60, 30], "contamination": [1, 5, 15, 0]})
        summary = QualitySummary.from_frame(frame)
        assert (summary.total, summary.high, summary.medium, summary.low) == (4, 1, 1, 2)
        assert summary.mean_completeness == pytest.approx(61.25)
        lines = summary.lines()
        assert lines[0] == "Quality tiers (4 genomes):"
        assert lines[1].endswith("1 (25.0%)")


class TestBuildSummary:
    """Summary text."""

    def test_statuses_and_failures(self, context):
        outcomes = [
            StepOutcome("initial_binning", FailurePolicy.FATAL, StepStatus.SKIPPED),
            StepOutcome("checkm", FailurePolicy.SOFT, StepStatus.FAILED_SOFT, FailureKind.EXECUTION_FAILURE),
            StepOutcome("prokka", FailurePolicy.SOFT, StepStatus.DONE),
        ]
        text = build_summary(PipelineResult(True, outcomes), context)
        assert "Run summary: prokaryotes" in text
        assert "FAILED_SOFT  checkm" in text
        assert "ExecutionFailure" in text
        assert "Non-critical failures: checkm" in text
        assert "Steps: 3 total" in text
        assert "1 skipped" in text
        assert str(context.run_log.path) in text

    def test_fatal_stop(self, context):
        outcomes = [
            StepOutcome("initial_binning", FailurePolicy.FATAL, StepStatus.FAILED, FailureKind.MISSING_INPUT),
            StepOutcome("refine_bacteria", FailurePolicy.FATAL),
        ]
        text = build_summary(PipelineResult(False, outcomes), context)
        assert "Run stopped at fatal step: initial_binning" in text
        assert "1 pending" in text

    def test_entity_counts_and_tiers(self, context, write_fasta):
        for i in (1, 2, 3):
            write_fasta(context.path(c.UNIQUE_BINS_DIR) / f"S-bin.{i}.fa", {"c": "A"})
        write_fasta(context.path(c.MAGS_DIR) / "S-bin.1.fa", {"c": "A"})
        context.results[ResultKeys.QUALITY_FRAME] = pd.DataFrame(
            {"completeness": [95.0, 60.0, 80.0], "contamination": [3.0, 15.0, 2.0]}
        )
        text = build_summary(PipelineResult(True, []), context)
        assert "unique bins: 3" in text
        assert "MAGs: 1 (33.3%)" in text
        assert "Quality tiers (3 MAGs):" in text

    def test_tiers_cover_mags_only(self, context, write_tsv):
        write_tsv(
            context.path(c.GENOME_METRICS_TABLE),
            ["OTU", "completeness", "contamination"],
            [["S-bin.1", 95, 1], ["S-bin.2", 70, 2], ["S-bin.3", 20, 1]],
        )
        text = build_summary(PipelineResult(True, []), context)
        assert "Quality tiers" not in text

        write_tsv(
            context.path(c.MAGS_SUMMARY),
            ["OTU", "completeness", "contamination"],
            [["S-bin.1", 95, 1], ["S-bin.2", 70, 2]],
        )
        text = build_summary(PipelineResult(True, []), context)
        assert "Quality tiers (2 MAGs):" in text
        assert "  low: 0 (0.0%)" in text
