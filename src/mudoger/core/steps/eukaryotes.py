"""Eukaryote module: contig sorting, CONCOCT binning and size filtering."""

from __future__ import annotations

from pathlib import Path
from typing import List

import pandas as pd

from mudoger import constants as c
from mudoger.config import Config
from mudoger.core.pipeline_types import FailurePolicy, ResultKeys
from mudoger.core.step import PipelineStep, StepContext
from mudoger.core.steps import contracts
from mudoger.external.eukrep import EukRep
from mudoger.external.metawrap import MetaWRAP
from mudoger.modules.bin_filter import filter_bins_by_size


def eukrep(ctx: StepContext) -> None:
    ctx.tool(EukRep).sort_contigs(
        Path(ctx.config.assembly),
        ctx.path(c.EUK_CONTIGS),
        ctx.path(c.PROK_CONTIGS),
        log_file=ctx.step_log("eukrep"),
    )


def euk_binning(ctx: StepContext) -> None:
    cfg = ctx.config
    ctx.tool(MetaWRAP).concoct_binning(
        ctx.path(c.EUK_CONTIGS),
        Path(cfg.forward_reads),
        Path(cfg.reverse_reads),
        ctx.path(c.EUK_BINS_DIR),
        log_file=ctx.step_log("euk_binning"),
    )


def euk_size_filter(ctx: StepContext) -> None:
    """Keep eukaryotic bins larger than ``quality.min_euk_bin_bytes``."""
    min_bytes = ctx.config.quality.min_euk_bin_bytes
    bins_dir = ctx.path(f"{c.EUK_BINS_DIR}/concoct_bins")
    dest = ctx.path(c.EUK_FILTERED_DIR)
    kept = filter_bins_by_size(bins_dir, dest, min_bytes)
    listing = pd.DataFrame(
        [(p.name, p.stat().st_size) for p in kept], columns=["bin", "size_bytes"]
    )
    listing.to_csv(dest / "filtered_bins.tsv", sep="\t", index=False)
    ctx.results[ResultKeys.EUK_BIN_COUNT] = len(list(bins_dir.glob("*.fa")))
    ctx.results[ResultKeys.EUK_KEPT_COUNT] = len(kept)
    ctx.run_log.info(f"{len(kept)} bins larger than {min_bytes:,} bytes", "euk_size_filter")


def build_eukaryote_steps(config: Config) -> List[PipelineStep]:
    fatal, soft = FailurePolicy.FATAL, FailurePolicy.SOFT
    return [
        PipelineStep(
            "eukrep", "Separate eukaryotic contigs with EukRep",
            eukrep, contracts.EUKREP, fatal,
            inputs=contracts.ASSEMBLY_INPUT, required_settings=("assembly",),
        ),
        PipelineStep(
            "euk_binning", "Bin eukaryotic contigs with CONCOCT",
            euk_binning, contracts.EUK_BINNING, fatal,
            inputs=contracts.EUKREP, required_settings=("forward_reads", "reverse_reads"),
        ),
        PipelineStep(
            "euk_size_filter", "Keep eukaryotic bins above the size threshold",
            euk_size_filter, contracts.EUK_SIZE_FILTER, soft, inputs=contracts.EUK_BINNING,
        ),
    ]
