"""Virus module: UViG quality, host prediction and summary tables."""

from __future__ import annotations

from pathlib import Path
from typing import List

from mudoger import constants as c
from mudoger.config import Config
from mudoger.core.pipeline_types import FailurePolicy, ResultKeys
from mudoger.core.step import PipelineStep, StepContext
from mudoger.core.steps import contracts
from mudoger.core.verifier import merge
from mudoger.exceptions import MissingInputError
from mudoger.external.checkv import CheckV
from mudoger.external.wish import WIsH
from mudoger.modules.viral import (
    high_quality,
    split_uvigs as split_records,
    stage_host_genomes,
    viral_summary,
    write_mapping,
)


def split_uvigs(ctx: StepContext) -> None:
    mapping = split_records(Path(ctx.config.uvigs), ctx.path(c.VIRAL_PARTICLES_DIR))
    write_mapping(mapping, ctx.path(c.UVIG_MAPPING))
    ctx.results[ResultKeys.UVIG_COUNT] = len(mapping)
    ctx.run_log.info(f"{len(mapping)} UViGs", "split_uvigs")


def checkv(ctx: StepContext) -> None:
    ctx.tool(CheckV).end_to_end(Path(ctx.config.uvigs), ctx.path(c.CHECKV_DIR), log_file=ctx.step_log("checkv"))


def host_prediction(ctx: StepContext) -> None:
    """Build WIsH models from the host bins and predict a host per particle."""
    cfg = ctx.config
    hosts_dir = ctx.path(c.HOST_GENOMES_DIR)
    staged = stage_host_genomes(Path(cfg.host_bins), hosts_dir, cfg.quality.bin_extension)
    if staged == 0:
        raise MissingInputError(f"No host genomes found in {cfg.host_bins}", paths=[cfg.host_bins])
    ctx.run_log.info(f"{staged} candidate host genomes", "host_prediction")

    tool = ctx.tool(WIsH)
    log_file = ctx.step_log("host_prediction")
    model_dir = ctx.path(c.WISH_MODEL_DIR)
    tool.build(hosts_dir, model_dir, log_file=log_file)
    tool.predict(
        ctx.path(c.VIRAL_PARTICLES_DIR),
        model_dir,
        ctx.path(c.WISH_RESULTS_DIR),
        null_parameters=cfg.tools.wish_null_parameters,
        log_file=log_file,
    )


def uvig_metrics(ctx: StepContext) -> None:
    table = viral_summary(ctx.path(c.UVIG_MAPPING), ctx.path(c.CHECKV_SUMMARY), ctx.path(c.WISH_PREDICTION))
    for issue in table.issues:
        ctx.run_log.warning(str(issue), "uvig_metrics")
    table.write(ctx.path(c.VIRAL_SUMMARY))
    hq = high_quality(table)
    hq.write(ctx.path(c.VIRAL_HQ_SUMMARY))
    ctx.results[ResultKeys.UVIG_COUNT] = len(table)
    ctx.results[ResultKeys.HQ_UVIG_COUNT] = len(hq)
    ctx.run_log.info(f"{len(hq)} of {len(table)} UViGs are high-quality", "uvig_metrics")


def build_virus_steps(config: Config) -> List[PipelineStep]:
    fatal, soft = FailurePolicy.FATAL, FailurePolicy.SOFT
    return [
        PipelineStep(
            "split_uvigs", "Split UViGs into one FASTA per viral particle",
            split_uvigs, contracts.SPLIT_UVIGS, fatal,
            inputs=contracts.UVIG_INPUT, required_settings=("uvigs",),
        ),
        PipelineStep(
            "checkv", "Assess UViG quality with CheckV",
            checkv, contracts.CHECKV, soft,
            inputs=contracts.UVIG_INPUT, required_settings=("uvigs",),
        ),
        PipelineStep(
            "host_prediction", "Predict hosts with WIsH",
            host_prediction, contracts.HOST_PREDICTION, soft,
            inputs=merge(contracts.SPLIT_UVIGS, contracts.HOST_BINS_INPUT),
            required_settings=("host_bins",),
        ),
        PipelineStep(
            "uvig_metrics", "Summarise UViG quality and hosts",
            uvig_metrics, contracts.UVIG_METRICS, soft, inputs=contracts.SPLIT_UVIGS,
        ),
    ]
