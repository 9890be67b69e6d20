"""Prokaryote module: binning, refinement, dereplication and genome metrics."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import List

from mudoger import constants as c
from mudoger.config import Config
from mudoger.core.pipeline_types import ExecutionResult, FailurePolicy, ResultKeys
from mudoger.core.step import PipelineStep, StepContext
from mudoger.core.steps import contracts
from mudoger.core.verifier import merge
from mudoger.exceptions import ExternalToolError, PipelineError
from mudoger.external.bbtools import BBTools
from mudoger.external.checkm import CheckM
from mudoger.external.gtdbtk import GTDBTk
from mudoger.external.metawrap import MetaWRAP
from mudoger.external.prokka import Prokka
from mudoger.modules.aggregator import TableRef, aggregate, load_master_table, materialize
from mudoger.modules.annotation import find_prokka_table, has_features, merge_summaries, prokka_gene_counts
from mudoger.modules.dereplication import dereplicate_bins, write_dereplication_map
from mudoger.modules.genome_stats import write_genome_stats
from mudoger.modules import schemas
from mudoger.utils.progress import iter_progress


def _unique_bins(ctx: StepContext) -> List[Path]:
    return sorted(ctx.path(c.UNIQUE_BINS_DIR).glob(f"*.{ctx.config.quality.bin_extension}"))


def _bin_name(path: Path) -> str:
    return path.name[: -len(path.suffix)] if path.suffix else path.name


def initial_binning(ctx: StepContext) -> None:
    cfg = ctx.config
    out_dir = ctx.path(c.INITIAL_BINNING_DIR)
    ctx.tool(MetaWRAP).binning(
        Path(cfg.assembly), Path(cfg.forward_reads), Path(cfg.reverse_reads),
        out_dir, log_file=ctx.step_log("initial_binning"),
    )
    for binner in ("metabat2_bins", "maxbin2_bins"):
        count = len(list((out_dir / binner).glob("*.fa")))
        ctx.run_log.info(f"{binner}: {count} bins", "initial_binning")


def _refine(ctx: StepContext, step_name: str, out_template: str, completeness: int, contamination: int) -> None:
    binning = ctx.path(c.INITIAL_BINNING_DIR)
    ctx.tool(MetaWRAP).bin_refinement(
        binning / "metabat2_bins",
        binning / "maxbin2_bins",
        ctx.path(out_template),
        completeness=completeness,
        contamination=contamination,
        memory_gb=ctx.config.memory_gb,
        log_file=ctx.step_log(step_name),
    )


def refine_bacteria(ctx: StepContext) -> None:
    q = ctx.config.quality
    _refine(ctx, "refine_bacteria", c.REFINEMENT_BAC_DIR, q.bacteria_min_completeness, q.bacteria_max_contamination)


def refine_archaea(ctx: StepContext) -> None:
    q = ctx.config.quality
    _refine(ctx, "refine_archaea", c.REFINEMENT_ARC_DIR, q.archaea_min_completeness, q.archaea_max_contamination)


def dereplication(ctx: StepContext) -> None:
    ext = ctx.config.quality.bin_extension
    refined: List[Path] = []
    for folder in (c.REFINEMENT_BAC_DIR, c.REFINEMENT_ARC_DIR):
        refined.extend(sorted(ctx.path(folder).glob(f"metawrap*bins/*.{ext}")))

    dest = ctx.path(c.UNIQUE_BINS_DIR)
    _clear_sequences(dest, f".{ext}")
    kept = dereplicate_bins(refined, dest, ctx.sample, ext)
    write_dereplication_map(kept, ctx.path(c.DEREPLICATION_MAP))
    ctx.results[ResultKeys.RAW_BIN_COUNT] = len(refined)
    ctx.results[ResultKeys.UNIQUE_BIN_COUNT] = len(kept)
    ctx.run_log.info(f"{len(refined)} refined bins -> {len(kept)} unique bins", "dereplication")


def taxonomy(ctx: StepContext) -> None:
    out_dir = ctx.path(c.GTDBTK_DIR)
    ctx.tool(GTDBTk).classify_wf(
        ctx.path(c.UNIQUE_BINS_DIR), out_dir,
        extension=ctx.config.quality.bin_extension, log_file=ctx.step_log("taxonomy"),
    )
    rows = merge_summaries([out_dir / name for name in c.GTDBTK_SUMMARIES], ctx.path(c.GTDBTK_RESULT))
    ctx.results[ResultKeys.TAXONOMY_COUNT] = rows
    ctx.run_log.info(f"{rows} genomes classified", "taxonomy")


def checkm(ctx: StepContext) -> None:
    ctx.tool(CheckM).lineage_wf(
        ctx.path(c.UNIQUE_BINS_DIR),
        ctx.path(c.CHECKM_DIR),
        ctx.path(c.CHECKM_TABLE),
        extension=ctx.config.quality.bin_extension,
        log_file=ctx.step_log("checkm"),
    )


def prokka(ctx: StepContext) -> ExecutionResult:
    """Annotate every unique bin that has no feature table yet.

    The gene counts table is only written once every bin has a feature table
    with at least one row, so a rerun retries exactly the bins that failed.
    """
    prokka_dir = ctx.path(c.PROKKA_DIR)
    bins = _unique_bins(ctx)
    tool = ctx.tool(Prokka)
    failed = []
    for bin_file in iter_progress(bins, total=len(bins), desc="prokka",
                                  enabled=ctx.config.runtime.enable_progress):
        name = _bin_name(bin_file)
        if has_features(find_prokka_table(prokka_dir, name)):
            continue
        try:
            tool.annotate(bin_file, prokka_dir / name, log_file=ctx.step_log("prokka"))
        except ExternalToolError as exc:
            failed.append(name)
            ctx.run_log.error(f"{name}: {exc} (exit code {exc.returncode})", "prokka")
            continue
        if not has_features(find_prokka_table(prokka_dir, name)):
            failed.append(name)
            ctx.run_log.error(f"{name}: no annotated features in {prokka_dir / name}", "prokka")

    counts_table = ctx.path(c.PROKKA_COUNTS_TABLE)
    if failed:
        counts_table.unlink(missing_ok=True)
        raise PipelineError(f"Prokka failed for {len(failed)} of {len(bins)} bins: {', '.join(failed)}")
    counts = prokka_gene_counts(prokka_dir, [_bin_name(b) for b in bins])
    counts.to_csv(counts_table, sep="\t", index=False)
    return ExecutionResult.success(f"annotated {len(bins)} bins")


def genome_stats(ctx: StepContext) -> None:
    frame = write_genome_stats(_unique_bins(ctx), ctx.path(c.GENOME_STATS_TABLE))
    ctx.run_log.info(f"statistics for {len(frame)} genomes", "genome_stats")


def bbtools_stats(ctx: StepContext) -> None:
    ctx.tool(BBTools).stats(_unique_bins(ctx), ctx.path(c.BBTOOLS_TABLE), log_file=ctx.step_log("bbtools_stats"))


def genome_metrics(ctx: StepContext) -> None:
    """Join CheckM, GTDB-Tk, assembly statistics and Prokka counts per bin."""
    tables = [
        TableRef(schemas.CHECKM, ctx.path(c.CHECKM_TABLE)),
        TableRef(schemas.GTDBTK, ctx.path(c.GTDBTK_RESULT)),
        TableRef(schemas.GENOME_STATS, ctx.path(c.GENOME_STATS_TABLE)),
        TableRef(schemas.PROKKA_COUNTS, ctx.path(c.PROKKA_COUNTS_TABLE)),
    ]
    master = aggregate(tables, [_bin_name(b) for b in _unique_bins(ctx)])
    master.write(ctx.path(c.GENOME_METRICS_TABLE))
    ctx.results[ResultKeys.GENOME_METRICS] = master
    ctx.results[ResultKeys.JOIN_ISSUES] = list(master.issues)
    for issue in master.issues:
        ctx.run_log.warning(str(issue), "genome_metrics")
    ctx.run_log.info(f"metrics for {len(master)} genomes", "genome_metrics")


def _copy_if_present(ctx: StepContext, source: Path, target: Path, step: str) -> None:
    if source.is_file():
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)
    else:
        ctx.run_log.warning(f"Not found, skipped: {source}", step)


def _clear_sequences(folder: Path, suffix: str) -> None:
    if folder.is_dir():
        for stale in folder.glob(f"*{suffix}"):
            stale.unlink()


def final_outputs(ctx: StepContext) -> ExecutionResult:
    """Collect sequences and summaries; keep MAGs (quality score >= threshold)."""
    q = ctx.config.quality
    suffix = f".{q.bin_extension}"
    unique_dir = ctx.path(c.UNIQUE_BINS_DIR)
    master = load_master_table(ctx.path(c.GENOME_METRICS_TABLE))

    accepted, rejected = master.partition(quality=q)
    for folder, ids in ((c.ALL_BINS_DIR, master.ids), (c.MAGS_DIR, accepted.ids)):
        dest = ctx.path(folder)
        _clear_sequences(dest, suffix)
        materialize(ids, unique_dir, dest, suffix)

    master.write(ctx.path(c.ALL_BINS_SUMMARY), q)
    accepted.write(ctx.path(c.MAGS_SUMMARY), q)

    summary_dir = ctx.path(c.BINS_METRICS_SUMMARY_DIR)
    _copy_if_present(ctx, ctx.path(c.GTDBTK_RESULT), summary_dir / "taxa_bins_gtdbtk_summary.tsv", "final_outputs")
    _copy_if_present(ctx, ctx.path(c.CHECKM_TABLE), summary_dir / "qual_bins_checkm_summary.tsv", "final_outputs")

    genes_dir = ctx.path(c.BINS_GENES_DIR)
    genes_dir.mkdir(parents=True, exist_ok=True)
    for genome in master.ids:
        table = find_prokka_table(ctx.path(c.PROKKA_DIR), genome)
        if table is not None:
            shutil.copy2(table, genes_dir / f"{genome}_genes_prokka.tsv")

    ctx.results[ResultKeys.ACCEPTED_IDS] = accepted.ids
    ctx.results[ResultKeys.QUALITY_FRAME] = accepted.to_frame(q)
    ctx.run_log.info(f"{len(accepted)} MAGs accepted, {len(rejected)} bins below threshold", "final_outputs")
    return ExecutionResult.success(f"{len(accepted)} of {len(master)} bins are MAGs")


def build_prokaryote_steps(config: Config) -> List[PipelineStep]:
    fatal, soft = FailurePolicy.FATAL, FailurePolicy.SOFT
    q = config.quality
    return [
        PipelineStep(
            "initial_binning", "Bin the assembly with MetaBAT2 and MaxBin2",
            initial_binning, contracts.INITIAL_BINNING, fatal,
            required_settings=("assembly", "forward_reads", "reverse_reads"),
        ),
        PipelineStep(
            "refine_bacteria",
            f"Refine bins for bacteria (completeness >= {q.bacteria_min_completeness}, "
            f"contamination <= {q.bacteria_max_contamination})",
            refine_bacteria, contracts.REFINE_BACTERIA, fatal, inputs=contracts.INITIAL_BINNING,
        ),
        PipelineStep(
            "refine_archaea",
            f"Refine bins for archaea (completeness >= {q.archaea_min_completeness}, "
            f"contamination <= {q.archaea_max_contamination})",
            refine_archaea, contracts.REFINE_ARCHAEA, fatal, inputs=contracts.INITIAL_BINNING,
        ),
        PipelineStep(
            "dereplication", "Keep one copy of identical refined bins",
            dereplication, contracts.DEREPLICATION, fatal,
            inputs=merge(contracts.REFINE_BACTERIA, contracts.REFINE_ARCHAEA),
        ),
        PipelineStep(
            "taxonomy", "Classify bins with GTDB-Tk",
            taxonomy, contracts.TAXONOMY, soft, inputs=contracts.UNIQUE_BINS,
        ),
        PipelineStep(
            "checkm", "Estimate completeness and contamination with CheckM",
            checkm, contracts.CHECKM, soft, inputs=contracts.UNIQUE_BINS,
        ),
        PipelineStep(
            "prokka", "Annotate genes with Prokka",
            prokka, contracts.PROKKA, soft, inputs=contracts.UNIQUE_BINS,
        ),
        PipelineStep(
            "genome_stats", "Compute genome size, scaffold counts, N50 and N90",
            genome_stats, contracts.GENOME_STATS, soft, inputs=contracts.UNIQUE_BINS,
        ),
        PipelineStep(
            "bbtools_stats", "Assembly statistics with BBTools statswrapper",
            bbtools_stats, contracts.BBTOOLS_STATS, soft, inputs=contracts.UNIQUE_BINS,
        ),
        PipelineStep(
            "genome_metrics", "Join quality, taxonomy, statistics and annotation per bin",
            genome_metrics, contracts.GENOME_METRICS, soft,
            inputs=contracts.GENOME_METRICS_INPUTS,
        ),
        PipelineStep(
            "final_outputs", "Collect bins, MAGs and summaries into final_outputs",
            final_outputs, contracts.FINAL_OUTPUTS, soft, inputs=contracts.GENOME_METRICS,
        ),
    ]
