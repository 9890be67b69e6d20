"""Expected inputs and outputs of every step.

Paths are relative to the run's output directory; ``{bac_bins}`` and
``{arc_bins}`` expand to the metaWRAP refinement folder names for the
configured cutoffs, ``{uvigs}`` and ``{assembly}`` to the configured inputs.
"""

from __future__ import annotations

from mudoger import constants as c
from mudoger.core.verifier import ExpectedOutputSpec, directory, merge, table
from mudoger.modules.schemas import GENOME_ID, COMPLETENESS, CONTAMINATION, GENOME_STATS_HEADER

# ---- prokaryotes --------------------------------------------------------

INITIAL_BINNING = ExpectedOutputSpec(
    required_dirs=(f"{c.INITIAL_BINNING_DIR}/metabat2_bins", f"{c.INITIAL_BINNING_DIR}/maxbin2_bins"),
    dir_patterns={c.INITIAL_BINNING_DIR: "*_bins/*.fa"},
)

REFINE_BACTERIA = merge(
    ExpectedOutputSpec(required_files=(f"{c.REFINEMENT_BAC_DIR}/{{bac_bins}}.stats",)),
    directory(f"{c.REFINEMENT_BAC_DIR}/{{bac_bins}}"),
)

REFINE_ARCHAEA = merge(
    ExpectedOutputSpec(required_files=(f"{c.REFINEMENT_ARC_DIR}/{{arc_bins}}.stats",)),
    directory(f"{c.REFINEMENT_ARC_DIR}/{{arc_bins}}"),
)

UNIQUE_BINS = directory(c.UNIQUE_BINS_DIR, "*.{extension}")

DEREPLICATION = merge(UNIQUE_BINS, table(c.DEREPLICATION_MAP))

TAXONOMY = table(c.GTDBTK_RESULT, columns=("user_genome", "classification"))

# CheckM tab tables have 14 columns; older releases at least 11
CHECKM = table(c.CHECKM_TABLE, min_columns=11, columns=("Bin Id", "Completeness", "Contamination"))

PROKKA = merge(
    directory(c.PROKKA_DIR, "*/PROKKA_*.tsv"),
    table(c.PROKKA_COUNTS_TABLE, columns=("genome", "prokka_known", "prokka_unknown")),
)

GENOME_STATS = table(c.GENOME_STATS_TABLE, columns=GENOME_STATS_HEADER)

BBTOOLS_STATS = ExpectedOutputSpec(required_files=(c.BBTOOLS_TABLE,))

# every upstream metric table must be complete before the join runs
GENOME_METRICS_INPUTS = merge(UNIQUE_BINS, TAXONOMY, CHECKM, PROKKA, GENOME_STATS)

GENOME_METRICS = table(c.GENOME_METRICS_TABLE, columns=(GENOME_ID, COMPLETENESS, CONTAMINATION))

FINAL_OUTPUTS = merge(
    table(c.ALL_BINS_SUMMARY),
    # header-only is valid: a run may yield no MAG
    ExpectedOutputSpec(
        required_files=(
            c.MAGS_SUMMARY,
            f"{c.BINS_METRICS_SUMMARY_DIR}/taxa_bins_gtdbtk_summary.tsv",
            f"{c.BINS_METRICS_SUMMARY_DIR}/qual_bins_checkm_summary.tsv",
        ),
        required_dirs=(c.MAGS_DIR, c.BINS_GENES_DIR),
    ),
    directory(c.ALL_BINS_DIR, "*.{extension}"),
)

# ---- viruses -------------------------------------------------------------

UVIG_INPUT = ExpectedOutputSpec(required_files=("{uvigs}",))

SPLIT_UVIGS = merge(
    table(c.UVIG_MAPPING, columns=("uvig", "original_contig")),
    directory(c.VIRAL_PARTICLES_DIR, "*.fa"),
)

CHECKV = table(c.CHECKV_SUMMARY, columns=("contig_id", "checkv_quality"))

HOST_PREDICTION = table(c.WISH_PREDICTION)

HOST_BINS_INPUT = directory("{host_bins}", "*.{extension}")

UVIG_METRICS = merge(
    table(c.VIRAL_SUMMARY, columns=("uvig", "original_contig", "checkv_quality")),
    ExpectedOutputSpec(required_files=(c.VIRAL_HQ_SUMMARY,)),
)

# ---- eukaryotes ----------------------------------------------------------

ASSEMBLY_INPUT = ExpectedOutputSpec(required_files=("{assembly}",))

EUKREP = ExpectedOutputSpec(required_files=(c.EUK_CONTIGS,))

EUK_BINNING = directory(f"{c.EUK_BINS_DIR}/concoct_bins", "*.fa")

EUK_SIZE_FILTER = merge(
    directory(c.EUK_FILTERED_DIR),
    ExpectedOutputSpec(required_files=(f"{c.EUK_FILTERED_DIR}/filtered_bins.tsv",)),
)
