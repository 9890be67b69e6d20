"""Directory layout and fixed names shared across modules."""

from __future__ import annotations

# Module roots under the output directory
PROKARYOTES_DIR = "prokaryotes"
VIRUSES_DIR = "viruses"
EUKARYOTES_DIR = "eukaryotes"
LOGS_DIR = "logs"

# Prokaryote layout (relative to the output directory)
INITIAL_BINNING_DIR = f"{PROKARYOTES_DIR}/binning/initial-binning"
REFINEMENT_BAC_DIR = f"{PROKARYOTES_DIR}/binning/refinement-bac"
REFINEMENT_ARC_DIR = f"{PROKARYOTES_DIR}/binning/refinement-arc"
UNIQUE_BINS_DIR = f"{PROKARYOTES_DIR}/binning/unique_bins"
METRICS_DIR = f"{PROKARYOTES_DIR}/metrics"
GTDBTK_DIR = f"{METRICS_DIR}/GTDBtk_taxonomy"
CHECKM_DIR = f"{METRICS_DIR}/checkm_qc"
PROKKA_DIR = f"{METRICS_DIR}/prokka"
GENOME_STATS_DIR = f"{METRICS_DIR}/genome_statistics"
FINAL_OUTPUTS_DIR = f"{PROKARYOTES_DIR}/final_outputs"

GTDBTK_RESULT = f"{GTDBTK_DIR}/gtdbtk_result.tsv"
GTDBTK_SUMMARIES = ("gtdbtk.bac120.summary.tsv", "gtdbtk.ar53.summary.tsv")
CHECKM_TABLE = f"{CHECKM_DIR}/outputcheckm.tsv"
GENOME_STATS_TABLE = f"{GENOME_STATS_DIR}/prok_genomes_stats.tsv"
BBTOOLS_TABLE = f"{GENOME_STATS_DIR}/bbtools.tsv"
PROKKA_COUNTS_TABLE = f"{PROKKA_DIR}/prokka_gene_counts.tsv"
GENOME_METRICS_TABLE = f"{GENOME_STATS_DIR}/genome_metrics.tsv"
DEREPLICATION_MAP = f"{UNIQUE_BINS_DIR}/dereplication_map.tsv"

ALL_BINS_DIR = f"{FINAL_OUTPUTS_DIR}/all_bins_seq"
MAGS_DIR = f"{FINAL_OUTPUTS_DIR}/only_mags_seq"
BINS_METRICS_SUMMARY_DIR = f"{FINAL_OUTPUTS_DIR}/bins_metrics_summary"
BINS_GENES_DIR = f"{FINAL_OUTPUTS_DIR}/bins_genes_prokka_summary"
ALL_BINS_SUMMARY = f"{FINAL_OUTPUTS_DIR}/allbins_metrics_summary.tsv"
MAGS_SUMMARY = f"{FINAL_OUTPUTS_DIR}/mags_results_summary.tsv"

# Virus layout
UVIG_MAPPING = f"{VIRUSES_DIR}/host_prediction/uvigs_mapping.tsv"
VIRAL_PARTICLES_DIR = f"{VIRUSES_DIR}/host_prediction/viral_particles"
HOST_GENOMES_DIR = f"{VIRUSES_DIR}/host_prediction/potential_host_genomes"
WISH_MODEL_DIR = f"{VIRUSES_DIR}/host_prediction/modelDir"
WISH_RESULTS_DIR = f"{VIRUSES_DIR}/host_prediction/output_results"
WISH_PREDICTION = f"{WISH_RESULTS_DIR}/prediction.list"
CHECKV_DIR = f"{VIRUSES_DIR}/vcheck_quality"
CHECKV_SUMMARY = f"{CHECKV_DIR}/quality_summary.tsv"
VIRAL_SUMMARY = f"{VIRUSES_DIR}/viruses_summary.tsv"
VIRAL_HQ_SUMMARY = f"{VIRUSES_DIR}/Uvigs_high_quality.tsv"

# Eukaryote layout
EUKREP_DIR = f"{EUKARYOTES_DIR}/eukrep"
EUK_CONTIGS = f"{EUKREP_DIR}/eukaryotic_contigs.fa"
PROK_CONTIGS = f"{EUKREP_DIR}/prokaryotic_contigs.fa"
EUK_BINS_DIR = f"{EUKARYOTES_DIR}/eukaryotes_bins"
EUK_FILTERED_DIR = f"{EUKARYOTES_DIR}/filtered_euk_bins"

# Default labels for metrics a tool did not report
UNCLASSIFIED = "Unclassified"
