"""metaWRAP wrapper (binning and bin refinement)."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from mudoger.external.base import ExternalTool


class MetaWRAP(ExternalTool):
    """metaWRAP binning and bin_refinement modules."""

    tool_name = "metawrap"
    environment = "metawrap"

    def binning(
        self,
        assembly: Path,
        forward_reads: Path,
        reverse_reads: Path,
        out_dir: Path,
        log_file: Optional[Path] = None,
    ) -> None:
        """Bin the assembly with MetaBAT2 and MaxBin2."""
        out_dir.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command(
            "metawrap_binning",
            assembly=assembly,
            forward_reads=forward_reads,
            reverse_reads=reverse_reads,
            out_dir=out_dir,
        )
        self.run(cmd, log_file=log_file)

    def concoct_binning(
        self,
        contigs: Path,
        forward_reads: Path,
        reverse_reads: Path,
        out_dir: Path,
        log_file: Optional[Path] = None,
    ) -> None:
        """Bin (eukaryotic) contigs with CONCOCT."""
        out_dir.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command(
            "metawrap_concoct",
            assembly=contigs,
            forward_reads=forward_reads,
            reverse_reads=reverse_reads,
            out_dir=out_dir,
        )
        self.run(cmd, log_file=log_file)

    def bin_refinement(
        self,
        bins_a: Path,
        bins_b: Path,
        out_dir: Path,
        completeness: int,
        contamination: int,
        memory_gb: int,
        log_file: Optional[Path] = None,
    ) -> None:
        """Consolidate two bin sets under completeness/contamination cutoffs."""
        out_dir.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command(
            "metawrap_refinement",
            bins_a=bins_a,
            bins_b=bins_b,
            out_dir=out_dir,
            completeness=completeness,
            contamination=contamination,
            memory=memory_gb,
        )
        self.run(cmd, log_file=log_file)
