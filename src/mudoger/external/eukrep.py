"""EukRep wrapper."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from mudoger.external.base import ExternalTool


class EukRep(ExternalTool):
    """Separates eukaryotic from prokaryotic contigs."""

    tool_name = "EukRep"
    environment = "eukrep"

    def sort_contigs(
        self,
        assembly: Path,
        euk_contigs: Path,
        prok_contigs: Path,
        log_file: Optional[Path] = None,
    ) -> Path:
        euk_contigs.parent.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command(
            "eukrep", assembly=assembly, euk_contigs=euk_contigs, prok_contigs=prok_contigs
        )
        self.run(cmd, log_file=log_file)
        return euk_contigs
