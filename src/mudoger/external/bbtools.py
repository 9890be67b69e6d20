"""BBTools ``statswrapper.sh`` wrapper."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from mudoger.external.base import ExternalTool


class BBTools(ExternalTool):
    """Assembly statistics for a set of FASTA files."""

    tool_name = "statswrapper.sh"
    environment = "bbtools"

    def stats(self, fasta_files: Sequence[Path], output: Path, log_file: Optional[Path] = None) -> Path:
        """Write the statswrapper table for ``fasta_files`` to ``output``."""
        cmd = self.build_command("bbtools", fasta_files=[str(f) for f in fasta_files])
        stdout, _ = self.run(cmd, log_file=log_file)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(stdout, encoding="utf-8")
        return output
