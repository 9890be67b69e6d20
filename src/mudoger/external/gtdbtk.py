"""GTDB-Tk wrapper."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from mudoger.constants import GTDBTK_SUMMARIES
from mudoger.external.base import ExternalTool


class GTDBTk(ExternalTool):
    """GTDB-Tk taxonomic classification."""

    tool_name = "gtdbtk"
    environment = "gtdbtk"
    # Archaeal summaries are named ar53 from 2.x on
    required_version = "2.1.0"
    version_command = "--version"

    def classify_wf(
        self,
        bins_dir: Path,
        out_dir: Path,
        extension: str = "fa",
        log_file: Optional[Path] = None,
    ) -> List[Path]:
        """Classify every genome in ``bins_dir``; returns the summary files written."""
        out_dir.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command("gtdbtk", bins_dir=bins_dir, out_dir=out_dir, extension=extension)
        self.run(cmd, log_file=log_file)
        return [out_dir / name for name in GTDBTK_SUMMARIES if (out_dir / name).exists()]
