"""CheckM wrapper."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from mudoger.external.base import ExternalTool


class CheckM(ExternalTool):
    """CheckM lineage-specific completeness/contamination estimates."""

    tool_name = "checkm"
    environment = "checkm"

    def lineage_wf(
        self,
        bins_dir: Path,
        out_dir: Path,
        table: Path,
        extension: str = "fa",
        log_file: Optional[Path] = None,
    ) -> Path:
        """Run ``lineage_wf`` and write the tab table to ``table``."""
        out_dir.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command(
            "checkm", bins_dir=bins_dir, out_dir=out_dir, table=table, extension=extension
        )
        self.run(cmd, log_file=log_file)
        return table
