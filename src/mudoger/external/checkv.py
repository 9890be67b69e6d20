"""CheckV wrapper."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from mudoger.external.base import ExternalTool


class CheckV(ExternalTool):
    """CheckV quality assessment of viral genomes (reads CHECKVDB)."""

    tool_name = "checkv"
    environment = "checkv"

    def end_to_end(self, uvigs: Path, out_dir: Path, log_file: Optional[Path] = None) -> Path:
        out_dir.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command("checkv", uvigs=uvigs, out_dir=out_dir)
        self.run(cmd, log_file=log_file)
        return out_dir / "quality_summary.tsv"
