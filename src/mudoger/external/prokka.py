"""Prokka wrapper."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from mudoger.external.base import ExternalTool


class Prokka(ExternalTool):
    """Prokka rapid prokaryotic genome annotation."""

    tool_name = "prokka"
    environment = "prokka"
    version_command = "--version"

    def annotate(self, bin_file: Path, out_dir: Path, log_file: Optional[Path] = None) -> Path:
        """Annotate one genome; output files are prefixed ``PROKKA_<bin>``."""
        bin_name = bin_file.name.rsplit(".", 1)[0]
        out_dir.parent.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command("prokka", bin_file=bin_file, bin_name=bin_name, out_dir=out_dir)
        self.run(cmd, log_file=log_file)
        return out_dir
