"""WIsH wrapper (phage host prediction)."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from mudoger.external.base import ExternalTool


class WIsH(ExternalTool):
    """WIsH host models and predictions."""

    tool_name = "WIsH"
    environment = "wish"

    def build(self, hosts_dir: Path, model_dir: Path, log_file: Optional[Path] = None) -> Path:
        """Build one model per candidate host genome."""
        model_dir.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command("wish_build", hosts_dir=f"{hosts_dir}/", model_dir=model_dir)
        self.run(cmd, log_file=log_file)
        return model_dir

    def predict(
        self,
        viral_dir: Path,
        model_dir: Path,
        results_dir: Path,
        null_parameters: Optional[Path] = None,
        log_file: Optional[Path] = None,
    ) -> Path:
        """Predict the best host per viral particle; returns ``prediction.list``."""
        results_dir.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command(
            "wish_predict",
            viral_dir=f"{viral_dir}/",
            model_dir=model_dir,
            results_dir=f"{results_dir}/",
        )
        if null_parameters is not None:
            cmd += ["-n", str(null_parameters)]
        self.run(cmd, log_file=log_file)
        return results_dir / "prediction.list"
