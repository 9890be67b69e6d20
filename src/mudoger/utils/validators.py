"""Installation checks for MuDoGeR."""

from __future__ import annotations

import importlib
import shutil
from typing import List, Optional

from mudoger.config import Config


# Executables needed by each module
MODULE_TOOLS = {
    "prokaryotes": ("metawrap", "checkm", "gtdbtk", "prokka", "statswrapper.sh"),
    "viruses": ("checkv", "WIsH"),
    "eukaryotes": ("EukRep", "metawrap"),
}

_TOOL_ENVIRONMENT = {
    "metawrap": "metawrap",
    "checkm": "checkm",
    "gtdbtk": "gtdbtk",
    "prokka": "prokka",
    "statswrapper.sh": "bbtools",
    "checkv": "checkv",
    "WIsH": "wish",
    "EukRep": "eukrep",
}


def validate_installation(full_check: bool = False, config: Optional[Config] = None) -> List[str]:
    """
    Validate the MuDoGeR installation.

    Args:
        full_check: Also look up every external tool
        config: Configuration used to locate conda environments

    Returns:
        List of validation issues (empty if all good)
    """
    issues = []

    required_modules = ["pandas", "numpy", "Bio", "yaml", "click", "tqdm", "packaging"]
    for module in required_modules:
        try:
            importlib.import_module(module)
        except ImportError:
            issues.append(f"Missing Python module: {module}")

    if full_check:
        cfg = config or Config()
        seen = set()
        for tools in MODULE_TOOLS.values():
            for tool in tools:
                if tool in seen:
                    continue
                seen.add(tool)
                if cfg.tools.use_conda_run and cfg.tools.envs_path:
                    env_name = cfg.tools.environments.get(_TOOL_ENVIRONMENT[tool], "")
                    env_bin = cfg.tools.envs_path / env_name / "bin" / tool
                    if not env_bin.exists():
                        issues.append(f"External tool not found: {tool} (expected {env_bin})")
                elif not shutil.which(tool):
                    issues.append(f"External tool not found: {tool}")
        if cfg.tools.use_conda_run and not shutil.which("conda"):
            issues.append("conda not found in PATH (required by tools.use_conda_run)")

    try:
        from mudoger.core.pipeline import Pipeline  # noqa: F401
        from mudoger.core.steps.definitions import MODULE_BUILDERS  # noqa: F401
    except ImportError as e:
        issues.append(f"MuDoGeR module import error: {e}")

    return issues
