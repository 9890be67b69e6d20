"""Tests for installation checks."""

from pathlib import Path
import sys
from unittest.mock import patch

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from mudoger.config import Config
from mudoger.utils.validators import MODULE_TOOLS, validate_installation


class TestValidateInstallation:
    """Python modules and external tools."""

    def test_basic_check_passes(self):
        assert validate_installation() == []

    def test_full_check_reports_missing_tools(self):
        with patch("mudoger.utils.validators.shutil.which", return_value=None):
            issues = validate_installation(full_check=True)
        missing = {issue.split(": ")[1] for issue in issues if issue.startswith("External tool not found")}
        expected = {tool for tools in MODULE_TOOLS.values() for tool in tools}
        assert missing == expected

    def test_full_check_with_conda_envs(self, tmp_path):
        cfg = Config()
        cfg.tools.use_conda_run = True
        cfg.tools.envs_path = tmp_path
        for env in set(cfg.tools.environments.values()):
            (tmp_path / env / "bin").mkdir(parents=True)
        for tool, env_key in (("checkv", "checkv"), ("WIsH", "wish")):
            (tmp_path / cfg.tools.environments[env_key] / "bin" / tool).write_text("")
        with patch("mudoger.utils.validators.shutil.which", return_value="/opt/conda/bin/conda"):
            issues = validate_installation(full_check=True, config=cfg)
        assert not any("checkv" in issue for issue in issues)
        assert any("prokka" in issue for issue in issues)
