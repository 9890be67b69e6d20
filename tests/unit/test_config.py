"""Tests for configuration loading and validation."""

from pathlib import Path
import sys

import pytest
import yaml

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from mudoger.config import (
    Config,
    QualityConfig,
    ToolConfig,
    default_config_text,
    load_config,
    save_config,
)
from mudoger.exceptions import ConfigurationError


class TestDefaults:
    """Default values."""

    def test_quality_defaults(self):
        q = QualityConfig()
        assert q.contamination_weight == 5.0
        assert q.min_quality_score == 50.0
        assert q.min_euk_bin_bytes == 2_000_000

    def test_quality_score(self):
        q = QualityConfig()
        assert q.quality_score(95, 3) == 80
        assert q.is_accepted(95, 3)
        assert not q.is_accepted(60, 15)

    def test_threads_property(self):
        cfg = Config()
        cfg.threads = 8
        assert cfg.performance.threads == 8

    def test_sample_name_falls_back_to_output_dir(self, tmp_path):
        cfg = Config(output_dir=tmp_path / "lake_2021")
        assert cfg.sample_name == "lake_2021"
        cfg.sample = "S1"
        assert cfg.sample_name == "S1"

    def test_database_env(self, tmp_path):
        tools = ToolConfig(databases=tmp_path, env={"EXTRA": "1"})
        env = tools.database_env()
        assert env["CHECKM_DATA_PATH"] == str(tmp_path / "checkm")
        assert env["GTDBTK_DATA_PATH"] == str(tmp_path / "gtdbtk")
        assert env["CHECKVDB"] == str(tmp_path / "checkv")
        assert env["EXTRA"] == "1"


class TestValidate:
    """Module input validation."""

    def test_missing_module_input(self):
        with pytest.raises(ConfigurationError, match="uvigs is required"):
            Config().validate("viruses")

    def test_input_not_found(self, tmp_path):
        cfg = Config(uvigs=tmp_path / "absent.fa")
        with pytest.raises(ConfigurationError, match="not found"):
            cfg.validate("viruses")

    def test_valid_viruses(self, tmp_path):
        uvigs = tmp_path / "uvigs.fa"
        uvigs.write_text(">a\nACGT\n")
        Config(uvigs=uvigs).validate("viruses")

    def test_unknown_module(self):
        with pytest.raises(ConfigurationError, match="Unknown module"):
            Config().validate("plasmids")

    def test_bad_threads(self):
        cfg = Config()
        cfg.threads = 0
        with pytest.raises(ConfigurationError, match="Threads"):
            cfg.validate()

    def test_conda_run_needs_envs_path(self):
        cfg = Config()
        cfg.tools.use_conda_run = True
        with pytest.raises(ConfigurationError, match="envs_path"):
            cfg.validate()


class TestLoadSave:
    """YAML round trip and error reporting."""

    def test_load_overrides(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.dump(
                {
                    "output_dir": str(tmp_path / "out"),
                    "sample": "S1",
                    "threads": 4,
                    "quality": {"min_quality_score": 60},
                    "tools": {
                        "commands": {"checkv": "checkv end_to_end {uvigs} {out_dir}"},
                        "databases": str(tmp_path / "db"),
                    },
                }
            )
        )
        cfg = load_config(path)
        assert cfg.output_dir == tmp_path / "out"
        assert cfg.sample == "S1"
        assert cfg.threads == 4
        assert cfg.quality.min_quality_score == 60
        assert cfg.tools.commands["checkv"] == "checkv end_to_end {uvigs} {out_dir}"
        # other command templates keep their defaults
        assert "prokka" in cfg.tools.commands
        assert cfg.tools.databases == tmp_path / "db"

    def test_unknown_quality_key(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("quality:\n  min_score: 10\n")
        with pytest.raises(ConfigurationError, match="min_score"):
            load_config(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("quality: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(path)

    def test_save_and_reload(self, tmp_path):
        cfg = Config(output_dir=tmp_path / "out", sample="S2")
        cfg.memory_gb = 120
        save_config(cfg, tmp_path / "saved.yaml")
        reloaded = load_config(tmp_path / "saved.yaml")
        assert reloaded.sample == "S2"
        assert reloaded.memory_gb == 120
        assert reloaded.output_dir == tmp_path / "out"

    def test_default_config_text(self):
        data = yaml.safe_load(default_config_text())
        assert "quality" in data
        assert data["quality"]["min_quality_score"] == 50.0
        assert "commands" in data["tools"]
