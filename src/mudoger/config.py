"""Configuration management for MuDoGeR."""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, Dict, Any
import yaml
from mudoger.exceptions import ConfigurationError


MODULES = ("prokaryotes", "viruses", "eukaryotes")

# Inputs each module cannot start without
MODULE_INPUTS = {
    "prokaryotes": ("assembly", "forward_reads", "reverse_reads"),
    "viruses": ("uvigs",),
    "eukaryotes": ("assembly", "forward_reads", "reverse_reads"),
}


@dataclass
class RuntimeConfig:
    """Runtime configuration."""

    log_level: str = "INFO"
    log_file: Optional[Path] = None
    # Enable tqdm progress where available
    enable_progress: bool = True


@dataclass
class PerformanceConfig:
    """Performance-related configuration."""

    threads: int = 1
    memory_gb: int = 50


@dataclass
class QualityConfig:
    """Thresholds used to rank and filter genomes."""

    contamination_weight: float = 5.0
    min_quality_score: float = 50.0
    # Tier boundaries used in the run summary
    high_min_completeness: float = 90.0
    high_max_contamination: float = 5.0
    medium_min_completeness: float = 50.0
    medium_max_contamination: float = 10.0
    # metaWRAP refinement cutoffs (-c / -x)
    bacteria_min_completeness: int = 50
    bacteria_max_contamination: int = 10
    archaea_min_completeness: int = 40
    archaea_max_contamination: int = 30
    # Eukaryotic bins at or below this size (bytes) are dropped
    min_euk_bin_bytes: int = 2_000_000
    bin_extension: str = "fa"

    def quality_score(self, completeness: float, contamination: float) -> float:
        return completeness - self.contamination_weight * contamination

    def is_accepted(self, completeness: float, contamination: float) -> bool:
        return self.quality_score(completeness, contamination) >= self.min_quality_score


@dataclass
class ToolConfig:
    """External tool configuration.

    Commands are argv templates. Each whitespace-separated token is formatted
    with the step's values; a token that is exactly ``{name}`` and maps to a
    list expands to several arguments.
    """

    commands: Dict[str, str] = field(
        default_factory=lambda: {
            "metawrap_binning": (
                "metawrap binning -o {out_dir} -t {threads} -a {assembly} "
                "--metabat2 --maxbin2 {forward_reads} {reverse_reads}"
            ),
            "metawrap_refinement": (
                "metawrap bin_refinement -o {out_dir} -t {threads} -A {bins_a} -B {bins_b} "
                "-c {completeness} -x {contamination} -m {memory}"
            ),
            "metawrap_concoct": (
                "metawrap binning -o {out_dir} -t {threads} -a {assembly} "
                "--concoct {forward_reads} {reverse_reads}"
            ),
            "gtdbtk": (
                "gtdbtk classify_wf --skip_ani_screen --extension {extension} "
                "--cpus {threads} --genome_dir {bins_dir} --out_dir {out_dir}"
            ),
            "checkm": (
                "checkm lineage_wf -t {threads} --reduced_tree --tab_table "
                "-x {extension} -f {table} {bins_dir} {out_dir}"
            ),
            "prokka": (
                "prokka {bin_file} --cpus {threads} --outdir {out_dir} "
                "--prefix PROKKA_{bin_name} --metagenome --force --quiet"
            ),
            "bbtools": "statswrapper.sh {fasta_files}",
            "checkv": "checkv end_to_end {uvigs} {out_dir} -t {threads}",
            "wish_build": "WIsH -c build -g {hosts_dir} -m {model_dir}",
            "wish_predict": (
                "WIsH -t {threads} -c predict -g {viral_dir} -m {model_dir} "
                "-r {results_dir} -b 1"
            ),
            "eukrep": "EukRep -i {assembly} --prokarya {prok_contigs} -o {euk_contigs}",
        }
    )
    # Conda environment (under envs_path) holding each tool
    environments: Dict[str, str] = field(
        default_factory=lambda: {
            "metawrap": "metawrap_env",
            "checkm": "metawrap_env",
            "gtdbtk": "gtdbtk_env",
            "prokka": "prokka_env",
            "bbtools": "bbtools_env",
            "checkv": "checkv_env",
            "wish": "wish_env",
            "eukrep": "eukrep_env",
        }
    )
    envs_path: Optional[Path] = None
    # Prefix commands with `conda run -p <envs_path>/<env>` instead of relying on PATH
    use_conda_run: bool = False
    databases: Optional[Path] = None
    # Extra environment variables, merged over the database defaults
    env: Dict[str, str] = field(default_factory=dict)
    wish_null_parameters: Optional[Path] = None

    def database_env(self) -> Dict[str, str]:
        """Environment variables pointing tools at their reference databases."""
        variables: Dict[str, str] = {}
        if self.databases:
            root = Path(self.databases)
            variables["CHECKM_DATA_PATH"] = str(root / "checkm")
            variables["GTDBTK_DATA_PATH"] = str(root / "gtdbtk")
            variables["CHECKVDB"] = str(root / "checkv")
        variables.update({k: str(v) for k, v in self.env.items()})
        return variables


@dataclass
class Config:
    """Main configuration class."""

    forward_reads: Optional[Path] = None
    reverse_reads: Optional[Path] = None
    assembly: Optional[Path] = None
    uvigs: Optional[Path] = None
    host_bins: Optional[Path] = None
    output_dir: Path = Path("mudoger_output")
    sample: Optional[str] = None

    # Sub-configurations
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)
    quality: QualityConfig = field(default_factory=QualityConfig)
    tools: ToolConfig = field(default_factory=ToolConfig)

    # Convenience properties
    @property
    def threads(self) -> int:
        return self.performance.threads

    @threads.setter
    def threads(self, value: int):
        self.performance.threads = value

    @property
    def memory_gb(self) -> int:
        return self.performance.memory_gb

    @memory_gb.setter
    def memory_gb(self, value: int):
        self.performance.memory_gb = value

    @property
    def sample_name(self) -> str:
        """Library name used to label bins; defaults to the output directory name."""
        if self.sample:
            return self.sample
        return Path(self.output_dir).resolve().name or "sample"

    def validate(self, module: Optional[str] = None) -> None:
        """Validate configuration, optionally for a single module's inputs."""
        if module is not None:
            if module not in MODULE_INPUTS:
                raise ConfigurationError(
                    f"Unknown module '{module}'. Choose from: {', '.join(MODULES)}"
                )
            for attr in MODULE_INPUTS[module]:
                value = getattr(self, attr)
                if not value:
                    raise ConfigurationError(f"{attr.replace('_', ' ')} is required for {module}")
                if not Path(value).exists():
                    raise ConfigurationError(f"Input file not found: {value}")

        if self.host_bins is not None and not Path(self.host_bins).is_dir():
            raise ConfigurationError(f"Host bins directory not found: {self.host_bins}")

        # Validate numeric ranges
        if self.performance.threads < 1:
            raise ConfigurationError("Threads must be >= 1")
        if self.performance.memory_gb < 1:
            raise ConfigurationError("Memory must be >= 1 GB")
        if self.quality.contamination_weight < 0:
            raise ConfigurationError("quality.contamination_weight must be >= 0")
        q = self.quality
        if q.high_min_completeness < q.medium_min_completeness:
            raise ConfigurationError(
                "quality.high_min_completeness must not be below quality.medium_min_completeness"
            )
        if self.tools.use_conda_run and not self.tools.envs_path:
            raise ConfigurationError("tools.envs_path is required when tools.use_conda_run is set")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""

        def path_to_str(obj):
            if isinstance(obj, Path):
                return str(obj)
            elif isinstance(obj, dict):
                return {k: path_to_str(v) for k, v in obj.items()}
            elif isinstance(obj, (list, tuple)):
                return [path_to_str(item) for item in obj]
            return obj

        return path_to_str(asdict(self))


_PATH_FIELDS = ("forward_reads", "reverse_reads", "assembly", "uvigs", "host_bins", "output_dir")
_TOOL_PATH_FIELDS = ("envs_path", "databases", "wish_null_parameters")


def load_config(path: Path) -> Config:
    """Load configuration from YAML file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {path}")

    cfg = Config()

    # Direct attributes
    for key in _PATH_FIELDS:
        if data.get(key) is not None:
            setattr(cfg, key, Path(data[key]))
    if "sample" in data:
        cfg.sample = data["sample"]
    if data.get("threads") is not None:
        cfg.performance.threads = data["threads"]

    # Runtime config
    for key, value in (data.get("runtime") or {}).items():
        if hasattr(cfg.runtime, key):
            if key == "log_file" and value:
                value = Path(value)
            setattr(cfg.runtime, key, value)

    for key, value in (data.get("performance") or {}).items():
        if hasattr(cfg.performance, key):
            setattr(cfg.performance, key, value)

    for key, value in (data.get("quality") or {}).items():
        if not hasattr(cfg.quality, key):
            raise ConfigurationError(f"Unknown quality option: {key}")
        setattr(cfg.quality, key, value)

    # Tool config; command and environment maps merge over the defaults
    for key, value in (data.get("tools") or {}).items():
        if not hasattr(cfg.tools, key) or value is None:
            continue
        if key in ("commands", "environments", "env"):
            getattr(cfg.tools, key).update(value)
        elif key in _TOOL_PATH_FIELDS:
            setattr(cfg.tools, key, Path(value))
        else:
            setattr(cfg.tools, key, value)

    return cfg


def save_config(cfg: Config, path: Path) -> None:
    """Save configuration to YAML file."""
    data = cfg.to_dict()
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def default_config_text() -> str:
    """Return the default configuration rendered as YAML."""
    return yaml.dump(Config().to_dict(), default_flow_style=False, sort_keys=False)
