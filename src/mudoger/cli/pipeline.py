"""Shared module execution helpers for the CLI."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import click

from mudoger.cli.exit_codes import EXIT_ERROR
from mudoger.config import Config, load_config, save_config
from mudoger.constants import LOGS_DIR
from mudoger.exceptions import ConfigurationError
from mudoger.utils.logging import parse_level, setup_logging


@dataclass
class PipelineOptions:
    """Container for module execution options."""

    forward_reads: Optional[Path] = None
    reverse_reads: Optional[Path] = None
    assembly: Optional[Path] = None
    uvigs: Optional[Path] = None
    host_bins: Optional[Path] = None
    output: Optional[Path] = None  # None means use config or default
    sample: Optional[str] = None
    config_path: Optional[Path] = None
    threads: Optional[int] = None
    memory_gb: Optional[int] = None
    start_from: Optional[str] = None
    stop_at: Optional[str] = None
    show_steps: bool = False
    force: bool = False
    dry_run: bool = False
    log_file: Optional[Path] = None
    verbose: int = 0


def step_ref(value: Optional[str]) -> Union[int, str, None]:
    """Step references given on the command line are numbers or step names."""
    if value is None:
        return None
    return int(value) if value.isdigit() else value


def show_module_steps(module: str, cfg: Optional[Config] = None) -> None:
    """List a module's steps without touching the output directory."""
    from mudoger.core.steps.definitions import build_steps

    steps = build_steps(module, cfg or Config())
    click.echo(f"\nMuDoGeR {module} module steps:")
    click.echo("-" * 60)
    for i, step in enumerate(steps, 1):
        click.echo(f"  {i:2d}. {step.name:<22} [{step.failure_policy.value:<5}] {step.description}")
    click.echo("-" * 60)
    click.echo(f"Total: {len(steps)} steps\n")


def resolve_config(opts: PipelineOptions) -> Config:
    """Load the config file and apply command line overrides.

    Priority: CLI arg (if provided) > config file > default.
    """
    cfg = load_config(opts.config_path) if opts.config_path else Config()

    for name in ("forward_reads", "reverse_reads", "assembly", "uvigs", "host_bins"):
        value = getattr(opts, name)
        if value is not None:
            setattr(cfg, name, value)
    if opts.output is not None:
        cfg.output_dir = opts.output
    if opts.sample is not None:
        cfg.sample = opts.sample
    if opts.threads is not None:
        cfg.threads = opts.threads
    if opts.memory_gb is not None:
        cfg.memory_gb = opts.memory_gb
    return cfg


def _configure_logging(opts: PipelineOptions, cfg: Config) -> None:
    # CLI verbosity wins over the config file
    if opts.verbose >= 2:
        level = logging.DEBUG
    elif opts.verbose == 1:
        level = logging.INFO
    else:
        level = parse_level(cfg.runtime.log_level)
    setup_logging(level=level, log_file=opts.log_file or cfg.runtime.log_file)


def dry_run(module: str, cfg: Config) -> None:
    """Report, step by step, whether outputs already verify."""
    from mudoger.core.step import StepContext
    from mudoger.core.steps.definitions import build_steps

    context = StepContext(config=cfg, module=module)
    click.echo(f"Dry run for {module} in {Path(cfg.output_dir).absolute()}:")
    for i, step in enumerate(build_steps(module, cfg), 1):
        state = "skip (verified)" if step.verify(context).ok else "run"
        click.echo(f"  {i:2d}. {step.name:<22} {state}")


def execute_module(module: str, opts: PipelineOptions, logger: logging.Logger) -> None:
    """Run one module with the given options.

    Exits with ``EXIT_ERROR`` when the configuration is invalid or a fatal step
    fails. Soft failures only show up in the audit log and summary.
    """
    cfg = resolve_config(opts)

    if opts.show_steps:
        show_module_steps(module, cfg)
        return

    _configure_logging(opts, cfg)

    try:
        cfg.validate(module)
    except ConfigurationError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(EXIT_ERROR)

    if opts.dry_run:
        logger.info("Dry run mode - no tool will be executed")
        dry_run(module, cfg)
        return

    # Imported here to keep `--help` fast
    from mudoger.core.pipeline import run_steps
    from mudoger.core.run_log import RunLog
    from mudoger.core.step import StepContext
    from mudoger.core.steps.definitions import build_steps

    output_dir = Path(cfg.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    try:
        save_config(cfg, output_dir / "config.yaml")
    except OSError as exc:
        logger.warning(f"Could not save config: {exc}")

    log_path = output_dir / LOGS_DIR / f"{module}_module.log"
    with RunLog(log_path) as run_log:
        run_log.section(f"MuDoGeR {module} module - sample {cfg.sample_name}")
        context = StepContext(config=cfg, run_log=run_log, module=module)
        result = run_steps(
            build_steps(module, cfg),
            context,
            force=opts.force,
            start_from=step_ref(opts.start_from),
            stop_at=step_ref(opts.stop_at),
        )

    click.echo(f"Audit log: {log_path}")
    if not result.all_fatal_steps_ok:
        failed = ", ".join(o.name for o in result.failed)
        click.echo(f"Error: {module} module stopped after a fatal failure ({failed})", err=True)
        sys.exit(EXIT_ERROR)
