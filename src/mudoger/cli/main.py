"""Click application entrypoint for MuDoGeR."""

from __future__ import annotations

import signal
import sys
from pathlib import Path
from types import FrameType
from typing import Optional

import click

from mudoger import __version__
from mudoger.cli.exit_codes import EXIT_ERROR, EXIT_SIGINT, EXIT_SIGTERM, EXIT_SUCCESS
from mudoger.exceptions import MudogerError
from mudoger.utils.logging import get_logger

from .commands.config import init_config
from .commands.validate import validate
from .common_options import (
    assembly_option,
    forward_reads_option,
    memory_option,
    output_option,
    reverse_reads_option,
    run_options,
    threads_option,
)
from .pipeline import PipelineOptions, execute_module


class Terminated(KeyboardInterrupt):
    """SIGTERM received while a command is running."""


def _handle_signal(signum: int, frame: Optional[FrameType]) -> None:
    """Handle interrupt signals for graceful shutdown."""
    sig_name = "SIGTERM" if signum == signal.SIGTERM else "SIGINT"
    click.echo(f"\n{sig_name} received, stopping...", err=True)
    if signum == signal.SIGTERM:
        raise Terminated(f"{sig_name} received")
    raise KeyboardInterrupt(f"{sig_name} received")


def _print_version(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if value and not ctx.resilient_parsing:
        click.echo(f"MuDoGeR {__version__}")
        ctx.exit()


def _run(module: str, opts: PipelineOptions) -> None:
    logger = get_logger("cli")
    try:
        execute_module(module, opts, logger)
    except Terminated:
        logger.info("Run terminated")
        sys.exit(EXIT_SIGTERM)
    except KeyboardInterrupt:
        logger.info("Run interrupted by user")
        sys.exit(EXIT_SIGINT)
    except MudogerError as exc:
        logger.error(f"Pipeline error: {exc}")
        sys.exit(EXIT_ERROR)


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option(
    "-V",
    "--version",
    is_flag=True,
    is_eager=True,
    expose_value=False,
    callback=_print_version,
    help="Show the version and exit.",
)
def cli() -> None:
    """MuDoGeR: Multi-Domain Genome Recovery from metagenomes.

    Each module is resumable: steps whose outputs already verify are skipped.
    """


@cli.command()
@forward_reads_option
@reverse_reads_option
@assembly_option
@output_option
@threads_option
@memory_option
@run_options
def prokaryotes(**kwargs) -> None:
    """Recover prokaryotic MAGs: binning, refinement, taxonomy, quality and annotation."""
    _run("prokaryotes", _options(kwargs))


@cli.command()
@click.option(
    "-u", "--uvigs",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Viral contigs (uViGs) FASTA",
)
@click.option(
    "-b", "--host-bins", "host_bins",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory of host genomes for host prediction",
)
@output_option
@threads_option
@memory_option
@run_options
def viruses(**kwargs) -> None:
    """Characterize uViGs: quality assessment and host prediction."""
    _run("viruses", _options(kwargs))


@cli.command()
@forward_reads_option
@reverse_reads_option
@assembly_option
@output_option
@threads_option
@memory_option
@run_options
def eukaryotes(**kwargs) -> None:
    """Recover eukaryotic bins: contig sorting, binning and size filtering."""
    _run("eukaryotes", _options(kwargs))


def _options(kwargs: dict) -> PipelineOptions:
    kwargs["config_path"] = kwargs.pop("config")
    return PipelineOptions(**kwargs)


cli.add_command(init_config)
cli.add_command(validate)


def main(argv: list[str] | None = None) -> int:
    """Main entry point with signal handling."""
    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    try:
        cli(argv)
        return EXIT_SUCCESS
    except Terminated:
        return EXIT_SIGTERM
    except KeyboardInterrupt:
        return EXIT_SIGINT
    except SystemExit as exc:
        # Preserve explicit exit codes from cli()
        if exc.code is None:
            return EXIT_SUCCESS
        return exc.code if isinstance(exc.code, int) else EXIT_ERROR
    except Exception as exc:
        click.echo(f"Error: {exc}", err=True)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
