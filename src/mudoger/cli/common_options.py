"""Shared Click options for the module commands."""

from __future__ import annotations

from functools import reduce
from pathlib import Path
from typing import Callable, TypeVar

import click

F = TypeVar("F", bound=Callable[..., None])


def forward_reads_option(func: F) -> F:
    return click.option(
        "-1", "--forward", "forward_reads",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Forward (R1) FASTQ reads",
    )(func)


def reverse_reads_option(func: F) -> F:
    return click.option(
        "-2", "--reverse", "reverse_reads",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Reverse (R2) FASTQ reads",
    )(func)


def assembly_option(func: F) -> F:
    return click.option(
        "-a", "--assembly",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Assembly FASTA",
    )(func)


def output_option(func: F) -> F:
    return click.option(
        "-o", "--output",
        type=click.Path(file_okay=False, path_type=Path),
        default=None,
        help="Output directory [default: mudoger_output]",
    )(func)


def threads_option(func: F) -> F:
    return click.option(
        "-t", "--threads", type=click.IntRange(min=1), default=None,
        help="Number of threads [default: 1]",
    )(func)


def memory_option(func: F) -> F:
    return click.option(
        "-m", "--memory", "memory_gb", type=click.IntRange(min=1), default=None,
        help="Memory in GB [default: 50]",
    )(func)


def run_options(func: F) -> F:
    """Options every module command shares."""
    options = [
        click.option(
            "-c", "--config",
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            help="Configuration file (YAML)",
        ),
        click.option("-s", "--sample", default=None, help="Sample name used to label bins"),
        click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v INFO, -vv DEBUG)"),
        click.option("--force", is_flag=True, help="Re-run steps even when their outputs verify"),
        click.option("--dry-run", is_flag=True, help="Show which steps would run, without running them"),
        click.option("--show-steps", is_flag=True, help="List the module's steps and exit"),
        click.option("--start-from", default=None, help="First step to run (number or name)"),
        click.option("--stop-at", default=None, help="Last step to run (number or name)"),
        click.option(
            "--log-file", type=click.Path(dir_okay=False, path_type=Path),
            help="Detailed debug log in addition to the audit log",
        ),
    ]
    return reduce(lambda f, option: option(f), reversed(options), func)
