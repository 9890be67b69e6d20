"""Configuration-related CLI commands."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from mudoger.cli.exit_codes import EXIT_ERROR


@click.command(name="init-config")
@click.option(
    "--output-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("config.yaml"),
    show_default=True,
    help="Where to write the configuration template",
)
@click.option("--stdout", is_flag=True, help="Print the template instead of writing a file")
@click.option("--overwrite", is_flag=True, help="Replace an existing file")
def init_config(output_file: Path, stdout: bool, overwrite: bool) -> None:
    """Write a configuration template with every default filled in.

    Edit ``tools.envs_path`` and ``tools.databases`` to match the local
    installation before running a module.
    """
    from mudoger.config import default_config_text

    text = default_config_text()
    if stdout:
        click.echo(text)
        return
    if output_file.exists() and not overwrite:
        click.echo(f"Error: {output_file} already exists (use --overwrite to replace it)", err=True)
        sys.exit(EXIT_ERROR)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(text)
    click.echo(f"Configuration template saved to: {output_file}")
