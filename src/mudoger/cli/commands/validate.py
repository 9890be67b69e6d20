"""Installation validation command."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from mudoger import __version__
from mudoger.cli.exit_codes import EXIT_ERROR


@click.command()
@click.option("--full", is_flag=True, help="Also look up every external tool")
@click.option(
    "-c", "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Configuration file used to locate tool environments",
)
def validate(full: bool, config: Optional[Path]) -> None:
    """Validate MuDoGeR installation and dependencies."""
    from mudoger.config import load_config
    from mudoger.utils.validators import validate_installation

    click.echo("Validating MuDoGeR installation...")
    cfg = load_config(config) if config else None
    issues = validate_installation(full_check=full, config=cfg)

    if not issues:
        click.echo("✓ All checks passed!")
        click.echo(f"  MuDoGeR version: {__version__}")
    else:
        click.echo("✗ Issues found:")
        for issue in issues:
            click.echo(f"  - {issue}")
        sys.exit(EXIT_ERROR)
