"""Command line interface for MuDoGeR."""

from .main import cli, main

__all__ = ["cli", "main"]
