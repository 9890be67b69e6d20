"""MuDoGeR: multi-domain genome recovery from metagenomes."""

from mudoger.__version__ import __version__

__all__ = ["__version__"]
