"""Version information for MuDoGeR."""

__version__ = "1.1.0"
__author__ = "MuDoGeR developers"
__license__ = "GPL-3.0"
__description__ = "Multi-domain genome recovery from metagenomes: pipeline orchestration core"
