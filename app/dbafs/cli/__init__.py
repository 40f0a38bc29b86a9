"""CLI package for dbafs.

This package contains the Typer application and all subcommands.
"""

from dbafs.cli.main import app

__all__ = ["app"]
