"""Shared helpers for CLI commands.

Resolves the configuration and repository from the global options
stored on the Typer context by the main callback.
"""

from pathlib import Path

import typer

from dbafs.core.config import ConfigError, DbafsConfig, load_config_or_default
from dbafs.repository import Repository
from dbafs.utils.formatting import print_error


def get_config(ctx: typer.Context) -> DbafsConfig:
    """Load the configuration, applying the --root override.

    Exits with code 1 if the config file is invalid.
    """
    obj = ctx.obj or {}
    config_path: Path | None = obj.get("config_path")
    root: Path | None = obj.get("root")

    try:
        config = load_config_or_default(config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if root is not None:
        config = config.model_copy(update={"root": root})

    return config


def get_repository(ctx: typer.Context) -> Repository:
    """Open the repository described by the current configuration."""
    return Repository.from_config(get_config(ctx))
