"""Configuration commands.

Provides commands to show the effective configuration and to write a
config file with the current settings.
"""

from pathlib import Path
from typing import Annotated

import typer

from dbafs.cli.types import get_config
from dbafs.core.config import ConfigError, save_config
from dbafs.core.paths import get_config_path
from dbafs.utils.formatting import console, create_info_table, print_error, print_success

app = typer.Typer(
    help="Show and initialize configuration.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def show(ctx: typer.Context) -> None:
    """Show the effective configuration."""
    config = get_config(ctx)

    table = create_info_table("Configuration")
    table.add_row("Root", str(config.root.resolve()))
    table.add_row("Upload path", config.upload_path)
    table.add_row("Excluded", ", ".join(config.sync_exclude) or "-")
    table.add_row("Metadata file", str(config.effective_metadata_file))
    console.print(table)


@app.command()
def init(
    ctx: typer.Context,
    upload_path: Annotated[
        str | None,
        typer.Option("--upload-path", "-u", help="Synchronized folder (root-relative)."),
    ] = None,
    exclude: Annotated[
        list[str] | None,
        typer.Option("--exclude", "-x", help="Folder excluded from synchronization."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with the current settings."""
    config_path: Path = (ctx.obj or {}).get("config_path") or get_config_path()

    if config_path.exists() and not force:
        print_error(f"Config already exists: {config_path} (use --force to overwrite)")
        raise typer.Exit(code=1)

    config = get_config(ctx)
    updates: dict[str, object] = {"root": config.root.resolve()}
    if upload_path is not None:
        updates["upload_path"] = upload_path
    if exclude:
        updates["sync_exclude"] = list(exclude)

    try:
        config = config.model_validate({**config.model_dump(), **updates})
        saved = save_config(config, config_path)
    except (ConfigError, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {saved}")
