"""Folder commands.

Provides commands to inspect, create, rename, copy, delete, purge and
protect folders below the repository root.
"""

from typing import Annotated

import typer

from dbafs.cli.types import get_repository
from dbafs.core.resolver import FolderError
from dbafs.core.store import MetadataStoreError
from dbafs.folder import Folder
from dbafs.utils.formatting import (
    console,
    create_info_table,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Create, inspect and modify folders.",
    invoke_without_command=True,
    no_args_is_help=True,
)

PathArg = Annotated[str, typer.Argument(help="Root-relative folder path.")]


def _open(ctx: typer.Context, path: str) -> Folder:
    """Open a folder, turning folder errors into exit code 1."""
    try:
        return get_repository(ctx).folder(path)
    except (FolderError, MetadataStoreError, OSError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


@app.command()
def info(ctx: typer.Context, path: PathArg) -> None:
    """Show the properties of a folder."""
    folder = _open(ctx, path)

    try:
        size = folder.size
        fingerprint = folder.hash
        empty = folder.is_empty()
    except OSError as e:
        print_error(f"Cannot read folder: {e}")
        raise typer.Exit(code=1) from e

    model = folder.get_model()
    synchronized = folder.should_be_synchronized()

    table = create_info_table(f"Folder {folder.path or '/'}")
    table.add_row("Path", folder.path or "/")
    table.add_row("Name", folder.name or "-")
    table.add_row("Size", format_size(size))
    table.add_row("Hash", fingerprint)
    table.add_row("Empty", "yes" if empty else "no")
    table.add_row("Synchronized", "yes" if synchronized else "no")
    table.add_row("Public", "yes" if folder.is_unprotected() else "no")
    table.add_row("Record", model.uuid if model is not None else "-")
    console.print(table)

    if synchronized and model is None:
        print_warning(f"No metadata record for {folder.path}")


@app.command()
def mkdir(ctx: typer.Context, path: PathArg) -> None:
    """Create a folder and all missing parents."""
    folder = _open(ctx, path)
    print_success(f"Folder ready: {folder.path or '/'}")


@app.command()
def rename(
    ctx: typer.Context,
    source: PathArg,
    target: Annotated[str, typer.Argument(help="Root-relative target path.")],
) -> None:
    """Rename (move) a folder."""
    folder = _open(ctx, source)

    try:
        renamed = folder.rename_to(target)
    except (FolderError, MetadataStoreError, OSError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if not renamed:
        print_error(f"Cannot rename {source} to {target}")
        raise typer.Exit(code=1)

    print_success(f"Renamed {source} to {folder.path}")


@app.command()
def copy(
    ctx: typer.Context,
    source: PathArg,
    target: Annotated[str, typer.Argument(help="Root-relative target path.")],
) -> None:
    """Copy a folder recursively."""
    folder = _open(ctx, source)

    try:
        folder.copy_to(target)
    except (FolderError, MetadataStoreError, OSError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Copied {source} to {target}")


@app.command()
def delete(
    ctx: typer.Context,
    path: PathArg,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Delete a folder and its contents."""
    if not yes:
        confirmed = typer.confirm(f"Delete folder {path} and all its contents?")
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    folder = _open(ctx, path)

    try:
        folder.delete()
    except (MetadataStoreError, OSError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Deleted {path}")


@app.command()
def purge(
    ctx: typer.Context,
    path: PathArg,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Remove the contents of a folder, keeping the folder."""
    if not yes:
        confirmed = typer.confirm(f"Remove all contents of {path}?")
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    folder = _open(ctx, path)

    try:
        folder.purge()
    except (MetadataStoreError, OSError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Purged {path}")


@app.command()
def protect(ctx: typer.Context, path: PathArg) -> None:
    """Protect a folder by removing its .public marker."""
    _open(ctx, path).protect()
    print_success(f"Protected {path}")


@app.command()
def unprotect(ctx: typer.Context, path: PathArg) -> None:
    """Make a folder public by adding a .public marker."""
    _open(ctx, path).unprotect()
    print_success(f"Unprotected {path}")
