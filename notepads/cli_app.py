from __future__ import annotations

import typer

from . import __version__
from .commands.common import store_from_options
from .commands.config_cmds import config_cmd
from .commands.export_cmds import export_cmd
from .commands.notes_cmds import (
    add_cmd,
    delete_cmd,
    edit_cmd,
    list_cmd,
    migrate_cmd,
    move_cmd,
    rename_cmd,
    show_cmd,
)

app = typer.Typer(help="notepads: workspace notepads kept in notepads.json")

STORAGE_DIR_HELP = "Workspace storage dir ({workspace-id}/{namespace})"
WORKSPACE_DIR_HELP = "Workspace id dir holding workspace.json and state.vscdb"
VERBOSE_HELP = "Show informational messages and debug logs"


@app.command("list")
def list_notes(
    as_json: bool = typer.Option(False, "--json", help="Print notepads as JSON"),
    storage_dir: str = typer.Option(None, help=STORAGE_DIR_HELP),
    workspace_dir: str = typer.Option(None, help=WORKSPACE_DIR_HELP),
    verbose: bool | None = typer.Option(None, "--verbose/--quiet", help=VERBOSE_HELP),
) -> None:
    """List notepads in their saved order."""
    list_cmd(
        store_from_options=store_from_options,
        storage_dir=storage_dir,
        workspace_dir=workspace_dir,
        verbose=verbose,
        as_json=as_json,
    )


@app.command()
def show(
    note_id: str,
    storage_dir: str = typer.Option(None, help=STORAGE_DIR_HELP),
    workspace_dir: str = typer.Option(None, help=WORKSPACE_DIR_HELP),
    verbose: bool | None = typer.Option(None, "--verbose/--quiet", help=VERBOSE_HELP),
) -> None:
    """Print a notepad's text."""
    show_cmd(
        store_from_options=store_from_options,
        storage_dir=storage_dir,
        workspace_dir=workspace_dir,
        verbose=verbose,
        note_id=note_id,
    )


@app.command()
def add(
    name: str,
    text: str = typer.Option("", help="Initial text"),
    storage_dir: str = typer.Option(None, help=STORAGE_DIR_HELP),
    workspace_dir: str = typer.Option(None, help=WORKSPACE_DIR_HELP),
    verbose: bool | None = typer.Option(None, "--verbose/--quiet", help=VERBOSE_HELP),
) -> None:
    """Append a new notepad."""
    add_cmd(
        store_from_options=store_from_options,
        storage_dir=storage_dir,
        workspace_dir=workspace_dir,
        verbose=verbose,
        name=name,
        text=text,
    )


@app.command()
def rename(
    note_id: str,
    name: str,
    storage_dir: str = typer.Option(None, help=STORAGE_DIR_HELP),
    workspace_dir: str = typer.Option(None, help=WORKSPACE_DIR_HELP),
    verbose: bool | None = typer.Option(None, "--verbose/--quiet", help=VERBOSE_HELP),
) -> None:
    """Rename a notepad."""
    rename_cmd(
        store_from_options=store_from_options,
        storage_dir=storage_dir,
        workspace_dir=workspace_dir,
        verbose=verbose,
        note_id=note_id,
        name=name,
    )


@app.command()
def edit(
    note_id: str,
    text: str | None = typer.Option(None, help="New text (opens $EDITOR when omitted)"),
    storage_dir: str = typer.Option(None, help=STORAGE_DIR_HELP),
    workspace_dir: str = typer.Option(None, help=WORKSPACE_DIR_HELP),
    verbose: bool | None = typer.Option(None, "--verbose/--quiet", help=VERBOSE_HELP),
) -> None:
    """Replace a notepad's text."""
    edit_cmd(
        store_from_options=store_from_options,
        storage_dir=storage_dir,
        workspace_dir=workspace_dir,
        verbose=verbose,
        note_id=note_id,
        text=text,
    )


@app.command()
def delete(
    note_id: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    storage_dir: str = typer.Option(None, help=STORAGE_DIR_HELP),
    workspace_dir: str = typer.Option(None, help=WORKSPACE_DIR_HELP),
    verbose: bool | None = typer.Option(None, "--verbose/--quiet", help=VERBOSE_HELP),
) -> None:
    """Delete a notepad."""
    delete_cmd(
        store_from_options=store_from_options,
        storage_dir=storage_dir,
        workspace_dir=workspace_dir,
        verbose=verbose,
        note_id=note_id,
        yes=yes,
    )


@app.command()
def move(
    note_id: str,
    before: str | None = typer.Option(None, help="Place before this notepad id (default: end)"),
    storage_dir: str = typer.Option(None, help=STORAGE_DIR_HELP),
    workspace_dir: str = typer.Option(None, help=WORKSPACE_DIR_HELP),
    verbose: bool | None = typer.Option(None, "--verbose/--quiet", help=VERBOSE_HELP),
) -> None:
    """Move a notepad before another one, or to the end."""
    move_cmd(
        store_from_options=store_from_options,
        storage_dir=storage_dir,
        workspace_dir=workspace_dir,
        verbose=verbose,
        note_id=note_id,
        before=before,
    )


@app.command()
def migrate(
    storage_dir: str = typer.Option(None, help=STORAGE_DIR_HELP),
    workspace_dir: str = typer.Option(None, help=WORKSPACE_DIR_HELP),
    verbose: bool | None = typer.Option(None, "--verbose/--quiet", help=VERBOSE_HELP),
) -> None:
    """Scan the workspace and migrate legacy notepads into notepads.json."""
    migrate_cmd(
        store_from_options=store_from_options,
        storage_dir=storage_dir,
        workspace_dir=workspace_dir,
        verbose=verbose,
    )


@app.command()
def export(
    output_dir: str,
    storage_dir: str = typer.Option(None, help=STORAGE_DIR_HELP),
    workspace_dir: str = typer.Option(None, help=WORKSPACE_DIR_HELP),
    verbose: bool | None = typer.Option(None, "--verbose/--quiet", help=VERBOSE_HELP),
) -> None:
    """Write every notepad to a markdown file in OUTPUT_DIR."""
    export_cmd(
        store_from_options=store_from_options,
        storage_dir=storage_dir,
        workspace_dir=workspace_dir,
        verbose=verbose,
        output_dir=output_dir,
    )


@app.command()
def config(
    verbose: bool | None = typer.Option(None, "--verbose/--quiet", help="Persist verbosity"),
    storage_dir: str = typer.Option(None, help="Persist a default storage dir"),
) -> None:
    """Show or update persistent settings."""
    config_cmd(verbose=verbose, storage_dir=storage_dir)


@app.command()
def version() -> None:
    """Print the installed version."""
    typer.echo(__version__)
