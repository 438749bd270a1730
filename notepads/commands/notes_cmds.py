from __future__ import annotations

import json

import typer
from rich import print
from rich.markup import escape

from ..store import Note, NoteStore
from ..utils import summarize_text
from .common import fail


def _require_note(store: NoteStore, note_id: str) -> Note:
    note = store.get_by_id(note_id)
    if note is None:
        raise fail(f"Notepad {note_id} not found")
    return note


def list_cmd(
    *,
    store_from_options,
    storage_dir: str | None,
    workspace_dir: str | None,
    verbose: bool | None,
    as_json: bool,
) -> None:
    """List notepads in their saved order."""

    store = store_from_options(storage_dir, workspace_dir, verbose)
    notes = store.scan()
    if as_json:
        typer.echo(json.dumps([note.to_dict() for note in notes], ensure_ascii=False, indent=2))
        return
    if not notes:
        print("[yellow]No notepads found[/yellow]")
        return
    for position, note in enumerate(notes, start=1):
        summary = summarize_text(note.text)
        line = f"{position}. [bold]{escape(note.name)}[/bold] [dim]({escape(note.id)})[/dim]"
        if summary:
            line += f" - {escape(summary)}"
        print(line)


def show_cmd(
    *,
    store_from_options,
    storage_dir: str | None,
    workspace_dir: str | None,
    verbose: bool | None,
    note_id: str,
) -> None:
    """Print a notepad's text."""

    store = store_from_options(storage_dir, workspace_dir, verbose)
    note = _require_note(store, note_id)
    print(f"[bold]{escape(note.name)}[/bold]\n")
    typer.echo(note.text)


def add_cmd(
    *,
    store_from_options,
    storage_dir: str | None,
    workspace_dir: str | None,
    verbose: bool | None,
    name: str,
    text: str,
) -> None:
    """Append a new notepad."""

    store = store_from_options(storage_dir, workspace_dir, verbose)
    if not store.add(name, text):
        raise fail("Failed to save notepad")
    note = store.notes[-1]
    print(f"[green]✓ Added {escape(note.name)} ({escape(note.id)})[/green]")


def rename_cmd(
    *,
    store_from_options,
    storage_dir: str | None,
    workspace_dir: str | None,
    verbose: bool | None,
    note_id: str,
    name: str,
) -> None:
    """Rename a notepad, keeping its text and position."""

    store = store_from_options(storage_dir, workspace_dir, verbose)
    _require_note(store, note_id)
    if not store.update(note_id, name=name):
        raise fail("Failed to rename notepad")
    print(f"[green]✓ Renamed {escape(note_id)} to {escape(name)}[/green]")


def edit_cmd(
    *,
    store_from_options,
    storage_dir: str | None,
    workspace_dir: str | None,
    verbose: bool | None,
    note_id: str,
    text: str | None,
) -> None:
    """Replace a notepad's text, opening $EDITOR when no text is given."""

    store = store_from_options(storage_dir, workspace_dir, verbose)
    note = _require_note(store, note_id)
    if text is None:
        edited = typer.edit(note.text, extension=".md")
        if edited is None:
            print("[yellow]No changes[/yellow]")
            return
        text = edited
    if not store.update(note_id, text=text):
        raise fail("Failed to save notepad")
    print(f"[green]✓ Saved {escape(note.name)}[/green]")


def delete_cmd(
    *,
    store_from_options,
    storage_dir: str | None,
    workspace_dir: str | None,
    verbose: bool | None,
    note_id: str,
    yes: bool,
) -> None:
    """Delete a notepad."""

    store = store_from_options(storage_dir, workspace_dir, verbose)
    note = _require_note(store, note_id)
    if not yes and not typer.confirm(f"Delete notepad '{note.name}'?"):
        raise typer.Exit(code=0)
    if not store.delete(note_id):
        raise fail("Failed to delete notepad")
    print(f"[green]✓ Deleted {escape(note.name)}[/green]")


def move_cmd(
    *,
    store_from_options,
    storage_dir: str | None,
    workspace_dir: str | None,
    verbose: bool | None,
    note_id: str,
    before: str | None,
) -> None:
    """Move a notepad before another one, or to the end."""

    store = store_from_options(storage_dir, workspace_dir, verbose)
    _require_note(store, note_id)
    if before is not None and before != note_id:
        _require_note(store, before)
    if not store.reorder(note_id, before):
        raise fail("Failed to move notepad")
    target = f"before {before}" if before else "to the end"
    print(f"[green]✓ Moved {escape(note_id)} {escape(target)}[/green]")


def migrate_cmd(
    *,
    store_from_options,
    storage_dir: str | None,
    workspace_dir: str | None,
    verbose: bool | None,
) -> None:
    """Scan the workspace, migrating legacy notepads into notepads.json."""

    store = store_from_options(storage_dir, workspace_dir, verbose)
    notes = store.scan()
    result = store.last_scan
    source = result.source.value if result and result.source else "none"
    print("[bold]Notepads[/bold]")
    print(f"- Sidecar: {store.sidecar or 'unavailable'}")
    print(f"- Source: {source}")
    print(f"- Notepads: {len(notes)}")
    if result and not result.persisted:
        raise fail("Failed to write notepads.json")
    if result and result.migrated:
        print("[green]✓ Migrated[/green]")
