from __future__ import annotations

from pathlib import Path

from rich import print
from rich.markup import escape

from ..store import Note
from ..utils import sanitize_file_name
from .common import fail


def export_file_names(notes: list[Note]) -> list[str]:
    seen: dict[str, int] = {}
    names: list[str] = []
    for note in notes:
        base = sanitize_file_name(note.name or note.id)
        count = seen.get(base.lower(), 0) + 1
        seen[base.lower()] = count
        names.append(f"{base}.md" if count == 1 else f"{base}-{count}.md")
    return names


def export_cmd(
    *,
    store_from_options,
    storage_dir: str | None,
    workspace_dir: str | None,
    verbose: bool | None,
    output_dir: str,
) -> None:
    """Write every notepad to a markdown file."""

    store = store_from_options(storage_dir, workspace_dir, verbose)
    notes = store.scan()
    if not notes:
        print("[yellow]No notepads to export[/yellow]")
        return
    target = Path(output_dir).expanduser()
    try:
        target.mkdir(parents=True, exist_ok=True)
        for note, file_name in zip(notes, export_file_names(notes), strict=True):
            (target / file_name).write_text(note.text, encoding="utf-8")
    except OSError as exc:
        raise fail(f"Failed to export notepads: {exc}") from exc
    print(f"[green]✓ Exported {len(notes)} notepad(s) to {escape(str(target))}[/green]")
