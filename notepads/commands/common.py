from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import typer
from rich import print
from rich.markup import escape

from ..config import NotepadsConfig, load_config, read_config_file, write_config_file
from ..fs_paths import storage_dir_for_workspace
from ..store import NoteStore

_SINK_STYLES = {"success": "green", "warning": "yellow", "info": "dim"}


def rich_sink(level: str, message: str) -> None:
    style = _SINK_STYLES.get(level, "white")
    print(f"[{style}]{escape(message)}[/{style}]")


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )


def resolve_storage_dir(
    cfg: NotepadsConfig, storage_dir: str | None, workspace_dir: str | None
) -> str | Path | None:
    if storage_dir:
        return storage_dir
    if workspace_dir:
        return storage_dir_for_workspace(workspace_dir, cfg.extension_namespace)
    return cfg.storage_dir


def store_from_options(
    storage_dir: str | None, workspace_dir: str | None, verbose: bool | None = None
) -> NoteStore:
    cfg = load_config()
    if verbose is not None:
        cfg.verbose = verbose
    configure_logging(cfg.verbose)
    return NoteStore(
        resolve_storage_dir(cfg, storage_dir, workspace_dir), config=cfg, sink=rich_sink
    )


def fail(message: str) -> typer.Exit:
    print(f"[red]{escape(message)}[/red]")
    return typer.Exit(code=1)


def read_config_or_exit() -> dict[str, Any]:
    try:
        return read_config_file()
    except ValueError as exc:
        print(f"[red]Invalid config file: {exc}[/red]")
        raise typer.Exit(code=1) from exc


def write_config_or_exit(data: dict[str, Any]) -> Path:
    try:
        return write_config_file(data)
    except OSError as exc:
        print(f"[red]Failed to write config: {exc}[/red]")
        raise typer.Exit(code=1) from exc
