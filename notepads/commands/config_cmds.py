from __future__ import annotations

from rich import print

from ..config import get_config_path, get_env_overrides, load_config
from .common import read_config_or_exit, write_config_or_exit


def config_cmd(*, verbose: bool | None, storage_dir: str | None) -> None:
    """Show or update persistent settings."""

    if verbose is None and storage_dir is None:
        cfg = load_config()
        print(f"[bold]Config[/bold] {get_config_path()}")
        print(f"- verbose: {cfg.verbose}")
        print(f"- storage_dir: {cfg.storage_dir or '(unset)'}")
        print(f"- extension_namespace: {cfg.extension_namespace}")
        overrides = get_env_overrides()
        if overrides:
            print(f"- env overrides: {', '.join(sorted(overrides))}")
        return
    data = read_config_or_exit()
    if verbose is not None:
        data["verbose"] = verbose
    if storage_dir is not None:
        data["storage_dir"] = storage_dir
    path = write_config_or_exit(data)
    print(f"[green]✓ Updated {path}[/green]")
