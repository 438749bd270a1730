from __future__ import annotations

import json
import sqlite3
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

NAMESPACE = "cursor-notepads"


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("NOTEPADS_CONFIG", str(tmp_path / "config" / "config.json"))
    for name in ("NOTEPADS_VERBOSE", "NOTEPADS_STORAGE_DIR", "NOTEPADS_EXTENSION_NAMESPACE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def workspace_dir(tmp_path: Path) -> Path:
    path = tmp_path / "workspaceStorage" / "abc123"
    path.mkdir(parents=True)
    (path / "workspace.json").write_text('{"folder": "file:///tmp/project"}')
    return path


@pytest.fixture
def storage_dir(workspace_dir: Path) -> Path:
    path = workspace_dir / NAMESPACE
    path.mkdir()
    return path


@pytest.fixture
def make_state_db() -> Callable[..., Path]:
    def _make(
        directory: Path,
        value: Any,
        *,
        table: str = "ItemTable",
        key: str = "notepadData",
        file_name: str = "state.vscdb",
    ) -> Path:
        path = directory / file_name
        conn = sqlite3.connect(path)
        try:
            conn.execute(
                f"CREATE TABLE IF NOT EXISTS {table} "
                "(key TEXT UNIQUE ON CONFLICT REPLACE, value BLOB)"
            )
            if isinstance(value, dict):
                value = json.dumps(value)
            conn.execute(f"INSERT INTO {table}(key, value) VALUES (?, ?)", (key, value))
            conn.commit()
        finally:
            conn.close()
        return path

    return _make


@pytest.fixture
def legacy_payload() -> dict[str, Any]:
    return {
        "notepads": {
            "np-1": {"id": "np-1", "name": "Plan", "text": "step one\nstep two"},
            "np-2": {"name": "Scratch", "text": "todo"},
            "np-3": None,
        }
    }
