from __future__ import annotations

from ..types import Note, ScanResult, StorageFormat, WorkspaceMapping
from ._store import NoteStore
from .migrate import scan_workspace, write_sidecar

__all__ = [
    "Note",
    "NoteStore",
    "ScanResult",
    "StorageFormat",
    "WorkspaceMapping",
    "scan_workspace",
    "write_sidecar",
]
