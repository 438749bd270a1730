from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

UNTITLED = "(untitled)"


@dataclass
class Note:
    id: str
    name: str
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "text": self.text}


@dataclass(frozen=True)
class WorkspaceMapping:
    id: str
    directory: Path


class StorageFormat(Enum):
    LEGACY_KEYED_JSON = "legacy-keyed-json"
    LEGACY_OBJECT_SIDECAR = "legacy-object-sidecar"
    CURRENT_ARRAY_SIDECAR = "current-array-sidecar"


@dataclass
class ScanResult:
    notes: list[Note] = field(default_factory=list)
    source: StorageFormat | None = None
    sidecar: Path | None = None
    migrated: bool = False
    persisted: bool = True
