from __future__ import annotations

import logging
from pathlib import Path

from .types import WorkspaceMapping

logger = logging.getLogger(__name__)

SIDECAR_NAME = "notepads.json"
WORKSPACE_MARKER = "workspace.json"


def path_exists(path: Path) -> bool:
    try:
        path.stat()
    except (OSError, ValueError):
        return False
    return True


def storage_dir_for_workspace(workspace_dir: str | Path, namespace: str) -> Path:
    return Path(workspace_dir).expanduser() / namespace


def workspace_dir_from_storage(storage_dir: str | Path | None) -> Path | None:
    """Return the ``{workspace-id}`` directory that owns a storage handle.

    Host storage handles look like ``.../{workspace-id}/{namespace}/``; the
    workspace directory is the handle's parent. No validation happens here.
    """
    if storage_dir is None or not str(storage_dir).strip():
        return None
    path = Path(storage_dir).expanduser()
    # Path("a/b/") already drops the trailing separator.
    return path.parent


def sidecar_path(storage_dir: str | Path | None) -> Path | None:
    workspace_dir = workspace_dir_from_storage(storage_dir)
    if workspace_dir is None:
        return None
    return workspace_dir / SIDECAR_NAME


def locate_workspace(storage_dir: str | Path | None) -> WorkspaceMapping | None:
    """Resolve and validate the workspace mapping for a storage handle.

    Stricter than :func:`sidecar_path`: the parent directory must also hold a
    ``workspace.json`` marker, otherwise there is no mapping.
    """
    workspace_dir = workspace_dir_from_storage(storage_dir)
    if workspace_dir is None:
        logger.debug("storage dir not available")
        return None
    marker = workspace_dir / WORKSPACE_MARKER
    if not path_exists(marker):
        logger.info("workspace marker not found at %s", marker)
        return None
    mapping = WorkspaceMapping(id=workspace_dir.name, directory=workspace_dir)
    logger.debug("found workspace id=%s", mapping.id)
    return mapping
