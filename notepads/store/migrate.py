from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

from .. import db
from ..decode import decode_legacy_keyed, decode_sidecar, encode_notes
from ..fs_paths import SIDECAR_NAME, locate_workspace, path_exists, sidecar_path
from ..notify import Notifier
from ..types import Note, ScanResult, StorageFormat

logger = logging.getLogger(__name__)


def read_sidecar_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("failed to read %s", path, exc_info=exc)
        return None


def write_sidecar(path: Path, notes: Sequence[Note]) -> bool:
    """Overwrite the sidecar with the full note list in array form.

    The payload is encoded up front and swapped in with ``os.replace``, so a
    failed write leaves the previous file untouched.
    """
    try:
        payload = encode_notes(notes).encode("utf-8")
    except UnicodeEncodeError as exc:
        logger.warning("notepads for %s cannot be encoded as utf-8", path, exc_info=exc)
        return False
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "wb", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as handle:
            tmp_name = handle.name
            handle.write(payload)
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as exc:
        logger.warning("failed to write %s", path, exc_info=exc)
        return False
    finally:
        if tmp_name is not None:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
    return True


def _scan_sidecar(path: Path) -> ScanResult:
    raw = read_sidecar_text(path)
    if raw is None:
        return ScanResult(sidecar=path)
    parsed = decode_sidecar(raw)
    result = ScanResult(notes=parsed.notes, source=parsed.format, sidecar=path)
    if parsed.format is None:
        logger.warning("%s has an unrecognized shape", path)
        return result
    if parsed.needs_rewrite:
        result.persisted = write_sidecar(path, parsed.notes)
        result.migrated = parsed.needs_migration and result.persisted
        if result.migrated:
            logger.info("rewrote %s from object form to array form", path)
    return result


def _scan_legacy_db(
    storage_dir: str | Path | None, path: Path | None, notifier: Notifier
) -> ScanResult:
    mapping = locate_workspace(storage_dir)
    if mapping is None:
        logger.info("workspace id not found; no notepads to display")
        return ScanResult(sidecar=path)
    with db.open_state_db(mapping.directory) as conn:
        if conn is None:
            return ScanResult(sidecar=path)
        raw = db.query_text(conn, db.NOTEPAD_DATA_KEY)
    if raw is None:
        logger.info("workspace %s has no %s key", mapping.id, db.NOTEPAD_DATA_KEY)
        return ScanResult(sidecar=path)
    notes = decode_legacy_keyed(raw)
    logger.debug("legacy notepads=%d", len(notes))
    result = ScanResult(notes=notes, source=StorageFormat.LEGACY_KEYED_JSON, sidecar=path)
    if not notes:
        return result
    target = path or mapping.directory / SIDECAR_NAME
    result.sidecar = target
    result.persisted = write_sidecar(target, notes)
    if result.persisted:
        result.migrated = True
        notifier.success(f"Migrated {len(notes)} notepad(s) to {target.name}")
    else:
        notifier.warn(f"Failed to save migrated notepads to {target}")
    return result


def scan_workspace(
    storage_dir: str | Path | None, notifier: Notifier | None = None
) -> ScanResult:
    """Load the notes for the workspace that owns ``storage_dir``.

    An existing ``notepads.json`` is always authoritative. Without one, notes
    are pulled from the legacy state database and written to a new
    ``notepads.json`` once. The returned notes stand even if that write fails.
    """
    notifier = notifier or Notifier()
    path = sidecar_path(storage_dir)
    if path is not None and path_exists(path):
        return _scan_sidecar(path)
    return _scan_legacy_db(storage_dir, path, notifier)
