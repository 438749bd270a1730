from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

from ..config import NotepadsConfig, load_config
from ..fs_paths import sidecar_path
from ..notify import NotificationSink, Notifier
from ..types import UNTITLED, Note, ScanResult
from ..utils import new_note_id
from .migrate import scan_workspace, write_sidecar

logger = logging.getLogger(__name__)

ChangeListener = Callable[[list[Note]], None]


class NoteStore:
    """Ordered notes for one workspace, backed by ``notepads.json``.

    Every mutator writes the whole list and then rescans from disk, so the
    in-memory list always reflects what was actually persisted. A reentrant
    lock serializes read-modify-write sequences within the process.
    """

    def __init__(
        self,
        storage_dir: str | Path | None = None,
        *,
        config: NotepadsConfig | None = None,
        sink: NotificationSink | None = None,
    ):
        cfg = config or load_config()
        self.storage_dir = storage_dir if storage_dir is not None else cfg.storage_dir
        self.notifier = Notifier(cfg.verbose, sink)
        self.notes: list[Note] = []
        self.last_scan: ScanResult | None = None
        self._listeners: list[ChangeListener] = []
        self._lock = threading.RLock()

    @property
    def sidecar(self) -> Path | None:
        if self.last_scan is not None and self.last_scan.sidecar is not None:
            return self.last_scan.sidecar
        return sidecar_path(self.storage_dir)

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit_change(self) -> None:
        snapshot = list(self.notes)
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("notepad change listener failed")

    def scan(self) -> list[Note]:
        with self._lock:
            try:
                result = scan_workspace(self.storage_dir, self.notifier)
                self.last_scan = result
                self.notes = result.notes
                self.notifier.info(f"Loaded {len(self.notes)} notepad(s)")
            finally:
                self._emit_change()
            return list(self.notes)

    def _ensure_loaded(self) -> None:
        if self.last_scan is None:
            self.scan()

    def list_notes(self) -> list[Note]:
        with self._lock:
            self._ensure_loaded()
            return list(self.notes)

    def _index(self, notes: list[Note], note_id: str) -> int | None:
        for idx, note in enumerate(notes):
            if note.id == note_id:
                return idx
        return None

    def get_by_id(self, note_id: str) -> Note | None:
        with self._lock:
            self._ensure_loaded()
            idx = self._index(self.notes, note_id)
            return None if idx is None else self.notes[idx]

    def _commit(self, notes: list[Note]) -> bool:
        path = self.sidecar
        if path is None:
            logger.warning("no workspace storage; cannot save notepads")
            return False
        if not write_sidecar(path, notes):
            return False
        self.scan()
        return True

    def _fresh_id(self) -> str:
        existing = {note.id for note in self.notes}
        note_id = new_note_id()
        while note_id in existing:
            note_id = new_note_id()
        return note_id

    def add(self, name: str, text: str = "") -> bool:
        with self._lock:
            self._ensure_loaded()
            note = Note(id=self._fresh_id(), name=name.strip() or UNTITLED, text=text)
            return self._commit([*self.notes, note])

    def update(self, note_id: str, name: str | None = None, text: str | None = None) -> bool:
        """Change a note's name and/or text in place; ``None`` keeps the field."""
        with self._lock:
            self._ensure_loaded()
            idx = self._index(self.notes, note_id)
            if idx is None:
                return False
            current = self.notes[idx]
            notes = list(self.notes)
            notes[idx] = Note(
                id=current.id,
                name=current.name if name is None else (name.strip() or UNTITLED),
                text=current.text if text is None else text,
            )
            return self._commit(notes)

    def delete(self, note_id: str) -> bool:
        with self._lock:
            self._ensure_loaded()
            idx = self._index(self.notes, note_id)
            if idx is None:
                return False
            notes = list(self.notes)
            del notes[idx]
            return self._commit(notes)

    def reorder(self, note_id: str, before_id: str | None = None) -> bool:
        """Move a note right before ``before_id``, or to the end.

        Dropping a note onto itself changes nothing. An unknown ``before_id``
        moves the note to the end.
        """
        with self._lock:
            self._ensure_loaded()
            idx = self._index(self.notes, note_id)
            if idx is None:
                return False
            if before_id == note_id:
                return True
            notes = list(self.notes)
            moved = notes.pop(idx)
            target = None if before_id is None else self._index(notes, before_id)
            if target is None:
                notes.append(moved)
            else:
                notes.insert(target, moved)
            return self._commit(notes)

    def workspace_folders_changed(self, storage_dir: str | Path | None = None) -> list[Note]:
        with self._lock:
            if storage_dir is not None:
                self.storage_dir = storage_dir
            return self.scan()

    def configuration_changed(self, config: NotepadsConfig) -> None:
        self.notifier.verbose = config.verbose
        logger.debug("verbose -> %s", config.verbose)
