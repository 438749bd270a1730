from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from .types import UNTITLED, Note, StorageFormat
from .utils import new_note_id

logger = logging.getLogger(__name__)


@dataclass
class ParsedSidecar:
    """Outcome of decoding a sidecar file.

    ``format`` is ``None`` when the document matched no known shape.
    """

    format: StorageFormat | None
    notes: list[Note] = field(default_factory=list)
    # Items whose id had to be generated; their ids only stick once written back.
    generated_ids: int = 0

    @property
    def needs_migration(self) -> bool:
        return self.format is StorageFormat.LEGACY_OBJECT_SIDECAR

    @property
    def needs_rewrite(self) -> bool:
        return self.needs_migration or self.generated_ids > 0


def _str_or(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default


def note_from_mapping(entry: dict[str, Any], fallback_id: Callable[[], str]) -> Note:
    note_id = entry.get("id")
    return Note(
        id=note_id if isinstance(note_id, str) else fallback_id(),
        name=_str_or(entry.get("name"), UNTITLED),
        text=_str_or(entry.get("text"), ""),
    )


def _is_blank_entry(entry: Any) -> bool:
    # Only null, false, 0 and "" are blank; empty lists still count as entries.
    if entry is None or entry is False:
        return True
    return isinstance(entry, (int, float, str)) and not isinstance(entry, bool) and not entry


def _notes_from_keyed(store: dict[str, Any]) -> list[Note]:
    notes: list[Note] = []
    for key, entry in store.items():
        if not isinstance(entry, dict):
            if _is_blank_entry(entry):
                continue
            entry = {}
        notes.append(note_from_mapping(entry, lambda key=key: str(key)))
    return notes


def _notes_from_array(items: list[Any]) -> tuple[list[Note], int]:
    notes: list[Note] = []
    generated = 0
    for item in items:
        if not isinstance(item, dict):
            logger.debug("skipping non-object notepad item %r", item)
            continue
        if not isinstance(item.get("id"), str):
            generated += 1
        notes.append(note_from_mapping(item, new_note_id))
    return notes, generated


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (ValueError, TypeError, RecursionError) as exc:
        logger.warning("notepad json is malformed", exc_info=exc)
        return None


def _keyed_store(parsed: Any) -> dict[str, Any] | None:
    if not isinstance(parsed, dict):
        return None
    store = parsed.get("notepads")
    return store if isinstance(store, dict) else None


def decode_legacy_keyed(json_text: str) -> list[Note]:
    store = _keyed_store(_parse_json(json_text))
    if store is None:
        return []
    return _notes_from_keyed(store)


def _as_array(parsed: Any) -> ParsedSidecar | None:
    if not isinstance(parsed, list):
        return None
    notes, generated = _notes_from_array(parsed)
    return ParsedSidecar(StorageFormat.CURRENT_ARRAY_SIDECAR, notes, generated)


def _as_legacy_object(parsed: Any) -> ParsedSidecar | None:
    store = _keyed_store(parsed)
    if store is None:
        return None
    return ParsedSidecar(StorageFormat.LEGACY_OBJECT_SIDECAR, _notes_from_keyed(store))


# Tried in priority order.
SIDECAR_VARIANTS: tuple[Callable[[Any], ParsedSidecar | None], ...] = (
    _as_array,
    _as_legacy_object,
)


def decode_sidecar(json_text: str) -> ParsedSidecar:
    parsed = _parse_json(json_text)
    for variant in SIDECAR_VARIANTS:
        result = variant(parsed)
        if result is not None:
            return result
    return ParsedSidecar(None)


def encode_notes(notes: Iterable[Note]) -> str:
    payload = [note.to_dict() for note in notes]
    return json.dumps(payload, ensure_ascii=False, indent=2) + "\n"
