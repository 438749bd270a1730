from __future__ import annotations

import re
import secrets
import time

MAX_FILENAME_LENGTH = 80
MAX_SUMMARY_LENGTH = 60
SUMMARY_TRUNCATE_LENGTH = 57

_UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|]')


def timestamp_id() -> str:
    return str(time.time_ns() // 1_000_000)


def new_note_id() -> str:
    # Millisecond timestamp plus a random suffix; two adds in one ms stay distinct.
    return f"{timestamp_id()}-{secrets.token_hex(4)}"


def summarize_text(text: str | None) -> str:
    lines = (text or "").splitlines()
    first = lines[0].strip() if lines else ""
    if len(first) <= MAX_SUMMARY_LENGTH:
        return first
    return first[:SUMMARY_TRUNCATE_LENGTH] + "..."


def sanitize_file_name(name: str) -> str:
    return _UNSAFE_FILENAME_RE.sub("_", name)[:MAX_FILENAME_LENGTH] or "note"
