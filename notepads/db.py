from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

from .fs_paths import path_exists

logger = logging.getLogger(__name__)

STATE_DB_NAME = "state.vscdb"
STATE_DB_BACKUP_NAME = "state.vscdb.backup"
NOTEPAD_DATA_KEY = "notepadData"

# Two host schemas keep the same key/value store under different table names.
KV_TABLES = ("ItemTable", "cursorDiskKV")


def find_state_db(directory: Path) -> Path | None:
    primary = directory / STATE_DB_NAME
    if path_exists(primary):
        return primary
    backup = directory / STATE_DB_BACKUP_NAME
    if path_exists(backup):
        return backup
    return None


SQLITE_HEADER = b"SQLite format 3\x00"
# File format write/read versions; 2 marks a WAL database.
_WAL_VERSIONS = b"\x02\x02"
_ROLLBACK_VERSIONS = b"\x01\x01"


def _without_wal_flag(data: bytes) -> bytes:
    # A deserialized image has no -wal file, and sqlite refuses WAL-flagged images.
    if data[:16] != SQLITE_HEADER or data[18:20] != _WAL_VERSIONS:
        return data
    buf = bytearray(data)
    buf[18:20] = _ROLLBACK_VERSIONS
    return bytes(buf)


def _connect_bytes(data: bytes) -> sqlite3.Connection:
    data = _without_wal_flag(data)
    conn = sqlite3.connect(":memory:")
    try:
        conn.deserialize(data)
        # deserialize() accepts any buffer; the header is only checked on first read.
        conn.execute("SELECT count(*) FROM sqlite_master").fetchone()
    except sqlite3.Error:
        conn.close()
        raise
    return conn


def open_database(directory: Path) -> sqlite3.Connection | None:
    """Load the workspace state database into memory.

    The primary file wins over the ``.backup`` copy. Missing files and bytes
    that are not a SQLite database both yield ``None``.
    """
    db_file = find_state_db(directory)
    if db_file is None:
        logger.info("no state db in %s", directory)
        return None
    try:
        data = db_file.read_bytes()
    except OSError as exc:
        logger.warning("failed to read state db %s", db_file, exc_info=exc)
        return None
    logger.debug("state db=%s size=%d", db_file, len(data))
    try:
        return _connect_bytes(data)
    except sqlite3.Error as exc:
        logger.warning("failed to open state db %s", db_file, exc_info=exc)
        return None


@contextlib.contextmanager
def open_state_db(directory: Path) -> Iterator[sqlite3.Connection | None]:
    conn = open_database(directory)
    try:
        yield conn
    finally:
        if conn is not None:
            conn.close()


def _decode_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _decode_bytes(value: Any) -> str | None:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8")
    return None


def _decode_byte_array_wrapper(value: Any) -> str | None:
    """Decode ``{"type": "Buffer", "data": [..]}`` style wrappers.

    sqlite only hands back ``str`` or ``bytes``, and both of those are claimed
    by the earlier decoders, so from ``query_text`` this never runs. It covers
    already-parsed wrappers passed straight to ``decode_blob`` and custom
    decoder orders that put it first.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        value = bytes(value).decode("utf-8")
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return None
    if not isinstance(value, dict):
        return None
    data = value.get("data")
    if not isinstance(data, list):
        return None
    return bytes(data).decode("utf-8")


BlobDecoder = Callable[[Any], str | None]

# Applied in order; the first decoder that yields a string wins.
BLOB_DECODERS: tuple[tuple[str, BlobDecoder], ...] = (
    ("string", _decode_str),
    ("utf8-bytes", _decode_bytes),
    ("byte-array-wrapper", _decode_byte_array_wrapper),
)


def decode_blob(
    value: Any, decoders: tuple[tuple[str, BlobDecoder], ...] = BLOB_DECODERS
) -> str | None:
    if value is None:
        return None
    for name, decoder in decoders:
        try:
            decoded = decoder(value)
        except (TypeError, ValueError) as exc:
            logger.debug("blob decoder %s failed", name, exc_info=exc)
            continue
        if decoded is not None:
            return decoded
    return None


def list_tables(conn: sqlite3.Connection) -> set[str]:
    try:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
    except sqlite3.Error as exc:
        logger.warning("failed to list tables", exc_info=exc)
        return set()
    return {str(row[0]) for row in rows}


def candidate_tables(conn: sqlite3.Connection) -> list[str]:
    present = list_tables(conn)
    return [table for table in KV_TABLES if table in present]


def query_text(conn: sqlite3.Connection, key: str) -> str | None:
    for table in candidate_tables(conn):
        try:
            # Table name comes from KV_TABLES, never from input.
            row = conn.execute(
                f'SELECT value FROM "{table}" WHERE key = ? LIMIT 1', (key,)
            ).fetchone()
        except sqlite3.Error as exc:
            logger.warning("query on %s failed", table, exc_info=exc)
            continue
        if row is None:
            continue
        text = decode_blob(row[0])
        if text is not None:
            return text
    return None
