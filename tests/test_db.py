from __future__ import annotations

import json
import sqlite3
from collections.abc import Callable
from pathlib import Path

import pytest

from notepads import db


def test_find_state_db_prefers_primary(tmp_path: Path) -> None:
    assert db.find_state_db(tmp_path) is None
    (tmp_path / "state.vscdb.backup").write_bytes(b"")
    assert db.find_state_db(tmp_path) == tmp_path / "state.vscdb.backup"
    (tmp_path / "state.vscdb").write_bytes(b"")
    assert db.find_state_db(tmp_path) == tmp_path / "state.vscdb"


def test_open_state_db_reads_backup(tmp_path: Path, make_state_db: Callable[..., Path]) -> None:
    make_state_db(tmp_path, "from-backup", file_name="state.vscdb.backup")
    with db.open_state_db(tmp_path) as conn:
        assert conn is not None
        assert db.query_text(conn, "notepadData") == "from-backup"


def test_open_state_db_without_file_yields_none(tmp_path: Path) -> None:
    with db.open_state_db(tmp_path) as conn:
        assert conn is None


def test_open_state_db_rejects_garbage(tmp_path: Path) -> None:
    (tmp_path / "state.vscdb").write_bytes(b"definitely not sqlite" * 64)
    with db.open_state_db(tmp_path) as conn:
        assert conn is None


def test_open_state_db_closes_connection(tmp_path: Path, make_state_db: Callable[..., Path]) -> None:
    make_state_db(tmp_path, "x")
    with db.open_state_db(tmp_path) as conn:
        assert conn is not None
        held = conn
    with pytest.raises(sqlite3.ProgrammingError):
        held.execute("SELECT 1")


def test_open_state_db_closes_on_error(tmp_path: Path, make_state_db: Callable[..., Path]) -> None:
    make_state_db(tmp_path, "x")
    held = None
    with pytest.raises(RuntimeError):
        with db.open_state_db(tmp_path) as conn:
            held = conn
            raise RuntimeError("boom")
    assert held is not None
    with pytest.raises(sqlite3.ProgrammingError):
        held.execute("SELECT 1")


def test_open_state_db_reads_wal_mode_file(tmp_path: Path) -> None:
    conn = sqlite3.connect(tmp_path / "state.vscdb")
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("CREATE TABLE ItemTable (key TEXT UNIQUE ON CONFLICT REPLACE, value BLOB)")
    conn.execute("INSERT INTO ItemTable(key, value) VALUES ('notepadData', 'from-wal')")
    conn.commit()
    conn.execute("PRAGMA wal_checkpoint(TRUNCATE)")
    conn.close()
    assert (tmp_path / "state.vscdb").read_bytes()[18:20] == b"\x02\x02"

    with db.open_state_db(tmp_path) as state:
        assert state is not None
        assert db.query_text(state, "notepadData") == "from-wal"
    assert (tmp_path / "state.vscdb").read_bytes()[18:20] == b"\x02\x02"


def test_wal_flag_only_cleared_on_sqlite_images() -> None:
    wal_header = db.SQLITE_HEADER + b"\x10\x00\x02\x02" + b"\x00" * 8
    assert db._without_wal_flag(wal_header)[18:20] == b"\x01\x01"
    other = b"not sqlite at all\x00\x02\x02" + b"\x00" * 8
    assert db._without_wal_flag(other) == other


def test_query_text_falls_back_to_second_table(
    tmp_path: Path, make_state_db: Callable[..., Path]
) -> None:
    make_state_db(tmp_path, "from-kv", table="cursorDiskKV")
    with db.open_state_db(tmp_path) as conn:
        assert conn is not None
        assert db.candidate_tables(conn) == ["cursorDiskKV"]
        assert db.query_text(conn, "notepadData") == "from-kv"
        assert db.query_text(conn, "missing") is None


def test_query_text_uses_listed_table_order(
    tmp_path: Path, make_state_db: Callable[..., Path]
) -> None:
    make_state_db(tmp_path, "from-kv", table="cursorDiskKV")
    make_state_db(tmp_path, "from-item", table="ItemTable")
    with db.open_state_db(tmp_path) as conn:
        assert conn is not None
        assert db.candidate_tables(conn) == ["ItemTable", "cursorDiskKV"]
        assert db.query_text(conn, "notepadData") == "from-item"


def test_query_text_ignores_tables_outside_allow_list(
    tmp_path: Path, make_state_db: Callable[..., Path]
) -> None:
    make_state_db(tmp_path, "hidden", table="OtherTable")
    with db.open_state_db(tmp_path) as conn:
        assert conn is not None
        assert "OtherTable" in db.list_tables(conn)
        assert db.candidate_tables(conn) == []
        statements: list[str] = []
        conn.set_trace_callback(statements.append)
        assert db.query_text(conn, "notepadData") is None
    assert not any("OtherTable" in stmt for stmt in statements)


def test_query_text_skips_table_with_unexpected_layout(
    tmp_path: Path, make_state_db: Callable[..., Path]
) -> None:
    conn = sqlite3.connect(tmp_path / "state.vscdb")
    conn.execute("CREATE TABLE ItemTable (k TEXT, v TEXT)")
    conn.commit()
    conn.close()
    make_state_db(tmp_path, "ok", table="cursorDiskKV")
    with db.open_state_db(tmp_path) as state:
        assert state is not None
        assert db.query_text(state, "notepadData") == "ok"


def test_byte_buffer_row_decodes_like_string_row(
    tmp_path: Path, make_state_db: Callable[..., Path]
) -> None:
    payload = json.dumps({"notepads": {"a": {"name": "Ünïcode"}}}, ensure_ascii=False)
    text_dir = tmp_path / "text"
    blob_dir = tmp_path / "blob"
    text_dir.mkdir()
    blob_dir.mkdir()
    make_state_db(text_dir, payload)
    make_state_db(blob_dir, payload.encode("utf-8"))
    with db.open_state_db(text_dir) as text_conn, db.open_state_db(blob_dir) as blob_conn:
        assert text_conn is not None and blob_conn is not None
        assert db.query_text(blob_conn, "notepadData") == db.query_text(text_conn, "notepadData")


def test_decode_blob_strategies_in_order() -> None:
    assert [name for name, _ in db.BLOB_DECODERS] == [
        "string",
        "utf8-bytes",
        "byte-array-wrapper",
    ]
    assert db.decode_blob("plain") == "plain"
    assert db.decode_blob(b"bytes") == "bytes"
    assert db.decode_blob(memoryview(b"view")) == "view"
    assert db.decode_blob({"type": "Buffer", "data": list(b"wrapped")}) == "wrapped"
    wrapper_bytes = json.dumps({"type": "Buffer", "data": list(b"hi")}).encode()
    # utf-8 decoding of the raw bytes wins before the wrapper is unpacked
    assert db.decode_blob(wrapper_bytes) == wrapper_bytes.decode()


def test_decode_blob_rejects_undecodable_values() -> None:
    assert db.decode_blob(None) is None
    assert db.decode_blob(42) is None
    assert db.decode_blob(b"\xff\xfe\xfa") is None
    assert db.decode_blob({"data": [999]}) is None
    assert db.decode_blob({"data": "nope"}) is None


def test_decode_blob_unpacks_wrapper_after_failed_utf8() -> None:
    def broken_bytes(value: object) -> str | None:
        raise ValueError("bad")

    decoders = (("broken", broken_bytes), ("byte-array-wrapper", db.BLOB_DECODERS[2][1]))
    assert db.decode_blob({"data": list(b"ok")}, decoders) == "ok"
