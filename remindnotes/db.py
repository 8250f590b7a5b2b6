from __future__ import annotations

import sqlite3
from pathlib import Path

from remindnotes.constants import SCHEMA_VERSION


def connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    return conn


def get_schema_version(conn: sqlite3.Connection) -> int | None:
    row = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
    ).fetchone()
    if not row:
        return None

    row2 = conn.execute("SELECT version FROM schema_version LIMIT 1").fetchone()
    if not row2:
        return None
    return int(row2["version"])


def migrate(conn: sqlite3.Connection) -> int:
    current = get_schema_version(conn)

    if current is None:
        _create_v1(conn)
        current = 1

    if current != SCHEMA_VERSION:
        raise RuntimeError(
            f"Unsupported schema version: {current} (expected {SCHEMA_VERSION})"
        )

    return current


def _create_v1(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS notes (
            id                      TEXT PRIMARY KEY,
            text                    TEXT NOT NULL,
            note_type               TEXT NOT NULL DEFAULT 'reminder',
            done                    INTEGER NOT NULL DEFAULT 0,
            counter                 INTEGER NOT NULL DEFAULT 0,
            has_counter             INTEGER NOT NULL DEFAULT 0,
            has_countdown           INTEGER NOT NULL DEFAULT 0,
            countdown_seconds       INTEGER NOT NULL DEFAULT 0,
            countdown_end_at        INTEGER,
            reminder_rule           TEXT NOT NULL DEFAULT 'timeup',
            specific_offset_seconds INTEGER NOT NULL DEFAULT 0,
            fixed_reminder_at       INTEGER,
            created_at              INTEGER NOT NULL,
            updated_at              INTEGER NOT NULL,
            CHECK (reminder_rule IN ('timeup', '1hour', '1day', 'specificleft')),
            CHECK (countdown_seconds >= 0),
            CHECK (specific_offset_seconds >= 0),
            CHECK (counter >= 0)
        );

        CREATE TABLE IF NOT EXISTS schema_version (
            version INTEGER NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_notes_countdown_end
            ON notes(countdown_end_at);
        """
    )

    conn.execute("DELETE FROM schema_version")
    conn.execute("INSERT INTO schema_version(version) VALUES (?)", (SCHEMA_VERSION,))
    conn.commit()
