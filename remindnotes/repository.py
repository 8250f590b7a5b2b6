from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from remindnotes.constants import DEFAULT_NOTE_TYPE, NOTE_TYPES
from remindnotes.timeutil import (
    coerce_duration,
    from_epoch_seconds,
    to_epoch_seconds,
    total_seconds,
    truncate_to_second,
)


class ReminderRule(str, Enum):
    TIME_UP = "timeup"
    ONE_HOUR_BEFORE = "1hour"
    ONE_DAY_BEFORE = "1day"
    SPECIFIC_OFFSET_BEFORE = "specificleft"

    @classmethod
    def parse(cls, value: str | None) -> "ReminderRule":
        try:
            return cls(value or cls.TIME_UP.value)
        except ValueError:
            return cls.TIME_UP


class EmptyNoteTextError(ValueError):
    pass


@dataclass(frozen=True)
class Note:
    id: str
    text: str
    note_type: str = DEFAULT_NOTE_TYPE
    done: bool = False
    counter: int = 0
    has_counter: bool = False
    has_countdown: bool = False
    countdown_seconds: int = 0
    countdown_end_at: datetime | None = None
    reminder_rule: ReminderRule = ReminderRule.TIME_UP
    specific_offset_seconds: int = 0
    fixed_reminder_at: datetime | None = None
    created_at: int = 0
    updated_at: int = 0


@dataclass(frozen=True)
class NoteDraft:
    """Raw form values for a note save.

    Unit fields are whatever the user typed; they are coerced on save.
    """

    text: str
    note_type: str = DEFAULT_NOTE_TYPE
    has_counter: bool = False
    has_countdown: bool = False
    countdown_days: object = 0
    countdown_hours: object = 0
    countdown_minutes: object = 0
    countdown_secs: object = 0
    reminder_rule: ReminderRule = ReminderRule.TIME_UP
    offset_days: object = 0
    offset_hours: object = 0
    offset_minutes: object = 0
    offset_secs: object = 0
    fixed_reminder_at: datetime | None = None


def build_note(draft: NoteDraft, *, note_id: str, now: datetime, previous: Note | None = None) -> Note:
    """Save path: validate the draft and compute the countdown end once."""
    text = draft.text or ""
    if not text.strip():
        raise EmptyNoteTextError("Note cannot be empty")

    saved_at = truncate_to_second(now)
    countdown = total_seconds(
        draft.countdown_days,
        draft.countdown_hours,
        draft.countdown_minutes,
        draft.countdown_secs,
    )
    end_at = None
    if draft.has_countdown and countdown > 0:
        end_at = saved_at + timedelta(seconds=countdown)

    offset = total_seconds(draft.offset_days, draft.offset_hours, draft.offset_minutes, draft.offset_secs)
    note_type = draft.note_type if draft.note_type in NOTE_TYPES else DEFAULT_NOTE_TYPE
    fixed_at = truncate_to_second(draft.fixed_reminder_at) if draft.fixed_reminder_at else None
    saved_ep = to_epoch_seconds(saved_at)

    return Note(
        id=note_id,
        text=text,
        note_type=note_type,
        done=previous.done if previous else False,
        counter=previous.counter if previous else 0,
        has_counter=bool(draft.has_counter),
        has_countdown=bool(draft.has_countdown),
        countdown_seconds=countdown,
        countdown_end_at=end_at,
        reminder_rule=ReminderRule.parse(draft.reminder_rule),
        specific_offset_seconds=offset,
        fixed_reminder_at=fixed_at,
        created_at=previous.created_at if previous else saved_ep,
        updated_at=saved_ep,
    )


def _opt_epoch(dt: datetime | None) -> int | None:
    return to_epoch_seconds(dt) if dt is not None else None


def _opt_datetime(value: int | None) -> datetime | None:
    return from_epoch_seconds(value) if value is not None else None


def _row_to_note(r: sqlite3.Row) -> Note:
    return Note(
        id=r["id"],
        text=r["text"],
        note_type=r["note_type"],
        done=bool(r["done"]),
        counter=int(r["counter"]),
        has_counter=bool(r["has_counter"]),
        has_countdown=bool(r["has_countdown"]),
        countdown_seconds=int(r["countdown_seconds"]),
        countdown_end_at=_opt_datetime(r["countdown_end_at"]),
        reminder_rule=ReminderRule.parse(r["reminder_rule"]),
        specific_offset_seconds=int(r["specific_offset_seconds"]),
        fixed_reminder_at=_opt_datetime(r["fixed_reminder_at"]),
        created_at=int(r["created_at"]),
        updated_at=int(r["updated_at"]),
    )


def upsert_note(conn: sqlite3.Connection, note: Note) -> None:
    conn.execute(
        """
        INSERT INTO notes(
            id, text, note_type, done, counter, has_counter, has_countdown, countdown_seconds,
            countdown_end_at, reminder_rule, specific_offset_seconds, fixed_reminder_at,
            created_at, updated_at
        )
        VALUES(
            :id, :text, :note_type, :done, :counter, :has_counter, :has_countdown, :countdown_seconds,
            :countdown_end_at, :reminder_rule, :specific_offset_seconds, :fixed_reminder_at,
            :created_at, :updated_at
        )
        ON CONFLICT(id) DO UPDATE SET
            text = excluded.text,
            note_type = excluded.note_type,
            done = excluded.done,
            counter = excluded.counter,
            has_counter = excluded.has_counter,
            has_countdown = excluded.has_countdown,
            countdown_seconds = excluded.countdown_seconds,
            countdown_end_at = excluded.countdown_end_at,
            reminder_rule = excluded.reminder_rule,
            specific_offset_seconds = excluded.specific_offset_seconds,
            fixed_reminder_at = excluded.fixed_reminder_at,
            updated_at = excluded.updated_at
        """,
        {
            "id": note.id,
            "text": note.text,
            "note_type": note.note_type,
            "done": int(note.done),
            "counter": max(0, int(note.counter)),
            "has_counter": int(note.has_counter),
            "has_countdown": int(note.has_countdown),
            "countdown_seconds": coerce_duration(note.countdown_seconds),
            "countdown_end_at": _opt_epoch(note.countdown_end_at),
            "reminder_rule": note.reminder_rule.value,
            "specific_offset_seconds": coerce_duration(note.specific_offset_seconds),
            "fixed_reminder_at": _opt_epoch(note.fixed_reminder_at),
            "created_at": note.created_at,
            "updated_at": note.updated_at,
        },
    )


def delete_note(conn: sqlite3.Connection, *, note_id: str) -> bool:
    cur = conn.execute("DELETE FROM notes WHERE id = :id", {"id": note_id})
    return cur.rowcount > 0


def list_notes(conn: sqlite3.Connection) -> list[Note]:
    # Ids are creation-time derived, so this is creation order.
    rows = conn.execute(
        "SELECT * FROM notes ORDER BY LENGTH(id) ASC, id ASC"
    ).fetchall()
    return [_row_to_note(r) for r in rows]


def set_done(conn: sqlite3.Connection, *, note_id: str, done: bool, now_epoch: int) -> None:
    conn.execute(
        "UPDATE notes SET done = :done, updated_at = :now WHERE id = :id",
        {"id": note_id, "done": int(done), "now": now_epoch},
    )


def bump_counter(conn: sqlite3.Connection, *, note_id: str, delta: int, now_epoch: int) -> None:
    conn.execute(
        """
        UPDATE notes
        SET counter = MAX(0, counter + :delta),
            updated_at = :now
        WHERE id = :id
        """,
        {"id": note_id, "delta": int(delta), "now": now_epoch},
    )


def max_note_id(conn: sqlite3.Connection) -> int:
    row = conn.execute(
        "SELECT id FROM notes ORDER BY LENGTH(id) DESC, id DESC LIMIT 1"
    ).fetchone()
    if not row:
        return 0
    try:
        return int(row["id"])
    except ValueError:
        return 0
