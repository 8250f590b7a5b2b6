from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Callable

from remindnotes.repository import (
    Note,
    NoteDraft,
    build_note,
    bump_counter,
    delete_note,
    list_notes,
    max_note_id,
    set_done,
    upsert_note,
)
from remindnotes.timeutil import Clock, SystemClock, to_epoch_seconds

logger = logging.getLogger(__name__)

Snapshot = tuple[Note, ...]
ChangeHook = Callable[[Snapshot], None]


class NoteStore:
    """Authoritative note collection backed by sqlite.

    Mutations return the new snapshot. Those that can change scheduling
    (save, upsert, remove) also pass it to ``on_change``.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        *,
        clock: Clock | None = None,
        on_change: ChangeHook | None = None,
    ) -> None:
        self._conn = conn
        self._clock = clock or SystemClock()
        self._on_change = on_change
        self._snapshot: Snapshot = tuple(list_notes(conn))
        self._last_id = max_note_id(conn)

    def set_on_change(self, hook: ChangeHook | None) -> None:
        self._on_change = hook

    def list(self) -> Snapshot:
        return self._snapshot

    def get(self, note_id: str) -> Note | None:
        for note in self._snapshot:
            if note.id == note_id:
                return note
        return None

    def new_id(self, now: datetime) -> str:
        candidate = int(now.timestamp() * 1000)
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return str(candidate)

    def save(self, draft: NoteDraft, *, note_id: str | None = None) -> tuple[Note, Snapshot]:
        """Create (no id) or re-save (existing id) a note from form values.

        Raises EmptyNoteTextError before touching storage.
        """
        now = self._clock.now()
        previous = self.get(note_id) if note_id else None
        if note_id and previous is None:
            raise KeyError(f"unknown note: {note_id}")
        note = build_note(draft, note_id=note_id or self.new_id(now), now=now, previous=previous)
        return note, self.upsert(note)

    def upsert(self, note: Note) -> Snapshot:
        with self._conn:
            upsert_note(self._conn, note)
        logger.debug("Saved note %s", note.id)
        return self._changed(notify=True)

    def remove(self, note_id: str) -> Snapshot:
        with self._conn:
            removed = delete_note(self._conn, note_id=note_id)
        if not removed:
            logger.debug("Remove of unknown note %s", note_id)
        return self._changed(notify=True)

    def set_done(self, note_id: str, done: bool) -> Snapshot:
        with self._conn:
            set_done(self._conn, note_id=note_id, done=done, now_epoch=self._now_epoch())
        return self._changed(notify=False)

    def toggle_done(self, note_id: str) -> Snapshot:
        note = self.get(note_id)
        if note is None:
            return self._snapshot
        return self.set_done(note_id, not note.done)

    def bump_counter(self, note_id: str, delta: int) -> Snapshot:
        with self._conn:
            bump_counter(self._conn, note_id=note_id, delta=delta, now_epoch=self._now_epoch())
        return self._changed(notify=False)

    def reload(self) -> Snapshot:
        return self._changed(notify=True)

    def _now_epoch(self) -> int:
        return to_epoch_seconds(self._clock.now())

    def _changed(self, *, notify: bool) -> Snapshot:
        self._snapshot = tuple(list_notes(self._conn))
        if notify and self._on_change is not None:
            self._on_change(self._snapshot)
        return self._snapshot

