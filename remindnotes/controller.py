from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from PySide6.QtCore import (QObject, Property, QTimer, Signal, Slot)
from PySide6.QtWidgets import QSystemTrayIcon

from remindnotes import db
from remindnotes.constants import DISPLAY_TICK_INTERVAL_MS, NOTE_TYPES
from remindnotes.dispatcher import TrayNotificationDispatcher
from remindnotes.reconciler import Reconciler
from remindnotes.repository import EmptyNoteTextError, NoteDraft, ReminderRule
from remindnotes.settings import AppSettings, default_db_path
from remindnotes.store import NoteStore, Snapshot
from remindnotes.table_models import Column, NoteTableModel
from remindnotes.timeutil import (
    Clock,
    SystemClock,
    from_epoch_seconds,
    split_duration,
    to_epoch_seconds,
)

logger = logging.getLogger(__name__)


def draft_from_form(form: dict) -> NoteDraft:
    fixed = form.get("fixedReminderAt")
    try:
        fixed_at = from_epoch_seconds(int(fixed)) if fixed else None
    except (TypeError, ValueError, OverflowError, OSError):
        fixed_at = None

    return NoteDraft(
        text=str(form.get("text") or ""),
        note_type=str(form.get("noteType") or ""),
        has_counter=bool(form.get("hasCounter")),
        has_countdown=bool(form.get("hasCountdown")),
        countdown_days=form.get("countdownDays"),
        countdown_hours=form.get("countdownHours"),
        countdown_minutes=form.get("countdownMinutes"),
        countdown_secs=form.get("countdownSeconds"),
        reminder_rule=ReminderRule.parse(form.get("reminderRule")),
        offset_days=form.get("offsetDays"),
        offset_hours=form.get("offsetHours"),
        offset_minutes=form.get("offsetMinutes"),
        offset_secs=form.get("offsetSeconds"),
        fixed_reminder_at=fixed_at,
    )


class NotesController(QObject):
    statusMessageChanged = Signal()
    notificationsEnabledChanged = Signal()

    def __init__(
        self,
        tray: QSystemTrayIcon | None = None,
        *,
        clock: Clock | None = None,
        settings: AppSettings | None = None,
        dispatcher: TrayNotificationDispatcher | None = None,
    ) -> None:
        super().__init__()
        self._settings = settings or AppSettings()
        self._clock = clock or SystemClock()
        self._db_path = Path(self._settings.db_path() or str(default_db_path()))
        self._conn: sqlite3.Connection | None = None
        self._status_message = ""

        self._noteModel = NoteTableModel(
            [
                Column("Note", "text"),
                Column("Type", "type"),
                Column("Countdown", "countdown"),
                Column("Reminder At", "reminder_at"),
                Column("Counter", "counter"),
            ],
            parent=self,
        )

        self._dispatcher = dispatcher or TrayNotificationDispatcher(
            tray,
            enabled=self._settings.notifications_enabled(),
            parent=self,
        )
        self._reconciler = Reconciler(self._dispatcher)

        # Display only; never reconciles.
        self._tickTimer = QTimer(self)
        self._tickTimer.timeout.connect(self._tick_display)

        self._open_db()
        self._tickTimer.start(DISPLAY_TICK_INTERVAL_MS)

    # ---------- properties ----------

    @Property(QObject, constant=True)
    def noteModel(self) -> QObject:
        return self._noteModel

    @Property(str, notify=statusMessageChanged)
    def statusMessage(self) -> str:
        return self._status_message

    @Property(bool, notify=notificationsEnabledChanged)
    def notificationsEnabled(self) -> bool:
        return self._settings.notifications_enabled()

    @Property("QStringList", constant=True)
    def noteTypes(self):
        return list(NOTE_TYPES)


    # ---------- internal ----------

    def _open_db(self) -> None:
        self._conn = db.connect(self._db_path)
        db.migrate(self._conn)
        self._store = NoteStore(self._conn, clock=self._clock, on_change=self._on_notes_changed)
        # Pending notifications do not survive a restart; rebuild them.
        self._store.reload()

    def _require_store(self) -> NoteStore:
        if self._conn is None:
            raise RuntimeError("DB not initialized")
        return self._store

    def _set_status(self, msg: str) -> None:
        self._status_message = msg
        self.statusMessageChanged.emit()

    def _on_notes_changed(self, snapshot: Snapshot) -> None:
        now = self._clock.now()
        self._reconciler.reconcile(snapshot, now)
        self._noteModel.setRows(snapshot, now)

    def _tick_display(self) -> None:
        self._noteModel.tick(self._clock.now())

    # ---------- slots (refresh) ----------

    @Slot()
    def refresh(self) -> None:
        self._noteModel.setRows(self._require_store().list(), self._clock.now())

    # ---------- slots (details) ----------

    @Slot(str, result="QVariantMap")
    def noteDetail(self, note_id: str):
        n = self._require_store().get(note_id)
        if n is None:
            return {}

        cd, ch, cm, cs = split_duration(n.countdown_seconds)
        od, oh, om, os_ = split_duration(n.specific_offset_seconds)
        return {
            "id": n.id,
            "text": n.text,
            "noteType": n.note_type,
            "done": n.done,
            "counter": n.counter,
            "hasCounter": n.has_counter,
            "hasCountdown": n.has_countdown,
            "countdownDays": cd,
            "countdownHours": ch,
            "countdownMinutes": cm,
            "countdownSeconds": cs,
            "reminderRule": n.reminder_rule.value,
            "offsetDays": od,
            "offsetHours": oh,
            "offsetMinutes": om,
            "offsetSeconds": os_,
            "fixedReminderAt": to_epoch_seconds(n.fixed_reminder_at) if n.fixed_reminder_at else 0,
        }

    # ---------- slots (CRUD) ----------

    @Slot("QVariantMap", result=bool)
    def saveNote(self, form) -> bool:
        store = self._require_store()
        note_id = str(form.get("id") or "") or None
        try:
            note, _snapshot = store.save(draft_from_form(form), note_id=note_id)
        except EmptyNoteTextError:
            self._set_status("Note cannot be empty")
            return False
        except Exception as e:
            logger.exception("Saving note failed")
            self._set_status(f"Failed to save note: {e}")
            return False
        self._set_status("Note updated" if note_id else "Note created")
        logger.info("Saved note %s", note.id)
        return True

    @Slot(str)
    def deleteNote(self, note_id: str) -> None:
        try:
            self._require_store().remove(note_id)
            self._set_status("Note deleted")
        except Exception as e:
            logger.exception("Deleting note failed")
            self._set_status(f"Failed to delete note: {e}")

    @Slot(str)
    def toggleDone(self, note_id: str) -> None:
        try:
            self._require_store().toggle_done(note_id)
            self.refresh()
        except Exception as e:
            self._set_status(f"Failed to update note: {e}")

    @Slot(str)
    def incrementCounter(self, note_id: str) -> None:
        self._bump(note_id, 1)

    @Slot(str)
    def decrementCounter(self, note_id: str) -> None:
        self._bump(note_id, -1)

    def _bump(self, note_id: str, delta: int) -> None:
        try:
            self._require_store().bump_counter(note_id, delta)
            self.refresh()
        except Exception as e:
            self._set_status(f"Failed to update counter: {e}")

    # ---------- settings ----------

    @Slot(bool)
    def setNotificationsEnabled(self, enabled: bool) -> None:
        self._settings.set_notifications_enabled(enabled)
        self._dispatcher.set_enabled(enabled)
        self.notificationsEnabledChanged.emit()
        if enabled:
            self._reconciler.reconcile(self._require_store().list(), self._clock.now())
        else:
            self._dispatcher.clear_all()
        self._set_status("Notifications " + ("enabled" if enabled else "disabled"))
