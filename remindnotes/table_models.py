from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from remindnotes.constants import TITLE_TIME_UP
from remindnotes.countdown import project
from remindnotes.repository import Note
from remindnotes.timeutil import format_local, utc_now

NOTE_ID_ROLE = int(Qt.UserRole)
TEXT_ROLE = int(Qt.UserRole) + 1
TYPE_ROLE = int(Qt.UserRole) + 2
DONE_ROLE = int(Qt.UserRole) + 3
COUNTER_ROLE = int(Qt.UserRole) + 4
COUNTDOWN_ROLE = int(Qt.UserRole) + 5
COUNTDOWN_DONE_ROLE = int(Qt.UserRole) + 6
HAS_COUNTER_ROLE = int(Qt.UserRole) + 7


@dataclass(frozen=True)
class Column:
    header: str
    key: str


class NoteTableModel(QAbstractTableModel):
    def __init__(self, columns: list[Column], parent=None) -> None:
        super().__init__(parent)
        self._columns = columns
        self._rows: list[Note] = []
        self._now: datetime = utc_now()

    def setRows(self, rows, now: datetime | None = None) -> None:  # Qt slot style
        self.beginResetModel()
        self._rows = list(rows)
        self._now = now or utc_now()
        self.endResetModel()

    def tick(self, now: datetime) -> None:
        """Re-project countdowns for ``now`` without touching the rows."""
        self._now = now
        if not self._rows:
            return
        top = self.index(0, 0)
        bottom = self.index(len(self._rows) - 1, len(self._columns) - 1)
        self.dataChanged.emit(top, bottom, [int(Qt.DisplayRole), COUNTDOWN_ROLE, COUNTDOWN_DONE_ROLE])

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        if parent.isValid():
            return 0
        return len(self._rows)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        if parent.isValid():
            return 0
        return len(self._columns)

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.DisplayRole):  # type: ignore[override]
        if role != Qt.DisplayRole:
            return None
        if orientation == Qt.Horizontal and 0 <= section < len(self._columns):
            return self._columns[section].header
        return None

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):  # type: ignore[override]
        if not index.isValid() or not (0 <= index.row() < len(self._rows)):
            return None

        row = self._rows[index.row()]

        if role == Qt.DisplayRole:
            return self._display_value(row, self._columns[index.column()].key)
        if role == NOTE_ID_ROLE:
            return row.id
        if role == TEXT_ROLE:
            return row.text
        if role == TYPE_ROLE:
            return row.note_type
        if role == DONE_ROLE:
            return row.done
        if role == HAS_COUNTER_ROLE:
            return row.has_counter
        if role == COUNTER_ROLE:
            return row.counter
        if role == COUNTDOWN_ROLE:
            return self._display_value(row, "countdown")
        if role == COUNTDOWN_DONE_ROLE:
            view = project(row, self._now)
            return bool(view and view.is_done)

        return None

    def roleNames(self):  # type: ignore[override]
        roles = super().roleNames()
        roles[NOTE_ID_ROLE] = b"noteId"
        roles[TEXT_ROLE] = b"noteText"
        roles[TYPE_ROLE] = b"noteType"
        roles[DONE_ROLE] = b"done"
        roles[COUNTER_ROLE] = b"counter"
        roles[COUNTDOWN_ROLE] = b"countdown"
        roles[COUNTDOWN_DONE_ROLE] = b"countdownDone"
        roles[HAS_COUNTER_ROLE] = b"hasCounter"
        return roles

    def _display_value(self, row: Note, col: str) -> str:
        if col == "text":
            return row.text
        if col == "type":
            return row.note_type
        if col == "counter":
            if not row.has_counter:
                return ""
            return str(row.counter)
        if col == "countdown":
            view = project(row, self._now)
            if view is None:
                return ""
            return TITLE_TIME_UP if view.is_done else view.display
        if col == "reminder_at":
            return format_local(row.fixed_reminder_at)

        return ""
