from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import QSettings

from remindnotes.constants import APP_NAME, APP_ORG


class AppSettings:
    def __init__(self) -> None:
        self._q = QSettings(APP_ORG, APP_NAME)

    def db_path(self) -> str | None:
        value = self._q.value("storage/db_path", "", type=str)
        return value or None

    def notifications_enabled(self) -> bool:
        return bool(self._q.value("notifications/enabled", True, type=bool))

    def set_notifications_enabled(self, enabled: bool) -> None:
        self._q.setValue("notifications/enabled", bool(enabled))


def default_db_path() -> Path:
    base = Path.home() / ".local" / "share"
    base.mkdir(parents=True, exist_ok=True)
    return base / "remindnotes.db"
