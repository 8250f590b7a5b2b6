from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtCore import QObject, QTimer, Signal
from PySide6.QtWidgets import QSystemTrayIcon

from remindnotes.constants import NOTIFICATION_SHOW_MS
from remindnotes.reconciler import DispatcherUnavailable

logger = logging.getLogger(__name__)

# QTimer intervals are signed 32-bit milliseconds; longer waits are chained.
MAX_TIMER_MS = 2**31 - 1

ShowFn = Callable[[str, str], None]


class _Pending:
    def __init__(self, timer: QTimer, title: str, body: str, remaining_ms: int) -> None:
        self.timer = timer
        self.title = title
        self.body = body
        self.remaining_ms = remaining_ms


class TrayNotificationDispatcher(QObject):
    """Fire-and-forget notifications shown through the system tray.

    Each pending notification is one single-shot QTimer. There is no per-item
    cancel: ``clear_all`` drops every pending notification at once.
    """

    notificationShown = Signal(str, str)

    def __init__(
        self,
        tray: QSystemTrayIcon | None = None,
        *,
        enabled: bool = True,
        show: ShowFn | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._tray = tray
        self._enabled = enabled
        self._show = show
        self._pending: list[_Pending] = []

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)

    def is_available(self) -> bool:
        if not self._enabled:
            return False
        if self._show is not None:
            return True
        return self._tray is not None and QSystemTrayIcon.isSystemTrayAvailable()

    def pending_count(self) -> int:
        return len(self._pending)

    def schedule_at(self, fire_in_seconds: int, title: str, body: str) -> None:
        if fire_in_seconds <= 0:
            raise ValueError(f"fire_in_seconds must be positive: {fire_in_seconds}")
        if not self.is_available():
            raise DispatcherUnavailable("notifications are not available")

        timer = QTimer(self)
        timer.setSingleShot(True)
        pending = _Pending(timer, title, body, int(fire_in_seconds) * 1000)
        timer.timeout.connect(lambda p=pending: self._on_timeout(p))
        self._pending.append(pending)
        self._arm(pending)

    def clear_all(self) -> None:
        for p in self._pending:
            p.timer.stop()
            p.timer.deleteLater()
        if self._pending:
            logger.debug("Cleared %d pending notification(s)", len(self._pending))
        self._pending.clear()

    def _arm(self, pending: _Pending) -> None:
        step = min(pending.remaining_ms, MAX_TIMER_MS)
        pending.remaining_ms -= step
        pending.timer.start(step)

    def _on_timeout(self, pending: _Pending) -> None:
        if pending not in self._pending:
            return
        if pending.remaining_ms > 0:
            self._arm(pending)
            return

        self._pending.remove(pending)
        pending.timer.deleteLater()
        self._deliver(pending.title, pending.body)

    def _deliver(self, title: str, body: str) -> None:
        logger.info("Notification: %s (%s)", title, body)
        try:
            if self._show is not None:
                self._show(title, body)
            elif self._tray is not None:
                self._tray.showMessage(title, body, QSystemTrayIcon.MessageIcon.Information, NOTIFICATION_SHOW_MS)
        except Exception:
            logger.warning("Failed to show notification %r", title, exc_info=True)
            return
        self.notificationShown.emit(title, body)
