from __future__ import annotations

import logging
from collections import deque
from datetime import datetime
from typing import Iterable, Protocol

from remindnotes.repository import Note
from remindnotes.timeutil import whole_seconds_between
from remindnotes.triggers import derive_triggers

logger = logging.getLogger(__name__)


class DispatcherUnavailable(RuntimeError):
    """Notifications cannot be delivered (disabled, or no system tray)."""


class Dispatcher(Protocol):
    def schedule_at(self, fire_in_seconds: int, title: str, body: str) -> None: ...

    def clear_all(self) -> None: ...


class Reconciler:
    """Keeps the dispatcher's pending set equal to the notes' future triggers.

    Every run clears the dispatcher and resubmits everything, since the
    dispatcher cannot cancel a single notification. Runs never interleave:
    a request made while one is in progress is queued behind it.
    """

    def __init__(self, dispatcher: Dispatcher) -> None:
        self._dispatcher = dispatcher
        self._queue: deque[tuple[tuple[Note, ...], datetime]] = deque()
        self._running = False

    def reconcile(self, notes: Iterable[Note], now: datetime) -> int:
        """Clear and resubmit; returns how many notifications were submitted.

        A re-entrant call is deferred and returns 0.
        """
        self._queue.append((tuple(notes), now))
        if self._running:
            logger.debug("Reconcile requested while running; queued")
            return 0

        self._running = True
        submitted = 0
        try:
            first = True
            while self._queue:
                snapshot, at = self._queue.popleft()
                count = self._run(snapshot, at)
                if first:
                    submitted = count
                    first = False
        finally:
            self._running = False
        return submitted

    def _run(self, notes: tuple[Note, ...], now: datetime) -> int:
        self._call("clear_all")

        submitted = 0
        for note in notes:
            try:
                triggers = derive_triggers(note, now)
            except Exception:
                logger.warning("Skipping note %s: trigger derivation failed", note.id, exc_info=True)
                continue
            for trigger in triggers:
                fire_in = whole_seconds_between(now, trigger.fire_at)
                if fire_in <= 0:
                    continue
                if self._call("schedule_at", fire_in, trigger.title, note.text):
                    submitted += 1

        logger.debug("Reconciled %d note(s), %d notification(s) scheduled", len(notes), submitted)
        return submitted

    def _call(self, method: str, *args: object) -> bool:
        try:
            getattr(self._dispatcher, method)(*args)
        except DispatcherUnavailable as e:
            logger.debug("Notifications unavailable, %s skipped: %s", method, e)
            return False
        except Exception:
            logger.warning("Dispatcher %s failed", method, exc_info=True)
            return False
        return True
