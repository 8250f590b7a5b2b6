from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from remindnotes.constants import (
    ONE_DAY_SECONDS,
    ONE_HOUR_SECONDS,
    TITLE_CUSTOM_LEFT,
    TITLE_FIXED_REMINDER,
    TITLE_ONE_DAY_LEFT,
    TITLE_ONE_HOUR_LEFT,
    TITLE_TIME_UP,
)
from remindnotes.repository import Note, ReminderRule


@dataclass(frozen=True)
class Trigger:
    fire_at: datetime
    title: str


def _countdown_reminder(note: Note) -> tuple[int, str] | None:
    rule = note.reminder_rule
    if rule == ReminderRule.ONE_HOUR_BEFORE:
        return ONE_HOUR_SECONDS, TITLE_ONE_HOUR_LEFT
    if rule == ReminderRule.ONE_DAY_BEFORE:
        return ONE_DAY_SECONDS, TITLE_ONE_DAY_LEFT
    if rule == ReminderRule.SPECIFIC_OFFSET_BEFORE and note.specific_offset_seconds > 0:
        return note.specific_offset_seconds, TITLE_CUSTOM_LEFT
    return None


def derive_triggers(note: Note, now: datetime) -> list[Trigger]:
    """Return the notifications a note wants, in firing-slot order.

    Pure: the result depends only on the note's fields and ``now``.
    Order is time-up, countdown reminder, fixed-date reminder.
    """
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")

    if not (note.text or "").strip():
        return []

    triggers: list[Trigger] = []

    end_at = note.countdown_end_at
    if note.has_countdown and end_at is not None and end_at > now:
        triggers.append(Trigger(end_at, TITLE_TIME_UP))

        reminder = _countdown_reminder(note)
        if reminder is not None:
            offset, title = reminder
            # Dropped, not clamped, when already past or not before time-up.
            if 0 < offset < (end_at - now).total_seconds():
                fire_at = end_at - timedelta(seconds=offset)
                if now < fire_at < end_at:
                    triggers.append(Trigger(fire_at, title))

    fixed_at = note.fixed_reminder_at
    if fixed_at is not None and fixed_at > now:
        triggers.append(Trigger(fixed_at, TITLE_FIXED_REMINDER))

    return triggers
