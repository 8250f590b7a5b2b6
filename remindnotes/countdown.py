from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from remindnotes.repository import Note
from remindnotes.timeutil import split_duration, whole_seconds_between


@dataclass(frozen=True)
class Remaining:
    days: int
    hours: int
    minutes: int
    seconds: int

    def __str__(self) -> str:
        parts: list[str] = []
        if self.days:
            parts.append(f"{self.days}d")
        if self.hours or parts:
            parts.append(f"{self.hours}h")
        if self.minutes or parts:
            parts.append(f"{self.minutes}m")
        parts.append(f"{self.seconds}s")
        return " ".join(parts) + " left"


@dataclass(frozen=True)
class CountdownView:
    remaining_seconds: int
    display: str
    is_done: bool


def project(note: Note, now: datetime) -> CountdownView | None:
    """Presentation state of a note's countdown, or None if it has none."""
    if not note.has_countdown or note.countdown_end_at is None:
        return None

    remaining = max(0, whole_seconds_between(now, note.countdown_end_at))
    return CountdownView(
        remaining_seconds=remaining,
        display=str(Remaining(*split_duration(remaining))),
        is_done=remaining == 0,
    )
