from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Protocol

from remindnotes.constants import MAX_DURATION_SECONDS


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return utc_now()


def utc_now() -> datetime:
    return datetime.now(UTC)


def to_epoch_seconds(dt: datetime) -> int:
    if dt.tzinfo is None:
        raise ValueError("datetime must be timezone-aware")
    return int(dt.timestamp())


def from_epoch_seconds(epoch_seconds: int) -> datetime:
    return datetime.fromtimestamp(int(epoch_seconds), tz=UTC)


def truncate_to_second(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        raise ValueError("datetime must be timezone-aware")
    return dt.replace(microsecond=0)


def whole_seconds_between(start: datetime, end: datetime) -> int:
    """Floor of ``end - start`` in seconds (negative when ``end`` is earlier)."""
    if start.tzinfo is None or end.tzinfo is None:
        raise ValueError("datetime must be timezone-aware")
    return math.floor((end - start).total_seconds())


def coerce_duration(value: object) -> int:
    """Turn a user-entered unit field into a non-negative int.

    Anything that is not a finite number, is negative, or is longer than
    MAX_DURATION_SECONDS becomes 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number) or number < 0 or number > MAX_DURATION_SECONDS:
        return 0
    return int(number)


def total_seconds(days: object = 0, hours: object = 0, minutes: object = 0, seconds: object = 0) -> int:
    total = (
        coerce_duration(days) * 86400
        + coerce_duration(hours) * 3600
        + coerce_duration(minutes) * 60
        + coerce_duration(seconds)
    )
    return total if total <= MAX_DURATION_SECONDS else 0


def split_duration(seconds: int) -> tuple[int, int, int, int]:
    total = max(0, int(seconds))
    days, total = divmod(total, 86400)
    hours, total = divmod(total, 3600)
    minutes, secs = divmod(total, 60)
    return days, hours, minutes, secs


def format_local(dt: datetime | None) -> str:
    if dt is None:
        return ""
    # Convert to local time for display
    local_dt = dt.astimezone()
    return local_dt.strftime("%Y-%m-%d %H:%M")
