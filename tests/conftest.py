from datetime import UTC, datetime, timedelta

import pytest
from PySide6.QtCore import QCoreApplication

from remindnotes import db
from remindnotes.store import NoteStore

T0 = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, start: datetime = T0) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current = self.current + timedelta(seconds=seconds)


class RecordingDispatcher:
    """Records dispatcher calls in order."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def schedule_at(self, fire_in_seconds: int, title: str, body: str) -> None:
        self.calls.append(("schedule_at", fire_in_seconds, title, body))

    def clear_all(self) -> None:
        self.calls.append(("clear_all",))

    def scheduled(self) -> list[tuple]:
        return [c[1:] for c in self.calls if c[0] == "schedule_at"]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def conn(tmp_path):
    c = db.connect(tmp_path / "notes.db")
    db.migrate(c)
    yield c
    c.close()


@pytest.fixture
def store(conn, clock):
    return NoteStore(conn, clock=clock)


@pytest.fixture(scope="session")
def qapp():
    return QCoreApplication.instance() or QCoreApplication([])
