from datetime import timedelta

from conftest import T0, RecordingDispatcher
from remindnotes.reconciler import DispatcherUnavailable, Reconciler
from remindnotes.repository import Note, ReminderRule


def make_note(note_id, seconds, rule=ReminderRule.TIME_UP, text="note", **kw):
    return Note(
        id=note_id,
        text=text,
        has_countdown=True,
        countdown_seconds=seconds,
        countdown_end_at=T0 + timedelta(seconds=seconds),
        reminder_rule=rule,
        **kw,
    )


def test_clear_then_schedule_every_future_trigger(dispatcher):
    notes = [
        make_note("1", 7200, ReminderRule.ONE_HOUR_BEFORE, text="a"),
        make_note("2", 90, text="b"),
    ]
    count = Reconciler(dispatcher).reconcile(notes, T0)

    assert count == 3
    assert dispatcher.calls == [
        ("clear_all",),
        ("schedule_at", 7200, "Time is up!", "a"),
        ("schedule_at", 3600, "1 hour left!", "a"),
        ("schedule_at", 90, "Time is up!", "b"),
    ]


def test_fire_in_seconds_is_floored(dispatcher):
    now = T0 + timedelta(milliseconds=300)
    Reconciler(dispatcher).reconcile([make_note("1", 10)], now)
    assert dispatcher.scheduled() == [(9, "Time is up!", "note")]


def test_sub_second_trigger_is_not_submitted(dispatcher):
    now = T0 + timedelta(seconds=9, milliseconds=500)
    count = Reconciler(dispatcher).reconcile([make_note("1", 10)], now)
    assert count == 0
    assert dispatcher.calls == [("clear_all",)]


def test_empty_note_set_only_clears(dispatcher):
    Reconciler(dispatcher).reconcile([], T0)
    assert dispatcher.calls == [("clear_all",)]


def test_idempotent(dispatcher):
    notes = [make_note("1", 7200, ReminderRule.ONE_HOUR_BEFORE)]
    reconciler = Reconciler(dispatcher)
    reconciler.reconcile(notes, T0)
    first = list(dispatcher.calls)
    dispatcher.calls.clear()
    reconciler.reconcile(notes, T0)
    assert dispatcher.calls == first


def test_idempotent_modulo_elapsed_time(dispatcher):
    notes = [make_note("1", 7200, ReminderRule.ONE_HOUR_BEFORE)]
    reconciler = Reconciler(dispatcher)
    reconciler.reconcile(notes, T0)
    first = dispatcher.scheduled()
    dispatcher.calls.clear()
    reconciler.reconcile(notes, T0 + timedelta(seconds=2))
    second = dispatcher.scheduled()
    assert [(s - 2, t, b) for s, t, b in first] == second


def test_deleted_note_leaves_no_trace(dispatcher):
    keep = make_note("1", 600, text="keep")
    gone = make_note("2", 7200, ReminderRule.ONE_HOUR_BEFORE, text="gone")
    reconciler = Reconciler(dispatcher)
    reconciler.reconcile([keep, gone], T0)
    dispatcher.calls.clear()

    reconciler.reconcile([keep], T0 + timedelta(seconds=1))

    assert dispatcher.calls[0] == ("clear_all",)
    assert all(body != "gone" for _s, _t, body in dispatcher.scheduled())
    assert dispatcher.scheduled() == [(599, "Time is up!", "keep")]


class UnavailableDispatcher(RecordingDispatcher):
    def schedule_at(self, fire_in_seconds, title, body):
        raise DispatcherUnavailable("no permission")


class BrokenDispatcher(RecordingDispatcher):
    def clear_all(self):
        raise OSError("platform failure")


def test_unavailable_dispatcher_is_swallowed():
    count = Reconciler(UnavailableDispatcher()).reconcile([make_note("1", 60)], T0)
    assert count == 0


def test_dispatcher_failure_does_not_stop_submissions():
    d = BrokenDispatcher()
    count = Reconciler(d).reconcile([make_note("1", 60)], T0)
    assert count == 1
    assert d.scheduled() == [(60, "Time is up!", "note")]


class ReentrantDispatcher(RecordingDispatcher):
    """Asks for another reconcile from inside the first one."""

    def __init__(self):
        super().__init__()
        self.reconciler = None
        self.fired = False

    def schedule_at(self, fire_in_seconds, title, body):
        super().schedule_at(fire_in_seconds, title, body)
        if not self.fired:
            self.fired = True
            result = self.reconciler.reconcile([make_note("9", 30, text="second")], T0)
            self.calls.append(("nested_returned", result))


def test_reentrant_reconcile_runs_after_current_one():
    d = ReentrantDispatcher()
    d.reconciler = Reconciler(d)
    count = d.reconciler.reconcile([make_note("1", 60, text="first"), make_note("2", 90, text="first")], T0)

    assert count == 2
    assert d.calls == [
        ("clear_all",),
        ("schedule_at", 60, "Time is up!", "first"),
        ("nested_returned", 0),
        ("schedule_at", 90, "Time is up!", "first"),
        ("clear_all",),
        ("schedule_at", 30, "Time is up!", "second"),
    ]


def test_note_that_cannot_be_derived_does_not_stop_the_others(dispatcher, monkeypatch):
    from remindnotes import reconciler as reconciler_module

    real = reconciler_module.derive_triggers

    def derive(note, now):
        if note.id == "1":
            raise OverflowError("date value out of range")
        return real(note, now)

    monkeypatch.setattr(reconciler_module, "derive_triggers", derive)
    count = Reconciler(dispatcher).reconcile(
        [make_note("1", 60, text="bad"), make_note("2", 90, text="good")], T0
    )

    assert count == 1
    assert dispatcher.calls == [("clear_all",), ("schedule_at", 90, "Time is up!", "good")]


def test_tray_dispatcher_raises_the_reconciler_exception():
    from remindnotes import dispatcher as dispatcher_module

    assert DispatcherUnavailable.__module__ == "remindnotes.reconciler"
    assert dispatcher_module.DispatcherUnavailable is DispatcherUnavailable
