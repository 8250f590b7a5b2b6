from conftest import T0
from remindnotes.controller import draft_from_form
from remindnotes.repository import ReminderRule, build_note
from remindnotes.timeutil import to_epoch_seconds


def test_form_to_draft():
    draft = draft_from_form(
        {
            "id": "",
            "text": "exam",
            "noteType": "todo",
            "hasCountdown": True,
            "countdownDays": "1",
            "countdownHours": "x",
            "countdownMinutes": "-3",
            "countdownSeconds": "30",
            "reminderRule": "1day",
            "fixedReminderAt": to_epoch_seconds(T0),
        }
    )
    assert draft.reminder_rule is ReminderRule.ONE_DAY_BEFORE
    assert draft.fixed_reminder_at == T0

    note = build_note(draft, note_id="1", now=T0)
    assert note.countdown_seconds == 86430
    assert note.note_type == "todo"


def test_form_defaults():
    draft = draft_from_form({"text": "x", "reminderRule": "weird", "fixedReminderAt": "nope"})
    assert draft.reminder_rule is ReminderRule.TIME_UP
    assert draft.fixed_reminder_at is None
    assert draft.has_countdown is False


def test_form_counter_flag():
    assert draft_from_form({"text": "x", "hasCounter": True}).has_counter is True
    assert draft_from_form({"text": "x"}).has_counter is False


def test_out_of_range_fixed_date_is_ignored():
    draft = draft_from_form({"text": "x", "fixedReminderAt": 10**18})
    assert draft.fixed_reminder_at is None
