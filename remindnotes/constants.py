from __future__ import annotations

APP_ORG = "Proje3"
APP_NAME = "RemindNotes"

SCHEMA_VERSION = 1

NOTE_TYPES = ("reminder", "todo", "idea", "personal")
DEFAULT_NOTE_TYPE = "reminder"

# Reminder offsets (seconds before countdown end)
ONE_HOUR_SECONDS = 3600
ONE_DAY_SECONDS = 86400

# Longest countdown or offset accepted from the form (100 years)
MAX_DURATION_SECONDS = 100 * 365 * ONE_DAY_SECONDS

# Notification titles
TITLE_TIME_UP = "Time is up!"
TITLE_ONE_HOUR_LEFT = "1 hour left!"
TITLE_ONE_DAY_LEFT = "1 day left!"
TITLE_CUSTOM_LEFT = "Custom time left!"
TITLE_FIXED_REMINDER = "Reminder!"

# UI
DISPLAY_TICK_INTERVAL_MS = 1_000
NOTIFICATION_SHOW_MS = 10_000
