from datetime import date
from typing import Any, Dict, Iterable, Union

from .dates import is_valid_date_key

History = Dict[str, Dict[str, bool]]
DayKey = Union[str, date]


def _key(day: DayKey) -> str:
    return day.isoformat() if isinstance(day, date) else day


def day_entries(history: History, day: DayKey) -> Dict[str, bool]:
    entries = history.get(_key(day))
    return entries if isinstance(entries, dict) else {}


def is_done(history: History, day: DayKey, habit_id: str) -> bool:
    return day_entries(history, day).get(habit_id) is True


def toggle(history: History, day: DayKey, habit_id: str) -> bool:
    """Flip the entry in place, creating the day lazily. Returns the new value."""
    key = _key(day)
    entries = history.get(key)
    if not isinstance(entries, dict):
        entries = {}
        history[key] = entries
    entries[habit_id] = not entries.get(habit_id, False)
    return entries[habit_id]


def count_done(history: History, days: Iterable[DayKey], habit_id: str) -> int:
    return sum(1 for day in days if is_done(history, day, habit_id))


def has_any_done(history: History, day: DayKey) -> bool:
    return any(v is True for v in day_entries(history, day).values())


def total_done(history: History) -> int:
    return sum(
        sum(1 for v in entries.values() if v is True)
        for entries in history.values()
        if isinstance(entries, dict)
    )


def habit_total(history: History, habit_id: str) -> int:
    return sum(1 for key in history if is_done(history, key, habit_id))


def sanitize_history(raw: Any) -> History:
    if not isinstance(raw, dict):
        return {}
    clean: History = {}
    for key, entries in raw.items():
        if not is_valid_date_key(key) or not isinstance(entries, dict):
            continue
        clean[key] = {
            habit_id: value
            for habit_id, value in entries.items()
            if isinstance(habit_id, str) and isinstance(value, bool)
        }
    return clean
