import time
import uuid
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from .dates import weekday_index

COLORS = [
    "#3b82f6",
    "#ef4444",
    "#10b981",
    "#f59e0b",
    "#8b5cf6",
    "#ec4899",
    "#06b6d4",
    "#f97316",
    "#a855f7",
]
DEFAULT_ICON = "Activity"
DAILY = 7

WEEKDAY_LABELS = ["sun", "mon", "tue", "wed", "thu", "fri", "sat"]


def now_millis() -> int:
    return int(time.time() * 1000)


def new_habit_id(existing: Iterable[str] = ()) -> str:
    taken = set(existing)
    while True:
        candidate = uuid.uuid4().hex[:9]
        if candidate not in taken:
            return candidate


def parse_weekdays(value: str) -> List[int]:
    """Turn 'mon,wed' into [1, 3]; unknown labels raise ValueError."""
    days = set()
    for part in value.split(","):
        label = part.strip().lower()[:3]
        if not label:
            continue
        days.add(WEEKDAY_LABELS.index(label))
    return sorted(days)


def format_weekdays(days: Iterable[int]) -> str:
    return ",".join(WEEKDAY_LABELS[d] for d in sorted(days))


def is_valid_habit(habit: Any) -> bool:
    if not isinstance(habit, dict):
        return False
    habit_id = habit.get("id")
    name = habit.get("name")
    return isinstance(habit_id, str) and bool(habit_id) and isinstance(name, str) and bool(name)


def valid_habits(habits: Any) -> List[Dict[str, Any]]:
    if not isinstance(habits, list):
        return []
    return [h for h in habits if is_valid_habit(h)]


def specific_days(habit: Dict[str, Any]) -> List[int]:
    raw = habit.get("specificDays")
    if not isinstance(raw, list):
        return []
    return [d for d in raw if isinstance(d, int) and not isinstance(d, bool) and 0 <= d <= 6]


def frequency_per_week(habit: Dict[str, Any]) -> int:
    days = specific_days(habit)
    if days:
        return len(set(days))
    value = habit.get("frequencyPerWeek")
    if not isinstance(value, int) or isinstance(value, bool):
        return DAILY
    return min(max(value, 1), DAILY)


def is_daily(habit: Dict[str, Any]) -> bool:
    return not specific_days(habit) and frequency_per_week(habit) == DAILY


def is_applicable(habit: Dict[str, Any], day: date) -> bool:
    days = specific_days(habit)
    if not days:
        return True
    return weekday_index(day) in days


def normalize_habit(habit: Dict[str, Any], as_stored: bool = False) -> Dict[str, Any]:
    """Keep exactly one scheduling mode active on a habit dict, in place.

    With ``as_stored`` a well-formed habit is left untouched: day order is
    kept and an empty ``specificDays`` list stays, only bad entries go.
    """
    if "specificDays" in habit:
        days = specific_days(habit)
        if days:
            habit["specificDays"] = list(dict.fromkeys(days)) if as_stored else sorted(set(days))
        elif not (as_stored and habit["specificDays"] == []):
            del habit["specificDays"]
    habit["frequencyPerWeek"] = frequency_per_week(habit)
    return habit


def validate_habit_fields(fields: Dict[str, Any]) -> Optional[str]:
    name = fields.get("name")
    if "name" in fields and (not isinstance(name, str) or not name.strip()):
        return "Habit name cannot be empty."
    if "specificDays" in fields and fields["specificDays"] is not None:
        raw = fields["specificDays"]
        if not isinstance(raw, list) or not raw:
            return "Pick at least one day for a specific-days habit."
        if any(not isinstance(d, int) or isinstance(d, bool) or not 0 <= d <= 6 for d in raw):
            return "Days must be weekday indices between 0 (Sunday) and 6 (Saturday)."
    if "frequencyPerWeek" in fields:
        value = fields["frequencyPerWeek"]
        if not isinstance(value, int) or isinstance(value, bool) or value < 1 or value > DAILY:
            return "Frequency per week must be between 1 and 7."
    return None


def make_habit(fields: Dict[str, Any], existing_ids: Iterable[str] = ()) -> Dict[str, Any]:
    habit = {
        "name": "",
        "color": COLORS[0],
        "icon": DEFAULT_ICON,
        "frequencyPerWeek": DAILY,
    }
    habit.update({k: v for k, v in fields.items() if k not in ("id", "createdAt")})
    if isinstance(habit.get("name"), str):
        habit["name"] = habit["name"].strip()
    habit["id"] = new_habit_id(existing_ids)
    habit["createdAt"] = now_millis()
    return normalize_habit(habit)


def seed_habits() -> List[Dict[str, Any]]:
    created = now_millis()
    return [
        {"id": "1", "name": "Drink Water", "color": "#3b82f6", "icon": "Droplets",
         "frequencyPerWeek": DAILY, "createdAt": created},
        {"id": "2", "name": "Exercise", "color": "#ef4444", "icon": "Activity",
         "frequencyPerWeek": DAILY, "createdAt": created},
        {"id": "3", "name": "Read", "color": "#10b981", "icon": "Book",
         "frequencyPerWeek": DAILY, "createdAt": created},
    ]
