from datetime import date
from typing import Any, Dict, List, Tuple

from .config import DEFAULT_WEEK_STARTS_ON
from .dates import days_of_week
from .habits import frequency_per_week, is_applicable, is_daily, specific_days, valid_habits
from .ledger import History, count_done, is_done

NOT_APPLICABLE = "not_applicable"
VISIBLE = "visible"
DONE_THIS_WEEK = "done_this_week"


def weekly_completions(
    habit: Dict[str, Any],
    history: History,
    day: date,
    week_starts_on: int = DEFAULT_WEEK_STARTS_ON,
) -> int:
    return count_done(history, days_of_week(day, week_starts_on), habit["id"])


def quota_met(
    habit: Dict[str, Any],
    history: History,
    day: date,
    week_starts_on: int = DEFAULT_WEEK_STARTS_ON,
) -> bool:
    return weekly_completions(habit, history, day, week_starts_on) >= frequency_per_week(habit)


def visibility(
    habit: Dict[str, Any],
    history: History,
    day: date,
    week_starts_on: int = DEFAULT_WEEK_STARTS_ON,
) -> str:
    if not is_applicable(habit, day):
        return NOT_APPLICABLE
    if specific_days(habit) or is_daily(habit):
        return VISIBLE
    if is_done(history, day, habit["id"]):
        return VISIBLE
    if quota_met(habit, history, day, week_starts_on):
        return DONE_THIS_WEEK
    return VISIBLE


def is_visible(
    habit: Dict[str, Any],
    history: History,
    day: date,
    week_starts_on: int = DEFAULT_WEEK_STARTS_ON,
) -> bool:
    return visibility(habit, history, day, week_starts_on) == VISIBLE


def is_firmly_expected(habit: Dict[str, Any], day: date) -> bool:
    if not is_applicable(habit, day):
        return False
    return bool(specific_days(habit)) or is_daily(habit)


def is_day_complete(habits: Any, history: History, day: date) -> bool:
    expected = [h for h in valid_habits(habits) if is_firmly_expected(h, day)]
    if not expected:
        return False
    return all(is_done(history, day, h["id"]) for h in expected)


def day_agenda(
    habits: Any,
    history: History,
    day: date,
    week_starts_on: int = DEFAULT_WEEK_STARTS_ON,
) -> List[Tuple[Dict[str, Any], str, bool]]:
    """(habit, visibility, done) for every valid habit on a day, in display order."""
    rows = []
    for habit in valid_habits(habits):
        rows.append(
            (habit, visibility(habit, history, day, week_starts_on), is_done(history, day, habit["id"]))
        )
    return rows


def visible_habits(
    habits: Any,
    history: History,
    day: date,
    week_starts_on: int = DEFAULT_WEEK_STARTS_ON,
) -> List[Dict[str, Any]]:
    return [h for h, state, _ in day_agenda(habits, history, day, week_starts_on) if state == VISIBLE]
