import math
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from .config import DEFAULT_WEEK_STARTS_ON
from .dates import days_of_month, days_of_week, format_date, parse_date, today_local
from .habits import frequency_per_week, is_applicable, specific_days, valid_habits
from .ledger import History, count_done, habit_total, has_any_done, is_done, total_done

SCORE_PER_CHECKIN = 5
MAX_PERCENT = 100


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def period_days(
    view_mode: str,
    current_date: date,
    week_starts_on: int = DEFAULT_WEEK_STARTS_ON,
) -> List[date]:
    if view_mode == "month":
        return days_of_month(current_date)
    return days_of_week(current_date, week_starts_on)


def period_target(habit: Dict[str, Any], view_mode: str, days: List[date]) -> int:
    if specific_days(habit):
        return sum(1 for day in days if is_applicable(habit, day))
    if view_mode == "week":
        return frequency_per_week(habit)
    return round_half_up(frequency_per_week(habit) * (len(days) / 7))


def percentage(done: int, target: int) -> int:
    if target == 0:
        return 0
    return min(MAX_PERCENT, round_half_up(100 * done / target))


def _period(state: Dict[str, Any], week_starts_on: int) -> List[date]:
    return period_days(state["viewMode"], parse_date(state["currentDate"]), week_starts_on)


def period_stats(
    habit: Dict[str, Any],
    state: Dict[str, Any],
    week_starts_on: int = DEFAULT_WEEK_STARTS_ON,
) -> Dict[str, Any]:
    days = _period(state, week_starts_on)
    done = count_done(state["history"], days, habit["id"])
    target = period_target(habit, state["viewMode"], days)
    return {
        "id": habit["id"],
        "name": habit["name"],
        "done": done,
        "target": target,
        "percentage": percentage(done, target),
        "met": done >= target,
    }


def all_period_stats(
    state: Dict[str, Any],
    week_starts_on: int = DEFAULT_WEEK_STARTS_ON,
) -> List[Dict[str, Any]]:
    return [period_stats(h, state, week_starts_on) for h in valid_habits(state["habits"])]


def completion_rate(
    state: Dict[str, Any],
    week_starts_on: int = DEFAULT_WEEK_STARTS_ON,
) -> int:
    rows = all_period_stats(state, week_starts_on)
    if not rows:
        return 0
    return round_half_up(sum(row["percentage"] for row in rows) / len(rows))


def daily_progress(state: Dict[str, Any], day: Optional[date] = None) -> int:
    habits = valid_habits(state["habits"])
    if not habits:
        return 0
    target_day = day or today_local()
    completed = sum(1 for h in habits if is_done(state["history"], target_day, h["id"]))
    return round_half_up(completed / len(habits) * 100)


def streak(history: History, today: Optional[date] = None) -> int:
    """Presence streak over today and yesterday only, so it never exceeds 2."""
    target_day = today or today_local()
    has_today = has_any_done(history, target_day)
    has_yesterday = has_any_done(history, target_day - timedelta(days=1))
    if has_today and has_yesterday:
        return 2
    if has_today or has_yesterday:
        return 1
    return 0


def score(history: History) -> int:
    return min(MAX_PERCENT, total_done(history) * SCORE_PER_CHECKIN)


def habit_progress(history: History, habit_id: str) -> Dict[str, int]:
    total = habit_total(history, habit_id)
    tracked_days = len(history) or 1
    return {
        "total": total,
        "tracked_days": tracked_days,
        "percentage": round_half_up(total / tracked_days * 100),
    }


def overview(
    state: Dict[str, Any],
    week_starts_on: int = DEFAULT_WEEK_STARTS_ON,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    target_day = today or today_local()
    habits = valid_habits(state["habits"])
    history = state["history"]
    quick_stats = []
    for habit in habits:
        row = {"id": habit["id"], "name": habit["name"], "color": habit.get("color")}
        row.update(habit_progress(history, habit["id"]))
        quick_stats.append(row)
    return {
        "date": format_date(target_day),
        "daily_progress": daily_progress(state, target_day),
        "completion_rate": completion_rate(state, week_starts_on),
        "streak": streak(history, target_day) if habits else 0,
        "score": score(history) if habits else 0,
        "habits": quick_stats,
    }
