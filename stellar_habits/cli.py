import argparse
from datetime import date
from typing import Any, Dict, List, Optional

from . import analytics, schedule
from .config import load_settings
from .dates import days_of_week, format_date, parse_date, today_local
from .habits import (
    COLORS,
    format_weekdays,
    frequency_per_week,
    parse_weekdays,
    specific_days,
    valid_habits,
    validate_habit_fields,
)
from .ledger import is_done
from .log import setup_logging
from .storage import JsonFileStorage
from .store import HabitStore


def _target_date(args: argparse.Namespace) -> date:
    return today_local() if getattr(args, "date", None) is None else parse_date(args.date)


def _schedule_label(habit: Dict[str, Any]) -> str:
    days = specific_days(habit)
    if days:
        return f"on {format_weekdays(days)}"
    goal = frequency_per_week(habit)
    return "daily" if goal == 7 else f"{goal}/wk"


def _habit_fields(args: argparse.Namespace) -> Optional[Dict[str, Any]]:
    fields: Dict[str, Any] = {}
    if getattr(args, "name", None) is not None:
        fields["name"] = args.name
    if args.color is not None:
        fields["color"] = args.color
    if args.icon is not None:
        fields["icon"] = args.icon
    if args.per_week is not None:
        fields["frequencyPerWeek"] = args.per_week
    if args.days is not None:
        try:
            fields["specificDays"] = parse_weekdays(args.days)
        except ValueError:
            print("Days must be weekday names like mon,wed,fri.")
            return None
    if getattr(args, "clear_days", False):
        fields["specificDays"] = None
    error = validate_habit_fields(fields)
    if error:
        print(error)
        return None
    return fields


def cmd_add(store: HabitStore, args: argparse.Namespace) -> None:
    fields = _habit_fields(args)
    if fields is None:
        return
    habit = store.add_habit(fields)
    print(f"Added habit {habit['id']}: {habit['name']} ({_schedule_label(habit)})")


def cmd_list(store: HabitStore, _: argparse.Namespace) -> None:
    habits = valid_habits(store.state["habits"])
    if not habits:
        print("No habits yet.")
        return
    for habit in habits:
        print(f"{habit['id']:>9} {habit['name']} ({_schedule_label(habit)}, {habit.get('color', '-')})")


def cmd_edit(store: HabitStore, args: argparse.Namespace) -> None:
    if store.find_habit(args.id) is None:
        print(f"Habit {args.id} not found.")
        return
    fields = _habit_fields(args)
    if fields is None:
        return
    if not fields:
        print("Nothing to change.")
        return
    store.update_habit(args.id, fields)
    habit = store.find_habit(args.id)
    print(f"Updated habit {args.id}: {habit.get('name', '')} ({_schedule_label(habit)})")


def cmd_delete(store: HabitStore, args: argparse.Namespace) -> None:
    if store.find_habit(args.id) is None:
        print(f"Habit {args.id} not found.")
        return
    store.delete_habit(args.id)
    print(f"Deleted habit {args.id}.")


def cmd_toggle(store: HabitStore, args: argparse.Namespace) -> None:
    habit = store.find_habit(args.id)
    if habit is None:
        print(f"Habit {args.id} not found.")
        return
    date_key = format_date(_target_date(args))
    store.toggle_habit(args.id, date_key)
    mark = "done" if is_done(store.state["history"], date_key, args.id) else "not done"
    print(f"{habit.get('name', '')} on {date_key}: {mark}")


def cmd_view(store: HabitStore, args: argparse.Namespace) -> None:
    store.set_view_mode(args.mode)
    print(f"View mode: {store.state['viewMode']}")


def cmd_goto(store: HabitStore, args: argparse.Namespace) -> None:
    if args.prev:
        store.navigate_month(-1)
    elif args.next:
        store.navigate_month(1)
    elif args.date:
        store.set_current_date(args.date)
    else:
        store.set_current_date(format_date(today_local()))
    print(f"Current date: {store.state['currentDate']}")


def cmd_theme(store: HabitStore, _: argparse.Namespace) -> None:
    store.toggle_theme()
    print(f"Theme: {store.state['theme']}")


def cmd_day(store: HabitStore, args: argparse.Namespace) -> None:
    day = _target_date(args)
    state = store.state
    rows = schedule.day_agenda(state["habits"], state["history"], day, store.week_starts_on)
    if not rows:
        print("No habits yet.")
        return
    print(f"{format_date(day)} ({day.strftime('%A')})")
    for habit, status, done in rows:
        if status == schedule.NOT_APPLICABLE:
            continue
        if status == schedule.DONE_THIS_WEEK:
            mark = "~ done this week"
        else:
            mark = "✓" if done else "·"
        print(f"{habit['id']:>9} {mark} {habit['name']}")
    if schedule.is_day_complete(state["habits"], state["history"], day):
        print("All done!")


def cmd_week(store: HabitStore, args: argparse.Namespace) -> None:
    target_date = _target_date(args)
    state = store.state
    window = days_of_week(target_date, store.week_starts_on)
    habits = valid_habits(state["habits"])
    if not habits:
        print("No habits yet.")
        return
    print("          " + " ".join(day.strftime("%a")[:2] for day in window))
    for habit in habits:
        cells = []
        for day in window:
            status = schedule.visibility(habit, state["history"], day, store.week_starts_on)
            if status == schedule.NOT_APPLICABLE:
                cells.append("  ")
            elif is_done(state["history"], day, habit["id"]):
                cells.append("✓ ")
            elif status == schedule.DONE_THIS_WEEK:
                cells.append("~ ")
            else:
                cells.append("· ")
        print(f"{habit['name'][:9]:<9} " + " ".join(cells))


def cmd_period(store: HabitStore, _: argparse.Namespace) -> None:
    state = store.state
    rows = analytics.all_period_stats(state, store.week_starts_on)
    if not rows:
        print("No habits yet.")
        return
    print(f"{state['viewMode'].capitalize()} of {state['currentDate']}")
    for row in rows:
        flag = "met" if row["met"] else "open"
        print(f"{row['id']:>9} {row['name']} | {row['done']}/{row['target']} ({row['percentage']}%) {flag}")
    print(f"Completion rate: {analytics.completion_rate(state, store.week_starts_on)}%")


def cmd_stats(store: HabitStore, args: argparse.Namespace) -> None:
    summary = analytics.overview(store.state, store.week_starts_on, _target_date(args))
    print(f"Daily progress: {summary['daily_progress']}%")
    print(f"Current streak: {summary['streak']}")
    print(f"Habit score: {summary['score']}")
    for row in summary["habits"]:
        print(f"{row['id']:>9} {row['name']} | {row['total']} check-ins ({row['percentage']}%)")


def _add_habit_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--color", help=f"Display color (e.g. {COLORS[0]})")
    parser.add_argument("--icon", help="Icon name")
    parser.add_argument("--per-week", type=int, help="Times per week (1-7, 7 is daily)")
    parser.add_argument("--days", help="Only on these weekdays (e.g. mon,wed,fri)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Local-first habit tracker")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Add a new habit")
    add.add_argument("name", help="Habit name")
    _add_habit_options(add)
    add.set_defaults(func=cmd_add)

    list_cmd = sub.add_parser("list", help="List habits")
    list_cmd.set_defaults(func=cmd_list)

    edit = sub.add_parser("edit", help="Change a habit")
    edit.add_argument("id", help="Habit id")
    edit.add_argument("--name", help="New habit name")
    _add_habit_options(edit)
    edit.add_argument("--clear-days", action="store_true", help="Switch back to a weekly frequency")
    edit.set_defaults(func=cmd_edit)

    delete = sub.add_parser("delete", help="Delete a habit")
    delete.add_argument("id", help="Habit id")
    delete.set_defaults(func=cmd_delete)

    toggle = sub.add_parser("toggle", help="Check or uncheck a habit for a day")
    toggle.add_argument("id", help="Habit id")
    toggle.add_argument("--date", help="Override date (YYYY-MM-DD)")
    toggle.set_defaults(func=cmd_toggle)

    view = sub.add_parser("view", help="Switch between month and week view")
    view.add_argument("mode", choices=["month", "week"])
    view.set_defaults(func=cmd_view)

    goto = sub.add_parser("goto", help="Move the focused date")
    goto.add_argument("date", nargs="?", help="Date to focus (YYYY-MM-DD), today if omitted")
    goto.add_argument("--prev", action="store_true", help="Previous month")
    goto.add_argument("--next", action="store_true", help="Next month")
    goto.set_defaults(func=cmd_goto)

    theme = sub.add_parser("theme", help="Toggle dark/light theme")
    theme.set_defaults(func=cmd_theme)

    day = sub.add_parser("day", help="Show the habits due on a day")
    day.add_argument("--date", help="Override date (YYYY-MM-DD)")
    day.set_defaults(func=cmd_day)

    week = sub.add_parser("week", help="Week grid of check-ins")
    week.add_argument("--date", help="Override reference date (YYYY-MM-DD)")
    week.set_defaults(func=cmd_week)

    period = sub.add_parser("period", help="Progress for the focused week or month")
    period.set_defaults(func=cmd_period)

    stats = sub.add_parser("stats", help="Streak, score and per-habit totals")
    stats.add_argument("--date", help="Override reference date (YYYY-MM-DD)")
    stats.set_defaults(func=cmd_stats)

    return parser


def main(argv: Optional[List[str]] = None, store: Optional[HabitStore] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if store is None:
        settings = load_settings()
        setup_logging(settings.log_level, settings.log_file)
        store = HabitStore.open(JsonFileStorage(settings.data_dir), settings.week_starts_on)
    args.func(store, args)


if __name__ == "__main__":
    main()
