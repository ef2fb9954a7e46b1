import calendar
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

DATE_FORMAT = "%Y-%m-%d"


def today_local() -> date:
    return datetime.now().date()


def parse_date(value: str) -> date:
    return datetime.strptime(value, DATE_FORMAT).date()


def format_date(value: date) -> str:
    return value.isoformat()


def is_valid_date_key(value: object) -> bool:
    if not isinstance(value, str):
        return False
    try:
        return format_date(parse_date(value)) == value
    except ValueError:
        return False


def weekday_index(value: date) -> int:
    """Weekday with Sunday as 0 and Saturday as 6."""
    return (value.weekday() + 1) % 7


def date_range(start_date: date, end_date: date) -> List[date]:
    if end_date < start_date:
        return []
    span = (end_date - start_date).days
    return [start_date + timedelta(days=offset) for offset in range(span + 1)]


def week_window(day: date, week_starts_on: int) -> Tuple[date, date]:
    delta = (weekday_index(day) - week_starts_on) % 7
    start_date = day - timedelta(days=delta)
    return start_date, start_date + timedelta(days=6)


def days_of_week(day: date, week_starts_on: int) -> List[date]:
    start_date, end_date = week_window(day, week_starts_on)
    return date_range(start_date, end_date)


def days_of_month(day: date) -> List[date]:
    last = calendar.monthrange(day.year, day.month)[1]
    return date_range(day.replace(day=1), day.replace(day=last))


def shift_month(day: date, months: int) -> date:
    """First day of the month `months` away from the month containing `day`."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def is_today(day: date, today: Optional[date] = None) -> bool:
    return day == (today or today_local())


def is_future(day: date, today: Optional[date] = None) -> bool:
    return day > (today or today_local())
