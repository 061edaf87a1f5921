# clubhouse/opening_hours.py
"""
Opening hours and appointment time slots.

Everything here is a pure function of a calendar date and a week table.
The table is passed in (``week=``) so callers can swap in an alternate
schedule, e.g. for holidays, without touching module state.

Weekdays are indexed Sunday-first: 0 = Sunday .. 6 = Saturday.
Slot strings use the 12-hour ``H:MM AM`` form exchanged with the UI.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from types import MappingProxyType
from typing import List, Mapping, NamedTuple

from .errors import ClosedDayError, DurationError, FormatError, ScheduleError

MIN_APPOINTMENT_DURATION = 30  # minutes
MAX_APPOINTMENT_DURATION = 480  # 8 hours
TIME_SLOT_INTERVAL = 30  # minutes

DAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

_TIME_RE = re.compile(r"(\d{1,2}):(\d{2})\s*(AM|PM)", re.IGNORECASE)


class TimeOfDay(NamedTuple):
    hour: int
    minute: int


@dataclass(frozen=True)
class DaySchedule:
    closed: bool
    open: TimeOfDay
    close: TimeOfDay


WeekSchedule = Mapping[int, DaySchedule]


def week_schedule(days: Mapping[int, DaySchedule]) -> WeekSchedule:
    """Build a read-only week table; exactly one entry per weekday 0..6."""
    if set(days) != set(range(7)):
        raise ValueError("A week schedule needs exactly one entry for each weekday 0-6")
    return MappingProxyType(dict(days))


def _open_day(open_hour: int, open_minute: int, close_hour: int, close_minute: int) -> DaySchedule:
    return DaySchedule(
        closed=False,
        open=TimeOfDay(open_hour, open_minute),
        close=TimeOfDay(close_hour, close_minute),
    )


CLOSED_DAY = DaySchedule(closed=True, open=TimeOfDay(0, 0), close=TimeOfDay(0, 0))

DEFAULT_OPENING_HOURS: WeekSchedule = week_schedule({
    0: CLOSED_DAY,
    1: _open_day(9, 0, 21, 30),
    2: _open_day(9, 0, 21, 30),
    3: _open_day(9, 0, 21, 30),
    4: _open_day(9, 0, 21, 30),
    5: _open_day(9, 0, 21, 30),
    6: _open_day(10, 0, 16, 30),
})


def weekday_index(day: date) -> int:
    # date.weekday() is Monday-first
    return (day.weekday() + 1) % 7


def opening_hours_for_date(day: date, week: WeekSchedule = DEFAULT_OPENING_HOURS) -> DaySchedule:
    return week[weekday_index(day)]


def is_open(day: date, week: WeekSchedule = DEFAULT_OPENING_HOURS) -> bool:
    return not opening_hours_for_date(day, week).closed


def day_name(day: date) -> str:
    return DAY_NAMES[weekday_index(day)]


def format_time_to_12_hour(hour: int, minute: int) -> str:
    """
    Format a 24-hour time as ``H:MM AM``.

    0 -> 12 AM, 12 -> 12 PM, 13..23 -> 1..11 PM. No leading zero on the hour.
    """
    if not (0 <= hour <= 23) or not (0 <= minute <= 59):
        raise FormatError(f"Invalid time {hour}:{minute}")

    period = "PM" if hour >= 12 else "AM"
    if hour == 0:
        display_hour = 12
    elif hour > 12:
        display_hour = hour - 12
    else:
        display_hour = hour
    return f"{display_hour}:{minute:02d} {period}"


def parse_12_hour_time(text: str) -> TimeOfDay:
    """
    Parse ``H:MM AM|PM`` back to 24-hour values.

    Raises FormatError unless the whole string matches. 12 AM is hour 0,
    12 PM stays 12, other PM hours add 12.
    """
    match = _TIME_RE.fullmatch(text.strip()) if isinstance(text, str) else None
    if match is None:
        raise FormatError(f"Invalid time format: {text!r}")

    hour = int(match.group(1))
    minute = int(match.group(2))
    period = match.group(3).upper()

    if not (1 <= hour <= 12) or minute > 59:
        raise FormatError(f"Invalid time format: {text!r}")

    if period == "PM" and hour != 12:
        hour += 12
    elif period == "AM" and hour == 12:
        hour = 0

    return TimeOfDay(hour, minute)


def format_opening_hours(day: date, week: WeekSchedule = DEFAULT_OPENING_HOURS) -> str:
    schedule = opening_hours_for_date(day, week)
    if schedule.closed:
        return "Closed"
    return f"{format_time_to_12_hour(*schedule.open)} - {format_time_to_12_hour(*schedule.close)}"


def generate_time_slots_for_date(
    day: date,
    week: WeekSchedule = DEFAULT_OPENING_HOURS,
    interval: int = TIME_SLOT_INTERVAL,
) -> List[str]:
    """
    Every start time from open to close, inclusive, ``interval`` minutes apart.

    A closed day yields an empty list.
    """
    schedule = opening_hours_for_date(day, week)
    if schedule.closed:
        return []

    slots = []
    current = schedule.open.hour * 60 + schedule.open.minute
    end = schedule.close.hour * 60 + schedule.close.minute
    while current <= end:
        hour, minute = divmod(current, 60)
        slots.append(format_time_to_12_hour(hour, minute))
        current += interval
    return slots


def validate_duration(minutes: int) -> int:
    if not (MIN_APPOINTMENT_DURATION <= minutes <= MAX_APPOINTMENT_DURATION):
        raise DurationError(
            f"Duration must be between {MIN_APPOINTMENT_DURATION} and {MAX_APPOINTMENT_DURATION} minutes"
        )
    if minutes % TIME_SLOT_INTERVAL != 0:
        raise DurationError(f"Duration must be in {TIME_SLOT_INTERVAL}-minute increments")
    return minutes


def validate_appointment_start(starts_at: datetime, week: WeekSchedule = DEFAULT_OPENING_HOURS) -> None:
    if not is_open(starts_at, week):
        raise ClosedDayError(f"Closed on {day_name(starts_at)}")

    if starts_at.second or starts_at.microsecond:
        raise ScheduleError()
    if format_time_to_12_hour(starts_at.hour, starts_at.minute) not in generate_time_slots_for_date(starts_at, week):
        raise ScheduleError(
            f"Appointment must start on a {TIME_SLOT_INTERVAL}-minute slot within "
            f"{format_opening_hours(starts_at, week)}"
        )


def validate_appointment(starts_at: datetime, duration: int, week: WeekSchedule = DEFAULT_OPENING_HOURS) -> None:
    validate_duration(duration)
    validate_appointment_start(starts_at, week)
