# clubhouse/evenings.py
"""Friday evening attendance: who is coming in from the evening start hour onwards."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional

FRIDAY = 4  # date.weekday()


@dataclass
class EveningAttendance:
    date: date
    attendees: List[int]
    is_user_attending: bool = False
    user_appointment_id: Optional[int] = None


def should_show_friday_evening(club_id: Optional[int], configured_club_id: Optional[int]) -> bool:
    if not club_id or configured_club_id is None:
        return False
    return club_id == configured_club_id


def next_fridays(count: int, today: Optional[date] = None) -> List[date]:
    """The next `count` Fridays, starting with today when today is a Friday."""
    today = today or date.today()
    first = today + timedelta(days=(FRIDAY - today.weekday()) % 7)
    return [first + timedelta(weeks=i) for i in range(count)]


def signup_start(day: date, hour: int) -> datetime:
    return datetime.combine(day, time(hour=hour))


def evening_attendance(
    appointments: Iterable,
    day: date,
    start_hour: int,
    user_id: Optional[int] = None,
) -> EveningAttendance:
    evening = [
        a for a in appointments
        if a.schedule is not None and a.schedule.date() == day and a.schedule.hour >= start_hour
    ]

    attendees = sorted({a.user_id for a in evening if a.user_id is not None})
    mine = [a for a in evening if user_id is not None and a.user_id == user_id]

    return EveningAttendance(
        date=day,
        attendees=attendees,
        is_user_attending=bool(mine),
        user_appointment_id=mine[0].id if mine else None,
    )
