# clubhouse/appointment_utils.py

from datetime import datetime, time
from typing import Dict, Iterable, List, Optional


def start_of_day(reference: Optional[datetime] = None) -> datetime:
    reference = reference or datetime.now()
    return datetime.combine(reference.date(), time.min, tzinfo=reference.tzinfo)


def _comparable(schedule: datetime, reference: datetime) -> datetime:
    # Compare naive with naive, aware with aware
    if schedule.tzinfo is None and reference.tzinfo is not None:
        return schedule.replace(tzinfo=reference.tzinfo)
    if schedule.tzinfo is not None and reference.tzinfo is None:
        return schedule.replace(tzinfo=None)
    return schedule


def is_appointment_in_past(appointment, reference: Optional[datetime] = None) -> bool:
    """True if the appointment is before the start of the reference day. No schedule counts as past."""
    schedule = getattr(appointment, "schedule", None)
    if schedule is None:
        return True
    today = start_of_day(reference)
    return _comparable(schedule, today) < today


def filter_future_appointments(appointments: Iterable, reference: Optional[datetime] = None) -> List:
    """Keep appointments from today onwards, in their original order."""
    return [a for a in appointments if not is_appointment_in_past(a, reference)]


def group_appointments_by_time(appointments: Iterable, reference: Optional[datetime] = None) -> Dict[str, List]:
    grouped: Dict[str, List] = {"past": [], "future": []}
    for appointment in appointments:
        key = "past" if is_appointment_in_past(appointment, reference) else "future"
        grouped[key].append(appointment)
    return grouped
