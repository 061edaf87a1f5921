# clubhouse/routers/hours_routes.py

from datetime import date, timedelta
from typing import List

from fastapi import APIRouter, Depends

from clubhouse.schemas import OpeningHoursResponse, WeekdayHours
from clubhouse.deps import get_opening_hours
from clubhouse.opening_hours import (
    WeekSchedule,
    day_name,
    format_opening_hours,
    generate_time_slots_for_date,
    is_open,
)

router = APIRouter(
    prefix="/opening-hours",
    tags=["opening-hours"],
)


@router.get("", response_model=OpeningHoursResponse)
def opening_hours(
    on_date: date,
    week: WeekSchedule = Depends(get_opening_hours),
):
    return {
        "date": on_date,
        "day_name": day_name(on_date),
        "is_open": is_open(on_date, week),
        "hours": format_opening_hours(on_date, week),
        "slots": generate_time_slots_for_date(on_date, week),
    }


@router.get("/week", response_model=List[WeekdayHours])
def weekly_hours(week: WeekSchedule = Depends(get_opening_hours)):
    # 2023-01-01 was a Sunday
    sunday = date(2023, 1, 1)
    days = [sunday + timedelta(days=i) for i in range(7)]
    return [{"day_name": day_name(d), "hours": format_opening_hours(d, week)} for d in days]
