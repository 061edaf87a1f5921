# clubhouse/routers/evenings_routes.py

import logging
from datetime import date, datetime, timedelta
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from clubhouse.config import settings
from clubhouse.db import get_session
from clubhouse.models import Appointment
from clubhouse.schemas import AppointmentPublic, FridayEvening
from clubhouse.auth import get_current_user
from clubhouse.deps import get_opening_hours, require_club
from clubhouse.evenings import FRIDAY, evening_attendance, next_fridays, should_show_friday_evening, signup_start
from clubhouse.opening_hours import WeekSchedule, validate_appointment
from clubhouse.permissions import Actor
from clubhouse.routers.appointments_routes import appointment_public, local_now

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/clubs/{club_id}/friday-evenings",
    tags=["friday-evenings"],
)


def require_friday_evenings(club_id: int):
    if not should_show_friday_evening(club_id, settings.FRIDAY_EVENING_CLUB_ID):
        raise HTTPException(status_code=404, detail="Friday evenings are not enabled for this club")


def appointments_between(session: Session, club_id: int, first: date, last: date) -> List[Appointment]:
    start = datetime.combine(first, datetime.min.time())
    end = datetime.combine(last, datetime.min.time()) + timedelta(days=1)
    return session.exec(
        select(Appointment)
        .where(Appointment.club_id == club_id)
        .where(Appointment.schedule >= start)
        .where(Appointment.schedule < end)
    ).all()


@router.get("", response_model=List[FridayEvening])
def list_friday_evenings(
    club_id: int,
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
):
    require_club(session, current_user, club_id)
    require_friday_evenings(club_id)

    fridays = next_fridays(settings.FRIDAYS_TO_SHOW, local_now().date())
    appts = appointments_between(session, club_id, fridays[0], fridays[-1])

    evenings = []
    for friday in fridays:
        attendance = evening_attendance(appts, friday, settings.FRIDAY_EVENING_START_HOUR, current_user.id)
        evenings.append({
            "date": attendance.date,
            "attendees": attendance.attendees,
            "attendee_count": len(attendance.attendees),
            "enough_attendees": len(attendance.attendees) >= settings.FRIDAY_MIN_ATTENDANCE,
            "is_user_attending": attendance.is_user_attending,
            "user_appointment_id": attendance.user_appointment_id,
        })
    return evenings


@router.post("/{friday}/signup", response_model=AppointmentPublic, status_code=201)
def sign_up_for_friday(
    club_id: int,
    friday: date,
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
    week: WeekSchedule = Depends(get_opening_hours),
):
    require_club(session, current_user, club_id)
    require_friday_evenings(club_id)

    if friday.weekday() != FRIDAY:
        raise HTTPException(status_code=422, detail="Date must be a Friday")

    starts_at = signup_start(friday, settings.FRIDAY_SIGNUP_START_HOUR)
    if starts_at < local_now():
        raise HTTPException(status_code=422, detail="Cannot sign up for a past Friday")
    validate_appointment(starts_at, settings.FRIDAY_SIGNUP_DURATION_MINUTES, week)

    appts = appointments_between(session, club_id, friday, friday)
    attendance = evening_attendance(appts, friday, settings.FRIDAY_EVENING_START_HOUR, current_user.id)
    if attendance.is_user_attending:
        raise HTTPException(status_code=409, detail="Already signed up for this Friday")

    db_appt = Appointment(
        schedule=starts_at,
        duration=settings.FRIDAY_SIGNUP_DURATION_MINUTES,
        user_id=current_user.id,
        club_id=club_id,
    )
    session.add(db_appt)
    session.commit()
    session.refresh(db_appt)
    logger.info("User %s signed up for Friday %s in club %s", current_user.id, friday, club_id)
    return appointment_public(db_appt)
