# clubhouse/routers/appointments_routes.py

import logging
from datetime import datetime, timedelta, date, time, timezone
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from clubhouse.db import get_session
from clubhouse.models import Appointment
from clubhouse.schemas import AppointmentCreate, AppointmentGroups, AppointmentPublic
from clubhouse.auth import get_current_user
from clubhouse.appointment_utils import filter_future_appointments, group_appointments_by_time
from clubhouse.deps import get_opening_hours, require_club, to_local
from clubhouse.opening_hours import (
    WeekSchedule,
    format_time_to_12_hour,
    parse_12_hour_time,
    validate_appointment,
)
from clubhouse.permissions import Actor, authorize_mutation

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["appointments"],
)


def appointment_public(appt: Appointment) -> dict:
    return {
        "id": appt.id,
        "schedule": appt.schedule,
        "duration": appt.duration,
        "user_id": appt.user_id,
        "club_id": appt.club_id,
        "start_time": format_time_to_12_hour(appt.schedule.hour, appt.schedule.minute),
    }


def local_now() -> datetime:
    return to_local(datetime.now(timezone.utc))


def resolve_start(appt: AppointmentCreate) -> datetime:
    """Local naive start time from either a timestamp or a date + 12-hour slot."""
    if appt.schedule is not None:
        return to_local(appt.schedule)
    hour, minute = parse_12_hour_time(appt.time)
    return datetime.combine(appt.date, time(hour=hour, minute=minute))


def checked_start(appt: AppointmentCreate, week: WeekSchedule) -> datetime:
    starts_at = resolve_start(appt)

    # 1) Duration bounds, closed day and slot alignment
    validate_appointment(starts_at, appt.duration, week)

    # 2) Prevent booking in the past (local time)
    if starts_at < local_now():
        raise HTTPException(status_code=422, detail="Cannot book an appointment in the past")

    # Overlapping appointments are allowed: members share the layout
    return starts_at


@router.get("/clubs/{club_id}/appointments", response_model=List[AppointmentPublic])
def list_club_appointments(
    club_id: int,
    on_date: Optional[date] = None,
    upcoming: bool = False,
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
):
    require_club(session, current_user, club_id)

    stmt = select(Appointment).where(Appointment.club_id == club_id)

    if on_date is not None:
        day_start_dt = datetime.combine(on_date, datetime.min.time())
        day_end_dt = day_start_dt + timedelta(days=1)
        stmt = stmt.where(Appointment.schedule >= day_start_dt).where(Appointment.schedule < day_end_dt)

    appts = session.exec(stmt.order_by(Appointment.schedule)).all()
    if upcoming:
        appts = filter_future_appointments(appts, local_now())
    return [appointment_public(a) for a in appts]


@router.post("/clubs/{club_id}/appointments", response_model=AppointmentPublic, status_code=201)
def create_appointment(
    club_id: int,
    appt: AppointmentCreate,
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
    week: WeekSchedule = Depends(get_opening_hours),
):
    require_club(session, current_user, club_id)
    starts_at = checked_start(appt, week)

    db_appt = Appointment(
        schedule=starts_at,
        duration=appt.duration,
        user_id=current_user.id,
        club_id=club_id,
    )

    session.add(db_appt)
    session.commit()
    session.refresh(db_appt)  # fills db_appt.id
    return appointment_public(db_appt)


@router.put("/appointments/{appt_id}", response_model=AppointmentPublic)
def update_appointment(
    appt_id: int,
    appt: AppointmentCreate,
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
    week: WeekSchedule = Depends(get_opening_hours),
):
    # 1) Find the appointment and check who may change it
    target = session.get(Appointment, appt_id)
    authorize_mutation(current_user, target, kind="Appointment")

    # 2) Same rules as creation
    target.schedule = checked_start(appt, week)
    target.duration = appt.duration

    session.add(target)
    session.commit()
    session.refresh(target)
    return appointment_public(target)


@router.delete("/appointments/{appt_id}", status_code=204)
def delete_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
):
    target = session.get(Appointment, appt_id)
    authorize_mutation(current_user, target, kind="Appointment")

    session.delete(target)
    session.commit()
    logger.info("User %s deleted appointment %s", current_user.id, appt_id)


@router.get("/me/appointments", response_model=AppointmentGroups)
def list_my_appointments(
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
):
    appts = session.exec(
        select(Appointment)
        .where(Appointment.user_id == current_user.id)
        .order_by(Appointment.schedule)
    ).all()

    grouped = group_appointments_by_time(appts, local_now())
    return {
        "past": [appointment_public(a) for a in grouped["past"]],
        "future": [appointment_public(a) for a in grouped["future"]],
    }
