# clubhouse/routers/consists_routes.py

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from clubhouse.db import get_session
from clubhouse.models import Consist
from clubhouse.schemas import ConsistCreate, ConsistPublic, ConsistUpdate
from clubhouse.auth import get_current_user
from clubhouse.core import ensure_number_available
from clubhouse.deps import require_club
from clubhouse.permissions import Actor, authorize_mutation
from clubhouse.routers.addresses_routes import resolve_owner

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["consists"],
)


@router.get("/clubs/{club_id}/consists", response_model=List[ConsistPublic])
def list_consists(
    club_id: int,
    in_use: Optional[bool] = None,
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
):
    require_club(session, current_user, club_id)

    stmt = select(Consist).where(Consist.club_id == club_id)
    if in_use is not None:
        stmt = stmt.where(Consist.in_use == in_use)
    return session.exec(stmt.order_by(Consist.number)).all()


@router.post("/clubs/{club_id}/consists", response_model=ConsistPublic, status_code=201)
def create_consist(
    club_id: int,
    consist: ConsistCreate,
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
):
    require_club(session, current_user, club_id)
    owner_id = resolve_owner(current_user, consist.user_id)

    ensure_number_available(session, Consist, club_id, consist.number, consist.in_use)

    db_consist = Consist(
        number=consist.number,
        in_use=consist.in_use,
        user_id=owner_id,
        club_id=club_id,
    )
    session.add(db_consist)
    session.commit()
    session.refresh(db_consist)
    return db_consist


@router.put("/consists/{consist_id}", response_model=ConsistPublic)
def update_consist(
    consist_id: int,
    consist: ConsistUpdate,
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
):
    target = session.get(Consist, consist_id)
    authorize_mutation(current_user, target, kind="Consist")

    ensure_number_available(session, Consist, target.club_id, consist.number, consist.in_use, exclude_id=target.id)

    target.number = consist.number
    target.in_use = consist.in_use
    session.add(target)
    session.commit()
    session.refresh(target)
    return target


@router.delete("/consists/{consist_id}", status_code=204)
def delete_consist(
    consist_id: int,
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
):
    target = session.get(Consist, consist_id)
    authorize_mutation(current_user, target, kind="Consist")

    session.delete(target)
    session.commit()
    logger.info("User %s deleted consist %s", current_user.id, consist_id)
