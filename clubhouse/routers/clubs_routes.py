# clubhouse/routers/clubs_routes.py

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from clubhouse.db import get_session
from clubhouse.models import Club, ClubMembership, User
from clubhouse.schemas import ClubCreate, ClubPublic, MembershipCreate, UserPublic
from clubhouse.auth import club_ids_for, get_current_user
from clubhouse.deps import require_club
from clubhouse.errors import ForbiddenError
from clubhouse.permissions import Actor, authorize_admin, is_super_admin_role
from clubhouse.routers.users_routes import user_public

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/clubs",
    tags=["clubs"],
)


@router.get("", response_model=List[ClubPublic])
def list_clubs(
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
):
    stmt = select(Club).order_by(Club.name)
    if not is_super_admin_role(current_user.permission):
        stmt = stmt.where(Club.id.in_(list(current_user.club_ids)))
    return session.exec(stmt).all()


@router.post("", response_model=ClubPublic, status_code=201)
def create_club(
    club: ClubCreate,
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
):
    if not is_super_admin_role(current_user.permission):
        raise ForbiddenError("Only a super admin can create clubs")

    db_club = Club(name=club.name)
    session.add(db_club)
    session.commit()
    session.refresh(db_club)
    logger.info("User %s created club %s", current_user.id, db_club.id)
    return db_club


@router.put("/{club_id}", response_model=ClubPublic)
def update_club(
    club_id: int,
    club: ClubCreate,
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
):
    db_club = require_club(session, current_user, club_id)
    authorize_admin(current_user)

    db_club.name = club.name
    session.add(db_club)
    session.commit()
    session.refresh(db_club)
    return db_club


@router.get("/{club_id}/members", response_model=List[UserPublic])
def list_members(
    club_id: int,
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
):
    require_club(session, current_user, club_id)

    users = session.exec(
        select(User)
        .join(ClubMembership, ClubMembership.user_id == User.id)
        .where(ClubMembership.club_id == club_id)
        .order_by(User.email)
    ).all()
    return [
        user_public(u.id, u.email, u.permission, club_ids_for(session, u.id))
        for u in users
    ]


@router.post("/{club_id}/members", response_model=UserPublic, status_code=201)
def assign_member(
    club_id: int,
    membership: MembershipCreate,
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
):
    require_club(session, current_user, club_id)
    authorize_admin(current_user)

    user = session.get(User, membership.user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    # Assigning twice is a no-op
    if session.get(ClubMembership, (membership.user_id, club_id)) is None:
        session.add(ClubMembership(user_id=membership.user_id, club_id=club_id))
        session.commit()
        logger.info("User %s assigned user %s to club %s", current_user.id, user.id, club_id)

    return user_public(user.id, user.email, user.permission, club_ids_for(session, user.id))
