# clubhouse/routers/users_routes.py

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from clubhouse.db import get_session
from clubhouse.models import User
from clubhouse.schemas import PermissionUpdate, UserCreate, UserPublic
from clubhouse.auth import club_ids_for, get_current_user, hash_password
from clubhouse.errors import ForbiddenError
from clubhouse.permissions import (
    Actor,
    PermissionLevel,
    authorize_admin,
    can_assign_permission,
    can_manage_user,
    permission_label,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["users"],
)


def user_public(user_id: int, email: str, permission, club_ids) -> dict:
    return {
        "id": user_id,
        "email": email,
        "permission": permission,
        "permission_label": permission_label(permission),
        "club_ids": sorted(club_ids),
    }


@router.get("/me", response_model=UserPublic)
def me(current_user: Actor = Depends(get_current_user)):
    return user_public(current_user.id, current_user.email, current_user.permission, current_user.club_ids)


@router.post("/users", status_code=201, response_model=UserPublic)
def create_user(
    user: UserCreate,
    session: Session = Depends(get_session),
):
    # 1) Check if email already exists
    existing = session.exec(
        select(User).where(User.email == user.email)
    ).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Email already registered")

    # 2) Every self-registered user starts as Regular
    db_user = User(
        email=user.email,
        password_hash=hash_password(user.password),
        permission=int(PermissionLevel.REGULAR),
    )

    session.add(db_user)
    session.commit()
    session.refresh(db_user)

    return user_public(db_user.id, db_user.email, db_user.permission, [])


@router.get("/users", response_model=List[UserPublic])
def list_users(
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
):
    authorize_admin(current_user)

    users = session.exec(select(User).order_by(User.email)).all()
    listed = []
    for u in users:
        club_ids = club_ids_for(session, u.id)
        # Admins only see themselves and members of their own clubs
        if u.id == current_user.id or can_manage_user(current_user, club_ids):
            listed.append(user_public(u.id, u.email, u.permission, club_ids))
    return listed


@router.put("/users/{user_id}/permission", response_model=UserPublic)
def update_permission(
    user_id: int,
    update: PermissionUpdate,
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
):
    if not can_assign_permission(current_user, update.permission):
        raise ForbiddenError("You cannot assign that permission level")

    target = session.get(User, user_id)
    if target is None:
        raise HTTPException(status_code=404, detail="User not found")

    target_club_ids = club_ids_for(session, target.id)
    if not can_manage_user(current_user, target_club_ids):
        logger.info("User %s denied managing user %s outside their clubs", current_user.id, target.id)
        raise ForbiddenError("You can only manage users in your clubs")

    # Only a super admin may change another super admin
    if target.permission == PermissionLevel.SUPER_ADMIN and not can_assign_permission(
        current_user, PermissionLevel.SUPER_ADMIN
    ):
        raise ForbiddenError("You cannot change a super admin")

    logger.info(
        "User %s changed permission of user %s from %s to %s",
        current_user.id, target.id, target.permission, int(update.permission),
    )
    target.permission = int(update.permission)
    session.add(target)
    session.commit()
    session.refresh(target)

    return user_public(target.id, target.email, target.permission, target_club_ids)
