# clubhouse/routers/addresses_routes.py

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from clubhouse.db import get_session
from clubhouse.models import Address
from clubhouse.schemas import AddressCreate, AddressPublic, AddressUpdate
from clubhouse.auth import get_current_user
from clubhouse.core import ensure_number_available
from clubhouse.deps import require_club
from clubhouse.errors import ForbiddenError
from clubhouse.permissions import Actor, authorize_mutation, is_admin_role

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["addresses"],
)


def resolve_owner(current_user: Actor, requested: Optional[int]) -> int:
    """Non-admins can only create resources for themselves."""
    if requested is None or requested == current_user.id:
        return current_user.id
    if not is_admin_role(current_user.permission):
        raise ForbiddenError("Only an admin can assign a resource to another user")
    return requested


@router.get("/clubs/{club_id}/addresses", response_model=List[AddressPublic])
def list_addresses(
    club_id: int,
    in_use: Optional[bool] = None,
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
):
    require_club(session, current_user, club_id)

    stmt = select(Address).where(Address.club_id == club_id)
    if in_use is not None:
        stmt = stmt.where(Address.in_use == in_use)
    return session.exec(stmt.order_by(Address.number)).all()


@router.post("/clubs/{club_id}/addresses", response_model=AddressPublic, status_code=201)
def create_address(
    club_id: int,
    address: AddressCreate,
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
):
    require_club(session, current_user, club_id)
    owner_id = resolve_owner(current_user, address.user_id)

    ensure_number_available(session, Address, club_id, address.number, address.in_use)

    db_address = Address(
        number=address.number,
        description=address.description,
        in_use=address.in_use,
        user_id=owner_id,
        club_id=club_id,
    )
    session.add(db_address)
    session.commit()
    session.refresh(db_address)
    return db_address


@router.put("/addresses/{address_id}", response_model=AddressPublic)
def update_address(
    address_id: int,
    address: AddressUpdate,
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
):
    target = session.get(Address, address_id)
    authorize_mutation(current_user, target, kind="Address")

    ensure_number_available(session, Address, target.club_id, address.number, address.in_use, exclude_id=target.id)

    target.number = address.number
    target.description = address.description
    target.in_use = address.in_use
    session.add(target)
    session.commit()
    session.refresh(target)
    return target


@router.delete("/addresses/{address_id}", status_code=204)
def delete_address(
    address_id: int,
    session: Session = Depends(get_session),
    current_user: Actor = Depends(get_current_user),
):
    target = session.get(Address, address_id)
    authorize_mutation(current_user, target, kind="Address")

    session.delete(target)
    session.commit()
    logger.info("User %s deleted address %s", current_user.id, address_id)
