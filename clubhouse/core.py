# clubhouse/core.py

from typing import Optional, Type, Union

from sqlmodel import Session, select

from .errors import NumberInUseError
from .models import Address, Consist

NumberedModel = Type[Union[Address, Consist]]


def number_in_use(
    session: Session,
    model: NumberedModel,
    club_id: int,
    number: int,
    exclude_id: Optional[int] = None,
) -> bool:
    """True if another in-use row of `model` in the club already carries `number`."""
    stmt = (
        select(model)
        .where(model.club_id == club_id)
        .where(model.number == number)
        .where(model.in_use == True)  # noqa: E712
    )
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    return session.exec(stmt).first() is not None


def ensure_number_available(
    session: Session,
    model: NumberedModel,
    club_id: int,
    number: int,
    in_use: bool,
    exclude_id: Optional[int] = None,
) -> None:
    # Rows that are not in use never clash
    if in_use and number_in_use(session, model, club_id, number, exclude_id):
        raise NumberInUseError(f"{model.__name__} number {number} is in use")
