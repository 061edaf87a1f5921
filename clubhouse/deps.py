# clubhouse/deps.py

from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import HTTPException
from sqlmodel import Session

from .config import settings
from .models import Club
from .opening_hours import DEFAULT_OPENING_HOURS, WeekSchedule
from .permissions import Actor, authorize_club


def get_opening_hours() -> WeekSchedule:
    # Overridden in tests (and for holiday schedules) via app.dependency_overrides
    return DEFAULT_OPENING_HOURS


def to_local(dt: datetime) -> datetime:
    """Aware datetimes are moved to the club's timezone; naive ones are already local."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(ZoneInfo(settings.TIMEZONE)).replace(tzinfo=None)


def get_club_or_404(session: Session, club_id: int) -> Club:
    club = session.get(Club, club_id)
    if club is None:
        raise HTTPException(status_code=404, detail="Club not found")
    return club


def require_club(session: Session, user: Actor, club_id: int) -> Club:
    club = get_club_or_404(session, club_id)
    authorize_club(user, club_id)
    return club
