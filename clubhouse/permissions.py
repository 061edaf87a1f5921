# clubhouse/permissions.py
"""
Permission levels and the checks that gate club-scoped resources.

Nothing here touches storage: callers hand in the already-loaded user
(as an Actor) and resource rows, and every check is re-evaluated per request.

Levels:
  1 Admin       - manages clubs and resources within clubs it can access
  2 Regular     - manages only resources it owns
  3 Super Admin - every club, no membership needed
  4 Limited     - a single assigned club, otherwise treated like Regular
  None          - guest / unauthenticated
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, FrozenSet, Optional

from .errors import ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)


class PermissionLevel(IntEnum):
    ADMIN = 1
    REGULAR = 2
    SUPER_ADMIN = 3
    LIMITED = 4


PERMISSION_LABELS = {
    PermissionLevel.ADMIN: "Admin",
    PermissionLevel.REGULAR: "Regular",
    PermissionLevel.SUPER_ADMIN: "Super Admin",
    PermissionLevel.LIMITED: "Limited",
}
GUEST_LABEL = "Guest"
UNKNOWN_LABEL = "Unknown"


@dataclass(frozen=True)
class Actor:
    id: int
    permission: Optional[int]
    club_ids: FrozenSet[int] = field(default_factory=frozenset)
    email: Optional[str] = None


def coerce_permission(value: Optional[int]) -> Optional[PermissionLevel]:
    """Map a stored integer to a PermissionLevel; unrecognised values give None."""
    if value is None:
        return None
    try:
        return PermissionLevel(value)
    except ValueError:
        logger.warning("Unrecognised permission level %r", value)
        return None


def is_admin_role(permission: Optional[int]) -> bool:
    return permission in (PermissionLevel.ADMIN, PermissionLevel.SUPER_ADMIN)


def is_super_admin_role(permission: Optional[int]) -> bool:
    return permission == PermissionLevel.SUPER_ADMIN


def is_limited_role(permission: Optional[int]) -> bool:
    return permission == PermissionLevel.LIMITED


def permission_label(permission: Optional[int]) -> str:
    if permission is None:
        return GUEST_LABEL
    level = coerce_permission(permission)
    if level is None:
        return UNKNOWN_LABEL
    return PERMISSION_LABELS[level]


def has_access_to_club(user: Actor, club_id: int) -> bool:
    if is_super_admin_role(user.permission):
        return True
    return club_id in user.club_ids


def can_mutate_resource(user: Actor, resource: Any) -> bool:
    """
    Admins (and above) may change any resource; everyone else only their own.

    A missing resource, or one with no owner, belongs to nobody.
    """
    if is_admin_role(user.permission):
        return True
    if resource is None:
        return False
    owner_id = getattr(resource, "user_id", None)
    return owner_id is not None and owner_id == user.id


def can_assign_permission(user: Actor, level: PermissionLevel) -> bool:
    if level == PermissionLevel.SUPER_ADMIN:
        return is_super_admin_role(user.permission)
    return is_admin_role(user.permission)


def can_manage_user(user: Actor, target_club_ids: FrozenSet[int]) -> bool:
    """Admins manage users sharing one of their clubs; super admins manage everyone."""
    if is_super_admin_role(user.permission):
        return True
    if not is_admin_role(user.permission):
        return False
    return bool(user.club_ids & frozenset(target_club_ids))


def authorize_club(user: Actor, club_id: int) -> None:
    if not has_access_to_club(user, club_id):
        logger.info("User %s denied access to club %s", user.id, club_id)
        raise ForbiddenError("You do not have access to this club")


def authorize_admin(user: Actor) -> None:
    if not is_admin_role(user.permission):
        raise ForbiddenError("Admin permission required")


def authorize_mutation(user: Actor, resource: Any, kind: str = "Resource") -> None:
    if resource is None:
        raise NotFoundError(f"{kind} not found")

    club_id = getattr(resource, "club_id", None)
    if club_id is not None:
        authorize_club(user, club_id)

    if not can_mutate_resource(user, resource):
        logger.info(
            "User %s denied changing %s %s owned by %s",
            user.id, kind.lower(), getattr(resource, "id", None), getattr(resource, "user_id", None),
        )
        raise ForbiddenError(f"You can only change a {kind.lower()} you own")
