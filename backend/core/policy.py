# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Authorization policy – the one place that decides who may do what.

Roles form a strict total order::

    reader (0) < author (1) < admin (2) < super_admin (3)

Every protected API operation calls :func:`authorize` with the acting user
and an :class:`Action`.  The page-path rules at the bottom of the module feed
the edge guard in ``main.py``; that guard only exists to redirect browsers
early and is not relied upon for enforcement.
"""

import enum
from typing import Optional

from core.errors import AuthenticationError, AuthorizationError, ValidationError


class Role(str, enum.Enum):
    READER = "reader"
    AUTHOR = "author"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"

    @property
    def rank(self) -> int:
        return _RANK[self]

    @classmethod
    def parse(cls, value) -> "Role":
        """Coerce a stored/claimed value; anything unknown is a reader."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.READER


_RANK = {
    Role.READER: 0,
    Role.AUTHOR: 1,
    Role.ADMIN: 2,
    Role.SUPER_ADMIN: 3,
}

VALID_ROLES = {r.value for r in Role}


def has_role(subject, required) -> bool:
    """True iff ``rank(subject) >= rank(required)``."""
    return Role.parse(subject).rank >= Role.parse(required).rank


class Action(str, enum.Enum):
    ACCESS_ADMIN = "access_admin"
    CREATE_POST = "create_post"
    READ_POST = "read_post"
    UPDATE_POST = "update_post"
    DELETE_POST = "delete_post"
    MODERATE_COMMENTS = "moderate_comments"
    MANAGE_TAGS = "manage_tags"
    MANAGE_USERS = "manage_users"
    VIEW_STATS = "view_stats"
    VIEW_AUTH_EVENTS = "view_auth_events"


REQUIRED_ROLE = {
    Action.ACCESS_ADMIN: Role.AUTHOR,
    Action.CREATE_POST: Role.AUTHOR,
    Action.READ_POST: Role.AUTHOR,
    Action.UPDATE_POST: Role.AUTHOR,
    Action.DELETE_POST: Role.ADMIN,
    Action.MODERATE_COMMENTS: Role.SUPER_ADMIN,
    Action.MANAGE_TAGS: Role.SUPER_ADMIN,
    Action.MANAGE_USERS: Role.SUPER_ADMIN,
    Action.VIEW_STATS: Role.SUPER_ADMIN,
    Action.VIEW_AUTH_EVENTS: Role.SUPER_ADMIN,
}

# Actions on a single post where an author is limited to their own rows.
_OWNERSHIP_ACTIONS = {Action.READ_POST, Action.UPDATE_POST}


def authorize(user, action: Action, owner_id: Optional[int] = None, check_owner: bool = False):
    """
    Raise unless *user* may perform *action*.  Returns the user so it can be
    used inline.

    * no user                               -> AuthenticationError (401)
    * rank below ``REQUIRED_ROLE[action]``  -> AuthorizationError  (403)
    * author acting on someone else's post  -> AuthorizationError  (403)

    Pass ``check_owner=True`` once the target post is known.  A post with
    no author (``owner_id`` None) then belongs to nobody below admin.
    """
    if user is None:
        raise AuthenticationError()

    role = Role.parse(user.role)
    required = REQUIRED_ROLE[action]
    if not has_role(role, required):
        raise AuthorizationError(
            f"This action requires the {required.value} role",
            reason="insufficient_role",
        )

    if (
        action in _OWNERSHIP_ACTIONS
        and check_owner
        and not has_role(role, Role.ADMIN)
        and owner_id != user.id
    ):
        raise AuthorizationError("Access denied", reason="not_owner")

    return user


def ensure_not_self(user, target_user_id: int) -> None:
    """Nobody may change their own role (prevents accidental self-lockout)."""
    if user.id == target_user_id:
        raise ValidationError("Cannot change your own role")


# ---------------------------------------------------------------------------
# Page-path rules (edge guard)
# ---------------------------------------------------------------------------

LOGIN_PATH = "/admin/login"
PUBLIC_PATHS = (LOGIN_PATH,)
SUPER_ADMIN_PATHS = ("/admin/users", "/admin/settings", "/admin/tags", "/admin/comments")


def required_role_for_path(path: str) -> Optional[Role]:
    """
    Minimum role for a browser page path, or ``None`` when the path is
    public.  Only ``/admin`` pages are protected.
    """
    if not (path == "/admin" or path.startswith("/admin/")):
        return None
    if any(path.startswith(p) for p in PUBLIC_PATHS):
        return None
    if any(path.startswith(p) for p in SUPER_ADMIN_PATHS):
        return Role.SUPER_ADMIN
    return Role.AUTHOR
