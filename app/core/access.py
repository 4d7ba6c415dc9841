# app/core/access.py
"""
Journal-scoped authorization.

Roles are granted per (user, journal): the same user can own one journal and
only view another, so every check needs the journal id from the route.
`check_access` is a pure function; the grant lookup is passed in.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional, Union

from app.models.journal import JournalRole
from app.schemas.session import SessionData


class DenyReason(str, Enum):
    unauthenticated = "unauthenticated"
    no_access = "no_access"
    insufficient_role = "insufficient_role"


@dataclass(frozen=True)
class Allow:
    role: JournalRole


@dataclass(frozen=True)
class Deny:
    reason: DenyReason


AccessDecision = Union[Allow, Deny]
GrantLookup = Callable[[int, int], Optional[JournalRole]]


# Required role sets, one per kind of operation
ANY_ROLE = frozenset({JournalRole.owner, JournalRole.editor, JournalRole.viewer})
WRITE_ROLES = frozenset({JournalRole.owner, JournalRole.editor})
OWNER_ONLY = frozenset({JournalRole.owner})


def check_access(
    session: Optional[SessionData],
    journal_id: int,
    required_roles: Iterable[JournalRole],
    lookup: GrantLookup,
) -> AccessDecision:
    """Decide whether *session* may act on *journal_id* with one of *required_roles*."""
    if session is None:
        return Deny(DenyReason.unauthenticated)

    role = lookup(journal_id, session.user_id)
    if role is None:
        return Deny(DenyReason.no_access)
    if role not in frozenset(required_roles):
        return Deny(DenyReason.insufficient_role)
    return Allow(role)
