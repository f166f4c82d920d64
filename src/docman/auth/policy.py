"""Authorization policy — who may do what to whose account.

Learn: Every function here is a pure decision over (actor, target). The
actor is built from the caller's record as it is in the store right now,
not from the token snapshot, so a role change takes effect on the next
request. Services call `authorize()` with a decision and get an
UnauthorizedError when it is a deny.

Rules:
- view profile:        self, or admin
- update profile:      self only
- delete profile:      self, or admin
- list all users:      admin only
- list user documents: any authenticated caller (owner-or-admin when the
                       deployment turns on restrict_document_listing)
"""

import uuid
from dataclasses import dataclass

from docman.errors import UnauthorizedError

ADMIN_ROLE_TITLE = "admin"


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, as far as policy is concerned."""

    id: uuid.UUID
    role_title: str

    def is_admin(self, admin_title: str = ADMIN_ROLE_TITLE) -> bool:
        return self.role_title == admin_title


def can_view_profile(
    actor: Actor, target_id: uuid.UUID, admin_title: str = ADMIN_ROLE_TITLE
) -> bool:
    return actor.id == target_id or actor.is_admin(admin_title)


def can_update_profile(actor: Actor, target_id: uuid.UUID) -> bool:
    return actor.id == target_id


def can_delete_profile(
    actor: Actor, target_id: uuid.UUID, admin_title: str = ADMIN_ROLE_TITLE
) -> bool:
    return actor.id == target_id or actor.is_admin(admin_title)


def can_list_all_users(actor: Actor, admin_title: str = ADMIN_ROLE_TITLE) -> bool:
    return actor.is_admin(admin_title)


def can_list_documents_of(
    actor: Actor,
    owner_id: uuid.UUID,
    restricted: bool = False,
    admin_title: str = ADMIN_ROLE_TITLE,
) -> bool:
    if not restricted:
        return True
    return actor.id == owner_id or actor.is_admin(admin_title)


def authorize(allowed: bool) -> None:
    """Raise UnauthorizedError unless the decision is an allow."""
    if not allowed:
        raise UnauthorizedError()
