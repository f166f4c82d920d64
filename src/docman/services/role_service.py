"""Role service — resolve role titles, provision roles out-of-band.

Learn: Requests carry a role *title*; storage holds a reference. resolve()
is the single place that turns one into the other, and it fails loudly
when the title is unknown instead of creating a user with no role.

Accounts never create roles. create_role() is only reachable from the
operator CLI (and test seeding).
"""

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from docman.db.models import Role
from docman.errors import DuplicateRoleError, RoleNotFoundError

logger = structlog.get_logger()


class RoleService:
    """Lookup and provisioning for roles."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_title(self, title: str) -> Role | None:
        result = await self.db.execute(select(Role).where(Role.title == title))
        return result.scalars().first()

    async def resolve(self, title: str) -> Role:
        role = await self.get_by_title(title)
        if not role:
            raise RoleNotFoundError(f"Role '{title}' not found")
        return role

    async def create_role(self, title: str, access_level: int = 0) -> Role:
        role = Role(title=title, access_level=access_level)
        self.db.add(role)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateRoleError(f"The Role '{title}' already exists")
        logger.info("role.created", title=title, access_level=access_level)
        return role

    async def list_roles(self) -> list[Role]:
        result = await self.db.execute(
            select(Role).order_by(Role.access_level, Role.title)
        )
        return list(result.scalars().all())
