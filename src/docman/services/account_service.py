"""Account service — signup, login, logout, and profile management.

Learn: Service layer separates business logic from HTTP routing.
API routes call services, services call the database.

Account lifecycle:
    Anonymous → Registered (signup) → LoggedIn (login)
              → LoggedOut ≡ Registered (logout) → Deleted (delete, terminal)

Signup checks run in a fixed order and stop at the first failure:
validation → duplicate check → role resolution → create. The duplicate
pre-check gives the friendly error; the unique indexes on username and
email are what actually stop two racing signups, and an IntegrityError
on commit is reported as the same duplicate error.

Every protected operation reloads the caller from the store and builds
the policy Actor from that fresh record.
"""

import asyncio
import uuid

import structlog
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from docman.auth.dependencies import CurrentIdentity
from docman.auth.password import hash_password, verify_password
from docman.auth.policy import (
    Actor,
    authorize,
    can_delete_profile,
    can_list_all_users,
    can_list_documents_of,
    can_update_profile,
    can_view_profile,
)
from docman.auth.tokens import issue_token
from docman.config import Settings
from docman.db.models import Document, User
from docman.errors import (
    AuthenticationFailedError,
    DuplicateAccountError,
    NotFoundError,
    ValidationError,
)
from docman.schemas.user import LoginRequest, SignupRequest, UserRead, UserUpdate
from docman.services.role_service import RoleService

logger = structlog.get_logger()

MISSING_FIELDS_MESSAGE = (
    "Please provide the username, firstname, lastname, email, and password values"
)
LOGOUT_MESSAGE = "Successfully logged out"


def _clean(value: str | None) -> str:
    return (value or "").strip()


class AccountService:
    """Business logic for user accounts."""

    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings
        self.roles = RoleService(db)

    # ─── Lookups ────────────────────────────────────────

    async def get_user(self, user_id: uuid.UUID) -> User | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalars().first()

    async def get_by_username(self, username: str) -> User | None:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalars().first()

    async def find_existing(self, username: str, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where(or_(User.username == username, User.email == email))
        )
        return result.scalars().first()

    async def current_user(self, identity: CurrentIdentity) -> tuple[User, Actor]:
        """Reload the caller; a token for a vanished user is rejected."""
        user = await self.get_user(identity.user_id)
        if not user:
            raise AuthenticationFailedError("Failed to authenticate token.")
        return user, Actor(id=user.id, role_title=user.role.title)

    # ─── Signup ─────────────────────────────────────────

    async def signup(self, body: SignupRequest) -> User:
        username = _clean(body.username)
        first_name = _clean(body.firstname)
        last_name = _clean(body.lastname)
        email = _clean(body.email).lower()
        password = body.password or ""
        if not all([username, first_name, last_name, email, password]):
            raise ValidationError(MISSING_FIELDS_MESSAGE)

        role_title = _clean(body.role) or self.settings.default_role_title

        if await self.find_existing(username, email):
            raise DuplicateAccountError()

        role = await self.roles.resolve(role_title)

        password_hash = await asyncio.to_thread(
            hash_password, password, self.settings.bcrypt_rounds
        )
        user = User(
            username=username,
            email=email,
            first_name=first_name,
            last_name=last_name,
            password_hash=password_hash,
            role_id=role.id,
            role=role,
            logged_in=False,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.info("account.signup_conflict", username=username)
            raise DuplicateAccountError()

        logger.info("account.signup", user_id=str(user.id), role=role.title)
        return user

    # ─── Login / logout ─────────────────────────────────

    async def login(self, body: LoginRequest) -> tuple[User, str]:
        """Check credentials, flag the user as logged in, issue a token."""
        user = await self.get_by_username(_clean(body.username))
        if not user:
            logger.info("account.login_failed", reason="not_found")
            raise NotFoundError("User not found.", status_code=401)

        matches = bool(body.password) and await asyncio.to_thread(
            verify_password, body.password, user.password_hash
        )
        if not matches:
            logger.info("account.login_failed", reason="bad_password", user_id=str(user.id))
            raise AuthenticationFailedError("Authentication failed. Wrong password.")

        user.logged_in = True
        await self.db.commit()

        snapshot = UserRead.from_user(user).model_dump(mode="json")
        token = issue_token(
            snapshot,
            self.settings.jwt_secret,
            self.settings.token_ttl_seconds,
            algorithm=self.settings.jwt_algorithm,
        )
        logger.info("account.login", user_id=str(user.id))
        return user, token

    async def logout(self, identity: CurrentIdentity) -> str:
        user, _ = await self.current_user(identity)
        user.logged_in = False
        await self.db.commit()
        logger.info("account.logout", user_id=str(user.id))
        return LOGOUT_MESSAGE

    # ─── Profiles ───────────────────────────────────────

    async def get_profile(self, identity: CurrentIdentity, target_id: uuid.UUID) -> User:
        caller, actor = await self.current_user(identity)
        authorize(can_view_profile(actor, target_id, self.settings.admin_role_title))
        user = caller if caller.id == target_id else await self.get_user(target_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def update_profile(
        self, identity: CurrentIdentity, target_id: uuid.UUID, body: UserUpdate
    ) -> User:
        """Partial update of the caller's own profile.

        firstname/lastname map onto the nested name; only fields present
        in the body are touched.
        """
        user, actor = await self.current_user(identity)
        authorize(can_update_profile(actor, target_id))

        changes = body.model_dump(exclude_unset=True, exclude_none=True)
        text_fields = {
            "username": "username",
            "firstname": "first_name",
            "lastname": "last_name",
            "email": "email",
        }
        for field, column in text_fields.items():
            if field not in changes:
                continue
            value = _clean(changes[field])
            if not value:
                raise ValidationError(f"The {field} value cannot be empty")
            if field == "email":
                value = value.lower()
            setattr(user, column, value)

        if "password" in changes:
            if not changes["password"]:
                raise ValidationError("The password value cannot be empty")
            user.password_hash = await asyncio.to_thread(
                hash_password, changes["password"], self.settings.bcrypt_rounds
            )

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateAccountError()

        logger.info("account.updated", user_id=str(user.id), fields=sorted(changes))
        return user

    async def delete_profile(self, identity: CurrentIdentity, target_id: uuid.UUID) -> None:
        caller, actor = await self.current_user(identity)
        authorize(can_delete_profile(actor, target_id, self.settings.admin_role_title))
        user = caller if caller.id == target_id else await self.get_user(target_id)
        if not user:
            raise NotFoundError("User not found")

        await self.db.delete(user)
        await self.db.commit()
        logger.info("account.deleted", user_id=str(target_id), by=str(actor.id))

    # ─── Listings ───────────────────────────────────────

    async def list_users(self, identity: CurrentIdentity) -> list[User]:
        """All users in creation order (admin only)."""
        _, actor = await self.current_user(identity)
        authorize(can_list_all_users(actor, self.settings.admin_role_title))
        result = await self.db.execute(
            select(User).order_by(User.created_at, User.id)
        )
        return list(result.scalars().all())

    async def list_documents_of(
        self, identity: CurrentIdentity, owner_id: uuid.UUID
    ) -> list[Document]:
        _, actor = await self.current_user(identity)
        authorize(
            can_list_documents_of(
                actor,
                owner_id,
                restricted=self.settings.restrict_document_listing,
                admin_title=self.settings.admin_role_title,
            )
        )
        result = await self.db.execute(
            select(Document)
            .where(Document.owner_id == owner_id)
            .order_by(Document.date_created.desc())
        )
        return list(result.scalars().all())
