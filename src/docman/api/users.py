"""User API — signup, login/logout, profiles, listings.

Learn: Routes for the account lifecycle:
- POST   /users                → signup (open)
- POST   /users/login          → username/password → {user, token} (open)
- POST   /users/logout         → clear the logged-in flag
- GET    /users                → every user (admin only)
- GET    /users/:id            → a profile (self or admin)
- PUT    /users/:id            → update own profile
- DELETE /users/:id            → delete profile (self or admin)
- GET    /users/:id/documents  → documents owned by a user

Protected routes take the identity from the auth gate. Domain errors
raised by the service are rendered by the app-level handler, so routes
only deal with the happy path.
"""

import uuid

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from docman.auth.dependencies import CurrentIdentity, get_current_identity
from docman.db.engine import get_db
from docman.schemas.document import DocumentRead
from docman.schemas.user import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    SignupRequest,
    UserRead,
    UserUpdate,
)
from docman.services.account_service import AccountService

router = APIRouter(prefix="/users")


def _svc(request: Request, db: AsyncSession = Depends(get_db)) -> AccountService:
    return AccountService(db, request.app.state.settings)


# ─── Signup / login / logout ────────────────────────────


@router.post("", response_model=UserRead, status_code=201)
async def signup(body: SignupRequest, svc: AccountService = Depends(_svc)):
    """Create a new account. Role defaults to the configured default title."""
    user = await svc.signup(body)
    return UserRead.from_user(user)


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, svc: AccountService = Depends(_svc)):
    user, token = await svc.login(body)
    return LoginResponse(user=UserRead.from_user(user), token=token)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: AccountService = Depends(_svc),
):
    message = await svc.logout(identity)
    return MessageResponse(message=message)


# ─── Listing ────────────────────────────────────────────


@router.get("", response_model=list[UserRead])
async def list_users(
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: AccountService = Depends(_svc),
):
    users = await svc.list_users(identity)
    return [UserRead.from_user(u) for u in users]


# ─── Profiles ───────────────────────────────────────────


@router.get("/{user_id}", response_model=UserRead)
async def get_profile(
    user_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: AccountService = Depends(_svc),
):
    user = await svc.get_profile(identity, user_id)
    return UserRead.from_user(user)


@router.put("/{user_id}", response_model=UserRead)
async def update_profile(
    user_id: uuid.UUID,
    body: UserUpdate,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: AccountService = Depends(_svc),
):
    user = await svc.update_profile(identity, user_id, body)
    return UserRead.from_user(user)


@router.delete("/{user_id}", status_code=204)
async def delete_profile(
    user_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: AccountService = Depends(_svc),
):
    await svc.delete_profile(identity, user_id)
    return Response(status_code=204)


@router.get("/{user_id}/documents", response_model=list[DocumentRead])
async def list_user_documents(
    user_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: AccountService = Depends(_svc),
):
    return await svc.list_documents_of(identity, user_id)
