"""FastAPI auth dependencies — the authentication gate.

Learn: Used as Depends() in protected route handlers. The gate looks for
a token in the x-access-token header first, then in a `token` field of a
JSON body; the first non-empty value wins.

- no token anywhere        → 403 "No token provided."
- token fails verification → 401 "Failed to authenticate token."
- otherwise the decoded identity (credential fields scrubbed) is put on
  request.state.identity and returned to the handler.

Verification is a signature check and a clock comparison, so it runs
inline without blocking other requests.
"""

import uuid
from typing import Any, Optional

import structlog
from fastapi import Request

from docman.auth.tokens import TokenVerificationError, verify_token
from docman.config import Settings
from docman.errors import AuthenticationFailedError, NoTokenProvidedError

logger = structlog.get_logger()

_SECRET_FIELDS = ("password", "password_hash")


class CurrentIdentity:
    """The identity decoded from a verified token.

    Learn: This is the snapshot taken at login, not the live record.
    Services reload the user from the store before making policy
    decisions; this object only proves who the caller is.
    """

    def __init__(self, user_id: uuid.UUID, username: str, claims: dict[str, Any]):
        self.user_id = user_id
        self.username = username
        self.claims = claims

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "CurrentIdentity":
        try:
            user_id = uuid.UUID(str(claims["id"]))
        except (KeyError, ValueError):
            raise AuthenticationFailedError("Failed to authenticate token.")
        return cls(user_id=user_id, username=claims.get("username", ""), claims=claims)


def scrub_claims(claims: dict[str, Any]) -> dict[str, Any]:
    """Drop any credential-looking field from decoded claims."""
    return {k: v for k, v in claims.items() if k not in _SECRET_FIELDS}


async def extract_token(request: Request, settings: Settings) -> Optional[str]:
    """Header first, then the JSON body field."""
    header_token = request.headers.get(settings.token_header)
    if header_token:
        return header_token

    if "application/json" not in request.headers.get("content-type", ""):
        return None
    raw = await request.body()
    if not raw:
        return None
    try:
        body = await request.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        body_token = body.get(settings.token_body_field)
        if isinstance(body_token, str) and body_token:
            return body_token
    return None


async def get_current_identity(request: Request) -> CurrentIdentity:
    """Extract and verify the caller's identity (required)."""
    settings: Settings = request.app.state.settings

    token = await extract_token(request, settings)
    if not token:
        raise NoTokenProvidedError()

    try:
        claims = verify_token(
            token, settings.jwt_secret, algorithm=settings.jwt_algorithm
        )
    except TokenVerificationError as e:
        logger.info("auth.token_rejected", reason=type(e).__name__)
        raise AuthenticationFailedError("Failed to authenticate token.")

    identity = CurrentIdentity.from_claims(scrub_claims(claims))
    request.state.identity = identity
    return identity
