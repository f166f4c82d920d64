"""JWT token issuance and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. A token
carries a snapshot of the user taken at login, plus issued-at and expiry
timestamps, signed with the server secret.

The snapshot is point-in-time: callers must not treat it as the current
database state. Nothing here touches the database or keeps state; both
functions are pure with respect to (input, secret, clock). The clock can
be injected via `now` so expiry is testable without sleeping.
"""

import time
from typing import Any, Optional

import jwt

# Claim holding the identity snapshot
IDENTITY_CLAIM = "user"


class TokenVerificationError(Exception):
    """Raised when a token cannot be accepted."""


class MalformedTokenError(TokenVerificationError):
    """The token could not be parsed."""


class InvalidSignatureError(TokenVerificationError):
    """The signature does not match the secret."""


class TokenExpiredError(TokenVerificationError):
    """The current time is at or past the encoded expiry."""


def issue_token(
    identity: dict[str, Any],
    secret_key: str,
    ttl_seconds: int,
    algorithm: str = "HS256",
    now: Optional[float] = None,
) -> str:
    """Sign an identity snapshot that expires `ttl_seconds` from now."""
    issued_at = time.time() if now is None else now
    # iat is informational; exp keeps the exact clock value
    payload = {
        "sub": str(identity["id"]),
        IDENTITY_CLAIM: identity,
        "iat": int(issued_at),
        "exp": issued_at + ttl_seconds,
    }
    return jwt.encode(payload, secret_key, algorithm=algorithm)


def verify_token(
    token: str,
    secret_key: str,
    algorithm: str = "HS256",
    now: Optional[float] = None,
) -> dict[str, Any]:
    """Verify a token and return the embedded identity snapshot.

    Expiry is checked here rather than by PyJWT so the clock can be
    injected. A token is expired from the exact second `exp` onwards.

    Raises MalformedTokenError, InvalidSignatureError or TokenExpiredError.
    """
    try:
        payload = jwt.decode(
            token,
            secret_key,
            algorithms=[algorithm],
            options={
                "verify_exp": False,
                "verify_iat": False,
                "require": ["exp", "sub"],
            },
        )
    except jwt.InvalidSignatureError:
        raise InvalidSignatureError("Token signature does not match")
    except jwt.InvalidTokenError as e:
        raise MalformedTokenError(f"Malformed token: {e}")

    identity = payload.get(IDENTITY_CLAIM)
    exp = payload["exp"]
    if not isinstance(identity, dict) or not isinstance(exp, (int, float)):
        raise MalformedTokenError("Malformed token: missing identity claims")

    current = time.time() if now is None else now
    if current >= exp:
        raise TokenExpiredError("Token has expired")
    return identity
