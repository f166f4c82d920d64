"""Domain error taxonomy.

Every error the API can return to a client is a DocmanError. The app
registers one exception handler that renders them as {"error": message}
with the error's status code, so services raise and never build
responses themselves.
"""

from typing import Optional


class DocmanError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(DocmanError):
    """Required fields are missing from the request."""

    status_code = 400
    message = "Invalid request"


class DuplicateAccountError(DocmanError):
    """A user with the same username or email already exists."""

    status_code = 400
    message = "The User already exists"


class NotFoundError(DocmanError):
    status_code = 404
    message = "Not found"


class AuthenticationFailedError(DocmanError):
    """Bad credential, or an invalid/expired token."""

    status_code = 401
    message = "Authentication failed"


class NoTokenProvidedError(DocmanError):
    status_code = 403
    message = "No token provided."


class UnauthorizedError(DocmanError):
    """Authenticated, but the action is not allowed for this actor."""

    status_code = 403
    message = "Unauthorized Access"


class RoleNotFoundError(DocmanError):
    status_code = 400
    message = "Role not found"


class DuplicateRoleError(DocmanError):
    status_code = 400
    message = "The Role already exists"
