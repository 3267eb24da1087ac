"""
Service-level errors.

Services raise these; route handlers translate them into HTTPException
with the matching status code. Malformed request bodies never reach the
services: pydantic rejects them and main.py answers 400.
"""


class UserManagementError(Exception):
    """Base class for every error raised by the services"""

    default_message = "User management error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(UserManagementError):
    default_message = "Unauthorized"


class Forbidden(UserManagementError):
    default_message = "User is not verified or not found"


class NotFound(UserManagementError):
    default_message = "User not found"


class AlreadyExists(UserManagementError):
    default_message = "Email already registered"


class InvalidToken(UserManagementError):
    default_message = "Invalid token"


class TokenExpired(UserManagementError):
    default_message = "Token expired"


class InternalFailure(UserManagementError):
    default_message = "Internal error"


class EmailDeliveryError(InternalFailure):
    default_message = "Failed to send verification email"
