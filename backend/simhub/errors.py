"""Domain errors raised by the service layer.

Each error carries the HTTP status and the client-safe message the API
answers with. Anything that is not a ``ServiceError`` is treated as an
unexpected fault and answered with a generic 500.
"""

from typing import Optional


class ServiceError(Exception):
    status_code: int = 500
    message: str = "Server error"

    def __init__(self, message: Optional[str] = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationFailed(ServiceError):
    status_code = 422
    message = "Invalid input"

    def __init__(self, message: Optional[str] = None, errors: Optional[dict[str, list[str]]] = None) -> None:
        super().__init__(message)
        self.errors = errors or {}


class Conflict(ServiceError):
    status_code = 422
    message = "Conflict"


class Unauthorized(ServiceError):
    status_code = 401
    message = "Unauthorized"


class InvalidCredentials(ServiceError):
    status_code = 401
    message = "Invalid credentials"


class NotFound(ServiceError):
    status_code = 404
    message = "Not found"


class UpstreamError(ServiceError):
    status_code = 500
    message = "Identity verification unavailable"


class DuplicateKey(Exception):
    """A unique column already holds the value being written."""

    def __init__(self, field: str) -> None:
        super().__init__(field)
        self.field = field


class InvalidToken(Exception):
    """Token is malformed, has a bad signature, or has expired."""
