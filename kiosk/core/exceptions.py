"""
Domain Exceptions

Raised by the service layer and turned into JSON error responses by the
handler registered in kiosk.main. Each subclass pins its HTTP status so
services never import FastAPI.
"""


class KioskError(Exception):
    """Base class for errors reported back to the caller."""

    status_code: int = 500
    error: str = "Internal Server Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(KioskError):
    """Missing or invalid fields."""
    status_code = 400
    error = "Bad Request"


class AuthenticationRequired(KioskError):
    """No session, or the session token did not verify."""
    status_code = 401
    error = "Unauthorized"


class PermissionDenied(KioskError):
    """Authenticated, but not allowed to do this."""
    status_code = 403
    error = "Forbidden"


class NotFound(KioskError):
    """Unknown identifier."""
    status_code = 404
    error = "Not Found"


class Conflict(KioskError):
    """Request clashes with current state (duplicate name, bad transition)."""
    status_code = 409
    error = "Conflict"
