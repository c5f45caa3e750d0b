"""Error kinds raised by RSVP and admin operations."""

from __future__ import annotations


class RSVPError(Exception):
    """Base class for failures surfaced to API callers."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__

    def as_dict(self) -> dict[str, str]:
        return {"error": self.kind, "message": self.message}


class ConfigurationError(RSVPError):
    """Raised when the admin password is not configured."""

    status_code = 500


class AuthenticationError(RSVPError):
    """Raised for a wrong password or an invalid/expired session token."""

    status_code = 401


class ValidationError(RSVPError):
    status_code = 400


class NotFoundError(RSVPError):
    status_code = 404


class ConflictError(RSVPError):
    status_code = 409
