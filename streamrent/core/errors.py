# streamrent/core/errors.py
"""
Domain errors raised by the service layer.

Every error carries a human-readable `detail`, mirroring how an HTTP layer
would surface it. Callers (UI, CLI) catch these and render them; none of them
is fatal to the process.
"""

from datetime import datetime


class StreamRentError(Exception):
    """Base class for all expected, renderable failures."""

    detail: str = "Unexpected error"

    def __init__(self, detail: str | None = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class UserNotFound(StreamRentError):
    detail = "User not found"


class InvalidCredentials(StreamRentError):
    detail = "Incorrect password"


class SubscriptionExpired(StreamRentError):
    """
    Login refused because a regular user's subscription has ended.

    Carries `expired_date` so the caller can show when it happened.
    """

    detail = "Your subscription has expired. Contact the administrator to renew it."

    def __init__(self, expired_date: datetime, detail: str | None = None):
        self.expired_date = expired_date
        super().__init__(detail)


class DuplicateUsername(StreamRentError):
    def __init__(self, username: str):
        self.username = username
        super().__init__(f"Username '{username}' already exists")


class SelfDeletionForbidden(StreamRentError):
    detail = "You cannot delete your own account"


class LastAdminProtected(StreamRentError):
    detail = "You cannot delete the last administrator"


class BackendUnavailable(StreamRentError):
    """Transient failure talking to the hosted backend."""

    detail = "Backend is unavailable, try again later"


class RentalNotFound(StreamRentError):
    detail = "Rental not found"
