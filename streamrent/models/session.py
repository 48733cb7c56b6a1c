# streamrent/models/session.py
import enum
import uuid
from datetime import datetime

from sqlmodel import SQLModel

from streamrent.models.user import User


class SessionState(str, enum.Enum):
    """Lifecycle of the client-side session."""

    LOGGED_OUT = "logged_out"
    AUTHENTICATING = "authenticating"
    RESTORING = "restoring"
    LOGGED_IN = "logged_in"


class TrustLevel(str, enum.Enum):
    """
    VERIFIED: just confirmed against the backend.
    CACHED:   accepted from the local snapshot because the backend could not
              be reached in time.
    """

    VERIFIED = "verified"
    CACHED = "cached"


class SessionSnapshot(SQLModel):
    """
    Cached projection of a User, persisted locally between runs.

    Flat on purpose: this is exactly what gets written to the session file.
    """

    user_id: uuid.UUID
    username: str
    full_name: str = ""
    role: str = "user"
    currency: str = "$"
    subscription_end_date: datetime | None = None

    @classmethod
    def from_user(cls, user: User) -> "SessionSnapshot":
        return cls(
            user_id=user.id,
            username=user.username,
            full_name=user.full_name,
            role=user.role,
            currency=user.currency or "$",
            subscription_end_date=user.subscription_end_date,
        )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
