# streamrent/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel):
    """
    User account stored in the Supabase `users` table.

    Identity:
      - id: assigned by the backend on insert (None until persisted)
      - username: unique, case-sensitive

    Role:
      - "admin" | "user"

    Subscription:
      - subscription_end_date = start + duration months, recomputed by the
        service layer whenever start or duration change.

    The backend column holding the hash is `password`; the repository maps it
    to `password_hash`.
    """

    id: uuid.UUID | None = Field(
        default=None,
        description="Backend-assigned primary key",
    )

    username: str = Field(
        description="Login name; unique across all users",
    )

    full_name: str = Field(
        default="",
        description="Display name",
    )

    role: str = Field(
        default="user",
        description="Application role: user | admin",
    )

    # Display symbol only (e.g. "$", "MXN$")
    currency: str = Field(default="$")

    password_hash: str = Field(
        default="",
        description="Salted one-way hash, see core/security.py",
    )

    subscription_start_date: datetime | None = None
    subscription_duration_months: int = Field(default=1, ge=1)
    subscription_end_date: datetime | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
