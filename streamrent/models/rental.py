# streamrent/models/rental.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Rental(SQLModel):
    """
    A streaming account (or single profile) rented to a customer.

    Matches the `rentals` table:
      - id, rental_id, user_id, platform, customer_name,
        account_type, profile_name, account_email, account_password,
        price, duration, start_date, expiration_date, notes, created_at
    """

    id: uuid.UUID | None = Field(
        default=None,
        description="Backend-assigned primary key",
    )

    # Human-facing id, e.g. "R-0042"
    rental_id: str | None = Field(
        default=None,
        description="Sequential display id",
    )

    user_id: uuid.UUID = Field(
        description="Owner (the seller who registered the rental)",
    )

    platform: str
    customer_name: str

    # full | profile
    account_type: str = Field(
        default="full",
        description="Whole account or a single profile inside it",
    )
    profile_name: str | None = None

    account_email: str
    account_password: str

    price: float = Field(ge=0)

    # In months
    duration: int = Field(ge=1)

    start_date: datetime
    expiration_date: datetime

    notes: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class Replacement(SQLModel):
    """
    One credential change on a rental (e.g. the provider locked the account
    and a new one was handed to the customer).

    Matches the `replacements` table.
    """

    id: uuid.UUID | None = None

    rental_id: uuid.UUID = Field(
        description="FK -> rentals.id",
    )

    old_email: str
    old_password: str
    new_email: str
    new_password: str

    reason: str | None = None

    replaced_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
