# streamrent/schemas/rental.py
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, EmailStr, field_validator, model_validator
from sqlmodel import SQLModel, Field

AccountType = Literal["full", "profile"]


class RentalCreate(SQLModel):
    """
    Payload for registering or editing a rental.

    Backend derives:
      - user_id from the current session (on insert)
      - rental_id ("R-0001", ...) on insert
      - expiration_date = start_date + duration months
    """

    model_config = ConfigDict(extra="forbid")

    platform: str
    customer_name: str
    account_type: AccountType = "full"
    profile_name: str | None = None
    account_email: EmailStr
    account_password: str
    price: float = Field(ge=0)
    duration: int = Field(default=1, ge=1)
    start_date: datetime
    notes: str | None = None

    @field_validator("platform", "customer_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("account_password")
    @classmethod
    def password_not_blank(cls, v: str) -> str:
        # kept verbatim; whitespace may be part of the credential
        if not v.strip():
            raise ValueError("account_password cannot be empty")
        return v

    @field_validator("profile_name", "notes")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None

    @model_validator(mode="after")
    def check_profile_name(self) -> "RentalCreate":
        if self.account_type == "profile" and not self.profile_name:
            raise ValueError("profile_name is required for profile rentals")
        if self.account_type == "full":
            self.profile_name = None
        return self


class ReplacementCreate(SQLModel):
    """
    New credentials handed to the customer. The old ones are taken from the
    rental itself.
    """

    model_config = ConfigDict(extra="forbid")

    new_email: EmailStr
    new_password: str
    reason: str | None = None

    @field_validator("new_password")
    @classmethod
    def password_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("new_password cannot be empty")
        return v

    @field_validator("reason")
    @classmethod
    def normalize_reason(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class RentalStats(SQLModel):
    """
    Dashboard counters over the rentals visible to the current user.
    """

    total: int
    active: int
    expiring_soon: int
    revenue: float
