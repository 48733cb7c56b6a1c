# streamrent/schemas/user.py
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

Role = Literal["user", "admin"]

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6


def _check_username(v: str) -> str:
    v = v.strip()
    if len(v) < MIN_USERNAME_LENGTH:
        raise ValueError(
            f"username must be at least {MIN_USERNAME_LENGTH} characters"
        )
    return v


def _check_password(v: str) -> str:
    if len(v) < MIN_PASSWORD_LENGTH:
        raise ValueError(
            f"password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    return v


class UserCreate(SQLModel):
    """
    Admin payload for creating a user.

    Backend derives:
      - password_hash from `password`
      - subscription_start_date = now if omitted
      - subscription_end_date = start + duration months
    """

    model_config = ConfigDict(extra="forbid")

    username: str
    password: str
    full_name: str = Field(max_length=200)
    role: Role = "user"
    currency: str | None = None
    subscription_start_date: datetime | None = None
    subscription_duration_months: int = Field(default=1, ge=1)

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str) -> str:
        return _check_username(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return _check_password(v)

    @field_validator("full_name")
    @classmethod
    def normalize_full_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("full_name cannot be empty")
        return v


class UserUpdate(SQLModel):
    """
    Partial update (admin, or self for password changes).

    Omitted fields keep their current value. A blank password means
    "keep the current one".
    """

    model_config = ConfigDict(extra="forbid")

    username: str | None = None
    password: str | None = None
    full_name: str | None = Field(default=None, max_length=200)
    role: Role | None = None
    currency: str | None = None
    subscription_start_date: datetime | None = None
    subscription_duration_months: int | None = Field(default=None, ge=1)

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _check_username(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str | None) -> str | None:
        if not v:
            return None
        return _check_password(v)

    @field_validator("full_name")
    @classmethod
    def normalize_full_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("full_name cannot be empty")
        return v
