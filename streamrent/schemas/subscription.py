# streamrent/schemas/subscription.py
from typing import Literal

from sqlmodel import SQLModel

SubscriptionState = Literal["active", "warning", "critical", "expired"]


class SubscriptionStatus(SQLModel):
    """
    Derived view of a subscription end date. Computed on demand, never stored.

    days_remaining is None when there is no subscription at all.
    """

    state: SubscriptionState
    days_remaining: int | None
    message: str
