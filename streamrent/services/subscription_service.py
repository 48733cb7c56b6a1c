# streamrent/services/subscription_service.py
"""
Subscription policy: pure date arithmetic, no I/O.

Every function takes an optional `now`; production callers leave it out and
get the current UTC time.

Two different "is it over?" rules coexist on purpose:

  - get_subscription_status() is for display. 0 days left is still
    "critical", not "expired".
  - is_subscription_active() / is_subscription_expired_for_login() gate
    access. The expiry instant itself already counts as expired.
"""

import math
from datetime import date, datetime, time, timedelta, timezone

from dateutil.relativedelta import relativedelta

from streamrent.schemas.subscription import SubscriptionStatus

CRITICAL_DAYS = 7
WARNING_DAYS = 30

_ONE_DAY = timedelta(days=1).total_seconds()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_datetime(value: datetime | date) -> datetime:
    """Accept dates or datetimes; naive values are taken as UTC."""
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def calculate_end_date(start_date: datetime | date, duration_months: int) -> datetime:
    """
    Add `duration_months` calendar months to `start_date`.

    Day overflow is clamped to the last day of the target month:
    2024-01-31 + 1 month -> 2024-02-29.
    """
    return _as_datetime(start_date) + relativedelta(months=duration_months)


def get_days_remaining(end_date: datetime | date, now: datetime | None = None) -> int:
    """
    Whole days until `end_date`, rounded up. Negative once expired.
    """
    now = _as_datetime(now or utcnow())
    seconds = (_as_datetime(end_date) - now).total_seconds()
    return math.ceil(seconds / _ONE_DAY)


def get_subscription_status(
    end_date: datetime | date | None,
    now: datetime | None = None,
) -> SubscriptionStatus:
    """
    Classify a subscription:

      no end date   -> expired ("No subscription")
      < 0 days      -> expired
      0..7 days     -> critical
      8..30 days    -> warning
      > 30 days     -> active

    An end date already in the past is expired even when less than a day
    has gone by (ceil() still reports 0 days for it).
    """
    if end_date is None:
        return SubscriptionStatus(
            state="expired",
            days_remaining=None,
            message="No subscription",
        )

    now = _as_datetime(now or utcnow())
    days = get_days_remaining(end_date, now)

    if days < 0 or _as_datetime(end_date) < now:
        return SubscriptionStatus(
            state="expired",
            days_remaining=days,
            message="Subscription expired",
        )
    if days <= CRITICAL_DAYS:
        return SubscriptionStatus(
            state="critical",
            days_remaining=days,
            message=f"Expires in {days} day{'' if days == 1 else 's'}",
        )
    if days <= WARNING_DAYS:
        return SubscriptionStatus(
            state="warning",
            days_remaining=days,
            message=f"{days} days remaining",
        )
    return SubscriptionStatus(
        state="active",
        days_remaining=days,
        message=f"{days} days remaining",
    )


def is_subscription_active(
    end_date: datetime | date | None,
    now: datetime | None = None,
) -> bool:
    """True only while `end_date` is strictly in the future."""
    if end_date is None:
        return False
    return _as_datetime(end_date) > _as_datetime(now or utcnow())


def is_subscription_expired_for_login(
    end_date: datetime | date | None,
    now: datetime | None = None,
) -> bool:
    """
    Login gate: an end date at or before `now` blocks login.

    No end date means there is nothing to enforce.
    """
    if end_date is None:
        return False
    return _as_datetime(end_date) <= _as_datetime(now or utcnow())


# ---- Rental helpers ----


def is_expired(expiration_date: datetime | date, now: datetime | None = None) -> bool:
    return not is_subscription_active(expiration_date, now)


def is_expiring_soon(
    expiration_date: datetime | date,
    now: datetime | None = None,
    days: int = CRITICAL_DAYS,
) -> bool:
    """Not yet expired, and at most `days` days left."""
    if is_expired(expiration_date, now):
        return False
    return get_days_remaining(expiration_date, now) <= days
