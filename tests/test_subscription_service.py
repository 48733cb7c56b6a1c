# tests/test_subscription_service.py
from datetime import date, datetime, timedelta, timezone

import pytest

from streamrent.services.subscription_service import (
    calculate_end_date,
    get_days_remaining,
    get_subscription_status,
    is_expiring_soon,
    is_subscription_active,
    is_subscription_expired_for_login,
)

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


# ---- calculate_end_date ----


def test_end_date_clamps_to_last_day_of_leap_february():
    start = datetime(2024, 1, 31, tzinfo=timezone.utc)
    assert calculate_end_date(start, 1) == datetime(2024, 2, 29, tzinfo=timezone.utc)


def test_end_date_clamps_in_non_leap_year():
    start = datetime(2023, 1, 31, tzinfo=timezone.utc)
    assert calculate_end_date(start, 1) == datetime(2023, 2, 28, tzinfo=timezone.utc)


def test_end_date_keeps_time_of_day_and_crosses_year():
    start = datetime(2024, 11, 15, 8, 30, tzinfo=timezone.utc)
    assert calculate_end_date(start, 3) == datetime(2025, 2, 15, 8, 30, tzinfo=timezone.utc)


def test_end_date_accepts_plain_dates():
    assert calculate_end_date(date(2024, 3, 1), 12) == datetime(
        2025, 3, 1, tzinfo=timezone.utc
    )


# ---- get_days_remaining ----


def test_days_remaining_rounds_partial_days_up():
    assert get_days_remaining(NOW + timedelta(hours=1), NOW) == 1
    assert get_days_remaining(NOW + timedelta(days=7, seconds=1), NOW) == 8


def test_days_remaining_exact_and_negative():
    assert get_days_remaining(NOW, NOW) == 0
    assert get_days_remaining(NOW + timedelta(days=7), NOW) == 7
    assert get_days_remaining(NOW - timedelta(days=3), NOW) == -3


def test_naive_datetimes_are_treated_as_utc():
    naive_end = datetime(2025, 6, 25, 12, 0)
    assert get_days_remaining(naive_end, NOW) == 10


# ---- get_subscription_status boundaries ----


@pytest.mark.parametrize(
    "offset, state, days",
    [
        (timedelta(0), "critical", 0),
        (timedelta(days=7), "critical", 7),
        (timedelta(days=8), "warning", 8),
        (timedelta(days=30), "warning", 30),
        (timedelta(days=31), "active", 31),
        (timedelta(days=-2), "expired", -2),
    ],
)
def test_status_classification_edges(offset, state, days):
    status = get_subscription_status(NOW + offset, NOW)
    assert status.state == state
    assert status.days_remaining == days


def test_one_second_past_end_is_expired():
    status = get_subscription_status(NOW - timedelta(seconds=1), NOW)
    assert status.state == "expired"
    assert status.message == "Subscription expired"


def test_missing_end_date_means_no_subscription():
    status = get_subscription_status(None, NOW)
    assert status.state == "expired"
    assert status.days_remaining is None
    assert status.message == "No subscription"


def test_status_messages():
    assert get_subscription_status(NOW + timedelta(days=1), NOW).message == "Expires in 1 day"
    assert get_subscription_status(NOW + timedelta(days=5), NOW).message == "Expires in 5 days"
    assert get_subscription_status(NOW + timedelta(days=45), NOW).message == "45 days remaining"


# ---- access gating ----


def test_active_is_strict():
    assert is_subscription_active(NOW, NOW) is False
    assert is_subscription_active(NOW - timedelta(seconds=1), NOW) is False
    assert is_subscription_active(NOW + timedelta(seconds=1), NOW) is True
    assert is_subscription_active(None, NOW) is False


def test_login_gate_treats_expiry_instant_as_expired():
    assert is_subscription_expired_for_login(NOW, NOW) is True
    assert is_subscription_expired_for_login(NOW + timedelta(seconds=1), NOW) is False
    assert is_subscription_expired_for_login(None, NOW) is False


def test_zero_days_is_critical_for_display_but_blocked_for_access():
    assert get_subscription_status(NOW, NOW).state == "critical"
    assert is_subscription_active(NOW, NOW) is False


def test_expiring_soon_window():
    assert is_expiring_soon(NOW + timedelta(days=3), NOW) is True
    assert is_expiring_soon(NOW + timedelta(days=7), NOW) is True
    assert is_expiring_soon(NOW + timedelta(days=8), NOW) is False
    assert is_expiring_soon(NOW - timedelta(days=1), NOW) is False
    assert is_expiring_soon(NOW + timedelta(days=3), NOW, days=2) is False
