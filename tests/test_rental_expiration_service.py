from datetime import date, timedelta

import pytest

from conftest import make_rental
from erp_dashboard.models.rental_models import ExpirationLevel
from erp_dashboard.services.rental_expiration_service import (
    RentalExpirationService,
    calculate_days_until_expiry,
    check_expirations,
    determine_expiration_level,
    get_notification_message,
    group_by_level,
    notifications_frame,
)


class FakeRentalRepo:
    def __init__(self, rentals):
        self.rentals = rentals

    def get_active_rentals(self, tenant_id):
        return [r for r in self.rentals if r.tenant_id == tenant_id]


def test_rental_ending_in_three_days_is_warning(now):
    rentals = [make_rental("r1", now + timedelta(days=3))]

    notifications = check_expirations(rentals, now)

    assert len(notifications) == 1
    n = notifications[0]
    assert n.level == ExpirationLevel.WARNING
    assert n.days_until_expiry == 3
    assert n.is_overdue is False
    assert n.rental_id == "r1"
    assert n.partner_phone == "+36301234567"
    assert n.created_at == now


@pytest.mark.parametrize("days,level", [
    (7, ExpirationLevel.INFO),
    (4, ExpirationLevel.INFO),
    (3, ExpirationLevel.WARNING),
    (1, ExpirationLevel.WARNING),
    (0, ExpirationLevel.URGENT),
    (-1, ExpirationLevel.URGENT),
    (-30, ExpirationLevel.URGENT),
    (8, None),
    (60, None),
])
def test_level_boundaries(days, level):
    assert determine_expiration_level(days) == level


def test_rentals_outside_window_are_skipped(now):
    rentals = [
        make_rental("far", now + timedelta(days=8)),
        make_rental("near", now + timedelta(days=7)),
    ]

    notifications = check_expirations(rentals, now)

    assert [n.rental_id for n in notifications] == ["near"]
    assert notifications[0].level == ExpirationLevel.INFO


def test_one_day_past_is_overdue(now):
    notifications = check_expirations([make_rental("r1", now - timedelta(days=1))], now)

    assert notifications[0].days_until_expiry == -1
    assert notifications[0].is_overdue is True
    assert notifications[0].level == ExpirationLevel.URGENT


def test_days_are_floored(now):
    assert calculate_days_until_expiry(now + timedelta(hours=5), now) == 0
    assert calculate_days_until_expiry(now + timedelta(days=2, hours=23), now) == 2
    assert calculate_days_until_expiry(now - timedelta(hours=5), now) == -1


def test_overdue_flag_matches_sign(now):
    rentals = [make_rental(str(d), now + timedelta(days=d)) for d in range(-5, 9)]

    for n in check_expirations(rentals, now):
        assert n.is_overdue == (n.days_until_expiry < 0)


# ─── Messages ───

def _one(now, delta):
    return check_expirations([make_rental("r1", now + delta)], now)[0]


def test_info_message(now):
    message = get_notification_message(_one(now, timedelta(days=5)))

    assert message == "Bérlés lejár 5 nap múlva: Kovács Kft. - Makita fúró (2026.02.15.)"


def test_warning_message_is_marked_urgent(now):
    message = get_notification_message(_one(now, timedelta(days=2)))

    assert message.startswith("SÜRGŐS:")
    assert "2 nap múlva" in message


def test_overdue_message_uses_absolute_days(now):
    message = get_notification_message(_one(now, timedelta(days=-3)))

    assert message.startswith("LEJÁRT:")
    assert "3 napja lejárt" in message
    assert "-3" not in message


def test_due_today_message(now):
    message = get_notification_message(_one(now, timedelta(hours=2)))

    assert "ma jár le" in message


def test_message_with_plain_date(now):
    rental = make_rental("r1", date(2026, 2, 13))

    message = get_notification_message(check_expirations([rental], now)[0])

    assert "(2026.02.13.)" in message


# ─── Grouping ───

def test_group_by_level_keeps_order_and_all_keys(now):
    rentals = [
        make_rental("a", now + timedelta(days=5)),
        make_rental("b", now + timedelta(days=1)),
        make_rental("c", now + timedelta(days=6)),
    ]

    grouped = group_by_level(check_expirations(rentals, now))

    assert set(grouped) == {ExpirationLevel.INFO, ExpirationLevel.WARNING, ExpirationLevel.URGENT}
    assert [n.rental_id for n in grouped[ExpirationLevel.INFO]] == ["a", "c"]
    assert [n.rental_id for n in grouped[ExpirationLevel.WARNING]] == ["b"]
    assert grouped[ExpirationLevel.URGENT] == []


def test_notifications_frame_most_urgent_first(now):
    rentals = [
        make_rental("a", now + timedelta(days=5)),
        make_rental("b", now - timedelta(days=2)),
    ]

    df = notifications_frame(check_expirations(rentals, now))

    assert list(df["level"]) == ["URGENT", "INFO"]
    assert df.iloc[0]["message"].startswith("LEJÁRT:")


def test_service_checks_tenant_rentals(now):
    repo = FakeRentalRepo([
        make_rental("r1", now + timedelta(days=3)),
        make_rental("r2", now + timedelta(days=30)),
    ])

    notifications = RentalExpirationService(repo).check_tenant("tenant-1", now)

    assert [n.rental_id for n in notifications] == ["r1"]
    assert RentalExpirationService(repo).check_tenant("other", now) == []
