"""
Rental Expiration Service.

Flags active rentals approaching their end date:
- INFO     7..4 days left
- WARNING  3..1 days left
- URGENT   due today or overdue

Rentals further out produce no notification at all. Only the
notification content is built here; delivery (SMS, push) happens elsewhere.
"""

import logging
from datetime import date, datetime
from typing import Optional, Protocol

import pandas as pd

from erp_dashboard.config import (
    EXPIRATION_URGENT_DAYS,
    EXPIRATION_WARNING_DAYS,
    EXPIRATION_INFO_DAYS,
)
from erp_dashboard.models.rental_models import (
    ExpirationLevel,
    RentalExpirationInput,
    RentalExpirationNotification,
)
from erp_dashboard.utils.dates import whole_days_between

logger = logging.getLogger(__name__)

LEVEL_ORDER = [ExpirationLevel.URGENT, ExpirationLevel.WARNING, ExpirationLevel.INFO]


class RentalRepository(Protocol):
    def get_active_rentals(self, tenant_id: str) -> list[RentalExpirationInput]: ...


def calculate_days_until_expiry(end_date: date | datetime, now: datetime) -> int:
    """Whole days until ``end_date``, floored (negative once past)."""
    return whole_days_between(now, end_date)


def determine_expiration_level(days_until_expiry: int) -> Optional[ExpirationLevel]:
    if days_until_expiry <= EXPIRATION_URGENT_DAYS:
        return ExpirationLevel.URGENT
    if days_until_expiry <= EXPIRATION_WARNING_DAYS:
        return ExpirationLevel.WARNING
    if days_until_expiry <= EXPIRATION_INFO_DAYS:
        return ExpirationLevel.INFO
    return None


def check_expirations(
    rentals: list[RentalExpirationInput],
    now: datetime,
) -> list[RentalExpirationNotification]:
    """One notification per rental inside the 7-day window, input order kept."""
    notifications = []

    for rental in rentals:
        days = calculate_days_until_expiry(rental.end_date, now)
        level = determine_expiration_level(days)
        if level is None:
            continue

        notifications.append(RentalExpirationNotification(
            rental_id=rental.id,
            tenant_id=rental.tenant_id,
            level=level,
            days_until_expiry=days,
            is_overdue=days < 0,
            partner_name=rental.partner_name,
            partner_phone=rental.partner_phone,
            equipment_name=rental.equipment_name,
            expiry_date=rental.end_date,
            assigned_user_id=rental.assigned_user_id,
            created_at=now,
        ))

    logger.debug("%d of %d rentals need attention", len(notifications), len(rentals))
    return notifications


def _format_date(value: date | datetime) -> str:
    return value.strftime("%Y.%m.%d.")


def get_notification_message(notification: RentalExpirationNotification) -> str:
    """Hungarian notification text for the given level."""
    n = notification
    expiry = _format_date(n.expiry_date)

    if n.level == ExpirationLevel.INFO:
        return (
            f"Bérlés lejár {n.days_until_expiry} nap múlva: "
            f"{n.partner_name} - {n.equipment_name} ({expiry})"
        )

    if n.level == ExpirationLevel.WARNING:
        return (
            f"SÜRGŐS: Bérlés lejár {n.days_until_expiry} nap múlva! "
            f"{n.partner_name} - {n.equipment_name} ({expiry})"
        )

    if n.is_overdue:
        return (
            f"LEJÁRT: A bérlés {abs(n.days_until_expiry)} napja lejárt! "
            f"{n.partner_name} - {n.equipment_name} ({expiry})"
        )
    return (
        "LEJÁRT: A bérlés ma jár le! "
        f"{n.partner_name} - {n.equipment_name} ({expiry})"
    )


def group_by_level(
    notifications: list[RentalExpirationNotification],
) -> dict[ExpirationLevel, list[RentalExpirationNotification]]:
    grouped = {level: [] for level in LEVEL_ORDER}
    for n in notifications:
        grouped[n.level].append(n)
    return grouped


def notifications_frame(notifications: list[RentalExpirationNotification]) -> pd.DataFrame:
    """Notifications as a table, most urgent first."""
    columns = ["level", "partner_name", "partner_phone", "equipment_name",
               "expiry_date", "days_until_expiry", "message"]
    rows = [
        {
            "level": n.level.value,
            "partner_name": n.partner_name,
            "partner_phone": n.partner_phone or "",
            "equipment_name": n.equipment_name,
            "expiry_date": n.expiry_date,
            "days_until_expiry": n.days_until_expiry,
            "message": get_notification_message(n),
        }
        for items in group_by_level(notifications).values()
        for n in items
    ]
    return pd.DataFrame(rows, columns=columns)


# ─── Service (repository-backed) ───

class RentalExpirationService:
    """Runs the expiration check over a tenant's active rentals."""

    def __init__(self, repository: RentalRepository):
        self.repository = repository

    def check_tenant(self, tenant_id: str, now: datetime) -> list[RentalExpirationNotification]:
        rentals = self.repository.get_active_rentals(tenant_id)
        notifications = check_expirations(rentals, now)
        overdue = sum(1 for n in notifications if n.is_overdue)
        if overdue:
            logger.info("%d overdue rentals", overdue, extra={"tenant_id": tenant_id})
        return notifications
