"""
Rental data models.
Dataclasses for rental expiration checks and their notifications.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional


class ExpirationLevel(str, Enum):
    INFO = "INFO"          # 4-7 days left
    WARNING = "WARNING"    # 1-3 days left
    URGENT = "URGENT"      # due today or overdue


@dataclass(frozen=True)
class RentalExpirationInput:
    """An active rental as returned by the ERP."""
    id: str
    tenant_id: str
    partner_id: str
    partner_name: str
    end_date: date | datetime
    equipment_name: str
    partner_phone: Optional[str] = None
    assigned_user_id: Optional[str] = None


@dataclass
class RentalExpirationNotification:
    """Notification content for a rental close to (or past) its end date."""
    rental_id: str
    tenant_id: str
    level: ExpirationLevel
    days_until_expiry: int
    is_overdue: bool
    partner_name: str
    equipment_name: str
    expiry_date: date | datetime
    created_at: datetime
    partner_phone: Optional[str] = None
    assigned_user_id: Optional[str] = None
