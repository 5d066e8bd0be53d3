from datetime import datetime, timezone

import pytest

from erp_dashboard.models.financial_models import AgingInvoice, RevenueSourceLine
from erp_dashboard.models.rental_models import RentalExpirationInput


@pytest.fixture
def now():
    return datetime(2026, 2, 10, 12, 0, tzinfo=timezone.utc)


def make_invoice(id, partner_id, due_date, balance_due, partner_name=None):
    return AgingInvoice(
        id=id,
        invoice_number=f"INV-{id}",
        partner_id=partner_id,
        partner_name=partner_name or f"Partner {partner_id}",
        due_date=due_date,
        balance_due=balance_due,
        tenant_id="tenant-1",
    )


def make_rental(id, end_date, partner_name="Kovács Kft.", equipment_name="Makita fúró"):
    return RentalExpirationInput(
        id=id,
        tenant_id="tenant-1",
        partner_id=f"p-{id}",
        partner_name=partner_name,
        end_date=end_date,
        equipment_name=equipment_name,
        partner_phone="+36301234567",
    )


def lines(source_type, *amounts):
    return [RevenueSourceLine(type=source_type, amount=a, tenant_id="tenant-1") for a in amounts]
