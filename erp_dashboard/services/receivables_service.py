"""
Receivables Service (aging report).

Responsibilities:
- Aging buckets: 0-30 / 31-60 / 61-90 / 90+ days overdue
- Per-bucket totals and counts
- Top debtors ranking
"""

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Protocol

import pandas as pd

from erp_dashboard.config import AGING_BUCKETS, TOP_DEBTORS_LIMIT
from erp_dashboard.models.financial_models import (
    AgingBucket,
    AgingInvoice,
    AgingReport,
    TopDebtor,
)
from erp_dashboard.utils.dates import to_utc, whole_days_between
from erp_dashboard.utils.money import round_money

logger = logging.getLogger(__name__)

BUCKET_ORDER = [label for label, _ in AGING_BUCKETS]


class ReceivablesRepository(Protocol):
    def get_unpaid_invoices(
        self, tenant_id: str, partner_id: Optional[str] = None
    ) -> list[AgingInvoice]: ...


# ─── Aging classification ───

def calculate_days_overdue(due_date: date | datetime, now: datetime) -> int:
    """Whole days past due; invoices not yet due count as 0."""
    return max(0, whole_days_between(due_date, now))


def classify_aging_bucket(days_overdue: int) -> str:
    for label, upper in AGING_BUCKETS:
        if upper is None or days_overdue <= upper:
            return label
    return BUCKET_ORDER[-1]


def _oldest(current, candidate):
    if current is None:
        return candidate
    return candidate if to_utc(candidate) < to_utc(current) else current


def build_top_debtors(
    invoices: list[AgingInvoice],
    limit: int = TOP_DEBTORS_LIMIT,
) -> list[TopDebtor]:
    """Group by partner, rank by open balance (stable on ties), keep ``limit``."""
    debtors: dict[str, TopDebtor] = {}

    for inv in invoices:
        debtor = debtors.get(inv.partner_id)
        if debtor is None:
            debtor = TopDebtor(partner_id=inv.partner_id, partner_name=inv.partner_name)
            debtors[inv.partner_id] = debtor
        debtor.total_debt += inv.balance_due
        debtor.invoice_count += 1
        debtor.oldest_due_date = _oldest(debtor.oldest_due_date, inv.due_date)

    for debtor in debtors.values():
        debtor.total_debt = round_money(debtor.total_debt)

    ranked = sorted(debtors.values(), key=lambda d: d.total_debt, reverse=True)
    return ranked[:limit]


def build_aging_report(
    invoices: list[AgingInvoice],
    now: datetime,
    partner_id: Optional[str] = None,
    top_limit: int = TOP_DEBTORS_LIMIT,
) -> AgingReport:
    """
    Sort unpaid invoices into aging buckets.

    Every invoice lands in exactly one bucket; all four buckets are
    returned in fixed order even when empty.
    """
    if partner_id:
        invoices = [inv for inv in invoices if inv.partner_id == partner_id]

    buckets = {label: AgingBucket(label=label) for label in BUCKET_ORDER}

    for inv in invoices:
        days = calculate_days_overdue(inv.due_date, now)
        bucket = buckets[classify_aging_bucket(days)]
        bucket.count += 1
        bucket.total_amount += inv.balance_due
        bucket.invoices.append(replace(inv, days_overdue=days))

    bucket_list = [buckets[label] for label in BUCKET_ORDER]
    for b in bucket_list:
        b.total_amount = round_money(b.total_amount)

    total = round_money(sum(b.total_amount for b in bucket_list))

    logger.debug(
        "aging report: %d invoices, total %.2f", len(invoices), total,
        extra={"partner_id": partner_id},
    )

    return AgingReport(
        generated_at=now,
        total_receivables=total,
        buckets=bucket_list,
        top_debtors=build_top_debtors(invoices, top_limit),
    )


def aging_invoices_frame(report: AgingReport) -> pd.DataFrame:
    """Flat table of bucket members, oldest first, for the dashboard."""
    rows = [
        {
            "bucket": b.label,
            "invoice_number": inv.invoice_number,
            "partner_name": inv.partner_name,
            "due_date": inv.due_date,
            "days_overdue": inv.days_overdue,
            "balance_due": inv.balance_due,
        }
        for b in report.buckets
        for inv in b.invoices
    ]
    columns = ["bucket", "invoice_number", "partner_name", "due_date", "days_overdue", "balance_due"]
    df = pd.DataFrame(rows, columns=columns)
    if not df.empty:
        df = df.sort_values("days_overdue", ascending=False, kind="stable").reset_index(drop=True)
    return df


# ─── Service (repository-backed) ───

class ReceivablesService:
    """Fetches a tenant's unpaid invoices and builds the aging report."""

    def __init__(self, repository: ReceivablesRepository):
        self.repository = repository

    def get_aging_report(
        self,
        tenant_id: str,
        now: datetime,
        partner_id: Optional[str] = None,
        top_limit: int = TOP_DEBTORS_LIMIT,
    ) -> AgingReport:
        invoices = self.repository.get_unpaid_invoices(tenant_id, partner_id)
        return build_aging_report(invoices, now, partner_id=partner_id, top_limit=top_limit)
