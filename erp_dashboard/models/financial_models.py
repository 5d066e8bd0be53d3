"""
Financial data models.
Typed dataclasses for the dashboard calculators' inputs and results.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional


# ─── Equipment profit ───

class EquipmentProfitStatus(str, Enum):
    PROFITABLE = "PROFITABLE"
    LOSING = "LOSING"
    BREAK_EVEN = "BREAK_EVEN"
    INCOMPLETE = "INCOMPLETE"


@dataclass(frozen=True)
class EquipmentProfitInput:
    """Aggregated figures of one rental equipment."""
    equipment_id: str
    purchase_price: Optional[float]
    total_rental_revenue: float = 0.0
    total_service_cost: float = 0.0  # non-warranty worksheets only


@dataclass
class EquipmentProfitResult:
    """Profit / ROI of one rental equipment."""
    equipment_id: str
    purchase_price: Optional[float] = None
    total_rental_revenue: float = 0.0
    total_service_cost: float = 0.0
    profit: Optional[float] = None
    roi: Optional[float] = None
    status: EquipmentProfitStatus = EquipmentProfitStatus.INCOMPLETE
    error: Optional[str] = None

    def to_dict(self) -> dict:
        """Response body shape (camelCase, error only when present)."""
        body = {
            "equipmentId": self.equipment_id,
            "purchasePrice": self.purchase_price,
            "totalRentalRevenue": self.total_rental_revenue,
            "totalServiceCost": self.total_service_cost,
            "profit": self.profit,
            "roi": self.roi,
            "status": self.status.value,
        }
        if self.error:
            body["error"] = self.error
        return body


# ─── Receivables aging ───

@dataclass
class AgingInvoice:
    """An unpaid (or partially paid) outgoing invoice."""
    id: str
    invoice_number: str
    partner_id: str
    partner_name: str
    due_date: date | datetime
    balance_due: float
    tenant_id: str = ""
    days_overdue: Optional[int] = None  # set when placed into a bucket


@dataclass
class AgingBucket:
    """One aging bucket."""
    label: str
    count: int = 0
    total_amount: float = 0.0
    invoices: list[AgingInvoice] = field(default_factory=list)


@dataclass
class TopDebtor:
    """A partner ranked by open balance."""
    partner_id: str
    partner_name: str
    total_debt: float = 0.0
    invoice_count: int = 0
    oldest_due_date: Optional[date | datetime] = None


@dataclass
class AgingReport:
    """Receivables aging report."""
    generated_at: datetime
    total_receivables: float = 0.0
    buckets: list[AgingBucket] = field(default_factory=list)
    top_debtors: list[TopDebtor] = field(default_factory=list)

    def bucket(self, label: str) -> Optional[AgingBucket]:
        for b in self.buckets:
            if b.label == label:
                return b
        return None


# ─── Revenue forecast ───

REVENUE_SOURCE_TYPES = ("rental", "contract", "service")


@dataclass(frozen=True)
class RevenueSourceLine:
    """One expected revenue item (active rental fee, contract fee, open worksheet)."""
    type: str
    amount: float
    tenant_id: str = ""
    description: str = ""


@dataclass
class RevenueSource:
    """Aggregated revenue of one source type."""
    type: str
    label: str
    amount: float = 0.0
    percentage: int = 0
    count: int = 0


@dataclass
class RevenueComparison:
    """Month-over-month comparison against the previous month's actuals."""
    previous_month: float = 0.0
    change_amount: float = 0.0
    change_percent: float = 0.0
    trend: str = "stable"  # up, down, stable


@dataclass
class RevenueForecastResult:
    """Expected revenue of a month, broken down by source."""
    generated_at: datetime
    forecast_month: str
    total_forecast: float = 0.0
    sources: list[RevenueSource] = field(default_factory=list)
    comparison: RevenueComparison = field(default_factory=RevenueComparison)

    def source(self, source_type: str) -> Optional[RevenueSource]:
        for s in self.sources:
            if s.type == source_type:
                return s
        return None
