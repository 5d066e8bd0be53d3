"""
Revenue Forecast Service.

Expected revenue of a month from three sources:
- rental:   outstanding fees of active rentals
- contract: monthly fee of long-term contracts
- service:  expected revenue of open service worksheets

Compared against the previous month's actual revenue.
"""

import logging
from datetime import date, datetime
from typing import Protocol

from erp_dashboard.config import TREND_STABLE_THRESHOLD
from erp_dashboard.models.financial_models import (
    RevenueComparison,
    RevenueForecastResult,
    RevenueSource,
    RevenueSourceLine,
)
from erp_dashboard.utils.money import round_money, round_percent
from erp_dashboard.utils.params import month_key, previous_month

logger = logging.getLogger(__name__)

SOURCE_LABELS = {
    "rental": "Bérlések",
    "contract": "Szerződések",
    "service": "Szerviz munkalapok",
}


class RevenueForecastRepository(Protocol):
    def get_active_rental_revenue(self, tenant_id: str, month: date) -> list[RevenueSourceLine]: ...

    def get_long_term_contract_revenue(self, tenant_id: str, month: date) -> list[RevenueSourceLine]: ...

    def get_open_service_worksheet_revenue(self, tenant_id: str, month: date) -> list[RevenueSourceLine]: ...

    def get_previous_month_actual_revenue(self, tenant_id: str, month: date) -> float: ...


# ─── Comparison ───

def determine_trend(change_percent: float) -> str:
    """Changes under 1% either way count as stable."""
    if abs(change_percent) < TREND_STABLE_THRESHOLD:
        return "stable"
    return "up" if change_percent > 0 else "down"


def compare_to_previous(total_forecast: float, previous_month_actual: float) -> RevenueComparison:
    if previous_month_actual == 0:
        return RevenueComparison()

    diff = total_forecast - previous_month_actual
    change_percent = round_money(diff / previous_month_actual * 100)
    return RevenueComparison(
        previous_month=previous_month_actual,
        change_amount=round_money(diff),
        change_percent=change_percent,
        trend=determine_trend(change_percent),
    )


# ─── Aggregation ───

def _sum_lines(lines: list[RevenueSourceLine]) -> float:
    return round_money(sum(line.amount for line in lines))


def build_revenue_forecast(
    rental_lines: list[RevenueSourceLine],
    contract_lines: list[RevenueSourceLine],
    service_lines: list[RevenueSourceLine],
    previous_month_actual: float,
    target_month: date,
    now: datetime,
) -> RevenueForecastResult:
    """
    Aggregate the three revenue sources of ``target_month``.

    Percentages are rounded per source, so they may not add up to exactly 100.
    """
    by_type = {
        "rental": rental_lines,
        "contract": contract_lines,
        "service": service_lines,
    }
    amounts = {t: _sum_lines(lines) for t, lines in by_type.items()}
    total = round_money(sum(amounts.values()))

    sources = [
        RevenueSource(
            type=t,
            label=SOURCE_LABELS[t],
            amount=amounts[t],
            percentage=round_percent(amounts[t] / total * 100) if total > 0 else 0,
            count=len(lines),
        )
        for t, lines in by_type.items()
    ]

    comparison = compare_to_previous(total, previous_month_actual)
    forecast_month = month_key(target_month)

    logger.debug(
        "revenue forecast %.2f (%s)", total, comparison.trend,
        extra={"forecast_month": forecast_month},
    )

    return RevenueForecastResult(
        generated_at=now,
        forecast_month=forecast_month,
        total_forecast=total,
        sources=sources,
        comparison=comparison,
    )


# ─── Service (repository-backed) ───

class RevenueForecastService:
    """Collects the revenue lines of a tenant and builds the forecast."""

    def __init__(self, repository: RevenueForecastRepository):
        self.repository = repository

    def get_forecast(self, tenant_id: str, target_month: date, now: datetime) -> RevenueForecastResult:
        target_month = target_month.replace(day=1)
        repo = self.repository
        return build_revenue_forecast(
            rental_lines=repo.get_active_rental_revenue(tenant_id, target_month),
            contract_lines=repo.get_long_term_contract_revenue(tenant_id, target_month),
            service_lines=repo.get_open_service_worksheet_revenue(tenant_id, target_month),
            previous_month_actual=repo.get_previous_month_actual_revenue(
                tenant_id, previous_month(target_month)
            ),
            target_month=target_month,
            now=now,
        )
