"""
Equipment Profit Service.

Payback of a rental equipment:
    PROFIT = Σ rental revenue - purchase price - Σ non-warranty service cost
    ROI %  = PROFIT / purchase price × 100

Every failure path returns an INCOMPLETE result with a readable error;
nothing raises.
"""

import logging
from typing import Optional, Protocol

from erp_dashboard.models.financial_models import (
    EquipmentProfitInput,
    EquipmentProfitResult,
    EquipmentProfitStatus,
)
from erp_dashboard.utils.money import round_money

logger = logging.getLogger(__name__)

ERROR_ID_REQUIRED = "Equipment ID szükséges"
ERROR_NOT_FOUND = "Bérgép nem található"
ERROR_PRICE_REQUIRED = "Vételár szükséges a megtérülés számításhoz"
ERROR_PRICE_NEGATIVE = "A vételár nem lehet negatív"
ERROR_AMOUNT_NEGATIVE = "A bevétel és a szervizköltség nem lehet negatív"


class EquipmentProfitRepository(Protocol):
    def get_equipment_profit_data(
        self, equipment_id: str, tenant_id: Optional[str] = None
    ) -> Optional[EquipmentProfitInput]: ...


def _incomplete(
    equipment_id: str,
    error: str,
    data: Optional[EquipmentProfitInput] = None,
) -> EquipmentProfitResult:
    if data is None:
        return EquipmentProfitResult(equipment_id=equipment_id, error=error)
    return EquipmentProfitResult(
        equipment_id=equipment_id,
        purchase_price=data.purchase_price,
        total_rental_revenue=data.total_rental_revenue,
        total_service_cost=data.total_service_cost,
        error=error,
    )


def determine_status(profit: float) -> EquipmentProfitStatus:
    if profit > 0:
        return EquipmentProfitStatus.PROFITABLE
    if profit < 0:
        return EquipmentProfitStatus.LOSING
    return EquipmentProfitStatus.BREAK_EVEN


# ─── Calculation ───

def calculate_profit(data: EquipmentProfitInput) -> EquipmentProfitResult:
    """Profit, ROI and status from already-fetched equipment figures."""
    equipment_id = (data.equipment_id or "").strip()
    if not equipment_id:
        return _incomplete(data.equipment_id or "", ERROR_ID_REQUIRED, data)

    price = data.purchase_price
    if price is not None and price < 0:
        logger.warning(
            "negative purchase price", extra={"equipment_id": equipment_id}
        )
        return _incomplete(equipment_id, ERROR_PRICE_NEGATIVE, data)
    if data.total_rental_revenue < 0 or data.total_service_cost < 0:
        logger.warning(
            "negative revenue or service cost", extra={"equipment_id": equipment_id}
        )
        return _incomplete(equipment_id, ERROR_AMOUNT_NEGATIVE, data)
    if not price:
        logger.info(
            "purchase price missing, profit incomplete",
            extra={"equipment_id": equipment_id},
        )
        return _incomplete(equipment_id, ERROR_PRICE_REQUIRED, data)

    raw_profit = data.total_rental_revenue - price - data.total_service_cost
    profit = round_money(raw_profit)
    # ROI from the unrounded profit, otherwise the two roundings compound
    roi = round_money(raw_profit / price * 100)

    result = EquipmentProfitResult(
        equipment_id=equipment_id,
        purchase_price=price,
        total_rental_revenue=data.total_rental_revenue,
        total_service_cost=data.total_service_cost,
        profit=profit,
        roi=roi,
        status=determine_status(profit),
    )
    logger.debug(
        "equipment profit %s roi=%s", result.status.value, roi,
        extra={"equipment_id": equipment_id},
    )
    return result


# ─── Service (repository-backed) ───

class EquipmentProfitService:
    """Fetches equipment aggregates and runs the profit calculation."""

    def __init__(self, repository: EquipmentProfitRepository):
        self.repository = repository

    def calculate_profit(
        self, equipment_id: str, tenant_id: Optional[str] = None
    ) -> EquipmentProfitResult:
        if not equipment_id or not equipment_id.strip():
            return _incomplete(equipment_id or "", ERROR_ID_REQUIRED)

        equipment_id = equipment_id.strip()
        try:
            data = self.repository.get_equipment_profit_data(equipment_id, tenant_id)
        except Exception as e:
            logger.exception(
                "equipment data lookup failed",
                extra={"equipment_id": equipment_id, "tenant_id": tenant_id},
            )
            return _incomplete(equipment_id, str(e) or ERROR_NOT_FOUND)

        if data is None:
            return _incomplete(equipment_id, ERROR_NOT_FOUND)

        return calculate_profit(data)
