"""
HTTP client for the rental ERP REST API.

Responsibilities:
- Automatic authentication (Bearer token)
- Rate limiting (100ms between requests)
- Retry with exponential backoff
- Automatic pagination and {data: ...} envelope unwrapping
- Typed data-access methods used by the dashboard services
"""

import logging
import time
from datetime import date, datetime
from typing import Optional

import requests

from erp_dashboard.api.auth import KgcAuth
from erp_dashboard.config import (
    API_BASE_URL,
    MIN_REQUEST_INTERVAL,
    MAX_RETRIES,
    RETRY_BACKOFF,
    PAGE_SIZE,
)
from erp_dashboard.models.financial_models import (
    AgingInvoice,
    EquipmentProfitInput,
    RevenueSourceLine,
)
from erp_dashboard.models.rental_models import RentalExpirationInput
from erp_dashboard.utils.params import month_key

logger = logging.getLogger(__name__)

RETRY_STATUSES = (429, 500, 502, 503, 504)


def _parse_datetime(value: str | None) -> Optional[datetime]:
    """ISO-8601 from the API ("2026-02-07T10:00:00.000Z" or "2026-02-07")."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, TypeError, AttributeError):
        return None


def _to_float(value, default: float = 0.0) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


class KgcClient:
    """Low-level REST client plus the repository methods of the services."""

    def __init__(self, auth: KgcAuth = None, base_url: str = None):
        self.auth = auth or KgcAuth()
        self.base_url = (base_url or API_BASE_URL).rstrip("/")
        self.session = requests.Session()
        self._last_request_time = 0.0

    # ─── HTTP primitives ───

    def _get_headers(self) -> dict:
        token = self.auth.get_access_token()
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _throttle(self):
        elapsed = time.time() - self._last_request_time
        if elapsed < MIN_REQUEST_INTERVAL:
            time.sleep(MIN_REQUEST_INTERVAL - elapsed)
        self._last_request_time = time.time()

    def _request(self, method: str, path: str, **kwargs) -> dict | list | None:
        last_error = None
        for attempt in range(MAX_RETRIES):
            self._throttle()
            try:
                url = f"{self.base_url}{path}"
                resp = self.session.request(
                    method, url, headers=self._get_headers(), **kwargs
                )
                resp.raise_for_status()
                if resp.status_code == 204 or not resp.content:
                    return None
                return resp.json()
            except requests.exceptions.HTTPError as e:
                status = e.response.status_code if e.response is not None else 0
                # 401 → token expired, log in again once
                if status == 401 and attempt == 0:
                    last_error = e
                    self.auth.invalidate()
                    continue
                if status in RETRY_STATUSES:
                    last_error = e
                    logger.warning("%s %s → %s, retrying", method, path, status)
                    time.sleep(RETRY_BACKOFF * (2 ** attempt))
                    continue
                raise
            except requests.exceptions.ConnectionError as e:
                last_error = e
                logger.warning("%s %s connection error, retrying", method, path)
                time.sleep(RETRY_BACKOFF * (2 ** attempt))
                continue

        raise last_error

    def get(self, path: str, params: dict = None):
        return self._request("GET", path, params=params)

    @staticmethod
    def unwrap(payload):
        """Strip the {data: ...} envelope of the API responses."""
        if isinstance(payload, dict) and "data" in payload:
            return payload["data"]
        return payload

    # ─── Pagination ───

    def fetch_all_pages(
        self,
        path: str,
        params: dict = None,
        page_size: int = PAGE_SIZE,
    ) -> list:
        """Fetch every page of a paginated endpoint."""
        params = dict(params or {})
        params["pageSize"] = page_size
        all_items = []
        page = 1

        while True:
            params["page"] = page
            result = self.get(path, params=params)

            if result is None:
                break

            # Paginated {data: [...], meta: {total}} or a plain list
            if isinstance(result, dict):
                items = result.get("data") or []
                total = (result.get("meta") or {}).get("total", len(items))
            elif isinstance(result, list):
                items = result
                total = len(items)
            else:
                break

            all_items.extend(items)

            if len(all_items) >= total or not items:
                break
            page += 1

        return all_items

    def get_one(self, path: str, params: dict = None) -> dict | None:
        """Single resource; 404 means it does not exist."""
        try:
            return self.unwrap(self.get(path, params=params))
        except requests.exceptions.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                return None
            raise

    # ─── Equipment ───

    def list_equipment(self, tenant_id: str) -> list[dict]:
        """Equipment of the tenant (id, name, serial number) for pickers."""
        return self.fetch_all_pages("/bergep", params={"tenantId": tenant_id})

    def get_equipment_profit_data(
        self, equipment_id: str, tenant_id: str = None
    ) -> EquipmentProfitInput | None:
        params = {"tenantId": tenant_id} if tenant_id else None
        data = self.get_one(f"/bergep/{equipment_id}/profit-data", params=params)
        if not data:
            return None

        price = data.get("purchasePrice")
        return EquipmentProfitInput(
            equipment_id=data.get("equipmentId", equipment_id),
            purchase_price=None if price is None else _to_float(price),
            total_rental_revenue=_to_float(data.get("totalRentalRevenue")),
            total_service_cost=_to_float(data.get("totalServiceCost")),
        )

    # ─── Receivables ───

    def get_unpaid_invoices(
        self, tenant_id: str, partner_id: str = None
    ) -> list[AgingInvoice]:
        params = {"tenantId": tenant_id}
        if partner_id:
            params["partnerId"] = partner_id
        rows = self.fetch_all_pages("/invoices/unpaid", params=params)

        invoices = []
        for row in rows:
            due = _parse_datetime(row.get("dueDate"))
            if due is None:
                logger.warning("invoice %s without due date skipped", row.get("id"))
                continue
            invoices.append(AgingInvoice(
                id=row.get("id", ""),
                tenant_id=row.get("tenantId", tenant_id),
                invoice_number=row.get("invoiceNumber", ""),
                partner_id=row.get("partnerId", ""),
                partner_name=row.get("partnerName", ""),
                due_date=due,
                balance_due=_to_float(row.get("balanceDue")),
            ))
        return invoices

    # ─── Rentals ───

    def get_active_rentals(self, tenant_id: str) -> list[RentalExpirationInput]:
        rows = self.fetch_all_pages("/rentals/active", params={"tenantId": tenant_id})

        rentals = []
        for row in rows:
            end = _parse_datetime(row.get("endDate") or row.get("expectedEndDate"))
            if end is None:
                continue
            rentals.append(RentalExpirationInput(
                id=row.get("id", ""),
                tenant_id=row.get("tenantId", tenant_id),
                partner_id=row.get("partnerId", ""),
                partner_name=row.get("partnerName", ""),
                partner_phone=row.get("partnerPhone"),
                end_date=end,
                equipment_name=row.get("equipmentName", ""),
                assigned_user_id=row.get("assignedUserId"),
            ))
        return rentals

    # ─── Revenue forecast sources ───

    def _revenue_lines(self, source: str, tenant_id: str, month: date) -> list[RevenueSourceLine]:
        rows = self.fetch_all_pages(
            f"/revenue-forecast/sources/{source}",
            params={"tenantId": tenant_id, "month": month_key(month)},
        )
        return [
            RevenueSourceLine(
                type=source,
                amount=_to_float(row.get("amount")),
                tenant_id=row.get("tenantId", tenant_id),
                description=row.get("description", ""),
            )
            for row in rows
        ]

    def get_active_rental_revenue(self, tenant_id: str, month: date) -> list[RevenueSourceLine]:
        return self._revenue_lines("rental", tenant_id, month)

    def get_long_term_contract_revenue(self, tenant_id: str, month: date) -> list[RevenueSourceLine]:
        return self._revenue_lines("contract", tenant_id, month)

    def get_open_service_worksheet_revenue(self, tenant_id: str, month: date) -> list[RevenueSourceLine]:
        return self._revenue_lines("service", tenant_id, month)

    def get_previous_month_actual_revenue(self, tenant_id: str, month: date) -> float:
        data = self.get_one(
            "/revenue-forecast/actual",
            params={"tenantId": tenant_id, "month": month_key(month)},
        )
        if isinstance(data, dict):
            return _to_float(data.get("total"))
        return _to_float(data)
