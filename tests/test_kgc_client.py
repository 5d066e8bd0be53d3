import json
from datetime import date, datetime, timezone

import pytest
import requests

from erp_dashboard.api import kgc_client
from erp_dashboard.api.auth import KgcAuth
from erp_dashboard.api.kgc_client import KgcClient
from erp_dashboard.services.equipment_profit_service import (
    ERROR_NOT_FOUND,
    EquipmentProfitService,
)
from erp_dashboard.services.revenue_forecast_service import RevenueForecastService


def make_response(status, payload=None):
    resp = requests.Response()
    resp.status_code = status
    resp.url = "http://erp.test"
    resp._content = b"" if payload is None else json.dumps(payload).encode()
    return resp


class FakeSession:
    """Replays queued responses and records every call."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.posts = []

    def request(self, method, url, headers=None, params=None, **kwargs):
        self.calls.append((method, url, dict(params or {}), headers))
        return self.responses.pop(0)

    def post(self, url, json=None):
        self.posts.append((url, json))
        return self.responses.pop(0)


@pytest.fixture(autouse=True)
def no_waiting(monkeypatch):
    monkeypatch.setattr(kgc_client, "MIN_REQUEST_INTERVAL", 0)
    monkeypatch.setattr(kgc_client, "RETRY_BACKOFF", 0)


def make_client(*responses, auth=None):
    client = KgcClient(auth=auth or KgcAuth(token="t"), base_url="http://erp.test/api/v1/")
    client.session = FakeSession(*responses)
    return client


def test_bearer_header_and_base_url():
    client = make_client(make_response(200, {"data": []}))

    client.get("/bergep")

    method, url, _, headers = client.session.calls[0]
    assert (method, url) == ("GET", "http://erp.test/api/v1/bergep")
    assert headers["Authorization"] == "Bearer t"


def test_fetch_all_pages_follows_meta_total():
    client = make_client(
        make_response(200, {"data": [{"id": 1}, {"id": 2}], "meta": {"total": 3}}),
        make_response(200, {"data": [{"id": 3}], "meta": {"total": 3}}),
    )

    items = client.fetch_all_pages("/bergep", params={"tenantId": "t1"}, page_size=2)

    assert [i["id"] for i in items] == [1, 2, 3]
    pages = [params["page"] for _, _, params, _ in client.session.calls]
    assert pages == [1, 2]
    assert client.session.calls[0][2]["tenantId"] == "t1"


def test_fetch_all_pages_accepts_plain_list():
    client = make_client(make_response(200, [{"id": 1}]))

    assert client.fetch_all_pages("/rentals/active") == [{"id": 1}]


def test_retries_server_errors():
    client = make_client(make_response(503), make_response(200, {"data": {"ok": True}}))

    assert client.unwrap(client.get("/x")) == {"ok": True}
    assert len(client.session.calls) == 2


def test_gives_up_after_max_retries():
    client = make_client(*[make_response(500) for _ in range(kgc_client.MAX_RETRIES)])

    with pytest.raises(requests.exceptions.HTTPError):
        client.get("/x")


def test_client_errors_are_not_retried():
    client = make_client(make_response(400, {"message": "hibás kérés"}))

    with pytest.raises(requests.exceptions.HTTPError):
        client.get("/x")
    assert len(client.session.calls) == 1


def test_unauthorized_logs_in_again():
    auth_session = FakeSession(
        make_response(200, {"data": {"accessToken": "fresh", "refreshToken": "r", "expiresIn": 900}})
    )
    auth = KgcAuth(token="stale", email="admin@kgc.hu", password="titok", session=auth_session)
    client = make_client(make_response(401), make_response(200, {"data": []}), auth=auth)

    client.get("/bergep")

    assert auth_session.posts[0][1] == {"email": "admin@kgc.hu", "password": "titok"}
    assert client.session.calls[1][3]["Authorization"] == "Bearer fresh"
    assert auth.refresh_token == "r"


def test_auth_requires_token_or_credentials(monkeypatch):
    from erp_dashboard.api import auth as auth_module
    monkeypatch.setattr(auth_module, "API_TOKEN", None)
    monkeypatch.setattr(auth_module, "API_EMAIL", None)
    monkeypatch.setattr(auth_module, "API_PASSWORD", None)

    with pytest.raises(ValueError):
        KgcAuth()


# ─── Data access ───

def test_unpaid_invoices_are_parsed():
    client = make_client(make_response(200, {
        "data": [
            {"id": "i1", "invoiceNumber": "KGC-2026-001", "partnerId": "p1",
             "partnerName": "Kovács Kft.", "dueDate": "2026-01-05T00:00:00.000Z",
             "balanceDue": "245000"},
            {"id": "i2", "partnerId": "p2", "balanceDue": 1000},
        ],
        "meta": {"total": 2},
    }))

    invoices = client.get_unpaid_invoices("tenant-1", partner_id="p1")

    assert len(invoices) == 1
    inv = invoices[0]
    assert inv.balance_due == 245000.0
    assert inv.due_date == datetime(2026, 1, 5, tzinfo=timezone.utc)
    assert inv.tenant_id == "tenant-1"
    assert client.session.calls[0][2]["partnerId"] == "p1"


def test_active_rentals_fall_back_to_expected_end_date():
    client = make_client(make_response(200, [
        {"id": "r1", "partnerName": "Szabó Bt.", "expectedEndDate": "2026-02-13",
         "equipmentName": "Hilti vésőgép", "partnerPhone": "+3620111222"},
        {"id": "r2"},
    ]))

    rentals = client.get_active_rentals("tenant-1")

    assert [r.id for r in rentals] == ["r1"]
    assert rentals[0].end_date == datetime(2026, 2, 13)


def test_missing_equipment_is_not_found():
    client = make_client(make_response(404, {"message": "not found"}))

    result = EquipmentProfitService(client).calculate_profit("eq-404", "tenant-1")

    assert result.error == ERROR_NOT_FOUND


def test_equipment_profit_data_keeps_missing_price():
    client = make_client(make_response(200, {"data": {
        "equipmentId": "eq-1", "purchasePrice": None,
        "totalRentalRevenue": 120000, "totalServiceCost": 5000,
    }}))

    data = client.get_equipment_profit_data("eq-1")

    assert data.purchase_price is None
    assert data.total_rental_revenue == 120000


def test_revenue_forecast_over_http():
    client = make_client(
        make_response(200, {"data": [{"amount": 150000}], "meta": {"total": 1}}),
        make_response(200, {"data": [{"amount": "30000"}], "meta": {"total": 1}}),
        make_response(200, {"data": [], "meta": {"total": 0}}),
        make_response(200, {"data": {"total": 200000}}),
    )
    now = datetime(2026, 2, 10, tzinfo=timezone.utc)

    result = RevenueForecastService(client).get_forecast("tenant-1", date(2026, 2, 1), now)

    assert result.total_forecast == 180000
    assert result.comparison.change_percent == -10
    urls = [url for _, url, _, _ in client.session.calls]
    assert urls[0].endswith("/revenue-forecast/sources/rental")
    assert client.session.calls[3][2]["month"] == "2026-01"


def test_single_attempt_unauthorized_raises_http_error(monkeypatch):
    monkeypatch.setattr(kgc_client, "MAX_RETRIES", 1)
    client = make_client(make_response(401))

    with pytest.raises(requests.exceptions.HTTPError):
        client.get("/bergep")
