from datetime import datetime, timedelta

import httpx
import pytest
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.integrations.clients.real_http.payments import LiveGateway
from src.integrations.contracts.interfaces import (
    CreatePaymentRequest,
    CreatePaymentResult,
    PaymentGateway,
    PaymentStatusResult,
)
from src.utils.config_loader import RelaySettings


class RecordingGateway(PaymentGateway):
    """Counts calls so tests can assert the provider was never reached."""

    def __init__(self):
        self.calls = []

    @property
    def mock_mode(self) -> bool:
        return False

    async def create_payment(self, request: CreatePaymentRequest) -> CreatePaymentResult:
        self.calls.append(("create", request))
        return CreatePaymentResult(data={"data": {"deeplink": "paypay://x"}}, deeplink="paypay://x")

    async def get_payment_status(self, merchant_payment_id: str) -> PaymentStatusResult:
        self.calls.append(("status", merchant_payment_id))
        return PaymentStatusResult(data={"data": {"status": "CREATED"}})


def _live_client(settings, credential, fixed_clock, fixed_random, handler):
    gateway = LiveGateway(
        credential=credential,
        base_url=settings.api_base_url,
        clock=fixed_clock,
        random_bytes=fixed_random,
        transport=httpx.MockTransport(handler),
    )
    return TestClient(create_app(settings=settings, gateway=gateway), raise_server_exceptions=False)


@pytest.fixture
def mock_client(mock_settings):
    return TestClient(create_app(settings=mock_settings))


def test_health_reports_mock_mode(mock_client):
    response = mock_client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert body["mockMode"] is True
    assert datetime.fromisoformat(body["timestamp"]).utcoffset() == timedelta(0)


def test_mock_create_payment_returns_deeplink(mock_client):
    response = mock_client.post(
        "/create-payment",
        json={"amount": 100, "merchantPaymentId": "abc", "description": "test"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["mockMode"] is True
    assert "abc" in body["deeplink"]
    assert "amount=100" in body["deeplink"]
    assert body["data"]["data"]["merchantPaymentId"] == "abc"


def test_mock_payment_status_is_completed(mock_client):
    response = mock_client.get("/payment-status/abc")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["data"]["status"] == "COMPLETED"


@pytest.mark.parametrize(
    "payload",
    [
        {"merchantPaymentId": "abc", "description": "test"},
        {"amount": 0, "merchantPaymentId": "abc", "description": "test"},
        {"amount": 100, "description": "test"},
        {"amount": 100, "merchantPaymentId": "abc", "description": "   "},
    ],
)
def test_create_payment_missing_fields_never_reaches_gateway(live_settings, payload):
    gateway = RecordingGateway()
    client = TestClient(create_app(settings=live_settings, gateway=gateway))

    response = client.post("/create-payment", json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "Missing required fields" in body["error"]
    assert gateway.calls == []


@pytest.mark.parametrize("amount", [True, "100"])
def test_create_payment_rejects_non_numeric_amount(live_settings, amount):
    gateway = RecordingGateway()
    client = TestClient(create_app(settings=live_settings, gateway=gateway))

    response = client.post(
        "/create-payment",
        json={"amount": amount, "merchantPaymentId": "abc", "description": "test"},
    )

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert gateway.calls == []


def test_create_payment_malformed_body_is_400(live_settings):
    gateway = RecordingGateway()
    client = TestClient(create_app(settings=live_settings, gateway=gateway))

    response = client.post(
        "/create-payment",
        content=b"not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert gateway.calls == []


def test_blank_payment_id_is_400(live_settings):
    gateway = RecordingGateway()
    client = TestClient(create_app(settings=live_settings, gateway=gateway))

    response = client.get("/payment-status/%20")

    assert response.status_code == 400
    assert response.json()["error"] == "Missing merchantPaymentId parameter"
    assert gateway.calls == []


def test_live_status_404_maps_to_not_found(live_settings, credential, fixed_clock, fixed_random):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"resultInfo": {"code": "DYNAMIC_QR_PAYMENT_NOT_FOUND"}})

    client = _live_client(live_settings, credential, fixed_clock, fixed_random, handler)
    response = client.get("/payment-status/unknown")

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Payment not found", "mockMode": False}


def test_live_status_provider_failure_is_500_with_payload(live_settings, credential, fixed_clock, fixed_random):
    error_body = {"resultInfo": {"code": "INTERNAL_SERVER_ERROR"}}

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json=error_body)

    client = _live_client(live_settings, credential, fixed_clock, fixed_random, handler)
    response = client.get("/payment-status/order-1")

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["error"] == error_body
    assert "details" not in body


def test_live_create_timeout_is_generic_failure(live_settings, credential, fixed_clock, fixed_random):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    client = _live_client(live_settings, credential, fixed_clock, fixed_random, handler)
    response = client.post(
        "/create-payment",
        json={"amount": 100, "merchantPaymentId": "abc", "description": "test"},
    )

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert "Payment creation failed" in body["error"]


def test_live_create_payment_success(live_settings, credential, fixed_clock, fixed_random):
    provider_body = {"resultInfo": {"code": "SUCCESS"}, "data": {"deeplink": "paypay://payment?link_key=xyz"}}

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"].startswith("hmac OPA-Auth:test_api_key:")
        return httpx.Response(201, json=provider_body)

    client = _live_client(live_settings, credential, fixed_clock, fixed_random, handler)
    response = client.post(
        "/create-payment",
        json={"amount": 100, "merchantPaymentId": "abc", "description": "test"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": provider_body,
        "deeplink": "paypay://payment?link_key=xyz",
        "mockMode": False,
    }


def test_details_only_in_development(credential, fixed_clock, fixed_random):
    settings = RelaySettings(credential=credential, app_env="development")

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = _live_client(settings, credential, fixed_clock, fixed_random, handler)
    response = client.get("/payment-status/order-1")

    assert response.status_code == 500
    assert "refused" in response.json()["details"]


def test_unknown_route_is_endpoint_not_found(mock_client):
    response = mock_client.get("/nope")

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Endpoint not found", "mockMode": True}


def test_debug_endpoint_hidden_unless_enabled(mock_client, credential):
    assert mock_client.get("/debug").status_code == 404

    settings = RelaySettings(credential=credential, debug_endpoint=True)
    client = TestClient(create_app(settings=settings, gateway=RecordingGateway()))
    body = client.get("/debug").json()

    assert body["hasApiKey"] is True
    assert body["apiKeyPreview"] == "test_api..."
    assert "test_api_secret" not in str(body)


def test_cors_preflight_allows_any_origin(mock_client):
    response = mock_client.options(
        "/create-payment",
        headers={"Origin": "https://app.example", "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_lifespan_builds_gateway_from_environment(monkeypatch):
    monkeypatch.setenv("PAYPAY_MOCK_MODE", "true")
    monkeypatch.delenv("PAYPAY_API_KEY", raising=False)
    monkeypatch.delenv("PAYPAY_API_SECRET", raising=False)
    monkeypatch.delenv("PAYPAY_MERCHANT_ID", raising=False)

    with TestClient(create_app()) as client:
        assert client.get("/health").json()["mockMode"] is True


def test_lifespan_fails_without_credentials(monkeypatch):
    from src.integrations.errors import ConfigurationError

    monkeypatch.delenv("PAYPAY_MOCK_MODE", raising=False)
    monkeypatch.delenv("PAYPAY_API_KEY", raising=False)
    monkeypatch.delenv("PAYPAY_API_SECRET", raising=False)
    monkeypatch.delenv("PAYPAY_MERCHANT_ID", raising=False)

    with pytest.raises(ConfigurationError):
        with TestClient(create_app()):
            pass
