import pytest

from src.integrations.contracts.interfaces import CreatePaymentRequest
from src.integrations.contracts.payments import (
    build_code_payload,
    encode_payload,
    extract_deeplink,
    payment_details_path,
    validate_create_payment,
    validate_merchant_payment_id,
)
from src.integrations.errors import UpstreamError, ValidationError


def test_validate_create_payment_trims_and_builds_request():
    request = validate_create_payment(100, " abc ", " test ")
    assert request == CreatePaymentRequest(amount=100, merchant_payment_id="abc", description="test")


@pytest.mark.parametrize(
    "amount, payment_id, description",
    [(None, "abc", "d"), (0, "abc", "d"), (1, None, "d"), (1, "", "d"), (1, "abc", None), (1, "abc", "")],
)
def test_validate_create_payment_rejects_missing(amount, payment_id, description):
    with pytest.raises(ValidationError):
        validate_create_payment(amount, payment_id, description)


def test_validate_merchant_payment_id():
    assert validate_merchant_payment_id(" order-1 ") == "order-1"
    with pytest.raises(ValidationError):
        validate_merchant_payment_id("  ")


def test_code_payload_has_fixed_fields():
    payload = build_code_payload(CreatePaymentRequest(amount=250.0, merchant_payment_id="o-1", description="Tea"), requested_at=42)

    assert payload["amount"] == {"amount": 250, "currency": "JPY"}
    assert payload["codeType"] == "ORDER_QR"
    assert payload["redirectType"] == "APP_DEEP_LINK"
    assert payload["requestedAt"] == 42


def test_encode_payload_is_compact_and_keeps_unicode():
    assert encode_payload({"orderDescription": "お茶", "n": 1}) == '{"orderDescription":"お茶","n":1}'.encode("utf-8")


def test_payment_details_path_encodes_id():
    assert payment_details_path("order-1") == "/v2/payments/order-1"
    assert payment_details_path("a/b") == "/v2/payments/a%2Fb"


def test_extract_deeplink_requires_value():
    assert extract_deeplink({"data": {"deeplink": "paypay://x"}}) == "paypay://x"
    with pytest.raises(UpstreamError):
        extract_deeplink({"data": None})
