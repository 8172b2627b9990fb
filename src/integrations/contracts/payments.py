"""
Payment contracts.

Defines the request/response structures for the two payment operations:
- issuing a payment code (POST /v2/codes)
- checking payment status (GET /v2/payments/{merchantPaymentId})

These contracts must be used by both:
- clients/mocks/payments.py (fabricated responses for development/testing)
- clients/real_http/payments.py (signed calls to the provider)
"""

import json
from typing import Any, Dict, Optional
from urllib.parse import quote

from src.integrations.contracts.interfaces import CreatePaymentRequest
from src.integrations.errors import UpstreamError, ValidationError

CURRENCY = "JPY"
CODE_TYPE = "ORDER_QR"
REDIRECT_TYPE = "APP_DEEP_LINK"
DEFAULT_REDIRECT_URL = "paypayflutterdemo://payment-success"

CODES_PATH = "/v2/codes"
PAYMENT_DETAILS_PATH = "/v2/payments/{merchant_payment_id}"

MISSING_CREATE_FIELDS_MESSAGE = "Missing required fields: amount, merchantPaymentId, description"
MISSING_PAYMENT_ID_MESSAGE = "Missing merchantPaymentId parameter"


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def validate_create_payment(
    amount: Any,
    merchant_payment_id: Optional[str],
    description: Optional[str],
) -> CreatePaymentRequest:
    """
    Check the three required inputs and build the request.

    A zero amount or a blank string counts as missing.
    """
    if isinstance(merchant_payment_id, str):
        merchant_payment_id = merchant_payment_id.strip()
    if isinstance(description, str):
        description = description.strip()

    if not amount or not merchant_payment_id or not description:
        raise ValidationError(MISSING_CREATE_FIELDS_MESSAGE)

    return CreatePaymentRequest(
        amount=amount,
        merchant_payment_id=merchant_payment_id,
        description=description,
    )


def validate_merchant_payment_id(merchant_payment_id: Optional[str]) -> str:
    value = (merchant_payment_id or "").strip()
    if not value:
        raise ValidationError(MISSING_PAYMENT_ID_MESSAGE)
    return value


# ---------------------------------------------------------------------------
# Provider payloads
# ---------------------------------------------------------------------------

def format_amount(amount: Any) -> str:
    """Render 100.0 as "100" so deep-links match what the app sends."""
    if isinstance(amount, float) and amount.is_integer():
        return str(int(amount))
    return str(amount)


def amount_block(amount: Any) -> Dict[str, Any]:
    if isinstance(amount, float) and amount.is_integer():
        amount = int(amount)
    return {"amount": amount, "currency": CURRENCY}


def build_code_payload(
    request: CreatePaymentRequest,
    requested_at: int,
    redirect_url: str = DEFAULT_REDIRECT_URL,
) -> Dict[str, Any]:
    return {
        "merchantPaymentId": request.merchant_payment_id,
        "amount": amount_block(request.amount),
        "orderDescription": request.description,
        "codeType": CODE_TYPE,
        "redirectUrl": redirect_url,
        "redirectType": REDIRECT_TYPE,
        "requestedAt": requested_at,
    }


def encode_payload(payload: Dict[str, Any]) -> bytes:
    """Serialise once; the same bytes are signed and sent."""
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def payment_details_path(merchant_payment_id: str) -> str:
    return PAYMENT_DETAILS_PATH.format(merchant_payment_id=quote(merchant_payment_id, safe=""))


def extract_deeplink(body: Dict[str, Any]) -> str:
    data = body.get("data") if isinstance(body, dict) else None
    deeplink = data.get("deeplink") if isinstance(data, dict) else None
    if not deeplink:
        raise UpstreamError("Provider response did not include a deeplink.", payload=body)
    return str(deeplink)
