"""
PayPay — MOCK gateway.

Purpose:
- Fabricates provider responses for development/testing
- Does NOT sign anything and does NOT make network calls
- Response shapes match the provider's, identifiers are derived from the
  merchant payment id so the app can follow the flow end to end

Swap:
Selected in src/api/main.py when PAYPAY_MOCK_MODE is enabled; otherwise the
LiveGateway in clients/real_http/payments.py is used.
"""

import asyncio
import logging
import time
from typing import Any, Dict

from src.integrations.contracts.interfaces import (
    CreatePaymentRequest,
    CreatePaymentResult,
    PaymentGateway,
    PaymentStatus,
    PaymentStatusResult,
)
from src.integrations.contracts.payments import (
    CODE_TYPE,
    DEFAULT_REDIRECT_URL,
    REDIRECT_TYPE,
    amount_block,
    format_amount,
)
from src.integrations.signing import Clock

logger = logging.getLogger(__name__)

MOCK_CODE_URL = "https://sandbox-app.paypay.ne.jp/bff/v2/cod?codeId={code_id}"
MOCK_CODE_TTL_SECONDS = 300
MOCK_STATUS_AMOUNT = 100
MOCK_STATUS_DESCRIPTION = "Flutter PayPay Test Payment"


class MockGateway(PaymentGateway):
    """
    Mock PayPay gateway.

    Parameters
    ----------
    create_delay_seconds : float
        Artificial latency before a create response. Default 1.0.
    status_delay_seconds : float
        Artificial latency before a status response. Default 0.5.
    redirect_url : str
        Deep-link the app is sent back to after paying.
    clock : callable
        Seconds since epoch, used for expiryDate / acceptedAt.
    """

    def __init__(
        self,
        create_delay_seconds: float = 1.0,
        status_delay_seconds: float = 0.5,
        redirect_url: str = DEFAULT_REDIRECT_URL,
        clock: Clock = time.time,
    ):
        self._create_delay = create_delay_seconds
        self._status_delay = status_delay_seconds
        self._redirect_url = redirect_url
        self._clock = clock

        logger.info("[PAYPAY MOCK] Gateway initialised; responses are fabricated")

    @property
    def mock_mode(self) -> bool:
        return True

    async def _simulate_latency(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    async def create_payment(self, request: CreatePaymentRequest) -> CreatePaymentResult:
        payment_id = request.merchant_payment_id
        logger.info("[PAYPAY MOCK] Creating fake payment id=%s amount=%s JPY", payment_id, request.amount)
        await self._simulate_latency(self._create_delay)

        code_id = f"mock_code_{payment_id}"
        deeplink = f"paypay://payment?link_id=mock_{payment_id}&amount={format_amount(request.amount)}"
        body: Dict[str, Any] = {
            "resultInfo": {
                "code": "SUCCESS",
                "message": "Success",
                "codeId": "08100001",
            },
            "data": {
                "codeId": code_id,
                "url": MOCK_CODE_URL.format(code_id=code_id),
                "deeplink": deeplink,
                "expiryDate": int(self._clock()) + MOCK_CODE_TTL_SECONDS,
                "merchantPaymentId": payment_id,
                "amount": amount_block(request.amount),
                "orderDescription": request.description,
                "codeType": CODE_TYPE,
                "redirectUrl": self._redirect_url,
                "redirectType": REDIRECT_TYPE,
            },
        }
        return CreatePaymentResult(data=body, deeplink=deeplink, mock_mode=True)

    async def get_payment_status(self, merchant_payment_id: str) -> PaymentStatusResult:
        logger.info("[PAYPAY MOCK] Checking payment status id=%s", merchant_payment_id)
        await self._simulate_latency(self._status_delay)

        body: Dict[str, Any] = {
            "resultInfo": {
                "code": "SUCCESS",
                "message": "Success",
            },
            "data": {
                "paymentId": f"mock_payment_{merchant_payment_id}",
                "status": PaymentStatus.COMPLETED.value,
                "acceptedAt": int(self._clock()),
                "merchantPaymentId": merchant_payment_id,
                "amount": amount_block(MOCK_STATUS_AMOUNT),
                "orderDescription": MOCK_STATUS_DESCRIPTION,
                "paymentMethods": [
                    {
                        "amount": amount_block(MOCK_STATUS_AMOUNT),
                        "type": "WALLET",
                    }
                ],
            },
        }
        return PaymentStatusResult(data=body, mock_mode=True)
