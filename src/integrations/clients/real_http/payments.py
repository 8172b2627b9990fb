"""
Live PayPay HTTP gateway.

Signs every call with the configured credential and forwards it to the
provider. Calls are single-shot: no retry, no backoff.
"""

from __future__ import annotations

import logging
import secrets
import time
from typing import Any, Dict, Optional

import httpx

from src.integrations.contracts.interfaces import (
    CreatePaymentRequest,
    CreatePaymentResult,
    Credential,
    HttpMethod,
    PaymentGateway,
    PaymentStatusResult,
)
from src.integrations.contracts.payments import (
    CODES_PATH,
    DEFAULT_REDIRECT_URL,
    build_code_payload,
    encode_payload,
    extract_deeplink,
    payment_details_path,
)
from src.integrations.errors import ConfigurationError, NotFoundError, UpstreamError
from src.integrations.signing import Clock, RandomBytes, build_auth_headers

logger = logging.getLogger(__name__)


class LiveGateway(PaymentGateway):
    def __init__(
        self,
        credential: Credential,
        base_url: str,
        create_timeout_seconds: float = 30.0,
        status_timeout_seconds: float = 15.0,
        redirect_url: str = DEFAULT_REDIRECT_URL,
        clock: Clock = time.time,
        random_bytes: RandomBytes = secrets.token_bytes,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if credential is None or credential.missing_fields():
            raise ConfigurationError("LiveGateway requires a complete PayPay credential.")
        if not base_url:
            raise ConfigurationError("LiveGateway requires the PayPay API base URL.")

        self.credential = credential
        self.base_url = base_url.rstrip("/")
        self.create_timeout_seconds = create_timeout_seconds
        self.status_timeout_seconds = status_timeout_seconds
        self.redirect_url = redirect_url
        self._clock = clock
        self._random_bytes = random_bytes
        self._transport = transport

    @property
    def mock_mode(self) -> bool:
        return False

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=self._transport)

    def _headers(self, method: HttpMethod, path: str, body: bytes = b"") -> Dict[str, str]:
        return build_auth_headers(
            method.value,
            path,
            body,
            self.credential,
            clock=self._clock,
            random_bytes=self._random_bytes,
        )

    async def create_payment(self, request: CreatePaymentRequest) -> CreatePaymentResult:
        payload = build_code_payload(request, requested_at=int(self._clock()), redirect_url=self.redirect_url)
        body = encode_payload(payload)
        headers = self._headers(HttpMethod.POST, CODES_PATH, body)

        logger.info("Creating payment merchantPaymentId=%s amount=%s JPY", request.merchant_payment_id, request.amount)
        data = await self._send(
            HttpMethod.POST,
            CODES_PATH,
            headers,
            body=body,
            timeout=self.create_timeout_seconds,
            failure_message="Payment creation failed",
        )
        deeplink = extract_deeplink(data)
        logger.info("Payment created merchantPaymentId=%s", request.merchant_payment_id)
        return CreatePaymentResult(data=data, deeplink=deeplink, mock_mode=False)

    async def get_payment_status(self, merchant_payment_id: str) -> PaymentStatusResult:
        path = payment_details_path(merchant_payment_id)
        headers = self._headers(HttpMethod.GET, path)

        logger.info("Checking payment status merchantPaymentId=%s", merchant_payment_id)
        data = await self._send(
            HttpMethod.GET,
            path,
            headers,
            timeout=self.status_timeout_seconds,
            failure_message="Failed to get payment status",
            not_found_message=f"Payment not found: {merchant_payment_id}",
        )
        return PaymentStatusResult(data=data, mock_mode=False)

    async def _send(
        self,
        method: HttpMethod,
        path: str,
        headers: Dict[str, str],
        *,
        timeout: float,
        failure_message: str,
        body: Optional[bytes] = None,
        not_found_message: Optional[str] = None,
    ) -> Dict[str, Any]:
        try:
            async with self._client(timeout) as client:
                response = await client.request(method.value, path, content=body, headers=headers)
                response.raise_for_status()
                return response.json() if response.content else {}
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            payload = _error_payload(e.response)
            logger.error("PayPay %s %s returned %s: %s", method.value, path, status_code, payload)
            if status_code == 404 and not_found_message:
                raise NotFoundError(not_found_message) from e
            raise UpstreamError(failure_message, payload=payload, status_code=status_code) from e
        except httpx.TimeoutException as e:
            logger.error("PayPay %s %s timed out after %.0fs", method.value, path, timeout)
            raise UpstreamError(f"{failure_message}: provider timed out") from e
        except httpx.RequestError as e:
            logger.error("Request error connecting to PayPay %s %s: %s", method.value, path, e)
            raise UpstreamError(f"{failure_message}: {e}") from e
        except ValueError as e:
            # 2xx with a body that is not JSON
            logger.error("PayPay %s %s returned a non-JSON body", method.value, path)
            raise UpstreamError(f"{failure_message}: invalid provider response") from e


def _error_payload(response: httpx.Response) -> Optional[Any]:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
