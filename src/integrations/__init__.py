"""
Integrations layer.
This package contains all code used to communicate with the PayPay API:
- request signing (signing.py)
- data contracts and the PaymentGateway interface (contracts/)
- live and mock gateway implementations (clients/)

Key rule:
- API handlers MUST NOT call the provider directly.
- Handlers call a PaymentGateway; the live one signs and forwards, the mock one
  fabricates responses without network access.

Switching implementations:
- The selection of mock vs live gateway happens in ONE place (src/api/main.py).
"""

from .contracts.interfaces import (
    CreatePaymentRequest,
    CreatePaymentResult,
    Credential,
    Environment,
    HttpMethod,
    PaymentGateway,
    PaymentStatus,
    PaymentStatusResult,
)
from .errors import ConfigurationError, NotFoundError, RelayError, UpstreamError, ValidationError
from .signing import build_auth_headers, verify_auth_headers

__all__ = [
    # interfaces
    "CreatePaymentRequest", "CreatePaymentResult", "Credential", "Environment",
    "HttpMethod", "PaymentGateway", "PaymentStatus", "PaymentStatusResult",
    # errors
    "ConfigurationError", "NotFoundError", "RelayError", "UpstreamError", "ValidationError",
    # signing
    "build_auth_headers", "verify_auth_headers",
]
