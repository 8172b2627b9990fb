from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"


class PaymentStatus(str, Enum):
    CREATED = "CREATED"
    AUTHORIZED = "AUTHORIZED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELED = "CANCELED"
    EXPIRED = "EXPIRED"


class Environment(str, Enum):
    SANDBOX = "sandbox"
    PRODUCTION = "production"


# ---------------------------------------------------------------------------
# Shared data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Credential:
    api_key: str
    api_secret: str
    merchant_id: str

    def missing_fields(self) -> List[str]:
        names = {
            "api_key": self.api_key,
            "api_secret": self.api_secret,
            "merchant_id": self.merchant_id,
        }
        return [name for name, value in names.items() if not value]

    def __repr__(self) -> str:
        return f"Credential(api_key={self.api_key[:8]!r}..., merchant_id={self.merchant_id!r})"


@dataclass(frozen=True)
class CreatePaymentRequest:
    amount: Union[int, float]
    merchant_payment_id: str
    description: str


@dataclass
class CreatePaymentResult:
    data: Dict[str, Any]
    deeplink: str
    mock_mode: bool = False


@dataclass
class PaymentStatusResult:
    data: Dict[str, Any]
    mock_mode: bool = False

    @property
    def status(self) -> Optional[str]:
        inner = self.data.get("data") if isinstance(self.data, dict) else None
        if isinstance(inner, dict):
            return inner.get("status")
        return None


# ---------------------------------------------------------------------------
# Abstract gateway interface
# ---------------------------------------------------------------------------

class PaymentGateway(ABC):
    """Every PayPay gateway (live or mock) must implement this interface."""

    @property
    @abstractmethod
    def mock_mode(self) -> bool:
        """True when responses are fabricated locally."""

    @abstractmethod
    async def create_payment(self, request: CreatePaymentRequest) -> CreatePaymentResult:
        """Issue a payment code and return the provider body plus its deep-link."""

    @abstractmethod
    async def get_payment_status(self, merchant_payment_id: str) -> PaymentStatusResult:
        """Fetch the current status of a payment by merchant payment id."""
