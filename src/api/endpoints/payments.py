from typing import Any, Dict, Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel, StrictFloat, StrictInt

from src.api.dependencies import get_gateway
from src.integrations.contracts.interfaces import (
    CreatePaymentResult,
    PaymentGateway,
    PaymentStatusResult,
)
from src.integrations.contracts.payments import (
    validate_create_payment,
    validate_merchant_payment_id,
)

api = APIRouter()
payments_api = api


class CreatePaymentBody(BaseModel):
    amount: Optional[Union[StrictInt, StrictFloat]] = None
    merchantPaymentId: Optional[str] = None
    description: Optional[str] = None


@api.post("/create-payment", tags=["Payments"])
async def create_payment(body: CreatePaymentBody, gateway: PaymentGateway = Depends(get_gateway)):
    request = validate_create_payment(body.amount, body.merchantPaymentId, body.description)
    result = await gateway.create_payment(request)
    return _create_result_to_dict(result)


@api.get("/payment-status/{merchantPaymentId}", tags=["Payments"])
async def payment_status(merchantPaymentId: str, gateway: PaymentGateway = Depends(get_gateway)):
    merchant_payment_id = validate_merchant_payment_id(merchantPaymentId)
    result = await gateway.get_payment_status(merchant_payment_id)
    return _status_result_to_dict(result)


def _create_result_to_dict(result: CreatePaymentResult) -> Dict[str, Any]:
    return {
        "success": True,
        "data": result.data,
        "deeplink": result.deeplink,
        "mockMode": result.mock_mode,
    }


def _status_result_to_dict(result: PaymentStatusResult) -> Dict[str, Any]:
    return {
        "success": True,
        "data": result.data,
        "mockMode": result.mock_mode,
    }
