from fastapi import Request

from src.error_handler import ErrorHandler
from src.integrations.contracts.interfaces import PaymentGateway
from src.utils.config_loader import RelaySettings


def get_gateway(request: Request) -> PaymentGateway:
    return request.app.state.gateway


def get_settings(request: Request) -> RelaySettings:
    return request.app.state.settings


def get_error_handler(request: Request) -> ErrorHandler:
    handler = getattr(request.app.state, "error_handler", None)
    return handler or ErrorHandler()
