"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.dependencies import get_error_handler, get_settings
from src.api.endpoints.payments import payments_api
from src.error_handler import ErrorHandler
from src.integrations.clients.mocks.payments import MockGateway
from src.integrations.clients.real_http.payments import LiveGateway
from src.integrations.contracts.interfaces import PaymentGateway
from src.integrations.errors import NotFoundError, UpstreamError, ValidationError
from src.utils.config_loader import RelaySettings, load_settings

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

INVALID_BODY_MESSAGE = "Missing required fields: amount, merchantPaymentId, description"


def build_gateway(settings: RelaySettings) -> PaymentGateway:
    """The one place where mock vs live is decided."""
    if settings.mock_mode:
        return MockGateway(
            create_delay_seconds=settings.mock.create_delay_seconds,
            status_delay_seconds=settings.mock.status_delay_seconds,
            redirect_url=settings.provider.redirect_url,
        )
    return LiveGateway(
        credential=settings.credential,
        base_url=settings.api_base_url,
        create_timeout_seconds=settings.provider.create_timeout_seconds,
        status_timeout_seconds=settings.provider.status_timeout_seconds,
        redirect_url=settings.provider.redirect_url,
    )


def _configure(app: FastAPI, settings: RelaySettings, gateway: PaymentGateway) -> None:
    app.state.settings = settings
    app.state.gateway = gateway
    app.state.error_handler = ErrorHandler(
        mock_mode=gateway.mock_mode,
        include_details=settings.is_development,
    )


def _preview(value: Optional[str]) -> str:
    return f"{value[:8]}..." if value else "MISSING"


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "gateway", None) is None:
        # ConfigurationError propagates and aborts startup
        settings = load_settings()
        _configure(app, settings, build_gateway(settings))

    settings = app.state.settings
    logger.info("PayPay relay starting on port %d", settings.port)
    logger.info("Environment: %s", settings.app_env)
    logger.info("PayPay API Base: %s", settings.api_base_url)
    if settings.mock_mode:
        logger.warning("MOCK MODE ACTIVE - returning fabricated PayPay responses")
    else:
        logger.info("Mock Mode: DISABLED (using real PayPay API)")
    yield


def create_app(
    settings: Optional[RelaySettings] = None,
    gateway: Optional[PaymentGateway] = None,
) -> FastAPI:
    """
    Build the relay application.

    With no arguments, settings are read from the environment at startup. Tests
    pass settings (and optionally a gateway) to skip the environment.
    """
    app = FastAPI(
        title="PayPay Relay API",
        description="Signs and forwards PayPay payment calls for the mobile app",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    if settings is not None:
        _configure(app, settings, gateway or build_gateway(settings))

    app.include_router(payments_api)
    _register_routes(app)
    _register_exception_handlers(app)
    return app


def _register_routes(app: FastAPI) -> None:
    @app.get("/health", tags=["Health"])
    async def health_check(settings: RelaySettings = Depends(get_settings)):
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "mockMode": settings.mock_mode,
        }

    @app.get("/debug", tags=["Health"])
    async def debug_info(settings: RelaySettings = Depends(get_settings)):
        if not settings.debug_endpoint:
            raise StarletteHTTPException(status_code=404)

        credential = settings.credential
        return {
            "mockMode": settings.mock_mode,
            "hasApiKey": bool(credential and credential.api_key),
            "hasApiSecret": bool(credential and credential.api_secret),
            "hasMerchantId": bool(credential and credential.merchant_id),
            "apiKeyPreview": _preview(credential.api_key if credential else None),
            "merchantIdPreview": _preview(credential.merchant_id if credential else None),
            "appEnv": settings.app_env,
            "environment": settings.environment.value,
            "apiBase": settings.api_base_url,
        }


def _respond(handle, exc: Exception) -> JSONResponse:
    status_code, body = handle(exc)
    return JSONResponse(status_code=status_code, content=body)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation(request: Request, exc: ValidationError):
        return _respond(get_error_handler(request).handle_validation, exc)

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError):
        logger.info("Invalid request body on %s: %s", request.url.path, exc.errors())
        return _respond(get_error_handler(request).handle_validation, ValidationError(INVALID_BODY_MESSAGE))

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        return _respond(get_error_handler(request).handle_not_found, exc)

    @app.exception_handler(UpstreamError)
    async def _upstream(request: Request, exc: UpstreamError):
        return _respond(get_error_handler(request).handle_upstream, exc)

    @app.exception_handler(StarletteHTTPException)
    async def _http(request: Request, exc: StarletteHTTPException):
        handler = get_error_handler(request)
        if exc.status_code == 404:
            body: Dict[str, Any] = {"success": False, "error": "Endpoint not found", "mockMode": handler.mock_mode}
        else:
            body = {"success": False, "error": exc.detail, "mockMode": handler.mock_mode}
        return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        return _respond(get_error_handler(request).handle_exception, exc)


app = create_app()
