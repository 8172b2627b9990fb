"""Maps relay errors to HTTP status codes and JSON bodies."""
from typing import Any, Dict, Optional, Tuple
import logging

from src.integrations.errors import NotFoundError, UpstreamError, ValidationError

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Internal server error"
NOT_FOUND_MESSAGE = "Payment not found"


class ErrorHandler:
    def __init__(self, mock_mode: bool = False, include_details: bool = False):
        self.mock_mode = mock_mode
        self.include_details = include_details

    def _body(self, error: Any, details: Optional[str] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "error": error}
        if details is not None and self.include_details:
            body["details"] = details
        body["mockMode"] = self.mock_mode
        return body

    def handle_validation(self, exc: ValidationError) -> Tuple[int, Dict[str, Any]]:
        logger.info("Rejected request: %s", exc)
        return 400, self._body(str(exc))

    def handle_not_found(self, exc: NotFoundError) -> Tuple[int, Dict[str, Any]]:
        logger.info("Provider reported unknown payment: %s", exc)
        return 404, self._body(NOT_FOUND_MESSAGE)

    def handle_upstream(self, exc: UpstreamError) -> Tuple[int, Dict[str, Any]]:
        logger.error("Upstream failure: %s payload=%s", exc, exc.payload)
        error = exc.payload if exc.payload is not None else str(exc)
        return 500, self._body(error, details=str(exc))

    def handle_exception(self, exc: Exception) -> Tuple[int, Dict[str, Any]]:
        logger.error("Unhandled exception in relay: %s", exc, exc_info=True)
        return 500, self._body(GENERIC_FAILURE, details=str(exc))
