"""
Error kinds raised by the relay.

The API layer maps each kind to an HTTP status in src/error_handler.py:
- ValidationError    -> 400 (client sent incomplete input)
- NotFoundError      -> 404 (provider does not know the payment)
- UpstreamError      -> 500 (provider failed, timed out or was unreachable)
- ConfigurationError -> startup failure, never returned per request
"""

from __future__ import annotations

from typing import Any, Optional


class RelayError(Exception):
    """Base class for every error the relay raises on purpose."""


class ValidationError(RelayError):
    pass


class NotFoundError(RelayError):
    pass


class UpstreamError(RelayError):
    def __init__(
        self,
        message: str,
        *,
        payload: Optional[Any] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.payload = payload
        self.status_code = status_code


class ConfigurationError(RelayError):
    pass
