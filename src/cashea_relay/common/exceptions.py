"""Cashea-Relay exception hierarchy."""

from typing import Any, Optional


class RelayError(Exception):
    """Base exception for all relay errors."""

    def __init__(self, message: str = "", code: str = "RELAY_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidRequestError(RelayError):
    """Raised when an inbound confirmation request fails validation."""

    def __init__(
        self,
        message: str = "Invalid request",
        error: str = "Datos incompletos",
        errors: Optional[list[dict[str, Any]]] = None,
    ):
        super().__init__(message, code="VALIDATION_ERROR")
        self.error = error
        self.errors = errors or []


class UpstreamUnavailableError(RelayError):
    """Raised when an outbound call fails at the network level or times out."""

    def __init__(self, upstream: str, message: str = "Upstream request failed"):
        super().__init__(message, code="UPSTREAM_UNAVAILABLE")
        self.upstream = upstream
