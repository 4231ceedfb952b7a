"""
Custom exception classes.

Represent errors raised while orchestrating an upstream call, their
classification into caller-visible kinds, and the FastAPI handlers that
render them as the JSON error envelope.
"""

import logging
import ssl
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """Caller-visible error classes."""

    UNKNOWN_ENDPOINT = "UnknownEndpointError"
    INVALID_REQUEST = "InvalidRequestError"
    AUTH_TOKEN = "AuthTokenError"
    UPSTREAM_SERVICE = "UpstreamServiceError"
    CERTIFICATE_TRUST = "CertificateTrustError"
    UNKNOWN = "UnknownError"


STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.UNKNOWN_ENDPOINT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTH_TOKEN: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.UPSTREAM_SERVICE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.CERTIFICATE_TRUST: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.UNKNOWN: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class OrchestrationError(Exception):
    """Base exception class for orchestration failures."""

    kind: ErrorKind = ErrorKind.UNKNOWN


class UnknownEndpointError(OrchestrationError):
    """Raised when an endpoint name is not registered."""

    kind = ErrorKind.UNKNOWN_ENDPOINT

    def __init__(self, endpoint_name: str):
        self.endpoint_name = endpoint_name
        super().__init__(f"Unknown endpoint: {endpoint_name}")


class InvalidRequestError(OrchestrationError):
    """Raised when the caller payload is malformed or misses a required field."""

    kind = ErrorKind.INVALID_REQUEST


class AuthTokenError(OrchestrationError):
    """Raised when the authentication call fails or yields no usable token."""

    kind = ErrorKind.AUTH_TOKEN


class UpstreamServiceError(OrchestrationError):
    """Raised when the upstream call fails or returns a non-success status."""

    kind = ErrorKind.UPSTREAM_SERVICE

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class EmptyBodyError(UpstreamServiceError):
    """Raised when a binary response carries no content."""

    def __init__(self, detail: str = "No binary content received"):
        super().__init__(detail)


class CertificateTrustError(OrchestrationError):
    """Certificate or trust-chain verification failure."""

    kind = ErrorKind.CERTIFICATE_TRUST


class EndpointConfigError(Exception):
    """Raised at startup when the endpoint configuration cannot be loaded."""


# ===========================================
# Classification
# ===========================================

_CERT_MARKERS = ("certificate_verify_failed", "certificate verify failed", "unable to get local issuer")


def _iter_causes(exc: BaseException):
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def is_certificate_failure(exc: BaseException) -> bool:
    """
    Walk the whole cause chain looking for a trust verification failure.

    Transport libraries wrap ssl errors, so the immediate exception rarely
    tells the story on its own.
    """
    for error in _iter_causes(exc):
        if isinstance(error, (ssl.SSLCertVerificationError, CertificateTrustError)):
            return True
        text = str(error).lower()
        if any(marker in text for marker in _CERT_MARKERS):
            return True
    return False


def classify_error(exc: BaseException) -> ErrorKind:
    """Map an exception to exactly one ErrorKind. First matching rule wins."""
    if is_certificate_failure(exc):
        return ErrorKind.CERTIFICATE_TRUST
    kind = getattr(exc, "kind", None)
    if isinstance(kind, ErrorKind):
        return kind
    return ErrorKind.UNKNOWN


def error_envelope(kind: ErrorKind, message: str) -> dict:
    return {
        "status": "error",
        "errorType": kind.value,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ===========================================
# Exception Handlers
# ===========================================


async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler for unhandled exceptions.
    """
    logger.error(
        f"Global exception handler caught: {exc}",
        exc_info=True,
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    kind = classify_error(exc)
    return JSONResponse(
        status_code=STATUS_BY_KIND[kind],
        content=error_envelope(kind, str(exc) or "Internal Server Error"),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Handler for HTTPException.

    Unmatched routes are reported as unknown endpoints.
    """
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        kind = ErrorKind.UNKNOWN_ENDPOINT
    elif exc.status_code < 500:
        kind = ErrorKind.INVALID_REQUEST
    else:
        kind = ErrorKind.UNKNOWN
    return JSONResponse(
        status_code=exc.status_code, content=error_envelope(kind, str(exc.detail))
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handler for validation errors.
    """
    return JSONResponse(
        status_code=STATUS_BY_KIND[ErrorKind.INVALID_REQUEST],
        content=error_envelope(ErrorKind.INVALID_REQUEST, str(exc.errors())),
    )
