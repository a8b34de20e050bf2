"""Error taxonomy shared by every layer of the client.

Every failure raised by this package is a :class:`GatewayError`. The
``error_type`` and ``status_code`` attributes classify it independently of
the Python class, so a domain error (``PaymentError`` etc.) wrapping a lower
level failure keeps the original classification.
"""
from __future__ import annotations

from enum import Enum
from typing import Any


class GatewayError(Exception):
    """Base class for every error raised by the client."""

    default_type = "moyasar_error"
    default_status = 500

    def __init__(
        self,
        message: str,
        *,
        error_type: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
        errors: list[str] | None = None,
    ):
        self.message = message
        self.error_type = error_type or self.default_type
        self.status_code = status_code if status_code is not None else self.default_status
        self.details = details or {}
        self.errors = list(errors or [])
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.message} (type={self.error_type}, status={self.status_code})"


class TransportErrorKind(Enum):
    NETWORK = "network"
    INVALID_REQUEST = "invalid_request"
    AUTHENTICATION = "authentication"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"

    @classmethod
    def from_status(cls, status_code: int) -> "TransportErrorKind":
        mapping = {
            400: cls.INVALID_REQUEST,
            401: cls.AUTHENTICATION,
            403: cls.FORBIDDEN,
            404: cls.NOT_FOUND,
            429: cls.RATE_LIMIT,
        }
        if status_code in mapping:
            return mapping[status_code]
        if status_code >= 500:
            return cls.SERVER
        return cls.INVALID_REQUEST


class TransportError(GatewayError):
    """Network or HTTP failure reported by the transport. Never retried here."""

    default_type = "api_error"

    def __init__(self, message: str, *, kind: TransportErrorKind, **kwargs):
        self.kind = kind
        super().__init__(message, **kwargs)


class RequestValidationError(GatewayError):
    """Caller-supplied input failed schema checks."""

    default_type = "request_validation_error"
    default_status = 400

    def __init__(self, errors: list[str], message: str | None = None):
        super().__init__(
            message or f"Validation failed: {', '.join(errors)}",
            errors=errors,
        )


class ResponseParseError(GatewayError):
    """A gateway response does not match the expected contract."""

    default_type = "response_parse_error"

    def __init__(self, errors: list[str], *, payload: Any = None, message: str | None = None):
        self.payload = payload
        super().__init__(
            message or f"Unexpected response shape: {', '.join(errors)}",
            errors=errors,
            details={"payload": payload},
        )


class MetadataValidationError(GatewayError):
    """Raw metadata does not conform to the caller's metadata shape."""

    default_type = "metadata_validation_error"
    default_status = 422

    def __init__(self, errors: list[str], message: str | None = None):
        super().__init__(
            message or f"Invalid metadata: {', '.join(errors)}",
            errors=errors,
        )


class PaymentError(GatewayError):
    default_type = "payment_error"


class InvoiceError(GatewayError):
    default_type = "invoice_error"


class WebhookError(GatewayError):
    default_type = "webhook_error"


class WebhookStructuralError(WebhookError):
    """Inbound webhook could not be parsed or is missing required structure."""

    default_type = "webhook_structural_error"
    default_status = 400

    def __init__(self, message: str, *, unexpected_payload: Any = None, errors: list[str] | None = None):
        self.unexpected_payload = unexpected_payload
        super().__init__(
            message,
            errors=errors,
            details={"unexpected_payload": unexpected_payload},
        )


class WebhookAuthenticationError(WebhookError):
    """Inbound webhook secret does not match the expected shared secret."""

    default_type = "webhook_authentication_error"
    default_status = 401

    def __init__(self, message: str = "Webhook secret verification failed"):
        super().__init__(message)


class WebhookMetadataError(WebhookError):
    """Inbound webhook metadata was rejected by the metadata validator."""

    default_type = "webhook_metadata_error"
    default_status = 422

    def __init__(self, message: str, *, unexpected_payload: Any, errors: list[str] | None = None):
        self.unexpected_payload = unexpected_payload
        super().__init__(
            message,
            errors=errors,
            details={"unexpected_payload": unexpected_payload},
        )


def wrap_error(error: GatewayError, error_class: type[GatewayError], prefix: str) -> GatewayError:
    """Re-raise ``error`` as ``error_class`` keeping its classification."""
    if isinstance(error, error_class):
        return error
    return error_class(
        f"{prefix}: {error.message}",
        error_type=error.error_type,
        status_code=error.status_code,
        details=dict(error.details),
        errors=error.errors,
    )
