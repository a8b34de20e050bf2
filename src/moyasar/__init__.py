import logging

from .amount import format_amount, parse_amount
from .client import MoyasarClient
from .config import MoyasarSettings
from .errors import (
    GatewayError,
    InvoiceError,
    MetadataValidationError,
    PaymentError,
    RequestValidationError,
    ResponseParseError,
    TransportError,
    TransportErrorKind,
    WebhookAuthenticationError,
    WebhookError,
    WebhookMetadataError,
    WebhookStructuralError,
)
from .lifecycle import (
    can_cancel_invoice,
    can_capture,
    can_refund,
    can_void,
    is_final,
    is_invoice_expired,
    is_invoice_final,
    max_capture_amount,
    max_refund_amount,
    payment_capabilities,
    payment_summary,
    time_until_expiry,
)
from .metadata import (
    BoundedMetadataValidator,
    IdentityMetadataValidator,
    MetadataValidator,
    PydanticMetadataValidator,
)
from .transport.http import SDK_VERSION as __version__

# Libraries never configure logging; applications attach their own handlers.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "MoyasarClient", "MoyasarSettings",
    "format_amount", "parse_amount",
    "MetadataValidator", "IdentityMetadataValidator",
    "PydanticMetadataValidator", "BoundedMetadataValidator",
    "is_final", "can_refund", "can_capture", "can_void",
    "max_refund_amount", "max_capture_amount", "payment_capabilities",
    "is_invoice_final", "can_cancel_invoice", "is_invoice_expired",
    "time_until_expiry", "payment_summary",
    "GatewayError", "TransportError", "TransportErrorKind",
    "RequestValidationError", "ResponseParseError", "MetadataValidationError",
    "PaymentError", "InvoiceError", "WebhookError",
    "WebhookStructuralError", "WebhookAuthenticationError", "WebhookMetadataError",
]
