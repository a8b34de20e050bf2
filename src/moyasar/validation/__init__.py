from .common import format_errors, parse_response, validate_request
from .invoice import (
    validate_bulk_create_request,
    validate_create_invoice_request,
    validate_update_invoice_request,
)
from .payment import (
    validate_capture_request,
    validate_create_payment_request,
    validate_refund_request,
    validate_update_payment_request,
)
from .webhook import (
    validate_create_webhook_request,
    validate_update_webhook_request,
    validate_webhook_payload,
)

__all__ = [
    "format_errors", "parse_response", "validate_request",
    "validate_create_payment_request", "validate_update_payment_request",
    "validate_refund_request", "validate_capture_request",
    "validate_create_invoice_request", "validate_bulk_create_request",
    "validate_update_invoice_request",
    "validate_create_webhook_request", "validate_update_webhook_request",
    "validate_webhook_payload",
]
