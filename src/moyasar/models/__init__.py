from .common import Currency, PaginationMeta, ValidationResult
from .payment import (
    CardPaymentSource,
    CardScheme,
    CardType,
    CreditCardSource,
    ListPaymentsResponse,
    Payment,
    PaymentCapabilities,
    PaymentSource,
    PaymentSourceType,
    PaymentStatus,
    StcPaySource,
    TokenPaymentSource,
    WalletPaymentSource,
)
from .invoice import (
    BulkCreateInvoicesResponse,
    DetailedInvoice,
    Invoice,
    InvoicePaymentSummary,
    InvoiceStatus,
    ListInvoicesResponse,
)
from .webhook import (
    ALL_WEBHOOK_EVENTS,
    AvailableEventsResponse,
    ListWebhookAttemptsResponse,
    ListWebhooksResponse,
    Webhook,
    WebhookAttempt,
    WebhookEvent,
    WebhookHttpMethod,
    WebhookPayload,
)

__all__ = [
    "Currency", "PaginationMeta", "ValidationResult",
    "Payment", "PaymentStatus", "PaymentSource", "PaymentSourceType",
    "CardPaymentSource", "CreditCardSource", "WalletPaymentSource",
    "TokenPaymentSource", "StcPaySource", "CardScheme", "CardType",
    "ListPaymentsResponse", "PaymentCapabilities",
    "Invoice", "DetailedInvoice", "InvoiceStatus", "InvoicePaymentSummary",
    "ListInvoicesResponse", "BulkCreateInvoicesResponse",
    "Webhook", "WebhookAttempt", "WebhookEvent", "WebhookHttpMethod",
    "WebhookPayload", "ALL_WEBHOOK_EVENTS", "ListWebhooksResponse",
    "ListWebhookAttemptsResponse", "AvailableEventsResponse",
]
