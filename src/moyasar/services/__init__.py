from .base import BaseService, build_metadata_query, build_query
from .invoice import InvoiceService
from .payment import PaymentService
from .webhook import WebhookAttemptsService, WebhookService

__all__ = [
    "BaseService", "build_metadata_query", "build_query",
    "PaymentService", "InvoiceService",
    "WebhookService", "WebhookAttemptsService",
]
