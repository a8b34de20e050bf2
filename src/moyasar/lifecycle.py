"""What a caller may do with a payment or invoice, derived from its snapshot.

These are pure functions over the last-known state; they never talk to the
gateway. Use them rather than re-deriving eligibility from status checks.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from moyasar.models.invoice import DetailedInvoice, Invoice, InvoicePaymentSummary, InvoiceStatus
from moyasar.models.payment import Payment, PaymentCapabilities, PaymentStatus

FINAL_PAYMENT_STATUSES = frozenset({
    PaymentStatus.PAID,
    PaymentStatus.FAILED,
    PaymentStatus.REFUNDED,
    PaymentStatus.CAPTURED,
    PaymentStatus.VOIDED,
    PaymentStatus.VERIFIED,
})
REFUNDABLE_STATUSES = frozenset({PaymentStatus.PAID, PaymentStatus.CAPTURED})

FINAL_INVOICE_STATUSES = frozenset({
    InvoiceStatus.PAID,
    InvoiceStatus.CANCELED,
    InvoiceStatus.EXPIRED,
    InvoiceStatus.VOIDED,
})
CANCELABLE_INVOICE_STATUSES = frozenset({InvoiceStatus.INITIATED, InvoiceStatus.FAILED})


def is_final(status: PaymentStatus | str) -> bool:
    return PaymentStatus(status) in FINAL_PAYMENT_STATUSES


def can_refund(payment: Payment[Any]) -> bool:
    # Refunds are bounded by what was captured, not by the authorized amount.
    return (
        payment.status in REFUNDABLE_STATUSES
        and payment.captured - payment.refunded > 0
        and payment.refunded < payment.captured
    )


def can_capture(payment: Payment[Any]) -> bool:
    return payment.status == PaymentStatus.AUTHORIZED


def can_void(payment: Payment[Any]) -> bool:
    return payment.status == PaymentStatus.AUTHORIZED


def max_refund_amount(payment: Payment[Any]) -> int:
    return max(0, payment.captured - payment.refunded)


def max_capture_amount(payment: Payment[Any]) -> int:
    return payment.amount if payment.status == PaymentStatus.AUTHORIZED else 0


def payment_capabilities(payment: Payment[Any]) -> PaymentCapabilities:
    return PaymentCapabilities(
        can_refund=can_refund(payment),
        can_capture=can_capture(payment),
        can_void=can_void(payment),
        max_refund_amount=max_refund_amount(payment),
        max_capture_amount=max_capture_amount(payment),
    )


def is_invoice_final(status: InvoiceStatus | str) -> bool:
    return InvoiceStatus(status) in FINAL_INVOICE_STATUSES


def can_cancel_invoice(invoice: Invoice[Any]) -> bool:
    return invoice.status in CANCELABLE_INVOICE_STATUSES


def _utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def is_invoice_expired(invoice: Invoice[Any], now: datetime | None = None) -> bool:
    """True once ``expired_at`` has passed. Invoices without one never expire."""
    if invoice.expired_at is None:
        return False
    now = _utc(now or datetime.now(timezone.utc))
    return _utc(invoice.expired_at) <= now


def time_until_expiry(invoice: Invoice[Any], now: datetime | None = None) -> timedelta | None:
    """Time left before expiry, clamped at zero; None when the invoice has no expiry."""
    if invoice.expired_at is None:
        return None
    now = _utc(now or datetime.now(timezone.utc))
    return max(timedelta(0), _utc(invoice.expired_at) - now)


def payment_summary(invoice: DetailedInvoice[Any]) -> InvoicePaymentSummary:
    payments = invoice.payments
    paid = [p for p in payments if p.status == PaymentStatus.PAID]
    return InvoicePaymentSummary(
        total=len(payments),
        paid=len(paid),
        failed=sum(1 for p in payments if p.status == PaymentStatus.FAILED),
        pending=sum(1 for p in payments if p.status == PaymentStatus.INITIATED),
        total_amount=sum(p.amount for p in payments),
        paid_amount=sum(p.amount for p in paid),
        refunded_amount=sum(p.refunded for p in payments),
    )
