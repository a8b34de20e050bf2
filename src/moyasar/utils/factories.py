"""Builders for gateway-shaped objects, used by the test suite and load tests.

``*_wire`` helpers return JSON-ready dicts as the gateway would send them;
``create`` helpers parse those into the client's dataclasses.
"""
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from moyasar.amount import format_amount
from moyasar.metadata import IdentityMetadataValidator
from moyasar.models.invoice import DetailedInvoice, Invoice
from moyasar.models.payment import Payment
from moyasar.validation.invoice import parse_detailed_invoice, parse_invoice
from moyasar.validation.payment import parse_payment

_CAPTURED_STATUSES = {"paid", "captured", "refunded"}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def list_wire(key: str, items: list[dict], **meta: Any) -> dict:
    """Wrap items in a single-page list response."""
    page = {
        "current_page": 1,
        "next_page": None,
        "prev_page": None,
        "total_pages": 1,
        "total_count": len(items),
    }
    page.update(meta)
    return {key: items, "meta": page}


class PaymentFactory:
    """Factory for payment objects with sensible defaults."""

    @staticmethod
    def source(source_type: str = "creditcard", **overrides) -> dict:
        if source_type == "stcpay":
            base = {
                "type": "stcpay",
                "mobile": "0512345678",
                "reference_number": f"ref_{uuid.uuid4().hex[:10]}",
                "cashier_id": None,
                "branch": None,
                "transaction_url": "https://apimig.moyasar.com/v1/stc_pay/abc/proceed",
                "message": "Paid",
            }
        else:
            base = {
                "type": source_type,
                "company": "visa",
                "name": "Fahad Ali",
                "number": "4111-11XX-XXXX-1111",
                "gateway_id": f"moyasar_cc_{uuid.uuid4().hex[:12]}",
                "message": "APPROVED",
                "reference_number": "125478454231",
                "token": None,
                "response_code": "00",
                "authorization_code": "123456",
            }
            if source_type == "creditcard":
                base["transaction_url"] = None
        base.update(overrides)
        return base

    @staticmethod
    def wire(**overrides) -> dict:
        status = overrides.get("status", "paid")
        amount = overrides.get("amount", 10000)
        currency = overrides.get("currency", "SAR")
        captured = overrides.get("captured", amount if status in _CAPTURED_STATUSES else 0)
        refunded = overrides.get("refunded", amount if status == "refunded" else 0)
        now = _now()
        defaults = {
            "id": str(uuid.uuid4()),
            "status": status,
            "amount": amount,
            "fee": 0,
            "currency": currency,
            "refunded": refunded,
            "refunded_at": now if refunded else None,
            "captured": captured,
            "captured_at": now if captured else None,
            "voided_at": now if status == "voided" else None,
            "description": "Order #1001",
            "amount_format": format_amount(amount, currency),
            "fee_format": format_amount(0, currency),
            "refunded_format": format_amount(refunded, currency),
            "captured_format": format_amount(captured, currency),
            "invoice_id": None,
            "ip": "192.168.1.10",
            "callback_url": "https://merchant.example.com/callback",
            "created_at": now,
            "updated_at": now,
            "metadata": None,
            "source": PaymentFactory.source(),
        }
        defaults.update(overrides)
        return defaults

    @staticmethod
    def create(**overrides) -> Payment:
        return parse_payment(PaymentFactory.wire(**overrides), IdentityMetadataValidator())

    @staticmethod
    def create_request(**overrides) -> dict:
        defaults = {
            "amount": 10000,
            "currency": "SAR",
            "description": "Order #1001",
            "callback_url": "https://merchant.example.com/callback",
            "source": {
                "type": "creditcard",
                "name": "Fahad Ali",
                "number": "4111111111111111",
                "month": 12,
                "year": datetime.now(timezone.utc).year + 2,
                "cvc": "123",
            },
        }
        defaults.update(overrides)
        return defaults


class InvoiceFactory:
    """Factory for invoice objects with sensible defaults."""

    @staticmethod
    def wire(**overrides) -> dict:
        amount = overrides.get("amount", 5000)
        currency = overrides.get("currency", "SAR")
        invoice_id = overrides.get("id", str(uuid.uuid4()))
        now = _now()
        defaults = {
            "id": invoice_id,
            "status": "initiated",
            "amount": amount,
            "currency": currency,
            "description": "Invoice for order #1001",
            "amount_format": format_amount(amount, currency),
            "url": f"https://checkout.moyasar.com/invoices/{invoice_id}",
            "logo_url": "https://cdn.moyasar.com/logo.png",
            "callback_url": None,
            "expired_at": None,
            "created_at": now,
            "updated_at": now,
            "metadata": None,
        }
        defaults.update(overrides)
        return defaults

    @staticmethod
    def detailed_wire(payments: list[dict] | None = None, **overrides) -> dict:
        wire = InvoiceFactory.wire(**overrides)
        wire["payments"] = payments if payments is not None else []
        return wire

    @staticmethod
    def create(**overrides) -> Invoice:
        return parse_invoice(InvoiceFactory.wire(**overrides), IdentityMetadataValidator())

    @staticmethod
    def create_detailed(payments: list[dict] | None = None, **overrides) -> DetailedInvoice:
        return parse_detailed_invoice(
            InvoiceFactory.detailed_wire(payments, **overrides),
            IdentityMetadataValidator(),
        )

    @staticmethod
    def create_request(**overrides) -> dict:
        defaults = {
            "amount": 5000,
            "currency": "SAR",
            "description": "Invoice for order #1001",
            "expired_at": (datetime.now(timezone.utc) + timedelta(days=1)).isoformat(),
        }
        defaults.update(overrides)
        return defaults


class WebhookFactory:
    """Factory for inbound notifications and webhook subscription objects."""

    @staticmethod
    def payload(event_type: str = "payment_paid", secret_token: str = "", **overrides) -> dict:
        data = overrides.pop("data", None)
        if data is None:
            data = PaymentFactory.wire(**overrides.pop("payment", {}))
        defaults = {
            "id": str(uuid.uuid4()),
            "type": event_type,
            "created_at": _now(),
            "secret_token": secret_token,
            "account_name": "Test Merchant",
            "live": False,
            "data": data,
        }
        defaults.update(overrides)
        return defaults

    @staticmethod
    def subscription(**overrides) -> dict:
        defaults = {
            "id": str(uuid.uuid4()),
            "http_method": "post",
            "url": "https://merchant.example.com/webhooks/moyasar",
            "created_at": _now(),
            "events": ["payment_paid", "payment_failed"],
        }
        defaults.update(overrides)
        return defaults

    @staticmethod
    def attempt(**overrides) -> dict:
        defaults = {
            "id": str(uuid.uuid4()),
            "webhook_id": str(uuid.uuid4()),
            "event_id": str(uuid.uuid4()),
            "event_type": "payment_paid",
            "retry_number": 0,
            "result": "success",
            "message": "Delivered",
            "response_code": 200,
            "response_headers": "{}",
            "response_body": "ok",
            "created_at": _now(),
        }
        defaults.update(overrides)
        return defaults
