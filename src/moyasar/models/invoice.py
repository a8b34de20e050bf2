from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Generic, NotRequired, TypedDict, TypeVar

from moyasar.models.common import Currency, PaginationMeta
from moyasar.models.payment import Payment

M = TypeVar("M")


class InvoiceStatus(str, Enum):
    INITIATED = "initiated"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    CANCELED = "canceled"
    ON_HOLD = "on_hold"
    EXPIRED = "expired"
    VOIDED = "voided"


@dataclass(kw_only=True)
class Invoice(Generic[M]):
    id: str
    status: InvoiceStatus
    amount: int
    currency: Currency
    description: str
    amount_format: str
    url: str
    logo_url: str | None = None
    callback_url: str | None = None
    success_url: str | None = None
    back_url: str | None = None
    expired_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    metadata: M | None = None


@dataclass(kw_only=True)
class DetailedInvoice(Invoice[M]):
    # Snapshot of the payment attempts at retrieval time; the gateway owns them.
    payments: list[Payment[M]] = field(default_factory=list)


@dataclass(kw_only=True)
class ListInvoicesResponse(Generic[M]):
    invoices: list[Invoice[M]]
    meta: PaginationMeta


@dataclass(kw_only=True)
class BulkCreateInvoicesResponse(Generic[M]):
    invoices: list[Invoice[M]]


@dataclass(frozen=True)
class InvoicePaymentSummary:
    total: int
    paid: int
    failed: int
    pending: int
    total_amount: int
    paid_amount: int
    refunded_amount: int


class CreateInvoiceRequest(TypedDict):
    amount: int
    currency: str
    description: str
    callback_url: NotRequired[str]
    success_url: NotRequired[str]
    back_url: NotRequired[str]
    expired_at: NotRequired[datetime | str]
    metadata: NotRequired[dict[str, str]]


class UpdateInvoiceRequest(TypedDict, total=False):
    metadata: dict[str, str]


class BulkCreateInvoiceRequest(TypedDict):
    invoices: list[CreateInvoiceRequest]
