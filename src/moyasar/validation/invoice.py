from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Annotated, Any

from pydantic import AfterValidator, BeforeValidator, ValidationError

from moyasar.models.common import ValidationResult
from moyasar.models.invoice import (
    BulkCreateInvoicesResponse,
    DetailedInvoice,
    Invoice,
    InvoiceStatus,
    ListInvoicesResponse,
)
from moyasar.validation.common import (
    Amount,
    CurrencyCode,
    HttpUrl,
    PaginationMetaSchema,
    Schema,
    StringMetadata,
    format_error,
    parse_metadata,
    parse_response,
    to_contract,
    to_pagination_meta,
    validate_request,
)
from moyasar.validation.payment import Description, PaymentSchema, payment_from_schema

if TYPE_CHECKING:
    from moyasar.metadata import MetadataValidator

MAX_BULK_INVOICES = 50


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are taken to be UTC.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _in_future(value: datetime) -> datetime:
    value = _as_utc(value)
    if value <= datetime.now(timezone.utc):
        raise ValueError("expired_at must be in the future")
    return value


def _bulk_size(value: Any) -> Any:
    if isinstance(value, list):
        if not value:
            raise ValueError("at least one invoice is required")
        if len(value) > MAX_BULK_INVOICES:
            raise ValueError(f"maximum of {MAX_BULK_INVOICES} invoices allowed per bulk request")
    return value


class CreateInvoiceSchema(Schema):
    amount: Amount
    currency: CurrencyCode
    description: Description
    callback_url: HttpUrl | None = None
    success_url: HttpUrl | None = None
    back_url: HttpUrl | None = None
    expired_at: Annotated[datetime, AfterValidator(_in_future)] | None = None
    metadata: StringMetadata | None = None


class BulkCreateInvoiceSchema(Schema):
    invoices: Annotated[list[CreateInvoiceSchema], BeforeValidator(_bulk_size)]


class UpdateInvoiceSchema(Schema):
    metadata: StringMetadata | None = None


class InvoiceSchema(Schema):
    id: str
    status: InvoiceStatus
    amount: Amount
    currency: CurrencyCode
    description: str
    amount_format: str
    url: HttpUrl
    logo_url: HttpUrl | None = None
    callback_url: HttpUrl | None = None
    success_url: HttpUrl | None = None
    back_url: HttpUrl | None = None
    expired_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    metadata: StringMetadata | None = None


class DetailedInvoiceSchema(InvoiceSchema):
    payments: list[PaymentSchema] = []


class ListInvoicesResponseSchema(Schema):
    invoices: list[InvoiceSchema]
    meta: PaginationMetaSchema


class BulkCreateInvoicesResponseSchema(Schema):
    invoices: list[InvoiceSchema]


def format_bulk_errors(exc: ValidationError, data: Any = None) -> list[str]:
    """Like ``format_errors`` but names entries as ``Invoice N`` (1-based)."""
    messages = []
    for error in exc.errors():
        loc = error["loc"]
        if len(loc) >= 2 and loc[0] == "invoices" and isinstance(loc[1], int):
            inner = format_error(error, data, strip=2)
            messages.append(f"Invoice {loc[1] + 1}: {inner}")
        else:
            messages.append(format_error(error, data))
    return messages


def validate_create_invoice_request(request: Any) -> ValidationResult[dict[str, Any]]:
    return validate_request(CreateInvoiceSchema, request)


def validate_bulk_create_request(request: Any) -> ValidationResult[dict[str, Any]]:
    return validate_request(BulkCreateInvoiceSchema, request, formatter=format_bulk_errors)


def validate_update_invoice_request(request: Any) -> ValidationResult[dict[str, Any]]:
    return validate_request(UpdateInvoiceSchema, request)


def invoice_from_schema(schema: InvoiceSchema, validator: MetadataValidator[Any], raw: Any) -> Invoice[Any]:
    return to_contract(Invoice, schema, metadata=parse_metadata(schema.metadata, validator, raw))


def parse_invoice(raw: Any, validator: MetadataValidator[Any]) -> Invoice[Any]:
    return invoice_from_schema(parse_response(InvoiceSchema, raw), validator, raw)


def parse_detailed_invoice(raw: Any, validator: MetadataValidator[Any]) -> DetailedInvoice[Any]:
    schema = parse_response(DetailedInvoiceSchema, raw)
    return to_contract(
        DetailedInvoice,
        schema,
        metadata=parse_metadata(schema.metadata, validator, raw),
        payments=[payment_from_schema(p, validator, raw) for p in schema.payments],
    )


def parse_list_invoices_response(raw: Any, validator: MetadataValidator[Any]) -> ListInvoicesResponse[Any]:
    schema = parse_response(ListInvoicesResponseSchema, raw)
    return ListInvoicesResponse(
        invoices=[invoice_from_schema(i, validator, raw) for i in schema.invoices],
        meta=to_pagination_meta(schema.meta),
    )


def parse_bulk_create_response(raw: Any, validator: MetadataValidator[Any]) -> BulkCreateInvoicesResponse[Any]:
    schema = parse_response(BulkCreateInvoicesResponseSchema, raw)
    return BulkCreateInvoicesResponse(
        invoices=[invoice_from_schema(i, validator, raw) for i in schema.invoices],
    )
