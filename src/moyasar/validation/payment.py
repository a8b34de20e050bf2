"""Schemas for payment requests and responses.

Each schema declares exactly the fields of its contract in
``moyasar.models.payment``; ``tests/unit/test_schema_parity.py`` keeps the
two in step.
"""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Annotated, Any, Literal, Union
from uuid import UUID

from pydantic import AfterValidator, Field, StrictBool, StrictInt, StringConstraints

from moyasar.models.common import ValidationResult
from moyasar.models.payment import (
    CardScheme,
    CardType,
    CreditCardSource,
    ListPaymentsResponse,
    Payment,
    PaymentSource,
    PaymentSourceType,
    PaymentStatus,
    StcPaySource,
    TokenPaymentSource,
    WalletPaymentSource,
)
from moyasar.validation.common import (
    Amount,
    CurrencyCode,
    HttpUrl,
    IPv4,
    MinorUnits,
    PaginationMetaSchema,
    Schema,
    StringMetadata,
    parse_metadata,
    parse_response,
    to_contract,
    to_pagination_meta,
    validate_request,
)

if TYPE_CHECKING:
    from moyasar.metadata import MetadataValidator

DESCRIPTION_MAX_LENGTH = 255
STATEMENT_DESCRIPTOR_MAX_LENGTH = 255
CARD_NUMBER_PATTERN = r"^\d{16,19}$"
CVC_PATTERN = r"^\d{3,4}$"
AUTH_CODE_PATTERN = r"^\d{6}$"
SAUDI_MOBILE_PATTERN = r"^(0|(00|\+)?966)?(5\d{8})$"
TOKEN_PATTERN = r"^token_"


# Response side


class CardSourceSchema(Schema):
    type: str
    company: CardScheme | None
    name: str | None
    number: str
    gateway_id: str
    message: str | None
    reference_number: str | None
    token: str | None = None
    response_code: str | None = None
    authorization_code: Annotated[str, Field(pattern=AUTH_CODE_PATTERN)] | None = None
    issuer_name: str | None = None
    issuer_country: str | None = None
    issuer_card_type: CardType | None = None
    issuer_card_category: str | None = None


class CreditCardSourceSchema(CardSourceSchema):
    type: Literal["creditcard"]
    transaction_url: HttpUrl | None


class WalletSourceSchema(CardSourceSchema):
    type: Literal["applepay", "googlepay", "samsungpay"]
    dpan: str | None = None


class TokenSourceSchema(CardSourceSchema):
    type: Literal["token"]


class StcPaySourceSchema(Schema):
    type: Literal["stcpay"]
    mobile: Annotated[str, Field(pattern=SAUDI_MOBILE_PATTERN)]
    reference_number: str | None = None
    cashier_id: str | None = None
    branch: str | None = None
    transaction_url: HttpUrl | None
    message: str


PaymentSourceSchema = Annotated[
    Union[CreditCardSourceSchema, WalletSourceSchema, TokenSourceSchema, StcPaySourceSchema],
    Field(discriminator="type"),
]

SOURCE_CONTRACTS: dict[type[Schema], type] = {
    CreditCardSourceSchema: CreditCardSource,
    WalletSourceSchema: WalletPaymentSource,
    TokenSourceSchema: TokenPaymentSource,
    StcPaySourceSchema: StcPaySource,
}


class PaymentSchema(Schema):
    id: str
    status: PaymentStatus
    amount: Amount
    fee: MinorUnits
    currency: CurrencyCode
    refunded: MinorUnits
    refunded_at: datetime | None
    captured: MinorUnits
    captured_at: datetime | None
    voided_at: datetime | None
    description: str
    amount_format: str
    fee_format: str
    refunded_format: str
    captured_format: str
    invoice_id: str | None
    ip: IPv4 | None
    callback_url: HttpUrl | None = None
    created_at: datetime
    updated_at: datetime
    metadata: StringMetadata | None = None
    source: PaymentSourceSchema


class ListPaymentsResponseSchema(Schema):
    payments: list[PaymentSchema]
    meta: PaginationMetaSchema


# Request side


def _card_holder_name(value: str) -> str:
    if len(value.split()) < 2:
        raise ValueError("Card holder name must be at least two words")
    return value


def _not_in_past(year: int) -> int:
    if year < datetime.now().year:
        raise ValueError("Year cannot be in the past")
    return year


Description = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=DESCRIPTION_MAX_LENGTH),
]
StatementDescriptor = Annotated[str, Field(max_length=STATEMENT_DESCRIPTOR_MAX_LENGTH)]
CardHolderName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=DESCRIPTION_MAX_LENGTH),
    AfterValidator(_card_holder_name),
]
Cvc = Annotated[str, Field(pattern=CVC_PATTERN)]


class CreateCreditCardSourceSchema(Schema):
    type: Literal["creditcard"]
    name: CardHolderName
    number: Annotated[str, Field(pattern=CARD_NUMBER_PATTERN)]
    month: Annotated[StrictInt, Field(ge=1, le=12)]
    year: Annotated[StrictInt, AfterValidator(_not_in_past)]
    cvc: Cvc
    statement_descriptor: StatementDescriptor | None = None
    three_ds: StrictBool | None = Field(default=None, alias="3ds")
    manual: StrictBool | None = None
    save_card: StrictBool | None = None


class CreateTokenSourceSchema(Schema):
    type: Literal["token"]
    token: Annotated[str, Field(pattern=TOKEN_PATTERN)]
    cvc: Cvc | None = None
    statement_descriptor: StatementDescriptor | None = None
    three_ds: StrictBool | None = Field(default=None, alias="3ds")
    manual: StrictBool | None = None


class CreateGooglePaySourceSchema(Schema):
    type: Literal["googlepay"]
    token: str | None = None
    statement_descriptor: StatementDescriptor | None = None
    manual: StrictBool | None = None
    save_card: StrictBool | None = None


class CreateApplePaySourceSchema(Schema):
    type: Literal["applepay"]
    token: str
    statement_descriptor: StatementDescriptor | None = None
    manual: StrictBool | None = None
    save_card: StrictBool | None = None


class CreateSamsungPaySourceSchema(Schema):
    type: Literal["samsungpay"]
    token: str
    statement_descriptor: StatementDescriptor | None = None
    manual: StrictBool | None = None
    save_card: StrictBool | None = None


class CreateStcPaySourceSchema(Schema):
    type: Literal["stcpay"]
    mobile: Annotated[str, Field(pattern=SAUDI_MOBILE_PATTERN)]
    cashier_id: str | None = None
    branch: str | None = None


CreatePaymentSourceSchema = Annotated[
    Union[
        CreateCreditCardSourceSchema,
        CreateTokenSourceSchema,
        CreateGooglePaySourceSchema,
        CreateApplePaySourceSchema,
        CreateSamsungPaySourceSchema,
        CreateStcPaySourceSchema,
    ],
    Field(discriminator="type"),
]


class CreatePaymentSchema(Schema):
    given_id: UUID | None = None
    amount: Amount
    currency: CurrencyCode
    description: Description
    callback_url: HttpUrl
    source: CreatePaymentSourceSchema
    metadata: StringMetadata | None = None
    apply_coupon: StrictBool | None = None


class UpdatePaymentSchema(Schema):
    description: Description | None = None
    metadata: StringMetadata | None = None


class RefundPaymentSchema(Schema):
    amount: Amount | None = None


class CapturePaymentSchema(Schema):
    amount: Amount | None = None


def validate_create_payment_request(request: Any) -> ValidationResult[dict[str, Any]]:
    return validate_request(CreatePaymentSchema, request)


def validate_update_payment_request(request: Any) -> ValidationResult[dict[str, Any]]:
    return validate_request(UpdatePaymentSchema, request)


def validate_refund_request(request: Any) -> ValidationResult[dict[str, Any]]:
    return validate_request(RefundPaymentSchema, request)


def validate_capture_request(request: Any = None) -> ValidationResult[dict[str, Any]]:
    # The capture body is optional; an absent body captures the full amount.
    return validate_request(CapturePaymentSchema, {} if request is None else request)


def _source_from_schema(source: Schema) -> PaymentSource:
    contract = SOURCE_CONTRACTS[type(source)]
    return to_contract(contract, source, type=PaymentSourceType(source.type))


def payment_from_schema(schema: PaymentSchema, validator: MetadataValidator[Any], raw: Any) -> Payment[Any]:
    return to_contract(
        Payment,
        schema,
        source=_source_from_schema(schema.source),
        metadata=parse_metadata(schema.metadata, validator, raw),
    )


def parse_payment(raw: Any, validator: MetadataValidator[Any]) -> Payment[Any]:
    """Parse a gateway payment object, raising ResponseParseError on mismatch."""
    return payment_from_schema(parse_response(PaymentSchema, raw), validator, raw)


def parse_list_payments_response(raw: Any, validator: MetadataValidator[Any]) -> ListPaymentsResponse[Any]:
    schema = parse_response(ListPaymentsResponseSchema, raw)
    return ListPaymentsResponse(
        payments=[payment_from_schema(p, validator, raw) for p in schema.payments],
        meta=to_pagination_meta(schema.meta),
    )
