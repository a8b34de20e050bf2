from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Generic, Literal, NotRequired, TypedDict, TypeVar, Union

from moyasar.models.common import Currency, PaginationMeta

M = TypeVar("M")


class PaymentStatus(str, Enum):
    INITIATED = "initiated"
    PAID = "paid"
    AUTHORIZED = "authorized"
    FAILED = "failed"
    REFUNDED = "refunded"
    CAPTURED = "captured"
    VOIDED = "voided"
    VERIFIED = "verified"


class PaymentSourceType(str, Enum):
    CREDITCARD = "creditcard"
    APPLEPAY = "applepay"
    GOOGLEPAY = "googlepay"
    SAMSUNGPAY = "samsungpay"
    STCPAY = "stcpay"
    TOKEN = "token"


WALLET_SOURCE_TYPES = (
    PaymentSourceType.APPLEPAY,
    PaymentSourceType.GOOGLEPAY,
    PaymentSourceType.SAMSUNGPAY,
)


class CardScheme(str, Enum):
    MADA = "mada"
    VISA = "visa"
    MASTER = "master"
    AMEX = "amex"


class CardType(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"
    CHARGE_CARD = "charge_card"
    UNSPECIFIED = "unspecified"


# Payment sources as returned by the gateway, selected by ``type``.


@dataclass(kw_only=True)
class CardPaymentSource:
    type: PaymentSourceType
    company: CardScheme | None  # null for wallet payments with a malformed token
    name: str | None
    number: str
    gateway_id: str
    message: str | None
    reference_number: str | None
    token: str | None = None
    response_code: str | None = None
    authorization_code: str | None = None
    issuer_name: str | None = None
    issuer_country: str | None = None
    issuer_card_type: CardType | None = None
    issuer_card_category: str | None = None


@dataclass(kw_only=True)
class CreditCardSource(CardPaymentSource):
    transaction_url: str | None


@dataclass(kw_only=True)
class WalletPaymentSource(CardPaymentSource):
    dpan: str | None = None


@dataclass(kw_only=True)
class TokenPaymentSource(CardPaymentSource):
    pass


@dataclass(kw_only=True)
class StcPaySource:
    type: PaymentSourceType
    mobile: str
    reference_number: str | None = None
    cashier_id: str | None = None
    branch: str | None = None
    transaction_url: str | None
    message: str


PaymentSource = Union[CreditCardSource, WalletPaymentSource, TokenPaymentSource, StcPaySource]


@dataclass(kw_only=True)
class Payment(Generic[M]):
    """Last-known snapshot of a payment. Only the gateway changes it."""

    id: str
    status: PaymentStatus
    amount: int
    fee: int
    currency: Currency
    refunded: int
    refunded_at: datetime | None
    captured: int
    captured_at: datetime | None
    voided_at: datetime | None
    description: str
    amount_format: str
    fee_format: str
    refunded_format: str
    captured_format: str
    invoice_id: str | None
    ip: str | None
    callback_url: str | None = None
    created_at: datetime
    updated_at: datetime
    metadata: M | None = None
    source: PaymentSource


@dataclass(kw_only=True)
class ListPaymentsResponse(Generic[M]):
    payments: list[Payment[M]]
    meta: PaginationMeta


@dataclass(frozen=True)
class PaymentCapabilities:
    can_refund: bool
    can_capture: bool
    can_void: bool
    max_refund_amount: int
    max_capture_amount: int


# Request bodies, keyed exactly as sent on the wire.

CreateCreditCardSource = TypedDict(
    "CreateCreditCardSource",
    {
        "type": Literal["creditcard"],
        "name": str,
        "number": str,
        "month": int,
        "year": int,
        "cvc": str,
        "statement_descriptor": NotRequired[str],
        "3ds": NotRequired[bool],
        "manual": NotRequired[bool],
        "save_card": NotRequired[bool],
    },
)

CreateTokenSource = TypedDict(
    "CreateTokenSource",
    {
        "type": Literal["token"],
        "token": str,
        "cvc": NotRequired[str],
        "statement_descriptor": NotRequired[str],
        "3ds": NotRequired[bool],
        "manual": NotRequired[bool],
    },
)


class CreateGooglePaySource(TypedDict):
    type: Literal["googlepay"]
    token: NotRequired[str]
    statement_descriptor: NotRequired[str]
    manual: NotRequired[bool]
    save_card: NotRequired[bool]


class CreateApplePaySource(TypedDict):
    type: Literal["applepay"]
    token: str
    statement_descriptor: NotRequired[str]
    manual: NotRequired[bool]
    save_card: NotRequired[bool]


class CreateSamsungPaySource(TypedDict):
    type: Literal["samsungpay"]
    token: str
    statement_descriptor: NotRequired[str]
    manual: NotRequired[bool]
    save_card: NotRequired[bool]


class CreateStcPaySource(TypedDict):
    type: Literal["stcpay"]
    mobile: str
    cashier_id: NotRequired[str]
    branch: NotRequired[str]


CreatePaymentSource = Union[
    CreateCreditCardSource,
    CreateTokenSource,
    CreateGooglePaySource,
    CreateApplePaySource,
    CreateSamsungPaySource,
    CreateStcPaySource,
]


class CreatePaymentRequest(TypedDict):
    given_id: NotRequired[str]
    amount: int
    currency: str
    description: str
    callback_url: str
    source: CreatePaymentSource
    metadata: NotRequired[dict[str, str]]
    apply_coupon: NotRequired[bool]


class UpdatePaymentRequest(TypedDict, total=False):
    description: str
    metadata: dict[str, str]


class RefundPaymentRequest(TypedDict, total=False):
    amount: int


class CapturePaymentRequest(TypedDict, total=False):
    amount: int
