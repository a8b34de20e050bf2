from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Generic, Literal, NoReturn, NotRequired, TypedDict, TypeVar

from moyasar.models.common import PaginationMeta

M = TypeVar("M")


class WebhookEvent(str, Enum):
    PAYMENT_PAID = "payment_paid"
    PAYMENT_FAILED = "payment_failed"
    PAYMENT_AUTHORIZED = "payment_authorized"
    PAYMENT_CAPTURED = "payment_captured"
    PAYMENT_REFUNDED = "payment_refunded"
    PAYMENT_VOIDED = "payment_voided"
    PAYMENT_VERIFIED = "payment_verified"
    PAYMENT_ABANDONED = "payment_abandoned"
    PAYMENT_CANCELED = "payment_canceled"
    PAYMENT_EXPIRED = "payment_expired"
    BALANCE_TRANSFERRED = "balance_transferred"
    PAYOUT_INITIATED = "payout_initiated"
    PAYOUT_PAID = "payout_paid"
    PAYOUT_FAILED = "payout_failed"
    PAYOUT_CANCELED = "payout_canceled"
    PAYOUT_RETURNED = "payout_returned"

    @property
    def category(self) -> str:
        return self.value.split("_", 1)[0]


ALL_WEBHOOK_EVENTS = tuple(WebhookEvent)


class WebhookHttpMethod(str, Enum):
    POST = "post"
    PUT = "put"
    PATCH = "patch"


@dataclass(kw_only=True)
class Webhook:
    id: str
    http_method: WebhookHttpMethod
    url: str
    created_at: datetime
    events: list[WebhookEvent]

    @property
    def shared_secret(self) -> NoReturn:
        raise AttributeError("shared_secret is write-only and never returned by the gateway")


@dataclass(kw_only=True)
class WebhookAttempt:
    id: str
    webhook_id: str
    event_id: str
    event_type: WebhookEvent
    retry_number: int
    result: Literal["success", "failed"]
    message: str
    response_code: int
    response_headers: str
    response_body: str
    created_at: datetime


@dataclass(frozen=True, kw_only=True)
class WebhookPayload(Generic[M]):
    """One inbound notification. ``data["metadata"]`` is already validated."""

    id: str
    type: WebhookEvent
    created_at: str
    secret_token: str = ""
    account_name: str
    live: bool
    data: Mapping[str, Any]

    @property
    def metadata(self) -> M | None:
        return self.data.get("metadata")


@dataclass(kw_only=True)
class ListWebhooksResponse:
    webhooks: list[Webhook]
    meta: PaginationMeta


@dataclass(kw_only=True)
class ListWebhookAttemptsResponse:
    webhook_attempts: list[WebhookAttempt]
    meta: PaginationMeta


@dataclass(kw_only=True)
class AvailableEventsResponse:
    events: list[WebhookEvent]


class CreateWebhookRequest(TypedDict):
    http_method: str
    url: str
    shared_secret: str
    events: NotRequired[list[str]]


class UpdateWebhookRequest(TypedDict, total=False):
    http_method: str
    url: str
    shared_secret: str
    events: list[str]
