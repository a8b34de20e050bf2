from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import AfterValidator

from moyasar.models.common import ValidationResult
from moyasar.models.webhook import (
    AvailableEventsResponse,
    ListWebhookAttemptsResponse,
    ListWebhooksResponse,
    Webhook,
    WebhookAttempt,
    WebhookEvent,
    WebhookHttpMethod,
)
from moyasar.validation.common import (
    HttpsUrl,
    NonEmptyStr,
    PaginationMetaSchema,
    Schema,
    parse_response,
    to_contract,
    to_pagination_meta,
    validate_request,
)

REQUIRED_PAYLOAD_FIELDS = ("id", "type", "created_at", "account_name", "data")
_KNOWN_EVENTS = frozenset(event.value for event in WebhookEvent)


def is_valid_event(event: Any) -> bool:
    return isinstance(event, str) and event in _KNOWN_EVENTS


def _known_events(events: list[str]) -> list[str]:
    invalid = [event for event in events if not is_valid_event(event)]
    if invalid:
        raise ValueError(f"Invalid webhook events: {', '.join(invalid)}")
    return events


EventList = Annotated[list[str], AfterValidator(_known_events)]


class CreateWebhookSchema(Schema):
    http_method: WebhookHttpMethod
    url: HttpsUrl
    shared_secret: NonEmptyStr
    events: EventList | None = None


class UpdateWebhookSchema(Schema):
    http_method: WebhookHttpMethod | None = None
    url: HttpsUrl | None = None
    shared_secret: NonEmptyStr | None = None
    events: EventList | None = None


class WebhookSchema(Schema):
    id: str
    http_method: WebhookHttpMethod
    url: str
    created_at: datetime
    events: list[WebhookEvent]


class WebhookAttemptSchema(Schema):
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


class ListWebhooksResponseSchema(Schema):
    webhooks: list[WebhookSchema]
    meta: PaginationMetaSchema


class ListWebhookAttemptsResponseSchema(Schema):
    webhook_attempts: list[WebhookAttemptSchema]
    meta: PaginationMetaSchema


class AvailableEventsResponseSchema(Schema):
    events: list[WebhookEvent]


def validate_create_webhook_request(request: Any) -> ValidationResult[dict[str, Any]]:
    return validate_request(CreateWebhookSchema, request)


def validate_update_webhook_request(request: Any) -> ValidationResult[dict[str, Any]]:
    return validate_request(UpdateWebhookSchema, request)


def validate_webhook_payload(payload: Mapping[str, Any]) -> list[str]:
    """Return every structural problem with an inbound notification.

    Missing, ``None`` and empty-string values all count as absent.
    """
    errors = []
    for name in REQUIRED_PAYLOAD_FIELDS:
        value = payload.get(name)
        if value is None or value == "":
            errors.append(f"{name} is required")

    event_type = payload.get("type")
    if event_type not in (None, "") and not is_valid_event(event_type):
        errors.append(f"Invalid webhook event type: {event_type}")

    data = payload.get("data")
    if data not in (None, "") and not isinstance(data, Mapping):
        errors.append("data must be an object")

    if not isinstance(payload.get("live"), bool):
        errors.append("live field must be a boolean")

    secret_token = payload.get("secret_token", "")
    if secret_token is not None and not isinstance(secret_token, str):
        errors.append("secret_token must be a string")
    return errors


def parse_webhook(raw: Any) -> Webhook:
    return to_contract(Webhook, parse_response(WebhookSchema, raw))


def parse_webhook_attempt(raw: Any) -> WebhookAttempt:
    return to_contract(WebhookAttempt, parse_response(WebhookAttemptSchema, raw))


def parse_list_webhooks_response(raw: Any) -> ListWebhooksResponse:
    schema = parse_response(ListWebhooksResponseSchema, raw)
    return ListWebhooksResponse(
        webhooks=[to_contract(Webhook, w) for w in schema.webhooks],
        meta=to_pagination_meta(schema.meta),
    )


def parse_list_webhook_attempts_response(raw: Any) -> ListWebhookAttemptsResponse:
    schema = parse_response(ListWebhookAttemptsResponseSchema, raw)
    return ListWebhookAttemptsResponse(
        webhook_attempts=[to_contract(WebhookAttempt, a) for a in schema.webhook_attempts],
        meta=to_pagination_meta(schema.meta),
    )


def parse_available_events_response(raw: Any) -> AvailableEventsResponse:
    return to_contract(AvailableEventsResponse, parse_response(AvailableEventsResponseSchema, raw))
