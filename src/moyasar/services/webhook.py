from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from moyasar.errors import WebhookError
from moyasar.events import Listener
from moyasar.metadata import MetadataValidator
from moyasar.models.webhook import (
    AvailableEventsResponse,
    CreateWebhookRequest,
    ListWebhookAttemptsResponse,
    ListWebhooksResponse,
    UpdateWebhookRequest,
    Webhook,
    WebhookAttempt,
    WebhookEvent,
    WebhookPayload,
)
from moyasar.services.base import BaseService, build_query
from moyasar.transport.http import Transport
from moyasar.transport.retry import should_retry_webhook
from moyasar.utils.crypto import extract_signature_from_headers, verify_hmac_signature
from moyasar.validation.webhook import (
    parse_available_events_response,
    parse_list_webhook_attempts_response,
    parse_list_webhooks_response,
    parse_webhook,
    parse_webhook_attempt,
    validate_create_webhook_request,
    validate_update_webhook_request,
)
from moyasar.webhooks.pipeline import RawWebhook, WebhookProcessor

WEBHOOKS_PATH = "/v1/webhooks"
WEBHOOK_ATTEMPTS_PATH = "/v1/webhooks/attempts"
AVAILABLE_EVENTS_PATH = "/v1/webhooks/available_events"


def _ignore_body(raw: Any) -> None:
    return None


class WebhookAttemptsService(BaseService):
    """Read-only delivery attempt log."""

    error_class = WebhookError

    def list(
        self,
        *,
        page: int | None = None,
        limit: int | None = None,
        webhook_id: str | None = None,
        event_type: WebhookEvent | str | None = None,
        result: str | None = None,
    ) -> ListWebhookAttemptsResponse:
        params = build_query({
            "page": page,
            "limit": limit,
            "webhook_id": webhook_id,
            "event_type": event_type,
            "result": result,
        })
        return self._request(
            "Failed to list webhook attempts",
            "GET",
            WEBHOOK_ATTEMPTS_PATH,
            parse_list_webhook_attempts_response,
            params=params,
        )

    def retrieve(self, attempt_id: str) -> WebhookAttempt:
        self._require_id(attempt_id, "Attempt ID")
        return self._request(
            f"Failed to retrieve webhook attempt {attempt_id}",
            "GET",
            f"{WEBHOOK_ATTEMPTS_PATH}/{attempt_id}",
            parse_webhook_attempt,
        )


class WebhookService(BaseService):
    """Webhook subscriptions on the gateway, plus inbound notification handling.

    ``process_webhook`` is the single entry point for an HTTP endpoint::

        service.on_event(WebhookEvent.PAYMENT_PAID, mark_order_paid)

        def endpoint(body: bytes):
            payload = service.process_webhook(body)
    """

    error_class = WebhookError

    def __init__(
        self,
        transport: Transport,
        metadata_validator: MetadataValidator[Any],
        *,
        webhook_secret: str | None = None,
        processor: WebhookProcessor | None = None,
    ):
        super().__init__(transport, metadata_validator)
        self.webhook_secret = webhook_secret
        self.processor = processor or WebhookProcessor(metadata_validator)
        self.attempts = WebhookAttemptsService(transport, metadata_validator)

    def create(self, request: CreateWebhookRequest) -> Webhook:
        prefix = "Failed to create webhook"
        body = self._validated(validate_create_webhook_request(request), prefix)
        return self._request(prefix, "POST", WEBHOOKS_PATH, parse_webhook, json=body)

    def list(self, *, page: int | None = None, limit: int | None = None) -> ListWebhooksResponse:
        return self._request(
            "Failed to list webhooks",
            "GET",
            WEBHOOKS_PATH,
            parse_list_webhooks_response,
            params=build_query({"page": page, "limit": limit}),
        )

    def retrieve(self, webhook_id: str) -> Webhook:
        self._require_id(webhook_id, "Webhook ID")
        return self._request(
            f"Failed to retrieve webhook {webhook_id}",
            "GET",
            f"{WEBHOOKS_PATH}/{webhook_id}",
            parse_webhook,
        )

    def update(self, webhook_id: str, request: UpdateWebhookRequest) -> Webhook:
        self._require_id(webhook_id, "Webhook ID")
        prefix = f"Failed to update webhook {webhook_id}"
        body = self._validated(validate_update_webhook_request(request), prefix)
        return self._request(prefix, "PUT", f"{WEBHOOKS_PATH}/{webhook_id}", parse_webhook, json=body)

    def delete(self, webhook_id: str) -> None:
        self._require_id(webhook_id, "Webhook ID")
        self._request(
            f"Failed to delete webhook {webhook_id}",
            "DELETE",
            f"{WEBHOOKS_PATH}/{webhook_id}",
            _ignore_body,
        )

    def available_events(self) -> AvailableEventsResponse:
        return self._request(
            "Failed to fetch available events",
            "GET",
            AVAILABLE_EVENTS_PATH,
            parse_available_events_response,
        )

    def process_webhook(self, raw: RawWebhook, expected_secret: str | None = None) -> WebhookPayload[Any]:
        """Run an inbound notification through the pipeline and notify listeners.

        Args:
            raw: The request body as bytes, a JSON string or an already decoded mapping.
            expected_secret: Shared secret configured on the subscription. Falls
                back to the client's ``webhook_secret`` setting.

        Raises:
            WebhookStructuralError: Unparseable or structurally invalid body.
            WebhookAuthenticationError: ``secret_token`` does not match.
            WebhookMetadataError: Metadata rejected by the metadata validator.
        """
        secret = expected_secret if expected_secret is not None else self.webhook_secret
        return self.processor.process(raw, secret)

    def on_event(self, event: WebhookEvent | str, listener: Listener) -> None:
        self.processor.on_event(event, listener)

    def on_any_payment_event(self, listener: Listener) -> None:
        self.processor.on_any_payment_event(listener)

    def off_event(self, event: WebhookEvent | str, listener: Listener) -> None:
        self.processor.off_event(event, listener)

    def remove_all_listeners(self, event: WebhookEvent | str | None = None) -> None:
        self.processor.remove_all_listeners(event)

    @staticmethod
    def extract_signature(headers: Mapping[str, str | list[str]]) -> str | None:
        return extract_signature_from_headers(headers)

    @staticmethod
    def verify_signature(body: bytes | str, signature: str, secret: str) -> bool:
        """Check an HMAC-SHA256 hex signature over the raw body.

        Not used by ``process_webhook``, which authenticates on ``secret_token``.
        """
        return verify_hmac_signature(body, signature, secret)

    should_retry = staticmethod(should_retry_webhook)
