"""Inbound webhook ingestion.

A notification goes through five stages, stopping at the first failure::

    parse -> validate structure -> authenticate -> validate metadata -> dispatch

Each stage raises its own error class so an HTTP endpoint can tell a
malformed delivery (400), a forged one (401) and one whose metadata the
application rejects (422) apart.
"""
from __future__ import annotations

import hmac
import json
import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from moyasar.errors import (
    WebhookAuthenticationError,
    WebhookMetadataError,
    WebhookStructuralError,
)
from moyasar.events import Listener, TypedEventEmitter
from moyasar.metadata import IdentityMetadataValidator, MetadataValidator
from moyasar.models.webhook import ALL_WEBHOOK_EVENTS, WebhookEvent, WebhookPayload
from moyasar.validation.webhook import validate_webhook_payload

logger = logging.getLogger(__name__)

RawWebhook = Mapping[str, Any] | str | bytes | bytearray


def parse_webhook_payload(raw: RawWebhook) -> dict[str, Any]:
    """Normalize a mapping, JSON string or raw body into a dict."""
    if isinstance(raw, Mapping):
        return dict(raw)
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise WebhookStructuralError(f"Failed to parse webhook payload: {exc}") from exc
    if not isinstance(raw, str):
        raise WebhookStructuralError(
            f"Failed to parse webhook payload: unsupported type {type(raw).__name__}"
        )
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise WebhookStructuralError(f"Failed to parse webhook payload: {exc}") from exc
    if not isinstance(parsed, dict):
        raise WebhookStructuralError(
            "Invalid webhook payload structure: root must be a JSON object",
            unexpected_payload=parsed,
        )
    return parsed


def freeze(data: Mapping[str, Any]) -> Mapping[str, Any]:
    """Read-only view of webhook ``data``, nested objects and arrays included.

    The validated ``metadata`` value is left as the validator returned it.
    """
    return MappingProxyType({
        key: value if key == "metadata" else _freeze_value(value)
        for key, value in data.items()
    })


def _freeze_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze_value(item) for key, item in value.items()})
    if isinstance(value, list):
        return tuple(_freeze_value(item) for item in value)
    return value


def secrets_match(expected_secret: str | None, secret_token: Any) -> bool:
    """Compare the in-band ``secret_token`` against the configured secret.

    Both must be non-empty strings.
    """
    if not expected_secret or not isinstance(secret_token, str) or not secret_token:
        return False
    return hmac.compare_digest(expected_secret.encode("utf-8"), secret_token.encode("utf-8"))


class WebhookProcessor:
    """Runs inbound notifications through the ingestion stages and dispatches them."""

    def __init__(
        self,
        metadata_validator: MetadataValidator[Any] | None = None,
        emitter: TypedEventEmitter[WebhookEvent] | None = None,
    ):
        self.metadata_validator = metadata_validator or IdentityMetadataValidator()
        self.emitter = emitter or TypedEventEmitter(WebhookEvent)

    def process(self, raw: RawWebhook, expected_secret: str | None) -> WebhookPayload[Any]:
        payload = parse_webhook_payload(raw)
        logger.debug("Parsed webhook %s", payload.get("id"))

        self.validate_structure(payload)
        self.authenticate(payload, expected_secret)
        data = self.validate_metadata(payload)

        result: WebhookPayload[Any] = WebhookPayload(
            id=payload["id"],
            type=WebhookEvent(payload["type"]),
            created_at=str(payload["created_at"]),
            secret_token=payload.get("secret_token") or "",
            account_name=payload["account_name"],
            live=payload["live"],
            data=freeze(data),
        )
        self.dispatch(result)
        return result

    def validate_structure(self, payload: dict[str, Any]) -> None:
        errors = validate_webhook_payload(payload)
        if errors:
            logger.warning("Rejected webhook %s: %s", payload.get("id"), "; ".join(errors))
            raise WebhookStructuralError(
                f"Invalid webhook payload: {', '.join(errors)}",
                unexpected_payload=payload,
                errors=errors,
            )

    def authenticate(self, payload: dict[str, Any], expected_secret: str | None) -> None:
        if not secrets_match(expected_secret, payload.get("secret_token")):
            logger.warning("Rejected webhook %s: secret token mismatch", payload["id"])
            raise WebhookAuthenticationError()

    def validate_metadata(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Return a copy of ``data`` with its metadata replaced by the validated value."""
        data = dict(payload["data"])
        raw_metadata = data.get("metadata")
        if raw_metadata is None:
            return data
        try:
            data["metadata"] = self.metadata_validator.parse(raw_metadata)
        except Exception as exc:
            errors = getattr(exc, "errors", None)
            message = getattr(exc, "message", None) or str(exc)
            logger.warning("Rejected webhook %s: metadata failed validation", payload["id"])
            raise WebhookMetadataError(
                message,
                unexpected_payload=payload,
                errors=errors if isinstance(errors, list) else [message],
            ) from exc
        return data

    def dispatch(self, payload: WebhookPayload[Any]) -> None:
        delivered = self.emitter.emit(payload.type, payload)
        logger.debug("Dispatched webhook %s (%s), listeners=%s", payload.id, payload.type.value, delivered)

    def on_event(self, event: WebhookEvent | str, listener: Listener) -> None:
        self.emitter.on(event, listener)

    def on_any_payment_event(self, listener: Listener) -> None:
        # Fan out now, so events added to the registry later are not covered.
        for event in ALL_WEBHOOK_EVENTS:
            self.emitter.on(event, listener)

    def off_event(self, event: WebhookEvent | str, listener: Listener) -> None:
        self.emitter.off(event, listener)

    def remove_all_listeners(self, event: WebhookEvent | str | None = None) -> None:
        self.emitter.remove_all_listeners(event)
