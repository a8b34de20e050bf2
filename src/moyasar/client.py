import logging
from datetime import datetime, timezone
from typing import Any, Self

from moyasar.config import MoyasarSettings
from moyasar.metadata import IdentityMetadataValidator, MetadataValidator
from moyasar.services.invoice import InvoiceService
from moyasar.services.payment import PaymentService
from moyasar.services.webhook import WebhookService
from moyasar.transport.http import SDK_VERSION, USER_AGENT, HttpTransport, Transport

logger = logging.getLogger(__name__)


class MoyasarClient:
    """Entry point: one transport and one metadata validator shared by every service.

    Example::

        with MoyasarClient("sk_test_...") as client:
            payment = client.payment.retrieve(payment_id)
            if can_refund(payment):
                client.payment.refund(payment.id, {"amount": max_refund_amount(payment)})

    Args:
        api_key: Secret API key. Defaults to ``MOYASAR_API_KEY``.
        metadata_validator: Applied to the metadata of every parsed entity
            and webhook. Defaults to an identity validator.
        settings: Overrides environment-derived settings.
        transport: Replaces the requests-based transport, e.g. in tests.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        metadata_validator: MetadataValidator[Any] | None = None,
        settings: MoyasarSettings | None = None,
        transport: Transport | None = None,
    ):
        self.settings = settings or MoyasarSettings()
        if api_key is None and self.settings.api_key is not None:
            api_key = self.settings.api_key.get_secret_value()
        if not api_key or len(api_key) < 3:
            raise ValueError("api_key is required and must be at least 3 characters")

        self.metadata_validator = metadata_validator or IdentityMetadataValidator()
        self.transport = transport or HttpTransport(
            api_key,
            base_url=self.settings.base_url,
            timeout_seconds=self.settings.timeout_seconds,
            retry_manager=self.settings.retry_manager(),
        )
        webhook_secret = self.settings.webhook_secret
        self.payment = PaymentService(self.transport, self.metadata_validator)
        self.invoice = InvoiceService(self.transport, self.metadata_validator)
        self.webhook = WebhookService(
            self.transport,
            self.metadata_validator,
            webhook_secret=webhook_secret.get_secret_value() if webhook_secret else None,
        )
        logger.debug("Moyasar client ready for %s", self.settings.base_url)

    def ping(self) -> dict[str, Any]:
        """Check connectivity and credentials with a cheap authenticated call."""
        self.webhook.available_events()
        return {"status": "ok", "timestamp": datetime.now(timezone.utc)}

    def client_info(self) -> dict[str, str]:
        return {
            "base_url": self.settings.base_url,
            "user_agent": USER_AGENT,
            "version": SDK_VERSION,
        }

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
