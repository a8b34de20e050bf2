from typing import Any

import pytest

from moyasar.client import MoyasarClient
from moyasar.config import MoyasarSettings
from moyasar.metadata import IdentityMetadataValidator
from moyasar.receiver.server import WebhookReceiverServer
from moyasar.transport.retry import RetryManager
from moyasar.utils.factories import InvoiceFactory, PaymentFactory, WebhookFactory
from moyasar.webhooks.pipeline import WebhookProcessor


API_KEY = "sk_test_a1b2c3d4e5"
WEBHOOK_SECRET = "test-shared-secret-token"


class MockTransport:
    """Transport double: records every call and replays queued responses.

    A queued exception is raised instead of returned.
    """

    def __init__(self):
        self.requests: list[dict[str, Any]] = []
        self._responses: list[Any] = []
        self.closed = False

    def queue(self, *responses: Any) -> "MockTransport":
        self._responses.extend(responses)
        return self

    def request(self, method, path, *, params=None, json=None):
        self.requests.append({"method": method, "path": path, "params": params, "json": json})
        if not self._responses:
            return None
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last(self) -> dict[str, Any]:
        return self.requests[-1]

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def api_key():
    return API_KEY


@pytest.fixture
def webhook_secret():
    return WEBHOOK_SECRET


@pytest.fixture
def settings():
    return MoyasarSettings(_env_file=None, api_key=API_KEY, webhook_secret=WEBHOOK_SECRET)


@pytest.fixture
def transport():
    return MockTransport()


@pytest.fixture
def metadata_validator():
    return IdentityMetadataValidator()


@pytest.fixture
def client(settings, transport):
    return MoyasarClient(settings=settings, transport=transport)


@pytest.fixture
def processor():
    return WebhookProcessor()


@pytest.fixture
def retry_manager():
    return RetryManager()


@pytest.fixture
def receiver(client, webhook_secret):
    server = WebhookReceiverServer(client.webhook, secret=webhook_secret)
    server.start()
    yield server
    server.stop()


@pytest.fixture
def payment_factory():
    return PaymentFactory


@pytest.fixture
def invoice_factory():
    return InvoiceFactory


@pytest.fixture
def webhook_factory():
    return WebhookFactory
