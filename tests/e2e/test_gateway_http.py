"""E2E tests: the real HTTP transport against a local fake gateway."""

import base64
import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlparse

import pytest

from moyasar import MoyasarClient, MoyasarSettings
from moyasar.errors import PaymentError
from moyasar.transport.http import USER_AGENT
from moyasar.utils.factories import PaymentFactory, list_wire


pytestmark = pytest.mark.e2e


class _GatewayHandler(BaseHTTPRequestHandler):
    def _handle(self):
        state = self.server.state  # type: ignore[attr-defined]
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length) if length else b""
        parsed = urlparse(self.path)
        with state["lock"]:
            state["requests"].append({
                "method": self.command,
                "path": parsed.path,
                "query": parse_qs(parsed.query),
                "headers": dict(self.headers),
                "body": json.loads(body) if body else None,
            })
            status, reply = state["replies"].pop(0) if state["replies"] else (200, {})
        payload = json.dumps(reply).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    do_GET = do_POST = do_PUT = do_DELETE = _handle

    def log_message(self, format, *args):
        pass


class FakeGateway:
    """Local HTTP server replaying queued (status, body) replies."""

    def __init__(self):
        self.state = {"requests": [], "replies": [], "lock": threading.Lock()}
        self._server = ThreadingHTTPServer(("127.0.0.1", 0), _GatewayHandler)
        self._server.state = self.state  # type: ignore[attr-defined]
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)

    @property
    def url(self) -> str:
        return f"http://127.0.0.1:{self._server.server_address[1]}"

    @property
    def requests(self) -> list[dict]:
        return self.state["requests"]

    def reply(self, status, body):
        self.state["replies"].append((status, body))

    def start(self):
        self._thread.start()

    def stop(self):
        self._server.shutdown()
        self._server.server_close()


@pytest.fixture
def gateway():
    server = FakeGateway()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def http_client(gateway, api_key):
    settings = MoyasarSettings(_env_file=None, base_url=gateway.url, retry_schedule=[0.0], max_retries=2)
    with MoyasarClient(api_key, settings=settings) as client:
        yield client


class TestGatewayHttp:
    """Wire-level behaviour of requests-based calls."""

    def test_retrieve_payment_with_basic_auth(self, gateway, http_client, api_key):
        wire = PaymentFactory.wire()
        gateway.reply(200, wire)

        payment = http_client.payment.retrieve(wire["id"])

        assert payment.id == wire["id"]
        request = gateway.requests[0]
        assert request["path"] == f"/v1/payments/{wire['id']}"
        expected = base64.b64encode(f"{api_key}:".encode()).decode()
        assert request["headers"]["Authorization"] == f"Basic {expected}"
        assert request["headers"]["User-Agent"] == USER_AGENT

    def test_list_query_string(self, gateway, http_client):
        gateway.reply(200, list_wire("payments", []))
        http_client.payment.list(status="paid", metadata={"order_id": "ord_1"})
        assert gateway.requests[0]["query"] == {"status": ["paid"], "metadata[order_id]": ["ord_1"]}

    def test_create_posts_json(self, gateway, http_client, payment_factory):
        gateway.reply(201, PaymentFactory.wire(status="initiated"))
        http_client.payment.create(payment_factory.create_request())
        assert gateway.requests[0]["method"] == "POST"
        assert gateway.requests[0]["body"]["amount"] == 10000

    def test_gateway_error_surfaces_as_domain_error(self, gateway, http_client, payment_factory):
        gateway.reply(400, {"type": "invalid_request_error", "message": "Validation Failed", "errors": ["bad"]})
        with pytest.raises(PaymentError) as exc_info:
            http_client.payment.create(payment_factory.create_request())
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Failed to create payment: Validation Failed"
        assert exc_info.value.errors == ["bad"]

    def test_get_retried_after_5xx(self, gateway, http_client):
        wire = PaymentFactory.wire()
        gateway.reply(503, {})
        gateway.reply(200, wire)
        assert http_client.payment.retrieve(wire["id"]).id == wire["id"]
        assert len(gateway.requests) == 2

    def test_post_not_retried_after_5xx(self, gateway, http_client):
        gateway.reply(500, {})
        with pytest.raises(PaymentError) as exc_info:
            http_client.payment.void("pay_1")
        assert exc_info.value.status_code == 500
        assert len(gateway.requests) == 1
