import json
import logging
import threading
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Self

from moyasar.errors import GatewayError
from moyasar.models.webhook import WebhookPayload
from moyasar.services.webhook import WebhookService

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/webhook"


@dataclass
class Rejection:
    error: GatewayError
    body: bytes


@dataclass
class _ReceiverState:
    service: WebhookService
    secret: str | None
    received: list[WebhookPayload[Any]] = field(default_factory=list)
    rejected: list[Rejection] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock)


class _ReceiverHTTPServer(ThreadingHTTPServer):
    def __init__(self, address: tuple[str, int], state: _ReceiverState):
        super().__init__(address, _WebhookHandler)
        self.state = state


class _WebhookHandler(BaseHTTPRequestHandler):
    """Feeds POST bodies to WebhookService.process_webhook."""

    server: _ReceiverHTTPServer

    def do_POST(self):
        if self.path.split("?", 1)[0] != WEBHOOK_PATH:
            self._reply(404, {"error": "not_found", "message": f"No route for {self.path}"})
            return

        body = self.rfile.read(int(self.headers.get("Content-Length", 0)))
        state = self.server.state
        try:
            payload = state.service.process_webhook(body, state.secret)
        except GatewayError as exc:
            with state.lock:
                state.rejected.append(Rejection(exc, body))
            self._reply(exc.status_code, {"error": exc.error_type, "message": exc.message})
            return

        with state.lock:
            state.received.append(payload)
        self._reply(200, {"status": "ok", "id": payload.id})

    def _reply(self, code: int, body: dict[str, Any]) -> None:
        encoded = json.dumps(body).encode()
        self.send_response(code)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(encoded)))
        self.end_headers()
        self.wfile.write(encoded)

    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)


class WebhookReceiverServer:
    """Threaded HTTP endpoint that runs inbound webhooks through a WebhookService.

    Answers 200 on success and the error's ``status_code`` otherwise (400
    structural, 401 authentication, 422 metadata). Meant for local
    integration testing and as a template for a production endpoint.
    """

    def __init__(
        self,
        service: WebhookService,
        secret: str | None = None,
        host: str = "127.0.0.1",
        port: int = 0,
    ):
        self.host = host
        self._requested_port = port
        self._state = _ReceiverState(service=service, secret=secret)
        self._httpd: _ReceiverHTTPServer | None = None
        self._worker: threading.Thread | None = None

    def set_secret(self, secret: str | None) -> Self:
        """Swap the expected secret, e.g. to simulate a rotation mid-test."""
        self._state.secret = secret
        return self

    def start(self) -> None:
        self._httpd = _ReceiverHTTPServer((self.host, self._requested_port), self._state)
        self._worker = threading.Thread(target=self._httpd.serve_forever, name="webhook-receiver", daemon=True)
        self._worker.start()
        logger.info("Webhook receiver listening on %s", self.url)

    def stop(self) -> None:
        httpd, self._httpd = self._httpd, None
        if httpd is not None:
            httpd.shutdown()
            httpd.server_close()
        worker, self._worker = self._worker, None
        if worker is not None:
            worker.join(timeout=5)

    def __enter__(self) -> Self:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    @property
    def port(self) -> int:
        # Bound port once started; port=0 asks the OS for a free one.
        if self._httpd is not None:
            return self._httpd.server_address[1]
        return self._requested_port

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}{WEBHOOK_PATH}"

    def get_received(self) -> list[WebhookPayload[Any]]:
        with self._state.lock:
            return list(self._state.received)

    def get_rejected(self) -> list[Rejection]:
        with self._state.lock:
            return list(self._state.rejected)

    def clear(self) -> None:
        with self._state.lock:
            self._state.received.clear()
            self._state.rejected.clear()
