import logging
import time
from collections.abc import Mapping
from typing import Any, Protocol

import requests

from moyasar.errors import ResponseParseError, TransportError, TransportErrorKind
from moyasar.transport.retry import RetryManager

logger = logging.getLogger(__name__)

SDK_VERSION = "1.0.0"
USER_AGENT = f"Moyasar-SDK/{SDK_VERSION}"
DEFAULT_BASE_URL = "https://api.moyasar.com"
DEFAULT_TIMEOUT_SECONDS = 30.0

DEFAULT_ERROR_TYPES = {
    400: "invalid_request_error",
    401: "authentication_error",
    403: "account_inactive_error",
    404: "invalid_request_error",
    405: "account_inactive_error",
    429: "rate_limit_error",
}

DEFAULT_ERROR_MESSAGES = {
    400: "The request was unacceptable, often due to missing a required parameter",
    401: "Invalid authorization credentials",
    403: "Credentials not enough to access resources",
    404: "The requested resource doesn't exist",
    405: "Entity not activated to use live account",
    429: "Too many requests hit the API too quickly",
    500: "We had a problem with our server. Try again later",
    503: "We are temporarily offline for maintenance. Please try again later",
}


class Transport(Protocol):
    """What the services need from an HTTP client.

    ``request`` returns the decoded JSON body (None for an empty body) and
    raises :class:`TransportError` for network failures and non-2xx replies.
    """

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        ...

    def close(self) -> None:
        ...


def _normalize_errors(errors: Any) -> list[str]:
    # The gateway sends either a list of messages or {field: [messages]}.
    if isinstance(errors, Mapping):
        normalized = []
        for field, messages in errors.items():
            if isinstance(messages, list):
                messages = ", ".join(str(m) for m in messages)
            normalized.append(f"{field}: {messages}")
        return normalized
    if isinstance(errors, list):
        return [str(e) for e in errors]
    return []


def error_from_response(response: requests.Response, url: str) -> TransportError:
    """Classify a non-2xx reply using the gateway's error body when present."""
    status = response.status_code
    try:
        body = response.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        body = {}

    error_type = body.get("type") or DEFAULT_ERROR_TYPES.get(status, "api_error")
    message = body.get("message") or DEFAULT_ERROR_MESSAGES.get(status, f"HTTP {status}: Request failed")
    return TransportError(
        message,
        kind=TransportErrorKind.from_status(status),
        error_type=error_type,
        status_code=status,
        details={**body, "url": url, "status": status, "status_text": response.reason},
        errors=_normalize_errors(body.get("errors")),
    )


class HttpTransport:
    """requests-based transport using HTTP basic auth with the API key."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        retry_manager: RetryManager | None = None,
        session: requests.Session | None = None,
        delay_factor: float = 1.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.retry_manager = retry_manager or RetryManager()
        self.delay_factor = delay_factor
        self.session = session or requests.Session()
        self.session.auth = (api_key, "")
        self.session.headers.update({
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        })

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Send a request, retrying idempotent calls on network errors and 5xx.

        Args:
            method: HTTP method.
            path: Path below the base URL, e.g. ``/v1/payments``.
            params: Query string; None values are dropped.
            json: Request body, serialized as JSON.

        Returns:
            The decoded JSON body, or None when the body is empty.
        """
        method = method.upper()
        url = f"{self.base_url}{path}"
        retry_count = 0

        while True:
            try:
                return self._send(method, url, params, json)
            except TransportError as exc:
                status = None if exc.kind is TransportErrorKind.NETWORK else exc.status_code
                if not self.retry_manager.is_retryable_method(method):
                    raise
                if not self.retry_manager.should_retry(status):
                    raise
                if not self.retry_manager.has_attempts_remaining(retry_count):
                    raise

                delay = self.retry_manager.next_delay(retry_count) * self.delay_factor
                logger.warning(
                    "%s %s failed (%s), retry %d in %.2fs",
                    method, path, exc.message, retry_count + 1, delay,
                )
                if delay > 0:
                    time.sleep(delay)

                retry_count += 1

    def _send(self, method: str, url: str, params: Mapping[str, Any] | None, body: Any) -> Any:
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=body,
                timeout=self.timeout_seconds,
            )
        except requests.exceptions.Timeout as exc:
            raise TransportError(
                f"Request timed out after {self.timeout_seconds}s",
                kind=TransportErrorKind.NETWORK,
                error_type="api_connection_error",
                details={"code": "timeout", "url": url},
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise TransportError(
                str(exc) or "Network error occurred",
                kind=TransportErrorKind.NETWORK,
                error_type="api_connection_error",
                details={"code": "connection_error", "url": url, "original_error": str(exc)},
            ) from exc

        logger.debug("%s %s -> %d", method, url, response.status_code)
        if not response.ok:
            raise error_from_response(response, url)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ResponseParseError(
                [f"response body is not valid JSON: {exc}"],
                payload=response.text,
            ) from exc

    def close(self) -> None:
        self.session.close()
