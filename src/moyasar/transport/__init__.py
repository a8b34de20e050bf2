from .http import SDK_VERSION, USER_AGENT, HttpTransport, Transport
from .retry import RetryManager, should_retry_webhook

__all__ = [
    "SDK_VERSION", "USER_AGENT",
    "HttpTransport", "Transport",
    "RetryManager", "should_retry_webhook",
]
