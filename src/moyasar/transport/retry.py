class RetryManager:
    """Manages retry decisions and backoff scheduling for gateway calls."""

    DEFAULT_SCHEDULE = [0.5, 1.0, 2.0]

    # Status codes that should NOT trigger retries
    NO_RETRY_CODES = {400, 401, 403, 404, 405, 422, 429}

    # Replaying these cannot create a second payment or refund
    IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "PUT", "DELETE"})

    def __init__(self, schedule: list[float] | None = None, max_retries: int | None = None):
        self.schedule = schedule or self.DEFAULT_SCHEDULE
        self.max_retries = max_retries if max_retries is not None else len(self.schedule)

    def should_retry(self, status_code: int | None) -> bool:
        """Determine if a call should be retried based on status code.

        Returns True for:
        - None (connection error / timeout)
        - 5xx server errors
        Returns False for everything else.
        """
        if status_code is None:
            return True
        if status_code in self.NO_RETRY_CODES:
            return False
        return status_code >= 500

    def is_retryable_method(self, method: str) -> bool:
        return method.upper() in self.IDEMPOTENT_METHODS

    def next_delay(self, attempt: int) -> float:
        """Get the delay in seconds before the next retry attempt (0-indexed)."""
        if attempt >= len(self.schedule):
            return float(self.schedule[-1])
        return float(self.schedule[attempt])

    def has_attempts_remaining(self, attempt: int) -> bool:
        return attempt < self.max_retries


def should_retry_webhook(status_code: int, retry_count: int, max_retries: int = 5) -> bool:
    """Whether a webhook delivery answered with ``status_code`` is worth redelivering.

    ``status_code`` 0 stands for a network failure. Among client errors only
    408 and 429 are retried.
    """
    if retry_count >= max_retries:
        return False
    if 400 <= status_code < 500:
        return status_code in (408, 429)
    return status_code >= 500 or status_code == 0
