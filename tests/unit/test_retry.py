import pytest

from moyasar.transport.retry import RetryManager, should_retry_webhook


class TestShouldRetry:
    """Tests for RetryManager.should_retry()."""

    @pytest.mark.unit
    @pytest.mark.parametrize("status_code", [500, 502, 503])
    def test_should_retry_true_for_5xx(self, retry_manager, status_code):
        assert retry_manager.should_retry(status_code) is True

    @pytest.mark.unit
    def test_should_retry_true_for_none_connection_error(self, retry_manager):
        assert retry_manager.should_retry(None) is True

    @pytest.mark.unit
    @pytest.mark.parametrize("status_code", [200, 201, 204])
    def test_should_retry_false_for_2xx(self, retry_manager, status_code):
        assert retry_manager.should_retry(status_code) is False

    @pytest.mark.unit
    @pytest.mark.parametrize("status_code", [400, 401, 403, 404, 405, 422])
    def test_should_retry_false_for_4xx_no_retry_codes(self, retry_manager, status_code):
        assert retry_manager.should_retry(status_code) is False

    @pytest.mark.unit
    def test_should_retry_false_for_429(self, retry_manager):
        """Rate limiting is surfaced to the caller rather than hammered."""
        assert retry_manager.should_retry(429) is False


class TestRetryableMethods:
    """Only methods that cannot double-charge are replayed."""

    @pytest.mark.unit
    @pytest.mark.parametrize("method", ["GET", "get", "PUT", "DELETE", "HEAD"])
    def test_idempotent_methods(self, retry_manager, method):
        assert retry_manager.is_retryable_method(method) is True

    @pytest.mark.unit
    @pytest.mark.parametrize("method", ["POST", "PATCH"])
    def test_non_idempotent_methods(self, retry_manager, method):
        assert retry_manager.is_retryable_method(method) is False


class TestNextDelay:
    """Tests for RetryManager.next_delay()."""

    @pytest.mark.unit
    def test_next_delay_returns_correct_default_schedule_values(self, retry_manager):
        expected = [0.5, 1.0, 2.0]
        for attempt, expected_delay in enumerate(expected):
            assert retry_manager.next_delay(attempt) == expected_delay

    @pytest.mark.unit
    def test_next_delay_returns_last_value_when_attempt_exceeds_schedule(self, retry_manager):
        last_value = float(RetryManager.DEFAULT_SCHEDULE[-1])
        assert retry_manager.next_delay(10) == last_value

    @pytest.mark.unit
    def test_next_delay_with_custom_schedule(self):
        rm = RetryManager(schedule=[1, 2, 3])
        assert rm.next_delay(0) == 1.0
        assert rm.next_delay(2) == 3.0
        assert rm.next_delay(5) == 3.0  # clamps to last


class TestHasAttemptsRemaining:
    """Tests for RetryManager.has_attempts_remaining()."""

    @pytest.mark.unit
    def test_default_max_retries_follows_schedule(self, retry_manager):
        max_retries = len(RetryManager.DEFAULT_SCHEDULE)
        assert retry_manager.has_attempts_remaining(max_retries - 1) is True
        assert retry_manager.has_attempts_remaining(max_retries) is False

    @pytest.mark.unit
    def test_custom_max_retries_overrides_default(self):
        rm = RetryManager(max_retries=2)
        assert rm.has_attempts_remaining(1) is True
        assert rm.has_attempts_remaining(2) is False

    @pytest.mark.unit
    def test_max_retries_zero_means_no_retries(self):
        rm = RetryManager(max_retries=0)
        assert rm.has_attempts_remaining(0) is False


class TestWebhookRedelivery:
    """Tests for should_retry_webhook()."""

    @pytest.mark.unit
    @pytest.mark.parametrize("status_code", [0, 500, 502, 503, 408, 429])
    def test_retryable_outcomes(self, status_code):
        assert should_retry_webhook(status_code, retry_count=0) is True

    @pytest.mark.unit
    @pytest.mark.parametrize("status_code", [200, 400, 401, 404, 422])
    def test_final_outcomes(self, status_code):
        assert should_retry_webhook(status_code, retry_count=0) is False

    @pytest.mark.unit
    def test_stops_after_max_retries(self):
        assert should_retry_webhook(500, retry_count=4) is True
        assert should_retry_webhook(500, retry_count=5) is False
        assert should_retry_webhook(500, retry_count=1, max_retries=1) is False
