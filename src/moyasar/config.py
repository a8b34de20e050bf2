"""Client settings, read from ``MOYASAR_*`` environment variables or a ``.env`` file."""

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from moyasar.transport.http import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS
from moyasar.transport.retry import RetryManager


class MoyasarSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MOYASAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: SecretStr | None = None
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    max_retries: int = Field(default=2, ge=0)
    # Seconds to wait before each retry of an idempotent call
    retry_schedule: list[float] = Field(default_factory=lambda: list(RetryManager.DEFAULT_SCHEDULE))
    # Shared secret the gateway echoes in every webhook's secret_token
    webhook_secret: SecretStr | None = None

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("retry_schedule")
    @classmethod
    def _non_empty_schedule(cls, value: list[float]) -> list[float]:
        if not value:
            raise ValueError("retry_schedule needs at least one delay")
        return value

    def retry_manager(self) -> RetryManager:
        return RetryManager(schedule=self.retry_schedule, max_retries=self.max_retries)
