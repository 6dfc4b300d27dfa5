"""Application configuration module."""
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralised provider settings sourced from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    environment: str = "development"

    # State storage
    database_url: str = "sqlite:///data/external_provider.db"

    # Exchange execution (zero or negative disables the deadline)
    exchange_timeout_seconds: float = 1200.0

    # Logging
    log_level: str = "INFO"

    # Long-running deadline test switch, any non-empty value enables it
    timeout_test: str = Field(
        default="",
        validation_alias=AliasChoices("TF_ACC_EXTERNAL_TIMEOUT_TEST", "timeout_test"),
    )

    @property
    def timeout_test_enabled(self) -> bool:
        return bool(self.timeout_test)

    @property
    def exchange_timeout(self) -> float | None:
        """Return the exchange deadline in seconds, ``None`` when unlimited."""

        if self.exchange_timeout_seconds <= 0:
            return None
        return self.exchange_timeout_seconds


settings = Settings()
